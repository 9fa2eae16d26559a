"""
Tests for manifest and CI config version patches.
"""

import json

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from repobots.exceptions import AssertionViolation
from repobots.patching import (
    CIRCLE_YML,
    CIRCLECI_CONFIG,
    PACKAGE_JSON,
    TRAVIS_YML,
    generate_updates,
    patch_file,
    read_pinned_version,
)
from repobots.types.repos import FileContent

MANIFEST = '{\n  "name": "app",\n  "engines": {\n    "node": "14.2.0"\n  }\n}\n'
TRAVIS = 'language: node_js\nnode_js:\n  - "14.2.0"\nmatrix:\n  include:\n    - node_js: 14.2.0\n'
CIRCLE = "machine:\n  node:\n    version: 14.2.0\n"
CIRCLECI = "version: 2\njobs:\n  build:\n    docker:\n      - image: circleci/node:14.2.0\n"

version_strategy = st.tuples(
    st.integers(min_value=0, max_value=99),
    st.integers(min_value=0, max_value=99),
    st.integers(min_value=0, max_value=99),
).map(lambda parts: ".".join(str(p) for p in parts))


def present(path: str, content: str) -> FileContent:
    return FileContent(path=path, exists=True, content=content)


def absent(path: str) -> FileContent:
    return FileContent(path=path, exists=False)


def test_end_to_end_manifest_example() -> None:
    """engines.node 14.2.0 moves to 16.0.0."""
    update = patch_file(PACKAGE_JSON, '{"engines":{"node":"14.2.0"}}', "16.0.0")

    assert update.path == PACKAGE_JSON
    assert '"node": "16.0.0"' in update.content
    assert json.loads(update.content)["engines"]["node"] == "16.0.0"


def test_patch_travis_both_syntaxes() -> None:
    update = patch_file(TRAVIS_YML, TRAVIS, "16.0.0")

    assert update.content == (
        'language: node_js\nnode_js:\n  - "16.0.0"\nmatrix:\n  include:\n    - node_js: 16.0.0\n'
    )


@pytest.mark.parametrize(
    "content",
    [
        'language: node_js\nnode_js:\n  - "14.2.0"\n',
        "language: node_js\nnode_js: 14.2.0\n",
    ],
)
def test_travis_with_one_syntax_is_fatal(content: str) -> None:
    """Each travis substitution must edit the file, not just the pair together."""
    with pytest.raises(AssertionViolation, match=".travis.yml to be edited"):
        patch_file(TRAVIS_YML, content, "16.0.0")


def test_patch_circle_yml() -> None:
    update = patch_file(CIRCLE_YML, CIRCLE, "16.0.0")

    assert update.content == "machine:\n  node:\n    version: 16.0.0\n"


def test_patch_circleci_config() -> None:
    update = patch_file(CIRCLECI_CONFIG, CIRCLECI, "16.0.0")

    assert "circleci/node:16.0.0" in update.content
    assert "14.2.0" not in update.content


@pytest.mark.parametrize(
    "path, content",
    [
        (PACKAGE_JSON, '{"engines": {"node": ">=14"}}'),
        (TRAVIS_YML, "language: node_js\nnode_js:\n  - node\n"),
        (CIRCLE_YML, "machine:\n  python:\n    version: 3.8.0\n"),
        (CIRCLECI_CONFIG, "jobs:\n  build:\n    docker:\n      - image: cimg/python:3.9\n"),
    ],
)
def test_unmatched_format_is_fatal(path: str, content: str) -> None:
    """A rewrite that changes nothing means the format assumption was wrong."""
    with pytest.raises(AssertionViolation, match="to be edited"):
        patch_file(path, content, "16.0.0")


def test_rewrite_to_same_version_is_fatal() -> None:
    with pytest.raises(AssertionViolation):
        patch_file(PACKAGE_JSON, MANIFEST, "14.2.0")


def test_unknown_file() -> None:
    with pytest.raises(ValueError):
        patch_file("Dockerfile", "FROM node:14.2.0", "16.0.0")


def test_generate_updates_orders_and_skips_missing_files() -> None:
    files = {
        PACKAGE_JSON: present(PACKAGE_JSON, MANIFEST),
        TRAVIS_YML: absent(TRAVIS_YML),
        CIRCLE_YML: present(CIRCLE_YML, CIRCLE),
        CIRCLECI_CONFIG: present(CIRCLECI_CONFIG, CIRCLECI),
    }

    updates = generate_updates(files, "16.0.0")

    assert [update.path for update in updates] == [PACKAGE_JSON, CIRCLE_YML, CIRCLECI_CONFIG]


def test_generate_updates_requires_manifest() -> None:
    with pytest.raises(AssertionViolation, match="package.json"):
        generate_updates({PACKAGE_JSON: absent(PACKAGE_JSON)}, "16.0.0")


def test_generate_updates_fails_on_unpatchable_ci_config() -> None:
    """An existing CI config that cannot be patched fails the whole update."""
    files = {
        PACKAGE_JSON: present(PACKAGE_JSON, MANIFEST),
        TRAVIS_YML: present(TRAVIS_YML, "language: ruby\n"),
    }

    with pytest.raises(AssertionViolation, match=".travis.yml"):
        generate_updates(files, "16.0.0")


def test_read_pinned_version() -> None:
    assert read_pinned_version(MANIFEST) == "14.2.0"


@pytest.mark.parametrize(
    "manifest",
    [
        "not json",
        "[]",
        '{"name": "app"}',
        '{"engines": {"npm": "6.0.0"}}',
        '{"engines": {"node": "^14.2.0"}}',
        '{"engines": {"node": 14}}',
    ],
)
def test_read_pinned_version_rejects(manifest: str) -> None:
    with pytest.raises(AssertionViolation):
        read_pinned_version(manifest)


@given(old=version_strategy, new=version_strategy)
@settings(max_examples=200)
def test_property_patch_always_changes_content(old: str, new: str) -> None:
    """For any old != new the patched manifest differs and pins the new version."""
    if old == new:
        return
    manifest = json.dumps({"name": "app", "engines": {"node": old}}, indent=2)

    update = patch_file(PACKAGE_JSON, manifest, new)

    assert update.content != manifest
    assert read_pinned_version(update.content) == new
