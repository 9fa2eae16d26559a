"""
Version-pin patches for a repository's manifest and CI configuration.

Each known file format gets anchored substitutions for its node version
syntax. A substitution that leaves a file untouched means the file is not in
the format we assumed, which is an error rather than something to skip.
"""

import json
import re
from dataclasses import dataclass

from repobots.exceptions import AssertionViolation
from repobots.types.repos import FileContent, FileUpdate
from repobots.versions import is_strict_version

PACKAGE_JSON = "package.json"
TRAVIS_YML = ".travis.yml"
CIRCLE_YML = "circle.yml"
CIRCLECI_CONFIG = ".circleci/config.yml"

# Optional CI configs, in the order they are committed
CI_CONFIG_FILES = (TRAVIS_YML, CIRCLE_YML, CIRCLECI_CONFIG)


@dataclass(frozen=True)
class Substitution:
    """Replace every match of ``pattern`` with ``template`` filled with the version."""

    pattern: re.Pattern[str]
    template: str

    def apply(self, content: str, version: str) -> str:
        replacement = self.template.format(version=version)
        return self.pattern.sub(lambda _: replacement, content)


_SUBSTITUTIONS: dict[str, tuple[Substitution, ...]] = {
    PACKAGE_JSON: (
        Substitution(re.compile(r'"node"\s*:\s*"\d+\.\d+\.\d+"'), '"node": "{version}"'),
    ),
    TRAVIS_YML: (
        Substitution(re.compile(r'node_js:\n  - "\d+\.\d+\.\d+"'), 'node_js:\n  - "{version}"'),
        Substitution(re.compile(r"node_js: \d+\.\d+\.\d+"), "node_js: {version}"),
    ),
    CIRCLE_YML: (
        Substitution(re.compile(r"node:\n    version: \d+\.\d+\.\d+"), "node:\n    version: {version}"),
    ),
    CIRCLECI_CONFIG: (
        Substitution(re.compile(r"node:\d+\.\d+\.\d+"), "node:{version}"),
    ),
}


def read_pinned_version(manifest: str) -> str:
    """
    Read ``engines.node`` from a package manifest.

    Raises:
        AssertionViolation: If the manifest is not JSON or does not pin an
            exact ``MAJOR.MINOR.PATCH`` node version
    """
    try:
        data = json.loads(manifest)
    except ValueError as e:
        raise AssertionViolation(f"Expected {PACKAGE_JSON} to be valid JSON") from e

    engines = data.get("engines") if isinstance(data, dict) else None
    pinned = engines.get("node") if isinstance(engines, dict) else None
    if not is_strict_version(pinned):
        raise AssertionViolation(
            f"Expected {PACKAGE_JSON} to pin engines.node to an exact version, got {pinned!r}"
        )
    return pinned


def patch_file(path: str, content: str, version: str) -> FileUpdate:
    """
    Rewrite the node version pinned by one file.

    Args:
        path: One of the known file paths
        content: Current file content
        version: Target version

    Returns:
        FileUpdate with the new content

    Raises:
        AssertionViolation: If any of the file's substitutions leaves the
            content unchanged
    """
    if path not in _SUBSTITUTIONS:
        raise ValueError(f"No known node version syntax for {path}")

    new_content = content
    for substitution in _SUBSTITUTIONS[path]:
        edited = substitution.apply(new_content, version)
        if edited == new_content:
            raise AssertionViolation(f"Expected {path} to be edited")
        new_content = edited

    if path == PACKAGE_JSON and read_pinned_version(new_content) != version:
        raise AssertionViolation(f"Expected {PACKAGE_JSON} to be updated to {version}")

    return FileUpdate(path=path, content=new_content)


def generate_updates(files: dict[str, FileContent], version: str) -> list[FileUpdate]:
    """
    Build the file updates that move a repository to ``version``.

    The package manifest is mandatory; each CI config is patched only if it
    exists.

    Args:
        files: Fetched files keyed by path
        version: Target version

    Returns:
        Updates in commit order: the manifest first, then CI configs
    """
    manifest = files.get(PACKAGE_JSON)
    if manifest is None or not manifest.exists or manifest.content is None:
        raise AssertionViolation(f"Expected {PACKAGE_JSON} to exist")

    updates = [patch_file(PACKAGE_JSON, manifest.content, version)]
    for path in CI_CONFIG_FILES:
        config = files.get(path)
        if config is not None and config.exists and config.content is not None:
            updates.append(patch_file(path, config.content, version))
    return updates
