"""
Runtime version resolution.

Reads the node.js release index and the CircleCI node image tags, and works
out which release each version track (stable, LTS, and their
CircleCI-published variants) currently points at.
"""

import asyncio
import re
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any

import httpx
from packaging.version import Version

from repobots.exceptions import AssertionViolation, FeedError
from repobots.logging import get_logger

RELEASE_INDEX_URL = "https://nodejs.org/download/release/index.json"
CI_TAGS_URL = "https://hub.docker.com/v2/repositories/circleci/node/tags?page_size=100"

STABLE = "stable"
LTS = "lts"
STABLE_CIRCLE = "stable_circle"
LTS_CIRCLE = "lts_circle"
MODES = (STABLE, LTS, STABLE_CIRCLE, LTS_CIRCLE)

_RELEASE_TAG = re.compile(r"^v\d+\.\d+\.\d+$")
_VERSION = re.compile(r"^\d+\.\d+\.\d+$")

logger = get_logger("versions")


def is_strict_version(value: Any) -> bool:
    """True for a bare ``MAJOR.MINOR.PATCH`` string."""
    return isinstance(value, str) and bool(_VERSION.match(value))


def max_version(versions: Iterable[str]) -> str | None:
    """Highest version by semantic-version ordering, or None if there are none."""
    candidates = list(versions)
    if not candidates:
        return None
    return max(candidates, key=Version)


@dataclass(frozen=True)
class ResolvedVersions:
    """Latest release per track, plus the LTS flag of every known release."""

    stable: str | None
    lts: str | None
    stable_circle: str | None
    lts_circle: str | None
    is_lts: dict[str, bool] = field(default_factory=dict)

    def target(self, mode: str) -> str:
        """
        Version a repository on ``mode`` should be pinned to.

        Raises:
            AssertionViolation: If the feeds had no release for that track
        """
        if mode not in MODES:
            raise ValueError(f"Unknown mode: {mode}")
        version = getattr(self, mode)
        if version is None:
            raise AssertionViolation(f"No release available for mode {mode}")
        return version

    def to_dict(self) -> dict[str, Any]:
        return {
            STABLE: self.stable,
            LTS: self.lts,
            STABLE_CIRCLE: self.stable_circle,
            LTS_CIRCLE: self.lts_circle,
            "isLTS": dict(self.is_lts),
        }


def resolve_versions(
    releases: list[dict[str, Any]], ci_tags: list[dict[str, Any]]
) -> ResolvedVersions:
    """
    Compute the latest version of every track from raw feed entries.

    Args:
        releases: Release index entries (``version`` like ``v16.0.0``, ``lts``
            false or a codename)
        ci_tags: CI image tags (``name`` is the bare version, e.g. ``16.0.0``)

    Returns:
        ResolvedVersions
    """
    strict = [
        release for release in releases
        if isinstance(release.get("version"), str) and _RELEASE_TAG.match(release["version"])
    ]
    tag_names = {tag.get("name") for tag in ci_tags}

    all_versions = [release["version"][1:] for release in strict]
    lts_versions = [release["version"][1:] for release in strict if release.get("lts")]

    return ResolvedVersions(
        stable=max_version(all_versions),
        lts=max_version(lts_versions),
        stable_circle=max_version(v for v in all_versions if v in tag_names),
        lts_circle=max_version(v for v in lts_versions if v in tag_names),
        is_lts={release["version"][1:]: bool(release.get("lts")) for release in strict},
    )


def decide_mode(
    current_version: str, resolved: ResolvedVersions, uses_ci_images: bool
) -> str:
    """
    Pick the track for a repository, staying on the one it is already on.

    Args:
        current_version: Version currently pinned by the repository
        resolved: Resolved feed versions
        uses_ci_images: Whether the repository runs on CircleCI node images

    Returns:
        One of "lts", "stable", "lts_circle", "stable_circle"
    """
    mode = LTS if resolved.is_lts.get(current_version, False) else STABLE
    return f"{mode}_circle" if uses_ci_images else mode


class VersionFeeds:
    """Fetches the release index and CI tag feeds."""

    def __init__(
        self,
        release_index_url: str = RELEASE_INDEX_URL,
        ci_tags_url: str = CI_TAGS_URL,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.release_index_url = release_index_url
        self.ci_tags_url = ci_tags_url
        self._client = httpx.AsyncClient(
            timeout=timeout, follow_redirects=True, transport=transport
        )

    async def close(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> "VersionFeeds":
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.close()

    async def fetch_releases(self) -> list[dict[str, Any]]:
        data = await self._get_json(self.release_index_url)
        if not isinstance(data, list):
            raise FeedError(self.release_index_url, "Expected a list of releases")
        return data

    async def fetch_ci_tags(self) -> list[dict[str, Any]]:
        """
        Fetch every CI image tag.

        Accepts a plain list of tags, or paginated pages of the form
        ``{"results": [...], "next": url}`` which are followed to the end.
        """
        tags: list[dict[str, Any]] = []
        url: str | None = self.ci_tags_url
        while url:
            data = await self._get_json(url)
            if isinstance(data, list):
                tags.extend(data)
                break
            if not isinstance(data, dict) or not isinstance(data.get("results"), list):
                raise FeedError(url, "Expected a list of tags")
            tags.extend(data["results"])
            url = data.get("next")
        return tags

    async def resolve(self) -> ResolvedVersions:
        """Fetch both feeds concurrently and resolve the latest versions."""
        releases, ci_tags = await asyncio.gather(
            self.fetch_releases(), self.fetch_ci_tags()
        )
        resolved = resolve_versions(releases, ci_tags)
        logger.info(
            "Resolved node versions: stable=%s lts=%s stable_circle=%s lts_circle=%s",
            resolved.stable,
            resolved.lts,
            resolved.stable_circle,
            resolved.lts_circle,
        )
        return resolved

    async def _get_json(self, url: str) -> Any:
        try:
            response = await self._client.get(url)
        except httpx.RequestError as e:
            raise FeedError(url, str(e) or type(e).__name__) from e
        if response.status_code >= 400:
            raise FeedError(url, f"HTTP {response.status_code}", response.status_code)
        try:
            return response.json()
        except ValueError as e:
            raise FeedError(url, "Malformed JSON") from e
