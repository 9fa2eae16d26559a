"""
Node release bot.

Keeps a fleet of repositories pinned to the latest node.js release of the
track they are on. For each repository it checks whether an update is
needed, patches the manifest and CI configs, and opens a pull request from
a ``<prefix>-<version>`` branch. Repositories are handled concurrently.
"""

import asyncio
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any

import httpx
from packaging.version import Version

from repobots.bots.base import is_dry_run, load_config, normalize_payload
from repobots.client import GitHubClient
from repobots.config import BotConfig, TargetRepo
from repobots.logging import get_logger
from repobots.patching import (
    CIRCLE_YML,
    CIRCLECI_CONFIG,
    PACKAGE_JSON,
    TRAVIS_YML,
    generate_updates,
    read_pinned_version,
)
from repobots.pipeline import PlannedCall, SequentialPipeline, settle_all
from repobots.types.repos import FileContent, FileUpdate
from repobots.versions import ResolvedVersions, VersionFeeds, decide_mode

logger = get_logger("bots.node_release")

RELEASE_NOTES_URL = "https://nodejs.org/en/blog/release/v{version}/"

PULL_REQUEST_BODY = (
    "This is an automated pull request to update the version of node.js. You can "
    "find release notes for what changed in this release at {release_notes}"
    "\n\n"
    "If integration tests pass, this pull request can be safely merged."
)


@dataclass
class UpdateCheck:
    """Outcome of deciding whether a repository needs an update."""

    needed: bool
    reason: str
    mode: str | None = None
    version: str | None = None
    branch: str | None = None
    files: dict[str, FileContent] = field(default_factory=dict)


class NodeReleaseBot:
    """Update workflow across target repositories."""

    def __init__(
        self,
        client: GitHubClient,
        versions: ResolvedVersions,
        branch_prefix: str = "node",
    ) -> None:
        self.client = client
        self.versions = versions
        self.branch_prefix = branch_prefix

    def branch_name(self, version: str) -> str:
        return f"{self.branch_prefix}-{version}"

    async def needs_update(self, target: TargetRepo) -> UpdateCheck:
        """
        Decide whether ``target`` needs an update pull request.

        Not needed when the pinned version is already at (or past) the target
        of its track, or when the update branch already exists. Only a 404
        on the branch lookup means the update is needed; other failures
        propagate.
        """
        owner, repo = target.owner, target.repo
        manifest, circleci = await asyncio.gather(
            self.client.repos.get_content(owner, repo, PACKAGE_JSON),
            self.client.repos.try_get_content(owner, repo, CIRCLECI_CONFIG),
        )
        pinned = read_pinned_version(manifest)
        mode = decide_mode(pinned, self.versions, uses_ci_images=circleci.exists)
        version = self.versions.target(mode)

        if Version(pinned) >= Version(version):
            return UpdateCheck(False, f"already on {pinned}", mode, version)

        branch = self.branch_name(version)
        if await self.client.repos.branch_exists(owner, repo, branch):
            return UpdateCheck(False, f"branch {branch} exists", mode, version, branch)

        files = {
            PACKAGE_JSON: FileContent(path=PACKAGE_JSON, exists=True, content=manifest),
            CIRCLECI_CONFIG: circleci,
        }
        return UpdateCheck(True, f"{pinned} -> {version}", mode, version, branch, files)

    async def plan(self, target: TargetRepo, check: UpdateCheck) -> SequentialPipeline:
        """Build the branch, commit and pull request calls for a needed update."""
        owner, repo = target.owner, target.repo
        version, branch = check.version, check.branch

        travis, circle = await asyncio.gather(
            self.client.repos.try_get_content(owner, repo, TRAVIS_YML),
            self.client.repos.try_get_content(owner, repo, CIRCLE_YML),
        )
        updates = generate_updates(
            {**check.files, TRAVIS_YML: travis, CIRCLE_YML: circle}, version
        )

        base = target.base_branch
        if base is None:
            base = (await self.client.repos.get(owner, repo)).default_branch

        title = f"Update to node v{version}"
        body = PULL_REQUEST_BODY.format(
            release_notes=RELEASE_NOTES_URL.format(version=version)
        )
        return SequentialPipeline([
            PlannedCall("branch", {
                "owner": owner, "repo": repo, "from_branch": base, "to_branch": branch,
            }),
            PlannedCall("commit", {
                "owner": owner,
                "repo": repo,
                "branch": branch,
                "message": title,
                "updates": [update.to_dict() for update in updates],
            }),
            PlannedCall("pull", {
                "owner": owner,
                "repo": repo,
                "head": f"{owner}:{branch}",
                "base": base,
                "title": title,
                "body": body,
            }),
        ])

    async def update_repo(
        self, target: TargetRepo, dry_run: bool = False
    ) -> list[dict[str, Any]]:
        """
        Run the workflow for one repository.

        Returns:
            The call plan (empty when no update is needed). With ``dry_run``
            the plan is returned without executing it.
        """
        check = await self.needs_update(target)
        if not check.needed:
            logger.info("%s is up to date: %s", target.full_name, check.reason)
            return []

        logger.info("Updating %s (%s)", target.full_name, check.reason)
        pipeline = await self.plan(target, check)
        if not dry_run:
            await pipeline.run(self.executors())
            logger.info("Opened pull request for %s on %s", target.full_name, check.branch)
        return pipeline.to_list()

    async def run(
        self, targets: Iterable[TargetRepo], dry_run: bool = False
    ) -> list[list[dict[str, Any]]]:
        """
        Update every target concurrently.

        All repositories run to completion; if any failed, each failure is
        logged and the first one is raised. Mutations already made for other
        repositories are kept.
        """
        targets = list(targets)
        results = await settle_all(self.update_repo(target, dry_run) for target in targets)

        failures = [
            (target, result)
            for target, result in zip(targets, results)
            if isinstance(result, BaseException)
        ]
        for target, error in failures:
            logger.error("Updating %s failed: %s", target.full_name, error)
        if failures:
            raise failures[0][1]
        return results

    def executors(self) -> dict[str, Any]:
        return {
            "branch": self.client.git.create_branch,
            "commit": self._commit,
            "pull": self.client.pulls.create,
        }

    async def _commit(
        self,
        owner: str,
        repo: str,
        branch: str,
        message: str,
        updates: list[dict[str, str]],
    ) -> str:
        return await self.client.git.commit_files(
            owner, repo, branch, message, [FileUpdate(**update) for update in updates]
        )


async def run(
    payload: dict[str, Any],
    config: BotConfig,
    transport: httpx.AsyncBaseTransport | None = None,
    feeds: VersionFeeds | None = None,
) -> list[list[dict[str, Any]]]:
    """Run the bot with an explicit configuration."""
    async with GitHubClient.from_config(config, transport) as client:
        async with feeds or VersionFeeds(timeout=config.timeout) as version_feeds:
            versions = await version_feeds.resolve()
        bot = NodeReleaseBot(client, versions, branch_prefix=config.branch_prefix)
        return await bot.run(config.target_repos, dry_run=is_dry_run(payload))


async def handler(payload: Any = None) -> list[list[dict[str, Any]]]:
    """Entry point: configuration comes from the environment."""
    return await run(normalize_payload(payload), load_config())
