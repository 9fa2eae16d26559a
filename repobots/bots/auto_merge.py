"""
Auto-merge bot.

Walks the open issue listing page by page and squash-merges pull requests
opened by allow-listed bot accounts once every latest status check passed.
Pull requests are handled one at a time, in listing order.
"""

from collections.abc import Callable, Collection, Iterable
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from functools import partial
from typing import Any

import httpx

from repobots.bots.base import is_dry_run, load_config, normalize_payload
from repobots.client import GitHubClient
from repobots.config import BotConfig
from repobots.exceptions import AssertionViolation
from repobots.logging import get_logger
from repobots.pipeline import gather_bounded
from repobots.statuses import checks_passed
from repobots.types.issues import Issue
from repobots.types.pulls import Commit, PullRequest, StatusCheck

logger = get_logger("bots.auto_merge")

MERGED = "merged"
WOULD_MERGE = "would_merge"
NOT_MERGED = "not_merged"
SKIPPED = "skipped"


@dataclass
class MergeOutcome:
    """What happened to one candidate pull request."""

    number: int
    url: str
    action: str
    reason: str | None = None
    branch_deleted: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "number": self.number,
            "url": self.url,
            "action": self.action,
            "reason": self.reason,
            "branchDeleted": self.branch_deleted,
        }


def is_candidate(
    issue: Issue, logins: Collection[str], now: datetime, min_age: timedelta
) -> bool:
    """
    A pull request by an allow-listed login that has not changed for ``min_age``.

    The age check keeps the bot from racing checks that are still running.
    """
    if not issue.is_pull_request:
        return False
    if issue.user_login not in logins:
        return False
    return issue.updated_at < now - min_age


def is_merge_eligible(
    pr: PullRequest, statuses: Iterable[StatusCheck], commits: list[Commit]
) -> bool:
    """Mergeable, every latest check successful, and exactly one commit."""
    return pr.mergeable is True and checks_passed(statuses) and len(commits) == 1


def squash_commit(message: str, number: int) -> tuple[str, str]:
    """
    Build the squash commit title and message from a commit message.

    The first paragraph becomes the title, suffixed with ``(#number)``; the
    remaining paragraphs become the message.
    """
    paragraphs = message.split("\n\n")
    return f"{paragraphs[0]} (#{number})", "\n\n".join(paragraphs[1:])


class AutoMergeBot:
    """Merge eligibility engine."""

    def __init__(
        self,
        client: GitHubClient,
        logins: Iterable[str],
        min_age: timedelta = timedelta(hours=1),
        dry_run: bool = False,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self.client = client
        self.logins = frozenset(logins)
        self.min_age = min_age
        self.dry_run = dry_run
        self.clock = clock or (lambda: datetime.now(timezone.utc))

    async def run(self) -> list[MergeOutcome]:
        """Process every page of open issues, finishing each page before the next."""
        outcomes: list[MergeOutcome] = []
        async for page in self.client.issues.iter_pages(filter="all", state="open"):
            now = self.clock()
            candidates = [
                issue for issue in page
                if is_candidate(issue, self.logins, now, self.min_age)
            ]
            outcomes.extend(
                await gather_bounded(
                    [partial(self.process, issue) for issue in candidates], limit=1
                )
            )
        return outcomes

    async def process(self, issue: Issue) -> MergeOutcome:
        """Fetch, decide and merge a single candidate."""
        pr = await self.client.pulls.get(issue.pull_request_url)
        if not pr.mergeable:
            return self._skip(pr, "not mergeable")

        statuses = await self.client.pulls.list_statuses(pr)
        if not checks_passed(statuses):
            logger.info("not merging: %s %s", pr.title, pr.html_url)
            return self._skip(pr, "checks not successful")

        commits = await self.client.pulls.list_commits(pr)
        if len(commits) != 1:
            logger.info("not merging: %s %s (%d commits)", pr.title, pr.html_url, len(commits))
            return self._skip(pr, f"expected exactly one commit, found {len(commits)}")

        logger.info("merging: %s %s", pr.title, pr.html_url)

        if self.dry_run:
            return MergeOutcome(pr.number, pr.html_url, WOULD_MERGE)

        return await self._merge(pr, commits[0])

    async def _merge(self, pr: PullRequest, commit: Commit) -> MergeOutcome:
        if pr.base.repo is None:
            raise AssertionViolation(f"Expected {pr.html_url} to have a base repository")

        title, message = squash_commit(commit.message, pr.number)
        result = await self.client.pulls.merge(
            owner=pr.base.repo.owner_login,
            repo=pr.base.repo.name,
            number=pr.number,
            sha=pr.head.sha,
            commit_title=title,
            commit_message=message,
        )
        if not result.merged:
            logger.warning("merge of %s was refused: %s", pr.html_url, result.message)
            return MergeOutcome(pr.number, pr.html_url, NOT_MERGED, result.message or None)

        logger.info("merged %s", pr.html_url)
        outcome = MergeOutcome(pr.number, pr.html_url, MERGED)
        if not pr.is_fork:
            await self.client.git.delete_ref(
                pr.head.repo.owner_login, pr.head.repo.name, f"heads/{pr.head.ref}"
            )
            logger.info("deleted branch %s", pr.head.ref)
            outcome.branch_deleted = True
        return outcome

    def _skip(self, pr: PullRequest, reason: str) -> MergeOutcome:
        logger.debug("skipping %s: %s", pr.html_url, reason)
        return MergeOutcome(pr.number, pr.html_url, SKIPPED, reason)


async def run(
    payload: dict[str, Any],
    config: BotConfig,
    transport: httpx.AsyncBaseTransport | None = None,
) -> list[dict[str, Any]]:
    """Run the bot with an explicit configuration."""
    async with GitHubClient.from_config(config, transport) as client:
        bot = AutoMergeBot(
            client,
            config.merge_logins,
            min_age=timedelta(minutes=config.min_age_minutes),
            dry_run=is_dry_run(payload),
        )
        outcomes = await bot.run()
    return [outcome.to_dict() for outcome in outcomes]


async def handler(payload: Any = None) -> list[dict[str, Any]]:
    """Entry point: configuration comes from the environment."""
    return await run(normalize_payload(payload), load_config())
