"""Async pull requests resource client."""

from typing import TYPE_CHECKING, Any

from repobots.clients._parse import parse_branch_ref, parse_timestamp
from repobots.exceptions import AssertionViolation
from repobots.types.pulls import (
    Commit,
    CreatedPullRequest,
    MergeResult,
    PullRequest,
    StatusCheck,
)

if TYPE_CHECKING:
    from repobots.transport import AsyncHTTPTransport


class PullsClient:
    """Async client for pull request operations."""

    def __init__(
        self,
        transport: "AsyncHTTPTransport",
        merge_accept: str | None = None,
    ) -> None:
        """
        Initialize the pulls client.

        Args:
            transport: Async HTTP transport for making requests
            merge_accept: Preview media type sent with merge requests
        """
        self.transport = transport
        self.merge_accept = merge_accept

    async def get(self, url: str) -> PullRequest:
        """
        Get pull request information.

        Args:
            url: API URL of the pull request (an issue's ``pull_request.url``)

        Returns:
            PullRequest with full details
        """
        data = await self.transport.get(url)
        return self._parse_pull_request(data)

    async def list_commits(self, pr: PullRequest) -> list[Commit]:
        """List the commits of a pull request."""
        items = await self.transport.collect(pr.commits_url)
        return [
            Commit(sha=item["sha"], message=item["commit"]["message"])
            for item in items
        ]

    async def list_statuses(self, pr: PullRequest) -> list[StatusCheck]:
        """List every status entry reported for the pull request's head commit."""
        items = await self.transport.collect(pr.statuses_url)
        return [
            StatusCheck(
                context=item["context"],
                state=item["state"],
                created_at=parse_timestamp(item["created_at"]),
            )
            for item in items
        ]

    async def merge(
        self,
        owner: str,
        repo: str,
        number: int,
        sha: str,
        commit_title: str,
        commit_message: str,
        merge_method: str = "squash",
    ) -> MergeResult:
        """
        Merge a pull request.

        Args:
            owner: Base repository owner
            repo: Base repository name
            number: Pull request number
            sha: Head sha that must still match for the merge to happen
            commit_title: Title of the merge commit
            commit_message: Body of the merge commit
            merge_method: "merge", "squash", or "rebase" (default: "squash")

        Returns:
            MergeResult with the merged flag and merge sha
        """
        data = await self.transport.put(
            "/repos/:owner/:repo/pulls/:number/merge",
            {
                "owner": owner,
                "repo": repo,
                "number": number,
                "commit_title": commit_title,
                "commit_message": commit_message,
                "sha": sha,
                "merge_method": merge_method,
            },
            accept=self.merge_accept,
        )
        data = data or {}
        return MergeResult(
            merged=bool(data.get("merged")),
            sha=data.get("sha"),
            message=data.get("message", ""),
        )

    async def create(
        self,
        owner: str,
        repo: str,
        head: str,
        base: str,
        title: str,
        body: str,
    ) -> CreatedPullRequest:
        """
        Open a pull request.

        Args:
            owner: Repository owner
            repo: Repository name
            head: Source, as ``branch`` or ``user:branch``
            base: Branch to merge into
            title: Pull request title
            body: Pull request description

        Returns:
            CreatedPullRequest with number and html_url
        """
        data = await self.transport.post(
            "/repos/:owner/:repo/pulls",
            {
                "owner": owner,
                "repo": repo,
                "head": head,
                "base": base,
                "title": title,
                "body": body,
            },
        )
        if not isinstance(data, dict) or "number" not in data:
            raise AssertionViolation("Expected the created pull request in the response")
        return CreatedPullRequest(number=data["number"], html_url=data.get("html_url", ""))

    def _parse_pull_request(self, data: dict[str, Any]) -> PullRequest:
        """Parse pull request data from API response."""
        return PullRequest(
            number=data["number"],
            title=data.get("title", ""),
            user_login=data["user"]["login"],
            mergeable=data.get("mergeable"),
            head=parse_branch_ref(data["head"]),
            base=parse_branch_ref(data["base"]),
            commits_url=data["commits_url"],
            statuses_url=data["statuses_url"],
            html_url=data.get("html_url", ""),
            updated_at=parse_timestamp(data["updated_at"]),
        )
