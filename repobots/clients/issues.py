"""Async issues resource client."""

from collections.abc import AsyncIterator
from typing import TYPE_CHECKING, Any

from repobots.clients._parse import parse_timestamp
from repobots.types.issues import Issue

if TYPE_CHECKING:
    from repobots.transport import AsyncHTTPTransport


class IssuesClient:
    """Async client for the authenticated user's issue listing."""

    def __init__(self, transport: "AsyncHTTPTransport") -> None:
        """
        Initialize the issues client.

        Args:
            transport: Async HTTP transport for making requests
        """
        self.transport = transport

    async def iter_pages(
        self,
        filter: str = "all",
        state: str = "open",
    ) -> AsyncIterator[list[Issue]]:
        """
        Lazily iterate the issue listing one page at a time.

        The sequence is finite and not restartable: each page is requested
        only after the previous one has been consumed.

        Args:
            filter: Which issues to list ("assigned", "created", "all", ...)
            state: Issue state ("open", "closed", "all")

        Yields:
            Lists of Issue objects, one list per page
        """
        async for page in self.transport.paginate(
            "/issues", {"filter": filter, "state": state}
        ):
            yield [self._parse_issue(item) for item in page]

    def _parse_issue(self, data: dict[str, Any]) -> Issue:
        """Parse issue data from API response."""
        pull_request = data.get("pull_request") or {}
        return Issue(
            number=data["number"],
            title=data.get("title", ""),
            user_login=data["user"]["login"],
            updated_at=parse_timestamp(data["updated_at"]),
            html_url=data.get("html_url", ""),
            pull_request_url=pull_request.get("url"),
        )
