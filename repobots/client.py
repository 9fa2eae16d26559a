"""
repobots async client.

Aggregates the resource clients the bots need on top of one transport.
"""

from typing import Any

import httpx

from repobots.clients import GitClient, IssuesClient, PullsClient, ReposClient
from repobots.config import DEFAULT_API_URL, DEFAULT_MERGE_PREVIEW, DEFAULT_TIMEOUT, BotConfig
from repobots.transport import AsyncHTTPTransport, RetryConfig


class GitHubClient:
    """
    Async client for the narrow set of source-control operations the bots use.

    Example:
        ```python
        import asyncio
        from repobots import GitHubClient

        async def main():
            async with GitHubClient(token="...") as client:
                async for page in client.issues.iter_pages():
                    print([issue.number for issue in page])

        asyncio.run(main())
        ```
    """

    def __init__(
        self,
        token: str,
        base_url: str = DEFAULT_API_URL,
        timeout: float = DEFAULT_TIMEOUT,
        retry_config: RetryConfig | None = None,
        merge_preview: str | None = DEFAULT_MERGE_PREVIEW,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """
        Initialize the client.

        Args:
            token: API token
            base_url: Base URL for API requests (default: https://api.github.com)
            timeout: Request timeout in seconds (default: 30.0)
            retry_config: Configuration for retry behavior (default: no retries)
            merge_preview: Preview media type for the merge endpoint
            transport: Optional httpx transport (used by tests)
        """
        self.base_url = base_url
        self.timeout = timeout

        self._transport = AsyncHTTPTransport(
            base_url=base_url,
            token=token,
            timeout=timeout,
            retry_config=retry_config,
            transport=transport,
        )

        self.issues = IssuesClient(self._transport)
        self.pulls = PullsClient(self._transport, merge_accept=merge_preview)
        self.repos = ReposClient(self._transport)
        self.git = GitClient(self._transport)

    @classmethod
    def from_config(
        cls,
        config: BotConfig,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> "GitHubClient":
        """Create a client from a BotConfig."""
        return cls(
            token=config.token,
            base_url=config.api_url,
            timeout=config.timeout,
            retry_config=RetryConfig(max_retries=config.max_retries),
            merge_preview=config.merge_preview,
            transport=transport,
        )

    @property
    def transport(self) -> AsyncHTTPTransport:
        """Get the underlying HTTP transport (for advanced use cases)."""
        return self._transport

    async def close(self) -> None:
        """Close the client and release resources."""
        await self._transport.close()

    async def __aenter__(self) -> "GitHubClient":
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.close()
