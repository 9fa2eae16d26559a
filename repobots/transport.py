"""
Async HTTP transport for the source-control REST API.

Handles path-template expansion, authentication, content negotiation,
cursor pagination and error handling on top of an httpx async client.
"""

import asyncio
import random
import re
import time
from collections.abc import AsyncIterator, Callable, Coroutine
from dataclasses import dataclass, field
from typing import Any
from urllib.parse import quote

import httpx

from repobots.exceptions import (
    APIError,
    AuthenticationError,
    AuthorizationError,
    ConflictError,
    NotFoundError,
    RateLimitedError,
    ServerError,
    ValidationError,
)
from repobots.logging import log_http_request, log_http_response

DEFAULT_ACCEPT = "application/vnd.github.v3+json"

_PLACEHOLDER = re.compile(r":([A-Za-z_][A-Za-z0-9_]*)")
_LINK_NEXT = re.compile(r'<([^>]+)>\s*;\s*rel="next"')

# Verbs whose leftover params travel in the query string rather than the body
_QUERY_METHODS = {"GET", "DELETE", "HEAD"}


@dataclass
class RetryConfig:
    """Configuration for automatic retry behavior. Retries are off by default."""

    max_retries: int = 0
    backoff_factor: float = 2.0
    retry_on: list[int] = field(default_factory=lambda: [429, 500, 502, 503])
    respect_retry_after: bool = True
    max_backoff: float = 60.0  # Maximum backoff time in seconds
    jitter: float = 0.1  # Jitter factor (0.1 = ±10%)


@dataclass
class Page:
    """One page of a paginated listing."""

    items: list[Any]
    next_url: str | None


def expand_path(
    template: str, params: dict[str, Any] | None = None
) -> tuple[str, dict[str, Any]]:
    """
    Substitute ``:name`` placeholders in a path template.

    Args:
        template: Path such as ``/repos/:owner/:repo/contents/:path``, or an
            absolute URL taken from an API object
        params: Values for the placeholders plus any extra fields

    Returns:
        Tuple of (expanded path, params not consumed by the template)

    Raises:
        ValueError: If a placeholder has no value in params
    """
    remaining = dict(params or {})

    def substitute(match: re.Match[str]) -> str:
        name = match.group(1)
        if name not in remaining:
            raise ValueError(f"Missing value for path parameter :{name} in {template}")
        return quote(str(remaining.pop(name)), safe="/")

    return _PLACEHOLDER.sub(substitute, template), remaining


def parse_next_link(link_header: str | None) -> str | None:
    """Extract the rel="next" URL from a Link header, if any."""
    if not link_header:
        return None
    match = _LINK_NEXT.search(link_header)
    return match.group(1) if match else None


class AsyncHTTPTransport:
    """
    Async HTTP transport layer for the source-control API.

    Handles:
    - Token authentication and the v3 media type
    - ``:placeholder`` path templates; leftover params become the query string
      (GET/DELETE) or the JSON body (POST/PUT/PATCH)
    - Opt-in alternate Accept header for preview API features
    - Link-header pagination
    - Error response parsing into typed exceptions carrying ``status_code``
    """

    def __init__(
        self,
        base_url: str,
        token: str,
        timeout: float = 30.0,
        retry_config: RetryConfig | None = None,
        user_agent: str = "repobots",
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """
        Initialize async HTTP transport.

        Args:
            base_url: Base URL for API requests (e.g., "https://api.github.com")
            token: API token sent in the Authorization header
            timeout: Connect/read timeout in seconds
            retry_config: Configuration for retry behavior
            user_agent: User-Agent header value
            transport: Optional httpx transport (used by tests)
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.retry_config = retry_config or RetryConfig()

        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=timeout,
            follow_redirects=True,
            transport=transport,
            headers={
                "Accept": DEFAULT_ACCEPT,
                "Authorization": f"token {token}",
                "User-Agent": user_agent,
            },
        )

    async def close(self) -> None:
        """Close the HTTP client."""
        await self._client.aclose()

    async def __aenter__(self) -> "AsyncHTTPTransport":
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.close()

    async def get(self, path: str, params: dict[str, Any] | None = None) -> Any:
        return await self.request("GET", path, params)

    async def post(self, path: str, params: dict[str, Any] | None = None) -> Any:
        return await self.request("POST", path, params)

    async def put(
        self, path: str, params: dict[str, Any] | None = None, accept: str | None = None
    ) -> Any:
        return await self.request("PUT", path, params, accept=accept)

    async def patch(self, path: str, params: dict[str, Any] | None = None) -> Any:
        return await self.request("PATCH", path, params)

    async def delete(self, path: str, params: dict[str, Any] | None = None) -> Any:
        return await self.request("DELETE", path, params)

    async def request(
        self,
        method: str,
        path: str,
        params: dict[str, Any] | None = None,
        accept: str | None = None,
    ) -> Any:
        """
        Make a request and return the decoded JSON body.

        Args:
            method: HTTP method
            path: Path template or absolute URL
            params: Placeholder values and query/body fields
            accept: Alternate Accept header (preview features)

        Returns:
            Parsed JSON response, or None for an empty body

        Raises:
            APIError: On non-2xx responses (NotFoundError for 404)
        """
        response = await self._send(method, path, params, accept)
        return self._decode(response)

    async def get_page(self, path: str, params: dict[str, Any] | None = None) -> Page:
        """Fetch one page of a listing along with the cursor to the next page."""
        response = await self._send("GET", path, params, None)
        items = self._decode(response) or []
        return Page(items=items, next_url=parse_next_link(response.headers.get("Link")))

    async def paginate(
        self, path: str, params: dict[str, Any] | None = None
    ) -> AsyncIterator[list[Any]]:
        """
        Lazily yield each page of a listing.

        The next page is only requested once the consumer asks for it, so a
        page can be processed to completion before the next is fetched.
        """
        page = await self.get_page(path, params)
        yield page.items
        while page.next_url:
            # The cursor URL already carries the original query
            page = await self.get_page(page.next_url)
            yield page.items

    async def collect(self, path: str, params: dict[str, Any] | None = None) -> list[Any]:
        """Fetch every page of a listing and concatenate the items."""
        items: list[Any] = []
        async for page in self.paginate(path, params):
            items.extend(page)
        return items

    async def _send(
        self,
        method: str,
        path: str,
        params: dict[str, Any] | None,
        accept: str | None,
    ) -> httpx.Response:
        method = method.upper()
        url, remaining = expand_path(path, params)
        query = remaining if method in _QUERY_METHODS and remaining else None
        body = remaining if method not in _QUERY_METHODS else None
        headers = {"Accept": accept} if accept else None

        async def make_request() -> httpx.Response:
            log_http_request(method, url, headers, body)
            started = time.monotonic()
            response = await self._client.request(
                method, url, params=query, json=body, headers=headers
            )
            log_http_response(
                response.status_code, url, (time.monotonic() - started) * 1000
            )
            return response

        return await self._execute_with_retry(make_request)

    def _decode(self, response: httpx.Response) -> Any:
        if response.status_code == 204 or not response.content:
            return None
        return response.json()

    async def _execute_with_retry(
        self, request_fn: Callable[[], Coroutine[Any, Any, httpx.Response]]
    ) -> httpx.Response:
        """
        Execute a request, retrying only when the retry config allows it.

        Args:
            request_fn: Async function that makes the HTTP request

        Returns:
            The successful response

        Raises:
            APIError: On non-retryable errors or after max retries
        """
        for attempt in range(self.retry_config.max_retries + 1):
            try:
                response = await request_fn()
            except httpx.TimeoutException as e:
                if attempt >= self.retry_config.max_retries:
                    raise ServerError("TIMEOUT", str(e) or "Request timed out") from e
                await asyncio.sleep(self._get_backoff_time(attempt, None))
                continue
            except httpx.RequestError as e:
                if attempt >= self.retry_config.max_retries:
                    raise ServerError("CONNECTION_ERROR", str(e)) from e
                await asyncio.sleep(self._get_backoff_time(attempt, None))
                continue

            if response.status_code < 400:
                return response

            error = self._parse_error_response(response)
            if not self._should_retry(response.status_code, attempt):
                raise error

            retry_after = response.headers.get("Retry-After")
            await asyncio.sleep(self._get_backoff_time(attempt, retry_after))

        raise ServerError("MAX_RETRIES_EXCEEDED", "Request failed after retries")

    def _should_retry(self, status_code: int, attempt: int) -> bool:
        """
        Determine if a request should be retried.

        Args:
            status_code: HTTP status code
            attempt: Current attempt number (0-indexed)

        Returns:
            True if the request should be retried
        """
        if attempt >= self.retry_config.max_retries:
            return False

        return status_code in self.retry_config.retry_on

    def _get_backoff_time(self, attempt: int, retry_after: str | None) -> float:
        """
        Calculate backoff time for retry.

        Uses exponential backoff with jitter, respecting Retry-After header
        if present.
        """
        if retry_after and self.retry_config.respect_retry_after:
            try:
                return float(retry_after)
            except ValueError:
                pass  # Fall through to exponential backoff

        base_wait = self.retry_config.backoff_factor ** attempt

        jitter_range = base_wait * self.retry_config.jitter
        wait_time = base_wait + random.uniform(-jitter_range, jitter_range)

        return min(wait_time, self.retry_config.max_backoff)

    def _parse_error_response(self, response: httpx.Response) -> APIError:
        """
        Parse an error response into a typed exception.

        Args:
            response: HTTP response with error status

        Returns:
            Appropriate APIError subclass
        """
        try:
            data = response.json()
        except ValueError:
            data = {}
        if not isinstance(data, dict):
            data = {}

        status_code = response.status_code
        message = data.get("message") or f"HTTP {status_code}"
        request_id = response.headers.get("X-GitHub-Request-Id")

        if status_code == 401:
            return AuthenticationError("UNAUTHORIZED", message, request_id, status_code)
        elif status_code == 403:
            if response.headers.get("X-RateLimit-Remaining") == "0":
                return RateLimitedError(
                    "RATE_LIMITED",
                    message,
                    self._retry_after(response),
                    request_id,
                    status_code,
                )
            return AuthorizationError("FORBIDDEN", message, request_id, status_code)
        elif status_code == 404:
            return NotFoundError("NOT_FOUND", message, request_id, status_code)
        elif status_code == 409:
            return ConflictError("CONFLICT", message, request_id, status_code)
        elif status_code == 429:
            return RateLimitedError(
                "RATE_LIMITED", message, self._retry_after(response), request_id, status_code
            )
        elif status_code >= 500:
            return ServerError(f"HTTP_{status_code}", message, request_id, status_code)
        else:
            return ValidationError(f"HTTP_{status_code}", message, request_id, status_code)

    @staticmethod
    def _retry_after(response: httpx.Response) -> int:
        try:
            return int(response.headers.get("Retry-After", "60"))
        except ValueError:
            return 60
