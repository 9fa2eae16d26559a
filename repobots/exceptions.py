"""repobots exception classes."""


class RepoBotsError(Exception):
    """Base exception for all repobots errors."""

    def __init__(
        self,
        code: str,
        message: str,
        request_id: str | None = None,
        status_code: int | None = None,
    ) -> None:
        self.code = code
        self.message = message
        self.request_id = request_id
        self.status_code = status_code
        super().__init__(f"[{code}] {message}")


class ConfigurationError(RepoBotsError):
    """Raised when configuration is invalid or missing."""

    def __init__(self, message: str) -> None:
        super().__init__("CONFIGURATION_ERROR", message)


class AssertionViolation(RepoBotsError):
    """
    Raised when an invariant about an API response or a patch fails.

    Never caught inside repobots: it always fails the whole bot invocation.
    """

    def __init__(self, message: str) -> None:
        super().__init__("ASSERTION_VIOLATION", message)


class FeedError(RepoBotsError):
    """Raised when a version feed cannot be fetched or parsed."""

    def __init__(self, url: str, message: str, status_code: int | None = None) -> None:
        super().__init__("FEED_ERROR", f"{url}: {message}", status_code=status_code)
        self.url = url


class APIError(RepoBotsError):
    """Raised on any non-2xx response from the source-control API."""

    pass


class AuthenticationError(APIError):
    """Raised when the token is rejected (401)."""

    pass


class AuthorizationError(APIError):
    """Raised when access is denied (403)."""

    pass


class NotFoundError(APIError):
    """Raised when a resource is not found (404)."""

    pass


class ConflictError(APIError):
    """Raised on conflicts (head sha changed, ref already exists, etc.)."""

    pass


class RateLimitedError(APIError):
    """Raised when rate limited."""

    def __init__(
        self,
        code: str,
        message: str,
        retry_after: int,
        request_id: str | None = None,
        status_code: int | None = 429,
    ) -> None:
        super().__init__(code, message, request_id, status_code)
        self.retry_after = retry_after


class ValidationError(APIError):
    """Raised on other client errors (405 not mergeable, 422 invalid input)."""

    pass


class ServerError(APIError):
    """Raised on server errors (5xx) and transport failures."""

    pass
