"""repobots - webhook-triggered repository maintenance bots."""

from repobots.bots import BOTS, get_bot, run_bot
from repobots.client import GitHubClient
from repobots.config import BotConfig, TargetRepo
from repobots.exceptions import (
    APIError,
    AssertionViolation,
    AuthenticationError,
    AuthorizationError,
    ConfigurationError,
    ConflictError,
    FeedError,
    NotFoundError,
    RateLimitedError,
    RepoBotsError,
    ServerError,
    ValidationError,
)
from repobots.logging import configure_logging, get_logger
from repobots.transport import AsyncHTTPTransport, RetryConfig

__version__ = "0.1.0"

__all__ = [
    "__version__",
    # Client
    "GitHubClient",
    "AsyncHTTPTransport",
    "RetryConfig",
    # Bots
    "BOTS",
    "get_bot",
    "run_bot",
    # Configuration
    "BotConfig",
    "TargetRepo",
    # Exceptions
    "RepoBotsError",
    "ConfigurationError",
    "AssertionViolation",
    "FeedError",
    "APIError",
    "AuthenticationError",
    "AuthorizationError",
    "NotFoundError",
    "ConflictError",
    "RateLimitedError",
    "ValidationError",
    "ServerError",
    # Logging
    "configure_logging",
    "get_logger",
]
