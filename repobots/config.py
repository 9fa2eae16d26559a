"""
Bot configuration.

Every setting has a default except the API token; ``BotConfig.from_env``
reads overrides from environment variables.
"""

import logging
import os
from dataclasses import dataclass, field

from repobots.exceptions import ConfigurationError

DEFAULT_API_URL = "https://api.github.com"
DEFAULT_TIMEOUT = 30.0
DEFAULT_MERGE_PREVIEW = "application/vnd.github.polaris-preview+json"
DEFAULT_MERGE_LOGINS = ("ForbesLindesay-Bot", "greenkeeperio-bot")
DEFAULT_TARGET_REPOS = (
    "ForbesLindesay/forbeslindesay-bots",
    "ForbesLindesay/tempjs.org",
    "esdiscuss/bot",
    "esdiscuss/esdiscuss.org",
    "readable-email/readable-email-bot",
    "readable-email/readable-email-site",
    "jepso/MAPS",
    "jepso/canoeslalomentries",
)


@dataclass(frozen=True)
class TargetRepo:
    """A repository kept on the latest runtime by the node-release bot."""

    owner: str
    repo: str
    base_branch: str | None = None  # None means the repository's default branch

    @classmethod
    def parse(cls, value: str) -> "TargetRepo":
        """
        Parse ``owner/repo`` or ``owner/repo@branch``.

        Raises:
            ConfigurationError: If the value is malformed
        """
        full_name, _, branch = value.strip().partition("@")
        owner, slash, repo = full_name.partition("/")
        if not owner or not slash or not repo or "/" in repo:
            raise ConfigurationError(f"Invalid target repository: {value!r}")
        return cls(owner=owner, repo=repo, base_branch=branch or None)

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.repo}"


@dataclass
class BotConfig:
    """Settings shared by all bots."""

    token: str
    api_url: str = DEFAULT_API_URL
    timeout: float = DEFAULT_TIMEOUT
    max_retries: int = 0
    merge_logins: tuple[str, ...] = DEFAULT_MERGE_LOGINS
    min_age_minutes: int = 60
    target_repos: tuple[TargetRepo, ...] = field(
        default_factory=lambda: tuple(TargetRepo.parse(r) for r in DEFAULT_TARGET_REPOS)
    )
    branch_prefix: str = "node"
    merge_preview: str | None = DEFAULT_MERGE_PREVIEW
    log_level: int = logging.INFO

    @classmethod
    def from_env(cls) -> "BotConfig":
        """
        Create a configuration from environment variables.

        Environment variables:
            GITHUB_TOKEN: API token (required)
            GITHUB_API_URL: API base URL (optional, default: https://api.github.com)
            REPOBOTS_TIMEOUT: Request timeout in seconds (optional, default: 30)
            REPOBOTS_MAX_RETRIES: Retries on 429/5xx (optional, default: 0)
            REPOBOTS_MERGE_LOGINS: Comma separated auto-merge allow-list
            REPOBOTS_MIN_AGE_MINUTES: Minimum age of a mergeable PR (default: 60)
            REPOBOTS_TARGET_REPOS: Comma separated ``owner/repo[@branch]`` list
            REPOBOTS_BRANCH_PREFIX: Update branch prefix (default: node)
            REPOBOTS_MERGE_PREVIEW: Accept header for merges, empty to disable
            REPOBOTS_LOG_LEVEL: Logging level name (default: INFO)

        Raises:
            ConfigurationError: If GITHUB_TOKEN is missing or a value is invalid
        """
        token = os.environ.get("GITHUB_TOKEN")
        if not token:
            raise ConfigurationError("GITHUB_TOKEN environment variable not set")

        kwargs: dict = {"token": token}
        if "GITHUB_API_URL" in os.environ:
            kwargs["api_url"] = os.environ["GITHUB_API_URL"]
        if "REPOBOTS_TIMEOUT" in os.environ:
            kwargs["timeout"] = _parse_number("REPOBOTS_TIMEOUT", float)
        if "REPOBOTS_MAX_RETRIES" in os.environ:
            kwargs["max_retries"] = _parse_number("REPOBOTS_MAX_RETRIES", int)
        if "REPOBOTS_MERGE_LOGINS" in os.environ:
            kwargs["merge_logins"] = tuple(_split_list(os.environ["REPOBOTS_MERGE_LOGINS"]))
        if "REPOBOTS_MIN_AGE_MINUTES" in os.environ:
            kwargs["min_age_minutes"] = _parse_number("REPOBOTS_MIN_AGE_MINUTES", int)
        if "REPOBOTS_TARGET_REPOS" in os.environ:
            kwargs["target_repos"] = tuple(
                TargetRepo.parse(r) for r in _split_list(os.environ["REPOBOTS_TARGET_REPOS"])
            )
        if "REPOBOTS_BRANCH_PREFIX" in os.environ:
            kwargs["branch_prefix"] = os.environ["REPOBOTS_BRANCH_PREFIX"]
        if "REPOBOTS_MERGE_PREVIEW" in os.environ:
            kwargs["merge_preview"] = os.environ["REPOBOTS_MERGE_PREVIEW"] or None
        if "REPOBOTS_LOG_LEVEL" in os.environ:
            kwargs["log_level"] = _parse_level(os.environ["REPOBOTS_LOG_LEVEL"])

        return cls(**kwargs)


def _split_list(value: str) -> list[str]:
    return [item.strip() for item in value.split(",") if item.strip()]


def _parse_number(name: str, kind: type) -> int | float:
    raw = os.environ[name]
    try:
        value = kind(raw)
    except ValueError as e:
        raise ConfigurationError(f"Invalid {name}: {raw!r}") from e
    if value < 0:
        raise ConfigurationError(f"Invalid {name}: must not be negative")
    return value


def _parse_level(value: str) -> int:
    level = logging.getLevelName(value.strip().upper())
    if not isinstance(level, int):
        raise ConfigurationError(f"Invalid REPOBOTS_LOG_LEVEL: {value!r}")
    return level
