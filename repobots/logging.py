"""
repobots logging utilities.

Loggers form a tree under ``repobots``: ``repobots.http`` traces every API
call at DEBUG, ``repobots.bots.*`` records what each bot decided. Nothing
that reaches a handler may contain the API token.
"""

import logging
import re
from typing import Any

DEFAULT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
REDACTED = "[REDACTED]"

_root_logger = logging.getLogger("repobots")
_http_logger = logging.getLogger("repobots.http")
_bots_logger = logging.getLogger("repobots.bots")

# Handler added by the last configure_logging call
_installed_handler: logging.Handler | None = None

_SENSITIVE_PATTERNS = [
    # "token abc..." / "Bearer abc..." as sent in Authorization headers
    (re.compile(r"\b(Bearer|token)\s+[A-Za-z0-9_\-\.]{8,}", re.IGNORECASE), rf"\1 {REDACTED}"),
    # Personal access, OAuth, app and refresh tokens
    (re.compile(r"\b(?:ghp|gho|ghu|ghs|ghr|github_pat)_[A-Za-z0-9_]{16,}\b"), "[TOKEN_REDACTED]"),
    # key: "value" / key="value" pairs in serialized payloads
    (
        re.compile(r"(secret|token|password|api_key)['\"]?\s*[:=]\s*['\"][^'\"]+['\"]", re.IGNORECASE),
        rf"\1: {REDACTED}",
    ),
]

_DEFAULT_SENSITIVE_KEYS = frozenset({"authorization", "token", "secret", "password", "api_key"})


def configure_logging(
    level: int = logging.INFO,
    http_level: int | None = None,
    bots_level: int | None = None,
    handler: logging.Handler | None = None,
    format_string: str | None = None,
) -> None:
    """
    Configure repobots logging.

    Calling this again replaces the handler added by the previous call.

    Args:
        level: Level of the ``repobots`` logger (default: INFO)
        http_level: Level of API call tracing (default: same as level)
        bots_level: Level of bot decisions (default: same as level)
        handler: Handler to attach (default: StreamHandler to stderr)
        format_string: Log format (default: timestamp, logger name, level, message)

    Example:
        ```python
        import logging
        from repobots.logging import configure_logging

        # Trace every API call a bot makes
        configure_logging(http_level=logging.DEBUG)
        ```
    """
    global _installed_handler

    new_handler = handler or logging.StreamHandler()
    new_handler.setFormatter(logging.Formatter(format_string or DEFAULT_FORMAT))

    if _installed_handler is not None:
        _root_logger.removeHandler(_installed_handler)
    _root_logger.addHandler(new_handler)
    _installed_handler = new_handler

    _root_logger.setLevel(level)
    for logger, override in ((_http_logger, http_level), (_bots_logger, bots_level)):
        logger.setLevel(level if override is None else override)


def get_logger(name: str | None = None) -> logging.Logger:
    """
    Get a repobots logger.

    Args:
        name: Dotted suffix below ``repobots`` (e.g. "http", "bots.auto_merge");
            None returns the package logger

    Returns:
        Logger instance
    """
    return _root_logger if name is None else _root_logger.getChild(name)


def mask_sensitive_data(text: str) -> str:
    """Replace tokens and credential-looking values in ``text`` with placeholders."""
    for pattern, replacement in _SENSITIVE_PATTERNS:
        text = pattern.sub(replacement, text)
    return text


def _is_sensitive(key: str, sensitive_keys: frozenset[str] | set[str]) -> bool:
    lowered = key.lower()
    return any(sensitive in lowered for sensitive in sensitive_keys)


def _redact(value: Any, sensitive_keys: frozenset[str] | set[str]) -> Any:
    if isinstance(value, dict):
        return {
            key: REDACTED if _is_sensitive(str(key), sensitive_keys) else _redact(item, sensitive_keys)
            for key, item in value.items()
        }
    if isinstance(value, list):
        return [_redact(item, sensitive_keys) for item in value]
    return value


def safe_log_dict(data: dict[str, Any], sensitive_keys: set[str] | None = None) -> dict[str, Any]:
    """
    Copy a request payload or header mapping with sensitive values masked.

    Keys containing any of the sensitive names (case-insensitive) are replaced
    with "[REDACTED]", at any nesting depth.

    Args:
        data: Mapping that may hold credentials
        sensitive_keys: Names to mask (default: authorization, token, secret,
            password, api_key)

    Returns:
        Masked copy of ``data``
    """
    return _redact(data, sensitive_keys or _DEFAULT_SENSITIVE_KEYS)


def log_http_request(
    method: str,
    url: str,
    headers: dict[str, str] | None = None,
    body: dict[str, Any] | None = None,
) -> None:
    """Trace an outgoing API call at DEBUG, with credentials masked."""
    if not _http_logger.isEnabledFor(logging.DEBUG):
        return

    message = f"{method} {mask_sensitive_data(url)}"
    if headers:
        message += f" | headers={safe_log_dict(headers)}"
    if body:
        message += f" | body={safe_log_dict(body)}"
    _http_logger.debug(message)


def log_http_response(status_code: int, url: str, elapsed_ms: float | None = None) -> None:
    """Trace an API response status (and timing) at DEBUG."""
    if not _http_logger.isEnabledFor(logging.DEBUG):
        return

    message = f"Response {status_code} from {mask_sensitive_data(url)}"
    if elapsed_ms is not None:
        message += f" | elapsed={elapsed_ms:.2f}ms"
    _http_logger.debug(message)


__all__ = [
    "configure_logging",
    "get_logger",
    "mask_sensitive_data",
    "safe_log_dict",
    "log_http_request",
    "log_http_response",
]
