"""
Property-based tests for repobots logging.
"""

import io
import logging

from hypothesis import given, settings
from hypothesis import strategies as st

from repobots.logging import (
    configure_logging,
    get_logger,
    log_http_request,
    log_http_response,
    mask_sensitive_data,
    safe_log_dict,
)

token_strategy = st.text(
    alphabet=st.sampled_from("ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789"),
    min_size=20,
    max_size=40,
)


def capture_http_logger() -> io.StringIO:
    buffer = io.StringIO()
    handler = logging.StreamHandler(buffer)
    handler.setLevel(logging.DEBUG)
    http_logger = logging.getLogger("repobots.http")
    http_logger.setLevel(logging.DEBUG)
    http_logger.handlers = [handler]
    return buffer


@given(token=token_strategy)
@settings(max_examples=100)
def test_property_authorization_value_is_masked(token: str) -> None:
    """A token in an Authorization-style string never survives masking."""
    masked = mask_sensitive_data(f"Authorization: token {token}")

    assert token not in masked
    assert "[REDACTED]" in masked


@given(token=token_strategy)
@settings(max_examples=100)
def test_property_github_tokens_are_masked(token: str) -> None:
    masked = mask_sensitive_data(f"using ghp_{token} for requests")

    assert token not in masked


@given(token=token_strategy, path=st.sampled_from(["/issues", "/repos/octo/app/pulls/1/merge"]))
@settings(max_examples=100)
def test_property_log_http_request_no_credentials(token: str, path: str) -> None:
    """Logged requests never contain the credential from headers or body."""
    buffer = capture_http_logger()

    log_http_request(
        "PUT",
        path,
        headers={"Authorization": f"token {token}", "Accept": "application/json"},
        body={"sha": "abc", "api_key": token},
    )

    output = buffer.getvalue()
    assert path in output
    assert token not in output


def test_log_http_response() -> None:
    buffer = capture_http_logger()

    log_http_response(404, "/repos/octo/app/branches/node-16.0.0", elapsed_ms=12.5)

    assert "Response 404 from /repos/octo/app/branches/node-16.0.0 | elapsed=12.50ms" in buffer.getvalue()


def test_http_logging_disabled_above_debug() -> None:
    buffer = capture_http_logger()
    logging.getLogger("repobots.http").setLevel(logging.INFO)

    log_http_request("GET", "/issues")

    assert buffer.getvalue() == ""


def test_configure_logging_sets_levels() -> None:
    configure_logging(
        level=logging.WARNING,
        http_level=logging.DEBUG,
        bots_level=logging.ERROR,
        handler=logging.NullHandler(),
    )

    assert get_logger().level == logging.WARNING
    assert get_logger("http").level == logging.DEBUG
    assert get_logger("bots").level == logging.ERROR


def test_configure_logging_replaces_handler() -> None:
    """Reconfiguring does not stack handlers."""
    first = logging.NullHandler()
    second = logging.NullHandler()

    configure_logging(handler=first)
    configure_logging(handler=second)

    handlers = get_logger().handlers
    assert second in handlers
    assert first not in handlers


def test_get_logger_returns_correct_loggers() -> None:
    assert get_logger().name == "repobots"
    assert get_logger("http").name == "repobots.http"
    assert get_logger("bots.auto_merge").name == "repobots.bots.auto_merge"


def test_mask_sensitive_data_preserves_non_sensitive() -> None:
    text = "merging: Update dep https://github.com/octo/app/pull/5"

    assert mask_sensitive_data(text) == text


def test_safe_log_dict_handles_nested_structures() -> None:
    data = {
        "headers": {"Authorization": "token secret-value", "Accept": "application/json"},
        "items": [{"password": "hunter2", "name": "visible"}],
    }

    safe_data = safe_log_dict(data)

    assert "secret-value" not in str(safe_data)
    assert "hunter2" not in str(safe_data)
    assert safe_data["headers"]["Accept"] == "application/json"
    assert safe_data["items"][0]["name"] == "visible"
