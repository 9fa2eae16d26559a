"""repobots testing utilities.

Provides a mock source-control API and payload builders for testing the bots.
"""

from repobots.testing.fixtures import (
    make_commit,
    make_content,
    make_issue,
    make_pull_request,
    make_release,
    make_repo,
    make_status,
    make_tags,
)
from repobots.testing.mock import MockGitHubAPI, MockRequest, MockResponse, feeds_transport

__all__ = [
    # Mock API
    "MockGitHubAPI",
    "MockRequest",
    "MockResponse",
    "feeds_transport",
    # Payload builders
    "make_repo",
    "make_issue",
    "make_pull_request",
    "make_status",
    "make_commit",
    "make_content",
    "make_release",
    "make_tags",
]
