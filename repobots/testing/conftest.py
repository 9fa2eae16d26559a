"""
Pytest plugin for repobots testing fixtures.

To use these fixtures in your tests, add this to your conftest.py:

    pytest_plugins = ["repobots.testing.conftest"]
"""

from repobots.testing.fixtures import (
    bot_config,
    github_client,
    mock_api,
    target_repo,
)

__all__ = [
    "mock_api",
    "github_client",
    "target_repo",
    "bot_config",
]
