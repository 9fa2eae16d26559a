"""Async resource clients for the source-control API."""

from repobots.clients.git import GitClient
from repobots.clients.issues import IssuesClient
from repobots.clients.pulls import PullsClient
from repobots.clients.repos import ReposClient

__all__ = [
    "GitClient",
    "IssuesClient",
    "PullsClient",
    "ReposClient",
]
