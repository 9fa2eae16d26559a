"""repobots type definitions.

This module exports all data model types used by the bots.
"""

from repobots.types.issues import Issue
from repobots.types.pulls import (
    BranchRef,
    Commit,
    CreatedPullRequest,
    MergeResult,
    PullRequest,
    RepoRef,
    StatusCheck,
)
from repobots.types.repos import Branch, FileContent, FileUpdate, Repository

__all__ = [
    # Issue listing
    "Issue",
    # Pull requests
    "RepoRef",
    "BranchRef",
    "PullRequest",
    "StatusCheck",
    "Commit",
    "MergeResult",
    "CreatedPullRequest",
    # Repositories
    "Repository",
    "Branch",
    "FileContent",
    "FileUpdate",
]
