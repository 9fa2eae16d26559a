"""Pull request-related data models."""

from dataclasses import dataclass
from datetime import datetime


@dataclass
class RepoRef:
    """The repository side of a pull request head or base."""

    id: int
    name: str
    owner_login: str


@dataclass
class BranchRef:
    """Head or base of a pull request."""

    ref: str
    sha: str
    repo: RepoRef | None  # None when a fork was deleted


@dataclass
class PullRequest:
    """Pull request information."""

    number: int
    title: str
    user_login: str
    mergeable: bool | None  # None while the platform is still computing it
    head: BranchRef
    base: BranchRef
    commits_url: str
    statuses_url: str
    html_url: str
    updated_at: datetime

    @property
    def is_fork(self) -> bool:
        """True unless head and base live in the same repository."""
        return self.head.repo is None or self.base.repo is None or (
            self.head.repo.id != self.base.repo.id
        )


@dataclass
class StatusCheck:
    """One commit status entry reported by a check context."""

    context: str
    state: str  # "success", "failure", "pending", "error"
    created_at: datetime


@dataclass
class Commit:
    """A commit of a pull request."""

    sha: str
    message: str


@dataclass
class MergeResult:
    """Result of merging a pull request."""

    merged: bool
    sha: str | None
    message: str


@dataclass
class CreatedPullRequest:
    """A pull request opened by a bot."""

    number: int
    html_url: str
