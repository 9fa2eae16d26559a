"""Shared parsing helpers for API payloads."""

from datetime import datetime, timezone
from typing import Any

from repobots.types.pulls import BranchRef, RepoRef


def parse_timestamp(value: str) -> datetime:
    """Parse an ISO-8601 API timestamp into an aware UTC datetime."""
    parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def parse_repo_ref(data: dict[str, Any] | None) -> RepoRef | None:
    if not data:
        return None
    return RepoRef(
        id=data["id"],
        name=data["name"],
        owner_login=data["owner"]["login"],
    )


def parse_branch_ref(data: dict[str, Any]) -> BranchRef:
    return BranchRef(
        ref=data["ref"],
        sha=data["sha"],
        repo=parse_repo_ref(data.get("repo")),
    )
