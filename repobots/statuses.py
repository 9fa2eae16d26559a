"""Commit status aggregation."""

from collections.abc import Iterable

from repobots.types.pulls import StatusCheck

SUCCESS = "success"


def authoritative_statuses(statuses: Iterable[StatusCheck]) -> dict[str, StatusCheck]:
    """
    Reduce status entries to the latest one per check context.

    Entries are compared by ``created_at``; on equal timestamps the entry seen
    later in the input wins.

    Args:
        statuses: Status entries in API order

    Returns:
        The authoritative entry for each distinct context
    """
    latest: dict[str, StatusCheck] = {}
    for status in statuses:
        current = latest.get(status.context)
        if current is None or status.created_at >= current.created_at:
            latest[status.context] = status
    return latest


def checks_passed(statuses: Iterable[StatusCheck]) -> bool:
    """True if at least one check reported and every latest check succeeded."""
    latest = authoritative_statuses(statuses)
    return bool(latest) and all(status.state == SUCCESS for status in latest.values())
