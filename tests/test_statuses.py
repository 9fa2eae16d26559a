"""
Property-based tests for status aggregation.
"""

from datetime import datetime, timedelta, timezone

from hypothesis import given, settings
from hypothesis import strategies as st

from repobots.statuses import authoritative_statuses, checks_passed
from repobots.types.pulls import StatusCheck

T0 = datetime(2020, 1, 1, tzinfo=timezone.utc)

status_strategy = st.builds(
    StatusCheck,
    context=st.sampled_from(["ci", "lint", "coverage", "deploy"]),
    state=st.sampled_from(["success", "failure", "pending", "error"]),
    created_at=st.integers(min_value=0, max_value=50).map(lambda s: T0 + timedelta(seconds=s)),
)


def test_later_status_wins() -> None:
    """A failure superseded by a success counts as a success."""
    statuses = [
        StatusCheck("ci", "failure", T0),
        StatusCheck("ci", "success", T0 + timedelta(minutes=5)),
    ]

    assert authoritative_statuses(statuses)["ci"].state == "success"
    assert checks_passed(statuses)


def test_order_of_listing_does_not_matter() -> None:
    """The newest entry wins even when the API lists it first."""
    statuses = [
        StatusCheck("ci", "failure", T0 + timedelta(minutes=5)),
        StatusCheck("ci", "success", T0),
    ]

    assert not checks_passed(statuses)


def test_tie_resolves_to_last_seen() -> None:
    statuses = [
        StatusCheck("ci", "failure", T0),
        StatusCheck("ci", "success", T0),
    ]

    assert authoritative_statuses(statuses)["ci"].state == "success"


def test_no_statuses_is_not_passing() -> None:
    assert checks_passed([]) is False


def test_every_context_must_pass() -> None:
    statuses = [
        StatusCheck("ci", "success", T0),
        StatusCheck("lint", "pending", T0),
    ]

    assert not checks_passed(statuses)


@given(statuses=st.lists(status_strategy, max_size=30))
@settings(max_examples=200)
def test_property_one_latest_entry_per_context(statuses: list[StatusCheck]) -> None:
    """
    The reduction keeps exactly one entry per distinct context, and it is
    the one with the maximal created_at (the last such entry on ties).
    """
    latest = authoritative_statuses(statuses)

    assert set(latest) == {status.context for status in statuses}
    for context, chosen in latest.items():
        same_context = [status for status in statuses if status.context == context]
        newest = max(status.created_at for status in same_context)
        assert chosen.created_at == newest
        last_newest = [status for status in same_context if status.created_at == newest][-1]
        assert chosen is last_newest


@given(statuses=st.lists(status_strategy, max_size=30))
@settings(max_examples=200)
def test_property_checks_passed_matches_definition(statuses: list[StatusCheck]) -> None:
    latest = authoritative_statuses(statuses).values()
    expected = bool(latest) and all(status.state == "success" for status in latest)

    assert checks_passed(statuses) is expected
