"""
Review State Reducer

Collapses a PR's review events into one aggregate state.
"""

from typing import Dict, Iterable

from ..models.pull_request import ReviewEvent, ReviewState


def reduce_review_state(events: Iterable[ReviewEvent]) -> ReviewState:
    """
    Reduce review events to a single state.

    Only each reviewer's latest event counts (events arrive in
    chronological order, so later ones overwrite). Any outstanding
    change request wins over approvals; with neither the PR is pending.

    Args:
        events: Review events in API (chronological) order

    Returns:
        Aggregate ReviewState
    """
    latest: Dict[str, str] = {}
    for event in events:
        latest[event.author] = event.state

    states = set(latest.values())
    if ReviewState.CHANGES_REQUESTED.value in states:
        return ReviewState.CHANGES_REQUESTED
    if ReviewState.APPROVED.value in states:
        return ReviewState.APPROVED
    return ReviewState.PENDING
