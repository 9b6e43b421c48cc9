"""
Shared Formatting Helpers

Status glyphs, PR age and title helpers used by every chat renderer.
"""

from datetime import datetime, timedelta
from typing import Sequence, Tuple

from ..models.pull_request import CIStatus, ReviewState
from ..models.routing import RoutingRule


DEFAULT_TITLE = "🔔 Daily PR Bump"

_DAY_MS = 1000 * 60 * 60 * 24
_HOUR_MS = 1000 * 60 * 60
_MINUTE_MS = 1000 * 60


def ci_icon(state: str) -> str:
    """Glyph for a combined CI status; anything unknown counts as running."""
    if state == CIStatus.SUCCESS:
        return "✅"
    if state in (CIStatus.FAILURE, CIStatus.ERROR):
        return "❌"
    return "🟡"


def review_icon(state: str) -> str:
    """Glyph for an aggregate review state."""
    if state == ReviewState.APPROVED:
        return "🟢"
    if state == ReviewState.CHANGES_REQUESTED:
        return "🔴"
    return "🟡"


def age_in_milliseconds(created_at: datetime, now: datetime) -> int:
    return (now - created_at) // timedelta(milliseconds=1)


def age_in_days(created_at: datetime, now: datetime) -> int:
    """Whole days elapsed since creation (floored)."""
    return age_in_milliseconds(created_at, now) // _DAY_MS


def age_breakdown(created_at: datetime, now: datetime) -> Tuple[int, int, int]:
    """Elapsed time as (days, hours, minutes), each component floored."""
    diff_ms = age_in_milliseconds(created_at, now)
    days = diff_ms // _DAY_MS
    hours = (diff_ms % _DAY_MS) // _HOUR_MS
    minutes = (diff_ms % _HOUR_MS) // _MINUTE_MS
    return days, hours, minutes


def format_age(created_at: datetime, now: datetime) -> str:
    days, hours, minutes = age_breakdown(created_at, now)
    return f"{days}d {hours}h {minutes}m"


def bucket_title(rule: RoutingRule) -> str:
    if rule.display_name:
        return f"{rule.display_name}: Pending Reviews"
    return DEFAULT_TITLE


def format_reviewers(reviewers: Sequence[str], none_marker: str) -> str:
    return ", ".join(reviewers) or none_marker
