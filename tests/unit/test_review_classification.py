"""
Unit tests for label routing and review state aggregation.
"""

import pytest

from pr_review_relay.models import ReviewEvent, ReviewState, RoutingRule
from pr_review_relay.review import RuleMatcher, reduce_review_state


BACKEND = RoutingRule("backend", "WEBHOOK_BACKEND", "Backend Team")
FRONTEND = RoutingRule("frontend", "WEBHOOK_FRONTEND", "Frontend Team")
DOCS_NO_DESTINATION = RoutingRule("docs", "", "Docs")


class TestReduceReviewState:

    def test_latest_review_per_author_wins(self):
        events = [
            ReviewEvent("A", "APPROVED"),
            ReviewEvent("B", "CHANGES_REQUESTED"),
            ReviewEvent("A", "CHANGES_REQUESTED"),
        ]
        assert reduce_review_state(events) == ReviewState.CHANGES_REQUESTED

    def test_changes_requested_overwritten_by_approval(self):
        events = [
            ReviewEvent("A", "CHANGES_REQUESTED"),
            ReviewEvent("A", "APPROVED"),
        ]
        assert reduce_review_state(events) == ReviewState.APPROVED

    def test_single_approval(self):
        assert reduce_review_state([ReviewEvent("A", "APPROVED")]) == ReviewState.APPROVED

    def test_no_reviews(self):
        assert reduce_review_state([]) == ReviewState.PENDING

    def test_comment_after_approval_resets_author(self):
        events = [ReviewEvent("A", "APPROVED"), ReviewEvent("A", "COMMENTED")]
        assert reduce_review_state(events) == ReviewState.PENDING


class TestRuleMatcher:

    def test_no_matching_label(self):
        assert RuleMatcher([BACKEND]).match(["docs"]) == []

    def test_single_match(self):
        assert RuleMatcher([BACKEND, FRONTEND]).match(["backend", "bug"]) == [BACKEND]

    def test_fan_out_in_table_order(self):
        matcher = RuleMatcher([FRONTEND, BACKEND])
        assert matcher.match(["backend", "frontend"]) == [FRONTEND, BACKEND]

    def test_rule_without_destination_never_matches(self):
        assert RuleMatcher([DOCS_NO_DESTINATION]).match(["docs"]) == []

    @pytest.mark.parametrize("labels", [[], ["Backend"], ["backend "]])
    def test_labels_are_exact(self, labels):
        assert RuleMatcher([BACKEND]).match(labels) == []
