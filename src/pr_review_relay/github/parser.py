"""
Pull Request Parser

Parses GitHub API responses into the relay's pull request models.
"""

import logging
from typing import Dict, List, Tuple
from datetime import datetime

from ..models.pull_request import RawPullRequest, ReviewEvent, DELETED_USER


logger = logging.getLogger(__name__)


def parse_timestamp(value: str) -> datetime:
    """Parse a GitHub ISO-8601 timestamp into an aware datetime."""
    return datetime.fromisoformat(value.replace('Z', '+00:00'))


class PullRequestParser:
    """
    Parser for GitHub pull request data.

    Converts list, detail and review responses into structured objects.
    """

    def parse_pull_request(self, pr_data: Dict) -> RawPullRequest:
        """
        Parse one entry of the open PR listing.

        Args:
            pr_data: PR information from the list endpoint

        Returns:
            RawPullRequest
        """
        user = pr_data.get('user') or {}

        return RawPullRequest(
            number=pr_data['number'],
            title=pr_data.get('title', ''),
            html_url=pr_data.get('html_url', ''),
            created_at=parse_timestamp(pr_data['created_at']),
            author=user.get('login') or DELETED_USER,
            labels=tuple(label['name'] for label in pr_data.get('labels') or [] if label.get('name')),
            draft=bool(pr_data.get('draft', False)),
            head_sha=(pr_data.get('head') or {}).get('sha', ''),
        )

    def parse_pull_requests(self, pulls_data: List[Dict]) -> List[RawPullRequest]:
        """Parse a PR listing, keeping API order."""
        pull_requests = [self.parse_pull_request(pr_data) for pr_data in pulls_data]
        logger.debug(f"Parsed {len(pull_requests)} pull requests")
        return pull_requests

    def parse_reviews(self, reviews_data: List[Dict]) -> List[ReviewEvent]:
        """
        Parse a review list. Reviews whose author account no longer
        exists carry no user and are dropped.
        """
        events = []
        for review in reviews_data:
            user = review.get('user')
            if not user or not user.get('login'):
                continue
            events.append(ReviewEvent(author=user['login'], state=review.get('state', '')))
        return events

    def parse_size(self, detail_data: Dict) -> Tuple[int, int]:
        """Return (additions, deletions) from PR detail."""
        return int(detail_data.get('additions') or 0), int(detail_data.get('deletions') or 0)

    def parse_requested_reviewers(self, detail_data: Dict) -> Tuple[str, ...]:
        """Return requested reviewer logins from PR detail, in API order."""
        return tuple(
            reviewer['login']
            for reviewer in detail_data.get('requested_reviewers') or []
            if reviewer.get('login')
        )

    def parse_ci_status(self, status_data: Dict) -> str:
        """Return the combined status state (success, failure, pending, error)."""
        return status_data.get('state') or 'pending'
