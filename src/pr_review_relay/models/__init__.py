"""
Data Models

PR 알림 릴레이의 핵심 데이터 모델들
"""

from .routing import RoutingRule, RepositoryRef
from .pull_request import (
    CIStatus,
    ReviewState,
    ReviewEvent,
    RawPullRequest,
    EnrichedPullRequest,
    DestinationBucket,
)

__all__ = [
    "RoutingRule",
    "RepositoryRef",
    "CIStatus",
    "ReviewState",
    "ReviewEvent",
    "RawPullRequest",
    "EnrichedPullRequest",
    "DestinationBucket",
]
