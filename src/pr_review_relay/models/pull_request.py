"""
Pull Request Data Models

목록 API에서 받은 PR과 상세 정보로 보강된 PR 모델들
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import List, Tuple

from .routing import RoutingRule


DELETED_USER = "deleted-user"


class CIStatus:
    """Combined status API의 state 값"""
    SUCCESS = "success"
    FAILURE = "failure"
    PENDING = "pending"
    ERROR = "error"


class ReviewState(str, Enum):
    """리뷰 이벤트들을 하나로 합친 상태"""
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    CHANGES_REQUESTED = "CHANGES_REQUESTED"


@dataclass(frozen=True)
class ReviewEvent:
    """리뷰 목록 API의 개별 리뷰"""
    author: str
    state: str  # 'APPROVED', 'CHANGES_REQUESTED', 'COMMENTED', 'DISMISSED', ...


@dataclass(frozen=True)
class RawPullRequest:
    """PR 목록 API에서 받은 최소 정보"""
    number: int
    title: str
    html_url: str
    created_at: datetime
    author: str
    labels: Tuple[str, ...]
    draft: bool
    head_sha: str

    def __post_init__(self):
        """데이터 검증"""
        if self.number <= 0:
            raise ValueError("PR number must be positive")
        if self.created_at.tzinfo is None:
            raise ValueError("created_at must be timezone-aware")


@dataclass(frozen=True)
class EnrichedPullRequest:
    """크기 / CI / 리뷰 정보가 추가된 PR"""
    pull_request: RawPullRequest
    additions: int
    deletions: int
    ci_status: str
    review_state: ReviewState
    requested_reviewers: Tuple[str, ...]
    repository: str

    def __post_init__(self):
        """데이터 검증"""
        if self.additions < 0 or self.deletions < 0:
            raise ValueError("Addition and deletion counts must be non-negative")
        if '/' not in self.repository:
            raise ValueError("Repository must be in format 'owner/repo'")

    # 렌더러에서 자주 쓰는 필드들
    @property
    def number(self) -> int:
        return self.pull_request.number

    @property
    def title(self) -> str:
        return self.pull_request.title

    @property
    def html_url(self) -> str:
        return self.pull_request.html_url

    @property
    def created_at(self) -> datetime:
        return self.pull_request.created_at

    @property
    def author(self) -> str:
        return self.pull_request.author

    @property
    def size(self) -> str:
        return f"+{self.additions} / -{self.deletions}"


@dataclass
class DestinationBucket:
    """목적지 하나로 보낼 PR 묶음"""
    rule: RoutingRule
    items: List[EnrichedPullRequest] = field(default_factory=list)

    def add(self, item: EnrichedPullRequest) -> bool:
        """
        PR을 추가한다. 같은 저장소의 같은 PR 번호가 이미 있으면 무시한다.

        Returns:
            추가되었으면 True
        """
        if self.contains(item.repository, item.number):
            return False
        self.items.append(item)
        return True

    def contains(self, repository: str, number: int) -> bool:
        """같은 저장소의 같은 PR 번호가 이미 있는지 확인"""
        return any(
            existing.repository == repository and existing.number == number
            for existing in self.items
        )

    def __len__(self) -> int:
        return len(self.items)
