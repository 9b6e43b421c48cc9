"""
Routing Data Models

라벨 → 채널 라우팅 규칙과 저장소 참조 모델
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class RoutingRule:
    """라벨 하나를 목적지(웹훅) 하나에 연결하는 규칙"""
    label: str
    destination_id: str  # webhook URL을 담고 있는 환경 변수 이름 (예: WEBHOOK_BACKEND)
    display_name: str = ""

    def __post_init__(self):
        """데이터 검증"""
        if not self.label.strip():
            raise ValueError("Routing rule label cannot be empty")

    @property
    def has_destination(self) -> bool:
        """목적지가 지정되어 있는지 확인"""
        return bool(self.destination_id)


@dataclass(frozen=True)
class RepositoryRef:
    """owner/repo 형식의 저장소 참조"""
    owner: str
    name: str

    def __post_init__(self):
        """데이터 검증"""
        if not self.owner or not self.name:
            raise ValueError("Repository must be in format 'owner/repo'")

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.name}"

    def __str__(self) -> str:
        return self.full_name
