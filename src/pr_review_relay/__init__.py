"""
PR Review Relay

라벨 기반으로 열린 Pull Request를 팀 채팅 채널(Slack, Google Chat)에 알려주는 배치 작업
"""

__version__ = "1.0.0"

from .pipeline import PullRequestPipeline, FetchResult

__all__ = ["PullRequestPipeline", "FetchResult"]
