"""
GitHub Integration Layer

This module provides GitHub API access for open pull request listing
and per-PR detail, status and review lookups.
"""

from .client import GitHubClient, GitHubAPIError
from .parser import PullRequestParser

__all__ = ['GitHubClient', 'GitHubAPIError', 'PullRequestParser']
