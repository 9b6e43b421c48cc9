"""
GitHub API Client

Handles GitHub API authentication and communication.
Provides the read-only pull request endpoints the relay needs:
open PR listing, PR detail, combined commit status and review list.
"""

import asyncio
import json
import logging
from typing import Dict, List, Optional

import aiohttp


logger = logging.getLogger(__name__)


class GitHubAPIError(Exception):
    """GitHub API related errors"""
    def __init__(self, message: str, status_code: Optional[int] = None, response_data: Optional[Dict] = None):
        super().__init__(message)
        self.status_code = status_code
        self.response_data = response_data


class GitHubClient:
    """
    Async GitHub API client with bearer authentication and error handling.

    All requests share one ``aiohttp.ClientSession`` on the running event
    loop. Use as an async context manager so the session is closed.
    No retries or rate-limit backoff are applied; the remaining quota
    reported by the API is tracked for logging only.
    """

    def __init__(
        self,
        token: str,
        base_url: str = "https://api.github.com",
        timeout: Optional[float] = 30,
        session: Optional[aiohttp.ClientSession] = None
    ):
        """
        Initialize GitHub client.

        Args:
            token: GitHub token (personal access token or CI token)
            base_url: GitHub API base URL (default: https://api.github.com)
            timeout: Total per-request timeout in seconds, None to wait indefinitely
            session: Optional pre-built session (must carry the auth headers)
        """
        if not token:
            raise ValueError("GitHub token is required")

        self.token = token
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout
        self.session = session
        self.rate_limit_remaining: Optional[int] = None

    async def __aenter__(self) -> "GitHubClient":
        if self.session is None:
            self.session = self._create_session()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    def _create_session(self) -> aiohttp.ClientSession:
        """Create aiohttp session with authentication."""
        return aiohttp.ClientSession(
            timeout=aiohttp.ClientTimeout(total=self.timeout),
            headers={
                'Authorization': f'Bearer {self.token}',
                'Accept': 'application/vnd.github+json',
                'User-Agent': 'PR-Review-Relay/1.0'
            },
        )

    def _update_rate_limit(self, headers) -> None:
        """Update rate limit information from response headers."""
        if 'X-RateLimit-Remaining' in headers:
            self.rate_limit_remaining = int(headers['X-RateLimit-Remaining'])
            if self.rate_limit_remaining <= 10:
                logger.warning(f"GitHub rate limit low: {self.rate_limit_remaining} requests remaining")

    async def _make_request(self, method: str, endpoint: str, **kwargs):
        """
        Make authenticated request to GitHub API.

        Args:
            method: HTTP method (GET, POST, etc.)
            endpoint: API endpoint (without base URL)
            **kwargs: Additional arguments for aiohttp

        Returns:
            Decoded JSON body

        Raises:
            GitHubAPIError: For transport failures and non-2xx responses
        """
        if self.session is None:
            self.session = self._create_session()

        url = f"{self.base_url}/{endpoint.lstrip('/')}"

        try:
            async with self.session.request(method, url, **kwargs) as response:
                self._update_rate_limit(response.headers)
                body = await response.text()
                status = response.status
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            logger.error(f"Request failed: {e!r}")
            raise GitHubAPIError(f"Request failed: {e!r}") from e

        if status >= 400:
            try:
                error_data = json.loads(body) if body else {}
            except ValueError:
                error_data = {'message': body}
            if not isinstance(error_data, dict):
                error_data = {'message': str(error_data)}
            raise GitHubAPIError(
                f"GitHub API error: {status} - {error_data.get('message', 'Unknown error')}",
                status_code=status,
                response_data=error_data
            )

        try:
            return json.loads(body)
        except ValueError as e:
            raise GitHubAPIError(f"Invalid JSON from {endpoint}: {e}", status_code=status) from e

    async def list_open_pull_requests(self, owner: str, repo: str, per_page: int = 100) -> List[Dict]:
        """
        List open pull requests, newest first.

        Only a single page is requested; anything beyond ``per_page``
        is not returned.

        Args:
            owner: Repository owner
            repo: Repository name
            per_page: Page size (GitHub maximum is 100)

        Returns:
            List of pull request data
        """
        logger.info(f"Listing open PRs for {owner}/{repo}")

        return await self._make_request(
            'GET',
            f'/repos/{owner}/{repo}/pulls',
            params={
                'state': 'open',
                'per_page': str(per_page),
                'sort': 'created',
                'direction': 'desc',
            }
        )

    async def get_pull_request(self, owner: str, repo: str, pr_number: int) -> Dict:
        """
        Get pull request information.

        Args:
            owner: Repository owner
            repo: Repository name
            pr_number: Pull request number

        Returns:
            Pull request data
        """
        logger.debug(f"Fetching PR {owner}/{repo}#{pr_number}")

        return await self._make_request('GET', f'/repos/{owner}/{repo}/pulls/{pr_number}')

    async def get_combined_status(self, owner: str, repo: str, ref: str) -> Dict:
        """Get the combined commit status for a ref."""
        logger.debug(f"Fetching combined status for {owner}/{repo}@{ref}")

        return await self._make_request('GET', f'/repos/{owner}/{repo}/commits/{ref}/status')

    async def list_reviews(self, owner: str, repo: str, pr_number: int) -> List[Dict]:
        """List reviews for a pull request in chronological order."""
        logger.debug(f"Fetching reviews for {owner}/{repo}#{pr_number}")

        return await self._make_request('GET', f'/repos/{owner}/{repo}/pulls/{pr_number}/reviews')

    async def close(self) -> None:
        if self.session is not None:
            await self.session.close()
            self.session = None
