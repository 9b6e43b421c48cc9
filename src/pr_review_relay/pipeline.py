"""
Pull Request Pipeline

Orchestrates one relay run: list open PRs for every configured
repository, route them by label, enrich the matches with size, CI and
review data, and bucket them per destination.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from .config import AppConfig
from .github.client import GitHubClient, GitHubAPIError
from .github.parser import PullRequestParser
from .models.pull_request import DestinationBucket, EnrichedPullRequest, RawPullRequest
from .models.routing import RepositoryRef
from .review.matcher import RuleMatcher
from .review.state import reduce_review_state


logger = logging.getLogger(__name__)


class FetchError(Exception):
    """Listing open PRs for one repository failed."""
    def __init__(self, repository: str, cause: Exception):
        super().__init__(f"Failed to list PRs for {repository}: {cause}")
        self.repository = repository
        self.cause = cause


class EnrichError(Exception):
    """Fetching detail, status or reviews for one PR failed."""
    def __init__(self, repository: str, pr_number: int, cause: Exception):
        super().__init__(f"Failed to enrich {repository}#{pr_number}: {cause}")
        self.repository = repository
        self.pr_number = pr_number
        self.cause = cause


@dataclass
class FetchResult:
    """Result of one pipeline run."""
    buckets: Dict[str, DestinationBucket] = field(default_factory=dict)
    failed_repositories: List[FetchError] = field(default_factory=list)
    failed_items: List[EnrichError] = field(default_factory=list)

    @property
    def empty(self) -> bool:
        """True when no PR matched any routing rule."""
        return not self.buckets

    @property
    def total_items(self) -> int:
        return sum(len(bucket) for bucket in self.buckets.values())


class PullRequestPipeline:
    """
    Fetch & enrich pipeline.

    Repositories are processed in configured order and PRs in listing
    order. The three detail calls for a matched PR run concurrently.
    A listing failure skips that repository; an enrichment failure
    skips that single PR. Neither stops the rest of the run.
    """

    def __init__(self, client: GitHubClient, config: AppConfig, parser: Optional[PullRequestParser] = None):
        """
        Initialize pipeline.

        Args:
            client: Authenticated GitHub client
            config: Validated application config
            parser: Optional response parser
        """
        self.client = client
        self.config = config
        self.parser = parser or PullRequestParser()
        self.matcher = RuleMatcher(config.rules)

    async def fetch_buckets(self) -> FetchResult:
        """
        Run the pipeline over every configured repository.

        Returns:
            FetchResult with buckets keyed by destination id
        """
        result = FetchResult()

        for repository in self.config.repositories:
            try:
                pull_requests = await self._list_pull_requests(repository)
            except FetchError as e:
                logger.error(f"❌ {e}")
                result.failed_repositories.append(e)
                continue

            await self._process_repository(repository, pull_requests, result)

        if result.empty:
            logger.info("✅ No matching PRs found.")
        else:
            logger.info(
                f"Collected {result.total_items} PR entries for {len(result.buckets)} destination(s)"
            )

        return result

    async def _list_pull_requests(self, repository: RepositoryRef) -> List[RawPullRequest]:
        logger.info(f"🔍 Fetching PRs for {repository.full_name}...")

        try:
            pulls_data = await self.client.list_open_pull_requests(
                repository.owner,
                repository.name,
                self.config.github.per_page,
            )
            return self.parser.parse_pull_requests(pulls_data)
        except (GitHubAPIError, KeyError, TypeError, ValueError) as e:
            raise FetchError(repository.full_name, e) from e

    async def _process_repository(
        self,
        repository: RepositoryRef,
        pull_requests: List[RawPullRequest],
        result: FetchResult
    ) -> None:
        for pr in pull_requests:
            if pr.draft:
                continue

            matched_rules = self.matcher.match(pr.labels)
            if not matched_rules:
                continue

            # same repository listed twice in the config
            if all(self._already_bucketed(result, rule.destination_id, repository, pr) for rule in matched_rules):
                logger.debug(f"Skipping {repository.full_name}#{pr.number}, already collected")
                continue

            try:
                enriched = await self.enrich(repository, pr)
            except EnrichError as e:
                logger.error(f"❌ {e}")
                result.failed_items.append(e)
                continue

            for rule in matched_rules:
                bucket = result.buckets.get(rule.destination_id)
                if bucket is None:
                    bucket = DestinationBucket(rule=rule)
                    result.buckets[rule.destination_id] = bucket
                bucket.add(enriched)

    @staticmethod
    def _already_bucketed(result: FetchResult, destination_id: str, repository: RepositoryRef, pr: RawPullRequest) -> bool:
        bucket = result.buckets.get(destination_id)
        return bucket is not None and bucket.contains(repository.full_name, pr.number)

    async def enrich(self, repository: RepositoryRef, pr: RawPullRequest) -> EnrichedPullRequest:
        """
        Fetch detail, combined status and reviews for one PR concurrently.

        Raises:
            EnrichError: If any of the three lookups fails
        """
        logger.info(f"✨ Fetching details for PR {repository.full_name}#{pr.number}...")

        try:
            detail, status, reviews = await self._fetch_details(repository, pr)

            additions, deletions = self.parser.parse_size(detail)
            return EnrichedPullRequest(
                pull_request=pr,
                additions=additions,
                deletions=deletions,
                ci_status=self.parser.parse_ci_status(status),
                review_state=reduce_review_state(self.parser.parse_reviews(reviews)),
                requested_reviewers=self.parser.parse_requested_reviewers(detail),
                repository=repository.full_name,
            )
        except (GitHubAPIError, KeyError, TypeError, ValueError) as e:
            raise EnrichError(repository.full_name, pr.number, e) from e

    async def _fetch_details(self, repository: RepositoryRef, pr: RawPullRequest) -> Tuple[Dict, Dict, List[Dict]]:
        owner, name = repository.owner, repository.name
        detail, status, reviews = await asyncio.gather(
            self.client.get_pull_request(owner, name, pr.number),
            self.client.get_combined_status(owner, name, pr.head_sha),
            self.client.list_reviews(owner, name, pr.number),
        )
        return detail, status, reviews
