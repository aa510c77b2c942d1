"""The sync job: count the authenticated user's commits across owned repos."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional

from shared.logger import get_logger

from .config import DEFAULT_PAGE_SIZE
from .fetcher import GitHubClient, Repository
from .store import MetricsStore
from .throttle import NoThrottle, Throttle

logger = get_logger(__name__)


@dataclass
class RepoOutcome:
    """Result of looking up the user's contributions on one repository."""

    repository: Repository
    contributions: int = 0
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass
class SyncResult:
    """Aggregate of one sync run."""

    username: str
    total_commits: int
    total_repos: int
    processed_repos: int
    failures: List[RepoOutcome] = field(default_factory=list)
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def to_payload(self) -> Dict[str, Any]:
        """Response body returned by the trigger endpoint."""
        return {
            "success": True,
            "username": self.username,
            "totalCommits": self.total_commits,
            "totalRepos": self.total_repos,
            "timestamp": format_timestamp(self.timestamp),
        }


def format_timestamp(dt: datetime) -> str:
    """UTC ISO-8601 with milliseconds and a Z suffix."""
    return dt.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def fold_outcomes(username: str, outcomes: Iterable[RepoOutcome]) -> SyncResult:
    """
    Combine per-repository outcomes into a SyncResult.

    Failed outcomes add nothing to the commit total but still count as
    processed repositories.
    """
    total_commits = 0
    processed = 0
    failures = []

    for outcome in outcomes:
        processed += 1
        if outcome.ok:
            total_commits += outcome.contributions
        else:
            failures.append(outcome)

    return SyncResult(
        username=username,
        total_commits=total_commits,
        total_repos=processed,
        processed_repos=processed,
        failures=failures,
    )


class SyncJob:
    """
    Recompute commit and repository totals and store them.

    Every run is a full re-scan; the stored row is overwritten with the new
    absolute totals. Requests are made strictly one after another, each
    preceded by the throttle.
    """

    def __init__(
        self,
        client: GitHubClient,
        store: MetricsStore,
        throttle: Optional[Throttle] = None,
        page_size: int = DEFAULT_PAGE_SIZE,
    ):
        self.client = client
        self.store = store
        self.throttle = throttle or NoThrottle()
        self.page_size = page_size

    def fetch_repositories(self) -> List[Repository]:
        """
        Collect every owned repository, page by page.

        A page shorter than the page size is the last one.
        """
        repositories: List[Repository] = []
        page = 1

        while True:
            batch = self.client.list_owned_repositories(per_page=self.page_size, page=page)
            logger.info(f"Fetched page {page}: {len(batch)} repositories")
            repositories.extend(batch)

            if len(batch) < self.page_size:
                break

            page += 1
            self.throttle.wait()

        logger.info(f"Found {len(repositories)} repositories across {page} pages")
        return repositories

    def count_contributions(self, repository: Repository, username: str) -> RepoOutcome:
        """Look up the user's contribution count on one repository."""
        self.throttle.wait()
        logger.info(f"Processing repository: {repository.name}")

        try:
            contributors = self.client.list_contributors(repository.owner, repository.name)
        except Exception as e:
            logger.warning(f"Failed to fetch commits for repository {repository.name}: {e}")
            return RepoOutcome(repository=repository, error=str(e) or type(e).__name__)

        for contributor in contributors:
            if contributor.login == username:
                logger.info(f"Added {contributor.contributions} commits from {repository.name}")
                return RepoOutcome(repository=repository, contributions=contributor.contributions)

        return RepoOutcome(repository=repository, contributions=0)

    def run(self) -> SyncResult:
        """
        Run the sync end to end.

        Returns:
            SyncResult of the run

        Raises:
            GitHubAPIError: identity or repository listing failed
            MetricsStoreError: the final write failed
        """
        username = self.client.get_authenticated_user()
        logger.info(f"Fetching commits for user: {username}")

        repositories = self.fetch_repositories()
        outcomes = [self.count_contributions(repo, username) for repo in repositories]
        result = fold_outcomes(username, outcomes)

        succeeded = result.processed_repos - len(result.failures)
        logger.info(f"Successfully processed {succeeded}/{result.total_repos} repositories")
        logger.info(f"Total commits found: {result.total_commits}")

        self.store.write_metrics(commits=result.total_commits, repos=result.total_repos)
        return result
