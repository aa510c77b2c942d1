"""GitHub Metrics Sync - cache a GitHub account's commit and repository counts."""

from .config import Settings
from .fetcher import Contributor, GitHubClient, Repository
from .job import RepoOutcome, SyncJob, SyncResult
from .store import MetricsRecord, MetricsStore

__all__ = [
    "Contributor",
    "GitHubClient",
    "MetricsRecord",
    "MetricsStore",
    "RepoOutcome",
    "Repository",
    "Settings",
    "SyncJob",
    "SyncResult",
]
