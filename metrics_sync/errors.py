"""Exception types raised by the metrics sync components."""

from typing import Optional


class MetricsSyncError(Exception):
    """Base class for all metrics sync errors."""


class ConfigurationError(MetricsSyncError):
    """A required setting is missing or invalid."""


class GitHubAPIError(MetricsSyncError):
    """A GitHub API call failed (HTTP error status or network failure)."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class MetricsStoreError(MetricsSyncError):
    """Reading or writing the metrics record failed."""
