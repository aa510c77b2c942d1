"""Settings for the metrics sync job, built once from the environment."""

import os
from dataclasses import dataclass, replace
from typing import Mapping, Optional

from .errors import ConfigurationError

DEFAULT_API_URL = "https://api.github.com"
DEFAULT_REQUEST_DELAY = 0.1  # seconds
DEFAULT_PAGE_SIZE = 100


@dataclass(frozen=True)
class Settings:
    """
    Runtime configuration.

    All three secrets are optional at construction time so the web app can
    start without them; each ``require_*`` accessor raises
    ``ConfigurationError`` on first use when its value is missing.
    """

    github_token: Optional[str] = None
    database_url: Optional[str] = None
    cron_secret: Optional[str] = None
    api_url: str = DEFAULT_API_URL
    request_delay: float = DEFAULT_REQUEST_DELAY
    page_size: int = DEFAULT_PAGE_SIZE
    log_level: str = "INFO"

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        """
        Build settings from environment variables.

        Args:
            environ: Mapping to read from (defaults to ``os.environ``)

        Returns:
            Settings instance
        """
        env = os.environ if environ is None else environ

        delay_raw = env.get("SYNC_REQUEST_DELAY")
        try:
            delay = float(delay_raw) if delay_raw else DEFAULT_REQUEST_DELAY
        except ValueError:
            raise ConfigurationError(f"SYNC_REQUEST_DELAY must be a number, got: {delay_raw}")
        if delay < 0:
            raise ConfigurationError("SYNC_REQUEST_DELAY must not be negative")

        return cls(
            github_token=env.get("GITHUB_TOKEN") or None,
            database_url=env.get("DATABASE_URL") or None,
            cron_secret=env.get("CRON_SECRET") or None,
            api_url=(env.get("GITHUB_API_URL") or DEFAULT_API_URL).rstrip("/"),
            request_delay=delay,
            log_level=(env.get("LOG_LEVEL") or "INFO").upper(),
        )

    def with_overrides(self, **overrides) -> "Settings":
        """Return a copy with the non-None overrides applied (CLI flags)."""
        values = {k: v for k, v in overrides.items() if v is not None}
        return replace(self, **values)

    def require_github_token(self) -> str:
        if not self.github_token:
            raise ConfigurationError("GITHUB_TOKEN environment variable is not set")
        return self.github_token

    def require_database_url(self) -> str:
        if not self.database_url:
            raise ConfigurationError("DATABASE_URL environment variable is not set")
        return self.database_url
