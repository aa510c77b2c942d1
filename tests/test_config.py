"""Tests for Settings."""

import pytest

from metrics_sync.config import DEFAULT_API_URL, DEFAULT_REQUEST_DELAY, Settings
from metrics_sync.errors import ConfigurationError


class TestSettings:
    """Test building settings from the environment."""

    def test_from_env(self):
        settings = Settings.from_env(
            {
                "GITHUB_TOKEN": "gh",
                "DATABASE_URL": "sqlite:///metrics.db",
                "CRON_SECRET": "s3cret",
                "SYNC_REQUEST_DELAY": "0.5",
                "GITHUB_API_URL": "https://github.example.com/api/v3/",
                "LOG_LEVEL": "debug",
            }
        )

        assert settings.github_token == "gh"
        assert settings.database_url == "sqlite:///metrics.db"
        assert settings.cron_secret == "s3cret"
        assert settings.request_delay == 0.5
        assert settings.api_url == "https://github.example.com/api/v3"
        assert settings.log_level == "DEBUG"

    def test_defaults(self):
        settings = Settings.from_env({})

        assert settings.github_token is None
        assert settings.database_url is None
        assert settings.cron_secret is None
        assert settings.api_url == DEFAULT_API_URL
        assert settings.request_delay == DEFAULT_REQUEST_DELAY
        assert settings.page_size == 100

    def test_empty_values_are_missing(self):
        settings = Settings.from_env({"GITHUB_TOKEN": "", "DATABASE_URL": ""})
        assert settings.github_token is None
        assert settings.database_url is None

    @pytest.mark.parametrize("value", ["abc", "-1"])
    def test_invalid_delay(self, value):
        with pytest.raises(ConfigurationError, match="SYNC_REQUEST_DELAY"):
            Settings.from_env({"SYNC_REQUEST_DELAY": value})

    def test_require_raises_when_missing(self):
        settings = Settings()
        with pytest.raises(ConfigurationError, match="GITHUB_TOKEN"):
            settings.require_github_token()
        with pytest.raises(ConfigurationError, match="DATABASE_URL"):
            settings.require_database_url()

    def test_with_overrides_skips_none(self):
        settings = Settings(github_token="env-token", database_url="sqlite://")
        overridden = settings.with_overrides(github_token="flag-token", database_url=None)

        assert overridden.github_token == "flag-token"
        assert overridden.database_url == "sqlite://"
