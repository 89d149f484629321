"""
Unit Tests for Configuration Management
Tests for docvault/core/config.py
"""

import pytest
from pydantic import ValidationError

from docvault.core.config import Settings, settings

SECRET = "x" * 32


@pytest.mark.unit
class TestSettingsDefaults:

    def test_upload_limits(self):
        fresh = Settings(SECRET_KEY=SECRET)
        assert fresh.MAX_FILE_SIZE == 10485760
        assert fresh.MAX_FILE_SIZE_MB == 10
        assert "application/pdf" in fresh.ALLOWED_FILE_TYPES
        assert "image/png" in fresh.ALLOWED_FILE_TYPES

    def test_rate_limit_defaults(self):
        fresh = Settings(SECRET_KEY=SECRET, RATE_LIMIT_MAX_REQUESTS=100)
        assert fresh.RATE_LIMIT_WINDOW_SECONDS == 900
        assert fresh.RATE_LIMIT_MAX_REQUESTS == 100

    def test_token_lifetime_is_seven_days(self):
        assert Settings(SECRET_KEY=SECRET).JWT_ACCESS_TOKEN_EXPIRE_MINUTES == 7 * 24 * 60

    def test_dispatch_disabled_by_default(self):
        assert Settings(SECRET_KEY=SECRET, INGESTION_DISPATCH_ENABLED=False).INGESTION_DISPATCH_ENABLED is False

    def test_test_environment_loaded(self):
        assert settings.ENVIRONMENT == "test"


@pytest.mark.unit
class TestSettingsValidation:

    def test_short_secret_rejected(self):
        with pytest.raises(ValidationError):
            Settings(SECRET_KEY="short")

    def test_unknown_environment_rejected(self):
        with pytest.raises(ValidationError):
            Settings(SECRET_KEY=SECRET, ENVIRONMENT="qa")

    def test_log_level_normalized(self):
        assert Settings(SECRET_KEY=SECRET, LOG_LEVEL="debug").LOG_LEVEL == "DEBUG"

    def test_unknown_log_level_rejected(self):
        with pytest.raises(ValidationError):
            Settings(SECRET_KEY=SECRET, LOG_LEVEL="verbose")

    @pytest.mark.parametrize(
        "url, expected",
        [
            ("postgres://u:p@db/docs", "postgresql+asyncpg://u:p@db/docs"),
            ("postgresql://u:p@db/docs", "postgresql+asyncpg://u:p@db/docs"),
            ("postgresql+asyncpg://u:p@db/docs", "postgresql+asyncpg://u:p@db/docs"),
            ("sqlite+aiosqlite:///./x.db", "sqlite+aiosqlite:///./x.db"),
        ],
    )
    def test_database_url_gets_async_driver(self, url, expected):
        assert Settings(SECRET_KEY=SECRET, DATABASE_URL=url).DATABASE_URL == expected
