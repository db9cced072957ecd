"""Tests for configuration loading"""

import pytest
from pydantic import ValidationError

from tubegate.core import settings as settings_module
from tubegate.core.settings import Settings, get_settings, reload_settings, PLACEHOLDER_API_KEY


class TestSettings:
    """Test environment-sourced settings"""

    def test_defaults(self, monkeypatch):
        for name in ("API_KEY", "PORT", "HOST", "RATE_LIMIT_MAX_REQUESTS", "RATE_LIMIT_WINDOW_SECONDS"):
            monkeypatch.delenv(name, raising=False)

        settings = Settings(_env_file=None)

        assert settings.port == 3000
        assert settings.host == "0.0.0.0"
        assert settings.api_key == PLACEHOLDER_API_KEY
        assert settings.uses_placeholder_api_key is True
        assert settings.rate_limit_max_requests == 60
        assert settings.rate_limit_window_seconds == 60
        assert settings.search_result_limit == 10
        assert settings.debug is False
        assert settings.log_file is None

    def test_environment_overrides(self, monkeypatch):
        monkeypatch.setenv("PORT", "8080")
        monkeypatch.setenv("API_KEY", "s3cret")
        monkeypatch.setenv("LOG_LEVEL", "debug")
        monkeypatch.setenv("RATE_LIMIT_MAX_REQUESTS", "5")

        settings = Settings(_env_file=None)

        assert settings.port == 8080
        assert settings.api_key == "s3cret"
        assert settings.uses_placeholder_api_key is False
        assert settings.log_level == "DEBUG"
        assert settings.rate_limit_max_requests == 5

    def test_invalid_log_level(self):
        with pytest.raises(ValidationError):
            Settings(_env_file=None, log_level="LOUD")

    def test_invalid_environment(self):
        with pytest.raises(ValidationError):
            Settings(_env_file=None, environment="qa")

    def test_empty_api_key_rejected(self):
        with pytest.raises(ValidationError):
            Settings(_env_file=None, api_key="")

    def test_non_positive_rate_limit_rejected(self):
        with pytest.raises(ValidationError):
            Settings(_env_file=None, rate_limit_max_requests=0)

    def test_environment_properties(self):
        assert Settings(_env_file=None, environment="production").is_production
        assert Settings(_env_file=None, environment="development").is_development

    def test_get_settings_is_cached(self, monkeypatch):
        monkeypatch.setattr(settings_module, "_settings", None)
        monkeypatch.setenv("PORT", "4000")

        first = get_settings()
        monkeypatch.setenv("PORT", "5000")

        assert get_settings() is first
        assert get_settings().port == 4000
        assert reload_settings().port == 5000
