"""Tests for environment-driven settings."""

from pathlib import Path

import pytest
from pydantic import ValidationError

from founderstack.config import (
    AppSettings,
    GeminiSettings,
    StorageSettings,
    get_settings,
    validate_all_settings,
)


@pytest.fixture(autouse=True)
def fresh_settings():
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


class TestSettings:

    def test_storage_defaults(self, monkeypatch):
        monkeypatch.delenv("FOUNDERSTACK_STORAGE_DIRECTORY", raising=False)
        settings = StorageSettings()
        assert settings.state_key == "founderstack_db_v1"
        assert settings.quota_bytes == 5 * 1024 * 1024
        assert settings.directory == Path.home() / ".founderstack"

    def test_storage_from_env(self, monkeypatch, tmp_path):
        monkeypatch.setenv("FOUNDERSTACK_STORAGE_DIRECTORY", str(tmp_path))
        monkeypatch.setenv("FOUNDERSTACK_STORAGE_SAVE_DEBOUNCE_SECONDS", "0.5")
        settings = StorageSettings()
        assert settings.directory == tmp_path
        assert settings.save_debounce_seconds == 0.5

    def test_key_with_separator_rejected(self):
        with pytest.raises(ValidationError):
            StorageSettings(state_key="../escape")

    def test_gemini_without_key(self, monkeypatch):
        monkeypatch.delenv("GEMINI_API_KEY", raising=False)
        assert GeminiSettings(api_key=None).is_configured is False
        assert GeminiSettings(api_key="k").is_configured is True

    def test_log_level_normalised(self):
        assert AppSettings(log_level="debug").log_level == "DEBUG"
        with pytest.raises(ValidationError):
            AppSettings(log_level="chatty")

    def test_validate_all_settings(self, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "chatty")
        results = validate_all_settings()
        assert results["storage"] is True
        assert results["gemini"] is True
        assert results["app"] is False
        assert "app_error" in results


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
