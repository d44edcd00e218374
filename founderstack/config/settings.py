"""
Configuration Management for FounderStack

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here.
This makes it easy to see what external dependencies exist and
ensures all required configuration is validated at startup.
"""

from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class StorageSettings(BaseSettings):
    """Local key-value storage configuration."""

    model_config = SettingsConfigDict(
        env_prefix="FOUNDERSTACK_STORAGE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    directory: Path = Field(
        default=Path.home() / ".founderstack",
        description="Directory holding one file per storage key"
    )
    state_key: str = Field(
        default="founderstack_db_v1",
        description="Key of the serialized application state"
    )
    session_key: str = Field(
        default="founderstack_session",
        description="Key of the persisted view/tab/selected-company context"
    )
    quota_bytes: int = Field(
        default=5 * 1024 * 1024,
        ge=1024,
        description="Maximum size of a single stored value"
    )
    save_debounce_seconds: float = Field(
        default=0.0,
        ge=0.0,
        le=10.0,
        description="Delay used to coalesce rapid successive saves"
    )

    @field_validator("state_key", "session_key")
    @classmethod
    def validate_key(cls, v: str) -> str:
        """Keys become file names, so path separators are not allowed."""
        if not v or "/" in v or "\\" in v:
            raise ValueError(f"Invalid storage key: {v!r}")
        return v


class GeminiSettings(BaseSettings):
    """Gemini LLM configuration for the suggestion service."""

    model_config = SettingsConfigDict(
        env_prefix="GEMINI_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # Optional: without a key every suggestion degrades to its fallback
    api_key: Optional[str] = Field(
        default=None,
        description="Gemini API key"
    )
    model_name: str = Field(
        default="gemini-2.0-flash",
        description="Model used for quotes, insights and short completions"
    )
    reasoning_model_name: str = Field(
        default="gemini-2.5-pro",
        description="Model used for portfolio questions"
    )
    max_tokens: int = Field(
        default=1024,
        ge=64,
        le=8192,
        description="Maximum tokens in response"
    )
    temperature: float = Field(
        default=0.7,
        ge=0.0,
        le=2.0,
        description="Default sampling temperature"
    )
    request_timeout_seconds: float = Field(
        default=20.0,
        gt=0.0,
        description="Upper bound for a single suggestion call"
    )
    max_attempts: int = Field(
        default=2,
        ge=1,
        le=5,
        description="Attempts for transient transport failures"
    )

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key)


class AppSettings(BaseSettings):
    """
    Main application settings.

    Loads configuration from environment variables and .env file.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # Environment
    app_environment: str = Field(
        default="development",
        description="Application environment"
    )
    debug_mode: bool = Field(
        default=False,
        description="Enable debug mode"
    )

    # Logging
    log_level: str = Field(
        default="INFO",
        description="Minimum level for structured logs"
    )
    log_json: bool = Field(
        default=True,
        description="Render logs as JSON (console renderer otherwise)"
    )
    audit_history_size: int = Field(
        default=200,
        ge=0,
        le=10000,
        description="How many audit events are kept in memory"
    )

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unknown log level: {v}")
        return level


class Settings(BaseSettings):
    """
    Root settings container.

    Aggregates all sub-settings for easy access.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    @property
    def storage(self) -> StorageSettings:
        return StorageSettings()

    @property
    def gemini(self) -> GeminiSettings:
        return GeminiSettings()

    @property
    def app(self) -> AppSettings:
        return AppSettings()


@lru_cache()
def get_settings() -> Settings:
    """
    Get application settings (cached).

    Uses LRU cache to ensure settings are only loaded once.
    Call get_settings.cache_clear() to reload if needed.
    """
    return Settings()


def validate_all_settings() -> dict[str, bool]:
    """
    Validate all settings are properly configured.

    Returns a dict of {setting_name: is_valid}.
    Useful for startup checks.
    """
    results = {}

    settings = get_settings()

    for name in ("storage", "gemini", "app"):
        try:
            _ = getattr(settings, name)
            results[name] = True
        except Exception as e:
            results[name] = False
            results[f"{name}_error"] = str(e)

    return results
