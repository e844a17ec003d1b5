"""
Configuration Management for Expense Tracker

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here.
Every setting has a default so the core runs without any environment,
but anything can be overridden through the environment or a .env file.
"""

from functools import lru_cache
from pathlib import Path
from typing import Union

from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class StorageSettings(BaseSettings):
    """Embedded SQLite store configuration."""

    model_config = SettingsConfigDict(
        env_prefix="EXPENSE_TRACKER_DB_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    path: str = Field(
        default="expenses.db",
        description="Path to the SQLite database file"
    )
    timeout_seconds: float = Field(
        default=5.0,
        gt=0.0,
        le=60.0,
        description="How long SQLite waits on a locked database before failing"
    )

    @field_validator('path')
    @classmethod
    def validate_path(cls, v: str) -> str:
        """Warn if the database directory doesn't exist (SQLite won't create it)."""
        parent = Path(v).expanduser().parent
        if v != ":memory:" and not parent.exists():
            import warnings
            warnings.warn(
                f"Database directory not found at {parent}. "
                "Create it before running the application."
            )
        return v


class SecuritySettings(BaseSettings):
    """Password hashing and password policy configuration."""

    model_config = SettingsConfigDict(
        env_prefix="EXPENSE_TRACKER_SECURITY_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    bcrypt_rounds: int = Field(
        default=12,
        ge=4,
        le=31,
        description="bcrypt work factor (log2 of the number of rounds)"
    )
    password_min_length: int = Field(
        default=5,
        ge=1,
        description="Minimum password length accepted at signup"
    )


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

    # Aggregation behaviour
    strict_date_parsing: bool = Field(
        default=False,
        description="Raise on malformed expense dates instead of skipping them"
    )


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
    def security(self) -> SecuritySettings:
        return SecuritySettings()

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


def validate_all_settings() -> dict[str, Union[bool, str]]:
    """
    Load every settings section once and report which ones are usable.

    Returns {section: True/False}, plus {section}_error with the
    validation message for each section that failed. Meant for a
    startup check before create_app_components().
    """
    settings = get_settings()
    results: dict[str, Union[bool, str]] = {}

    for section in ("storage", "security", "app"):
        try:
            getattr(settings, section)
        except ValidationError as e:
            results[section] = False
            results[f"{section}_error"] = str(e)
        else:
            results[section] = True

    return results
