"""Configuration settings for Job-Trail."""

from pathlib import Path
from typing import Annotated

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    All settings have sensible defaults and can be overridden via
    environment variables or a .env file.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Storage
    db_path: Path = Field(
        default=Path("./data/jobtrail.db"),
        description="Path to the SQLite database holding applications, contacts and logs",
    )

    default_user: str = Field(
        default="local",
        description="User id the command line acts as when --user is not given",
    )

    # Activity log
    activity_log_limit: Annotated[int, Field(gt=0)] = Field(
        default=50,
        description="Default number of entries returned by the recent activity feed",
    )

    # Analytics
    count_applied_as_response: bool = Field(
        default=False,
        description=(
            "If True, every recognized status, including 'applied' and "
            "'withdrawn', counts as responded in the per-source response rate "
            "(legacy behaviour)"
        ),
    )

    # Logging
    log_level: str = Field(
        default="INFO",
        description="Logging level: DEBUG, INFO, WARNING, ERROR",
    )

    @field_validator("log_level", mode="before")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level is a known level."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if v.upper() not in valid_levels:
            raise ValueError(f"Invalid log level: {v}. Must be one of {valid_levels}")
        return v.upper()


# Singleton instance for easy import
_settings: Settings | None = None


def get_settings() -> Settings:
    """Get the application settings singleton."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def reset_settings() -> None:
    """Reset the settings singleton (useful for testing)."""
    global _settings
    _settings = None
