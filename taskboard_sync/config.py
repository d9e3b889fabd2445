"""
Configuration management for Taskboard Sync.
"""

from pathlib import Path
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings."""

    model_config = SettingsConfigDict(
        env_prefix="TASKBOARD_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Application
    debug: bool = Field(
        default=False,
        description="Log at DEBUG unless a level is given explicitly.",
    )

    # Backend
    endpoint_url: Optional[str] = Field(
        default=None,
        description="Spreadsheet endpoint used when no connection is stored in the session.",
    )
    sync_timeout_seconds: float = Field(default=30.0, gt=0)

    # Sync loops
    auto_push_interval_seconds: float = Field(default=5.0, gt=0)
    debounce_seconds: float = Field(default=10.0, ge=0)
    auto_pull_interval_seconds: float = Field(
        default=60.0,
        gt=0,
        description="Some deployments pull every 300 seconds instead.",
    )

    # Session storage
    session_file: Path = Field(default=Path.home() / ".taskboard" / "session.json")

    # Logging
    log_level: str = Field(default="INFO")
    log_format: str = Field(default="console", description="'console' or 'json'")


# Global settings instance
settings = Settings()


def get_settings() -> Settings:
    """Get application settings."""
    return settings
