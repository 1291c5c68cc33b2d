"""Application configuration settings."""

from __future__ import annotations

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

ENV_FILE = ".env"
ENV_FILE_ENCODING = "utf-8"


class Settings(BaseSettings):
    """Application configuration values loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=ENV_FILE, env_file_encoding=ENV_FILE_ENCODING, extra="ignore"
    )

    database_url: str = Field(
        default="sqlite:///./notifications.db",
        description="Database connection URL used by SQLAlchemy to connect to the DB",
        min_length=1,
    )
    app_timezone: str = Field(
        default="UTC",
        description="IANA timezone used for server-side timestamps",
    )
    channel_topic_prefix: str = Field(
        default="notifications",
        description="Prefix for the channel topics notifications are published to",
        min_length=1,
    )
    publish_max_attempts: int = Field(
        default=1,
        description="Publish attempts made before a notification is marked as failed",
        ge=1,
    )
    publish_retry_backoff_seconds: float = Field(
        default=0.5,
        description="Base delay between publish attempts, doubled on every retry",
        ge=0,
    )
    reconcile_workers: int = Field(
        default=4,
        description="Worker threads used to record publish outcomes",
        ge=1,
    )


@lru_cache
def get_settings() -> Settings:
    """Return cached application settings instance."""

    return Settings()


def reset_settings_cache() -> None:
    """Clear the settings cache to force reloading from the environment."""

    get_settings.cache_clear()


__all__ = ["Settings", "get_settings", "reset_settings_cache"]
