"""Pydantic Settings model for application configuration."""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Environment variable settings for the application."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    # Generic application-wide settings
    DEBUG: bool = False

    # GitLab API settings
    GITLAB_HOST: str | None = None
    GITLAB_TOKEN: str | None = None

    # Run settings
    MAX_WORKERS: int = 1
    REQUEST_TIMEOUT: float = 30.0
