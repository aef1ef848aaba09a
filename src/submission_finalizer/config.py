"""
Configuration management for the submission finalizer.

Settings are read from environment variables (and an optional .env file).
Every backend setting defaults to empty: a missing value only fails the step
that needs it, at call time.
"""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from .errors import ConfigurationError

# S3 rejects multipart parts smaller than this, except the last one.
MIN_PART_SIZE_BYTES = 5 * 1024 * 1024


class FinalizerSettings(BaseSettings):
    """Lambda environment variables."""

    model_config = SettingsConfigDict(env_file='.env', extra='ignore')

    # Object storage
    ARTIFACT_BUCKET_NAME: str = ''
    ARTIFACT_EXTENSION: str = 'zip'
    STORAGE_PART_SIZE_BYTES: int = Field(default=8 * 1024 * 1024, ge=MIN_PART_SIZE_BYTES)
    AWS_REGION: str | None = None

    # Audit store
    AUDIT_TABLE_NAME: str = ''

    # Email (Mailgun)
    EMAIL_API_KEY: str = ''
    EMAIL_DOMAIN: str = ''
    EMAIL_SENDER: str = ''
    EMAIL_API_BASE_URL: str = 'https://api.mailgun.net/v3'
    NOTIFICATION_STATUS_BEST_EFFORT: bool = False

    # HTTP
    FETCH_TIMEOUT_SECONDS: float = Field(default=30.0, gt=0, le=900)
    EMAIL_TIMEOUT_SECONDS: float = Field(default=10.0, gt=0, le=120)

    # Logging
    LOG_LEVEL: str = 'INFO'
    LOG_JSON: bool = True

    @property
    def sender_address(self) -> str:
        """From: header for outgoing notifications."""
        if self.EMAIL_SENDER:
            return self.EMAIL_SENDER
        return f'Submission notifications <notifications@{self.EMAIL_DOMAIN}>'


def require_config(**values: str | None) -> None:
    """
    Raise ConfigurationError if any of the given settings is empty.

    Clients call this at the start of each operation so that missing
    configuration fails that step only.

    Usage:
        require_config(ARTIFACT_BUCKET_NAME=self.bucket)
    """
    missing = [name for name, value in values.items() if not value]
    if missing:
        raise ConfigurationError(
            f"Missing required configuration: {', '.join(missing)}",
            context={'missing': missing},
        )


@lru_cache
def get_settings() -> FinalizerSettings:
    """Cached settings singleton."""
    return FinalizerSettings()
