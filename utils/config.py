"""
Configuration Utility - Environment Variables Management

Centralized configuration loading from .env files using pydantic-settings.
Type-safe access to all environment variables.

Usage:
    from utils.config import settings

    bucket = settings.S3_OUTPUT_BUCKET_NAME
    queue = settings.SQS_QUEUE_NAME
"""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    # AWS Configuration
    AWS_REGION: str = Field(default="us-east-1")
    AWS_ENDPOINT_URL: str | None = Field(default=None)  # e.g. http://localhost:4566 for LocalStack

    # SQS Configuration
    SQS_QUEUE_NAME: str = Field(default="transactions-queue")
    SQS_QUEUE_URL: str | None = Field(default=None)
    SQS_WAIT_TIME_SECONDS: int = Field(default=20)
    SQS_MAX_MESSAGES: int = Field(default=10)
    SQS_VISIBILITY_TIMEOUT: int = Field(default=30)

    # S3 Configuration
    S3_OUTPUT_BUCKET_NAME: str = Field(default="processed-data-bucket")
    S3_REJECTED_BUCKET_NAME: str = Field(default="")

    # Publisher Configuration
    INBOX_DIR: str = Field(default="/app/data/inbox")
    ARCHIVE_DIR: str = Field(default="/app/data/archive")
    PUBLISH_SCHEDULE_CRON: str = Field(default="*/5 * * * *")
    PUBLISH_MAX_RETRIES: int = Field(default=3)

    # Logging Configuration
    LOG_LEVEL: str = Field(default="INFO")
    LOG_FORMAT: str = Field(default="json")

    # Application Metadata
    ENVIRONMENT: str = Field(default="production")
    APP_NAME: str = Field(default="transaction-consumer")
    APP_VERSION: str = Field(default="0.1.0")


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance.

    Returns:
        Singleton Settings instance
    """
    return Settings()


# Global settings instance
settings = get_settings()
