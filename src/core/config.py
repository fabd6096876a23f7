from __future__ import annotations

import json
from functools import lru_cache
from typing import Annotated, Any

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime configuration loaded from environment."""

    app_name: str = Field(default="CyberAssess API", validation_alias="APP_NAME")
    environment: str = Field(default="local", validation_alias="APP_ENV")
    log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")
    version: str = Field(default="0.1.0")
    jwt_secret: str = Field(default="replace-with-secure-secret", validation_alias="JWT_SECRET")
    jwt_algorithm: str = Field(default="HS256", validation_alias="JWT_ALGORITHM")
    access_token_ttl_seconds: int = Field(default=3600, validation_alias="ACCESS_TOKEN_TTL_SECONDS")
    admin_signup_enabled: bool = Field(default=True, validation_alias="ADMIN_SIGNUP_ENABLED")
    # Comma-separated list or a JSON array
    cors_origins: Annotated[tuple[str, ...], NoDecode] = Field(
        default=("http://localhost:3000",), validation_alias="CORS_ORIGINS"
    )

    database_url: str = Field(..., validation_alias="DATABASE_URL")
    storage_timeout_seconds: float = Field(default=30.0, validation_alias="STORAGE_TIMEOUT_SECONDS")

    # Submission retry schedule: 2s, 4s, 8s, 10s between 5 attempts
    submit_max_attempts: int = Field(default=5, validation_alias="SUBMIT_MAX_ATTEMPTS")
    submit_initial_backoff_seconds: float = Field(
        default=2.0, validation_alias="SUBMIT_INITIAL_BACKOFF_SECONDS"
    )
    submit_max_backoff_seconds: float = Field(
        default=10.0, validation_alias="SUBMIT_MAX_BACKOFF_SECONDS"
    )

    # Email notifications (Resend)
    resend_api_key: str = Field(default="", validation_alias="RESEND_API_KEY")
    resend_base_url: str = Field(default="https://api.resend.com", validation_alias="RESEND_BASE_URL")
    notify_from_email: str = Field(default="", validation_alias="NOTIFY_FROM_EMAIL")
    notify_internal_to: str = Field(default="", validation_alias="NOTIFY_INTERNAL_TO")
    notify_timeout_seconds: float = Field(default=30.0, validation_alias="NOTIFY_TIMEOUT_SECONDS")

    # Background jobs (RQ)
    redis_url: str = Field(default="redis://localhost:6379/0", validation_alias="REDIS_URL")
    redis_timeout_seconds: float = Field(default=5.0, validation_alias="REDIS_TIMEOUT_SECONDS")
    notify_queue_name: str = Field(default="notifications", validation_alias="NOTIFY_QUEUE_NAME")
    notify_job_timeout_seconds: int = Field(
        default=120, validation_alias="NOTIFY_JOB_TIMEOUT_SECONDS"
    )

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="allow")

    @field_validator("cors_origins", mode="before")
    @classmethod
    def _split_cors_origins(cls, value: Any) -> Any:
        if not isinstance(value, str):
            return value
        text = value.strip()
        if text.startswith("["):
            return json.loads(text)
        return tuple(origin.strip() for origin in text.split(",") if origin.strip())

    @field_validator("database_url")
    @classmethod
    def _require_database_url(cls, value: str) -> str:
        if not value or not value.strip():
            raise ValueError("DATABASE_URL is not configured")
        return value.strip()

    @property
    def async_database_url(self) -> str:
        """Convert database URL to async format (postgresql+asyncpg://)."""
        url = self.database_url
        # Hosted Postgres providers hand out postgres:// URLs
        if url.startswith("postgresql://"):
            url = url.replace("postgresql://", "postgresql+asyncpg://", 1)
        elif url.startswith("postgres://"):
            url = url.replace("postgres://", "postgresql+asyncpg://", 1)
        return url

    @property
    def notifications_configured(self) -> bool:
        return bool(self.resend_api_key and self.notify_from_email)


@lru_cache
def get_settings() -> Settings:
    """Return cached application settings.

    Raises a pydantic ``ValidationError`` when ``DATABASE_URL`` is missing,
    which aborts application startup.
    """
    return Settings()
