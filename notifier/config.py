"""Application configuration settings."""

from __future__ import annotations

from functools import lru_cache

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

ENV_FILE = ".env"
ENV_FILE_ENCODING = "utf-8"

DEFAULT_ONESIGNAL_API_BASE = "https://onesignal.com/api/v1"


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
    secret_key: str = Field(
        description="Secret key used to verify the JWT access tokens", min_length=1
    )
    jwt_algorithm: str = Field(
        default="HS256", description="Algorithm used to sign access tokens"
    )
    app_timezone: str = Field(
        default="UTC", description="Timezone used for persisted timestamps"
    )
    log_level: str = Field(default="INFO", description="Root logging level")

    sendgrid_api_key: str | None = Field(
        default=None,
        description="SendGrid API key used for sending notification emails via the REST API",
    )
    sendgrid_sender: str | None = Field(
        default=None,
        description="Email address that will appear as the sender of notification emails",
        min_length=3,
    )

    onesignal_app_id: str | None = Field(
        default=None, description="OneSignal application identifier"
    )
    onesignal_rest_api_key: str | None = Field(
        default=None, description="OneSignal REST API key"
    )
    onesignal_api_base: str = Field(
        default=DEFAULT_ONESIGNAL_API_BASE,
        description="Base URL of the OneSignal REST API",
    )
    onesignal_timeout_seconds: float = Field(
        default=30.0, gt=0, description="Timeout applied to OneSignal HTTP requests"
    )

    enable_email_notifications: bool = Field(
        default=True, description="Process-wide switch for the email channel"
    )
    enable_push_notifications: bool = Field(
        default=True, description="Process-wide switch for the push channel"
    )

    notification_queue_batch_size: int = Field(
        default=10, gt=0, description="Maximum number of queue messages per batch"
    )
    notification_queue_batch_wait_seconds: float = Field(
        default=1.0,
        ge=0,
        description="Seconds to wait for a batch to fill once its first message arrives",
    )
    notification_queue_max_buffer: int = Field(
        default=1000, gt=0, description="Maximum number of messages buffered in memory"
    )
    notification_ingest_token: str | None = Field(
        default=None,
        description="Shared secret required by the internal event ingestion endpoint",
    )
    allowed_ws_origins: str = Field(
        default="",
        description="Comma separated origins allowed to open the notifications websocket",
    )

    @model_validator(mode="after")
    def _validate_sendgrid_pair(self) -> "Settings":
        if bool(self.sendgrid_api_key) ^ bool(self.sendgrid_sender):
            raise ValueError(
                "SENDGRID_API_KEY and SENDGRID_SENDER must both be provided to enable email"
            )
        if self.sendgrid_sender and "@" not in self.sendgrid_sender:
            raise ValueError("SENDGRID_SENDER must be a valid email address")
        return self

    @property
    def email_configured(self) -> bool:
        return bool(self.sendgrid_api_key and self.sendgrid_sender)

    @property
    def push_configured(self) -> bool:
        return bool(self.onesignal_app_id and self.onesignal_rest_api_key)

    @property
    def ws_origins(self) -> list[str]:
        """Return the websocket origin allowlist; empty disables the check."""

        return [
            entry.strip() for entry in self.allowed_ws_origins.split(",") if entry.strip()
        ]


@lru_cache
def get_settings() -> Settings:
    """Return cached application settings instance."""

    return Settings()


def reset_settings_cache() -> None:
    """Clear the settings cache to force reloading from the environment."""

    get_settings.cache_clear()


__all__ = ["Settings", "get_settings", "reset_settings_cache"]
