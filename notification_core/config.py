"""Application configuration settings."""

from __future__ import annotations

from functools import lru_cache

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

ENV_FILE = ".env"
ENV_FILE_ENCODING = "utf-8"

PUSH_BACKEND_FIREBASE = "firebase"
PUSH_BACKEND_MEMORY = "memory"


class Settings(BaseSettings):
    """Notification delivery configuration loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=ENV_FILE, env_file_encoding=ENV_FILE_ENCODING, extra="ignore"
    )

    database_url: str = Field(
        default="sqlite:///./notifications.db",
        description="Database connection URL used by SQLAlchemy for the notification store",
        min_length=1,
    )
    app_timezone: str = Field(
        default="UTC",
        description="Timezone used when stamping notification records",
    )
    push_backend: str = Field(
        default=PUSH_BACKEND_FIREBASE,
        description="Push gateway implementation: 'firebase' or 'memory'",
    )
    firebase_credentials_path: str | None = Field(
        default=None,
        description="Path to the Firebase service account JSON file",
    )
    firebase_project_id: str | None = Field(
        default=None,
        description="Firebase project identifier, inferred from the credentials when omitted",
    )
    push_retry_max_attempts: int = Field(
        default=3,
        description="Maximum number of attempts for a transient push gateway failure",
        gt=0,
    )
    push_retry_initial_delay: float = Field(
        default=1.0,
        description="Delay in seconds before the second attempt; doubles afterwards",
        ge=0,
    )
    push_multicast_batch_size: int = Field(
        default=500,
        description="Maximum number of device tokens sent in a single multicast call",
        gt=0,
        le=500,
    )
    push_android_click_action: str = Field(
        default="FLUTTER_NOTIFICATION_CLICK",
        description="Click action injected into every push data payload",
    )
    sendgrid_api_key: str | None = Field(
        default=None,
        description="SendGrid API key used for the secondary email channel",
    )
    sendgrid_sender: str | None = Field(
        default=None,
        description="Email address that will appear as the sender of notification emails",
        min_length=3,
    )

    @model_validator(mode="after")
    def _validate_settings(self) -> "Settings":
        if self.push_backend not in (PUSH_BACKEND_FIREBASE, PUSH_BACKEND_MEMORY):
            raise ValueError("PUSH_BACKEND must be either 'firebase' or 'memory'")
        if bool(self.sendgrid_api_key) ^ bool(self.sendgrid_sender):
            raise ValueError(
                "SENDGRID_API_KEY and SENDGRID_SENDER must both be provided to enable email"
            )
        if self.sendgrid_sender and "@" not in self.sendgrid_sender:
            raise ValueError("SENDGRID_SENDER must be a valid email address")
        return self


@lru_cache
def get_settings() -> Settings:
    """Return cached application settings instance."""

    return Settings()


def reset_settings_cache() -> None:
    """Clear the settings cache to force reloading from the environment."""

    get_settings.cache_clear()


__all__ = [
    "PUSH_BACKEND_FIREBASE",
    "PUSH_BACKEND_MEMORY",
    "Settings",
    "get_settings",
    "reset_settings_cache",
]
