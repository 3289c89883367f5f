from functools import lru_cache
from typing import Optional

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class ReminderSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="REMINDER_",
        env_file=".env",
        extra="ignore",
        populate_by_name=True,
    )

    # Service configuration
    SERVICE_HOST: str = "0.0.0.0"
    SERVICE_PORT: int = 8080
    APP_NAME: str = "Task Master"

    # SendGrid; the legacy SENDGRID_KEY / SENDGRID_FROM names are still accepted
    SENDGRID_API_KEY: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("REMINDER_SENDGRID_API_KEY", "SENDGRID_KEY"),
    )
    SENDER_EMAIL: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("REMINDER_SENDER_EMAIL", "SENDGRID_FROM"),
    )
    SENDGRID_API_URL: str = "https://api.sendgrid.com/v3/mail/send"
    EMAIL_TIMEOUT_SECONDS: float = 20.0

    # Windows
    DEADLINE_WINDOW_MINUTES: int = Field(default=60, ge=1)
    PLAN_WINDOW_HOURS: int = Field(default=24, ge=1)
    DISPLAY_TIMEZONE: str = "Asia/Manila"

    # Scheduling
    DEADLINE_SCAN_INTERVAL_SECONDS: int = 600
    PLAN_SCAN_INTERVAL_SECONDS: int = 3600
    TASK_TIME_LIMIT_SECONDS: int = 120
    MAX_CONCURRENT_REMINDERS: Optional[int] = Field(default=None, ge=1)  # None: every eligible task at once

    # Celery configuration
    CELERY_BROKER_URL: str = "redis://localhost:6379/0"
    CELERY_RESULT_BACKEND: Optional[str] = None

    # Firebase
    FIREBASE_PROJECT_ID: Optional[str] = None
    FIREBASE_CREDENTIALS_JSON: Optional[str] = None  # path or inline JSON via env

    # Metrics
    METRICS_ENABLED: bool = True

    @property
    def email_configured(self) -> bool:
        return bool(self.SENDGRID_API_KEY and self.SENDER_EMAIL)


@lru_cache
def get_settings() -> ReminderSettings:
    """Build the settings once per process; everything downstream receives them explicitly."""
    return ReminderSettings()
