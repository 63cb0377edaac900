"""
Push notification (Pushover) configuration.
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class NotificationConfig(BaseSettings):
    """Pushover relay configuration from environment."""

    model_config = SettingsConfigDict(
        env_prefix="PUSHOVER_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    user_key: str = Field(default="")
    api_token: str = Field(default="")
    api_url: str = Field(default="https://api.pushover.net/1/messages.json")

    # Kept well under Twilio's webhook timeout; the call-control response waits on it
    timeout_seconds: float = Field(default=3.0, gt=0, le=10)

    @property
    def enabled(self) -> bool:
        return bool(self.user_key and self.api_token)


def get_notification_config() -> NotificationConfig:
    return NotificationConfig()
