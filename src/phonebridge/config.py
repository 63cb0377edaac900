"""
Application configuration with environment-driven settings.
"""

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = "phonebridge"
    app_env: Literal["dev", "qa", "uat", "prod"] = "dev"
    debug: bool = False
    log_level: str = "INFO"

    # Public URL of the dashboard, used for links in push notifications
    app_url: str = Field(
        default="http://localhost:3000",
        description="Base URL of the web client",
    )

    @property
    def is_production(self) -> bool:
        return self.app_env == "prod"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
