"""
Telephony provider and call routing configuration.

TelephonyConfig is loaded once from the environment (prefix TELEPHONY_).
RoutingConfig is the read-only slice of it the routing engine consumes.
"""

from dataclasses import dataclass
from enum import Enum

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_VOICEMAIL_PROMPT = (
    "Hello, you've reached my voicemail. "
    "Please leave a message after the beep and press star to finish."
)
DEFAULT_MISSING_RECORDING_MESSAGE = "No message was recorded. Goodbye."


class ProviderType(str, Enum):
    """Supported telephony provider types."""

    TWILIO = "twilio"
    MOCK = "mock"


class TelephonyConfig(BaseSettings):
    """Telephony provider configuration from environment."""

    model_config = SettingsConfigDict(
        env_prefix="TELEPHONY_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Provider selection
    provider_type: ProviderType = Field(default=ProviderType.TWILIO)

    # Provider credentials
    twilio_account_sid: str = Field(default="")
    twilio_auth_token: str = Field(default="")

    # The number this system answers for (E.164)
    twilio_phone_number: str = Field(default="")

    # Public base URL Twilio uses to reach the webhooks
    webhook_base_url: str = Field(default="http://localhost:8000")

    # Routing
    redirect_number: str = Field(
        default="",
        description="Optional E.164 number to forward inbound calls to instead of the software client.",
    )
    voicemail_prompt: str = Field(default=DEFAULT_VOICEMAIL_PROMPT, max_length=500)
    missing_recording_message: str = Field(default=DEFAULT_MISSING_RECORDING_MESSAGE)
    client_identity: str = Field(
        default="phonebridge_client",
        description="Identity the browser/mobile client registers with.",
    )

    # Timing
    voicemail_max_length_seconds: int = Field(default=300, ge=1, le=300)
    missed_call_threshold_seconds: int = Field(
        default=5,
        ge=0,
        description="Completed inbound calls shorter than this are reported as missed.",
    )

    @field_validator("redirect_number", "twilio_phone_number", mode="before")
    @classmethod
    def strip_number(cls, v: str | None) -> str:
        return (v or "").strip()

    def get_webhook_url(self, path: str = "/webhooks/voice/twiml-app") -> str:
        base = self.webhook_base_url.rstrip("/")
        return f"{base}{path}"


def get_telephony_config() -> TelephonyConfig:
    return TelephonyConfig()


@dataclass(frozen=True)
class RoutingConfig:
    """Process-wide routing settings, read-only after startup."""

    phone_number: str
    client_identity: str
    voicemail_prompt: str = DEFAULT_VOICEMAIL_PROMPT
    missing_recording_message: str = DEFAULT_MISSING_RECORDING_MESSAGE
    redirect_number: str | None = None
    voicemail_max_length_seconds: int = 300


def routing_config_from_telephony_config(cfg: TelephonyConfig) -> RoutingConfig:
    """Build RoutingConfig from the environment-backed TelephonyConfig."""
    return RoutingConfig(
        phone_number=cfg.twilio_phone_number,
        client_identity=cfg.client_identity,
        voicemail_prompt=cfg.voicemail_prompt,
        missing_recording_message=cfg.missing_recording_message,
        redirect_number=cfg.redirect_number or None,
        voicemail_max_length_seconds=cfg.voicemail_max_length_seconds,
    )
