"""
Telephony provider factory.

Single source of truth for configuration:
- use TelephonyConfig (Pydantic Settings) which loads from OS env + .env
- never read raw os.getenv("TWILIO_*") here
"""

from __future__ import annotations

from functools import lru_cache

from phonebridge.shared.logging import get_logger
from phonebridge.telephony.config import (
    ProviderType,
    RoutingConfig,
    TelephonyConfig,
    routing_config_from_telephony_config,
)
from phonebridge.telephony.config import get_telephony_config as _load_telephony_config
from phonebridge.telephony.interface import TelephonyProvider
from phonebridge.telephony.mock_adapter import MockTelephonyAdapter
from phonebridge.telephony.twilio_adapter import TwilioAdapter

logger = get_logger(__name__)


def _mask(s: str, keep: int = 6) -> str:
    if not s:
        return ""
    if len(s) <= keep:
        return "*" * len(s)
    return f"{s[:keep]}***"


@lru_cache(maxsize=1)
def get_telephony_config() -> TelephonyConfig:
    """Return cached TelephonyConfig loaded from OS env + .env."""
    return _load_telephony_config()


@lru_cache(maxsize=1)
def get_routing_config() -> RoutingConfig:
    return routing_config_from_telephony_config(get_telephony_config())


@lru_cache(maxsize=1)
def get_telephony_provider() -> TelephonyProvider:
    """Create and cache the telephony provider using TelephonyConfig."""
    cfg = get_telephony_config()

    logger.info(
        "Telephony config resolved",
        extra={
            "provider_type": cfg.provider_type.value,
            "twilio_account_sid": _mask(cfg.twilio_account_sid),
            "twilio_phone_number": cfg.twilio_phone_number,
            "webhook_base_url": cfg.webhook_base_url,
            "twiml_app_url": cfg.get_webhook_url(),
            "redirect_enabled": bool(cfg.redirect_number),
        },
    )

    if cfg.provider_type == ProviderType.TWILIO:
        return TwilioAdapter(cfg)

    if cfg.provider_type == ProviderType.MOCK:
        return MockTelephonyAdapter(cfg)

    raise ValueError(f"Unsupported telephony provider_type: {cfg.provider_type}")
