"""
Mock telephony provider adapter for local runs and tests.

Parses payloads exactly like the Twilio adapter but answers signature checks
from a configurable flag and records every check it was asked to make.
"""

from dataclasses import dataclass
from typing import Mapping

from phonebridge.shared.logging import get_logger
from phonebridge.telephony.config import TelephonyConfig
from phonebridge.telephony.twilio_adapter import TwilioAdapter

logger = get_logger(__name__)


@dataclass(frozen=True)
class SignatureCheck:
    url: str
    params: dict[str, str]
    signature: str


class MockTelephonyAdapter(TwilioAdapter):
    """Mock telephony provider for testing."""

    def __init__(self, config: TelephonyConfig | None = None) -> None:
        super().__init__(config=config or TelephonyConfig(provider_type="mock"))
        self._checks: list[SignatureCheck] = []
        self._signature_valid: bool = True

    def reset(self) -> None:
        self._checks.clear()
        self._signature_valid = True

    def configure_signature_result(self, valid: bool) -> None:
        self._signature_valid = valid

    @property
    def can_validate(self) -> bool:
        return True

    @property
    def checks(self) -> list[SignatureCheck]:
        return self._checks.copy()

    def validate_webhook_signature(
        self,
        url: str,
        params: Mapping[str, str],
        signature: str,
    ) -> bool:
        self._checks.append(SignatureCheck(url=url, params=dict(params), signature=signature))
        logger.debug("Mock signature check", extra={"url": url, "valid": self._signature_valid})
        return self._signature_valid
