"""
Telephony provider interface definition.

The routing core only needs two things from the provider: verify that a
webhook came from it, and turn its form payloads into domain events.
"""

from abc import ABC, abstractmethod
from typing import Any, Mapping

from phonebridge.telephony.events import (
    CallDirection,
    CallEvent,
    CallStatus,
    CallStatusEvent,
    DialOutcome,
    MessageEvent,
    RecordingEvent,
)

__all__ = [
    "CallDirection",
    "CallStatus",
    "DialOutcome",
    "TelephonyProvider",
    "TelephonyProviderError",
    "WebhookParseError",
]


class TelephonyProviderError(Exception):
    """Base exception for telephony provider errors."""

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        provider_response: Mapping[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.error_code = error_code
        self.provider_response = dict(provider_response or {})


class WebhookParseError(TelephonyProviderError):
    """Error parsing webhook payload."""


class TelephonyProvider(ABC):
    """Abstract interface for telephony providers."""

    @property
    def can_validate(self) -> bool:
        """Whether the provider holds the credentials needed to check signatures."""
        return True

    @abstractmethod
    def validate_webhook_signature(
        self,
        url: str,
        params: Mapping[str, str],
        signature: str,
    ) -> bool:
        """Validate webhook signature for authenticity."""
        ...

    @abstractmethod
    def parse_call_event(self, payload: Mapping[str, Any]) -> CallEvent:
        """Parse the first callback of a call."""
        ...

    @abstractmethod
    def parse_call_status_event(self, payload: Mapping[str, Any]) -> CallStatusEvent:
        """Parse a top-level call status callback."""
        ...

    @abstractmethod
    def parse_recording_event(self, payload: Mapping[str, Any]) -> RecordingEvent:
        """Parse a recording status callback."""
        ...

    @abstractmethod
    def parse_message_event(self, payload: Mapping[str, Any]) -> MessageEvent:
        """Parse an incoming SMS or SMS status callback."""
        ...
