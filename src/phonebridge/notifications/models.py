"""
Notification event models.
"""

from dataclasses import dataclass
from enum import Enum


class NotificationKind(str, Enum):
    INCOMING_CALL = "incoming-call"
    MISSED_CALL = "missed-call"
    VOICEMAIL = "voicemail"
    SMS = "sms"


@dataclass(frozen=True)
class NotificationEvent:
    """One push notification, built by the routing/status layer and sent once."""

    kind: NotificationKind
    counterpart_number: str
    duration_seconds: int | None = None
    call_sid: str | None = None
    body: str | None = None
    has_media: bool = False


@dataclass(frozen=True)
class DeliveryResult:
    success: bool
    error: str | None = None
