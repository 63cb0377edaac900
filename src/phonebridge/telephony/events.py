"""
Domain event models for telephony webhooks.

Parsed from provider-specific form payloads into a normalized representation.
None of these outlive the request that carried them.
"""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class CallDirection(str, Enum):
    """Direction of a call relative to this system."""

    INBOUND = "inbound"
    OUTBOUND = "outbound"


class CallStatus(str, Enum):
    """Top-level call status values reported by the provider."""

    QUEUED = "queued"
    INITIATED = "initiated"
    RINGING = "ringing"
    IN_PROGRESS = "in-progress"
    COMPLETED = "completed"
    BUSY = "busy"
    NO_ANSWER = "no-answer"
    FAILED = "failed"
    CANCELED = "canceled"

    @property
    def is_unanswered(self) -> bool:
        return self in (
            CallStatus.FAILED,
            CallStatus.CANCELED,
            CallStatus.BUSY,
            CallStatus.NO_ANSWER,
        )


class DialOutcome(str, Enum):
    """Result of a single <Dial> attempt (DialCallStatus)."""

    COMPLETED = "completed"
    NO_ANSWER = "no-answer"
    BUSY = "busy"
    FAILED = "failed"
    CANCELED = "canceled"

    @classmethod
    def parse(cls, value: str | None) -> "DialOutcome | None":
        """Map a raw DialCallStatus to an outcome; None when absent or unknown."""
        raw = (value or "").strip().lower()
        if not raw:
            return None
        if raw == "answered":
            return cls.COMPLETED
        try:
            return cls(raw)
        except ValueError:
            return None

    @property
    def is_terminal_rejection(self) -> bool:
        """Busy, failed and canceled are never retried."""
        return self in (DialOutcome.BUSY, DialOutcome.FAILED, DialOutcome.CANCELED)

    @property
    def is_unanswered(self) -> bool:
        return self is not DialOutcome.COMPLETED


class CallEvent(BaseModel):
    """First callback of a call, inbound or placed from the software client."""

    model_config = ConfigDict(frozen=True)

    call_sid: str = Field(..., description="Provider's unique call identifier")
    from_number: str = Field(default="", description="Caller (E.164 or client:<identity>)")
    to_number: str = Field(default="", description="Dialed number")
    direction: CallDirection = Field(default=CallDirection.INBOUND)


class CallStatusEvent(BaseModel):
    """Top-level call status change."""

    model_config = ConfigDict(frozen=True)

    call_sid: str
    call_status: CallStatus
    duration_seconds: int = Field(default=0, ge=0)
    from_number: str = ""
    to_number: str = ""
    direction: str = Field(default="", description="Raw Direction, e.g. inbound, outbound-dial")


class RecordingEvent(BaseModel):
    """Recording completion callback."""

    model_config = ConfigDict(frozen=True)

    call_sid: str
    recording_url: str = ""
    recording_duration: int = Field(default=0, ge=0)
    caller: str | None = Field(
        default=None,
        description="Caller number carried on the callback URL by the voicemail instruction",
    )


class MessageEvent(BaseModel):
    """Incoming SMS/MMS or outbound message status change."""

    model_config = ConfigDict(frozen=True)

    message_sid: str
    from_number: str = ""
    to_number: str = ""
    body: str = ""
    media_urls: list[str] = Field(default_factory=list)
    message_status: str | None = None
    error_code: str | None = None
    error_message: str | None = None

    @property
    def has_media(self) -> bool:
        return bool(self.media_urls)
