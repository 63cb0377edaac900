"""
Twilio telephony provider adapter.

Signature checks use the Twilio helper library; payload parsing maps Twilio's
form fields onto the domain events in phonebridge.telephony.events.
"""

from typing import Any, Mapping

from pydantic import ValidationError
from twilio.request_validator import RequestValidator

from phonebridge.shared.logging import get_logger
from phonebridge.telephony.config import TelephonyConfig, get_telephony_config
from phonebridge.telephony.events import (
    CallDirection,
    CallEvent,
    CallStatus,
    CallStatusEvent,
    MessageEvent,
    RecordingEvent,
)
from phonebridge.telephony.interface import TelephonyProvider, WebhookParseError

logger = get_logger(__name__)

CLIENT_PREFIX = "client:"


def _to_int(value: Any) -> int:
    try:
        return max(int(str(value).strip()), 0)
    except (TypeError, ValueError):
        return 0


def _field(payload: Mapping[str, Any], key: str) -> str:
    value = payload.get(key)
    return str(value).strip() if value is not None else ""


class TwilioAdapter(TelephonyProvider):
    """Twilio telephony provider adapter."""

    def __init__(
        self,
        config: TelephonyConfig | None = None,
        validator: RequestValidator | None = None,
    ) -> None:
        self._config = config or get_telephony_config()
        self._validator = validator
        if self._validator is None and self._config.twilio_auth_token:
            self._validator = RequestValidator(self._config.twilio_auth_token)

    @property
    def can_validate(self) -> bool:
        return self._validator is not None

    def validate_webhook_signature(
        self,
        url: str,
        params: Mapping[str, str],
        signature: str,
    ) -> bool:
        if self._validator is None:
            logger.warning("No auth token configured, cannot validate Twilio signature")
            return False

        if not signature:
            return False

        try:
            return bool(self._validator.validate(url, dict(params), signature))
        except Exception:
            logger.exception("Error validating Twilio signature", extra={"url": url})
            return False

    def _require_sid(
        self,
        payload: Mapping[str, Any],
        key: str = "CallSid",
        code: str = "MISSING_CALL_SID",
    ) -> str:
        sid = _field(payload, key)
        if not sid:
            raise WebhookParseError(
                message=f"Missing {key} in webhook payload",
                error_code=code,
                provider_response=payload,
            )
        return sid

    def parse_call_event(self, payload: Mapping[str, Any]) -> CallEvent:
        call_sid = self._require_sid(payload)
        from_number = _field(payload, "From")
        direction = (
            CallDirection.OUTBOUND
            if from_number.startswith(CLIENT_PREFIX)
            else CallDirection.INBOUND
        )
        return CallEvent(
            call_sid=call_sid,
            from_number=from_number,
            to_number=_field(payload, "To"),
            direction=direction,
        )

    def parse_call_status_event(self, payload: Mapping[str, Any]) -> CallStatusEvent:
        call_sid = self._require_sid(payload)
        raw_status = _field(payload, "CallStatus").lower()
        if not raw_status:
            raise WebhookParseError(
                message="Missing CallStatus in webhook payload",
                error_code="MISSING_CALL_STATUS",
                provider_response=payload,
            )
        try:
            status = CallStatus(raw_status)
        except ValueError as e:
            raise WebhookParseError(
                message=f"Unknown CallStatus: {raw_status}",
                error_code="UNKNOWN_CALL_STATUS",
                provider_response=payload,
            ) from e

        return CallStatusEvent(
            call_sid=call_sid,
            call_status=status,
            duration_seconds=_to_int(payload.get("CallDuration")),
            from_number=_field(payload, "From"),
            to_number=_field(payload, "To"),
            direction=_field(payload, "Direction").lower(),
        )

    def parse_recording_event(self, payload: Mapping[str, Any]) -> RecordingEvent:
        call_sid = self._require_sid(payload)
        caller = _field(payload, "from") or _field(payload, "From")
        return RecordingEvent(
            call_sid=call_sid,
            recording_url=_field(payload, "RecordingUrl"),
            recording_duration=_to_int(payload.get("RecordingDuration")),
            caller=caller or None,
        )

    def parse_message_event(self, payload: Mapping[str, Any]) -> MessageEvent:
        message_sid = _field(payload, "MessageSid") or _field(payload, "SmsSid")
        if not message_sid:
            raise WebhookParseError(
                message="Missing MessageSid in webhook payload",
                error_code="MISSING_MESSAGE_SID",
                provider_response=payload,
            )

        media_urls: list[str] = []
        for i in range(_to_int(payload.get("NumMedia"))):
            media_url = _field(payload, f"MediaUrl{i}")
            if media_url:
                media_urls.append(media_url)

        try:
            return MessageEvent(
                message_sid=message_sid,
                from_number=_field(payload, "From"),
                to_number=_field(payload, "To"),
                body=_field(payload, "Body"),
                media_urls=media_urls,
                message_status=_field(payload, "MessageStatus").lower() or None,
                error_code=_field(payload, "ErrorCode") or None,
                error_message=_field(payload, "ErrorMessage") or None,
            )
        except ValidationError as e:
            raise WebhookParseError(
                message=f"Failed to parse message webhook: {e!s}",
                error_code="PARSE_ERROR",
                provider_response=payload,
            ) from e
