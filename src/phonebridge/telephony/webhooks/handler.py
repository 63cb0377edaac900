"""
Status aggregation for call, recording and message callbacks.

Classifies terminal call outcomes and triggers the matching notification.
Nothing here is persisted; call history is always read back from Twilio.
"""

import logging
from enum import Enum

from phonebridge.notifications.dispatcher import NotificationDispatcher
from phonebridge.notifications.models import NotificationEvent, NotificationKind
from phonebridge.shared.logging import get_logger, log_with_context
from phonebridge.telephony.events import CallStatus, CallStatusEvent, MessageEvent, RecordingEvent

logger = get_logger(__name__)

FAILED_MESSAGE_STATUSES = frozenset({"failed", "undelivered"})


class CallClassification(str, Enum):
    """How a status callback was interpreted."""

    ANSWERED = "answered"
    MISSED = "missed"
    VOICEMAIL = "voicemail"
    NONE = "none"


class StatusHandler:
    """Handler for call/recording/message status callbacks.

    Only calls that came in to the provisioned number are classified; status
    callbacks for outbound bridges are logged and otherwise ignored.
    """

    def __init__(
        self,
        phone_number: str,
        dispatcher: NotificationDispatcher,
        missed_call_threshold_seconds: int = 5,
    ) -> None:
        self._phone_number = phone_number
        self._dispatcher = dispatcher
        self._missed_threshold = missed_call_threshold_seconds

    def _is_inbound_to_us(self, event: CallStatusEvent) -> bool:
        return (
            bool(self._phone_number)
            and event.direction == "inbound"
            and event.to_number == self._phone_number
        )

    def classify_call_status(self, event: CallStatusEvent) -> CallClassification:
        """Classify a top-level call status change.

        A completed inbound call shorter than the threshold counts as missed
        (the caller gave up almost at once); a longer one was either answered
        or already reported through the recording callback.
        """
        if not self._is_inbound_to_us(event):
            return CallClassification.NONE

        if event.call_status == CallStatus.COMPLETED:
            if event.duration_seconds < self._missed_threshold:
                return CallClassification.MISSED
            return CallClassification.ANSWERED

        if event.call_status.is_unanswered:
            return CallClassification.MISSED

        return CallClassification.NONE

    async def handle_call_status(self, event: CallStatusEvent) -> CallClassification:
        classification = self.classify_call_status(event)

        log_with_context(
            logger,
            logging.INFO,
            "Call status updated",
            call_sid=event.call_sid,
            call_status=event.call_status.value,
            duration_seconds=event.duration_seconds,
            direction=event.direction,
            classification=classification.value,
        )

        if classification == CallClassification.MISSED:
            await self._dispatcher.send(
                NotificationEvent(
                    kind=NotificationKind.MISSED_CALL,
                    counterpart_number=event.from_number,
                    call_sid=event.call_sid,
                )
            )

        return classification

    async def handle_recording(self, event: RecordingEvent) -> CallClassification:
        logger.info(
            "Recording available",
            extra={
                "call_sid": event.call_sid,
                "recording_url": event.recording_url,
                "recording_duration": event.recording_duration,
            },
        )

        if event.recording_duration <= 0:
            logger.info("No voicemail content recorded", extra={"call_sid": event.call_sid})
            return CallClassification.NONE

        await self._dispatcher.send(
            NotificationEvent(
                kind=NotificationKind.VOICEMAIL,
                counterpart_number=event.caller or "",
                duration_seconds=event.recording_duration,
                call_sid=event.call_sid,
            )
        )
        return CallClassification.VOICEMAIL

    async def handle_incoming_message(self, event: MessageEvent) -> bool:
        """Notify about an SMS/MMS sent to the provisioned number. Returns True if notified."""
        if not self._phone_number or event.to_number != self._phone_number:
            logger.info(
                "Ignoring message to unprovisioned number",
                extra={"message_sid": event.message_sid, "to": event.to_number},
            )
            return False

        logger.info(
            "Received message",
            extra={
                "message_sid": event.message_sid,
                "from": event.from_number,
                "media_count": len(event.media_urls),
            },
        )

        await self._dispatcher.send(
            NotificationEvent(
                kind=NotificationKind.SMS,
                counterpart_number=event.from_number,
                body=event.body,
                has_media=event.has_media,
            )
        )
        return True

    def handle_message_status(self, event: MessageEvent) -> None:
        extra = {
            "message_sid": event.message_sid,
            "message_status": event.message_status,
            "error_code": event.error_code,
            "error_message": event.error_message,
        }
        if event.message_status in FAILED_MESSAGE_STATUSES:
            logger.warning("Message delivery failed", extra=extra)
        else:
            logger.info("Message status updated", extra=extra)
