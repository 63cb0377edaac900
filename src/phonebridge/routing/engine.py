"""
Inbound-call routing and voicemail fallback.

The engine is pure: it maps (event or state, dial outcome) onto the next
state plus the TwiML document that drives Twilio there. The webhook router
decodes requests into those inputs, dispatches any notification the decision
carries, and encodes the document back to Twilio.
"""

from __future__ import annotations

from dataclasses import dataclass

from phonebridge.notifications.models import NotificationEvent, NotificationKind
from phonebridge.routing.callbacks import CallbackUrls
from phonebridge.routing.states import (
    Answered,
    Attempting,
    Exhausted,
    Redirecting,
    RoutingState,
)
from phonebridge.shared.logging import get_logger
from phonebridge.telephony.config import RoutingConfig
from phonebridge.telephony.events import CallDirection, CallEvent, DialOutcome
from phonebridge.telephony.twiml import REDIRECT_RING_TIMEOUT_SECONDS, CallControlBuilder

logger = get_logger(__name__)

NOT_CONFIGURED_MESSAGE = "This number is not configured to receive calls. Goodbye."
NO_DESTINATION_MESSAGE = "No destination number was provided. Goodbye."
APPLICATION_ERROR_MESSAGE = "We're sorry, an application error occurred. Goodbye."


@dataclass(frozen=True)
class RoutingDecision:
    """Outcome of the first callback for a call."""

    twiml: str
    state: RoutingState | None = None
    notification: NotificationEvent | None = None


@dataclass(frozen=True)
class Transition:
    state: RoutingState
    twiml: str


class RoutingEngine:
    def __init__(
        self,
        config: RoutingConfig,
        urls: CallbackUrls,
        builder: CallControlBuilder | None = None,
    ) -> None:
        self._config = config
        self._urls = urls
        self._builder = builder or CallControlBuilder()

    @property
    def builder(self) -> CallControlBuilder:
        return self._builder

    def route_call(self, event: CallEvent) -> RoutingDecision:
        """Decide what to do with a new call (the TwiML app voice URL)."""
        if event.direction == CallDirection.OUTBOUND:
            return self.bridge_outbound(event)

        if not self._config.phone_number or event.to_number != self._config.phone_number:
            logger.warning(
                "Inbound call to unprovisioned number",
                extra={"call_sid": event.call_sid, "to": event.to_number},
            )
            return RoutingDecision(twiml=self._builder.say_and_hangup(NOT_CONFIGURED_MESSAGE))

        notification = NotificationEvent(
            kind=NotificationKind.INCOMING_CALL,
            counterpart_number=event.from_number,
            call_sid=event.call_sid,
        )

        if self._config.redirect_number:
            state = Redirecting(self._config.redirect_number)
            logger.info(
                "Forwarding inbound call to redirect number",
                extra={"call_sid": event.call_sid, "redirect_number": state.number},
            )
            return RoutingDecision(
                twiml=self._builder.dial_number(
                    state.number,
                    action_url=self._urls.call_timeout(),
                    timeout=REDIRECT_RING_TIMEOUT_SECONDS,
                ),
                state=state,
                notification=notification,
            )

        first = Attempting(1)
        logger.info("Forwarding inbound call to software client", extra={"call_sid": event.call_sid})
        return RoutingDecision(
            twiml=self._builder.redirect(self._urls.dial_client(first.attempt)),
            state=first,
            notification=notification,
        )

    def bridge_outbound(self, event: CallEvent) -> RoutingDecision:
        """Bridge a call placed from the software client to the dialed number."""
        if not event.to_number:
            logger.warning("Outbound call without destination", extra={"call_sid": event.call_sid})
            return RoutingDecision(twiml=self._builder.say_and_hangup(NO_DESTINATION_MESSAGE))

        if not self._config.phone_number:
            logger.error(
                "Outbound call with no provisioned caller ID",
                extra={"call_sid": event.call_sid},
            )
            return RoutingDecision(twiml=self._builder.say_and_hangup(APPLICATION_ERROR_MESSAGE))

        logger.info(
            "Bridging outbound call",
            extra={"call_sid": event.call_sid, "to": event.to_number},
        )
        return RoutingDecision(
            twiml=self._builder.dial_number(
                event.to_number,
                action_url=self._urls.dial_status(),
                caller_id=self._config.phone_number,
            )
        )

    def enter(self, state: Attempting, caller: str | None = None) -> str:
        """Entry action of Attempting(n): filler speech, then ring the client once."""
        return self._builder.ring_client(
            self._config.client_identity,
            action_url=self._urls.dial_result(state.attempt),
            caller_id=caller,
        )

    def transition(self, state: Attempting, outcome: DialOutcome | None) -> Transition:
        """Advance the ring loop after one dial attempt.

        A missing outcome is treated as no-answer.
        """
        match outcome:
            case DialOutcome.COMPLETED:
                return Transition(Answered(), self._builder.empty())
            case DialOutcome() if outcome.is_terminal_rejection:
                return Transition(Exhausted(outcome), self._builder.redirect(self._urls.call_timeout()))
            case _:
                if state.is_last:
                    return Transition(
                        Exhausted(DialOutcome.NO_ANSWER),
                        self._builder.redirect(self._urls.call_timeout()),
                    )
                following = state.next()
                return Transition(following, self._builder.redirect(self._urls.dial_client(following.attempt)))

    def voicemail_fallback(self, outcome: DialOutcome | None, caller: str | None = None) -> str:
        """Record a voicemail unless the dial that led here was answered."""
        if outcome is not None and not outcome.is_unanswered:
            return self._builder.empty()

        return self._builder.voicemail(
            self._config.voicemail_prompt,
            action_url=self._urls.voicemail_complete(),
            recording_status_callback=self._urls.recording(caller),
            missing_recording_message=self._config.missing_recording_message,
            max_length=self._config.voicemail_max_length_seconds,
        )

    def finish_voicemail(self) -> str:
        return self._builder.hangup()

    def apology(self) -> str:
        return self._builder.say_and_hangup(APPLICATION_ERROR_MESSAGE)
