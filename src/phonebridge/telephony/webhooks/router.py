"""
FastAPI router for Twilio voice and messaging webhooks.

Key constraints:
- Twilio must always get a usable answer: call-control endpoints fall back
  to a spoken apology, status endpoints always ACK 200
- No state between hops except the attempt counter in the query string
- Notifications are best-effort and bounded in time
"""

from __future__ import annotations

from functools import lru_cache
from typing import Annotated, Any

from fastapi import APIRouter, Depends, Request, Response
from fastapi.responses import PlainTextResponse

from phonebridge.config import get_settings
from phonebridge.notifications.config import get_notification_config
from phonebridge.notifications.dispatcher import NotificationDispatcher
from phonebridge.routing.callbacks import WEBHOOK_PREFIX, CallbackUrls
from phonebridge.routing.engine import RoutingEngine
from phonebridge.routing.states import parse_attempt
from phonebridge.shared.logging import bind_correlation_id, get_logger
from phonebridge.telephony.events import DialOutcome
from phonebridge.telephony.factory import get_routing_config, get_telephony_config
from phonebridge.telephony.factory import get_telephony_provider as build_provider
from phonebridge.telephony.interface import TelephonyProvider
from phonebridge.telephony.twiml import TWIML_MEDIA_TYPE
from phonebridge.telephony.webhooks.auth import WebhookAuthenticator
from phonebridge.telephony.webhooks.handler import StatusHandler

logger = get_logger(__name__)


# ----------------------------
# Dependencies
# ----------------------------

def get_telephony_provider() -> TelephonyProvider:
    return build_provider()


@lru_cache(maxsize=1)
def get_routing_engine() -> RoutingEngine:
    urls = CallbackUrls(get_telephony_config().webhook_base_url, prefix=WEBHOOK_PREFIX)
    return RoutingEngine(get_routing_config(), urls)


@lru_cache(maxsize=1)
def get_notification_dispatcher() -> NotificationDispatcher:
    return NotificationDispatcher(get_notification_config(), app_url=get_settings().app_url)


def get_status_handler(
    dispatcher: Annotated[NotificationDispatcher, Depends(get_notification_dispatcher)],
) -> StatusHandler:
    cfg = get_telephony_config()
    return StatusHandler(
        phone_number=cfg.twilio_phone_number,
        dispatcher=dispatcher,
        missed_call_threshold_seconds=cfg.missed_call_threshold_seconds,
    )


def get_webhook_authenticator(
    provider: Annotated[TelephonyProvider, Depends(get_telephony_provider)],
) -> WebhookAuthenticator:
    return WebhookAuthenticator(
        provider,
        webhook_base_url=get_telephony_config().webhook_base_url,
        enforce=get_settings().is_production,
    )


async def require_twilio_signature(
    request: Request,
    authenticator: Annotated[WebhookAuthenticator, Depends(get_webhook_authenticator)],
) -> None:
    await authenticator.authenticate(request)


router = APIRouter(
    prefix=WEBHOOK_PREFIX,
    tags=["webhooks"],
    dependencies=[Depends(require_twilio_signature)],
)

ProviderDep = Annotated[TelephonyProvider, Depends(get_telephony_provider)]
EngineDep = Annotated[RoutingEngine, Depends(get_routing_engine)]
DispatcherDep = Annotated[NotificationDispatcher, Depends(get_notification_dispatcher)]
HandlerDep = Annotated[StatusHandler, Depends(get_status_handler)]


# ----------------------------
# Helpers
# ----------------------------

async def _payload(request: Request) -> dict[str, Any]:
    """Form body plus query parameters; query wins on conflicts."""
    try:
        form = dict(await request.form())
    except Exception:
        logger.exception("Failed to read webhook form body")
        form = {}

    payload: dict[str, Any] = {k: str(v) for k, v in form.items()}
    payload.update(dict(request.query_params))

    bind_correlation_id(payload.get("CallSid") or payload.get("MessageSid") or payload.get("SmsSid"))
    return payload


def _twiml(document: str) -> Response:
    return Response(content=document, media_type=TWIML_MEDIA_TYPE)


def _ack() -> PlainTextResponse:
    return PlainTextResponse("OK")


# ----------------------------
# Call control
# ----------------------------

@router.post("/voice/twiml-app")
async def twiml_app(
    request: Request,
    provider: ProviderDep,
    engine: EngineDep,
    dispatcher: DispatcherDep,
) -> Response:
    payload = await _payload(request)

    try:
        event = provider.parse_call_event(payload)
        decision = engine.route_call(event)
    except Exception:
        logger.exception("TwiML app callback failed (returning apology)")
        return _twiml(engine.apology())

    if decision.notification is not None:
        await dispatcher.send(decision.notification)

    return _twiml(decision.twiml)


@router.post("/voice/dial-client")
async def dial_client(request: Request, engine: EngineDep) -> Response:
    payload = await _payload(request)
    state = parse_attempt(payload.get("attempt"))

    logger.info(
        "Ringing software client",
        extra={"call_sid": payload.get("CallSid"), "attempt": state.attempt},
    )

    try:
        return _twiml(engine.enter(state, caller=payload.get("From") or None))
    except Exception:
        logger.exception("Dial-client callback failed (returning apology)")
        return _twiml(engine.apology())


@router.post("/voice/dial-result")
async def dial_result(request: Request, engine: EngineDep) -> Response:
    payload = await _payload(request)
    state = parse_attempt(payload.get("attempt"))
    outcome = DialOutcome.parse(payload.get("DialCallStatus"))

    try:
        transition = engine.transition(state, outcome)
    except Exception:
        logger.exception("Dial-result callback failed (returning apology)")
        return _twiml(engine.apology())

    logger.info(
        "Dial attempt finished",
        extra={
            "call_sid": payload.get("CallSid"),
            "attempt": state.attempt,
            "dial_call_status": outcome.value if outcome else None,
            "next_state": type(transition.state).__name__,
        },
    )
    return _twiml(transition.twiml)


@router.post("/voice/call-timeout")
async def call_timeout(request: Request, engine: EngineDep) -> Response:
    payload = await _payload(request)
    outcome = DialOutcome.parse(payload.get("DialCallStatus"))

    logger.info(
        "Voicemail fallback reached",
        extra={
            "call_sid": payload.get("CallSid"),
            "dial_call_status": outcome.value if outcome else None,
        },
    )

    try:
        return _twiml(engine.voicemail_fallback(outcome, caller=payload.get("From") or None))
    except Exception:
        logger.exception("Call-timeout callback failed (returning apology)")
        return _twiml(engine.apology())


@router.post("/voice/voicemail-complete")
async def voicemail_complete(request: Request, engine: EngineDep) -> Response:
    payload = await _payload(request)
    logger.info(
        "Voicemail recording finished",
        extra={"call_sid": payload.get("CallSid"), "recording_duration": payload.get("RecordingDuration")},
    )
    return _twiml(engine.finish_voicemail())


@router.post("/voice/dial-status")
async def dial_status(request: Request, engine: EngineDep) -> Response:
    payload = await _payload(request)
    logger.info(
        "Outbound dial finished",
        extra={
            "call_sid": payload.get("CallSid"),
            "dial_call_status": payload.get("DialCallStatus"),
            "dial_call_duration": payload.get("DialCallDuration"),
        },
    )
    return _twiml(engine.builder.empty())


# ----------------------------
# Status callbacks (always ACK 200)
# ----------------------------

@router.post("/voice/status")
async def call_status(request: Request, provider: ProviderDep, handler: HandlerDep) -> PlainTextResponse:
    payload = await _payload(request)
    try:
        await handler.handle_call_status(provider.parse_call_status_event(payload))
    except Exception:
        logger.exception("Failed to process call status (ACKing 200 to Twilio)")
    return _ack()


@router.post("/voice/recording")
async def recording_status(request: Request, provider: ProviderDep, handler: HandlerDep) -> PlainTextResponse:
    payload = await _payload(request)
    try:
        await handler.handle_recording(provider.parse_recording_event(payload))
    except Exception:
        logger.exception("Failed to process recording callback (ACKing 200 to Twilio)")
    return _ack()


@router.post("/sms/incoming")
async def sms_incoming(request: Request, provider: ProviderDep, handler: HandlerDep) -> PlainTextResponse:
    payload = await _payload(request)
    try:
        await handler.handle_incoming_message(provider.parse_message_event(payload))
    except Exception:
        logger.exception("Failed to process incoming message (ACKing 200 to Twilio)")
    return _ack()


@router.post("/sms/status")
async def sms_status(request: Request, provider: ProviderDep, handler: HandlerDep) -> PlainTextResponse:
    payload = await _payload(request)
    try:
        handler.handle_message_status(provider.parse_message_event(payload))
    except Exception:
        logger.exception("Failed to process message status (ACKing 200 to Twilio)")
    return _ack()
