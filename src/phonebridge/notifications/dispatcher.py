"""
Best-effort push notification delivery through Pushover.

send() never raises: a notification that cannot be delivered is logged and
dropped. Each send is bounded by NotificationConfig.timeout_seconds.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import anyio
import httpx

from phonebridge.notifications.config import NotificationConfig
from phonebridge.notifications.models import DeliveryResult, NotificationEvent, NotificationKind
from phonebridge.shared.logging import get_logger

logger = get_logger(__name__)

SMS_PREVIEW_LENGTH = 100


@dataclass(frozen=True)
class RenderedNotification:
    title: str
    message: str
    priority: str
    sound: str
    url_path: str
    url_title: str


def format_phone_number(phone_number: str | None) -> str:
    """Format a phone number for display; US numbers become (555) 123-4567."""
    if not phone_number:
        return "Unknown"

    if phone_number.startswith("+1") and len(phone_number) == 12:
        number = phone_number[2:]
        return f"({number[:3]}) {number[3:6]}-{number[6:]}"

    return phone_number


def render(event: NotificationEvent) -> RenderedNotification:
    number = format_phone_number(event.counterpart_number)

    match event.kind:
        case NotificationKind.INCOMING_CALL:
            return RenderedNotification(
                title="Incoming Call",
                message=f"Call from {number}",
                priority="1",
                sound="incoming",
                url_path="/voice",
                url_title="View Call History",
            )
        case NotificationKind.MISSED_CALL:
            return RenderedNotification(
                title="Missed Call",
                message=f"Missed call from {number}",
                priority="0",
                sound="intermission",
                url_path="/voice",
                url_title="View Call History",
            )
        case NotificationKind.VOICEMAIL:
            duration = f" ({event.duration_seconds}s)" if event.duration_seconds else ""
            return RenderedNotification(
                title="New Voicemail",
                message=f"New voicemail from {number}{duration}",
                priority="1",
                sound="magic",
                url_path="/voice",
                url_title="Listen to Voicemail",
            )
        case NotificationKind.SMS:
            body = event.body or ""
            if len(body) > SMS_PREVIEW_LENGTH:
                body = body[:SMS_PREVIEW_LENGTH] + "..."
            elif not body:
                body = "[Media message]" if event.has_media else "[Empty message]"
            return RenderedNotification(
                title="New MMS" if event.has_media else "New SMS",
                message=f"From {number}: {body}",
                priority="1",
                sound="cashregister",
                url_path="/sms",
                url_title="View Messages",
            )

    raise ValueError(f"Unsupported notification kind: {event.kind}")


class NotificationDispatcher:
    """Pushover client used for incoming-call, missed-call, voicemail and SMS alerts."""

    def __init__(
        self,
        config: NotificationConfig,
        app_url: str = "",
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self._config = config
        self._app_url = app_url.rstrip("/")
        self._http_client = http_client
        self._owns_client = http_client is None

        if not config.enabled:
            logger.warning("Pushover notifications disabled: missing user key or API token")

    @property
    def enabled(self) -> bool:
        return self._config.enabled

    def _get_client(self) -> httpx.AsyncClient:
        if self._http_client is None:
            self._http_client = httpx.AsyncClient(timeout=httpx.Timeout(self._config.timeout_seconds))
        return self._http_client

    async def aclose(self) -> None:
        if self._owns_client and self._http_client is not None:
            await self._http_client.aclose()
            self._http_client = None

    def _payload(self, event: NotificationEvent) -> dict[str, Any]:
        rendered = render(event)
        payload: dict[str, Any] = {
            "token": self._config.api_token,
            "user": self._config.user_key,
            "title": rendered.title,
            "message": rendered.message,
            "priority": rendered.priority,
            "sound": rendered.sound,
        }
        if self._app_url:
            payload["url"] = f"{self._app_url}{rendered.url_path}"
            payload["url_title"] = rendered.url_title
        return payload

    async def send(self, event: NotificationEvent) -> DeliveryResult:
        """Deliver one notification. Failures are logged and returned, never raised."""
        if not self.enabled:
            logger.info(
                "Skipping notification, Pushover not configured",
                extra={"kind": event.kind.value},
            )
            return DeliveryResult(success=False, error="Service not configured")

        try:
            with anyio.fail_after(self._config.timeout_seconds):
                response = await self._get_client().post(
                    self._config.api_url,
                    data=self._payload(event),
                )
            data = response.json() if response.content else {}
        except TimeoutError:
            logger.warning(
                "Pushover notification timed out",
                extra={"kind": event.kind.value, "timeout_seconds": self._config.timeout_seconds},
            )
            return DeliveryResult(success=False, error="Timeout")
        except Exception as e:
            logger.exception("Error sending Pushover notification", extra={"kind": event.kind.value})
            return DeliveryResult(success=False, error=str(e) or e.__class__.__name__)

        if response.status_code < 400 and data.get("status") == 1:
            logger.info(
                "Pushover notification sent",
                extra={"kind": event.kind.value, "call_sid": event.call_sid},
            )
            return DeliveryResult(success=True)

        errors = data.get("errors") or [f"HTTP {response.status_code}"]
        logger.error(
            "Pushover notification rejected",
            extra={"kind": event.kind.value, "status_code": response.status_code, "errors": errors},
        )
        return DeliveryResult(success=False, error="; ".join(str(e) for e in errors))
