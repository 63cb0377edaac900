"""
Shared fixtures: a provisioned number, a routing engine on a fixed base URL,
a recording notification dispatcher and a TestClient with every webhook
dependency overridden.
"""

from __future__ import annotations

from collections.abc import Generator
from xml.etree import ElementTree

import pytest
from fastapi.testclient import TestClient

from phonebridge.main import create_app
from phonebridge.notifications.models import DeliveryResult, NotificationEvent
from phonebridge.routing.callbacks import CallbackUrls
from phonebridge.routing.engine import RoutingEngine
from phonebridge.telephony.config import (
    ProviderType,
    RoutingConfig,
    TelephonyConfig,
    routing_config_from_telephony_config,
)
from phonebridge.telephony.mock_adapter import MockTelephonyAdapter
from phonebridge.telephony.webhooks import router as webhooks
from phonebridge.telephony.webhooks.auth import WebhookAuthenticator
from phonebridge.telephony.webhooks.handler import StatusHandler

BASE_URL = "https://example.com"
PHONE_NUMBER = "+15550009999"
CALLER = "+15551234567"


def parse_twiml(document: str) -> ElementTree.Element:
    root = ElementTree.fromstring(document)
    assert root.tag == "Response"
    return root


def verbs(document: str) -> list[str]:
    return [child.tag for child in parse_twiml(document)]


class RecordingDispatcher:
    """Stands in for NotificationDispatcher and keeps every event it was asked to send."""

    def __init__(self, result: DeliveryResult | None = None) -> None:
        self.sent: list[NotificationEvent] = []
        self._result = result or DeliveryResult(success=True)

    @property
    def enabled(self) -> bool:
        return True

    async def send(self, event: NotificationEvent) -> DeliveryResult:
        self.sent.append(event)
        return self._result

    async def aclose(self) -> None:
        return None


@pytest.fixture
def telephony_config() -> TelephonyConfig:
    return TelephonyConfig(
        provider_type=ProviderType.MOCK,
        twilio_account_sid="AC_TEST_ACCOUNT_SID",
        twilio_auth_token="test_auth_token_12345",
        twilio_phone_number=PHONE_NUMBER,
        webhook_base_url=BASE_URL,
        redirect_number="",
        client_identity="phonebridge_client",
        missed_call_threshold_seconds=5,
    )


@pytest.fixture
def routing_config(telephony_config: TelephonyConfig) -> RoutingConfig:
    return routing_config_from_telephony_config(telephony_config)


@pytest.fixture
def urls() -> CallbackUrls:
    return CallbackUrls(BASE_URL)


@pytest.fixture
def engine(routing_config: RoutingConfig, urls: CallbackUrls) -> RoutingEngine:
    return RoutingEngine(routing_config, urls)


@pytest.fixture
def dispatcher() -> RecordingDispatcher:
    return RecordingDispatcher()


@pytest.fixture
def provider(telephony_config: TelephonyConfig) -> MockTelephonyAdapter:
    return MockTelephonyAdapter(telephony_config)


@pytest.fixture
def status_handler(dispatcher: RecordingDispatcher) -> StatusHandler:
    return StatusHandler(
        phone_number=PHONE_NUMBER,
        dispatcher=dispatcher,  # type: ignore[arg-type]
        missed_call_threshold_seconds=5,
    )


@pytest.fixture
def app(
    provider: MockTelephonyAdapter,
    engine: RoutingEngine,
    dispatcher: RecordingDispatcher,
    status_handler: StatusHandler,
):
    application = create_app()
    application.dependency_overrides[webhooks.get_telephony_provider] = lambda: provider
    application.dependency_overrides[webhooks.get_routing_engine] = lambda: engine
    application.dependency_overrides[webhooks.get_notification_dispatcher] = lambda: dispatcher
    application.dependency_overrides[webhooks.get_status_handler] = lambda: status_handler
    application.dependency_overrides[webhooks.get_webhook_authenticator] = lambda: WebhookAuthenticator(
        provider, webhook_base_url=BASE_URL, enforce=False
    )
    return application


@pytest.fixture
def client(app) -> Generator[TestClient, None, None]:
    # No context manager: the lifespan would resolve the real provider from the environment
    yield TestClient(app)
