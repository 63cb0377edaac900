"""Tests for the Twilio telephony adapter (sync-only).

Signatures are computed with the real Twilio RequestValidator so the adapter
is checked against the same algorithm Twilio uses.
"""

import pytest
from twilio.request_validator import RequestValidator

from phonebridge.telephony.config import ProviderType, TelephonyConfig
from phonebridge.telephony.interface import (
    CallDirection,
    CallStatus,
    WebhookParseError,
)
from phonebridge.telephony.twilio_adapter import TwilioAdapter

AUTH_TOKEN = "test_auth_token_12345"
URL = "https://example.com/webhooks/voice/twiml-app"


@pytest.fixture
def twilio_config() -> TelephonyConfig:
    return TelephonyConfig(
        provider_type=ProviderType.TWILIO,
        twilio_account_sid="AC_TEST_ACCOUNT_SID",
        twilio_auth_token=AUTH_TOKEN,
        twilio_phone_number="+15550009999",
        webhook_base_url="https://example.com",
    )


@pytest.fixture
def adapter(twilio_config: TelephonyConfig) -> TwilioAdapter:
    return TwilioAdapter(config=twilio_config)


class TestSignatureValidation:
    def test_valid_signature(self, adapter: TwilioAdapter) -> None:
        params = {"CallSid": "CA123", "From": "+15551234567"}
        signature = RequestValidator(AUTH_TOKEN).compute_signature(URL, params)

        assert adapter.validate_webhook_signature(URL, params, signature) is True

    def test_tampered_params_fail(self, adapter: TwilioAdapter) -> None:
        params = {"CallSid": "CA123", "From": "+15551234567"}
        signature = RequestValidator(AUTH_TOKEN).compute_signature(URL, params)

        tampered = {**params, "From": "+15557654321"}
        assert adapter.validate_webhook_signature(URL, tampered, signature) is False

    def test_other_url_fails(self, adapter: TwilioAdapter) -> None:
        params = {"CallSid": "CA123"}
        signature = RequestValidator(AUTH_TOKEN).compute_signature(URL, params)

        assert adapter.validate_webhook_signature("https://evil.example.com/x", params, signature) is False

    def test_missing_signature_fails(self, adapter: TwilioAdapter) -> None:
        assert adapter.validate_webhook_signature(URL, {"CallSid": "CA123"}, "") is False

    def test_without_auth_token_cannot_validate(self) -> None:
        adapter = TwilioAdapter(config=TelephonyConfig(twilio_auth_token=""))

        assert adapter.can_validate is False
        assert adapter.validate_webhook_signature(URL, {}, "anything") is False


class TestParseCallEvent:
    def test_inbound_call(self, adapter: TwilioAdapter) -> None:
        event = adapter.parse_call_event(
            {"CallSid": "CA123", "From": "+15551234567", "To": "+15550009999"}
        )

        assert event.call_sid == "CA123"
        assert event.from_number == "+15551234567"
        assert event.to_number == "+15550009999"
        assert event.direction == CallDirection.INBOUND

    def test_client_caller_is_outbound(self, adapter: TwilioAdapter) -> None:
        event = adapter.parse_call_event(
            {"CallSid": "CA123", "From": "client:phonebridge_client", "To": "+15550002222"}
        )

        assert event.direction == CallDirection.OUTBOUND
        assert event.to_number == "+15550002222"

    def test_missing_call_sid(self, adapter: TwilioAdapter) -> None:
        with pytest.raises(WebhookParseError) as exc_info:
            adapter.parse_call_event({"From": "+15551234567"})

        assert exc_info.value.error_code == "MISSING_CALL_SID"


class TestParseCallStatusEvent:
    def test_completed_call(self, adapter: TwilioAdapter) -> None:
        event = adapter.parse_call_status_event(
            {
                "CallSid": "CA123",
                "CallStatus": "completed",
                "CallDuration": "42",
                "From": "+15551234567",
                "To": "+15550009999",
                "Direction": "Inbound",
            }
        )

        assert event.call_status == CallStatus.COMPLETED
        assert event.duration_seconds == 42
        assert event.direction == "inbound"

    def test_bad_duration_is_zero(self, adapter: TwilioAdapter) -> None:
        event = adapter.parse_call_status_event(
            {"CallSid": "CA123", "CallStatus": "no-answer", "CallDuration": "abc"}
        )

        assert event.duration_seconds == 0

    def test_missing_status(self, adapter: TwilioAdapter) -> None:
        with pytest.raises(WebhookParseError) as exc_info:
            adapter.parse_call_status_event({"CallSid": "CA123"})

        assert exc_info.value.error_code == "MISSING_CALL_STATUS"

    def test_unknown_status(self, adapter: TwilioAdapter) -> None:
        with pytest.raises(WebhookParseError) as exc_info:
            adapter.parse_call_status_event({"CallSid": "CA123", "CallStatus": "exploded"})

        assert exc_info.value.error_code == "UNKNOWN_CALL_STATUS"
        assert exc_info.value.provider_response["CallStatus"] == "exploded"


class TestParseRecordingEvent:
    def test_caller_from_query(self, adapter: TwilioAdapter) -> None:
        event = adapter.parse_recording_event(
            {
                "CallSid": "CA123",
                "RecordingUrl": "https://api.twilio.com/rec/RE1",
                "RecordingDuration": "17",
                "from": "+15551234567",
            }
        )

        assert event.recording_duration == 17
        assert event.caller == "+15551234567"
        assert event.recording_url.endswith("RE1")

    def test_missing_duration_is_zero(self, adapter: TwilioAdapter) -> None:
        event = adapter.parse_recording_event({"CallSid": "CA123"})

        assert event.recording_duration == 0
        assert event.caller is None


class TestParseMessageEvent:
    def test_sms_with_media(self, adapter: TwilioAdapter) -> None:
        event = adapter.parse_message_event(
            {
                "MessageSid": "SM123",
                "From": "+15551234567",
                "To": "+15550009999",
                "Body": "hello",
                "NumMedia": "2",
                "MediaUrl0": "https://api.twilio.com/m/0",
                "MediaUrl1": "https://api.twilio.com/m/1",
            }
        )

        assert event.message_sid == "SM123"
        assert event.body == "hello"
        assert event.media_urls == ["https://api.twilio.com/m/0", "https://api.twilio.com/m/1"]
        assert event.has_media is True

    def test_status_callback(self, adapter: TwilioAdapter) -> None:
        event = adapter.parse_message_event(
            {
                "SmsSid": "SM123",
                "MessageStatus": "Undelivered",
                "ErrorCode": "30003",
                "ErrorMessage": "Unreachable destination handset",
            }
        )

        assert event.message_sid == "SM123"
        assert event.message_status == "undelivered"
        assert event.error_code == "30003"

    def test_missing_message_sid(self, adapter: TwilioAdapter) -> None:
        with pytest.raises(WebhookParseError) as exc_info:
            adapter.parse_message_event({"Body": "hi"})

        assert exc_info.value.error_code == "MISSING_MESSAGE_SID"
