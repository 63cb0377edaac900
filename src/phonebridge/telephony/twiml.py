"""
Call-control (TwiML) document builder.

Every method returns the serialized XML document Twilio executes next.
"""

from twilio.twiml.voice_response import VoiceResponse

CONNECTING_PHRASE = "Connecting your call, please wait."
FILLER_PAUSE_SECONDS = 2
CLIENT_RING_TIMEOUT_SECONDS = 5
REDIRECT_RING_TIMEOUT_SECONDS = 30
VOICEMAIL_MAX_LENGTH_SECONDS = 300

TWIML_MEDIA_TYPE = "text/xml"


class CallControlBuilder:
    """Builds TwiML documents for the routing engine."""

    def __init__(self, voice: str = "Polly.Joanna") -> None:
        self._voice = voice

    def empty(self) -> str:
        """Document with no verbs: the call continues as already bridged, or ends."""
        return str(VoiceResponse())

    def say_and_hangup(self, message: str) -> str:
        response = VoiceResponse()
        response.say(message, voice=self._voice)
        response.hangup()
        return str(response)

    def hangup(self) -> str:
        response = VoiceResponse()
        response.hangup()
        return str(response)

    def redirect(self, url: str) -> str:
        response = VoiceResponse()
        response.redirect(url, method="POST")
        return str(response)

    def ring_client(
        self,
        identity: str,
        action_url: str,
        caller_id: str | None = None,
        timeout: int = CLIENT_RING_TIMEOUT_SECONDS,
    ) -> str:
        """Filler phrase, short pause, then one short ring of the software client."""
        response = VoiceResponse()
        response.say(CONNECTING_PHRASE, voice=self._voice)
        response.pause(length=FILLER_PAUSE_SECONDS)
        dial = response.dial(
            caller_id=caller_id or None,
            timeout=timeout,
            action=action_url,
            method="POST",
            ring_tone="us",
        )
        dial.client(identity)
        return str(response)

    def dial_number(
        self,
        number: str,
        action_url: str,
        timeout: int | None = None,
        caller_id: str | None = None,
    ) -> str:
        response = VoiceResponse()
        dial = response.dial(
            caller_id=caller_id or None,
            timeout=timeout,
            action=action_url,
            method="POST",
        )
        dial.number(number)
        return str(response)

    def voicemail(
        self,
        prompt: str,
        action_url: str,
        recording_status_callback: str,
        missing_recording_message: str,
        max_length: int = VOICEMAIL_MAX_LENGTH_SECONDS,
    ) -> str:
        """Prompt, bounded recording, then a goodbye Twilio only reaches when nothing was recorded."""
        response = VoiceResponse()
        if prompt:
            response.say(prompt, voice=self._voice)
        response.record(
            action=action_url,
            method="POST",
            max_length=min(max_length, VOICEMAIL_MAX_LENGTH_SECONDS),
            finish_on_key="*",
            recording_status_callback=recording_status_callback,
            recording_status_callback_method="POST",
        )
        if missing_recording_message:
            response.say(missing_recording_message, voice=self._voice)
        response.hangup()
        return str(response)
