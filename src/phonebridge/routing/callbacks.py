"""
Absolute callback URLs handed back to Twilio.

The attempt counter travels in the dial-client / dial-result query string;
the caller number travels on the recording callback. Nothing else about a
call is remembered between hops.
"""

from urllib.parse import urlencode

WEBHOOK_PREFIX = "/webhooks"


class CallbackUrls:
    def __init__(self, base_url: str, prefix: str = WEBHOOK_PREFIX) -> None:
        self._root = f"{base_url.rstrip('/')}{prefix}"

    def _url(self, path: str, **query: object) -> str:
        qs = urlencode({k: v for k, v in query.items() if v is not None and str(v) != ""})
        return f"{self._root}{path}?{qs}" if qs else f"{self._root}{path}"

    def dial_client(self, attempt: int) -> str:
        return self._url("/voice/dial-client", attempt=attempt)

    def dial_result(self, attempt: int) -> str:
        return self._url("/voice/dial-result", attempt=attempt)

    def call_timeout(self) -> str:
        return self._url("/voice/call-timeout")

    def dial_status(self) -> str:
        return self._url("/voice/dial-status")

    def voicemail_complete(self) -> str:
        return self._url("/voice/voicemail-complete")

    def recording(self, caller: str | None = None) -> str:
        return self._url("/voice/recording", **{"from": caller})
