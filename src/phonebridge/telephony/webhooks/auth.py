"""
Twilio webhook signature verification.

Twilio signs the exact URL it was configured to call, which may differ from
the URL this process sees behind a tunnel or reverse proxy. A signature is
accepted if it matches either the forwarded URL or the URL rebuilt on the
configured webhook base.
"""

from fastapi import Request

from phonebridge.shared.exceptions import ConfigurationError, WebhookAuthenticationError
from phonebridge.shared.logging import get_logger
from phonebridge.telephony.interface import TelephonyProvider

logger = get_logger(__name__)

SIGNATURE_HEADER = "X-Twilio-Signature"


class WebhookAuthenticator:
    """Checks the Twilio signature of inbound webhook requests."""

    def __init__(
        self,
        provider: TelephonyProvider,
        webhook_base_url: str,
        enforce: bool = True,
    ) -> None:
        self._provider = provider
        self._webhook_base_url = webhook_base_url.rstrip("/")
        self._enforce = enforce

    @property
    def enforce(self) -> bool:
        return self._enforce

    def candidate_urls(self, request: Request) -> list[str]:
        """URLs Twilio may have signed, most likely first, without duplicates."""
        path_and_query = request.url.path
        if request.url.query:
            path_and_query = f"{path_and_query}?{request.url.query}"

        forwarded_proto = (request.headers.get("x-forwarded-proto") or "").split(",")[0].strip()
        forwarded_host = (request.headers.get("x-forwarded-host") or "").split(",")[0].strip()
        proto = forwarded_proto or request.url.scheme
        host = forwarded_host or request.headers.get("host") or request.url.netloc

        candidates = [f"{proto}://{host}{path_and_query}"]
        if self._webhook_base_url:
            candidates.append(f"{self._webhook_base_url}{path_and_query}")

        return list(dict.fromkeys(candidates))

    async def verify(self, request: Request) -> bool:
        signature = request.headers.get(SIGNATURE_HEADER, "")
        if not signature:
            return False

        form = await request.form()
        params = {k: str(v) for k, v in form.items()}

        return any(
            self._provider.validate_webhook_signature(url, params, signature)
            for url in self.candidate_urls(request)
        )

    async def authenticate(self, request: Request) -> None:
        """Raise unless the request carries a valid Twilio signature.

        Raises:
            ConfigurationError: Enforcement is on but no auth token is configured.
            WebhookAuthenticationError: The signature is missing or does not match.
        """
        if not self._enforce:
            return

        if not self._provider.can_validate:
            logger.error("Webhook signature enforcement enabled without an auth token")
            raise ConfigurationError(
                "Webhook authentication is not configured",
                code="WEBHOOK_AUTH_NOT_CONFIGURED",
            )

        if not await self.verify(request):
            logger.warning(
                "Rejected webhook with invalid signature",
                extra={"path": request.url.path, "candidates": self.candidate_urls(request)},
            )
            raise WebhookAuthenticationError()
