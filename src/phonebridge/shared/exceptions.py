"""
Application error types mapped to HTTP responses in create_app().
"""


class AppError(Exception):
    """Operational error with an HTTP status and a stable error code."""

    def __init__(
        self,
        message: str,
        status_code: int = 400,
        code: str = "APPLICATION_ERROR",
    ) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.code = code


class ConfigurationError(AppError):
    """Required configuration is missing or invalid."""

    def __init__(self, message: str, code: str = "CONFIGURATION_ERROR") -> None:
        super().__init__(message, status_code=500, code=code)


class WebhookAuthenticationError(AppError):
    """Inbound webhook failed the Twilio signature check."""

    def __init__(self, message: str = "Invalid Twilio signature") -> None:
        super().__init__(message, status_code=403, code="INVALID_SIGNATURE")
