"""
Telephony package: Twilio adapter, call-control documents and webhooks.

Keep package import side-effects to a minimum to avoid circular imports.
Do not import factory/adapters here.
"""

__all__ = [
    "config",
    "events",
    "factory",
    "interface",
    "mock_adapter",
    "twilio_adapter",
    "twiml",
]
