"""
phonebridge: Twilio call routing, voicemail fallback and push notifications.
"""

__version__ = "0.1.0"
