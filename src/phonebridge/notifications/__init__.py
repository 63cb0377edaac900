"""
Push notifications for calls, voicemails and messages.
"""
