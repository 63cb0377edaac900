"""
Webhook endpoints, signature checks and status handling.

Import the router from phonebridge.telephony.webhooks.router directly.
"""
