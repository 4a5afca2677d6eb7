"""
Stack Exchange API integration.

Configuration:
─────────────────────────────────────────────────────────────────────────────
Set credentials in environment variables or .env file:

    STACKEXCHANGE_API_KEY       https://stackapps.com (optional, higher limits)
    STACKEXCHANGE_ACCESS_TOKEN  OAuth token (optional)
"""

from api.stackexchange import API_BASE, StackExchangeClient

__all__ = [
    "StackExchangeClient",
    "API_BASE",
]
