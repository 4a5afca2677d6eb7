"""
Utility helpers: admission control and content rendering.
"""

from utils.helpers import html_to_text, unescape_title
from utils.rate_limit import RATE_LIMIT_MAX_CALLS, RATE_LIMIT_WINDOW, AdmissionGate

__all__ = [
    # Rate limiting
    "AdmissionGate",
    "RATE_LIMIT_WINDOW",
    "RATE_LIMIT_MAX_CALLS",
    # Helpers
    "html_to_text",
    "unescape_title",
]
