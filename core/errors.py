"""
Error taxonomy for Stack Exchange access.

Upstream errors carry the message the API returned. Overload errors are
the subset the Resilient Invoker is allowed to retry.
"""

from typing import Optional

__all__ = [
    "StackExchangeAPIError",
    "OverloadError",
    "AdmissionTimeoutError",
    "THROTTLE_ERROR_ID",
]

# Stack Exchange reports quota/throttle violations as error_id 502
THROTTLE_ERROR_ID = 502


class StackExchangeAPIError(Exception):
    """Non-2xx response (or transport failure) talking to the Stack Exchange API."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        error_id: Optional[int] = None,
        error_name: Optional[str] = None,
    ):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.error_id = error_id
        self.error_name = error_name


class OverloadError(StackExchangeAPIError):
    """Upstream signalled too many requests (HTTP 429 or throttle_violation)."""


class AdmissionTimeoutError(Exception):
    """The local admission gate kept denying past the configured wait bound."""

    def __init__(self, waits: int):
        super().__init__(f"Admission gate denied {waits} consecutive attempts")
        self.waits = waits
