"""
Reliability utilities: admission-gated calls with overload retry.

Local throttling (the admission gate saying no) and upstream overload
(HTTP 429) are tracked with separate counters. Waiting for a local slot
never spends the retry budget reserved for upstream rejections.
"""

import asyncio
import logging
from typing import Any, Awaitable, Callable, Optional

from core.errors import AdmissionTimeoutError, OverloadError
from utils.rate_limit import AdmissionGate

__all__ = [
    "ResilientInvoker",
    "RETRY_AFTER_SECONDS",
    "MAX_RETRIES",
]

logger = logging.getLogger(__name__)

RETRY_AFTER_SECONDS = 2.0
MAX_RETRIES = 3


class ResilientInvoker:
    """
    Runs outbound calls through an admission gate with bounded retry.

    Args:
        gate: Admission gate owned by the server instance
        cooldown_seconds: Fixed wait after a denial or an overload response
        max_retries: Default overload retry budget per call
        max_admission_waits: Optional cap on consecutive gate denials
            (None waits indefinitely)
        sleep: Coroutine used to suspend, injectable for tests
    """

    def __init__(
        self,
        gate: AdmissionGate,
        cooldown_seconds: float = RETRY_AFTER_SECONDS,
        max_retries: int = MAX_RETRIES,
        max_admission_waits: Optional[int] = None,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ):
        self.gate = gate
        self.cooldown_seconds = cooldown_seconds
        self.max_retries = max_retries
        self.max_admission_waits = max_admission_waits
        self._sleep = sleep

    async def invoke(
        self,
        action: Callable[[], Awaitable[Any]],
        retries_remaining: Optional[int] = None,
    ) -> Any:
        """
        Execute ``action`` once admitted, retrying on upstream overload.

        Returns:
            Whatever ``action`` returns

        Raises:
            OverloadError: Upstream kept signalling overload after all retries
            AdmissionTimeoutError: Gate denied more than ``max_admission_waits`` times
        """
        if retries_remaining is None:
            retries_remaining = self.max_retries

        admission_waits = 0

        while True:
            if not self.gate.try_acquire():
                admission_waits += 1
                if (
                    self.max_admission_waits is not None
                    and admission_waits > self.max_admission_waits
                ):
                    raise AdmissionTimeoutError(admission_waits - 1)
                logger.warning(
                    f"Rate limit exceeded, waiting {self.cooldown_seconds:.1f}s "
                    f"before retry (wait {admission_waits})"
                )
                await self._sleep(self.cooldown_seconds)
                continue

            admission_waits = 0
            try:
                return await action()
            except OverloadError as e:
                if retries_remaining <= 0:
                    logger.error(f"Rate limit hit (429), no retries left: {e}")
                    raise
                retries_remaining -= 1
                logger.warning(
                    f"Rate limit hit (429), retrying in {self.cooldown_seconds:.1f}s "
                    f"({retries_remaining} retries left)"
                )
                await self._sleep(self.cooldown_seconds)
