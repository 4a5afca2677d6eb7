"""Sliding-window admission control for outbound Stack Exchange calls."""

import threading
import time
from collections import deque
from typing import Callable, Deque

# Defaults mirror Stack Exchange's per-IP guidance
RATE_LIMIT_WINDOW = 60  # seconds
RATE_LIMIT_MAX_CALLS = 30  # max calls per window


class AdmissionGate:
    """
    Sliding-window rate limiter.

    Tracks the timestamps of admitted calls. A call is admitted only while
    fewer than ``max_calls`` admissions fall inside the trailing window.
    Denial is reported, never waited on.
    """

    def __init__(
        self,
        max_calls: int = RATE_LIMIT_MAX_CALLS,
        window_seconds: float = RATE_LIMIT_WINDOW,
        clock: Callable[[], float] = time.monotonic,
    ):
        if max_calls < 1:
            raise ValueError("max_calls must be at least 1")
        if window_seconds <= 0:
            raise ValueError("window_seconds must be positive")

        self.max_calls = max_calls
        self.window_seconds = window_seconds
        self._clock = clock
        self._timestamps: Deque[float] = deque()
        self._lock = threading.Lock()

    def try_acquire(self) -> bool:
        """
        Check if a call is within the rate limit.
        Returns True if admitted (and recorded), False if rate limited.
        """
        with self._lock:
            now = self._clock()

            # Remove timestamps outside the window
            while self._timestamps and now - self._timestamps[0] >= self.window_seconds:
                self._timestamps.popleft()

            if len(self._timestamps) >= self.max_calls:
                return False

            self._timestamps.append(now)
            return True

    @property
    def in_window(self) -> int:
        """Number of admissions currently recorded (not pruned)."""
        with self._lock:
            return len(self._timestamps)
