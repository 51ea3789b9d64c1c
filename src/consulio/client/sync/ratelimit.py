"""Run-wide pacing for remote operations.

This module provides:
- RateLimiter: Hands out time slots spaced at least one interval apart
"""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable

logger = logging.getLogger(__name__)


class RateLimiter:
    """Shared pacing primitive for every remote attempt of a run.

    Each call to wait() reserves the next free slot under a lock and then
    sleeps until that slot arrives. Slots are never closer together than
    the configured interval, so the aggregate attempt rate across all
    threads is capped, not only the rate of a single task.

    The first slot opens one interval after construction, like a periodic
    ticker. Slots are not accumulated while nobody is waiting: after an
    idle period the next caller proceeds immediately.

    Usage:
        limiter = RateLimiter(0.5)
        limiter.wait()   # blocks until the next slot
        client.put(key, value)
    """

    def __init__(
        self,
        interval: float,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """Initialize the limiter.

        Args:
            interval: Minimum spacing between slots, in seconds. 0 disables pacing.
            clock: Monotonic time source (injectable for tests).
        """
        if interval < 0:
            raise ValueError(f"interval must not be negative, got {interval}")
        self._interval = interval
        self._clock = clock
        self._lock = threading.Lock()
        self._next_slot = clock() + interval
        self._slots_granted = 0

    @property
    def interval(self) -> float:
        return self._interval

    @property
    def slots_granted(self) -> int:
        """Number of slots handed out so far."""
        with self._lock:
            return self._slots_granted

    def _reserve(self) -> float:
        """Reserve the next slot and return its start time."""
        with self._lock:
            now = self._clock()
            slot = max(now, self._next_slot)
            self._next_slot = slot + self._interval
            self._slots_granted += 1
            return slot

    def wait(self, cancel_event: threading.Event | None = None) -> bool:
        """Block until the caller's slot arrives.

        Args:
            cancel_event: When set, stop waiting early.

        Returns:
            True when the slot was reached, False if cancelled first.
        """
        if cancel_event is not None and cancel_event.is_set():
            return False

        delay = self._reserve() - self._clock()
        if delay <= 0:
            return True
        if cancel_event is None:
            time.sleep(delay)
            return True
        # Event.wait returns True when the event fired before the timeout
        return not cancel_event.wait(delay)
