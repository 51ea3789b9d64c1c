"""Fixed-interval retry paced by the run-wide rate limiter.

This module provides:
- retry_with_rate_limit: Bounded retry where every attempt waits for a slot
- RETRYABLE_EXCEPTIONS: Errors that indicate a transient remote failure
"""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable
from typing import TYPE_CHECKING, Any

import httpx

from consulio.client.api import ConsulError
from consulio.client.sync.types import RetryCancelledError, RetryExhaustedError

if TYPE_CHECKING:
    from consulio.client.sync.ratelimit import RateLimiter

logger = logging.getLogger(__name__)

# Remote failures worth another attempt. Local I/O errors are not listed:
# retrying cannot fix a missing or unreadable file.
RETRYABLE_EXCEPTIONS: tuple[type[Exception], ...] = (
    ConsulError,
    httpx.HTTPError,
)


def retry_with_rate_limit(
    func: Callable[[], Any],
    retry_limit: int,
    limiter: RateLimiter,
    interval: float,
    retryable_exceptions: tuple[type[Exception], ...] = RETRYABLE_EXCEPTIONS,
    on_retry: Callable[[int, Exception], None] | None = None,
    cancel_event: threading.Event | None = None,
    description: str = "operation",
) -> Any:
    """Execute a remote operation with bounded, paced retries.

    Every attempt, including the first, first waits for a rate limiter slot.
    After a failed attempt with attempts remaining, the caller additionally
    sleeps for `interval` before queueing for the next slot, so a failure
    costs the rate-limit delay twice.

    Args:
        func: Operation to execute.
        retry_limit: Maximum number of attempts. Zero or less makes no attempt.
        limiter: Shared run-wide rate limiter.
        interval: Extra sleep after a failed attempt, in seconds.
        retryable_exceptions: Exception types that trigger a retry. Anything
            else propagates immediately.
        on_retry: Optional callback(attempt, error) before each retry.
        cancel_event: When set, abort at the next wait.
        description: Operation name used in log and error messages.

    Returns:
        Result of the function.

    Raises:
        RetryExhaustedError: If every attempt failed (chained from the last error).
        RetryCancelledError: If cancel_event was set while waiting.
    """
    if retry_limit <= 0:
        raise RetryExhaustedError(
            f"{description}: retry limit is {retry_limit}, no attempt made",
            attempts=0,
        )

    last_exception: Exception | None = None

    for attempt in range(1, retry_limit + 1):
        if not limiter.wait(cancel_event):
            raise RetryCancelledError(f"{description}: cancelled")
        try:
            return func()
        except retryable_exceptions as e:
            last_exception = e
            if attempt == retry_limit:
                break

            logger.warning(
                f"{description}: attempt {attempt}/{retry_limit} failed: {e}. "
                f"Retrying in {interval:.3f}s..."
            )
            if on_retry:
                on_retry(attempt, e)
            if cancel_event is not None:
                if cancel_event.wait(interval):
                    raise RetryCancelledError(f"{description}: cancelled") from e
            else:
                time.sleep(interval)

    logger.error(f"{description}: all {retry_limit} attempts failed: {last_exception}")
    raise RetryExhaustedError(
        f"{description} failed after {retry_limit} attempts: {last_exception}",
        attempts=retry_limit,
    ) from last_exception
