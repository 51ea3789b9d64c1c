"""Upload worker: pushes one local file to the KV store.

This module provides:
- UploadWorker: Fetch, compare, scan and write one file with paced retries
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from typing import TYPE_CHECKING, Any

from consulio.client.sync.compare import contents_match, read_local_file
from consulio.client.sync.retry import retry_with_rate_limit
from consulio.client.sync.sensitive import scan_sensitive
from consulio.client.sync.types import (
    RetryCallback,
    UploadError,
    UploadOutcome,
    UploadStatus,
    UploadUnit,
)
from consulio.client.sync.workers.base import BaseWorker

if TYPE_CHECKING:
    from consulio.client.api import KVStore
    from consulio.client.sync.ratelimit import RateLimiter
    from consulio.client.sync.sensitive import FindingsLog

logger = logging.getLogger(__name__)


class UploadWorker(BaseWorker):
    """Worker for uploading files to the KV store.

    Steps for each unit:
    1. Obtain a store client from the connection factory.
    2. Read the current remote value (paced, retried). A missing key
       counts as an empty remote, not an error.
    3. Read the local file and skip it if the content is unchanged.
    4. Scan the content for plain-text secrets and log findings.
    5. Write the content (paced, retried).

    Usage:
        worker = UploadWorker(connector, limiter, retry_limit=5, rate_limit=0.5)
        outcome = worker.execute(unit)
    """

    def __init__(
        self,
        connect: Callable[[], KVStore],
        limiter: RateLimiter,
        retry_limit: int,
        rate_limit: float,
        findings: FindingsLog | None = None,
        on_retry: RetryCallback | None = None,
        on_findings: Callable[[list[str]], None] | None = None,
        cancel_event: threading.Event | None = None,
    ) -> None:
        """Initialize the upload worker.

        Args:
            connect: Returns a store client; may raise on connection failure.
            limiter: Run-wide rate limiter shared by all tasks.
            retry_limit: Attempts per remote read or write.
            rate_limit: Extra delay after a failed attempt, in seconds.
            findings: Shared findings log; scan results are discarded if None.
            on_retry: Optional callback(key, attempt, error) before each retry.
            on_findings: Optional callback receiving the findings of each file.
            cancel_event: Aborts pending retries when set.
        """
        super().__init__()
        self._connect = connect
        self._limiter = limiter
        self._retry_limit = retry_limit
        self._rate_limit = rate_limit
        self._findings = findings
        self._on_retry = on_retry
        self._on_findings = on_findings
        self._cancel_event = cancel_event

    @property
    def worker_type(self) -> str:
        """Return worker type name."""
        return "upload"

    def _retry(self, func: Callable[[], Any], key: str, description: str) -> Any:
        def on_retry(attempt: int, error: Exception) -> None:
            if self._on_retry:
                self._on_retry(key, attempt, error)

        return retry_with_rate_limit(
            func,
            retry_limit=self._retry_limit,
            limiter=self._limiter,
            interval=self._rate_limit,
            on_retry=on_retry,
            cancel_event=self._cancel_event,
            description=f"{description} {key}",
        )

    def _do_work(self, unit: UploadUnit) -> UploadOutcome:
        """Perform the upload.

        Raises:
            UploadError: If the store client cannot be obtained.
            RetryExhaustedError: If the remote read or write keeps failing.
            LocalReadError: If the local file cannot be read.
        """
        try:
            client = self._connect()
        except Exception as e:
            raise UploadError(f"Error creating Consul client: {e}") from e

        remote = self._retry(lambda: client.get(unit.key), unit.key, "get")

        content = read_local_file(unit.path)
        if contents_match(content, remote):
            logger.info(f"No changes detected for {unit.key}")
            return UploadOutcome(unit=unit, status=UploadStatus.SKIPPED)

        findings = scan_sensitive(str(unit.path), content)
        if findings:
            if self._findings is not None:
                self._findings.append(findings)
            if self._on_findings:
                self._on_findings(findings)

        def put() -> None:
            unit.attempts += 1
            client.put(unit.key, content)

        self._retry(put, unit.key, "put")
        logger.info(f"Uploaded {unit.path} to {unit.key}")
        return UploadOutcome(unit=unit, status=UploadStatus.UPLOADED, findings=findings)
