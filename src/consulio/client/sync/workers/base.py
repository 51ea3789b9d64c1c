"""Base worker class for per-file tasks.

This module provides:
- BaseWorker: Abstract base class that turns every exit path into an outcome
"""

from __future__ import annotations

import logging
import threading
import time
from abc import ABC, abstractmethod

from consulio.client.sync.types import (
    RetryCancelledError,
    UploadOutcome,
    UploadUnit,
)

logger = logging.getLogger(__name__)


class BaseWorker(ABC):
    """Abstract base class for workers run by the BoundedWorkerPool.

    One worker instance is shared by every task of a run and execute() is
    called concurrently from the pool's threads, so subclasses must keep
    per-file state local to _do_work().

    execute() never raises: errors raised by _do_work() become FAILED
    outcomes, which keeps one file's failure from reaching the pool.

    Subclasses must implement:
    - _do_work(): The actual work logic
    - worker_type: Property returning the worker type name

    Usage:
        class MyWorker(BaseWorker):
            @property
            def worker_type(self) -> str:
                return "my_worker"

            def _do_work(self, unit: UploadUnit) -> UploadOutcome:
                return UploadOutcome(unit, UploadStatus.UPLOADED)

        outcome = MyWorker().execute(unit)
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._executions = 0

    @property
    @abstractmethod
    def worker_type(self) -> str:
        """Return the worker type name (e.g., 'upload')."""
        ...

    @property
    def executions(self) -> int:
        """Number of execute() calls started."""
        with self._lock:
            return self._executions

    def execute(self, unit: UploadUnit) -> UploadOutcome:
        """Run the task for one unit.

        Args:
            unit: The file to process.

        Returns:
            The task outcome; FAILED if any error was raised.
        """
        with self._lock:
            self._executions += 1

        start_time = time.time()
        try:
            outcome = self._do_work(unit)
        except RetryCancelledError as e:
            logger.info(f"{self.worker_type} worker: {unit.key} cancelled")
            outcome = UploadOutcome.failed(unit, str(e))
        except Exception as e:
            logger.error(f"{self.worker_type} worker failed for {unit.key}: {e}")
            outcome = UploadOutcome.failed(unit, str(e))

        elapsed = time.time() - start_time
        logger.debug(
            f"{self.worker_type} worker: {unit.key} -> {outcome.status.name} "
            f"in {elapsed:.2f}s"
        )
        return outcome

    @abstractmethod
    def _do_work(self, unit: UploadUnit) -> UploadOutcome:
        """Perform the actual work.

        Args:
            unit: The file to process.

        Returns:
            The outcome of a task that ran to completion.

        Raises:
            Exception: Any error; execute() converts it to a FAILED outcome.
        """
        ...
