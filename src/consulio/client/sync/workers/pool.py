"""Bounded worker pool for directory imports.

This module provides:
- BoundedWorkerPool: Walks a tree and runs one task per file, N at a time
- TaskExecutor: Protocol for the per-file task (implemented by BaseWorker)
- PoolState: Lifecycle state of the pool
"""

from __future__ import annotations

import logging
import os
import threading
from collections.abc import Iterator
from enum import Enum, auto
from pathlib import Path
from typing import Protocol

from consulio.client.sync.ignore import IgnoreList
from consulio.client.sync.types import (
    IgnoredCallback,
    OutcomeCallback,
    RunSummary,
    UploadOutcome,
    UploadUnit,
    WalkError,
)

logger = logging.getLogger(__name__)


class PoolState(Enum):
    """State of the worker pool."""

    IDLE = auto()
    RUNNING = auto()
    CANCELLING = auto()


class TaskExecutor(Protocol):
    """Protocol for per-file tasks run by the pool."""

    def execute(self, unit: UploadUnit) -> UploadOutcome:
        """Process one unit; must not raise."""
        ...


def _raise_walk_error(error: OSError) -> None:
    raise WalkError(f"Error walking the path {error.filename}: {error.strerror}") from error


class BoundedWorkerPool:
    """Walks a directory and uploads every file with bounded concurrency.

    The walk is the single producer. For each regular file it acquires one
    admission token, then starts a thread for the task and keeps walking.
    When all N tokens are held the walk itself blocks, so pending work is
    never buffered. Each task releases its token in a finally clause.

    run() returns only after every dispatched task has finished, also when
    the walk fails part-way.

    Usage:
        pool = BoundedWorkerPool(worker, concurrency=4, ignore=IgnoreList(["tmp"]))
        summary = pool.run(Path("configs"))
    """

    def __init__(
        self,
        executor: TaskExecutor,
        concurrency: int,
        ignore: IgnoreList | None = None,
        on_result: OutcomeCallback | None = None,
        on_ignored: IgnoredCallback | None = None,
        cancel_event: threading.Event | None = None,
    ) -> None:
        """Initialize the pool.

        Args:
            executor: Task run for every file.
            concurrency: Maximum number of tasks holding a token at once.
            ignore: Path prefixes to skip.
            on_result: Callback for each task outcome (called from task threads).
            on_ignored: Callback for each ignored path (called from the walk).
            cancel_event: Shared with the executor; set on cancel().
        """
        if concurrency < 1:
            raise ValueError(f"concurrency must be at least 1, got {concurrency}")

        self._executor = executor
        self._concurrency = concurrency
        self._ignore = ignore or IgnoreList()
        self._on_result = on_result
        self._on_ignored = on_ignored
        self._cancel_event = cancel_event or threading.Event()

        self._tokens = threading.BoundedSemaphore(concurrency)
        self._lock = threading.Lock()
        self._threads: list[threading.Thread] = []
        self._pool_state = PoolState.IDLE

        # Statistics
        self._active = 0
        self._peak_active = 0
        self._dispatched = 0
        self._released = 0

    @property
    def state(self) -> PoolState:
        """Get current pool state."""
        return self._pool_state

    @property
    def concurrency(self) -> int:
        return self._concurrency

    @property
    def cancel_event(self) -> threading.Event:
        return self._cancel_event

    @property
    def active_count(self) -> int:
        """Number of tasks currently holding a token."""
        with self._lock:
            return self._active

    @property
    def peak_active(self) -> int:
        """Highest number of tasks that held a token at the same time."""
        with self._lock:
            return self._peak_active

    @property
    def dispatched_count(self) -> int:
        with self._lock:
            return self._dispatched

    @property
    def released_count(self) -> int:
        """Number of tokens given back by finished tasks."""
        with self._lock:
            return self._released

    def cancel(self) -> None:
        """Stop dispatching and abort pending retries of in-flight tasks."""
        with self._lock:
            if self._pool_state == PoolState.RUNNING:
                self._pool_state = PoolState.CANCELLING
        self._cancel_event.set()
        logger.info("Import cancelled, waiting for in-flight uploads...")

    def run(self, root: Path) -> RunSummary:
        """Upload every file under root.

        Args:
            root: Sync root; KV keys are paths relative to it.

        Returns:
            Summary of all task outcomes.

        Raises:
            WalkError: If the tree cannot be traversed (after in-flight
                tasks have finished).
            RuntimeError: If the pool is already running.
        """
        with self._lock:
            if self._pool_state != PoolState.IDLE:
                raise RuntimeError("Worker pool already running")
            self._pool_state = PoolState.RUNNING

        summary = RunSummary()
        try:
            if not os.path.isdir(root):
                raise WalkError(f"Error walking the path {root}: not a directory")

            for unit in self._walk(Path(root), summary):
                if self._cancel_event.is_set():
                    break
                self._dispatch(unit, summary)
        except KeyboardInterrupt:
            self.cancel()
            raise
        finally:
            try:
                self.join()
            except KeyboardInterrupt:
                # Interrupted while waiting: abort pending retries, then wait again
                self.cancel()
                self.join()
                raise
            finally:
                with self._lock:
                    self._pool_state = PoolState.IDLE

        logger.info(
            f"Import finished: {len(summary.uploaded)} uploaded, "
            f"{len(summary.skipped)} unchanged, {len(summary.failed)} failed"
        )
        return summary

    def join(self) -> None:
        """Wait for every dispatched task to finish."""
        while True:
            with self._lock:
                threads = list(self._threads)
                self._threads.clear()
            if not threads:
                return
            for i, thread in enumerate(threads):
                try:
                    thread.join()
                except BaseException:
                    with self._lock:
                        self._threads.extend(threads[i:])
                    raise

    def _walk(self, root: Path, summary: RunSummary) -> Iterator[UploadUnit]:
        """Yield one unit per regular file, depth-first in sorted order."""
        if self._ignore.matches(root.as_posix(), None):
            self._report_ignored(root.as_posix(), summary)
            return

        for dirpath, dirnames, filenames in os.walk(root, onerror=_raise_walk_error):
            current = Path(dirpath)

            # Prune ignored directories so the walk never descends into them
            kept = []
            for name in sorted(dirnames):
                path = current / name
                key = path.relative_to(root).as_posix()
                if self._ignore.matches(path.as_posix(), key):
                    self._report_ignored(path.as_posix(), summary)
                else:
                    kept.append(name)
            dirnames[:] = kept

            for name in sorted(filenames):
                path = current / name
                key = path.relative_to(root).as_posix()
                if self._ignore.matches(path.as_posix(), key):
                    self._report_ignored(path.as_posix(), summary)
                    continue
                if not path.is_file():
                    logger.debug(f"Skipping non-regular file: {path}")
                    continue
                yield UploadUnit(path=path, key=key)

    def _report_ignored(self, path: str, summary: RunSummary) -> None:
        logger.info(f"Ignoring path: {path}")
        summary.record_ignored(path)
        if self._on_ignored:
            self._on_ignored(path)

    def _dispatch(self, unit: UploadUnit, summary: RunSummary) -> None:
        """Acquire a token (blocking the walk if none is free) and start the task."""
        self._tokens.acquire()
        with self._lock:
            self._active += 1
            self._peak_active = max(self._peak_active, self._active)
            self._dispatched += 1
            index = self._dispatched
            self._threads = [t for t in self._threads if t.is_alive()]

        thread = threading.Thread(
            target=self._run_task,
            args=(unit, summary),
            name=f"UploadTask-{index}",
            daemon=True,
        )
        try:
            thread.start()
        except BaseException:
            self._release()
            raise

        with self._lock:
            self._threads.append(thread)
        logger.debug(f"Task dispatched: {unit.key}")

    def _run_task(self, unit: UploadUnit, summary: RunSummary) -> None:
        """Thread body: run the task, record it and always give the token back."""
        try:
            try:
                outcome = self._executor.execute(unit)
            except Exception as e:
                logger.exception(f"Task error: {unit.key}")
                outcome = UploadOutcome.failed(unit, str(e))

            summary.record(outcome)
            if self._on_result:
                self._on_result(outcome)
        except Exception:
            logger.exception(f"Error reporting result for {unit.key}")
        finally:
            self._release()

    def _release(self) -> None:
        with self._lock:
            self._active -= 1
            self._released += 1
        self._tokens.release()
