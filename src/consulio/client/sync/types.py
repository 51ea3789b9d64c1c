"""Shared types and dataclasses for sync operations.

This module provides:
- SyncError and subclasses: Exception classes raised by the pipeline
- UploadUnit: The per-file work item
- UploadStatus, UploadOutcome: Result of one upload task
- RunSummary: Thread-safe tally of a whole import run
- ExportSummary: Tally of an export run
- Type aliases for callbacks
"""

from __future__ import annotations

import threading
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import IntEnum, auto
from pathlib import Path


class SyncError(Exception):
    """Base exception for sync errors."""


class WalkError(SyncError):
    """The directory tree could not be traversed."""


class LocalReadError(SyncError):
    """A local file could not be opened or read."""


class UploadError(SyncError):
    """Failed to upload a file."""


class RetryExhaustedError(SyncError):
    """A remote operation failed on every allowed attempt.

    Attributes:
        attempts: Number of attempts actually made.
    """

    def __init__(self, message: str, attempts: int = 0) -> None:
        super().__init__(message)
        self.attempts = attempts


class RetryCancelledError(SyncError):
    """The run was cancelled while an operation was waiting to retry."""


@dataclass
class UploadUnit:
    """One file to upload.

    Attributes:
        path: Absolute local path.
        key: KV key (path relative to the sync root, "/"-separated).
        attempts: Write attempts made so far.
    """

    path: Path
    key: str
    attempts: int = 0


class UploadStatus(IntEnum):
    """Final status of an upload task."""

    UPLOADED = auto()
    SKIPPED = auto()  # Remote value already identical
    FAILED = auto()


@dataclass
class UploadOutcome:
    """Result of running one upload task."""

    unit: UploadUnit
    status: UploadStatus
    error: str | None = None
    findings: list[str] = field(default_factory=list)

    @property
    def success(self) -> bool:
        """Check if the task ended without error."""
        return self.status != UploadStatus.FAILED

    @classmethod
    def failed(cls, unit: UploadUnit, error: str) -> UploadOutcome:
        return cls(unit=unit, status=UploadStatus.FAILED, error=error)


@dataclass
class RunSummary:
    """Tally of an import run.

    Updated concurrently by upload tasks; record() and record_ignored() lock.
    """

    uploaded: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)
    failed: list[str] = field(default_factory=list)
    ignored: list[str] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)
    findings: int = 0
    _lock: threading.Lock = field(
        default_factory=threading.Lock, init=False, repr=False, compare=False
    )

    def record(self, outcome: UploadOutcome) -> None:
        """Add an upload outcome to the tally."""
        with self._lock:
            key = outcome.unit.key
            if outcome.status == UploadStatus.UPLOADED:
                self.uploaded.append(key)
            elif outcome.status == UploadStatus.SKIPPED:
                self.skipped.append(key)
            else:
                self.failed.append(key)
                self.errors.append(f"{key}: {outcome.error}")
            self.findings += len(outcome.findings)

    def record_ignored(self, path: str) -> None:
        with self._lock:
            self.ignored.append(path)

    @property
    def total(self) -> int:
        """Number of files dispatched (ignored paths excluded)."""
        return len(self.uploaded) + len(self.skipped) + len(self.failed)

    @property
    def has_failures(self) -> bool:
        return len(self.failed) > 0


@dataclass
class ExportSummary:
    """Tally of an export run."""

    files: list[str] = field(default_factory=list)
    directories: list[str] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)
    findings: int = 0

    @property
    def has_failures(self) -> bool:
        return len(self.errors) > 0


# Type aliases for reporting callbacks
OutcomeCallback = Callable[[UploadOutcome], None]
IgnoredCallback = Callable[[str], None]
RetryCallback = Callable[[str, int, Exception], None]
