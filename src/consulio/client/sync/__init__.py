"""Sync operations between a local directory and the KV store.

Architecture:
    directory walk → BoundedWorkerPool → UploadWorker → RateLimiter → KV store

Components:
- **BoundedWorkerPool**: Walks the tree, one task per file, at most N in flight
- **UploadWorker**: Fetches, compares, scans and writes one file
- **retry_with_rate_limit**: Fixed-interval retry, every attempt paced
- **RateLimiter**: Run-wide pacing shared by all tasks
- **compare / sensitive**: Content fingerprints and plain-text secret scan
- **export_from_consul**: Sequential download of the whole store

All public symbols are re-exported here.
"""

from consulio.client.sync.compare import (
    compare_file,
    contents_match,
    fingerprint,
    read_local_file,
)
from consulio.client.sync.export import export_from_consul
from consulio.client.sync.ignore import IgnoreList
from consulio.client.sync.ratelimit import RateLimiter
from consulio.client.sync.retry import RETRYABLE_EXCEPTIONS, retry_with_rate_limit
from consulio.client.sync.sensitive import (
    SENSITIVE_MARKERS,
    FindingsLog,
    scan_sensitive,
)
from consulio.client.sync.types import (
    ExportSummary,
    LocalReadError,
    RetryCancelledError,
    RetryExhaustedError,
    RunSummary,
    SyncError,
    UploadError,
    UploadOutcome,
    UploadStatus,
    UploadUnit,
    WalkError,
)
from consulio.client.sync.workers import (
    BaseWorker,
    BoundedWorkerPool,
    PoolState,
    TaskExecutor,
    UploadWorker,
)

__all__ = [
    # Compare
    "compare_file",
    "contents_match",
    "fingerprint",
    "read_local_file",
    # Export
    "export_from_consul",
    # Ignore
    "IgnoreList",
    # Pacing / retry
    "RETRYABLE_EXCEPTIONS",
    "RateLimiter",
    "retry_with_rate_limit",
    # Sensitive data
    "SENSITIVE_MARKERS",
    "FindingsLog",
    "scan_sensitive",
    # Types
    "ExportSummary",
    "LocalReadError",
    "RetryCancelledError",
    "RetryExhaustedError",
    "RunSummary",
    "SyncError",
    "UploadError",
    "UploadOutcome",
    "UploadStatus",
    "UploadUnit",
    "WalkError",
    # Workers
    "BaseWorker",
    "BoundedWorkerPool",
    "PoolState",
    "TaskExecutor",
    "UploadWorker",
]
