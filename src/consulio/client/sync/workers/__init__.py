"""Workers for the concurrent import pipeline.

This package provides:
- BaseWorker: Abstract base class that converts errors into outcomes
- UploadWorker: Compares and uploads one file
- BoundedWorkerPool: Walks a directory and runs workers N at a time

Usage:
    from consulio.client.sync.workers import BoundedWorkerPool, UploadWorker

    worker = UploadWorker(connector, limiter, retry_limit=5, rate_limit=0.5)
    pool = BoundedWorkerPool(worker, concurrency=4)
    summary = pool.run(Path("configs"))
"""

from consulio.client.sync.workers.base import BaseWorker
from consulio.client.sync.workers.pool import (
    BoundedWorkerPool,
    PoolState,
    TaskExecutor,
)
from consulio.client.sync.workers.upload_worker import UploadWorker

__all__ = [
    # Base
    "BaseWorker",
    # Workers
    "UploadWorker",
    # Pool
    "BoundedWorkerPool",
    "PoolState",
    "TaskExecutor",
]
