"""Shared pytest fixtures for consul-io tests.

Provides an in-memory KV store that behaves like ConsulClient for the
operations used by import and export, with hooks for injecting failures.
"""

from __future__ import annotations

import threading
from collections.abc import Callable
from pathlib import Path

import pytest

from consulio.client.api import ConsulError, KVPair


class FakeKVStore:
    """Thread-safe in-memory KV store.

    Attributes:
        data: Stored values by key.
        put_calls: Number of put() calls, failed ones included.
        get_calls: Number of get() calls, failed ones included.
        fail_put: Keys whose put() always raises ConsulError.
        fail_get: Keys whose get() always raises ConsulError.
        on_get: Optional hook run inside get() (e.g. to slow tasks down).
    """

    def __init__(self, data: dict[str, bytes] | None = None) -> None:
        self.data: dict[str, bytes] = dict(data or {})
        self.put_calls = 0
        self.get_calls = 0
        self.fail_put: set[str] = set()
        self.fail_get: set[str] = set()
        self.on_get: Callable[[str], None] | None = None
        self._lock = threading.Lock()

    def get(self, key: str) -> bytes | None:
        with self._lock:
            self.get_calls += 1
        if self.on_get:
            self.on_get(key)
        if key in self.fail_get:
            raise ConsulError(f"get failed for {key}", 500)
        with self._lock:
            return self.data.get(key)

    def put(self, key: str, value: bytes) -> None:
        with self._lock:
            self.put_calls += 1
        if key in self.fail_put:
            raise ConsulError(f"put failed for {key}", 500)
        with self._lock:
            self.data[key] = value

    def list(self, prefix: str = "") -> list[KVPair]:
        with self._lock:
            return [
                KVPair(key=key, value=value)
                for key, value in sorted(self.data.items())
                if key.startswith(prefix)
            ]


class InstantLimiter:
    """Rate limiter stand-in that never blocks."""

    def __init__(self) -> None:
        self.waits = 0
        self._lock = threading.Lock()

    def wait(self, cancel_event: threading.Event | None = None) -> bool:
        if cancel_event is not None and cancel_event.is_set():
            return False
        with self._lock:
            self.waits += 1
        return True


@pytest.fixture
def store() -> FakeKVStore:
    """Create an empty in-memory KV store."""
    return FakeKVStore()


@pytest.fixture
def limiter() -> InstantLimiter:
    """Create a rate limiter that never sleeps."""
    return InstantLimiter()


@pytest.fixture
def sync_root(tmp_path: Path) -> Path:
    """Create a sync root holding a.txt and b/c.txt."""
    root = tmp_path / "configs"
    (root / "b").mkdir(parents=True)
    (root / "a.txt").write_bytes(b"x")
    (root / "b" / "c.txt").write_bytes(b"y")
    return root
