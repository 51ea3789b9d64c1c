"""Pytest fixtures for integration tests.

This module provides a Consul-compatible KV agent implemented with FastAPI
and served by uvicorn in a background thread, so the real HTTP client and
CLI can be exercised end to end.
"""

from __future__ import annotations

import base64
import socket
import threading
import time
from collections.abc import Generator
from dataclasses import dataclass, field
from typing import Any

import pytest
import uvicorn
from fastapi import FastAPI, Request, Response
from httpx import Client


@dataclass
class FakeConsul:
    """State of the fake agent.

    Attributes:
        url: Base URL of the running agent.
        data: Stored values by key.
        fail_put: Keys whose PUT always answers 500.
        put_counts: Number of PUT requests received per key.
    """

    url: str = ""
    data: dict[str, bytes] = field(default_factory=dict)
    fail_put: set[str] = field(default_factory=set)
    put_counts: dict[str, int] = field(default_factory=dict)
    lock: threading.Lock = field(default_factory=threading.Lock, repr=False)


def create_app(state: FakeConsul) -> FastAPI:
    """Create the FastAPI app serving the subset of the Consul API we use."""
    app = FastAPI()

    @app.get("/health")
    def health() -> dict[str, str]:
        return {"status": "ok"}

    @app.get("/v1/agent/self")
    def agent_self() -> dict[str, Any]:
        return {"Config": {"NodeName": "integration"}}

    @app.get("/v1/kv/{key:path}", response_model=None)
    def get_key(key: str, raw: str | None = None, recurse: str | None = None) -> Any:
        with state.lock:
            if recurse is not None:
                items = [
                    {
                        "Key": k,
                        "Value": base64.b64encode(v).decode() if v else None,
                        "ModifyIndex": i,
                    }
                    for i, (k, v) in enumerate(sorted(state.data.items()), start=1)
                    if k.startswith(key)
                ]
                if not items:
                    return Response(status_code=404)
                return items
            if key not in state.data:
                return Response(status_code=404)
            return Response(content=state.data[key], media_type="application/octet-stream")

    @app.put("/v1/kv/{key:path}", response_model=None)
    async def put_key(key: str, request: Request) -> Any:
        body = await request.body()
        with state.lock:
            state.put_counts[key] = state.put_counts.get(key, 0) + 1
            if key in state.fail_put:
                return Response(status_code=500, content=b"injected failure")
            state.data[key] = body
        return True

    return app


class UvicornTestServer:
    """Uvicorn server running in a background thread for testing."""

    def __init__(self, app: Any, host: str = "127.0.0.1") -> None:
        self.app = app
        self.host = host
        self.port = 0
        self.server: uvicorn.Server | None = None
        self.thread: threading.Thread | None = None

    def start(self) -> int:
        """Start the server and return the port."""
        with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
            s.bind((self.host, 0))
            self.port = s.getsockname()[1]

        config = uvicorn.Config(self.app, host=self.host, port=self.port, log_level="warning")
        self.server = uvicorn.Server(config)
        self.thread = threading.Thread(target=self.server.run, daemon=True)
        self.thread.start()
        self._wait_for_ready()
        return self.port

    def _wait_for_ready(self, timeout: float = 5.0) -> None:
        """Wait for the server to accept connections."""
        start = time.time()
        while time.time() - start < timeout:
            try:
                with Client() as client:
                    if client.get(f"http://{self.host}:{self.port}/health").status_code == 200:
                        return
            except Exception:
                pass
            time.sleep(0.1)
        raise RuntimeError("Server failed to start in time")

    def stop(self) -> None:
        """Stop the server."""
        if self.server:
            self.server.should_exit = True
        if self.thread:
            self.thread.join(timeout=5)


@pytest.fixture
def consul() -> Generator[FakeConsul, None, None]:
    """Start a fake Consul agent with an empty KV store."""
    state = FakeConsul()
    server = UvicornTestServer(create_app(state))
    port = server.start()
    state.url = f"http://127.0.0.1:{port}"

    yield state

    server.stop()
