"""HTTP client for the Consul KV API.

This module provides:
- ConsulClient: HTTP client for the agent's /v1/kv endpoints
- KVPair: A key/value entry returned by recursive listing
- KVStore: Protocol implemented by ConsulClient (and test doubles)
- ConsulConnector: Lazily connects once and shares the client between tasks
- Error types mapped from HTTP status codes
"""

from __future__ import annotations

import base64
import logging
import threading
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, Protocol
from urllib.parse import quote

import httpx

from consulio.core.config import ConsulConfig

logger = logging.getLogger(__name__)


class ConsulError(Exception):
    """Base exception for Consul API errors."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class ConsulAuthError(ConsulError):
    """ACL token rejected or missing."""


class KVStore(Protocol):
    """Protocol for the key-value operations used by upload and export."""

    def get(self, key: str) -> bytes | None:
        """Get the value at key, or None if the key does not exist."""
        ...

    def put(self, key: str, value: bytes) -> None:
        """Store value at key."""
        ...

    def list(self, prefix: str = "") -> list[KVPair]:
        """List every entry under prefix."""
        ...


@dataclass
class KVPair:
    """A single KV entry.

    Keys ending in "/" are directory markers and carry no meaningful value.
    """

    key: str
    value: bytes
    modify_index: int = 0

    @property
    def is_dir(self) -> bool:
        """Check if this entry is a directory marker."""
        return self.key.endswith("/")

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> KVPair:
        """Create from API response dictionary (values are base64)."""
        raw = data.get("Value")
        return cls(
            key=data["Key"],
            value=base64.b64decode(raw) if raw else b"",
            modify_index=data.get("ModifyIndex", 0),
        )


def _kv_path(key: str) -> str:
    return "/v1/kv/" + quote(key.lstrip("/"), safe="/")


class ConsulClient:
    """HTTP client for a Consul agent.

    httpx.Client is safe to share between threads, so one ConsulClient can
    serve every upload task of a run.
    """

    def __init__(self, config: ConsulConfig) -> None:
        """Initialize the client.

        Args:
            config: Agent address, token and timeout.
        """
        self._config = config
        headers = {}
        if config.token:
            headers["X-Consul-Token"] = config.token
        self._client = httpx.Client(
            base_url=config.address,
            timeout=config.timeout,
            headers=headers,
            verify=config.verify_ssl,
        )

    @classmethod
    def connect(cls, config: ConsulConfig) -> ConsulClient:
        """Create a client and check that the agent accepts our token.

        Raises:
            ConsulAuthError: If the token is rejected.
            ConsulError: If the agent answers with an error.
            httpx.HTTPError: If the agent cannot be reached.
        """
        client = cls(config)
        try:
            client.agent_self()
        except Exception:
            client.close()
            raise
        return client

    @property
    def address(self) -> str:
        return self._config.address

    def close(self) -> None:
        """Close the HTTP client."""
        self._client.close()

    def __enter__(self) -> ConsulClient:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()

    def _handle_response(self, response: httpx.Response) -> httpx.Response:
        """Raise typed errors for failed responses."""
        if response.status_code in (401, 403):
            raise ConsulAuthError(
                f"Permission denied: {response.text.strip() or 'invalid token'}",
                response.status_code,
            )
        if response.status_code >= 400:
            detail = response.text.strip() or response.reason_phrase
            raise ConsulError(
                f"Consul returned {response.status_code}: {detail}",
                response.status_code,
            )
        return response

    def agent_self(self) -> dict[str, Any]:
        """Fetch the local agent's configuration (used as a credentials check)."""
        response = self._handle_response(self._client.get("/v1/agent/self"))
        result: dict[str, Any] = response.json()
        return result

    def get(self, key: str) -> bytes | None:
        """Get the raw value stored at key.

        Returns:
            The value, or None if the key does not exist.
        """
        response = self._client.get(_kv_path(key), params={"raw": "true"})
        if response.status_code == 404:
            return None
        return self._handle_response(response).content

    def put(self, key: str, value: bytes) -> None:
        """Store value at key, overwriting any previous value."""
        response = self._handle_response(
            self._client.put(_kv_path(key), content=value)
        )
        try:
            accepted = response.json()
        except ValueError as e:
            raise ConsulError(
                f"Unexpected response writing key {key}: {response.text[:100]}",
                response.status_code,
            ) from e
        if accepted is not True:
            raise ConsulError(f"Consul refused to write key {key}")
        logger.debug(f"Wrote {len(value)} bytes to {key}")

    def list(self, prefix: str = "") -> list[KVPair]:
        """List every entry under prefix, recursively.

        Returns:
            Entries sorted by key as returned by the agent; empty if none exist.
        """
        response = self._client.get(_kv_path(prefix), params={"recurse": "true"})
        if response.status_code == 404:
            return []
        self._handle_response(response)
        return [KVPair.from_dict(item) for item in response.json()]


class ConsulConnector:
    """Connects on first use and hands the same client to every task.

    A failed connection is not cached: the task that triggered it reports
    the error and the next task tries again.
    """

    def __init__(
        self,
        config: ConsulConfig,
        factory: Callable[[ConsulConfig], ConsulClient] = ConsulClient.connect,
    ) -> None:
        self._config = config
        self._factory = factory
        self._client: ConsulClient | None = None
        self._lock = threading.Lock()

    def __call__(self) -> ConsulClient:
        with self._lock:
            if self._client is None:
                logger.debug(f"Connecting to Consul at {self._config.address}")
                self._client = self._factory(self._config)
            return self._client

    def close(self) -> None:
        with self._lock:
            if self._client is not None:
                self._client.close()
                self._client = None
