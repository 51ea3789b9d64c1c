"""HTTP client for the Vault API (used by the search command).

This module provides:
- VaultClient: Token/LDAP/userpass authentication, mounts, list and read
- VaultError, VaultAuthError: Error types
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from consulio.core.config import VaultConfig

logger = logging.getLogger(__name__)

LOGIN_METHODS = ("ldap", "userpass")


class VaultError(Exception):
    """Base exception for Vault API errors."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class VaultAuthError(VaultError):
    """Login failed or token invalid."""


class VaultClient:
    """HTTP client for a Vault server."""

    def __init__(self, config: VaultConfig) -> None:
        self._config = config
        self._token = config.token
        self._client = httpx.Client(base_url=config.address, timeout=config.timeout)
        if self._token:
            self._client.headers["X-Vault-Token"] = self._token

    @classmethod
    def connect(cls, config: VaultConfig) -> VaultClient:
        """Create a client, log in if needed and validate the token.

        Raises:
            VaultAuthError: If credentials are missing or rejected.
            VaultError: If the server answers with another error.
            httpx.HTTPError: If the server cannot be reached.
        """
        client = cls(config)
        try:
            if not config.token and config.auth_type in LOGIN_METHODS:
                client.login(config.auth_type, config.username, config.password)
            client.lookup_self()
        except Exception:
            client.close()
            raise
        return client

    def close(self) -> None:
        """Close the HTTP client."""
        self._client.close()

    def __enter__(self) -> VaultClient:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()

    @property
    def token(self) -> str | None:
        return self._token

    def _handle_response(self, response: httpx.Response) -> httpx.Response:
        """Raise typed errors for failed responses."""
        if response.status_code in (401, 403):
            raise VaultAuthError("Permission denied", response.status_code)
        if response.status_code >= 400:
            try:
                errors = response.json().get("errors") or []
            except ValueError:
                errors = []
            detail = "; ".join(str(e) for e in errors) or response.reason_phrase
            raise VaultError(
                f"Vault returned {response.status_code}: {detail}",
                response.status_code,
            )
        return response

    def login(self, method: str, username: str | None, password: str | None) -> str:
        """Log in with LDAP or userpass and use the returned token.

        Returns:
            The client token.
        """
        if not username or not password:
            raise VaultAuthError("username and password required for authentication")
        response = self._handle_response(
            self._client.post(
                f"/v1/auth/{method}/login/{username}",
                json={"password": password},
            )
        )
        token = response.json()["auth"]["client_token"]
        self._token = token
        self._client.headers["X-Vault-Token"] = token
        logger.debug(f"Logged in to Vault as {username} via {method}")
        return str(token)

    def lookup_self(self) -> dict[str, Any]:
        """Validate the current token."""
        if not self._token:
            raise VaultAuthError("invalid or missing token")
        response = self._handle_response(self._client.get("/v1/auth/token/lookup-self"))
        result: dict[str, Any] = response.json()
        return result

    def list_mounts(self) -> dict[str, dict[str, Any]]:
        """List secret engine mounts keyed by path (e.g. "kv/")."""
        response = self._handle_response(self._client.get("/v1/sys/mounts"))
        payload = response.json()
        mounts = payload.get("data") or payload
        return {
            path: info
            for path, info in mounts.items()
            if isinstance(info, dict) and "type" in info
        }

    def list(self, path: str) -> list[str] | None:
        """List keys under path.

        Returns:
            Key names (folders end in "/"), or None if nothing is listed there.
        """
        response = self._client.get(f"/v1/{path.lstrip('/')}", params={"list": "true"})
        if response.status_code == 404:
            return None
        self._handle_response(response)
        data = response.json().get("data") or {}
        keys = data.get("keys")
        return [str(k) for k in keys] if keys is not None else None

    def read(self, path: str) -> dict[str, Any] | None:
        """Read the secret at path.

        Returns:
            The secret's data, or None if there is no secret.
        """
        response = self._client.get(f"/v1/{path.lstrip('/')}")
        if response.status_code == 404:
            return None
        self._handle_response(response)
        data: dict[str, Any] | None = response.json().get("data")
        return data
