"""Keyword search over Vault KV secrets.

This module provides:
- VaultSearcher: Walks kv mounts and yields secrets whose values match a term
- SearchMatch: One secret path with its matching fields
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from dataclasses import dataclass, field
from typing import Any

import httpx

from consulio.client.vault import VaultClient, VaultError

logger = logging.getLogger(__name__)

KV_MOUNT_TYPES = ("kv", "kv-v2")
DEFAULT_KV_SUBPATH = "devops"


@dataclass
class SearchMatch:
    """Secret whose string fields contain the search term."""

    path: str
    fields: dict[str, str] = field(default_factory=dict)


def to_data_path(path: str) -> str:
    """Translate a kv v2 listing path into the path used to read a secret."""
    path = path.replace("kv/metadata/", "kv/data/", 1)
    if not path.startswith("kv/data/") and path.startswith("kv/"):
        path = path.replace("kv/", "kv/data/", 1)
    return path


def to_metadata_path(path: str) -> str:
    """Translate a kv path into the path used to list its keys."""
    if path.startswith("kv/"):
        return path.replace("kv/", "kv/metadata/", 1)
    return path


def match_fields(data: dict[str, Any], term: str) -> dict[str, str]:
    """Return string fields whose value contains term (case-insensitive)."""
    if isinstance(data.get("data"), dict):
        data = data["data"]
    needle = term.lower()
    return {
        key: value
        for key, value in data.items()
        if isinstance(value, str) and needle in value.lower()
    }


class VaultSearcher:
    """Searches secret values across kv mounts.

    Paths under a mount named "kv" are searched below `kv_subpath`.
    Listing or reading errors below the starting path are logged and the
    branch is skipped.
    """

    def __init__(self, client: VaultClient, kv_subpath: str = DEFAULT_KV_SUBPATH) -> None:
        self._client = client
        self._kv_subpath = kv_subpath.strip("/")

    def search(self, term: str, path: str | None = None) -> Iterator[SearchMatch]:
        """Yield every secret containing term.

        Args:
            term: Case-insensitive search term.
            path: Restrict the search to this path; all kv mounts otherwise.

        Raises:
            VaultError: If mounts cannot be listed.
        """
        if path:
            yield from self._search_in_path(path, term)
            return

        for mount_path, info in sorted(self._client.list_mounts().items()):
            if info.get("type") in KV_MOUNT_TYPES:
                yield from self._search_in_path(mount_path, term)

    def _search_in_path(self, path: str, term: str) -> Iterator[SearchMatch]:
        path = path.removesuffix("/")
        if path.startswith("kv") and self._kv_subpath:
            path = f"{path}/{self._kv_subpath}"
        yield from self._traverse(path + "/", term)

    def _traverse(self, path: str, term: str) -> Iterator[SearchMatch]:
        try:
            keys = self._client.list(to_metadata_path(path))
        except (VaultError, httpx.HTTPError) as e:
            logger.debug(f"Cannot list {path}: {e}")
            return

        if keys is None:
            match = self._search_secret(to_data_path(path), term)
            if match:
                yield match
            return

        for key in keys:
            child = path + key
            if key.endswith("/"):
                yield from self._traverse(child, term)
            else:
                match = self._search_secret(to_data_path(child), term)
                if match:
                    yield match

    def _search_secret(self, path: str, term: str) -> SearchMatch | None:
        try:
            data = self._client.read(path)
        except (VaultError, httpx.HTTPError) as e:
            logger.debug(f"Cannot read {path}: {e}")
            return None
        if not data:
            return None
        fields = match_fields(data, term)
        return SearchMatch(path=path, fields=fields) if fields else None
