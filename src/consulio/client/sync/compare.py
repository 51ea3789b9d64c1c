"""Content fingerprints for change detection."""

from __future__ import annotations

import hashlib
from pathlib import Path

from consulio.client.sync.types import LocalReadError


def fingerprint(data: bytes) -> str:
    """Return the MD5 hex digest of data.

    MD5 is only used to detect changed content, never to authenticate it.
    """
    return hashlib.md5(data, usedforsecurity=False).hexdigest()


def read_local_file(path: Path) -> bytes:
    """Read a local file in full.

    Raises:
        LocalReadError: If the file cannot be opened or read.
    """
    try:
        return Path(path).read_bytes()
    except OSError as e:
        raise LocalReadError(f"failed to read file {path}: {e}") from e


def contents_match(local: bytes, remote: bytes | None) -> bool:
    """Check whether local content equals the remote value.

    A missing remote value never matches, even for an empty local file.
    """
    if remote is None:
        return False
    return fingerprint(local) == fingerprint(remote)


def compare_file(path: Path, remote: bytes | None) -> bool:
    """Read a local file and compare it against the remote value.

    Raises:
        LocalReadError: If the file cannot be read.
    """
    return contents_match(read_local_file(path), remote)
