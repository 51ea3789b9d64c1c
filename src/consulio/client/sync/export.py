"""Export of the whole KV store into a local directory.

This module provides:
- export_from_consul: Sequentially write every key to a file under a directory
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from pathlib import Path
from typing import TYPE_CHECKING

from consulio.client.sync.sensitive import scan_sensitive
from consulio.client.sync.types import ExportSummary

if TYPE_CHECKING:
    from consulio.client.api import KVPair, KVStore
    from consulio.client.sync.sensitive import FindingsLog

logger = logging.getLogger(__name__)

# Callback(key, local_path, error) after each key; error is None on success
ExportCallback = Callable[[str, Path, str | None], None]


def _target_path(directory: Path, key: str) -> Path:
    """Map a key to a path under directory, refusing keys that escape it."""
    target = (directory / key.lstrip("/")).resolve()
    if target != directory and directory not in target.parents:
        raise ValueError(f"key {key!r} resolves outside {directory}")
    return target


def _export_pair(pair: KVPair, directory: Path) -> Path:
    target = _target_path(directory, pair.key)
    if pair.is_dir:
        target.mkdir(parents=True, exist_ok=True)
    else:
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(pair.value)
    return target


def export_from_consul(
    client: KVStore,
    directory: Path,
    prefix: str = "",
    findings: FindingsLog | None = None,
    on_result: ExportCallback | None = None,
    on_findings: Callable[[list[str]], None] | None = None,
) -> ExportSummary:
    """Download every key under prefix into directory.

    Keys ending in "/" become directories; every other key becomes a file,
    with parent directories created as needed. Written files are scanned
    for plain-text secrets like imported ones.

    Args:
        client: KV store to read from.
        directory: Destination directory (created if missing).
        prefix: Only export keys under this prefix.
        findings: Shared findings log.
        on_result: Optional callback after each key.
        on_findings: Optional callback receiving the findings of each file.

    Returns:
        Summary of written files, directories and per-key errors.

    Raises:
        ConsulError: If the keys cannot be listed.
        httpx.HTTPError: If the store is unreachable.
    """
    directory = Path(directory).resolve()
    pairs = client.list(prefix)
    logger.info(f"Exporting {len(pairs)} keys to {directory}")

    summary = ExportSummary()
    for pair in pairs:
        try:
            target = _export_pair(pair, directory)
        except (OSError, ValueError) as e:
            message = f"{pair.key}: {e}"
            logger.error(f"Error exporting {message}")
            summary.errors.append(message)
            if on_result:
                on_result(pair.key, directory / pair.key, str(e))
            continue

        if pair.is_dir:
            summary.directories.append(pair.key)
        else:
            summary.files.append(pair.key)
            problems = scan_sensitive(str(target), pair.value)
            if problems:
                summary.findings += len(problems)
                if findings is not None:
                    findings.append(problems)
                if on_findings:
                    on_findings(problems)

        logger.debug(f"Downloaded {pair.key} to {target}")
        if on_result:
            on_result(pair.key, target, None)

    return summary
