"""Advisory scan for secrets committed in plain text.

This module provides:
- scan_sensitive: Report markers that are not fetched from Vault
- FindingsLog: Thread-safe append-only findings file (problems.txt)
- SENSITIVE_MARKERS: Substrings that indicate embedded credentials
"""

from __future__ import annotations

import logging
import re
import threading
from collections.abc import Iterable
from pathlib import Path

logger = logging.getLogger(__name__)

SENSITIVE_MARKERS = ("Password", "Token")

# consul-template action, with optional trim markers: {{- .Data.data.Password -}}
TEMPLATE_ACTION = re.compile(r"\{\{-?\s*(.*?)\s*-?\}\}", re.DOTALL)
# Block reading a secret from Vault's kv engine:
#   {{ with secret "kv/data/app" }}{{ .Data.data.Password }}{{ end }}
VAULT_SECRET_OPEN = re.compile(r'with\s+secret\s+"kv/')
BLOCK_KEYWORDS = ("if", "range", "with", "define", "block")


def _keyword(action: str) -> str:
    return action.split(None, 1)[0] if action else ""


def _strip_secret_blocks(content: str) -> str:
    """Remove every kv secret block, nested actions included.

    Nested if/range/with blocks are tracked so that their end does not close
    the secret block. An unclosed secret block runs to the end of content.
    """
    kept: list[str] = []
    position = 0
    depth = 0
    for action in TEMPLATE_ACTION.finditer(content):
        body = action.group(1)
        if depth == 0:
            if VAULT_SECRET_OPEN.match(body):
                kept.append(content[position : action.start()])
                depth = 1
            continue
        keyword = _keyword(body)
        if keyword in BLOCK_KEYWORDS:
            depth += 1
        elif keyword == "end":
            depth -= 1
            if depth == 0:
                position = action.end()
    if depth == 0:
        kept.append(content[position:])
    return "".join(kept)


def scan_sensitive(
    path: str,
    content: bytes | str,
    markers: Iterable[str] = SENSITIVE_MARKERS,
) -> list[str]:
    """Find sensitive markers that are not wrapped in a Vault secret block.

    Args:
        path: File path, used in the warning text.
        content: File content; bytes are decoded as UTF-8 with replacement.
        markers: Marker substrings (case-sensitive).

    Returns:
        One warning line per offending marker.
    """
    if isinstance(content, bytes):
        content = content.decode("utf-8", errors="replace")
    remainder = _strip_secret_blocks(content)
    return [
        f"Warning: The configuration contains a sensitive key '{marker}' "
        f"that is not stored in Vault in file {path}."
        for marker in markers
        if marker in remainder
    ]


class FindingsLog:
    """Append-only log of sensitive-data findings.

    Shared by all upload tasks of a run; appends are serialized so lines
    never interleave. The file is never truncated between runs.
    """

    def __init__(self, path: Path | str = "problems.txt") -> None:
        self._path = Path(path)
        self._lock = threading.Lock()

    @property
    def path(self) -> Path:
        return self._path

    def append(self, findings: list[str]) -> None:
        """Append findings, one per line.

        Failures are logged, never raised: the scan must not block uploads.
        """
        if not findings:
            return
        with self._lock:
            try:
                with open(self._path, "a", encoding="utf-8") as f:
                    for line in findings:
                        f.write(line + "\n")
            except OSError as e:
                logger.error(f"Error writing to {self._path}: {e}")
