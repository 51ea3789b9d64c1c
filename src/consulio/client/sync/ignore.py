"""Ignore list for directory imports.

This module provides:
- IgnoreList: Path-prefix matching for --ignore entries
"""

from __future__ import annotations

from collections.abc import Iterable


class IgnoreList:
    """Matches walked paths against --ignore prefixes.

    A prefix matches either the path as walked (sync root joined, exactly as
    given on the command line) or the KV key relative to the root. Matching
    is plain string prefix matching on "/"-separated paths, so "conf" also
    matches "config/app.yml".
    """

    def __init__(self, prefixes: Iterable[str] | None = None) -> None:
        """Initialize with prefixes.

        Args:
            prefixes: Path prefixes; empty entries are dropped.
        """
        self._prefixes = [self._normalize(p) for p in (prefixes or []) if p]

    @staticmethod
    def _normalize(path: str) -> str:
        return path.replace("\\", "/")

    @property
    def prefixes(self) -> list[str]:
        return list(self._prefixes)

    def add_prefix(self, prefix: str) -> None:
        if prefix:
            self._prefixes.append(self._normalize(prefix))

    def matches(self, path: str, key: str | None = None) -> bool:
        """Check if an entry should be ignored.

        Args:
            path: Path as walked (root-joined).
            key: Path relative to the sync root, if known.

        Returns:
            True if any prefix matches.
        """
        candidates = [self._normalize(path)]
        if key:
            candidates.append(self._normalize(key))
        return any(
            candidate.startswith(prefix)
            for prefix in self._prefixes
            for candidate in candidates
        )

    def __bool__(self) -> bool:
        return bool(self._prefixes)

    def __len__(self) -> int:
        return len(self._prefixes)
