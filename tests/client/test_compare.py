"""Tests for content comparison."""

from pathlib import Path

import pytest

from consulio.client.sync.compare import (
    compare_file,
    contents_match,
    fingerprint,
    read_local_file,
)
from consulio.client.sync.types import LocalReadError


class TestFingerprint:
    """Tests for fingerprint."""

    def test_md5_hex(self) -> None:
        """Should return the MD5 hex digest."""
        assert fingerprint(b"") == "d41d8cd98f00b204e9800998ecf8427e"

    def test_differs_for_different_content(self) -> None:
        assert fingerprint(b"x") != fingerprint(b"y")


class TestContentsMatch:
    """Tests for contents_match."""

    def test_identical(self) -> None:
        assert contents_match(b"port: 80\n", b"port: 80\n") is True

    def test_different(self) -> None:
        assert contents_match(b"port: 80\n", b"port: 81\n") is False

    def test_missing_remote(self) -> None:
        """Should never match a missing key, even for empty content."""
        assert contents_match(b"", None) is False

    def test_empty_remote_value(self) -> None:
        """Should match an existing key holding an empty value."""
        assert contents_match(b"", b"") is True


class TestLocalFiles:
    """Tests for read_local_file and compare_file."""

    def test_read_local_file(self, tmp_path: Path) -> None:
        path = tmp_path / "a.txt"
        path.write_bytes(b"x")
        assert read_local_file(path) == b"x"

    def test_read_missing_file(self, tmp_path: Path) -> None:
        """Should raise LocalReadError for an unreadable file."""
        with pytest.raises(LocalReadError, match="failed to read file"):
            read_local_file(tmp_path / "missing.txt")

    def test_compare_file(self, tmp_path: Path) -> None:
        path = tmp_path / "a.txt"
        path.write_bytes(b"x")
        assert compare_file(path, b"x") is True
        assert compare_file(path, b"y") is False
        assert compare_file(path, None) is False
