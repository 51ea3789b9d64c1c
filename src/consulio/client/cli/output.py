"""Console output for the consul-io CLI.

Upload tasks report from many threads at once; every line goes through a
single lock so output never interleaves.
"""

from __future__ import annotations

import logging
import threading
from pathlib import Path

import click

from consulio.client.sync.types import UploadOutcome, UploadStatus


class ClickEchoHandler(logging.Handler):
    """Logging handler that writes through click, sharing the console lock."""

    def __init__(self, lock: threading.Lock) -> None:
        super().__init__()
        self._lock = lock

    def emit(self, record: logging.LogRecord) -> None:
        try:
            msg = self.format(record)
            with self._lock:
                click.echo(msg, err=True)
        except Exception:
            self.handleError(record)


class ConsoleReporter:
    """Colored per-file reporting for import and export."""

    def __init__(self) -> None:
        self.lock = threading.Lock()

    def _echo(self, message: str, fg: str | None = None, err: bool = False) -> None:
        with self.lock:
            click.echo(click.style(message, fg=fg) if fg else message, err=err)

    def outcome(self, outcome: UploadOutcome) -> None:
        unit = outcome.unit
        if outcome.status == UploadStatus.UPLOADED:
            self._echo(f"Uploaded {unit.path} to {unit.key}", fg="green")
        elif outcome.status == UploadStatus.SKIPPED:
            self._echo(f"No changes detected for file: {unit.path}", fg="green")
        else:
            self._echo(f"Error: {unit.key}: {outcome.error}", fg="red", err=True)

    def ignored(self, path: str) -> None:
        self._echo(f"Ignoring path: {path}")

    def retrying(self, key: str, attempt: int, error: Exception) -> None:
        self._echo(
            f"Error talking to Consul for {key}, retrying (attempt {attempt}): {error}",
            fg="yellow",
        )

    def findings(self, findings: list[str]) -> None:
        for line in findings:
            self._echo(line, fg="yellow")

    def exported(self, key: str, path: Path, error: str | None) -> None:
        if error:
            self._echo(f"Error exporting {key}: {error}", fg="red", err=True)
        else:
            self._echo(f"Downloaded {key} to {path}", fg="green")

    def success(self, message: str) -> None:
        self._echo(message, fg="green")

    def warning(self, message: str) -> None:
        self._echo(message, fg="yellow")

    def error(self, message: str) -> None:
        self._echo(message, fg="red", err=True)


def configure_logging(verbose: bool, lock: threading.Lock) -> None:
    """Route consulio log records to the console.

    Per-file results are printed by ConsoleReporter, so log records are
    only shown with --verbose.
    """
    consulio_logger = logging.getLogger("consulio")
    for handler in consulio_logger.handlers[:]:
        consulio_logger.removeHandler(handler)

    if verbose:
        handler: logging.Handler = ClickEchoHandler(lock)
        handler.setFormatter(
            logging.Formatter("%(asctime)s %(levelname)s [%(threadName)s] %(name)s: %(message)s")
        )
        consulio_logger.setLevel(logging.DEBUG)
    else:
        handler = logging.NullHandler()
        consulio_logger.setLevel(logging.WARNING)

    consulio_logger.addHandler(handler)
    consulio_logger.propagate = False
