"""Import and export commands for the consul-io CLI.

Commands:
- import: Upload a directory of config files to the KV store
- export: Download the KV store into a directory
"""

from __future__ import annotations

import sys
import threading
from pathlib import Path

import click
import httpx

from consulio.client.api import ConsulClient, ConsulConnector, ConsulError
from consulio.client.cli.options import CLIContext, inherit_connection_options
from consulio.client.sync import (
    BoundedWorkerPool,
    FindingsLog,
    IgnoreList,
    RateLimiter,
    UploadWorker,
    WalkError,
    export_from_consul,
)
from consulio.core.config import DEFAULT_PROBLEMS_FILE, ImportConfig

problems_file_option = click.option(
    "--problems-file",
    type=click.Path(dir_okay=False, path_type=Path),
    default=DEFAULT_PROBLEMS_FILE,
    show_default=True,
    help="File that sensitive-data warnings are appended to.",
)


@click.command("import")
@click.argument("directory", type=click.Path(path_type=Path))
@click.option(
    "--ignore",
    multiple=True,
    help=(
        "Path prefix to skip, matched against the walked path or the path "
        "relative to DIRECTORY (repeatable, comma-separated lists accepted)."
    ),
)
@click.option(
    "--fail-on-error",
    is_flag=True,
    help="Exit with status 1 if any file could not be uploaded.",
)
@problems_file_option
@inherit_connection_options
def import_cmd(
    obj: CLIContext,
    directory: Path,
    ignore: tuple[str, ...],
    fail_on_error: bool,
    problems_file: Path,
) -> None:
    """Import config files from DIRECTORY to the Consul KV store.

    Every file becomes one key named after its path relative to DIRECTORY.
    Files whose content already matches the stored value are skipped.
    """
    reporter = obj.reporter
    prefixes = [p.strip() for entry in ignore for p in entry.split(",")]
    try:
        config = ImportConfig(
            root=directory,
            ignore=prefixes,
            concurrency=obj.concurrency,
            retry_limit=obj.retry_limit,
            rate_limit_ms=obj.rate_limit,
            problems_file=problems_file,
        )
    except ValueError as e:
        raise click.UsageError(str(e)) from e

    cancel_event = threading.Event()
    connector = ConsulConnector(obj.consul_config())
    limiter = RateLimiter(config.rate_limit)
    worker = UploadWorker(
        connect=connector,
        limiter=limiter,
        retry_limit=config.retry_limit,
        rate_limit=config.rate_limit,
        findings=FindingsLog(config.problems_file),
        on_retry=reporter.retrying,
        on_findings=reporter.findings,
        cancel_event=cancel_event,
    )
    pool = BoundedWorkerPool(
        worker,
        concurrency=config.concurrency,
        ignore=IgnoreList(config.ignore),
        on_result=reporter.outcome,
        on_ignored=reporter.ignored,
        cancel_event=cancel_event,
    )

    try:
        summary = pool.run(config.root)
    except WalkError as e:
        reporter.error(str(e))
        sys.exit(1)
    except KeyboardInterrupt:
        reporter.warning("Import cancelled.")
        sys.exit(130)
    finally:
        connector.close()

    click.echo(
        f"\n{len(summary.uploaded)} uploaded, {len(summary.skipped)} unchanged, "
        f"{len(summary.failed)} failed, {len(summary.ignored)} ignored"
    )
    if summary.findings:
        reporter.warning(
            f"{summary.findings} sensitive-data warning(s) written to {config.problems_file}"
        )
    if summary.has_failures:
        reporter.error("Some files could not be uploaded:")
        for error in summary.errors:
            reporter.error(f"  ✗ {error}")
        if fail_on_error:
            sys.exit(1)

    reporter.success("Import process completed successfully.")


@click.command("export")
@click.argument("directory", type=click.Path(file_okay=False, path_type=Path))
@click.option("--prefix", default="", help="Only export keys under this prefix.")
@problems_file_option
@inherit_connection_options
def export_cmd(obj: CLIContext, directory: Path, prefix: str, problems_file: Path) -> None:
    """Export config files from the Consul KV store into DIRECTORY."""
    reporter = obj.reporter
    try:
        with ConsulClient.connect(obj.consul_config()) as client:
            summary = export_from_consul(
                client,
                directory,
                prefix=prefix,
                findings=FindingsLog(problems_file),
                on_result=reporter.exported,
                on_findings=reporter.findings,
            )
    except (ConsulError, httpx.HTTPError) as e:
        reporter.error(f"Error: {e}")
        sys.exit(1)

    click.echo(
        f"\n{len(summary.files)} files, {len(summary.directories)} directories, "
        f"{len(summary.errors)} errors"
    )
    reporter.success("Export process completed successfully.")
