"""Command-line interface for consul-io.

This module provides the main CLI entry point and assembles all commands.

Commands:
- import: Upload config files to the Consul KV store
- export: Download config files from the Consul KV store
- search (alias vault-search): Search for a term in Vault
- version: Print the version number
- update: Upgrade consul-io with pip
"""

from __future__ import annotations

import sys

import click

from consulio import __version__
from consulio.client.cli.config import get_config_dir, get_config_file, load_config
from consulio.client.cli.options import CLIContext, connection_options
from consulio.client.cli.output import ConsoleReporter, configure_logging
from consulio.client.cli.search import search
from consulio.client.cli.transfer import export_cmd, import_cmd
from consulio.client.cli.update import update, version


@click.group()
@click.version_option(__version__, prog_name="consul-io")
@connection_options(defaults=True)
@click.option("--verbose", "-v", is_flag=True, help="Show debug logging.")
@click.pass_context
def cli(
    ctx: click.Context,
    consul_addr: str,
    token: str | None,
    rate_limit: int,
    retry_limit: int,
    concurrency: int,
    verbose: bool,
) -> None:
    """Consul IO - import and export configuration files to/from Consul KV.

    Available commands are:
      - import: Upload config files to Consul KV store
      - export: Download config files from Consul KV store
    """
    reporter = ConsoleReporter()
    configure_logging(verbose, reporter.lock)
    ctx.obj = CLIContext(
        consul_addr=consul_addr,
        token=token,
        rate_limit=rate_limit,
        retry_limit=retry_limit,
        concurrency=concurrency,
        verbose=verbose,
        reporter=reporter,
    )


# Transfer commands
cli.add_command(import_cmd)
cli.add_command(export_cmd)

# Vault search
cli.add_command(search)
cli.add_command(search, name="vault-search")

# Maintenance commands
cli.add_command(version)
cli.add_command(update)


def main() -> None:
    """Entry point for the CLI."""
    try:
        default_map = load_config()
    except ValueError as e:
        click.echo(click.style(f"Invalid config file {get_config_file()}: {e}", fg="red"), err=True)
        sys.exit(1)
    cli(default_map=default_map)


__all__ = [
    # Main entry points
    "cli",
    "main",
    # Config utilities
    "get_config_dir",
    "get_config_file",
    "load_config",
]
