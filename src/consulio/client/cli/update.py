"""Version and self-update commands for the consul-io CLI.

Commands:
- version: Print the installed version
- update: Upgrade the installed package with pip
"""

from __future__ import annotations

import subprocess
import sys

import click

from consulio import __version__

PACKAGE_NAME = "consul-io"


@click.command()
def version() -> None:
    """Print the version number of Consul IO."""
    click.echo(f"Consul IO CLI version {__version__}")


@click.command()
def update() -> None:
    """Update the Consul IO CLI to the latest version."""
    click.echo("Updating Consul IO CLI...")
    cmd = [sys.executable, "-m", "pip", "install", "--upgrade", PACKAGE_NAME]
    try:
        subprocess.run(cmd, check=True)
    except (OSError, subprocess.CalledProcessError) as e:
        click.echo(click.style(f"Error updating Consul IO CLI: {e}", fg="red"), err=True)
        sys.exit(1)
    click.echo("Consul IO CLI updated to the latest version.")
