"""Vault search command for the consul-io CLI.

Commands:
- search (alias vault-search): Search for a term in Vault KV secrets
"""

from __future__ import annotations

import sys

import click
import httpx

from consulio.client.cli.options import CLIContext, pass_context
from consulio.client.search import DEFAULT_KV_SUBPATH, VaultSearcher
from consulio.client.vault import VaultClient, VaultError
from consulio.core.config import VaultConfig


@click.command("search")
@click.argument("term")
@click.option(
    "--vault-addr",
    envvar="VAULT_ADDR",
    default="http://localhost:8200",
    show_default=True,
    help="Vault server address (e.g. http://vault:8200).",
)
@click.option("--path", "search_path", default=None, help="Search in a specific path only.")
@click.option("--username", default=None, help="Vault username.")
@click.option("--password", default=None, help="Vault password.")
@click.option(
    "--auth-type",
    type=click.Choice(["ldap", "userpass"], case_sensitive=False),
    default=None,
    help="Authentication method used with --username/--password.",
)
@click.option("--token", envvar="VAULT_TOKEN", default=None, help="Vault token.")
@click.option(
    "--kv-subpath",
    default=DEFAULT_KV_SUBPATH,
    show_default=True,
    help="Folder searched below mounts whose name starts with 'kv'.",
)
@pass_context
def search(
    obj: CLIContext,
    term: str,
    vault_addr: str,
    search_path: str | None,
    username: str | None,
    password: str | None,
    auth_type: str | None,
    token: str | None,
    kv_subpath: str,
) -> None:
    """Search for TERM in Vault KV secret values.

    Example: consul-io search "db-host" --vault-addr=http://vault:8200
    """
    reporter = obj.reporter
    config = VaultConfig(
        address=vault_addr,
        token=token,
        auth_type=auth_type,
        username=username,
        password=password,
    )

    try:
        client = VaultClient.connect(config)
    except (VaultError, httpx.HTTPError) as e:
        reporter.error(f"Vault connection error: {e}")
        sys.exit(1)

    found = 0
    with client:
        try:
            for match in VaultSearcher(client, kv_subpath=kv_subpath).search(
                term, path=search_path
            ):
                found += 1
                click.echo(click.style(f"\nFOUND - Path: {match.path}", fg="green"))
                for key, value in match.fields.items():
                    click.echo(click.style(f"{key}: ", fg="yellow") + click.style(value, fg="red"))
                click.echo("-" * 40)
        except (VaultError, httpx.HTTPError) as e:
            reporter.error(f"Failed to list Vault mounts: {e}")
            sys.exit(1)

    if not found:
        click.echo(f"No secrets containing '{term}' found.")
