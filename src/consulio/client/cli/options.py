"""Options shared by the consul-io commands.

Connection and pacing options are accepted on the group
(`consul-io --rate-limit 100 import dir`) and again on import/export
(`consul-io import dir --rate-limit 100`); a value given on the
subcommand wins.
"""

from __future__ import annotations

import functools
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

import click

from consulio.client.cli.output import ConsoleReporter
from consulio.core.config import (
    DEFAULT_CONCURRENCY,
    DEFAULT_CONSUL_ADDR,
    DEFAULT_RATE_LIMIT_MS,
    DEFAULT_RETRY_LIMIT,
    ConsulConfig,
)


@dataclass
class CLIContext:
    """Values of the group options, stored as click's ctx.obj."""

    consul_addr: str = DEFAULT_CONSUL_ADDR
    token: str | None = None
    rate_limit: int = DEFAULT_RATE_LIMIT_MS
    retry_limit: int = DEFAULT_RETRY_LIMIT
    concurrency: int = DEFAULT_CONCURRENCY
    verbose: bool = False
    reporter: ConsoleReporter = field(default_factory=ConsoleReporter)

    def override(self, **values: Any) -> CLIContext:
        """Return a copy with every non-None value applied."""
        merged = dict(self.__dict__)
        merged.update({k: v for k, v in values.items() if v is not None})
        return CLIContext(**merged)

    def consul_config(self) -> ConsulConfig:
        return ConsulConfig(address=self.consul_addr, token=self.token)


pass_context = click.make_pass_decorator(CLIContext, ensure=True)


def connection_options(defaults: bool) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
    """Declare --consul-addr, --token, --rate-limit, --retry-limit, --concurrency.

    Args:
        defaults: True on the group (real defaults and env vars); False on
            subcommands, where None means "inherit from the group".
    """

    def default(value: Any) -> Any:
        return value if defaults else None

    def decorator(f: Callable[..., Any]) -> Callable[..., Any]:
        options = [
            click.option(
                "--consul-addr",
                envvar="CONSUL_HTTP_ADDR" if defaults else None,
                default=default(DEFAULT_CONSUL_ADDR),
                show_default=defaults,
                help="Consul address.",
            ),
            click.option(
                "--token",
                envvar="CONSUL_HTTP_TOKEN" if defaults else None,
                default=None,
                help="Consul ACL token.",
            ),
            click.option(
                "--rate-limit",
                type=click.IntRange(min=0),
                default=default(DEFAULT_RATE_LIMIT_MS),
                show_default=defaults,
                help="Rate limit in milliseconds between Consul requests.",
            ),
            click.option(
                "--retry-limit",
                type=int,
                default=default(DEFAULT_RETRY_LIMIT),
                show_default=defaults,
                help="Number of attempts for each Consul request.",
            ),
            click.option(
                "--concurrency",
                type=click.IntRange(min=1),
                default=default(DEFAULT_CONCURRENCY),
                show_default=defaults,
                help="Number of files uploaded concurrently.",
            ),
        ]
        for option in reversed(options):
            f = option(f)
        return f

    return decorator


def inherit_connection_options(f: Callable[..., Any]) -> Callable[..., Any]:
    """Merge subcommand connection options into the group's CLIContext.

    The wrapped command receives the merged CLIContext as its first argument.
    """

    @connection_options(defaults=False)
    @pass_context
    @functools.wraps(f)
    def wrapper(
        obj: CLIContext,
        consul_addr: str | None,
        token: str | None,
        rate_limit: int | None,
        retry_limit: int | None,
        concurrency: int | None,
        **kwargs: Any,
    ) -> Any:
        merged = obj.override(
            consul_addr=consul_addr,
            token=token,
            rate_limit=rate_limit,
            retry_limit=retry_limit,
            concurrency=concurrency,
        )
        return f(merged, **kwargs)

    return wrapper
