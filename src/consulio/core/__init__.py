"""Core module - Shared run configuration."""

from consulio.core.config import (
    DEFAULT_CONCURRENCY,
    DEFAULT_CONSUL_ADDR,
    DEFAULT_RATE_LIMIT_MS,
    DEFAULT_RETRY_LIMIT,
    ConsulConfig,
    ImportConfig,
    VaultConfig,
)

__all__ = [
    "DEFAULT_CONCURRENCY",
    "DEFAULT_CONSUL_ADDR",
    "DEFAULT_RATE_LIMIT_MS",
    "DEFAULT_RETRY_LIMIT",
    "ConsulConfig",
    "ImportConfig",
    "VaultConfig",
]
