"""Shared configuration classes for consul-io.

Each command builds its configuration once and passes it down explicitly;
nothing is read from module-level state.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

DEFAULT_CONSUL_ADDR = "http://localhost:8500"
DEFAULT_RATE_LIMIT_MS = 500
DEFAULT_RETRY_LIMIT = 5
DEFAULT_CONCURRENCY = 10
DEFAULT_PROBLEMS_FILE = "problems.txt"


def _normalize_address(address: str) -> str:
    """Add a scheme to bare host:port addresses and drop trailing slashes."""
    address = address.strip().rstrip("/")
    if "://" not in address:
        address = f"http://{address}"
    return address


@dataclass
class ConsulConfig:
    """Configuration for connecting to a Consul agent.

    Attributes:
        address: Base URL of the agent (e.g., "http://localhost:8500").
        token: Optional ACL token sent as X-Consul-Token.
        timeout: Request timeout in seconds.
        verify_ssl: Whether to verify SSL certificates (default True).
    """

    address: str = DEFAULT_CONSUL_ADDR
    token: str | None = None
    timeout: float = 30.0
    verify_ssl: bool = True

    def __post_init__(self) -> None:
        """Normalize agent address."""
        self.address = _normalize_address(self.address)
        if not self.token:
            self.token = None

    @property
    def is_secure(self) -> bool:
        """Check if using HTTPS."""
        return self.address.startswith("https://")


@dataclass
class VaultConfig:
    """Configuration for connecting to a Vault server.

    Attributes:
        address: Base URL of the server (e.g., "http://vault:8200").
        token: Token to use directly; skips login when set.
        auth_type: Login method when no token is given ("ldap" or "userpass").
        username: Login username.
        password: Login password.
        timeout: Request timeout in seconds.
    """

    address: str
    token: str | None = None
    auth_type: str | None = None
    username: str | None = None
    password: str | None = None
    timeout: float = 30.0

    def __post_init__(self) -> None:
        self.address = _normalize_address(self.address)
        if self.auth_type:
            self.auth_type = self.auth_type.lower()


@dataclass
class ImportConfig:
    """Settings for one import run.

    Attributes:
        root: Directory being imported (the sync root).
        ignore: Path prefixes excluded from the walk.
        concurrency: Maximum number of upload tasks in flight.
        retry_limit: Attempts per remote read or write.
        rate_limit_ms: Minimum spacing between remote attempts, run-wide.
        problems_file: Append-only log of sensitive-data findings.
    """

    root: Path
    ignore: list[str] = field(default_factory=list)
    concurrency: int = DEFAULT_CONCURRENCY
    retry_limit: int = DEFAULT_RETRY_LIMIT
    rate_limit_ms: int = DEFAULT_RATE_LIMIT_MS
    problems_file: Path = Path(DEFAULT_PROBLEMS_FILE)

    def __post_init__(self) -> None:
        """Validate limits and normalize paths."""
        self.root = Path(self.root)
        self.problems_file = Path(self.problems_file)
        self.ignore = [p for p in self.ignore if p]
        if self.concurrency < 1:
            raise ValueError(f"concurrency must be at least 1, got {self.concurrency}")
        if self.rate_limit_ms < 0:
            raise ValueError(f"rate limit must not be negative, got {self.rate_limit_ms}")

    @property
    def rate_limit(self) -> float:
        """Rate limit interval in seconds."""
        return self.rate_limit_ms / 1000.0
