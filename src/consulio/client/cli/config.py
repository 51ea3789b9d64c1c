"""Configuration utilities for the consul-io CLI.

Defaults for any command-line option can be stored in
~/.consulio/config.json (or the file named by CONSULIO_CONFIG), using
option names as keys and one nested object per subcommand:

    {
      "consul_addr": "http://consul.internal:8500",
      "rate_limit": 100,
      "import": {"ignore": ["secrets/", "tmp/"]}
    }

The mapping is handed to click as its default_map, so explicit flags and
environment variables still win.
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "CONSULIO_CONFIG"


def get_config_dir() -> Path:
    """Get the configuration directory for consul-io.

    Returns:
        Path to ~/.consulio.
    """
    return Path.home() / ".consulio"


def get_config_file() -> Path:
    """Get the path to the config file."""
    override = os.environ.get(CONFIG_ENV_VAR)
    if override:
        return Path(override).expanduser()
    return get_config_dir() / "config.json"


def load_config(path: Path | None = None) -> dict[str, Any]:
    """Load option defaults from the config file.

    Returns:
        The parsed mapping, or an empty dict if the file does not exist.

    Raises:
        ValueError: If the file is not a JSON object.
    """
    config_file = path or get_config_file()
    if not config_file.exists():
        return {}
    data = json.loads(config_file.read_text(encoding="utf-8"))
    if not isinstance(data, dict):
        raise ValueError(f"{config_file} must contain a JSON object")
    # Accept dashed option names as written on the command line
    return _normalize_keys(data)


def _normalize_keys(data: dict[str, Any]) -> dict[str, Any]:
    result: dict[str, Any] = {}
    for key, value in data.items():
        if isinstance(value, dict):
            result[key] = _normalize_keys(value)
        else:
            result[key.replace("-", "_")] = value
    return result
