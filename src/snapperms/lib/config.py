"""TOML config loading for snapperms."""

import tomllib
from pathlib import Path

from snapperms.lib.models import AppConfig


def load_config(config_path: Path) -> AppConfig:
    """Load AppConfig from a TOML file. Falls back to defaults if file is missing."""
    if not config_path.exists():
        return AppConfig()

    try:
        with open(config_path, "rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ValueError(f"Invalid TOML in {config_path}: {e}") from e

    daemon = data.get("daemon", {})
    rules = data.get("rules", {})

    config = AppConfig()
    if "socket" in daemon:
        config.socket_path = Path(daemon["socket"]).expanduser()
    if "base_url" in daemon:
        config.base_url = daemon["base_url"]
    if "timeout" in daemon:
        timeout = daemon["timeout"]
        if isinstance(timeout, bool) or not isinstance(timeout, (int, float)):
            raise ValueError(f"Invalid timeout in {config_path}: {timeout!r}")
        config.timeout = float(timeout)
    if "interface" in rules:
        config.interface = rules["interface"]

    return config
