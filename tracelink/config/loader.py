"""Reads the layered TOML files under config/.

default.toml holds the base values and {TRACELINK_ENV}.toml overrides them
for one profile. Either file may be absent.
"""

import os
import tomllib
from pathlib import Path
from typing import Any

CONFIG_DIR_ENV = "TRACELINK_CONFIG_DIR"
PROFILE_ENV = "TRACELINK_ENV"
DEFAULT_PROFILE = "development"


def get_config_dir() -> Path:
    """Directory holding the TOML files.

    TRACELINK_CONFIG_DIR wins, otherwise the nearest config/ at or above the
    working directory.
    """
    override = os.environ.get(CONFIG_DIR_ENV)
    if override:
        path = Path(override)
        if not path.is_dir():
            raise FileNotFoundError(f"Config directory not found: {override}")
        return path

    cwd = Path.cwd()
    for candidate in (cwd, *cwd.parents):
        if (candidate / "config").is_dir():
            return candidate / "config"
    return cwd / "config"


def get_environment() -> str:
    """Active profile name, 'development' unless TRACELINK_ENV is set."""
    return os.environ.get(PROFILE_ENV, DEFAULT_PROFILE)


def deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Merge override into a copy of base, descending into nested tables."""
    merged = dict(base)
    for key, value in override.items():
        current = merged.get(key)
        if isinstance(current, dict) and isinstance(value, dict):
            merged[key] = deep_merge(current, value)
        else:
            merged[key] = value
    return merged


def load_config(config_dir: Path | None = None, profile: str | None = None) -> dict[str, Any]:
    """Merge default.toml with the profile file.

    Raises:
        tomllib.TOMLDecodeError: If a present file is not valid TOML
    """
    config_dir = config_dir or get_config_dir()
    merged: dict[str, Any] = {}
    for name in ("default", profile or get_environment()):
        path = config_dir / f"{name}.toml"
        if path.is_file():
            with path.open("rb") as f:
                merged = deep_merge(merged, tomllib.load(f))
    return merged
