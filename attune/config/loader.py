"""Layered TOML configuration.

Layers, lowest precedence first:
1. config/default.toml (required)
2. config/{ATTUNE_ENV}.toml (optional)

Environment variables are applied on top by Settings, not here.
"""

import os
import tomllib
from pathlib import Path
from typing import Any

DEFAULT_ENVIRONMENT = "development"

# Repository checkout: attune/config/loader.py -> <root>/config
_BUNDLED_CONFIG_DIR = Path(__file__).resolve().parents[2] / "config"


def find_config_dir(start: Path | None = None) -> Path:
    """Locate the directory holding default.toml.

    ATTUNE_CONFIG_DIR wins when set. Otherwise the nearest config/ with a
    default.toml above start (the working directory by default) is used,
    then the one shipped next to the package.

    Raises:
        FileNotFoundError: If ATTUNE_CONFIG_DIR names a missing directory
    """
    override = os.environ.get("ATTUNE_CONFIG_DIR")
    if override:
        path = Path(override)
        if not path.is_dir():
            raise FileNotFoundError(f"Config directory not found: {override}")
        return path

    current = (start or Path.cwd()).resolve()
    for directory in (current, *current.parents):
        candidate = directory / "config"
        if (candidate / "default.toml").is_file():
            return candidate

    return _BUNDLED_CONFIG_DIR


def current_environment() -> str:
    """Name of the active environment layer, from ATTUNE_ENV."""
    value = os.environ.get("ATTUNE_ENV", "").strip().lower()
    return value or DEFAULT_ENVIRONMENT


def read_toml(file_path: Path) -> dict[str, Any]:
    """Read one TOML layer.

    Raises:
        FileNotFoundError: If the file doesn't exist
        tomllib.TOMLDecodeError: If the TOML syntax is invalid
    """
    if not file_path.is_file():
        raise FileNotFoundError(f"Configuration file not found: {file_path}")

    with file_path.open("rb") as f:
        return tomllib.load(f)


def merge_layers(base: dict[str, Any], *overrides: dict[str, Any]) -> dict[str, Any]:
    """Merge layers left to right; tables merge, everything else is replaced.

    The inputs are left untouched.
    """
    result = dict(base)
    for layer in overrides:
        for key, value in layer.items():
            current = result.get(key)
            if isinstance(current, dict) and isinstance(value, dict):
                result[key] = merge_layers(current, value)
            else:
                result[key] = value
    return result


def load_config() -> dict[str, Any]:
    """Merged default and environment layers."""
    config_dir = find_config_dir()

    default_path = config_dir / "default.toml"
    if not default_path.is_file():
        raise FileNotFoundError(
            f"Default configuration file not found: {default_path}. "
            "Create config/default.toml or set ATTUNE_CONFIG_DIR."
        )

    layers = [read_toml(default_path)]
    env_path = config_dir / f"{current_environment()}.toml"
    if env_path.is_file():
        layers.append(read_toml(env_path))

    return merge_layers(*layers)
