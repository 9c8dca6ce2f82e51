"""Utility functions for reading and writing option files."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Dict

import yaml

OPTIONS_FILE = "options.yaml"
MISSING_MESSAGE = "Missing required environment variable: {}"
NOT_GIVEN = object()


# ---------------------------------------------------------------------------
# Path helpers
# ---------------------------------------------------------------------------


def get_system_file_path(filename: str) -> Path:
    """Return the path to the configuration file for the current OS."""
    import platform

    os_name = platform.system()
    if os_name in {"Linux", "Darwin"}:
        return Path.home() / ".config" / "ambient" / filename
    elif os_name == "Windows":
        appdata = os.getenv("APPDATA")
        if appdata is not None:
            return Path(appdata) / "ambient" / filename
        return Path("data") / filename
    return Path("data") / filename


# ---------------------------------------------------------------------------
# Option file helpers
# ---------------------------------------------------------------------------


def load_options(path: str | os.PathLike[str]) -> Dict[str, Any]:
    """Load an option table from a YAML file.

    A missing or empty file yields an empty table. The top level of the
    document must be a mapping.
    """
    options_file = Path(path)
    if not options_file.exists():
        return {}

    with open(options_file, "r") as f:
        options = yaml.safe_load(f) or {}

    if not isinstance(options, dict):
        raise ValueError(f"Option file {options_file} must contain a mapping, got {type(options).__name__}")
    return {str(k): v for k, v in options.items()}


def save_options(path: str | os.PathLike[str], options: Dict[str, Any]) -> None:
    """Save an option table to a YAML file."""
    options_file = Path(path)
    os.makedirs(options_file.parent, exist_ok=True)

    with open(options_file, "w") as f:
        yaml.safe_dump(dict(options), f, default_flow_style=False, sort_keys=True)


def get_value(
    key: str,
    default_env: Dict[str, Any],
    default: Any = NOT_GIVEN,
) -> Any:
    """Retrieve a configuration value from the environment or the defaults."""
    value = os.environ.get(key)
    if value is None or str(value) == "":
        value = default_env.get(key, default)

    if value is not NOT_GIVEN:
        return value
    raise Exception(MISSING_MESSAGE.format(key))
