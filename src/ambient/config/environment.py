"""
Environment Configuration Module

This module provides configuration for the ambient package through the
Environment class. Values are looked up in this order:

- Environment variables
- `.env` files next to the project root (`.env`, `.env.<ENV>`, `.env.<ENV>.local`)
- Default values from ``DEFAULT_ENV``

The option file named by ``AMBIENT_OPTIONS_FILE`` (or ``options.yaml`` in the
user config folder) seeds the process-wide default option table.
"""

from pathlib import Path
from typing import Any, Dict

from ambient.config.env_guard import get_system_env_value
from ambient.config.settings import (
    NOT_GIVEN,
    OPTIONS_FILE,
    get_system_file_path,
    get_value,
    load_options,
)

DEFAULT_ENV: Dict[str, Any] = {
    "ENV": "development",
    "AMBIENT_LOG_LEVEL": "INFO",
    "AMBIENT_OPTIONS_FILE": None,
    "DEBUG": None,
}


def load_dotenv_files() -> None:
    """Load environment variables from .env files based on current environment."""
    from dotenv import load_dotenv

    project_root = Path.cwd()
    env_name = get_system_env_value("ENV", DEFAULT_ENV["ENV"])

    # Later files do not override earlier ones or the real environment.
    env_files = [
        project_root / ".env",
        project_root / f".env.{env_name}",
        project_root / f".env.{env_name}.local",
    ]

    for env_file in env_files:
        if env_file.exists():
            load_dotenv(env_file, override=False)


class Environment(object):
    """
    Central access to environment driven configuration.

    Values are resolved lazily; ``.env`` files are read the first time a value
    is requested and ``reset()`` forgets everything that was loaded so tests can
    drive configuration through ``monkeypatch.setenv``.
    """

    _loaded: bool = False

    @classmethod
    def load_settings(cls) -> None:
        load_dotenv_files()
        cls._loaded = True

    @classmethod
    def reset(cls) -> None:
        cls._loaded = False

    @classmethod
    def get(cls, key: str, default: Any = NOT_GIVEN) -> Any:
        if not cls._loaded:
            cls.load_settings()
        return get_value(key, DEFAULT_ENV, default)

    @classmethod
    def is_debug(cls) -> bool:
        debug_env = get_system_env_value("DEBUG")
        return bool(debug_env) and debug_env.lower() not in ("0", "false", "no", "off", "")

    @classmethod
    def get_log_level(cls) -> str:
        """Return desired log level string.

        Priority:
        1) If DEBUG env is truthy, return "DEBUG"
        2) AMBIENT_LOG_LEVEL env (default "INFO")
        """
        if cls.is_debug():
            return "DEBUG"
        return str(get_system_env_value("AMBIENT_LOG_LEVEL") or DEFAULT_ENV["AMBIENT_LOG_LEVEL"]).upper()

    @classmethod
    def get_options_file(cls) -> Path:
        """Path of the YAML file seeding the default option table."""
        configured = cls.get("AMBIENT_OPTIONS_FILE")
        if configured:
            return Path(configured)
        return get_system_file_path(OPTIONS_FILE)

    @classmethod
    def get_default_options(cls) -> Dict[str, Any]:
        return load_options(cls.get_options_file())
