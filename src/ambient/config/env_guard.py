import os
from typing import Any


def get_system_env_value(key: str, default: Any = None) -> Any:
    """Return an environment variable value.

    Tests may monkeypatch os.environ to drive configuration, so we always
    read from the current process environment.
    """
    return os.environ.get(key, default)
