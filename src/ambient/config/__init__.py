from .configuration import (
    RegisteredSetting,
    get_setting,
    get_settings_registry,
    register_setting,
    unregister_setting,
)
from .environment import Environment
from .logging_config import configure_logging, get_logger

__all__ = [
    "Environment",
    "RegisteredSetting",
    "configure_logging",
    "get_logger",
    "get_setting",
    "get_settings_registry",
    "register_setting",
    "unregister_setting",
]
