"""
Errors raised while installing, restoring or reading scoped settings.

Exceptions raised by an override's body are never wrapped; they propagate
unchanged once the previous value has been restored.
"""

from __future__ import annotations

from typing import Any


class OverrideError(Exception):
    """Base class for errors raised by the scoping machinery."""

    def __init__(self, setting_name: str, message: str):
        self.setting_name = setting_name
        self.message = message
        super().__init__(self.message)


class SettingWriteError(OverrideError):
    """Raised when a new value could not be installed.

    The setting still holds its previous value and no restoration is pending,
    so the caller may retry or give up.
    """

    def __init__(self, setting_name: str, value: Any, message: str | None = None):
        self.value = value
        super().__init__(
            setting_name,
            message or f"Could not install {value!r} into setting {setting_name!r}",
        )


class RestorationFailure(OverrideError):
    """Raised when a setting could not be put back to its previous value.

    The ambient state may now differ from both the previous and the overriding
    value and must be inspected by hand. Never retried automatically.
    """

    def __init__(
        self,
        setting_name: str,
        previous_value: Any,
        attempted_value: Any,
        message: str | None = None,
    ):
        self.previous_value = previous_value
        self.attempted_value = attempted_value
        super().__init__(
            setting_name,
            message
            or (
                f"Failed to restore setting {setting_name!r} to {previous_value!r} "
                f"after overriding it with {attempted_value!r}; ambient state may be inconsistent"
            ),
        )


class GuardedAccessError(OverrideError):
    """Raised when a guarded binding is read."""


__all__ = [
    "GuardedAccessError",
    "OverrideError",
    "RestorationFailure",
    "SettingWriteError",
]
