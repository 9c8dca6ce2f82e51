"""
Scoped overrides of ambient state.

A scoped override installs a new value into a setting, runs a body, and puts
the previous value back exactly once on every way out of the body: normal
return, exception, or task cancellation.

Example:
    cwd = WorkingDirectory()

    with ScopedOverride(cwd, "/tmp") as installed:
        assert cwd.read() == installed

    # Same thing in functional form
    listing = run_with_override(cwd, "/tmp", lambda: os.listdir("."))

Overrides of one setting nest in LIFO order. They are meant for state with a
single logical owner at a time; concurrent call stacks that override the same
setting must coordinate themselves.
"""

from __future__ import annotations

import contextlib
from enum import Enum
from typing import Any, Awaitable, Callable, Generic, Iterable, Iterator, Optional, Sequence, Tuple, TypeVar

from ambient.config.logging_config import get_logger
from ambient.scoping.errors import OverrideError, RestorationFailure, SettingWriteError
from ambient.scoping.setting import MutableSetting

log = get_logger(__name__)

T = TypeVar("T")
V = TypeVar("V")

_NOT_INSTALLED = object()


class OverrideState(str, Enum):
    IDLE = "idle"
    INSTALLING = "installing"
    ACTIVE = "active"
    RESTORING = "restoring"
    DONE = "done"
    FAILED = "failed"


class ScopedOverride(Generic[V]):
    """
    Context manager that overrides a setting for the duration of a block.

    Entering reads the current value, installs ``new_value`` and returns it.
    Leaving writes the previous value back, whatever caused the block to
    exit. Each instance is single-use.

    Failures:
        - The setting cannot be read or written on entry: ``SettingWriteError``
          is raised, nothing was changed and nothing will be restored.
        - The previous value cannot be written back: ``RestorationFailure`` is
          raised. It replaces any exception raised by the block, which stays
          reachable as ``__context__``.
    """

    def __init__(self, setting: MutableSetting[V], new_value: V):
        self.setting = setting
        self.new_value = new_value
        self.state = OverrideState.IDLE
        self._previous: Any = _NOT_INSTALLED

    @property
    def previous(self) -> V:
        """Value the setting held before this override was installed."""
        if self._previous is _NOT_INSTALLED:
            raise RuntimeError(f"Override of {self.setting.name!r} has not been installed")
        return self._previous

    def _install(self) -> V:
        if self.state is not OverrideState.IDLE:
            raise RuntimeError(f"Override of {self.setting.name!r} is single-use (state: {self.state.value})")

        self.state = OverrideState.INSTALLING
        name = self.setting.name
        try:
            previous = self.setting.read()
        except OverrideError:
            self.state = OverrideState.FAILED
            raise
        except Exception as e:
            self.state = OverrideState.FAILED
            log.warning(f"Reading setting {name!r} before override failed: {e}")
            raise SettingWriteError(name, self.new_value, f"Could not read current value of setting {name!r}") from e

        try:
            self.setting.write(self.new_value)
        except SettingWriteError:
            self.state = OverrideState.FAILED
            log.warning(f"Installing {self.new_value!r} into setting {name!r} was refused")
            raise
        except Exception as e:
            self.state = OverrideState.FAILED
            log.warning(f"Installing {self.new_value!r} into setting {name!r} failed: {e}")
            raise SettingWriteError(name, self.new_value) from e

        self._previous = previous
        self.state = OverrideState.ACTIVE
        log.debug(f"Override {name!r}: {previous!r} -> {self.new_value!r}")
        return self.new_value

    def _restore(self, exc: Optional[BaseException] = None) -> None:
        self.state = OverrideState.RESTORING
        name = self.setting.name
        cause: Optional[Exception] = None
        try:
            self.setting.write(self._previous)
        except Exception as e:
            cause = e

        if cause is not None:
            self.state = OverrideState.FAILED
            log.error(f"Restoring setting {name!r} to {self._previous!r} failed: {cause}")
            failure = RestorationFailure(name, self._previous, self.new_value)
            # Raised outside the except block so the body's exception, not
            # the write error, becomes the implicit context.
            failure.__context__ = exc
            raise failure from cause
        self.state = OverrideState.DONE
        log.debug(f"Restored {name!r} to {self._previous!r}")

    def __enter__(self) -> V:
        return self._install()

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self._restore(exc_val)

    async def __aenter__(self) -> V:
        return self._install()

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        self._restore(exc_val)

    def __repr__(self) -> str:
        return f"ScopedOverride({self.setting.name!r}, {self.new_value!r}, state={self.state.value})"


def run_with_override(setting: MutableSetting[V], new_value: V, body: Callable[[], T]) -> T:
    """Run ``body()`` with ``setting`` temporarily set to ``new_value``."""
    with ScopedOverride(setting, new_value):
        return body()


def run_with_override_ref(setting: MutableSetting[V], new_value: V, body: Callable[[V], T]) -> T:
    """Like :func:`run_with_override`, passing the installed value to ``body``."""
    with ScopedOverride(setting, new_value) as installed:
        return body(installed)


async def arun_with_override(
    setting: MutableSetting[V],
    new_value: V,
    body: Callable[[], Awaitable[T]],
) -> T:
    """
    Await ``body()`` with ``setting`` temporarily set to ``new_value``.

    If the awaiting task is cancelled the previous value is restored before
    ``asyncio.CancelledError`` leaves this frame. Other tasks running while
    ``body`` is suspended observe the overridden value.
    """
    async with ScopedOverride(setting, new_value):
        return await body()


async def arun_with_override_ref(
    setting: MutableSetting[V],
    new_value: V,
    body: Callable[[V], Awaitable[T]],
) -> T:
    """Like :func:`arun_with_override`, passing the installed value to ``body``."""
    async with ScopedOverride(setting, new_value) as installed:
        return await body(installed)


@contextlib.contextmanager
def override_many(pairs: Iterable[Tuple[MutableSetting[Any], Any]]) -> Iterator[Sequence[Any]]:
    """
    Override several settings at once.

    Settings are installed in the given order and restored in reverse. If an
    installation fails part-way, the overrides already installed are restored
    before the ``SettingWriteError`` propagates.

    Example:
        with override_many([(EnvironmentVariable("LANG"), "C"), (cwd, "/tmp")]):
            run_tool()
    """
    with contextlib.ExitStack() as stack:
        installed = [stack.enter_context(ScopedOverride(setting, value)) for setting, value in pairs]
        yield installed


__all__ = [
    "OverrideState",
    "ScopedOverride",
    "arun_with_override",
    "arun_with_override_ref",
    "override_many",
    "run_with_override",
    "run_with_override_ref",
]
