"""
Capability objects for ambient state.

A setting is anything with a ``name``, a side-effect free ``read()`` and a
``write(value)`` that installs ``value`` and returns the value it replaced.
Settings are passed around explicitly rather than looked up globally, which
keeps the dependency on ambient state visible at every call site.
"""

from __future__ import annotations

from typing import Any, Callable, Generic, Protocol, TypeVar, runtime_checkable

from ambient.scoping.errors import GuardedAccessError, SettingWriteError

V = TypeVar("V")


class _Missing:
    """Marker for a slot that holds no value at all."""

    _instance: "_Missing | None" = None

    def __new__(cls) -> "_Missing":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "MISSING"

    def __bool__(self) -> bool:
        return False


MISSING: Any = _Missing()


@runtime_checkable
class MutableSetting(Protocol[V]):
    """Protocol for a named piece of ambient state."""

    name: str

    def read(self) -> V:
        """Return the current value without changing it."""
        ...

    def write(self, value: V) -> V:
        """Install ``value`` and return the value it replaced."""
        ...


class FunctionSetting(Generic[V]):
    """
    Adapts a getter and a plain setter into a setting.

    The setter is not expected to report the value it replaces, so ``write``
    reads before writing.

    Example:
        level = FunctionSetting(
            "root-log-level",
            getter=logging.getLogger().getEffectiveLevel,
            setter=logging.getLogger().setLevel,
        )
    """

    def __init__(self, name: str, getter: Callable[[], V], setter: Callable[[V], Any]):
        self.name = name
        self._getter = getter
        self._setter = setter

    def read(self) -> V:
        return self._getter()

    def write(self, value: V) -> V:
        old = self._getter()
        self._setter(value)
        return old

    def __repr__(self) -> str:
        return f"FunctionSetting({self.name!r})"


class SwapSetting(Generic[V]):
    """
    Adapts a setter that already returns the previous value.

    This is the shape of calls such as ``numpy.seterr`` or ``locale.setlocale``
    style swaps: installing a value hands back what was there before.
    """

    def __init__(self, name: str, swap: Callable[[V], V], getter: Callable[[], V]):
        self.name = name
        self._swap = swap
        self._getter = getter

    def read(self) -> V:
        return self._getter()

    def write(self, value: V) -> V:
        return self._swap(value)

    def __repr__(self) -> str:
        return f"SwapSetting({self.name!r})"


class GuardedBinding:
    """
    A binding that refuses to be read or written.

    Installing a guarded binding in place of a name turns every later access
    to that name into a descriptive error, which is how accidental uses of a
    shadowed or deprecated name are trapped.
    """

    def __init__(self, name: str, message: str | None = None):
        self.name = name
        self.message = message or f"{name!r} is guarded and must not be used here"

    def read(self) -> Any:
        raise GuardedAccessError(self.name, self.message)

    def write(self, value: Any) -> Any:
        raise SettingWriteError(self.name, value, f"Guarded binding {self.name!r} is read-only")

    def __repr__(self) -> str:
        return f"GuardedBinding({self.name!r})"


__all__ = [
    "MISSING",
    "FunctionSetting",
    "GuardedBinding",
    "MutableSetting",
    "SwapSetting",
]
