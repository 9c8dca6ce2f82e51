"""
Concrete settings over common kinds of process-wide state.

Each class here adapts one kind of ambient state (current directory,
environment variables, an option table, standard streams, object attributes,
mapping entries, context variables) to the ``read``/``write`` setting
protocol used by :class:`ambient.scoping.override.ScopedOverride`.
"""

from __future__ import annotations

import contextvars
import os
import sys
from typing import Any, Dict, List, MutableMapping, Optional, Tuple

from ambient.config.configuration import register_setting
from ambient.config.environment import Environment
from ambient.config.logging_config import get_logger
from ambient.scoping.setting import MISSING

log = get_logger(__name__)


class WorkingDirectory:
    """The process current working directory."""

    name = "cwd"

    def read(self) -> str:
        return os.getcwd()

    def write(self, value: str | os.PathLike[str]) -> str:
        old = os.getcwd()
        os.chdir(os.fspath(value))
        return old

    def __repr__(self) -> str:
        return "WorkingDirectory()"


class EnvironmentVariable:
    """
    One environment variable.

    An unset variable reads as ``None``; writing ``None`` unsets it, so an
    override of a variable that did not exist removes it again on exit.
    """

    def __init__(self, key: str, environ: Optional[MutableMapping[str, str]] = None):
        self.key = key
        self.name = f"env:{key}"
        self._environ = environ

    @property
    def environ(self) -> MutableMapping[str, str]:
        return os.environ if self._environ is None else self._environ

    def read(self) -> Optional[str]:
        return self.environ.get(self.key)

    def write(self, value: Optional[str]) -> Optional[str]:
        old = self.environ.get(self.key)
        if value is None:
            self.environ.pop(self.key, None)
        else:
            self.environ[self.key] = str(value)
        return old

    def __repr__(self) -> str:
        return f"EnvironmentVariable({self.key!r})"


class OptionTable:
    """
    A table of named options shared by unrelated code.

    ``set`` returns the values it replaced (``MISSING`` for keys that were not
    present) so the result can be fed straight back to ``set`` to undo a
    change. Setting a key to ``MISSING`` removes it.

    Example:
        table = OptionTable({"digits": 7})
        old = table.set(digits=3, warn=1)
        table.set(**old)  # back to {"digits": 7}
    """

    def __init__(self, values: Optional[Dict[str, Any]] = None):
        self._values: Dict[str, Any] = dict(values or {})

    @classmethod
    def from_yaml(cls, path: str | os.PathLike[str]) -> "OptionTable":
        from ambient.config.settings import load_options

        return cls(load_options(path))

    def get(self, key: str, default: Any = None) -> Any:
        return self._values.get(key, default)

    def set(self, **values: Any) -> Dict[str, Any]:
        old = {key: self._values.get(key, MISSING) for key in values}
        for key, value in values.items():
            if value is MISSING:
                self._values.pop(key, None)
            else:
                self._values[key] = value
        return old

    def snapshot(self) -> Dict[str, Any]:
        return dict(self._values)

    def replace(self, values: Dict[str, Any]) -> Dict[str, Any]:
        old = self._values
        self._values = dict(values)
        return old

    def __contains__(self, key: object) -> bool:
        return key in self._values

    def __len__(self) -> int:
        return len(self._values)

    def __repr__(self) -> str:
        return f"OptionTable({self._values!r})"


class Option:
    """One key of an :class:`OptionTable`; absent keys read as ``MISSING``."""

    def __init__(self, table: OptionTable, key: str):
        self.table = table
        self.key = key
        self.name = f"option:{key}"

    def read(self) -> Any:
        return self.table.get(self.key, MISSING)

    def write(self, value: Any) -> Any:
        return self.table.set(**{self.key: value})[self.key]

    def __repr__(self) -> str:
        return f"Option({self.key!r})"


class OptionTableContents:
    """The whole contents of an :class:`OptionTable` as a single setting."""

    def __init__(self, table: OptionTable, name: str = "options"):
        self.table = table
        self.name = name

    def read(self) -> Dict[str, Any]:
        return self.table.snapshot()

    def write(self, value: Dict[str, Any]) -> Dict[str, Any]:
        return self.table.replace(value)


class StreamSetting:
    """``sys.stdout`` or ``sys.stderr``."""

    def __init__(self, stream: str):
        if stream not in ("stdout", "stderr"):
            raise ValueError(f"Only stdout and stderr can be overridden, not {stream!r}")
        self.stream = stream
        self.name = stream

    def read(self) -> Any:
        return getattr(sys, self.stream)

    def write(self, value: Any) -> Any:
        old = getattr(sys, self.stream)
        setattr(sys, self.stream, value)
        return old

    def __repr__(self) -> str:
        return f"StreamSetting({self.stream!r})"


class AttributeSetting:
    """
    One attribute of an object, module or class.

    A missing attribute reads as ``MISSING``; writing ``MISSING`` deletes it.
    """

    def __init__(self, obj: Any, attr: str, name: Optional[str] = None):
        self.obj = obj
        self.attr = attr
        owner = getattr(obj, "__name__", type(obj).__name__)
        self.name = name or f"{owner}.{attr}"

    def read(self) -> Any:
        return getattr(self.obj, self.attr, MISSING)

    def write(self, value: Any) -> Any:
        old = getattr(self.obj, self.attr, MISSING)
        if value is MISSING:
            if old is not MISSING:
                delattr(self.obj, self.attr)
        else:
            setattr(self.obj, self.attr, value)
        return old

    def __repr__(self) -> str:
        return f"AttributeSetting({self.name!r})"


class MappingEntry:
    """
    One key of a mutable mapping, such as a namespace dictionary.

    A missing key reads as ``MISSING``; writing ``MISSING`` deletes it.
    """

    def __init__(self, mapping: MutableMapping[Any, Any], key: Any, name: Optional[str] = None):
        self.mapping = mapping
        self.key = key
        self.name = name or str(key)

    def read(self) -> Any:
        return self.mapping.get(self.key, MISSING)

    def write(self, value: Any) -> Any:
        old = self.mapping.get(self.key, MISSING)
        if value is MISSING:
            self.mapping.pop(self.key, None)
        else:
            self.mapping[self.key] = value
        return old

    def __repr__(self) -> str:
        return f"MappingEntry({self.name!r})"


class ContextVarSetting:
    """
    A :class:`contextvars.ContextVar` as a setting.

    Reads return what ``var.get()`` returns, including the variable's own
    default, and ``MISSING`` when it has neither a value nor a default. Each
    write keeps the token from ``var.set()``; writing back the value that was
    current before the most recent write undoes it with ``var.reset(token)``,
    so a variable that was never set is unset again on restore.

    Writes go to the current context, so tasks started inside an override
    inherit the overridden value in their own copy of the context.
    """

    def __init__(self, var: contextvars.ContextVar[Any]):
        self.var = var
        self.name = var.name
        self._tokens: List[Tuple[contextvars.Token[Any], Any]] = []

    def read(self) -> Any:
        try:
            return self.var.get()
        except LookupError:
            return MISSING

    def write(self, value: Any) -> Any:
        old = self.read()
        if self._tokens and value is self._tokens[-1][1]:
            token, _ = self._tokens.pop()
            self.var.reset(token)
            return old
        if value is MISSING:
            raise ValueError(f"Context variable {self.name!r} can only be unset by undoing the write that set it")
        self._tokens.append((self.var.set(value), old))
        return old

    def __repr__(self) -> str:
        return f"ContextVarSetting({self.name!r})"


WORKING_DIRECTORY = WorkingDirectory()
STDOUT = StreamSetting("stdout")
STDERR = StreamSetting("stderr")

register_setting(WORKING_DIRECTORY, group="Process", description="Current working directory of the process")
register_setting(STDOUT, group="Streams", description="Object bound to sys.stdout")
register_setting(STDERR, group="Streams", description="Object bound to sys.stderr")

_default_options: Optional[OptionTable] = None


def default_options() -> OptionTable:
    """Return the process-wide option table, seeding it from the option file on first use."""
    global _default_options
    if _default_options is None:
        options_file = Environment.get_options_file()
        _default_options = OptionTable(Environment.get_default_options())
        log.debug(f"Loaded {len(_default_options)} default options from {options_file}")
    return _default_options


def reset_default_options() -> None:
    """Forget the process-wide option table; the next access reloads it."""
    global _default_options
    _default_options = None


__all__ = [
    "STDERR",
    "STDOUT",
    "WORKING_DIRECTORY",
    "AttributeSetting",
    "ContextVarSetting",
    "EnvironmentVariable",
    "MappingEntry",
    "Option",
    "OptionTable",
    "OptionTableContents",
    "StreamSetting",
    "WorkingDirectory",
    "default_options",
    "reset_default_options",
]
