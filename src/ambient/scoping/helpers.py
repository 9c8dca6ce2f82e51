"""
Ready-made ``with_*`` functions built on :class:`ScopedOverride`.

These cover the everyday cases: running code in another directory, with a
different environment variable or option value, capturing what it prints,
rolling back any option changes it makes, and trapping reads of names that
must not be used.
"""

from __future__ import annotations

import contextlib
import io
import re
from typing import Any, Callable, Iterable, Iterator, MutableMapping, Optional, Tuple, TypeVar

from ambient.scoping.override import override_many, run_with_override
from ambient.scoping.setting import GuardedBinding, MutableSetting
from ambient.scoping.targets import (
    WORKING_DIRECTORY,
    EnvironmentVariable,
    MappingEntry,
    Option,
    OptionTable,
    OptionTableContents,
    StreamSetting,
    default_options,
)

T = TypeVar("T")
V = TypeVar("V")


def with_setting(setting: MutableSetting[V]) -> Callable[[V, Callable[[], T]], T]:
    """
    Build a ``with_<name>(new_value, body)`` function for one setting.

    Example:
        with_lang = with_setting(EnvironmentVariable("LANG"))
        with_lang("C", run_tool)
    """

    def with_value(new_value: V, body: Callable[[], T]) -> T:
        return run_with_override(setting, new_value, body)

    slug = re.sub(r"\W+", "_", setting.name).strip("_").lower()
    with_value.__name__ = with_value.__qualname__ = f"with_{slug}"
    with_value.__doc__ = f"Run ``body()`` with setting {setting.name!r} temporarily set to ``new_value``."
    return with_value


with_dir = with_setting(WORKING_DIRECTORY)


def with_envvar(key: str, value: Optional[str], body: Callable[[], T]) -> T:
    """Run ``body()`` with environment variable ``key`` set to ``value`` (``None`` unsets it)."""
    return run_with_override(EnvironmentVariable(key), value, body)


def with_options(table: Optional[OptionTable], body: Callable[[], T], **values: Any) -> T:
    """Run ``body()`` with the given options overridden in ``table`` (the default table if ``None``)."""
    table = table if table is not None else default_options()
    with override_many((Option(table, key), value) for key, value in values.items()):
        return body()


def capture_output(body: Callable[[], T], stream: str = "stdout") -> Tuple[T, str]:
    """Run ``body()`` and return its result together with everything it wrote to ``stream``."""
    buffer = io.StringIO()
    result = run_with_override(StreamSetting(stream), buffer, body)
    return result, buffer.getvalue()


def local_options(body: Callable[[], T], table: Optional[OptionTable] = None) -> T:
    """
    Run ``body()`` and roll back every change it makes to the option table.

    Options the body adds are removed again and options it removes come back.
    """
    contents = OptionTableContents(table if table is not None else default_options())
    return run_with_override(contents, contents.read(), body)


@contextlib.contextmanager
def guard_names(
    namespace: MutableMapping[str, Any],
    names: Iterable[str],
    message: Optional[str] = None,
) -> Iterator[None]:
    """
    Replace ``names`` in ``namespace`` with guarded bindings for the duration of the block.

    Lookups through :func:`namespace_lookup` of a guarded name raise
    ``GuardedAccessError``; the original bindings (or their absence) come back
    on exit.

    Example:
        with guard_names(env, ["T", "F"], "use TRUE and FALSE instead"):
            evaluate(expr, env)
    """
    pairs = [(MappingEntry(namespace, name), GuardedBinding(name, message)) for name in names]
    with override_many(pairs):
        yield


def namespace_lookup(namespace: MutableMapping[str, Any], name: str) -> Any:
    """Look ``name`` up in ``namespace``, failing loudly on guarded bindings."""
    value = namespace[name]
    if isinstance(value, GuardedBinding):
        return value.read()
    return value


__all__ = [
    "capture_output",
    "guard_names",
    "local_options",
    "namespace_lookup",
    "with_dir",
    "with_envvar",
    "with_options",
    "with_setting",
]
