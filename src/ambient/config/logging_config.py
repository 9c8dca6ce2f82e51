import logging
import os
import sys
from typing import ClassVar, Optional, Union

_DEFAULT_FORMAT = os.getenv(
    "AMBIENT_LOG_FORMAT",
    "%(asctime)s | %(levelname)s | %(name)s | %(message)s",
)
_DEFAULT_DATEFMT = os.getenv("AMBIENT_LOG_DATEFMT", "%Y-%m-%d %H:%M:%S")
_configured: Union[bool, str, int] = False


def _supports_color() -> bool:
    try:
        return sys.stdout.isatty() and os.getenv("NO_COLOR") is None
    except Exception:
        return False


class _LevelColorFormatter(logging.Formatter):
    COLORS: ClassVar[dict[str, str]] = {
        "DEBUG": "\x1b[37m",  # light gray
        "INFO": "\x1b[32m",  # green
        "WARNING": "\x1b[33m",  # yellow
        "ERROR": "\x1b[31m",  # red
        "CRITICAL": "\x1b[41m",  # red background
    }

    RESET: ClassVar[str] = "\x1b[0m"

    def __init__(self, fmt: str, datefmt: str, use_color: bool):
        super().__init__(fmt=fmt, datefmt=datefmt)
        self.use_color = use_color

    def format(self, record: logging.LogRecord) -> str:
        if self.use_color:
            levelname = record.levelname
            color = self.COLORS.get(levelname, "")
            record.levelname_color = f"{color}{levelname}{self.RESET}" if color else levelname
        else:
            record.levelname_color = record.levelname
        return super().format(record)


def configure_logging(
    level: Optional[str | int] = None,
    fmt: Optional[str] = None,
    datefmt: Optional[str] = None,
    propagate: bool = False,
) -> str | int:
    """Configure the ``ambient`` logger hierarchy once with a consistent format.

    Only the package logger is touched so that applications embedding the
    library keep control of the root logger. Records stop at the package
    handler unless ``propagate`` is set, so an application that also
    configures the root logger does not see them twice.

    Environment overrides:
    - `AMBIENT_LOG_LEVEL`
    - `AMBIENT_LOG_FORMAT`
    - `AMBIENT_LOG_DATEFMT`
    """
    from ambient.config.environment import Environment

    global _configured

    if isinstance(level, str):
        level = level.upper()

    if level is None:
        level = Environment.get_log_level()

    if _configured and _configured == level:
        return level
    _configured = level

    use_color = _supports_color()
    if fmt is None:
        if os.getenv("AMBIENT_LOG_FORMAT") is None and use_color:
            # Color by level using ANSI; name in cyan, ts in gray
            fmt = "\x1b[90m%(asctime)s\x1b[0m | %(levelname_color)s | \x1b[36m%(name)s\x1b[0m | %(message)s"
        else:
            fmt = _DEFAULT_FORMAT
    datefmt = datefmt if datefmt is not None else _DEFAULT_DATEFMT

    package_logger = logging.getLogger("ambient")
    package_logger.setLevel(level)

    handler = next(
        (h for h in package_logger.handlers if getattr(h, "_ambient_handler", False)),
        None,
    )
    if handler is None:
        handler = logging.StreamHandler()
        handler._ambient_handler = True  # type: ignore[attr-defined]
        package_logger.addHandler(handler)
    handler.setLevel(level)
    handler.setFormatter(_LevelColorFormatter(fmt=fmt, datefmt=datefmt, use_color=use_color))
    package_logger.propagate = propagate
    return level


def get_logger(name: str) -> logging.Logger:
    """Return a module-scoped logger."""
    configure_logging()
    return logging.getLogger(name)
