"""Logging setup for renderctl.

Records go to stderr. The default level is WARNING; ``-v`` shows poll and
probe records at INFO.
"""

import logging
import sys
from enum import Enum
from typing import Any

from rich.console import Console
from rich.logging import RichHandler

# Libraries that log every request at INFO.
NOISY_LOGGERS = ("httpx", "httpcore")


class LogLevel(str, Enum):
    """Log level enumeration."""

    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"

    @classmethod
    def from_flags(cls, verbose: int, quiet: bool, default: "LogLevel") -> "LogLevel":
        """Resolve ``-v``/``-vvv``/``-q`` against the configured verbosity."""
        if verbose >= 3:
            return cls.DEBUG
        if verbose >= 1:
            return cls.INFO
        if quiet:
            return cls.ERROR
        return default


def setup_logging(level: LogLevel = LogLevel.WARNING, color: bool = True) -> None:
    """Route renderctl logs to stderr at the given level.

    Args:
        level: Minimum level for renderctl loggers
        color: Use a RichHandler; otherwise plain timestamped lines
    """
    handler: logging.Handler
    if color:
        handler = RichHandler(
            console=Console(stderr=True),
            show_time=True,
            show_path=False,
            rich_tracebacks=True,
        )
        handler.setFormatter(logging.Formatter("%(message)s"))
    else:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(
            logging.Formatter(
                "%(asctime)s %(levelname)s %(name)s: %(message)s",
                datefmt="%Y-%m-%d %H:%M:%S",
            )
        )

    root = logging.getLogger()
    for existing in root.handlers[:]:
        root.removeHandler(existing)
    root.addHandler(handler)

    numeric = getattr(logging, level.value.upper())
    root.setLevel(numeric)
    logging.getLogger("renderctl").setLevel(numeric)
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(numeric, logging.WARNING))


class StructuredLogger:
    """Logger that appends bound context as ``[key=value ...]``.

    Example:
        StructuredLogger(__name__).bind(deploy_id="dep-1").info("Deploy status", status="live")
        logs "Deploy status [deploy_id=dep-1 status=live]"
    """

    def __init__(self, name: str, context: dict[str, Any] | None = None):
        self._logger = logging.getLogger(name)
        self._context = context or {}

    def bind(self, **kwargs: Any) -> "StructuredLogger":
        return StructuredLogger(self._logger.name, {**self._context, **kwargs})

    def _log(self, level: int, message: str, fields: dict[str, Any]) -> None:
        if not self._logger.isEnabledFor(level):
            return
        context = {**self._context, **fields}
        if context:
            message = f"{message} [{' '.join(f'{k}={v}' for k, v in context.items())}]"
        self._logger.log(level, message)

    def debug(self, message: str, **kwargs: Any) -> None:
        self._log(logging.DEBUG, message, kwargs)

    def info(self, message: str, **kwargs: Any) -> None:
        self._log(logging.INFO, message, kwargs)

    def warning(self, message: str, **kwargs: Any) -> None:
        self._log(logging.WARNING, message, kwargs)
