"""Logging setup for shipctl.

Log records go to stderr so that build output and `--json` results on
stdout stay machine readable.
"""

import logging
import sys
from enum import Enum
from typing import Any

from rich.console import Console
from rich.logging import RichHandler

NOISY_LOGGERS = ("httpx", "httpcore", "asyncio")
PLAIN_FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"


class LogLevel(str, Enum):
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"

    @property
    def numeric(self) -> int:
        return logging.getLevelName(self.value.upper())


def setup_logging(level: LogLevel = LogLevel.WARNING, rich_output: bool = True) -> logging.Logger:
    """Route shipctl logs to stderr at `level`.

    Rich rendering is used when colour is enabled; otherwise a plain
    timestamped format that survives CI log capture.
    """
    root_logger = logging.getLogger()
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    handler: logging.Handler
    if rich_output:
        handler = RichHandler(
            console=Console(stderr=True),
            show_path=False,
            rich_tracebacks=True,
            markup=False,
        )
        handler.setFormatter(logging.Formatter("%(message)s"))
    else:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(PLAIN_FORMAT, datefmt="%H:%M:%S"))

    root_logger.addHandler(handler)
    root_logger.setLevel(level.numeric)

    logger = logging.getLogger("shipctl")
    logger.setLevel(level.numeric)
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
    return logger


def get_logger(name: str) -> logging.Logger:
    """Logger under the `shipctl` namespace."""
    if name.startswith("shipctl.") or name == "shipctl":
        return logging.getLogger(name)
    return logging.getLogger(f"shipctl.{name}")


def _render(value: Any) -> str:
    if isinstance(value, (list, tuple)):
        return ",".join(_render(v) for v in value)
    text = str(value)
    if " " in text:
        return repr(text)
    return text


class StructuredLogger:
    """Logger that appends keyword context as `[key=value ...]`.

    Lists render comma-joined (`args=build,.,--name,web`) and values with
    spaces are quoted, so one record stays on one greppable line.
    """

    def __init__(self, name: str, context: dict[str, Any] | None = None):
        self._logger = get_logger(name)
        self._context = dict(context or {})

    def bind(self, **kwargs: Any) -> "StructuredLogger":
        """Child logger that adds `kwargs` to every record."""
        return StructuredLogger(self._logger.name, {**self._context, **kwargs})

    def _format_message(self, message: str, **kwargs: Any) -> str:
        fields = {**self._context, **kwargs}
        if not fields:
            return message
        context = " ".join(f"{k}={_render(v)}" for k, v in fields.items())
        return f"{message} [{context}]"

    def debug(self, message: str, **kwargs: Any) -> None:
        if self._logger.isEnabledFor(logging.DEBUG):
            self._logger.debug(self._format_message(message, **kwargs))

    def info(self, message: str, **kwargs: Any) -> None:
        self._logger.info(self._format_message(message, **kwargs))

    def warning(self, message: str, **kwargs: Any) -> None:
        self._logger.warning(self._format_message(message, **kwargs))

    def error(self, message: str, **kwargs: Any) -> None:
        self._logger.error(self._format_message(message, **kwargs))
