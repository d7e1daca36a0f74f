"""
Logging - text and JSON log formatting for the CLI.

Logs go to stderr so that command output on stdout stays clean.
JSON output carries one object per line for log aggregation.
"""

import json
import logging
import sys
import traceback
from datetime import datetime, timezone
from typing import Any


# Attributes present on every LogRecord; anything else came in through ``extra``.
_RESERVED_ATTRS = frozenset(
    {
        "args",
        "asctime",
        "created",
        "exc_info",
        "exc_text",
        "filename",
        "funcName",
        "levelname",
        "levelno",
        "lineno",
        "message",
        "module",
        "msecs",
        "msg",
        "name",
        "pathname",
        "process",
        "processName",
        "relativeCreated",
        "stack_info",
        "taskName",
        "thread",
        "threadName",
    }
)

_NOISY_LOGGERS = ("urllib3", "requests")


def _extra_fields(record: logging.LogRecord) -> dict[str, Any]:
    return {k: v for k, v in record.__dict__.items() if k not in _RESERVED_ATTRS}


class JSONFormatter(logging.Formatter):
    """
    Formats log records as single-line JSON objects.

    Extra fields passed via ``extra=`` are collected under ``context``.
    """

    def __init__(
        self,
        include_timestamp: bool = True,
        include_level: bool = True,
        include_logger: bool = True,
        include_location: bool = False,
        static_fields: dict[str, Any] | None = None,
    ):
        super().__init__()
        self.include_timestamp = include_timestamp
        self.include_level = include_level
        self.include_logger = include_logger
        self.include_location = include_location
        self.static_fields = static_fields or {}

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {}

        if self.include_timestamp:
            created = datetime.fromtimestamp(record.created, tz=timezone.utc)
            entry["timestamp"] = created.strftime("%Y-%m-%dT%H:%M:%S.") + (
                f"{int(record.msecs):03d}Z"
            )
        if self.include_level:
            entry["level"] = record.levelname
        if self.include_logger:
            entry["logger"] = record.name

        entry["message"] = record.getMessage()
        entry.update(self.static_fields)

        if self.include_location:
            entry["location"] = {
                "file": record.pathname,
                "line": record.lineno,
                "function": record.funcName,
            }

        if record.exc_info and record.exc_info[0] is not None:
            exc_type, exc_value, exc_tb = record.exc_info
            entry["exception"] = {
                "type": exc_type.__name__,
                "message": str(exc_value),
                "traceback": "".join(traceback.format_exception(exc_type, exc_value, exc_tb)),
            }

        context = _extra_fields(record)
        if context:
            entry["context"] = context

        return json.dumps(entry, default=str)


class TextFormatter(logging.Formatter):
    """Human-readable formatter with optional colors and context."""

    LEVEL_COLORS = {
        "DEBUG": "\033[2m",
        "INFO": "\033[36m",
        "WARNING": "\033[33m",
        "ERROR": "\033[31m",
        "CRITICAL": "\033[1;31m",
    }
    RESET = "\033[0m"

    def __init__(self, use_colors: bool = True, include_context: bool = False):
        super().__init__(datefmt="%H:%M:%S")
        self.use_colors = use_colors
        self.include_context = include_context

    def format(self, record: logging.LogRecord) -> str:
        level = record.levelname
        if self.use_colors and level in self.LEVEL_COLORS:
            level = f"{self.LEVEL_COLORS[level]}{level}{self.RESET}"

        timestamp = self.formatTime(record, self.datefmt)
        line = f"{timestamp} {level} {record.name}: {record.getMessage()}"

        if self.include_context:
            context = _extra_fields(record)
            if context:
                line += " " + " ".join(f"{k}={v}" for k, v in context.items())

        if record.exc_info:
            line += "\n" + self.formatException(record.exc_info)
        return line


def setup_logging(
    level: int = logging.INFO,
    log_format: str = "text",
    log_file: str | None = None,
    static_fields: dict[str, Any] | None = None,
) -> None:
    """
    Configure the root logger.

    Existing root handlers are replaced. A log file, when given, receives
    the same format without colors.

    Args:
        level: Root log level.
        log_format: "text" or "json".
        log_file: Optional path of a file to also log to.
        static_fields: Fields added to every JSON record.
    """
    root = logging.getLogger()
    for handler in root.handlers[:]:
        root.removeHandler(handler)
    root.setLevel(level)

    def make_formatter(use_colors: bool) -> logging.Formatter:
        if log_format == "json":
            return JSONFormatter(static_fields=static_fields)
        return TextFormatter(use_colors=use_colors)

    stream = logging.StreamHandler(sys.stderr)
    stream.setFormatter(make_formatter(sys.stderr.isatty()))
    root.addHandler(stream)

    if log_file:
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setFormatter(make_formatter(False))
        root.addHandler(file_handler)

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
