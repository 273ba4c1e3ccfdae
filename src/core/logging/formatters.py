"""
Log Formatters
=============

- DevFormatter: Colored text format for the console
- FileFormatter: Plain text for category files
- JsonFormatter: Structured JSON for production

Format:
-------
Development (text):
    2026-01-11 12:00:00 | INFO  | aggregator_service        | [search-1a2b3c4d] Live search merged 5 articles

Production (JSON):
    {"timestamp": "2026-01-11T12:00:00.000000Z", "level": "INFO", "logger": "...", "operation_id": "search-1a2b3c4d", "message": "..."}
"""

import json
import logging
from datetime import datetime, timezone

from src.core.logging.context import get_operation_id


# Record attributes that are not user-supplied "extra" fields
_RESERVED_ATTRS = {
    "name", "msg", "args", "created", "filename", "funcName",
    "levelname", "levelno", "lineno", "module", "msecs",
    "pathname", "process", "processName", "relativeCreated",
    "stack_info", "exc_info", "exc_text", "thread", "threadName",
    "taskName", "message",
}


def _operation_prefix() -> str:
    operation_id = get_operation_id()
    return f"[{operation_id}] " if operation_id else ""


def _message_with_exception(formatter: logging.Formatter, record: logging.LogRecord) -> str:
    message = record.getMessage()
    if record.exc_info:
        message = f"{message}\n{formatter.formatException(record.exc_info)}"
    return message


class DevFormatter(logging.Formatter):
    """
    Console formatter with colors.

    Format: {timestamp} | {level} | {logger} | [{operation_id}] {message}
    """

    COLORS = {
        "DEBUG": "\x1b[38;5;244m",    # Gray
        "INFO": "\x1b[38;5;39m",       # Blue
        "WARNING": "\x1b[38;5;208m",   # Orange
        "ERROR": "\x1b[38;5;196m",     # Red
        "CRITICAL": "\x1b[38;5;196;1m",  # Bold Red
    }
    RESET = "\x1b[0m"

    def __init__(self, use_colors: bool = True):
        super().__init__()
        self.use_colors = use_colors

    def format(self, record: logging.LogRecord) -> str:
        timestamp = datetime.fromtimestamp(record.created).strftime("%Y-%m-%d %H:%M:%S")
        level = record.levelname.ljust(5)

        # Keep only the tail of long dotted names
        logger_name = record.name
        if len(logger_name) > 25:
            logger_name = "..." + logger_name[-22:]

        message = _message_with_exception(self, record)
        line = f"{timestamp} | {level} | {logger_name.ljust(25)} | {_operation_prefix()}{message}"

        if self.use_colors:
            color = self.COLORS.get(record.levelname, "")
            line = f"{color}{line}{self.RESET}"

        return line


class FileFormatter(logging.Formatter):
    """
    Plain text formatter for file output (no colors).

    Format: {timestamp} | {level} | {logger} | [{operation_id}] {message}
    """

    def format(self, record: logging.LogRecord) -> str:
        timestamp = datetime.fromtimestamp(record.created).strftime(
            "%Y-%m-%d %H:%M:%S,%f"
        )[:23]
        level = record.levelname.ljust(8)
        message = _message_with_exception(self, record)
        return f"{timestamp} | {level} | {record.name} | {_operation_prefix()}{message}"


class JsonFormatter(logging.Formatter):
    """JSON lines for log aggregation tools."""

    def format(self, record: logging.LogRecord) -> str:
        log_entry = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc)
            .replace(tzinfo=None)
            .isoformat() + "Z",
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        operation_id = get_operation_id()
        if operation_id:
            log_entry["operation_id"] = operation_id

        log_entry["source"] = {
            "file": record.pathname,
            "line": record.lineno,
            "function": record.funcName,
        }

        if record.exc_info:
            log_entry["exception"] = {
                "type": record.exc_info[0].__name__ if record.exc_info[0] else None,
                "message": str(record.exc_info[1]) if record.exc_info[1] else None,
                "traceback": self.formatException(record.exc_info),
            }

        extra_fields = {
            k: v for k, v in record.__dict__.items() if k not in _RESERVED_ATTRS
        }
        if extra_fields:
            log_entry["extra"] = extra_fields

        return json.dumps(log_entry, ensure_ascii=False, default=str)
