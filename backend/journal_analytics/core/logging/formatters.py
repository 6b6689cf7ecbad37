"""
Log formatters for structured logging with error context.

Features:
- JSON structured logging
- Error context enrichment
- Decimal/date aware serialization of analytics values
- Human-readable and compact text output
"""

import json
import logging
import os
import socket
import traceback
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, List, Optional, Set

# Standard LogRecord attributes; anything else on a record came in via ``extra``.
STANDARD_LOG_ATTRS: Set[str] = {
    "name", "msg", "args", "levelname", "levelno", "pathname", "filename",
    "module", "exc_info", "exc_text", "stack_info", "lineno", "funcName",
    "created", "msecs", "relativeCreated", "thread", "threadName", "processName",
    "process", "message", "taskName", "asctime",
}


class BaseLogFormatter(logging.Formatter):
    """
    Base class for common log record extraction logic.
    """

    def get_error_context(self, record: logging.LogRecord) -> Optional[Dict[str, Any]]:
        """
        Extract error context from a log record.

        Args:
            record: The log record to process

        Returns:
            Error context dictionary or None
        """
        error = getattr(record, "error_context", None)
        if not isinstance(error, dict):
            return None
        return {
            "type": error.get("error_type") or getattr(record, "error_type", None),
            "message": error.get("message"),
            "level": error.get("level"),
            "category": error.get("category"),
            "context": error.get("context", {k: v for k, v in error.items() if k != "traceback"}),
            "traceback": self._truncate_traceback(error.get("traceback") or ""),
        }

    def _truncate_traceback(self, tb: str, max_lines: int = 20) -> str:
        """Keep the head and tail of a long traceback."""
        if not tb:
            return ""
        lines = tb.splitlines()
        if len(lines) <= max_lines:
            return tb

        preserved_lines = max_lines - 3
        first_chunk = preserved_lines // 2
        last_chunk = preserved_lines - first_chunk

        truncated = lines[:first_chunk]
        truncated.append(f"... [{len(lines) - preserved_lines} lines truncated] ...")
        truncated.extend(lines[-last_chunk:])
        return "\n".join(truncated)

    def get_exception_info(self, record: logging.LogRecord) -> Optional[Dict[str, Any]]:
        """
        Extract exception information from a log record.

        Args:
            record: The log record to process

        Returns:
            Exception information dictionary or None
        """
        if record.exc_info:
            exc_type, exc_value, exc_tb = record.exc_info
            return {
                "type": exc_type.__name__,
                "message": str(exc_value),
                "traceback": self._truncate_traceback(
                    "".join(traceback.format_exception(exc_type, exc_value, exc_tb))
                ),
            }
        return None

    def get_extra_fields(
        self, record: logging.LogRecord, base: Optional[Dict[str, Any]] = None
    ) -> Dict[str, Any]:
        """Return the fields passed through ``extra`` that are not already in ``base``."""
        base = base or {}
        return {
            key: value
            for key, value in record.__dict__.items()
            if key not in STANDARD_LOG_ATTRS and key not in base and key != "error_context"
        }


def json_default(obj: Any) -> Any:
    """JSON serializer for values that show up in analytics log context."""
    if isinstance(obj, Decimal):
        return str(obj)
    if isinstance(obj, (datetime, date)):
        return obj.isoformat()
    if isinstance(obj, Enum):
        return obj.value
    if isinstance(obj, (set, frozenset, tuple)):
        return list(obj)
    if isinstance(obj, Exception):
        return str(obj)
    if hasattr(obj, "to_dict") and callable(obj.to_dict):
        return obj.to_dict()
    return str(obj)


class JSONFormatter(BaseLogFormatter):
    """
    JSON formatter that outputs log records as JSON strings.
    It adds hostname and process ID.
    """

    def __init__(self, fmt: Optional[str] = None, *args: Any, **kwargs: Any) -> None:
        super().__init__(fmt, *args, **kwargs)
        try:
            self.hostname = socket.gethostname()
        except OSError:
            self.hostname = "unknown"
        self.pid = os.getpid()

    def _base_log_data(self, record: logging.LogRecord) -> Dict[str, Any]:
        return {
            "timestamp": datetime.fromtimestamp(record.created).isoformat(timespec="milliseconds"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
            "process": {"id": self.pid, "name": record.processName},
            "host": self.hostname,
        }

    def format(self, record: logging.LogRecord) -> str:
        """
        Format a log record as a JSON string.

        Args:
            record: The log record to format

        Returns:
            JSON string representation of the log record
        """
        log_data = self._base_log_data(record)

        if error_ctx := self.get_error_context(record):
            log_data["error"] = error_ctx
        if exc := self.get_exception_info(record):
            log_data["exception"] = exc

        log_data.update(self.get_extra_fields(record, log_data))

        try:
            return json.dumps(log_data, default=json_default)
        except (TypeError, ValueError) as e:
            return json.dumps({
                "timestamp": log_data["timestamp"],
                "level": "ERROR",
                "logger": "JSONFormatter",
                "message": f"Failed to serialize log: {e}",
                "original_message": record.getMessage()
            })


class TextFormatter(BaseLogFormatter):
    """
    Simple text formatter for human-readable logging.
    Optionally applies colors to different log levels.
    """

    COLORS = {
        "DEBUG": "\033[36m",      # Cyan
        "INFO": "\033[32m",       # Green
        "WARNING": "\033[33m",    # Yellow
        "ERROR": "\033[31m",      # Red
        "CRITICAL": "\033[35m",   # Magenta
        "RESET": "\033[0m",
    }

    def __init__(self, fmt: Optional[str] = None, use_colors: bool = True, *args: Any, **kwargs: Any) -> None:
        super().__init__(fmt, *args, **kwargs)
        self.use_colors = use_colors and os.name != 'nt'

    def _format_error_context(self, record: logging.LogRecord) -> List[str]:
        lines = []
        error = self.get_error_context(record)
        if error:
            lines.append(f"Error: {error.get('type')} ({error.get('level') or 'UNKNOWN'})")
            if error.get("message"):
                lines.append(f"Message: {error['message']}")
            if ctx := error.get("context"):
                lines.append("Context: " + ", ".join(f"{k}={v}" for k, v in ctx.items()))
            if tb := error.get("traceback"):
                lines.append(f"Traceback:\n{tb}")
        return lines

    def _format_exception(self, record: logging.LogRecord) -> List[str]:
        exc = self.get_exception_info(record)
        if not exc:
            return []
        return [f"Exception: {exc['type']}", f"Message: {exc['message']}", exc["traceback"]]

    def format(self, record: logging.LogRecord) -> str:
        color = self.COLORS.get(record.levelname, "") if self.use_colors else ""
        reset = self.COLORS["RESET"] if self.use_colors else ""

        timestamp = datetime.fromtimestamp(record.created).strftime("%Y-%m-%d %H:%M:%S.%f")[:-3]
        parts = [f"{timestamp} {color}{record.levelname}{reset} [{record.name}] {record.getMessage()}"]
        parts.extend(self._format_error_context(record))
        parts.extend(self._format_exception(record))
        parts.extend(f"{key}: {value}" for key, value in self.get_extra_fields(record).items())
        return "\n".join(parts)


class CompactFormatter(BaseLogFormatter):
    """
    Compact single-line formatter for high-volume batch recomputation.
    """

    LEVEL_CHARS = {
        "DEBUG": "D",
        "INFO": "I",
        "WARNING": "W",
        "ERROR": "E",
        "CRITICAL": "C"
    }

    def format(self, record: logging.LogRecord) -> str:
        ts = datetime.fromtimestamp(record.created).strftime("%H:%M:%S.%f")[:-3]
        level = self.LEVEL_CHARS.get(record.levelname, "?")
        module = record.module
        if len(module) > 12:
            module = module[:10] + ".."

        error_type = ""
        if record.levelno >= logging.WARNING:
            if error_name := getattr(record, "error_type", None):
                error_type = f"[{error_name}] "
            elif record.exc_info:
                error_type = f"[{record.exc_info[0].__name__}] "

        return f"{ts} {level} {module:12s} {error_type}{record.getMessage()}"


def create_formatter(
    fmt_type: str = "json", use_colors: bool = True, fmt_string: Optional[str] = None
) -> logging.Formatter:
    """
    Create and return a formatter instance based on the specified type.

    Args:
        fmt_type (str): The type of formatter to create ("json", "text", or "compact").
        use_colors (bool): Whether to use colors in the text formatter.
        fmt_string (Optional[str]): An optional format string.

    Returns:
        logging.Formatter: The formatter instance.

    Raises:
        ValueError: If an unsupported formatter type is provided.
    """
    formatters = {
        "json": JSONFormatter,
        "text": TextFormatter,
        "compact": CompactFormatter,
    }
    fmt_type = fmt_type.lower()
    if fmt_type not in formatters:
        raise ValueError(f"Invalid formatter type: {fmt_type}. Must be one of: {', '.join(formatters.keys())}")

    if fmt_type == "text":
        return TextFormatter(fmt=fmt_string, use_colors=use_colors)
    return formatters[fmt_type](fmt=fmt_string)
