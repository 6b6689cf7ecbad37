import sys
import logging
import logging.handlers
import traceback
import threading
import queue
import atexit
from functools import lru_cache
from datetime import datetime, timezone
from typing import Optional, Dict, Any, List, Union

from journal_analytics.core.errors.base import BaseError
from journal_analytics.core.config import get_settings
from .formatters import create_formatter


LEVEL_MAP = {
    'DEBUG': logging.DEBUG,
    'INFO': logging.INFO,
    'WARNING': logging.WARNING,
    'ERROR': logging.ERROR,
    'CRITICAL': logging.CRITICAL
}


class AsyncLogHandler(logging.Handler):
    """
    A handler that dispatches log records to a separate thread
    so that batch recomputation is not slowed down by log I/O.
    """
    def __init__(self, capacity: int = 10000):
        """
        Initialize with a queue to hold log records.

        Args:
            capacity: Maximum number of records to queue before falling back
                to synchronous dispatch
        """
        super().__init__()
        self.queue = queue.Queue(capacity)
        self.handlers: List[logging.Handler] = []
        self._stop_event = threading.Event()
        self._worker = threading.Thread(target=self._process_logs, daemon=True)
        self._worker.start()
        atexit.register(self.close)

    def emit(self, record: logging.LogRecord) -> None:
        try:
            self.queue.put_nowait(record)
        except queue.Full:
            self._process_record(record)

    def _process_logs(self) -> None:
        """Worker thread that drains the queue until stopped and empty."""
        while not self._stop_event.is_set() or not self.queue.empty():
            try:
                record = self.queue.get(block=True, timeout=0.2)
            except queue.Empty:
                continue
            try:
                self._process_record(record)
            except Exception:
                self.handleError(record)
            finally:
                self.queue.task_done()

    def _process_record(self, record: logging.LogRecord) -> None:
        for handler in self.handlers:
            if record.levelno >= handler.level:
                handler.handle(record)

    def flush(self) -> None:
        """Block until every queued record has been handed to the output handlers."""
        if self._worker.is_alive():
            self.queue.join()
        for handler in self.handlers:
            handler.flush()

    def close(self) -> None:
        """
        Clean up resources when shutting down.
        Ensures all queued messages are processed.
        """
        self._stop_event.set()
        if self._worker.is_alive():
            self._worker.join(timeout=5.0)

        for handler in self.handlers:
            handler.close()

        super().close()

    def add_handler(self, handler: logging.Handler) -> None:
        self.handlers.append(handler)


class AsyncLogger:
    """
    Logger facade that hands records to a shared background worker.

    Keyword arguments passed to ``debug``/``info``/... end up as ``extra``
    fields on the record and are rendered by the configured formatter.
    """

    _loggers: Dict[str, 'AsyncLogger'] = {}
    _async_handler: Optional[AsyncLogHandler] = None
    _init_lock = threading.Lock()

    def __init__(self, name: str) -> None:
        self.name = name
        self.logger = logging.getLogger(name)

        with self._init_lock:
            if not AsyncLogger._async_handler:
                AsyncLogger._configure_async_handler()

            if AsyncLogger._async_handler not in self.logger.handlers:
                self.logger.addHandler(AsyncLogger._async_handler)
                self.logger.setLevel(self._get_log_level())
                self.logger.propagate = False

    @classmethod
    def _configure_async_handler(cls) -> None:
        """Configure the shared async handler and all output handlers."""
        cls._async_handler = AsyncLogHandler(capacity=50000)
        log_config = get_settings().logging

        formatter = create_formatter(
            fmt_type=log_config.LOG_FORMAT,
            use_colors=log_config.USE_COLORS,
        )
        level = cls._get_log_level()
        handlers: List[logging.Handler] = []

        log_file = log_config.LOG_FILE_PATH
        if log_file is not None:
            log_file.parent.mkdir(parents=True, exist_ok=True)
            file_handler = logging.handlers.RotatingFileHandler(
                log_file,
                maxBytes=log_config.MAX_LOG_SIZE,
                backupCount=log_config.MAX_LOG_BACKUPS,
                encoding='utf-8'
            )
            file_handler.setFormatter(formatter)
            file_handler.setLevel(level)
            handlers.append(file_handler)

        if log_config.CONSOLE_LOGGING:
            console_handler = logging.StreamHandler(sys.stdout)
            console_handler.setFormatter(formatter)
            console_handler.setLevel(level)
            handlers.append(console_handler)

        for handler in handlers:
            cls._async_handler.add_handler(handler)

    @staticmethod
    def _get_log_level() -> int:
        return LEVEL_MAP.get(get_settings().logging.LOG_LEVEL.value, logging.INFO)

    def _build_error_context(
        self, error: Exception, context: Optional[Dict[str, Any]] = None
    ) -> Dict[str, Any]:
        error_context = {
            "error_type": type(error).__name__,
            "message": str(error),
            "context": context or {},
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "environment": get_settings().app.ENVIRONMENT.value,
        }

        if isinstance(error, BaseError):
            error_context.update({
                "category": error.category.value,
                "level": error.level.value,
                "traceback": error.traceback,
            })
            error_context["context"] = {**error.context, **error_context["context"]}
        else:
            error_context["traceback"] = "".join(
                traceback.format_exception(type(error), error, error.__traceback__)
            )
        return error_context

    def log_error(
        self,
        error: Exception,
        context: Optional[Dict[str, Any]] = None,
        message: Optional[str] = None,
        level: int = logging.ERROR
    ) -> None:
        """
        Log an error with enriched error context.

        Args:
            error: The exception to log
            context: Additional context for the error
            message: Optional message to include
            level: Log level, ERROR unless the caller expects the failure
        """
        self.logger.log(
            level,
            message or str(error),
            extra={
                "error_type": type(error).__name__,
                "error_context": self._build_error_context(error, context),
            },
        )

    def log_performance(
        self,
        operation: str,
        duration: float,
        context: Optional[Dict[str, Any]] = None
    ) -> None:
        """
        Log timing of an analytics operation.

        Args:
            operation: The operation being measured
            duration: Duration in milliseconds
            context: Additional context
        """
        performance_data = {
            "operation": operation,
            "duration_ms": round(duration, 3),
            **(context or {}),
        }
        self.logger.debug(f"Performance: {operation}", extra={"performance": performance_data})

    @staticmethod
    def _extra(kwargs: Dict[str, Any]) -> Dict[str, Any]:
        # Both logger.info("...", extra={...}) and logger.info("...", key=value) are accepted
        extra = dict(kwargs.pop("extra", None) or {})
        extra.update(kwargs)
        return extra

    def debug(self, message: str, **kwargs: Any) -> None:
        self.logger.debug(message, extra=self._extra(kwargs))

    def info(self, message: str, **kwargs: Any) -> None:
        self.logger.info(message, extra=self._extra(kwargs))

    def warning(self, message: str, **kwargs: Any) -> None:
        self.logger.warning(message, extra=self._extra(kwargs))

    def error(self, message: str, **kwargs: Any) -> None:
        self.logger.error(message, extra=self._extra(kwargs))

    def critical(self, message: str, **kwargs: Any) -> None:
        self.logger.critical(message, extra=self._extra(kwargs))


@lru_cache(maxsize=100)
def get_logger(name: str) -> AsyncLogger:
    """
    Return a cached AsyncLogger instance for the given name.

    Args:
        name: The logger name, typically the module name

    Returns:
        An AsyncLogger instance
    """
    if name not in AsyncLogger._loggers:
        AsyncLogger._loggers[name] = AsyncLogger(name)
    return AsyncLogger._loggers[name]


def init_logging(levels: Optional[Dict[str, Union[str, int]]] = None) -> None:
    """
    Set up the shared handler eagerly instead of on first ``get_logger`` call.

    Args:
        levels: Optional per-logger levels passed to ``configure_log_levels``
    """
    get_logger("journal_analytics")
    if levels:
        configure_log_levels(levels)


def cleanup_logging() -> None:
    """
    Clean up logging resources.
    Flushes pending records, closes handlers and resets the logger cache so
    the next ``get_logger`` call picks up fresh settings.
    """
    get_logger.cache_clear()

    handler = AsyncLogger._async_handler
    if handler:
        handler.close()
        for name in AsyncLogger._loggers:
            logging.getLogger(name).removeHandler(handler)

    AsyncLogger._loggers.clear()
    AsyncLogger._async_handler = None


def configure_log_levels(levels: Dict[str, Union[str, int]]) -> None:
    """
    Configure log levels for specific loggers.
    Useful for quieting third-party libraries such as pandas or openpyxl.

    Args:
        levels: Dictionary mapping logger names to levels
    """
    for logger_name, level in levels.items():
        if isinstance(level, str):
            level = LEVEL_MAP.get(level.upper(), logging.INFO)
        logging.getLogger(logger_name).setLevel(level)
