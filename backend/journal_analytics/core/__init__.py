"""
Core package initialization providing centralized access to commonly used functionality:
enums, the error hierarchy, settings and logging.
"""

from .enums import (
    Environment, Segment, TradeType, PositionSide, TradeStatus, PeriodType,
    ReportType, ExportFormat, ErrorLevel, ErrorCategory, LogLevel
)

# Base errors first; config and logging import them
from .errors.base import (
    BaseError, ValidationError, NotFoundError, StorageError,
    ServiceError, ConfigurationError
)

from .config import get_settings, analytics_constants
from .logging.logger import get_logger, init_logging, cleanup_logging
from .errors.decorators import error_handler

__all__ = [
    # Config
    "get_settings", "analytics_constants",
    # Errors
    "BaseError", "ValidationError", "NotFoundError", "StorageError",
    "ServiceError", "ConfigurationError", "error_handler",
    # Logging
    "get_logger", "init_logging", "cleanup_logging",
    # Enums
    "Environment", "Segment", "TradeType", "PositionSide", "TradeStatus",
    "PeriodType", "ReportType", "ExportFormat", "ErrorLevel", "ErrorCategory", "LogLevel",
]
