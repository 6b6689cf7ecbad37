"""
Core error handling system providing centralized error management.

Exports:
- Base error classes and custom errors
- The error handling decorator
"""

# Import base errors directly to avoid circular dependencies
from .base import (
    BaseError,
    ValidationError,
    NotFoundError,
    StorageError,
    ServiceError,
    ConfigurationError,
    get_error_class,
)

from ..enums import (
    ErrorLevel,
    ErrorCategory,
)

__all__ = [
    # Base Errors
    "BaseError",
    "ValidationError",
    "NotFoundError",
    "StorageError",
    "ServiceError",
    "ConfigurationError",
    "get_error_class",
    # Enums
    "ErrorLevel",
    "ErrorCategory",
]
