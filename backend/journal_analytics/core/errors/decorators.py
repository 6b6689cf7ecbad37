"""
Uniform error handling for analytics entry points.

The ``error_handler`` decorator wraps a synchronous callable so that:
- errors from the ``BaseError`` hierarchy are enriched with context pulled
  from the call arguments and re-raised unchanged in type
- any other exception is re-raised as a ``ServiceError`` chained to the
  original

Decorated calls nest (a service entry point calls decorated bucketing and
aggregation). Every level adds its context, but only the outermost one logs,
so a failure produces one record carrying the full context.
"""

import logging
from contextvars import ContextVar
from functools import wraps
from typing import Any, Callable, Dict, Optional, TypeVar

from journal_analytics.core.enums import ErrorLevel
from journal_analytics.core.errors.base import BaseError, ServiceError
from journal_analytics.core.logging.logger import get_logger

logger = get_logger(__name__)

F = TypeVar("F", bound=Callable[..., Any])

_handler_depth: ContextVar[int] = ContextVar("error_handler_depth", default=0)

_ERROR_LEVELS = {ErrorLevel.HIGH, ErrorLevel.CRITICAL}


def _safe_context(
    context_extractor: Optional[Callable[..., Dict[str, Any]]],
    args: Any,
    kwargs: Any,
) -> Dict[str, Any]:
    if context_extractor is None:
        return {}
    try:
        return dict(context_extractor(*args, **kwargs))
    except Exception as e:
        return {"context_error": str(e)}


def error_handler(
    context_extractor: Optional[Callable[..., Dict[str, Any]]] = None,
    log_message: Optional[str] = None,
) -> Callable[[F], F]:
    """
    Decorate a function with context-enriched error handling.

    Args:
        context_extractor: Callable receiving the decorated function's arguments
            and returning a context dictionary.
        log_message: Message logged when the call fails.

    Returns:
        The decorator.
    """
    def decorator(func: F) -> F:
        @wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            depth = _handler_depth.get()
            token = _handler_depth.set(depth + 1)
            try:
                return func(*args, **kwargs)
            except BaseError as e:
                e.add_context(**_safe_context(context_extractor, args, kwargs))
                if depth == 0:
                    level = logging.ERROR if e.level in _ERROR_LEVELS else logging.WARNING
                    logger.log_error(e, message=log_message or e.message, level=level)
                raise
            except Exception as e:
                message = log_message or f"{func.__qualname__} failed"
                context = _safe_context(context_extractor, args, kwargs)
                context["error"] = str(e)
                error = ServiceError(message, context=context, parent=e)
                if depth == 0:
                    logger.log_error(error, message=message)
                raise error from e
            finally:
                _handler_depth.reset(token)
        return wrapper  # type: ignore[return-value]
    return decorator
