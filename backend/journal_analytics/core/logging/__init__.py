from .logger import (
    AsyncLogger,
    get_logger,
    init_logging,
    cleanup_logging,
    configure_log_levels,
)

__all__ = [
    "AsyncLogger",
    "get_logger",
    "init_logging",
    "cleanup_logging",
    "configure_log_levels",
]
