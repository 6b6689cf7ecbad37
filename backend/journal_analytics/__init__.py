"""
Journal Analytics package initialization.

Performance analytics for a trading journal:
- Core configuration, logging and error handling
- Trade aggregation, calendar bucketing, streak and drawdown series
- Snapshot storage contract, reports and exports
"""

__version__ = "1.0.0"
__description__ = "Trade aggregation and time-series performance analytics"

__all__ = [
    "__version__",
    "__description__",
]
