"""
System-wide constants for the analytics engine.

Features:
- Monetary rounding quantum
- Sentinel values with fixed downstream meaning
- Export date format
- Annualization factor
"""

from dataclasses import dataclass
from decimal import Decimal


@dataclass(frozen=True)
class AnalyticsConstants:
    """Analytics computation constants."""
    # Monetary outputs are rounded to this quantum
    MONEY_QUANTUM: Decimal = Decimal("0.01")

    # Reported when a window has winners and no losers. Downstream formatting
    # and comparisons depend on this exact value.
    PROFIT_FACTOR_SENTINEL: Decimal = Decimal("999.99")

    DATE_FORMAT: str = "%Y-%m-%d"

    # Annualization factor for daily ratios
    TRADING_DAYS_PER_YEAR: int = 252


# Instantiate the constants object
analytics_constants = AnalyticsConstants()

__all__ = [
    "AnalyticsConstants",
    "analytics_constants",
]
