"""
Models package initialization.
Re-exports the trade input model and the analytics value objects.
"""

from journal_analytics.models.trade import Trade, Charges, TradePnL
from journal_analytics.models.analytics import (
    AggregateResult,
    DailyPnLEntry,
    WeeklyPnLEntry,
    StreakResult,
    DrawdownResult,
    SymbolStats,
    DayScope,
    WeekScope,
    MonthScope,
    SymbolScope,
    Scope,
    AnalyticsSnapshot,
)
from journal_analytics.models.dashboard import PerformanceMetrics, TrendPoint, DashboardSummary

__all__ = [
    "Trade",
    "Charges",
    "TradePnL",
    "AggregateResult",
    "DailyPnLEntry",
    "WeeklyPnLEntry",
    "StreakResult",
    "DrawdownResult",
    "SymbolStats",
    "DayScope",
    "WeekScope",
    "MonthScope",
    "SymbolScope",
    "Scope",
    "AnalyticsSnapshot",
    "PerformanceMetrics",
    "TrendPoint",
    "DashboardSummary",
]
