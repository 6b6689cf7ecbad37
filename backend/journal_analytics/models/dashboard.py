"""
Dashboard models: risk-adjusted performance metrics, period trends and the
headline summary of a user's journal.
"""

from datetime import date
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from journal_analytics.models.analytics import DailyPnLEntry
from journal_analytics.models.report import ReportSummary, SymbolPerformance

ZERO = Decimal("0")


class PerformanceMetrics(BaseModel):
    """
    Ratios over a daily net P&L series, rounded to 2 dp.

    Sharpe and Sortino are annualized with 252 trading days. A ratio whose
    denominator is zero (no dispersion, no losing day, no drawdown) is 0.
    ``consistency`` is the percentage of days closed in profit.
    """
    model_config = ConfigDict(frozen=True)

    trading_days: int = Field(0, ge=0)
    sharpe_ratio: Decimal = ZERO
    sortino_ratio: Decimal = ZERO
    max_drawdown: Decimal = Field(ZERO, ge=0)
    max_drawdown_date: Optional[date] = None
    recovery_factor: Decimal = ZERO
    calmar_ratio: Decimal = ZERO
    average_reward_risk: Decimal = Field(ZERO, ge=0)
    expectancy: Decimal = ZERO
    consistency: Decimal = Field(ZERO, ge=0, le=100)


class TrendPoint(BaseModel):
    """Net P&L of one month ("2024-03") or ISO week ("2024-W10")."""
    model_config = ConfigDict(frozen=True)

    label: str
    pnl: Decimal
    trades: int


class DayFigures(BaseModel):
    model_config = ConfigDict(frozen=True)

    total_trades: int = 0
    net_pnl: Decimal = ZERO
    win_rate: Decimal = ZERO


class MonthFigures(DayFigures):
    trading_days: int = 0
    average_daily_pnl: Decimal = ZERO


class DashboardSummary(BaseModel):
    model_config = ConfigDict(frozen=True)

    user_id: str
    as_of: date
    today: DayFigures
    this_month: MonthFigures
    all_time: ReportSummary
    recent_performance: List[DailyPnLEntry] = Field(default_factory=list)
    top_symbols: List[SymbolPerformance] = Field(default_factory=list)
    worst_symbols: List[SymbolPerformance] = Field(default_factory=list)
