"""
Report models built from stored analytics snapshots.
"""

from datetime import date, datetime
from decimal import Decimal
from typing import List

from pydantic import BaseModel, ConfigDict, Field

from journal_analytics.core.enums import ReportType

ZERO = Decimal("0")


class ReportPeriod(BaseModel):
    model_config = ConfigDict(frozen=True)

    start: date
    end: date
    type: ReportType = ReportType.CUSTOM


class ReportSummary(BaseModel):
    """Rolled-up figures of every daily snapshot in the period."""
    model_config = ConfigDict(frozen=True)

    total_trades: int = 0
    winning_trades: int = 0
    losing_trades: int = 0
    break_even_trades: int = 0
    gross_pnl: Decimal = ZERO
    net_pnl: Decimal = ZERO
    total_charges: Decimal = ZERO
    win_rate: Decimal = ZERO
    profit_factor: Decimal = ZERO
    average_win: Decimal = ZERO
    average_loss: Decimal = ZERO
    largest_win: Decimal = ZERO
    largest_loss: Decimal = ZERO
    expectancy: Decimal = ZERO


class CategoryBreakdown(BaseModel):
    model_config = ConfigDict(frozen=True)

    category: str
    pnl: Decimal = ZERO
    trades: int = 0


class ReportBreakdown(BaseModel):
    model_config = ConfigDict(frozen=True)

    by_segment: List[CategoryBreakdown] = Field(default_factory=list)
    by_trade_type: List[CategoryBreakdown] = Field(default_factory=list)
    by_position: List[CategoryBreakdown] = Field(default_factory=list)


class SymbolPerformance(BaseModel):
    model_config = ConfigDict(frozen=True)

    symbol: str
    exchange: str
    pnl: Decimal
    trades: int
    win_rate: Decimal


class DayBreakdown(BaseModel):
    model_config = ConfigDict(frozen=True)

    date: date
    pnl: Decimal
    trades: int


class TradingReport(BaseModel):
    model_config = ConfigDict(frozen=True)

    user_id: str
    period: ReportPeriod
    summary: ReportSummary
    breakdown: ReportBreakdown
    top_performers: List[SymbolPerformance] = Field(default_factory=list)
    worst_performers: List[SymbolPerformance] = Field(default_factory=list)
    daily_breakdown: List[DayBreakdown] = Field(default_factory=list)
    generated_at: datetime


class PeriodFigures(BaseModel):
    model_config = ConfigDict(frozen=True)

    net_pnl: Decimal
    win_rate: Decimal
    trades: int


class PeriodComparison(BaseModel):
    """Headline figures of two reports; ``change`` is second minus first."""
    model_config = ConfigDict(frozen=True)

    first: PeriodFigures
    second: PeriodFigures
    change: PeriodFigures
