"""
Value objects produced by the analytics engine.

Features:
- Aggregate statistics of a trade set
- Per-day P&L series entries
- Streak and drawdown results
- Scope keys (day / ISO week / month / instrument)
- The snapshot record handed to storage and reporting
"""

from datetime import date, datetime
from decimal import Decimal
from typing import Annotated, Any, Dict, Literal, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator

from journal_analytics.core.enums import PeriodType, Segment

ZERO = Decimal("0")


class AggregateResult(BaseModel):
    """Statistics of a set of closed trades. Monetary fields are rounded to 2 dp."""
    model_config = ConfigDict(frozen=True)

    total_trades: int = Field(0, ge=0)
    winning_trades: int = Field(0, ge=0)
    losing_trades: int = Field(0, ge=0)
    break_even_trades: int = Field(0, ge=0)

    gross_pnl: Decimal = ZERO
    net_pnl: Decimal = ZERO
    total_charges: Decimal = ZERO
    total_volume: Decimal = ZERO
    capital_used: Decimal = ZERO

    win_rate: Decimal = Field(ZERO, ge=0, le=100)
    profit_factor: Decimal = Field(ZERO, ge=0)
    average_win: Decimal = ZERO
    average_loss: Decimal = ZERO
    largest_win: Decimal = ZERO
    largest_loss: Decimal = ZERO

    # Net P&L and trade count per category value, e.g. {"equity": Decimal("190.00")}
    segment_pnl: Dict[str, Decimal] = Field(default_factory=dict)
    trade_type_pnl: Dict[str, Decimal] = Field(default_factory=dict)
    position_pnl: Dict[str, Decimal] = Field(default_factory=dict)
    segment_trades: Dict[str, int] = Field(default_factory=dict)
    trade_type_trades: Dict[str, int] = Field(default_factory=dict)
    position_trades: Dict[str, int] = Field(default_factory=dict)

    @model_validator(mode="after")
    def check_counts(self) -> "AggregateResult":
        classified = self.winning_trades + self.losing_trades + self.break_even_trades
        if classified != self.total_trades:
            raise ValueError(
                f"winning + losing + break-even ({classified}) must equal total_trades ({self.total_trades})"
            )
        return self


class DailyPnLEntry(BaseModel):
    """Net P&L of one calendar day (in the analytics timezone)."""
    model_config = ConfigDict(frozen=True)

    date: date
    pnl: Decimal


class WeeklyPnLEntry(BaseModel):
    """Net P&L of one ISO week."""
    model_config = ConfigDict(frozen=True)

    year: int
    week_number: int = Field(..., ge=1, le=53)
    pnl: Decimal


class StreakResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    current_win_streak: int = Field(0, ge=0)
    current_loss_streak: int = Field(0, ge=0)
    max_win_streak: int = Field(0, ge=0)
    max_loss_streak: int = Field(0, ge=0)


class DrawdownResult(BaseModel):
    """
    Largest peak-to-trough decline of the cumulative daily P&L, in currency.

    ``recovery_days`` counts calendar days from the trough to the first later
    day on which cumulative P&L rises above the peak in force at the trough;
    it is ``None`` when there was no drawdown or it was never recovered.
    """
    model_config = ConfigDict(frozen=True)

    max_drawdown: Decimal = Field(ZERO, ge=0)
    max_drawdown_date: Optional[date] = None
    recovery_days: Optional[int] = Field(None, ge=0)


class SymbolStats(BaseModel):
    """Instrument-level facts that only make sense for a symbol scope."""
    model_config = ConfigDict(frozen=True)

    segment: Segment
    total_quantity: Decimal
    average_holding_days: Decimal
    average_position_size: Decimal
    first_traded_at: datetime
    last_traded_at: datetime


# ---- Scopes ----

class DayScope(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["day"] = "day"
    date: date

    @property
    def period_type(self) -> PeriodType:
        return PeriodType.DAY

    @property
    def key(self) -> Tuple[Any, ...]:
        return (self.date.isoformat(),)


class WeekScope(BaseModel):
    """ISO week: ``year`` is the ISO year, which can differ from the calendar year."""
    model_config = ConfigDict(frozen=True)

    kind: Literal["week"] = "week"
    year: int
    week_number: int = Field(..., ge=1, le=53)

    @property
    def period_type(self) -> PeriodType:
        return PeriodType.WEEK

    @property
    def key(self) -> Tuple[Any, ...]:
        return (self.year, self.week_number)


class MonthScope(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["month"] = "month"
    year: int
    month: int = Field(..., ge=1, le=12)

    @property
    def period_type(self) -> PeriodType:
        return PeriodType.MONTH

    @property
    def key(self) -> Tuple[Any, ...]:
        return (self.year, self.month)


class SymbolScope(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["symbol"] = "symbol"
    symbol: str = Field(..., min_length=1)
    exchange: str = Field(..., min_length=1)

    @property
    def period_type(self) -> PeriodType:
        return PeriodType.SYMBOL

    @property
    def key(self) -> Tuple[Any, ...]:
        return (self.symbol, self.exchange)


Scope = Annotated[
    Union[DayScope, WeekScope, MonthScope, SymbolScope],
    Field(discriminator="kind"),
]


class AnalyticsSnapshot(BaseModel):
    """
    Computed analytics for one (user, scope).

    Snapshots are replaced wholesale on recomputation; ``key`` identifies the
    record a store should overwrite.
    """
    model_config = ConfigDict(frozen=True)

    user_id: str = Field(..., min_length=1)
    scope: Scope
    aggregate: AggregateResult

    window_start: Optional[datetime] = None
    window_end: Optional[datetime] = None

    trading_days: int = Field(0, ge=0)
    average_daily_pnl: Decimal = ZERO
    best_day: Optional[DailyPnLEntry] = None
    worst_day: Optional[DailyPnLEntry] = None
    best_week: Optional[WeeklyPnLEntry] = None
    worst_week: Optional[WeeklyPnLEntry] = None

    streaks: Optional[StreakResult] = None
    drawdown: Optional[DrawdownResult] = None
    symbol_stats: Optional[SymbolStats] = None

    @property
    def period_type(self) -> PeriodType:
        return self.scope.period_type

    @property
    def key(self) -> Tuple[Any, ...]:
        return (self.user_id, self.period_type.value) + self.scope.key

    def to_dict(self) -> Dict[str, Any]:
        """JSON-compatible dictionary; Decimals become strings, dates ISO strings."""
        data = self.model_dump(mode="json")
        data["period_type"] = self.period_type.value
        return data
