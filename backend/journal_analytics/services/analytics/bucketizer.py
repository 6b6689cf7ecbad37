"""
Calendar-window bucketing of trades.

Windows are cut in the configured analytics timezone:
- day: 00:00:00 through 23:59:59.999999 of the reference date
- week: Monday 00:00 through Sunday end (ISO week)
- month: first instant of the 1st through the last instant of the month

A trade belongs to a window when its exit timestamp falls inside it, both
bounds inclusive. Naive exit timestamps are read as local to the analytics
timezone.
"""

import calendar
from collections import defaultdict
from datetime import date, datetime, time, timedelta
from decimal import Decimal
from typing import Dict, List, NamedTuple, Optional, Sequence, Tuple, Union

import pytz

from journal_analytics.core.config import get_settings
from journal_analytics.core.errors.decorators import error_handler
from journal_analytics.core.logging.logger import get_logger
from journal_analytics.models.analytics import DailyPnLEntry
from journal_analytics.models.trade import Trade
from journal_analytics.services.analytics.pnl import (
    ZERO,
    calculate_trade_pnl,
    round_money,
    validate_closed_trade,
)

logger = get_logger(__name__)

DateLike = Union[date, datetime]
Window = Tuple[datetime, datetime]


class BucketResult(NamedTuple):
    window: Optional[Window]
    trades: List[Trade]
    daily_pnl: List[DailyPnLEntry]

    @property
    def is_empty(self) -> bool:
        return not self.trades


class PeriodBucketizer:
    """
    Filters a candidate trade set to one window and derives its daily P&L series.

    Features:
    - Day, ISO-week and month windows
    - Instrument filter without a calendar window
    - Per-day net P&L ordered by date
    """

    def __init__(self, timezone: Optional[pytz.BaseTzInfo] = None) -> None:
        self._timezone = timezone

    @property
    def timezone(self) -> pytz.BaseTzInfo:
        """Explicit timezone, else the configured analytics timezone."""
        if self._timezone is not None:
            return self._timezone
        return get_settings().analytics.get_timezone()

    # ---- Time helpers ----

    def localize(self, value: datetime) -> datetime:
        """Return ``value`` as an aware datetime in the analytics timezone."""
        if value.tzinfo is None:
            return self.timezone.localize(value)
        return value.astimezone(self.timezone)

    def local_date(self, value: DateLike) -> date:
        if isinstance(value, datetime):
            return self.localize(value).date()
        return value

    def _span(self, first: date, last: date) -> Window:
        start = self.timezone.localize(datetime.combine(first, time.min))
        end = self.timezone.localize(datetime.combine(last, time.max))
        return start, end

    def day_window(self, reference_date: DateLike) -> Window:
        day = self.local_date(reference_date)
        return self._span(day, day)

    def week_window(self, reference_date: DateLike) -> Window:
        day = self.local_date(reference_date)
        monday = day - timedelta(days=day.weekday())
        return self._span(monday, monday + timedelta(days=6))

    def month_window(self, reference_date: DateLike) -> Window:
        day = self.local_date(reference_date)
        last_day = calendar.monthrange(day.year, day.month)[1]
        return self._span(day.replace(day=1), day.replace(day=last_day))

    # ---- Bucketing ----

    def _closed_trades(self, trades: Sequence[Trade]) -> List[Trade]:
        """Closed trades of the candidate set, each validated."""
        closed = []
        for trade in trades:
            if not trade.is_closed:
                continue
            validate_closed_trade(trade)
            closed.append(trade)
        return closed

    def daily_series(self, trades: Sequence[Trade]) -> List[DailyPnLEntry]:
        """Sum net P&L per local calendar day of exit, ascending by date."""
        totals: Dict[date, Decimal] = defaultdict(lambda: ZERO)
        for trade in trades:
            totals[self.local_date(trade.exit_date)] += calculate_trade_pnl(trade).net
        return [
            DailyPnLEntry(date=day, pnl=round_money(pnl))
            for day, pnl in sorted(totals.items())
        ]

    def _bucket(self, trades: Sequence[Trade], window: Window, period: str) -> BucketResult:
        start, end = window
        selected = [
            trade for trade in self._closed_trades(trades)
            if start <= self.localize(trade.exit_date) <= end
        ]
        result = BucketResult(window=window, trades=selected, daily_pnl=self.daily_series(selected))
        logger.debug(
            "Bucketed trades",
            extra={
                "period": period,
                "window_start": start.isoformat(),
                "window_end": end.isoformat(),
                "candidates": len(trades),
                "selected": len(selected),
            },
        )
        return result

    @error_handler(
        context_extractor=lambda self, trades, reference_date: {
            "period": "day", "reference_date": str(reference_date)
        },
        log_message="Daily bucketing failed"
    )
    def bucket_daily(self, trades: Sequence[Trade], reference_date: DateLike) -> BucketResult:
        return self._bucket(trades, self.day_window(reference_date), "day")

    @error_handler(
        context_extractor=lambda self, trades, reference_date: {
            "period": "week", "reference_date": str(reference_date)
        },
        log_message="Weekly bucketing failed"
    )
    def bucket_weekly(self, trades: Sequence[Trade], reference_date: DateLike) -> BucketResult:
        return self._bucket(trades, self.week_window(reference_date), "week")

    @error_handler(
        context_extractor=lambda self, trades, reference_date: {
            "period": "month", "reference_date": str(reference_date)
        },
        log_message="Monthly bucketing failed"
    )
    def bucket_monthly(self, trades: Sequence[Trade], reference_date: DateLike) -> BucketResult:
        return self._bucket(trades, self.month_window(reference_date), "month")

    @error_handler(
        context_extractor=lambda self, trades, symbol, exchange: {
            "period": "symbol", "symbol": symbol, "exchange": exchange
        },
        log_message="Symbol bucketing failed"
    )
    def bucket_symbol(self, trades: Sequence[Trade], symbol: str, exchange: str) -> BucketResult:
        """All closed trades of one instrument; no calendar window applies."""
        selected = [
            trade for trade in self._closed_trades(trades)
            if trade.symbol == symbol and trade.exchange == exchange
        ]
        logger.debug(
            "Bucketed trades",
            extra={
                "period": "symbol",
                "symbol": symbol,
                "exchange": exchange,
                "candidates": len(trades),
                "selected": len(selected),
            },
        )
        return BucketResult(window=None, trades=selected, daily_pnl=self.daily_series(selected))
