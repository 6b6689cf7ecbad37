"""
Analytics entry points.

Each ``compute_*`` call takes the full candidate trade set of one user and
returns a snapshot for one scope, or ``None`` when no closed trade falls in
that scope. ``compute_and_store_*`` additionally upserts the snapshot into the
configured ``SnapshotStore``; empty scopes are never written.

The service holds no state between calls, so different users and scopes can
be computed in parallel by the caller.
"""

import time
from decimal import Decimal
from typing import Callable, List, Optional, Sequence

from journal_analytics.core.errors.base import ConfigurationError
from journal_analytics.core.errors.decorators import error_handler
from journal_analytics.core.logging.logger import get_logger
from journal_analytics.models.analytics import (
    AnalyticsSnapshot,
    DayScope,
    MonthScope,
    SymbolScope,
    SymbolStats,
    WeekScope,
)
from journal_analytics.models.trade import Trade
from journal_analytics.services.analytics.bucketizer import BucketResult, DateLike, PeriodBucketizer
from journal_analytics.services.analytics.pnl import ZERO, round_money
from journal_analytics.services.analytics.reducer import AggregateReducer
from journal_analytics.services.analytics.series import best_worst_weeks, compute_series
from journal_analytics.services.analytics.snapshot import AnalyticsSnapshotBuilder
from journal_analytics.services.analytics.storage import SnapshotStore

logger = get_logger(__name__)


class AnalyticsService:
    """
    Coordinates bucketing, aggregation, series scans and snapshot assembly.

    Features:
    - Daily, ISO-weekly, monthly and per-instrument snapshots
    - Streaks and drawdown for weekly and monthly scopes
    - Optional idempotent persistence through a ``SnapshotStore``
    """

    def __init__(
        self,
        store: Optional[SnapshotStore] = None,
        bucketizer: Optional[PeriodBucketizer] = None,
        reducer: Optional[AggregateReducer] = None,
        builder: Optional[AnalyticsSnapshotBuilder] = None,
    ) -> None:
        self.store = store
        self.bucketizer = bucketizer or PeriodBucketizer()
        self.reducer = reducer or AggregateReducer()
        self.builder = builder or AnalyticsSnapshotBuilder()
        self.logger = get_logger("analytics_service")

    def _skip_empty(self, user_id: str, period: str, bucket: BucketResult) -> bool:
        if bucket.is_empty:
            self.logger.debug(
                "No closed trades in scope, skipping",
                extra={"user_id": user_id, "period": period},
            )
        return bucket.is_empty

    def _finish(self, snapshot: AnalyticsSnapshot, trade_count: int, started: float) -> AnalyticsSnapshot:
        self.logger.info(
            "Analytics snapshot computed",
            extra={
                "key": list(snapshot.key),
                "trade_count": trade_count,
                "net_pnl": str(snapshot.aggregate.net_pnl),
            },
        )
        self.logger.log_performance(
            f"compute_{snapshot.period_type.value}",
            (time.perf_counter() - started) * 1000,
            {"trade_count": trade_count},
        )
        return snapshot

    # ---- Calendar scopes ----

    @error_handler(
        context_extractor=lambda self, user_id, reference_date, trades: {
            "user_id": user_id,
            "period": "day",
            "reference_date": str(reference_date),
        },
        log_message="Daily analytics computation failed"
    )
    def compute_daily(
        self, user_id: str, reference_date: DateLike, trades: Sequence[Trade]
    ) -> Optional[AnalyticsSnapshot]:
        started = time.perf_counter()
        bucket = self.bucketizer.bucket_daily(trades, reference_date)
        if self._skip_empty(user_id, "day", bucket):
            return None

        snapshot = self.builder.build(
            user_id,
            DayScope(date=self.bucketizer.local_date(reference_date)),
            self.reducer.reduce(bucket.trades),
            bucket.daily_pnl,
            window=bucket.window,
        )
        return self._finish(snapshot, len(bucket.trades), started)

    @error_handler(
        context_extractor=lambda self, user_id, reference_date, trades: {
            "user_id": user_id,
            "period": "week",
            "reference_date": str(reference_date),
        },
        log_message="Weekly analytics computation failed"
    )
    def compute_weekly(
        self, user_id: str, reference_date: DateLike, trades: Sequence[Trade]
    ) -> Optional[AnalyticsSnapshot]:
        started = time.perf_counter()
        bucket = self.bucketizer.bucket_weekly(trades, reference_date)
        if self._skip_empty(user_id, "week", bucket):
            return None

        iso_year, iso_week, _ = self.bucketizer.local_date(reference_date).isocalendar()
        streaks, drawdown = compute_series(bucket.daily_pnl)
        snapshot = self.builder.build(
            user_id,
            WeekScope(year=iso_year, week_number=iso_week),
            self.reducer.reduce(bucket.trades),
            bucket.daily_pnl,
            streaks=streaks,
            drawdown=drawdown,
            window=bucket.window,
        )
        return self._finish(snapshot, len(bucket.trades), started)

    @error_handler(
        context_extractor=lambda self, user_id, reference_date, trades: {
            "user_id": user_id,
            "period": "month",
            "reference_date": str(reference_date),
        },
        log_message="Monthly analytics computation failed"
    )
    def compute_monthly(
        self, user_id: str, reference_date: DateLike, trades: Sequence[Trade]
    ) -> Optional[AnalyticsSnapshot]:
        started = time.perf_counter()
        bucket = self.bucketizer.bucket_monthly(trades, reference_date)
        if self._skip_empty(user_id, "month", bucket):
            return None

        day = self.bucketizer.local_date(reference_date)
        streaks, drawdown = compute_series(bucket.daily_pnl)
        best_week, worst_week = best_worst_weeks(bucket.daily_pnl)
        snapshot = self.builder.build(
            user_id,
            MonthScope(year=day.year, month=day.month),
            self.reducer.reduce(bucket.trades),
            bucket.daily_pnl,
            streaks=streaks,
            drawdown=drawdown,
            window=bucket.window,
            extras={"best_week": best_week, "worst_week": worst_week},
        )
        return self._finish(snapshot, len(bucket.trades), started)

    # ---- Instrument scope ----

    def _symbol_stats(self, trades: Sequence[Trade]) -> SymbolStats:
        count = Decimal(len(trades))
        localize = self.bucketizer.localize
        holding_days = sum(
            (localize(t.exit_date) - localize(t.entry_date)).days for t in trades
        )
        return SymbolStats(
            segment=trades[0].segment,
            total_quantity=sum((t.quantity for t in trades), ZERO),
            average_holding_days=round_money(Decimal(holding_days) / count),
            average_position_size=round_money(sum((t.entry_value for t in trades), ZERO) / count),
            first_traded_at=min(localize(t.entry_date) for t in trades),
            last_traded_at=max(localize(t.exit_date) for t in trades),
        )

    @error_handler(
        context_extractor=lambda self, user_id, symbol, exchange, trades: {
            "user_id": user_id,
            "period": "symbol",
            "symbol": symbol,
            "exchange": exchange,
        },
        log_message="Symbol analytics computation failed"
    )
    def compute_symbol(
        self, user_id: str, symbol: str, exchange: str, trades: Sequence[Trade]
    ) -> Optional[AnalyticsSnapshot]:
        started = time.perf_counter()
        bucket = self.bucketizer.bucket_symbol(trades, symbol, exchange)
        if self._skip_empty(user_id, "symbol", bucket):
            return None

        snapshot = self.builder.build(
            user_id,
            SymbolScope(symbol=symbol, exchange=exchange),
            self.reducer.reduce(bucket.trades),
            bucket.daily_pnl,
            extras={"symbol_stats": self._symbol_stats(bucket.trades)},
        )
        return self._finish(snapshot, len(bucket.trades), started)

    def compute_symbols(self, user_id: str, trades: Sequence[Trade]) -> List[AnalyticsSnapshot]:
        """One snapshot per (symbol, exchange) that has closed trades, ordered by instrument."""
        instruments = sorted({(t.symbol, t.exchange) for t in trades if t.is_closed})
        snapshots = []
        for symbol, exchange in instruments:
            snapshot = self.compute_symbol(user_id, symbol, exchange, trades)
            if snapshot is not None:
                snapshots.append(snapshot)
        return snapshots

    # ---- Persistence ----

    def _store(self, compute: Callable[[], Optional[AnalyticsSnapshot]]) -> Optional[AnalyticsSnapshot]:
        if self.store is None:
            raise ConfigurationError("No snapshot store configured for AnalyticsService")
        snapshot = compute()
        if snapshot is not None:
            self.store.upsert(snapshot)
        return snapshot

    def compute_and_store_daily(
        self, user_id: str, reference_date: DateLike, trades: Sequence[Trade]
    ) -> Optional[AnalyticsSnapshot]:
        return self._store(lambda: self.compute_daily(user_id, reference_date, trades))

    def compute_and_store_weekly(
        self, user_id: str, reference_date: DateLike, trades: Sequence[Trade]
    ) -> Optional[AnalyticsSnapshot]:
        return self._store(lambda: self.compute_weekly(user_id, reference_date, trades))

    def compute_and_store_monthly(
        self, user_id: str, reference_date: DateLike, trades: Sequence[Trade]
    ) -> Optional[AnalyticsSnapshot]:
        return self._store(lambda: self.compute_monthly(user_id, reference_date, trades))

    def compute_and_store_symbol(
        self, user_id: str, symbol: str, exchange: str, trades: Sequence[Trade]
    ) -> Optional[AnalyticsSnapshot]:
        return self._store(lambda: self.compute_symbol(user_id, symbol, exchange, trades))
