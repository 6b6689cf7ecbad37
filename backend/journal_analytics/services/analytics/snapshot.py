"""
Assembly of analytics snapshots from the engine's partial results.
"""

from decimal import Decimal
from typing import Any, Dict, Optional, Sequence, Tuple

from journal_analytics.core.logging.logger import get_logger
from journal_analytics.models.analytics import (
    AggregateResult,
    AnalyticsSnapshot,
    DailyPnLEntry,
    DrawdownResult,
    Scope,
    StreakResult,
)
from journal_analytics.services.analytics.bucketizer import Window
from journal_analytics.services.analytics.pnl import ZERO, round_money
from journal_analytics.services.analytics.series import best_worst_days

logger = get_logger(__name__)

BestWorst = Tuple[Optional[DailyPnLEntry], Optional[DailyPnLEntry]]


class AnalyticsSnapshotBuilder:
    """Merges aggregate, series and scope-specific fields into one snapshot. Performs no I/O."""

    def build(
        self,
        user_id: str,
        scope: Scope,
        aggregate: AggregateResult,
        daily_pnl: Sequence[DailyPnLEntry],
        streaks: Optional[StreakResult] = None,
        drawdown: Optional[DrawdownResult] = None,
        best_worst: Optional[BestWorst] = None,
        window: Optional[Window] = None,
        extras: Optional[Dict[str, Any]] = None,
    ) -> AnalyticsSnapshot:
        """
        Build the snapshot for one (user, scope).

        Args:
            user_id: Owner of the analytics.
            scope: Day, week, month or symbol scope.
            aggregate: Result of the reducer for the scope's trades.
            daily_pnl: Daily P&L series of the same trades.
            streaks: Streak result, for scopes that track it.
            drawdown: Drawdown result, for scopes that track it.
            best_worst: Precomputed best/worst day; derived from ``daily_pnl`` when omitted.
            window: Inclusive (start, end) of a calendar scope.
            extras: Further snapshot fields by name, e.g. ``best_week`` or ``symbol_stats``.

        Returns:
            The assembled snapshot.
        """
        trading_days = len(daily_pnl)
        average_daily_pnl = (
            round_money(aggregate.net_pnl / Decimal(trading_days)) if trading_days else ZERO
        )
        best_day, worst_day = best_worst if best_worst is not None else best_worst_days(daily_pnl)
        window_start, window_end = window if window is not None else (None, None)

        snapshot = AnalyticsSnapshot(
            user_id=user_id,
            scope=scope,
            aggregate=aggregate,
            window_start=window_start,
            window_end=window_end,
            trading_days=trading_days,
            average_daily_pnl=average_daily_pnl,
            best_day=best_day,
            worst_day=worst_day,
            streaks=streaks,
            drawdown=drawdown,
            **(extras or {}),
        )
        logger.debug("Built analytics snapshot", extra={"key": list(snapshot.key)})
        return snapshot
