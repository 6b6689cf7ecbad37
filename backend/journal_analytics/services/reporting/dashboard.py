"""
Dashboard figures rolled up from stored analytics snapshots.

Features:
- Risk-adjusted metrics over the daily P&L series
- Monthly and weekly P&L trends
- Headline summary: today, this month, all time, recent days and the best
  and worst instruments

Performance metrics are a left fold over daily snapshots, like the streak and
drawdown scans, and reuse the drawdown step so both agree on peak and trough.
"""

from datetime import date, timedelta
from decimal import Decimal
from functools import reduce
from typing import List, NamedTuple, Optional, Sequence

from journal_analytics.core.config import analytics_constants, get_settings
from journal_analytics.core.enums import PeriodType
from journal_analytics.core.errors.base import ValidationError
from journal_analytics.core.errors.decorators import error_handler
from journal_analytics.core.logging.logger import get_logger
from journal_analytics.models.analytics import AnalyticsSnapshot, DailyPnLEntry
from journal_analytics.models.dashboard import (
    DashboardSummary,
    DayFigures,
    MonthFigures,
    PerformanceMetrics,
    TrendPoint,
)
from journal_analytics.models.report import SymbolPerformance
from journal_analytics.services.analytics.pnl import HUNDRED, ZERO, round_money
from journal_analytics.services.analytics.series import DrawdownState, drawdown_step
from journal_analytics.services.reporting.report import ReportBuilder

logger = get_logger(__name__)

ONE = Decimal("1")


class MetricsState(NamedTuple):
    days: int = 0
    pnl_sum: Decimal = ZERO
    pnl_sum_sq: Decimal = ZERO
    downside_sum_sq: Decimal = ZERO
    losing_days: int = 0
    profitable_days: int = 0
    total_wins: Decimal = ZERO
    total_losses: Decimal = ZERO
    winning_trades: int = 0
    losing_trades: int = 0
    drawdown: DrawdownState = DrawdownState()


def metrics_step(state: MetricsState, snapshot: AnalyticsSnapshot) -> MetricsState:
    agg = snapshot.aggregate
    pnl = agg.net_pnl
    return MetricsState(
        days=state.days + 1,
        pnl_sum=state.pnl_sum + pnl,
        pnl_sum_sq=state.pnl_sum_sq + pnl * pnl,
        downside_sum_sq=state.downside_sum_sq + (pnl * pnl if pnl < 0 else ZERO),
        losing_days=state.losing_days + (1 if pnl < 0 else 0),
        profitable_days=state.profitable_days + (1 if pnl > 0 else 0),
        total_wins=state.total_wins + agg.average_win * agg.winning_trades,
        total_losses=state.total_losses + agg.average_loss * agg.losing_trades,
        winning_trades=state.winning_trades + agg.winning_trades,
        losing_trades=state.losing_trades + agg.losing_trades,
        drawdown=drawdown_step(state.drawdown, DailyPnLEntry(date=snapshot.scope.date, pnl=pnl)),
    )


def _ratio(numerator: Decimal, denominator: Decimal) -> Decimal:
    return numerator / denominator if denominator > 0 else ZERO


def metrics_result(state: MetricsState) -> PerformanceMetrics:
    if not state.days:
        return PerformanceMetrics()

    days = Decimal(state.days)
    mean = state.pnl_sum / days
    # Population variance, clamped at zero
    std_dev = max(ZERO, state.pnl_sum_sq / days - mean * mean).sqrt()
    downside_dev = _ratio(state.downside_sum_sq, Decimal(state.losing_days)).sqrt()
    trading_year = Decimal(analytics_constants.TRADING_DAYS_PER_YEAR)
    max_drawdown = state.drawdown.max_drawdown

    average_win = _ratio(state.total_wins, Decimal(state.winning_trades))
    average_loss = _ratio(state.total_losses, Decimal(state.losing_trades))
    win_share = _ratio(Decimal(state.winning_trades), Decimal(state.winning_trades + state.losing_trades))

    return PerformanceMetrics(
        trading_days=state.days,
        sharpe_ratio=round_money(_ratio(mean, std_dev) * trading_year.sqrt()),
        sortino_ratio=round_money(_ratio(mean, downside_dev) * trading_year.sqrt()),
        max_drawdown=round_money(max_drawdown),
        max_drawdown_date=state.drawdown.max_drawdown_date,
        recovery_factor=round_money(_ratio(state.pnl_sum, max_drawdown)),
        calmar_ratio=round_money(_ratio(mean * trading_year, max_drawdown)),
        average_reward_risk=round_money(_ratio(average_win, average_loss)),
        expectancy=round_money(win_share * average_win - (ONE - win_share) * average_loss),
        consistency=round_money(Decimal(state.profitable_days) / days * HUNDRED),
    )


def compute_performance_metrics(daily: Sequence[AnalyticsSnapshot]) -> PerformanceMetrics:
    """Metrics of chronologically ordered daily snapshots."""
    return metrics_result(reduce(metrics_step, daily, MetricsState()))


class DashboardBuilder:
    """
    Builds dashboard figures from a user's snapshots.

    Every method takes plain snapshot sequences, typically
    ``store.list_snapshots(user_id)``, and ignores snapshots of other
    period types.
    """

    def __init__(self, top_symbols: Optional[int] = None, recent_days: int = 30) -> None:
        self._top_symbols = top_symbols
        self.recent_days = recent_days

    @property
    def top_symbols(self) -> int:
        if self._top_symbols is not None:
            return self._top_symbols
        return get_settings().analytics.REPORT_TOP_SYMBOLS

    @staticmethod
    def _of_type(snapshots: Sequence[AnalyticsSnapshot], period_type: PeriodType) -> List[AnalyticsSnapshot]:
        return sorted(
            (s for s in snapshots if s.period_type == period_type),
            key=lambda s: s.scope.key,
        )

    @staticmethod
    def _check_count(name: str, value: int) -> None:
        if value < 1:
            raise ValidationError(f"{name} must be at least 1", context={name: value})

    @error_handler(
        context_extractor=lambda self, snapshots, start=None, end=None: {
            "snapshots": len(snapshots),
            "start": str(start),
            "end": str(end),
        },
        log_message="Performance metrics computation failed"
    )
    def performance_metrics(
        self,
        snapshots: Sequence[AnalyticsSnapshot],
        start: Optional[date] = None,
        end: Optional[date] = None,
    ) -> PerformanceMetrics:
        """
        Risk-adjusted metrics of the daily snapshots between ``start`` and ``end``.

        Either bound may be omitted. Win and loss totals are rebuilt from each
        day's averages, as in reports.

        Raises:
            ValidationError: If ``start`` is after ``end``.
        """
        if start is not None and end is not None and start > end:
            raise ValidationError(
                "Invalid metrics period",
                context={"start": str(start), "end": str(end)}
            )
        daily = [
            s for s in self._of_type(snapshots, PeriodType.DAY)
            if (start is None or s.scope.date >= start) and (end is None or s.scope.date <= end)
        ]
        metrics = compute_performance_metrics(daily)
        logger.debug(
            "Computed performance metrics",
            extra={"days": metrics.trading_days, "sharpe_ratio": str(metrics.sharpe_ratio)},
        )
        return metrics

    def monthly_trend(self, snapshots: Sequence[AnalyticsSnapshot], months: int = 12) -> List[TrendPoint]:
        """Net P&L of the latest ``months`` monthly snapshots, oldest first."""
        self._check_count("months", months)
        return [
            TrendPoint(
                label=f"{s.scope.year}-{s.scope.month:02d}",
                pnl=s.aggregate.net_pnl,
                trades=s.aggregate.total_trades,
            )
            for s in self._of_type(snapshots, PeriodType.MONTH)[-months:]
        ]

    def weekly_trend(self, snapshots: Sequence[AnalyticsSnapshot], weeks: int = 12) -> List[TrendPoint]:
        """Net P&L of the latest ``weeks`` weekly snapshots, oldest first."""
        self._check_count("weeks", weeks)
        return [
            TrendPoint(
                label=f"{s.scope.year}-W{s.scope.week_number:02d}",
                pnl=s.aggregate.net_pnl,
                trades=s.aggregate.total_trades,
            )
            for s in self._of_type(snapshots, PeriodType.WEEK)[-weeks:]
        ]

    def _symbols(self, snapshots: Sequence[AnalyticsSnapshot], worst: bool) -> List[SymbolPerformance]:
        symbols = self._of_type(snapshots, PeriodType.SYMBOL)
        if worst:
            ranked = sorted((s for s in symbols if s.aggregate.net_pnl < 0), key=lambda s: s.aggregate.net_pnl)
        else:
            ranked = sorted((s for s in symbols if s.aggregate.net_pnl > 0), key=lambda s: -s.aggregate.net_pnl)
        return [
            SymbolPerformance(
                symbol=s.scope.symbol,
                exchange=s.scope.exchange,
                pnl=s.aggregate.net_pnl,
                trades=s.aggregate.total_trades,
                win_rate=s.aggregate.win_rate,
            )
            for s in ranked[:self.top_symbols]
        ]

    @error_handler(
        context_extractor=lambda self, user_id, snapshots, as_of: {
            "user_id": user_id,
            "as_of": str(as_of),
        },
        log_message="Dashboard summary failed"
    )
    def summary(self, user_id: str, snapshots: Sequence[AnalyticsSnapshot], as_of: date) -> DashboardSummary:
        """
        Headline dashboard figures as of one day.

        Args:
            user_id: Owner of the snapshots; snapshots of other users are ignored.
            snapshots: Stored snapshots of any period type.
            as_of: The day treated as today.

        Returns:
            The summary. Missing day or month snapshots give zero figures.
        """
        owned = [s for s in snapshots if s.user_id == user_id]
        daily = self._of_type(owned, PeriodType.DAY)

        today = next((s for s in daily if s.scope.date == as_of), None)
        month = next(
            (s for s in self._of_type(owned, PeriodType.MONTH)
             if (s.scope.year, s.scope.month) == (as_of.year, as_of.month)),
            None,
        )
        recent_start = as_of - timedelta(days=self.recent_days)

        result = DashboardSummary(
            user_id=user_id,
            as_of=as_of,
            today=DayFigures(
                total_trades=today.aggregate.total_trades,
                net_pnl=today.aggregate.net_pnl,
                win_rate=today.aggregate.win_rate,
            ) if today else DayFigures(),
            this_month=MonthFigures(
                total_trades=month.aggregate.total_trades,
                net_pnl=month.aggregate.net_pnl,
                win_rate=month.aggregate.win_rate,
                trading_days=month.trading_days,
                average_daily_pnl=month.average_daily_pnl,
            ) if month else MonthFigures(),
            all_time=ReportBuilder.summarize(daily),
            recent_performance=[
                DailyPnLEntry(date=s.scope.date, pnl=s.aggregate.net_pnl)
                for s in daily if recent_start <= s.scope.date <= as_of
            ],
            top_symbols=self._symbols(owned, worst=False),
            worst_symbols=self._symbols(owned, worst=True),
        )
        logger.info(
            "Built dashboard summary",
            extra={
                "user_id": user_id,
                "as_of": str(as_of),
                "all_time_net_pnl": str(result.all_time.net_pnl),
            },
        )
        return result
