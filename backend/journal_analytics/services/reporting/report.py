"""
Trading reports rolled up from stored analytics snapshots.

Features:
- Period summary from daily snapshots
- Segment / trade-type / position breakdowns
- Best and worst instruments by net P&L
- Monthly and yearly shortcuts
- Period-over-period comparison
"""

import calendar
from collections import defaultdict
from datetime import date, datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Dict, List, Optional, Sequence, Type

from journal_analytics.core.config import get_settings
from journal_analytics.core.enums import PeriodType, PositionSide, ReportType, Segment, TradeType
from journal_analytics.core.errors.base import ValidationError
from journal_analytics.core.errors.decorators import error_handler
from journal_analytics.core.logging.logger import get_logger
from journal_analytics.models.analytics import AnalyticsSnapshot
from journal_analytics.models.report import (
    CategoryBreakdown,
    DayBreakdown,
    PeriodComparison,
    PeriodFigures,
    ReportBreakdown,
    ReportPeriod,
    ReportSummary,
    SymbolPerformance,
    TradingReport,
)
from journal_analytics.services.analytics.pnl import HUNDRED, ZERO, round_money

logger = get_logger(__name__)

ONE = Decimal("1")

# (aggregate P&L field, aggregate trade-count field, category enum)
BREAKDOWNS = {
    "by_segment": ("segment_pnl", "segment_trades", Segment),
    "by_trade_type": ("trade_type_pnl", "trade_type_trades", TradeType),
    "by_position": ("position_pnl", "position_trades", PositionSide),
}


class ReportBuilder:
    """
    Builds ``TradingReport`` objects from daily and symbol snapshots.

    Unlike a single aggregate, the report reconstructs win and loss totals
    from each day's averages, and reports a profit factor of 0 when the
    period has no losses.
    """

    def __init__(self, top_symbols: Optional[int] = None) -> None:
        self._top_symbols = top_symbols

    @property
    def top_symbols(self) -> int:
        if self._top_symbols is not None:
            return self._top_symbols
        return get_settings().analytics.REPORT_TOP_SYMBOLS

    @staticmethod
    def _in_period(snapshots: Sequence[AnalyticsSnapshot], start: date, end: date) -> List[AnalyticsSnapshot]:
        daily = [
            s for s in snapshots
            if s.period_type == PeriodType.DAY and start <= s.scope.date <= end
        ]
        return sorted(daily, key=lambda s: s.scope.date)

    @staticmethod
    def summarize(daily: Sequence[AnalyticsSnapshot]) -> ReportSummary:
        """Roll up daily snapshots. Win and loss totals are rebuilt from each day's averages."""
        total = winning = losing = break_even = 0
        gross = net = charges = total_wins = total_losses = ZERO
        largest_win = largest_loss = ZERO

        for snapshot in daily:
            agg = snapshot.aggregate
            total += agg.total_trades
            winning += agg.winning_trades
            losing += agg.losing_trades
            break_even += agg.break_even_trades
            gross += agg.gross_pnl
            net += agg.net_pnl
            charges += agg.total_charges
            total_wins += agg.average_win * agg.winning_trades
            total_losses += agg.average_loss * agg.losing_trades
            largest_win = max(largest_win, agg.largest_win)
            largest_loss = min(largest_loss, agg.largest_loss)

        win_rate = Decimal(winning) / Decimal(total) * HUNDRED if total else ZERO
        average_win = total_wins / winning if winning else ZERO
        average_loss = total_losses / losing if losing else ZERO
        win_share = win_rate / HUNDRED
        expectancy = win_share * average_win - (ONE - win_share) * average_loss

        return ReportSummary(
            total_trades=total,
            winning_trades=winning,
            losing_trades=losing,
            break_even_trades=break_even,
            gross_pnl=round_money(gross),
            net_pnl=round_money(net),
            total_charges=round_money(charges),
            win_rate=round_money(win_rate),
            profit_factor=round_money(total_wins / total_losses) if total_losses > 0 else ZERO,
            average_win=round_money(average_win),
            average_loss=round_money(average_loss),
            largest_win=round_money(largest_win),
            largest_loss=round_money(largest_loss),
            expectancy=round_money(expectancy),
        )

    @staticmethod
    def _category_rows(
        daily: Sequence[AnalyticsSnapshot], pnl_field: str, count_field: str, categories: Type[Enum]
    ) -> List[CategoryBreakdown]:
        pnl: Dict[str, Decimal] = defaultdict(lambda: ZERO)
        trades: Dict[str, int] = defaultdict(int)
        for snapshot in daily:
            for key, value in getattr(snapshot.aggregate, pnl_field).items():
                pnl[key] += value
            for key, value in getattr(snapshot.aggregate, count_field).items():
                trades[key] += value
        return [
            CategoryBreakdown(category=member.value, pnl=round_money(pnl[member.value]), trades=trades[member.value])
            for member in categories
        ]

    def _breakdown(self, daily: Sequence[AnalyticsSnapshot]) -> ReportBreakdown:
        return ReportBreakdown(**{
            name: self._category_rows(daily, pnl_field, count_field, categories)
            for name, (pnl_field, count_field, categories) in BREAKDOWNS.items()
        })

    def _performers(self, symbol_snapshots: Sequence[AnalyticsSnapshot], worst: bool) -> List[SymbolPerformance]:
        symbols = [s for s in symbol_snapshots if s.period_type == PeriodType.SYMBOL]
        if worst:
            ranked = sorted(symbols, key=lambda s: (s.aggregate.net_pnl, s.scope.key))
        else:
            ranked = sorted(symbols, key=lambda s: (-s.aggregate.net_pnl, s.scope.key))
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
        context_extractor=lambda self, user_id, daily_snapshots, symbol_snapshots, start, end, period_type=ReportType.CUSTOM: {
            "user_id": user_id,
            "start": str(start),
            "end": str(end),
            "period_type": str(period_type),
        },
        log_message="Report generation failed"
    )
    def generate_report(
        self,
        user_id: str,
        daily_snapshots: Sequence[AnalyticsSnapshot],
        symbol_snapshots: Sequence[AnalyticsSnapshot],
        start: date,
        end: date,
        period_type: ReportType = ReportType.CUSTOM,
    ) -> TradingReport:
        """
        Roll up daily snapshots between ``start`` and ``end`` (inclusive).

        Args:
            user_id: Owner of the snapshots.
            daily_snapshots: Candidate daily snapshots; others are ignored.
            symbol_snapshots: Symbol snapshots used for best/worst performers.
            start: First day of the period.
            end: Last day of the period.
            period_type: Label for the period.

        Returns:
            The report.

        Raises:
            ValidationError: If ``start`` is after ``end``.
        """
        if start > end:
            raise ValidationError(
                "Invalid report period",
                context={"start": str(start), "end": str(end)}
            )

        daily = self._in_period(daily_snapshots, start, end)
        report = TradingReport(
            user_id=user_id,
            period=ReportPeriod(start=start, end=end, type=period_type),
            summary=self.summarize(daily),
            breakdown=self._breakdown(daily),
            top_performers=self._performers(symbol_snapshots, worst=False),
            worst_performers=self._performers(symbol_snapshots, worst=True),
            daily_breakdown=[
                DayBreakdown(date=s.scope.date, pnl=s.aggregate.net_pnl, trades=s.aggregate.total_trades)
                for s in daily
            ],
            generated_at=datetime.now(timezone.utc),
        )
        logger.info(
            "Generated trading report",
            extra={
                "user_id": user_id,
                "start": str(start),
                "end": str(end),
                "days": len(daily),
                "net_pnl": str(report.summary.net_pnl),
            },
        )
        return report

    def generate_monthly_report(
        self,
        user_id: str,
        daily_snapshots: Sequence[AnalyticsSnapshot],
        symbol_snapshots: Sequence[AnalyticsSnapshot],
        year: int,
        month: int,
    ) -> TradingReport:
        if not 1 <= month <= 12:
            raise ValidationError("Invalid month", context={"year": year, "month": month})
        last_day = calendar.monthrange(year, month)[1]
        return self.generate_report(
            user_id, daily_snapshots, symbol_snapshots,
            date(year, month, 1), date(year, month, last_day), ReportType.MONTHLY,
        )

    def generate_yearly_report(
        self,
        user_id: str,
        daily_snapshots: Sequence[AnalyticsSnapshot],
        symbol_snapshots: Sequence[AnalyticsSnapshot],
        year: int,
    ) -> TradingReport:
        return self.generate_report(
            user_id, daily_snapshots, symbol_snapshots,
            date(year, 1, 1), date(year, 12, 31), ReportType.YEARLY,
        )

    @staticmethod
    def compare_periods(first: TradingReport, second: TradingReport) -> PeriodComparison:
        """Headline figures of both reports and their change from ``first`` to ``second``."""
        a, b = first.summary, second.summary
        return PeriodComparison(
            first=PeriodFigures(net_pnl=a.net_pnl, win_rate=a.win_rate, trades=a.total_trades),
            second=PeriodFigures(net_pnl=b.net_pnl, win_rate=b.win_rate, trades=b.total_trades),
            change=PeriodFigures(
                net_pnl=round_money(b.net_pnl - a.net_pnl),
                win_rate=round_money(b.win_rate - a.win_rate),
                trades=b.total_trades - a.total_trades,
            ),
        )
