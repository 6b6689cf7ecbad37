"""
Sequential scans over a daily P&L series.

Streaks and drawdown are left folds over immutable accumulators, so each
step is a pure function of (state, entry) and both results can come out of
a single pass via ``compute_series``.
"""

from datetime import date
from decimal import Decimal
from functools import reduce
from typing import Dict, List, NamedTuple, Optional, Sequence, Tuple

from journal_analytics.models.analytics import (
    DailyPnLEntry,
    DrawdownResult,
    StreakResult,
    WeeklyPnLEntry,
)
from journal_analytics.services.analytics.pnl import ZERO, round_money


class StreakState(NamedTuple):
    temp_win: int = 0
    temp_loss: int = 0
    max_win: int = 0
    max_loss: int = 0
    last_pnl: Decimal = ZERO


class DrawdownState(NamedTuple):
    running_total: Decimal = ZERO
    peak: Decimal = ZERO
    max_drawdown: Decimal = ZERO
    max_drawdown_date: Optional[date] = None
    trough_peak: Decimal = ZERO
    recovered_on: Optional[date] = None


class SeriesState(NamedTuple):
    streak: StreakState = StreakState()
    drawdown: DrawdownState = DrawdownState()


# ---- Streaks ----

def streak_step(state: StreakState, entry: DailyPnLEntry) -> StreakState:
    """A flat day leaves every counter untouched."""
    if entry.pnl > 0:
        temp_win = state.temp_win + 1
        return state._replace(
            temp_win=temp_win,
            temp_loss=0,
            max_win=max(state.max_win, temp_win),
            last_pnl=entry.pnl,
        )
    if entry.pnl < 0:
        temp_loss = state.temp_loss + 1
        return state._replace(
            temp_win=0,
            temp_loss=temp_loss,
            max_loss=max(state.max_loss, temp_loss),
            last_pnl=entry.pnl,
        )
    return state._replace(last_pnl=entry.pnl)


def streak_result(state: StreakState) -> StreakResult:
    """Current streaks follow the sign of the last day; a flat last day gives 0/0."""
    return StreakResult(
        current_win_streak=state.temp_win if state.last_pnl > 0 else 0,
        current_loss_streak=state.temp_loss if state.last_pnl < 0 else 0,
        max_win_streak=state.max_win,
        max_loss_streak=state.max_loss,
    )


def compute_streaks(daily_pnl: Sequence[DailyPnLEntry]) -> StreakResult:
    return streak_result(reduce(streak_step, daily_pnl, StreakState()))


# ---- Drawdown ----

def drawdown_step(state: DrawdownState, entry: DailyPnLEntry) -> DrawdownState:
    running_total = state.running_total + entry.pnl
    peak = max(state.peak, running_total)
    drawdown = peak - running_total

    if drawdown > state.max_drawdown:
        return state._replace(
            running_total=running_total,
            peak=peak,
            max_drawdown=drawdown,
            max_drawdown_date=entry.date,
            trough_peak=peak,
            recovered_on=None,
        )

    recovered_on = state.recovered_on
    if (
        state.max_drawdown_date is not None
        and recovered_on is None
        and running_total > state.trough_peak
    ):
        recovered_on = entry.date
    return state._replace(running_total=running_total, peak=peak, recovered_on=recovered_on)


def drawdown_result(state: DrawdownState) -> DrawdownResult:
    recovery_days = None
    if state.max_drawdown_date is not None and state.recovered_on is not None:
        recovery_days = (state.recovered_on - state.max_drawdown_date).days
    return DrawdownResult(
        max_drawdown=round_money(state.max_drawdown),
        max_drawdown_date=state.max_drawdown_date,
        recovery_days=recovery_days,
    )


def compute_drawdown(daily_pnl: Sequence[DailyPnLEntry]) -> DrawdownResult:
    """
    Maximum peak-to-trough decline of cumulative P&L.

    Running total and peak both start at zero, so an opening losing streak
    counts as drawdown from the zero baseline.
    """
    return drawdown_result(reduce(drawdown_step, daily_pnl, DrawdownState()))


# ---- Combined ----

def series_step(state: SeriesState, entry: DailyPnLEntry) -> SeriesState:
    return SeriesState(
        streak=streak_step(state.streak, entry),
        drawdown=drawdown_step(state.drawdown, entry),
    )


def compute_series(daily_pnl: Sequence[DailyPnLEntry]) -> Tuple[StreakResult, DrawdownResult]:
    """Streaks and drawdown from one pass over the series."""
    final = reduce(series_step, daily_pnl, SeriesState())
    return streak_result(final.streak), drawdown_result(final.drawdown)


# ---- Extremes ----

def best_worst_days(
    daily_pnl: Sequence[DailyPnLEntry],
) -> Tuple[Optional[DailyPnLEntry], Optional[DailyPnLEntry]]:
    """Highest and lowest day; on ties the earliest entry wins."""
    if not daily_pnl:
        return None, None
    best = worst = daily_pnl[0]
    for entry in daily_pnl[1:]:
        if entry.pnl > best.pnl:
            best = entry
        if entry.pnl < worst.pnl:
            worst = entry
    return best, worst


def weekly_totals(daily_pnl: Sequence[DailyPnLEntry]) -> List[WeeklyPnLEntry]:
    """Group the daily series by ISO week, in chronological order."""
    totals: Dict[Tuple[int, int], Decimal] = {}
    for entry in daily_pnl:
        iso_year, iso_week, _ = entry.date.isocalendar()
        totals[(iso_year, iso_week)] = totals.get((iso_year, iso_week), ZERO) + entry.pnl
    return [
        WeeklyPnLEntry(year=year, week_number=week, pnl=round_money(pnl))
        for (year, week), pnl in sorted(totals.items())
    ]


def best_worst_weeks(
    daily_pnl: Sequence[DailyPnLEntry],
) -> Tuple[Optional[WeeklyPnLEntry], Optional[WeeklyPnLEntry]]:
    weeks = weekly_totals(daily_pnl)
    if not weeks:
        return None, None
    best = worst = weeks[0]
    for week in weeks[1:]:
        if week.pnl > best.pnl:
            best = week
        if week.pnl < worst.pnl:
            worst = week
    return best, worst
