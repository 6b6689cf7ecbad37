from datetime import date
from decimal import Decimal

import pytest

from journal_analytics.models.analytics import DayScope, MonthScope, StreakResult, WeeklyPnLEntry
from journal_analytics.services.analytics.reducer import AggregateReducer
from journal_analytics.services.analytics.snapshot import AnalyticsSnapshotBuilder

from conftest import daily_series, make_trade


@pytest.fixture
def builder():
    return AnalyticsSnapshotBuilder()


@pytest.fixture
def aggregate():
    return AggregateReducer().reduce([make_trade("100", "110", "7")])


def test_average_daily_pnl_and_best_worst(builder, aggregate):
    series = daily_series(["50", "-30", "50"])

    result = builder.build("user-1", MonthScope(year=2024, month=3), aggregate, series)

    assert result.trading_days == 3
    assert result.average_daily_pnl == Decimal("23.33")
    assert result.best_day == series[0]
    assert result.worst_day == series[1]
    assert result.streaks is None
    assert result.window_start is None


def test_no_trading_days(builder):
    empty = AggregateReducer().reduce([])

    result = builder.build("user-1", DayScope(date=date(2024, 3, 4)), empty, [])

    assert result.trading_days == 0
    assert result.average_daily_pnl == 0
    assert result.best_day is None and result.worst_day is None


def test_precomputed_parts_are_used(builder, aggregate):
    series = daily_series(["70"])
    streaks = StreakResult(current_win_streak=1, max_win_streak=1)
    week = WeeklyPnLEntry(year=2024, week_number=10, pnl=Decimal("70"))

    result = builder.build(
        "user-1", MonthScope(year=2024, month=3), aggregate, series,
        streaks=streaks,
        best_worst=(series[0], None),
        extras={"best_week": week},
    )

    assert result.streaks == streaks
    assert result.best_day == series[0]
    assert result.worst_day is None
    assert result.best_week == week
