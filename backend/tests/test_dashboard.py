from datetime import date, datetime, time, timedelta
from decimal import Decimal

import pytest
import pytz

from journal_analytics.core.enums import PositionSide
from journal_analytics.core.errors import ValidationError
from journal_analytics.models.dashboard import PerformanceMetrics
from journal_analytics.services.analytics import AnalyticsService, PeriodBucketizer
from journal_analytics.services.reporting import DashboardBuilder, compute_performance_metrics

from conftest import make_trade

MARCH_4 = datetime(2024, 3, 4, 14, 0)
MARCH_5 = datetime(2024, 3, 5, 14, 0)
APRIL_2 = datetime(2024, 4, 2, 14, 0)


@pytest.fixture
def service():
    return AnalyticsService(bucketizer=PeriodBucketizer(timezone=pytz.UTC))


@pytest.fixture
def builder():
    return DashboardBuilder(top_symbols=2)


def daily_snapshots(service, nets, start=date(2024, 3, 4)):
    """One single-trade daily snapshot per net value, on consecutive days."""
    snapshots = []
    for offset, net in enumerate(nets):
        exit_date = datetime.combine(start + timedelta(days=offset), time(15, 0))
        trade = make_trade("200", str(200 + net), exit_date=exit_date)
        snapshots.append(service.compute_daily("user-1", exit_date, [trade]))
    return snapshots


@pytest.fixture
def journal(service):
    """All snapshots of a small journal: INFY +30/+10, TCS -10/+100, HDFC 0."""
    trades = [
        make_trade("100", "130", exit_date=MARCH_4),
        make_trade("100", "110", exit_date=MARCH_4, symbol="TCS", position=PositionSide.SHORT),
        make_trade("100", "110", exit_date=MARCH_5),
        make_trade("50", "50", exit_date=MARCH_5, symbol="HDFC"),
        make_trade("100", "200", exit_date=APRIL_2, symbol="TCS"),
    ]
    return (
        [service.compute_daily("user-1", d, trades) for d in (MARCH_4, MARCH_5, APRIL_2)]
        + [service.compute_weekly("user-1", d, trades) for d in (MARCH_4, APRIL_2)]
        + [service.compute_monthly("user-1", d, trades) for d in (APRIL_2, MARCH_4)]
        + service.compute_symbols("user-1", trades)
    )


def test_performance_metrics(service):
    metrics = compute_performance_metrics(daily_snapshots(service, [100, -50, 150, -100]))

    assert metrics.trading_days == 4
    assert metrics.sharpe_ratio == Decimal("3.85")
    assert metrics.sortino_ratio == Decimal("5.02")
    assert metrics.max_drawdown == Decimal("100.00")
    assert metrics.max_drawdown_date == date(2024, 3, 7)
    assert metrics.recovery_factor == Decimal("1.00")
    assert metrics.calmar_ratio == Decimal("63.00")
    assert metrics.average_reward_risk == Decimal("1.67")
    assert metrics.expectancy == Decimal("25.00")
    assert metrics.consistency == Decimal("50.00")


def test_no_losing_days_gives_zero_sortino_and_drawdown_ratios(service):
    metrics = compute_performance_metrics(daily_snapshots(service, [100, 50]))

    assert metrics.sharpe_ratio == Decimal("47.62")
    assert metrics.sortino_ratio == Decimal("0")
    assert metrics.max_drawdown == Decimal("0")
    assert metrics.recovery_factor == Decimal("0")
    assert metrics.calmar_ratio == Decimal("0")
    assert metrics.average_reward_risk == Decimal("0")
    assert metrics.expectancy == Decimal("75.00")
    assert metrics.consistency == Decimal("100.00")


def test_constant_series_gives_zero_sharpe(service):
    metrics = compute_performance_metrics(daily_snapshots(service, [-40, -40]))

    assert metrics.sharpe_ratio == Decimal("0")
    assert metrics.sortino_ratio == Decimal("-15.87")
    assert metrics.max_drawdown == Decimal("80.00")
    assert metrics.recovery_factor == Decimal("-1.00")
    assert metrics.calmar_ratio == Decimal("-126.00")
    assert metrics.expectancy == Decimal("-40.00")
    assert metrics.consistency == Decimal("0.00")


def test_empty_series_gives_zero_metrics():
    assert compute_performance_metrics([]) == PerformanceMetrics()


def test_performance_metrics_window(builder, service):
    snapshots = daily_snapshots(service, [100, -50, 150, -100])

    metrics = builder.performance_metrics(snapshots, start=date(2024, 3, 5), end=date(2024, 3, 6))

    assert metrics.trading_days == 2
    assert metrics.max_drawdown == Decimal("50.00")
    assert metrics.max_drawdown_date == date(2024, 3, 5)
    assert metrics.recovery_factor == Decimal("2.00")


def test_performance_metrics_rejects_inverted_window(builder):
    with pytest.raises(ValidationError):
        builder.performance_metrics([], start=date(2024, 3, 6), end=date(2024, 3, 5))


def test_monthly_trend(builder, journal):
    trend = builder.monthly_trend(journal)

    assert [(p.label, p.pnl, p.trades) for p in trend] == [
        ("2024-03", Decimal("30.00"), 4),
        ("2024-04", Decimal("100.00"), 1),
    ]
    assert [p.label for p in builder.monthly_trend(journal, months=1)] == ["2024-04"]


def test_weekly_trend(builder, journal):
    trend = builder.weekly_trend(journal)

    assert [(p.label, p.pnl, p.trades) for p in trend] == [
        ("2024-W10", Decimal("30.00"), 4),
        ("2024-W14", Decimal("100.00"), 1),
    ]


def test_trend_length_must_be_positive(builder, journal):
    with pytest.raises(ValidationError):
        builder.weekly_trend(journal, weeks=0)


def test_summary(builder, journal):
    summary = builder.summary("user-1", journal, date(2024, 3, 5))

    assert (summary.today.total_trades, summary.today.net_pnl, summary.today.win_rate) == (
        2, Decimal("10.00"), Decimal("50.00"))
    assert summary.this_month.total_trades == 4
    assert summary.this_month.net_pnl == Decimal("30.00")
    assert summary.this_month.trading_days == 2
    assert summary.this_month.average_daily_pnl == Decimal("15.00")
    assert summary.all_time.total_trades == 5
    assert summary.all_time.net_pnl == Decimal("130.00")
    assert summary.all_time.win_rate == Decimal("60.00")
    assert summary.all_time.profit_factor == Decimal("14.00")
    assert [(e.date, e.pnl) for e in summary.recent_performance] == [
        (date(2024, 3, 4), Decimal("20.00")),
        (date(2024, 3, 5), Decimal("10.00")),
    ]
    assert [(s.symbol, s.pnl) for s in summary.top_symbols] == [
        ("TCS", Decimal("90.00")),
        ("INFY", Decimal("40.00")),
    ]
    assert summary.worst_symbols == []


def test_summary_without_current_snapshots(builder, journal):
    summary = builder.summary("user-1", journal, date(2024, 5, 20))

    assert summary.today.total_trades == 0
    assert summary.this_month.net_pnl == Decimal("0")
    assert summary.recent_performance == []
    assert summary.all_time.total_trades == 5


def test_summary_ignores_other_users(builder, journal):
    summary = builder.summary("user-2", journal, date(2024, 3, 5))

    assert summary.all_time.total_trades == 0
    assert summary.top_symbols == []
