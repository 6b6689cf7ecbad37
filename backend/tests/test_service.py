import logging
from datetime import date, datetime
from decimal import Decimal

import pytest
import pytz

from journal_analytics.core.enums import PeriodType, Segment
from journal_analytics.core.errors import ConfigurationError, ValidationError
from journal_analytics.models.analytics import DayScope, MonthScope, SymbolScope, WeekScope
from journal_analytics.services.analytics import AnalyticsService, InMemorySnapshotStore, PeriodBucketizer

from conftest import make_trade


@pytest.fixture
def store():
    return InMemorySnapshotStore()


@pytest.fixture
def service(store):
    return AnalyticsService(store=store, bucketizer=PeriodBucketizer(timezone=pytz.UTC))


@pytest.fixture
def march_trades():
    """Daily nets: Mar 4 +100, Mar 5 -50, Mar 6 -80, Mar 12 +30."""
    return [
        make_trade("100", "200", exit_date=datetime(2024, 3, 4, 15, 0)),
        make_trade("100", "50", exit_date=datetime(2024, 3, 5, 15, 0)),
        make_trade("100", "20", exit_date=datetime(2024, 3, 6, 15, 0)),
        make_trade("100", "130", exit_date=datetime(2024, 3, 12, 15, 0), symbol="TCS"),
        make_trade("100", "500", exit_date=datetime(2024, 4, 2, 15, 0)),
    ]


def test_compute_daily(service, scenario_a_trades):
    snapshot = service.compute_daily("user-1", date(2024, 3, 4), scenario_a_trades)

    assert snapshot.scope == DayScope(date=date(2024, 3, 4))
    assert snapshot.period_type == PeriodType.DAY
    assert snapshot.key == ("user-1", "day", "2024-03-04")
    assert snapshot.aggregate.net_pnl == Decimal("285.00")
    assert snapshot.trading_days == 1
    assert snapshot.average_daily_pnl == Decimal("285.00")
    assert snapshot.window_start.date() == date(2024, 3, 4)


def test_empty_window_returns_none(service, store, scenario_a_trades):
    assert service.compute_daily("user-1", date(2024, 3, 5), scenario_a_trades) is None
    assert service.compute_weekly("user-1", date(2024, 3, 12), scenario_a_trades) is None
    assert service.compute_monthly("user-1", date(2024, 5, 1), []) is None
    assert service.compute_symbol("user-1", "NOPE", "NSE", scenario_a_trades) is None
    assert service.compute_and_store_daily("user-1", date(2024, 3, 5), scenario_a_trades) is None
    assert len(store) == 0


def test_compute_weekly(service, march_trades):
    snapshot = service.compute_weekly("user-1", date(2024, 3, 6), march_trades)

    assert snapshot.scope == WeekScope(year=2024, week_number=10)
    assert snapshot.aggregate.total_trades == 3
    assert snapshot.trading_days == 3
    assert snapshot.best_day.date == date(2024, 3, 4)
    assert snapshot.worst_day.date == date(2024, 3, 6)
    assert snapshot.streaks.max_loss_streak == 2
    assert snapshot.drawdown.max_drawdown == Decimal("130.00")


def test_weekly_scope_uses_iso_year(service):
    trades = [make_trade(exit_date=datetime(2024, 12, 31, 10, 0))]

    snapshot = service.compute_weekly("user-1", date(2024, 12, 31), trades)

    assert snapshot.scope == WeekScope(year=2025, week_number=1)


def test_compute_monthly(service, march_trades):
    snapshot = service.compute_monthly("user-1", date(2024, 3, 20), march_trades)

    assert snapshot.scope == MonthScope(year=2024, month=3)
    assert snapshot.aggregate.total_trades == 4
    assert snapshot.aggregate.net_pnl == Decimal("0.00")
    assert snapshot.trading_days == 4
    assert snapshot.average_daily_pnl == Decimal("0.00")
    assert snapshot.drawdown.max_drawdown == Decimal("130.00")
    assert snapshot.drawdown.max_drawdown_date == date(2024, 3, 6)
    assert snapshot.drawdown.recovery_days is None
    assert snapshot.streaks.current_win_streak == 1
    assert (snapshot.best_week.week_number, snapshot.best_week.pnl) == (11, Decimal("30.00"))
    assert (snapshot.worst_week.week_number, snapshot.worst_week.pnl) == (10, Decimal("-30.00"))
    assert snapshot.window_end.date() == date(2024, 3, 31)


def test_compute_symbol(service):
    trades = [
        make_trade("100", "110", "10", entry_date=datetime(2024, 3, 1, 9, 0),
                   exit_date=datetime(2024, 3, 4, 10, 0), segment=Segment.OPTIONS),
        make_trade("200", "190", "5", entry_date=datetime(2024, 3, 4, 9, 0),
                   exit_date=datetime(2024, 3, 4, 15, 0)),
        make_trade(symbol="TCS"),
    ]

    snapshot = service.compute_symbol("user-1", "INFY", "NSE", trades)

    assert snapshot.scope == SymbolScope(symbol="INFY", exchange="NSE")
    assert snapshot.aggregate.total_trades == 2
    assert snapshot.aggregate.net_pnl == Decimal("50.00")
    stats = snapshot.symbol_stats
    assert stats.segment == Segment.OPTIONS
    assert stats.total_quantity == Decimal("15")
    assert stats.average_holding_days == Decimal("1.50")
    assert stats.average_position_size == Decimal("1000.00")
    assert stats.first_traded_at == pytz.UTC.localize(datetime(2024, 3, 1, 9, 0))
    assert stats.last_traded_at == pytz.UTC.localize(datetime(2024, 3, 4, 15, 0))


def test_compute_symbols(service, march_trades):
    snapshots = service.compute_symbols("user-1", march_trades)

    assert [s.scope.symbol for s in snapshots] == ["INFY", "TCS"]
    assert snapshots[0].aggregate.total_trades == 4


def test_malformed_trade_raises_validation_error(service, store):
    trades = [make_trade(), make_trade(charges="-1")]

    with pytest.raises(ValidationError) as exc_info:
        service.compute_and_store_daily("user-1", date(2024, 3, 4), trades)

    assert exc_info.value.context["field"] == "charges.total"
    assert exc_info.value.context["user_id"] == "user-1"
    assert len(store) == 0


def test_compute_and_store_is_idempotent(service, store, march_trades):
    first = service.compute_and_store_monthly("user-1", date(2024, 3, 1), march_trades)
    second = service.compute_and_store_monthly("user-1", date(2024, 3, 31), march_trades)

    assert first == second
    assert len(store) == 1
    assert store.get("user-1", MonthScope(year=2024, month=3)) == second


def test_recompute_replaces_snapshot(service, store, march_trades):
    service.compute_and_store_daily("user-1", date(2024, 3, 4), march_trades)
    updated = march_trades + [make_trade("100", "101", exit_date=datetime(2024, 3, 4, 16, 0))]

    service.compute_and_store_daily("user-1", date(2024, 3, 4), updated)

    stored = store.get("user-1", DayScope(date=date(2024, 3, 4)))
    assert stored.aggregate.total_trades == 2
    assert stored.aggregate.net_pnl == Decimal("101.00")


def test_store_required_for_persistence(march_trades):
    service = AnalyticsService(bucketizer=PeriodBucketizer(timezone=pytz.UTC))

    with pytest.raises(ConfigurationError):
        service.compute_and_store_weekly("user-1", date(2024, 3, 4), march_trades)


def test_snapshot_to_dict(service, scenario_a_trades):
    data = service.compute_daily("user-1", date(2024, 3, 4), scenario_a_trades).to_dict()

    assert data["period_type"] == "day"
    assert data["scope"] == {"kind": "day", "date": "2024-03-04"}
    assert data["aggregate"]["net_pnl"] == "285.00"
    assert data["streaks"] is None


def test_default_collaborators_use_configured_timezone(scenario_a_trades):
    snapshot = AnalyticsService().compute_daily("user-1", datetime(2024, 3, 4), scenario_a_trades)

    assert snapshot.aggregate.net_pnl == Decimal("285.00")
    assert snapshot.window_start.tzinfo.zone == "UTC"


def test_malformed_trade_logged_once(service, caplog):
    handler_logger = logging.getLogger("journal_analytics.core.errors.decorators")
    with caplog.at_level(logging.WARNING, logger=handler_logger.name):
        with pytest.raises(ValidationError):
            service.compute_and_store_daily("user-1", date(2024, 3, 4), [make_trade(charges="-1")])

    assert len(caplog.records) == 1
    assert caplog.records[0].error_context["context"]["user_id"] == "user-1"
