from datetime import date

import pytest

from journal_analytics.core.enums import PeriodType
from journal_analytics.core.errors import NotFoundError, ValidationError
from journal_analytics.models.analytics import (
    AggregateResult,
    AnalyticsSnapshot,
    DayScope,
    MonthScope,
    SymbolScope,
)
from journal_analytics.services.analytics.storage import InMemorySnapshotStore


def snapshot(scope, user_id="user-1", trades=1):
    return AnalyticsSnapshot(
        user_id=user_id,
        scope=scope,
        aggregate=AggregateResult(total_trades=trades, winning_trades=trades, position_trades={"long": trades}),
    )


def day(d, **kwargs):
    return snapshot(DayScope(date=d), **kwargs)


@pytest.fixture
def store():
    return InMemorySnapshotStore()


def test_upsert_creates_then_replaces(store):
    assert store.upsert(day(date(2024, 3, 4), trades=1)) is True
    assert store.upsert(day(date(2024, 3, 4), trades=3)) is False

    assert len(store) == 1
    assert store.get("user-1", DayScope(date=date(2024, 3, 4))).aggregate.total_trades == 3


def test_same_snapshot_twice_is_a_no_op(store):
    record = day(date(2024, 3, 4))
    store.upsert(record)
    store.upsert(record)

    assert store.list_snapshots("user-1") == [record]


def test_keys_are_scoped_by_user_and_period(store):
    store.upsert(day(date(2024, 3, 4)))
    store.upsert(day(date(2024, 3, 4), user_id="user-2"))
    store.upsert(snapshot(MonthScope(year=2024, month=3)))

    assert len(store) == 3
    assert store.get("user-1", MonthScope(year=2024, month=4)) is None


def test_list_snapshots_filters_by_period_type(store):
    store.upsert(day(date(2024, 3, 5)))
    store.upsert(day(date(2024, 3, 4)))
    store.upsert(snapshot(SymbolScope(symbol="INFY", exchange="NSE")))

    days = store.list_snapshots("user-1", PeriodType.DAY)

    assert [s.scope.date for s in days] == [date(2024, 3, 4), date(2024, 3, 5)]
    assert len(store.list_snapshots("user-1")) == 3
    assert store.list_snapshots("nobody") == []


def test_require_raises_not_found(store):
    with pytest.raises(NotFoundError) as exc_info:
        store.require("user-1", MonthScope(year=2024, month=1))

    assert exc_info.value.context["period_type"] == "month"
    assert exc_info.value.context["scope"] == [2024, 1]


def test_get_daily_range_is_inclusive(store):
    for d in (date(2024, 2, 29), date(2024, 3, 1), date(2024, 3, 15), date(2024, 3, 31), date(2024, 4, 1)):
        store.upsert(day(d))

    result = store.get_daily_range("user-1", date(2024, 3, 1), date(2024, 3, 31))

    assert [s.scope.date for s in result] == [date(2024, 3, 1), date(2024, 3, 15), date(2024, 3, 31)]


def test_get_daily_range_rejects_inverted_range(store):
    with pytest.raises(ValidationError):
        store.get_daily_range("user-1", date(2024, 3, 31), date(2024, 3, 1))


def test_delete_user(store):
    store.upsert(day(date(2024, 3, 4)))
    store.upsert(day(date(2024, 3, 5)))
    store.upsert(day(date(2024, 3, 4), user_id="user-2"))

    assert store.delete_user("user-1") == 2
    assert len(store) == 1
    assert store.delete_user("user-1") == 0
