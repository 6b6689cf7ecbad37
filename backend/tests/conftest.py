import itertools
import os
from datetime import date, datetime, timedelta
from decimal import Decimal
from typing import Iterable, List

import pytest

os.environ.setdefault("LOGGING__CONSOLE_LOGGING", "false")
os.environ.setdefault("LOGGING__LOG_LEVEL", "DEBUG")
os.environ.setdefault("ANALYTICS__TIMEZONE", "UTC")

from journal_analytics.core.enums import PositionSide, Segment, TradeStatus, TradeType  # noqa: E402
from journal_analytics.models.analytics import DailyPnLEntry  # noqa: E402
from journal_analytics.models.trade import Charges, Trade  # noqa: E402

_ids = itertools.count(1)


def make_trade(
    entry_price="100",
    exit_price="110",
    quantity="1",
    charges="0",
    exit_date=datetime(2024, 3, 4, 15, 0),
    entry_date=None,
    **overrides,
) -> Trade:
    """Closed long equity intraday trade on INFY/NSE unless overridden."""
    fields = dict(
        id=f"t{next(_ids)}",
        user_id="user-1",
        symbol="INFY",
        exchange="NSE",
        segment=Segment.EQUITY,
        trade_type=TradeType.INTRADAY,
        position=PositionSide.LONG,
        status=TradeStatus.CLOSED,
        entry_price=Decimal(entry_price),
        exit_price=None if exit_price is None else Decimal(exit_price),
        quantity=Decimal(quantity),
        entry_date=entry_date or (exit_date - timedelta(hours=5) if exit_date else datetime(2024, 3, 4, 9, 30)),
        exit_date=exit_date,
        charges=Charges(total=Decimal(charges)),
    )
    fields.update(overrides)
    return Trade(**fields)


def daily_series(values: Iterable[str], start: date = date(2024, 3, 4)) -> List[DailyPnLEntry]:
    """Consecutive-day P&L series starting at ``start``."""
    return [
        DailyPnLEntry(date=start + timedelta(days=i), pnl=Decimal(v))
        for i, v in enumerate(values)
    ]


@pytest.fixture
def trade_factory():
    return make_trade


@pytest.fixture
def scenario_a_trades():
    """Long 100->120 x10 (charges 10), short 200->180 x5 (charges 5), flat 50->50 x2."""
    return [
        make_trade("100", "120", "10", "10"),
        make_trade("200", "180", "5", "5", position=PositionSide.SHORT, segment=Segment.FUTURES),
        make_trade("50", "50", "2", "0", trade_type=TradeType.SWING),
    ]
