"""
Per-trade P&L and monetary helpers shared by the analytics components.
"""

from decimal import Decimal, ROUND_HALF_UP
from typing import Any

from journal_analytics.core.config import analytics_constants
from journal_analytics.core.enums import PositionSide
from journal_analytics.core.errors.base import ValidationError
from journal_analytics.models.trade import Trade, TradePnL

ZERO = Decimal("0")
HUNDRED = Decimal("100")


def to_decimal(value: Any) -> Decimal:
    """Convert a value to a Decimal through its string form."""
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value or 0))


def round_money(value: Any) -> Decimal:
    """Round to cents, halves away from zero."""
    return to_decimal(value).quantize(analytics_constants.MONEY_QUANTUM, rounding=ROUND_HALF_UP)


def _invalid(trade: Trade, field: str, value: Any, reason: str) -> ValidationError:
    return ValidationError(
        f"Malformed trade {trade.id}: {reason}",
        context={"trade_id": trade.id, "field": field, "value": str(value)},
    )


def validate_closed_trade(trade: Trade) -> None:
    """
    Check the fields a closed trade needs before it can be aggregated.

    Raises:
        ValidationError: On a missing exit price or exit date, a non-positive
            quantity, a negative price or negative charges.
    """
    if trade.exit_price is None:
        raise _invalid(trade, "exit_price", None, "closed trade has no exit price")
    if trade.exit_date is None:
        raise _invalid(trade, "exit_date", None, "closed trade has no exit date")
    if trade.quantity <= 0:
        raise _invalid(trade, "quantity", trade.quantity, "quantity must be positive")
    if trade.entry_price < 0:
        raise _invalid(trade, "entry_price", trade.entry_price, "entry price cannot be negative")
    if trade.exit_price < 0:
        raise _invalid(trade, "exit_price", trade.exit_price, "exit price cannot be negative")
    if trade.charges.total < 0:
        raise _invalid(trade, "charges.total", trade.charges.total, "charges cannot be negative")


def calculate_trade_pnl(trade: Trade) -> TradePnL:
    """
    Return the P&L of a single trade.

    A precomputed ``trade.pnl`` wins over price-derived values. Either way
    every figure is rounded to cents. Trades that are not closed contribute
    nothing.
    """
    if not trade.is_closed:
        return TradePnL(gross=ZERO, net=ZERO, percentage=ZERO, charges=ZERO)

    validate_closed_trade(trade)
    if trade.pnl is not None:
        gross, net = trade.pnl.gross, trade.pnl.net
        percentage, charges = trade.pnl.percentage, trade.pnl.charges
    else:
        entry_value = trade.entry_price * trade.quantity
        exit_value = trade.exit_price * trade.quantity
        if trade.position == PositionSide.LONG:
            gross = exit_value - entry_value
        else:
            gross = entry_value - exit_value

        charges = trade.charges.total
        net = gross - charges
        percentage = net / entry_value * HUNDRED if entry_value > 0 else ZERO

    return TradePnL(
        gross=round_money(gross),
        net=round_money(net),
        percentage=round_money(percentage),
        charges=round_money(charges),
    )
