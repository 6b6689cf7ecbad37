"""
Trade input model consumed by the analytics engine.

The model only enforces types. Business validation of closed trades
(positive quantity, non-negative prices and charges, exit fields present)
happens when a trade enters a computation, so a single bad record fails the
whole call with a ``ValidationError`` carrying the offending field.
"""

from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from journal_analytics.core.enums import Segment, TradeType, PositionSide, TradeStatus


class Charges(BaseModel):
    """Itemised transaction charges of a trade; only ``total`` enters P&L."""
    model_config = ConfigDict(frozen=True)

    total: Decimal = Field(Decimal("0"), description="Sum of all charges")
    brokerage: Optional[Decimal] = None
    stt: Optional[Decimal] = None
    transaction_charges: Optional[Decimal] = None
    gst: Optional[Decimal] = None
    sebi_charges: Optional[Decimal] = None
    stamp_duty: Optional[Decimal] = None


class TradePnL(BaseModel):
    """Per-trade P&L, either precomputed upstream or derived from prices."""
    model_config = ConfigDict(frozen=True)

    gross: Decimal
    net: Decimal
    percentage: Decimal = Decimal("0")
    charges: Decimal = Decimal("0")


class Trade(BaseModel):
    """
    A single trade record as supplied by the journal.

    Only trades with ``status == closed`` and an ``exit_date`` participate in
    analytics. ``pnl`` takes precedence over price-derived P&L when present.
    """
    model_config = ConfigDict(frozen=True)

    id: str = Field(..., description="Trade identifier")
    user_id: str = Field(..., description="Owner of the trade")
    symbol: str = Field(..., min_length=1, description="Instrument symbol")
    exchange: str = Field(..., min_length=1, description="Exchange the instrument trades on")
    segment: Segment = Field(Segment.EQUITY, description="Market segment")
    trade_type: TradeType = Field(TradeType.INTRADAY, description="Holding style")
    position: PositionSide = Field(PositionSide.LONG, description="Position direction")
    status: TradeStatus = Field(TradeStatus.CLOSED, description="Lifecycle state")

    entry_price: Decimal = Field(..., description="Entry price per unit")
    exit_price: Optional[Decimal] = Field(None, description="Exit price per unit")
    quantity: Decimal = Field(..., description="Number of units")
    entry_date: datetime = Field(..., description="Entry timestamp")
    exit_date: Optional[datetime] = Field(None, description="Exit timestamp")

    charges: Charges = Field(default_factory=Charges)
    pnl: Optional[TradePnL] = Field(None, description="Precomputed P&L")

    @property
    def is_closed(self) -> bool:
        return self.status == TradeStatus.CLOSED

    @property
    def entry_value(self) -> Decimal:
        return self.entry_price * self.quantity
