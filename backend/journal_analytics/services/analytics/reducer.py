"""
Single-pass aggregation of closed trades.

Features:
- Win/loss/break-even classification by net P&L
- Totals for P&L, charges, volume and capital
- Profit factor with a fixed sentinel for loss-free sets
- Category splits (segment, trade type, position) through a lookup table
"""

from collections import defaultdict
from decimal import Decimal
from operator import attrgetter
from typing import Callable, Dict, Sequence, Tuple

from journal_analytics.core.config import analytics_constants
from journal_analytics.core.errors.decorators import error_handler
from journal_analytics.core.logging.logger import get_logger
from journal_analytics.models.analytics import AggregateResult
from journal_analytics.models.trade import Trade
from journal_analytics.services.analytics.pnl import (
    HUNDRED,
    ZERO,
    calculate_trade_pnl,
    round_money,
)

logger = get_logger(__name__)

# Category split name -> key extractor. Adding a breakdown is a new entry here.
CATEGORY_SPLITS: Tuple[Tuple[str, Callable[[Trade], str]], ...] = (
    ("segment", attrgetter("segment.value")),
    ("trade_type", attrgetter("trade_type.value")),
    ("position", attrgetter("position.value")),
)


class AggregateReducer:
    """
    Reduces a trade set into an ``AggregateResult``.

    The reducer is stateless; every call recomputes from scratch and the
    same input always yields the same result.
    """

    @error_handler(
        context_extractor=lambda self, trades: {"trade_count": len(trades)},
        log_message="Trade aggregation failed"
    )
    def reduce(self, trades: Sequence[Trade]) -> AggregateResult:
        """
        Aggregate closed trades in one pass.

        Args:
            trades: Candidate trades; anything not closed is skipped.

        Returns:
            The aggregate with monetary fields rounded to cents.

        Raises:
            ValidationError: If a closed trade is malformed.
        """
        total_trades = winning = losing = break_even = 0
        gross_pnl = net_pnl = total_charges = total_volume = ZERO
        total_wins = total_losses = largest_win = largest_loss = ZERO

        category_pnl: Dict[str, Dict[str, Decimal]] = {
            name: defaultdict(lambda: ZERO) for name, _ in CATEGORY_SPLITS
        }
        category_trades: Dict[str, Dict[str, int]] = {
            name: defaultdict(int) for name, _ in CATEGORY_SPLITS
        }

        for trade in trades:
            if not trade.is_closed:
                continue

            trade_pnl = calculate_trade_pnl(trade)
            net = trade_pnl.net

            total_trades += 1
            gross_pnl += trade_pnl.gross
            net_pnl += net
            total_charges += trade_pnl.charges
            total_volume += trade.entry_value

            if net > 0:
                winning += 1
                total_wins += net
                largest_win = max(largest_win, net)
            elif net < 0:
                losing += 1
                total_losses += abs(net)
                largest_loss = min(largest_loss, net)
            else:
                break_even += 1

            for name, key_of in CATEGORY_SPLITS:
                key = key_of(trade)
                category_pnl[name][key] += net
                category_trades[name][key] += 1

        win_rate = Decimal(winning) / Decimal(total_trades) * HUNDRED if total_trades else ZERO
        if total_losses > 0:
            profit_factor = total_wins / total_losses
        elif total_wins > 0:
            profit_factor = analytics_constants.PROFIT_FACTOR_SENTINEL
        else:
            profit_factor = ZERO

        result = AggregateResult(
            total_trades=total_trades,
            winning_trades=winning,
            losing_trades=losing,
            break_even_trades=break_even,
            gross_pnl=round_money(gross_pnl),
            net_pnl=round_money(net_pnl),
            total_charges=round_money(total_charges),
            total_volume=round_money(total_volume),
            capital_used=round_money(total_volume),
            win_rate=round_money(win_rate),
            profit_factor=round_money(profit_factor),
            average_win=round_money(total_wins / winning) if winning else ZERO,
            average_loss=round_money(total_losses / losing) if losing else ZERO,
            largest_win=round_money(largest_win),
            largest_loss=round_money(largest_loss),
            segment_pnl={k: round_money(v) for k, v in category_pnl["segment"].items()},
            trade_type_pnl={k: round_money(v) for k, v in category_pnl["trade_type"].items()},
            position_pnl={k: round_money(v) for k, v in category_pnl["position"].items()},
            segment_trades=dict(category_trades["segment"]),
            trade_type_trades=dict(category_trades["trade_type"]),
            position_trades=dict(category_trades["position"]),
        )

        logger.debug(
            "Aggregated trades",
            extra={
                "total_trades": total_trades,
                "winning_trades": winning,
                "losing_trades": losing,
                "net_pnl": str(result.net_pnl),
            },
        )
        return result
