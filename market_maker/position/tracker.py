"""
Position & PnL Tracker
=====================

Session inventory and profit/loss bookkeeping driven by fills.

Average entry price rules:
- Fills that add to exposure re-weight the average entry by size
- Fills that reduce exposure realize closed_qty·(fill - avg) for longs and
  closed_qty·(avg - fill) for shorts; the remaining basis is unchanged
- Excess quantity that flips the sign opens a new basis at the fill price
- A flat position carries an average entry price of zero

One writer per session is assumed. Callers sharing a tracker across threads
must serialize access themselves.
"""

from decimal import Decimal
from typing import Dict, Any

from loguru import logger

from .inventory import InventoryPosition, PnL, FillResult
from ..strategy.types import validate_milliseconds
from ..utils.decimal_math import ZERO, to_decimal, add, sub, mul, div
from ..utils.errors import InvalidMarketState


def _new_stats() -> Dict[str, Any]:
    return {
        'fills_applied': 0,
        'position_flips': 0,
        'marks': 0,
        'total_volume': ZERO,
        'notional_traded': ZERO
    }


class PositionTracker:
    """
    Inventory and PnL state for one trading session.

    Features:
    - Weighted-average entry price bookkeeping
    - Realized PnL on closing fills, including sign flips
    - Mark-to-market unrealized PnL (replaced, never accumulated)
    - All-or-nothing fill application
    """

    def __init__(self):
        self._position = InventoryPosition()
        self._pnl = PnL()
        self.stats = _new_stats()

    @property
    def position(self) -> InventoryPosition:
        return self._position

    @property
    def pnl(self) -> PnL:
        return self._pnl

    @property
    def quantity(self) -> Decimal:
        """Current inventory, the engine's ``inventory`` input"""
        return self._position.quantity

    def apply_fill(self, quantity_delta, fill_price, timestamp: int) -> FillResult:
        """
        Apply a fill to the position.

        Args:
            quantity_delta: Signed fill size (+ buy, - sell), non-zero
            fill_price: Execution price, strictly positive
            timestamp: Fill time in milliseconds

        Returns:
            FillResult with the realized PnL of this fill and the new position

        Raises:
            InvalidMarketState: zero size, non-positive price, bad timestamp.
                Position and PnL are left untouched.
        """
        delta = to_decimal(quantity_delta, "quantity_delta")
        price = to_decimal(fill_price, "fill_price")
        timestamp = validate_milliseconds(timestamp, "timestamp")

        if delta == ZERO:
            raise InvalidMarketState("quantity_delta must be non-zero")
        if price <= ZERO:
            raise InvalidMarketState(f"fill_price must be positive, got {price}")

        quantity = self._position.quantity
        avg_entry = self._position.avg_entry_price
        new_quantity = add(quantity, delta)

        realized = ZERO
        closed = ZERO
        opened = ZERO

        if quantity == ZERO or (quantity > ZERO) == (delta > ZERO):
            # Adding to exposure in the current direction
            cost = add(mul(quantity.copy_abs(), avg_entry), mul(delta.copy_abs(), price))
            new_avg = div(cost, new_quantity.copy_abs())
            opened = delta.copy_abs()
        else:
            closed = min(delta.copy_abs(), quantity.copy_abs())
            per_unit = sub(price, avg_entry) if quantity > ZERO else sub(avg_entry, price)
            realized = mul(closed, per_unit)

            if new_quantity == ZERO:
                new_avg = ZERO
            elif (new_quantity > ZERO) == (quantity > ZERO):
                new_avg = avg_entry
            else:
                new_avg = price
                opened = new_quantity.copy_abs()

        new_position = InventoryPosition(
            quantity=new_quantity,
            avg_entry_price=new_avg,
            last_fill_timestamp=timestamp,
        )
        new_pnl = self._pnl.add_realized(realized) if closed > ZERO else self._pnl
        notional = add(self.stats['notional_traded'], mul(delta.copy_abs(), price))
        volume = add(self.stats['total_volume'], delta.copy_abs())

        # Commit
        self._position, self._pnl = new_position, new_pnl

        result = FillResult(
            quantity_delta=delta,
            fill_price=price,
            timestamp=timestamp,
            realized_pnl=realized,
            closed_quantity=closed,
            opened_quantity=opened,
            position=new_position,
        )

        self.stats['fills_applied'] += 1
        self.stats['total_volume'] = volume
        self.stats['notional_traded'] = notional
        if result.flipped:
            self.stats['position_flips'] += 1
            logger.debug(f"Position flipped: {quantity} -> {new_quantity} @ {price}")

        logger.debug(f"Fill applied: {delta} @ {price}, position={new_quantity} "
                     f"avg={new_avg}, realized={realized}")

        return result

    def mark_to_market(self, current_price) -> Decimal:
        """
        Recompute unrealized PnL against a reference price.

        unrealized = quantity·(current_price - avg_entry_price)

        The stored value is replaced, not accumulated.
        """
        price = to_decimal(current_price, "current_price")
        if price <= ZERO:
            raise InvalidMarketState(f"current_price must be positive, got {price}")

        if self._position.is_flat:
            unrealized = ZERO
        else:
            unrealized = mul(self._position.quantity, sub(price, self._position.avg_entry_price))

        self._pnl = self._pnl.set_unrealized(unrealized)
        self.stats['marks'] += 1

        return unrealized

    def reset(self) -> None:
        """Return to a flat position with zero PnL"""
        self._position = InventoryPosition()
        self._pnl = PnL()
        self.stats = _new_stats()

        logger.info("Position tracker reset")

    def get_statistics(self) -> Dict[str, Any]:
        """Get tracker statistics with current position and PnL"""
        return {
            **self.stats,
            'position': {
                'quantity': self._position.quantity,
                'avg_entry_price': self._position.avg_entry_price,
                'last_fill_timestamp': self._position.last_fill_timestamp
            },
            'pnl': {
                'realized': self._pnl.realized,
                'unrealized': self._pnl.unrealized,
                'total': self._pnl.total
            }
        }
