"""
Inventory and PnL value types.

Both are frozen: the tracker replaces them as a pair on every fill, so no
caller can observe a quantity that disagrees with its average entry price.
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

from ..utils.decimal_math import ZERO, add, to_decimal


@dataclass(frozen=True)
class InventoryPosition:
    """Signed inventory (+ long, - short) and its average entry price"""
    quantity: Decimal = ZERO
    avg_entry_price: Decimal = ZERO
    last_fill_timestamp: Optional[int] = None

    @property
    def is_flat(self) -> bool:
        return self.quantity == ZERO

    @property
    def is_long(self) -> bool:
        return self.quantity > ZERO

    @property
    def is_short(self) -> bool:
        return self.quantity < ZERO


@dataclass(frozen=True)
class PnL:
    """Realized and unrealized profit/loss"""
    realized: Decimal = ZERO
    unrealized: Decimal = ZERO

    @property
    def total(self) -> Decimal:
        return add(self.realized, self.unrealized)

    def add_realized(self, amount) -> "PnL":
        """Accumulate a realized amount from a closing trade"""
        return PnL(realized=add(self.realized, to_decimal(amount, "amount")), unrealized=self.unrealized)

    def set_unrealized(self, amount) -> "PnL":
        """Replace (never accumulate) the mark-to-market value"""
        return PnL(realized=self.realized, unrealized=to_decimal(amount, "amount"))


@dataclass(frozen=True)
class FillResult:
    """Outcome of applying one fill"""
    quantity_delta: Decimal
    fill_price: Decimal
    timestamp: int
    realized_pnl: Decimal
    closed_quantity: Decimal
    opened_quantity: Decimal
    position: InventoryPosition

    @property
    def flipped(self) -> bool:
        """Fill closed the old position and opened one on the other side"""
        return self.closed_quantity > ZERO and self.opened_quantity > ZERO
