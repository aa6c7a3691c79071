"""
Market snapshot and quote value types.
"""

from dataclasses import dataclass
from decimal import Decimal, ROUND_CEILING, ROUND_FLOOR

import numpy as np

from ..utils.decimal_math import ZERO, TWO, to_decimal, add, sub, div, mul
from ..utils.errors import InvalidMarketState, InvalidQuoteGeneration


BPS = Decimal(10_000)


def validate_milliseconds(value, name: str = "time_to_terminal_ms") -> int:
    if isinstance(value, bool) or not isinstance(value, (int, np.integer)):
        raise InvalidMarketState(f"{name} must be an integer, got {type(value).__name__}")
    if value < 0:
        raise InvalidMarketState(f"{name} must be non-negative, got {value}")
    return int(value)


@dataclass(frozen=True)
class MarketSnapshot:
    """Market state at evaluation time"""
    mid_price: Decimal
    time_to_terminal_ms: int

    def __post_init__(self):
        mid_price = to_decimal(self.mid_price, "mid_price")
        if mid_price <= ZERO:
            raise InvalidMarketState(f"mid_price must be positive, got {mid_price}")
        object.__setattr__(self, "mid_price", mid_price)
        object.__setattr__(self, "time_to_terminal_ms", validate_milliseconds(self.time_to_terminal_ms))

    @classmethod
    def from_clock(cls, mid_price, current_time_ms: int, config) -> "MarketSnapshot":
        """Snapshot from time elapsed since session start (saturates at zero)"""
        current_time_ms = validate_milliseconds(current_time_ms, "current_time_ms")
        return cls(
            mid_price=mid_price,
            time_to_terminal_ms=max(config.terminal_time_ms - current_time_ms, 0),
        )


@dataclass(frozen=True)
class Quote:
    """Generated market quote"""
    bid_price: Decimal
    ask_price: Decimal
    reservation_price: Decimal
    spread: Decimal

    @classmethod
    def from_prices(cls, bid_price: Decimal, ask_price: Decimal, reservation_price: Decimal) -> "Quote":
        return cls(
            bid_price=bid_price,
            ask_price=ask_price,
            reservation_price=reservation_price,
            spread=sub(ask_price, bid_price),
        )

    @property
    def mid_price(self) -> Decimal:
        return div(add(self.bid_price, self.ask_price), TWO)

    @property
    def half_spread(self) -> Decimal:
        return div(self.spread, TWO)

    @property
    def spread_bps(self) -> Decimal:
        """Spread relative to the quote midpoint, in basis points"""
        return mul(div(self.spread, self.mid_price), BPS)

    def round_to_tick(self, tick_size) -> "Quote":
        """
        Snap prices onto the tick grid: bid rounds down, ask rounds up, so the
        quote never narrows. Fails if the bid rounds to zero.
        """
        tick_size = to_decimal(tick_size, "tick_size")
        if tick_size <= ZERO:
            raise InvalidMarketState(f"tick_size must be positive, got {tick_size}")

        bid_ticks = div(self.bid_price, tick_size).to_integral_value(rounding=ROUND_FLOOR)
        ask_ticks = div(self.ask_price, tick_size).to_integral_value(rounding=ROUND_CEILING)
        bid = mul(bid_ticks, tick_size)
        ask = mul(ask_ticks, tick_size)

        if bid <= ZERO:
            raise InvalidQuoteGeneration(f"bid price {self.bid_price} rounds to {bid} at tick {tick_size}")

        return Quote.from_prices(bid, ask, self.reservation_price)
