"""
Avellaneda-Stoikov Market Making Engine
======================================

Pure implementation of the Avellaneda-Stoikov optimal market making formulas
over fixed-point decimals.

    r  = s - q·γ·σ²·τ
    δ* = γ·σ²·τ + (2/γ)·ln(1 + γ/k)
    bid, ask = r ∓ δ*/2

s is the mid price, q the signed inventory, γ risk aversion, k order
intensity, σ volatility and τ the time to terminal expressed in the unit of σ
(``StrategyConfig.time_unit``). Nothing in this module holds state, so every
function is safe to call concurrently.
"""

from decimal import Decimal
from typing import Optional, Tuple

from loguru import logger

from .config import StrategyConfig
from .types import MarketSnapshot, Quote, validate_milliseconds
from ..utils.decimal_math import ZERO, ONE, TWO, to_decimal, add, sub, mul, div, square, ln
from ..utils.errors import InvalidMarketState, InvalidQuoteGeneration


def validate_mid_price(mid_price) -> Decimal:
    mid_price = to_decimal(mid_price, "mid_price")
    if mid_price <= ZERO:
        raise InvalidMarketState(f"mid_price must be positive, got {mid_price}")
    return mid_price


def validate_volatility(volatility) -> Decimal:
    volatility = to_decimal(volatility, "volatility")
    if volatility < ZERO:
        raise InvalidMarketState(f"volatility must be non-negative, got {volatility}")
    return volatility


def resolve_order_intensity(config: StrategyConfig, order_intensity=None) -> Decimal:
    if order_intensity is None:
        return config.order_intensity
    order_intensity = to_decimal(order_intensity, "order_intensity")
    if order_intensity <= ZERO:
        raise InvalidMarketState(f"order_intensity must be positive, got {order_intensity}")
    return order_intensity


def inventory_risk_term(risk_aversion: Decimal, volatility: Decimal, time_fraction: Decimal) -> Decimal:
    """γ·σ²·τ"""
    return mul(mul(risk_aversion, square(volatility)), time_fraction)


def adverse_selection_term(risk_aversion: Decimal, order_intensity: Decimal) -> Decimal:
    """(2/γ)·ln(1 + γ/k)"""
    return mul(div(TWO, risk_aversion), ln(add(ONE, div(risk_aversion, order_intensity))))


def calculate_reservation_price(mid_price,
                                inventory,
                                config: StrategyConfig,
                                volatility,
                                time_to_terminal_ms: int) -> Decimal:
    """
    Inventory-adjusted indifference price.

    r = s - q·γ·σ²·τ

    Long inventory pulls the reservation price below mid, short inventory
    pushes it above. A flat position returns ``mid_price`` unchanged.
    """
    mid_price = validate_mid_price(mid_price)
    volatility = validate_volatility(volatility)
    time_to_terminal_ms = validate_milliseconds(time_to_terminal_ms)
    inventory = to_decimal(inventory, "inventory")

    if inventory == ZERO:
        return mid_price

    time_fraction = config.remaining_time_fraction(time_to_terminal_ms)
    adjustment = mul(inventory, inventory_risk_term(config.risk_aversion, volatility, time_fraction))

    return sub(mid_price, adjustment)


def calculate_optimal_spread(config: StrategyConfig,
                             volatility,
                             time_to_terminal_ms: int,
                             order_intensity=None) -> Decimal:
    """
    Full optimal bid/ask spread.

    δ* = γ·σ²·τ + (2/γ)·ln(1 + γ/k)

    First term: inventory risk premium
    Second term: adverse selection protection

    If δ* falls below ``config.min_spread`` the minimum is returned instead.
    ``order_intensity`` overrides ``config.order_intensity`` for this call.
    """
    volatility = validate_volatility(volatility)
    time_to_terminal_ms = validate_milliseconds(time_to_terminal_ms)
    order_intensity = resolve_order_intensity(config, order_intensity)

    time_fraction = config.remaining_time_fraction(time_to_terminal_ms)
    risk_premium = inventory_risk_term(config.risk_aversion, volatility, time_fraction)
    adverse_selection = adverse_selection_term(config.risk_aversion, order_intensity)

    spread = add(risk_premium, adverse_selection)

    if spread < config.min_spread:
        logger.debug(f"Spread {spread} floored at min_spread {config.min_spread}")
        return config.min_spread

    return spread


def build_quote(reservation_price: Decimal, spread: Decimal) -> Quote:
    """Center a spread on the reservation price and validate the result"""
    half_spread = div(spread, TWO)
    bid_price = sub(reservation_price, half_spread)
    ask_price = add(reservation_price, half_spread)

    if bid_price >= ask_price:
        raise InvalidQuoteGeneration(f"bid price {bid_price} must be less than ask price {ask_price}")

    if bid_price <= ZERO:
        raise InvalidQuoteGeneration(f"bid price must be positive, got {bid_price}")

    return Quote(
        bid_price=bid_price,
        ask_price=ask_price,
        reservation_price=reservation_price,
        spread=sub(ask_price, bid_price),
    )


def generate_quote(snapshot: MarketSnapshot,
                   inventory,
                   config: StrategyConfig,
                   volatility,
                   order_intensity=None) -> Quote:
    """
    Generate a validated quote for a market snapshot.

    Raises:
        InvalidMarketState: bad mid price, volatility or time input
        InvalidQuoteGeneration: bid not positive or not below ask
    """
    reservation_price = calculate_reservation_price(
        snapshot.mid_price, inventory, config, volatility, snapshot.time_to_terminal_ms
    )
    spread = calculate_optimal_spread(
        config, volatility, snapshot.time_to_terminal_ms, order_intensity
    )

    quote = build_quote(reservation_price, spread)

    logger.debug(f"Quote: bid={quote.bid_price} ask={quote.ask_price} "
                 f"r={reservation_price} spread={quote.spread} q={inventory}")

    return quote


def calculate_optimal_quotes(mid_price,
                             inventory,
                             config: StrategyConfig,
                             volatility,
                             time_to_terminal_ms: int,
                             order_intensity: Optional[Decimal] = None) -> Tuple[Decimal, Decimal]:
    """
    Optimal (bid, ask) around the reservation price.

    bid = r - δ*/2, ask = r + δ*/2
    """
    snapshot = MarketSnapshot(mid_price=validate_mid_price(mid_price),
                              time_to_terminal_ms=time_to_terminal_ms)
    quote = generate_quote(snapshot, inventory, config, volatility, order_intensity)
    return quote.bid_price, quote.ask_price
