"""
GLFT Terminal Inventory Penalty
==============================

Guéant-Lehalle-Fernandez-Tapia extension of the Avellaneda-Stoikov model for
strategies that must flatten inventory by the end of the session.

    r   = s - q·γ_t·σ²·τ - q·φ·f(τ)
    δ*  = γ_t·σ²·τ + (2/γ_t)·ln(1 + γ_t/k)
    γ_t = γ_0·(1 + α·(1 - τ/T))        (dynamic risk aversion, optional)

φ is the terminal inventory penalty and f(τ) a penalty function that grows
as the terminal time approaches. Public functions take ``current_time_ms``,
the time elapsed since session start; τ = max(T - t, 0).

Reference: Guéant, O., Lehalle, C. A., & Fernandez-Tapia, J. (2012).
"Dealing with the inventory risk: a solution to the market making problem."
"""

from decimal import Decimal
from enum import Enum
from typing import Tuple

from loguru import logger
from pydantic import Field, field_validator

from .avellaneda_stoikov import (
    adverse_selection_term,
    build_quote,
    inventory_risk_term,
    resolve_order_intensity,
    validate_mid_price,
    validate_volatility,
)
from .config import StrategyConfig
from .interface import QuoteModel, QuoteStrategy, AsyncQuoteStrategy
from .types import MarketSnapshot, validate_milliseconds
from ..utils.decimal_math import ZERO, ONE, to_decimal, add, sub, mul, div, square, exp, neg
from ..utils.errors import InvalidConfiguration


class PenaltyFunction(Enum):
    """Shape of the terminal inventory penalty f(τ)"""
    LINEAR = "linear"               # 1 - τ/T
    EXPONENTIAL = "exponential"     # exp(-τ/T)
    QUADRATIC = "quadratic"         # (1 - τ/T)²


class GLFTConfig(StrategyConfig):
    """Avellaneda-Stoikov parameters plus the GLFT terminal penalty"""

    terminal_penalty: Decimal = Field(default=ZERO, ge=0, description="Terminal inventory penalty (phi)")
    dynamic_gamma: bool = Field(default=False, description="Scale gamma up as terminal approaches")
    gamma_scaling_factor: Decimal = Field(default=ONE, ge=0, description="Dynamic gamma alpha")
    penalty_function: PenaltyFunction = Field(default=PenaltyFunction.LINEAR)

    @field_validator("terminal_penalty", "gamma_scaling_factor", mode="before")
    @classmethod
    def _coerce_glft_decimal(cls, value, info):
        try:
            return to_decimal(value, info.field_name)
        except (TypeError, OverflowError) as e:
            raise ValueError(str(e)) from e

    def with_dynamic_gamma(self, scaling_factor) -> "GLFTConfig":
        return self.with_updates(dynamic_gamma=True, gamma_scaling_factor=scaling_factor)

    def with_penalty_function(self, penalty_function: PenaltyFunction) -> "GLFTConfig":
        return self.with_updates(penalty_function=penalty_function)


def _time_ratio(time_to_terminal_ms: int, total_session_ms: int) -> Decimal:
    """τ/T, capped at 1"""
    return div(Decimal(min(time_to_terminal_ms, total_session_ms)), Decimal(total_session_ms))


def _time_to_terminal(config: GLFTConfig, current_time_ms: int) -> int:
    current_time_ms = validate_milliseconds(current_time_ms, "current_time_ms")
    return max(config.terminal_time_ms - current_time_ms, 0)


def calculate_dynamic_gamma(base_gamma: Decimal,
                            time_to_terminal_ms: int,
                            total_session_ms: int,
                            dynamic_enabled: bool,
                            scaling_factor: Decimal) -> Decimal:
    """
    γ_t = γ_0·(1 + α·(1 - τ/T))

    Equals γ_0 at session start and γ_0·(1 + α) at the terminal time.
    """
    if not dynamic_enabled or total_session_ms == 0:
        return base_gamma

    time_factor = sub(ONE, _time_ratio(time_to_terminal_ms, total_session_ms))
    return mul(base_gamma, add(ONE, mul(scaling_factor, time_factor)))


def calculate_penalty_function(time_to_terminal_ms: int,
                               total_session_ms: int,
                               penalty_type: PenaltyFunction) -> Decimal:
    if total_session_ms == 0:
        return ONE

    time_ratio = _time_ratio(time_to_terminal_ms, total_session_ms)

    if penalty_type == PenaltyFunction.LINEAR:
        return sub(ONE, time_ratio)
    if penalty_type == PenaltyFunction.EXPONENTIAL:
        return exp(neg(time_ratio))
    if penalty_type == PenaltyFunction.QUADRATIC:
        return square(sub(ONE, time_ratio))

    raise InvalidConfiguration(f"unknown penalty function: {penalty_type!r}", field="penalty_function")


def _effective_gamma(config: GLFTConfig, time_to_terminal_ms: int) -> Decimal:
    return calculate_dynamic_gamma(
        config.risk_aversion,
        time_to_terminal_ms,
        config.terminal_time_ms,
        config.dynamic_gamma,
        config.gamma_scaling_factor,
    )


def _reservation_price(mid_price, inventory, config: GLFTConfig, volatility, time_to_terminal_ms: int) -> Decimal:
    mid_price = validate_mid_price(mid_price)
    volatility = validate_volatility(volatility)
    inventory = to_decimal(inventory, "inventory")

    if inventory == ZERO:
        return mid_price

    gamma = _effective_gamma(config, time_to_terminal_ms)
    time_fraction = config.remaining_time_fraction(time_to_terminal_ms)

    as_adjustment = mul(inventory, inventory_risk_term(gamma, volatility, time_fraction))

    penalty = calculate_penalty_function(time_to_terminal_ms, config.terminal_time_ms, config.penalty_function)
    terminal_adjustment = mul(mul(inventory, config.terminal_penalty), penalty)

    return sub(sub(mid_price, as_adjustment), terminal_adjustment)


def _optimal_spread(config: GLFTConfig, volatility, time_to_terminal_ms: int, order_intensity=None) -> Decimal:
    volatility = validate_volatility(volatility)
    order_intensity = resolve_order_intensity(config, order_intensity)

    gamma = _effective_gamma(config, time_to_terminal_ms)
    time_fraction = config.remaining_time_fraction(time_to_terminal_ms)

    spread = add(inventory_risk_term(gamma, volatility, time_fraction),
                 adverse_selection_term(gamma, order_intensity))

    if spread < config.min_spread:
        logger.debug(f"GLFT spread {spread} floored at min_spread {config.min_spread}")
        return config.min_spread

    return spread


def calculate_reservation_price(mid_price,
                                inventory,
                                config: GLFTConfig,
                                volatility,
                                current_time_ms: int) -> Decimal:
    """Reservation price with terminal inventory penalty"""
    return _reservation_price(mid_price, inventory, config, volatility,
                              _time_to_terminal(config, current_time_ms))


def calculate_optimal_spread(config: GLFTConfig, volatility, current_time_ms: int,
                             order_intensity=None) -> Decimal:
    """Optimal spread using the effective (possibly dynamic) gamma"""
    return _optimal_spread(config, volatility, _time_to_terminal(config, current_time_ms), order_intensity)


def calculate_optimal_quotes(mid_price,
                             inventory,
                             config: GLFTConfig,
                             volatility,
                             current_time_ms: int,
                             order_intensity=None) -> Tuple[Decimal, Decimal]:
    time_to_terminal_ms = _time_to_terminal(config, current_time_ms)
    reservation_price = _reservation_price(mid_price, inventory, config, volatility, time_to_terminal_ms)
    spread = _optimal_spread(config, volatility, time_to_terminal_ms, order_intensity)

    quote = build_quote(reservation_price, spread)
    return quote.bid_price, quote.ask_price


def compare_with_avellaneda_stoikov(mid_price,
                                    inventory,
                                    config: GLFTConfig,
                                    volatility,
                                    current_time_ms: int):
    """
    Quotes with and without the GLFT adjustments.

    Returns:
        ((glft_bid, glft_ask), (as_bid, as_ask))
    """
    glft_quotes = calculate_optimal_quotes(mid_price, inventory, config, volatility, current_time_ms)

    as_config = config.with_updates(terminal_penalty=ZERO, dynamic_gamma=False)
    as_quotes = calculate_optimal_quotes(mid_price, inventory, as_config, volatility, current_time_ms)

    return glft_quotes, as_quotes


class GLFTModel(QuoteModel):
    """GLFT quoting behind the common strategy interface"""

    def __init__(self, config: GLFTConfig):
        if not isinstance(config, GLFTConfig):
            raise InvalidConfiguration("GLFTModel requires a GLFTConfig", field="config")
        super().__init__(config)

    def reservation_price(self, mid_price, inventory, volatility, time_to_terminal_ms: int) -> Decimal:
        time_to_terminal_ms = validate_milliseconds(time_to_terminal_ms)
        return _reservation_price(mid_price, inventory, self.config, volatility, time_to_terminal_ms)

    def optimal_spread(self, volatility, time_to_terminal_ms: int, order_intensity=None) -> Decimal:
        time_to_terminal_ms = validate_milliseconds(time_to_terminal_ms)
        return _optimal_spread(self.config, volatility, time_to_terminal_ms, order_intensity)

    def snapshot_at(self, mid_price, current_time_ms: int) -> MarketSnapshot:
        return MarketSnapshot.from_clock(mid_price, current_time_ms, self.config)


class GLFTStrategy(QuoteStrategy):
    """Direct-call GLFT strategy"""

    def __init__(self, config: GLFTConfig, volatility_provider=None):
        super().__init__(GLFTModel(config), volatility_provider)


class AsyncGLFTStrategy(AsyncQuoteStrategy):
    """Coroutine-based GLFT strategy"""

    def __init__(self, config: GLFTConfig, volatility_source=None):
        super().__init__(GLFTModel(config), volatility_source)
