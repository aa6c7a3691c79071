"""
Volatility Estimators
====================

Stateless estimators turning a price window into a single volatility figure:

- Historical: sample standard deviation of close-to-close returns
- EWMA: exponentially weighted variance, seeded from the first squared return
- Parkinson: high/low range estimator

Results are per sampling interval of the caller's series. Nothing is
annualized here; scale at the call site and set ``StrategyConfig.time_unit``
to match. No results are cached, so every call is independent.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import List, Sequence, Tuple, Union

from loguru import logger

from ..utils.config import config
from ..utils.decimal_math import ZERO, ONE, TWO, FOUR, to_decimal, add, sub, mul, div, square, sqrt, ln
from ..utils.errors import InsufficientData, InvalidConfiguration, InvalidMarketState


class ReturnType(Enum):
    """Return definition used by close-to-close estimators"""
    LOG = "log"         # ln(p_t / p_{t-1})
    SIMPLE = "simple"   # p_t / p_{t-1} - 1


class VolatilityMethod(Enum):
    """Volatility estimation method selector"""
    HISTORICAL = "historical"
    EWMA = "ewma"
    PARKINSON = "parkinson"


@dataclass(frozen=True)
class PriceWindow:
    """Price history window supplied by a data collaborator"""
    closes: Tuple[Decimal, ...] = ()
    highs: Tuple[Decimal, ...] = ()
    lows: Tuple[Decimal, ...] = ()

    def __post_init__(self):
        object.__setattr__(self, "closes", _as_decimals(self.closes, "closes"))
        object.__setattr__(self, "highs", _as_decimals(self.highs, "highs"))
        object.__setattr__(self, "lows", _as_decimals(self.lows, "lows"))


def _as_decimals(values: Sequence, name: str) -> Tuple[Decimal, ...]:
    return tuple(to_decimal(value, f"{name}[{i}]") for i, value in enumerate(values))


def _validate_prices(prices: Sequence[Decimal], name: str = "prices") -> None:
    for i, price in enumerate(prices):
        if price <= ZERO:
            raise InvalidMarketState(f"{name}[{i}] must be positive, got {price}")


def compute_returns(prices: Sequence, return_type: ReturnType = ReturnType.LOG) -> List[Decimal]:
    """
    Close-to-close returns of a price series.

    Raises:
        InsufficientData: fewer than 2 prices
        InvalidMarketState: any price not strictly positive
    """
    prices = _as_decimals(prices, "prices")
    if len(prices) < 2:
        raise InsufficientData(f"need at least 2 prices, got {len(prices)}")
    _validate_prices(prices)

    return_type = ReturnType(return_type)
    returns = []
    for previous, current in zip(prices, prices[1:]):
        ratio = div(current, previous)
        if return_type == ReturnType.LOG:
            returns.append(ln(ratio))
        else:
            returns.append(sub(ratio, ONE))
    return returns


def historical_volatility(prices: Sequence, return_type: ReturnType = ReturnType.LOG) -> Decimal:
    """
    Sample standard deviation (n - 1 denominator) of returns over the whole
    series. A single return has no observable dispersion and gives zero.
    """
    returns = compute_returns(prices, return_type)
    n = len(returns)
    if n < 2:
        return ZERO

    mean = div(sum_decimals(returns), Decimal(n))
    sum_sq = sum_decimals(square(sub(r, mean)) for r in returns)
    variance = div(sum_sq, Decimal(n - 1))

    return sqrt(variance)


def ewma_volatility(prices: Sequence,
                    decay=None,
                    return_type: ReturnType = ReturnType.LOG) -> Decimal:
    """
    RiskMetrics-style EWMA volatility.

    var_1 = r_1²
    var_t = λ·var_{t-1} + (1 - λ)·r_t²

    Returns sqrt(var_n). ``decay`` (λ) defaults to ``config.volatility.ewma_decay``.
    """
    decay = validate_decay(config.volatility.ewma_decay if decay is None else decay)
    returns = compute_returns(prices, return_type)

    weight = sub(ONE, decay)
    variance = square(returns[0])
    for r in returns[1:]:
        variance = add(mul(decay, variance), mul(weight, square(r)))

    return sqrt(variance)


def parkinson_volatility(highs: Sequence, lows: Sequence) -> Decimal:
    """
    Parkinson (1980) range-based volatility.

    σ² = (1 / (4·n·ln 2))·Σ ln(high_i / low_i)²

    Raises:
        InsufficientData: empty series
        InvalidMarketState: length mismatch, non-positive low, or high below low
    """
    highs = _as_decimals(highs, "highs")
    lows = _as_decimals(lows, "lows")

    if len(highs) != len(lows):
        raise InvalidMarketState(f"highs and lows differ in length: {len(highs)} != {len(lows)}")
    if not highs:
        raise InsufficientData("need at least 1 high/low pair")

    for i, (high, low) in enumerate(zip(highs, lows)):
        if low <= ZERO:
            raise InvalidMarketState(f"lows[{i}] must be positive, got {low}")
        if high < low:
            raise InvalidMarketState(f"highs[{i}] {high} below lows[{i}] {low}")

    sum_sq = sum_decimals(square(ln(div(high, low))) for high, low in zip(highs, lows))
    denominator = mul(mul(FOUR, Decimal(len(highs))), ln(TWO))

    return sqrt(div(sum_sq, denominator))


def validate_decay(decay) -> Decimal:
    try:
        decay = to_decimal(decay, "decay")
    except (TypeError, ValueError) as e:
        raise InvalidConfiguration(str(e), field="decay") from e
    if not ZERO < decay < ONE:
        raise InvalidConfiguration(f"EWMA decay must be in (0, 1), got {decay}", field="decay")
    return decay


def sum_decimals(values) -> Decimal:
    total = ZERO
    for value in values:
        total = add(total, value)
    return total


class VolatilityEstimator(ABC):
    """Estimates volatility from a price window"""

    method: VolatilityMethod

    @abstractmethod
    def estimate(self, window: PriceWindow) -> Decimal:
        ...


class HistoricalVolatility(VolatilityEstimator):
    """Sample standard deviation of close-to-close returns"""

    method = VolatilityMethod.HISTORICAL

    def __init__(self, return_type: ReturnType = ReturnType.LOG):
        self.return_type = ReturnType(return_type)

    def estimate(self, window: PriceWindow) -> Decimal:
        return historical_volatility(window.closes, self.return_type)


class EWMAVolatility(VolatilityEstimator):
    """Exponentially weighted volatility of close-to-close returns"""

    method = VolatilityMethod.EWMA

    def __init__(self, decay=None, return_type: ReturnType = ReturnType.LOG):
        self.decay = validate_decay(config.volatility.ewma_decay if decay is None else decay)
        self.return_type = ReturnType(return_type)

    def estimate(self, window: PriceWindow) -> Decimal:
        return ewma_volatility(window.closes, self.decay, self.return_type)


class ParkinsonVolatility(VolatilityEstimator):
    """High/low range volatility"""

    method = VolatilityMethod.PARKINSON

    def estimate(self, window: PriceWindow) -> Decimal:
        return parkinson_volatility(window.highs, window.lows)


def create_estimator(method: Union[VolatilityMethod, str], **options) -> VolatilityEstimator:
    """Instantiate the estimator for a method selector"""
    try:
        method = VolatilityMethod(method)
    except ValueError:
        raise InvalidConfiguration(f"unknown volatility method: {method!r}", field="method") from None

    if method == VolatilityMethod.HISTORICAL:
        return HistoricalVolatility(**options)
    if method == VolatilityMethod.EWMA:
        return EWMAVolatility(**options)
    return ParkinsonVolatility(**options)


def estimate_volatility(method: Union[VolatilityMethod, str],
                        prices: Sequence = (),
                        highs: Sequence = (),
                        lows: Sequence = (),
                        **options) -> Decimal:
    """
    Volatility entry point with a method selector.

    Args:
        method: VolatilityMethod or its string value
        prices: close series (historical, EWMA)
        highs: high series (Parkinson)
        lows: low series (Parkinson)
        **options: estimator options (return_type, decay)
    """
    estimator = create_estimator(method, **options)
    volatility = estimator.estimate(PriceWindow(closes=prices, highs=highs, lows=lows))

    logger.debug(f"{estimator.method.value} volatility={volatility} "
                 f"(n_closes={len(prices)}, n_ranges={len(highs)})")

    return volatility
