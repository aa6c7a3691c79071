"""
Sync/Async Strategy Interface
============================

One quoting interface over the pure formulas plus two thin call conventions:

- QuoteStrategy: direct calls on the caller's thread
- AsyncQuoteStrategy: coroutines that suspend only while fetching a missing
  volatility figure, then run the identical synchronous computation

Both adapters delegate every number to the same QuoteModel, so identical
inputs give bit-identical results whichever convention is used.
"""

from abc import ABC, abstractmethod
from decimal import Decimal
from typing import Awaitable, Callable, Optional, Tuple

from .avellaneda_stoikov import (
    build_quote,
    calculate_optimal_spread,
    calculate_reservation_price,
    validate_mid_price,
)
from .config import StrategyConfig
from .types import MarketSnapshot, Quote
from ..utils.errors import InvalidMarketState
from ..utils.logger import get_logger


VolatilityProvider = Callable[[], Decimal]
VolatilitySource = Callable[[], Awaitable[Decimal]]


class QuoteModel(ABC):
    """Pure quoting operations for one pricing model"""

    def __init__(self, config: StrategyConfig):
        self.config = config

    @abstractmethod
    def reservation_price(self, mid_price, inventory, volatility, time_to_terminal_ms: int) -> Decimal:
        ...

    @abstractmethod
    def optimal_spread(self, volatility, time_to_terminal_ms: int, order_intensity=None) -> Decimal:
        ...

    def quote(self, snapshot: MarketSnapshot, inventory, volatility, order_intensity=None) -> Quote:
        reservation_price = self.reservation_price(
            snapshot.mid_price, inventory, volatility, snapshot.time_to_terminal_ms
        )
        spread = self.optimal_spread(volatility, snapshot.time_to_terminal_ms, order_intensity)
        return build_quote(reservation_price, spread)

    def optimal_quotes(self, mid_price, inventory, volatility, time_to_terminal_ms: int,
                       order_intensity=None) -> Tuple[Decimal, Decimal]:
        snapshot = MarketSnapshot(mid_price=validate_mid_price(mid_price),
                                  time_to_terminal_ms=time_to_terminal_ms)
        quote = self.quote(snapshot, inventory, volatility, order_intensity)
        return quote.bid_price, quote.ask_price


class AvellanedaStoikovModel(QuoteModel):
    """Classic Avellaneda-Stoikov quoting"""

    def reservation_price(self, mid_price, inventory, volatility, time_to_terminal_ms: int) -> Decimal:
        return calculate_reservation_price(mid_price, inventory, self.config, volatility, time_to_terminal_ms)

    def optimal_spread(self, volatility, time_to_terminal_ms: int, order_intensity=None) -> Decimal:
        return calculate_optimal_spread(self.config, volatility, time_to_terminal_ms, order_intensity)


class QuoteStrategy:
    """
    Direct-call adapter.

    ``volatility`` may be omitted on any call when a synchronous
    ``volatility_provider`` was supplied; it is invoked once per call.
    """

    def __init__(self, model: QuoteModel, volatility_provider: Optional[VolatilityProvider] = None):
        self.model = model
        self.volatility_provider = volatility_provider
        self.logger = get_logger('quote_strategy')

    @property
    def config(self) -> StrategyConfig:
        return self.model.config

    def _resolve_volatility(self, volatility):
        if volatility is not None:
            return volatility
        if self.volatility_provider is None:
            raise InvalidMarketState("volatility not given and no volatility provider configured")
        volatility = self.volatility_provider()
        self.logger.debug(f"Volatility from provider: {volatility}")
        return volatility

    def reservation_price(self, mid_price, inventory, time_to_terminal_ms: int, volatility=None) -> Decimal:
        volatility = self._resolve_volatility(volatility)
        return self.model.reservation_price(mid_price, inventory, volatility, time_to_terminal_ms)

    def optimal_spread(self, time_to_terminal_ms: int, volatility=None, order_intensity=None) -> Decimal:
        volatility = self._resolve_volatility(volatility)
        return self.model.optimal_spread(volatility, time_to_terminal_ms, order_intensity)

    def optimal_quotes(self, mid_price, inventory, time_to_terminal_ms: int, volatility=None,
                       order_intensity=None) -> Tuple[Decimal, Decimal]:
        volatility = self._resolve_volatility(volatility)
        return self.model.optimal_quotes(mid_price, inventory, volatility, time_to_terminal_ms, order_intensity)

    def quote(self, snapshot: MarketSnapshot, inventory, volatility=None, order_intensity=None) -> Quote:
        volatility = self._resolve_volatility(volatility)
        return self.model.quote(snapshot, inventory, volatility, order_intensity)


class AsyncQuoteStrategy:
    """
    Task/future-based adapter.

    The only await point is ``volatility_source`` when volatility is not
    passed in. The quoting itself runs synchronously after that, so it
    cannot be interrupted half way and needs no cancellation handling.
    """

    def __init__(self, model: QuoteModel, volatility_source: Optional[VolatilitySource] = None):
        self.model = model
        self.volatility_source = volatility_source
        self.logger = get_logger('async_quote_strategy')

    @property
    def config(self) -> StrategyConfig:
        return self.model.config

    async def _resolve_volatility(self, volatility):
        if volatility is not None:
            return volatility
        if self.volatility_source is None:
            raise InvalidMarketState("volatility not given and no volatility source configured")
        volatility = await self.volatility_source()
        self.logger.debug(f"Volatility from source: {volatility}")
        return volatility

    async def reservation_price(self, mid_price, inventory, time_to_terminal_ms: int,
                                volatility=None) -> Decimal:
        volatility = await self._resolve_volatility(volatility)
        return self.model.reservation_price(mid_price, inventory, volatility, time_to_terminal_ms)

    async def optimal_spread(self, time_to_terminal_ms: int, volatility=None,
                             order_intensity=None) -> Decimal:
        volatility = await self._resolve_volatility(volatility)
        return self.model.optimal_spread(volatility, time_to_terminal_ms, order_intensity)

    async def optimal_quotes(self, mid_price, inventory, time_to_terminal_ms: int, volatility=None,
                             order_intensity=None) -> Tuple[Decimal, Decimal]:
        volatility = await self._resolve_volatility(volatility)
        return self.model.optimal_quotes(mid_price, inventory, volatility, time_to_terminal_ms, order_intensity)

    async def quote(self, snapshot: MarketSnapshot, inventory, volatility=None,
                    order_intensity=None) -> Quote:
        volatility = await self._resolve_volatility(volatility)
        return self.model.quote(snapshot, inventory, volatility, order_intensity)


class AvellanedaStoikovStrategy(QuoteStrategy):
    """Direct-call Avellaneda-Stoikov strategy"""

    def __init__(self, config: StrategyConfig, volatility_provider: Optional[VolatilityProvider] = None):
        super().__init__(AvellanedaStoikovModel(config), volatility_provider)


class AsyncAvellanedaStoikovStrategy(AsyncQuoteStrategy):
    """Coroutine-based Avellaneda-Stoikov strategy"""

    def __init__(self, config: StrategyConfig, volatility_source: Optional[VolatilitySource] = None):
        super().__init__(AvellanedaStoikovModel(config), volatility_source)


def volatility_from_history(fetch_window: Callable[[], Awaitable], estimator) -> VolatilitySource:
    """
    Build a volatility source that awaits a price window from a data
    collaborator and runs ``estimator.estimate`` on it.
    """
    async def source() -> Decimal:
        window = await fetch_window()
        return estimator.estimate(window)

    return source
