"""
Tests for the direct-call and coroutine strategy adapters
"""

import asyncio
from decimal import Decimal

import pytest

from market_maker.analytics.volatility import EWMAVolatility, PriceWindow
from market_maker.strategy.avellaneda_stoikov import calculate_optimal_quotes
from market_maker.strategy.config import StrategyConfig, TimeUnit
from market_maker.strategy.interface import (
    AsyncAvellanedaStoikovStrategy,
    AvellanedaStoikovModel,
    AvellanedaStoikovStrategy,
    QuoteModel,
    volatility_from_history,
)
from market_maker.strategy.types import MarketSnapshot
from market_maker.utils.errors import InvalidMarketState

MID = Decimal("100")
SIGMA = Decimal("0.2")
HOUR_MS = 3_600_000

CLOSES = [Decimal("100"), Decimal("101"), Decimal("99.5"), Decimal("100.5")]


@pytest.fixture
def config() -> StrategyConfig:
    return StrategyConfig(
        risk_aversion=Decimal("0.1"),
        order_intensity=Decimal("1.5"),
        terminal_time_ms=HOUR_MS,
        min_spread=Decimal("0.0001"),
        time_unit=TimeUnit.SECOND,
    )


class TestQuoteModel:
    """Pure model shared by both adapters"""

    def test_model_is_abstract(self, config) -> None:
        with pytest.raises(TypeError):
            QuoteModel(config)

    def test_model_matches_engine(self, config) -> None:
        model = AvellanedaStoikovModel(config)
        assert model.optimal_quotes(MID, Decimal("2"), SIGMA, 60_000) == \
            calculate_optimal_quotes(MID, Decimal("2"), config, SIGMA, 60_000)


class TestSyncStrategy:
    """Direct-call adapter"""

    def test_explicit_volatility(self, config) -> None:
        strategy = AvellanedaStoikovStrategy(config)
        bid, ask = strategy.optimal_quotes(MID, Decimal("1"), 60_000, volatility=SIGMA)
        assert bid < ask

    def test_provider_used_when_volatility_missing(self, config) -> None:
        calls = []

        def provider():
            calls.append(1)
            return SIGMA

        strategy = AvellanedaStoikovStrategy(config, volatility_provider=provider)

        assert strategy.optimal_spread(60_000) == strategy.optimal_spread(60_000, volatility=SIGMA)
        assert len(calls) == 1

    def test_missing_volatility_and_provider(self, config) -> None:
        strategy = AvellanedaStoikovStrategy(config)
        with pytest.raises(InvalidMarketState):
            strategy.reservation_price(MID, Decimal("1"), 60_000)

    def test_quote_from_snapshot(self, config) -> None:
        strategy = AvellanedaStoikovStrategy(config)
        snapshot = MarketSnapshot.from_clock(MID, 3_540_000, config)
        quote = strategy.quote(snapshot, Decimal("0"), volatility=SIGMA)

        assert quote.reservation_price == MID
        assert quote.bid_price < MID < quote.ask_price


class TestAsyncStrategy:
    """Coroutine adapter"""

    @pytest.mark.asyncio
    async def test_identical_to_sync(self, config) -> None:
        sync_strategy = AvellanedaStoikovStrategy(config)
        async_strategy = AsyncAvellanedaStoikovStrategy(config)

        for inventory in (Decimal("-3"), Decimal("0"), Decimal("2.5")):
            expected = sync_strategy.optimal_quotes(MID, inventory, 120_000, volatility=SIGMA)
            result = await async_strategy.optimal_quotes(MID, inventory, 120_000, volatility=SIGMA)
            assert result == expected

        assert await async_strategy.reservation_price(MID, Decimal("1"), 120_000, volatility=SIGMA) == \
            sync_strategy.reservation_price(MID, Decimal("1"), 120_000, volatility=SIGMA)
        assert await async_strategy.optimal_spread(120_000, volatility=SIGMA) == \
            sync_strategy.optimal_spread(120_000, volatility=SIGMA)

    @pytest.mark.asyncio
    async def test_awaits_volatility_source(self, config) -> None:
        async def source():
            await asyncio.sleep(0)
            return SIGMA

        strategy = AsyncAvellanedaStoikovStrategy(config, volatility_source=source)
        snapshot = MarketSnapshot(mid_price=MID, time_to_terminal_ms=60_000)

        quote = await strategy.quote(snapshot, Decimal("1"))

        assert quote == AvellanedaStoikovStrategy(config).quote(snapshot, Decimal("1"), volatility=SIGMA)

    @pytest.mark.asyncio
    async def test_missing_volatility_source(self, config) -> None:
        strategy = AsyncAvellanedaStoikovStrategy(config)
        with pytest.raises(InvalidMarketState):
            await strategy.optimal_spread(60_000)

    @pytest.mark.asyncio
    async def test_concurrent_calls(self, config) -> None:
        strategy = AsyncAvellanedaStoikovStrategy(config)
        inventories = [Decimal(q) for q in range(-5, 6)]

        results = await asyncio.gather(*(
            strategy.optimal_quotes(MID, q, 60_000, volatility=SIGMA) for q in inventories
        ))

        expected = [calculate_optimal_quotes(MID, q, config, SIGMA, 60_000) for q in inventories]
        assert list(results) == expected

    @pytest.mark.asyncio
    async def test_volatility_from_history(self, config) -> None:
        async def fetch_window():
            return PriceWindow(closes=CLOSES)

        estimator = EWMAVolatility(decay=Decimal("0.94"))
        strategy = AsyncAvellanedaStoikovStrategy(
            config, volatility_source=volatility_from_history(fetch_window, estimator)
        )

        spread = await strategy.optimal_spread(60_000)

        expected_sigma = estimator.estimate(PriceWindow(closes=CLOSES))
        assert spread == AvellanedaStoikovStrategy(config).optimal_spread(60_000, volatility=expected_sigma)
