"""
Tests for the GLFT terminal inventory penalty extension
"""

from decimal import Decimal

import pytest

from market_maker.strategy import avellaneda_stoikov
from market_maker.strategy.config import StrategyConfig, TimeUnit
from market_maker.strategy.glft import (
    AsyncGLFTStrategy,
    GLFTConfig,
    GLFTModel,
    GLFTStrategy,
    PenaltyFunction,
    calculate_dynamic_gamma,
    calculate_optimal_quotes,
    calculate_optimal_spread,
    calculate_penalty_function,
    calculate_reservation_price,
    compare_with_avellaneda_stoikov,
)
from market_maker.utils.decimal_math import exp, is_close
from market_maker.utils.errors import InvalidConfiguration, InvalidMarketState

MID = Decimal("100")
SIGMA = Decimal("0.2")
SESSION_MS = 3_600_000


def _glft_config(**overrides) -> GLFTConfig:
    params = {
        "risk_aversion": Decimal("0.1"),
        "order_intensity": Decimal("1.5"),
        "terminal_time_ms": SESSION_MS,
        "min_spread": Decimal("0.0001"),
        "time_unit": TimeUnit.SECOND,
    }
    params.update(overrides)
    return GLFTConfig(**params)


class TestGLFTConfig:
    """Extended configuration"""

    def test_defaults_disable_extension(self) -> None:
        config = _glft_config()
        assert config.terminal_penalty == Decimal("0")
        assert config.dynamic_gamma is False
        assert config.penalty_function == PenaltyFunction.LINEAR

    def test_negative_penalty_rejected(self) -> None:
        with pytest.raises(InvalidConfiguration) as exc_info:
            _glft_config(terminal_penalty=Decimal("-0.1"))
        assert exc_info.value.field == "terminal_penalty"

    def test_builders(self) -> None:
        config = _glft_config().with_dynamic_gamma(Decimal("2")).with_penalty_function(
            PenaltyFunction.QUADRATIC
        )
        assert isinstance(config, GLFTConfig)
        assert config.dynamic_gamma is True
        assert config.gamma_scaling_factor == Decimal("2")
        assert config.penalty_function == PenaltyFunction.QUADRATIC

    def test_base_validation_still_applies(self) -> None:
        with pytest.raises(InvalidConfiguration):
            _glft_config(risk_aversion=Decimal("0"))


class TestPenaltyFunction:
    """f(τ) shapes"""

    @pytest.mark.parametrize("penalty_type,expected", [
        (PenaltyFunction.LINEAR, Decimal("0.5")),
        (PenaltyFunction.QUADRATIC, Decimal("0.25")),
    ])
    def test_half_session(self, penalty_type, expected) -> None:
        assert calculate_penalty_function(SESSION_MS // 2, SESSION_MS, penalty_type) == expected

    def test_exponential_half_session(self) -> None:
        result = calculate_penalty_function(SESSION_MS // 2, SESSION_MS, PenaltyFunction.EXPONENTIAL)
        assert result == exp(Decimal("-0.5"))

    @pytest.mark.parametrize("penalty_type", list(PenaltyFunction))
    def test_full_weight_at_terminal(self, penalty_type) -> None:
        assert calculate_penalty_function(0, SESSION_MS, penalty_type) == Decimal("1")

    def test_ratio_capped_beyond_session(self) -> None:
        assert calculate_penalty_function(2 * SESSION_MS, SESSION_MS, PenaltyFunction.LINEAR) == Decimal("0")


class TestDynamicGamma:
    """γ_t = γ_0·(1 + α·(1 - τ/T))"""

    def test_disabled(self) -> None:
        assert calculate_dynamic_gamma(Decimal("0.1"), 0, SESSION_MS, False, Decimal("1")) == Decimal("0.1")

    def test_session_start(self) -> None:
        assert calculate_dynamic_gamma(Decimal("0.1"), SESSION_MS, SESSION_MS, True, Decimal("1")) == \
            Decimal("0.1")

    def test_terminal(self) -> None:
        assert calculate_dynamic_gamma(Decimal("0.1"), 0, SESSION_MS, True, Decimal("1")) == Decimal("0.2")

    def test_spread_uses_effective_gamma(self) -> None:
        config = _glft_config().with_dynamic_gamma(Decimal("1"))
        as_config = StrategyConfig(
            risk_aversion=Decimal("0.2"),
            order_intensity=Decimal("1.5"),
            terminal_time_ms=SESSION_MS,
            min_spread=Decimal("0.0001"),
            time_unit=TimeUnit.SECOND,
        )

        glft_spread = calculate_optimal_spread(config, SIGMA, SESSION_MS)
        as_spread = avellaneda_stoikov.calculate_optimal_spread(as_config, SIGMA, 0)

        assert glft_spread == as_spread


class TestGLFTPricing:
    """Reservation price and quotes with the terminal penalty"""

    def test_reduces_to_avellaneda_stoikov(self) -> None:
        config = _glft_config()
        glft_quotes, as_quotes = compare_with_avellaneda_stoikov(MID, Decimal("2"), config, SIGMA, 3_000_000)
        assert glft_quotes == as_quotes

    def test_terminal_penalty_adjustment(self) -> None:
        """q=2, φ=0.5, linear f at half session = 0.5, σ=0 -> r = 100 - 0.5"""
        config = _glft_config(terminal_penalty=Decimal("0.5"))
        result = calculate_reservation_price(MID, Decimal("2"), config, Decimal("0"), SESSION_MS // 2)
        assert result == Decimal("99.5")

    def test_zero_inventory_returns_mid(self) -> None:
        config = _glft_config(terminal_penalty=Decimal("3"), dynamic_gamma=True)
        assert calculate_reservation_price(MID, Decimal("0"), config, SIGMA, 1_000_000) == MID

    def test_penalty_pushes_long_quotes_down(self) -> None:
        config = _glft_config(terminal_penalty=Decimal("0.5"))
        (glft_bid, glft_ask), (as_bid, as_ask) = compare_with_avellaneda_stoikov(
            MID, Decimal("2"), config, SIGMA, 3_000_000
        )
        assert glft_bid < as_bid
        assert glft_ask < as_ask

    def test_quotes_ordered(self) -> None:
        config = _glft_config(terminal_penalty=Decimal("0.1"), dynamic_gamma=True)
        bid, ask = calculate_optimal_quotes(MID, Decimal("-1"), config, SIGMA, 3_500_000)
        assert bid < ask

    def test_negative_clock_rejected(self) -> None:
        with pytest.raises(InvalidMarketState):
            calculate_optimal_spread(_glft_config(), SIGMA, -5)


class TestGLFTStrategy:
    """GLFT behind the common strategy interface"""

    def test_model_requires_glft_config(self) -> None:
        base = StrategyConfig(
            risk_aversion=Decimal("0.1"),
            order_intensity=Decimal("1.5"),
            terminal_time_ms=SESSION_MS,
            min_spread=Decimal("0"),
        )
        with pytest.raises(InvalidConfiguration) as exc_info:
            GLFTModel(base)
        assert exc_info.value.field == "config"

    def test_strategy_matches_functions(self) -> None:
        config = _glft_config(terminal_penalty=Decimal("0.2"))
        strategy = GLFTStrategy(config)

        snapshot = strategy.model.snapshot_at(MID, 3_000_000)
        quote = strategy.quote(snapshot, Decimal("1"), volatility=SIGMA)

        assert (quote.bid_price, quote.ask_price) == \
            calculate_optimal_quotes(MID, Decimal("1"), config, SIGMA, 3_000_000)

    @pytest.mark.asyncio
    async def test_async_matches_sync(self) -> None:
        config = _glft_config(terminal_penalty=Decimal("0.2"), dynamic_gamma=True)

        async def source():
            return SIGMA

        async_strategy = AsyncGLFTStrategy(config, volatility_source=source)
        sync_strategy = GLFTStrategy(config, volatility_provider=lambda: SIGMA)

        assert await async_strategy.optimal_quotes(MID, Decimal("2"), 600_000) == \
            sync_strategy.optimal_quotes(MID, Decimal("2"), 600_000)

    def test_exponential_penalty_half_session(self) -> None:
        config = _glft_config(terminal_penalty=Decimal("1"), penalty_function=PenaltyFunction.EXPONENTIAL)
        result = calculate_reservation_price(MID, Decimal("1"), config, Decimal("0"), SESSION_MS // 2)
        assert is_close(result, MID - exp(Decimal("-0.5")))
