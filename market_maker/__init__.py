"""
Avellaneda-Stoikov Market Making Core
====================================

Optimal bid/ask quoting under the Avellaneda-Stoikov inventory-risk model,
volatility estimation from price history, and inventory/PnL tracking, all on
exact decimal arithmetic. The caller owns the event loop, market data and
order execution.

Package Structure:
- market_maker/strategy: quoting formulas, configuration, sync/async interface, GLFT extension
- market_maker/analytics: volatility estimators
- market_maker/position: inventory and PnL tracker
- market_maker/utils: configuration, logging, errors and decimal helpers
"""

__version__ = "1.0.0"

from .strategy import (
    StrategyConfig,
    TimeUnit,
    MarketSnapshot,
    Quote,
    AvellanedaStoikovStrategy,
    AsyncAvellanedaStoikovStrategy,
    GLFTConfig,
    GLFTStrategy
)
from .analytics import VolatilityMethod, PriceWindow, estimate_volatility
from .position import PositionTracker, InventoryPosition, PnL
from .utils.errors import (
    MarketMakerError,
    InvalidConfiguration,
    InvalidMarketState,
    InvalidQuoteGeneration,
    DomainError,
    NumericOverflowError,
    InsufficientData
)

__all__ = [
    "StrategyConfig",
    "TimeUnit",
    "MarketSnapshot",
    "Quote",
    "AvellanedaStoikovStrategy",
    "AsyncAvellanedaStoikovStrategy",
    "GLFTConfig",
    "GLFTStrategy",
    "VolatilityMethod",
    "PriceWindow",
    "estimate_volatility",
    "PositionTracker",
    "InventoryPosition",
    "PnL",
    "MarketMakerError",
    "InvalidConfiguration",
    "InvalidMarketState",
    "InvalidQuoteGeneration",
    "DomainError",
    "NumericOverflowError",
    "InsufficientData"
]
