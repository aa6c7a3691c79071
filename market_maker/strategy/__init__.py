"""
Market Making Strategy Module
===========================

Avellaneda-Stoikov quoting formulas, validated configuration, the sync/async
strategy interface and the GLFT terminal-penalty extension.
"""

from .config import StrategyConfig, TimeUnit
from .types import MarketSnapshot, Quote
from .avellaneda_stoikov import (
    calculate_reservation_price,
    calculate_optimal_spread,
    calculate_optimal_quotes,
    generate_quote
)
from .interface import (
    QuoteModel,
    AvellanedaStoikovModel,
    QuoteStrategy,
    AsyncQuoteStrategy,
    AvellanedaStoikovStrategy,
    AsyncAvellanedaStoikovStrategy,
    volatility_from_history
)
from .glft import (
    GLFTConfig,
    GLFTModel,
    GLFTStrategy,
    AsyncGLFTStrategy,
    PenaltyFunction
)

__all__ = [
    'StrategyConfig',
    'TimeUnit',
    'MarketSnapshot',
    'Quote',
    'calculate_reservation_price',
    'calculate_optimal_spread',
    'calculate_optimal_quotes',
    'generate_quote',
    'QuoteModel',
    'AvellanedaStoikovModel',
    'QuoteStrategy',
    'AsyncQuoteStrategy',
    'AvellanedaStoikovStrategy',
    'AsyncAvellanedaStoikovStrategy',
    'volatility_from_history',
    'GLFTConfig',
    'GLFTModel',
    'GLFTStrategy',
    'AsyncGLFTStrategy',
    'PenaltyFunction'
]
