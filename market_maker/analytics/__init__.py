"""
Market Analytics Module
======================

Volatility estimation from price history.
"""

from .volatility import (
    ReturnType,
    VolatilityMethod,
    PriceWindow,
    VolatilityEstimator,
    HistoricalVolatility,
    EWMAVolatility,
    ParkinsonVolatility,
    compute_returns,
    historical_volatility,
    ewma_volatility,
    parkinson_volatility,
    create_estimator,
    estimate_volatility
)

__all__ = [
    'ReturnType',
    'VolatilityMethod',
    'PriceWindow',
    'VolatilityEstimator',
    'HistoricalVolatility',
    'EWMAVolatility',
    'ParkinsonVolatility',
    'compute_returns',
    'historical_volatility',
    'ewma_volatility',
    'parkinson_volatility',
    'create_estimator',
    'estimate_volatility'
]
