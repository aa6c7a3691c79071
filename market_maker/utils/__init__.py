"""
Utilities Module for the Market Making Core
==========================================

Configuration, logging, typed errors and fixed-point arithmetic helpers.
"""

from .config import config, Config
from .errors import (
    MarketMakerError,
    InvalidConfiguration,
    InvalidMarketState,
    InvalidQuoteGeneration,
    DomainError,
    NumericOverflowError,
    InsufficientData
)

__all__ = [
    'config',
    'Config',
    'MarketMakerError',
    'InvalidConfiguration',
    'InvalidMarketState',
    'InvalidQuoteGeneration',
    'DomainError',
    'NumericOverflowError',
    'InsufficientData'
]
