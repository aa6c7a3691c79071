"""
Error Types for the Market Making Core
=====================================

Every failure is raised from the operation that detects it and surfaced to
the immediate caller. Nothing here retries or recovers automatically.
"""

from typing import Optional


class MarketMakerError(Exception):
    """Base class for all market making core errors"""


class InvalidConfiguration(MarketMakerError, ValueError):
    """Static strategy or estimator parameters are invalid"""

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.field = field


class InvalidMarketState(MarketMakerError, ValueError):
    """Market snapshot, price series or volatility input is invalid"""


class InvalidQuoteGeneration(MarketMakerError):
    """The quote formulas produced a non-sensical quote"""


class DomainError(MarketMakerError, ValueError):
    """Argument outside the mathematical domain of a function"""


class NumericOverflowError(MarketMakerError, OverflowError):
    """Result exceeds the representable fixed-point range"""


class InsufficientData(MarketMakerError, ValueError):
    """Too few samples to compute an estimate"""
