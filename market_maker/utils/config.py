"""
Market Maker Core Configuration
"""

import os
from decimal import Decimal
from typing import Dict, Any
from pydantic import BaseModel, Field
from dotenv import load_dotenv

# Load environment variables
load_dotenv()


class NumericConfig(BaseModel):
    """Fixed-point arithmetic configuration"""
    precision: int = Field(default=28, ge=10, le=60, description="Significant digits for Decimal math")
    rounding: str = Field(default="ROUND_HALF_EVEN", description="decimal module rounding mode")


class VolatilityConfig(BaseModel):
    """Volatility estimator defaults"""
    # RiskMetrics daily decay
    ewma_decay: Decimal = Field(default=Decimal("0.94"), description="EWMA lambda, strictly in (0, 1)")


class TradingConfig(BaseModel):
    """Default Avellaneda-Stoikov strategy parameters"""
    risk_aversion: Decimal = Field(default=Decimal("0.1"), description="Risk aversion (gamma)")
    order_intensity: Decimal = Field(default=Decimal("1.5"), description="Order intensity (k)")
    terminal_time_ms: int = Field(default=3_600_000, description="Session horizon in milliseconds")
    min_spread: Decimal = Field(default=Decimal("0.0001"), description="Minimum quoted spread")

    def to_strategy_config(self):
        """Build a validated StrategyConfig from these defaults"""
        from ..strategy.config import StrategyConfig

        return StrategyConfig(
            risk_aversion=self.risk_aversion,
            order_intensity=self.order_intensity,
            terminal_time_ms=self.terminal_time_ms,
            min_spread=self.min_spread,
        )


class LoggingConfig(BaseModel):
    """Logging configuration"""
    level: str = Field(default="NORMAL", description="SILENT, QUIET, NORMAL, VERBOSE or TRACE")
    log_file: str = Field(default="", description="Optional log file path")


class Config:
    """Main configuration class"""

    def __init__(self):
        self.numeric = NumericConfig(
            precision=int(os.getenv("MM_DECIMAL_PRECISION", "28")),
            rounding=os.getenv("MM_DECIMAL_ROUNDING", "ROUND_HALF_EVEN"),
        )
        self.volatility = VolatilityConfig(
            ewma_decay=Decimal(os.getenv("MM_EWMA_DECAY", "0.94")),
        )
        self.trading = TradingConfig(
            risk_aversion=Decimal(os.getenv("MM_RISK_AVERSION", "0.1")),
            order_intensity=Decimal(os.getenv("MM_ORDER_INTENSITY", "1.5")),
            terminal_time_ms=int(os.getenv("MM_TERMINAL_TIME_MS", "3600000")),
            min_spread=Decimal(os.getenv("MM_MIN_SPREAD", "0.0001")),
        )
        self.logging = LoggingConfig(
            level=os.getenv("MM_LOG_LEVEL", "NORMAL"),
            log_file=os.getenv("MM_LOG_FILE", ""),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert config to dictionary"""
        return {
            "numeric": self.numeric.model_dump(),
            "volatility": self.volatility.model_dump(),
            "trading": self.trading.model_dump(),
            "logging": self.logging.model_dump()
        }


# Global configuration instance
config = Config()
