"""
Strategy Configuration
=====================

Validated, immutable parameter bundle for the Avellaneda-Stoikov engine.
"""

from decimal import Decimal
from enum import Enum

import numpy as np
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from ..utils.decimal_math import to_decimal, div
from ..utils.errors import InvalidConfiguration


class TimeUnit(Enum):
    """Time unit of the volatility figure, with its length in milliseconds"""
    MILLISECOND = 1
    SECOND = 1_000
    MINUTE = 60_000
    HOUR = 3_600_000
    DAY = 86_400_000
    YEAR = 31_536_000_000   # 365 days

    @property
    def milliseconds(self) -> Decimal:
        return Decimal(self.value)

    def remaining_time_fraction(self, time_to_terminal_ms: int) -> Decimal:
        """Convert a millisecond duration into this unit"""
        return div(Decimal(time_to_terminal_ms), self.milliseconds)


class StrategyConfig(BaseModel):
    """
    Avellaneda-Stoikov strategy parameters.

    Construction is the only way to obtain an instance; any invalid field
    raises InvalidConfiguration naming that field. Instances are frozen, so
    reconfiguration means building a new one (see ``with_updates``).

    ``time_unit`` is the unit the caller's volatility is expressed in; the
    remaining session time is converted into it before entering the formulas.
    """
    model_config = ConfigDict(frozen=True)

    risk_aversion: Decimal = Field(gt=0, description="Risk aversion (gamma)")
    order_intensity: Decimal = Field(gt=0, description="Order intensity (k)")
    terminal_time_ms: int = Field(gt=0, description="Session horizon in milliseconds")
    min_spread: Decimal = Field(ge=0, description="Minimum quoted spread")
    time_unit: TimeUnit = Field(default=TimeUnit.YEAR, description="Unit of volatility")

    def __init__(self, **data):
        try:
            super().__init__(**data)
        except ValidationError as e:
            error = e.errors()[0]
            field = str(error["loc"][0]) if error["loc"] else None
            raise InvalidConfiguration(f"{field}: {error['msg']}", field=field) from e

    @field_validator("risk_aversion", "order_intensity", "min_spread", mode="before")
    @classmethod
    def _coerce_decimal(cls, value, info):
        try:
            return to_decimal(value, info.field_name)
        except (TypeError, OverflowError) as e:
            raise ValueError(str(e)) from e

    @field_validator("terminal_time_ms", mode="before")
    @classmethod
    def _reject_non_integer_time(cls, value):
        if isinstance(value, bool) or not isinstance(value, (int, np.integer)):
            raise ValueError("terminal_time_ms must be an integer number of milliseconds")
        return int(value)

    def remaining_time_fraction(self, time_to_terminal_ms: int) -> Decimal:
        return self.time_unit.remaining_time_fraction(time_to_terminal_ms)

    def with_updates(self, **changes) -> "StrategyConfig":
        """Build a new validated config with some fields replaced"""
        return type(self)(**{**self.model_dump(), **changes})
