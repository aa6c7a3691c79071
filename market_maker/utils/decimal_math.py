"""
Decimal Arithmetic Helpers
=========================

Exact base-10 fixed-point primitives for the quoting formulas.

Precision policy:
- Every operation runs in a private copy of ``MATH_CONTEXT``: 28 significant
  digits and ROUND_HALF_EVEN unless overridden through ``config.numeric``.
  The thread-local decimal context is never read or modified.
- ``sqrt``, ``ln`` and ``exp`` use the decimal module's correctly-rounded
  algorithms. They iterate until the result is exact to full context
  precision, so each value is within 1 unit in the last significant digit
  (1 ulp) of the true result. The same inputs always give the same digits.
- Values are bounded by ``MAX_DECIMAL`` (the 96-bit fixed-point range).
  Anything larger raises ``NumericOverflowError``; nothing wraps or truncates.
- Arguments outside a function's domain raise ``DomainError``.
"""

import decimal
from decimal import Decimal, Context
from typing import Any, Callable

import numpy as np

from .config import config
from .errors import DomainError, NumericOverflowError


MAX_DECIMAL = Decimal("79228162514264337593543950335")

ZERO = Decimal(0)
ONE = Decimal(1)
TWO = Decimal(2)
FOUR = Decimal(4)

DEFAULT_TOLERANCE = Decimal("1e-20")

_ROUNDING_MODES = {
    decimal.ROUND_CEILING,
    decimal.ROUND_DOWN,
    decimal.ROUND_FLOOR,
    decimal.ROUND_HALF_DOWN,
    decimal.ROUND_HALF_EVEN,
    decimal.ROUND_HALF_UP,
    decimal.ROUND_UP,
    decimal.ROUND_05UP,
}


def build_context(precision: int, rounding: str) -> Context:
    """Create the arithmetic context used by every helper in this module"""
    if rounding not in _ROUNDING_MODES:
        raise ValueError(f"Unknown rounding mode: {rounding}")

    return Context(
        prec=precision,
        rounding=rounding,
        traps=[decimal.Overflow, decimal.InvalidOperation, decimal.DivisionByZero],
    )


MATH_CONTEXT = build_context(config.numeric.precision, config.numeric.rounding)


def math_context() -> Context:
    """Fresh copy of MATH_CONTEXT (contexts carry mutable flags)"""
    return MATH_CONTEXT.copy()


def _check_range(value: Decimal) -> Decimal:
    if value.copy_abs() > MAX_DECIMAL:
        raise NumericOverflowError(f"value {value} exceeds representable range")
    return value


def _apply(operation: Callable[..., Decimal], *args: Decimal) -> Decimal:
    try:
        result = operation(*args)
    except decimal.Overflow as e:
        raise NumericOverflowError(f"{operation.__name__} overflowed: {args}") from e
    except decimal.DivisionByZero as e:
        raise DomainError(f"division by zero: {args}") from e
    except decimal.InvalidOperation as e:
        raise DomainError(f"{operation.__name__} undefined for {args}") from e
    return _check_range(result)


def to_decimal(value: Any, name: str = "value") -> Decimal:
    """
    Coerce a caller-supplied number into a Decimal.

    Accepts Decimal, int (including numpy integer scalars) and numeric strings.
    Binary floating point is rejected so that no float crosses the API boundary.
    """
    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, bool):
        raise TypeError(f"{name} must be numeric, got bool")
    elif isinstance(value, (int, np.integer)):
        result = Decimal(int(value))
    elif isinstance(value, str):
        try:
            result = Decimal(value.strip())
        except decimal.InvalidOperation:
            raise ValueError(f"{name}: cannot parse {value!r} as a decimal") from None
    elif isinstance(value, (float, np.floating)):
        raise TypeError(f"{name} must not be binary floating point; pass a str or Decimal")
    else:
        raise TypeError(f"{name} must be Decimal, int or str, got {type(value).__name__}")

    if not result.is_finite():
        raise DomainError(f"{name} must be finite, got {result}")

    return _check_range(result)


def add(a: Decimal, b: Decimal) -> Decimal:
    return _apply(math_context().add, a, b)


def sub(a: Decimal, b: Decimal) -> Decimal:
    return _apply(math_context().subtract, a, b)


def mul(a: Decimal, b: Decimal) -> Decimal:
    return _apply(math_context().multiply, a, b)


def div(a: Decimal, b: Decimal) -> Decimal:
    if b == ZERO:
        raise DomainError(f"division by zero: {a} / {b}")
    return _apply(math_context().divide, a, b)


def neg(a: Decimal) -> Decimal:
    return _apply(math_context().minus, a)


def square(a: Decimal) -> Decimal:
    return mul(a, a)


def powi(base: Decimal, exponent: int) -> Decimal:
    """
    Integer power by repeated squaring.

    Each step is rounded to context precision, so the error grows by at most
    one ulp per multiplication (log2(exponent) squarings).
    """
    if exponent < 0:
        return div(ONE, powi(base, -exponent))

    result = ONE
    factor = base
    while exponent:
        if exponent & 1:
            result = mul(result, factor)
        exponent >>= 1
        if exponent:
            factor = mul(factor, factor)
    return result


def sqrt(x: Decimal) -> Decimal:
    """Square root, correctly rounded to context precision (error <= 1 ulp)"""
    if x < ZERO:
        raise DomainError(f"sqrt of negative number: {x}")
    return _apply(math_context().sqrt, x)


def ln(x: Decimal) -> Decimal:
    """Natural logarithm, correctly rounded to context precision (error <= 1 ulp)"""
    if x <= ZERO:
        raise DomainError(f"ln of non-positive number: {x}")
    return _apply(math_context().ln, x)


def exp(x: Decimal) -> Decimal:
    """Exponential, correctly rounded to context precision (error <= 1 ulp)"""
    return _apply(math_context().exp, x)


def quantize(value: Decimal, places: int, rounding: str = None) -> Decimal:
    """Round to a fixed number of decimal places"""
    quantum = ONE.scaleb(-places)
    ctx = math_context()
    try:
        return value.quantize(quantum, rounding=rounding or ctx.rounding, context=ctx)
    except decimal.InvalidOperation as e:
        raise NumericOverflowError(f"{value} cannot be held at {places} decimal places") from e


def is_close(a: Decimal, b: Decimal, tolerance: Decimal = DEFAULT_TOLERANCE) -> bool:
    return sub(a, b).copy_abs() <= tolerance


def clamp(value: Decimal, lower: Decimal, upper: Decimal) -> Decimal:
    if lower > upper:
        raise ValueError(f"lower bound {lower} above upper bound {upper}")
    return max(lower, min(value, upper))
