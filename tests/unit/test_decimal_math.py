"""
Tests for the Decimal Arithmetic Helpers

Covers:
1. Boundary coercion (no binary floats)
2. Basic arithmetic and scale preservation
3. sqrt / ln / exp accuracy and domain errors
4. Overflow detection
"""

from decimal import Decimal

import numpy as np
import pytest

from market_maker.utils.decimal_math import (
    MAX_DECIMAL,
    add,
    clamp,
    div,
    exp,
    is_close,
    ln,
    mul,
    neg,
    powi,
    quantize,
    sqrt,
    square,
    sub,
    to_decimal,
)
from market_maker.utils.errors import DomainError, NumericOverflowError

# 1 ulp at 28 significant digits for values of order 1
ULP = Decimal("1e-27")


class TestToDecimal:
    """Coercion at the API boundary"""

    def test_accepts_decimal_int_and_str(self) -> None:
        assert to_decimal(Decimal("1.25")) == Decimal("1.25")
        assert to_decimal(7) == Decimal(7)
        assert to_decimal(" 99.5 ") == Decimal("99.5")

    def test_accepts_numpy_integer(self) -> None:
        assert to_decimal(np.int64(42)) == Decimal(42)

    def test_rejects_float(self) -> None:
        with pytest.raises(TypeError):
            to_decimal(0.1)

    def test_rejects_numpy_float(self) -> None:
        with pytest.raises(TypeError):
            to_decimal(np.float64(0.1))

    def test_rejects_bool(self) -> None:
        with pytest.raises(TypeError):
            to_decimal(True)

    def test_rejects_unparsable_string(self) -> None:
        with pytest.raises(ValueError):
            to_decimal("abc")

    def test_rejects_non_finite(self) -> None:
        with pytest.raises(DomainError):
            to_decimal(Decimal("NaN"))
        with pytest.raises(DomainError):
            to_decimal("Infinity")

    def test_rejects_out_of_range(self) -> None:
        with pytest.raises(NumericOverflowError):
            to_decimal(MAX_DECIMAL + 1)


class TestArithmetic:
    """add / sub / mul / div / neg / powi"""

    def test_exact_decimal_sums(self) -> None:
        assert add(Decimal("0.1"), Decimal("0.2")) == Decimal("0.3")
        assert sub(Decimal("100.00"), Decimal("0.35")) == Decimal("99.65")

    def test_scale_is_preserved(self) -> None:
        result = add(Decimal("1.10"), Decimal("2.20"))
        assert str(result) == "3.30"

    def test_mul_and_div(self) -> None:
        assert mul(Decimal("1.5"), Decimal("4")) == Decimal("6.0")
        assert div(Decimal("1"), Decimal("4")) == Decimal("0.25")

    def test_division_by_zero_is_domain_error(self) -> None:
        with pytest.raises(DomainError):
            div(Decimal("1"), Decimal("0"))

    def test_neg(self) -> None:
        assert neg(Decimal("2.5")) == Decimal("-2.5")

    def test_powi(self) -> None:
        assert powi(Decimal("2"), 10) == Decimal(1024)
        assert powi(Decimal("1.5"), 0) == Decimal(1)
        assert powi(Decimal("2"), -2) == Decimal("0.25")
        assert powi(Decimal("0.2"), 2) == square(Decimal("0.2"))

    def test_multiplication_overflow(self) -> None:
        with pytest.raises(NumericOverflowError):
            mul(MAX_DECIMAL, Decimal("2"))

    def test_addition_overflow(self) -> None:
        with pytest.raises(NumericOverflowError):
            add(MAX_DECIMAL, MAX_DECIMAL)

    def test_quantize(self) -> None:
        assert quantize(Decimal("1.23456"), 2) == Decimal("1.23")
        assert quantize(Decimal("1.235"), 2) == Decimal("1.24")  # half-even
        assert quantize(Decimal("1.245"), 2) == Decimal("1.24")

    def test_clamp(self) -> None:
        assert clamp(Decimal("5"), Decimal("0"), Decimal("1")) == Decimal("1")
        assert clamp(Decimal("-5"), Decimal("0"), Decimal("1")) == Decimal("0")
        with pytest.raises(ValueError):
            clamp(Decimal("0"), Decimal("1"), Decimal("0"))


class TestTranscendentals:
    """sqrt / ln / exp"""

    def test_sqrt_exact_squares(self) -> None:
        assert sqrt(Decimal("4")) == Decimal("2")
        assert sqrt(Decimal("0.04")) == Decimal("0.2")
        assert sqrt(Decimal("0")) == Decimal("0")

    def test_sqrt_accuracy(self) -> None:
        root = sqrt(Decimal("2"))
        assert abs(mul(root, root) - Decimal("2")) <= 4 * ULP
        assert str(root).startswith("1.41421356237309504880168872")

    def test_sqrt_negative_is_domain_error(self) -> None:
        with pytest.raises(DomainError):
            sqrt(Decimal("-1"))

    def test_ln_known_values(self) -> None:
        assert ln(Decimal("1")) == Decimal("0")
        assert abs(ln(Decimal("2")) - Decimal("0.6931471805599453094172321215")) <= ULP

    def test_ln_domain(self) -> None:
        with pytest.raises(DomainError):
            ln(Decimal("0"))
        with pytest.raises(DomainError):
            ln(Decimal("-3"))

    def test_exp_known_values(self) -> None:
        assert exp(Decimal("0")) == Decimal("1")
        assert abs(exp(Decimal("1")) - Decimal("2.718281828459045235360287471")) <= 10 * ULP

    def test_exp_ln_inverse(self) -> None:
        x = Decimal("1.0666666666666666666666666667")
        assert is_close(exp(ln(x)), x, Decimal("1e-25"))

    def test_exp_overflow(self) -> None:
        with pytest.raises(NumericOverflowError):
            exp(Decimal("100"))

    def test_results_are_deterministic(self) -> None:
        x = Decimal("1.0666666666666666666666666667")
        assert ln(x) == ln(x)
        assert sqrt(x) == sqrt(x)
        assert exp(x) == exp(x)
