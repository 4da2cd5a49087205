"""Unit tests for checked amounts and 18-decimal fixed-point arithmetic."""

import pytest
import sys
import os

# Add src to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from xstake.engine.errors import ArithmeticOverflow
from xstake.engine.fixed_point import (
    DECIMAL_FRACTIONAL,
    U128_MAX,
    FixedPoint,
    check_amount,
    checked_add,
    checked_sub,
    mul_div_floor,
)


class TestCheckedArithmetic:
    """Tests for 128-bit checked integer helpers."""

    def test_add_within_bounds(self):
        assert checked_add(U128_MAX - 1, 1) == U128_MAX

    def test_add_overflow_raises(self):
        with pytest.raises(ArithmeticOverflow):
            checked_add(U128_MAX, 1)

    def test_sub_underflow_raises(self):
        with pytest.raises(ArithmeticOverflow):
            checked_sub(5, 6)

    def test_mul_div_floor_rounds_down(self):
        assert mul_div_floor(10, 1, 3) == 3
        assert mul_div_floor(10_000_000, 50, 100) == 5_000_000

    def test_mul_div_uses_wide_intermediate(self):
        """a * b may exceed 128 bits as long as the quotient fits."""
        assert mul_div_floor(U128_MAX, 1000, 1000) == U128_MAX

    def test_mul_div_result_overflow(self):
        with pytest.raises(ArithmeticOverflow):
            mul_div_floor(U128_MAX, 2, 1)

    def test_division_by_zero(self):
        with pytest.raises(ArithmeticOverflow):
            mul_div_floor(1, 1, 0)

    def test_check_amount_rejects_negative_and_huge(self):
        with pytest.raises(ArithmeticOverflow):
            check_amount(-1)
        with pytest.raises(ArithmeticOverflow):
            check_amount(U128_MAX + 1)
        assert check_amount(0) == 0

    def test_check_amount_rejects_non_integers(self):
        with pytest.raises(TypeError):
            check_amount(1.5)
        with pytest.raises(TypeError):
            check_amount(True)


class TestFixedPoint:
    """Tests for the FixedPoint type."""

    def test_from_ratio_scales_by_fractional(self):
        assert FixedPoint.from_ratio(1_000_000, 100).atomics == 10_000 * DECIMAL_FRACTIONAL
        assert FixedPoint.from_ratio(1_000_000, 100) == FixedPoint.from_int(10_000)

    def test_from_ratio_floors(self):
        third = FixedPoint.from_ratio(1, 3)
        assert str(third) == "0.333333333333333333"

    def test_from_ratio_zero_denominator(self):
        with pytest.raises(ArithmeticOverflow):
            FixedPoint.from_ratio(1, 0)

    def test_mul_floor(self):
        assert FixedPoint.from_int(5_000).mul_floor(200) == 1_000_000
        assert FixedPoint.from_ratio(1, 3).mul_floor(3) == 0

    def test_subtraction_below_zero_raises(self):
        with pytest.raises(ArithmeticOverflow):
            FixedPoint.from_int(1) - FixedPoint.from_int(2)

    def test_ordering(self):
        assert FixedPoint.zero() < FixedPoint.from_ratio(1, 10**18) < FixedPoint.from_int(1)

    def test_string_round_trip(self):
        for text in ["0", "1000", "0.5", "15000", "0.428571428571428571"]:
            assert str(FixedPoint.from_str(text)) == text

    def test_from_str_rejects_garbage(self):
        with pytest.raises(ValueError):
            FixedPoint.from_str("1.2.3")
        with pytest.raises(ValueError):
            FixedPoint.from_str("-1")
