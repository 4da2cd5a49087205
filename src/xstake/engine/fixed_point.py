"""Checked 128-bit amounts and 18-decimal fixed-point numbers.

Key Concepts:
- Amounts are non-negative ints bounded by U128_MAX
- FixedPoint stores `atomics` = value * 10^18, floor-rounded on division
- Multiply-then-divide intermediates are bounded by 256 bits
"""

from dataclasses import dataclass

from .errors import ArithmeticOverflow

U128_MAX = 2 ** 128 - 1
U256_MAX = 2 ** 256 - 1

DECIMAL_PLACES = 18
DECIMAL_FRACTIONAL = 10 ** DECIMAL_PLACES


def check_amount(value: int, name: str = "amount") -> int:
    """Ensure value is an int within [0, U128_MAX]."""
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError(f"{name} must be an integer, got {type(value).__name__}")
    if value < 0:
        raise ArithmeticOverflow(f"{name} underflow: {value}")
    if value > U128_MAX:
        raise ArithmeticOverflow(f"{name} overflow: {value}")
    return value


def checked_add(a: int, b: int) -> int:
    result = a + b
    if result > U128_MAX:
        raise ArithmeticOverflow(f"addition overflow: {a} + {b}")
    return result


def checked_sub(a: int, b: int) -> int:
    if b > a:
        raise ArithmeticOverflow(f"subtraction underflow: {a} - {b}")
    return a - b


def mul_div_floor(a: int, b: int, denominator: int) -> int:
    """
    Compute floor(a * b / denominator) with a full-width intermediate.

    Raises:
        ArithmeticOverflow: On division by zero, an intermediate wider than
            256 bits, or a result wider than 128 bits
    """
    if denominator == 0:
        raise ArithmeticOverflow("division by zero")
    product = a * b
    if product > U256_MAX:
        raise ArithmeticOverflow(f"multiplication overflow: {a} * {b}")
    result = product // denominator
    if result > U128_MAX:
        raise ArithmeticOverflow(f"result overflow: {a} * {b} / {denominator}")
    return result


@dataclass(frozen=True, order=True)
class FixedPoint:
    """Non-negative fixed-point number with 18 decimal places."""
    atomics: int = 0

    def __post_init__(self):
        check_amount(self.atomics, "fixed-point atomics")

    @classmethod
    def zero(cls) -> 'FixedPoint':
        return cls(0)

    @classmethod
    def from_int(cls, value: int) -> 'FixedPoint':
        return cls(mul_div_floor(value, DECIMAL_FRACTIONAL, 1))

    @classmethod
    def from_ratio(cls, numerator: int, denominator: int) -> 'FixedPoint':
        """Floor of numerator / denominator at 18 decimal places."""
        return cls(mul_div_floor(numerator, DECIMAL_FRACTIONAL, denominator))

    @classmethod
    def from_str(cls, text: str) -> 'FixedPoint':
        """Parse a plain decimal string such as "1000" or "0.25"."""
        whole, _, fraction = text.strip().partition(".")
        if not whole.isdigit() or (fraction and not fraction.isdigit()):
            raise ValueError(f"invalid decimal: {text!r}")
        if len(fraction) > DECIMAL_PLACES:
            raise ValueError(f"too many fractional digits: {text!r}")
        fraction = fraction.ljust(DECIMAL_PLACES, "0")
        return cls(checked_add(int(whole) * DECIMAL_FRACTIONAL, int(fraction)))

    def is_zero(self) -> bool:
        return self.atomics == 0

    def mul_floor(self, amount: int) -> int:
        """Amount multiplied by this factor, floor-rounded to an integer."""
        return mul_div_floor(amount, self.atomics, DECIMAL_FRACTIONAL)

    def __add__(self, other: 'FixedPoint') -> 'FixedPoint':
        return FixedPoint(checked_add(self.atomics, other.atomics))

    def __sub__(self, other: 'FixedPoint') -> 'FixedPoint':
        return FixedPoint(checked_sub(self.atomics, other.atomics))

    def __str__(self) -> str:
        whole, fraction = divmod(self.atomics, DECIMAL_FRACTIONAL)
        if fraction == 0:
            return str(whole)
        digits = str(fraction).rjust(DECIMAL_PLACES, "0").rstrip("0")
        return f"{whole}.{digits}"
