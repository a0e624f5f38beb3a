"""
Fixed-point helpers shared by the curve math and the pool.

Token amounts are plain ints in base units. Real-valued intermediates are
Decimals at 78 digits, which covers full 256-bit products without loss.
"""
from decimal import Decimal, getcontext, ROUND_CEILING, ROUND_FLOOR

getcontext().prec = 78

Q128 = 2 ** 128
WAD = 10 ** 18


def mul_div(a: int, b: int, denominator: int) -> int:
    """Compute floor(a * b / denominator) without intermediate truncation."""
    if denominator == 0:
        raise ZeroDivisionError("mul_div denominator is zero")
    return (a * b) // denominator


def mul_div_rounding_up(a: int, b: int, denominator: int) -> int:
    """Compute ceil(a * b / denominator) without intermediate truncation."""
    if denominator == 0:
        raise ZeroDivisionError("mul_div denominator is zero")
    return -((-a * b) // denominator)


def to_int_floor(value: Decimal) -> int:
    return int(value.to_integral_value(rounding=ROUND_FLOOR))


def to_int_ceil(value: Decimal) -> int:
    return int(value.to_integral_value(rounding=ROUND_CEILING))
