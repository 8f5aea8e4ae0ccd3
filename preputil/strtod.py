"""Correctly rounded conversion of decimal digit strings to binary floats."""

from __future__ import annotations

import math
from fractions import Fraction

# Values whose leading digit sits at 10**309 or above are infinite.
_MAX_DECIMAL_POWER = 309
# Values below 10**-324 are read as zero.
_MIN_DECIMAL_POWER = -324
# Longer inputs are cut to this many significant digits, with a sticky last digit.
_MAX_SIGNIFICANT_DIGITS = 780

_FLOAT32_MANTISSA_BITS = 24
_FLOAT32_MIN_EXPONENT = -126
_FLOAT32_MAX_EXPONENT = 127
_FLOAT32_MAX = math.ldexp((1 << _FLOAT32_MANTISSA_BITS) - 1, _FLOAT32_MAX_EXPONENT - 23)


def _check_digits(digits: str) -> None:
    if not all("0" <= ch <= "9" for ch in digits):
        raise ValueError(f"digit string expected, got {digits!r}")


def _trim_and_cut(digits: str, exponent: int) -> tuple[str, int]:
    """Drop leading and trailing zeros and cut overly long inputs."""
    _check_digits(digits)
    trimmed = digits.lstrip("0")
    stripped = trimmed.rstrip("0")
    exponent += len(trimmed) - len(stripped)
    if len(stripped) > _MAX_SIGNIFICANT_DIGITS:
        cut = stripped[: _MAX_SIGNIFICANT_DIGITS - 1] + "1"
        exponent += len(stripped) - _MAX_SIGNIFICANT_DIGITS
        return cut, exponent
    return stripped, exponent


def _out_of_range(trimmed: str, exponent: int) -> float | None:
    if not trimmed:
        return 0.0
    if exponent + len(trimmed) - 1 >= _MAX_DECIMAL_POWER:
        return math.inf
    if exponent + len(trimmed) <= _MIN_DECIMAL_POWER:
        return 0.0
    return None


def _exact(trimmed: str, exponent: int) -> Fraction:
    number = int(trimmed)
    if exponent >= 0:
        return Fraction(number * 10**exponent)
    return Fraction(number, 10**-exponent)


def _round_half_even(value: Fraction) -> int:
    floor, remainder = divmod(value.numerator, value.denominator)
    twice = 2 * remainder
    if twice > value.denominator or (twice == value.denominator and floor % 2 == 1):
        return floor + 1
    return floor


def _binary_exponent(value: Fraction) -> int:
    """The ``e`` with ``2**e <= value < 2**(e + 1)`` for positive ``value``."""
    num, den = value.numerator, value.denominator
    e = num.bit_length() - den.bit_length()
    if e >= 0:
        if num < den << e:
            e -= 1
    elif num << -e < den:
        e -= 1
    return e


def strtod(digits: str, exponent: int) -> float:
    """The double nearest to ``int(digits) * 10 ** exponent``, ties to even.

    ``digits`` holds decimal digits only, with no sign or point.
    """
    trimmed, exponent = _trim_and_cut(digits, exponent)
    special = _out_of_range(trimmed, exponent)
    if special is not None:
        return special
    try:
        return float(_exact(trimmed, exponent))
    except OverflowError:
        return math.inf


def strtof(digits: str, exponent: int) -> float:
    """The single-precision value nearest to ``int(digits) * 10 ** exponent``.

    Rounds the exact decimal straight to single precision, ties to even, so
    no double rounding occurs. The result is returned as a Python float.
    """
    trimmed, exponent = _trim_and_cut(digits, exponent)
    special = _out_of_range(trimmed, exponent)
    if special is not None:
        return special
    value = _exact(trimmed, exponent)
    e = _binary_exponent(value)
    if e > _FLOAT32_MAX_EXPONENT:
        return math.inf
    scale_exp = max(e, _FLOAT32_MIN_EXPONENT) - (_FLOAT32_MANTISSA_BITS - 1)
    scale = Fraction(2) ** scale_exp
    mantissa = _round_half_even(value / scale)
    result = math.ldexp(mantissa, scale_exp)
    if result > _FLOAT32_MAX:
        return math.inf
    return result