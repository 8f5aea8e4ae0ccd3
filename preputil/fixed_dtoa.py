"""Digits of a double printed with a fixed number of fractional digits."""

from __future__ import annotations

import math
import struct

_SIGNIFICAND_BITS = 52
_HIDDEN_BIT = 1 << _SIGNIFICAND_BITS
_SIGNIFICAND_MASK = _HIDDEN_BIT - 1
_EXPONENT_BIAS = 0x3FF + _SIGNIFICAND_BITS
_DENORMAL_EXPONENT = -_EXPONENT_BIAS + 1
_MAX_EXPONENT = 20
_MAX_FRACTIONAL_COUNT = 20


def _decompose(value: float) -> tuple[int, int]:
    """Split ``abs(value)`` into ``significand * 2 ** exponent``."""
    bits = struct.unpack("<Q", struct.pack("<d", value))[0]
    biased = (bits >> _SIGNIFICAND_BITS) & 0x7FF
    fraction = bits & _SIGNIFICAND_MASK
    if biased == 0:
        return fraction, _DENORMAL_EXPONENT
    return fraction + _HIDDEN_BIT, biased - _EXPONENT_BIAS


def fast_fixed_dtoa(value: float, fractional_count: int) -> tuple[str, int] | None:
    """Digits of ``value`` rounded to ``fractional_count`` places after the point.

    Returns ``(digits, decimal_point)`` so that the number reads as
    ``0.digits * 10 ** decimal_point``. Leading and trailing zeros are removed;
    when nothing is left the digits are empty and the point is
    ``-fractional_count``. Exact halfway cases round away from zero.
    Returns ``None`` for inputs this method cannot handle: values of 2**73 or
    more, non-finite values, or more than 20 fractional digits.
    """
    if fractional_count < 0:
        raise ValueError("fractional_count must not be negative")
    value = float(value)
    if not math.isfinite(value):
        return None
    significand, exponent = _decompose(value)
    if exponent > _MAX_EXPONENT or fractional_count > _MAX_FRACTIONAL_COUNT:
        return None

    scaled = significand * 10**fractional_count
    if exponent >= 0:
        rounded = scaled << exponent
    else:
        shift = -exponent
        rounded = (scaled + (1 << (shift - 1))) >> shift

    if rounded == 0:
        return "", -fractional_count
    text = str(rounded)
    decimal_point = len(text) - fractional_count
    return text.rstrip("0"), decimal_point