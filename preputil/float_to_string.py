"""Shortest round-trip text for floating-point numbers."""

from __future__ import annotations

import math
import struct
from decimal import Decimal
from fractions import Fraction

_INFINITY = "inf"
_NAN = "NaN"
_DECIMAL_LOW = -6
_DECIMAL_HIGH = 21
_MAX_FLOAT32_BITS = 0x7F7FFFFF


def _decimal_form(digits: str, point: int) -> str:
    if point <= 0:
        return "0." + "0" * (-point) + digits
    if point >= len(digits):
        return digits + "0" * (point - len(digits))
    return digits[:point] + "." + digits[point:]


def _exponential_form(digits: str, exponent: int) -> str:
    mantissa = digits[0] if len(digits) == 1 else digits[0] + "." + digits[1:]
    sign = "-" if exponent < 0 else ""
    return f"{mantissa}e{sign}{abs(exponent)}"


def _render(negative: bool, digits: str, point: int) -> str:
    exponent = point - 1
    if _DECIMAL_LOW <= exponent < _DECIMAL_HIGH:
        body = _decimal_form(digits, point)
    else:
        body = _exponential_form(digits, exponent)
    return ("-" if negative else "") + body


def _normalize(number: int, scale_exp: int) -> tuple[str, int]:
    text = str(number)
    stripped = text.rstrip("0")
    scale_exp += len(text) - len(stripped)
    return stripped, len(stripped) + scale_exp


def _shortest_double(value: float) -> tuple[str, int]:
    _, digit_tuple, exponent = Decimal(repr(value)).as_tuple()
    number = int("".join(map(str, digit_tuple)))
    return _normalize(number, int(exponent))


def _to_float32(value: float) -> float:
    try:
        return struct.unpack("<f", struct.pack("<f", value))[0]
    except OverflowError:
        return math.copysign(math.inf, value)


def _float32_from_bits(bits: int) -> float:
    return struct.unpack("<f", struct.pack("<I", bits))[0]


def _shortest_single(value: float) -> tuple[str, int]:
    bits = struct.unpack("<I", struct.pack("<f", value))[0]
    exact = Fraction(value)
    below = Fraction(_float32_from_bits(bits - 1))
    low = (exact + below) / 2
    if bits == _MAX_FLOAT32_BITS:
        high = exact + (exact - below) / 2
    else:
        high = (exact + Fraction(_float32_from_bits(bits + 1))) / 2
    inclusive = bits % 2 == 0

    def inside(candidate: Fraction) -> bool:
        if low < candidate < high:
            return True
        return inclusive and (candidate == low or candidate == high)

    magnitude = Decimal(value).adjusted()
    for precision in range(1, 10):
        scale_exp = magnitude - precision + 1
        scale = Fraction(10) ** scale_exp
        nearest = round(exact / scale)
        best = None
        for candidate in (nearest - 1, nearest, nearest + 1):
            if candidate <= 0 or not inside(candidate * scale):
                continue
            if best is None or abs(candidate * scale - exact) < abs(best * scale - exact):
                best = candidate
        if best is not None:
            return _normalize(best, scale_exp)
    return _normalize(round(exact / Fraction(10) ** (magnitude - 16)), magnitude - 16)


def _special(value: float) -> str | None:
    if math.isnan(value):
        return _NAN
    if math.isinf(value):
        return ("-" if value < 0 else "") + _INFINITY
    return None


def to_string(value: float) -> str:
    """Shortest text that reads back as the same double."""
    value = float(value)
    special = _special(value)
    if special is not None:
        return special
    negative = math.copysign(1.0, value) < 0
    if value == 0:
        return _render(negative, "0", 1)
    digits, point = _shortest_double(abs(value))
    return _render(negative, digits, point)


def to_string_single(value: float) -> str:
    """Shortest text that reads back as the same single-precision float."""
    value = _to_float32(float(value))
    special = _special(value)
    if special is not None:
        return special
    negative = math.copysign(1.0, value) < 0
    if value == 0:
        return _render(negative, "0", 1)
    digits, point = _shortest_single(abs(value))
    return _render(negative, digits, point)