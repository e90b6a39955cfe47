"""Numeric helpers shared by the scoring modules."""
from __future__ import annotations

import math


def round_half_up(value: float) -> float:
    """Round ``value`` to the nearest integer with halves rounded upwards.

    Python's built-in :func:`round` uses banker's rounding which would make
    scores such as ``32.5`` collapse to ``32``.  Published scores always round
    halves towards positive infinity.
    """

    return float(math.floor(value + 0.5))


def round_to(value: float, digits: int = 2) -> float:
    """Round ``value`` to ``digits`` decimals via ``round_half_up(x * 10**d) / 10**d``."""

    factor = 10**digits
    return round_half_up(value * factor) / factor


def clamp(value: float, lower: float = 0.0, upper: float = 100.0) -> float:
    """Clamp ``value`` into ``[lower, upper]``; non-finite values map to ``lower``."""

    if not math.isfinite(value):
        return lower
    return max(lower, min(upper, value))


def safe_div(numerator: float, denominator: float, default: float = 0.0) -> float:
    if denominator == 0 or not math.isfinite(denominator):
        return default
    return numerator / denominator


def format_number(value: object) -> str:
    """Render numbers for human readable text without a trailing ``.0``."""

    if isinstance(value, bool):
        return str(value)
    if isinstance(value, float):
        if math.isfinite(value) and value.is_integer():
            return str(int(value))
        return repr(value)
    return str(value)


__all__ = ["clamp", "format_number", "round_half_up", "round_to", "safe_div"]
