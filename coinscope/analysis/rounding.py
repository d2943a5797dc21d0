"""Rounding helpers shared by the scoring modules.

Ties round toward positive infinity (``62.5 -> 63``, ``-2.5 -> -2``) rather
than to the nearest even integer as ``round()`` does.
"""

import math


def round_half_up(value: float, digits: int = 0) -> float:
    """Round *value* to *digits* decimals, ties rounding upward."""
    factor = 10 ** digits
    return math.floor(value * factor + 0.5) / factor


def round_int(value: float) -> int:
    """Round *value* to the nearest integer, ties rounding upward."""
    return int(math.floor(value + 0.5))
