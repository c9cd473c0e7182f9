"""Numeric helpers shared by the qualification modules."""

import math


def round_half_up(value: float) -> int:
    """Round .5 away from zero for non-negative values (builtin round() is banker's)."""
    return int(math.floor(value + 0.5))


def clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))
