"""Rounding helpers shared by the metric calculators."""

from __future__ import annotations

import math


def round_half_up(value: float, digits: int = 0) -> float:
    """Round halves towards positive infinity (``round()`` rounds them to even)."""
    factor = 10 ** digits
    return math.floor(value * factor + 0.5) / factor


def round_int(value: float) -> int:
    return int(round_half_up(value))


def clamp(value: float, lower: float = 0.0, upper: float = 1.0) -> float:
    return min(upper, max(lower, value))


def mean(values: list[float]) -> float | None:
    if not values:
        return None
    return sum(values) / len(values)
