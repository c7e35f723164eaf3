"""Summary statistics over repeated benchmark measurements."""

from __future__ import annotations

import math
from collections.abc import Sequence


def _sqrt(value: float) -> float:
    # Imprecision can push a variance slightly below zero.
    if value < 0.0:
        return 0.0
    return math.sqrt(value)


def mean(values: Sequence[float]) -> float:
    """Arithmetic mean; 0.0 for an empty sequence."""
    if not values:
        return 0.0
    return sum(values, 0.0) * (1.0 / len(values))


def median(values: Sequence[float]) -> float:
    """Median; fewer than three values give their mean."""
    if len(values) < 3:
        return mean(values)
    ordered = sorted(values)
    center = len(ordered) // 2
    if len(ordered) % 2 == 1:
        return ordered[center]
    return (ordered[center] + ordered[center - 1]) / 2.0


def stddev(values: Sequence[float]) -> float:
    """Sample standard deviation; 0.0 for fewer than two values."""
    avg = mean(values)
    if not values:
        return avg
    count = len(values)
    if count == 1:
        return 0.0
    avg_squares = sum((x * x for x in values), 0.0) * (1.0 / count)
    return _sqrt(count / (count - 1.0) * (avg_squares - avg * avg))


def cv(values: Sequence[float]) -> float:
    """Coefficient of variation (stddev / mean); 0.0 for fewer than two values."""
    if len(values) < 2:
        return 0.0
    deviation = stddev(values)
    avg = mean(values)
    if avg == 0.0:
        if deviation == 0.0 or math.isnan(deviation):
            return math.nan
        return math.copysign(math.inf, deviation) * math.copysign(1.0, avg)
    return deviation / avg