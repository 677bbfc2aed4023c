"""
Statistical Helper Functions

Median, nearest-rank percentile and descriptive-statistics primitives used by
the scoring, classification, correlation and takeaway services.

Every helper is pure and deterministic. Non-finite inputs (NaN, +/-Infinity,
None) are filtered out before computing so a single corrupt component value
cannot poison a dataset-wide statistic; when filtering leaves nothing, the
helpers fall back to 0.
"""

import math
from typing import Iterable, List, Optional


def finite_values(values: Iterable[Optional[float]]) -> List[float]:
    """
    Keep only finite numeric values, as floats.

    Args:
        values: Iterable of numbers, possibly containing None, NaN or Infinity

    Returns:
        List of finite floats in their original order
    """
    result: List[float] = []
    for v in values:
        if v is None or isinstance(v, bool):
            continue
        try:
            f = float(v)
        except (TypeError, ValueError):
            continue
        if math.isfinite(f):
            result.append(f)
    return result


def finite_or_zero(value: Optional[float]) -> float:
    """Coerce a single value to a finite float, mapping anything malformed to 0."""
    cleaned = finite_values([value])
    return cleaned[0] if cleaned else 0.0


def clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def mean(values: Iterable[Optional[float]]) -> float:
    """
    Calculate the arithmetic mean of the finite values.

    Args:
        values: Numeric values

    Returns:
        Arithmetic mean, or 0 if no finite values
    """
    cleaned = finite_values(values)
    if not cleaned:
        return 0.0
    return sum(cleaned) / len(cleaned)


def median(values: Iterable[Optional[float]]) -> float:
    """
    Calculate the median of the finite values.

    For an even count the two central sorted values are averaged; for an odd
    count the exact central value is returned.

    Args:
        values: Numeric values

    Returns:
        Median value, or 0 if no finite values
    """
    sorted_vals = sorted(finite_values(values))
    if not sorted_vals:
        return 0.0
    mid = len(sorted_vals) // 2
    if len(sorted_vals) % 2 != 0:
        return sorted_vals[mid]
    return (sorted_vals[mid - 1] + sorted_vals[mid]) / 2


def percentile(values: Iterable[Optional[float]], p: float) -> float:
    """
    Nearest-rank percentile of the finite values (no interpolation).

    The index is floor((p / 100) * n), clamped to [0, n - 1], into the
    ascending sort. With five values the 75th percentile is therefore the
    fourth smallest.

    Args:
        values: Numeric values
        p: Percentile in [0, 100]

    Returns:
        Value at the nearest-rank index, or 0 if no finite values
    """
    sorted_vals = sorted(finite_values(values))
    if not sorted_vals:
        return 0.0
    n = len(sorted_vals)
    p = finite_or_zero(p)
    idx = int(math.floor((p / 100) * n))
    idx = min(n - 1, max(0, idx))
    return sorted_vals[idx]


def std_dev(values: Iterable[Optional[float]]) -> float:
    """
    Population standard deviation of the finite values.

    Returns:
        Standard deviation, or 0 if fewer than 2 finite values
    """
    cleaned = finite_values(values)
    if len(cleaned) < 2:
        return 0.0
    avg = mean(cleaned)
    return math.sqrt(mean([(v - avg) ** 2 for v in cleaned]))


def max_or_floor(values: Iterable[Optional[float]], floor: float = 1.0) -> float:
    """
    Maximum of the finite values, never below `floor`.

    Used for normalization bounds so a dataset of zeros never divides by zero.
    """
    cleaned = finite_values(values)
    return max(cleaned + [floor])


__all__ = [
    "finite_values",
    "finite_or_zero",
    "clamp",
    "mean",
    "median",
    "percentile",
    "std_dev",
    "max_or_floor",
]
