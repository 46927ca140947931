"""Population-relative statistics — percentile thresholds and membership tests.

Thresholds are always derived from the full population passed in; nothing
here is cached or fixed globally.
"""

from __future__ import annotations

import math
from collections.abc import Sequence


def get_percentile_threshold(values: Sequence[float], percentile: float) -> float:
    """Value at a given percentile (0-1) of the ascending-sorted population.

    percentile=0.7 gives the cutoff for "top 30%". Empty input returns 0.
    """
    if not values:
        return 0.0
    ordered = sorted(values)
    index = math.floor(len(ordered) * percentile)
    return ordered[min(index, len(ordered) - 1)]


def get_top_n_count(total: int, ratio: float) -> int:
    """Count for "top N%" of a population, never less than 1."""
    return max(1, math.ceil(total * ratio))


def is_in_top_percentile(value: float, all_values: Sequence[float], percentile: float) -> bool:
    threshold = get_percentile_threshold(all_values, 1 - percentile)
    return value >= threshold
