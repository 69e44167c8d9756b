"""Fixed-width histogram bucketing for numeric fields."""
from __future__ import annotations

import math
from typing import Dict, List, Mapping, Optional

from survey_insights.aggregation import config

__all__ = ["create_histogram_buckets"]


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def _parse_number(raw: str) -> Optional[float]:
    # "1_000" is a Python literal form, not a number a respondent typed
    if "_" in str(raw):
        return None
    try:
        value = float(raw)
    except (TypeError, ValueError):
        return None
    return value if math.isfinite(value) else None


def _format_bound(value: float, precision: int) -> str:
    if precision == 0:
        return str(_round_half_up(value))
    return f"{value:.{precision}f}"


def _bucket_labels(low: float, width: float, bucket_count: int) -> List[str]:
    """Labels ``"{from}-{to}"`` rounded to integers where that keeps them unique.

    Narrow ranges can round two buckets to the same label; precision is then
    increased until every bucket has its own key.
    """
    bounds = [
        (low + (i / bucket_count) * width, low + ((i + 1) / bucket_count) * width)
        for i in range(bucket_count)
    ]
    for precision in range(0, 7):
        labels = [
            f"{_format_bound(lo, precision)}-{_format_bound(hi, precision)}"
            for lo, hi in bounds
        ]
        if len(set(labels)) == bucket_count:
            return labels
    return [f"{label} #{i + 1}" for i, label in enumerate(labels)]


def create_histogram_buckets(
    counts: Mapping[str, int], bucket_count: int = config.HISTOGRAM_BUCKET_COUNT
) -> Optional[Dict[str, int]]:
    """Bucket the numeric keys of *counts* into *bucket_count* equal-width bins.

    Each key parseable as a finite number contributes ``count`` samples.
    Returns *None* when there are no numeric samples; otherwise a dict with
    exactly *bucket_count* entries in ascending order, empty buckets included.
    """
    samples: List[float] = []
    for raw, count in counts.items():
        value = _parse_number(raw)
        if value is not None:
            samples.extend([value] * count)

    if not samples:
        return None

    low = min(samples)
    high = max(samples)
    width = (high - low) or 1

    labels = _bucket_labels(low, width, bucket_count)
    buckets: Dict[str, int] = {label: 0 for label in labels}
    for value in samples:
        index = min(bucket_count - 1, math.floor((value - low) / width * bucket_count))
        buckets[labels[index]] += 1
    return buckets
