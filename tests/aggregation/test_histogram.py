"""Unit tests for aggregation.histogram."""
from __future__ import annotations

from survey_insights.aggregation.histogram import create_histogram_buckets


def test_ten_buckets_spanning_sample_range():
    counts = {"1": 2, "2": 1, "3": 1, "5": 1, "8": 1, "9": 1}

    buckets = create_histogram_buckets(counts)

    assert buckets is not None
    assert list(buckets) == [
        "1-2",
        "2-3",
        "3-3",
        "3-4",
        "4-5",
        "5-6",
        "6-7",
        "7-7",
        "7-8",
        "8-9",
    ]
    assert sum(buckets.values()) == 7
    assert buckets["1-2"] == 2
    assert buckets["5-6"] == 1
    # the maximum sample is clamped into the last bucket
    assert buckets["8-9"] == 1
    # empty buckets are kept
    assert buckets["4-5"] == 0


def test_equal_samples_use_unit_width():
    buckets = create_histogram_buckets({"5": 4})

    assert buckets is not None
    assert len(buckets) == 10
    assert sum(buckets.values()) == 4
    assert next(iter(buckets.items())) == ("5.0-5.1", 4)


def test_non_numeric_keys_are_ignored():
    buckets = create_histogram_buckets({"10": 1, "abc": 3, "": 2, "20.5": 1, "nan": 1})

    assert buckets is not None
    assert sum(buckets.values()) == 2


def test_underscore_digit_groups_are_not_numbers():
    buckets = create_histogram_buckets({"1_000": 5, "2": 1, "4": 1})

    assert buckets is not None
    assert sum(buckets.values()) == 2
    assert float(list(buckets)[-1].rsplit("-", 1)[1]) == 4
    assert create_histogram_buckets({"1_000": 1}) is None


def test_no_numeric_samples_returns_none():
    assert create_histogram_buckets({"n/a": 2}) is None
    assert create_histogram_buckets({}) is None


def test_negative_and_fractional_values():
    buckets = create_histogram_buckets({"-10": 1, "0.5": 3, "10": 1})

    assert buckets is not None
    assert len(buckets) == 10
    assert list(buckets)[0] == "-10--8"
    assert sum(buckets.values()) == 5
