"""
Tests for timespine.core.hashing module.

Tests cover:
- Deterministic hash computation
- Hash length options
- Key and series fingerprints
- keys_equal / series_equal precompare
"""

from datetime import datetime, timedelta, timezone
from decimal import Decimal

from timespine.core.hashing import (
    compute_hash,
    fingerprint_keys,
    fingerprint_series,
    keys_equal,
    series_equal,
)
from timespine.core.index import KeyIndex
from timespine.core.series import TimeSeries


class TestComputeHash:
    """Tests for compute_hash function."""

    def test_default_length(self):
        result = compute_hash("test_value")
        assert isinstance(result, str)
        assert len(result) == 32

    def test_deterministic(self):
        assert compute_hash("a", "b", "c") == compute_hash("a", "b", "c")

    def test_order_matters(self):
        assert compute_hash("a", "b", "c") != compute_hash("c", "b", "a")

    def test_custom_length(self):
        assert len(compute_hash("value", length=16)) == 16

    def test_known_digest(self):
        digest = compute_hash("2024-01-02T09:30:00", "minute_bars", 5)
        assert digest == "9981568e1b04dcb9da6ff5aef49ec7d4"

    def test_mixed_types(self):
        assert compute_hash("ES", 1000, 2.5) == compute_hash("ES", 1000, 2.5)


class TestFingerprints:
    """Tests for key and series fingerprints."""

    def test_sequence_type_irrelevant(self):
        assert fingerprint_keys([1, 2, 3]) == fingerprint_keys((1, 2, 3))

    def test_order_matters(self):
        assert fingerprint_keys([1, 2, 3]) != fingerprint_keys([3, 2, 1])

    def test_key_types_distinguished(self):
        assert fingerprint_keys([1]) != fingerprint_keys(["1"])

    def test_boundaries_distinguished(self):
        assert fingerprint_keys(["ab", "c"]) != fingerprint_keys(["a", "bc"])

    def test_series_fingerprint_covers_values(self):
        a = TimeSeries.from_parallel_sequences([1, 2], ["x", "y"])
        b = TimeSeries.from_parallel_sequences([1, 2], ["x", "z"])
        assert fingerprint_series(a) != fingerprint_series(b)
        assert fingerprint_series(a) == fingerprint_series(
            TimeSeries.from_parallel_sequences([1, 2], ["x", "y"])
        )


class TestPrecompare:
    """Tests for keys_equal / series_equal."""

    def test_keys_equal_same_object(self):
        idx = KeyIndex([1, 2])
        assert keys_equal(idx, idx)

    def test_keys_equal_content(self):
        assert keys_equal(KeyIndex([1, 2]), KeyIndex([1, 2]))
        assert not keys_equal(KeyIndex([1, 2]), KeyIndex([1, 3]))
        assert not keys_equal(KeyIndex([1, 2]), KeyIndex([1]))

    def test_series_equal(self):
        a = TimeSeries.from_parallel_sequences([1, 2], [1.0, 2.0])
        assert series_equal(a, TimeSeries.from_parallel_sequences([1, 2], [1.0, 2.0]))
        assert not series_equal(a, TimeSeries.from_parallel_sequences([1, 2], [1.0, 2.5]))
        assert not series_equal(a, TimeSeries.from_parallel_sequences([1, 3], [1.0, 2.0]))

    def test_equal_keys_with_different_repr(self):
        assert keys_equal(KeyIndex([0.0, 1.0]), KeyIndex([-0.0, 1.0]))
        assert keys_equal(KeyIndex([Decimal("1.0")]), KeyIndex([Decimal("1.00")]))

    def test_unhashable_keys_compared_element_wise(self):
        assert keys_equal(KeyIndex([[1], [2]]), KeyIndex([[1], [2]]))
        assert not keys_equal(KeyIndex([[1], [2]]), KeyIndex([[1], [3]]))
        assert KeyIndex([[1]]).key_hash() is None


class TestSeriesEqualityAcrossRepresentations:
    """Series whose keys are == but print differently are equal."""

    def test_signed_zero(self):
        a = TimeSeries.from_parallel_sequences([0.0, 1.0], ["x", "y"])
        b = TimeSeries.from_parallel_sequences([-0.0, 1.0], ["x", "y"])
        assert a.keys == b.keys
        assert a == b

    def test_same_instant_in_two_zones(self):
        utc = datetime(2024, 1, 2, 14, 30, tzinfo=timezone.utc)
        eastern = datetime(2024, 1, 2, 9, 30, tzinfo=timezone(timedelta(hours=-5)))
        a = TimeSeries.from_parallel_sequences([utc], [1.0])
        b = TimeSeries.from_parallel_sequences([eastern], [1.0])
        assert a == b
        assert series_equal(a, b)

    def test_decimal_scale(self):
        a = TimeSeries.from_parallel_sequences([Decimal("1.0")], ["x"])
        b = TimeSeries.from_parallel_sequences([Decimal("1.00")], ["x"])
        assert a == b
