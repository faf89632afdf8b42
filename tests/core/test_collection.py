"""
Tests for timespine.core.collection module.

Tests cover:
- collect_unchecked pass-through
- collect_checked sorting and duplicate policies
- ordered_prefix salvage of malformed streams
- PointStream single-pass semantics
"""

import pytest

from timespine.core.collection import (
    DuplicatePolicy,
    PointStream,
    collect_checked,
    collect_unchecked,
    ordered_prefix,
)
from timespine.core.datapoint import DataPoint
from timespine.core.errors import DuplicateKeyError


def points(*pairs):
    return [DataPoint(k, v) for k, v in pairs]


class TestCollectUnchecked:
    def test_pass_through(self):
        ts = collect_unchecked(points((3, "c"), (1, "a")))
        assert ts.keys == (3, 1)
        assert ts.values == ("c", "a")

    def test_empty(self):
        assert len(collect_unchecked([])) == 0


class TestCollectChecked:
    def test_already_ordered(self):
        ts = collect_checked(points((1, "a"), (2, "b")))
        assert ts.keys == (1, 2)

    def test_round_trip_through_points(self, five_points, minute_series):
        assert collect_checked(five_points.points()) == five_points
        assert collect_checked(minute_series.points()) == minute_series

    def test_sorts_unordered(self):
        ts = collect_checked(points((3, "c"), (1, "a"), (2, "b")))
        assert ts.keys == (1, 2, 3)
        assert ts.values == ("a", "b", "c")
        assert ts.is_ordered()

    def test_rejects_duplicates_by_default(self):
        with pytest.raises(DuplicateKeyError) as exc_info:
            collect_checked(points((2, "x"), (1, "a"), (2, "y")))
        assert exc_info.value.key == 2
        assert exc_info.value.position == 2
        assert exc_info.value.context.operation == "collect_checked"

    def test_keep_first(self):
        ts = collect_checked(
            points((2, "x"), (1, "a"), (2, "y")), on_duplicate=DuplicatePolicy.KEEP_FIRST
        )
        assert ts.values == ("a", "x")

    def test_keep_last(self):
        ts = collect_checked(points((2, "x"), (1, "a"), (2, "y")), on_duplicate="keep_last")
        assert ts.values == ("a", "y")

    def test_generator_input(self):
        ts = collect_checked(DataPoint(k, k) for k in (5, 4, 3))
        assert ts.keys == (3, 4, 5)


class TestOrderedPrefix:
    def test_stops_at_first_backward_key(self):
        prefix = list(ordered_prefix(DataPoint(k, k) for k in (1, 2, 3, 4, 0)))
        assert [p.key for p in prefix] == [1, 2, 3, 4]

    def test_equal_keys_let_through(self):
        prefix = list(ordered_prefix(DataPoint(k, k) for k in (1, 2, 2, 3, 1, 5)))
        assert [p.key for p in prefix] == [1, 2, 2, 3]

    def test_empty(self):
        assert list(ordered_prefix([])) == []

    def test_lazy(self):
        def source():
            yield DataPoint(1, "a")
            yield DataPoint(0, "b")
            raise AssertionError("read past the first backward key")

        assert [p.key for p in ordered_prefix(source())] == [1]


class TestPointStream:
    def test_collect_is_unchecked(self):
        stream = PointStream(points((2, "b"), (1, "a")))
        assert stream.collect().keys == (2, 1)

    def test_collect_checked(self):
        stream = PointStream(points((2, "b"), (1, "a")))
        assert stream.collect_checked().keys == (1, 2)

    def test_single_pass(self):
        stream = PointStream(points((1, "a")))
        assert len(stream.collect()) == 1
        assert len(stream.collect()) == 0

    def test_iterable(self):
        stream = PointStream(points((1, "a"), (2, "b")))
        assert [p.value for p in stream] == ["a", "b"]
