"""
Positional transforms: map, shift and skip_apply.

``map`` keeps every key and returns a series. ``shift`` and ``skip_apply``
drop points at one end, so they return a lazy ``PointStream`` that the caller
collects.

Shift direction::

    keys    t0  t1  t2  t3  t4
    values   1   2   3   4   5

    shift(1)   (t0,2) (t1,3) (t2,4) (t3,5)          lead: next value pulled back
    shift(-1)         (t1,1) (t2,2) (t3,3) (t4,4)   lag: prior value pushed forward
    shift(5)   empty

Examples:
    >>> ts = TimeSeries.from_parallel_sequences([1, 2, 3, 4], [10, 11, 13, 16])
    >>> ts.skip_apply(1, lambda prev, cur: cur - prev).collect().values
    (1, 2, 3)
"""

from __future__ import annotations

from collections.abc import Callable, Iterator
from typing import Any, TypeVar

from timespine.core.collection import PointStream
from timespine.core.datapoint import DataPoint
from timespine.core.errors import InvalidParameterError
from timespine.core.series import TimeSeries, require_ordered

K = TypeVar("K")
V = TypeVar("V")
R = TypeVar("R")


def map_values(series: TimeSeries[K, V], f: Callable[[V], R]) -> TimeSeries[K, R]:
    """Apply ``f`` to every value; keys are shared with the input."""
    require_ordered("map", series)
    return TimeSeries._from_trusted(series.index, tuple(f(v) for v in series.values))


def map_with_key(series: TimeSeries[K, V], f: Callable[[K, V], R]) -> TimeSeries[K, R]:
    """Apply ``f(key, value)`` to every point."""
    require_ordered("map_with_key", series)
    return TimeSeries._from_trusted(
        series.index, tuple(f(k, v) for k, v in zip(series.keys, series.values))
    )


def shift(series: TimeSeries[K, V], offset: int) -> PointStream[K, V]:
    """Pair ``key[i]`` with ``value[i + offset]`` wherever both positions exist."""
    require_ordered("shift", series)
    return PointStream(_shifted(series.keys, series.values, offset))


def _shifted(keys: tuple[Any, ...], values: tuple[Any, ...], offset: int) -> Iterator[DataPoint]:
    n = len(keys)
    start = max(0, -offset)
    stop = min(n, n - offset)
    for i in range(start, stop):
        yield DataPoint(keys[i], values[i + offset])


def skip_apply(
    series: TimeSeries[K, V], n: int, f: Callable[[V, V], R]
) -> PointStream[K, R]:
    """
    For every position ``i >= n`` emit ``(key[i], f(value[i - n], value[i]))``.

    ``n == 0`` pairs each value with itself.

    Raises:
        InvalidParameterError: if ``n`` is negative.
    """
    if n < 0:
        raise InvalidParameterError("n", n, "skip_apply distance must be >= 0")
    require_ordered("skip_apply", series)
    return PointStream(_skipped(series.keys, series.values, n, f))


def _skipped(
    keys: tuple[Any, ...], values: tuple[Any, ...], n: int, f: Callable[[Any, Any], Any]
) -> Iterator[DataPoint]:
    for i in range(n, len(keys)):
        yield DataPoint(keys[i], f(values[i - n], values[i]))


__all__ = ["map_values", "map_with_key", "shift", "skip_apply"]
