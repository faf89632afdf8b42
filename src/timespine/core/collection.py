"""
Collection protocol - turning streams of points into series.

Transforms that change the number of points (shift, skip_apply, rolling) hand
back a lazy ``PointStream``. Callers materialize it through one of two paths:

- ``collect_unchecked``: O(n) pass-through; the producer vouches for order.
  Every built-in transform preserves key order, so this is the default.
- ``collect_checked``: materializes, stable-sorts by key if needed and
  resolves duplicate keys according to a ``DuplicatePolicy``.

Manifesto:
    Parallel or external stages break the ordering guarantee; the checked
    path is how their output comes back into the library. Everything else
    should pay nothing for checks it does not need.

Architecture:
    ::

        series.shift(1) ──► PointStream ──┬── collect()            ──► TimeSeries
                                          ├── collect_unchecked()  ──► TimeSeries
                                          └── collect_checked()    ──► TimeSeries
                                                    │
                                           sort (stable) if unordered
                                           REJECT | KEEP_FIRST | KEEP_LAST

        ordered_prefix(points)   yields until the first key that goes backwards

Examples:
    >>> pts = [DataPoint(3, "c"), DataPoint(1, "a"), DataPoint(2, "b")]
    >>> collect_checked(pts).keys
    (1, 2, 3)
    >>> dup = [DataPoint(1, "a"), DataPoint(1, "b")]
    >>> collect_checked(dup, on_duplicate=DuplicatePolicy.KEEP_LAST).values
    ('b',)

Tags:
    collection, ordering, streams, timespine

Doc-Types:
    - API Reference
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from enum import Enum
from itertools import groupby
from operator import attrgetter
from typing import Generic, TypeVar

from timespine.core.datapoint import DataPoint
from timespine.core.errors import DuplicateKeyError
from timespine.core.index import KeyIndex, find_violation
from timespine.core.logging import get_logger
from timespine.core.series import TimeSeries

logger = get_logger(__name__)

K = TypeVar("K")
V = TypeVar("V")

_by_key = attrgetter("key")


class DuplicatePolicy(str, Enum):
    """What ``collect_checked`` does with points that share a key."""

    REJECT = "reject"
    KEEP_FIRST = "keep_first"
    KEEP_LAST = "keep_last"


def _build(points: list[DataPoint[K, V]]) -> TimeSeries[K, V]:
    return TimeSeries._from_trusted(
        KeyIndex(p.key for p in points),
        tuple(p.value for p in points),
    )


def collect_unchecked(points: Iterable[DataPoint[K, V]]) -> TimeSeries[K, V]:
    """Materialize points as-is. Order is the caller's responsibility."""
    return _build(list(points))


def collect_checked(
    points: Iterable[DataPoint[K, V]],
    *,
    on_duplicate: DuplicatePolicy | str = DuplicatePolicy.REJECT,
) -> TimeSeries[K, V]:
    """
    Materialize points into a strictly ascending series.

    Out-of-order input is stable-sorted by key. Points sharing a key are then
    rejected or collapsed according to ``on_duplicate``; with ``KEEP_FIRST`` /
    ``KEEP_LAST`` the survivor is the first / last of them in input order.

    Raises:
        DuplicateKeyError: with ``DuplicatePolicy.REJECT`` when two points
            share a key. The position refers to the sorted sequence.
    """
    policy = DuplicatePolicy(on_duplicate)
    materialized = list(points)
    received = len(materialized)
    violation = find_violation(p.key for p in materialized)
    if violation is not None:
        materialized.sort(key=_by_key)
        materialized = _resolve_duplicates(materialized, policy)

    logger.debug(
        "series_collected",
        received=received,
        kept=len(materialized),
        reordered=violation is not None,
    )
    return _build(materialized)


def _resolve_duplicates(
    points: list[DataPoint[K, V]], policy: DuplicatePolicy
) -> list[DataPoint[K, V]]:
    resolved: list[DataPoint[K, V]] = []
    position = 0
    for key, group in groupby(points, key=_by_key):
        run = list(group)
        if len(run) > 1:
            if policy is DuplicatePolicy.REJECT:
                raise DuplicateKeyError(position + 1, key, operation="collect_checked")
            resolved.append(run[0] if policy is DuplicatePolicy.KEEP_FIRST else run[-1])
        else:
            resolved.append(run[0])
        position += len(run)
    return resolved


def ordered_prefix(points: Iterable[DataPoint[K, V]]) -> Iterator[DataPoint[K, V]]:
    """
    Yield points until the first key that sorts before its predecessor.

    Equal keys are let through; pair with ``collect_checked`` to resolve them.
    """
    prior: K | None = None
    started = False
    for point in points:
        if started and point.key < prior:  # type: ignore[operator]
            return
        prior = point.key
        started = True
        yield point


class PointStream(Generic[K, V]):
    """
    Single-pass lazy stream of points produced by a transform.

    Iterating or collecting consumes the stream; collecting it a second time
    yields an empty series.
    """

    __slots__ = ("_points",)

    def __init__(self, points: Iterable[DataPoint[K, V]]):
        self._points: Iterator[DataPoint[K, V]] = iter(points)

    def __iter__(self) -> Iterator[DataPoint[K, V]]:
        return self._points

    def collect_unchecked(self) -> TimeSeries[K, V]:
        return collect_unchecked(self._points)

    def collect_checked(
        self, *, on_duplicate: DuplicatePolicy | str = DuplicatePolicy.REJECT
    ) -> TimeSeries[K, V]:
        return collect_checked(self._points, on_duplicate=on_duplicate)

    def collect(self) -> TimeSeries[K, V]:
        """Unchecked collect; built-in transforms preserve key order."""
        return self.collect_unchecked()


__all__ = [
    "DuplicatePolicy",
    "PointStream",
    "collect_checked",
    "collect_unchecked",
    "ordered_prefix",
]
