"""
TimeSeries - an immutable, key-ordered sequence of data points.

``TimeSeries[K, V]`` pairs a ``KeyIndex[K]`` with a tuple of values of the same
length. Position 0 holds the earliest key. Every operation returns a new
series (or a lazy ``PointStream``); nothing mutates a series in place.

Manifesto:
    Ordering is established once, at construction, and then trusted:

    - **Checked or unchecked, never implicit:** ``from_points`` validates,
      ``from_points_unchecked`` trusts the caller; there is no silent sort
    - **Fail at the boundary:** a malformed input raises at construction
      instead of producing an empty or half-built series
    - **Pure reads:** lookups are binary searches over the key index
    - **Validation mode:** with ``TIMESPINE_VALIDATE_INPUTS=true`` every
      engine re-checks its inputs before running

Architecture:
    ::

        ┌──────────────────────────────────────────────────────────────┐
        │                        TimeSeries[K, V]                       │
        ├──────────────────────────────────────────────────────────────┤
        │  index : KeyIndex[K]      (t0 < t1 < ... < tn)               │
        │  values: tuple[V, ...]    (v0,  v1, ...,  vn)                │
        ├──────────────────────────────────────────────────────────────┤
        │  lookups     at / at_or_first_prior / at_index / between     │
        │  windowing   map / shift / skip_apply / apply_rolling        │
        │  joins       cross_apply_inner / cross_apply_left /          │
        │              merge_apply_asof / interweave                   │
        │  resample    resample_and_agg                                │
        └──────────────────────────────────────────────────────────────┘

Examples:
    >>> ts = TimeSeries.from_parallel_sequences([1, 2, 3], [10.0, 20.0, 30.0])
    >>> ts.at(2)
    20.0
    >>> ts.at_or_first_prior(2.5)
    20.0
    >>> ts.shift(1).collect()
    TimeSeries([(1, 20.0), (2, 30.0)])

Tags:
    time-series, container, ordering, timespine

Doc-Types:
    - API Reference
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Iterator, Sequence
from typing import TYPE_CHECKING, Any, Generic, TypeVar

from timespine.core.datapoint import DataPoint
from timespine.core.errors import LengthMismatchError
from timespine.core.hashing import series_equal
from timespine.core.index import KeyIndex
from timespine.core.settings import get_settings

if TYPE_CHECKING:
    from timespine.core.collection import PointStream
    from timespine.core.joins import JoinStrategy, MergeAsofMode

K = TypeVar("K")
V = TypeVar("V")
V2 = TypeVar("V2")
R = TypeVar("R")
K2 = TypeVar("K2")

_REPR_FULL = 10
_REPR_EDGE = 5


def require_ordered(operation: str, *series: TimeSeries[Any, Any]) -> None:
    """In validation mode, raise if any input is not strictly ascending."""
    if not get_settings().validate_inputs:
        return
    for each in series:
        each.validate(operation=operation)


class TimeSeries(Generic[K, V]):
    """Immutable ordered container of ``DataPoint[K, V]``."""

    __slots__ = ("_index", "_values")

    _index: KeyIndex[K]
    _values: tuple[V, ...]

    def __init__(self, keys: Iterable[K] = (), values: Iterable[V] = ()):
        keys = tuple(keys)
        values = tuple(values)
        if len(keys) != len(values):
            raise LengthMismatchError(len(keys), len(values), operation="TimeSeries")
        self._index = KeyIndex(keys)
        self._values = values

    @classmethod
    def _from_trusted(cls, index: KeyIndex[K], values: tuple[V, ...]) -> TimeSeries[K, V]:
        series = cls.__new__(cls)
        series._index = index
        series._values = values
        return series

    # ── Construction ─────────────────────────────────────────────────

    @classmethod
    def empty(cls) -> TimeSeries[K, V]:
        return cls._from_trusted(KeyIndex(), ())

    @classmethod
    def from_parallel_sequences(
        cls,
        keys: Sequence[K] | Iterable[K],
        values: Sequence[V] | Iterable[V],
        *,
        check_order: bool = False,
    ) -> TimeSeries[K, V]:
        """
        Build a series from a key sequence and a value sequence.

        Raises:
            LengthMismatchError: if the sequences differ in length.
            UnorderedInputError / DuplicateKeyError: with ``check_order=True``
                when the keys are not strictly ascending.
        """
        keys = tuple(keys)
        values = tuple(values)
        if len(keys) != len(values):
            raise LengthMismatchError(
                len(keys), len(values), operation="from_parallel_sequences"
            )
        index = KeyIndex(keys)
        if check_order:
            index.validate(operation="from_parallel_sequences")
        return cls._from_trusted(index, values)

    @classmethod
    def from_points(cls, points: Iterable[DataPoint[K, V]]) -> TimeSeries[K, V]:
        """Build from points that must already be strictly ascending by key."""
        series = cls.from_points_unchecked(points)
        series._index.validate(operation="from_points")
        return series

    @classmethod
    def from_points_unchecked(cls, points: Iterable[DataPoint[K, V]]) -> TimeSeries[K, V]:
        """Build from points without checking order."""
        materialized = list(points)
        return cls._from_trusted(
            KeyIndex(p.key for p in materialized),
            tuple(p.value for p in materialized),
        )

    # ── Container protocol ───────────────────────────────────────────

    @property
    def index(self) -> KeyIndex[K]:
        return self._index

    @property
    def keys(self) -> tuple[K, ...]:
        return self._index.keys

    @property
    def values(self) -> tuple[V, ...]:
        return self._values

    def __len__(self) -> int:
        return len(self._values)

    def __iter__(self) -> Iterator[DataPoint[K, V]]:
        return map(DataPoint, self._index.keys, self._values)

    def points(self) -> Iterator[DataPoint[K, V]]:
        """Iterate points in key order."""
        return iter(self)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, TimeSeries):
            return NotImplemented
        return series_equal(self, other)

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        pairs = [f"({k!r}, {v!r})" for k, v in zip(self._index.keys, self._values)]
        if len(pairs) >= _REPR_FULL:
            pairs = pairs[:_REPR_EDGE] + ["..."] + pairs[-_REPR_EDGE:]
        return f"{type(self).__name__}([{', '.join(pairs)}])"

    # ── Ordering ─────────────────────────────────────────────────────

    def is_ordered(self) -> bool:
        """True if keys are strictly ascending."""
        return self._index.is_monotonic()

    def validate(self, operation: str | None = None) -> None:
        """Raise ``UnorderedInputError`` / ``DuplicateKeyError`` on the first violation."""
        self._index.validate(operation=operation)

    def sample_rates(self) -> list[tuple[Any, int]]:
        return self._index.sample_rates()

    def is_mono_intervaled(self) -> bool:
        return self._index.is_mono_intervaled()

    # ── Lookups ──────────────────────────────────────────────────────

    def at(self, key: K) -> V | None:
        """Value at exactly ``key``, or None."""
        pos = self._index.position_of(key)
        return None if pos is None else self._values[pos]

    def at_or_first_prior(self, key: K) -> V | None:
        """Value at the greatest key <= ``key``; None if ``key`` precedes the first key."""
        pos = self._index.position_at_or_before(key)
        return None if pos is None else self._values[pos]

    def at_index(self, position: int) -> DataPoint[K, V] | None:
        """Point at ``position``; None when out of bounds, including negatives."""
        if 0 <= position < len(self._values):
            return DataPoint(self._index[position], self._values[position])
        return None

    def first(self) -> DataPoint[K, V] | None:
        return self.at_index(0)

    def last(self) -> DataPoint[K, V] | None:
        return self.at_index(len(self._values) - 1)

    def between(self, start: K, end: K) -> TimeSeries[K, V]:
        """Sub-series with ``start <= key <= end``."""
        lo = self._index.position_at_or_after(start)
        hi = self._index.position_at_or_before(end)
        if lo is None or hi is None or lo > hi:
            return type(self).empty()
        return self._from_trusted(self._index[lo : hi + 1], self._values[lo : hi + 1])

    # ── Windowing ────────────────────────────────────────────────────

    def map(self, f: Callable[[V], R]) -> TimeSeries[K, R]:
        from timespine.core.transforms import map_values

        return map_values(self, f)

    def map_with_key(self, f: Callable[[K, V], R]) -> TimeSeries[K, R]:
        from timespine.core.transforms import map_with_key

        return map_with_key(self, f)

    def shift(self, offset: int) -> PointStream[K, V]:
        from timespine.core.transforms import shift

        return shift(self, offset)

    def skip_apply(self, n: int, f: Callable[[V, V], R]) -> PointStream[K, R]:
        from timespine.core.transforms import skip_apply

        return skip_apply(self, n, f)

    def apply_rolling(self, window: int, f: Callable[[list[V]], R]) -> PointStream[K, R]:
        from timespine.core.rolling import apply_rolling

        return apply_rolling(self, window, f)

    def apply_updating_rolling(
        self,
        window: int,
        add: Callable[[R | None, V], R | None],
        remove: Callable[[R | None, V], R | None],
    ) -> PointStream[K, R]:
        from timespine.core.rolling import apply_updating_rolling

        return apply_updating_rolling(self, window, add, remove)

    # ── Joins ────────────────────────────────────────────────────────

    def cross_apply_inner(
        self,
        other: TimeSeries[K, V2],
        f: Callable[[V, V2], R],
        *,
        strategy: JoinStrategy | str | None = None,
    ) -> TimeSeries[K, R]:
        from timespine.core.joins import cross_apply_inner

        return cross_apply_inner(self, other, f, strategy=strategy)

    def cross_apply_left(
        self,
        other: TimeSeries[K, V2],
        f: Callable[[V, V2 | None], R],
        *,
        strategy: JoinStrategy | str | None = None,
    ) -> TimeSeries[K, R]:
        from timespine.core.joins import cross_apply_left

        return cross_apply_left(self, other, f, strategy=strategy)

    def merge_apply_asof(
        self,
        other: TimeSeries[K, V2],
        f: Callable[[V, V2 | None], R],
        *,
        mode: MergeAsofMode | str | None = None,
        matcher: Callable[[K, K], bool] | None = None,
    ) -> TimeSeries[K, R]:
        from timespine.core.joins import merge_apply_asof

        return merge_apply_asof(self, other, f, mode=mode, matcher=matcher)

    def interweave(
        self,
        other: TimeSeries[K, V],
        select: Callable[[DataPoint[K, V], DataPoint[K, V]], DataPoint[K, V]],
    ) -> TimeSeries[K, V]:
        from timespine.core.joins import interweave

        return interweave(self, other, select)

    # ── Resample ─────────────────────────────────────────────────────

    def resample_and_agg(
        self,
        bucket_fn: Callable[[K], K2],
        agg_fn: Callable[[list[DataPoint[K, V]]], R],
    ) -> TimeSeries[K2, R]:
        from timespine.core.resample import resample_and_agg

        return resample_and_agg(self, bucket_fn, agg_fn)


__all__ = ["TimeSeries", "require_ordered"]
