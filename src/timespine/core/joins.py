"""
Join engine - inner, left, as-of and n-ary joins over ordered series.

Every join is computed in two steps: the engine matches positions of the two
key indexes into ``IndexPair(left, right)`` values, then the caller's function
combines the values at those positions into the output series. Output is
always keyed and ordered by the left input.

Manifesto:
    Joins on sorted keys should cost one pass, not a nested loop:

    - **Merge:** two cursors walk both indexes in step, O(n + m)
    - **Hash:** a dict over the smaller input, one probe pass over the
      larger, O(n + m) with a better constant when sizes are lopsided
    - **Same answer:** both strategies emit identical, key-ordered pairs
    - **As-of:** a single forward scan with a trailing pointer; the
      tolerance check is a caller-supplied matcher
    - **No match is None:** an unmatched left position is never an error

Architecture:
    ::

        ┌─────────────────────────────────────────────────────────────┐
        │                         JoinEngine                           │
        ├─────────────────────────────────────────────────────────────┤
        │ resolve_strategy()                                           │
        │     AUTO → HASH   if larger/smaller >= hash_join_ratio       │
        │                   and keys are hashable                      │
        │     AUTO → MERGE  otherwise                                  │
        │                                                              │
        │ inner_pairs()  left_pairs()  asof_pairs()                    │
        │     │               │              │                         │
        │     ▼               ▼              ▼                         │
        │  IndexPair(i, j)  IndexPair(i, j | None)                     │
        └─────────────────────────────────────────────────────────────┘
                          │
                          ▼
        TimeSeries(left.keys[i], f(left.values[i], right.values[j]))

        As-of roll policies (left key L, right keys R):
            ROLL_PRIOR   greatest R <= L
            ROLL_NEXT    least    R >= L
            NO_ROLL      R == L

Examples:
    >>> left = TimeSeries.from_parallel_sequences([1, 2, 3, 4, 5], [1.0, 2.0, 3.0, 4.0, 5.0])
    >>> right = TimeSeries.from_parallel_sequences([2, 3, 4, 5, 6], [2.0, 3.0, 4.0, 5.0, 6.0])
    >>> left.cross_apply_inner(right, lambda a, b: (a, b)).keys
    (2, 3, 4, 5)
    >>> left.cross_apply_left(right, lambda a, b: (a, b)).at(1)
    (1.0, None)

    As-of with a one-unit tolerance:

    >>> from timespine.core.keyutils import within
    >>> left.merge_apply_asof(right, lambda a, b: b, matcher=within(1)).values
    (None, 2.0, 3.0, 4.0, 5.0)

Tags:
    joins, merge-join, hash-join, asof-join, timespine

Doc-Types:
    - API Reference
    - Join Guide
"""

from __future__ import annotations

from collections.abc import Callable, Iterator, Sequence
from dataclasses import dataclass
from enum import Enum
from typing import Any, TypeVar

from timespine.core.collection import collect_unchecked
from timespine.core.datapoint import DataPoint
from timespine.core.errors import InvalidParameterError
from timespine.core.hashing import keys_equal
from timespine.core.index import KeyIndex
from timespine.core.logging import get_logger
from timespine.core.series import TimeSeries, require_ordered
from timespine.core.settings import TimespineSettings, get_settings

logger = get_logger(__name__)

K = TypeVar("K")
V = TypeVar("V")
V2 = TypeVar("V2")
R = TypeVar("R")


class JoinStrategy(str, Enum):
    """How key matches are found."""

    AUTO = "auto"
    MERGE = "merge"
    HASH = "hash"


class MergeAsofMode(str, Enum):
    """Which right key an as-of join rolls to."""

    ROLL_PRIOR = "roll_prior"
    ROLL_NEXT = "roll_next"
    NO_ROLL = "no_roll"


@dataclass(frozen=True, slots=True)
class IndexPair:
    """Matched positions; ``right`` is None for an unmatched left position."""

    left: int
    right: int | None


class JoinEngine:
    """
    Positional matcher for two key indexes.

    Reads ``hash_join_ratio``, ``hash_precompare`` and ``default_join_strategy``
    from the settings it is built with (the active settings by default).
    """

    def __init__(self, settings: TimespineSettings | None = None):
        self.settings = settings or get_settings()

    # ── Strategy ─────────────────────────────────────────────────────

    def resolve_strategy(
        self,
        left: KeyIndex[Any],
        right: KeyIndex[Any],
        strategy: JoinStrategy | str | None = None,
    ) -> JoinStrategy:
        """Turn AUTO (or None) into MERGE or HASH for these inputs."""
        chosen = JoinStrategy(strategy or self.settings.default_join_strategy)
        hashable = left.key_hash() is not None and right.key_hash() is not None
        if chosen is JoinStrategy.HASH and not hashable:
            raise InvalidParameterError("strategy", chosen.value, "hash join needs hashable keys")
        if chosen is not JoinStrategy.AUTO:
            return chosen
        smaller, larger = sorted((len(left), len(right)))
        if hashable and smaller and larger / smaller >= self.settings.hash_join_ratio:
            return JoinStrategy.HASH
        return JoinStrategy.MERGE

    def _identical(self, left: KeyIndex[Any], right: KeyIndex[Any]) -> bool:
        return self.settings.hash_precompare and keys_equal(left, right)

    # ── Inner / left ─────────────────────────────────────────────────

    def inner_pairs(
        self,
        left: KeyIndex[Any],
        right: KeyIndex[Any],
        strategy: JoinStrategy | str | None = None,
    ) -> tuple[str, list[IndexPair]]:
        """Positions of keys present in both indexes, plus the strategy used."""
        if self._identical(left, right):
            return "identity", [IndexPair(i, i) for i in range(len(left))]
        resolved = self.resolve_strategy(left, right, strategy)
        if resolved is JoinStrategy.HASH:
            return resolved.value, list(_hash_inner(left.keys, right.keys))
        return resolved.value, list(_merge_inner(left.keys, right.keys))

    def left_pairs(
        self,
        left: KeyIndex[Any],
        right: KeyIndex[Any],
        strategy: JoinStrategy | str | None = None,
    ) -> tuple[str, list[IndexPair]]:
        """One pair per left position, plus the strategy used."""
        if self._identical(left, right):
            return "identity", [IndexPair(i, i) for i in range(len(left))]
        resolved = self.resolve_strategy(left, right, strategy)
        if resolved is JoinStrategy.HASH:
            return resolved.value, _hash_left(left.keys, right.keys)
        return resolved.value, list(_merge_left(left.keys, right.keys))

    # ── As-of ────────────────────────────────────────────────────────

    def asof_pairs(
        self,
        left: KeyIndex[Any],
        right: KeyIndex[Any],
        mode: MergeAsofMode | str | None = None,
        matcher: Callable[[Any, Any], bool] | None = None,
    ) -> list[IndexPair]:
        """One pair per left position, matched by roll policy and matcher."""
        mode = MergeAsofMode(mode or MergeAsofMode.ROLL_PRIOR)
        if mode is MergeAsofMode.NO_ROLL and matcher is not None:
            raise InvalidParameterError(
                "matcher", matcher, "a matcher cannot be combined with NO_ROLL"
            )
        if mode is MergeAsofMode.ROLL_PRIOR:
            pairs = _roll_prior(left.keys, right.keys)
        else:
            pairs = _roll_next(left.keys, right.keys, exact=mode is MergeAsofMode.NO_ROLL)
        if matcher is None:
            return list(pairs)
        return [
            pair
            if pair.right is None or matcher(left.keys[pair.left], right.keys[pair.right])
            else IndexPair(pair.left, None)
            for pair in pairs
        ]


# =============================================================================
# Matching kernels
# =============================================================================


def _merge_inner(left: Sequence[Any], right: Sequence[Any]) -> Iterator[IndexPair]:
    i = j = 0
    n, m = len(left), len(right)
    while i < n and j < m:
        a, b = left[i], right[j]
        if a < b:
            i += 1
        elif b < a:
            j += 1
        else:
            yield IndexPair(i, j)
            i += 1
            j += 1


def _merge_left(left: Sequence[Any], right: Sequence[Any]) -> Iterator[IndexPair]:
    j = 0
    m = len(right)
    for i, key in enumerate(left):
        while j < m and right[j] < key:
            j += 1
        if j < m and right[j] == key:
            yield IndexPair(i, j)
            j += 1
        else:
            yield IndexPair(i, None)


def _hash_inner(left: Sequence[Any], right: Sequence[Any]) -> Iterator[IndexPair]:
    if len(right) <= len(left):
        lookup = {key: j for j, key in enumerate(right)}
        for i, key in enumerate(left):
            j = lookup.get(key)
            if j is not None:
                yield IndexPair(i, j)
    else:
        lookup = {key: i for i, key in enumerate(left)}
        for j, key in enumerate(right):
            i = lookup.get(key)
            if i is not None:
                yield IndexPair(i, j)


def _hash_left(left: Sequence[Any], right: Sequence[Any]) -> list[IndexPair]:
    matches: list[int | None] = [None] * len(left)
    for pair in _hash_inner(left, right):
        matches[pair.left] = pair.right
    return [IndexPair(i, j) for i, j in enumerate(matches)]


def _roll_prior(left: Sequence[Any], right: Sequence[Any]) -> Iterator[IndexPair]:
    j = -1
    m = len(right)
    for i, key in enumerate(left):
        while j + 1 < m and not key < right[j + 1]:
            j += 1
        yield IndexPair(i, j if j >= 0 else None)


def _roll_next(
    left: Sequence[Any], right: Sequence[Any], *, exact: bool = False
) -> Iterator[IndexPair]:
    j = 0
    m = len(right)
    for i, key in enumerate(left):
        while j < m and right[j] < key:
            j += 1
        if j < m and (not exact or right[j] == key):
            yield IndexPair(i, j)
        else:
            yield IndexPair(i, None)


# =============================================================================
# Series-level joins
# =============================================================================


def cross_apply_inner(
    left: TimeSeries[K, V],
    right: TimeSeries[K, V2],
    f: Callable[[V, V2], R],
    *,
    strategy: JoinStrategy | str | None = None,
) -> TimeSeries[K, R]:
    """Series of ``f(left_value, right_value)`` at keys present in both inputs."""
    require_ordered("cross_apply_inner", left, right)
    used, pairs = JoinEngine().inner_pairs(left.index, right.index, strategy)
    lk, lv, rv = left.keys, left.values, right.values
    result = TimeSeries._from_trusted(
        KeyIndex(lk[p.left] for p in pairs),
        tuple(f(lv[p.left], rv[p.right]) for p in pairs),  # type: ignore[index]
    )
    logger.debug(
        "join_completed",
        kind="inner",
        strategy=used,
        left=len(left),
        right=len(right),
        matched=len(pairs),
    )
    return result


def cross_apply_left(
    left: TimeSeries[K, V],
    right: TimeSeries[K, V2],
    f: Callable[[V, V2 | None], R],
    *,
    strategy: JoinStrategy | str | None = None,
) -> TimeSeries[K, R]:
    """Series of ``f(left_value, right_value | None)`` at every left key."""
    require_ordered("cross_apply_left", left, right)
    used, pairs = JoinEngine().left_pairs(left.index, right.index, strategy)
    result = _combine_left(left, right, pairs, f)
    logger.debug(
        "join_completed",
        kind="left",
        strategy=used,
        left=len(left),
        right=len(right),
        matched=sum(1 for p in pairs if p.right is not None),
    )
    return result


def merge_apply_asof(
    left: TimeSeries[K, V],
    right: TimeSeries[K, V2],
    f: Callable[[V, V2 | None], R],
    *,
    mode: MergeAsofMode | str | None = None,
    matcher: Callable[[K, K], bool] | None = None,
) -> TimeSeries[K, R]:
    """
    As-of join: every left key paired with the right value the roll policy
    lands on, or None when there is none or ``matcher`` rejects it.

    Raises:
        InvalidParameterError: if ``matcher`` is given with ``NO_ROLL``.
    """
    require_ordered("merge_apply_asof", left, right)
    pairs = JoinEngine().asof_pairs(left.index, right.index, mode, matcher)
    result = _combine_left(left, right, pairs, f)
    logger.debug(
        "asof_join_completed",
        mode=MergeAsofMode(mode or MergeAsofMode.ROLL_PRIOR).value,
        left=len(left),
        right=len(right),
        matched=sum(1 for p in pairs if p.right is not None),
    )
    return result


def _combine_left(
    left: TimeSeries[K, V],
    right: TimeSeries[K, V2],
    pairs: list[IndexPair],
    f: Callable[[V, V2 | None], R],
) -> TimeSeries[K, R]:
    lv, rv = left.values, right.values
    return TimeSeries._from_trusted(
        left.index,
        tuple(f(lv[p.left], None if p.right is None else rv[p.right]) for p in pairs),
    )


def n_inner_join(first: TimeSeries[K, Any], *others: TimeSeries[K, Any]) -> TimeSeries[K, tuple]:
    """
    Inner-join any number of series on their keys.

    Values are folded left to right into flat tuples ``(v1, v2, ..., vn)``;
    only keys present in every input survive.
    """
    joined: TimeSeries[K, tuple] = first.map(lambda v: (v,))
    for other in others:
        joined = cross_apply_inner(joined, other, lambda acc, v: acc + (v,))
    return joined


def interweave(
    left: TimeSeries[K, V],
    right: TimeSeries[K, V],
    select: Callable[[DataPoint[K, V], DataPoint[K, V]], DataPoint[K, V]],
) -> TimeSeries[K, V]:
    """
    Ordered union of two series.

    Keys present in only one input pass through; on equal keys
    ``select(left_point, right_point)`` returns the point to keep.
    """
    require_ordered("interweave", left, right)
    lp, rp = list(left), list(right)
    out: list[DataPoint[K, V]] = []
    i = j = 0
    while i < len(lp) and j < len(rp):
        a, b = lp[i], rp[j]
        if a.key < b.key:
            out.append(a)
            i += 1
        elif b.key < a.key:
            out.append(b)
            j += 1
        else:
            out.append(select(a, b))
            i += 1
            j += 1
    out.extend(lp[i:])
    out.extend(rp[j:])
    return collect_unchecked(out)


__all__ = [
    "JoinStrategy",
    "MergeAsofMode",
    "IndexPair",
    "JoinEngine",
    "cross_apply_inner",
    "cross_apply_left",
    "merge_apply_asof",
    "n_inner_join",
    "interweave",
]
