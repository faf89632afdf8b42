"""
KeyIndex - the ordered key column of a series.

A ``KeyIndex`` is an immutable tuple of keys plus the ordering queries every
engine relies on: monotonicity and uniqueness checks, the first ordering
violation, binary-search lookups and sample-rate statistics.

Manifesto:
    Strictly ascending keys are the one invariant the whole library hangs on.
    Keeping the checks next to the keys means construction, collection and
    validation mode all report violations the same way.

    - **Immutable:** the keys are a tuple; nothing downstream can reorder them
    - **Logarithmic lookups:** every positional query is a ``bisect`` call
    - **Cheap equality:** a cached key hash rules out most unequal
      indexes before any element-wise comparison

Architecture:
    ::

        KeyIndex((t0, t1, t2, t3))
              │
              ├── is_monotonic() / is_unique() / first_violation()
              ├── position_of(k)             exact match        bisect_left
              ├── position_at_or_before(k)   greatest key <= k  bisect_right - 1
              ├── position_at_or_after(k)    least key >= k     bisect_left
              └── sample_rates()             Counter of t[i+1] - t[i]

Examples:
    >>> idx = KeyIndex([1, 2, 4, 6, 8])
    >>> idx.is_monotonic()
    True
    >>> idx.position_at_or_before(5)
    2
    >>> idx.sample_rates()
    [(2, 3), (1, 1)]
    >>> KeyIndex([1, 3, 2]).first_violation()
    OrderViolation(position=2, kind=<ViolationKind.UNORDERED: 'unordered'>, key=2, prior_key=3)

Tags:
    index, ordering, binary-search, timespine

Doc-Types:
    - API Reference
"""

from __future__ import annotations

from bisect import bisect_left, bisect_right
from collections import Counter
from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from enum import Enum
from itertools import pairwise
from typing import Any, Generic, TypeVar, overload

from timespine.core.errors import (
    DuplicateKeyError,
    SeriesValidationError,
    UnorderedInputError,
)
from timespine.core.hashing import fingerprint_keys, key_hash, keys_equal

K = TypeVar("K")

_UNSET = object()


class ViolationKind(str, Enum):
    """Kind of ordering problem found in a key sequence."""

    UNORDERED = "unordered"
    DUPLICATE = "duplicate"


@dataclass(frozen=True, slots=True)
class OrderViolation:
    """First position where a key sequence stops being strictly ascending."""

    position: int
    kind: ViolationKind
    key: Any
    prior_key: Any

    def to_error(self, operation: str | None = None) -> SeriesValidationError:
        """Build the matching validation error."""
        if self.kind is ViolationKind.DUPLICATE:
            return DuplicateKeyError(self.position, self.key, operation=operation)
        return UnorderedInputError(
            self.position, self.key, self.prior_key, operation=operation
        )


def find_violation(keys: Iterable[Any]) -> OrderViolation | None:
    """Scan keys once and report the first ordering violation, if any."""
    for position, (prior, key) in enumerate(pairwise(keys), start=1):
        if key < prior:
            return OrderViolation(position, ViolationKind.UNORDERED, key, prior)
        if not prior < key:
            return OrderViolation(position, ViolationKind.DUPLICATE, key, prior)
    return None


class KeyIndex(Generic[K]):
    """Immutable, positionally addressed sequence of keys."""

    __slots__ = ("_keys", "_fingerprint", "_key_hash")

    def __init__(self, keys: Iterable[K] = ()):
        self._keys: tuple[K, ...] = tuple(keys)
        self._fingerprint: str | None = None
        self._key_hash: Any = _UNSET

    # ── Sequence protocol ────────────────────────────────────────────

    def __len__(self) -> int:
        return len(self._keys)

    def __iter__(self) -> Iterator[K]:
        return iter(self._keys)

    @overload
    def __getitem__(self, position: int) -> K: ...

    @overload
    def __getitem__(self, position: slice) -> KeyIndex[K]: ...

    def __getitem__(self, position: int | slice) -> K | KeyIndex[K]:
        if isinstance(position, slice):
            return KeyIndex(self._keys[position])
        return self._keys[position]

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, KeyIndex):
            return NotImplemented
        return keys_equal(self, other)

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"KeyIndex({list(self._keys)!r})"

    @property
    def keys(self) -> tuple[K, ...]:
        return self._keys

    # ── Ordering ─────────────────────────────────────────────────────

    def is_monotonic(self) -> bool:
        """True if keys are strictly increasing. Empty and singleton are."""
        return all(prior < key for prior, key in pairwise(self._keys))

    def is_unique(self) -> bool:
        """True if no key appears twice, regardless of order."""
        return all(a != b for a, b in pairwise(sorted(self._keys)))

    def first_violation(self) -> OrderViolation | None:
        return find_violation(self._keys)

    def validate(self, operation: str | None = None) -> None:
        """Raise the matching validation error if keys are not strictly ascending."""
        violation = self.first_violation()
        if violation is not None:
            raise violation.to_error(operation)

    # ── Binary search ────────────────────────────────────────────────
    # All three assume strictly ascending keys.

    def position_of(self, key: K) -> int | None:
        """Position of ``key`` or None."""
        pos = bisect_left(self._keys, key)
        if pos < len(self._keys) and self._keys[pos] == key:
            return pos
        return None

    def position_at_or_before(self, key: K) -> int | None:
        """Position of the greatest key <= ``key`` or None."""
        pos = bisect_right(self._keys, key) - 1
        return pos if pos >= 0 else None

    def position_at_or_after(self, key: K) -> int | None:
        """Position of the least key >= ``key`` or None."""
        pos = bisect_left(self._keys, key)
        return pos if pos < len(self._keys) else None

    # ── Sampling ─────────────────────────────────────────────────────

    def sample_rates(self) -> list[tuple[Any, int]]:
        """
        Histogram of differences between adjacent keys.

        Returns ``(difference, count)`` pairs, most frequent first; ties are
        broken by the larger difference first.
        """
        counts = Counter(key - prior for prior, key in pairwise(self._keys))
        return sorted(counts.items(), key=lambda item: (item[1], item[0]), reverse=True)

    def is_mono_intervaled(self) -> bool:
        """True if every pair of adjacent keys is the same distance apart."""
        return len(self.sample_rates()) == 1

    # ── Content fingerprint ──────────────────────────────────────────

    def fingerprint(self) -> str:
        if self._fingerprint is None:
            self._fingerprint = fingerprint_keys(self._keys)
        return self._fingerprint

    def key_hash(self) -> int | None:
        """Cached ``hash`` of the key tuple, or None for unhashable keys."""
        if self._key_hash is _UNSET:
            self._key_hash = key_hash(self._keys)
        return self._key_hash


__all__ = ["KeyIndex", "OrderViolation", "ViolationKind", "find_violation"]
