"""
Deterministic content hashing for key indexes and series.

Joins and equality checks often compare two series built from the same key
column. Hashing the keys once lets both paths rule out unequal inputs without
walking them, and lets joins skip the cursor walk entirely when the key
columns are the same.

Manifesto:
    A digest is a pre-filter, never a verdict:

    - **Deterministic:** same keys in the same order give the same fingerprint
    - **Order-dependent:** (a, b) and (b, a) hash differently
    - **Agrees with ==:** the precompare digest is built from ``hash(key)``,
      so ``0.0``/``-0.0`` and equal instants in different zones still match
    - **Never a false "equal":** matching digests are confirmed element-wise

    ``fingerprint_keys`` is the stable, ``repr``-based content digest (same
    value across processes, ``1`` and ``"1"`` differ). It identifies content;
    it is not used to decide equality.

Architecture:
    ::

        ┌─────────────────────────────────────────────────────────────┐
        │                    keys_equal(a, b)                          │
        └─────────────────────────────────────────────────────────────┘

        len(a) != len(b)                   → False
        both hashable, key_hash differs    → False
        element-wise a == b                → result

Examples:
    >>> compute_hash("2024-01-02T09:30:00", "minute_bars", 5)
    '9981568e1b04dcb9da6ff5aef49ec7d4'
    >>> fingerprint_keys([1, 2, 3]) == fingerprint_keys((1, 2, 3))
    True
    >>> fingerprint_keys([1, 2, 3]) == fingerprint_keys([3, 2, 1])
    False
    >>> keys_equal(KeyIndex([0.0, 1.0]), KeyIndex([-0.0, 1.0]))
    True

Tags:
    hashing, fingerprint, precompare, timespine

Doc-Types:
    - API Reference
"""

from __future__ import annotations

import hashlib
from collections.abc import Iterable
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from timespine.core.index import KeyIndex
    from timespine.core.series import TimeSeries

_SEPARATOR = b"|"


def compute_hash(*values: Any, length: int = 32) -> str:
    """
    Compute a deterministic hash from values.

    Joins the string form of every value with ``|`` and takes the SHA-256 hex
    digest, truncated to ``length`` characters.

    Examples:
        >>> compute_hash("a", "b") != compute_hash("b", "a")
        True
        >>> len(compute_hash("test", length=16))
        16
    """
    content = "|".join(str(v) for v in values)
    return hashlib.sha256(content.encode()).hexdigest()[:length]


def _digest(items: Iterable[Any], length: int) -> str:
    hasher = hashlib.sha256()
    for item in items:
        hasher.update(repr(item).encode())
        hasher.update(_SEPARATOR)
    return hasher.hexdigest()[:length]


def fingerprint_keys(keys: Iterable[Any], length: int = 32) -> str:
    """Hash a key sequence, streaming it through SHA-256."""
    return _digest(keys, length)


def fingerprint_series(series: TimeSeries[Any, Any], length: int = 32) -> str:
    """Hash keys and values of a series, in position order."""
    return _digest(((p.key, p.value) for p in series), length)


def key_hash(keys: tuple[Any, ...]) -> int | None:
    """
    In-process digest of a key tuple that agrees with ``==``.

    Returns None when any key is unhashable; callers then compare
    element-wise.
    """
    try:
        return hash(keys)
    except TypeError:
        return None


def keys_equal(left: KeyIndex[Any], right: KeyIndex[Any]) -> bool:
    """Exact key-index equality with a hash short-circuit."""
    if left is right:
        return True
    if len(left) != len(right):
        return False
    lh, rh = left.key_hash(), right.key_hash()
    if lh is not None and rh is not None and lh != rh:
        return False
    return left.keys == right.keys


def series_equal(left: TimeSeries[Any, Any], right: TimeSeries[Any, Any]) -> bool:
    """Exact series equality; keys are precompared through their hash."""
    if left is right:
        return True
    if not keys_equal(left.index, right.index):
        return False
    return left.values == right.values


__all__ = [
    "compute_hash",
    "fingerprint_keys",
    "fingerprint_series",
    "key_hash",
    "keys_equal",
    "series_equal",
]
