"""
DataPoint - the (key, value) pair every series is made of.

Keys are any totally ordered type (int, float, datetime, date, ...). Values are
arbitrary; the engines never inspect them beyond passing them to caller
functions.

Examples:
    >>> from timespine.core.datapoint import DataPoint
    >>> p = DataPoint(3, "c")
    >>> key, value = p
    >>> key, value
    (3, 'c')
    >>> p.with_value("C")
    DataPoint(key=3, value='C')

Tags:
    data-model, datapoint, timespine

Doc-Types:
    - API Reference
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

K = TypeVar("K")
V = TypeVar("V")
W = TypeVar("W")


@dataclass(frozen=True, slots=True)
class DataPoint(Generic[K, V]):
    """One observation: a key and the value recorded at it."""

    key: K
    value: V

    def __iter__(self) -> Iterator[Any]:
        yield self.key
        yield self.value

    def with_value(self, value: W) -> DataPoint[K, W]:
        """Same key, new value."""
        return DataPoint(self.key, value)


__all__ = ["DataPoint"]
