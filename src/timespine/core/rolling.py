"""
Rolling window aggregation over a series.

Two window strategies compute an aggregate at every position once the window
is full:

- **Buffered:** keep the last N values and hand a fresh copy to ``f``.
  Any aggregate works; each step costs O(N).
- **Incremental:** keep an accumulator updated by ``add`` for the incoming
  value and ``remove`` for the value leaving the window. Each step costs O(1)
  calls, provided ``remove`` undoes ``add``.

Manifesto:
    Moving averages, rolling sums and rolling extrema are the bread and
    butter of time-series work. The buffered form is always correct; the
    incremental form is fast when the aggregate is invertible. Both produce
    output keyed by the position that closes the window.

    - **Same keys either way:** for an invertible aggregate both strategies
      emit identical series
    - **Fresh snapshots:** ``f`` may keep or mutate the list it receives
    - **Two phases:** FILLING until N values have been seen, then SLIDING;
      there is no way back

Architecture:
    ::

        ┌────────────────────────────────────────────────────────────┐
        │               window=3 over v0 v1 v2 v3 v4                  │
        └────────────────────────────────────────────────────────────┘

        i=0  [v0]          FILLING   (no output)
        i=1  [v0 v1]       FILLING   (no output)
        i=2  [v0 v1 v2]    SLIDING   emit (k2, f([v0, v1, v2]))
        i=3  [v1 v2 v3]    SLIDING   emit (k3, f([v1, v2, v3]))
        i=4  [v2 v3 v4]    SLIDING   emit (k4, f([v2, v3, v4]))

        Incremental:
        acc = add(acc, v[i])
        acc = remove(acc, v[i - window])      once i >= window
        emit (k[i], acc)                      for i >= window - 1, acc is not None

Examples:
    3-point moving average, buffered:

    >>> ts = TimeSeries.from_parallel_sequences(range(5), [1.0, 2.0, 3.0, 4.0, 5.0])
    >>> ts.apply_rolling(3, lambda buf: sum(buf) / len(buf)).collect().values
    (2.0, 3.0, 4.0)

    Same, incremental:

    >>> def add(acc, v): return (acc or 0.0) + v
    >>> def remove(acc, v): return acc - v
    >>> ts.apply_updating_rolling(3, add, remove).collect().values
    (6.0, 9.0, 12.0)

Guardrails:
    ❌ DON'T: Use the incremental form with a non-invertible aggregate (max, min)
    ✅ DO: Use ``apply_rolling`` for those

    ❌ DON'T: Return None from ``add`` unless the position should be skipped
    ✅ DO: Treat None as "no accumulator yet"

Tags:
    rolling-window, time-series, aggregation, moving-average, timespine

Doc-Types:
    - API Reference
    - Time-Series Patterns
"""

from __future__ import annotations

from collections import deque
from collections.abc import Callable, Iterator
from enum import Enum
from typing import Any, Generic, TypeVar

from timespine.core.collection import PointStream
from timespine.core.datapoint import DataPoint
from timespine.core.errors import InvalidParameterError
from timespine.core.series import TimeSeries, require_ordered

K = TypeVar("K")
V = TypeVar("V")
R = TypeVar("R")


class WindowPhase(str, Enum):
    """Lifecycle of a rolling window."""

    FILLING = "filling"
    SLIDING = "sliding"


def _check_size(size: int) -> None:
    if size < 1:
        raise InvalidParameterError("window", size, "window size must be >= 1")


class BufferedWindow(Generic[V]):
    """
    Fixed-size buffer of the most recent values.

    ``push`` returns a fresh list of the buffer once it is full and None while
    it is still filling.
    """

    def __init__(self, size: int):
        _check_size(size)
        self.size = size
        self._buffer: deque[V] = deque(maxlen=size)

    @property
    def phase(self) -> WindowPhase:
        if len(self._buffer) == self.size:
            return WindowPhase.SLIDING
        return WindowPhase.FILLING

    def push(self, value: V) -> list[V] | None:
        self._buffer.append(value)
        if self.phase is WindowPhase.SLIDING:
            return list(self._buffer)
        return None

    def snapshot(self) -> list[V]:
        return list(self._buffer)


class IncrementalWindow(Generic[V, R]):
    """
    Accumulator over the most recent ``size`` values.

    ``add(acc, value)`` folds in the incoming value and ``remove(acc, value)``
    takes out the value leaving the window. The accumulator starts as None.
    """

    def __init__(
        self,
        size: int,
        add: Callable[[R | None, V], R | None],
        remove: Callable[[R | None, V], R | None],
    ):
        _check_size(size)
        self.size = size
        self._add = add
        self._remove = remove
        self._members: deque[V] = deque()
        self._seen = 0
        self.accumulator: R | None = None

    @property
    def phase(self) -> WindowPhase:
        if self._seen >= self.size:
            return WindowPhase.SLIDING
        return WindowPhase.FILLING

    def push(self, value: V) -> R | None:
        """Fold ``value`` in, evict the oldest member if full, return the accumulator."""
        self.accumulator = self._add(self.accumulator, value)
        if len(self._members) == self.size:
            self.accumulator = self._remove(self.accumulator, self._members.popleft())
        self._members.append(value)
        self._seen += 1
        return self.accumulator


def apply_rolling(
    series: TimeSeries[K, V], window: int, f: Callable[[list[V]], R]
) -> PointStream[K, R]:
    """
    Emit ``(key[i], f(last window values))`` for every position that closes a
    full window.

    Raises:
        InvalidParameterError: if ``window < 1``.
    """
    _check_size(window)
    require_ordered("apply_rolling", series)
    return PointStream(_buffered(series.keys, series.values, window, f))


def _buffered(
    keys: tuple[Any, ...], values: tuple[Any, ...], window: int, f: Callable[[list[Any]], Any]
) -> Iterator[DataPoint]:
    buffer: BufferedWindow[Any] = BufferedWindow(window)
    for key, value in zip(keys, values):
        snapshot = buffer.push(value)
        if snapshot is not None:
            yield DataPoint(key, f(snapshot))


def apply_updating_rolling(
    series: TimeSeries[K, V],
    window: int,
    add: Callable[[R | None, V], R | None],
    remove: Callable[[R | None, V], R | None],
) -> PointStream[K, R]:
    """
    Incremental rolling aggregate.

    Emits ``(key[i], acc)`` from position ``window - 1`` on, skipping positions
    where the accumulator is None.

    Raises:
        InvalidParameterError: if ``window < 1``.
    """
    _check_size(window)
    require_ordered("apply_updating_rolling", series)
    return PointStream(_incremental(series.keys, series.values, window, add, remove))


def _incremental(
    keys: tuple[Any, ...],
    values: tuple[Any, ...],
    window: int,
    add: Callable[[Any, Any], Any],
    remove: Callable[[Any, Any], Any],
) -> Iterator[DataPoint]:
    state: IncrementalWindow[Any, Any] = IncrementalWindow(window, add, remove)
    for key, value in zip(keys, values):
        acc = state.push(value)
        if state.phase is WindowPhase.SLIDING and acc is not None:
            yield DataPoint(key, acc)


__all__ = [
    "WindowPhase",
    "BufferedWindow",
    "IncrementalWindow",
    "apply_rolling",
    "apply_updating_rolling",
]
