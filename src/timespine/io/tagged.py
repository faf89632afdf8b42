"""
Tagged (JSON) codec for series.

A series is encoded as an array of objects, one per point, in key order::

    [
      {"key": "2024-01-01T09:30:00", "value": 101.5},
      {"key": "2024-01-01T09:31:00", "value": 101.7}
    ]

Keys and values are typed on the way in through pydantic, so ISO strings
become ``datetime`` keys when ``key_type=datetime`` and so on. Decoding goes
through the checked collection path unless ``checked=False``.

Examples:
    >>> text = dumps_series(TimeSeries.from_parallel_sequences([1, 2], [0.5, 0.7]))
    >>> text
    '[{"key":1,"value":0.5},{"key":2,"value":0.7}]'
    >>> loads_series(text, key_type=int, value_type=float).values
    (0.5, 0.7)

Tags:
    codec, json, pydantic, serialization, timespine

Doc-Types:
    - API Reference
"""

from __future__ import annotations

from functools import lru_cache
from typing import Any, Generic, TextIO, TypeVar

from pydantic import BaseModel, TypeAdapter, ValidationError
from pydantic_core import PydanticSerializationError

from timespine.core.collection import DuplicatePolicy, collect_checked, collect_unchecked
from timespine.core.datapoint import DataPoint
from timespine.core.errors import CodecError
from timespine.core.series import TimeSeries

K = TypeVar("K")
V = TypeVar("V")


class TaggedPoint(BaseModel, Generic[K, V]):
    """Wire form of one point."""

    key: K
    value: V


@lru_cache(maxsize=64)
def _points_adapter(key_type: Any, value_type: Any) -> TypeAdapter[list[TaggedPoint[Any, Any]]]:
    return TypeAdapter(list[TaggedPoint[key_type, value_type]])  # type: ignore[valid-type]


def dumps_series(series: TimeSeries[Any, Any], *, indent: int | None = None) -> str:
    """
    Encode a series as a JSON array of ``{"key", "value"}`` objects.

    Raises:
        CodecError: if a key or value has no JSON form.
    """
    adapter = _points_adapter(Any, Any)
    items = [TaggedPoint[Any, Any](key=p.key, value=p.value) for p in series]
    try:
        return adapter.dump_json(items, indent=indent).decode()
    except PydanticSerializationError as exc:
        raise CodecError(
            f"series is not JSON serializable: {exc}",
            cause=exc,
        ).with_context(operation="dumps_series") from exc


def loads_series(
    data: str | bytes,
    *,
    key_type: Any = Any,
    value_type: Any = Any,
    checked: bool = True,
    on_duplicate: DuplicatePolicy | str = DuplicatePolicy.REJECT,
) -> TimeSeries[Any, Any]:
    """
    Decode a JSON array of ``{"key", "value"}`` objects.

    Raises:
        CodecError: on malformed JSON or an entry that does not validate.
            The 0-based array position is in ``error.context.position`` when
            it is known.
    """
    try:
        items = _points_adapter(key_type, value_type).validate_json(data)
    except ValidationError as exc:
        first = exc.errors()[0] if exc.error_count() else {}
        loc = first.get("loc", ())
        position = loc[0] if loc and isinstance(loc[0], int) else None
        raise CodecError(
            f"invalid tagged series: {exc.error_count()} error(s)",
            cause=exc,
        ).with_context(operation="loads_series", position=position) from exc

    points = [DataPoint(item.key, item.value) for item in items]
    if checked:
        return collect_checked(points, on_duplicate=on_duplicate)
    return collect_unchecked(points)


def dump_series(series: TimeSeries[Any, Any], stream: TextIO, *, indent: int | None = None) -> None:
    """Write ``dumps_series(series)`` to an open text stream."""
    stream.write(dumps_series(series, indent=indent))


def load_series(stream: TextIO, **kwargs: Any) -> TimeSeries[Any, Any]:
    """Read a whole text stream and decode it with ``loads_series``."""
    return loads_series(stream.read(), **kwargs)


__all__ = ["TaggedPoint", "dumps_series", "loads_series", "dump_series", "load_series"]
