"""
Time utilities: duration rounding, bucketers and epoch-millisecond helpers.

The rounding functions are the usual ``bucket_fn`` for
``TimeSeries.resample_and_agg``. Datetime keys are rounded at millisecond
precision on the epoch-millisecond grid; numeric (and ``timedelta``) keys are
rounded with exact arithmetic.

Bucket labels::

    size = 15m        [00:00, 00:15)      [00:15, 00:30)
    round up          ──► 00:15           ──► 00:30        right edge
    round down        ──► 00:00           ──► 00:15        left edge

    A key exactly on a boundary rounds *up* to the next edge:
    round_up(00:15) == 00:30.

Examples:
    >>> from datetime import datetime, timedelta
    >>> round_up_to_nearest_duration(datetime(2024, 1, 1, 9, 31), timedelta(minutes=15))
    datetime.datetime(2024, 1, 1, 9, 45)
    >>> round_down_to_nearest_duration(17, 5)
    15
    >>> round_nearest_to_nearest_duration(17.5, 5)
    15.0

Tags:
    time, rounding, resample, bucketing, timespine

Doc-Types:
    - API Reference
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime, timedelta, timezone, tzinfo
from typing import Any, Literal

from timespine.core.errors import InvalidParameterError

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)
_ONE_MS = timedelta(milliseconds=1)


def to_epoch_millis(dt: datetime) -> int:
    """Milliseconds since the Unix epoch. Naive datetimes are taken as UTC."""
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return (dt - EPOCH) // _ONE_MS


def datetime_from_millis(millis: int, tz: tzinfo | None = None) -> datetime:
    """Inverse of ``to_epoch_millis``; naive UTC result unless ``tz`` is given."""
    moment = EPOCH + timedelta(milliseconds=millis)
    if tz is None:
        return moment.replace(tzinfo=None)
    return moment.astimezone(tz)


def _round(key: Any, size: Any, pick: Callable[[Any, Any, Any], Any]) -> Any:
    if isinstance(key, datetime):
        if not isinstance(size, timedelta):
            raise InvalidParameterError("size", size, "datetime keys need a timedelta size")
        size_ms = size // _ONE_MS
        if size_ms <= 0:
            raise InvalidParameterError("size", size, "size must be at least 1ms")
        millis = to_epoch_millis(key)
        return datetime_from_millis(pick(millis, size_ms, millis % size_ms), key.tzinfo)
    if not size > size * 0:
        raise InvalidParameterError("size", size, "size must be positive")
    return pick(key, size, key % size)


def _up(value: Any, size: Any, mod: Any) -> Any:
    return value + max(size - mod, size * 0)


def _down(value: Any, size: Any, mod: Any) -> Any:
    return value - mod


def _nearest(value: Any, size: Any, mod: Any) -> Any:
    if mod * 2 > size:
        return _up(value, size, mod)
    return _down(value, size, mod)


def round_up_to_nearest_duration(key: Any, size: Any) -> Any:
    """Right edge of the ``[start, start + size)`` bucket containing ``key``."""
    return _round(key, size, _up)


def round_down_to_nearest_duration(key: Any, size: Any) -> Any:
    """Left edge of the bucket containing ``key``."""
    return _round(key, size, _down)


def round_nearest_to_nearest_duration(key: Any, size: Any) -> Any:
    """Closest bucket edge; exact halves round down."""
    return _round(key, size, _nearest)


_ROUNDERS: dict[str, Callable[[Any, Any], Any]] = {
    "up": round_up_to_nearest_duration,
    "down": round_down_to_nearest_duration,
    "nearest": round_nearest_to_nearest_duration,
}


def bucketer(size: Any, how: Literal["up", "down", "nearest"] = "up") -> Callable[[Any], Any]:
    """Bind a rounding function to a fixed bucket size.

    Example:
        >>> minute_bars = trades.resample_and_agg(bucketer(timedelta(minutes=1)), last_value)
    """
    try:
        rounder = _ROUNDERS[how]
    except KeyError:
        raise InvalidParameterError("how", how, f"how must be one of {sorted(_ROUNDERS)}") from None

    def bucket(key: Any) -> Any:
        return rounder(key, size)

    return bucket


__all__ = [
    "EPOCH",
    "to_epoch_millis",
    "datetime_from_millis",
    "round_up_to_nearest_duration",
    "round_down_to_nearest_duration",
    "round_nearest_to_nearest_duration",
    "bucketer",
]
