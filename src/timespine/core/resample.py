"""Resample: group consecutive points by bucket and aggregate each group.

One ordered scan. Consecutive points whose keys map to the same bucket form a
group; each group becomes one output point ``(bucket, agg_fn(group))``.
Grouping is by adjacency, so no sort and no hashing of bucket keys happen.
A bucket function that is not monotonic therefore yields repeated bucket keys
in the output.

Example:
    >>> from timespine.core.timeutils import bucketer
    >>> bars = trades.resample_and_agg(
    ...     bucketer(timedelta(minutes=15)),
    ...     lambda group: group[-1].value,
    ... )
"""

from __future__ import annotations

from collections.abc import Callable
from itertools import groupby
from typing import TypeVar

from timespine.core.collection import collect_unchecked
from timespine.core.datapoint import DataPoint
from timespine.core.logging import get_logger
from timespine.core.series import TimeSeries, require_ordered

logger = get_logger(__name__)

K = TypeVar("K")
K2 = TypeVar("K2")
V = TypeVar("V")
R = TypeVar("R")


def resample_and_agg(
    series: TimeSeries[K, V],
    bucket_fn: Callable[[K], K2],
    agg_fn: Callable[[list[DataPoint[K, V]]], R],
) -> TimeSeries[K2, R]:
    """Aggregate each run of points sharing ``bucket_fn(key)``."""
    require_ordered("resample_and_agg", series)
    out = [
        DataPoint(bucket, agg_fn(list(group)))
        for bucket, group in groupby(series, key=lambda p: bucket_fn(p.key))
    ]
    logger.debug("resample_completed", points=len(series), groups=len(out))
    return collect_unchecked(out)


__all__ = ["resample_and_agg"]
