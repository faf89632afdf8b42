"""Timespine Core -- the ordered series container and its engines.

Manifesto:
    Time-series work keeps rebuilding the same four things on top of a list
    of (key, value) pairs: lookups by time, rolling windows, joins on time
    and resampling into buckets. Each rebuild gets ordering slightly wrong.
    ``timespine.core`` does them once, over one invariant: keys strictly
    ascending.

    - **Generic:** any orderable key, any value
    - **Immutable:** every operation returns a new series
    - **In-memory and synchronous:** no I/O anywhere in core
    - **Checked at the boundary:** construction validates, engines trust

Architecture::

    Layer 1 -- Types & Errors
        errors.py          Structured error hierarchy (TimespineError, ...)
        datapoint.py       DataPoint[K, V]
        index.py           KeyIndex: ordering checks + binary search

    Layer 2 -- Container
        series.py          TimeSeries[K, V]: construction + lookups
        collection.py      PointStream, collect_checked / collect_unchecked

    Layer 3 -- Engines
        transforms.py      map / shift / skip_apply
        rolling.py         Buffered and incremental rolling windows
        joins.py           Merge / hash / as-of / n-ary joins
        resample.py        Bucket-and-aggregate

    Layer 4 -- Utilities
        timeutils.py       Duration rounding, bucketers, epoch millis
        keyutils.py        As-of matchers
        hashing.py         Content fingerprints for precompare

    Layer 5 -- Cross-Cutting Concerns
        logging.py         Structured logging (structlog)
        settings.py        TimespineSettings (pydantic-settings)

Tags:
    timespine, time-series, foundation, generic, in-memory

Doc-Types:
    package-overview, architecture-map, module-index
"""

from timespine.core.collection import (
    DuplicatePolicy,
    PointStream,
    collect_checked,
    collect_unchecked,
    ordered_prefix,
)
from timespine.core.datapoint import DataPoint
from timespine.core.errors import (
    CodecError,
    DuplicateKeyError,
    ErrorCategory,
    ErrorContext,
    InvalidParameterError,
    LengthMismatchError,
    SeriesValidationError,
    TimespineError,
    UnorderedInputError,
    categorize_error,
)
from timespine.core.index import KeyIndex, OrderViolation, ViolationKind
from timespine.core.joins import (
    IndexPair,
    JoinEngine,
    JoinStrategy,
    MergeAsofMode,
    n_inner_join,
)
from timespine.core.keyutils import within
from timespine.core.logging import configure_logging, get_logger
from timespine.core.rolling import BufferedWindow, IncrementalWindow, WindowPhase
from timespine.core.series import TimeSeries
from timespine.core.settings import (
    TimespineSettings,
    clear_settings_cache,
    get_settings,
    override_settings,
)
from timespine.core.timeutils import (
    bucketer,
    datetime_from_millis,
    round_down_to_nearest_duration,
    round_nearest_to_nearest_duration,
    round_up_to_nearest_duration,
    to_epoch_millis,
)

__all__ = [
    # Types & errors
    "DataPoint",
    "KeyIndex",
    "OrderViolation",
    "ViolationKind",
    "TimespineError",
    "SeriesValidationError",
    "LengthMismatchError",
    "UnorderedInputError",
    "DuplicateKeyError",
    "InvalidParameterError",
    "CodecError",
    "ErrorCategory",
    "ErrorContext",
    "categorize_error",
    # Container
    "TimeSeries",
    "PointStream",
    "DuplicatePolicy",
    "collect_checked",
    "collect_unchecked",
    "ordered_prefix",
    # Engines
    "BufferedWindow",
    "IncrementalWindow",
    "WindowPhase",
    "JoinEngine",
    "JoinStrategy",
    "MergeAsofMode",
    "IndexPair",
    "n_inner_join",
    # Utilities
    "bucketer",
    "round_up_to_nearest_duration",
    "round_down_to_nearest_duration",
    "round_nearest_to_nearest_duration",
    "datetime_from_millis",
    "to_epoch_millis",
    "within",
    # Cross-cutting
    "configure_logging",
    "get_logger",
    "TimespineSettings",
    "get_settings",
    "clear_settings_cache",
    "override_settings",
]
