"""
Delimited text codec (CSV / TSV / PSV) for series.

Reads rows with the standard ``csv`` module and turns cells into typed keys
and values through pydantic. The codec works on open text streams; opening
files is left to the caller.

Row mapping, in order of precedence:

1. ``to_point(record) -> DataPoint``: full control over a row
2. ``record_model``: a pydantic model validating the whole row; the point is
   read from its ``key_column`` / ``value_column`` attributes
3. default: ``key_column`` parsed as ``key_type``, ``value_column`` as
   ``value_type``

Usage:
    from timespine.io.delimited import read_delimited, write_delimited

    with open("trades.csv", newline="") as f:
        trades = read_delimited(f, key_type=datetime, value_type=float)

    with open("trades.psv", "w", newline="") as f:
        write_delimited(f, trades, delimiter="|")
"""

from __future__ import annotations

import csv
from collections.abc import Callable, Iterable
from functools import lru_cache
from typing import Any, TextIO

from pydantic import BaseModel, TypeAdapter, ValidationError
from pydantic_core import to_jsonable_python

from timespine.core.collection import DuplicatePolicy, collect_checked, collect_unchecked
from timespine.core.datapoint import DataPoint
from timespine.core.errors import CodecError
from timespine.core.logging import get_logger
from timespine.core.series import TimeSeries

logger = get_logger(__name__)


@lru_cache(maxsize=64)
def _adapter(tp: Any) -> TypeAdapter[Any]:
    return TypeAdapter(tp)


def _cell(value: Any) -> Any:
    if isinstance(value, str):
        return value
    return to_jsonable_python(value)


def read_delimited(
    stream: Iterable[str],
    *,
    key_type: Any = str,
    value_type: Any = str,
    key_column: str = "key",
    value_column: str = "value",
    to_point: Callable[[Any], DataPoint[Any, Any]] | None = None,
    record_model: type[BaseModel] | None = None,
    checked: bool = True,
    on_duplicate: DuplicatePolicy | str = DuplicatePolicy.REJECT,
    delimiter: str = ",",
) -> TimeSeries[Any, Any]:
    """
    Decode a delimited stream with a header row into a series.

    With ``checked=True`` rows may arrive in any order; they are sorted and
    duplicates handled per ``on_duplicate``. With ``checked=False`` rows must
    already be strictly ascending by key.

    Raises:
        CodecError: on a missing column or a cell that does not parse. The
            1-based data row number is in ``error.context.position``.
    """
    reader = csv.DictReader(stream, delimiter=delimiter)
    if to_point is None and record_model is None:
        header = reader.fieldnames or []
        missing = [c for c in (key_column, value_column) if c not in header]
        if missing:
            raise CodecError(f"missing columns: {', '.join(missing)}").with_context(
                operation="read_delimited", columns=list(header)
            )

    key_adapter = _adapter(key_type)
    value_adapter = _adapter(value_type)
    points: list[DataPoint[Any, Any]] = []
    for row_number, row in enumerate(reader, start=1):
        try:
            record: Any = record_model.model_validate(row) if record_model else row
            if to_point is not None:
                point = to_point(record)
            elif record_model is not None:
                point = DataPoint(getattr(record, key_column), getattr(record, value_column))
            else:
                point = DataPoint(
                    key_adapter.validate_python(row[key_column]),
                    value_adapter.validate_python(row[value_column]),
                )
        except (ValidationError, KeyError, ValueError, TypeError, AttributeError) as exc:
            raise CodecError(
                f"row {row_number}: {exc}",
                cause=exc,
            ).with_context(operation="read_delimited", position=row_number) from exc
        points.append(point)

    logger.debug("delimited_decoded", rows=len(points), checked=checked)
    if checked:
        return collect_checked(points, on_duplicate=on_duplicate)
    return collect_unchecked(points)


def write_delimited(
    stream: TextIO,
    series: TimeSeries[Any, Any],
    *,
    key_column: str = "key",
    value_column: str = "value",
    to_record: Callable[[DataPoint[Any, Any]], dict[str, Any]] | None = None,
    fieldnames: list[str] | None = None,
    delimiter: str = ",",
) -> int:
    """
    Encode a series as delimited text with a header row.

    Keys and values are written in their JSON-compatible form (datetimes as
    ISO-8601). ``to_record`` may map each point to a row dict of its own; the
    header is then ``fieldnames`` or the first row's keys.

    Returns:
        Number of data rows written.

    Raises:
        CodecError: if a cell has no JSON-compatible form or a record has
            fields missing from the header. The 1-based data row number is
            in ``error.context.position``.
    """
    if to_record is None:
        records: Iterable[dict[str, Any]] = (
            {key_column: p.key, value_column: p.value} for p in series
        )
        header = fieldnames or [key_column, value_column]
    else:
        records = [to_record(p) for p in series]
        header = fieldnames or (list(records[0]) if records else [key_column, value_column])

    writer = csv.DictWriter(stream, fieldnames=header, delimiter=delimiter, lineterminator="\n")
    writer.writeheader()
    written = 0
    for row_number, record in enumerate(records, start=1):
        try:
            writer.writerow({k: _cell(v) for k, v in record.items()})
        except ValueError as exc:
            raise CodecError(
                f"row {row_number}: {exc}",
                cause=exc,
            ).with_context(operation="write_delimited", position=row_number) from exc
        written += 1
    return written


__all__ = ["read_delimited", "write_delimited"]
