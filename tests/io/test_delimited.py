"""
Tests for timespine.io.delimited module.

Tests cover:
- Typed decoding of key/value columns
- Custom columns, delimiters, record models and row mappers
- Checked vs unchecked decoding
- CodecError reporting
- Encoding and round trips
"""

import io
from datetime import datetime

import pytest
from pydantic import BaseModel

from timespine.core.collection import DuplicatePolicy
from timespine.core.datapoint import DataPoint
from timespine.core.errors import CodecError, DuplicateKeyError, ErrorCategory
from timespine.core.series import TimeSeries
from timespine.io.delimited import read_delimited, write_delimited


class Trade(BaseModel):
    ts: datetime
    px: float
    qty: int


class TestReadDelimited:
    def test_typed_columns(self):
        text = "key,value\n1,1.5\n2,2.5\n"
        ts = read_delimited(io.StringIO(text), key_type=int, value_type=float)
        assert ts.keys == (1, 2)
        assert ts.values == (1.5, 2.5)

    def test_datetime_keys(self):
        text = "key,value\n2024-01-02T09:30:00,101.5\n"
        ts = read_delimited(io.StringIO(text), key_type=datetime, value_type=float)
        assert ts.keys == (datetime(2024, 1, 2, 9, 30),)

    def test_custom_columns_and_delimiter(self):
        text = "time|price|venue\n3|30|X\n1|10|Y\n"
        ts = read_delimited(
            io.StringIO(text),
            key_type=int,
            value_type=int,
            key_column="time",
            value_column="price",
            delimiter="|",
        )
        assert ts.keys == (1, 3)
        assert ts.values == (10, 30)

    def test_record_model(self):
        text = "ts,px,qty\n2024-01-02T09:31:00,101.7,5\n2024-01-02T09:30:00,101.5,10\n"
        ts = read_delimited(io.StringIO(text), record_model=Trade, key_column="ts", value_column="px")
        assert ts.keys == (datetime(2024, 1, 2, 9, 30), datetime(2024, 1, 2, 9, 31))
        assert ts.values == (101.5, 101.7)

    def test_to_point_receives_record(self):
        text = "ts,px,qty\n2024-01-02T09:30:00,101.5,10\n"
        ts = read_delimited(
            io.StringIO(text),
            record_model=Trade,
            to_point=lambda t: DataPoint(t.ts, (t.px, t.qty)),
        )
        assert ts.values == ((101.5, 10),)

    def test_to_point_with_raw_rows(self):
        text = "a,b\nx,1\n"
        ts = read_delimited(io.StringIO(text), to_point=lambda row: DataPoint(row["a"], row["b"]))
        assert list(ts) == [DataPoint("x", "1")]

    def test_checked_sorts(self):
        text = "key,value\n3,c\n1,a\n2,b\n"
        ts = read_delimited(io.StringIO(text), key_type=int)
        assert ts.keys == (1, 2, 3)

    def test_unchecked_keeps_row_order(self):
        text = "key,value\n3,c\n1,a\n"
        ts = read_delimited(io.StringIO(text), key_type=int, checked=False)
        assert ts.keys == (3, 1)

    def test_duplicate_policy(self):
        text = "key,value\n1,a\n1,b\n"
        with pytest.raises(DuplicateKeyError):
            read_delimited(io.StringIO(text), key_type=int)
        ts = read_delimited(
            io.StringIO(text), key_type=int, on_duplicate=DuplicatePolicy.KEEP_LAST
        )
        assert ts.values == ("b",)

    def test_header_only(self):
        assert len(read_delimited(io.StringIO("key,value\n"))) == 0


class TestReadDelimitedErrors:
    def test_missing_column(self):
        with pytest.raises(CodecError) as exc_info:
            read_delimited(io.StringIO("time,value\n1,2\n"))
        assert "key" in str(exc_info.value)
        assert exc_info.value.category == ErrorCategory.PARSE

    def test_bad_cell_reports_row(self):
        text = "key,value\n1,1.0\n2,oops\n"
        with pytest.raises(CodecError) as exc_info:
            read_delimited(io.StringIO(text), key_type=int, value_type=float)
        err = exc_info.value
        assert err.context.position == 2
        assert err.context.operation == "read_delimited"
        assert err.cause is not None

    def test_record_model_failure(self):
        text = "ts,px,qty\nnot-a-date,1,1\n"
        with pytest.raises(CodecError):
            read_delimited(io.StringIO(text), record_model=Trade, key_column="ts", value_column="px")


class TestWriteDelimited:
    def test_default_columns(self, five_points):
        out = io.StringIO()
        written = write_delimited(out, five_points)
        assert written == 5
        lines = out.getvalue().splitlines()
        assert lines[0] == "key,value"
        assert lines[1] == "1,1.0"
        assert lines[-1] == "5,5.0"

    def test_datetimes_as_iso(self):
        ts = TimeSeries.from_parallel_sequences([datetime(2024, 1, 2, 9, 30)], [1.5])
        out = io.StringIO()
        write_delimited(out, ts, key_column="time", value_column="px", delimiter="\t")
        assert out.getvalue() == "time\tpx\n2024-01-02T09:30:00\t1.5\n"

    def test_to_record(self):
        ts = TimeSeries.from_parallel_sequences([1, 2], [(10.0, 3), (11.0, 4)])
        out = io.StringIO()
        write_delimited(out, ts, to_record=lambda p: {"t": p.key, "px": p.value[0], "qty": p.value[1]})
        assert out.getvalue() == "t,px,qty\n1,10.0,3\n2,11.0,4\n"

    def test_empty_series_writes_header(self):
        out = io.StringIO()
        assert write_delimited(out, TimeSeries.empty()) == 0
        assert out.getvalue() == "key,value\n"

    def test_round_trip(self, minute_series):
        buffer = io.StringIO()
        write_delimited(buffer, minute_series)
        buffer.seek(0)
        decoded = read_delimited(buffer, key_type=datetime, value_type=float)
        assert decoded == minute_series


class TestWriteDelimitedErrors:
    def test_unserializable_value(self):
        ts = TimeSeries.from_parallel_sequences([1, 2], [1.0, object()])
        with pytest.raises(CodecError) as exc_info:
            write_delimited(io.StringIO(), ts)
        assert exc_info.value.context.operation == "write_delimited"
        assert exc_info.value.context.position == 2
        assert exc_info.value.__cause__ is not None

    def test_record_field_not_in_header(self):
        ts = TimeSeries.from_parallel_sequences([1, 2], [10.0, 11.0])
        with pytest.raises(CodecError) as exc_info:
            write_delimited(
                io.StringIO(),
                ts,
                to_record=lambda p: {"t": p.key, "px": p.value},
                fieldnames=["t"],
            )
        assert exc_info.value.context.position == 1
