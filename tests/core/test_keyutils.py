"""Tests for timespine.core.keyutils module."""

from datetime import datetime, timedelta

import pytest

from timespine.core.errors import InvalidParameterError
from timespine.core.keyutils import any_key, within


class TestWithin:
    def test_inclusive_boundary(self):
        accept = within(2)
        assert accept(10, 8)
        assert accept(10, 12)
        assert not accept(10, 7)

    def test_exclusive_boundary(self):
        accept = within(2, inclusive=False)
        assert accept(10, 9)
        assert not accept(10, 8)

    def test_zero_tolerance_is_exact(self):
        accept = within(0)
        assert accept(5, 5)
        assert not accept(5, 4)

    def test_timedelta_tolerance(self):
        accept = within(timedelta(seconds=30))
        t = datetime(2024, 1, 1, 12, 0, 0)
        assert accept(t, t - timedelta(seconds=30))
        assert not accept(t, t - timedelta(seconds=31))

    def test_negative_tolerance_rejected(self):
        with pytest.raises(InvalidParameterError):
            within(-1)
        with pytest.raises(InvalidParameterError):
            within(timedelta(seconds=-1))


def test_any_key_accepts_everything():
    assert any_key(1, 1_000_000)
