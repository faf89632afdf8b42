"""
Shared pytest fixtures and configuration for timespine tests.

This module provides:
- Settings cache isolation (no test sees another test's overrides)
- Location-based auto-marking (core / io / unit)
- Sample series used across the engine tests

Usage:
    Fixtures are auto-discovered by pytest; request them as arguments.

    def test_something(minute_series):
        ...
"""

import os
from datetime import datetime, timedelta
from pathlib import Path
from typing import Generator

import pytest

from timespine.core.series import TimeSeries
from timespine.core.settings import clear_settings_cache


# =============================================================================
# Test Markers Configuration
# =============================================================================


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    """Auto-mark tests based on their location."""
    for item in items:
        test_path = Path(item.path).relative_to(Path(__file__).parent)
        parts = test_path.parts

        if parts and parts[0] == "core":
            item.add_marker(pytest.mark.core)
        elif parts and parts[0] == "io":
            item.add_marker(pytest.mark.io)

        item.add_marker(pytest.mark.unit)


# =============================================================================
# Settings Isolation
# =============================================================================


@pytest.fixture(autouse=True)
def isolated_settings(monkeypatch: pytest.MonkeyPatch) -> Generator[None, None, None]:
    """
    Drop TIMESPINE_* variables from the environment and reset the settings
    cache before and after each test.
    """
    for name in list(os.environ):
        if name.startswith("TIMESPINE_"):
            monkeypatch.delenv(name, raising=False)
    clear_settings_cache()
    yield
    clear_settings_cache()


# =============================================================================
# Sample Series
# =============================================================================


@pytest.fixture
def base_time() -> datetime:
    return datetime(2024, 1, 2, 9, 30)


@pytest.fixture
def five_points() -> TimeSeries[int, float]:
    """Keys 1..5 with values 1.0..5.0."""
    return TimeSeries.from_parallel_sequences([1, 2, 3, 4, 5], [1.0, 2.0, 3.0, 4.0, 5.0])


@pytest.fixture
def offset_points() -> TimeSeries[int, float]:
    """Keys 2..6 with values 2.0..6.0."""
    return TimeSeries.from_parallel_sequences([2, 3, 4, 5, 6], [2.0, 3.0, 4.0, 5.0, 6.0])


@pytest.fixture
def minute_series(base_time: datetime) -> TimeSeries[datetime, float]:
    """Ten one-minute bars starting at ``base_time``, values 0.0..9.0."""
    keys = [base_time + timedelta(minutes=i) for i in range(10)]
    return TimeSeries.from_parallel_sequences(keys, [float(i) for i in range(10)])
