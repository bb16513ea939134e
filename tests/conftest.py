"""Shared fixtures for seasonality tests."""

from __future__ import annotations

import sys
from datetime import date, timedelta
from pathlib import Path

import pytest

# Ensure src/ is on the path for editable-style imports
sys.path.insert(0, str(Path(__file__).resolve().parent.parent / "src"))

from seasonality.models.bar import Bar
from seasonality.providers.mock import MockProvider


def make_bar(day: date, open: float = 100.0, close: float = 100.0, volume: float = 1000.0) -> Bar:
    """Bar with a consistent high/low around open and close."""
    return Bar(
        date=day,
        open=open,
        high=max(open, close) + 1.0,
        low=min(open, close) - 1.0,
        close=close,
        volume=volume,
    )


def make_series(
    start: date,
    closes: list[float],
    opens: list[float] | None = None,
    volume: float = 1000.0,
) -> list[Bar]:
    """Consecutive daily bars; opens default to the closes (flat days)."""
    opens = opens or closes
    return [
        make_bar(start + timedelta(days=i), open=o, close=c, volume=volume)
        for i, (o, c) in enumerate(zip(opens, closes))
    ]


@pytest.fixture
def mock_provider() -> MockProvider:
    return MockProvider()


@pytest.fixture
def scenario_bars() -> list[Bar]:
    """6 consecutive days, Fri 2024-03-01 .. Wed 2024-03-06."""
    return make_series(
        date(2024, 3, 1),
        closes=[100.0, 102.0, 101.0, 105.0, 103.0, 108.0],
        opens=[100.0, 101.0, 100.0, 102.0, 104.0, 103.0],
    )


@pytest.fixture
def month_bars() -> list[Bar]:
    """Every day of March 2024 with a gently rising close."""
    closes = [100.0 + i * 0.5 for i in range(31)]
    opens = [c - 0.25 for c in closes]
    return make_series(date(2024, 3, 1), closes=closes, opens=opens)
