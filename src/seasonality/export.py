"""Tabular output for export writers and per-date render lookups."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Any, Mapping

import pandas as pd

from seasonality.models.bar import Bar
from seasonality.models.metric import RollingMetric

EXPORT_COLUMNS = [
    "date", "open", "high", "low", "close", "volume",
    "volatility", "ma5", "ma10", "rsi14", "benchmark_close",
]

# Written in place of an absent metric. Never 0.
EMPTY = ""


@dataclass(frozen=True)
class DayEntry:
    """What the calendar knows about one date."""

    bar: Bar | None = None
    metric: RollingMetric | None = None


def _rows(
    bars: list[Bar],
    metrics: list[RollingMetric],
    benchmark: Mapping[date, float] | None,
    start: date | None,
    end: date | None,
) -> list[dict[str, Any]]:
    by_date = {m.date: m for m in metrics}
    rows: list[dict[str, Any]] = []
    for bar in bars:
        if start is not None and bar.date < start:
            continue
        if end is not None and bar.date > end:
            continue
        m = by_date.get(bar.date)
        rows.append({
            "date": bar.date.isoformat(),
            "open": bar.open,
            "high": bar.high,
            "low": bar.low,
            "close": bar.close,
            "volume": bar.volume,
            "volatility": m.volatility if m else None,
            "ma5": m.ma5 if m else None,
            "ma10": m.ma10 if m else None,
            "rsi14": m.rsi14 if m else None,
            "benchmark_close": benchmark.get(bar.date) if benchmark else None,
        })
    return rows


def export_rows(
    bars: list[Bar],
    metrics: list[RollingMetric],
    benchmark: Mapping[date, float] | None = None,
    start: date | None = None,
    end: date | None = None,
) -> list[dict[str, Any]]:
    """One row per bar in ``[start, end]`` with metrics alongside.

    Absent metrics and a missing benchmark close are written as ``""``.
    """
    rows = _rows(bars, metrics, benchmark, start, end)
    return [
        {k: EMPTY if v is None else v for k, v in row.items()}
        for row in rows
    ]


def export_frame(
    bars: list[Bar],
    metrics: list[RollingMetric],
    benchmark: Mapping[date, float] | None = None,
    start: date | None = None,
    end: date | None = None,
) -> pd.DataFrame:
    """Export rows as a DataFrame; absent values are missing (NaN), not 0.

    ``frame.to_csv(index=False)`` writes them as empty fields.
    """
    df = pd.DataFrame(_rows(bars, metrics, benchmark, start, end), columns=EXPORT_COLUMNS)
    numeric = [c for c in EXPORT_COLUMNS if c != "date"]
    df[numeric] = df[numeric].astype(float)
    return df


def day_lookup(bars: list[Bar], metrics: list[RollingMetric]) -> dict[str, DayEntry]:
    """Per-date entries keyed by ISO date for rendering."""
    lookup: dict[str, DayEntry] = {b.date.isoformat(): DayEntry(bar=b) for b in bars}
    for m in metrics:
        key = m.date.isoformat()
        entry = lookup.get(key)
        lookup[key] = DayEntry(bar=entry.bar if entry else None, metric=m)
    return lookup
