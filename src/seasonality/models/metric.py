"""Rolling metric data model."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date


@dataclass(frozen=True)
class RollingMetric:
    """Window-derived metrics attached to a bar's date.

    A field is ``None`` when its lookback window is not fully covered by
    the bars loaded before that date.

    Attributes:
        date: Date of the bar the window ends on.
        volatility: Population std-dev of the trailing 5 open-to-close returns.
        ma5: Mean close over the trailing 5 bars.
        ma10: Mean close over the trailing 10 bars.
        rsi14: 14-period relative strength index in [0, 100].
    """

    date: date
    volatility: float | None = None
    ma5: float | None = None
    ma10: float | None = None
    rsi14: float | None = None
