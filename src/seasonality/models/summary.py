"""Calendar rollup data models."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import date


@dataclass(frozen=True)
class WeekSummary:
    """Rollup of the eligible days in one Sunday-started week.

    Numeric fields are ``NaN`` when the week holds no bars.

    Attributes:
        week_start: Sunday the week starts on.
        avg_volatility: Mean volatility over eligible days (absent counts as 0).
        total_volume: Summed volume over eligible days.
        avg_close: Mean close over eligible days.
        eligible_days: Number of days in the week with a bar.
    """

    week_start: date
    avg_volatility: float
    total_volume: float
    avg_close: float
    eligible_days: int = 0

    @property
    def has_data(self) -> bool:
        return self.eligible_days > 0 and not math.isnan(self.avg_close)


@dataclass(frozen=True)
class MonthSummary:
    """Rollup of the eligible days in one calendar month.

    Attributes:
        month: Month label, ``YYYY-MM``.
        avg_volatility: Mean volatility over eligible days (absent counts as 0).
        total_volume: Summed volume over eligible days.
        avg_close: Mean close over eligible days.
        performance_pct: First eligible open to last eligible close, in percent.
        eligible_days: Number of days in the month with a bar.
    """

    month: str
    avg_volatility: float
    total_volume: float
    avg_close: float
    performance_pct: float
    eligible_days: int = 0

    @property
    def has_data(self) -> bool:
        return self.eligible_days > 0 and not math.isnan(self.avg_close)


@dataclass(frozen=True)
class CalendarAggregate:
    """Week and month rollups for the active calendar view."""

    view: str
    start: date
    end: date
    weeks: list[WeekSummary] = field(default_factory=list)
    month: MonthSummary | None = None
