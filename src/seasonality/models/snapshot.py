"""Dashboard snapshot model — everything derived from one Bar Store build."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date

from seasonality.errors import SeasonalityError
from seasonality.models.alert import AlertEvent
from seasonality.models.bar import Bar
from seasonality.models.metric import RollingMetric
from seasonality.models.summary import CalendarAggregate


@dataclass(frozen=True)
class DashboardSnapshot:
    """Point-in-time view state combining bars with their derived data.

    Attributes:
        symbol: Symbol the bars belong to.
        start: First day of the visible range.
        end: Last day of the visible range.
        bars: Loaded bars, ascending.
        metrics: One RollingMetric per bar.
        calendar: Week/month rollups for the active view.
        alerts: Alert events raised over the visible range.
        rejected_records: Number of malformed records dropped.
        error: Load failure, if any; bars are empty when set.
    """

    symbol: str
    start: date
    end: date
    bars: list[Bar] = field(default_factory=list)
    metrics: list[RollingMetric] = field(default_factory=list)
    calendar: CalendarAggregate | None = None
    alerts: list[AlertEvent] = field(default_factory=list)
    rejected_records: int = 0
    error: SeasonalityError | None = None

    @property
    def max_volume(self) -> float:
        return max((b.volume for b in self.bars), default=0.0)
