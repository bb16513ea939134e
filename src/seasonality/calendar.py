"""Calendar aggregation — Sunday-started weeks, calendar months, view ranges.

Rollups average over *eligible* days only (days in the bucket with a bar).
A bucket with no eligible days yields NaN fields, never zeros.
"""

from __future__ import annotations

from datetime import date, timedelta
from enum import Enum
from typing import Mapping

from seasonality.models.bar import Bar
from seasonality.models.metric import RollingMetric
from seasonality.models.summary import CalendarAggregate, MonthSummary, WeekSummary

NAN = float("nan")


class ViewGranularity(Enum):
    """Calendar view the dashboard is showing."""

    DAILY = "Daily"
    WEEKLY = "Weekly"
    MONTHLY = "Monthly"


# ---- Date arithmetic ----

def week_start(d: date) -> date:
    """Sunday on or before ``d``."""
    return d - timedelta(days=(d.weekday() + 1) % 7)


def week_end(d: date) -> date:
    """Saturday on or after ``d``."""
    return week_start(d) + timedelta(days=6)


def month_start(d: date) -> date:
    return date(d.year, d.month, 1)


def month_end(d: date) -> date:
    if d.month == 12:
        return date(d.year + 1, 1, 1) - timedelta(days=1)
    return date(d.year, d.month + 1, 1) - timedelta(days=1)


def _add_months(d: date, months: int) -> date:
    idx = d.year * 12 + (d.month - 1) + months
    year, month = divmod(idx, 12)
    first = date(year, month + 1, 1)
    # clamp Jan 31 + 1 month to Feb 28/29
    return min(first + timedelta(days=d.day - 1), month_end(first))


def view_range(anchor: date, view: ViewGranularity) -> tuple[date, date]:
    """Date span the view displays around ``anchor``.

    Monthly spans whole weeks: from the Sunday on/before the 1st to the
    Saturday on/after the last day of the month.
    """
    if view is ViewGranularity.MONTHLY:
        return week_start(month_start(anchor)), week_end(month_end(anchor))
    if view is ViewGranularity.WEEKLY:
        return week_start(anchor), week_end(anchor)
    return anchor, anchor


def shift_anchor(anchor: date, view: ViewGranularity, steps: int) -> date:
    """Move the anchor by ``steps`` months, weeks, or days for the view."""
    if view is ViewGranularity.MONTHLY:
        return _add_months(anchor, steps)
    if view is ViewGranularity.WEEKLY:
        return anchor + timedelta(weeks=steps)
    return anchor + timedelta(days=steps)


def month_grid(anchor: date) -> list[list[date]]:
    """Weeks (Sunday..Saturday) shown by the monthly view."""
    start, end = view_range(anchor, ViewGranularity.MONTHLY)
    weeks: list[list[date]] = []
    current = start
    while current <= end:
        weeks.append([current + timedelta(days=i) for i in range(7)])
        current += timedelta(days=7)
    return weeks


# ---- Rollups ----

def _volatility_or_zero(metrics: Mapping[date, RollingMetric], d: date) -> float:
    m = metrics.get(d)
    if m is None or m.volatility is None:
        return 0.0
    return m.volatility


def summarize_week(
    days: list[date],
    bars: Mapping[date, Bar],
    metrics: Mapping[date, RollingMetric],
) -> WeekSummary:
    """Roll up one week; ``days`` are the week's dates, Sunday first."""
    eligible = [d for d in days if d in bars]
    start = week_start(days[0])
    if not eligible:
        return WeekSummary(
            week_start=start,
            avg_volatility=NAN,
            total_volume=NAN,
            avg_close=NAN,
            eligible_days=0,
        )

    n = len(eligible)
    return WeekSummary(
        week_start=start,
        avg_volatility=sum(_volatility_or_zero(metrics, d) for d in eligible) / n,
        total_volume=sum(bars[d].volume for d in eligible),
        avg_close=sum(bars[d].close for d in eligible) / n,
        eligible_days=n,
    )


def summarize_month(
    year: int,
    month: int,
    bars: Mapping[date, Bar],
    metrics: Mapping[date, RollingMetric],
) -> MonthSummary:
    """Roll up one calendar month.

    ``performance_pct`` runs from the first eligible day's open to the
    last eligible day's close, however many days are missing in between.
    """
    label = f"{year:04d}-{month:02d}"
    eligible = sorted(d for d in bars if d.year == year and d.month == month)
    if not eligible:
        return MonthSummary(
            month=label,
            avg_volatility=NAN,
            total_volume=NAN,
            avg_close=NAN,
            performance_pct=NAN,
            eligible_days=0,
        )

    n = len(eligible)
    first, last = bars[eligible[0]], bars[eligible[-1]]
    return MonthSummary(
        month=label,
        avg_volatility=sum(_volatility_or_zero(metrics, d) for d in eligible) / n,
        total_volume=sum(bars[d].volume for d in eligible),
        avg_close=sum(bars[d].close for d in eligible) / n,
        performance_pct=(last.close - first.open) / first.open * 100,
        eligible_days=n,
    )


def weekly_summaries(bars: list[Bar], metrics: list[RollingMetric]) -> list[WeekSummary]:
    """One summary per Sunday-week touched by the bars, oldest first."""
    if not bars:
        return []
    by_date = {b.date: b for b in bars}
    m_by_date = {m.date: m for m in metrics}
    out: list[WeekSummary] = []
    current = week_start(bars[0].date)
    last = bars[-1].date
    while current <= last:
        days = [current + timedelta(days=i) for i in range(7)]
        out.append(summarize_week(days, by_date, m_by_date))
        current += timedelta(days=7)
    return out


def monthly_summaries(bars: list[Bar], metrics: list[RollingMetric]) -> list[MonthSummary]:
    """One summary per calendar month touched by the bars, oldest first."""
    if not bars:
        return []
    by_date = {b.date: b for b in bars}
    m_by_date = {m.date: m for m in metrics}
    out: list[MonthSummary] = []
    current = month_start(bars[0].date)
    while current <= bars[-1].date:
        out.append(summarize_month(current.year, current.month, by_date, m_by_date))
        current = month_end(current) + timedelta(days=1)
    return out


def aggregate(
    bars: list[Bar],
    metrics: list[RollingMetric],
    view: ViewGranularity,
    anchor: date,
) -> CalendarAggregate:
    """Rollups for the buckets the active view shows.

    Monthly: one WeekSummary per grid row plus the anchor month's summary.
    Weekly: the anchor's week. Daily: no rollups.
    """
    start, end = view_range(anchor, view)
    by_date = {b.date: b for b in bars}
    m_by_date = {m.date: m for m in metrics}

    if view is ViewGranularity.MONTHLY:
        weeks = [summarize_week(w, by_date, m_by_date) for w in month_grid(anchor)]
        month = summarize_month(anchor.year, anchor.month, by_date, m_by_date)
        return CalendarAggregate(view=view.value, start=start, end=end, weeks=weeks, month=month)
    if view is ViewGranularity.WEEKLY:
        days = [start + timedelta(days=i) for i in range(7)]
        return CalendarAggregate(
            view=view.value, start=start, end=end,
            weeks=[summarize_week(days, by_date, m_by_date)],
        )
    return CalendarAggregate(view=view.value, start=start, end=end)


# ---- Day cell classification ----

def volatility_level(
    volatility: float | None, low: float = 0.01, high: float = 0.02,
) -> str | None:
    """Heat bucket for a day: "low", "medium" or "high"; None if absent."""
    if volatility is None:
        return None
    if volatility < low:
        return "low"
    if volatility < high:
        return "medium"
    return "high"


def performance_direction(bar: Bar | None) -> str:
    if bar is None or bar.close == bar.open:
        return "neutral"
    return "up" if bar.close > bar.open else "down"


def volume_ratio(bar: Bar | None, max_volume: float) -> float:
    """Bar volume relative to the largest volume in view, in [0, 1]."""
    if bar is None or max_volume <= 0:
        return 0.0
    return bar.volume / max_volume


# ---- Range selection ----

class RangeSelection:
    """Two-click date range picker state.

    The first pick sets the start, the second sets the end (swapping if it
    is earlier), and a third pick starts a new selection.
    """

    def __init__(self) -> None:
        self.start: date | None = None
        self.end: date | None = None

    @property
    def complete(self) -> bool:
        return self.start is not None and self.end is not None

    def select(self, d: date) -> None:
        if self.start is None:
            self.start = d
        elif self.end is None:
            if d < self.start:
                self.start, self.end = d, self.start
            else:
                self.end = d
        else:
            self.start, self.end = d, None

    def clear(self) -> None:
        self.start = None
        self.end = None

    def contains(self, d: date) -> bool:
        if not self.complete:
            return False
        return self.start <= d <= self.end  # type: ignore[operator]
