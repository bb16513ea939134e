"""Session context — the state the dashboard views share."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, timezone

from seasonality.alerts import AlertRegistry
from seasonality.calendar import RangeSelection, ViewGranularity, shift_anchor, view_range


def _utc_today() -> date:
    return datetime.now(timezone.utc).date()


@dataclass
class SessionContext:
    """Explicit session state passed into the manager.

    Attributes:
        symbol: Active trading pair.
        view: Active calendar granularity.
        anchor: Day the view is centred on.
        alerts: Alert rules for this session.
        range_override: Explicit ``(start, end)`` replacing the view range,
            e.g. a zoomed-in selection.
        selection: Days picked on the calendar, used as the export range.
    """

    symbol: str = "BTCUSDT"
    view: ViewGranularity = ViewGranularity.MONTHLY
    anchor: date = field(default_factory=_utc_today)
    alerts: AlertRegistry = field(default_factory=AlertRegistry)
    range_override: tuple[date, date] | None = None
    selection: RangeSelection = field(default_factory=RangeSelection)

    def visible_range(self) -> tuple[date, date]:
        if self.range_override is not None:
            return self.range_override
        return view_range(self.anchor, self.view)

    def navigate(self, steps: int) -> None:
        """Move back (negative) or forward by whole view periods."""
        self.anchor = shift_anchor(self.anchor, self.view, steps)
        self.range_override = None

    def request_key(self) -> tuple[str, date, date]:
        start, end = self.visible_range()
        return self.symbol.upper(), start, end
