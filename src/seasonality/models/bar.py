"""Bar (daily OHLCV) data model."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date


@dataclass(frozen=True)
class Bar:
    """Single daily price bar for one symbol.

    Attributes:
        date: UTC calendar day the bar opened on.
        open: Opening price.
        high: High price.
        low: Low price.
        close: Closing price.
        volume: Traded base-asset volume.
    """

    date: date
    open: float
    high: float
    low: float
    close: float
    volume: float

    @property
    def daily_return(self) -> float:
        """Open-to-close simple return."""
        return (self.close - self.open) / self.open

    @property
    def performance_pct(self) -> float:
        """Open-to-close move in percent."""
        return self.daily_return * 100
