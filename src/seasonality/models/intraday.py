"""Intraday tick data model."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class IntradayTick:
    """One intraday k-line (15 minutes by default) used for day detail.

    Attributes:
        time: Tick open time (UTC).
        high: High price.
        low: Low price.
        volume: Traded volume.
    """

    time: datetime
    high: float
    low: float
    volume: float

    @property
    def mid(self) -> float:
        return (self.high + self.low) / 2
