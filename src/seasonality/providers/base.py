"""Abstract base class for market data providers."""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import date
from typing import Any

from seasonality.models.intraday import IntradayTick
from seasonality.models.order_book import OrderBookSnapshot


class BaseMarketDataProvider(ABC):
    """Abstract base for all market data providers.

    Subclasses must implement ``get_daily_bars``. The order book and
    intraday endpoints default to ``NotImplementedError`` — providers
    implement only what they support and advertise it via
    ``capabilities()``.
    """

    # --- Daily k-lines (required) ---

    @abstractmethod
    def get_daily_bars(
        self,
        symbol: str,
        start_ms: int,
        end_ms: int,
    ) -> list[Any]:
        """Fetch raw daily k-line records.

        Args:
            symbol: Trading pair, e.g. ``BTCUSDT``.
            start_ms: Range start, epoch milliseconds (inclusive).
            end_ms: Range end, epoch milliseconds (inclusive).

        Returns:
            Raw records, either positional
            ``[open_time_ms, open, high, low, close, volume, ...]`` or
            mappings with ``open_time``/``date``, ``open``, ``high``,
            ``low``, ``close`` and ``volume`` keys. Values may be strings.

        Raises:
            SeasonalityError: The upstream source is unreachable or
                answered with a non-2xx status.
        """
        ...

    # --- Sibling displays ---

    def get_order_book_snapshot(self, symbol: str, depth: int = 100) -> OrderBookSnapshot:
        """Get sorted bid/ask levels for a symbol."""
        raise NotImplementedError

    def get_intraday_ticks(
        self, symbol: str, day: date, interval: str = "15m",
    ) -> list[IntradayTick]:
        """Get intraday k-lines covering one UTC day."""
        raise NotImplementedError

    # --- Capabilities ---

    def capabilities(self) -> set[str]:
        """Return the set of supported features.

        Possible values: ``daily_bars``, ``order_book``, ``intraday``.
        """
        return {"daily_bars"}
