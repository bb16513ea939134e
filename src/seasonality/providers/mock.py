"""Mock provider for testing and offline use — no network required."""

from __future__ import annotations

from datetime import date, datetime, time, timedelta, timezone
from typing import Any

from seasonality.errors import SeasonalityError
from seasonality.models.bar import Bar
from seasonality.models.intraday import IntradayTick
from seasonality.models.order_book import OrderBookLevel, OrderBookSnapshot
from seasonality.providers.base import BaseMarketDataProvider


def bar_to_kline(bar: Bar) -> list[Any]:
    """Encode a Bar in the Binance positional k-line layout (string prices)."""
    open_dt = datetime.combine(bar.date, time(0, 0), tzinfo=timezone.utc)
    open_ms = int(open_dt.timestamp() * 1000)
    return [
        open_ms,
        str(bar.open),
        str(bar.high),
        str(bar.low),
        str(bar.close),
        str(bar.volume),
        open_ms + 86_399_999,
    ]


class MockProvider(BaseMarketDataProvider):
    """In-memory provider that returns configurable static data.

    Use ``set_bars``/``set_klines``, ``set_order_book``, etc. to pre-load
    data, or leave defaults for auto-generated synthetic data. ``fail``
    makes the next calls for a symbol raise the given error.
    """

    def __init__(self) -> None:
        self._klines: dict[str, list[Any]] = {}
        self._order_books: dict[str, OrderBookSnapshot] = {}
        self._intraday: dict[tuple[str, date], list[IntradayTick]] = {}
        self._failures: dict[str, SeasonalityError] = {}
        self.calls: list[tuple[str, int, int]] = []

    # --- Pre-load helpers ---

    def set_bars(self, symbol: str, bars: list[Bar]) -> None:
        self._klines[symbol.upper()] = [bar_to_kline(b) for b in bars]

    def set_klines(self, symbol: str, records: list[Any]) -> None:
        self._klines[symbol.upper()] = list(records)

    def set_order_book(self, symbol: str, snapshot: OrderBookSnapshot) -> None:
        self._order_books[symbol.upper()] = snapshot

    def set_intraday(self, symbol: str, day: date, ticks: list[IntradayTick]) -> None:
        self._intraday[(symbol.upper(), day)] = ticks

    def fail(self, symbol: str, error: SeasonalityError) -> None:
        self._failures[symbol.upper()] = error

    def recover(self, symbol: str) -> None:
        self._failures.pop(symbol.upper(), None)

    # --- Provider implementation ---

    def get_daily_bars(
        self,
        symbol: str,
        start_ms: int,
        end_ms: int,
    ) -> list[Any]:
        key = symbol.upper()
        self.calls.append((key, start_ms, end_ms))
        if key in self._failures:
            raise self._failures[key]
        if key in self._klines:
            return [r for r in self._klines[key] if self._in_range(r, start_ms, end_ms)]
        return self._generate_klines(start_ms, end_ms)

    def get_order_book_snapshot(self, symbol: str, depth: int = 100) -> OrderBookSnapshot:
        key = symbol.upper()
        if key in self._failures:
            raise self._failures[key]
        if key in self._order_books:
            book = self._order_books[key]
            return OrderBookSnapshot(
                symbol=book.symbol,
                bids=book.bids[:depth],
                asks=book.asks[:depth],
                last_update_id=book.last_update_id,
            )
        bids = [OrderBookLevel(round(99.99 - i * 0.01, 2), 1.0 + i) for i in range(depth)]
        asks = [OrderBookLevel(round(100.01 + i * 0.01, 2), 1.0 + i) for i in range(depth)]
        return OrderBookSnapshot(symbol=key, bids=bids, asks=asks, last_update_id=1)

    def get_intraday_ticks(
        self, symbol: str, day: date, interval: str = "15m",
    ) -> list[IntradayTick]:
        key = symbol.upper()
        if key in self._failures:
            raise self._failures[key]
        if (key, day) in self._intraday:
            return self._intraday[(key, day)]
        start = datetime.combine(day, time(0, 0), tzinfo=timezone.utc)
        return [
            IntradayTick(
                time=start + timedelta(minutes=15 * i),
                high=100.5 + (i % 4) * 0.1,
                low=99.5 + (i % 4) * 0.1,
                volume=10.0 + i,
            )
            for i in range(96)
        ]

    def capabilities(self) -> set[str]:
        return {"daily_bars", "order_book", "intraday"}

    # --- Synthetic data generation ---

    @staticmethod
    def _in_range(record: Any, start_ms: int, end_ms: int) -> bool:
        try:
            open_ms = int(record[0])
        except (IndexError, KeyError, TypeError, ValueError):
            return True  # let the store reject it
        return start_ms <= open_ms <= end_ms

    @staticmethod
    def _generate_klines(start_ms: int, end_ms: int) -> list[Any]:
        """Generate one synthetic k-line per UTC day in the range."""
        records: list[Any] = []
        day_ms = 86_400_000
        cursor = start_ms - start_ms % day_ms
        if cursor < start_ms:
            cursor += day_ms
        i = 0
        while cursor <= end_ms:
            o = 100.0 + (i % 7) * 0.5
            c = o + (0.4 if i % 3 else -0.3)
            records.append([
                cursor,
                f"{o:.2f}",
                f"{max(o, c) + 0.5:.2f}",
                f"{min(o, c) - 0.5:.2f}",
                f"{c:.2f}",
                f"{1000.0 + i * 10:.2f}",
                cursor + day_ms - 1,
            ])
            cursor += day_ms
            i += 1
        return records
