"""Binance spot REST provider.

Public endpoints only — no API key needed. Uses ``requests`` directly.
"""

from __future__ import annotations

import logging
import time
from datetime import date, datetime, timezone
from typing import Any

import requests

from seasonality.errors import SeasonalityError, SeasonalityErrorCode
from seasonality.models.intraday import IntradayTick
from seasonality.models.order_book import OrderBookLevel, OrderBookSnapshot
from seasonality.providers.base import BaseMarketDataProvider

logger = logging.getLogger(__name__)

_MS_PER_DAY = 86_400_000


class BinanceProvider(BaseMarketDataProvider):
    """Fetch k-lines and depth snapshots from the Binance spot API.

    Capabilities: daily_bars, order_book, intraday.
    """

    KLINE_LIMIT = 1000

    def __init__(
        self,
        base_url: str = "https://api.binance.com",
        timeout: float | None = None,
        session: requests.Session | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()

    def capabilities(self) -> set[str]:
        return {"daily_bars", "order_book", "intraday"}

    # ------------------------------------------------------------ k-lines

    def get_daily_bars(
        self,
        symbol: str,
        start_ms: int,
        end_ms: int,
    ) -> list[Any]:
        return self._klines(symbol, "1d", start_ms, end_ms)

    def get_intraday_ticks(
        self, symbol: str, day: date, interval: str = "15m",
    ) -> list[IntradayTick]:
        day_start = datetime.combine(day, datetime.min.time(), tzinfo=timezone.utc)
        start_ms = int(day_start.timestamp() * 1000)
        end_ms = start_ms + _MS_PER_DAY - 1
        rows = self._klines(symbol, interval, start_ms, end_ms)
        try:
            return [
                IntradayTick(
                    time=datetime.fromtimestamp(int(r[0]) / 1000, tz=timezone.utc),
                    high=float(r[2]),
                    low=float(r[3]),
                    volume=float(r[5]),
                )
                for r in rows
            ]
        except (IndexError, TypeError, ValueError) as exc:
            raise SeasonalityError(
                f"Binance intraday response malformed: {exc}",
                code=SeasonalityErrorCode.MALFORMED_RECORD,
            ) from exc

    def _klines(
        self, symbol: str, interval: str, start_ms: int, end_ms: int,
    ) -> list[Any]:
        rows: list[Any] = []
        cursor = start_ms

        while cursor <= end_ms:
            page = self._get(
                "/api/v3/klines",
                {
                    "symbol": symbol.upper(),
                    "interval": interval,
                    "startTime": cursor,
                    "endTime": end_ms,
                    "limit": self.KLINE_LIMIT,
                },
            )
            if not isinstance(page, list):
                raise SeasonalityError(
                    "Binance k-line response is not a list",
                    code=SeasonalityErrorCode.FETCH_FAILED,
                )
            rows.extend(page)

            if len(page) < self.KLINE_LIMIT:
                break
            try:
                cursor = int(page[-1][0]) + 1
            except (IndexError, TypeError, ValueError):
                break
            time.sleep(0.1)

        logger.debug(
            "Fetched %d %s k-lines for %s", len(rows), interval, symbol.upper(),
        )
        return rows

    # --------------------------------------------------------- order book

    def get_order_book_snapshot(self, symbol: str, depth: int = 100) -> OrderBookSnapshot:
        data = self._get("/api/v3/depth", {"symbol": symbol.upper(), "limit": depth})
        try:
            bids = [OrderBookLevel(float(p), float(q)) for p, q in data.get("bids", [])]
            asks = [OrderBookLevel(float(p), float(q)) for p, q in data.get("asks", [])]
        except (AttributeError, TypeError, ValueError) as exc:
            raise SeasonalityError(
                f"Binance depth response malformed: {exc}",
                code=SeasonalityErrorCode.MALFORMED_RECORD,
            ) from exc

        return OrderBookSnapshot(
            symbol=symbol.upper(),
            bids=sorted(bids, key=lambda lvl: lvl.price, reverse=True),
            asks=sorted(asks, key=lambda lvl: lvl.price),
            last_update_id=data.get("lastUpdateId"),
        )

    # ------------------------------------------------------------ helpers

    def _get(self, path: str, params: dict[str, Any]) -> Any:
        try:
            resp = self.session.get(
                f"{self.base_url}{path}", params=params, timeout=self.timeout,
            )
        except requests.RequestException as exc:
            raise SeasonalityError(
                f"Binance request failed: {exc}",
                code=SeasonalityErrorCode.FETCH_FAILED,
                retryable=True,
            ) from exc

        self._check_response(resp)
        try:
            return resp.json()
        except ValueError as exc:
            raise SeasonalityError(
                f"Binance returned invalid JSON: {exc}",
                code=SeasonalityErrorCode.FETCH_FAILED,
            ) from exc

    def _check_response(self, resp: Any) -> None:
        if resp.status_code in (418, 429):
            raise SeasonalityError(
                "Binance rate limited",
                code=SeasonalityErrorCode.RATE_LIMITED,
                retryable=True,
            )
        if resp.status_code == 400:
            message = ""
            try:
                message = resp.json().get("msg", "")
            except (ValueError, AttributeError):
                pass
            if "symbol" in message.lower():
                raise SeasonalityError(
                    f"Symbol not found on Binance: {message}",
                    code=SeasonalityErrorCode.NOT_FOUND,
                )
        if resp.status_code >= 400:
            raise SeasonalityError(
                f"Binance returned HTTP {resp.status_code}",
                code=SeasonalityErrorCode.FETCH_FAILED,
                retryable=resp.status_code >= 500,
            )

