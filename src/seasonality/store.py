"""Bar store — builds the ordered daily bar series for one symbol and range.

The store is rebuilt wholesale on every load. Each load draws a request
token; only the result of the most recent request is committed, so a slow
response that lands after a newer request is discarded.
"""

from __future__ import annotations

import asyncio
import logging
import math
from dataclasses import dataclass, field, replace
from datetime import date, datetime, timedelta, timezone
from typing import Any, Mapping

from seasonality.cache import CacheBackend, NoCache
from seasonality.errors import SeasonalityError, SeasonalityErrorCode
from seasonality.models.bar import Bar
from seasonality.providers.base import BaseMarketDataProvider
from seasonality.quality import validate_bars

logger = logging.getLogger(__name__)

INTERVAL = "1d"

_FIELDS = ("open", "high", "low", "close", "volume")


@dataclass(frozen=True)
class LoadRequest:
    """One load attempt; ``token`` grows monotonically per store."""

    token: int
    symbol: str
    start: date
    end: date


@dataclass(frozen=True)
class RejectedRecord:
    """A raw record dropped from the build."""

    index: int
    record: Any
    reason: str


@dataclass(frozen=True)
class LoadResult:
    """Outcome of a load.

    Attributes:
        request: The request this result answers.
        bars: Built bars, ascending by date. Empty on failure.
        rejected: Malformed records that were dropped.
        gaps: Calendar days missing between loaded bars (quality report).
        error: Failure surfaced to the caller, if any.
        stale: True when a newer request superseded this one.
        from_cache: True when bars came from the cache backend.
    """

    request: LoadRequest
    bars: list[Bar] = field(default_factory=list)
    rejected: list[RejectedRecord] = field(default_factory=list)
    gaps: list[date] = field(default_factory=list)
    error: SeasonalityError | None = None
    stale: bool = False
    from_cache: bool = False

    @property
    def ok(self) -> bool:
        return self.error is None and not self.stale


def day_bounds_ms(start: date, end: date) -> tuple[int, int]:
    """Epoch-millisecond bounds covering ``start`` 00:00 to ``end`` 23:59:59.999 UTC."""
    start_dt = datetime.combine(start, datetime.min.time(), tzinfo=timezone.utc)
    end_dt = datetime.combine(end + timedelta(days=1), datetime.min.time(), tzinfo=timezone.utc)
    return int(start_dt.timestamp() * 1000), int(end_dt.timestamp() * 1000) - 1


def _record_date(value: Any) -> date:
    if isinstance(value, datetime):
        return value.astimezone(timezone.utc).date() if value.tzinfo else value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str) and not value.lstrip("-").isdigit():
        return date.fromisoformat(value[:10])
    return datetime.fromtimestamp(int(value) / 1000, tz=timezone.utc).date()


def parse_record(record: Any) -> Bar:
    """Map one raw k-line record to a Bar.

    Accepts the positional layout ``[open_time_ms, open, high, low, close,
    volume, ...]`` or a mapping keyed by ``open_time`` (or ``date``) and
    the OHLCV field names.

    Raises:
        SeasonalityError: ``MALFORMED_RECORD`` when a required field is
            missing or out of range.
    """
    try:
        if isinstance(record, Mapping):
            when = record["open_time"] if "open_time" in record else record["date"]
            raw = [record[name] for name in _FIELDS]
        else:
            when = record[0]
            raw = list(record[1:6])
            if len(raw) < len(_FIELDS):
                raise IndexError("expected 6 positional fields")
        day = _record_date(when)
        values = [float(v) for v in raw]
    except (KeyError, IndexError, TypeError, ValueError) as exc:
        raise SeasonalityError(
            f"Malformed k-line record: {exc}",
            code=SeasonalityErrorCode.MALFORMED_RECORD,
        ) from exc

    if any(math.isnan(v) or math.isinf(v) for v in values):
        raise SeasonalityError(
            "Malformed k-line record: non-finite value",
            code=SeasonalityErrorCode.MALFORMED_RECORD,
        )
    o, h, l, c, v = values  # noqa: E741
    if min(o, h, l, c) <= 0:
        raise SeasonalityError(
            "Malformed k-line record: non-positive price",
            code=SeasonalityErrorCode.MALFORMED_RECORD,
        )
    if v < 0:
        raise SeasonalityError(
            "Malformed k-line record: negative volume",
            code=SeasonalityErrorCode.MALFORMED_RECORD,
        )
    if h < l or h < max(o, c) or l > min(o, c):
        raise SeasonalityError(
            "Malformed k-line record: high/low do not bracket open/close",
            code=SeasonalityErrorCode.MALFORMED_RECORD,
        )
    return Bar(date=day, open=o, high=h, low=l, close=c, volume=v)


def build_bars(records: list[Any]) -> tuple[list[Bar], list[RejectedRecord]]:
    """Build ascending bars from raw records, dropping malformed ones.

    Raises:
        SeasonalityError: ``DUPLICATE_DATE`` when two valid records share
            a date.
    """
    bars: list[Bar] = []
    rejected: list[RejectedRecord] = []
    for i, record in enumerate(records):
        try:
            bars.append(parse_record(record))
        except SeasonalityError as exc:
            rejected.append(RejectedRecord(index=i, record=record, reason=exc.message))

    bars.sort(key=lambda b: b.date)
    for prev, cur in zip(bars, bars[1:]):
        if prev.date == cur.date:
            raise SeasonalityError(
                f"Duplicate bar for {cur.date.isoformat()}",
                code=SeasonalityErrorCode.DUPLICATE_DATE,
            )
    return bars, rejected


class BarStore:
    """Holds the current daily bar series for the active symbol and range.

    Usage::

        store = BarStore(MockProvider())
        result = store.load("BTCUSDT", date(2024, 3, 1), date(2024, 3, 31))
        if result.error:
            ...  # store.bars is empty; re-trigger the load to retry
    """

    def __init__(
        self,
        provider: BaseMarketDataProvider,
        cache: CacheBackend | None = None,
        validate: bool = True,
    ) -> None:
        self.provider = provider
        self.cache = cache if cache is not None else NoCache()
        self.validate = validate

        self._token = 0
        self._current: LoadResult | None = None

    # ------------------------------------------------------------ state

    @property
    def bars(self) -> list[Bar]:
        return list(self._current.bars) if self._current else []

    @property
    def symbol(self) -> str | None:
        return self._current.request.symbol if self._current else None

    @property
    def last_result(self) -> LoadResult | None:
        return self._current

    @property
    def latest_token(self) -> int:
        return self._token

    def bars_between(self, start: date, end: date) -> list[Bar]:
        return [b for b in self.bars if start <= b.date <= end]

    # ------------------------------------------------------------- load

    def begin(self, symbol: str, start: date, end: date) -> LoadRequest:
        """Register a new request; any older in-flight request becomes stale."""
        if end < start:
            start, end = end, start
        self._token += 1
        return LoadRequest(token=self._token, symbol=symbol.upper(), start=start, end=end)

    def fetch(self, request: LoadRequest) -> LoadResult:
        """Fetch and build bars for a request without touching store state."""
        cached = self.cache.get_bars(request.symbol, request.start, request.end, INTERVAL)
        if cached is not None:
            return LoadResult(request=request, bars=cached, from_cache=True)

        start_ms, end_ms = day_bounds_ms(request.start, request.end)
        try:
            records = self.provider.get_daily_bars(request.symbol, start_ms, end_ms)
            bars, rejected = build_bars(records)
        except SeasonalityError as exc:
            logger.error("Load of %s failed: %s", request.symbol, exc.message)
            return LoadResult(request=request, error=exc)
        except Exception as exc:
            logger.error("Load of %s failed: %s", request.symbol, exc)
            return LoadResult(
                request=request,
                error=SeasonalityError(
                    f"Fetch failed: {exc}",
                    code=SeasonalityErrorCode.FETCH_FAILED,
                    retryable=True,
                ),
            )

        for r in rejected:
            logger.warning(
                "Dropped record %d for %s: %s", r.index, request.symbol, r.reason,
            )

        gaps: list[date] = []
        if self.validate and bars:
            report = validate_bars(bars)
            for check in report.failed_checks:
                logger.warning("%s for %s: %s", check.name, request.symbol, check.message)
            gaps = report.missing_dates

        self.cache.store_bars(request.symbol, bars, INTERVAL, request.start, request.end)
        return LoadResult(request=request, bars=bars, rejected=rejected, gaps=gaps)

    def commit(self, result: LoadResult) -> LoadResult:
        """Make ``result`` current unless a newer request has been issued."""
        if result.request.token != self._token:
            logger.debug(
                "Discarding stale load %d for %s (latest is %d)",
                result.request.token, result.request.symbol, self._token,
            )
            return replace(result, stale=True)
        self._current = result
        return result

    def load(self, symbol: str, start: date, end: date) -> LoadResult:
        """Rebuild the store for ``symbol`` over ``[start, end]``."""
        request = self.begin(symbol, start, end)
        return self.commit(self.fetch(request))

    async def load_async(self, symbol: str, start: date, end: date) -> LoadResult:
        """Rebuild the store, running the blocking fetch off the event loop.

        If another load is started before this one resolves, this result
        comes back with ``stale=True`` and the store is left untouched.
        """
        request = self.begin(symbol, start, end)
        result = await asyncio.to_thread(self.fetch, request)
        return self.commit(result)
