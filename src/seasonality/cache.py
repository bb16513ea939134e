"""Bar caches keyed by symbol, interval and date range.

Backends: ``NoCache``, ``MemoryCache`` (TTL + LRU) and ``ParquetCache``
(one Parquet file per range). A range that reaches today (UTC) is never
written to disk because its last bar is still forming.
"""

from __future__ import annotations

import shutil
import threading
import time
from abc import ABC, abstractmethod
from collections import OrderedDict
from datetime import date, datetime, timezone
from pathlib import Path

import pandas as pd

from seasonality.models.bar import Bar

CacheKey = tuple[str, str, date, date]

BAR_COLUMNS = ["date", "open", "high", "low", "close", "volume"]


def cache_key(symbol: str, interval: str, start: date, end: date) -> CacheKey:
    return symbol.upper(), interval, start, end


def _is_settled(end: date) -> bool:
    return end < datetime.now(timezone.utc).date()


class CacheBackend(ABC):
    """Abstract cache interface."""

    @abstractmethod
    def get_bars(
        self, symbol: str, start: date, end: date, interval: str,
    ) -> list[Bar] | None:
        """Return cached bars, or None on miss."""
        ...

    @abstractmethod
    def store_bars(
        self, symbol: str, bars: list[Bar], interval: str, start: date, end: date,
    ) -> None:
        """Store a non-empty build for the range."""
        ...

    def has_data(self, symbol: str, interval: str, start: date, end: date) -> bool:
        return self.get_bars(symbol, start, end, interval) is not None

    @abstractmethod
    def clear(self, symbol: str) -> None:
        ...

    @abstractmethod
    def clear_all(self) -> None:
        ...


class NoCache(CacheBackend):
    """Always misses."""

    def get_bars(self, symbol, start, end, interval):  # type: ignore[override]
        return None

    def store_bars(self, symbol, bars, interval, start, end):  # type: ignore[override]
        pass

    def clear(self, symbol):  # type: ignore[override]
        pass

    def clear_all(self):
        pass


class ParquetCache(CacheBackend):
    """Disk cache, one Snappy-compressed Parquet file per range.

    Layout: ``{base_path}/{SYMBOL}/{interval}/{start}_{end}.parquet``
    """

    def __init__(self, base_path: Path | str) -> None:
        self.base_path = Path(base_path)
        self.base_path.mkdir(parents=True, exist_ok=True)

    def _path(self, key: CacheKey) -> Path:
        symbol, interval, start, end = key
        return self.base_path / symbol / interval / f"{start}_{end}.parquet"

    def get_bars(
        self, symbol: str, start: date, end: date, interval: str,
    ) -> list[Bar] | None:
        fp = self._path(cache_key(symbol, interval, start, end))
        if not fp.exists():
            return None
        try:
            df = pd.read_parquet(fp, columns=BAR_COLUMNS)
        except (OSError, ValueError):
            return None
        return [
            Bar(
                date=pd.Timestamp(row.date).date(),
                open=float(row.open),
                high=float(row.high),
                low=float(row.low),
                close=float(row.close),
                volume=float(row.volume),
            )
            for row in df.itertuples(index=False)
        ]

    def store_bars(
        self, symbol: str, bars: list[Bar], interval: str, start: date, end: date,
    ) -> None:
        if not bars or not _is_settled(end):
            return
        fp = self._path(cache_key(symbol, interval, start, end))
        fp.parent.mkdir(parents=True, exist_ok=True)
        df = pd.DataFrame(
            [(pd.Timestamp(b.date), b.open, b.high, b.low, b.close, b.volume) for b in bars],
            columns=BAR_COLUMNS,
        )
        df.to_parquet(fp, index=False, compression="snappy")

    def has_data(self, symbol: str, interval: str, start: date, end: date) -> bool:
        return self._path(cache_key(symbol, interval, start, end)).exists()

    def clear(self, symbol: str) -> None:
        shutil.rmtree(self.base_path / symbol.upper(), ignore_errors=True)

    def clear_all(self) -> None:
        shutil.rmtree(self.base_path, ignore_errors=True)
        self.base_path.mkdir(parents=True, exist_ok=True)


class MemoryCache(CacheBackend):
    """In-process TTL cache with LRU eviction past ``max_entries``.

    Entries hold tuples so callers can never mutate a cached build. Safe to
    share across the worker threads that run async loads.
    """

    def __init__(self, ttl_seconds: int = 300, max_entries: int = 256) -> None:
        self.ttl = ttl_seconds
        self.max_entries = max_entries
        self._entries: OrderedDict[CacheKey, tuple[float, tuple[Bar, ...]]] = OrderedDict()
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def _live(self, key: CacheKey) -> tuple[Bar, ...] | None:
        # Caller holds the lock.
        entry = self._entries.get(key)
        if entry is None:
            return None
        stored_at, bars = entry
        if time.monotonic() - stored_at > self.ttl:
            del self._entries[key]
            return None
        return bars

    def get_bars(
        self, symbol: str, start: date, end: date, interval: str,
    ) -> list[Bar] | None:
        key = cache_key(symbol, interval, start, end)
        with self._lock:
            bars = self._live(key)
            if bars is None:
                return None
            self._entries.move_to_end(key)
        return list(bars)

    def store_bars(
        self, symbol: str, bars: list[Bar], interval: str, start: date, end: date,
    ) -> None:
        if not bars:
            return
        key = cache_key(symbol, interval, start, end)
        with self._lock:
            self._entries[key] = (time.monotonic(), tuple(bars))
            self._entries.move_to_end(key)
            while len(self._entries) > self.max_entries:
                self._entries.popitem(last=False)

    def has_data(self, symbol: str, interval: str, start: date, end: date) -> bool:
        key = cache_key(symbol, interval, start, end)
        with self._lock:
            return self._live(key) is not None

    def clear(self, symbol: str) -> None:
        symbol = symbol.upper()
        with self._lock:
            for key in [k for k in self._entries if k[0] == symbol]:
                del self._entries[key]

    def clear_all(self) -> None:
        with self._lock:
            self._entries.clear()


def create_cache(backend: str, cache_dir: str = "data/cache", ttl_seconds: int = 300) -> CacheBackend:
    """Build a cache backend from its config name."""
    if backend == "parquet":
        return ParquetCache(cache_dir)
    if backend == "memory":
        return MemoryCache(ttl_seconds=ttl_seconds)
    return NoCache()
