"""Tests for record parsing and the Bar Store load lifecycle."""

import asyncio
import logging
from datetime import date

import pytest

from conftest import make_series
from seasonality.cache import MemoryCache
from seasonality.errors import SeasonalityError, SeasonalityErrorCode
from seasonality.providers.mock import MockProvider, bar_to_kline
from seasonality.store import BarStore, build_bars, day_bounds_ms, parse_record

MARCH_1_MS = 1709251200000


class TestParseRecord:
    def test_positional_string_values(self):
        bar = parse_record([MARCH_1_MS, "100.5", "110", "95", "105.25", "1234.5", 0, "x"])
        assert bar.date == date(2024, 3, 1)
        assert bar.open == 100.5
        assert bar.close == 105.25
        assert bar.volume == 1234.5

    def test_mapping_with_iso_date(self):
        bar = parse_record({
            "date": "2024-03-02", "open": 1, "high": 2, "low": 0.5, "close": 1.5, "volume": 3,
        })
        assert bar.date == date(2024, 3, 2)
        assert bar.high == 2.0

    def test_mapping_with_open_time(self):
        bar = parse_record({
            "open_time": MARCH_1_MS, "open": 1, "high": 2, "low": 0.5, "close": 1.5, "volume": 3,
        })
        assert bar.date == date(2024, 3, 1)

    @pytest.mark.parametrize(
        "record",
        [
            [MARCH_1_MS, "100", "101"],
            [MARCH_1_MS, "abc", "101", "99", "100", "1"],
            [MARCH_1_MS, "nan", "101", "99", "100", "1"],
            [MARCH_1_MS, "0", "101", "99", "100", "1"],
            [MARCH_1_MS, "100", "101", "99", "100", "-1"],
            [MARCH_1_MS, "100", "90", "110", "100", "1"],
            [MARCH_1_MS, "100", "101", "99", "102", "1"],
            [MARCH_1_MS, "100", "101", "99.5", "99", "1"],
            {"date": "2024-03-01", "open": 1},
            None,
        ],
    )
    def test_malformed(self, record):
        with pytest.raises(SeasonalityError) as exc_info:
            parse_record(record)
        assert exc_info.value.code == SeasonalityErrorCode.MALFORMED_RECORD


class TestBuildBars:
    def test_sorts_ascending(self):
        bars = make_series(date(2024, 3, 1), closes=[100.0, 101.0, 102.0])
        records = [bar_to_kline(b) for b in reversed(bars)]
        built, rejected = build_bars(records)
        assert built == bars
        assert rejected == []

    def test_drops_malformed_and_keeps_rest(self):
        bars = make_series(date(2024, 3, 1), closes=[100.0, 101.0])
        records = [bar_to_kline(bars[0]), ["garbage"], bar_to_kline(bars[1])]
        built, rejected = build_bars(records)
        assert built == bars
        assert len(rejected) == 1
        assert rejected[0].index == 1

    def test_duplicate_dates_rejected(self):
        bar = make_series(date(2024, 3, 1), closes=[100.0])[0]
        with pytest.raises(SeasonalityError) as exc_info:
            build_bars([bar_to_kline(bar), bar_to_kline(bar)])
        assert exc_info.value.code == SeasonalityErrorCode.DUPLICATE_DATE


def test_day_bounds_ms():
    start_ms, end_ms = day_bounds_ms(date(2024, 3, 1), date(2024, 3, 1))
    assert start_ms == MARCH_1_MS
    assert end_ms == MARCH_1_MS + 86_400_000 - 1


class TestBarStore:
    def test_load_builds_series(self, mock_provider, month_bars):
        mock_provider.set_bars("BTCUSDT", month_bars)
        store = BarStore(mock_provider)
        result = store.load("btcusdt", date(2024, 3, 1), date(2024, 3, 31))
        assert result.ok
        assert store.bars == month_bars
        assert store.symbol == "BTCUSDT"

    def test_reversed_range_is_swapped(self, mock_provider, month_bars):
        mock_provider.set_bars("BTCUSDT", month_bars)
        store = BarStore(mock_provider)
        result = store.load("BTCUSDT", date(2024, 3, 5), date(2024, 3, 1))
        assert result.request.start == date(2024, 3, 1)
        assert len(store.bars) == 5

    def test_empty_range_is_not_an_error(self, mock_provider):
        mock_provider.set_bars("BTCUSDT", [])
        store = BarStore(mock_provider)
        result = store.load("BTCUSDT", date(2024, 3, 1), date(2024, 3, 31))
        assert result.ok
        assert store.bars == []

    def test_malformed_records_dropped(self, mock_provider, month_bars):
        records = [bar_to_kline(b) for b in month_bars[:3]]
        records.insert(1, [MARCH_1_MS, "oops"])
        mock_provider.set_klines("BTCUSDT", records)
        store = BarStore(mock_provider)
        result = store.load("BTCUSDT", date(2024, 3, 1), date(2024, 3, 3))
        assert result.ok
        assert len(result.rejected) == 1
        assert store.bars == month_bars[:3]

    def test_duplicate_dates_fail_the_load(self, mock_provider, month_bars):
        kline = bar_to_kline(month_bars[0])
        mock_provider.set_klines("BTCUSDT", [kline, kline])
        store = BarStore(mock_provider)
        result = store.load("BTCUSDT", date(2024, 3, 1), date(2024, 3, 1))
        assert result.error.code == SeasonalityErrorCode.DUPLICATE_DATE
        assert store.bars == []

    def test_fetch_failure_then_retry(self, mock_provider, month_bars):
        mock_provider.set_bars("BTCUSDT", month_bars)
        mock_provider.fail(
            "BTCUSDT",
            SeasonalityError("503", code=SeasonalityErrorCode.FETCH_FAILED, retryable=True),
        )
        store = BarStore(mock_provider)

        failed = store.load("BTCUSDT", date(2024, 3, 1), date(2024, 3, 31))
        assert not failed.ok
        assert failed.error.retryable
        assert store.bars == []

        mock_provider.recover("BTCUSDT")
        retried = store.load("BTCUSDT", date(2024, 3, 1), date(2024, 3, 31))
        assert retried.ok
        assert len(store.bars) == 31

    def test_unexpected_exception_is_wrapped(self, month_bars):
        class Broken(MockProvider):
            def get_daily_bars(self, symbol, start_ms, end_ms):
                raise RuntimeError("boom")

        store = BarStore(Broken())
        result = store.load("BTCUSDT", date(2024, 3, 1), date(2024, 3, 2))
        assert result.error.code == SeasonalityErrorCode.FETCH_FAILED
        assert "boom" in result.error.message

    def test_failed_load_replaces_previous_series(self, mock_provider, month_bars):
        mock_provider.set_bars("BTCUSDT", month_bars)
        store = BarStore(mock_provider)
        store.load("BTCUSDT", date(2024, 3, 1), date(2024, 3, 31))
        mock_provider.fail("BTCUSDT", SeasonalityError("down"))
        store.load("BTCUSDT", date(2024, 3, 1), date(2024, 3, 31))
        assert store.bars == []

    def test_inconsistent_ohlc_drops_only_that_day(self, mock_provider):
        bars = make_series(date(2024, 3, 1), closes=[100.0 + i for i in range(10)])
        records = [bar_to_kline(b) for b in bars]
        records[3][2] = "50"  # high
        records[3][3] = "200"  # low
        mock_provider.set_klines("BTCUSDT", records)
        store = BarStore(mock_provider)

        result = store.load("BTCUSDT", date(2024, 3, 1), date(2024, 3, 10))

        assert result.ok
        assert len(store.bars) == 9
        assert len(result.rejected) == 1
        assert result.rejected[0].index == 3
        assert date(2024, 3, 4) not in [b.date for b in store.bars]
        assert result.gaps == [date(2024, 3, 4)]

    def test_gaps_reported_and_logged(self, mock_provider, month_bars, caplog):
        mock_provider.set_bars("BTCUSDT", month_bars[:3] + month_bars[5:])
        store = BarStore(mock_provider)
        with caplog.at_level(logging.WARNING, logger="seasonality.store"):
            result = store.load("BTCUSDT", date(2024, 3, 1), date(2024, 3, 31))
        assert result.ok
        assert len(store.bars) == 29
        assert result.gaps == [date(2024, 3, 4), date(2024, 3, 5)]
        assert "2 missing days from 2024-03-04" in caplog.text

    def test_quality_report_can_be_disabled(self, mock_provider, month_bars):
        mock_provider.set_bars("BTCUSDT", month_bars[:3] + month_bars[5:])
        store = BarStore(mock_provider, validate=False)
        result = store.load("BTCUSDT", date(2024, 3, 1), date(2024, 3, 31))
        assert result.ok
        assert result.gaps == []

    def test_empty_memory_cache_is_used(self, mock_provider):
        cache = MemoryCache(ttl_seconds=60)
        assert len(cache) == 0
        store = BarStore(mock_provider, cache=cache)
        assert store.cache is cache

    def test_cache_hit_skips_provider(self, mock_provider, month_bars):
        mock_provider.set_bars("BTCUSDT", month_bars)
        store = BarStore(mock_provider, cache=MemoryCache(ttl_seconds=60))
        store.load("BTCUSDT", date(2024, 3, 1), date(2024, 3, 31))
        second = store.load("BTCUSDT", date(2024, 3, 1), date(2024, 3, 31))
        assert second.from_cache
        assert len(mock_provider.calls) == 1
        assert store.bars == month_bars

    def test_bars_between(self, mock_provider, month_bars):
        mock_provider.set_bars("BTCUSDT", month_bars)
        store = BarStore(mock_provider)
        store.load("BTCUSDT", date(2024, 3, 1), date(2024, 3, 31))
        assert len(store.bars_between(date(2024, 3, 10), date(2024, 3, 16))) == 7


class TestStaleResponses:
    def test_older_token_is_discarded(self, mock_provider, month_bars):
        mock_provider.set_bars("BTCUSDT", month_bars)
        mock_provider.set_bars("ETHUSDT", month_bars[:5])
        store = BarStore(mock_provider)

        slow = store.begin("BTCUSDT", date(2024, 3, 1), date(2024, 3, 31))
        fast = store.begin("ETHUSDT", date(2024, 3, 1), date(2024, 3, 31))

        assert store.commit(store.fetch(fast)).ok
        late = store.commit(store.fetch(slow))

        assert late.stale
        assert not late.ok
        assert store.symbol == "ETHUSDT"
        assert len(store.bars) == 5

    def test_tokens_increase(self, mock_provider):
        store = BarStore(mock_provider)
        a = store.begin("BTCUSDT", date(2024, 3, 1), date(2024, 3, 2))
        b = store.begin("BTCUSDT", date(2024, 3, 1), date(2024, 3, 2))
        assert b.token > a.token
        assert store.latest_token == b.token

    def test_load_async(self, mock_provider, month_bars):
        mock_provider.set_bars("BTCUSDT", month_bars)
        store = BarStore(mock_provider)
        result = asyncio.run(store.load_async("BTCUSDT", date(2024, 3, 1), date(2024, 3, 31)))
        assert result.ok
        assert len(store.bars) == 31

    def test_async_superseded_load_is_stale(self, mock_provider, month_bars):
        mock_provider.set_bars("BTCUSDT", month_bars)
        mock_provider.set_bars("ETHUSDT", month_bars[:3])
        store = BarStore(mock_provider)

        async def scenario():
            first = asyncio.create_task(
                store.load_async("BTCUSDT", date(2024, 3, 1), date(2024, 3, 31)),
            )
            await asyncio.sleep(0)  # let the first request draw its token
            second = await store.load_async("ETHUSDT", date(2024, 3, 1), date(2024, 3, 31))
            return await first, second

        first, second = asyncio.run(scenario())
        assert first.stale
        assert second.ok
        assert store.symbol == "ETHUSDT"
