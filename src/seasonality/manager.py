"""SeasonalityManager — session orchestrator: load -> metrics -> rollups -> alerts."""

from __future__ import annotations

import logging
from datetime import date
from typing import Any

import pandas as pd

from seasonality.alerts import evaluate_alerts
from seasonality.cache import create_cache
from seasonality.calendar import (
    RangeSelection,
    ViewGranularity,
    aggregate,
    performance_direction,
    volatility_level,
    volume_ratio,
)
from seasonality.comparison import (
    BenchmarkComparison,
    PeriodComparison,
    align_benchmark,
    compare_periods,
)
from seasonality.config import ProviderType, SeasonalityConfig
from seasonality.errors import SeasonalityError, SeasonalityErrorCode
from seasonality.export import DayEntry, day_lookup, export_frame, export_rows
from seasonality.metrics import compute_metrics
from seasonality.models.alert import AlertRule
from seasonality.models.intraday import IntradayTick
from seasonality.models.order_book import OrderBookSnapshot
from seasonality.models.snapshot import DashboardSnapshot
from seasonality.providers import create_provider
from seasonality.providers.base import BaseMarketDataProvider
from seasonality.session import SessionContext
from seasonality.store import BarStore, LoadResult

logger = logging.getLogger(__name__)


class SeasonalityManager:
    """Central orchestrator for one dashboard session.

    Usage::

        from seasonality import create_manager_from_env
        mgr = create_manager_from_env()
        snap = mgr.refresh()
        for week in snap.calendar.weeks:
            print(week.week_start, week.avg_volatility)
    """

    def __init__(
        self,
        config: SeasonalityConfig,
        context: SessionContext | None = None,
        provider: BaseMarketDataProvider | None = None,
    ) -> None:
        self.config = config
        self.context = context or SessionContext()

        if provider is None:
            kwargs: dict[str, Any] = {}
            if config.provider is ProviderType.BINANCE:
                kwargs["base_url"] = config.binance_base_url
                kwargs["timeout"] = config.request_timeout
            provider = create_provider(config.provider, **kwargs)
        self.provider = provider

        self.cache = create_cache(
            config.cache_backend, config.cache_dir, config.cache_ttl_seconds,
        )
        self.store = BarStore(self.provider, cache=self.cache, validate=config.validate)
        # Benchmark and secondary periods never replace the primary series.
        self.side_store = BarStore(self.provider, cache=self.cache, validate=config.validate)

        self.snapshot: DashboardSnapshot | None = None

    # -------------------------------------------------------------- context

    def set_symbol(self, symbol: str) -> None:
        self.context.symbol = symbol.upper()

    def set_view(self, view: ViewGranularity) -> None:
        self.context.view = view
        self.context.range_override = None

    def set_anchor(self, anchor: date) -> None:
        self.context.anchor = anchor
        self.context.range_override = None

    def set_range(self, start: date, end: date) -> None:
        """Show an explicit range instead of the view's range."""
        if end < start:
            start, end = end, start
        self.context.range_override = (start, end)

    def navigate(self, steps: int) -> None:
        self.context.navigate(steps)

    def select_day(self, day: date) -> RangeSelection:
        """Feed one calendar pick into the session's range selection."""
        self.context.selection.select(day)
        return self.context.selection

    # --------------------------------------------------------------- alerts

    def add_alert(
        self,
        anchor_date: date,
        volatility_threshold: float | None = None,
        performance_threshold: float | None = None,
    ) -> AlertRule:
        return self.context.alerts.add(
            anchor_date,
            volatility_threshold=volatility_threshold,
            performance_threshold=performance_threshold,
        )

    def remove_alert(self, rule_id: str) -> bool:
        return self.context.alerts.remove(rule_id)

    # -------------------------------------------------------------- refresh

    def refresh(self) -> DashboardSnapshot:
        """Rebuild the store for the current context and derive everything."""
        symbol, start, end = self.context.request_key()
        view, anchor = self.context.view, self.context.anchor
        result = self.store.load(symbol, start, end)
        return self._apply(result, view, anchor)

    async def refresh_async(self) -> DashboardSnapshot | None:
        """Like ``refresh`` but with the fetch off the event loop.

        The calendar is laid out for the view and anchor current when the
        refresh started. Returns None when a newer refresh superseded this one.
        """
        symbol, start, end = self.context.request_key()
        view, anchor = self.context.view, self.context.anchor
        result = await self.store.load_async(symbol, start, end)
        if result.stale:
            return None
        return self._apply(result, view, anchor)

    def _apply(
        self, result: LoadResult, view: ViewGranularity, anchor: date,
    ) -> DashboardSnapshot:
        request = result.request
        bars = result.bars
        metrics = compute_metrics(bars)

        calendar = aggregate(bars, metrics, view, anchor)

        snap = DashboardSnapshot(
            symbol=request.symbol,
            start=request.start,
            end=request.end,
            bars=bars,
            metrics=metrics,
            calendar=calendar,
            alerts=evaluate_alerts(bars, metrics, self.context.alerts.rules),
            rejected_records=len(result.rejected),
            error=result.error,
        )
        if result.error is None:
            logger.info(
                "Loaded %d bars for %s %s..%s (%d alerts)",
                len(bars), request.symbol, request.start, request.end, len(snap.alerts),
            )
        self.snapshot = snap
        return snap

    # ----------------------------------------------------------- comparison

    def _load_side(self, symbol: str, start: date, end: date) -> LoadResult:
        result = self.side_store.load(symbol, start, end)
        if result.error is not None:
            raise result.error
        return result

    def compare_benchmark(self) -> BenchmarkComparison:
        """Pair the loaded primary bars with the benchmark over the same range.

        Raises:
            SeasonalityError: ``NO_DATA`` before a successful refresh, the
                benchmark's load error, or ``ALIGNMENT_MISMATCH``.
        """
        snap = self._require_snapshot()
        bench = self._load_side(self.config.benchmark_symbol, snap.start, snap.end)
        return align_benchmark(snap.bars, bench.bars)

    def compare_period(self, start: date, end: date) -> PeriodComparison:
        """Compare the loaded primary range with another range of the same symbol."""
        snap = self._require_snapshot()
        secondary = self._load_side(snap.symbol, start, end)
        return compare_periods(snap.bars, secondary.bars)

    # --------------------------------------------------------------- export

    def export(
        self,
        start: date | None = None,
        end: date | None = None,
        include_benchmark: bool = False,
    ) -> list[dict[str, Any]]:
        """Export rows for the current snapshot, optionally with benchmark closes.

        With no explicit bounds, a completed calendar selection limits the rows.
        """
        snap = self._require_snapshot()
        start, end = self._export_bounds(start, end)
        benchmark = self.compare_benchmark().benchmark_by_date() if include_benchmark else None
        return export_rows(snap.bars, snap.metrics, benchmark, start, end)

    def export_frame(
        self,
        start: date | None = None,
        end: date | None = None,
        include_benchmark: bool = False,
    ) -> pd.DataFrame:
        snap = self._require_snapshot()
        start, end = self._export_bounds(start, end)
        benchmark = self.compare_benchmark().benchmark_by_date() if include_benchmark else None
        return export_frame(snap.bars, snap.metrics, benchmark, start, end)

    def lookup(self) -> dict[str, DayEntry]:
        snap = self._require_snapshot()
        return day_lookup(snap.bars, snap.metrics)

    def classify_day(self, day: date) -> dict[str, Any]:
        """Heat level, direction and volume ratio for one calendar cell."""
        snap = self._require_snapshot()
        entry = day_lookup(snap.bars, snap.metrics).get(day.isoformat())
        bar = entry.bar if entry else None
        metric = entry.metric if entry else None
        return {
            "volatility_level": volatility_level(
                metric.volatility if metric else None,
                self.config.volatility_low,
                self.config.volatility_high,
            ),
            "direction": performance_direction(bar),
            "volume_ratio": volume_ratio(bar, snap.max_volume),
        }

    # -------------------------------------------------------- sibling views

    def get_order_book(self, depth: int | None = None) -> OrderBookSnapshot:
        return self._capable("order_book").get_order_book_snapshot(
            self.context.symbol.upper(), depth or self.config.order_book_depth,
        )

    def get_intraday(self, day: date, interval: str = "15m") -> list[IntradayTick]:
        return self._capable("intraday").get_intraday_ticks(
            self.context.symbol.upper(), day, interval,
        )

    # ------------------------------------------------------------- internal

    def _require_snapshot(self) -> DashboardSnapshot:
        if self.snapshot is None or self.snapshot.error is not None:
            raise SeasonalityError(
                "No primary series loaded; call refresh() first",
                code=SeasonalityErrorCode.NO_DATA,
            )
        return self.snapshot

    def _export_bounds(
        self, start: date | None, end: date | None,
    ) -> tuple[date | None, date | None]:
        selection = self.context.selection
        if start is None and end is None and selection.complete:
            return selection.start, selection.end
        return start, end

    def _capable(self, capability: str) -> BaseMarketDataProvider:
        if capability not in self.provider.capabilities():
            raise SeasonalityError(
                f"Provider does not support '{capability}'",
                code=SeasonalityErrorCode.NO_DATA,
            )
        return self.provider
