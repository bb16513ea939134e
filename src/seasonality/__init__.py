"""seasonality — calendar analytics engine for daily crypto price history.

Rolling volatility, moving averages and RSI over daily bars, Sunday-week
and calendar-month rollups, benchmark and period comparison, and
threshold alerts.

Quick start::

    from seasonality import create_manager_from_env
    mgr = create_manager_from_env()
    snap = mgr.refresh()
    print(snap.calendar.month)
"""

from __future__ import annotations

import os

from seasonality.alerts import AlertRegistry, evaluate_alerts
from seasonality.calendar import ViewGranularity, aggregate, view_range
from seasonality.comparison import (
    BenchmarkComparison,
    PeriodComparison,
    PeriodStats,
    align_benchmark,
    compare_periods,
)
from seasonality.config import ProviderType, SeasonalityConfig
from seasonality.errors import SeasonalityError, SeasonalityErrorCode
from seasonality.export import day_lookup, export_frame, export_rows
from seasonality.manager import SeasonalityManager
from seasonality.metrics import compute_metrics
from seasonality.models.alert import AlertEvent, AlertRule
from seasonality.models.bar import Bar
from seasonality.models.metric import RollingMetric
from seasonality.models.summary import CalendarAggregate, MonthSummary, WeekSummary
from seasonality.session import SessionContext
from seasonality.store import BarStore, LoadResult

__version__ = "0.1.0"

__all__ = [
    # Manager
    "SeasonalityManager",
    "SessionContext",
    "create_manager_from_env",
    # Config
    "SeasonalityConfig",
    "ProviderType",
    # Errors
    "SeasonalityError",
    "SeasonalityErrorCode",
    # Bar store
    "BarStore",
    "LoadResult",
    # Engine
    "compute_metrics",
    "aggregate",
    "view_range",
    "ViewGranularity",
    "align_benchmark",
    "compare_periods",
    "evaluate_alerts",
    "AlertRegistry",
    "export_rows",
    "export_frame",
    "day_lookup",
    # Models
    "Bar",
    "RollingMetric",
    "WeekSummary",
    "MonthSummary",
    "CalendarAggregate",
    "AlertRule",
    "AlertEvent",
    "BenchmarkComparison",
    "PeriodComparison",
    "PeriodStats",
]


def create_manager_from_env() -> SeasonalityManager:
    """Zero-config factory — reads provider and cache settings from env vars.

    Environment variables:
        SEASONALITY_PROVIDER: "binance" or "mock" (default: "binance").
        SEASONALITY_SYMBOL: Initial symbol (default: "BTCUSDT").
        SEASONALITY_BENCHMARK: Benchmark symbol (default: "BTCUSDT").
        SEASONALITY_CACHE: Cache backend — "parquet", "memory", "none" (default: "memory").
        SEASONALITY_CACHE_DIR: Cache directory (default: "data/cache").
        SEASONALITY_VALIDATE: "0" disables the gap report (default: "1").
        BINANCE_BASE_URL: Binance REST root (default: "https://api.binance.com").
        BINANCE_TIMEOUT: HTTP timeout in seconds (default: none).
    """
    timeout = os.getenv("BINANCE_TIMEOUT")
    config = SeasonalityConfig(
        provider=ProviderType(os.getenv("SEASONALITY_PROVIDER", "binance").strip()),
        benchmark_symbol=os.getenv("SEASONALITY_BENCHMARK", "BTCUSDT"),
        cache_backend=os.getenv("SEASONALITY_CACHE", "memory"),
        cache_dir=os.getenv("SEASONALITY_CACHE_DIR", "data/cache"),
        validate=os.getenv("SEASONALITY_VALIDATE", "1") != "0",
        binance_base_url=os.getenv("BINANCE_BASE_URL", "https://api.binance.com"),
        request_timeout=float(timeout) if timeout else None,
    )
    context = SessionContext(symbol=os.getenv("SEASONALITY_SYMBOL", "BTCUSDT").upper())
    return SeasonalityManager(config, context=context)
