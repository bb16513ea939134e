"""Seasonality engine configuration."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class ProviderType(Enum):
    """Supported market-data backends."""

    BINANCE = "binance"
    MOCK = "mock"


@dataclass
class SeasonalityConfig:
    """Configuration for SeasonalityManager.

    Attributes:
        provider: Market-data backend used for bars, order book and intraday.
        benchmark_symbol: Symbol loaded as the benchmark series.
        cache_backend: Cache type — "parquet", "memory", or "none".
        cache_dir: Directory for parquet cache files.
        cache_ttl_seconds: TTL for in-memory cache entries.
        validate: Whether to run the gap report on built bars.
        binance_base_url: REST endpoint root for the Binance provider.
        request_timeout: HTTP timeout in seconds (None waits indefinitely).
        volatility_low: Volatility below this is classed "low".
        volatility_high: Volatility at or above this is classed "high".
        order_book_depth: Default number of levels per order book side.
    """

    provider: ProviderType = ProviderType.BINANCE
    benchmark_symbol: str = "BTCUSDT"
    cache_backend: str = "memory"
    cache_dir: str = "data/cache"
    cache_ttl_seconds: int = 300
    validate: bool = True

    binance_base_url: str = "https://api.binance.com"
    request_timeout: float | None = None

    volatility_low: float = 0.01
    volatility_high: float = 0.02
    order_book_depth: int = 100
