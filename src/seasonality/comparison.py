"""Comparison engine — benchmark pairing and secondary-period statistics."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date

from seasonality.errors import SeasonalityError, SeasonalityErrorCode
from seasonality.metrics import compute_metrics
from seasonality.models.bar import Bar
from seasonality.models.metric import RollingMetric

NAN = float("nan")


@dataclass(frozen=True)
class BenchmarkPoint:
    """One index-aligned pair of closes.

    Attributes:
        date: Primary bar's date.
        close: Primary close.
        benchmark_close: Benchmark close at the same index.
        indexed: Primary close rebased to 100 at the first point.
        benchmark_indexed: Benchmark close rebased to 100 at the first point.
    """

    date: date
    close: float
    benchmark_close: float
    indexed: float
    benchmark_indexed: float


@dataclass(frozen=True)
class BenchmarkComparison:
    """Primary and benchmark series paired by position."""

    points: list[BenchmarkPoint] = field(default_factory=list)

    @property
    def primary_return_pct(self) -> float:
        if not self.points:
            return NAN
        return self.points[-1].indexed - 100.0

    @property
    def benchmark_return_pct(self) -> float:
        if not self.points:
            return NAN
        return self.points[-1].benchmark_indexed - 100.0

    @property
    def relative_performance_pct(self) -> float:
        """Primary return minus benchmark return, in percentage points."""
        return self.primary_return_pct - self.benchmark_return_pct

    def benchmark_by_date(self) -> dict[date, float]:
        return {p.date: p.benchmark_close for p in self.points}


def align_benchmark(primary: list[Bar], benchmark: list[Bar]) -> BenchmarkComparison:
    """Pair primary and benchmark bars by identical index.

    The two series must come from the same date range and be the same
    length; no truncation or date matching is attempted.

    Raises:
        SeasonalityError: ``ALIGNMENT_MISMATCH`` when the lengths differ.
    """
    if len(primary) != len(benchmark):
        raise SeasonalityError(
            f"Benchmark length {len(benchmark)} does not match primary length {len(primary)}",
            code=SeasonalityErrorCode.ALIGNMENT_MISMATCH,
        )
    if not primary:
        return BenchmarkComparison()

    base = primary[0].close
    bench_base = benchmark[0].close
    points = [
        BenchmarkPoint(
            date=p.date,
            close=p.close,
            benchmark_close=b.close,
            indexed=p.close / base * 100,
            benchmark_indexed=b.close / bench_base * 100,
        )
        for p, b in zip(primary, benchmark)
    ]
    return BenchmarkComparison(points=points)


@dataclass(frozen=True)
class PeriodStats:
    """Derived statistics for one period; NaN fields when the period is empty.

    Attributes:
        start: First bar's date.
        end: Last bar's date.
        days: Number of bars.
        performance_pct: First open to last close, in percent.
        avg_close: Mean close.
        total_volume: Summed volume.
        avg_volatility: Mean volatility (absent counts as 0).
        max_volatility: Largest defined volatility, or None.
        last_rsi: RSI on the last bar, or None.
    """

    start: date | None
    end: date | None
    days: int
    performance_pct: float
    avg_close: float
    total_volume: float
    avg_volatility: float
    max_volatility: float | None = None
    last_rsi: float | None = None

    @classmethod
    def from_bars(
        cls, bars: list[Bar], metrics: list[RollingMetric] | None = None,
    ) -> PeriodStats:
        if not bars:
            return cls(
                start=None, end=None, days=0,
                performance_pct=NAN, avg_close=NAN,
                total_volume=NAN, avg_volatility=NAN,
            )
        if metrics is None:
            metrics = compute_metrics(bars)

        n = len(bars)
        vols = [m.volatility for m in metrics if m.volatility is not None]
        return cls(
            start=bars[0].date,
            end=bars[-1].date,
            days=n,
            performance_pct=(bars[-1].close - bars[0].open) / bars[0].open * 100,
            avg_close=sum(b.close for b in bars) / n,
            total_volume=sum(b.volume for b in bars),
            avg_volatility=sum(vols) / n,
            max_volatility=max(vols) if vols else None,
            last_rsi=metrics[-1].rsi14 if metrics else None,
        )


@dataclass(frozen=True)
class PeriodComparison:
    """Two independently dated series of the same symbol.

    Raw values are not aligned; each series keeps its own date axis and
    only the stats are meant to be compared.
    """

    primary_bars: list[Bar]
    secondary_bars: list[Bar]
    primary_metrics: list[RollingMetric]
    secondary_metrics: list[RollingMetric]
    primary: PeriodStats
    secondary: PeriodStats

    @property
    def performance_delta_pct(self) -> float:
        return self.primary.performance_pct - self.secondary.performance_pct

    @property
    def volatility_delta(self) -> float:
        return self.primary.avg_volatility - self.secondary.avg_volatility


def compare_periods(primary: list[Bar], secondary: list[Bar]) -> PeriodComparison:
    """Compute metrics and stats for two periods side by side."""
    primary_metrics = compute_metrics(primary)
    secondary_metrics = compute_metrics(secondary)
    return PeriodComparison(
        primary_bars=list(primary),
        secondary_bars=list(secondary),
        primary_metrics=primary_metrics,
        secondary_metrics=secondary_metrics,
        primary=PeriodStats.from_bars(primary, primary_metrics),
        secondary=PeriodStats.from_bars(secondary, secondary_metrics),
    )
