"""Rolling metrics — volatility, moving averages and RSI over daily bars.

Every function here is pure: same bars in, same values out. The series
helpers return positional ``pd.Series`` with NaN wherever the trailing
window is not fully covered; ``compute_metrics`` turns those into ``None``.
"""

from __future__ import annotations

import math
from datetime import date

import pandas as pd

from seasonality.models.bar import Bar
from seasonality.models.metric import RollingMetric

VOLATILITY_WINDOW = 5
SHORT_MA_WINDOW = 5
LONG_MA_WINDOW = 10
RSI_PERIOD = 14

# RS used when the average loss is zero (no down moves in the window).
RS_NO_LOSS = 100.0


def _frame(bars: list[Bar]) -> pd.DataFrame:
    return pd.DataFrame(
        {"open": [b.open for b in bars], "close": [b.close for b in bars]},
        dtype="float64",
    )


def rolling_volatility(bars: list[Bar], window: int = VOLATILITY_WINDOW) -> pd.Series:
    """Population std-dev of open-to-close returns over the trailing window.

    Uses ``r = (close - open) / open`` per bar; the value at index ``i``
    uses bars ``i - window + 1 .. i``.
    """
    df = _frame(bars)
    returns = (df["close"] - df["open"]) / df["open"]
    return returns.rolling(window).std(ddof=0)


def moving_average(bars: list[Bar], window: int) -> pd.Series:
    """Arithmetic mean of ``close`` over the trailing window."""
    return _frame(bars)["close"].rolling(window).mean()


def rsi(bars: list[Bar], period: int = RSI_PERIOD) -> pd.Series:
    """Relative strength index with simple (not Wilder-smoothed) averages.

    ``close.diff()`` at bar ``i`` is the move into bar ``i``, so the
    trailing ``period`` window at ``i`` covers the moves ending with it and
    the first ``period`` bars have no RSI. A zero average loss gives
    ``RS = 100``.
    """
    delta = _frame(bars)["close"].diff()
    avg_gain = delta.clip(lower=0).rolling(period).mean()
    avg_loss = (-delta).clip(lower=0).rolling(period).mean()
    rs = (avg_gain / avg_loss).where(avg_loss != 0, RS_NO_LOSS)
    return 100 - 100 / (1 + rs)


def _optional(series: pd.Series) -> list[float | None]:
    return [None if math.isnan(v) else float(v) for v in series]


def compute_metrics(bars: list[Bar]) -> list[RollingMetric]:
    """Compute one RollingMetric per bar, in bar order."""
    vol = _optional(rolling_volatility(bars))
    ma5 = _optional(moving_average(bars, SHORT_MA_WINDOW))
    ma10 = _optional(moving_average(bars, LONG_MA_WINDOW))
    rsi14 = _optional(rsi(bars))
    return [
        RollingMetric(
            date=b.date,
            volatility=vol[i],
            ma5=ma5[i],
            ma10=ma10[i],
            rsi14=rsi14[i],
        )
        for i, b in enumerate(bars)
    ]


def metrics_by_date(metrics: list[RollingMetric]) -> dict[date, RollingMetric]:
    return {m.date: m for m in metrics}
