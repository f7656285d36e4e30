"""Technical indicator calculations.

Every function reads the latest value off a chronologically ordered series
and returns None when the series is shorter than its window.
"""

from collections.abc import Sequence

import pandas as pd

from picks_mcp.models import BandStats, MacdResult


def clamp(value: float, lo: float = -1.0, hi: float = 1.0) -> float:
    """Bound value to [lo, hi]."""
    return max(lo, min(hi, value))


def _as_series(values: pd.Series | Sequence[float]) -> pd.Series:
    """Positional float series; drops any index the caller attached."""
    if isinstance(values, pd.Series):
        return values.astype("float64").reset_index(drop=True)
    return pd.Series(list(values), dtype="float64")


def _seeded_ema(seed: float, values: pd.Series, alpha: float) -> pd.Series:
    """
    Run the EMA recurrence from an explicit seed.

    ema[i] = value[i] * alpha + ema[i-1] * (1 - alpha). The first element of
    the returned series is the seed itself.
    """
    chain = pd.concat([pd.Series([seed], dtype="float64"), values], ignore_index=True)
    return chain.ewm(alpha=alpha, adjust=False).mean()


def calculate_sma(prices: pd.Series | Sequence[float], period: int) -> float | None:
    """
    Calculate Simple Moving Average of the last `period` values.

    Args:
        prices: Price series (typically close prices)
        period: Number of periods for the average

    Returns:
        SMA at the latest bar, or None if insufficient data
    """
    series = _as_series(prices)
    if period <= 0 or len(series) < period:
        return None
    return float(series.tail(period).mean())


def calculate_ema(prices: pd.Series | Sequence[float], period: int) -> float | None:
    """
    Calculate Exponential Moving Average.

    Seeded with the simple average of the first `period` values, then
    smoothed with alpha = 2 / (period + 1).

    Args:
        prices: Price series (typically close prices)
        period: Number of periods for the average

    Returns:
        EMA at the latest bar, or None if insufficient data
    """
    series = _as_series(prices)
    if period <= 0 or len(series) < period:
        return None
    seed = series.iloc[:period].mean()
    ema = _seeded_ema(seed, series.iloc[period:], 2 / (period + 1))
    return float(ema.iloc[-1])


def calculate_rsi(prices: pd.Series | Sequence[float], period: int = 14) -> float | None:
    """
    Calculate Relative Strength Index.

    Uses Wilder's smoothing method: plain means of the first `period` gains
    and losses, then a running average with alpha = 1 / period.

    Args:
        prices: Price series (typically close prices)
        period: RSI period (default: 14)

    Returns:
        RSI (0-100 scale), or None if insufficient data
    """
    series = _as_series(prices)
    if period <= 0 or len(series) <= period:
        return None

    delta = series.diff().iloc[1:]
    gain = delta.clip(lower=0.0)
    loss = (-delta).clip(lower=0.0)

    avg_gain = _seeded_ema(gain.iloc[:period].mean(), gain.iloc[period:], 1 / period).iloc[-1]
    avg_loss = _seeded_ema(loss.iloc[:period].mean(), loss.iloc[period:], 1 / period).iloc[-1]

    if avg_loss == 0:
        # A series that never moved is neutral, not overbought
        return 50.0 if avg_gain == 0 else 100.0

    rs = avg_gain / avg_loss
    return float(100 - (100 / (1 + rs)))


def calculate_macd(
    prices: pd.Series | Sequence[float],
    fast: int = 12,
    slow: int = 26,
    signal: int = 9,
) -> MacdResult | None:
    """
    Calculate MACD (Moving Average Convergence Divergence).

    Both EMAs are seeded from their own leading window and advanced together
    from index `slow` onward, giving one MACD point per bar after the slow
    warm-up. The signal line is an EMA of those points.

    Args:
        prices: Price series (typically close prices)
        fast: Fast EMA period (default: 12)
        slow: Slow EMA period (default: 26)
        signal: Signal line period (default: 9)

    Returns:
        MacdResult at the latest bar, or None if insufficient data
    """
    series = _as_series(prices)
    if len(series) < slow + signal:
        return None

    tail = series.iloc[slow:]
    ema_fast = _seeded_ema(series.iloc[:fast].mean(), tail, 2 / (fast + 1)).iloc[1:]
    ema_slow = _seeded_ema(series.iloc[:slow].mean(), tail, 2 / (slow + 1)).iloc[1:]
    macd_line = (ema_fast - ema_slow).reset_index(drop=True)

    if len(macd_line) < signal:
        return None

    signal_line = _seeded_ema(
        macd_line.iloc[:signal].mean(),
        macd_line.iloc[signal:],
        2 / (signal + 1),
    ).iloc[-1]

    value = float(macd_line.iloc[-1])
    signal_val = float(signal_line)
    return MacdResult(value=value, signal=signal_val, histogram=value - signal_val)


def calculate_bollinger(
    prices: pd.Series | Sequence[float],
    period: int = 20,
    multiplier: float = 2.0,
) -> BandStats | None:
    """
    Calculate Bollinger Bands over the trailing window.

    Uses the population standard deviation (ddof=0).

    Args:
        prices: Price series (typically close prices)
        period: Window length (default: 20)
        multiplier: Band width in standard deviations (default: 2)

    Returns:
        BandStats, or None if insufficient data
    """
    series = _as_series(prices)
    if period <= 0 or len(series) < period:
        return None

    window = series.tail(period)
    middle = float(window.mean())
    std_dev = float(window.std(ddof=0))
    return BandStats(
        middle=middle,
        upper=middle + multiplier * std_dev,
        lower=middle - multiplier * std_dev,
        std_dev=std_dev,
    )


def calculate_volume_surge(
    volumes: pd.Series | Sequence[float],
    period: int = 20,
) -> float | None:
    """
    Ratio of the latest volume to the mean of the `period` volumes before it, minus 1.

    Args:
        volumes: Volume series
        period: Baseline window, excluding the latest bar (default: 20)

    Returns:
        Surge bounded to [-1, 1], or None if insufficient data or zero baseline
    """
    series = _as_series(volumes)
    if period <= 0 or len(series) <= period:
        return None

    baseline = series.iloc[-(period + 1):-1].mean()
    if pd.isna(baseline) or baseline == 0:
        return None

    return clamp(float(series.iloc[-1] / baseline) - 1)
