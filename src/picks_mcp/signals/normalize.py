"""Map raw indicator statistics onto the common [-1, 1] signal scale.

Each function returns None when its input is missing, so an absent reading
never turns into a neutral zero.
"""

import math

from picks_mcp.models import (
    BandStats,
    IndicatorSignals,
    MacdResult,
    RawIndicators,
    SentimentSnapshot,
    VolatilitySnapshot,
)
from picks_mcp.utils.indicators import clamp

# Floor on |signal line| when scaling the MACD histogram
MACD_SCALE_FLOOR = 0.01


def trend_signal(sma_50: float | None, sma_200: float | None) -> float | None:
    """Relative gap between the 50- and 200-bar averages."""
    if sma_50 is None or sma_200 is None or sma_200 == 0:
        return None
    return clamp((sma_50 - sma_200) / sma_200)


def oscillator_signal(rsi: float | None) -> float | None:
    """RSI recentred on 50; +/-25 points maps to +/-1."""
    if rsi is None:
        return None
    return clamp((rsi - 50) / 25)


def momentum_signal(macd: MacdResult | None) -> float | None:
    """MACD histogram scaled by the magnitude of the signal line."""
    if macd is None:
        return None
    scale = max(MACD_SCALE_FLOOR, abs(macd.signal))
    return clamp(macd.histogram / scale)


def band_signal(latest_price: float | None, bands: BandStats | None) -> float | None:
    """Distance of price from the middle band in units of two standard deviations."""
    if bands is None or latest_price is None:
        return None
    if bands.std_dev == 0:
        return 0.0
    return clamp((latest_price - bands.middle) / (2 * bands.std_dev))


def volume_signal(volume_surge: float | None) -> float | None:
    if volume_surge is None:
        return None
    return clamp(volume_surge)


def sentiment_signal(snapshot: SentimentSnapshot | None) -> float | None:
    if snapshot is None:
        return None
    return clamp(snapshot.score)


def volatility_rank_signal(snapshot: VolatilitySnapshot | None) -> float | None:
    """
    Position of current IV within its low/high range, mapped to [-1, 1].

    Returns None for a missing snapshot, non-finite values, or an empty
    range (high == low).
    """
    if snapshot is None:
        return None
    current, low, high = snapshot.current_iv, snapshot.low_iv, snapshot.high_iv
    if not all(math.isfinite(v) for v in (current, low, high)) or high == low:
        return None
    rank = (current - low) / (high - low)
    return clamp(rank * 2 - 1)


def normalize_signals(
    raw: RawIndicators,
    sentiment: SentimentSnapshot | None = None,
    volatility: VolatilitySnapshot | None = None,
) -> IndicatorSignals:
    """Build the full signal record from raw statistics and optional snapshots."""
    return IndicatorSignals(
        trend=trend_signal(raw.sma_50, raw.sma_200),
        oscillator=oscillator_signal(raw.rsi),
        momentum_divergence=momentum_signal(raw.macd),
        band_position=band_signal(raw.latest_price, raw.bands),
        volume_anomaly=volume_signal(raw.volume_surge),
        sentiment=sentiment_signal(sentiment),
        volatility_rank=volatility_rank_signal(volatility),
    )
