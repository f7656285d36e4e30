"""Display details and narrative rationale for a composite score."""

import math
from collections.abc import Mapping

from picks_mcp.models import (
    IndicatorDetail,
    IndicatorSignals,
    RawIndicators,
    SentimentSnapshot,
)

NEUTRAL_EXPLANATION = "Signals are mixed with no single driver dominating the setup."

# (signal, threshold, bullish clause, bearish clause), in narrative order.
# Band position has no clause.
NARRATIVE_RULES: tuple[tuple[str, float, str, str], ...] = (
    (
        "trend",
        0.2,
        "Trend momentum: 50-day moving average is comfortably above the 200-day",
        "Downtrend pressure: 50-day average is tracking below the 200-day",
    ),
    (
        "oscillator",
        0.3,
        "RSI momentum remains bullish",
        "RSI shows oversold momentum",
    ),
    (
        "momentum_divergence",
        0.3,
        "MACD histogram is expanding above the signal line",
        "MACD histogram is weakening below the signal line",
    ),
    (
        "volume_anomaly",
        0.3,
        "Volume is expanding versus the 20-day average",
        "Volume is contracting versus the 20-day average",
    ),
    (
        "sentiment",
        0.2,
        "News sentiment skewed bullish",
        "News sentiment skewed cautious",
    ),
    (
        "volatility_rank",
        0.2,
        "Implied volatility running hot relative to its range",
        "Implied volatility deeply discounted",
    ),
)


def build_explanation(signals: IndicatorSignals) -> str:
    """
    One clause per signal whose magnitude clears its threshold.

    Returns the neutral sentence when nothing qualifies.
    """
    highlights: list[str] = []
    for name, threshold, bullish, bearish in NARRATIVE_RULES:
        value = getattr(signals, name)
        if value is None:
            continue
        if value > threshold:
            highlights.append(bullish)
        elif value < -threshold:
            highlights.append(bearish)

    if not highlights:
        return NEUTRAL_EXPLANATION
    return ". ".join(highlights) + "."


def _parse_ratio(value: str | float | None) -> float | None:
    """Parse a fundamentals field. Providers use "None" / "-" for missing."""
    if value is None:
        return None
    try:
        parsed = float(value)
    except (TypeError, ValueError):
        return None
    return parsed if math.isfinite(parsed) else None


def _fundamental_details(fundamentals: Mapping[str, str]) -> list[IndicatorDetail]:
    details: list[IndicatorDetail] = []

    pe_ratio = _parse_ratio(fundamentals.get("PERatio"))
    if pe_ratio is not None and pe_ratio > 0:
        details.append(IndicatorDetail("P/E Ratio", f"{pe_ratio:.1f}"))

    profit_margin = _parse_ratio(fundamentals.get("ProfitMargin"))
    if profit_margin is not None:
        details.append(IndicatorDetail("Profit Margin", f"{profit_margin * 100:.1f}%"))

    return details


def build_details(
    raw: RawIndicators,
    signals: IndicatorSignals,
    sentiment: SentimentSnapshot | None = None,
    fundamentals: Mapping[str, str] | None = None,
) -> list[IndicatorDetail]:
    """
    Ordered display rows for the indicators that have data.

    Always starts with the last price; then trend pair, RSI, MACD histogram,
    bands, volume, sentiment, IV rank, and up to two fundamentals.
    """
    price = f"${raw.latest_price:.2f}" if raw.latest_price is not None else "n/a"
    details = [IndicatorDetail("Last Price", price)]

    if raw.sma_50 is not None and raw.sma_200 is not None:
        details.append(
            IndicatorDetail(
                "SMA50 / SMA200",
                f"{raw.sma_50:.2f} / {raw.sma_200:.2f}",
                signals.trend,
            )
        )
    if raw.rsi is not None:
        details.append(IndicatorDetail("RSI(14)", f"{raw.rsi:.1f}", signals.oscillator))
    if raw.macd is not None:
        details.append(
            IndicatorDetail(
                "MACD (Hist)",
                f"{raw.macd.histogram:.3f}",
                signals.momentum_divergence,
            )
        )
    if raw.bands is not None:
        details.append(
            IndicatorDetail(
                "Bollinger Band",
                f"{raw.bands.lower:.2f} - {raw.bands.upper:.2f}",
                signals.band_position,
            )
        )
    if raw.volume_surge is not None:
        details.append(
            IndicatorDetail(
                "Volume vs Avg",
                f"{raw.volume_surge * 100:.1f}%",
                signals.volume_anomaly,
            )
        )
    if sentiment is not None:
        details.append(
            IndicatorDetail(
                "Sentiment (Bull/Bear)",
                f"{sentiment.bullish_percent:.1f}% / {sentiment.bearish_percent:.1f}%",
                signals.sentiment,
            )
        )
    if signals.volatility_rank is not None:
        iv_rank_pct = (signals.volatility_rank + 1) / 2 * 100
        details.append(IndicatorDetail("IV Rank", f"{iv_rank_pct:.0f}", signals.volatility_rank))
    if fundamentals:
        details.extend(_fundamental_details(fundamentals))

    return details
