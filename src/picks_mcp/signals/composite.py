"""Weighted composite score over the normalized signals."""

from picks_mcp.models import IndicatorSignals
from picks_mcp.utils.indicators import clamp

# Fixed weights per signal (sum = 1.0)
SIGNAL_WEIGHTS: dict[str, float] = {
    "trend": 0.20,
    "oscillator": 0.15,
    "momentum_divergence": 0.20,
    "band_position": 0.10,
    "volume_anomaly": 0.10,
    "sentiment": 0.15,
    "volatility_rank": 0.10,
}


def weights_used(signals: IndicatorSignals) -> dict[str, float]:
    """
    Effective weight of each present signal after renormalization.

    Absent signals drop out and the remaining weights are rescaled to sum
    to 1, keeping their relative emphasis.
    """
    present = signals.present()
    total = sum(SIGNAL_WEIGHTS[name] for name in present)
    if total == 0:
        return {}
    return {name: SIGNAL_WEIGHTS[name] / total for name in present}


def composite_score(signals: IndicatorSignals) -> float:
    """
    Combine present signals into one score in [-1, 1].

    score = clamp(sum(signal * weight) / sum(weight)) over present signals.
    Exactly 0.0 when no signal is present.
    """
    present = signals.present()
    total_weight = sum(SIGNAL_WEIGHTS[name] for name in present)
    if total_weight == 0:
        return 0.0
    weighted_sum = sum(value * SIGNAL_WEIGHTS[name] for name, value in present.items())
    return clamp(weighted_sum / total_weight)
