"""Signal derivation, scoring and explanation."""

from picks_mcp.signals.assembly import SignalAssembler, derive_indicators
from picks_mcp.signals.composite import SIGNAL_WEIGHTS, composite_score, weights_used
from picks_mcp.signals.explain import NEUTRAL_EXPLANATION, build_details, build_explanation
from picks_mcp.signals.normalize import normalize_signals

__all__ = [
    "NEUTRAL_EXPLANATION",
    "SIGNAL_WEIGHTS",
    "SignalAssembler",
    "build_details",
    "build_explanation",
    "composite_score",
    "derive_indicators",
    "normalize_signals",
    "weights_used",
]
