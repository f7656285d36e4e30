"""Utility modules."""

from picks_mcp.utils.indicators import (
    calculate_bollinger,
    calculate_ema,
    calculate_macd,
    calculate_rsi,
    calculate_sma,
    calculate_volume_surge,
    clamp,
)
from picks_mcp.utils.ohlcv import bars_to_frame, df_to_csv, frame_to_bars, standardize_ohlcv
from picks_mcp.utils.provenance import build_error_response, build_meta
from picks_mcp.utils.validators import normalize_symbol, split_symbols

__all__ = [
    "calculate_bollinger",
    "calculate_ema",
    "calculate_macd",
    "calculate_rsi",
    "calculate_sma",
    "calculate_volume_surge",
    "clamp",
    "bars_to_frame",
    "df_to_csv",
    "frame_to_bars",
    "standardize_ohlcv",
    "build_error_response",
    "build_meta",
    "normalize_symbol",
    "split_symbols",
]
