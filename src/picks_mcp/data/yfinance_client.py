"""yfinance-backed price history and fundamentals, plus the market clock."""

import logging
import math
from datetime import datetime
from typing import Any

import pandas as pd
import pytz
import yfinance as yf

from picks_mcp.data.http_client import run_with_retry
from picks_mcp.data.providers import (
    DataUnavailableError,
    FundamentalsProvider,
    PriceHistoryProvider,
)
from picks_mcp.models import PriceBar
from picks_mcp.utils.ohlcv import frame_to_bars, standardize_ohlcv

logger = logging.getLogger(__name__)

# yfinance info keys mapped onto the sparse overview keys used for display
INFO_FIELD_MAP: dict[str, str] = {
    "trailingPE": "PERatio",
    "profitMargins": "ProfitMargin",
    "trailingEps": "EPS",
    "marketCap": "MarketCapitalization",
    "sector": "Sector",
}


def _has_value(v: Any) -> bool:
    """
    Check if a value is truly present (not None, NaN, or empty string).

    yfinance often uses float("nan") for missing numerics.
    """
    if v is None:
        return False
    if isinstance(v, float) and math.isnan(v):
        return False
    if isinstance(v, str) and v.strip() == "":
        return False
    return True


def info_to_overview(info: dict[str, Any]) -> dict[str, str]:
    """Project a yfinance info dict onto overview keys, skipping missing values."""
    return {
        target: str(info[source])
        for source, target in INFO_FIELD_MAP.items()
        if _has_value(info.get(source))
    }


class YFinancePriceHistory(PriceHistoryProvider):
    source = "yfinance"

    def __init__(self, period: str = "2y", max_bars: int | None = None):
        self.period = period
        self.max_bars = max_bars

    async def fetch(self, symbol: str) -> list[PriceBar]:
        def _fetch() -> pd.DataFrame:
            df = yf.download(
                tickers=symbol,
                period=self.period,
                interval="1d",
                auto_adjust=True,
                progress=False,
            )
            if df is None or df.empty:
                raise DataUnavailableError(f"No data returned for {symbol}", symbol=symbol)
            return standardize_ohlcv(df)

        df = await run_with_retry(f"yfinance.history({symbol})", _fetch)
        if self.max_bars:
            df = df.tail(self.max_bars)
        return frame_to_bars(df)


class YFinanceFundamentals(FundamentalsProvider):
    source = "yfinance"

    async def fetch(self, symbol: str) -> dict[str, str]:
        def _fetch() -> dict[str, Any]:
            return yf.Ticker(symbol).info or {}

        info = await run_with_retry(f"yfinance.info({symbol})", _fetch)
        overview = info_to_overview(info)
        if not overview:
            raise DataUnavailableError(f"yfinance overview not available for {symbol}", symbol=symbol)
        return overview


def get_market_state(tz: str = "America/New_York") -> dict[str, str]:
    """
    Determine market state. Clock-based only (no holiday calendar).

    Args:
        tz: Timezone (default: America/New_York)

    Returns:
        Dict with state, method, and checked_at timestamp
    """
    eastern = pytz.timezone(tz)
    now = datetime.now(eastern)

    # Weekends
    if now.weekday() >= 5:
        state = "closed"
    else:
        time_minutes = now.hour * 60 + now.minute

        if time_minutes < 4 * 60:  # Before 4 AM
            state = "closed"
        elif time_minutes < 9 * 60 + 30:  # 4 AM - 9:30 AM
            state = "pre_market"
        elif time_minutes < 16 * 60:  # 9:30 AM - 4 PM
            state = "regular"
        elif time_minutes < 20 * 60:  # 4 PM - 8 PM
            state = "after_hours"
        else:
            state = "closed"

    return {
        "state": state,
        "method": "clock_only_no_holidays",
        "checked_at": now.isoformat(),
    }
