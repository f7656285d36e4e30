"""Upstream providers for price history, fundamentals, sentiment and volatility.

Price history is the only required input; the base classes document which
providers raise and which return None when data is missing.
"""

import logging
import math
from abc import ABC, abstractmethod
from collections.abc import Mapping
from datetime import date
from typing import Any

from picks_mcp.data.http_client import fetch_json
from picks_mcp.models import PriceBar, SentimentSnapshot, VolatilitySnapshot
from picks_mcp.utils.indicators import clamp

logger = logging.getLogger(__name__)

ALPHA_VANTAGE_URL = "https://www.alphavantage.co/query"
FINNHUB_SENTIMENT_URL = "https://finnhub.io/api/v1/news-sentiment"
POLYGON_CONTRACTS_URL = "https://api.polygon.io/v3/reference/options/contracts"


class DataUnavailableError(ValueError):
    """Upstream has no data for the symbol."""

    def __init__(self, message: str, symbol: str | None = None):
        super().__init__(message)
        self.symbol = symbol


class ProviderConfigError(RuntimeError):
    """A required provider credential is missing."""

    pass


class UpstreamPayloadError(ValueError):
    """Upstream answered, but not with usable data."""

    def __init__(self, message: str, retryable: bool = True):
        super().__init__(message)
        self.retryable = retryable


class PriceHistoryProvider(ABC):
    """Required input. Raises DataUnavailableError when there is no series."""

    source: str = "unknown"
    configured: bool = True

    @abstractmethod
    async def fetch(self, symbol: str) -> list[PriceBar]: ...


class FundamentalsProvider(ABC):
    """Optional input. Raises when the overview is empty."""

    source: str = "unknown"
    configured: bool = True

    @abstractmethod
    async def fetch(self, symbol: str) -> dict[str, str]: ...


class SentimentProvider(ABC):
    """Optional input. Returns None when unconfigured or data is missing."""

    source: str = "unknown"
    configured: bool = True

    @abstractmethod
    async def fetch(self, symbol: str) -> SentimentSnapshot | None: ...


class VolatilityProvider(ABC):
    """Optional input. Returns None when unconfigured or data is missing."""

    source: str = "unknown"
    configured: bool = True

    @abstractmethod
    async def fetch(self, symbol: str) -> VolatilitySnapshot | None: ...


def _to_float(value: Any) -> float | None:
    """Parse a numeric field; None for missing, malformed or non-finite."""
    if value is None:
        return None
    try:
        parsed = float(value)
    except (TypeError, ValueError):
        return None
    return parsed if math.isfinite(parsed) else None


# ============================================================================
# ALPHA VANTAGE
# ============================================================================


def check_alpha_vantage_payload(data: Any) -> dict[str, Any]:
    """
    Reject Alpha Vantage notices that arrive with HTTP 200.

    Raises:
        UpstreamPayloadError: Throttle notice ("Note", retryable) or other
            notice ("Information", not retryable)
        DataUnavailableError: "Error Message" (unknown symbol, bad function)
    """
    if not isinstance(data, dict):
        raise UpstreamPayloadError(f"Unexpected Alpha Vantage payload type: {type(data).__name__}")
    if note := data.get("Note"):
        raise UpstreamPayloadError(f"Alpha Vantage rate limit: {note}")
    if info := data.get("Information"):
        # Daily quota and premium-endpoint notices do not clear within a retry window
        raise UpstreamPayloadError(f"Alpha Vantage notice: {info}", retryable=False)
    if error := data.get("Error Message"):
        raise DataUnavailableError(f"Alpha Vantage error: {error}")
    return data


def parse_daily_series(
    series: Mapping[str, Mapping[str, str]],
    max_bars: int | None = None,
) -> list[PriceBar]:
    """
    Convert an Alpha Vantage daily series into ascending PriceBars.

    Close comes from "4. close"; volume from "6. volume" (adjusted endpoint)
    or "5. volume". Rows with non-finite values are dropped.
    """
    bars: list[PriceBar] = []
    for day, values in series.items():
        close = _to_float(values.get("4. close"))
        volume = _to_float(values.get("6. volume", values.get("5. volume")))
        if close is None or volume is None:
            continue
        try:
            bar_date = date.fromisoformat(day)
        except ValueError:
            continue
        bars.append(PriceBar(date=bar_date, close=close, volume=volume))

    bars.sort(key=lambda bar: bar.date)
    if max_bars:
        bars = bars[-max_bars:]
    return bars


class AlphaVantagePriceHistory(PriceHistoryProvider):
    source = "alphavantage"

    def __init__(self, api_key: str | None, max_bars: int | None = None):
        self.api_key = api_key
        self.max_bars = max_bars
        self.configured = api_key is not None

    async def fetch(self, symbol: str) -> list[PriceBar]:
        if not self.api_key:
            raise ProviderConfigError(
                "Missing Alpha Vantage API key. Set ALPHA_VANTAGE_KEY in your environment."
            )

        data = await fetch_json(
            ALPHA_VANTAGE_URL,
            {
                "function": "TIME_SERIES_DAILY_ADJUSTED",
                "symbol": symbol,
                "outputsize": "full",
                "apikey": self.api_key,
            },
            operation=f"alphavantage.daily({symbol})",
            validate=check_alpha_vantage_payload,
        )

        series = data.get("Time Series (Daily)")
        if not series:
            raise DataUnavailableError(
                f"Alpha Vantage response missing daily time series for {symbol}",
                symbol=symbol,
            )
        return parse_daily_series(series, self.max_bars)


class AlphaVantageFundamentals(FundamentalsProvider):
    source = "alphavantage"

    def __init__(self, api_key: str | None):
        self.api_key = api_key
        self.configured = api_key is not None

    async def fetch(self, symbol: str) -> dict[str, str]:
        if not self.api_key:
            raise ProviderConfigError(
                "Missing Alpha Vantage API key. Set ALPHA_VANTAGE_KEY in your environment."
            )

        data = await fetch_json(
            ALPHA_VANTAGE_URL,
            {"function": "OVERVIEW", "symbol": symbol, "apikey": self.api_key},
            operation=f"alphavantage.overview({symbol})",
            validate=check_alpha_vantage_payload,
        )
        if not data:
            raise DataUnavailableError(
                f"Alpha Vantage overview not available for {symbol}",
                symbol=symbol,
            )
        return {str(k): str(v) for k, v in data.items() if v is not None}


# ============================================================================
# FINNHUB
# ============================================================================


def parse_sentiment(data: Any) -> SentimentSnapshot | None:
    """
    Build a SentimentSnapshot from a Finnhub news-sentiment payload.

    Finnhub reports the split as fractions; values are rescaled to 0-100
    when both are at most 1.
    """
    if not isinstance(data, dict):
        return None
    block = data.get("sentiment")
    if not isinstance(block, dict) or not block:
        return None

    bullish = _to_float(block.get("bullishPercent", 0))
    bearish = _to_float(block.get("bearishPercent", 0))
    if bullish is None or bearish is None:
        return None

    if bullish <= 1 and bearish <= 1:
        bullish, bearish = bullish * 100, bearish * 100

    return SentimentSnapshot(
        bullish_percent=bullish,
        bearish_percent=bearish,
        score=clamp((bullish - bearish) / 100),
    )


class FinnhubSentiment(SentimentProvider):
    source = "finnhub"

    def __init__(self, api_key: str | None):
        self.api_key = api_key
        self.configured = api_key is not None

    async def fetch(self, symbol: str) -> SentimentSnapshot | None:
        if not self.api_key:
            return None
        try:
            data = await fetch_json(
                FINNHUB_SENTIMENT_URL,
                {"symbol": symbol, "token": self.api_key},
                operation=f"finnhub.sentiment({symbol})",
            )
        except Exception as e:
            logger.warning(f"Finnhub sentiment unavailable for {symbol}: {e}")
            return None
        return parse_sentiment(data)


# ============================================================================
# POLYGON
# ============================================================================


def parse_volatility(data: Any) -> VolatilitySnapshot | None:
    """
    Build a VolatilitySnapshot from Polygon option contracts sorted by IV.

    Current IV is the first finite value; low/high span all finite values.
    """
    if not isinstance(data, dict):
        return None
    results = data.get("results") or []
    iv_values = [
        iv
        for iv in (_to_float(r.get("implied_volatility")) for r in results if isinstance(r, dict))
        if iv is not None
    ]
    if not iv_values:
        return None
    return VolatilitySnapshot(
        current_iv=iv_values[0],
        low_iv=min(iv_values),
        high_iv=max(iv_values),
    )


class PolygonVolatility(VolatilityProvider):
    source = "polygon"

    def __init__(self, api_key: str | None):
        self.api_key = api_key
        self.configured = api_key is not None

    async def fetch(self, symbol: str) -> VolatilitySnapshot | None:
        if not self.api_key:
            return None
        try:
            data = await fetch_json(
                POLYGON_CONTRACTS_URL,
                {
                    "underlying_ticker": symbol,
                    "limit": "50",
                    "sort": "implied_volatility",
                    "order": "desc",
                    "apiKey": self.api_key,
                },
                operation=f"polygon.contracts({symbol})",
            )
        except Exception as e:
            logger.warning(f"Polygon volatility unavailable for {symbol}: {e}")
            return None
        return parse_volatility(data)
