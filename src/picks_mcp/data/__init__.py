"""Data layer: upstream providers, transport and caches."""

from picks_mcp.data.cache import PriceCache, SignalCache
from picks_mcp.data.factory import ProviderSet, build_providers
from picks_mcp.data.http_client import (
    ServerShuttingDownError,
    UpstreamRetryError,
    fetch_json,
    run_with_retry,
    shutdown_executor,
)
from picks_mcp.data.providers import (
    DataUnavailableError,
    FundamentalsProvider,
    PriceHistoryProvider,
    ProviderConfigError,
    SentimentProvider,
    UpstreamPayloadError,
    VolatilityProvider,
)
from picks_mcp.data.yfinance_client import get_market_state

__all__ = [
    # Caches
    "PriceCache",
    "SignalCache",
    # Providers
    "DataUnavailableError",
    "FundamentalsProvider",
    "PriceHistoryProvider",
    "ProviderConfigError",
    "ProviderSet",
    "SentimentProvider",
    "UpstreamPayloadError",
    "VolatilityProvider",
    "build_providers",
    "get_market_state",
    # Transport
    "ServerShuttingDownError",
    "UpstreamRetryError",
    "fetch_json",
    "run_with_retry",
    "shutdown_executor",
]
