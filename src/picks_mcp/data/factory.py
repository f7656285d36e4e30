"""Wire configured providers into one set."""

from dataclasses import dataclass

from picks_mcp.config import Settings
from picks_mcp.data.providers import (
    AlphaVantageFundamentals,
    AlphaVantagePriceHistory,
    FinnhubSentiment,
    FundamentalsProvider,
    PolygonVolatility,
    PriceHistoryProvider,
    SentimentProvider,
    VolatilityProvider,
)
from picks_mcp.data.yfinance_client import YFinanceFundamentals, YFinancePriceHistory


@dataclass(frozen=True)
class ProviderSet:
    """The four upstream collaborators of one assembly."""

    prices: PriceHistoryProvider
    fundamentals: FundamentalsProvider
    sentiment: SentimentProvider
    volatility: VolatilityProvider

    def describe(self) -> dict[str, str]:
        """Source name per input, or "unconfigured"."""
        return {
            role: provider.source if provider.configured else "unconfigured"
            for role, provider in (
                ("price", self.prices),
                ("fundamentals", self.fundamentals),
                ("sentiment", self.sentiment),
                ("volatility", self.volatility),
            )
        }


def build_providers(settings: Settings) -> ProviderSet:
    """Select providers for the configured price source and credentials."""
    if settings.price_source == "yfinance":
        prices: PriceHistoryProvider = YFinancePriceHistory(max_bars=settings.history_bars)
        fundamentals: FundamentalsProvider = YFinanceFundamentals()
    else:
        prices = AlphaVantagePriceHistory(settings.alpha_vantage_key, max_bars=settings.history_bars)
        fundamentals = AlphaVantageFundamentals(settings.alpha_vantage_key)

    return ProviderSet(
        prices=prices,
        fundamentals=fundamentals,
        sentiment=FinnhubSentiment(settings.finnhub_key),
        volatility=PolygonVolatility(settings.polygon_key),
    )
