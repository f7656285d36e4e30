"""Fetch inputs for one symbol and turn them into a CompositeResult."""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from datetime import datetime, timezone
from typing import TypeVar

import pandas as pd

from picks_mcp.data.cache import PriceCache
from picks_mcp.data.factory import ProviderSet
from picks_mcp.data.providers import DataUnavailableError
from picks_mcp.models import CompositeResult, RawIndicators
from picks_mcp.signals.composite import composite_score
from picks_mcp.signals.explain import build_details, build_explanation
from picks_mcp.signals.normalize import normalize_signals
from picks_mcp.utils.indicators import (
    calculate_bollinger,
    calculate_macd,
    calculate_rsi,
    calculate_sma,
    calculate_volume_surge,
)
from picks_mcp.utils.ohlcv import bars_to_frame

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def derive_indicators(prices: pd.DataFrame) -> RawIndicators:
    """
    Compute every raw statistic from a canonical price frame.

    Args:
        prices: Frame with date, close, volume columns, ascending

    Returns:
        RawIndicators; fields stay None where the history is too short
    """
    close = prices["close"]
    volume = prices["volume"]
    latest_price = float(close.iloc[-1]) if len(close) > 0 else None

    return RawIndicators(
        latest_price=latest_price,
        sma_50=calculate_sma(close, 50),
        sma_200=calculate_sma(close, 200),
        rsi=calculate_rsi(close, 14),
        macd=calculate_macd(close, 12, 26, 9),
        bands=calculate_bollinger(close, 20, 2.0),
        volume_surge=calculate_volume_surge(volume, 20),
    )


class SignalAssembler:
    """
    Builds one CompositeResult per call.

    Price history is required; fundamentals, sentiment and volatility are
    fetched concurrently with it and each degrades to absent on its own.
    """

    def __init__(
        self,
        providers: ProviderSet,
        price_cache: PriceCache | None = None,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self.providers = providers
        self.price_cache = price_cache
        self.clock = clock

    async def _optional(self, name: str, symbol: str, coro: Awaitable[T]) -> T | None:
        """Await an optional input; any failure becomes None."""
        try:
            return await coro
        except Exception as e:
            logger.warning(f"{name} unavailable for {symbol}: {type(e).__name__}: {e}")
            return None

    async def assemble(self, symbol: str) -> CompositeResult:
        """
        Fetch, derive, normalize, score and explain one symbol.

        Raises:
            DataUnavailableError: If price history is missing or empty
            ProviderConfigError: If the price provider lacks credentials
        """
        bars, fundamentals, sentiment, volatility = await asyncio.gather(
            self.providers.prices.fetch(symbol),
            self._optional("Fundamentals", symbol, self.providers.fundamentals.fetch(symbol)),
            self._optional("Sentiment", symbol, self.providers.sentiment.fetch(symbol)),
            self._optional("Volatility", symbol, self.providers.volatility.fetch(symbol)),
        )

        prices = bars_to_frame(bars or [])
        if prices.empty:
            raise DataUnavailableError(f"No price data returned for {symbol}", symbol=symbol)

        if self.price_cache is not None:
            try:
                self.price_cache.store(symbol, prices)
            except Exception as e:
                logger.warning(f"Price cache write failed for {symbol}: {e}")

        raw = derive_indicators(prices)
        signals = normalize_signals(raw, sentiment=sentiment, volatility=volatility)

        return CompositeResult(
            symbol=symbol,
            score=composite_score(signals),
            updated_at=self.clock(),
            latest_price=raw.latest_price,
            explanation=build_explanation(signals),
            signals=signals,
            details=tuple(build_details(raw, signals, sentiment, fundamentals)),
        )
