"""Pytest configuration and fixtures."""

from collections.abc import Callable, Mapping
from datetime import date, timedelta

import pandas as pd
import pytest

from picks_mcp.data.factory import ProviderSet
from picks_mcp.data.providers import (
    DataUnavailableError,
    FundamentalsProvider,
    PriceHistoryProvider,
    SentimentProvider,
    VolatilityProvider,
)
from picks_mcp.models import PriceBar, SentimentSnapshot, VolatilitySnapshot

START_DATE = date(2023, 1, 2)


def make_bars(closes: list[float], volumes: list[float] | None = None) -> list[PriceBar]:
    """Daily bars on consecutive dates from START_DATE."""
    if volumes is None:
        volumes = [1_000_000.0] * len(closes)
    return [
        PriceBar(date=START_DATE + timedelta(days=i), close=close, volume=volume)
        for i, (close, volume) in enumerate(zip(closes, volumes))
    ]


class FakePrices(PriceHistoryProvider):
    """In-memory price history; unknown symbols raise DataUnavailableError."""

    source = "fake"

    def __init__(self, bars: Mapping[str, list[PriceBar]], errors: Mapping[str, Exception] | None = None):
        self.bars = dict(bars)
        self.errors = dict(errors or {})
        self.calls: list[str] = []

    async def fetch(self, symbol: str) -> list[PriceBar]:
        self.calls.append(symbol)
        if symbol in self.errors:
            raise self.errors[symbol]
        if symbol not in self.bars:
            raise DataUnavailableError(f"No data for {symbol}", symbol=symbol)
        return list(self.bars[symbol])


class FakeFundamentals(FundamentalsProvider):
    source = "fake"

    def __init__(self, overview: dict[str, str] | None = None, error: Exception | None = None):
        self.overview = overview
        self.error = error

    async def fetch(self, symbol: str) -> dict[str, str]:
        if self.error is not None:
            raise self.error
        if not self.overview:
            raise DataUnavailableError(f"No overview for {symbol}", symbol=symbol)
        return dict(self.overview)


class FakeSentiment(SentimentProvider):
    source = "fake"

    def __init__(self, snapshot: SentimentSnapshot | None = None, error: Exception | None = None):
        self.snapshot = snapshot
        self.error = error
        self.configured = snapshot is not None or error is not None

    async def fetch(self, symbol: str) -> SentimentSnapshot | None:
        if self.error is not None:
            raise self.error
        return self.snapshot


class FakeVolatility(VolatilityProvider):
    source = "fake"

    def __init__(self, snapshot: VolatilitySnapshot | None = None, error: Exception | None = None):
        self.snapshot = snapshot
        self.error = error
        self.configured = snapshot is not None or error is not None

    async def fetch(self, symbol: str) -> VolatilitySnapshot | None:
        if self.error is not None:
            raise self.error
        return self.snapshot


class FakeClock:
    """Monotonic clock advanced by hand."""

    def __init__(self, now: float = 0.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def flat_closes() -> list[float]:
    """250 identical closes."""
    return [100.0] * 250


@pytest.fixture
def rising_closes() -> list[float]:
    """250 closes rising by 0.5 per bar."""
    return [100.0 + 0.5 * i for i in range(250)]


@pytest.fixture
def falling_closes() -> list[float]:
    """250 closes falling by 0.5 per bar."""
    return [200.0 - 0.5 * i for i in range(250)]


@pytest.fixture
def make_providers() -> Callable[..., ProviderSet]:
    """Factory for a ProviderSet over fakes; optional inputs default to absent."""

    def _make(
        bars: Mapping[str, list[PriceBar]],
        *,
        errors: Mapping[str, Exception] | None = None,
        fundamentals: FundamentalsProvider | None = None,
        sentiment: SentimentProvider | None = None,
        volatility: VolatilityProvider | None = None,
    ) -> ProviderSet:
        return ProviderSet(
            prices=FakePrices(bars, errors),
            fundamentals=fundamentals or FakeFundamentals(),
            sentiment=sentiment or FakeSentiment(),
            volatility=volatility or FakeVolatility(),
        )

    return _make


@pytest.fixture
def sample_ohlcv_df() -> pd.DataFrame:
    """Sample yfinance-style OHLCV DataFrame for testing."""
    return pd.DataFrame(
        {
            "Date": pd.date_range("2024-01-01", periods=10, freq="D"),
            "Open": [100.0, 101.0, 102.0, 101.5, 103.0, 104.0, 103.5, 105.0, 106.0, 105.5],
            "High": [101.0, 102.5, 103.0, 102.5, 104.5, 105.5, 105.0, 106.5, 107.0, 106.5],
            "Low": [99.5, 100.5, 101.0, 100.5, 102.0, 103.0, 102.5, 104.0, 105.0, 104.5],
            "Close": [100.5, 102.0, 101.5, 102.0, 104.0, 103.5, 104.5, 106.0, 105.5, 106.0],
            "Volume": [1000000] * 10,
        }
    ).set_index("Date")


@pytest.fixture
def sample_price_series() -> pd.Series:
    """Sample price series for indicator testing."""
    return pd.Series(
        [100.0, 101.0, 102.0, 101.5, 103.0, 104.0, 103.5, 105.0, 106.0, 105.5,
         107.0, 108.0, 107.5, 109.0, 110.0, 109.5, 111.0, 112.0, 111.5, 113.0,
         114.0, 113.5, 115.0, 116.0, 115.5, 117.0, 118.0, 117.5, 119.0, 120.0,
         119.5, 121.0, 122.0, 121.5, 123.0, 124.0, 123.5, 125.0, 126.0, 125.5]
    )
