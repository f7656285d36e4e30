"""Value types shared by the signal engine, the cache and the providers."""

from dataclasses import asdict, dataclass, field, fields
from datetime import date, datetime
from typing import Any


@dataclass(frozen=True)
class PriceBar:
    """One daily bar. Sequences of bars are ascending by date."""

    date: date
    close: float
    volume: float


@dataclass(frozen=True)
class SentimentSnapshot:
    """News sentiment split, percentages on a 0-100 scale."""

    bullish_percent: float
    bearish_percent: float
    score: float


@dataclass(frozen=True)
class VolatilitySnapshot:
    """Implied volatility reading with the range it sits in."""

    current_iv: float
    low_iv: float
    high_iv: float


@dataclass(frozen=True)
class MacdResult:
    """Trend-convergence reading at the latest bar."""

    value: float
    signal: float
    histogram: float


@dataclass(frozen=True)
class BandStats:
    """Band statistics over the trailing window."""

    middle: float
    upper: float
    lower: float
    std_dev: float


@dataclass(frozen=True)
class RawIndicators:
    """Unnormalized statistics derived from one price history."""

    latest_price: float | None = None
    sma_50: float | None = None
    sma_200: float | None = None
    rsi: float | None = None
    macd: MacdResult | None = None
    bands: BandStats | None = None
    volume_surge: float | None = None


@dataclass(frozen=True)
class IndicatorSignals:
    """
    Normalized signals, each in [-1, 1] or None.

    None means insufficient data for that indicator, never zero.
    """

    trend: float | None = None
    oscillator: float | None = None
    momentum_divergence: float | None = None
    band_position: float | None = None
    volume_anomaly: float | None = None
    sentiment: float | None = None
    volatility_rank: float | None = None

    def present(self) -> dict[str, float]:
        """Signals that carry a value, in declaration order."""
        return {
            f.name: getattr(self, f.name)
            for f in fields(self)
            if getattr(self, f.name) is not None
        }

    def to_dict(self) -> dict[str, float | None]:
        return asdict(self)


@dataclass(frozen=True)
class IndicatorDetail:
    """Display row: label, formatted value and optional normalized signal."""

    name: str
    value: str
    signal: float | None = None

    def to_dict(self) -> dict[str, Any]:
        return {"name": self.name, "value": self.value, "signal": self.signal}


@dataclass(frozen=True)
class CompositeResult:
    """Scored, explained record for one symbol. The unit returned and cached."""

    symbol: str
    score: float
    updated_at: datetime
    latest_price: float | None
    explanation: str
    signals: IndicatorSignals = field(default_factory=IndicatorSignals)
    details: tuple[IndicatorDetail, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "symbol": self.symbol,
            "score": self.score,
            "updated_at": self.updated_at.isoformat(),
            "latest_price": self.latest_price,
            "explanation": self.explanation,
            "signals": self.signals.to_dict(),
            "details": [d.to_dict() for d in self.details],
        }


@dataclass
class CacheEntry:
    """Cached payload plus the clock reading taken when its assembly started."""

    payload: CompositeResult
    updated_at: float
