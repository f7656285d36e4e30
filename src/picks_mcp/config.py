"""Process configuration read from the environment."""

import os
from collections.abc import Mapping
from dataclasses import dataclass

PRICE_SOURCES = ("alphavantage", "yfinance")
DEFAULT_WATCHLIST = ("SPY", "QQQ", "AAPL", "MSFT", "NVDA")
DEFAULT_SIGNAL_CACHE_MS = 2 * 60 * 1000
DEFAULT_HISTORY_BARS = 400


def _get_csv(value: str | None, default: tuple[str, ...]) -> tuple[str, ...]:
    if not value:
        return default
    items = tuple(item.strip().upper() for item in value.split(",") if item.strip())
    return items or default


def _get_int(value: str | None, default: int) -> int:
    if value is None or value == "":
        return default
    try:
        return int(value)
    except ValueError:
        return default


def _get_optional(value: str | None) -> str | None:
    if value is None or not value.strip():
        return None
    return value.strip()


@dataclass(frozen=True)
class Settings:
    alpha_vantage_key: str | None = None
    finnhub_key: str | None = None
    polygon_key: str | None = None
    price_source: str = "alphavantage"
    watchlist: tuple[str, ...] = DEFAULT_WATCHLIST
    signal_cache_ms: int = DEFAULT_SIGNAL_CACHE_MS
    history_bars: int = DEFAULT_HISTORY_BARS
    log_level: str = "INFO"

    @property
    def signal_cache_ttl(self) -> float:
        """Result cache TTL in seconds."""
        return self.signal_cache_ms / 1000


def load_settings(environ: Mapping[str, str] | None = None) -> Settings:
    """
    Build Settings from environment variables.

    Args:
        environ: Mapping to read instead of os.environ (tests)

    Raises:
        ValueError: If PRICE_SOURCE names an unknown provider
    """
    env = os.environ if environ is None else environ

    price_source = (env.get("PRICE_SOURCE") or "alphavantage").strip().lower()
    if price_source not in PRICE_SOURCES:
        raise ValueError(
            f"Invalid PRICE_SOURCE '{price_source}'. Must be one of: {PRICE_SOURCES}"
        )

    signal_cache_ms = _get_int(env.get("SIGNAL_CACHE_MS"), DEFAULT_SIGNAL_CACHE_MS)
    history_bars = _get_int(env.get("HISTORY_BARS"), DEFAULT_HISTORY_BARS)

    return Settings(
        alpha_vantage_key=_get_optional(env.get("ALPHA_VANTAGE_KEY")),
        finnhub_key=_get_optional(env.get("FINNHUB_KEY")),
        polygon_key=_get_optional(env.get("POLYGON_KEY")),
        price_source=price_source,
        watchlist=_get_csv(env.get("WATCHLIST"), DEFAULT_WATCHLIST),
        signal_cache_ms=signal_cache_ms if signal_cache_ms >= 0 else DEFAULT_SIGNAL_CACHE_MS,
        history_bars=history_bars if history_bars > 0 else DEFAULT_HISTORY_BARS,
        log_level=(env.get("LOG_LEVEL") or "INFO").upper(),
    )
