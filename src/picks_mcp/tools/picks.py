"""Ranked composite signals across a batch of symbols."""

import asyncio
import logging
from collections.abc import Callable, Iterable, Mapping, Sequence
from datetime import datetime, timezone
from time import perf_counter
from typing import Any

from picks_mcp.config import DEFAULT_WATCHLIST
from picks_mcp.data.cache import SignalCache
from picks_mcp.data.providers import DataUnavailableError, ProviderConfigError
from picks_mcp.data.yfinance_client import get_market_state
from picks_mcp.models import CompositeResult
from picks_mcp.signals.composite import weights_used
from picks_mcp.utils.provenance import build_error_response, build_meta
from picks_mcp.utils.validators import normalize_symbol, split_symbols

logger = logging.getLogger(__name__)

UNAVAILABLE_EXPLANATION = "Signal unavailable due to upstream data error."
PICKS_FAILURE_MESSAGE = "Unable to generate picks at this time."


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def degraded_result(symbol: str, now: datetime) -> CompositeResult:
    """Zero-score placeholder for a symbol whose price history could not be obtained."""
    return CompositeResult(
        symbol=symbol,
        score=0.0,
        updated_at=now,
        latest_price=None,
        explanation=UNAVAILABLE_EXPLANATION,
    )


def rank_picks(picks: Iterable[CompositeResult]) -> list[CompositeResult]:
    """Sort by score descending; equal scores fall back to symbol ascending."""
    return sorted(picks, key=lambda pick: (-pick.score, pick.symbol))


async def collect_picks(
    symbols: Sequence[str],
    cache: SignalCache,
    clock: Callable[[], datetime] = _utcnow,
) -> list[CompositeResult]:
    """
    Load every symbol through the cache concurrently and rank the results.

    A symbol whose assembly fails is replaced by a degraded placeholder;
    one failure never fails the batch.
    """

    async def _load(symbol: str) -> CompositeResult:
        try:
            return await cache.get(symbol)
        except Exception as e:
            logger.error(f"Unable to build signal for {symbol}: {type(e).__name__}: {e}")
            return degraded_result(symbol, clock())

    picks = await asyncio.gather(*[_load(symbol) for symbol in symbols])
    return rank_picks(picks)


async def get_picks(
    symbols: str | Sequence[str] | None,
    cache: SignalCache,
    *,
    watchlist: Sequence[str] = DEFAULT_WATCHLIST,
    data_sources: Mapping[str, str] | None = None,
    clock: Callable[[], datetime] = _utcnow,
) -> dict[str, Any]:
    """
    Ranked composite picks for the requested symbols.

    Args:
        symbols: Comma-separated string or sequence; empty uses the watchlist
        cache: Signal cache in front of the assembler
        watchlist: Default symbols
        data_sources: Provider description echoed in the response
        clock: Timestamp source

    Returns:
        Dict with meta, updated_at, symbols, invalid_symbols, market_state,
        data_sources and picks sorted by score descending. Malformed symbols
        are listed under invalid_symbols and skipped; the request is an
        invalid_symbol error only when nothing valid remains.
    """
    start_time = perf_counter()

    valid, rejected = split_symbols(symbols)
    if rejected:
        if not valid:
            return build_error_response(
                error_type="invalid_symbol",
                message=f"No valid symbols in request: {', '.join(rejected)}",
            )
        logger.warning(f"Skipping invalid symbols: {rejected}")
    requested = valid or list(watchlist)

    try:
        picks = await collect_picks(requested, cache, clock)
    except Exception:
        logger.exception("Failed to generate picks")
        return build_error_response(error_type="internal_error", message=PICKS_FAILURE_MESSAGE)

    duration_ms = (perf_counter() - start_time) * 1000

    return {
        "meta": build_meta("get_picks", duration_ms),
        "updated_at": clock().isoformat(),
        "symbols": requested,
        "invalid_symbols": rejected,
        "market_state": get_market_state(),
        "data_sources": dict(data_sources or {}),
        "picks": [pick.to_dict() for pick in picks],
    }


async def get_signal(symbol: str, cache: SignalCache) -> dict[str, Any]:
    """
    Composite signal for one symbol, through the cache.

    Unlike get_picks, a failed assembly is reported as an error response.

    Returns:
        Dict with meta, the composite record fields, and the effective
        weights of the signals that were present
    """
    start_time = perf_counter()

    try:
        normalized = normalize_symbol(symbol)
    except ValueError as e:
        return build_error_response(error_type="invalid_symbol", message=str(e), symbol=symbol)

    try:
        result = await cache.get(normalized)
    except (DataUnavailableError, ProviderConfigError) as e:
        return build_error_response(error_type="data_unavailable", message=str(e), symbol=normalized)
    except Exception as e:
        return build_error_response(
            error_type="data_unavailable",
            message=f"Failed to fetch data: {e}",
            symbol=normalized,
        )

    duration_ms = (perf_counter() - start_time) * 1000

    return {
        "meta": build_meta("get_signal", duration_ms),
        **result.to_dict(),
        "weights_used": weights_used(result.signals),
    }
