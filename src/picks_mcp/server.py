"""Composite Signal Picks MCP Server using FastMCP."""

import asyncio
import json
import logging

from fastmcp import FastMCP

from picks_mcp import SCHEMA_VERSION, SERVER_VERSION
from picks_mcp.config import load_settings
from picks_mcp.data.cache import PriceCache, SignalCache
from picks_mcp.data.factory import build_providers
from picks_mcp.data.http_client import shutdown_executor
from picks_mcp.prompts.templates import get_prompt
from picks_mcp.resources.price_resource import ResourceNotFoundError, read_price_resource
from picks_mcp.signals.assembly import SignalAssembler
from picks_mcp.tools import get_picks as picks_tool
from picks_mcp.tools import get_signal as signal_tool

settings = load_settings()

# Configure logging
logging.basicConfig(level=getattr(logging, settings.log_level, logging.INFO))
logger = logging.getLogger(__name__)

providers = build_providers(settings)
price_cache = PriceCache()
assembler = SignalAssembler(providers, price_cache=price_cache)
signal_cache = SignalCache(assembler.assemble, ttl_seconds=settings.signal_cache_ttl)

# Create FastMCP server instance
mcp = FastMCP(
    name="picks-mcp",
)


# ============================================================================
# TOOLS
# ============================================================================


@mcp.tool
async def get_picks(symbols: str = "") -> str:
    """
    Rank symbols by composite signal score.

    Combines trend (SMA50/SMA200), RSI, MACD histogram, Bollinger position,
    volume surge, news sentiment and implied-volatility rank into one score
    in [-1, 1]. Missing inputs are dropped and the remaining weights are
    renormalized. Symbols with no price data get a zero-score placeholder.

    Args:
        symbols: Comma-separated tickers (e.g. "AAPL,MSFT"); empty uses the watchlist

    Returns:
        JSON with picks sorted by score descending
    """
    result = await picks_tool(
        symbols,
        signal_cache,
        watchlist=settings.watchlist,
        data_sources=providers.describe(),
    )
    return json.dumps(result, indent=2, default=str)


@mcp.tool
async def get_signal(symbol: str) -> str:
    """
    Get the composite signal for one stock.

    Args:
        symbol: Stock ticker symbol

    Returns:
        JSON with score, explanation, per-indicator signals and details,
        and the weights applied to the signals that were present
    """
    result = await signal_tool(symbol, signal_cache)
    return json.dumps(result, indent=2, default=str)


# ============================================================================
# RESOURCES
# ============================================================================


@mcp.resource("price://{symbol}/daily")
def get_cached_price_data(symbol: str) -> str:
    """
    Get cached daily bars as CSV.

    Populated whenever a signal for the symbol is assembled.

    Args:
        symbol: Stock ticker symbol

    Returns:
        CSV data with date,close,volume columns
    """
    try:
        csv_text, _ = read_price_resource(price_cache, symbol)
        return csv_text
    except ResourceNotFoundError:
        return f"Resource not cached. Call get_signal('{symbol}') first."


# ============================================================================
# PROMPTS
# ============================================================================


@mcp.prompt
def daily_picks_brief(symbols: str = "") -> str:
    """Ranked brief of composite signals for a watchlist."""
    result = get_prompt("daily_picks_brief", {"symbols": symbols})
    if result:
        return result["messages"][0]["content"]
    return "Rank the watchlist using get_picks."


@mcp.prompt
def signal_breakdown(symbol: str) -> str:
    """Explain one symbol's composite score indicator by indicator."""
    result = get_prompt("signal_breakdown", {"symbol": symbol})
    if result:
        return result["messages"][0]["content"]
    return f"Explain the composite signal for {symbol} using get_signal."


# ============================================================================
# ENTRY POINT
# ============================================================================


def main() -> None:
    """Run the MCP server."""
    logger.info(
        f"Starting Composite Picks MCP Server v{SERVER_VERSION} (schema v{SCHEMA_VERSION}), "
        f"price source={settings.price_source}"
    )
    try:
        mcp.run()
    finally:
        asyncio.run(shutdown_executor())


if __name__ == "__main__":
    main()
