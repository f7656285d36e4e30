"""Price data resource handler."""

from picks_mcp.data.cache import PriceCache


class ResourceNotFoundError(Exception):
    """Resource not found in cache."""

    pass


def read_price_resource(cache: PriceCache, symbol: str) -> tuple[str, str]:
    """
    Serve cached price data only. O(1), no transformation.

    Args:
        cache: Price cache populated by signal assembly
        symbol: Ticker symbol (e.g., NVDA)

    Returns:
        Tuple of (csv_text, mime_type)

    Raises:
        ResourceNotFoundError: If resource not in cache
    """
    uri = PriceCache.uri_for(symbol)
    csv_text = cache.get_csv(uri)

    if csv_text is None:
        raise ResourceNotFoundError(f"Resource not cached. Call get_signal or get_picks first: {uri}")

    return csv_text, "text/csv"
