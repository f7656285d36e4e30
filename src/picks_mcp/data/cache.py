"""Result cache for composite signals and resource cache for raw prices."""

import asyncio
import gzip
import hashlib
import logging
import os
import time
from collections.abc import Awaitable, Callable, MutableMapping
from datetime import datetime, timezone
from typing import Any

import diskcache
import pandas as pd

from picks_mcp.models import CacheEntry, CompositeResult
from picks_mcp.utils.ohlcv import df_to_csv

logger = logging.getLogger(__name__)

DEFAULT_SIGNAL_TTL = 120.0  # seconds


class SignalCache:
    """
    Time-boxed memoization of CompositeResult per symbol.

    Entries are checked for staleness lazily on read and replaced wholesale
    on refresh; unused keys are never evicted. Concurrent misses for the
    same symbol share one in-flight assembly.
    """

    def __init__(
        self,
        assemble: Callable[[str], Awaitable[CompositeResult]],
        ttl_seconds: float = DEFAULT_SIGNAL_TTL,
        store: MutableMapping[str, CacheEntry] | None = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._assemble = assemble
        self.ttl_seconds = ttl_seconds
        self._store: MutableMapping[str, CacheEntry] = {} if store is None else store
        self._clock = clock
        self._in_flight: dict[str, "asyncio.Task[CompositeResult]"] = {}

    def is_fresh(self, entry: CacheEntry) -> bool:
        return self._clock() - entry.updated_at < self.ttl_seconds

    def peek(self, symbol: str) -> CacheEntry | None:
        """Stored entry regardless of freshness, without assembling."""
        return self._store.get(symbol)

    async def get(self, symbol: str) -> CompositeResult:
        """
        Return the cached payload if fresh, otherwise reassemble.

        Raises:
            Whatever the assembly raises; failures are not cached.
        """
        entry = self._store.get(symbol)
        if entry is not None and self.is_fresh(entry):
            logger.debug(f"signal cache hit: {symbol}")
            return entry.payload
        logger.debug(f"signal cache miss: {symbol}")
        return await self.refresh(symbol)

    async def refresh(self, symbol: str) -> CompositeResult:
        """Force one assembly (shared with concurrent callers) and overwrite the entry."""
        # No await between lookup and insert, so check-and-create is atomic on the loop
        task = self._in_flight.get(symbol)
        if task is None:
            task = asyncio.create_task(self._assemble_and_store(symbol))
            self._in_flight[symbol] = task
            task.add_done_callback(lambda done: self._forget(symbol, done))
        else:
            logger.debug(f"signal cache: joining in-flight assembly for {symbol}")

        # A cancelled waiter, creator included, must not cancel the shared assembly
        return await asyncio.shield(task)

    def _forget(self, symbol: str, task: "asyncio.Task[CompositeResult]") -> None:
        if self._in_flight.get(symbol) is task:
            self._in_flight.pop(symbol, None)

    async def _assemble_and_store(self, symbol: str) -> CompositeResult:
        started = self._clock()
        payload = await self._assemble(symbol)
        self._store[symbol] = CacheEntry(payload=payload, updated_at=started)
        return payload

    def clear(self) -> None:
        self._store.clear()

    def __len__(self) -> int:
        return len(self._store)


class PriceCache:
    """
    Cache stores exact CSV text of the bars behind each assembled signal.

    Resources only serve cached data. Never fetch live.
    """

    def __init__(self, cache_dir: str | None = None, ttl: int | None = None):
        if cache_dir is None:
            cache_dir = os.environ.get("CACHE_DIR", ".cache/prices")
        self.cache: diskcache.Cache = diskcache.Cache(cache_dir)
        self._default_ttl = ttl if ttl is not None else int(os.environ.get("CACHE_TTL", "300"))

    @staticmethod
    def uri_for(symbol: str) -> str:
        """Canonical URI for a symbol's daily bars."""
        return f"price://{symbol.upper().strip()}/daily"

    def store(self, symbol: str, df: pd.DataFrame, ttl: int | None = None) -> str:
        """
        Store gzipped CSV + metadata, return canonical URI.

        Args:
            symbol: Ticker the bars belong to
            df: Canonical price frame (date, close, volume)
            ttl: Cache TTL in seconds (default: CACHE_TTL)

        Returns:
            Canonical URI for the cached data
        """
        uri = self.uri_for(symbol)

        csv_text = df_to_csv(df)
        csv_bytes = csv_text.encode("utf-8")
        csv_gz = gzip.compress(csv_bytes)

        entry: dict[str, Any] = {
            "csv_gz": csv_gz,
            "size_bytes": len(csv_bytes),
            "rows": len(df),
            "columns": list(df.columns),
            "hash": hashlib.sha256(csv_bytes).hexdigest()[:16],
            "stored_at": datetime.now(timezone.utc).isoformat(),
        }

        expire = ttl if ttl is not None else self._default_ttl
        self.cache.set(uri, entry, expire=expire)

        return uri

    def get(self, uri: str) -> dict[str, Any] | None:
        """Get cache entry by URI."""
        return self.cache.get(uri)

    def get_csv(self, uri: str) -> str | None:
        """
        Get decompressed CSV text by URI.

        Args:
            uri: Canonical URI

        Returns:
            CSV text or None if not found
        """
        entry = self.get(uri)
        if not entry:
            return None
        return gzip.decompress(entry["csv_gz"]).decode("utf-8")

    def get_metadata(self, uri: str) -> dict[str, Any] | None:
        """Get cache metadata without decompressing data."""
        entry = self.get(uri)
        if not entry:
            return None
        return {
            "rows": entry["rows"],
            "columns": entry["columns"],
            "size_bytes": entry["size_bytes"],
            "hash": entry["hash"],
            "stored_at": entry["stored_at"],
        }

    def exists(self, uri: str) -> bool:
        """Check if URI exists in cache."""
        return uri in self.cache

    def clear(self) -> None:
        """Clear all cached data."""
        self.cache.clear()
