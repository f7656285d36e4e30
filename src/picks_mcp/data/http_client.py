"""Async HTTP/JSON transport with bounded concurrency and retry logic."""

import asyncio
import logging
import os
import random
from collections.abc import Callable, Mapping
from concurrent.futures import ThreadPoolExecutor
from typing import Any, TypeVar

import requests
from requests.exceptions import HTTPError

logger = logging.getLogger(__name__)

# Bounded concurrency for upstream calls
_max_workers = int(os.environ.get("HTTP_MAX_WORKERS", "4"))
_executor = ThreadPoolExecutor(max_workers=_max_workers)
_fetch_semaphore = asyncio.Semaphore(_max_workers)

# Retry configuration
_max_retries = int(os.environ.get("HTTP_MAX_RETRIES", "3"))
_base_delay = float(os.environ.get("HTTP_BASE_DELAY", "1.0"))  # seconds
_max_delay = float(os.environ.get("HTTP_MAX_DELAY", "30.0"))  # seconds
_timeout = float(os.environ.get("HTTP_TIMEOUT", "10"))  # seconds

_session = requests.Session()

# Shutdown coordination
shutdown_event = asyncio.Event()

T = TypeVar("T")


class ServerShuttingDownError(Exception):
    """Raised when server is shutting down."""

    pass


class UpstreamRetryError(Exception):
    """Raised when an upstream call fails after all retries."""

    def __init__(self, message: str, last_error: Exception | None = None):
        super().__init__(message)
        self.last_error = last_error


def _is_retryable_error(error: Exception) -> tuple[bool, int]:
    """
    Check if an error is retryable (transient).

    Returns:
        Tuple of (is_retryable, max_retries_for_this_error)
    """
    # Errors that know they are permanent say so explicitly
    if getattr(error, "retryable", True) is False:
        return (False, 0)

    if (
        isinstance(error, HTTPError)
        and hasattr(error, "response")
        and error.response is not None
    ):
        status_code = error.response.status_code
        if status_code == 429:
            # Rate limit - retry with full backoff
            return (True, _max_retries)
        if 500 <= status_code < 600:
            # Server errors - retry with full backoff
            return (True, _max_retries)
        # Other 4xx (bad key, unknown symbol) will not recover
        return (False, 0)

    if isinstance(error, (requests.ConnectionError, requests.Timeout)):
        return (True, _max_retries)

    # Also check for string patterns in wrapped errors
    error_str = str(error).lower()

    if "401" in error_str or "invalid crumb" in error_str:
        # yfinance crumb failures rarely recover with many retries
        return (True, 1)

    retryable_patterns = [
        "rate limit",
        "too many requests",
        "connection",
        "timeout",
        "temporary",
    ]
    if any(pattern in error_str for pattern in retryable_patterns):
        return (True, _max_retries)

    return (False, 0)


def _calculate_backoff(attempt: int) -> float:
    """Calculate delay with exponential backoff and jitter."""
    # Exponential backoff: base_delay * 2^attempt
    delay = _base_delay * (2**attempt)
    # Add jitter (+/-25%)
    jitter = delay * 0.25 * (2 * random.random() - 1)
    delay = delay + jitter
    # Cap at max delay
    return min(delay, _max_delay)


async def run_with_retry(
    operation_name: str,
    sync_func: Callable[[], T],
    max_retries: int = _max_retries,
) -> T:
    """
    Execute a blocking function in the worker pool with retry logic.

    Args:
        operation_name: Name for logging (e.g., "alphavantage.daily(AAPL)")
        sync_func: Synchronous function to execute
        max_retries: Maximum number of retry attempts

    Returns:
        The function's result

    Raises:
        UpstreamRetryError: If all retries exhausted
        ServerShuttingDownError: If server is shutting down
    """
    last_error: Exception | None = None

    for attempt in range(max_retries + 1):
        if shutdown_event.is_set():
            raise ServerShuttingDownError("Server is shutting down")

        try:
            loop = asyncio.get_running_loop()
            async with _fetch_semaphore:
                return await loop.run_in_executor(_executor, sync_func)
        except Exception as e:
            last_error = e

            is_retryable, error_max_retries = _is_retryable_error(e)

            # Don't retry non-retryable errors
            if not is_retryable:
                raise

            # Use the smaller of: global max_retries or error-specific limit
            effective_max_retries = min(max_retries, error_max_retries)

            if attempt >= effective_max_retries:
                logger.warning(
                    f"{operation_name}: Failed after {attempt + 1} attempts "
                    f"(limit={effective_max_retries + 1}). Last error: {e}"
                )
                raise UpstreamRetryError(
                    f"Failed after {attempt + 1} attempts: {e}",
                    last_error=last_error,
                ) from e

            delay = _calculate_backoff(attempt)
            logger.info(
                f"{operation_name}: Attempt {attempt + 1} failed ({e}). "
                f"Retrying in {delay:.1f}s..."
            )
            await asyncio.sleep(delay)

    # Should never reach here, but just in case
    raise UpstreamRetryError(
        f"Failed after {max_retries + 1} attempts",
        last_error=last_error,
    )


async def fetch_json(
    url: str,
    params: Mapping[str, str],
    *,
    operation: str,
    validate: Callable[[Any], Any] | None = None,
) -> Any:
    """
    GET a JSON document with retry on transient failures.

    Args:
        url: Endpoint URL
        params: Query parameters (credentials included)
        operation: Name for logging; must not contain credentials
        validate: Optional check run on the decoded body inside the retry
            loop; its exceptions are classified like transport errors

    Returns:
        Decoded JSON body

    Raises:
        HTTPError: For non-retryable HTTP status codes
        UpstreamRetryError: If all retries exhausted
        ServerShuttingDownError: If server is shutting down
    """
    if shutdown_event.is_set():
        raise ServerShuttingDownError("Server is shutting down")

    def _fetch() -> Any:
        response = _session.get(url, params=dict(params), timeout=_timeout)
        response.raise_for_status()
        body = response.json()
        if validate is not None:
            return validate(body)
        return body

    return await run_with_retry(operation, _fetch)


async def shutdown_executor() -> None:
    """Cleanup on server shutdown."""
    shutdown_event.set()
    _executor.shutdown(wait=False, cancel_futures=True)
