"""Signal tools."""

from picks_mcp.tools.picks import (
    UNAVAILABLE_EXPLANATION,
    collect_picks,
    degraded_result,
    get_picks,
    get_signal,
    rank_picks,
)

__all__ = [
    "UNAVAILABLE_EXPLANATION",
    "collect_picks",
    "degraded_result",
    "get_picks",
    "get_signal",
    "rank_picks",
]
