"""Prompt templates for composite picks."""

from typing import Any

# Prompt definitions
PROMPTS = {
    "daily_picks_brief": {
        "description": "Ranked brief of composite signals for a watchlist",
        "arguments": [{"name": "symbols", "required": False}],
    },
    "signal_breakdown": {
        "description": "Explain one symbol's composite score indicator by indicator",
        "arguments": [{"name": "symbol", "required": True}],
    },
}


def list_prompts() -> list[dict[str, Any]]:
    """List available prompts."""
    return [
        {
            "name": name,
            "description": info["description"],
            "arguments": info["arguments"],
        }
        for name, info in PROMPTS.items()
    ]


def get_prompt(name: str, arguments: dict[str, str]) -> dict[str, Any] | None:
    """
    Get a prompt by name with arguments filled in.

    Returns dict with 'messages' key for MCP GetPromptResult.
    """
    if name not in PROMPTS:
        return None

    if name == "daily_picks_brief":
        symbols = arguments.get("symbols", "").strip()
        call = f'get_picks("{symbols}")' if symbols else "get_picks()"
        scope = f"these symbols: {symbols}" if symbols else "the default watchlist"
        return {
            "messages": [
                {
                    "role": "user",
                    "content": f"""Give me today's composite signal brief for {scope}.

Call {call} once.

Then render:
1. **Market state** from market_state.state
2. **Ranking table**: | Rank | Symbol | Score | Last Price | Explanation |
   - Keep the order of `picks` exactly (score descending, ties by symbol)
   - Score with 2 decimals, signed (+0.42 / -0.17)
3. **Unavailable**: list any pick whose explanation starts with
   "Signal unavailable" separately; do not rank them as neutral
4. **Data sources**: note any entry in data_sources that is "unconfigured"
5. **Skipped**: mention any invalid_symbols that were not ranked

Scores are bounded to [-1, 1]. Do not invent signals that are null.""",
                }
            ]
        }

    if name == "signal_breakdown":
        symbol = arguments.get("symbol", "")
        return {
            "messages": [
                {
                    "role": "user",
                    "content": f"""Explain the composite signal for {symbol}.

Call get_signal("{symbol}").

Then provide:
1. **Score**: value and the explanation field verbatim
2. **Details table**: render `details` in order (name, value, signal)
3. **Weights**: show weights_used; name each signal that was null and
   therefore excluded from the score
4. **Driver**: the single signal with the largest signal x weight

Be concise. Use null-safe wording for missing data.""",
                }
            ]
        }

    return None
