"""Validation utilities for symbol input."""

import re
from collections.abc import Iterable

# Tickers, share classes (BRK.B), indices (^GSPC), futures/FX (ES=F)
_SYMBOL_RE = re.compile(r"^[A-Z0-9^][A-Z0-9.\-=^]{0,14}$")


def normalize_symbol(symbol: str) -> str:
    """
    Normalize symbol: uppercase, strip whitespace, validate.

    Raises:
        ValueError: If the symbol is empty or has unexpected characters
    """
    normalized = symbol.upper().strip()
    if not _SYMBOL_RE.match(normalized):
        raise ValueError(f"Invalid symbol '{symbol}'")
    return normalized


def split_symbols(raw: str | Iterable[str] | None) -> tuple[list[str], list[str]]:
    """
    Partition a symbol request into valid and rejected items.

    Blank items are skipped. Valid symbols are normalized and keep their
    first position when repeated; rejected items are returned stripped, in
    request order.
    """
    if raw is None:
        return [], []
    items = raw.split(",") if isinstance(raw, str) else list(raw)

    valid: list[str] = []
    rejected: list[str] = []
    for item in items:
        if not item or not item.strip():
            continue
        try:
            symbol = normalize_symbol(item)
        except ValueError:
            rejected.append(item.strip())
            continue
        if symbol not in valid:
            valid.append(symbol)
    return valid, rejected
