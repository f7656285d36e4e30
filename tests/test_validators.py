"""Tests for symbol validation."""

import pytest

from picks_mcp.utils.validators import normalize_symbol, split_symbols


class TestNormalizeSymbol:
    """Tests for normalize_symbol."""

    def test_uppercase_and_strip(self) -> None:
        assert normalize_symbol("  nvda  ") == "NVDA"

    @pytest.mark.parametrize("symbol", ["BRK.B", "^GSPC", "ES=F", "BF-B", "7203.T"])
    def test_accepts_special_formats(self, symbol: str) -> None:
        assert normalize_symbol(symbol) == symbol

    @pytest.mark.parametrize("symbol", ["", "   ", "AA PL", "AAPL;DROP", "$TSLA", "A" * 16])
    def test_rejects_invalid(self, symbol: str) -> None:
        with pytest.raises(ValueError, match="Invalid symbol"):
            normalize_symbol(symbol)


class TestSplitSymbols:
    """Tests for split_symbols."""

    def test_comma_string(self) -> None:
        assert split_symbols("aapl, msft ,nvda") == (["AAPL", "MSFT", "NVDA"], [])

    def test_iterable(self) -> None:
        assert split_symbols(["spy", "qqq"]) == (["SPY", "QQQ"], [])

    def test_blank_items_skipped(self) -> None:
        assert split_symbols("AAPL,, ,MSFT,") == (["AAPL", "MSFT"], [])

    def test_duplicates_keep_first_position(self) -> None:
        assert split_symbols("msft,AAPL,MSFT,aapl") == (["MSFT", "AAPL"], [])

    def test_empty_inputs(self) -> None:
        assert split_symbols(None) == ([], [])
        assert split_symbols("") == ([], [])
        assert split_symbols([]) == ([], [])

    def test_invalid_items_rejected_not_raised(self) -> None:
        """A malformed item is set aside without losing the valid ones."""
        valid, rejected = split_symbols("AAPL, BAD SYMBOL ,msft,$X")
        assert valid == ["AAPL", "MSFT"]
        assert rejected == ["BAD SYMBOL", "$X"]
