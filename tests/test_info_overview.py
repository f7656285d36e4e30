"""Tests for projecting yfinance info onto overview fields."""

import math

from picks_mcp.data.yfinance_client import _has_value, info_to_overview


class TestHasValue:
    """Tests for _has_value helper."""

    def test_none(self):
        assert _has_value(None) is False

    def test_nan(self):
        assert _has_value(math.nan) is False

    def test_empty_string(self):
        assert _has_value("") is False
        assert _has_value("   ") is False

    def test_zero_is_a_value(self):
        assert _has_value(0) is True
        assert _has_value(0.0) is True

    def test_negative_is_a_value(self):
        assert _has_value(-1.39) is True


class TestInfoToOverview:
    """Tests for info_to_overview."""

    def test_maps_known_fields(self):
        info = {
            "symbol": "MSFT",
            "trailingPE": 35.2,
            "profitMargins": 0.36,
            "sector": "Technology",
            "regularMarketPrice": 410.0,
        }
        assert info_to_overview(info) == {
            "PERatio": "35.2",
            "ProfitMargin": "0.36",
            "Sector": "Technology",
        }

    def test_skips_missing_values(self):
        """yfinance NaN placeholders are left out rather than shown."""
        info = {"trailingPE": math.nan, "profitMargins": None, "marketCap": 0}
        assert info_to_overview(info) == {"MarketCapitalization": "0"}

    def test_crumb_broken_response_is_empty(self):
        """A metadata-only response yields no overview fields."""
        info = {"symbol": "MRNA", "quoteType": "EQUITY", "exchange": "NASDAQ"}
        assert info_to_overview(info) == {}
