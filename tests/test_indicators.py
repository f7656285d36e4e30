"""Tests for technical indicators."""

import math

import pandas as pd
import pytest

from picks_mcp.utils.indicators import (
    calculate_bollinger,
    calculate_ema,
    calculate_macd,
    calculate_rsi,
    calculate_sma,
    calculate_volume_surge,
    clamp,
)


class TestClamp:
    """Tests for clamp."""

    def test_clamp_bounds(self) -> None:
        assert clamp(3.0) == 1.0
        assert clamp(-3.0) == -1.0
        assert clamp(0.25) == 0.25

    def test_clamp_custom_range(self) -> None:
        assert clamp(150.0, 0.0, 100.0) == 100.0


class TestSMA:
    """Tests for SMA calculation."""

    def test_sma_latest_window(self, sample_price_series: pd.Series) -> None:
        """SMA averages only the last `period` values."""
        sma = calculate_sma(sample_price_series, 5)
        expected = sum(sample_price_series.iloc[-5:]) / 5
        assert sma == pytest.approx(expected)

    def test_sma_accepts_list(self) -> None:
        assert calculate_sma([1.0, 2.0, 3.0, 4.0], 2) == pytest.approx(3.5)

    def test_sma_insufficient_data(self) -> None:
        """Test SMA with insufficient data."""
        assert calculate_sma(pd.Series([100, 101, 102]), 5) is None

    def test_sma_exact_length(self) -> None:
        assert calculate_sma([2.0, 4.0, 6.0], 3) == pytest.approx(4.0)


class TestEMA:
    """Tests for EMA calculation."""

    def test_ema_seeded_with_sma(self) -> None:
        """With exactly `period` values the EMA is the seed average."""
        assert calculate_ema([1.0, 2.0, 3.0], 3) == pytest.approx(2.0)

    def test_ema_one_step(self) -> None:
        """One value past the seed applies alpha = 2 / (period + 1)."""
        # seed 2.0, alpha 0.5 -> 6.0 * 0.5 + 2.0 * 0.5
        assert calculate_ema([1.0, 2.0, 3.0, 6.0], 3) == pytest.approx(4.0)

    def test_ema_insufficient_data(self) -> None:
        assert calculate_ema([1.0, 2.0], 3) is None


class TestRSI:
    """Tests for RSI calculation."""

    def test_rsi_range(self, sample_price_series: pd.Series) -> None:
        """Test RSI is in 0-100 range and leans bullish for an uptrend."""
        rsi = calculate_rsi(sample_price_series, 14)
        assert rsi is not None
        assert 50 < rsi < 100

    def test_rsi_all_gains(self) -> None:
        """No losses at all pins RSI to 100."""
        prices = [float(i) for i in range(1, 31)]
        assert calculate_rsi(prices, 14) == 100.0

    def test_rsi_all_losses(self) -> None:
        prices = [float(i) for i in range(30, 0, -1)]
        assert calculate_rsi(prices, 14) == pytest.approx(0.0)

    def test_rsi_flat_series_is_neutral(self, flat_closes: list[float]) -> None:
        """A series that never moved reads 50, not overbought."""
        assert calculate_rsi(flat_closes, 14) == 50.0

    def test_rsi_requires_more_than_period(self) -> None:
        prices = [float(i) for i in range(14)]
        assert calculate_rsi(prices, 14) is None
        assert calculate_rsi(prices + [15.0], 14) is not None

    def test_rsi_wilder_smoothing(self) -> None:
        """Alternating moves: one gain and one loss per pair of bars."""
        # 15 bars -> 14 deltas: 7 gains of 2, 7 losses of 1
        prices = [100.0]
        for i in range(14):
            prices.append(prices[-1] + (2.0 if i % 2 == 0 else -1.0))
        rsi = calculate_rsi(prices, 14)
        # avg_gain = 1.0, avg_loss = 0.5 -> RS = 2 -> RSI = 66.67
        assert rsi == pytest.approx(100 - 100 / 3)


class TestMACD:
    """Tests for MACD calculation."""

    def test_macd_requires_slow_plus_signal(self) -> None:
        prices = [100.0 + i for i in range(34)]
        assert calculate_macd(prices) is None
        assert calculate_macd(prices + [134.0]) is not None

    def test_macd_flat_series(self, flat_closes: list[float]) -> None:
        result = calculate_macd(flat_closes)
        assert result is not None
        assert result.value == pytest.approx(0.0, abs=1e-9)
        assert result.signal == pytest.approx(0.0, abs=1e-9)
        assert result.histogram == pytest.approx(0.0, abs=1e-9)

    def test_macd_histogram_is_value_minus_signal(self, rising_closes: list[float]) -> None:
        result = calculate_macd(rising_closes)
        assert result is not None
        assert result.histogram == pytest.approx(result.value - result.signal)

    def test_macd_positive_in_uptrend(self, rising_closes: list[float]) -> None:
        """Fast EMA sits above slow EMA in a steady uptrend."""
        result = calculate_macd(rising_closes)
        assert result is not None
        # Steady-state EMA lags are 12.5 and 5.5 bars at 0.5 per bar
        assert result.value == pytest.approx(3.5, abs=0.01)


class TestBollinger:
    """Tests for Bollinger Bands."""

    def test_bollinger_population_std(self) -> None:
        prices = [float(i) for i in range(1, 21)]
        bands = calculate_bollinger(prices, 20, 2.0)
        assert bands is not None
        expected_std = math.sqrt((20**2 - 1) / 12)
        assert bands.middle == pytest.approx(10.5)
        assert bands.std_dev == pytest.approx(expected_std)
        assert bands.upper == pytest.approx(10.5 + 2 * expected_std)
        assert bands.lower == pytest.approx(10.5 - 2 * expected_std)

    def test_bollinger_uses_trailing_window(self) -> None:
        prices = [1000.0] * 5 + [10.0] * 20
        bands = calculate_bollinger(prices, 20)
        assert bands is not None
        assert bands.middle == pytest.approx(10.0)
        assert bands.std_dev == 0.0

    def test_bollinger_insufficient_data(self) -> None:
        assert calculate_bollinger([1.0] * 19, 20) is None


class TestVolumeSurge:
    """Tests for volume surge."""

    def test_volume_surge_ratio(self) -> None:
        volumes = [100.0] * 20 + [150.0]
        assert calculate_volume_surge(volumes, 20) == pytest.approx(0.5)

    def test_volume_surge_excludes_latest_from_baseline(self) -> None:
        volumes = [1.0] * 5 + [100.0] * 20 + [50.0]
        assert calculate_volume_surge(volumes, 20) == pytest.approx(-0.5)

    def test_volume_surge_clamped(self) -> None:
        volumes = [100.0] * 20 + [500.0]
        assert calculate_volume_surge(volumes, 20) == 1.0

    def test_volume_surge_zero_baseline(self) -> None:
        volumes = [0.0] * 20 + [500.0]
        assert calculate_volume_surge(volumes, 20) is None

    def test_volume_surge_insufficient_data(self) -> None:
        assert calculate_volume_surge([100.0] * 20, 20) is None
