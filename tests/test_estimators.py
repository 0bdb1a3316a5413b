"""
Unit tests for the adaptive coefficient estimators.
"""

import numpy as np
import pytest

from pandas_ta_adaptive.stateful import (
    chande_momentum,
    efficiency_ratio,
    fractal_alpha,
    volatility_multiplier,
)
from pandas_ta_adaptive.stateful._estimators import (
    er_make,
    er_update_raw,
    stddev_make,
    stddev_update_raw,
)
from pandas_ta_adaptive.utils import InvalidParameterError


class TestEfficiencyRatio:
    """Tests for the Kaufman efficiency ratio."""

    def test_bounded_on_random_walk(self, random_walk):
        for pad in ("zero", "first"):
            er = efficiency_ratio(random_walk, 10, pad=pad)
            assert len(er) == len(random_walk)
            assert np.all(er >= 0.0)
            assert np.all(er <= 1.0)

    def test_monotonic_series_is_fully_efficient(self):
        values = np.arange(1.0, 51.0)
        er = efficiency_ratio(values, 10, pad="first")
        np.testing.assert_allclose(er[1:], 1.0)

    def test_constant_input(self):
        values = np.full(30, 10.0)
        # the jump 0 -> 10 dominates the first window under zero padding
        zero = efficiency_ratio(values, 10, pad="zero")
        assert np.all(zero[:10] == 1.0)
        assert np.all(zero[10:] == 0.0)

        first = efficiency_ratio(values, 10, pad="first")
        assert np.all(first == 0.0)

    def test_matches_direct_formula(self, random_walk):
        n = 10
        er = efficiency_ratio(random_walk, n, pad="zero")
        x = random_walk
        for i in range(n, len(x)):
            change = abs(x[i] - x[i - n])
            vol = np.sum(np.abs(np.diff(x[i - n:i + 1])))
            assert er[i] == pytest.approx(change / vol)

    def test_invalid_pad(self):
        with pytest.raises(InvalidParameterError):
            er_make(10, pad="mirror")

    def test_invalid_length(self):
        with pytest.raises(InvalidParameterError):
            efficiency_ratio(np.ones(5), 0)

    def test_streaming_matches_series(self, random_walk):
        state = er_make(14)
        streamed = []
        for x in random_walk:
            val, state = er_update_raw(state, float(x))
            streamed.append(val)
        np.testing.assert_array_equal(np.array(streamed), efficiency_ratio(random_walk, 14))


class TestChandeMomentum:

    def test_bounded(self, random_walk):
        cmo = chande_momentum(random_walk, 14)
        assert np.all(np.abs(cmo) <= 100.0)

    def test_rising_series(self):
        cmo = chande_momentum(np.arange(1.0, 40.0), 9, pad="first")
        np.testing.assert_allclose(cmo[1:], 100.0)
        assert cmo[0] == 0.0


class TestRangeEstimators:

    def test_volatility_multiplier(self):
        assert volatility_multiplier(5.0, 10.0, 0.0) == 0.0
        assert volatility_multiplier(10.0, 10.0, 0.0) == 1.0
        assert volatility_multiplier(0.0, 10.0, 0.0) == 1.0
        assert volatility_multiplier(7.5, 10.0, 0.0) == pytest.approx(0.5)
        assert volatility_multiplier(3.0, 3.0, 3.0) == 0.0

    def test_stddev_of_available_window(self):
        state = stddev_make(3)
        (mean, std), state = stddev_update_raw(state, 2.0)
        assert mean == 2.0 and std == 0.0
        (mean, std), state = stddev_update_raw(state, 4.0)
        assert mean == 3.0

    def test_fractal_alpha_bounds(self, ohlcv_df):
        alpha = fractal_alpha(ohlcv_df["high"].to_numpy(), ohlcv_df["low"].to_numpy(), 20)
        assert np.all(alpha >= 0.01)
        assert np.all(alpha <= 1.0)

    def test_fractal_alpha_flat_range(self):
        flat = np.full(50, 3.0)
        # no range at all: dimension 0 -> alpha clamped to 1
        np.testing.assert_allclose(fractal_alpha(flat, flat, 10), 1.0)
