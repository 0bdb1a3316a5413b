"""
Unit tests for the cycle / phase estimator and MAMA.
"""

import numpy as np
import pandas as pd
import pytest

from pandas_ta_adaptive.stateful import cycle_estimate, replay
from pandas_ta_adaptive.stateful._cycle import cycle_make


@pytest.fixture
def sine_wave():
    """Pure 20-bar cycle on top of a level."""
    t = np.arange(400)
    return 100.0 + 5.0 * np.sin(2 * np.pi * t / 20.0)


class TestCycleEstimate:

    def test_columns(self, random_walk):
        est = cycle_estimate(random_walk)
        assert list(est.columns) == [
            "smooth", "det", "i1", "q1", "i2", "q2", "re", "im",
            "period", "smooth_period", "phase", "alpha",
        ]
        assert len(est) == len(random_walk)

    def test_period_bounds(self, random_walk):
        est = cycle_estimate(random_walk)
        n = np.arange(len(est))
        # period starts at 0 and is smoothed with 0.2 towards a value in [6, 50]
        lower = 6.0 * (1.0 - 0.8 ** (n + 1))
        assert np.all(est["period"].to_numpy() >= lower - 1e-9)
        assert np.all(est["period"].to_numpy() <= 50.0)
        assert np.all(est["smooth_period"].to_numpy() <= 50.0)

    def test_alpha_limits(self, random_walk):
        est = cycle_estimate(random_walk, fast_limit=0.5, slow_limit=0.05)
        assert np.all(est["alpha"] >= 0.05)
        assert np.all(est["alpha"] <= 0.5)

    def test_sine_period(self, sine_wave):
        est = cycle_estimate(sine_wave)
        settled = est["smooth_period"].iloc[200:]
        assert settled.mean() == pytest.approx(20.0, rel=0.25)

    def test_smooth_weights(self):
        est = cycle_estimate(np.array([10.0, 20.0, 30.0, 40.0]))
        assert est["smooth"].iloc[0] == pytest.approx(4.0)
        assert est["smooth"].iloc[3] == pytest.approx((160 + 90 + 40 + 10) / 10.0)

    def test_index_passthrough(self, close_series):
        est = cycle_estimate(close_series.to_numpy(), index=close_series.index)
        assert isinstance(est.index, pd.DatetimeIndex)

    def test_limits_clamped(self):
        state = cycle_make(fast_limit=2.0, slow_limit=3.0)
        assert state.fast_limit == 1.0
        assert state.slow_limit == 1.0


class TestMAMA:

    def test_outputs(self, random_walk):
        out, _ = replay("mama", {"value": random_walk}, {})
        assert list(out) == ["Fama", "Mama"]

    def test_fama_follows_mama(self, random_walk):
        out, _ = replay("mama", {"value": random_walk}, {})
        # fama moves at half the rate, so it varies less bar to bar
        assert np.abs(np.diff(out["Fama"][50:])).sum() < np.abs(np.diff(out["Mama"][50:])).sum()

    def test_first_bar(self):
        out, _ = replay("mama", {"value": np.array([10.0])}, {"fast_limit": 0.5, "slow_limit": 0.05})
        # no phase history: delta phase floors at 1 so alpha = fast limit
        assert out["Mama"][0] == pytest.approx(5.0)
        assert out["Fama"][0] == pytest.approx(1.25)
