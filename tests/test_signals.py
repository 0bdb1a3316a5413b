"""
Unit tests for the signal projector.
"""

import numpy as np
import pytest

from pandas_ta_adaptive.maps import Signal
from pandas_ta_adaptive.signals import compare_signal, pair_signals, price_signals, signal_series


class TestCompareSignal:

    @pytest.mark.parametrize("current,previous,expected", [
        (2.0, 1.0, Signal.STRONG_BUY),
        (1.0, 2.0, Signal.BUY),
        (-2.0, -1.0, Signal.STRONG_SELL),
        (-1.0, -2.0, Signal.SELL),
        (0.0, 5.0, Signal.NEUTRAL),
        (0.0, -5.0, Signal.NEUTRAL),
    ])
    def test_levels(self, current, previous, expected):
        assert compare_signal(current, previous) is expected

    def test_reversed(self):
        assert compare_signal(2.0, 1.0, is_reversed=True) is Signal.STRONG_SELL
        assert compare_signal(-1.0, -2.0, is_reversed=True) is Signal.BUY


class TestSignalSeries:

    def test_previous_delta_starts_at_zero(self):
        out = signal_series(np.array([1.0, 0.5, -1.0]))
        assert list(out) == [Signal.STRONG_BUY, Signal.BUY, Signal.STRONG_SELL]
        assert out.name == "Signal"

    def test_price_signals(self):
        values = np.array([10.0, 12.0, 11.0])
        primary = np.array([10.0, 11.0, 11.5])
        out = price_signals(values, primary)
        assert list(out) == [Signal.NEUTRAL, Signal.STRONG_BUY, Signal.STRONG_SELL]

    def test_pair_signals(self, close_series):
        fast = np.full(len(close_series), 2.0)
        slow = np.ones(len(close_series))
        out = pair_signals(fast, slow, close_series.index)
        assert out.index.equals(close_series.index)
        assert out.iloc[0] is Signal.STRONG_BUY
        assert set(out.iloc[1:]) == {Signal.BUY}
