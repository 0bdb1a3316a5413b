"""
Unit tests for input selection and the ``DataFrame.adaptive`` accessor.
"""

import numpy as np
import pandas as pd
import pytest

import pandas_ta_adaptive as ta
from pandas_ta_adaptive.maps import InputName
from pandas_ta_adaptive.series import derive_high_low, select_input
from pandas_ta_adaptive.utils import InvalidParameterError


class TestSelectInput:

    def test_default_is_typical_price(self, ohlcv_df):
        out = select_input(ohlcv_df)
        expected = (ohlcv_df["high"] + ohlcv_df["low"] + ohlcv_df["close"]) / 3.0
        np.testing.assert_allclose(out.to_numpy(), expected.to_numpy())

    def test_default_falls_back_to_close(self, ohlcv_df):
        df = ohlcv_df[["close"]]
        pd.testing.assert_series_equal(select_input(df), df["close"].rename("close"))

    def test_capitalized_columns(self, ohlcv_df):
        df = ohlcv_df.rename(columns=str.capitalize)
        out = select_input(df, InputName.MEDIAN_PRICE)
        expected = (ohlcv_df["high"] + ohlcv_df["low"]) / 2.0
        np.testing.assert_allclose(out.to_numpy(), expected.to_numpy())

    def test_average_price(self, ohlcv_df):
        out = select_input(ohlcv_df, "average")
        expected = (ohlcv_df["open"] + ohlcv_df["close"]) / 2.0
        np.testing.assert_allclose(out.to_numpy(), expected.to_numpy())

    def test_midpoint_window(self, ohlcv_df):
        out = select_input(ohlcv_df, InputName.MIDPOINT, length=5)
        close = ohlcv_df["close"]
        assert out.iloc[10] == pytest.approx((close.iloc[6:11].max() + close.iloc[6:11].min()) / 2.0)
        assert out.iloc[0] == pytest.approx(close.iloc[0])

    def test_unknown_input(self, ohlcv_df):
        with pytest.raises(InvalidParameterError):
            select_input(ohlcv_df, "vwap")

    def test_missing_column(self, ohlcv_df):
        with pytest.raises(InvalidParameterError):
            select_input(ohlcv_df[["close"]], "open")

    def test_derive_high_low_fallback(self):
        values = np.array([1.0, 3.0, 2.0])
        high, low = derive_high_low(values)
        np.testing.assert_array_equal(high, [1.0, 3.0, 3.0])
        np.testing.assert_array_equal(low, [1.0, 1.0, 2.0])

    def test_derive_high_low_per_bar(self):
        values = np.array([10.0, 11.0, 30.0, 12.0])
        high = np.array([10.5, 11.5, 12.5, 13.5])
        low = np.array([9.5, 10.5, 11.5, 11.5])
        h, l = derive_high_low(values, high, low)
        # bar 2 lies outside its range and falls back to the 2-bar max / min
        np.testing.assert_array_equal(h, [10.5, 11.5, 30.0, 13.5])
        np.testing.assert_array_equal(l, [9.5, 10.5, 11.0, 11.5])

    def test_derive_high_low_ignores_later_bars(self):
        values = np.array([10.0, 11.0, 12.0, 13.0])
        high = values + 1.0
        low = values - 1.0
        h, _ = derive_high_low(values, high, low)
        tail = values.copy()
        tail[3] = 500.0
        h_tail, _ = derive_high_low(tail, high, low)
        np.testing.assert_array_equal(h[:3], h_tail[:3])


class TestAccessor:

    def test_call_returns_primary(self, ohlcv_df):
        out = ohlcv_df.adaptive("kama", 10, input_name="close")
        assert out.name == "KAMA_10"
        expected = ta.resolve("kama", 10, ohlcv_df["close"])
        np.testing.assert_array_equal(out.to_numpy(), expected.to_numpy())

    def test_append(self, ohlcv_df):
        ohlcv_df.adaptive("hma", 20, append=True)
        assert "HMA_20" in ohlcv_df.columns

    def test_compute_append(self, ohlcv_df):
        result = ohlcv_df.adaptive.compute("mama", append=True)
        assert {"FAMA", "MAMA"} <= set(ohlcv_df.columns)
        assert "Signal" in result.to_frame().columns

    def test_range_filter_uses_frame_high_low(self, ohlcv_df):
        out = ohlcv_df.adaptive("frama", 16, input_name="close")
        expected = ta.compute(
            "frama", ohlcv_df["close"], length=16, high=ohlcv_df["high"], low=ohlcv_df["low"]
        ).primary
        np.testing.assert_array_equal(out.to_numpy(), expected.to_numpy())

    def test_uma_uses_frame_volume(self, ohlcv_df):
        out = ohlcv_df.adaptive("uma", 20, input_name="close")
        expected = ta.compute(
            "uma", ohlcv_df["close"], length=20, volume=ohlcv_df["volume"]
        ).primary
        np.testing.assert_array_equal(out.to_numpy(), expected.to_numpy())
