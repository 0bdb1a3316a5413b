"""
Unit tests for the recursive filters (one-pole, pole, Kalman, MAMA and the
regression style filters).

Covers causality, unit DC gain, warm-up behaviour and streaming parity of
``init/update`` against the replayed series.
"""

import numpy as np
import pytest

from pandas_ta_adaptive.maps import AverageKind
from pandas_ta_adaptive.resolver import MovingAverageResolver
from pandas_ta_adaptive.stateful import (
    FILTER_REGISTRY,
    correlation,
    get_indicator,
    merge_params,
    replay,
    replay_state,
    ssf3_coefficients,
    supported_kinds,
    true_range,
)
from pandas_ta_adaptive.utils import InvalidParameterError


ALL_KINDS = [k.value for k in AverageKind]

RANGE_KINDS = ["ama", "aema", "afema", "als", "frama"]


def _stream(kind, values, **params):
    """Feed *values* one bar at a time through init/update."""
    indicator = get_indicator(kind)
    params = merge_params(indicator, params)
    state = indicator.init(params)
    rows = []
    prev = None
    for x in values:
        x = float(x)
        bar = {"value": x}
        if "high" in indicator.inputs:
            bar["high"] = x if prev is None else max(x, prev)
            bar["low"] = x if prev is None else min(x, prev)
        if "volume" in indicator.inputs:
            bar["volume"] = 1.0
        out, state = indicator.update(state, bar, params)
        rows.append(out[indicator.primary])
        prev = x
    return np.array(rows)


class TestRegistry:

    def test_every_recursive_kind_registered(self):
        recursive = [
            "ema", "wwma", "kama", "pkama", "bama", "vidya", "ama", "aema", "aarma",
            "arma", "vlma", "frama", "mcgd", "ahma", "jma", "mama",
            "adema", "afema", "uma", "als", "af",
            "ssf2", "butter2", "ssf3", "butter3", "gauss", "pkf", "ks",
        ]
        assert sorted(recursive) == supported_kinds()

    def test_unknown_kind(self):
        with pytest.raises(ValueError):
            get_indicator("nope")

    def test_missing_input(self):
        with pytest.raises(InvalidParameterError):
            replay("frama", {"value": np.ones(5)}, {})

    def test_missing_volume(self):
        with pytest.raises(InvalidParameterError):
            replay("uma", {"value": np.ones(5)}, {})

    def test_invalid_length(self):
        with pytest.raises(InvalidParameterError):
            replay("ema", {"value": np.ones(5)}, {"length": 0})

    def test_gauss_pole_count(self):
        with pytest.raises(InvalidParameterError):
            replay("gauss", {"value": np.ones(5)}, {"poles": 5})


class TestProperties:
    """Properties that hold for every kind."""

    @pytest.mark.parametrize("kind", ALL_KINDS)
    def test_output_length_and_finite(self, resolver, random_walk, kind):
        out = resolver.resolve_values(kind, 10, random_walk)
        assert out.shape == random_walk.shape
        assert np.all(np.isfinite(out))

    @pytest.mark.parametrize("kind", ALL_KINDS)
    def test_causality(self, resolver, random_walk, kind):
        cut = 150
        base = resolver.resolve_values(kind, 10, random_walk)
        mutated = random_walk.copy()
        mutated[cut:] = mutated[cut:] * 3.0 + 17.0
        changed = resolver.resolve_values(kind, 10, mutated)
        np.testing.assert_array_equal(base[:cut], changed[:cut])

    @pytest.mark.parametrize("kind", RANGE_KINDS)
    def test_causality_with_high_low(self, ohlcv_df, kind):
        cut = 50
        resolver = MovingAverageResolver(cache=False)
        close, high, low = (ohlcv_df[c].to_numpy() for c in ("close", "high", "low"))
        base = resolver.compute(kind, close, length=10, high=high, low=low).primary.to_numpy()

        shift = np.where(np.arange(len(close)) >= cut, 50.0, 0.0)
        # tail moved together with its range
        moved = resolver.compute(kind, close + shift, length=10, high=high + shift, low=low + shift)
        # tail moved out of its range
        outside = resolver.compute(kind, close + shift, length=10, high=high, low=low)

        np.testing.assert_array_equal(base[:cut], moved.primary.to_numpy()[:cut])
        np.testing.assert_array_equal(base[:cut], outside.primary.to_numpy()[:cut])

    @pytest.mark.parametrize("kind", ALL_KINDS)
    def test_dc_gain(self, resolver, constant_values, kind):
        out = resolver.resolve_values(kind, 14, constant_values)
        assert out[-1] == pytest.approx(10.0, abs=1e-6)

    @pytest.mark.parametrize("kind", supported_kinds())
    def test_streaming_parity(self, resolver, random_walk, kind):
        key = get_indicator(kind).length_key
        streamed = _stream(kind, random_walk, **({key: 12} if key else {}))
        np.testing.assert_allclose(streamed, resolver.resolve_values(kind, 12, random_walk),
                                   rtol=0, atol=1e-12)

    def test_replay_state_resumes(self, random_walk):
        kind = "kama"
        full, _ = replay(kind, {"value": random_walk}, {})
        state = replay_state(kind, {"value": random_walk[:200]}, {})
        indicator = FILTER_REGISTRY[kind]
        params = merge_params(indicator, {})
        tail = []
        for x in random_walk[200:]:
            out, state = indicator.update(state, {"value": float(x)}, params)
            tail.append(out[-1])
        np.testing.assert_array_equal(np.array(tail), full["Kama"][200:])


class TestOnePole:

    def test_ema_seeded_at_zero(self):
        out, _ = replay("ema", {"value": np.array([10.0, 10.0])}, {"length": 3})
        np.testing.assert_allclose(out["Ema"], [5.0, 7.5])

    def test_ema_coefficient_clamped(self):
        # length 1 would give k = 1; the coefficient stays at 0.99
        out, _ = replay("ema", {"value": np.array([100.0])}, {"length": 1})
        assert out["Ema"][0] == pytest.approx(99.0)

    def test_wwma(self):
        out, _ = replay("wwma", {"value": np.array([4.0, 4.0])}, {"length": 4})
        np.testing.assert_allclose(out["Wwma"], [1.0, 1.75])

    def test_kama_constant_scenario(self):
        values = np.full(10, 10.0)
        for pad in ("zero", "first"):
            out, _ = replay("kama", {"value": values}, {"length": 10, "pad": pad})
            np.testing.assert_allclose(out["Kama"], values)
        first, _ = replay("kama", {"value": values}, {"length": 10, "pad": "first"})
        assert np.all(first["Er"] == 0.0)

    def test_kama_outputs(self, random_walk):
        out, _ = replay("kama", {"value": random_walk}, {})
        assert list(out) == ["Er", "Kama"]
        assert np.all((out["Er"] >= 0) & (out["Er"] <= 1))

    def test_vlma_length_bounds(self, random_walk):
        out, _ = replay("vlma", {"value": random_walk}, {"min_length": 5, "max_length": 30})
        assert np.all(out["Length"] >= 5)
        assert np.all(out["Length"] <= 30)

    def test_mcgd_tracks_step(self):
        values = np.concatenate([np.full(20, 10.0), np.full(200, 20.0)])
        out, _ = replay("mcgd", {"value": values}, {"length": 10})
        assert out["Mdi"][0] == 10.0
        assert 10.0 < out["Mdi"][25] < 20.0
        assert out["Mdi"][-1] == pytest.approx(20.0, abs=1e-3)

    def test_aarma_band_width(self, random_walk):
        out, _ = replay("aarma", {"value": random_walk}, {"length": 14, "gamma": 3.0})
        assert out["D"][0] == 0.0
        assert np.all(out["D"] >= 0.0)

    def test_jma_phase_ratio(self):
        from pandas_ta_adaptive.stateful._overlap import _jma_init

        assert _jma_init({"length": 7, "phase": 500}).phase_ratio == 2.5
        assert _jma_init({"length": 7, "phase": -500}).phase_ratio == 0.5
        assert _jma_init({"length": 7, "phase": 0}).phase_ratio == 1.5

    def test_adema_decreasing_alpha(self):
        values = np.array([3.0, 6.0, 9.0, 12.0])
        out, _ = replay("adema", {"value": values}, {})
        # alpha = 2, 1, 2/3, 1/2 from a zero seed
        np.testing.assert_allclose(out["Ema"], [6.0, 6.0, 8.0, 10.0])

    def test_afema_step_bounded_by_base_rate(self, ohlcv_df):
        length = 20
        bars = {k: ohlcv_df[k].to_numpy() for k in ("high", "low")}
        bars["value"] = ohlcv_df["close"].to_numpy()
        out, _ = replay("afema", bars, {"length": length})
        afp = out["Afp"]
        assert afp[0] == bars["value"][0]
        # lowest(std) / std <= 1, so the coefficient never exceeds 2 / (length + 1)
        step = np.abs(np.diff(afp))
        limit = 2.0 / (length + 1) * np.abs(bars["value"][1:] - afp[:-1])
        assert np.all(step <= limit + 1e-12)

    def test_uma_is_window_average(self, random_walk):
        out, _ = replay("uma", {"value": random_walk, "volume": np.ones(len(random_walk))},
                        {"min_length": 5, "max_length": 20})
        uma = out["Uma"]
        for i in range(20, len(random_walk)):
            window = random_walk[i - 19:i + 1]
            assert window.min() - 1e-9 <= uma[i] <= window.max() + 1e-9

    def test_uma_uses_volume(self, ohlcv_df):
        close = ohlcv_df["close"]
        weighted = MovingAverageResolver(cache=False).compute("uma", close, volume=ohlcv_df["volume"])
        unit = MovingAverageResolver(cache=False).compute("uma", close)
        assert not np.allclose(weighted.primary.to_numpy(), unit.primary.to_numpy())


class TestPoleFilters:

    def test_three_pole_warm_up(self, random_walk):
        out, _ = replay("ssf3", {"value": random_walk}, {"length": 20})
        ssf3 = out["Ssf3"]
        np.testing.assert_array_equal(ssf3[:3], random_walk[:3])

        (c1,), (c2, c3, c4) = ssf3_coefficients(20)
        expected = c1 * random_walk[3] + c2 * ssf3[2] + c3 * ssf3[1] + c4 * ssf3[0]
        assert ssf3[3] == pytest.approx(expected)

    @pytest.mark.parametrize("kind,key,taps", [
        ("ssf2", "Ssf2", 2), ("butter2", "Bf2", 2), ("butter3", "Bf3", 3),
    ])
    def test_passthrough_taps(self, random_walk, kind, key, taps):
        out, _ = replay(kind, {"value": random_walk}, {"length": 20})
        np.testing.assert_array_equal(out[key][:taps], random_walk[:taps])
        assert out[key][taps] != random_walk[taps]

    @pytest.mark.parametrize("poles", [1, 2, 3, 4])
    def test_gauss_poles(self, constant_values, poles):
        out, _ = replay("gauss", {"value": constant_values}, {"length": 14, "poles": poles})
        np.testing.assert_array_equal(out["Gf"][:poles], constant_values[:poles])
        assert out["Gf"][-1] == pytest.approx(10.0, abs=1e-6)

    def test_smoother_than_input(self, random_walk):
        out, _ = replay("ssf2", {"value": random_walk}, {"length": 20})
        assert np.std(np.diff(out["Ssf2"][10:])) < np.std(np.diff(random_walk[10:]))


class TestKalman:

    def test_ks_starts_at_input(self, random_walk):
        out, _ = replay("ks", {"value": random_walk}, {"length": 200})
        assert out["Ks"][0] == random_walk[0]

    def test_pkf_first_bar(self):
        out, _ = replay("pkf", {"value": np.array([8.0, 8.0, 8.0])}, {"length": 5})
        np.testing.assert_allclose(out["Pkf"], [4.0, 8.0, 8.0])


class TestRegressionFilters:

    def test_true_range(self):
        assert true_range(12.0, 10.0, 11.0) == 2.0
        assert true_range(12.0, 10.0, 15.0) == 5.0
        assert true_range(12.0, 10.0, 6.0) == 6.0

    def test_correlation(self):
        assert correlation([1.0, 2.0, 3.0], [2.0, 4.0, 6.0]) == pytest.approx(1.0)
        assert correlation([1.0, 2.0, 3.0], [3.0, 2.0, 1.0]) == pytest.approx(-1.0)
        assert correlation([1.0, 2.0, 3.0], [5.0, 5.0, 5.0]) == 0.0
        assert correlation([1.0], [2.0]) == 0.0

    def test_als_stays_inside_input_range(self, ohlcv_df):
        bars = {k: ohlcv_df[k].to_numpy() for k in ("high", "low")}
        bars["value"] = ohlcv_df["close"].to_numpy()
        out, _ = replay("als", bars, {"length": 50})
        als = out["Als"]
        assert als[0] == pytest.approx(bars["value"][0])
        running_min = np.minimum.accumulate(bars["value"])
        running_max = np.maximum.accumulate(bars["value"])
        assert np.all(als >= running_min - 1e-6)
        assert np.all(als <= running_max + 1e-6)

    def test_af_first_bar_and_outputs(self, random_walk):
        out, _ = replay("af", {"value": random_walk}, {"length": 30})
        assert list(out) == ["Af"]
        assert out["Af"][0] == pytest.approx(random_walk[0])

    def test_af_flat_input(self):
        values = np.concatenate([np.full(40, 5.0), np.full(40, 8.0)])
        out, _ = replay("af", {"value": values}, {"length": 10})
        np.testing.assert_allclose(out["Af"][:40], 5.0)
        assert out["Af"][-1] == pytest.approx(8.0)
