# -*- coding: utf-8 -*-
"""pandas-ta adaptive -- adaptive coefficient estimators.

Per-sample bounded scalars computed from a trailing window: efficiency
ratio, Chande momentum ratio, rolling range / volatility multiplier,
standard-deviation bands, the fractal-dimension alpha, true range and the
window correlation.  The filters in ``_overlap`` and ``_regression``
hold one of these states each and call ``*_update_raw`` once per bar.

Lookback padding ("pad"):
  zero   -- out-of-range history reads as 0 (reference behaviour); the
            first ``length`` samples carry a transient from the jump 0 -> x[0]
  first  -- out-of-range history reads as x[0]
"""
from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field
from math import log
from typing import Optional, Sequence, Tuple

import numpy as np

from pandas_ta_adaptive.utils import (
    InvalidParameterError,
    clamp_length,
    min_or_max,
    safe_div,
    safe_exp,
    safe_log,
    safe_sqrt,
    v_length,
)
from ._base import _buf_get

PAD_POLICIES = ("zero", "first")


def _pad_policy(pad: str) -> str:
    pad = str(pad).lower()
    if pad not in PAD_POLICIES:
        raise InvalidParameterError(f"pad must be one of {PAD_POLICIES}, got {pad!r}")
    return pad


# ===========================================================================
# Efficiency ratio
# ===========================================================================
#   volatility[i] = |x[i] - x[i-1]|
#   ER[i] = |x[i] - x[i-N]| / sum(volatility[i-N+1 .. i]),   0 on zero sum

@dataclass
class ERState:
    length: int
    pad: str = "zero"
    values: deque = field(default_factory=deque)   # maxlen = length + 1
    vols:   deque = field(default_factory=deque)   # maxlen = length
    first:  Optional[float] = None


def er_make(length: int, pad: str = "zero") -> ERState:
    length = v_length(length)
    return ERState(
        length=length, pad=_pad_policy(pad),
        values=deque(maxlen=length + 1), vols=deque(maxlen=length),
    )


def er_update_raw(state: ERState, x: float) -> Tuple[float, ERState]:
    if state.first is None:
        state.first = x
    fill = 0.0 if state.pad == "zero" else state.first
    prev = state.values[-1] if state.values else fill
    state.values.append(x)
    prior = state.values[0] if len(state.values) == state.length + 1 else fill

    state.vols.append(abs(x - prev))
    er = safe_div(abs(x - prior), sum(state.vols))
    return min_or_max(er, 1.0, 0.0), state


# ===========================================================================
# Chande momentum
# ===========================================================================
#   cmo = (sum(up) - sum(down)) / (sum(up) + sum(down)) * 100, clamped +-100

@dataclass
class CMOState:
    length: int
    pad: str = "zero"
    ups:   deque = field(default_factory=deque)
    downs: deque = field(default_factory=deque)
    prev:  Optional[float] = None


def cmo_make(length: int, pad: str = "zero") -> CMOState:
    length = v_length(length)
    return CMOState(length=length, pad=_pad_policy(pad),
                    ups=deque(maxlen=length), downs=deque(maxlen=length))


def cmo_update_raw(state: CMOState, x: float) -> Tuple[float, CMOState]:
    """Returns the oscillator in [-100, 100]."""
    if state.prev is None:
        state.prev = 0.0 if state.pad == "zero" else x
    diff = x - state.prev
    state.prev = x
    state.ups.append(diff if diff > 0 else 0.0)
    state.downs.append(-diff if diff < 0 else 0.0)
    up, down = sum(state.ups), sum(state.downs)
    cmo = safe_div(up - down, up + down) * 100.0
    return min_or_max(cmo, 100.0, -100.0), state


# ===========================================================================
# Rolling range and volatility multiplier
# ===========================================================================

@dataclass
class RangeState:
    length: int
    highs: deque = field(default_factory=deque)
    lows:  deque = field(default_factory=deque)


def range_make(length: int) -> RangeState:
    length = v_length(length)
    return RangeState(length=length, highs=deque(maxlen=length), lows=deque(maxlen=length))


def range_update_raw(state: RangeState, high: float, low: float) -> Tuple[Tuple[float, float], RangeState]:
    """(highest high, lowest low) over the available window."""
    state.highs.append(high)
    state.lows.append(low)
    return (max(state.highs), min(state.lows)), state


def volatility_multiplier(x: float, hh: float, ll: float) -> float:
    """Where *x* sits in the [ll, hh] range, folded to [0, 1] (1 = at an edge)."""
    if hh - ll == 0:
        return 0.0
    return min_or_max(abs(2.0 * x - ll - hh) / (hh - ll), 1.0, 0.0)


def true_range(high: float, low: float, prev: float) -> float:
    """max(high - low, |high - prev|, |low - prev|)"""
    return max(high - low, abs(high - prev), abs(low - prev))


def correlation(a: Sequence[float], b: Sequence[float]) -> float:
    """Pearson correlation of two equally long windows; 0 when undefined."""
    n = min(len(a), len(b))
    if n < 2:
        return 0.0
    ma = sum(a) / n
    mb = sum(b) / n
    cov = var_a = var_b = 0.0
    for u, v in zip(a, b):
        cov += (u - ma) * (v - mb)
        var_a += (u - ma) ** 2
        var_b += (v - mb) ** 2
    return min_or_max(safe_div(cov, safe_sqrt(var_a * var_b)), 1.0, -1.0)


# ===========================================================================
# Standard-deviation bands (population, around the rolling mean)
# ===========================================================================

@dataclass
class StdDevState:
    length: int
    values: deque = field(default_factory=deque)
    sq_dev: deque = field(default_factory=deque)


def stddev_make(length: int) -> StdDevState:
    length = v_length(length)
    return StdDevState(length=length, values=deque(maxlen=length), sq_dev=deque(maxlen=length))


def stddev_update_raw(state: StdDevState, x: float) -> Tuple[Tuple[float, float], StdDevState]:
    """(rolling mean, std-dev of x - mean) over the available window."""
    state.values.append(x)
    mean = sum(state.values) / len(state.values)
    state.sq_dev.append((x - mean) ** 2)
    variance = sum(state.sq_dev) / len(state.sq_dev)
    return (mean, safe_sqrt(variance)), state


# ===========================================================================
# Fractal dimension alpha  (FRAMA)
# ===========================================================================
#   n3 = range(length) / length
#   n1 = range(half) / half             (current half window)
#   n2 = range(half)[i - half] / half   (previous half window, 0 if missing)
#   dm = (ln(n1 + n2) - ln(n3)) / ln 2   when n1, n2, n3 > 0
#   alpha = clamp(exp(-4.6 * (dm - 1)), 0.01, 1)

@dataclass
class FractalState:
    length: int
    half: int
    full_range: RangeState
    half_range: RangeState
    half_hh: deque = field(default_factory=deque)   # maxlen = half + 1
    half_ll: deque = field(default_factory=deque)


def fractal_make(length: int) -> FractalState:
    length = v_length(length)
    half = clamp_length(int(np.ceil(length / 2.0)))
    return FractalState(
        length=length, half=half,
        full_range=range_make(length), half_range=range_make(half),
        half_hh=deque(maxlen=half + 1), half_ll=deque(maxlen=half + 1),
    )


def fractal_update_raw(state: FractalState, high: float, low: float) -> Tuple[float, FractalState]:
    (hh1, ll1), state.full_range = range_update_raw(state.full_range, high, low)
    (hh2, ll2), state.half_range = range_update_raw(state.half_range, high, low)
    state.half_hh.append(hh2)
    state.half_ll.append(ll2)
    hh3 = _buf_get(state.half_hh, state.half)
    ll3 = _buf_get(state.half_ll, state.half)

    n3 = (hh1 - ll1) / state.length
    n1 = (hh2 - ll2) / state.half
    n2 = (hh3 - ll3) / state.half
    dm = (safe_log(n1 + n2) - safe_log(n3)) / log(2.0) if n1 > 0 and n2 > 0 and n3 > 0 else 0.0
    alpha = min_or_max(safe_exp(-4.6 * (dm - 1.0)), 1.0, 0.01)
    return alpha, state


# ---------------------------------------------------------------------------
# Whole-series helpers
# ---------------------------------------------------------------------------

def efficiency_ratio(values: np.ndarray, length: int = 10, pad: str = "zero") -> np.ndarray:
    """Efficiency ratio of every sample, in [0, 1]."""
    state = er_make(length, pad)
    out = np.zeros(len(values))
    for i, x in enumerate(np.asarray(values, dtype=np.float64)):
        out[i], state = er_update_raw(state, float(x))
    return out


def chande_momentum(values: np.ndarray, length: int = 14, pad: str = "zero") -> np.ndarray:
    """Chande momentum oscillator of every sample, in [-100, 100]."""
    state = cmo_make(length, pad)
    out = np.zeros(len(values))
    for i, x in enumerate(np.asarray(values, dtype=np.float64)):
        out[i], state = cmo_update_raw(state, float(x))
    return out


def fractal_alpha(high: np.ndarray, low: np.ndarray, length: int = 20) -> np.ndarray:
    """FRAMA smoothing factor of every sample, in [0.01, 1]."""
    state = fractal_make(length)
    out = np.zeros(len(high))
    for i, (h, l) in enumerate(zip(np.asarray(high, dtype=np.float64), np.asarray(low, dtype=np.float64))):
        out[i], state = fractal_update_raw(state, float(h), float(l))
    return out
