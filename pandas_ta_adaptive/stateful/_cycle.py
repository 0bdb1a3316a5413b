# -*- coding: utf-8 -*-
"""pandas-ta adaptive -- Ehlers cycle / phase estimator and MAMA.

The estimator runs a Hilbert style quadrature split of a 4-bar smoothed
price and a homodyne discriminator to get the dominant cycle period and
the instantaneous phase.  MAMA turns the phase rate of change into its
smoothing factor; FAMA follows MAMA at half that factor.

Every intermediate series is kept in a 7-deep ring buffer because the
kernel reads lags 2, 3, 4 and 6; history before bar 0 reads as 0.
"""
from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field
from math import degrees, pi
from typing import Any, Dict, List, NamedTuple, Tuple

import numpy as np
from pandas import DataFrame, Index

from pandas_ta_adaptive.utils import min_or_max, safe_atan, safe_div
from ._base import (
    FILTER_REGISTRY,
    FilterIndicator,
    _as_float,
    _buf_get,
    _param,
)

_A, _B = 0.0962, 0.5769


class CycleEstimate(NamedTuple):
    smooth: float
    det: float
    i1: float
    q1: float
    i2: float
    q2: float
    re: float
    im: float
    period: float
    smooth_period: float
    phase: float
    alpha: float


@dataclass
class CycleState:
    fast_limit: float
    slow_limit: float
    prices: deque = field(default_factory=lambda: deque(maxlen=7))
    smooth: deque = field(default_factory=lambda: deque(maxlen=7))
    det:    deque = field(default_factory=lambda: deque(maxlen=7))
    q1:     deque = field(default_factory=lambda: deque(maxlen=7))
    i1:     deque = field(default_factory=lambda: deque(maxlen=7))
    i2: float = 0.0
    q2: float = 0.0
    re: float = 0.0
    im: float = 0.0
    period: float = 0.0
    smooth_period: float = 0.0
    phase: float = 0.0


def cycle_make(fast_limit: float = 0.5, slow_limit: float = 0.05) -> CycleState:
    fast_limit = min_or_max(fast_limit, 1.0, 0.0)
    slow_limit = min_or_max(slow_limit, fast_limit, 0.0)
    return CycleState(fast_limit=fast_limit, slow_limit=slow_limit)


def _kernel(buf: deque, adj: float) -> float:
    """0.0962*b[0] + 0.5769*b[-2] - 0.5769*b[-4] - 0.0962*b[-6], period adjusted."""
    return (_A * _buf_get(buf, 0) + _B * _buf_get(buf, 2)
            - _B * _buf_get(buf, 4) - _A * _buf_get(buf, 6)) * adj


def cycle_update_raw(state: CycleState, x: float) -> Tuple[CycleEstimate, CycleState]:
    state.prices.append(x)
    adj = 0.075 * state.period + 0.54

    smooth = (4.0 * x + 3.0 * _buf_get(state.prices, 1)
              + 2.0 * _buf_get(state.prices, 2) + _buf_get(state.prices, 3)) / 10.0
    state.smooth.append(smooth)

    det = _kernel(state.smooth, adj)
    state.det.append(det)

    q1 = _kernel(state.det, adj)
    state.q1.append(q1)
    i1 = _buf_get(state.det, 3)
    state.i1.append(i1)

    # advance the phase of i1 and q1 by 90 degrees
    ji = _kernel(state.i1, adj)
    jq = _kernel(state.q1, adj)

    # phasor addition, then smoothing
    i2 = 0.2 * (i1 - jq) + 0.8 * state.i2
    q2 = 0.2 * (q1 + ji) + 0.8 * state.q2

    # homodyne discriminator
    re = 0.2 * (i2 * state.i2 + q2 * state.q2) + 0.8 * state.re
    im = 0.2 * (i2 * state.q2 - q2 * state.i2) + 0.8 * state.im

    atan = safe_atan(im / re) if re != 0 else 0.0
    period = safe_div(2.0 * pi, atan)
    period = min_or_max(period, 1.5 * state.period, 0.67 * state.period)
    period = min_or_max(period, 50.0, 6.0)
    period = 0.2 * period + 0.8 * state.period
    smooth_period = 0.33 * period + 0.67 * state.smooth_period

    phase = degrees(safe_atan(q1 / i1)) if i1 != 0 else 0.0
    delta_phase = max(state.phase - phase, 1.0)
    alpha = min_or_max(state.fast_limit / delta_phase, state.fast_limit, state.slow_limit)

    state.i2, state.q2 = i2, q2
    state.re, state.im = re, im
    state.period, state.smooth_period = period, smooth_period
    state.phase = phase
    estimate = CycleEstimate(smooth, det, i1, q1, i2, q2, re, im, period, smooth_period, phase, alpha)
    return estimate, state


def cycle_estimate(values: np.ndarray, fast_limit: float = 0.5, slow_limit: float = 0.05,
                   index: Index = None) -> DataFrame:
    """Every intermediate of the estimator, one row per bar."""
    state = cycle_make(fast_limit, slow_limit)
    rows = []
    for x in np.asarray(values, dtype=np.float64):
        estimate, state = cycle_update_raw(state, float(x))
        rows.append(estimate)
    return DataFrame(rows, columns=list(CycleEstimate._fields), index=index)


# ===========================================================================
# MAMA  -- MESA adaptive MA, seed 0
# ===========================================================================
#   mama = alpha*x + (1 - alpha)*mama[i-1]
#   fama = 0.5*alpha*mama + (1 - 0.5*alpha)*fama[i-1]
# Outputs: Fama, Mama.  Signals compare mama - fama.

@dataclass
class MAMAState:
    cycle: CycleState
    mama: float = 0.0
    fama: float = 0.0


def _mama_init(params: Dict[str, Any]) -> MAMAState:
    fast = _as_float(_param(params, "fast_limit", 0.5), 0.5)
    slow = _as_float(_param(params, "slow_limit", 0.05), 0.05)
    return MAMAState(cycle=cycle_make(fast, slow))


def _mama_update(
    state: MAMAState, bar: Dict[str, Any], params: Dict[str, Any]
) -> Tuple[List[float], MAMAState]:
    x = bar["value"]
    estimate, state.cycle = cycle_update_raw(state.cycle, x)
    alpha = estimate.alpha
    state.mama = alpha * x + (1.0 - alpha) * state.mama
    state.fama = 0.5 * alpha * state.mama + (1.0 - 0.5 * alpha) * state.fama
    return [state.fama, state.mama], state


FILTER_REGISTRY["mama"] = FilterIndicator(
    kind="mama",
    inputs=("value",),
    init=_mama_init,
    update=_mama_update,
    output_names=lambda params: ["Fama", "Mama"],
    defaults={"fast_limit": 0.5, "slow_limit": 0.05},
    primary=1,
    signal="pair",
    length_key=None,
)
