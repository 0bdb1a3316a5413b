# -*- coding: utf-8 -*-
"""pandas-ta adaptive -- Kalman style estimators.

Both are scalar gain heuristics: the "errors" are absolute differences, not
propagated covariances.  Their outputs are part of the reference behaviour,
so the simplified gains are kept exactly.
"""
from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field
from math import sqrt
from typing import Any, Dict, List, Optional, Tuple

from pandas_ta_adaptive.utils import safe_div
from ._base import FILTER_REGISTRY, FilterIndicator, _as_length


# ===========================================================================
# PKF  -- parametric Kalman filter
# ===========================================================================
#   err_mea = |est[i-L] - x|          (x[i-1] while i < L)
#   err_prv = |x - x[i-1]|
#   kg      = err[i-1] / (err[i-1] + err_mea)       (err_prv on bar 0)
#   est     = est[i-1] + kg * (x - est[i-1])        (est[-1] = x[i-1] = 0)
#   err     = (1 - kg) * err_prv

@dataclass
class PKFState:
    length: int
    estimates: deque = field(default_factory=deque)   # maxlen = length
    prev_value: float = 0.0
    prev_err: Optional[float] = None


def _pkf_init(params: Dict[str, Any]) -> PKFState:
    length = _as_length(params, "length", 50)
    return PKFState(length=length, estimates=deque(maxlen=length))


def _pkf_update(
    state: PKFState, bar: Dict[str, Any], params: Dict[str, Any]
) -> Tuple[List[float], PKFState]:
    x = bar["value"]
    prior_est = state.estimates[0] if len(state.estimates) == state.length else state.prev_value
    err_mea = abs(prior_est - x)
    err_prv = abs(x - state.prev_value)
    prev_err = err_prv if state.prev_err is None else state.prev_err
    kg = safe_div(prev_err, prev_err + err_mea)
    prev_est = state.estimates[-1] if state.estimates else state.prev_value

    est = prev_est + kg * (x - prev_est)
    state.estimates.append(est)
    state.prev_err = (1.0 - kg) * err_prv
    state.prev_value = x
    return [est], state


FILTER_REGISTRY["pkf"] = FilterIndicator(
    kind="pkf",
    inputs=("value",),
    init=_pkf_init,
    update=_pkf_update,
    output_names=lambda params: ["Pkf"],
    defaults={"length": 50},
)


# ===========================================================================
# KS  -- Kalman smoother (level + velocity)
# ===========================================================================
#   dk     = x - kf[i-1]                 (kf[-1] = x[0])
#   smooth = kf[i-1] + dk * sqrt(L/10000 * 2)
#   velo  += L/10000 * dk
#   kf     = smooth + velo

@dataclass
class KSState:
    gain: float
    velocity_gain: float
    velocity: float = 0.0
    last: Optional[float] = None


def _ks_init(params: Dict[str, Any]) -> KSState:
    length = _as_length(params, "length", 200)
    return KSState(gain=sqrt(length / 10000.0 * 2.0), velocity_gain=length / 10000.0)


def _ks_update(
    state: KSState, bar: Dict[str, Any], params: Dict[str, Any]
) -> Tuple[List[float], KSState]:
    x = bar["value"]
    prev = x if state.last is None else state.last
    dk = x - prev
    smooth = prev + dk * state.gain
    state.velocity += state.velocity_gain * dk
    state.last = smooth + state.velocity
    return [state.last], state


FILTER_REGISTRY["ks"] = FilterIndicator(
    kind="ks",
    inputs=("value",),
    init=_ks_init,
    update=_ks_update,
    output_names=lambda params: ["Ks"],
    defaults={"length": 200},
)
