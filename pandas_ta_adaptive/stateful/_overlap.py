# -*- coding: utf-8 -*-
"""pandas-ta adaptive -- one-pole recursive filters.

Each section follows the pattern:
  1. State dataclass  (if beyond what _base / _estimators already provide)
  2. init / update / output_names helpers
  3. FILTER_REGISTRY["<kind>"] = FilterIndicator(...)

All of them share the recurrence

    out[i] = out[i-1] + c[i] * (in[i] - out[i-1])

with c[i] either fixed or derived per bar by an estimator.  The value used
for out[-1] ("seed") is noted per section: fixed-coefficient filters start
from 0, the ones that can stall on a flat input start from in[0].
"""
from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field
from itertools import islice
from typing import Any, Dict, List, Optional, Tuple

from pandas_ta_adaptive.utils import min_or_max, nz, safe_div, safe_pow, safe_sqrt
from ._base import (
    EMAState,
    FILTER_REGISTRY,
    FilterIndicator,
    WindowState,
    _as_float,
    _as_length,
    _buf_get,
    _param,
    ema_make,
    ema_update_raw,
    wilder_make,
    window_make,
    window_mean,
    window_push,
)
from ._estimators import (
    CMOState,
    ERState,
    FractalState,
    RangeState,
    StdDevState,
    cmo_make,
    cmo_update_raw,
    er_make,
    er_update_raw,
    fractal_make,
    fractal_update_raw,
    range_make,
    range_update_raw,
    stddev_make,
    stddev_update_raw,
    true_range,
    volatility_multiplier,
)

_ONE = ("value",)
_HLV = ("value", "high", "low")


# ===========================================================================
# EMA  -- k = clamp(2/(length+1), 0.01, 0.99), seed 0
# ===========================================================================

def _ema_init(params: Dict[str, Any]) -> EMAState:
    return ema_make(_as_length(params, "length", 14))


def _ema_update(
    state: EMAState, bar: Dict[str, Any], params: Dict[str, Any]
) -> Tuple[List[float], EMAState]:
    val, state = ema_update_raw(state, bar["value"])
    return [val], state


FILTER_REGISTRY["ema"] = FilterIndicator(
    kind="ema",
    inputs=_ONE,
    init=_ema_init,
    update=_ema_update,
    output_names=lambda params: ["Ema"],
    defaults={"length": 14},
)


# ===========================================================================
# WWMA  -- Welles Wilder, k = 1/length, seed 0
# ===========================================================================

def _wwma_init(params: Dict[str, Any]) -> EMAState:
    return wilder_make(_as_length(params, "length", 14))


FILTER_REGISTRY["wwma"] = FilterIndicator(
    kind="wwma",
    inputs=_ONE,
    init=_wwma_init,
    update=_ema_update,
    output_names=lambda params: ["Wwma"],
    defaults={"length": 14},
)


# ===========================================================================
# KAMA  -- Kaufman adaptive, seed in[0]
# ===========================================================================
#   fa = 2/(fast+1), sa = 2/(slow+1)
#   sc = (ER * (fa - sa) + sa)^2
# Outputs: Er, Kama

@dataclass
class KAMAState:
    er: ERState
    fast_alpha: float
    slow_alpha: float
    last: Optional[float] = None


def _kama_init(params: Dict[str, Any]) -> KAMAState:
    length = _as_length(params, "length", 10)
    fast = _as_length(params, "fast_length", 2)
    slow = _as_length(params, "slow_length", 30)
    return KAMAState(
        er=er_make(length, _param(params, "pad", "zero")),
        fast_alpha=2.0 / (fast + 1), slow_alpha=2.0 / (slow + 1),
    )


def _kama_update(
    state: KAMAState, bar: Dict[str, Any], params: Dict[str, Any]
) -> Tuple[List[float], KAMAState]:
    x = bar["value"]
    er, state.er = er_update_raw(state.er, x)
    sc = (er * (state.fast_alpha - state.slow_alpha) + state.slow_alpha) ** 2
    prev = x if state.last is None else state.last
    state.last = sc * x + (1.0 - sc) * prev
    return [er, state.last], state


FILTER_REGISTRY["kama"] = FilterIndicator(
    kind="kama",
    inputs=_ONE,
    init=_kama_init,
    update=_kama_update,
    output_names=lambda params: ["Er", "Kama"],
    defaults={"length": 10, "fast_length": 2, "slow_length": 30, "pad": "zero"},
)


# ===========================================================================
# PKAMA  -- powered Kaufman, c = ER^factor, seed in[0]
# ===========================================================================
# Outputs: Per, Pkama

@dataclass
class PKAMAState:
    er: ERState
    factor: float
    last: Optional[float] = None


def _pkama_init(params: Dict[str, Any]) -> PKAMAState:
    length = _as_length(params, "length", 100)
    factor = _as_float(_param(params, "factor", 3.0), 3.0)
    return PKAMAState(er=er_make(length, _param(params, "pad", "zero")), factor=factor)


def _pkama_update(
    state: PKAMAState, bar: Dict[str, Any], params: Dict[str, Any]
) -> Tuple[List[float], PKAMAState]:
    x = bar["value"]
    er, state.er = er_update_raw(state.er, x)
    per = safe_pow(er, state.factor)
    prev = x if state.last is None else state.last
    state.last = per * x + (1.0 - per) * prev
    return [per, state.last], state


FILTER_REGISTRY["pkama"] = FilterIndicator(
    kind="pkama",
    inputs=_ONE,
    init=_pkama_init,
    update=_pkama_update,
    output_names=lambda params: ["Per", "Pkama"],
    defaults={"length": 100, "factor": 3.0, "pad": "zero"},
)


# ===========================================================================
# BAMA  -- Bryant adaptive, seed 0
# ===========================================================================
#   ver  = (er - (2er - 1)/2 * (1 - trend) + 0.5)^2
#   vlen = min((length - ver + 1) / ver, max_length)
#   c    = 2 / (vlen + 1)

@dataclass
class BAMAState:
    er: ERState
    length: int
    max_length: int
    trend: float
    last: float = 0.0


def _bama_init(params: Dict[str, Any]) -> BAMAState:
    length = _as_length(params, "length", 14)
    return BAMAState(
        er=er_make(length, _param(params, "pad", "zero")),
        length=length,
        max_length=_as_length(params, "max_length", 100),
        trend=_as_float(_param(params, "trend", -1.0), -1.0),
    )


def _bama_update(
    state: BAMAState, bar: Dict[str, Any], params: Dict[str, Any]
) -> Tuple[List[float], BAMAState]:
    x = bar["value"]
    er, state.er = er_update_raw(state.er, x)
    ver = (er - ((2.0 * er - 1.0) / 2.0 * (1.0 - state.trend)) + 0.5) ** 2
    vlen = min(safe_div(state.length - ver + 1.0, ver), state.max_length)
    alpha = safe_div(2.0, vlen + 1.0)
    state.last = nz(alpha * x + (1.0 - alpha) * state.last)
    return [state.last], state


FILTER_REGISTRY["bama"] = FilterIndicator(
    kind="bama",
    inputs=_ONE,
    init=_bama_init,
    update=_bama_update,
    output_names=lambda params: ["Bama"],
    defaults={"length": 14, "max_length": 100, "trend": -1.0, "pad": "zero"},
)


# ===========================================================================
# VIDYA  -- variable index dynamic average, c = 2/(length+1) * |CMO|/100
# ===========================================================================
# Seed in[0].

@dataclass
class VIDYAState:
    cmo: CMOState
    alpha: float
    last: Optional[float] = None


def _vidya_init(params: Dict[str, Any]) -> VIDYAState:
    length = _as_length(params, "length", 14)
    return VIDYAState(cmo=cmo_make(length, _param(params, "pad", "zero")), alpha=2.0 / (length + 1))


def _vidya_update(
    state: VIDYAState, bar: Dict[str, Any], params: Dict[str, Any]
) -> Tuple[List[float], VIDYAState]:
    x = bar["value"]
    cmo, state.cmo = cmo_update_raw(state.cmo, x)
    c = state.alpha * abs(cmo / 100.0)
    prev = x if state.last is None else state.last
    state.last = x * c + prev * (1.0 - c)
    return [state.last], state


FILTER_REGISTRY["vidya"] = FilterIndicator(
    kind="vidya",
    inputs=_ONE,
    init=_vidya_init,
    update=_vidya_update,
    output_names=lambda params: ["Vidya"],
    defaults={"length": 14, "pad": "zero"},
)


# ===========================================================================
# AMA  -- adaptive MA from the position inside the high/low range
# ===========================================================================
#   mltp = clamp(|2x - ll - hh| / (hh - ll), 0, 1)    (range over length + 1)
#   ssc  = mltp * (fa - sa) + sa
#   out  = prev + ssc^2 * (x - prev),  seed in[0]

@dataclass
class AMAState:
    rng: RangeState
    fast_alpha: float
    slow_alpha: float
    last: Optional[float] = None


def _ama_init(params: Dict[str, Any]) -> AMAState:
    length = _as_length(params, "length", 14)
    fast = _as_length(params, "fast_length", 2)
    slow = _as_length(params, "slow_length", length)
    return AMAState(rng=range_make(length + 1), fast_alpha=2.0 / (fast + 1), slow_alpha=2.0 / (slow + 1))


def _ama_update(
    state: AMAState, bar: Dict[str, Any], params: Dict[str, Any]
) -> Tuple[List[float], AMAState]:
    x = bar["value"]
    (hh, ll), state.rng = range_update_raw(state.rng, bar["high"], bar["low"])
    ssc = volatility_multiplier(x, hh, ll) * (state.fast_alpha - state.slow_alpha) + state.slow_alpha
    prev = x if state.last is None else state.last
    state.last = prev + ssc * ssc * (x - prev)
    return [state.last], state


FILTER_REGISTRY["ama"] = FilterIndicator(
    kind="ama",
    inputs=_HLV,
    init=_ama_init,
    update=_ama_update,
    output_names=lambda params: ["Ama"],
    defaults={"length": 14, "fast_length": 2, "slow_length": None},
)


# ===========================================================================
# AEMA  -- adaptive EMA, rate = 2/(length+1) * (1 + mltp)
# ===========================================================================
# SMA of the available window while i <= length, then the recurrence.

@dataclass
class AEMAState:
    length: int
    rng: RangeState
    window: WindowState
    mltp1: float
    last: Optional[float] = None
    _count: int = 0


def _aema_init(params: Dict[str, Any]) -> AEMAState:
    length = _as_length(params, "length", 10)
    return AEMAState(length=length, rng=range_make(length), window=window_make(length),
                     mltp1=2.0 / (length + 1))


def _aema_update(
    state: AEMAState, bar: Dict[str, Any], params: Dict[str, Any]
) -> Tuple[List[float], AEMAState]:
    x = bar["value"]
    i = state._count
    state._count += 1
    (hh, ll), state.rng = range_update_raw(state.rng, bar["high"], bar["low"])
    state.window = window_push(state.window, x)
    rate = state.mltp1 * (1.0 + volatility_multiplier(x, hh, ll))
    prev = x if state.last is None else state.last
    state.last = window_mean(state.window) if i <= state.length else prev + rate * (x - prev)
    return [state.last], state


FILTER_REGISTRY["aema"] = FilterIndicator(
    kind="aema",
    inputs=_HLV,
    init=_aema_init,
    update=_aema_update,
    output_names=lambda params: ["Aema"],
    defaults={"length": 10},
)


# ===========================================================================
# AARMA  -- adaptive autonomous recursive MA
# ===========================================================================
#   d   = mean(|x - ma2[i-1]|) * gamma     (0 on bar 0)
#   c   = x +- d outside the band ma2[i-1] +- d, else ma2[i-1]
#   ma1 = er*c   + (1-er)*ma1[i-1]
#   ma2 = er*ma1 + (1-er)*ma2[i-1]         both seeded with in[0]
# Outputs: D, Aarma

@dataclass
class AARMAState:
    er: ERState
    gamma: float
    ma1: Optional[float] = None
    ma2: Optional[float] = None
    abs_sum: float = 0.0
    _count: int = 0


def _aarma_init(params: Dict[str, Any]) -> AARMAState:
    length = _as_length(params, "length", 14)
    return AARMAState(er=er_make(length, _param(params, "pad", "zero")),
                      gamma=_as_float(_param(params, "gamma", 3.0), 3.0))


def _band_clip(x: float, center: float, d: float) -> float:
    if x > center + d:
        return x + d
    if x < center - d:
        return x - d
    return center


def _aarma_update(
    state: AARMAState, bar: Dict[str, Any], params: Dict[str, Any]
) -> Tuple[List[float], AARMAState]:
    x = bar["value"]
    i = state._count
    state._count += 1
    er, state.er = er_update_raw(state.er, x)
    prev_ma2 = x if state.ma2 is None else state.ma2
    prev_ma1 = x if state.ma1 is None else state.ma1

    state.abs_sum += abs(x - prev_ma2)
    d = state.abs_sum / i * state.gamma if i != 0 else 0.0
    c = _band_clip(x, prev_ma2, d)
    state.ma1 = er * c + (1.0 - er) * prev_ma1
    state.ma2 = er * state.ma1 + (1.0 - er) * prev_ma2
    return [d, state.ma2], state


FILTER_REGISTRY["aarma"] = FilterIndicator(
    kind="aarma",
    inputs=_ONE,
    init=_aarma_init,
    update=_aarma_update,
    output_names=lambda params: ["D", "Aarma"],
    defaults={"length": 14, "gamma": 3.0, "pad": "zero"},
)


# ===========================================================================
# ARMA  -- autonomous recursive MA (double rolling mean of the clipped value)
# ===========================================================================
# The momentum lookback x[i - mom_length] only starts once i >= length
# (0 before that), a quirk kept from the reference.

@dataclass
class ARMAState:
    length: int
    mom_length: int
    gamma: float
    values: deque = field(default_factory=deque)
    c_window: Optional[WindowState] = None
    ma1_window: Optional[WindowState] = None
    mad: Optional[float] = None
    abs_sum: float = 0.0
    _count: int = 0


def _arma_init(params: Dict[str, Any]) -> ARMAState:
    length = _as_length(params, "length", 14)
    mom_length = _as_length(params, "mom_length", 7)
    return ARMAState(
        length=length, mom_length=mom_length,
        gamma=_as_float(_param(params, "gamma", 3.0), 3.0),
        values=deque(maxlen=mom_length + 1),
        c_window=window_make(length), ma1_window=window_make(length),
    )


def _arma_update(
    state: ARMAState, bar: Dict[str, Any], params: Dict[str, Any]
) -> Tuple[List[float], ARMAState]:
    x = bar["value"]
    i = state._count
    state._count += 1
    state.values.append(x)
    prior = _buf_get(state.values, state.mom_length) if i >= state.length else 0.0
    prev_mad = x if state.mad is None else state.mad

    state.abs_sum += abs(prior - prev_mad)
    d = state.abs_sum / i * state.gamma if i != 0 else 0.0
    state.c_window = window_push(state.c_window, _band_clip(x, prev_mad, d))
    state.ma1_window = window_push(state.ma1_window, window_mean(state.c_window))
    state.mad = window_mean(state.ma1_window)
    return [state.mad], state


FILTER_REGISTRY["arma"] = FilterIndicator(
    kind="arma",
    inputs=_ONE,
    init=_arma_init,
    update=_arma_update,
    output_names=lambda params: ["Arma"],
    defaults={"length": 14, "mom_length": 7, "gamma": 3.0},
)


# ===========================================================================
# VLMA  -- variable length MA
# ===========================================================================
# Bands around SMA(max_length): a/d at 1.75 std, b/c at 0.25 std.
# Inside [b, c] the length grows by one, outside [a, d] it shrinks by one,
# always kept in [min_length, max_length].  c = 2/(len+1), seed in[0].
# Outputs: Length, Vlma

@dataclass
class VLMAState:
    min_length: int
    max_length: int
    std: StdDevState
    cur_length: float
    last: Optional[float] = None


def _vlma_init(params: Dict[str, Any]) -> VLMAState:
    min_length = _as_length(params, "min_length", 5)
    max_length = max(_as_length(params, "max_length", 50), min_length)
    return VLMAState(min_length=min_length, max_length=max_length,
                     std=stddev_make(max_length), cur_length=float(max_length))


def _vlma_update(
    state: VLMAState, bar: Dict[str, Any], params: Dict[str, Any]
) -> Tuple[List[float], VLMAState]:
    x = bar["value"]
    (mean, std), state.std = stddev_update_raw(state.std, x)
    a, b = mean - 1.75 * std, mean - 0.25 * std
    c, d = mean + 0.25 * std, mean + 1.75 * std

    length = state.cur_length
    if b <= x <= c:
        length += 1
    elif x < a or x > d:
        length -= 1
    state.cur_length = min_or_max(length, state.max_length, state.min_length)

    sc = 2.0 / (state.cur_length + 1.0)
    prev = x if state.last is None else state.last
    state.last = x * sc + (1.0 - sc) * prev
    return [state.cur_length, state.last], state


FILTER_REGISTRY["vlma"] = FilterIndicator(
    kind="vlma",
    inputs=_ONE,
    init=_vlma_init,
    update=_vlma_update,
    output_names=lambda params: ["Length", "Vlma"],
    defaults={"min_length": 5, "max_length": 50},
    length_key="max_length",
)


# ===========================================================================
# FRAMA  -- Ehlers fractal adaptive MA, c = fractal alpha, seed in[0]
# ===========================================================================

@dataclass
class FRAMAState:
    fractal: FractalState
    last: Optional[float] = None


def _frama_init(params: Dict[str, Any]) -> FRAMAState:
    return FRAMAState(fractal=fractal_make(_as_length(params, "length", 20)))


def _frama_update(
    state: FRAMAState, bar: Dict[str, Any], params: Dict[str, Any]
) -> Tuple[List[float], FRAMAState]:
    x = bar["value"]
    alpha, state.fractal = fractal_update_raw(state.fractal, bar["high"], bar["low"])
    prev = x if state.last is None else state.last
    state.last = alpha * x + (1.0 - alpha) * prev
    return [state.last], state


FILTER_REGISTRY["frama"] = FilterIndicator(
    kind="frama",
    inputs=_HLV,
    init=_frama_init,
    update=_frama_update,
    output_names=lambda params: ["Fama"],
    defaults={"length": 20},
)


# ===========================================================================
# MCGD  -- McGinley dynamic, seed in[0]
# ===========================================================================
#   bottom = k * length * (x / prev)^4
#   out    = prev + (x - prev) / max(bottom, 1)    (x itself when bottom == 0)

@dataclass
class MCGDState:
    length: int
    k: float
    last: Optional[float] = None


def _mcgd_init(params: Dict[str, Any]) -> MCGDState:
    return MCGDState(length=_as_length(params, "length", 14),
                     k=_as_float(_param(params, "k", 0.6), 0.6))


def _mcgd_update(
    state: MCGDState, bar: Dict[str, Any], params: Dict[str, Any]
) -> Tuple[List[float], MCGDState]:
    x = bar["value"]
    prev = x if state.last is None else state.last
    bottom = state.k * state.length * safe_pow(safe_div(x, prev), 4)
    state.last = prev + (x - prev) / max(bottom, 1.0) if bottom != 0 else x
    return [state.last], state


FILTER_REGISTRY["mcgd"] = FilterIndicator(
    kind="mcgd",
    inputs=_ONE,
    init=_mcgd_init,
    update=_mcgd_update,
    output_names=lambda params: ["Mdi"],
    defaults={"length": 14, "k": 0.6},
)


# ===========================================================================
# AHMA  -- Ahrens MA, seed 0
# ===========================================================================
#   out = prev + (x - (prev + out[i-length]) / 2) / length
# out[i-length] is x itself until that much history exists.

@dataclass
class AHMAState:
    length: int
    history: deque = field(default_factory=deque)   # maxlen = length
    last: float = 0.0


def _ahma_init(params: Dict[str, Any]) -> AHMAState:
    length = _as_length(params, "length", 9)
    return AHMAState(length=length, history=deque(maxlen=length))


def _ahma_update(
    state: AHMAState, bar: Dict[str, Any], params: Dict[str, Any]
) -> Tuple[List[float], AHMAState]:
    x = bar["value"]
    prior = state.history[0] if len(state.history) == state.length else x
    state.last = state.last + (x - (state.last + prior) / 2.0) / state.length
    state.history.append(state.last)
    return [state.last], state


FILTER_REGISTRY["ahma"] = FilterIndicator(
    kind="ahma",
    inputs=_ONE,
    init=_ahma_init,
    update=_ahma_update,
    output_names=lambda params: ["Ahma"],
    defaults={"length": 9},
)


# ===========================================================================
# JMA  -- Jurik MA (three-stage approximation), seed 0
# ===========================================================================
#   phase_ratio = 0.5 | 2.5 beyond +-100, else phase/100 + 1.5
#   beta  = 0.45(L-1) / (0.45(L-1) + 2),  alpha = beta^power
#   e0 = (1-alpha)*x + alpha*e0
#   e1 = (x - e0)*(1-beta) + beta*e1
#   e2 = (e0 + phase_ratio*e1 - jma)*(1-alpha)^2 + alpha^2*e2
#   jma += e2

@dataclass
class JMAState:
    alpha: float
    beta: float
    phase_ratio: float
    e0: float = 0.0
    e1: float = 0.0
    e2: float = 0.0
    last: float = 0.0


def _jma_init(params: Dict[str, Any]) -> JMAState:
    length = _as_length(params, "length", 7)
    phase = _as_float(_param(params, "phase", 50.0), 50.0)
    power = _as_float(_param(params, "power", 2.0), 2.0)
    if phase < -100:
        phase_ratio = 0.5
    elif phase > 100:
        phase_ratio = 2.5
    else:
        phase_ratio = phase / 100.0 + 1.5
    ratio = 0.45 * (length - 1)
    beta = ratio / (ratio + 2.0)
    return JMAState(alpha=safe_pow(beta, power), beta=beta, phase_ratio=phase_ratio)


def _jma_update(
    state: JMAState, bar: Dict[str, Any], params: Dict[str, Any]
) -> Tuple[List[float], JMAState]:
    x = bar["value"]
    a = state.alpha
    state.e0 = (1.0 - a) * x + a * state.e0
    state.e1 = (x - state.e0) * (1.0 - state.beta) + state.beta * state.e1
    state.e2 = ((state.e0 + state.phase_ratio * state.e1 - state.last) * (1.0 - a) ** 2
                + a * a * state.e2)
    state.last = state.e2 + state.last
    return [state.last], state


FILTER_REGISTRY["jma"] = FilterIndicator(
    kind="jma",
    inputs=_ONE,
    init=_jma_init,
    update=_jma_update,
    output_names=lambda params: ["Jma"],
    defaults={"length": 7, "phase": 50.0, "power": 2.0},
)


# ===========================================================================
# ADEMA  -- alpha decreasing EMA, c[i] = 2/(i+1), seed 0
# ===========================================================================
# No window: the coefficient runs 2, 1, 2/3, 1/2, ... so out[1] == in[1]
# and the output weighs the history more heavily with every bar.

@dataclass
class ADEMAState:
    last: float = 0.0
    _count: int = 0


def _adema_update(
    state: ADEMAState, bar: Dict[str, Any], params: Dict[str, Any]
) -> Tuple[List[float], ADEMAState]:
    x = bar["value"]
    state._count += 1
    alpha = 2.0 / state._count
    state.last = alpha * x + (1.0 - alpha) * state.last
    return [state.last], state


FILTER_REGISTRY["adema"] = FilterIndicator(
    kind="adema",
    inputs=_ONE,
    init=lambda params: ADEMAState(),
    update=_adema_update,
    output_names=lambda params: ["Ema"],
    length_key=None,
)


# ===========================================================================
# AFEMA  -- ATR filtered EMA, seed in[0]
# ===========================================================================
#   tr_val = TR / x                      (TR itself when x == 0)
#   atr    = SMA(tr_val, atr_length)
#   std    = sqrt(SMA(atr^2, std_length) - (sum(atr, std_length) / std_length)^2)
#   c      = 2 * min(lowest(std, lb_length) / std, cap) / (length + 1)
# c drops to 0 on a flat input (std == 0), hence the in[0] seed.

@dataclass
class AFEMAState:
    length: int
    std_length: int
    cap: float
    tr_window: WindowState
    atr_sq_window: WindowState
    atr_window: WindowState
    std_hist: deque = field(default_factory=deque)   # maxlen = lb_length
    prev: float = 0.0
    last: Optional[float] = None


def _afema_init(params: Dict[str, Any]) -> AFEMAState:
    std_length = _as_length(params, "std_length", 10)
    return AFEMAState(
        length=_as_length(params, "length", 45),
        std_length=std_length,
        cap=_as_float(_param(params, "min", 5.0), 5.0),
        tr_window=window_make(_as_length(params, "atr_length", 20)),
        atr_sq_window=window_make(std_length),
        atr_window=window_make(std_length),
        std_hist=deque(maxlen=_as_length(params, "lb_length", 20)),
    )


def _afema_update(
    state: AFEMAState, bar: Dict[str, Any], params: Dict[str, Any]
) -> Tuple[List[float], AFEMAState]:
    x = bar["value"]
    tr = true_range(bar["high"], bar["low"], state.prev)
    state.prev = x
    state.tr_window = window_push(state.tr_window, tr / x if x != 0 else tr)
    atr = window_mean(state.tr_window)

    state.atr_sq_window = window_push(state.atr_sq_window, atr * atr)
    state.atr_window = window_push(state.atr_window, atr)
    std_b = sum(state.atr_window.buf) ** 2 / state.std_length ** 2
    std = safe_sqrt(window_mean(state.atr_sq_window) - std_b)
    state.std_hist.append(std)

    factor = min(safe_div(min(state.std_hist), std), state.cap)
    alpha = 2.0 * factor / (state.length + 1)
    prev = x if state.last is None else state.last
    state.last = alpha * x + (1.0 - alpha) * prev
    return [state.last], state


FILTER_REGISTRY["afema"] = FilterIndicator(
    kind="afema",
    inputs=_HLV,
    init=_afema_init,
    update=_afema_update,
    output_names=lambda params: ["Afp"],
    defaults={"length": 45, "atr_length": 20, "std_length": 10, "lb_length": 20, "min": 5.0},
)


# ===========================================================================
# UMA  -- ultimate MA: VLMA length + money flow driven power weights
# ===========================================================================
#   n     = VLMA length, kept in [min_length, max_length]
#   mfi   = money flow index of x * volume over the last n bars
#   p     = acc + |2 * mfi - 100| / 25
#   out   = sum(x[i-j] * (n-j)^p) / sum((n-j)^p),  j = 0 .. n-1   (x[<0] = 0)

@dataclass
class UMAState:
    vlma: VLMAState
    acc: float
    values: deque = field(default_factory=deque)     # maxlen = max_length
    pos_flow: deque = field(default_factory=deque)
    neg_flow: deque = field(default_factory=deque)
    prev: float = 0.0


def _uma_init(params: Dict[str, Any]) -> UMAState:
    vlma = _vlma_init(params)
    size = vlma.max_length
    return UMAState(
        vlma=vlma, acc=_as_float(_param(params, "acc", 1.0), 1.0),
        values=deque(maxlen=size), pos_flow=deque(maxlen=size), neg_flow=deque(maxlen=size),
    )


def _money_flow_index(pos: float, neg: float) -> float:
    if neg == 0:
        return 100.0
    if pos == 0:
        return 0.0
    ratio = min_or_max(pos / neg, 1.0, 0.0)
    return min_or_max(100.0 - 100.0 / (1.0 + ratio), 100.0, 0.0)


def _uma_update(
    state: UMAState, bar: Dict[str, Any], params: Dict[str, Any]
) -> Tuple[List[float], UMAState]:
    x = bar["value"]
    (length, _), state.vlma = _vlma_update(state.vlma, bar, params)
    n = int(length)

    raw = x * bar["volume"]
    state.pos_flow.append(raw if x > state.prev else 0.0)
    state.neg_flow.append(raw if x < state.prev else 0.0)
    state.prev = x
    mfi = _money_flow_index(sum(islice(reversed(state.pos_flow), n)),
                            sum(islice(reversed(state.neg_flow), n)))
    power = state.acc + abs(mfi * 2.0 - 100.0) / 25.0

    state.values.append(x)
    total = weights = 0.0
    for j in range(n):
        w = safe_pow(n - j, power)
        total += _buf_get(state.values, j) * w
        weights += w
    return [safe_div(total, weights)], state


FILTER_REGISTRY["uma"] = FilterIndicator(
    kind="uma",
    inputs=("value", "volume"),
    init=_uma_init,
    update=_uma_update,
    output_names=lambda params: ["Uma"],
    defaults={"min_length": 5, "max_length": 50, "acc": 1.0},
    length_key="max_length",
)
