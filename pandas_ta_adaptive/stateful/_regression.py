# -*- coding: utf-8 -*-
"""pandas-ta adaptive -- regression style adaptive filters.

als  -- adaptive least squares: every moment of the (bar index, value) pair
        is an EMA whose coefficient comes from the true range
af   -- auto filter: a hysteresis copy of the input regressed back onto the
        input over a trailing window
"""
from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from pandas_ta_adaptive.utils import min_or_max, safe_div, safe_pow, safe_sqrt
from ._base import FILTER_REGISTRY, FilterIndicator, _as_float, _as_length, _param
from ._estimators import StdDevState, correlation, stddev_make, stddev_update_raw, true_range

_HLV = ("value", "high", "low")


def _smooth(alpha: float, x: float, prev: Optional[float]) -> float:
    """One EMA step, seeded with *x* itself."""
    return x if prev is None else alpha * x + (1.0 - alpha) * prev


# ===========================================================================
# ALS  -- adaptive least squares
# ===========================================================================
#   alpha = clamp((TR / highest(TR, length))^smooth, 0.01, 0.99)   (0.01 on 0)
#   x, y  = EMA(index), EMA(value)
#   mx, my, mxx, myy, mxy = EMA(|index - x|), EMA(|value - y|), EMA(i*i), ...
#   k     = 2/alpha + 1
#   r     = (k^2*mxy - k*mx*k*my) / sqrt((k^2*mxx - (k*mx)^2) * (k^2*myy - (k*my)^2))
#   slope = r * my / mx,   out = x * slope + (y - slope * x)

@dataclass
class ALSState:
    smooth: float
    trs: deque = field(default_factory=deque)   # maxlen = length
    prev: float = 0.0
    x: Optional[float] = None
    y: Optional[float] = None
    mx: Optional[float] = None
    my: Optional[float] = None
    mxx: Optional[float] = None
    myy: Optional[float] = None
    mxy: Optional[float] = None
    _count: int = 0


def _als_init(params: Dict[str, Any]) -> ALSState:
    return ALSState(
        smooth=_as_float(_param(params, "smooth", 1.5), 1.5),
        trs=deque(maxlen=_as_length(params, "length", 500)),
    )


def _als_update(
    state: ALSState, bar: Dict[str, Any], params: Dict[str, Any]
) -> Tuple[List[float], ALSState]:
    value = bar["value"]
    index = float(state._count)
    state._count += 1

    tr = true_range(bar["high"], bar["low"], state.prev)
    state.prev = value
    state.trs.append(tr)
    highest = max(state.trs)
    alpha = min_or_max(safe_pow(tr / highest, state.smooth), 0.99, 0.01) if highest != 0 else 0.01

    state.x = _smooth(alpha, index, state.x)
    state.y = _smooth(alpha, value, state.y)
    state.mx = _smooth(alpha, abs(index - state.x), state.mx)
    state.my = _smooth(alpha, abs(value - state.y), state.my)
    state.mxx = _smooth(alpha, index * index, state.mxx)
    state.myy = _smooth(alpha, value * value, state.myy)
    state.mxy = _smooth(alpha, index * value, state.mxy)

    k = 2.0 / alpha + 1.0
    num = k * k * state.mxy - k * state.mx * k * state.my
    den = safe_sqrt((k * k * state.mxx - (k * state.mx) ** 2) * (k * k * state.myy - (k * state.my) ** 2))
    slope = safe_div(num, den) * safe_div(state.my, state.mx)
    intercept = state.y - slope * state.x
    return [state.x * slope + intercept], state


FILTER_REGISTRY["als"] = FilterIndicator(
    kind="als",
    inputs=_HLV,
    init=_als_init,
    update=_als_update,
    output_names=lambda params: ["Als"],
    defaults={"length": 500, "smooth": 1.5},
)


# ===========================================================================
# AF  -- auto filter
# ===========================================================================
#   dev   = std-dev of the input over length, y_ma its SMA
#   x     = input when it leaves x[i-1] +- dev, else x[i-1]      (seed in[0])
#   corr  = correlation(input, x) over length
#   slope = corr * dev / std-dev(x),  out = x * slope + y_ma - slope * SMA(x)

@dataclass
class AFState:
    y_dev: StdDevState
    x_dev: StdDevState
    values: deque = field(default_factory=deque)   # maxlen = length
    xs: deque = field(default_factory=deque)
    last_x: Optional[float] = None


def _af_init(params: Dict[str, Any]) -> AFState:
    length = _as_length(params, "length", 500)
    return AFState(
        y_dev=stddev_make(length), x_dev=stddev_make(length),
        values=deque(maxlen=length), xs=deque(maxlen=length),
    )


def _af_update(
    state: AFState, bar: Dict[str, Any], params: Dict[str, Any]
) -> Tuple[List[float], AFState]:
    value = bar["value"]
    (y_ma, dev), state.y_dev = stddev_update_raw(state.y_dev, value)

    prev = value if state.last_x is None else state.last_x
    x = value if value > prev + dev or value < prev - dev else prev
    state.last_x = x
    state.values.append(value)
    state.xs.append(x)
    corr = correlation(state.values, state.xs)

    (x_ma, x_dev), state.x_dev = stddev_update_raw(state.x_dev, x)
    slope = corr * safe_div(dev, x_dev)
    return [x * slope + y_ma - slope * x_ma], state


FILTER_REGISTRY["af"] = FilterIndicator(
    kind="af",
    inputs=("value",),
    init=_af_init,
    update=_af_update,
    output_names=lambda params: ["Af"],
    defaults={"length": 500},
)
