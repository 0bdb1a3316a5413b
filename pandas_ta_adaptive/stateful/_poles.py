# -*- coding: utf-8 -*-
"""pandas-ta adaptive -- multi-pole IIR filters (Ehlers).

Coefficients are fixed per length and derived from the pole placement:

  2-pole   a = exp(-1.414*pi/L)   b = 2a*cos(1.414*pi/L)
           c2 = b,  c3 = -a^2
  3-pole   a = exp(-pi/L)         b = 2a*cos(1.738*pi/L)    c = a^2
           c2 = b + c,  c3 = -(c + b*c),  c4 = c^2
  gauss N  beta  = (1 - cos(2*pi/L)) / (2^(1/N) - 1)
           alpha = -beta + sqrt(beta^2 + 2*beta)

Super smoothers and Butterworth filters share the feedback taps and differ
only in how the input taps are combined.  Every filter here reduces to

  out[i] = sum(feed[j] * in[i-j]) + sum(back[k] * out[i-1-k])

For i below the number of feedback taps the filter emits in[i] unchanged.
"""
from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field
from math import comb, cos, exp, pi, sqrt
from typing import Any, Dict, List, Tuple

from pandas_ta_adaptive.utils import InvalidParameterError, nz
from ._base import (
    FILTER_REGISTRY,
    FilterIndicator,
    _as_int,
    _as_length,
    _buf_get,
    _param,
)

Coefficients = Tuple[Tuple[float, ...], Tuple[float, ...]]


# ---------------------------------------------------------------------------
# Coefficients
# ---------------------------------------------------------------------------

def _two_pole(length: int) -> Tuple[float, float, float]:
    arg = 1.414 * pi / length
    a = exp(-arg)
    b = 2.0 * a * cos(arg)
    return a, b, -a * a


def _three_pole(length: int) -> Tuple[float, float, float, float, float]:
    a = exp(-pi / length)
    b = 2.0 * a * cos(1.738 * pi / length)
    c = a * a
    return b, c, b + c, -(c + b * c), c * c


def ssf2_coefficients(length: int) -> Coefficients:
    a, c2, c3 = _two_pole(length)
    c1 = 1.0 - c2 - c3
    return (c1 / 2.0, c1 / 2.0), (c2, c3)


def butter2_coefficients(length: int) -> Coefficients:
    a, b, c3 = _two_pole(length)
    c1 = (1.0 - b + a * a) / 4.0
    return (c1, 2.0 * c1, c1), (b, c3)


def ssf3_coefficients(length: int) -> Coefficients:
    _, _, c2, c3, c4 = _three_pole(length)
    return (1.0 - c2 - c3 - c4,), (c2, c3, c4)


def butter3_coefficients(length: int) -> Coefficients:
    b, c, c2, c3, c4 = _three_pole(length)
    c1 = (1.0 - b + c) * (1.0 - c) / 8.0
    return (c1, 3.0 * c1, 3.0 * c1, c1), (c2, c3, c4)


def gaussian_coefficients(length: int, poles: int) -> Coefficients:
    if not 1 <= poles <= 4:
        raise InvalidParameterError(f"poles must be in 1..4, got {poles}")
    beta = (1.0 - cos(2.0 * pi / length)) / (2.0 ** (1.0 / poles) - 1.0)
    alpha = -beta + sqrt(beta * beta + 2.0 * beta)
    back = tuple(
        (-1.0) ** (k + 1) * comb(poles, k) * (1.0 - alpha) ** k
        for k in range(1, poles + 1)
    )
    return (alpha ** poles,), back


# ===========================================================================
# Shared state & update
# ===========================================================================

@dataclass
class PoleState:
    feed: Tuple[float, ...]
    back: Tuple[float, ...]
    inputs:  deque = field(default_factory=deque)   # maxlen = len(feed)
    outputs: deque = field(default_factory=deque)   # maxlen = len(back)
    _count: int = 0


def pole_make(coefficients: Coefficients) -> PoleState:
    feed, back = coefficients
    return PoleState(feed=feed, back=back,
                     inputs=deque(maxlen=len(feed)), outputs=deque(maxlen=len(back)))


def pole_update_raw(state: PoleState, x: float) -> Tuple[float, PoleState]:
    state.inputs.append(x)
    if state._count < len(state.back):
        val = x
    else:
        val = sum(c * _buf_get(state.inputs, j) for j, c in enumerate(state.feed))
        val += sum(c * _buf_get(state.outputs, k) for k, c in enumerate(state.back))
        val = nz(val)
    state._count += 1
    state.outputs.append(val)
    return val, state


def _pole_update(
    state: PoleState, bar: Dict[str, Any], params: Dict[str, Any]
) -> Tuple[List[float], PoleState]:
    val, state = pole_update_raw(state, bar["value"])
    return [val], state


def _register(kind: str, key: str, coefficients, default_length: int) -> None:
    def _init(params: Dict[str, Any]) -> PoleState:
        return pole_make(coefficients(_as_length(params, "length", default_length)))

    FILTER_REGISTRY[kind] = FilterIndicator(
        kind=kind,
        inputs=("value",),
        init=_init,
        update=_pole_update,
        output_names=lambda params: [key],
        defaults={"length": default_length},
    )


_register("ssf2", "Ssf2", ssf2_coefficients, 20)
_register("butter2", "Bf2", butter2_coefficients, 20)
_register("ssf3", "Ssf3", ssf3_coefficients, 20)
_register("butter3", "Bf3", butter3_coefficients, 20)


# ===========================================================================
# GAUSS  -- N-pole Gaussian, N = poles in 1..4 (default 4)
# ===========================================================================

def _gauss_init(params: Dict[str, Any]) -> PoleState:
    length = _as_length(params, "length", 14)
    poles = _as_int(_param(params, "poles", 4), 4)
    return pole_make(gaussian_coefficients(length, poles))


FILTER_REGISTRY["gauss"] = FilterIndicator(
    kind="gauss",
    inputs=("value",),
    init=_gauss_init,
    update=_pole_update,
    output_names=lambda params: ["Gf"],
    defaults={"length": 14, "poles": 4},
)
