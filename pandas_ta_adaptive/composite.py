# -*- coding: utf-8 -*-
"""Cascaded averages built from repeated resolver calls.

Every stage is a complete ``resolve`` over the previous stage's full
output, so the stages used here are exactly what a caller gets by chaining
``resolve`` by hand.  ``ma_type`` selects the averaging kind of the stages.
"""
from __future__ import annotations

import warnings
from dataclasses import dataclass, field
from math import ceil, sqrt
from typing import Any, Callable, Dict, List

import numpy as np

from pandas_ta_adaptive.maps import AverageKind, as_kind
from pandas_ta_adaptive.utils import InvalidParameterError, clamp_length, min_or_max, v_length


@dataclass(frozen=True)
class CompositeIndicator:
    """Descriptor of a cascade: ``compute(resolver, values, params) -> outputs``."""
    kind:         str
    compute:      Callable[[Any, np.ndarray, Dict[str, Any]], Dict[str, np.ndarray]]
    output_names: List[str]
    defaults:     Dict[str, Any] = field(default_factory=dict)
    length_key:   str = "length"


COMPOSITE_REGISTRY: Dict[str, CompositeIndicator] = {}


def _stage_kind(kind: str, params: Dict[str, Any]) -> AverageKind:
    ma_type = as_kind(params["ma_type"])
    if ma_type.value == kind:
        raise InvalidParameterError(f"{kind}: ma_type cannot be {kind} itself")
    return ma_type


def cascade(resolver, kind, length: int, values: np.ndarray, depth: int) -> List[np.ndarray]:
    """``[ma(x), ma(ma(x)), …]`` with *depth* stages."""
    stages = []
    current = values
    for _ in range(depth):
        current = resolver.resolve_values(kind, length, current)
        stages.append(current)
    return stages


def _weighted_sum(stages: List[np.ndarray], weights: List[float]) -> np.ndarray:
    out = np.zeros_like(stages[0])
    for w, s in zip(weights, stages):
        out = out + w * s
    return out


def _register_polynomial(kind: str, key: str, weights: List[float], default_length: int) -> None:
    """Linear combinations of an N-stage cascade (DEMA, TEMA, QEMA, PEMA)."""
    def _compute(resolver, values: np.ndarray, params: Dict[str, Any]) -> Dict[str, np.ndarray]:
        ma_type = _stage_kind(kind, params)
        stages = cascade(resolver, ma_type, v_length(params["length"]), values, len(weights))
        return {key: _weighted_sum(stages, weights)}

    COMPOSITE_REGISTRY[kind] = CompositeIndicator(
        kind=kind,
        compute=_compute,
        output_names=[key],
        defaults={"length": default_length, "ma_type": AverageKind.EMA},
    )


# dema = 2e1 - e2
_register_polynomial("dema", "Dema", [2.0, -1.0], 14)
# tema = 3e1 - 3e2 + e3
_register_polynomial("tema", "Tema", [3.0, -3.0, 1.0], 14)
# qema = 5e1 - 10e2 + 10e3 - 5e4 + e5
_register_polynomial("qema", "Qema", [5.0, -10.0, 10.0, -5.0, 1.0], 14)
# pema = 8e1 - 28e2 + 56e3 - 70e4 + 56e5 - 28e6 + 8e7 - e8
_register_polynomial("pema", "Pema", [8.0, -28.0, 56.0, -70.0, 56.0, -28.0, 8.0, -1.0], 20)


# ===========================================================================
# T3  -- Tillson, six stages
# ===========================================================================
#   c1 = -v^3,  c2 = 3v^2 + 3v^3,  c3 = -6v^2 - 3v - 3v^3,  c4 = 1 + 3v + v^3 + 3v^2
#   t3 = c1*e6 + c2*e5 + c3*e4 + c4*e3

def t3_coefficients(v: float) -> List[float]:
    v = min_or_max(v, 1.0, 0.0)
    return [
        -v ** 3,
        3 * v ** 2 + 3 * v ** 3,
        -6 * v ** 2 - 3 * v - 3 * v ** 3,
        1 + 3 * v + v ** 3 + 3 * v ** 2,
    ]


def _t3(resolver, values: np.ndarray, params: Dict[str, Any]) -> Dict[str, np.ndarray]:
    ma_type = _stage_kind("t3", params)
    e = cascade(resolver, ma_type, v_length(params["length"]), values, 6)
    c1, c2, c3, c4 = t3_coefficients(float(params["v_factor"]))
    return {"T3": c1 * e[5] + c2 * e[4] + c3 * e[3] + c4 * e[2]}


COMPOSITE_REGISTRY["t3"] = CompositeIndicator(
    kind="t3",
    compute=_t3,
    output_names=["T3"],
    defaults={"length": 5, "v_factor": 0.7, "ma_type": AverageKind.EMA},
)


# ===========================================================================
# Zero lag  -- e1 + (e1 - e2)
# ===========================================================================

def _register_zero_lag(kind: str, key: str, ma_type: AverageKind) -> None:
    def _compute(resolver, values: np.ndarray, params: Dict[str, Any]) -> Dict[str, np.ndarray]:
        e1, e2 = cascade(resolver, _stage_kind(kind, params), v_length(params["length"]), values, 2)
        return {key: e1 + (e1 - e2)}

    COMPOSITE_REGISTRY[kind] = CompositeIndicator(
        kind=kind,
        compute=_compute,
        output_names=[key],
        defaults={"length": 14, "ma_type": ma_type},
    )


_register_zero_lag("zlema", "Zema", AverageKind.EMA)
_register_zero_lag("zltema", "Ztema", AverageKind.TEMA)


# ===========================================================================
# TMA  -- triangular, ma(ma(x))
# ===========================================================================

def _tma(resolver, values: np.ndarray, params: Dict[str, Any]) -> Dict[str, np.ndarray]:
    stages = cascade(resolver, _stage_kind("tma", params), v_length(params["length"]), values, 2)
    return {"Tma": stages[1]}


COMPOSITE_REGISTRY["tma"] = CompositeIndicator(
    kind="tma",
    compute=_tma,
    output_names=["Tma"],
    defaults={"length": 20, "ma_type": AverageKind.SMA},
)


# ===========================================================================
# HMA  -- Hull, ma(2*ma(x, ceil(L/2)) - ma(x, L), ceil(sqrt(L)))
# ===========================================================================
# Derived lengths are kept in 2..530.

def hull_lengths(length: int):
    half, root = int(ceil(length / 2.0)), int(ceil(sqrt(length)))
    clamped = clamp_length(half), clamp_length(root)
    if clamped != (half, root):
        warnings.warn(
            f"[!] hma: derived lengths {(half, root)} clamped to {clamped}",
            RuntimeWarning,
            stacklevel=4,
        )
    return clamped


def _hma(resolver, values: np.ndarray, params: Dict[str, Any]) -> Dict[str, np.ndarray]:
    ma_type = _stage_kind("hma", params)
    length = v_length(params["length"])
    half, root = hull_lengths(length)
    full_ma = resolver.resolve_values(ma_type, length, values)
    half_ma = resolver.resolve_values(ma_type, half, values)
    return {"Hma": resolver.resolve_values(ma_type, root, 2.0 * half_ma - full_ma)}


COMPOSITE_REGISTRY["hma"] = CompositeIndicator(
    kind="hma",
    compute=_hma,
    output_names=["Hma"],
    defaults={"length": 20, "ma_type": AverageKind.WMA},
)


# ===========================================================================
# LSMA  -- least squares end point, 3*wma - 2*sma
# ===========================================================================

def _lsma(resolver, values: np.ndarray, params: Dict[str, Any]) -> Dict[str, np.ndarray]:
    length = v_length(params["length"])
    w = resolver.resolve_values(AverageKind.WMA, length, values)
    s = resolver.resolve_values(AverageKind.SMA, length, values)
    return {"Lsma": 3.0 * w - 2.0 * s}


COMPOSITE_REGISTRY["lsma"] = CompositeIndicator(
    kind="lsma",
    compute=_lsma,
    output_names=["Lsma"],
    defaults={"length": 25},
)


__all__ = [
    "CompositeIndicator",
    "COMPOSITE_REGISTRY",
    "cascade",
    "t3_coefficients",
    "hull_lengths",
]
