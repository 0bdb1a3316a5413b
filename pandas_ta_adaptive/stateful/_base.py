# -*- coding: utf-8 -*-
"""pandas-ta adaptive – shared base: state classes, helpers, registries.

All category modules (``_estimators``, ``_overlap``, ``_poles``, …) import
from here and populate ``FILTER_REGISTRY`` at load time.

Every filter is a pair of plain functions over an explicit state object::

    state = init(params)
    values, state = update(state, bar, params)     # once per bar, in order

*bar* is a dict with ``"value"`` (the selected input sample) and, for the
range based filters, ``"high"`` / ``"low"``.
"""
from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Tuple

import numpy as np
from pandas import DataFrame, Index, Series

from pandas_ta_adaptive.utils import InvalidParameterError, min_or_max, v_length


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _param(params: Dict[str, Any], key: str, default: Any) -> Any:
    """Pull *key* from *params*; treat None as missing → default."""
    value = params.get(key, default)
    return default if value is None else value


def _as_int(value: Any, default: int) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return int(default)


def _as_float(value: Any, default: float) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return float(default)


def _as_length(params: Dict[str, Any], key: str, default: int) -> int:
    """Window length from *params*; < 1 raises InvalidParameterError."""
    return v_length(_param(params, key, default), key)


def _buf_get(buf: deque, offset: int) -> float:
    """Value *offset* positions back from the newest entry (0 = newest).
    Returns 0.0 if not enough history."""
    idx = len(buf) - 1 - offset
    return float(buf[idx]) if idx >= 0 else 0.0


# ---------------------------------------------------------------------------
# Shared state classes
# ---------------------------------------------------------------------------

@dataclass
class EMAState:
    """Fixed-coefficient one-pole filter.

    EMA    -> k = clamp(2 / (length + 1), 0.01, 0.99)   via ``ema_make``
    Wilder -> k = 1 / length                            via ``wilder_make``

    The output before bar 0 is taken as 0.
    """
    length: int
    k: float
    last: float = 0.0


def ema_make(length: int) -> EMAState:
    return EMAState(length=length, k=min_or_max(2.0 / (length + 1.0), 0.99, 0.01))


def wilder_make(length: int) -> EMAState:
    return EMAState(length=length, k=1.0 / length)


def ema_update_raw(state: EMAState, x: float) -> Tuple[float, EMAState]:
    """Single-step update.  Returns (value, state)."""
    state.last = x * state.k + state.last * (1.0 - state.k)
    return state.last, state


@dataclass
class WindowState:
    """Trailing window of the last *length* samples."""
    length: int
    buf: deque = field(default_factory=deque)


def window_make(length: int) -> WindowState:
    return WindowState(length=length, buf=deque(maxlen=length))


def window_push(state: WindowState, x: float) -> WindowState:
    state.buf.append(x)
    return state


def window_mean(state: WindowState) -> float:
    """Average of the available samples (short window during warm-up)."""
    return sum(state.buf) / len(state.buf) if state.buf else 0.0


# ---------------------------------------------------------------------------
# Indicator descriptor & registry  (populated by category modules)
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class FilterIndicator:
    """Immutable descriptor for a single recursive filter."""
    kind:         str
    inputs:       Tuple[str, ...]
    init:         Callable[[Dict[str, Any]], Any]
    update:       Callable[[Any, Dict[str, Any], Dict[str, Any]],
                           Tuple[List[float], Any]]
    output_names: Callable[[Dict[str, Any]], List[str]]
    defaults:     Dict[str, Any] = field(default_factory=dict)
    primary:      int = -1                  # index of the composable output
    signal:       str = "price"             # "price" | "pair"
    length_key:   Optional[str] = "length"  # param that ``resolve(length=)`` sets


# Populated by category modules at import time.
FILTER_REGISTRY: Dict[str, FilterIndicator] = {}


def get_indicator(kind: str) -> FilterIndicator:
    indicator = FILTER_REGISTRY.get(str(kind))
    if indicator is None:
        raise ValueError(f"Indicator '{kind}' not found in FILTER_REGISTRY")
    return indicator


def merge_params(indicator: FilterIndicator, params: Dict[str, Any]) -> Dict[str, Any]:
    """Registry defaults overlaid with the non-None caller params."""
    merged = dict(indicator.defaults)
    merged.update({k: v for k, v in params.items() if v is not None})
    return merged


# ---------------------------------------------------------------------------
# Replay
# ---------------------------------------------------------------------------

def replay(
        kind: str, inputs: Dict[str, np.ndarray], params: Dict[str, Any]
) -> Tuple[Dict[str, np.ndarray], Any]:
    """Run ``update`` over every bar of *inputs*.

    *inputs* maps each name of ``indicator.inputs`` to an equally long
    float64 array.  Returns ``({output name: values}, final state)``.
    """
    indicator = get_indicator(kind)
    params = merge_params(indicator, params)
    state = indicator.init(params)
    names = indicator.output_names(params)
    missing = [k for k in indicator.inputs if k not in inputs]
    if missing:
        raise InvalidParameterError(f"{kind}: missing input(s) {missing}")

    arrays = [np.asarray(inputs[k], dtype=np.float64) for k in indicator.inputs]
    n = len(arrays[0]) if arrays else 0
    out = np.zeros((len(names), n))
    for i in range(n):
        bar = {k: float(a[i]) for k, a in zip(indicator.inputs, arrays)}
        values, state = indicator.update(state, bar, params)
        out[:, i] = values
    return {name: out[j] for j, name in enumerate(names)}, state


def replay_state(kind: str, inputs: Dict[str, np.ndarray], params: Dict[str, Any]) -> Any:
    """Final state after replaying the history, ready for further ``update`` calls."""
    _, state = replay(kind, inputs, params)
    return state


# ---------------------------------------------------------------------------
# Result container
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class IndicatorResult:
    """Named outputs plus the composable primary series and its signals."""
    name:    str
    outputs: Dict[str, Series]
    primary: Series
    signals: Series

    def to_frame(self) -> DataFrame:
        df = DataFrame(self.outputs)
        df["Signal"] = self.signals
        return df

    @classmethod
    def from_arrays(
            cls, name: str, outputs: Dict[str, np.ndarray], primary_key: str,
            signals: Series, index: Optional[Index] = None
    ) -> "IndicatorResult":
        series = {k: Series(np.array(v, copy=True), index=index, name=k) for k, v in outputs.items()}
        return cls(name=name, outputs=series, primary=series[primary_key].copy(), signals=signals)


# ---------------------------------------------------------------------------
# Keys
# ---------------------------------------------------------------------------

PARAM_EXCLUDES = frozenset({"append", "prefix", "suffix", "input_name", "name"})


def build_state_key(kind: str, params: Dict[str, Any]) -> str:
    """Deterministic cache-key from *kind* + non-meta params."""
    parts = sorted(
        ((k, v) for k, v in params.items() if k not in PARAM_EXCLUDES),
        key=lambda x: x[0],
    )
    payload = "|".join(f"{k}={str(v) if hasattr(v, 'value') else repr(v)}" for k, v in parts)
    return f"{kind}|{payload}" if payload else kind


def supported_kinds() -> List[str]:
    """Sorted list of registered recursive filter kinds."""
    return sorted(FILTER_REGISTRY.keys())
