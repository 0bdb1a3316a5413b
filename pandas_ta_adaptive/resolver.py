# -*- coding: utf-8 -*-
"""Moving-average resolver / composition engine.

``resolve(kind, length, series)`` is the single entry point that every
cascade uses, so any kind can be fed another kind's complete output.
Dispatch goes by ``AverageKind`` to one of three registries:

  static     -- fixed-weight leaves        (``static.STATIC_REGISTRY``)
  composite  -- cascades of resolve calls  (``composite.COMPOSITE_REGISTRY``)
  recursive  -- replayed filter states     (``stateful.FILTER_REGISTRY``)

Results are memoised per ``(kind, params, input fingerprint)``; the cache is
transparent because every computation is a pure function of its inputs.
"""
from __future__ import annotations

import threading
from collections import OrderedDict, namedtuple
from typing import Any, Dict, Optional, Tuple, Union

import numpy as np
from pandas import Series

from pandas_ta_adaptive.composite import COMPOSITE_REGISTRY
from pandas_ta_adaptive.maps import AverageKind, as_kind
from pandas_ta_adaptive.series import derive_high_low, derive_volume, prepare_values
from pandas_ta_adaptive.signals import pair_signals, price_signals
from pandas_ta_adaptive.static import STATIC_DEFAULTS, STATIC_REGISTRY
from pandas_ta_adaptive.stateful import (
    FILTER_REGISTRY,
    IndicatorResult,
    build_state_key,
    merge_params,
    replay,
)
from pandas_ta_adaptive.utils import InvalidParameterError, fingerprint, v_length

CacheInfo = namedtuple("CacheInfo", ["hits", "misses", "maxsize", "currsize"])

ArrayLike = Union[Series, np.ndarray, list]


def kind_defaults(kind: Union[AverageKind, str]) -> Dict[str, Any]:
    """Documented default parameters of *kind*."""
    name = as_kind(kind).value
    if name in STATIC_REGISTRY:
        return {"length": STATIC_DEFAULTS[name]}
    if name in COMPOSITE_REGISTRY:
        return dict(COMPOSITE_REGISTRY[name].defaults)
    return dict(FILTER_REGISTRY[name].defaults)


def _length_key(name: str) -> Optional[str]:
    if name in FILTER_REGISTRY:
        return FILTER_REGISTRY[name].length_key
    if name in COMPOSITE_REGISTRY:
        return COMPOSITE_REGISTRY[name].length_key
    return "length"


class MovingAverageResolver:
    """Dispatches ``(kind, length, series)`` and memoises the outputs.

    ``cache=False`` recomputes every request; results are identical either way.
    """

    def __init__(self, cache: bool = True, maxsize: int = 256):
        self.cache = bool(cache)
        self.maxsize = max(int(maxsize), 0)
        self._store: "OrderedDict[Tuple, Dict[str, np.ndarray]]" = OrderedDict()
        self.hits = 0
        self.misses = 0
        self._lock = threading.Lock()

    # -- public -------------------------------------------------------------

    def resolve(self, kind, length: Optional[int], series: ArrayLike, **params) -> Series:
        """Primary output of *kind* over *series* as a new Series."""
        index = series.index if isinstance(series, Series) else None
        values = prepare_values(series)
        out = self.resolve_values(kind, length, values, **params)
        return Series(out, index=index, name=str(as_kind(kind)))

    def compute(
            self, kind, series: ArrayLike, length: Optional[int] = None,
            high: Optional[ArrayLike] = None, low: Optional[ArrayLike] = None,
            volume: Optional[ArrayLike] = None, **params
    ) -> IndicatorResult:
        """Every named output of *kind* plus its signal series."""
        name = as_kind(kind).value
        index = series.index if isinstance(series, Series) else None
        values = prepare_values(series)
        high_v = prepare_values(high, "high") if high is not None else None
        low_v = prepare_values(low, "low") if low is not None else None
        indicator = FILTER_REGISTRY.get(name)
        uses_volume = indicator is not None and "volume" in indicator.inputs
        volume_v = prepare_values(volume, "volume") if volume is not None and uses_volume else None

        outputs, primary_key = self._outputs(name, length, values, high_v, low_v, volume_v, params)
        primary = outputs[primary_key]
        if indicator is not None and indicator.signal == "pair":
            other = next(k for k in outputs if k != primary_key)
            signals = pair_signals(primary, outputs[other], index)
        else:
            signals = price_signals(values, primary, index)
        return IndicatorResult.from_arrays(name, outputs, primary_key, signals, index)

    def resolve_values(self, kind, length: Optional[int], values: np.ndarray, **params) -> np.ndarray:
        """Array level ``resolve`` used by the cascades; *values* must be finite."""
        name = as_kind(kind).value
        outputs, primary_key = self._outputs(name, length, np.asarray(values, dtype=np.float64),
                                             None, None, None, params)
        return outputs[primary_key]

    def cache_info(self) -> CacheInfo:
        with self._lock:
            return CacheInfo(self.hits, self.misses, self.maxsize, len(self._store))

    def clear(self) -> None:
        with self._lock:
            self._store.clear()
            self.hits = self.misses = 0

    # -- internals ----------------------------------------------------------

    def _params(self, name: str, length: Optional[int], params: Dict[str, Any]) -> Dict[str, Any]:
        merged = kind_defaults(name)
        merged.update({k: v for k, v in params.items() if v is not None})
        key = _length_key(name)
        if length is not None and key is not None:
            merged[key] = v_length(length, key)
        if "ma_type" in merged:
            merged["ma_type"] = as_kind(merged["ma_type"])
        return merged

    def _outputs(
            self, name: str, length: Optional[int], values: np.ndarray,
            high: Optional[np.ndarray], low: Optional[np.ndarray],
            volume: Optional[np.ndarray], params: Dict[str, Any]
    ) -> Tuple[Dict[str, np.ndarray], str]:
        params = self._params(name, length, params)
        key = None
        if self.cache and self.maxsize:
            key = (
                build_state_key(name, params),
                fingerprint(values),
                fingerprint(high) if high is not None else None,
                fingerprint(low) if low is not None else None,
                fingerprint(volume) if volume is not None else None,
            )
            with self._lock:
                cached = self._store.get(key)
                if cached is not None:
                    self.hits += 1
                    self._store.move_to_end(key)
                    outputs = {k: v.copy() for k, v in cached.items()}
                else:
                    self.misses += 1
            if cached is not None:
                return outputs, self._primary_key(name, params)

        # computed outside the lock: cascades re-enter _outputs for their stages
        outputs = self._dispatch(name, values, high, low, volume, params)
        if key is not None:
            with self._lock:
                self._store[key] = {k: v.copy() for k, v in outputs.items()}
                self._store.move_to_end(key)
                while len(self._store) > self.maxsize:
                    self._store.popitem(last=False)
        return outputs, self._primary_key(name, params)

    def _primary_key(self, name: str, params: Dict[str, Any]) -> str:
        if name in STATIC_REGISTRY:
            return name.capitalize()
        if name in COMPOSITE_REGISTRY:
            return COMPOSITE_REGISTRY[name].output_names[0]
        indicator = FILTER_REGISTRY[name]
        return indicator.output_names(params)[indicator.primary]

    def _dispatch(
            self, name: str, values: np.ndarray,
            high: Optional[np.ndarray], low: Optional[np.ndarray],
            volume: Optional[np.ndarray], params: Dict[str, Any]
    ) -> Dict[str, np.ndarray]:
        if name in STATIC_REGISTRY:
            return STATIC_REGISTRY[name](values, params["length"])
        if name in COMPOSITE_REGISTRY:
            return COMPOSITE_REGISTRY[name].compute(self, values, params)
        indicator = FILTER_REGISTRY.get(name)
        if indicator is None:
            raise InvalidParameterError(f"No implementation registered for '{name}'")

        inputs = {"value": values}
        if "high" in indicator.inputs:
            inputs["high"], inputs["low"] = derive_high_low(values, high, low)
        if "volume" in indicator.inputs:
            inputs["volume"] = derive_volume(values, volume)
        outputs, _ = replay(name, inputs, merge_params(indicator, params))
        return outputs


# ---------------------------------------------------------------------------
# Module level entry points (shared resolver)
# ---------------------------------------------------------------------------

_RESOLVER = MovingAverageResolver()


def resolve(kind, length: Optional[int], series: ArrayLike, **params) -> Series:
    """Primary output of *kind* with window *length* over *series*."""
    return _RESOLVER.resolve(kind, length, series, **params)


def compute(kind, series: ArrayLike, length: Optional[int] = None,
            high: Optional[ArrayLike] = None, low: Optional[ArrayLike] = None,
            volume: Optional[ArrayLike] = None, **params) -> IndicatorResult:
    """Full ``IndicatorResult`` of *kind* over *series*."""
    return _RESOLVER.compute(kind, series, length=length, high=high, low=low, volume=volume, **params)


def cache_info() -> CacheInfo:
    return _RESOLVER.cache_info()


def clear_cache() -> None:
    _RESOLVER.clear()


__all__ = [
    "CacheInfo",
    "MovingAverageResolver",
    "kind_defaults",
    "resolve",
    "compute",
    "cache_info",
    "clear_cache",
]
