# -*- coding: utf-8 -*-
"""Signal projector: map a (current, previous) delta pair to a Signal."""
from __future__ import annotations

from typing import Optional

import numpy as np
from pandas import Index, Series

from pandas_ta_adaptive.maps import Signal


def compare_signal(current: float, previous: float, is_reversed: bool = False) -> Signal:
    """Classify a delta against its previous value.

    Positive and rising -> STRONG_BUY, negative and falling -> STRONG_SELL,
    otherwise the sign alone decides BUY / SELL; zero is NEUTRAL.
    ``is_reversed`` mirrors the classification (oscillators where low is bullish).
    """
    if is_reversed:
        current, previous = -current, -previous
    if current > 0 and current > previous:
        return Signal.STRONG_BUY
    if current < 0 and current < previous:
        return Signal.STRONG_SELL
    if current > 0:
        return Signal.BUY
    if current < 0:
        return Signal.SELL
    return Signal.NEUTRAL


def signal_series(
        delta: np.ndarray, index: Optional[Index] = None, is_reversed: bool = False
) -> Series:
    """Project a delta series into signals; the delta before bar 0 is 0."""
    prev = 0.0
    out = []
    for value in delta:
        value = float(value)
        out.append(compare_signal(value, prev, is_reversed))
        prev = value
    return Series(out, index=index, dtype=object, name="Signal")


def price_signals(
        values: np.ndarray, primary: np.ndarray, index: Optional[Index] = None
) -> Series:
    """Signals of ``input - output`` (price crossing its average)."""
    delta = np.asarray(values, dtype=np.float64) - np.asarray(primary, dtype=np.float64)
    return signal_series(delta, index)


def pair_signals(
        fast: np.ndarray, slow: np.ndarray, index: Optional[Index] = None
) -> Series:
    """Signals of ``fast - slow`` (e.g. MAMA against FAMA)."""
    delta = np.asarray(fast, dtype=np.float64) - np.asarray(slow, dtype=np.float64)
    return signal_series(delta, index)


__all__ = ["compare_signal", "signal_series", "price_signals", "pair_signals"]
