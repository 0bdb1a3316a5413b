# -*- coding: utf-8 -*-
"""Series store helpers: default-input selection and input hygiene."""
from __future__ import annotations

import warnings
from typing import Optional, Tuple, Union

import numpy as np
from pandas import DataFrame, Series

from pandas_ta_adaptive.maps import InputName
from pandas_ta_adaptive.utils import DataQualityWarning, InvalidParameterError


def _column(df: DataFrame, name: str) -> Series:
    for col in (name, name.capitalize(), name.upper()):
        if col in df.columns:
            return df[col].astype(np.float64)
    raise InvalidParameterError(f"Input column '{name}' not found in DataFrame")


def _has(df: DataFrame, *names: str) -> bool:
    cols = {str(c).lower() for c in df.columns}
    return all(n in cols for n in names)


def select_input(
        df: DataFrame, input_name: Union[InputName, str, None] = None, length: int = 14
) -> Series:
    """Pick the input series of *df*.

    With no explicit choice the typical price ``(h + l + c) / 3`` is used when
    high / low / close are present, otherwise close.  *length* is the window
    of midpoint and midprice.
    """
    if input_name is None:
        input_name = InputName.TYPICAL_PRICE if _has(df, "high", "low", "close") else InputName.CLOSE
    try:
        name = InputName(str(input_name).lower())
    except ValueError:
        raise InvalidParameterError(f"Unknown input name: {input_name!r}") from None

    if name in (InputName.CLOSE, InputName.OPEN, InputName.HIGH, InputName.LOW, InputName.VOLUME):
        result = _column(df, name.value)
    elif name is InputName.TYPICAL_PRICE:
        result = (_column(df, "high") + _column(df, "low") + _column(df, "close")) / 3.0
    elif name is InputName.FULL_TYPICAL_PRICE:
        result = (_column(df, "open") + _column(df, "high") + _column(df, "low") + _column(df, "close")) / 4.0
    elif name is InputName.MEDIAN_PRICE:
        result = (_column(df, "high") + _column(df, "low")) / 2.0
    elif name is InputName.WEIGHTED_CLOSE:
        result = (_column(df, "high") + _column(df, "low") + 2.0 * _column(df, "close")) / 4.0
    elif name is InputName.AVERAGE_PRICE:
        result = (_column(df, "open") + _column(df, "close")) / 2.0
    elif name is InputName.MIDPRICE:
        highest = _column(df, "high").rolling(length, min_periods=1).max()
        result = (highest + _column(df, "low").rolling(length, min_periods=1).min()) / 2.0
    else:  # midpoint
        close = _column(df, "close")
        result = (close.rolling(length, min_periods=1).max() + close.rolling(length, min_periods=1).min()) / 2.0
    result.name = name.value
    return result


def prepare_values(series: Union[Series, np.ndarray, list], name: str = "input") -> np.ndarray:
    """float64 copy of *series*; NaN / inf samples become 0 with a warning."""
    values = np.array(series, dtype=np.float64, copy=True).ravel()
    bad = ~np.isfinite(values)
    if bad.any():
        warnings.warn(
            f"[!] {name}: {int(bad.sum())} non-finite value(s) replaced by 0",
            DataQualityWarning,
            stacklevel=3,
        )
        values[bad] = 0.0
    return values


def rolling_high_low(values: np.ndarray, length: int) -> Tuple[np.ndarray, np.ndarray]:
    """Highest / lowest of the last *length* available samples."""
    s = Series(values)
    highest = s.rolling(length, min_periods=1).max().to_numpy()
    lowest = s.rolling(length, min_periods=1).min().to_numpy()
    return highest, lowest


def derive_high_low(
        values: np.ndarray,
        high: Optional[np.ndarray] = None,
        low: Optional[np.ndarray] = None,
) -> Tuple[np.ndarray, np.ndarray]:
    """High / low series that belong to *values*.

    Decided bar by bar: where ``low[i] <= values[i] <= high[i]`` the real
    high / low are used, elsewhere (e.g. when the input is itself another
    indicator's output) a 2-bar rolling max / min of the input stands in.
    Each bar only looks at bars ``<= i``.
    """
    fallback_high, fallback_low = rolling_high_low(values, 2)
    if high is None or low is None or not len(high) == len(values) == len(low):
        return fallback_high, fallback_low
    high = np.asarray(high, dtype=np.float64)
    low = np.asarray(low, dtype=np.float64)
    inside = (low <= values) & (values <= high)
    return np.where(inside, high, fallback_high), np.where(inside, low, fallback_low)


def derive_volume(values: np.ndarray, volume: Optional[np.ndarray] = None) -> np.ndarray:
    """Volume series that belongs to *values*; unit volume when none is given."""
    if volume is None or len(volume) != len(values):
        return np.ones(len(values))
    return np.asarray(volume, dtype=np.float64)


__all__ = ["select_input", "prepare_values", "rolling_high_low", "derive_high_low", "derive_volume"]
