# -*- coding: utf-8 -*-
from __future__ import annotations

from typing import Optional

from pandas import DataFrame, Series
from pandas.api.extensions import register_dataframe_accessor

from pandas_ta_adaptive.maps import as_kind
from pandas_ta_adaptive.resolver import MovingAverageResolver, _RESOLVER
from pandas_ta_adaptive.series import _column, _has, select_input
from pandas_ta_adaptive.stateful import IndicatorResult


@register_dataframe_accessor("adaptive")
class AdaptiveIndicators:
    """DataFrame extension: ``df.adaptive(kind, length)``.

    The input column comes from ``input_name`` (default: typical price when
    high, low and close exist, otherwise close).  Range based filters
    (ama, aema, afema, als, frama) use the frame's high/low columns and uma
    its volume column when present.

    Examples:
        df.adaptive("kama", 10)                      # primary Series
        df.adaptive.compute("mama").to_frame()       # every output + Signal
        df.adaptive("hma", 20, append=True)          # adds column "HMA_20"
    """

    def __init__(self, pandas_obj: DataFrame):
        self._df = pandas_obj
        self.resolver: MovingAverageResolver = _RESOLVER

    def __call__(self, kind, length: Optional[int] = None, input_name: Optional[str] = None,
                 append: bool = False, **kwargs) -> Series:
        result = self.compute(kind, length=length, input_name=input_name, **kwargs)
        primary = result.primary.copy()
        primary.name = self._column_name(result.name, length)
        if append:
            self._df[primary.name] = primary
        return primary

    def compute(self, kind, length: Optional[int] = None, input_name: Optional[str] = None,
                append: bool = False, **kwargs) -> IndicatorResult:
        """Full ``IndicatorResult``; ``append=True`` adds every output column."""
        values = select_input(self._df, input_name)
        high, low = self._high_low()
        volume = _column(self._df, "volume") if _has(self._df, "volume") else None
        result = self.resolver.compute(kind, values, length=length, high=high, low=low,
                                       volume=volume, **kwargs)
        if append:
            suffix = self._column_name("", length)
            for key, series in result.outputs.items():
                self._df[f"{key.upper()}{suffix}"] = series
        return result

    def _high_low(self):
        if not _has(self._df, "high", "low"):
            return None, None
        return _column(self._df, "high"), _column(self._df, "low")

    @staticmethod
    def _column_name(name: str, length: Optional[int]) -> str:
        name = str(as_kind(name)).upper() if name else ""
        return f"{name}_{length}" if length is not None else name
