# -*- coding: utf-8 -*-
from importlib.metadata import PackageNotFoundError, version as _dist_version

try:
    version = _dist_version("pandas_ta_adaptive")
except PackageNotFoundError:
    version = "0.0.0"

from pandas_ta_adaptive.maps import AverageKind, InputName, Signal, as_kind
from pandas_ta_adaptive.utils import *
from pandas_ta_adaptive.utils import __all__ as utils_all
from pandas_ta_adaptive.stateful import *
from pandas_ta_adaptive.stateful import __all__ as stateful_all
from pandas_ta_adaptive.static import *
from pandas_ta_adaptive.static import __all__ as static_all
from pandas_ta_adaptive.series import select_input, prepare_values, derive_high_low, derive_volume
from pandas_ta_adaptive.signals import compare_signal, signal_series
from pandas_ta_adaptive.composite import COMPOSITE_REGISTRY, t3_coefficients, hull_lengths

# Single entry point for every kind: ta.resolve("kama", 10, close)
from pandas_ta_adaptive.resolver import (
    CacheInfo,
    MovingAverageResolver,
    cache_info,
    clear_cache,
    compute,
    kind_defaults,
    resolve,
)

# Enable "adaptive" DataFrame Extension
from pandas_ta_adaptive.core import AdaptiveIndicators

__all__ = [
    "version",
    "AverageKind",
    "InputName",
    "Signal",
    "as_kind",
    "select_input",
    "prepare_values",
    "derive_high_low",
    "derive_volume",
    "compare_signal",
    "signal_series",
    "COMPOSITE_REGISTRY",
    "t3_coefficients",
    "hull_lengths",
    "CacheInfo",
    "MovingAverageResolver",
    "cache_info",
    "clear_cache",
    "compute",
    "kind_defaults",
    "resolve",
    "AdaptiveIndicators",
]

__all__ += utils_all + stateful_all + static_all
