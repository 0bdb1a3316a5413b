# -*- coding: utf-8 -*-
"""pandas-ta adaptive.stateful – recursive filters with explicit state.

Category modules populate FILTER_REGISTRY at import time.  This package
re-exports it plus the shared base API and the estimator helpers.
"""
from __future__ import annotations

# Base API (always available)
from ._base import (
    EMAState,
    WindowState,
    FilterIndicator,
    IndicatorResult,
    FILTER_REGISTRY,
    ema_make,
    wilder_make,
    ema_update_raw,
    get_indicator,
    merge_params,
    replay,
    replay_state,
    build_state_key,
    supported_kinds,
    _param,
    _as_int,
    _as_float,
    _as_length,
)

# ---------------------------------------------------------------------------
# Category modules – each populates the shared registry on import
# ---------------------------------------------------------------------------
from . import _overlap      # noqa: F401  ema, wwma, kama, vidya, uma, …
from . import _poles        # noqa: F401  ssf2, butter2, ssf3, butter3, gauss
from . import _kalman       # noqa: F401  pkf, ks
from . import _cycle        # noqa: F401  mama
from . import _regression   # noqa: F401  als, af

from ._estimators import (
    PAD_POLICIES,
    efficiency_ratio,
    chande_momentum,
    fractal_alpha,
    volatility_multiplier,
    true_range,
    correlation,
)
from ._poles import (
    ssf2_coefficients,
    butter2_coefficients,
    ssf3_coefficients,
    butter3_coefficients,
    gaussian_coefficients,
)
from ._cycle import CycleEstimate, cycle_estimate

__all__ = [
    # base
    "EMAState",
    "WindowState",
    "FilterIndicator",
    "IndicatorResult",
    "FILTER_REGISTRY",
    "ema_make",
    "wilder_make",
    "ema_update_raw",
    "get_indicator",
    "merge_params",
    "replay",
    "replay_state",
    "build_state_key",
    "supported_kinds",
    # estimators
    "PAD_POLICIES",
    "efficiency_ratio",
    "chande_momentum",
    "fractal_alpha",
    "volatility_multiplier",
    "true_range",
    "correlation",
    "CycleEstimate",
    "cycle_estimate",
    # pole coefficients
    "ssf2_coefficients",
    "butter2_coefficients",
    "ssf3_coefficients",
    "butter3_coefficients",
    "gaussian_coefficients",
]
