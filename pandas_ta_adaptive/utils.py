# -*- coding: utf-8 -*-
"""pandas-ta adaptive – numeric guards, errors and small helpers.

Every recursive filter relies on these guards: a sample that would be
NaN/inf (or raise) degrades to ``0`` instead, so a poisoned value never
enters the feedback path of a filter.
"""
from __future__ import annotations

import hashlib
import math
import sys
from typing import Any

import numpy as np

FLOAT_MAX = sys.float_info.max


class InvalidParameterError(ValueError):
    """Raised at configuration time for lengths < 1, unknown kinds, etc."""


class DataQualityWarning(UserWarning):
    """Emitted when non-finite input samples are replaced by 0."""


# ---------------------------------------------------------------------------
# Guards
# ---------------------------------------------------------------------------

def nz(x: float) -> float:
    """NaN / inf -> 0.0"""
    return x if math.isfinite(x) else 0.0


def safe_div(num: float, den: float) -> float:
    return nz(num / den) if den != 0 else 0.0


def safe_sqrt(x: float) -> float:
    return math.sqrt(x) if x >= 0 else 0.0


def safe_log(x: float) -> float:
    return math.log(x) if x > 0 else 0.0


def safe_exp(x: float) -> float:
    # exp(100) still fits a double, exp(710) does not
    return math.exp(min(100.0, x))


def safe_pow(x: float, y: float) -> float:
    """Power with overflow mapped to float max and domain errors to 0."""
    try:
        return nz(math.pow(x, y))
    except OverflowError:
        return FLOAT_MAX
    except ValueError:
        # negative base with a fractional exponent
        return 0.0


def safe_atan(x: float) -> float:
    return math.atan(x) if math.isfinite(x) else 0.0


def min_or_max(value: float, max_value: float, min_value: float) -> float:
    """Clamp *value* into ``[min_value, max_value]``."""
    return min(max(value, min_value), max_value)


def clamp_length(value: int, lower: int = 2, upper: int = 530) -> int:
    """Derived window lengths (Hull, FRAMA half period) stay in 2..530."""
    return int(min(max(value, lower), upper))


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------

def v_length(value: Any, name: str = "length") -> int:
    """Parse a window length; anything below 1 is an error."""
    try:
        length = int(value)
    except (TypeError, ValueError):
        raise InvalidParameterError(f"{name} must be an integer, got {value!r}") from None
    if length < 1:
        raise InvalidParameterError(f"{name} must be >= 1, got {length}")
    return length


def fingerprint(values: np.ndarray) -> str:
    """Content hash of a float64 array, used as a series identity."""
    data = np.ascontiguousarray(values, dtype=np.float64)
    digest = hashlib.blake2b(data.tobytes(), digest_size=16)
    digest.update(str(data.shape).encode())
    return digest.hexdigest()


__all__ = [
    "FLOAT_MAX",
    "InvalidParameterError",
    "DataQualityWarning",
    "nz",
    "safe_div",
    "safe_sqrt",
    "safe_log",
    "safe_exp",
    "safe_pow",
    "safe_atan",
    "min_or_max",
    "clamp_length",
    "v_length",
    "fingerprint",
]
