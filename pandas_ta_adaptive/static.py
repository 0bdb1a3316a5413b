# -*- coding: utf-8 -*-
"""Static weighted-average leaves.

Fixed per-lag weights, no feedback.  Out-of-range lags contribute 0 while
the weight still counts in the denominator (left zero padding); SMA instead
averages whatever samples are available.
"""
from __future__ import annotations

from math import sqrt
from typing import Callable, Dict

import numpy as np
from numba import njit

from pandas_ta_adaptive.utils import v_length


@njit(cache=True)
def nb_weighted_ma(x, weights):
    # weights[j] applies to x[i - j]
    n = x.size
    m = weights.size
    total = 0.0
    for j in range(m):
        total += weights[j]
    result = np.zeros(n)
    if total == 0.0:
        return result
    for i in range(n):
        acc = 0.0
        for j in range(m):
            if i >= j:
                acc += x[i - j] * weights[j]
        result[i] = acc / total
    return result


@njit(cache=True)
def nb_sma(x, n):
    m = x.size
    result = np.zeros(m)
    acc = 0.0
    for i in range(m):
        acc += x[i]
        if i >= n:
            acc -= x[i - n]
        result[i] = acc / min(i + 1, n)
    return result


def linear_weight(length: int, j: int) -> float:
    return float(length - j)


def fibonacci_weight(length: int, j: int) -> float:
    phi = (1.0 + sqrt(5.0)) / 2.0
    # Binet: F(n) with n = length - j, so lag 0 gets F(length)
    n = length - j
    return (phi ** n - (-1.0 / phi) ** n) / sqrt(5.0)


def weighted_ma(
        values: np.ndarray, length: int, weight_fn: Callable[[int, int], float]
) -> np.ndarray:
    """Convolve *values* with ``weight_fn(length, lag)`` for lags ``0..length-1``."""
    length = v_length(length)
    weights = np.array([weight_fn(length, j) for j in range(length)], dtype=np.float64)
    return nb_weighted_ma(np.asarray(values, dtype=np.float64), weights)


def sma(values: np.ndarray, length: int) -> Dict[str, np.ndarray]:
    length = v_length(length)
    return {"Sma": nb_sma(np.asarray(values, dtype=np.float64), length)}


def wma(values: np.ndarray, length: int) -> Dict[str, np.ndarray]:
    return {"Wma": weighted_ma(values, length, linear_weight)}


def lwma(values: np.ndarray, length: int) -> Dict[str, np.ndarray]:
    return {"Lwma": weighted_ma(values, length, linear_weight)}


def fwma(values: np.ndarray, length: int) -> Dict[str, np.ndarray]:
    return {"Fwma": weighted_ma(values, length, fibonacci_weight)}


# kind -> fn(values, length) -> {key: values}
STATIC_REGISTRY: Dict[str, Callable[[np.ndarray, int], Dict[str, np.ndarray]]] = {
    "sma": sma,
    "wma": wma,
    "lwma": lwma,
    "fwma": fwma,
}

STATIC_DEFAULTS: Dict[str, int] = {"sma": 14, "wma": 14, "lwma": 14, "fwma": 14}


__all__ = [
    "nb_weighted_ma",
    "nb_sma",
    "linear_weight",
    "fibonacci_weight",
    "weighted_ma",
    "sma",
    "wma",
    "lwma",
    "fwma",
    "STATIC_REGISTRY",
    "STATIC_DEFAULTS",
]
