"""
Pytest fixtures for the pandas-ta adaptive tests.
"""

import sys
from pathlib import Path

import numpy as np
import pandas as pd
import pytest

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))


def make_ohlcv(rows: int = 400, seed: int = 7) -> pd.DataFrame:
    """Random-walk OHLCV frame with a daily index."""
    rng = np.random.default_rng(seed)
    close = 100.0 * np.exp(np.cumsum(rng.normal(0.0003, 0.015, rows)))
    high = close * (1 + np.abs(rng.normal(0, 0.006, rows)))
    low = close * (1 - np.abs(rng.normal(0, 0.006, rows)))
    open_ = low + rng.uniform(0, 1, rows) * (high - low)
    volume = rng.integers(100_000, 1_000_000, rows).astype(float)
    index = pd.date_range("2024-01-01", periods=rows, freq="D")
    return pd.DataFrame(
        {"open": open_, "high": high, "low": low, "close": close, "volume": volume},
        index=index,
    )


@pytest.fixture
def ohlcv_df():
    """400 bars of random-walk OHLCV data."""
    return make_ohlcv()


@pytest.fixture
def close_series(ohlcv_df):
    return ohlcv_df["close"]


@pytest.fixture
def random_walk():
    """Plain numpy random walk around 50."""
    rng = np.random.default_rng(42)
    return 50.0 + np.cumsum(rng.normal(0, 1, 300))


@pytest.fixture
def constant_values():
    return np.full(600, 10.0)


@pytest.fixture
def resolver():
    """Fresh resolver with its own cache."""
    from pandas_ta_adaptive.resolver import MovingAverageResolver

    return MovingAverageResolver()
