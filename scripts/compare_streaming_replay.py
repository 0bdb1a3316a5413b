#!/usr/bin/env python3
"""Compare whole-series resolver outputs vs streaming incremental outputs.

Every recursive kind is seeded from the first ``--split`` rows, then fed the
remaining rows one at a time through its ``update`` function.  The streamed
tail is compared to ``resolve`` over the full series.
"""
from __future__ import annotations

import argparse
import copy
import os
import sys
from typing import List

ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

import numpy as np
import pandas as pd
import pandas_ta_adaptive as ta
from pandas_ta_adaptive.series import derive_high_low


def make_ohlcv(rows: int, seed: int) -> pd.DataFrame:
    rng = np.random.default_rng(seed)
    idx = pd.date_range("2025-01-01", periods=rows, freq="1min")
    base = 100 + rng.standard_normal(rows).cumsum()
    close = base + rng.normal(0, 0.2, rows)
    open_ = base + rng.normal(0, 0.2, rows)
    high = np.maximum(open_, close) + rng.random(rows) * 0.5
    low = np.minimum(open_, close) - rng.random(rows) * 0.5
    volume = rng.integers(100, 1000, rows)
    return pd.DataFrame(
        {
            "open": open_,
            "high": high,
            "low": low,
            "close": close,
            "volume": volume,
        },
        index=idx,
    )


def compare_frames(ref: pd.DataFrame, test: pd.DataFrame, eps: float) -> pd.DataFrame:
    diff = (test - ref).abs()
    rel = diff / (ref.abs() + eps)
    return pd.DataFrame(
        {
            "nan_ref": ref.isna().sum(),
            "nan_test": test.isna().sum(),
            "max_abs": diff.max(),
            "mean_abs": diff.mean(),
            "mean_rel": rel.mean(),
        }
    )


def parse_kinds(value: str) -> List[str]:
    if not value:
        return ta.supported_kinds()
    return [v.strip() for v in value.split(",") if v.strip()]


def main() -> None:
    ap = argparse.ArgumentParser()
    ap.add_argument("--rows", type=int, default=2000)
    ap.add_argument("--split", type=int, default=1500)
    ap.add_argument("--length", type=int, default=14)
    ap.add_argument("--seed", type=int, default=11)
    ap.add_argument("--eps", type=float, default=1e-12)
    ap.add_argument("--kinds", type=str, default="", help="comma-separated kinds (default: all)")
    args = ap.parse_args()

    if args.split >= args.rows:
        raise SystemExit("--split must be < --rows")

    df = make_ohlcv(args.rows, args.seed)
    close = df["close"].to_numpy(dtype=np.float64)
    high, low = derive_high_low(close, df["high"].to_numpy(), df["low"].to_numpy())
    volume = df["volume"].to_numpy(dtype=np.float64)
    inputs = {"value": close, "high": high, "low": low, "volume": volume}
    resolver = ta.MovingAverageResolver(cache=False)

    ref_cols, test_cols = {}, {}
    for kind in parse_kinds(args.kinds):
        indicator = ta.get_indicator(kind)
        length = args.length if indicator.length_key else None

        # Whole-series reference
        ref = resolver.compute(kind, df["close"], length=length, high=df["high"], low=df["low"],
                               volume=df["volume"])

        # Seed + incremental
        params = {indicator.length_key: args.length} if indicator.length_key else {}
        params = ta.merge_params(indicator, params)
        seed_inputs = {k: inputs[k][: args.split] for k in indicator.inputs}
        state = ta.replay_state(kind, seed_inputs, params)
        state = copy.deepcopy(state)

        names = indicator.output_names(params)
        streamed = {name: [] for name in names}
        for i in range(args.split, args.rows):
            bar = {k: float(inputs[k][i]) for k in indicator.inputs}
            values, state = indicator.update(state, bar, params)
            for name, v in zip(names, values):
                streamed[name].append(v)

        tail_idx = df.index[args.split:]
        for name in names:
            col = f"{kind}.{name}"
            ref_cols[col] = ref.outputs[name].loc[tail_idx]
            test_cols[col] = pd.Series(streamed[name], index=tail_idx)

    summary = compare_frames(pd.DataFrame(ref_cols), pd.DataFrame(test_cols), args.eps)
    mismatched = summary[summary["max_abs"] > 0]

    print("[i] rows:", args.rows)
    print("[i] split index:", args.split)
    print("[i] compare rows:", args.rows - args.split)
    print("[i] output columns:", len(summary))
    if len(mismatched):
        print(f"[!] {len(mismatched)} column(s) differ")
    print("\nTop 15 by max_abs:")
    print(summary.sort_values("max_abs", ascending=False).head(15))


if __name__ == "__main__":
    main()
