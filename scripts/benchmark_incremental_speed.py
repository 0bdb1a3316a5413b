#!/usr/bin/env python3
"""Benchmark incremental update speed of the recursive filters.

Measures how long it takes to bring a filter up to date as total history grows.
Three modes:
  - full:   replay the whole history on every update (cost grows with history)
  - tail:   resume from a saved state and update only the tail rows (~O(tail))
  - cached: resolve the full history twice through a caching resolver
"""
from __future__ import annotations

import argparse
import copy
import os
import sys
from time import perf_counter
from typing import List

ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

import numpy as np
import pandas as pd
import pandas_ta_adaptive as ta


DEFAULT_KINDS = ["ema", "kama", "vidya", "frama", "jma", "mama", "uma", "als", "ssf3", "gauss", "ks"]


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


def parse_list(value: str) -> List[int]:
    return [int(v.strip()) for v in value.split(",") if v.strip()]


def parse_kinds(value: str | None) -> List[str]:
    if not value:
        return list(DEFAULT_KINDS)
    return [v.strip() for v in value.split(",") if v.strip()]


def time_call(fn, runs: int) -> float:
    times = []
    for _ in range(max(runs, 1)):
        start = perf_counter()
        fn()
        times.append(perf_counter() - start)
    return sum(times) / len(times)


def bar_inputs(df: pd.DataFrame, indicator) -> dict:
    inputs = {"value": df["close"].to_numpy(dtype=np.float64)}
    if "high" in indicator.inputs:
        inputs["high"] = df["high"].to_numpy(dtype=np.float64)
        inputs["low"] = df["low"].to_numpy(dtype=np.float64)
    if "volume" in indicator.inputs:
        inputs["volume"] = df["volume"].to_numpy(dtype=np.float64)
    return inputs


def main() -> None:
    ap = argparse.ArgumentParser()
    ap.add_argument(
        "--sizes",
        type=str,
        default="10000,50000,100000",
        help="comma-separated total row counts",
    )
    ap.add_argument("--tail", type=int, default=1, help="new rows per update")
    ap.add_argument("--seed", type=int, default=7)
    ap.add_argument("--kinds", type=str, default="", help="comma-separated kinds to benchmark")
    ap.add_argument("--length", type=int, default=14)
    ap.add_argument("--warmup", type=int, default=1, help="warmup runs (not timed)")
    ap.add_argument("--runs", type=int, default=3, help="timed runs")
    ap.add_argument(
        "--mode",
        type=str,
        default="all",
        choices=("full", "tail", "cached", "all"),
        help="benchmark mode",
    )
    args = ap.parse_args()

    sizes = parse_list(args.sizes)
    kinds = parse_kinds(args.kinds)

    print(f"[i] sizes: {sizes}")
    print(f"[i] kinds: {kinds}")
    print(f"[i] tail: {args.tail}")
    print(f"[i] runs: {args.runs} (warmup: {args.warmup})")
    print(f"[i] mode: {args.mode}")

    for rows in sizes:
        if rows <= args.tail + 1:
            print(f"[i] skip rows={rows} (need > tail+1)")
            continue

        df = make_ohlcv(rows, args.seed)
        split = rows - args.tail

        for kind in kinds:
            indicator = ta.get_indicator(kind)
            params = {indicator.length_key: args.length} if indicator.length_key else {}
            params = ta.merge_params(indicator, params)
            full_inputs = bar_inputs(df, indicator)
            hist_inputs = {k: v[:split] for k, v in full_inputs.items()}
            tail_bars = [
                {k: float(v[i]) for k, v in full_inputs.items()} for i in range(split, rows)
            ]

            # Seed state from history (not timed)
            base_state = ta.replay_state(kind, hist_inputs, params)

            def run_full():
                ta.replay(kind, full_inputs, params)

            def run_tail():
                state = copy.deepcopy(base_state)
                for bar in tail_bars:
                    _, state = indicator.update(state, bar, params)

            def run_cached():
                resolver = ta.MovingAverageResolver()
                resolver.resolve(kind, indicator.length_key and args.length, df["close"])
                resolver.resolve(kind, indicator.length_key and args.length, df["close"])

            modes = {"full": run_full, "tail": run_tail, "cached": run_cached}
            selected = list(modes) if args.mode == "all" else [args.mode]

            for _ in range(max(args.warmup, 0)):
                for name in selected:
                    modes[name]()

            for name in selected:
                avg = time_call(modes[name], args.runs)
                print(
                    f"[{name}] kind={kind} rows={rows} tail={args.tail} avg_s={avg:.6f} "
                    f"s_per_tail={avg / max(args.tail, 1):.6f}"
                )


if __name__ == "__main__":
    main()
