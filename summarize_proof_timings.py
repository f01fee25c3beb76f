#!/usr/bin/env python3

"""
Usage: python3 summarize_proof_timings.py timings.csv [other.csv]
Usage Example: python3 summarize_proof_timings.py before.csv after.csv
"""


import argparse
import sys
from typing import List, Optional

import pandas as pd

from timing_sink import read_timing_matrix

STAT_COLS = ["runs", "failures", "mean", "std", "min", "max"]


def die(msg: str) -> None:
    print(f"ERROR: {msg}", file=sys.stderr)
    sys.exit(2)


def read_timings(path: str) -> pd.DataFrame:
    """Long form of a timing file: one row per (proof, iteration), NaN for failed runs."""
    try:
        matrix = read_timing_matrix(path)
    except (OSError, ValueError) as e:
        die(f"{path}: cannot read timings ({e})")
    rows = [
        {"proof": proof, "iteration": i, "seconds": s}
        for proof, cells in matrix.items()
        for i, s in enumerate(cells)
    ]
    df = pd.DataFrame(rows, columns=["proof", "iteration", "seconds"])
    df["seconds"] = pd.to_numeric(df["seconds"], errors="coerce")
    return df


def per_proof_stats(df: pd.DataFrame) -> pd.DataFrame:
    if df.empty:
        return pd.DataFrame(columns=STAT_COLS).rename_axis("proof")
    g = df.groupby("proof")["seconds"]
    out = pd.DataFrame(
        {
            "runs": g.size(),
            "failures": g.apply(lambda s: int(s.isna().sum())),
            "mean": g.mean(),
            "std": g.std(),
            "min": g.min(),
            "max": g.max(),
        }
    )
    return out[STAT_COLS].sort_index()


def compare(stats_a: pd.DataFrame, stats_b: pd.DataFrame, label_a: str, label_b: str) -> pd.DataFrame:
    shared = stats_a.index.intersection(stats_b.index)
    if len(shared) == 0:
        die("No shared proofs found between the two timing files.")
    a = stats_a.loc[shared, ["mean"]].rename(columns={"mean": f"mean({label_a})"})
    b = stats_b.loc[shared, ["mean"]].rename(columns={"mean": f"mean({label_b})"})
    summary = a.join(b, how="inner")
    summary[f"delta({label_b}-{label_a})"] = summary[f"mean({label_b})"] - summary[f"mean({label_a})"]
    return summary.sort_index()


def safe_label(path: str) -> str:
    s = str(path).strip()
    s = s.replace("\n", " ").replace("\r", " ")
    s = s.replace(" ", "_")
    return s


def main(path_a: str, path_b: Optional[str] = None) -> None:
    stats_a = per_proof_stats(read_timings(path_a))

    pd.set_option("display.max_rows", 500)
    pd.set_option("display.width", 160)

    if path_b is None:
        print(stats_a.to_string(float_format=lambda x: f"{x:.6g}"))
        return

    stats_b = per_proof_stats(read_timings(path_b))
    summary = compare(stats_a, stats_b, safe_label(path_a), safe_label(path_b))
    print(summary.to_string(float_format=lambda x: f"{x:.6g}"))


def cli(argv: Optional[List[str]] = None) -> None:
    ap = argparse.ArgumentParser()
    ap.add_argument("fileA")
    ap.add_argument("fileB", nargs="?", default=None)
    args = ap.parse_args(argv)
    main(args.fileA, args.fileB)


if __name__ == "__main__":
    cli()
