#!/usr/bin/env python3
"""
Time every CBMC proof under a proofs directory, several times, a few proofs at a time.

Usage: python3 benchmark_proofs.py <proofs-dir> -n 5 -j 8 -o timings.csv
Usage Example: python3 benchmark_proofs.py aws-c-common/verification/cbmc/proofs -n 3 -j 4

Output: one line per proof, `name,d1,...,dN`, durations in seconds of `make result`.
Exit codes of make are ignored; run the full proof suite once beforehand to be sure every
proof passes, otherwise a fast failure is indistinguishable from a fast success.
"""

import argparse
import sys
import time
from pathlib import Path
from typing import List, Optional

from proof_catalog import discover_proofs, load_skip_list, select_proofs
from proof_errors import DiscoveryError, SinkWriteError
from proof_invoker import DEFAULT_MEASURE_TARGET, DEFAULT_PREPARE_TARGETS, ProofCommand, ProofInvoker
from proof_scheduler import ProofScheduler
from timing_sink import TimingSink


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Benchmark CBMC proof runtimes over repeated runs.")
    parser.add_argument("proofs_dir", type=str, help="Directory whose subdirectories (with a Makefile) are proofs.")
    parser.add_argument("-n", "--iterations", type=int, default=1, help="Timed runs per proof.")
    parser.add_argument("-j", "--parallel-jobs", type=int, default=4, help="Proofs running at the same time.")
    parser.add_argument("-o", "--output", type=str, default="proof_timings.csv", help="Path to output CSV file.")

    parser.add_argument("--make", type=str, default="make", help="make executable.")
    parser.add_argument(
        "--prepare-target",
        action="append",
        default=None,
        help=f"Untimed make target run before each timed run (repeatable; default: {' '.join(DEFAULT_PREPARE_TARGETS)}).",
    )
    parser.add_argument("--target", type=str, default=DEFAULT_MEASURE_TARGET, help="Timed make target.")

    parser.add_argument("--proof-id", action="append", default=[], help="Only time this proof (repeatable).")
    parser.add_argument("--skip-proof", action="append", default=[])
    parser.add_argument(
        "--skip-proof-file",
        action="append",
        default=[],
        help="Path to file with proofs to skip (one per line; supports # comments). Can be repeated.",
    )
    return parser


def run_benchmark(args: argparse.Namespace) -> int:
    if args.iterations < 1 or args.parallel_jobs < 1:
        print("[ERROR] --iterations and --parallel-jobs must be at least 1", file=sys.stderr)
        return 2

    proofs_dir = Path(args.proofs_dir).expanduser().resolve()
    output_path = Path(args.output).expanduser().resolve()

    skip = set(args.skip_proof or [])
    for fp in args.skip_proof_file or []:
        if fp and fp.strip():
            skip.update(load_skip_list(Path(fp).expanduser().resolve()))

    proofs = select_proofs(discover_proofs(proofs_dir), only=args.proof_id, skip=skip)
    print(f"[INFO] Found {len(proofs)} proofs in {proofs_dir}")

    sink = TimingSink(output_path, proofs.keys(), args.iterations).open()

    prepare = DEFAULT_PREPARE_TARGETS if args.prepare_target is None else args.prepare_target
    command = ProofCommand.for_make(target=args.target, prepare_targets=prepare, make=args.make)
    invoker = ProofInvoker(proofs, command)

    scheduler = ProofScheduler(proofs.keys(), args.iterations, args.parallel_jobs, invoker.run, sink)
    start = time.perf_counter()
    records = scheduler.run()
    elapsed = time.perf_counter() - start

    failed = sum(1 for r in records if r.failed)
    if failed:
        print(f"[WARN] {failed} of {len(records)} runs could not be launched; their cells are empty.")
    print(f"[INFO] Finished {len(records)} runs in {elapsed:.2f}s. {output_path}")
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    try:
        return run_benchmark(args)
    except (DiscoveryError, SinkWriteError) as e:
        print(f"[ERROR] {e}", file=sys.stderr)
        return 2
    except KeyboardInterrupt:
        # already written timings stay in the output; running make/cbmc children are not killed
        print("[WARN] Interrupted; in-flight proof processes may still be running.", file=sys.stderr)
        return 130


if __name__ == "__main__":
    sys.exit(main())
