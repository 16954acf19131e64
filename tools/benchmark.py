"""Deterministic fuzzing and benchmarking harness for the interval tree."""

from __future__ import annotations

import argparse
import json
import random
import sys
from pathlib import Path
from typing import List, Optional

PACKAGE_ROOT = Path(__file__).resolve().parents[1]
if str(PACKAGE_ROOT) not in sys.path:
    sys.path.insert(0, str(PACKAGE_ROOT))

from interval_rbtree.common.console import configure_logging, get_console  # noqa: E402
from interval_rbtree.common.profiling import Profiler  # noqa: E402
from interval_rbtree.common.settings import get_seed  # noqa: E402
from interval_rbtree.services.interval_tree import IntervalTree  # noqa: E402
from interval_rbtree.services.workloads import (  # noqa: E402
    WorkloadFailure,
    run_bulk,
    run_fuzz,
)
from interval_rbtree.utils.tree_logger import TreeLogger  # noqa: E402


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Interval tree fuzzing and benchmarks")
    parser.add_argument("--seed", type=int, default=None, help="Random seed (overrides INTERVAL_RBTREE_SEED)")
    parser.add_argument("--verbosity", default=None, help="Log verbosity (debug/info/warning/error/quiet)")
    parser.add_argument("--output", type=Path, default=None, help="Optional JSON output path")

    subcommands = parser.add_subparsers(dest="command", required=True)

    fuzz = subcommands.add_parser("fuzz", help="Random insert/delete of point intervals with validation")
    fuzz.add_argument("--steps", type=int, default=5000)
    fuzz.add_argument("--span", type=int, default=500)

    bulk = subcommands.add_parser("bulk", help="Bulk insertion followed by range queries")
    bulk.add_argument("--count", type=int, default=10_000)
    bulk.add_argument("--queries", type=int, default=1_000)
    bulk.add_argument("--max-endpoint", type=int, default=1_000_000)
    bulk.add_argument("--max-length", type=int, default=1_000)
    bulk.add_argument("--show", type=int, default=0, help="Print the first N stored pairs")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = _build_parser().parse_args(argv)
    console = get_console(args.verbosity)
    configure_logging(args.verbosity)

    seed = args.seed if args.seed is not None else get_seed()
    rng = random.Random(seed)
    tree = IntervalTree()

    if args.command == "fuzz":
        try:
            report = run_fuzz(args.steps, args.span, rng=rng, tree=tree)
        except WorkloadFailure as exc:
            console.print(f"[bold red]Fuzz failed:[/bold red] {exc}")
            return 1
        console.print(
            f"[bold green]Fuzz passed[/bold green] after {report.steps} steps "
            f"({report.inserts} inserts, {report.deletes} deletes)"
        )
        result = report.as_dict()
    else:
        report = run_bulk(
            args.count,
            args.queries,
            rng=rng,
            max_endpoint=args.max_endpoint,
            max_length=args.max_length,
            tree=tree,
        )
        console.print(
            f"Inserted {report.count} intervals in {report.insert_ms:.1f} ms, "
            f"{report.queries} queries in {report.query_ms:.1f} ms ({report.matches} matches)"
        )
        if args.show:
            console.print(TreeLogger.contents_table(tree, limit=args.show))
        result = report.as_dict()
        result.pop("match_counts")

    console.print(TreeLogger.summary_table(tree))
    result["seed"] = seed

    profiler = Profiler.instance()
    if profiler.enabled:
        profiler.flush()
        result["profile"] = profiler.summary()

    if args.output:
        with args.output.open("w", encoding="utf-8") as fh:
            json.dump(result, fh, indent=2, default=str)
        console.print(f"Results written to {args.output}")
    return 0


if __name__ == "__main__":  # pragma: no cover - CLI entry
    raise SystemExit(main())
