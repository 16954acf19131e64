"""Randomized workloads that exercise an :class:`IntervalTree` end to end.

``run_fuzz`` reproduces the mixed insert/delete scenario used to certify the
tree invariants after every mutation; ``run_bulk`` measures bulk insertion and
range queries and reports the resulting height against the red-black bound.
Both take a ``random.Random`` so runs are reproducible from a seed.
"""

from __future__ import annotations

import logging
import random
import time
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Optional

from interval_rbtree.common.profiling import (
    profile_function,
    profile_section,
    reset_correlation_id,
    set_correlation_id,
)
from interval_rbtree.models import Interval
from interval_rbtree.services.interval_tree import IntervalTree

logger = logging.getLogger(__name__)

FUZZ_PAYLOAD = 1337


class WorkloadFailure(AssertionError):
    """Raised when a workload step leaves the tree in an invalid state."""

    def __init__(self, step: int, action: str, key: Interval, reason: str) -> None:
        super().__init__(f"step {step}: {action} {key} -> {reason}")
        self.step = step
        self.action = action
        self.key = key
        self.reason = reason


@dataclass
class FuzzReport:
    steps: int
    inserts: int = 0
    deletes: int = 0
    final_size: int = 0
    max_height: int = 0

    def as_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class BulkReport:
    count: int
    queries: int
    height: int
    balance_bound: float
    insert_ms: float
    query_ms: float
    matches: int
    match_counts: List[int] = field(default_factory=list)

    @property
    def balanced(self) -> bool:
        return self.height <= self.balance_bound

    def as_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["balanced"] = self.balanced
        return data


@profile_function("workloads.fuzz")
def run_fuzz(
    steps: int = 5000,
    span: int = 500,
    rng: Optional[random.Random] = None,
    tree: Optional[IntervalTree] = None,
) -> FuzzReport:
    """Randomly insert or delete point intervals, validating after each step.

    Raises:
        WorkloadFailure: on the first step whose postcondition does not hold.
    """

    rng = rng or random.Random()
    tree = tree if tree is not None else IntervalTree()
    report = FuzzReport(steps=steps)

    for step in range(steps):
        key = Interval.point(rng.randrange(span))
        if rng.random() < 0.5:
            tree.insert(key, FUZZ_PAYLOAD)
            report.inserts += 1
            if not tree.contains(key):
                raise WorkloadFailure(step, "insert", key, "key missing after insert")
            action = "insert"
        else:
            tree.delete(key)
            report.deletes += 1
            if tree.contains(key):
                raise WorkloadFailure(step, "delete", key, "key present after delete")
            action = "delete"
        if not tree.is_valid():
            raise WorkloadFailure(step, action, key, "tree invariants violated")
        report.max_height = max(report.max_height, tree.height())

    report.final_size = len(tree)
    logger.info(
        "Fuzz finished: %d steps (%d inserts, %d deletes), final size %d, max height %d",
        steps,
        report.inserts,
        report.deletes,
        report.final_size,
        report.max_height,
    )
    return report


def random_interval(rng: random.Random, max_endpoint: int, max_length: int) -> Interval:
    low = rng.randrange(max_endpoint)
    high = min(low + rng.randrange(max_length + 1), max_endpoint)
    return Interval(low, high)


def run_bulk(
    count: int,
    queries: int,
    rng: Optional[random.Random] = None,
    max_endpoint: int = 1_000_000,
    max_length: int = 1_000,
    tree: Optional[IntervalTree] = None,
) -> BulkReport:
    """Insert ``count`` distinct random intervals, then run ``queries`` range queries."""

    if count > max_endpoint * (max_length + 1):
        raise ValueError(
            f"Cannot draw {count} distinct intervals below {max_endpoint} "
            f"with length at most {max_length}"
        )
    rng = rng or random.Random()
    tree = tree if tree is not None else IntervalTree()

    keys = set()
    while len(keys) < count:
        keys.add(random_interval(rng, max_endpoint, max_length))

    started = time.perf_counter()
    with profile_section("workloads.bulk_insert"):
        for index, key in enumerate(keys):
            tree.insert(key, index)
    insert_ms = (time.perf_counter() - started) * 1000.0

    match_counts: List[int] = []
    started = time.perf_counter()
    for index in range(queries):
        query = random_interval(rng, max_endpoint, max_length * 4)
        token = set_correlation_id(f"bulk-query-{index:05d}")
        try:
            with profile_section("workloads.range_query"):
                match_counts.append(sum(1 for _ in tree.range(query.low, query.high)))
        finally:
            reset_correlation_id(token)
    query_ms = (time.perf_counter() - started) * 1000.0

    report = BulkReport(
        count=count,
        queries=queries,
        height=tree.height(),
        balance_bound=tree.balance_bound(),
        insert_ms=insert_ms,
        query_ms=query_ms,
        matches=sum(match_counts),
        match_counts=match_counts,
    )
    if not report.balanced:
        logger.warning(
            "Tree height %d exceeds balance bound %.2f for %d entries",
            report.height,
            report.balance_bound,
            count,
        )
    return report


__all__ = [
    "FUZZ_PAYLOAD",
    "WorkloadFailure",
    "FuzzReport",
    "BulkReport",
    "run_fuzz",
    "run_bulk",
    "random_interval",
]
