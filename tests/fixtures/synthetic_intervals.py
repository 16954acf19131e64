"""Deterministic interval workloads for exercising the tree.

All generators take an explicit seed so failures can be replayed exactly.
"""

from __future__ import annotations

import random
from typing import Any, Dict, Iterable, List, Tuple

from interval_rbtree import Interval, IntervalTree


def generate_point_keys(count: int, span: int, seed: int = 0) -> List[Interval]:
    """Return ``count`` distinct point intervals drawn from ``[0, span)``."""

    rng = random.Random(seed)
    return [Interval.point(value) for value in rng.sample(range(span), count)]


def generate_intervals(
    count: int,
    seed: int = 0,
    max_endpoint: int = 10_000,
    max_length: int = 250,
) -> List[Interval]:
    """Return ``count`` distinct intervals in random (insertion) order."""

    rng = random.Random(seed)
    seen = set()
    intervals: List[Interval] = []
    while len(intervals) < count:
        low = rng.randrange(max_endpoint)
        high = min(low + rng.randrange(max_length + 1), max_endpoint)
        interval = Interval(low, high)
        if interval in seen:
            continue
        seen.add(interval)
        intervals.append(interval)
    return intervals


def build_tree(intervals: Iterable[Interval]) -> Tuple[IntervalTree, Dict[Interval, Any]]:
    """Insert each interval with its insertion index as value.

    Returns the tree together with the equivalent ``dict`` used as an oracle.
    """

    tree = IntervalTree()
    expected: Dict[Interval, Any] = {}
    for index, interval in enumerate(intervals):
        tree.insert(interval, index)
        expected[interval] = index
    return tree, expected


def brute_force_overlaps(
    expected: Dict[Interval, Any], low: int, high: int
) -> List[Tuple[Interval, Any]]:
    query = Interval(low, high)
    return sorted(
        (interval, value) for interval, value in expected.items() if interval.overlaps(query)
    )
