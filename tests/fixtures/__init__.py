"""Helper fixtures for constructing deterministic interval workloads."""

from .synthetic_intervals import (
    brute_force_overlaps,
    build_tree,
    generate_intervals,
    generate_point_keys,
)

__all__ = [
    "brute_force_overlaps",
    "build_tree",
    "generate_intervals",
    "generate_point_keys",
]
