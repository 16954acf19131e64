"""Augmented red-black interval tree keyed by closed unsigned 64-bit intervals."""

from interval_rbtree.models import U64_MAX, Color, Interval, InvalidIntervalError
from interval_rbtree.services.interval_tree import IntervalTree
from interval_rbtree.utils.iterators import RangePairIter

__version__ = "0.1.0"

__all__ = [
    "U64_MAX",
    "Color",
    "Interval",
    "InvalidIntervalError",
    "IntervalTree",
    "RangePairIter",
    "__version__",
]
