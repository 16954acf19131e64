from .interval_tree import IntervalTree

__all__ = ["IntervalTree"]
