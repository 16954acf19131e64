from __future__ import annotations

from typing import Any, Iterator, List, Optional, Tuple

from interval_rbtree.models import Interval
from interval_rbtree.utils.node import Node

Pair = Tuple[Interval, Any]


class RangePairIter:
    """Ascending iterator over ``(key, value)`` pairs overlapping ``[low, high]``.

    The walk is an in-order traversal driven by an explicit stack, so extra
    memory is bounded by the tree height.  Subtrees whose cached
    ``subtree_max`` falls below ``low`` are never entered, and the walk stops
    at the first key whose ``low`` exceeds ``high``.

    The iterator is single-pass.  Mutating the tree while it is alive is not
    supported.
    """

    __slots__ = ("_query", "_stack")

    def __init__(self, root: Optional[Node], low: int, high: int) -> None:
        self._query = Interval(low, high)
        self._stack: List[Node] = []
        self._push_left(root)

    def _push_left(self, node: Optional[Node]) -> None:
        while node is not None and node.subtree_max >= self._query.low:
            self._stack.append(node)
            node = node.left

    def __iter__(self) -> Iterator[Pair]:
        return self

    def __next__(self) -> Pair:
        while self._stack:
            node = self._stack.pop()
            if node.key.low > self._query.high:
                # Every remaining key sorts after this one.
                self._stack.clear()
                break
            self._push_left(node.right)
            if node.key.high >= self._query.low:
                return node.key, node.value
        raise StopIteration


__all__ = ["RangePairIter", "Pair"]
