"""Associative container keyed by closed integer intervals.

:class:`IntervalTree` maps :class:`~interval_rbtree.models.Interval` keys to
arbitrary values.  It answers point lookups, ordered traversal and "which
stored intervals touch ``[low, high]``" queries in logarithmic time by
delegating to the augmented red-black tree in :mod:`interval_rbtree.utils.node`.

The container is not thread-safe.  Callers that share an instance across
threads must serialize access themselves, and must not mutate the tree while a
range iterator obtained from it is still in use.
"""

from __future__ import annotations

import math
from typing import Any, Iterator, Optional, Tuple, Union

from interval_rbtree.models import U64_MAX, Interval
from interval_rbtree.utils import node as core
from interval_rbtree.utils.iterators import Pair, RangePairIter

KeyLike = Union[Interval, Tuple[int, int]]

_MISSING = object()


def _as_interval(key: KeyLike) -> Interval:
    if isinstance(key, Interval):
        return key
    low, high = key
    return Interval(low, high)


class IntervalTree:
    """Ordered map from intervals to values.

    Example::

        tree = IntervalTree()
        tree.insert(Interval(2, 2), 25)
        tree.get(Interval(2, 2))      # -> 25
        list(tree.range(0, 10))       # -> [(Interval(low=2, high=2), 25)]
    """

    __slots__ = ("_root", "_size")

    def __init__(self) -> None:
        self._root: Optional[core.Node] = None
        self._size = 0

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------
    def insert(self, key: KeyLike, value: Any) -> None:
        """Store ``value`` under ``key``, overwriting any previous value."""

        interval = _as_interval(key)
        if core.search_node(interval, self._root) is None:
            self._size += 1
        self._root = core.insert(interval, value, self._root)

    def delete(self, key: KeyLike) -> None:
        """Remove ``key``; deleting an absent key does nothing."""

        interval = _as_interval(key)
        if core.search_node(interval, self._root) is None:
            return
        self._root = core.delete(interval, self._root)
        self._size -= 1

    def get(self, key: KeyLike, default: Any = None) -> Any:
        node = core.search_node(_as_interval(key), self._root)
        return node.value if node is not None else default

    def get_or(self, key: KeyLike, default: Any) -> Any:
        return self.get(key, default)

    def contains(self, key: KeyLike) -> bool:
        return core.search_node(_as_interval(key), self._root) is not None

    def empty(self) -> bool:
        return self._root is None

    def min(self) -> Optional[Pair]:
        """Return the pair with the smallest key, or ``None`` when empty."""

        if self._root is None:
            return None
        return core.min_pair(self._root)

    def max(self) -> Optional[Pair]:
        """Return the pair with the largest key, or ``None`` when empty."""

        if self._root is None:
            return None
        return core.max_pair(self._root)

    def iter(self) -> RangePairIter:
        """Iterate over every ``(key, value)`` pair in ascending key order."""

        return RangePairIter(self._root, 0, U64_MAX)

    def range(self, low: int = 0, high: int = U64_MAX) -> RangePairIter:
        """Iterate over pairs whose key overlaps the closed interval ``[low, high]``.

        Raises:
            InvalidIntervalError: if the bounds do not form a valid interval.
        """

        return RangePairIter(self._root, low, high)

    def height(self) -> int:
        return core.height(self._root)

    def is_valid(self) -> bool:
        """Run the full invariant check. Intended for tests and debugging."""

        return core.is_interval_tree(self._root)

    def balance_bound(self) -> float:
        """Upper bound on :meth:`height` guaranteed by red-black balance."""

        return 2 * math.log2(self._size + 1)

    # ------------------------------------------------------------------
    # Python protocols
    # ------------------------------------------------------------------
    def __len__(self) -> int:
        return self._size

    def __bool__(self) -> bool:
        return self._root is not None

    def __contains__(self, key: object) -> bool:
        if not isinstance(key, (Interval, tuple)):
            return False
        return self.contains(key)  # type: ignore[arg-type]

    def __iter__(self) -> Iterator[Pair]:
        return self.iter()

    def __getitem__(self, key: KeyLike) -> Any:
        value = self.get(key, _MISSING)
        if value is _MISSING:
            raise KeyError(key)
        return value

    def __setitem__(self, key: KeyLike, value: Any) -> None:
        self.insert(key, value)

    def __delitem__(self, key: KeyLike) -> None:
        if not self.contains(key):
            raise KeyError(key)
        self.delete(key)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(size={self._size})"


__all__ = ["IntervalTree", "KeyLike"]
