"""Red-black interval tree algorithms.

Nodes are stored in a binary-search tree ordered by :class:`Interval` and each
node caches the maximum ``high`` endpoint found anywhere in its subtree
(``subtree_max``) so range queries can skip entire subtrees.  Balance is kept
with the classic red-black insert and delete fixups; every rotation refreshes
the cache of the two nodes whose children changed and every mutation refreshes
the cache along the path back to the root.

The functions operate on an optional root node and return the new root, which
keeps :class:`~interval_rbtree.services.interval_tree.IntervalTree` a thin
wrapper.  Search, insert and delete run in :math:`O(\\log n)` time.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Optional, Tuple

from interval_rbtree.models import Color, Interval

logger = logging.getLogger(__name__)


@dataclass(slots=True, eq=False)
class Node:
    key: Interval
    value: Any
    color: Color = Color.RED
    subtree_max: int = field(default=0, init=False)
    left: Optional["Node"] = field(default=None, repr=False)
    right: Optional["Node"] = field(default=None, repr=False)
    parent: Optional["Node"] = field(default=None, repr=False)

    def __post_init__(self) -> None:
        self.subtree_max = self.key.high

    def update(self) -> None:
        """Recompute the ``subtree_max`` cache after mutations."""

        candidate = self.key.high
        if self.left is not None and self.left.subtree_max > candidate:
            candidate = self.left.subtree_max
        if self.right is not None and self.right.subtree_max > candidate:
            candidate = self.right.subtree_max
        self.subtree_max = candidate


def _is_red(node: Optional[Node]) -> bool:
    return node is not None and node.color is Color.RED


def _refresh_path(node: Optional[Node]) -> None:
    while node is not None:
        node.update()
        node = node.parent


def _replace_child(root: Optional[Node], old: Node, new: Optional[Node]) -> Optional[Node]:
    """Hook ``new`` into the slot ``old`` occupied and return the (new) root."""

    parent = old.parent
    if new is not None:
        new.parent = parent
    if parent is None:
        return new
    if old is parent.left:
        parent.left = new
    else:
        parent.right = new
    return root


# ----------------------------------------------------------------------
# Rotations
# ----------------------------------------------------------------------
def _rotate_left(root: Optional[Node], pivot: Node) -> Optional[Node]:
    riser = pivot.right
    assert riser is not None
    pivot.right = riser.left
    if riser.left is not None:
        riser.left.parent = pivot
    root = _replace_child(root, pivot, riser)
    riser.left = pivot
    pivot.parent = riser
    pivot.update()
    riser.update()
    return root


def _rotate_right(root: Optional[Node], pivot: Node) -> Optional[Node]:
    riser = pivot.left
    assert riser is not None
    pivot.left = riser.right
    if riser.right is not None:
        riser.right.parent = pivot
    root = _replace_child(root, pivot, riser)
    riser.right = pivot
    pivot.parent = riser
    pivot.update()
    riser.update()
    return root


# ----------------------------------------------------------------------
# Lookup
# ----------------------------------------------------------------------
def search_node(key: Interval, root: Optional[Node]) -> Optional[Node]:
    node = root
    while node is not None:
        if key == node.key:
            return node
        node = node.left if key < node.key else node.right
    return None


def search(key: Interval, root: Optional[Node]) -> Optional[Any]:
    """Return the value stored under ``key`` or ``None`` when it is absent."""

    node = search_node(key, root)
    return node.value if node is not None else None


def minimum_node(root: Node) -> Node:
    node = root
    while node.left is not None:
        node = node.left
    return node


def maximum_node(root: Node) -> Node:
    node = root
    while node.right is not None:
        node = node.right
    return node


def min_key(root: Optional[Node]) -> Interval:
    if root is None:
        raise ValueError("min_key() of an empty tree")
    return minimum_node(root).key


def max_key(root: Optional[Node]) -> Interval:
    if root is None:
        raise ValueError("max_key() of an empty tree")
    return maximum_node(root).key


def min_pair(root: Optional[Node]) -> Tuple[Interval, Any]:
    if root is None:
        raise ValueError("min_pair() of an empty tree")
    node = minimum_node(root)
    return node.key, node.value


def max_pair(root: Optional[Node]) -> Tuple[Interval, Any]:
    if root is None:
        raise ValueError("max_pair() of an empty tree")
    node = maximum_node(root)
    return node.key, node.value


def height(root: Optional[Node]) -> int:
    if root is None:
        return 0
    return 1 + max(height(root.left), height(root.right))


# ----------------------------------------------------------------------
# Insert
# ----------------------------------------------------------------------
def insert(key: Interval, value: Any, root: Optional[Node]) -> Node:
    """Insert ``key`` -> ``value`` and return the new root.

    An existing key has its value overwritten in place; the structure and the
    cached maxima are left untouched in that case.
    """

    parent: Optional[Node] = None
    node = root
    while node is not None:
        if key == node.key:
            node.value = value
            return root
        parent = node
        node = node.left if key < node.key else node.right

    fresh = Node(key=key, value=value)
    if parent is None:
        fresh.color = Color.BLACK
        return fresh

    fresh.parent = parent
    if key < parent.key:
        parent.left = fresh
    else:
        parent.right = fresh
    # A new leaf can raise the maxima of its ancestors even without rotations.
    _refresh_path(parent)
    assert root is not None
    return _insert_fixup(root, fresh)


def _insert_fixup(root: Node, node: Node) -> Node:
    while _is_red(node.parent):
        parent = node.parent
        grandparent = parent.parent
        # A red parent is never the root, so the grandparent exists.
        assert grandparent is not None
        if parent is grandparent.left:
            uncle = grandparent.right
            if _is_red(uncle):
                parent.color = Color.BLACK
                uncle.color = Color.BLACK
                grandparent.color = Color.RED
                node = grandparent
                continue
            if node is parent.right:
                node = parent
                root = _rotate_left(root, node)
                parent = node.parent
            parent.color = Color.BLACK
            grandparent.color = Color.RED
            root = _rotate_right(root, grandparent)
        else:
            uncle = grandparent.left
            if _is_red(uncle):
                parent.color = Color.BLACK
                uncle.color = Color.BLACK
                grandparent.color = Color.RED
                node = grandparent
                continue
            if node is parent.left:
                node = parent
                root = _rotate_right(root, node)
                parent = node.parent
            parent.color = Color.BLACK
            grandparent.color = Color.RED
            root = _rotate_left(root, grandparent)

    root.color = Color.BLACK
    return root


# ----------------------------------------------------------------------
# Delete
# ----------------------------------------------------------------------
def delete(key: Interval, root: Optional[Node]) -> Optional[Node]:
    """Remove ``key`` and return the new root (``None`` once empty).

    Deleting an absent key is a no-op.
    """

    target = search_node(key, root)
    if target is None:
        return root
    assert root is not None

    if target.left is not None and target.right is not None:
        successor = minimum_node(target.right)
        target.key, target.value = successor.key, successor.value
        target = successor

    child = target.left if target.left is not None else target.right
    parent = target.parent
    root = _replace_child(root, target, child)
    target.parent = target.left = target.right = None

    # Covers the node that received the successor's key as well, since it is
    # an ancestor of the spliced position.
    _refresh_path(parent)

    if target.color is Color.BLACK:
        root = _delete_fixup(root, child, parent)
    return root


def _delete_fixup(
    root: Optional[Node], node: Optional[Node], parent: Optional[Node]
) -> Optional[Node]:
    while node is not root and not _is_red(node):
        assert parent is not None
        if node is parent.left:
            sibling = parent.right
            # The missing black on this side means the sibling exists.
            assert sibling is not None
            if _is_red(sibling):
                sibling.color = Color.BLACK
                parent.color = Color.RED
                root = _rotate_left(root, parent)
                sibling = parent.right
            if not _is_red(sibling.left) and not _is_red(sibling.right):
                sibling.color = Color.RED
                node = parent
                parent = node.parent
                continue
            if not _is_red(sibling.right):
                sibling.left.color = Color.BLACK
                sibling.color = Color.RED
                root = _rotate_right(root, sibling)
                sibling = parent.right
            sibling.color = parent.color
            parent.color = Color.BLACK
            sibling.right.color = Color.BLACK
            root = _rotate_left(root, parent)
            node = root
        else:
            sibling = parent.left
            assert sibling is not None
            if _is_red(sibling):
                sibling.color = Color.BLACK
                parent.color = Color.RED
                root = _rotate_right(root, parent)
                sibling = parent.left
            if not _is_red(sibling.left) and not _is_red(sibling.right):
                sibling.color = Color.RED
                node = parent
                parent = node.parent
                continue
            if not _is_red(sibling.left):
                sibling.right.color = Color.BLACK
                sibling.color = Color.RED
                root = _rotate_left(root, sibling)
                sibling = parent.left
            sibling.color = parent.color
            parent.color = Color.BLACK
            sibling.left.color = Color.BLACK
            root = _rotate_right(root, parent)
            node = root

    if node is not None:
        node.color = Color.BLACK
    return root


# ----------------------------------------------------------------------
# Validation
# ----------------------------------------------------------------------
class _Violation(Exception):
    pass


def is_interval_tree(root: Optional[Node]) -> bool:
    """Check ordering, red-black balance and ``subtree_max`` for every node.

    Meant for tests and debugging only; mutation paths never call it.
    """

    if root is None:
        return True
    try:
        if root.parent is not None:
            raise _Violation(f"root {root.key} has a parent")
        if root.color is not Color.BLACK:
            raise _Violation(f"root {root.key} is red")
        _check_subtree(root, None, None)
    except _Violation as exc:
        logger.debug("Interval tree invariant violated: %s", exc)
        return False
    return True


def _check_subtree(
    node: Optional[Node], lower: Optional[Interval], upper: Optional[Interval]
) -> int:
    """Return the black height of ``node`` or raise :class:`_Violation`."""

    if node is None:
        return 1
    if lower is not None and not lower < node.key:
        raise _Violation(f"{node.key} does not sort after {lower}")
    if upper is not None and not node.key < upper:
        raise _Violation(f"{node.key} does not sort before {upper}")
    for child in (node.left, node.right):
        if child is None:
            continue
        if child.parent is not node:
            raise _Violation(f"{child.key} has a stale parent reference")
        if _is_red(node) and _is_red(child):
            raise _Violation(f"red {node.key} has red child {child.key}")

    left_black = _check_subtree(node.left, lower, node.key)
    right_black = _check_subtree(node.right, node.key, upper)
    if left_black != right_black:
        raise _Violation(
            f"black heights differ under {node.key}: {left_black} != {right_black}"
        )

    expected = node.key.high
    for child in (node.left, node.right):
        if child is not None and child.subtree_max > expected:
            expected = child.subtree_max
    if node.subtree_max != expected:
        raise _Violation(
            f"{node.key} caches subtree_max {node.subtree_max}, expected {expected}"
        )
    return left_black + (0 if _is_red(node) else 1)


__all__ = [
    "Node",
    "search_node",
    "search",
    "insert",
    "delete",
    "minimum_node",
    "maximum_node",
    "min_key",
    "max_key",
    "min_pair",
    "max_pair",
    "height",
    "is_interval_tree",
]
