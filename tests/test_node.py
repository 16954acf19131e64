import pytest

from interval_rbtree.models import Color, Interval
from interval_rbtree.utils import node as core


def _build(*lows):
    root = None
    for low in lows:
        root = core.insert(Interval.point(low), f"v{low}", root)
        assert core.is_interval_tree(root)
    return root


def _shape(root):
    """Nested ``(low, color, left, right)`` tuples for compact structural asserts."""

    if root is None:
        return None
    return (
        root.key.low,
        "R" if root.color is Color.RED else "B",
        _shape(root.left),
        _shape(root.right),
    )


# MARK: Insert


def test_first_insert_creates_black_root():
    root = core.insert(Interval(1, 4), "a", None)

    assert root.color is Color.BLACK
    assert root.subtree_max == 4
    assert root.parent is None


def test_insert_outer_case_rotates_grandparent():
    root = _build(1, 2, 3)

    assert _shape(root) == (2, "B", (1, "R", None, None), (3, "R", None, None))


def test_insert_inner_case_rotates_twice():
    root = _build(3, 1, 2)

    assert _shape(root) == (2, "B", (1, "R", None, None), (3, "R", None, None))


def test_insert_mirrored_outer_case():
    root = _build(3, 2, 1)

    assert _shape(root) == (2, "B", (1, "R", None, None), (3, "R", None, None))


def test_insert_red_uncle_recolors_and_moves_up():
    root = _build(2, 1, 3, 4)

    assert _shape(root) == (
        2,
        "B",
        (1, "B", None, None),
        (3, "B", None, (4, "R", None, None)),
    )


def test_insert_existing_key_overwrites_value_in_place():
    root = _build(1, 2, 3)
    before = _shape(root)

    same_root = core.insert(Interval.point(3), "replaced", root)

    assert same_root is root
    assert _shape(root) == before
    assert core.search(Interval.point(3), root) == "replaced"


def test_insert_refreshes_subtree_max_without_rotation():
    root = core.insert(Interval(10, 10), None, None)
    root = core.insert(Interval(5, 500), None, root)

    assert root.key == Interval(10, 10)
    assert root.subtree_max == 500


def test_insert_refreshes_subtree_max_through_rotations():
    root = None
    for key in (Interval(1, 2), Interval(2, 900), Interval(3, 4), Interval(4, 5)):
        root = core.insert(key, None, root)

    assert root.subtree_max == 900
    assert core.is_interval_tree(root)


# MARK: Delete


def test_delete_absent_key_is_noop():
    root = _build(1, 2, 3)
    before = _shape(root)

    assert core.delete(Interval.point(99), root) is root
    assert _shape(root) == before


def test_delete_last_key_empties_tree():
    root = _build(1)

    assert core.delete(Interval.point(1), root) is None


def test_delete_red_sibling_then_black_nephews():
    root = _build(1, 2, 3, 4, 5, 6)
    assert _shape(root) == (
        2,
        "B",
        (1, "B", None, None),
        (4, "R", (3, "B", None, None), (5, "B", None, (6, "R", None, None))),
    )

    root = core.delete(Interval.point(1), root)

    assert core.is_interval_tree(root)
    assert _shape(root) == (
        4,
        "B",
        (2, "B", None, (3, "R", None, None)),
        (5, "B", None, (6, "R", None, None)),
    )


def test_delete_black_sibling_with_near_red_child():
    root = _build(2, 1, 4, 3)

    root = core.delete(Interval.point(1), root)

    assert core.is_interval_tree(root)
    assert _shape(root) == (3, "B", (2, "B", None, None), (4, "B", None, None))


def test_delete_black_sibling_with_far_red_child():
    root = _build(2, 1, 3, 4)

    root = core.delete(Interval.point(1), root)

    assert core.is_interval_tree(root)
    assert _shape(root) == (3, "B", (2, "B", None, None), (4, "B", None, None))


def test_delete_mirrored_far_red_child():
    root = _build(5, 6, 4, 3)

    root = core.delete(Interval.point(6), root)

    assert core.is_interval_tree(root)
    assert _shape(root) == (4, "B", (3, "B", None, None), (5, "B", None, None))


def test_delete_node_with_two_children_uses_successor():
    root = _build(2, 1, 3, 4)

    root = core.delete(Interval.point(2), root)

    assert core.is_interval_tree(root)
    assert _shape(root) == (3, "B", (1, "B", None, None), (4, "B", None, None))
    assert core.search(Interval.point(3), root) == "v3"
    assert core.search(Interval.point(2), root) is None


def test_delete_lowers_subtree_max_along_path():
    root = None
    for key in (Interval(10, 10), Interval(5, 5), Interval(15, 15), Interval(12, 1000)):
        root = core.insert(key, None, root)
    assert root.subtree_max == 1000

    root = core.delete(Interval(12, 1000), root)

    assert root.subtree_max == 15
    assert core.is_interval_tree(root)


def test_delete_refreshes_max_when_successor_key_moves_up():
    root = None
    for key in (Interval(10, 10), Interval(5, 5), Interval(20, 700), Interval(15, 15), Interval(30, 30)):
        root = core.insert(key, None, root)

    root = core.delete(Interval(10, 10), root)

    assert core.is_interval_tree(root)
    assert root.subtree_max == 700


# MARK: Min / max / height


def test_min_and_max_pairs():
    root = _build(5, 3, 8, 1, 9)

    assert core.min_key(root) == Interval.point(1)
    assert core.max_key(root) == Interval.point(9)
    assert core.min_pair(root) == (Interval.point(1), "v1")
    assert core.max_pair(root) == (Interval.point(9), "v9")


@pytest.mark.parametrize("func", [core.min_key, core.max_key, core.min_pair, core.max_pair])
def test_extremes_of_empty_tree_raise(func):
    with pytest.raises(ValueError):
        func(None)


def test_height_of_small_trees():
    assert core.height(None) == 0
    assert core.height(_build(1)) == 1
    assert core.height(_build(1, 2, 3)) == 2


# MARK: Validator


def test_validator_accepts_empty_tree():
    assert core.is_interval_tree(None)


def test_validator_rejects_red_root():
    root = _build(1, 2)
    root.color = Color.RED

    assert not core.is_interval_tree(root)


def test_validator_rejects_red_red_edge():
    root = _build(2, 1, 3, 4)
    root.right.color = Color.RED  # 3 is red and so is its child 4

    assert not core.is_interval_tree(root)


def test_validator_rejects_unequal_black_heights():
    root = _build(2, 1, 3)
    root.left.color = Color.BLACK

    assert not core.is_interval_tree(root)


def test_validator_rejects_stale_subtree_max():
    root = _build(2, 1, 3)
    root.subtree_max = 99

    assert not core.is_interval_tree(root)


def test_validator_rejects_order_violation():
    root = _build(2, 1, 3)
    root.left.key = Interval.point(5)
    root.left.subtree_max = 5
    root.subtree_max = 5

    assert not core.is_interval_tree(root)


def test_validator_rejects_broken_parent_link():
    root = _build(2, 1, 3)
    root.left.parent = None

    assert not core.is_interval_tree(root)


def test_validator_logs_first_violation(caplog):
    root = _build(2, 1, 3)
    root.subtree_max = 99

    with caplog.at_level("DEBUG", logger="interval_rbtree.utils.node"):
        assert not core.is_interval_tree(root)

    assert "subtree_max 99" in caplog.text


def test_node_repr_does_not_recurse_through_parent():
    root = _build(1, 2, 3)

    assert "parent" not in repr(root.left)
