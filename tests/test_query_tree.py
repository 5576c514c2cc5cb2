"""Tests for filter sanitizing."""

from __future__ import annotations

import pytest

from deepint_source_mongo.query.tree import (
    QUERY_TREE_MAX_CHILDREN,
    QUERY_TREE_MAX_DEPTH,
    QUERY_TREE_MAX_RIGHT_LENGTH,
    NodeType,
    QueryOperation,
    QueryTree,
    parse_filter,
    sanitize_filter,
    sanitize_query_tree,
)


def _nested(depth: int) -> dict:
    node: dict = {"type": "single", "operation": "eq", "left": 0, "right": "x"}
    for _ in range(depth):
        node = {"type": "allof", "children": [node]}
    return node


def _deep_list(depth: int) -> list:
    value: list = []
    for _ in range(depth):
        value = [value]
    return value


def _deep_mapping(depth: int) -> dict:
    value: dict = {}
    for _ in range(depth):
        value = {"x": value}
    return value


# ═══════════════════════════════════════════════════════════════════════
# Node fields
# ═══════════════════════════════════════════════════════════════════════


class TestSanitizeNode:
    @pytest.mark.parametrize("raw", [None, 1, "anyof", [], [{"type": "single"}], True])
    def test_non_object_gives_default_node(self, raw) -> None:
        assert sanitize_query_tree(raw) == QueryTree()

    def test_default_node(self) -> None:
        tree = QueryTree()
        assert tree.type is NodeType.ANYOF
        assert tree.operation is QueryOperation.NONE
        assert tree.left == -1
        assert tree.right is None
        assert tree.children == ()

    def test_full_leaf(self) -> None:
        tree = sanitize_query_tree(
            {"type": "SINGLE", "operation": "CNI", "left": 2.9, "right": 12.0}
        )
        assert tree == QueryTree(
            type=NodeType.SINGLE,
            operation=QueryOperation.CNI,
            left=2,
            right="12",
        )

    def test_invalid_enums_fall_back(self) -> None:
        tree = sanitize_query_tree({"type": "xor", "operation": "like"})
        assert tree.type is NodeType.ANYOF
        assert tree.operation is QueryOperation.NONE

    def test_aliases(self) -> None:
        assert sanitize_query_tree({"type": "one"}).type is NodeType.SINGLE
        assert sanitize_query_tree({"operation": "lte"}).operation is QueryOperation.LE
        assert sanitize_query_tree({"operation": "gte"}).operation is QueryOperation.GE

    def test_null_operation_is_null_check(self) -> None:
        tree = sanitize_query_tree({"operation": None})
        assert tree.operation is QueryOperation.NULL
        assert sanitize_query_tree({}).operation is QueryOperation.NONE

    @pytest.mark.parametrize("left", ["1", None, True, float("nan"), [1], {"a": 1}])
    def test_left_must_be_numeric(self, left) -> None:
        assert sanitize_query_tree({"left": left}).left == -1

    def test_left_is_floored(self) -> None:
        assert sanitize_query_tree({"left": -0.5}).left == -1
        assert sanitize_query_tree({"left": 3}).left == 3

    def test_deeply_nested_right_does_not_raise(self) -> None:
        tree = sanitize_query_tree(
            {"type": "single", "operation": "eq", "left": 0, "right": _deep_list(3000)}
        )
        assert tree.operation is QueryOperation.EQ
        assert tree.right == ""

    def test_deeply_nested_type_falls_back(self) -> None:
        tree = sanitize_query_tree({"type": _deep_mapping(3000), "left": 1})
        assert tree.type is NodeType.ANYOF
        assert tree.left == 1

    def test_right_is_stringified_and_truncated(self) -> None:
        assert sanitize_query_tree({"right": True}).right == "true"
        assert sanitize_query_tree({"right": None}).right is None
        assert sanitize_query_tree({}).right is None
        long = sanitize_query_tree({"right": "y" * 5000}).right
        assert long == "y" * QUERY_TREE_MAX_RIGHT_LENGTH


# ═══════════════════════════════════════════════════════════════════════
# Children and bounds
# ═══════════════════════════════════════════════════════════════════════


class TestSanitizeChildren:
    def test_leaf_children_are_dropped(self) -> None:
        tree = sanitize_query_tree({"type": "single", "children": [{}, {}]})
        assert tree.children == ()

    def test_non_array_children_are_dropped(self) -> None:
        tree = sanitize_query_tree({"type": "allof", "children": {"0": {}}})
        assert tree.children == ()

    @pytest.mark.parametrize("kind", ["anyof", "allof", "not"])
    def test_combinators_keep_children(self, kind) -> None:
        tree = sanitize_query_tree({"type": kind, "children": [{}, "junk"]})
        assert tree.children == (QueryTree(), QueryTree())

    def test_children_are_capped(self) -> None:
        raw = {
            "type": "anyof",
            "children": [{"type": "single", "left": i} for i in range(40)],
        }
        tree = sanitize_query_tree(raw)
        assert len(tree.children) == QUERY_TREE_MAX_CHILDREN
        assert [c.left for c in tree.children] == list(range(QUERY_TREE_MAX_CHILDREN))

    def test_depth_is_capped(self) -> None:
        tree = sanitize_query_tree(_nested(10))
        assert tree.depth == QUERY_TREE_MAX_DEPTH

        node = tree
        for _ in range(QUERY_TREE_MAX_DEPTH):
            node = node.children[0]
        # The deepest kept node is the combinator at depth 4, emptied.
        assert node.type is NodeType.ALLOF
        assert node.children == ()

    def test_shallow_tree_is_kept(self) -> None:
        tree = sanitize_query_tree(_nested(QUERY_TREE_MAX_DEPTH))
        assert tree.depth == QUERY_TREE_MAX_DEPTH
        leaf = tree
        while leaf.children:
            leaf = leaf.children[0]
        assert leaf.type is NodeType.SINGLE
        assert leaf.right == "x"


class TestIdempotence:
    @pytest.mark.parametrize(
        "raw",
        [
            None,
            {},
            {"type": "one", "operation": "lte", "left": 1.5, "right": 3},
            {"operation": None, "left": 0},
            {"type": "not", "children": [{"type": "anyof", "children": [{}] * 20}]},
            _nested(9),
            {"type": "allof", "children": [_nested(3), {"right": [1, 2]}]},
        ],
    )
    def test_sanitize_is_a_fixed_point(self, raw) -> None:
        once = sanitize_query_tree(raw)
        assert sanitize_query_tree(once) == once
        assert sanitize_query_tree(once.to_dict()) == once


# ═══════════════════════════════════════════════════════════════════════
# Filter parameter
# ═══════════════════════════════════════════════════════════════════════


class TestParseFilter:
    def test_json_string(self) -> None:
        assert parse_filter('{"type": "single"}') == {"type": "single"}

    @pytest.mark.parametrize("raw", [None, "", "{not json", b"", {}])
    def test_no_filter(self, raw) -> None:
        assert parse_filter(raw) is None

    def test_deeply_nested_json_is_no_filter(self) -> None:
        raw = (
            '{"type":"single","operation":"eq","left":0,"right":'
            + "[" * 5000
            + "]" * 5000
            + "}"
        )
        assert parse_filter(raw) is None
        assert sanitize_filter(raw) is None

    def test_decoded_value_passes_through(self) -> None:
        raw = {"type": "allof"}
        assert parse_filter(raw) is raw

    def test_sanitize_filter(self) -> None:
        tree = sanitize_filter('{"type":"single","operation":"eq","left":0,"right":1}')
        assert tree == QueryTree(
            type=NodeType.SINGLE, operation=QueryOperation.EQ, left=0, right="1"
        )
        assert sanitize_filter("") is None
        assert sanitize_filter("null") is None
