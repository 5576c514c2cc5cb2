"""
Query tree sanitizing.

A caller-supplied filter is an untrusted, arbitrarily shaped JSON value.
:func:`sanitize_query_tree` turns it into a canonical :class:`QueryTree`
whose node types and operations come from fixed enumerations and whose
size is bounded (depth <= 4, at most 16 children per node). It never
raises: garbage degrades to the inert default node, which compiles to
"match all".
"""

from __future__ import annotations

import json
import logging
import math
from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any

from ..codec import stringify

logger = logging.getLogger(__name__)

QUERY_TREE_MAX_DEPTH = 4
QUERY_TREE_MAX_CHILDREN = 16
QUERY_TREE_MAX_RIGHT_LENGTH = 1024


class NodeType(str, Enum):
    """Kind of a query tree node."""

    SINGLE = "single"
    ANYOF = "anyof"
    ALLOF = "allof"
    NOT = "not"

    @property
    def is_combinator(self) -> bool:
        return self is not NodeType.SINGLE


class QueryOperation(str, Enum):
    """Comparison applied by a ``single`` node."""

    NONE = ""
    NULL = "null"
    EQ = "eq"
    LT = "lt"
    LE = "le"
    GT = "gt"
    GE = "ge"
    CN = "cn"
    CNI = "cni"
    SW = "sw"
    SWI = "swi"
    EW = "ew"
    EWI = "ewi"


_NODE_TYPE_ALIASES = {"one": NodeType.SINGLE}
_OPERATION_ALIASES = {"lte": QueryOperation.LE, "gte": QueryOperation.GE}


@dataclass(frozen=True)
class QueryTree:
    """Canonical, bounded boolean expression over feature indices."""

    type: NodeType = NodeType.ANYOF
    operation: QueryOperation = QueryOperation.NONE
    left: int = -1
    right: str | None = None
    children: tuple[QueryTree, ...] = ()

    @property
    def depth(self) -> int:
        """Height of the tree; a node without children has depth 0."""
        if not self.children:
            return 0
        return 1 + max(child.depth for child in self.children)

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.type.value,
            "operation": self.operation.value,
            "left": self.left,
            "right": self.right,
            "children": [child.to_dict() for child in self.children],
        }


def _parse_node_type(tree: Mapping[str, Any]) -> NodeType:
    if "type" not in tree:
        return NodeType.ANYOF
    name = stringify(tree["type"]).lower()
    if name in _NODE_TYPE_ALIASES:
        return _NODE_TYPE_ALIASES[name]
    try:
        return NodeType(name)
    except ValueError:
        return NodeType.ANYOF


def _parse_operation(tree: Mapping[str, Any]) -> QueryOperation:
    # A JSON null operation reads as "null", the null-check operation.
    if "operation" not in tree:
        return QueryOperation.NONE
    name = stringify(tree["operation"]).lower()
    if name in _OPERATION_ALIASES:
        return _OPERATION_ALIASES[name]
    try:
        return QueryOperation(name)
    except ValueError:
        return QueryOperation.NONE


def _parse_left(value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return -1
    if not math.isfinite(value):
        return -1
    return math.floor(value)


def _parse_right(tree: Mapping[str, Any]) -> str | None:
    value = tree.get("right")
    if value is None:
        return None
    return stringify(value)[:QUERY_TREE_MAX_RIGHT_LENGTH]


def sanitize_query_tree(tree: Any, depth: int = 0) -> QueryTree:
    """
    Sanitize an untrusted filter expression into a :class:`QueryTree`.

    Children are kept only for combinator nodes (``anyof``, ``allof``,
    ``not``) below the maximum depth, and only the first 16 of them.
    Sanitizing an already sanitized tree returns an equal tree.
    """
    if isinstance(tree, QueryTree):
        tree = tree.to_dict()
    if not isinstance(tree, Mapping):
        return QueryTree()

    node_type = _parse_node_type(tree)

    children: tuple[QueryTree, ...] = ()
    raw_children = tree.get("children")
    if (
        depth < QUERY_TREE_MAX_DEPTH
        and node_type.is_combinator
        and isinstance(raw_children, (list, tuple))
    ):
        if len(raw_children) > QUERY_TREE_MAX_CHILDREN:
            logger.debug(
                "Query node at depth %d has %d children; keeping the first %d",
                depth,
                len(raw_children),
                QUERY_TREE_MAX_CHILDREN,
            )
        children = tuple(
            sanitize_query_tree(child, depth + 1)
            for child in raw_children[:QUERY_TREE_MAX_CHILDREN]
        )

    return QueryTree(
        type=node_type,
        operation=_parse_operation(tree),
        left=_parse_left(tree.get("left")),
        right=_parse_right(tree),
        children=children,
    )


def parse_filter(raw: Any) -> Any | None:
    """
    Decode a filter parameter.

    Accepts an already decoded value or a JSON string. Empty input and
    undecodable JSON yield ``None``, meaning "no filter".
    """
    if not raw:
        return None
    if isinstance(raw, (str, bytes)):
        try:
            return json.loads(raw)
        except (ValueError, RecursionError):
            logger.debug("Ignoring filter that is not valid JSON")
            return None
    return raw


def sanitize_filter(raw: Any) -> QueryTree | None:
    """Decode and sanitize a filter; ``None`` means "no filter"."""
    decoded = parse_filter(raw)
    if not decoded:
        return None
    return sanitize_query_tree(decoded, 0)
