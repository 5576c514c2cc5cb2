"""Filter sanitizing, compilation and evaluation."""

from __future__ import annotations

from .compiler import compile_query_tree
from .evaluator import MemoryOperatorRegistry, build_default_registry
from .predicate import (
    MATCH_ALL,
    And,
    Compare,
    CompareOperator,
    Not,
    Or,
    Predicate,
    conjunction,
    disjunction,
    is_match_all,
    negate,
    string_pattern,
)
from .tree import (
    QUERY_TREE_MAX_CHILDREN,
    QUERY_TREE_MAX_DEPTH,
    NodeType,
    QueryOperation,
    QueryTree,
    parse_filter,
    sanitize_filter,
    sanitize_query_tree,
)

__all__ = [
    # Tree
    "QueryTree",
    "NodeType",
    "QueryOperation",
    "QUERY_TREE_MAX_DEPTH",
    "QUERY_TREE_MAX_CHILDREN",
    "sanitize_query_tree",
    "sanitize_filter",
    "parse_filter",
    # Predicate AST
    "Predicate",
    "Compare",
    "CompareOperator",
    "And",
    "Or",
    "Not",
    "MATCH_ALL",
    "is_match_all",
    "conjunction",
    "disjunction",
    "negate",
    "string_pattern",
    # Compilation / evaluation
    "compile_query_tree",
    "MemoryOperatorRegistry",
    "build_default_registry",
]
