"""Compile a sanitized :class:`QueryTree` into a backend-neutral predicate."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from ..codec import coerce
from .predicate import (
    MATCH_ALL,
    Compare,
    CompareOperator,
    Predicate,
    conjunction,
    disjunction,
    is_match_all,
    negate,
)
from .tree import NodeType, QueryOperation

if TYPE_CHECKING:
    from ..features import FeatureSchema
    from .tree import QueryTree

logger = logging.getLogger(__name__)

_OPERATION_MAP: dict[QueryOperation, CompareOperator] = {
    QueryOperation.NULL: CompareOperator.IS_NULL,
    QueryOperation.EQ: CompareOperator.EQ,
    QueryOperation.LT: CompareOperator.LT,
    QueryOperation.LE: CompareOperator.LE,
    QueryOperation.GT: CompareOperator.GT,
    QueryOperation.GE: CompareOperator.GE,
    QueryOperation.CN: CompareOperator.CONTAINS,
    QueryOperation.CNI: CompareOperator.ICONTAINS,
    QueryOperation.SW: CompareOperator.STARTSWITH,
    QueryOperation.SWI: CompareOperator.ISTARTSWITH,
    QueryOperation.EW: CompareOperator.ENDSWITH,
    QueryOperation.EWI: CompareOperator.IENDSWITH,
}


def _compile_leaf(schema: FeatureSchema, tree: QueryTree) -> Predicate:
    """Compile a ``single`` node. Invalid leaves are dropped (match all)."""
    if tree.operation is not QueryOperation.NULL and tree.right is None:
        return MATCH_ALL

    feature = schema.get(tree.left)
    if feature is None:
        logger.debug("Dropping condition on unknown feature index %d", tree.left)
        return MATCH_ALL

    op = _OPERATION_MAP.get(tree.operation)
    if op is None:
        return MATCH_ALL

    if op is CompareOperator.IS_NULL:
        return Compare(feature.name, op)

    literal = coerce(tree.right, feature.type)
    if op.is_string_match:
        text = literal if isinstance(literal, str) else tree.right
        return Compare(feature.name, op, text)
    return Compare(feature.name, op, literal)


def compile_query_tree(schema: FeatureSchema, tree: QueryTree | None) -> Predicate:
    """
    Compile *tree* against *schema*.

    - ``anyof``: OR of the children
    - ``allof``: AND of the children
    - ``not``: the negation of the AND of the children; match-all when a
      child was dropped, since its negation is match-all
    - ``single``: one comparison, with the literal coerced to the feature type

    Empty combinators, invalid leaves and a missing tree all compile to
    :data:`MATCH_ALL`.
    """
    if tree is None:
        return MATCH_ALL

    if tree.type is NodeType.ANYOF:
        return disjunction([compile_query_tree(schema, c) for c in tree.children])
    if tree.type is NodeType.ALLOF:
        return conjunction([compile_query_tree(schema, c) for c in tree.children])
    if tree.type is NodeType.NOT:
        operands = [compile_query_tree(schema, c) for c in tree.children]
        # A dropped child negates to match-all, which absorbs the whole OR.
        if not operands or any(is_match_all(p) for p in operands):
            return MATCH_ALL
        return negate(conjunction(operands))
    return _compile_leaf(schema, tree)
