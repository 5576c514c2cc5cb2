"""Mongo query builder from the predicate AST."""

from __future__ import annotations

from typing import Any

from ..exceptions import MongoQueryError
from ..query.predicate import And, Compare, Not, Or, Predicate
from .operators import compile_null, compile_standard, compile_string

_COMPILERS = [
    compile_standard,
    compile_string,
    compile_null,
]


def _compile_compare(predicate: Compare) -> dict[str, Any]:
    """Compile a single comparison to a MongoDB query document."""
    for compiler in _COMPILERS:
        result = compiler(predicate.field, predicate.op, predicate.value)
        if result is not None:
            return result
    raise MongoQueryError(f"Unsupported operator: {predicate.op.value}")


def _compile_node(predicate: Predicate) -> dict[str, Any]:
    """Recursively compile a predicate to a MongoDB filter."""
    if isinstance(predicate, Compare):
        return _compile_compare(predicate)
    if isinstance(predicate, And):
        if not predicate.operands:
            return {}
        return {"$and": [_compile_node(p) for p in predicate.operands]}
    if isinstance(predicate, Or):
        if not predicate.operands:
            # Or() is always false; $in with no values never matches.
            return {"_id": {"$in": []}}
        return {"$or": [_compile_node(p) for p in predicate.operands]}
    if isinstance(predicate, Not):
        inner = _compile_node(predicate.operand)
        return {"$nor": [inner]} if inner else {}
    raise MongoQueryError(f"Not a predicate: {predicate!r}")


class MongoQueryBuilder:
    """Renders predicates and query options to MongoDB query documents."""

    def build_match(self, predicate: Predicate | None) -> dict[str, Any]:
        """Build the filter document. ``None`` and match-all give ``{}``."""
        if predicate is None:
            return {}
        return _compile_node(predicate)

    def build_sort(
        self, order_by: list[tuple[str, str]] | None
    ) -> list[tuple[str, int]]:
        """Build MongoDB sort tuples from ``[(field, "asc"|"desc")]``."""
        if not order_by:
            return []
        return [
            (field, -1 if str(direction).lower() == "desc" else 1)
            for field, direction in order_by
        ]

    def build_project(self, fields: list[str] | None) -> dict[str, int] | None:
        """Build $project stage: { field: 1, ... }. None means no projection."""
        if not fields:
            return None
        return dict.fromkeys(fields, 1)

    def build_pipeline(
        self,
        *,
        match: dict[str, Any],
        sort: list[tuple[str, int]] | None = None,
        skip: int | None = None,
        limit: int | None = None,
        fields: list[str] | None = None,
    ) -> list[dict[str, Any]]:
        """Aggregation pipeline: $match, $sort, $skip, $limit, $project.

        Non-positive *skip* and *limit* are ignored.
        """
        pipeline: list[dict[str, Any]] = []
        if match:
            pipeline.append({"$match": match})
        if sort:
            pipeline.append({"$sort": dict(sort)})
        if skip is not None and skip > 0:
            pipeline.append({"$skip": skip})
        if limit is not None and limit > 0:
            pipeline.append({"$limit": limit})
        project = self.build_project(fields)
        if project:
            pipeline.append({"$project": project})
        return pipeline

    def build_distinct_pipeline(
        self, field: str, *, match: dict[str, Any], limit: int
    ) -> list[dict[str, Any]]:
        """Pipeline returning up to *limit* distinct non-empty values of *field*,
        sorted ascending, each as the ``_id`` of a result document."""
        non_empty = {field: {"$nin": [None, ""]}}
        return [
            {"$match": {"$and": [match, non_empty]} if match else non_empty},
            {"$group": {"_id": f"${field}"}},
            {"$sort": {"_id": 1}},
            {"$limit": limit},
        ]
