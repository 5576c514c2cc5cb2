"""Standard comparison operators for MongoDB query compilation."""

from __future__ import annotations

from typing import Any

from ...query.predicate import CompareOperator

_MONGO_OP_MAP: dict[CompareOperator, str] = {
    CompareOperator.EQ: "$eq",
    CompareOperator.GT: "$gt",
    CompareOperator.GE: "$gte",
    CompareOperator.LT: "$lt",
    CompareOperator.LE: "$lte",
}


def compile_standard(
    field: str, op: CompareOperator, val: Any
) -> dict[str, Any] | None:
    """Compile standard comparison operators to MongoDB query fragments."""
    mongo_op = _MONGO_OP_MAP.get(op)
    if mongo_op is None:
        return None
    return {field: {mongo_op: val}}
