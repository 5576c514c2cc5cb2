"""Null checks -> $exists, $eq null."""

from __future__ import annotations

from typing import Any

from ...query.predicate import CompareOperator


def compile_null(field: str, op: CompareOperator, _val: Any) -> dict[str, Any] | None:
    """Compile the null check: field absent or equal to null."""
    if op is not CompareOperator.IS_NULL:
        return None
    return {"$or": [{field: {"$exists": False}}, {field: {"$eq": None}}]}
