"""String operators -> $regex, $options (case-insensitive)."""

from __future__ import annotations

from typing import Any

from ...exceptions import MongoQueryError
from ...query.predicate import CompareOperator, string_pattern


def compile_string(
    field: str, op: CompareOperator, val: Any
) -> dict[str, Any] | None:
    """Compile string operators to MongoDB $regex. Returns None if not a string op."""
    if not op.is_string_match:
        return None
    if not isinstance(val, str):
        raise MongoQueryError(f"String operator {op.value} requires string value")
    options = "i" if op.case_insensitive else ""
    return {field: {"$regex": string_pattern(op, val), "$options": options}}
