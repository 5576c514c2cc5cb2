"""
In-memory predicate evaluation.

Evaluates a compiled predicate against a plain document with the same
comparison rules the Mongo renderer relies on: a missing field reads as
``None``, ordering comparisons only match values of the same type
bracket, and string matches only apply to string values.

This is part of the public API: use it to check a filter against documents
without a database. New operators are added with
:meth:`MemoryOperatorRegistry.register_func`.
"""

from __future__ import annotations

import datetime
import re
from collections.abc import Callable, Mapping
from typing import Any

from .predicate import (
    And,
    Compare,
    CompareOperator,
    Not,
    Or,
    Predicate,
    string_pattern,
)

OperatorFunc = Callable[[Any, Any], bool]


def _bracket(value: Any) -> str | None:
    if value is None:
        return None
    if isinstance(value, bool):
        return "bool"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, datetime.datetime):
        return "date"
    return type(value).__name__


def _comparable(field_value: Any, condition_value: Any) -> bool:
    bracket = _bracket(field_value)
    return bracket is not None and bracket == _bracket(condition_value)


def _as_utc(value: Any) -> Any:
    if isinstance(value, datetime.datetime) and value.tzinfo is None:
        return value.replace(tzinfo=datetime.timezone.utc)
    return value


def _eq(field_value: Any, condition_value: Any) -> bool:
    if condition_value is None:
        return field_value is None
    if not _comparable(field_value, condition_value):
        return False
    return bool(_as_utc(field_value) == _as_utc(condition_value))


def _ordering(check: Callable[[Any, Any], bool]) -> OperatorFunc:
    def evaluate(field_value: Any, condition_value: Any) -> bool:
        if not _comparable(field_value, condition_value):
            return False
        return check(_as_utc(field_value), _as_utc(condition_value))

    return evaluate


def _string_match(op: CompareOperator) -> OperatorFunc:
    flags = re.IGNORECASE if op.case_insensitive else 0

    def evaluate(field_value: Any, condition_value: Any) -> bool:
        if not isinstance(field_value, str) or condition_value is None:
            return False
        pattern = string_pattern(op, str(condition_value))
        return re.search(pattern, field_value, flags) is not None

    return evaluate


class MemoryOperatorRegistry:
    """
    Registry of evaluation functions keyed by :class:`CompareOperator`.

    Usage::

        registry = build_default_registry()
        registry.matches(predicate, {"species": "setosa"})
    """

    def __init__(self) -> None:
        self._operators: dict[CompareOperator, OperatorFunc] = {}

    def register_func(self, name: CompareOperator, func: OperatorFunc) -> None:
        self._operators[name] = func

    def has(self, name: CompareOperator) -> bool:
        return name in self._operators

    def evaluate(
        self, name: CompareOperator, field_value: Any, condition_value: Any
    ) -> bool:
        """
        Look up the operator and evaluate.

        Raises:
            ValueError: If the operator is not registered.
        """
        func = self._operators.get(name)
        if func is None:
            raise ValueError(f"Unsupported operator for in-memory evaluation: {name}")
        return func(field_value, condition_value)

    def matches(self, predicate: Predicate, document: Mapping[str, Any]) -> bool:
        """Return True if *document* satisfies *predicate*."""
        if isinstance(predicate, Compare):
            return self.evaluate(
                predicate.op, document.get(predicate.field), predicate.value
            )
        if isinstance(predicate, And):
            return all(self.matches(p, document) for p in predicate.operands)
        if isinstance(predicate, Or):
            return any(self.matches(p, document) for p in predicate.operands)
        if isinstance(predicate, Not):
            return not self.matches(predicate.operand, document)
        raise TypeError(f"Not a predicate: {predicate!r}")


def build_default_registry() -> MemoryOperatorRegistry:
    registry = MemoryOperatorRegistry()
    registry.register_func(CompareOperator.EQ, _eq)
    registry.register_func(CompareOperator.LT, _ordering(lambda a, b: a < b))
    registry.register_func(CompareOperator.LE, _ordering(lambda a, b: a <= b))
    registry.register_func(CompareOperator.GT, _ordering(lambda a, b: a > b))
    registry.register_func(CompareOperator.GE, _ordering(lambda a, b: a >= b))
    registry.register_func(CompareOperator.IS_NULL, lambda value, _: value is None)
    for op in CompareOperator:
        if op.is_string_match:
            registry.register_func(op, _string_match(op))
    return registry
