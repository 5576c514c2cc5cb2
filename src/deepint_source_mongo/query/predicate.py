"""
Backend-neutral predicate AST.

A compiled filter is a tree of :class:`Compare` leaves combined with
:class:`And`, :class:`Or` and :class:`Not`. Backends render it with their
own query builder (see :mod:`deepint_source_mongo.mongo.query_builder`).

``MATCH_ALL`` is the empty conjunction, which is vacuously true.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import Any, Union


class CompareOperator(str, Enum):
    """Atomic comparison between a field and a literal."""

    EQ = "eq"
    LT = "lt"
    LE = "le"
    GT = "gt"
    GE = "ge"
    IS_NULL = "is_null"

    CONTAINS = "contains"
    ICONTAINS = "icontains"
    STARTSWITH = "startswith"
    ISTARTSWITH = "istartswith"
    ENDSWITH = "endswith"
    IENDSWITH = "iendswith"

    @property
    def is_string_match(self) -> bool:
        return self in _STRING_MATCH_OPERATORS

    @property
    def case_insensitive(self) -> bool:
        return self in (
            CompareOperator.ICONTAINS,
            CompareOperator.ISTARTSWITH,
            CompareOperator.IENDSWITH,
        )


_STRING_MATCH_OPERATORS = frozenset(
    {
        CompareOperator.CONTAINS,
        CompareOperator.ICONTAINS,
        CompareOperator.STARTSWITH,
        CompareOperator.ISTARTSWITH,
        CompareOperator.ENDSWITH,
        CompareOperator.IENDSWITH,
    }
)


@dataclass(frozen=True)
class Compare:
    """``field <op> value``."""

    field: str
    op: CompareOperator
    value: Any = None

    def to_dict(self) -> dict[str, Any]:
        return {"op": self.op.value, "attr": self.field, "val": self.value}


@dataclass(frozen=True)
class And:
    """Logical AND; no operands means "always true"."""

    operands: tuple[Predicate, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {"op": "and", "conditions": [p.to_dict() for p in self.operands]}


@dataclass(frozen=True)
class Or:
    """Logical OR; no operands means "always false"."""

    operands: tuple[Predicate, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {"op": "or", "conditions": [p.to_dict() for p in self.operands]}


@dataclass(frozen=True)
class Not:
    """Logical NOT."""

    operand: Predicate

    def to_dict(self) -> dict[str, Any]:
        return {"op": "not", "conditions": [self.operand.to_dict()]}


Predicate = Union[Compare, And, Or, Not]

MATCH_ALL: Predicate = And(())


def is_match_all(predicate: Predicate) -> bool:
    return isinstance(predicate, And) and not predicate.operands


def conjunction(operands: list[Predicate]) -> Predicate:
    """AND of *operands*, dropping match-all operands (they are identities)."""
    kept = tuple(p for p in operands if not is_match_all(p))
    if not kept:
        return MATCH_ALL
    if len(kept) == 1:
        return kept[0]
    return And(kept)


def disjunction(operands: list[Predicate]) -> Predicate:
    """
    OR of *operands*.

    Collapses to match-all when any operand matches all, and also when
    there are no operands: an absent filter never rejects rows.
    """
    if not operands or any(is_match_all(p) for p in operands):
        return MATCH_ALL
    if len(operands) == 1:
        return operands[0]
    return Or(tuple(operands))


def negate(predicate: Predicate) -> Predicate:
    """
    Push a logical NOT through *predicate* (De Morgan).

    ``And`` becomes ``Or`` of negated operands and vice versa, a double
    negation cancels, and a comparison is wrapped in :class:`Not` so each
    backend renders the complement of its own comparison semantics.
    Match-all stays match-all: a filter that was dropped is not inverted.
    """
    if isinstance(predicate, Compare):
        return Not(predicate)
    if isinstance(predicate, Not):
        return predicate.operand
    if isinstance(predicate, And):
        if not predicate.operands:
            return MATCH_ALL
        return disjunction([negate(p) for p in predicate.operands])
    if not predicate.operands:
        return MATCH_ALL
    return conjunction([negate(p) for p in predicate.operands])


def string_pattern(op: CompareOperator, text: str) -> str:
    """
    Regular expression matching *text* literally, anchored for *op*.

    Every metacharacter in *text* is escaped, so ``a.b*`` only matches
    the four characters ``a.b*``.
    """
    escaped = re.escape(text)
    if op in (CompareOperator.STARTSWITH, CompareOperator.ISTARTSWITH):
        return "^" + escaped
    if op in (CompareOperator.ENDSWITH, CompareOperator.IENDSWITH):
        return escaped + "$"
    return escaped
