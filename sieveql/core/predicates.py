"""Predicate-operator values placed into a compiled predicate.

A compiled predicate maps field names to either a plain value (equality) or a
:class:`FindOperator`. The storage layer decides how each operator becomes a
native query; see :mod:`sieveql.sql.builders` for the SQLAlchemy translation.
"""
from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Union


class PredicateOp(str, Enum):
    NOT = 'not'
    IN = 'in'
    MORE_THAN = 'moreThan'
    MORE_THAN_OR_EQUAL = 'moreThanOrEqual'
    LESS_THAN = 'lessThan'
    LESS_THAN_OR_EQUAL = 'lessThanOrEqual'
    LIKE = 'like'
    ILIKE = 'ilike'
    BETWEEN = 'between'
    IS_NULL = 'isNull'
    RAW = 'raw'


@dataclass(frozen=True)
class FindOperator:
    """A comparator wrapper. ``value`` may itself be a FindOperator (negation)."""

    op: PredicateOp
    value: Any = None

    def __repr__(self) -> str:
        if self.op is PredicateOp.IS_NULL:
            return 'IsNull()'
        return f'{self.op.value}({self.value!r})'


Conjunction = Dict[str, Any]
CompiledPredicate = Union[Conjunction, List[Conjunction]]


def negation(value: Any) -> FindOperator:
    return FindOperator(PredicateOp.NOT, value)


def membership(values: Any) -> FindOperator:
    return FindOperator(PredicateOp.IN, values)


def range_gt(value: Any) -> FindOperator:
    return FindOperator(PredicateOp.MORE_THAN, value)


def range_gte(value: Any) -> FindOperator:
    return FindOperator(PredicateOp.MORE_THAN_OR_EQUAL, value)


def range_lt(value: Any) -> FindOperator:
    return FindOperator(PredicateOp.LESS_THAN, value)


def range_lte(value: Any) -> FindOperator:
    return FindOperator(PredicateOp.LESS_THAN_OR_EQUAL, value)


def like(pattern: Any) -> FindOperator:
    return FindOperator(PredicateOp.LIKE, pattern)


def ilike(pattern: Any) -> FindOperator:
    return FindOperator(PredicateOp.ILIKE, pattern)


def between(low: Any, high: Any) -> FindOperator:
    return FindOperator(PredicateOp.BETWEEN, (low, high))


def is_null() -> FindOperator:
    return FindOperator(PredicateOp.IS_NULL)


def raw_expression(expression: Any) -> FindOperator:
    """Wrap a caller-supplied raw expression. The payload is NOT sanitized."""
    return FindOperator(PredicateOp.RAW, expression)
