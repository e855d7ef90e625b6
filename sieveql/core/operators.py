from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, FrozenSet, Mapping, Tuple, Union

from .fields import FieldKind, ScalarKind


class Op(str, Enum):
    """Named filter operators accepted inside a field condition."""

    EQ = 'eq'
    NE = 'ne'
    IN = 'in'
    NIN = 'nin'
    GT = 'gt'
    GTE = 'gte'
    LT = 'lt'
    LTE = 'lte'
    LIKE = 'like'
    ILIKE = 'ilike'
    BETWEEN = 'between'
    IS_NULL = 'isNull'
    RAW = 'raw'


@dataclass(frozen=True)
class UnknownOperator:
    """An operator key that is not part of :class:`Op`; passed through verbatim."""

    key: str


Operator = Union[Op, UnknownOperator]

_BY_KEY: Dict[str, Op] = {op.value: op for op in Op}


def parse_operator(key: Any) -> Operator:
    op = _BY_KEY.get(key) if isinstance(key, str) else None
    if op is None:
        return UnknownOperator(str(key))
    return op


def is_operator_key(key: Any) -> bool:
    return isinstance(key, str) and key in _BY_KEY


# OperatorSchema per scalar kind
STRING_OPERATORS: FrozenSet[Op] = frozenset({
    Op.EQ, Op.NE, Op.IN, Op.NIN, Op.LIKE, Op.ILIKE, Op.IS_NULL, Op.RAW,
})
NUMBER_OPERATORS: FrozenSet[Op] = frozenset({
    Op.EQ, Op.NE, Op.IN, Op.NIN, Op.GT, Op.GTE, Op.LT, Op.LTE, Op.BETWEEN, Op.IS_NULL, Op.RAW,
})
DATE_OPERATORS: FrozenSet[Op] = NUMBER_OPERATORS
BOOLEAN_OPERATORS: FrozenSet[Op] = frozenset({Op.EQ, Op.NE, Op.IS_NULL, Op.RAW})
ID_OPERATORS: FrozenSet[Op] = frozenset({Op.EQ, Op.NE, Op.IN, Op.NIN, Op.IS_NULL, Op.RAW})

OPERATOR_SETS: Dict[ScalarKind, FrozenSet[Op]] = {
    ScalarKind.STRING: STRING_OPERATORS,
    ScalarKind.NUMBER: NUMBER_OPERATORS,
    ScalarKind.DATE: DATE_OPERATORS,
    ScalarKind.BOOLEAN: BOOLEAN_OPERATORS,
    ScalarKind.ID: ID_OPERATORS,
}


def operators_for_kind(kind: FieldKind) -> FrozenSet[Op]:
    """Return the legal operators for a scalar kind.

    Kinds without a dedicated set (``enum`` and any unknown kind name) get the
    string operators. This fallback is intentional, not an error.
    """
    if isinstance(kind, ScalarKind):
        return OPERATOR_SETS.get(kind, STRING_OPERATORS)
    return STRING_OPERATORS


@dataclass(frozen=True)
class OperatorChoice:
    """Outcome of picking the operator for a multi-key field condition."""

    operator: Operator
    value: Any
    discarded: Tuple[str, ...] = ()


def select_operator(condition: Mapping[str, Any]) -> OperatorChoice:
    """Pick the operator that applies to a non-empty operator object.

    The first key in insertion order wins; every later key is reported in
    ``discarded`` and ignored by the compiler.
    """
    if not condition:
        raise ValueError("select_operator() requires a non-empty mapping")
    keys = list(condition.keys())
    first = keys[0]
    return OperatorChoice(
        operator=parse_operator(first),
        value=condition[first],
        discarded=tuple(str(k) for k in keys[1:]),
    )
