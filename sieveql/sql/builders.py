from __future__ import annotations
import logging
from datetime import date, datetime
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple

from sqlalchemy import and_, inspect as sa_inspect, or_, select, text as _text, true
from sqlalchemy.orm import aliased, selectinload
from sqlalchemy.sql.sqltypes import Boolean, Date, DateTime, Float, Integer, Numeric

from ..config import SieveConfig
from ..core.predicates import FindOperator, PredicateOp

_logger = logging.getLogger("sieveql")

# Translation of predicate-operator values to column expressions (extensible)
OPERATOR_REGISTRY: Dict[PredicateOp, Callable[[Any, Any], Any]] = {
    PredicateOp.IN: lambda col, v: col.in_(list(v) if isinstance(v, (list, tuple, set)) else [v]),
    PredicateOp.MORE_THAN: lambda col, v: col > v,
    PredicateOp.MORE_THAN_OR_EQUAL: lambda col, v: col >= v,
    PredicateOp.LESS_THAN: lambda col, v: col < v,
    PredicateOp.LESS_THAN_OR_EQUAL: lambda col, v: col <= v,
    PredicateOp.LIKE: lambda col, v: col.like(v),
    PredicateOp.ILIKE: lambda col, v: col.ilike(v),
    PredicateOp.BETWEEN: lambda col, v: col.between(v[0], v[1]),
    PredicateOp.IS_NULL: lambda col, v: col.is_(None),
}


def register_operator(op: PredicateOp, fn: Callable[[Any, Any], Any]) -> None:  # pragma: no cover - simple
    OPERATOR_REGISTRY[op] = fn


def coerce_where_value(col, val):
    """Best-effort coercion of JSON-ish values (ISO strings, numeric strings) to the column type."""
    if isinstance(val, (list, tuple)):
        return [coerce_where_value(col, v) for v in val]
    ctype = getattr(col, 'type', None)
    if ctype is None or val is None:
        return val
    if isinstance(ctype, DateTime) and isinstance(val, str):
        s = val.replace('Z', '+00:00') if val.endswith('Z') else val
        try:
            dv = datetime.fromisoformat(s)
        except ValueError:
            return val
        if getattr(ctype, 'timezone', False) is False and dv.tzinfo is not None:
            dv = dv.replace(tzinfo=None)
        return dv
    if isinstance(ctype, Date) and isinstance(val, str):
        try:
            return date.fromisoformat(val)
        except ValueError:
            return val
    if isinstance(ctype, Integer) and isinstance(val, str):
        try:
            return int(val)
        except ValueError:
            return val
    if isinstance(ctype, Integer) and isinstance(val, float) and val.is_integer():
        return int(val)
    if isinstance(ctype, (Numeric, Float)) and isinstance(val, str):
        try:
            return float(val)
        except ValueError:
            return val
    if isinstance(ctype, Boolean) and isinstance(val, str):
        lv = val.strip().lower()
        if lv in ('true', 't', '1', 'yes', 'y'):
            return True
        if lv in ('false', 'f', '0', 'no', 'n'):
            return False
    return val


class WhereBuilder:
    """Translate a compiled predicate into a SQLAlchemy boolean expression.

    Rules:
      - a conjunction (dict) becomes ``and_`` of its entries, a disjunction
        (list) becomes ``or_`` of its conjunctions;
      - a plain value means equality, ``None`` means ``IS NULL`` and a list
        means ``IN``;
      - relation keys take a nested conjunction, rendered with ``.has()`` for
        to-one and ``.any()`` for to-many relationships;
      - ``raw`` predicates are refused unless ``allow_raw`` is set. Raw text is
        inserted as-is: callers enabling it own the sanitization.
    """

    def __init__(self, *, allow_raw: bool = False):
        self.allow_raw = allow_raw

    def build(self, model_cls, where: Any):
        if where is None:
            return None
        if isinstance(where, list):
            if not where:
                return None
            return or_(*[self._conjunction(model_cls, c) for c in where])
        if isinstance(where, Mapping):
            if not where:
                return None
            return self._conjunction(model_cls, where)
        raise ValueError(f"Unsupported compiled predicate: {where!r}")

    def _conjunction(self, model_cls, conj: Mapping[str, Any]):
        if not isinstance(conj, Mapping):
            raise ValueError(f"Expected a conjunction object, got {conj!r}")
        mapper = sa_inspect(model_cls)
        exprs: List[Any] = []
        for key, value in conj.items():
            if key in mapper.relationships:
                exprs.append(self._relation(model_cls, mapper.relationships[key], value))
                continue
            if key not in mapper.column_attrs:
                raise ValueError(f"Unknown where column: {key}")
            col = getattr(model_cls, key)
            exprs.append(self._column(col, value))
        if not exprs:
            return true()
        return and_(*exprs)

    def _relation(self, model_cls, rel, value):
        attr = getattr(model_cls, rel.key)
        target = rel.mapper.class_
        if isinstance(value, list):
            inner = or_(*[self._conjunction(target, c) for c in value]) if value else true()
        elif isinstance(value, Mapping):
            inner = self._conjunction(target, value)
        else:
            raise ValueError(f"Relation filter for '{rel.key}' must be an object, got {value!r}")
        return attr.any(inner) if rel.uselist else attr.has(inner)

    def _column(self, col, value):
        if isinstance(value, FindOperator):
            return self._operator(col, value)
        if value is None:
            return col.is_(None)
        if isinstance(value, (list, tuple)):
            return col.in_(coerce_where_value(col, list(value)))
        if isinstance(value, Mapping):
            # Unknown operators are passed through by the compiler; reject them here
            raise ValueError(f"Unknown where operator: {', '.join(str(k) for k in value.keys())}")
        return col == coerce_where_value(col, value)

    def _operator(self, col, op: FindOperator):
        if op.op is PredicateOp.NOT:
            inner = op.value
            if isinstance(inner, FindOperator):
                return ~self._operator(col, inner)
            if inner is None:
                return col.is_not(None)
            return col != coerce_where_value(col, inner)
        if op.op is PredicateOp.RAW:
            if not self.allow_raw:
                raise ValueError("Raw where expressions are disabled (allow_raw=False)")
            _logger.warning(f"Applying raw where expression on {getattr(col, 'key', col)}")
            return _text(str(op.value))
        fn = OPERATOR_REGISTRY.get(op.op)
        if fn is None:
            raise ValueError(f"Unknown where operator: {op.op}")
        return fn(col, coerce_where_value(col, op.value))


def where_clause(model_cls, where: Any, *, allow_raw: bool = False):
    """Build a SQLAlchemy where clause from a compiled predicate (``None`` when empty)."""
    return WhereBuilder(allow_raw=allow_raw).build(model_cls, where)


def order_clauses(model_cls, order: Optional[Mapping[str, Any]]) -> Tuple[List[Any], List[Any]]:
    """Translate a sort expression into ``(joins, order_by)``.

    Nested objects sort through a relationship: the relationship is outer
    joined (aliased per path) and its columns ordered. Joining to-many
    relationships multiplies rows; sort through to-one relations.
    """
    joins: List[Any] = []
    order_by: List[Any] = []
    _collect_order(model_cls, model_cls, order or {}, joins, order_by, [])
    return joins, order_by


def _collect_order(model_cls, entity, order: Mapping[str, Any], joins: List[Any], order_by: List[Any], path: List[str]) -> None:
    mapper = sa_inspect(model_cls)
    for key, value in order.items():
        if value is None:
            continue
        dotted = '.'.join(path + [key])
        if key in mapper.relationships:
            if not isinstance(value, Mapping):
                raise ValueError(f"Invalid order_by for relation '{dotted}': expected an object, got {value!r}")
            target = mapper.relationships[key].mapper.class_
            target_alias = aliased(target)
            joins.append(getattr(entity, key).of_type(target_alias))
            _collect_order(target, target_alias, value, joins, order_by, path + [key])
            continue
        if key not in mapper.column_attrs:
            raise ValueError(f"Invalid order_by: unknown column '{dotted}'")
        direction = str(getattr(value, 'value', value)).upper()
        col = getattr(entity, key)
        if direction == 'ASC':
            order_by.append(col.asc())
        elif direction == 'DESC':
            order_by.append(col.desc())
        else:
            raise ValueError(f"Invalid order_by direction for '{dotted}': {value!r}")


def apply_find_options(stmt, model_cls, options, *, allow_raw: bool = False, config: Optional[SieveConfig] = None):
    """Apply :class:`~sieveql.assembler.FindOptions` to a ``select(model_cls)`` statement.

    Only builds the statement; executing it is up to the caller's session.
    Raw predicates are accepted when ``allow_raw`` or ``config.allow_raw`` is set.
    """
    if config is not None and config.allow_raw:
        allow_raw = True
    clause = where_clause(model_cls, options.where, allow_raw=allow_raw)
    if clause is not None:
        stmt = stmt.where(clause)
    joins, order_by = order_clauses(model_cls, options.order)
    for join_target in joins:
        stmt = stmt.outerjoin(join_target)
    if order_by:
        stmt = stmt.order_by(*order_by)
    # FindOneOptions carries no pagination or relations
    skip = getattr(options, 'skip', 0)
    take = getattr(options, 'take', None)
    if skip:
        stmt = stmt.offset(skip)
    if take is not None:
        stmt = stmt.limit(take)
    mapper = sa_inspect(model_cls)
    for rel_name in getattr(options, 'relations', ()):
        if rel_name in mapper.relationships:
            stmt = stmt.options(selectinload(getattr(model_cls, rel_name)))
        else:
            _logger.warning(f"Skipping eager load of unknown relation '{rel_name}' on {model_cls.__name__}")
    return stmt


def find_statement(model_cls, options, *, allow_raw: bool = False, config: Optional[SieveConfig] = None):
    """``select(model_cls)`` with find options applied."""
    return apply_find_options(select(model_cls), model_cls, options, allow_raw=allow_raw, config=config)


__all__ = [
    'OPERATOR_REGISTRY',
    'register_operator',
    'coerce_where_value',
    'WhereBuilder',
    'where_clause',
    'order_clauses',
    'apply_find_options',
    'find_statement',
]
