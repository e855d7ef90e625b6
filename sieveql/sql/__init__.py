"""SQLAlchemy adapter: turns find options into ``select()`` statements."""
from .builders import (
    OPERATOR_REGISTRY,
    WhereBuilder,
    apply_find_options,
    coerce_where_value,
    find_statement,
    order_clauses,
    register_operator,
    where_clause,
)
from .models import column_kind, descriptors_from_model

__all__ = [
    'OPERATOR_REGISTRY',
    'WhereBuilder',
    'apply_find_options',
    'coerce_where_value',
    'find_statement',
    'order_clauses',
    'register_operator',
    'where_clause',
    'column_kind',
    'descriptors_from_model',
]
