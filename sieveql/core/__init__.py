"""Core building blocks: field metadata, specs and the filter compiler.

Nothing here depends on Strawberry or SQLAlchemy.
"""
from .compiler import FilterCompiler, compile_filter, convert_value
from .fields import (
    Entity,
    EntitySpec,
    FieldDescriptor,
    RelationKind,
    ScalarKind,
    field,
    relation,
    sortable_field,
    where_field,
)
from .operators import Op, operators_for_kind
from .predicates import FindOperator, PredicateOp
from .specs import (
    FilterSpec,
    FilterSpecRef,
    OperatorSchema,
    SortDirection,
    SortLeaf,
    SortSpec,
    SortSpecRef,
    build_filter_spec,
    build_sort_spec,
)

__all__ = [
    'FilterCompiler', 'compile_filter', 'convert_value',
    'Entity', 'EntitySpec', 'FieldDescriptor', 'RelationKind', 'ScalarKind',
    'field', 'relation', 'sortable_field', 'where_field',
    'Op', 'operators_for_kind', 'FindOperator', 'PredicateOp',
    'FilterSpec', 'FilterSpecRef', 'OperatorSchema', 'SortDirection', 'SortLeaf',
    'SortSpec', 'SortSpecRef', 'build_filter_spec', 'build_sort_spec',
]
