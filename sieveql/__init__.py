"""sieveql public API and lazy exports.

The core (registry, specs, compiler, assembler) is imported eagerly; the
Strawberry input builder and the SQLAlchemy adapter load on first access so
that importing sieveql does not pull in either library.

Exposes:
- Registry, bootstrap
- Entity, field, relation, sortable_field, where_field, ScalarKind, FieldDescriptor
- compile_filter, assemble, assemble_one, FindOptions, QueryArgs
- SieveConfig, PaginationPolicy and the error classes
- Lazy: InputTypeBuilder, input_to_filter, input_to_sort, sql
"""
from __future__ import annotations

from .assembler import FindOneOptions, FindOptions, QueryArgs, assemble, assemble_one
from .config import DEFAULT_CONFIG, PaginationPolicy, SieveConfig
from .core.compiler import compile_filter, convert_value
from .core.fields import (
    Entity,
    FieldDescriptor,
    RelationKind,
    ScalarKind,
    field,
    relation,
    sortable_field,
    where_field,
)
from .errors import (
    InvalidPaginationError,
    InvalidSortError,
    RegistryFrozenError,
    RegistryNotFinalizedError,
    SieveError,
    SpecNotFoundError,
)
from .registry import Registry, bootstrap

__version__ = '0.1.0'


def __getattr__(name: str):  # PEP 562 lazy exports
    import importlib as _importlib
    if name in {'sql', 'input_types', 'input_converter'}:
        return _importlib.import_module(__name__ + '.' + name)
    if name in {'InputTypeBuilder', 'SortDirectionInput'}:
        _types = _importlib.import_module(__name__ + '.input_types')
        return getattr(_types, 'SortDirection' if name == 'SortDirectionInput' else name)
    if name in {'input_to_filter', 'input_to_sort', 'input_to_dict'}:
        _conv = _importlib.import_module(__name__ + '.input_converter')
        return getattr(_conv, name)
    raise AttributeError(name)


__all__ = [
    'Registry', 'bootstrap',
    'Entity', 'FieldDescriptor', 'RelationKind', 'ScalarKind',
    'field', 'relation', 'sortable_field', 'where_field',
    'compile_filter', 'convert_value',
    'assemble', 'assemble_one', 'FindOptions', 'FindOneOptions', 'QueryArgs',
    'SieveConfig', 'PaginationPolicy', 'DEFAULT_CONFIG',
    'SieveError', 'SpecNotFoundError', 'RegistryNotFinalizedError', 'RegistryFrozenError',
    'InvalidPaginationError', 'InvalidSortError',
    'InputTypeBuilder', 'SortDirectionInput', 'input_to_filter', 'input_to_sort', 'input_to_dict',
    'sql',
]
