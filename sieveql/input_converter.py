"""
Input converter utilities for GraphQL input types.

This module converts Strawberry input instances (generated by
:class:`sieveql.input_types.InputTypeBuilder`) back to the plain data that the
filter compiler and the assembler consume. Keys are GraphQL field names
(``in``, ``isNull``, ``AND``), not Python attribute names.
"""

from dataclasses import fields as dc_fields, is_dataclass
from enum import Enum
from typing import Any, Dict, List, Optional, Union

import strawberry

UNSET: Any = strawberry.UNSET


def _graphql_names(obj: Any) -> Dict[str, str]:
    """Map python attribute names to GraphQL names for a strawberry input instance."""
    definition = getattr(type(obj), '__strawberry_definition__', None)
    if definition is None:
        return {}
    out: Dict[str, str] = {}
    for f in getattr(definition, 'fields', []) or []:
        python_name = getattr(f, 'python_name', None)
        if python_name:
            out[python_name] = getattr(f, 'graphql_name', None) or python_name
    return out


def input_to_dict(obj: Any) -> Any:
    """
    Convert a Strawberry input instance (or nested list/dict) to plain Python data.

    - UNSET (omitted) fields are dropped; explicit ``None`` is kept.
    - Enum members become their values.
    - Lists and dicts are converted element-wise.

    Args:
        obj: Strawberry input instance, list, dict or scalar

    Returns:
        The converted value
    """
    if obj is None or obj is UNSET:
        return None
    if isinstance(obj, Enum):
        return obj.value
    if isinstance(obj, (str, int, float, bool)):
        return obj
    if isinstance(obj, (list, tuple)):
        return [input_to_dict(x) for x in obj]
    if isinstance(obj, dict):
        return {k: input_to_dict(v) for k, v in obj.items()}
    if is_dataclass(obj) and not isinstance(obj, type):
        names = _graphql_names(obj)
        out: Dict[str, Any] = {}
        for f in dc_fields(obj):
            value = getattr(obj, f.name, UNSET)
            if value is UNSET:
                continue
            out[names.get(f.name, f.name)] = input_to_dict(value)
        return out
    return obj


def input_to_filter(where: Any) -> Union[Dict[str, Any], List[Any], None]:
    """
    Convert a where input (single instance or list of instances) to a filter expression.

    Returns:
        A filter expression ready for :func:`sieveql.core.compiler.compile_filter`,
        or ``None`` when no filter was supplied.
    """
    if where is None or where is UNSET:
        return None
    return input_to_dict(where)


def input_to_sort(order: Any) -> Optional[Dict[str, Any]]:
    """
    Convert a sort order input to a sort expression.

    Fields left out (or explicitly null) are dropped, so the result only holds
    ``ASC``/``DESC`` leaves and nested relation objects.
    """
    if order is None or order is UNSET:
        return None
    converted = input_to_dict(order)
    return _drop_nulls(converted) if isinstance(converted, dict) else converted


def _drop_nulls(expression: Dict[str, Any]) -> Dict[str, Any]:
    out: Dict[str, Any] = {}
    for key, value in expression.items():
        if value is None:
            continue
        out[key] = _drop_nulls(value) if isinstance(value, dict) else value
    return out


__all__ = ['input_to_dict', 'input_to_filter', 'input_to_sort']
