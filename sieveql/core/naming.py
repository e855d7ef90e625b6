from __future__ import annotations

import keyword
import re

__all__ = [
    'python_identifier',
    'sort_order_type_name',
    'where_input_type_name',
]

_invalid_ident_chars = re.compile(r'\W')


def python_identifier(name: str) -> str:
    """Return a Python attribute name usable for a (GraphQL) field name.

    Keywords get a trailing underscore (``in`` -> ``in_``); characters that
    are not valid in identifiers become underscores.
    """
    ident = _invalid_ident_chars.sub('_', str(name))
    if not ident or ident[0].isdigit():
        ident = f'_{ident}'
    if keyword.iskeyword(ident):
        ident = f'{ident}_'
    return ident


def sort_order_type_name(entity_name: str) -> str:
    return f'{entity_name}SortOrder'


def where_input_type_name(entity_name: str) -> str:
    return f'{entity_name}WhereInput'
