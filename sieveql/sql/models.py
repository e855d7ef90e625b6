from __future__ import annotations
from typing import Any, Iterable, List, Mapping, Optional

from sqlalchemy import Uuid, inspect as sa_inspect
from sqlalchemy.sql.sqltypes import (
    Boolean,
    Date,
    DateTime,
    Enum as SAEnum,
    Float,
    Integer,
    Numeric,
    String,
    Time,
)

from ..core.fields import FieldDescriptor, FieldKind, RelationKind, ScalarKind


def column_kind(column) -> FieldKind:
    """Map a SQLAlchemy column to the ScalarKind that drives its filter operators.

    Primary and foreign keys are identifiers. Column types without a matching
    kind keep their lower-cased type name and get string operators.
    """
    if getattr(column, 'primary_key', False) or getattr(column, 'foreign_keys', None):
        return ScalarKind.ID
    ctype = getattr(column, 'type', None)
    # Enum is a String subclass; check it first
    if isinstance(ctype, SAEnum):
        return ScalarKind.ENUM
    if isinstance(ctype, Uuid):
        return ScalarKind.ID
    if isinstance(ctype, Boolean):
        return ScalarKind.BOOLEAN
    if isinstance(ctype, (Integer, Numeric, Float)):
        return ScalarKind.NUMBER
    if isinstance(ctype, (DateTime, Date, Time)):
        return ScalarKind.DATE
    if isinstance(ctype, String):
        return ScalarKind.STRING
    return type(ctype).__name__.lower() if ctype is not None else ScalarKind.STRING


def descriptors_from_model(
    model_cls,
    *,
    exclude: Iterable[str] = (),
    relations: Optional[Mapping[str, Optional[str]]] = None,
    sortable: bool = True,
    filterable: bool = True,
) -> List[FieldDescriptor]:
    """Derive FieldDescriptors from a mapped SQLAlchemy model.

    Every column attribute becomes a scalar field. Relationships are only
    included when listed in ``relations``: a mapping of relationship key to
    target entity name, where ``None`` means "use the target class name".

    Example:
        registry.register_entity('Order', descriptors_from_model(Order, relations={'customer': None}))
    """
    mapper = sa_inspect(model_cls)
    skip = set(exclude)
    out: List[FieldDescriptor] = []
    for attr in mapper.column_attrs:
        if attr.key in skip:
            continue
        column = attr.columns[0]
        out.append(FieldDescriptor(attr.key, column_kind(column), sortable=sortable, filterable=filterable))
    for key, target in (relations or {}).items():
        if key in skip:
            continue
        if key not in mapper.relationships:
            raise ValueError(f"{model_cls.__name__} has no relationship '{key}'")
        rel = mapper.relationships[key]
        target_name: Any = target or rel.mapper.class_.__name__
        out.append(FieldDescriptor(key, RelationKind(target_name), sortable=sortable, filterable=filterable))
    return out


__all__ = ['column_kind', 'descriptors_from_model']
