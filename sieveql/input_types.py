"""
Strawberry GraphQL input types for sort and filter arguments.

Static operator inputs mirror the per-kind operator sets (see
:mod:`sieveql.core.operators`). :class:`InputTypeBuilder` generates one
``<Entity>SortOrder`` and one ``<Entity>WhereInput`` per registered entity from
a finalized :class:`~sieveql.registry.Registry`.
"""

import logging
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional, Set

import strawberry

from .core.fields import FieldKind, ScalarKind
from .core.naming import python_identifier, sort_order_type_name, where_input_type_name
from .core.specs import FilterSpecRef, OperatorSchema, SortLeaf, SortSpecRef

_logger = logging.getLogger("sieveql")

UNSET: Any = strawberry.UNSET


class _SortDirectionEnum(Enum):
    ASC = 'ASC'
    DESC = 'DESC'


SortDirection = strawberry.enum(_SortDirectionEnum, name="SortDirection")  # type: ignore


@strawberry.input(name='StringWhereOperators')
class StringWhereOperators:
    """Operators for string (and enum or unknown kind) fields."""
    eq: Optional[str] = UNSET
    ne: Optional[str] = UNSET
    in_: Optional[List[str]] = strawberry.field(name="in", default=UNSET)
    nin: Optional[List[str]] = UNSET
    like: Optional[str] = UNSET
    ilike: Optional[str] = UNSET
    is_null: Optional[bool] = strawberry.field(name="isNull", default=UNSET)
    raw: Optional[str] = UNSET


@strawberry.input(name='NumberWhereOperators')
class NumberWhereOperators:
    """Operators for number fields."""
    eq: Optional[float] = UNSET
    ne: Optional[float] = UNSET
    in_: Optional[List[float]] = strawberry.field(name="in", default=UNSET)
    nin: Optional[List[float]] = UNSET
    gt: Optional[float] = UNSET
    gte: Optional[float] = UNSET
    lt: Optional[float] = UNSET
    lte: Optional[float] = UNSET
    between: Optional[List[float]] = UNSET
    is_null: Optional[bool] = strawberry.field(name="isNull", default=UNSET)
    raw: Optional[str] = UNSET


@strawberry.input(name='DateWhereOperators')
class DateWhereOperators:
    """Operators for date/time fields."""
    eq: Optional[datetime] = UNSET
    ne: Optional[datetime] = UNSET
    in_: Optional[List[datetime]] = strawberry.field(name="in", default=UNSET)
    nin: Optional[List[datetime]] = UNSET
    gt: Optional[datetime] = UNSET
    gte: Optional[datetime] = UNSET
    lt: Optional[datetime] = UNSET
    lte: Optional[datetime] = UNSET
    between: Optional[List[datetime]] = UNSET
    is_null: Optional[bool] = strawberry.field(name="isNull", default=UNSET)
    raw: Optional[str] = UNSET


@strawberry.input(name='BooleanWhereOperators')
class BooleanWhereOperators:
    """Operators for boolean fields."""
    eq: Optional[bool] = UNSET
    ne: Optional[bool] = UNSET
    is_null: Optional[bool] = strawberry.field(name="isNull", default=UNSET)
    raw: Optional[str] = UNSET


@strawberry.input(name='IdWhereOperators')
class IdWhereOperators:
    """Operators for identifier fields."""
    eq: Optional[strawberry.ID] = UNSET
    ne: Optional[strawberry.ID] = UNSET
    in_: Optional[List[strawberry.ID]] = strawberry.field(name="in", default=UNSET)
    nin: Optional[List[strawberry.ID]] = UNSET
    is_null: Optional[bool] = strawberry.field(name="isNull", default=UNSET)
    raw: Optional[strawberry.ID] = UNSET


OPERATOR_INPUTS: Dict[ScalarKind, Any] = {
    ScalarKind.STRING: StringWhereOperators,
    ScalarKind.NUMBER: NumberWhereOperators,
    ScalarKind.DATE: DateWhereOperators,
    ScalarKind.BOOLEAN: BooleanWhereOperators,
    ScalarKind.ID: IdWhereOperators,
}


def operator_input_for(kind: FieldKind) -> Any:
    """Operator input type for a scalar kind; unknown kinds use string operators."""
    if isinstance(kind, ScalarKind):
        return OPERATOR_INPUTS.get(kind, StringWhereOperators)
    return StringWhereOperators


class InputTypeBuilder:
    """Generate Strawberry sort/where input types for every registered entity.

    Relation fields reference the target entity's generated input, so the
    type graph may be cyclic (Order -> Customer -> Order). Plain classes are
    created first, annotations attached second, and only then is every class
    decorated with ``strawberry.input``.

    Entities without any sortable field get no ``SortOrder`` type; relation
    sort slots pointing at them are left out.

    Example:
        inputs = InputTypeBuilder(registry).build()
        OrderWhereInput = inputs.where_input('Order')
    """

    def __init__(self, registry):
        if not registry.finalized:
            raise RuntimeError("InputTypeBuilder requires a registry with finalized relations")
        self.registry = registry
        self._sort_types: Dict[str, Any] = {}
        self._where_types: Dict[str, Any] = {}
        self._built = False

    def build(self) -> 'InputTypeBuilder':
        if self._built:
            return self
        names = list(self.registry)
        sortable = self._entities_with_sort_fields(names)
        # First pass: plain classes
        for name in names:
            if name in sortable:
                self._sort_types[name] = self._plain(sort_order_type_name(name), f'Sort order for {name}')
            self._where_types[name] = self._plain(where_input_type_name(name), f'Filter for {name}')
        # Second pass: annotations and field defaults
        for name in names:
            if name in sortable:
                self._populate_sort(name, sortable)
            self._populate_where(name)
        # Decorate
        for name, cls in list(self._sort_types.items()):
            self._sort_types[name] = strawberry.input(cls, name=sort_order_type_name(name))  # type: ignore
        for name, cls in list(self._where_types.items()):
            self._where_types[name] = strawberry.input(cls, name=where_input_type_name(name))  # type: ignore
        self._built = True
        _logger.debug(f"Built GraphQL inputs for {len(names)} entities")
        return self

    # ---------- accessors ----------
    def sort_order(self, entity_name: str) -> Any:
        self.build()
        try:
            return self._sort_types[entity_name]
        except KeyError:
            raise KeyError(f"No sort order input for entity '{entity_name}'") from None

    def where_input(self, entity_name: str) -> Any:
        self.build()
        try:
            return self._where_types[entity_name]
        except KeyError:
            raise KeyError(f"No where input for entity '{entity_name}'") from None

    def types(self) -> Dict[str, Any]:
        """All generated types keyed by GraphQL type name."""
        self.build()
        out: Dict[str, Any] = {}
        for name, cls in self._sort_types.items():
            out[sort_order_type_name(name)] = cls
        for name, cls in self._where_types.items():
            out[where_input_type_name(name)] = cls
        return out

    # ---------- helpers ----------
    @staticmethod
    def _plain(type_name: str, doc: str) -> Any:
        cls = type(type_name, (), {'__doc__': doc})
        cls.__module__ = __name__
        return cls

    def _entities_with_sort_fields(self, names: List[str]) -> Set[str]:
        # An entity gets a SortOrder when it has a scalar sort field or a
        # relation slot to an entity that has one (fixpoint over refs).
        result: Set[str] = set()
        changed = True
        while changed:
            changed = False
            for name in names:
                if name in result:
                    continue
                for slot in self.registry.sort_spec(name).fields.values():
                    if isinstance(slot, SortLeaf) or (isinstance(slot, SortSpecRef) and slot.entity_name in result):
                        result.add(name)
                        changed = True
                        break
        return result

    def _populate_sort(self, name: str, sortable: Set[str]) -> None:
        cls = self._sort_types[name]
        anns: Dict[str, Any] = {}
        for fname, slot in self.registry.sort_spec(name).fields.items():
            if isinstance(slot, SortLeaf):
                target_type: Any = SortDirection
            elif slot.entity_name in sortable:
                target_type = self._sort_types[slot.entity_name]
            else:
                continue
            attr = python_identifier(fname)
            anns[attr] = Optional[target_type]
            setattr(cls, attr, strawberry.field(name=fname, default=UNSET))
        setattr(cls, '__annotations__', anns)

    def _populate_where(self, name: str) -> None:
        cls = self._where_types[name]
        spec = self.registry.filter_spec(name)
        anns: Dict[str, Any] = {}
        for combinator in spec.combinators:
            anns[combinator] = Optional[List[cls]]  # type: ignore[valid-type]
            setattr(cls, combinator, strawberry.field(name=combinator, default=UNSET))
        for fname, slot in spec.fields.items():
            attr = python_identifier(fname)
            if attr in anns:
                _logger.warning(f"Skipping filter field {name}.{fname}: name clashes with a combinator")
                continue
            if isinstance(slot, OperatorSchema):
                anns[attr] = Optional[operator_input_for(slot.kind)]
            elif isinstance(slot, FilterSpecRef):
                anns[attr] = Optional[self._where_types[slot.entity_name]]
            setattr(cls, attr, strawberry.field(name=fname, default=UNSET))
        setattr(cls, '__annotations__', anns)


__all__ = [
    'SortDirection',
    'StringWhereOperators',
    'NumberWhereOperators',
    'DateWhereOperators',
    'BooleanWhereOperators',
    'IdWhereOperators',
    'OPERATOR_INPUTS',
    'operator_input_for',
    'InputTypeBuilder',
]
