from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, FrozenSet, List, Mapping, Optional, Tuple, Union

from ..errors import InvalidSortError
from .fields import EntitySpec, FieldKind
from .operators import Op, operators_for_kind


class SortDirection(str, Enum):
    """The two literal sort directions."""

    ASC = 'ASC'
    DESC = 'DESC'


SORT_DIRECTIONS: Tuple[str, str] = (SortDirection.ASC.value, SortDirection.DESC.value)


@dataclass(frozen=True)
class SortLeaf:
    """Slot for a scalar sort field; accepts ``ASC``, ``DESC`` or absence."""

    kind: FieldKind


@dataclass(frozen=True)
class OperatorSchema:
    """Legal operators for one filterable scalar field."""

    kind: FieldKind
    operators: FrozenSet[Op]

    def allows(self, op: Union[Op, str]) -> bool:
        try:
            return Op(op) in self.operators
        except ValueError:
            return False


@dataclass(eq=False)
class SortSpec:
    entity_name: str
    fields: Mapping[str, Union[SortLeaf, 'SortSpecRef']] = field(default_factory=dict)

    def __repr__(self) -> str:
        return f"SortSpec({self.entity_name!r}, fields={list(self.fields)})"

    def __eq__(self, other: Any) -> bool:
        if not isinstance(other, SortSpec):
            return NotImplemented
        return self.entity_name == other.entity_name and dict(self.fields) == dict(other.fields)

    __hash__ = None  # type: ignore[assignment]

    def normalize(self, expression: Optional[Mapping[str, Any]]) -> Optional[Dict[str, Any]]:
        """Validate ``expression`` and return a copy with upper-cased directions."""
        if expression is None:
            return None
        return _normalize_sort(self, expression, [])

    def validate(self, expression: Optional[Mapping[str, Any]]) -> None:
        """Raise :class:`InvalidSortError` when ``expression`` does not fit this spec."""
        self.normalize(expression)


@dataclass(frozen=True)
class SortSpecRef:
    """Pointer from a relation sort field to the target entity's SortSpec.

    Compared and printed by target name only: spec graphs may be cyclic.
    """

    entity_name: str
    spec: Optional[SortSpec] = field(default=None, compare=False, repr=False)


@dataclass(eq=False)
class FilterSpec:
    entity_name: str
    fields: Mapping[str, Union[OperatorSchema, 'FilterSpecRef']] = field(default_factory=dict)
    supports_and: bool = True
    supports_or: bool = True

    def __repr__(self) -> str:
        return f"FilterSpec({self.entity_name!r}, fields={list(self.fields)})"

    def __eq__(self, other: Any) -> bool:
        if not isinstance(other, FilterSpec):
            return NotImplemented
        return self.entity_name == other.entity_name and dict(self.fields) == dict(other.fields)

    __hash__ = None  # type: ignore[assignment]

    @property
    def combinators(self) -> Tuple[str, ...]:
        out = []
        if self.supports_and:
            out.append('AND')
        if self.supports_or:
            out.append('OR')
        return tuple(out)

    def operators_for(self, name: str) -> Optional[OperatorSchema]:
        slot = self.fields.get(name)
        return slot if isinstance(slot, OperatorSchema) else None

    def ref_for(self, name: str) -> Optional['FilterSpec']:
        slot = self.fields.get(name)
        return slot.spec if isinstance(slot, FilterSpecRef) else None


@dataclass(frozen=True)
class FilterSpecRef:
    """Pointer from a relation filter field to the target entity's FilterSpec."""

    entity_name: str
    spec: Optional[FilterSpec] = field(default=None, compare=False, repr=False)


def build_sort_spec(entity: EntitySpec, *, resolve: Optional[Any] = None) -> SortSpec:
    """Project every sortable field of ``entity`` into a SortSpec.

    Scalar fields become :class:`SortLeaf` slots. Relation fields become
    :class:`SortSpecRef` slots; ``resolve(target_name)`` supplies the target's
    SortSpec and may be omitted to build name-only refs.
    """
    slots: Dict[str, Union[SortLeaf, SortSpecRef]] = {}
    for fd in entity.fields:
        if not fd.sortable:
            continue
        if fd.is_relation:
            slots[fd.name] = SortSpecRef(fd.target, resolve(fd.target) if resolve else None)
        else:
            slots[fd.name] = SortLeaf(fd.kind)
    return SortSpec(entity.entity_name, slots)


def build_filter_spec(entity: EntitySpec, *, resolve: Optional[Any] = None) -> FilterSpec:
    """Project every filterable field of ``entity`` into a FilterSpec."""
    slots: Dict[str, Union[OperatorSchema, FilterSpecRef]] = {}
    for fd in entity.fields:
        if not fd.filterable:
            continue
        if fd.is_relation:
            slots[fd.name] = FilterSpecRef(fd.target, resolve(fd.target) if resolve else None)
        else:
            slots[fd.name] = OperatorSchema(fd.kind, operators_for_kind(fd.kind))
    return FilterSpec(entity.entity_name, slots)


def freeze(spec: Union[SortSpec, FilterSpec]) -> None:
    """Make a spec's field map read-only."""
    if not isinstance(spec.fields, MappingProxyType):
        spec.fields = MappingProxyType(dict(spec.fields))


def _normalize_sort(spec: SortSpec, expression: Any, path: List[str]) -> Dict[str, Any]:
    if not isinstance(expression, Mapping):
        raise InvalidSortError(spec.entity_name, path, expression, "expected an object of field directions")
    out: Dict[str, Any] = {}
    for key, value in expression.items():
        here = path + [str(key)]
        slot = spec.fields.get(key)
        if slot is None:
            raise InvalidSortError(spec.entity_name, here, value, "unknown sort field")
        if value is None:
            continue
        if isinstance(slot, SortLeaf):
            direction = value.upper() if isinstance(value, str) else value
            if direction not in SORT_DIRECTIONS:
                raise InvalidSortError(spec.entity_name, here, value, "direction must be ASC or DESC")
            out[key] = direction
            continue
        if slot.spec is None:
            raise InvalidSortError(spec.entity_name, here, value, f"relation '{slot.entity_name}' is not resolved")
        out[key] = _normalize_sort(slot.spec, value, here)
    return out
