from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple, Union


class ScalarKind(str, Enum):
    """Semantic value kind of a scalar field; selects its filter operator set."""

    STRING = 'string'
    NUMBER = 'number'
    BOOLEAN = 'boolean'
    DATE = 'date'
    ID = 'id'
    ENUM = 'enum'


@dataclass(frozen=True)
class RelationKind:
    """Kind of a field that references another registered entity."""

    target: str


# A kind that is neither a ScalarKind nor a RelationKind is kept as its raw
# string and treated as unknown (string operators apply).
FieldKind = Union[ScalarKind, RelationKind, str]


def normalize_kind(kind: Any) -> FieldKind:
    """Coerce a declared kind into a ScalarKind when it names one.

    Accepts ScalarKind members, their string values (case-insensitive),
    RelationKind instances and arbitrary strings (kept verbatim as unknown kinds).
    Python types ``str``/``int``/``float``/``bool`` are accepted as shorthands.
    """
    if isinstance(kind, (ScalarKind, RelationKind)):
        return kind
    if kind in (str,):
        return ScalarKind.STRING
    if kind is bool:
        return ScalarKind.BOOLEAN
    if kind in (int, float):
        return ScalarKind.NUMBER
    if isinstance(kind, str):
        try:
            return ScalarKind(kind.strip().lower())
        except ValueError:
            return kind
    raise TypeError(f"Unsupported field kind: {kind!r}")


@dataclass(frozen=True)
class FieldDescriptor:
    """Published metadata for one entity field. Immutable once registered."""

    name: str
    kind: FieldKind
    sortable: bool = True
    filterable: bool = True

    @property
    def is_relation(self) -> bool:
        return isinstance(self.kind, RelationKind)

    @property
    def target(self) -> Optional[str]:
        return self.kind.target if isinstance(self.kind, RelationKind) else None


@dataclass(frozen=True)
class EntitySpec:
    """All sortable/filterable fields registered for one entity, in declaration order."""

    entity_name: str
    fields: Tuple[FieldDescriptor, ...]

    def field(self, name: str) -> Optional[FieldDescriptor]:
        for fd in self.fields:
            if fd.name == name:
                return fd
        return None

    @property
    def scalar_fields(self) -> Tuple[FieldDescriptor, ...]:
        return tuple(fd for fd in self.fields if not fd.is_relation)

    @property
    def relation_fields(self) -> Tuple[FieldDescriptor, ...]:
        return tuple(fd for fd in self.fields if fd.is_relation)


class FieldDeclaration:
    """Class attribute placed on an :class:`Entity` subclass to declare a field.

    Users normally use the helper factories :func:`field`, :func:`relation`,
    :func:`sortable_field` and :func:`where_field`. The entity metaclass picks
    the declarations up in class-body order and turns them into
    :class:`FieldDescriptor` values.
    """

    def __init__(self, kind: Any, *, sortable: bool = True, filterable: bool = True, name: Optional[str] = None):
        self.kind = normalize_kind(kind)
        self.sortable = bool(sortable)
        self.filterable = bool(filterable)
        self.name: Optional[str] = name
        self.attr_name: Optional[str] = None

    def __set_name__(self, owner, name):  # pragma: no cover - simple
        self.attr_name = name

    def build(self) -> FieldDescriptor:
        return FieldDescriptor(
            name=self.name or self.attr_name or '',
            kind=self.kind,
            sortable=self.sortable,
            filterable=self.filterable,
        )


def field(kind: Any = ScalarKind.STRING, /, *, sortable: bool = True, filterable: bool = True, name: Optional[str] = None) -> FieldDeclaration:
    """Declare a scalar field that can be sorted and/or filtered.

    Examples:
        class Product(Entity):
            id = field(ScalarKind.ID)
            title = field()
            price = field('number')
            # GraphQL-style name differing from the attribute
            is_active = field(bool, name='isActive')
    """
    if isinstance(normalize_kind(kind), RelationKind):
        raise TypeError("Use relation() to declare relation fields")
    return FieldDeclaration(kind, sortable=sortable, filterable=filterable, name=name)


def sortable_field(kind: Any = ScalarKind.STRING, /, *, name: Optional[str] = None) -> FieldDeclaration:
    """Field that may only appear in sort expressions."""
    return field(kind, sortable=True, filterable=False, name=name)


def where_field(kind: Any = ScalarKind.STRING, /, *, name: Optional[str] = None) -> FieldDeclaration:
    """Field that may only appear in filter expressions."""
    return field(kind, sortable=False, filterable=True, name=name)


def relation(target: Any, /, *, sortable: bool = True, filterable: bool = True, name: Optional[str] = None) -> FieldDeclaration:
    """Declare a relation to another entity.

    ``target`` is the target entity name or an :class:`Entity` subclass. The
    target does not need to be registered yet: relations are resolved in the
    registry's second bootstrap phase.

    Example:
        class Order(Entity):
            customer = relation('Customer')
    """
    if not isinstance(target, str):
        target = getattr(target, '__entity_name__', None) or getattr(target, '__name__', None)
    if not target:
        raise TypeError("relation() requires a target entity name or class")
    return FieldDeclaration(RelationKind(target), sortable=sortable, filterable=filterable, name=name)


class EntityMeta(type):
    def __new__(mcls, name, bases, namespace):
        declared: Dict[str, FieldDescriptor] = {}
        # Inherit declarations from Entity bases first
        for base in bases:
            for fd in getattr(base, '__entity_fields__', ()) or ():
                declared[fd.name] = fd
        for k, v in list(namespace.items()):
            if isinstance(v, FieldDeclaration):
                v.__set_name__(None, k)
                fd = v.build()
                declared[fd.name] = fd
        namespace['__entity_fields__'] = tuple(declared.values())
        namespace.setdefault('__entity_name__', name)
        return super().__new__(mcls, name, bases, namespace)


class Entity(metaclass=EntityMeta):
    """Declarative base for entity field metadata.

    Example:
        class Customer(Entity):
            id = field(ScalarKind.ID)
            last_name = field()
            orders = relation('Order', sortable=False)
    """

    __entity_name__: str
    __entity_fields__: Tuple[FieldDescriptor, ...] = ()


def declared_fields(entity_cls: Any) -> List[FieldDescriptor]:
    """Return the FieldDescriptors collected on a declarative entity class."""
    return list(getattr(entity_cls, '__entity_fields__', ()) or ())
