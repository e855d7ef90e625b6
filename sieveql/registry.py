from __future__ import annotations
import logging
from types import MappingProxyType
from typing import Any, Callable, Dict, Iterable, Iterator, List, Mapping, Optional, Sequence, Tuple, Type, Union

from .assembler import FindOneOptions, FindOptions, QueryArgs, assemble, assemble_one
from .config import DEFAULT_CONFIG, SieveConfig
from .core.fields import Entity, EntitySpec, FieldDescriptor, declared_fields
from .core.specs import (
    FilterSpec,
    FilterSpecRef,
    SortSpec,
    SortSpecRef,
    build_filter_spec,
    build_sort_spec,
    freeze,
)
from .errors import RegistryFrozenError, RegistryNotFinalizedError, SpecNotFoundError

# Project logger
_logger = logging.getLogger("sieveql")

__all__ = ['Registry', 'bootstrap']

EntityDeclaration = Union[Type[Entity], Tuple[str, Sequence[FieldDescriptor]]]


class Registry:
    """Field metadata registry with a two-phase bootstrap.

    Phase 1 (:meth:`register_entity`, any order): the scalar sortable/filterable
    fields of each entity are stored and its SortSpec/FilterSpec are built from
    them. Declared relation fields are kept aside.

    Phase 2 (:meth:`finalize_relations`, once every entity is registered): each
    relation target is looked up, a relation FieldDescriptor is appended to the
    owning entity and a ref to the target's spec is added to the owning specs.
    Afterwards the registry is read-only and safe to share between requests.

    Example:
        registry = Registry()

        @registry.entity()
        class Order(Entity):
            id = field(ScalarKind.ID)
            customer = relation('Customer')

        @registry.entity()
        class Customer(Entity):
            id = field(ScalarKind.ID)
            last_name = field()

        registry.finalize_relations()
        registry.sort_spec('Order')
    """

    def __init__(self, config: Optional[SieveConfig] = None):
        self.config = config or DEFAULT_CONFIG
        self._entities: Dict[str, EntitySpec] = {}
        self._pending_relations: Dict[str, List[FieldDescriptor]] = {}
        self._sort_specs: Dict[str, SortSpec] = {}
        self._filter_specs: Dict[str, FilterSpec] = {}
        self._finalized = False

    # ---------- registration (phase 1) ----------
    def register_entity(self, name: str, fields: Iterable[FieldDescriptor]) -> EntitySpec:
        """Store (or overwrite) the scalar part of an entity's metadata.

        Relation descriptors in ``fields`` are deferred until
        :meth:`finalize_relations`. Re-registering a name replaces the
        previous entry entirely (last write wins).
        """
        if self._finalized:
            raise RegistryFrozenError(f"Cannot register '{name}': registry relations are already finalized")
        if not name:
            raise ValueError("Entity name must be a non-empty string")
        scalars: Dict[str, FieldDescriptor] = {}
        relations: Dict[str, FieldDescriptor] = {}
        for fd in fields:
            if not isinstance(fd, FieldDescriptor):
                raise TypeError(f"Expected FieldDescriptor for entity '{name}', got {fd!r}")
            if not fd.name:
                raise ValueError(f"Field of entity '{name}' has no name")
            if not (fd.sortable or fd.filterable):
                raise ValueError(f"Field '{name}.{fd.name}' is neither sortable nor filterable")
            # last write wins for duplicate names
            scalars.pop(fd.name, None)
            relations.pop(fd.name, None)
            (relations if fd.is_relation else scalars)[fd.name] = fd
        spec = EntitySpec(name, tuple(scalars.values()))
        if name in self._entities:
            _logger.debug(f"Overwriting entity spec for {name}")
        self._entities[name] = spec
        self._pending_relations[name] = list(relations.values())
        self._sort_specs[name] = build_sort_spec(spec)
        self._filter_specs[name] = build_filter_spec(spec)
        _logger.debug(f"Registered {name} with {len(spec.fields)} scalar field(s), {len(relations)} pending relation(s)")
        return spec

    def register(self, cls: Type[Entity]) -> Type[Entity]:
        """Register a declarative :class:`Entity` subclass."""
        self.register_entity(getattr(cls, '__entity_name__', None) or cls.__name__, declared_fields(cls))
        return cls

    def entity(self, *, name: Optional[str] = None) -> Callable[[Type[Entity]], Type[Entity]]:
        """Decorator form of :meth:`register`.

        Example:
            @registry.entity(name='Product')
            class ProductFields(Entity):
                title = field()
        """
        def deco(cls: Type[Entity]):
            if name is not None:
                cls.__entity_name__ = name
            return self.register(cls)
        return deco

    # ---------- relation finalization (phase 2) ----------
    def finalize_relations(self) -> 'Registry':
        """Resolve every declared relation and freeze the registry.

        Raises:
            SpecNotFoundError: a relation targets an entity that never
                registered. The registry is left untouched in that case.
        """
        if self._finalized:
            return self
        # Check every target before mutating anything
        for owner, relations in self._pending_relations.items():
            for fd in relations:
                if fd.target not in self._entities:
                    raise SpecNotFoundError(
                        fd.target,
                        f"Relation '{owner}.{fd.name}' targets entity '{fd.target}', which is not registered",
                    )
        for owner, relations in self._pending_relations.items():
            if not relations:
                continue
            sort_fields = dict(self._sort_specs[owner].fields)
            filter_fields = dict(self._filter_specs[owner].fields)
            for fd in relations:
                _logger.debug(f"Appending {fd.target} for {fd.name} in {owner}")
                if fd.sortable:
                    sort_fields[fd.name] = SortSpecRef(fd.target, self._sort_specs[fd.target])
                if fd.filterable:
                    filter_fields[fd.name] = FilterSpecRef(fd.target, self._filter_specs[fd.target])
            self._sort_specs[owner].fields = sort_fields
            self._filter_specs[owner].fields = filter_fields
            # overwrite the phase-1 entry with the complete field list
            current = self._entities[owner]
            self._entities[owner] = EntitySpec(owner, current.fields + tuple(relations))
        for spec in self._sort_specs.values():
            freeze(spec)
        for spec in self._filter_specs.values():
            freeze(spec)
        self._pending_relations = {}
        self._finalized = True
        _logger.debug(f"Finalized relations for {len(self._entities)} entities")
        return self

    @property
    def finalized(self) -> bool:
        return self._finalized

    # ---------- lookups ----------
    def get(self, name: str) -> EntitySpec:
        """Return the EntitySpec registered under ``name``.

        Raises:
            SpecNotFoundError: ``name`` was never registered.
            RegistryNotFinalizedError: relations are not finalized yet, so the
                spec would be missing its relation fields.
        """
        return self._spec_lookup(self._entities, name)

    def sort_spec(self, name: str) -> SortSpec:
        return self._spec_lookup(self._sort_specs, name)

    def filter_spec(self, name: str) -> FilterSpec:
        return self._spec_lookup(self._filter_specs, name)

    def _spec_lookup(self, specs: Dict[str, Any], name: str) -> Any:
        if name not in self._entities:
            raise SpecNotFoundError(name)
        if not self._finalized:
            raise RegistryNotFinalizedError(name)
        return specs[name]

    def entity_names(self) -> List[str]:
        return list(self._entities.keys())

    def __contains__(self, name: object) -> bool:
        return name in self._entities

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._entities.keys()))

    def __len__(self) -> int:
        return len(self._entities)

    def __repr__(self) -> str:
        state = 'finalized' if self._finalized else 'collecting'
        return f"Registry({state}, entities={self.entity_names()})"

    def snapshot(self) -> 'MappingProxyType[str, EntitySpec]':
        """Read-only view of all registered entity specs."""
        return MappingProxyType(self._entities)

    # ---------- per-entity assembly ----------
    def assemble(self, name: str, raw: Union[QueryArgs, Mapping[str, Any], None]) -> FindOptions:
        """Assemble find options for ``name``, validating the order against its SortSpec."""
        return assemble(raw, sort_spec=self.sort_spec(name), config=self.config)

    def assemble_one(self, name: str, raw: Union[QueryArgs, Mapping[str, Any], None]) -> FindOneOptions:
        return assemble_one(raw, sort_spec=self.sort_spec(name), config=self.config)


def bootstrap(entities: Iterable[EntityDeclaration], *, config: Optional[SieveConfig] = None) -> Registry:
    """Build a finalized registry in one call.

    ``entities`` may mix declarative :class:`Entity` subclasses and
    ``(name, [FieldDescriptor, ...])`` pairs. All declarations are registered
    first, then relations are finalized.
    """
    registry = Registry(config)
    for decl in entities:
        if isinstance(decl, tuple):
            name, fields = decl
            registry.register_entity(name, fields)
        else:
            registry.register(decl)
    return registry.finalize_relations()
