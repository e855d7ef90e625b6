"""Query args assembler.

Combines pagination, a sort expression and a filter expression into the
finalized request handed to the storage layer::

    options = assemble({'skip': 0, 'take': 20,
                        'order': {'last_name': 'ASC', 'customer': {'first_name': 'DESC'}},
                        'filter': {'status': {'eq': 'ACTIVE'}}})
    options.where      # {'status': 'ACTIVE'}
    options.relations  # ['customer']
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Union

from .config import DEFAULT_CONFIG, PaginationPolicy, SieveConfig
from .core.compiler import FilterCompiler
from .core.predicates import CompiledPredicate
from .core.specs import SORT_DIRECTIONS, SortSpec
from .errors import InvalidPaginationError

_logger = logging.getLogger("sieveql")

__all__ = ['QueryArgs', 'FindOptions', 'FindOneOptions', 'assemble', 'assemble_one', 'infer_relations']


@dataclass(frozen=True)
class QueryArgs:
    """Raw list arguments as received from the request-handling layer."""

    skip: Optional[int] = 0
    take: Optional[int] = None
    order: Optional[Mapping[str, Any]] = None
    filter: Any = None

    @classmethod
    def from_mapping(cls, raw: Optional[Mapping[str, Any]]) -> 'QueryArgs':
        raw = raw or {}
        order = raw.get('order')
        if order is None:
            order = raw.get('sort')
        flt = raw.get('filter')
        if flt is None:
            flt = raw.get('where')
        return cls(skip=raw.get('skip'), take=raw.get('take'), order=order, filter=flt)


@dataclass(frozen=True)
class FindOptions:
    skip: int
    take: Optional[int]
    where: CompiledPredicate
    order: Optional[Mapping[str, Any]]
    relations: List[str] = field(default_factory=list)

    def as_dict(self) -> Dict[str, Any]:
        return {
            'skip': self.skip,
            'take': self.take,
            'where': self.where,
            'order': self.order,
            'relations': list(self.relations),
        }


@dataclass(frozen=True)
class FindOneOptions:
    where: CompiledPredicate
    order: Optional[Mapping[str, Any]]

    def as_dict(self) -> Dict[str, Any]:
        return {'where': self.where, 'order': self.order}


def infer_relations(order: Optional[Mapping[str, Any]]) -> List[str]:
    """Return the relation names that must be joined for ``order``.

    Every top-level key whose value is not the literal ``ASC``/``DESC`` is a
    nested sort over a relation. Names are returned once, in first-seen order.
    """
    if not order:
        return []
    relations: Dict[str, None] = {}
    for key, value in order.items():
        if value in SORT_DIRECTIONS:
            continue
        relations.setdefault(key, None)
    return list(relations)


def _check_int(name: str, value: Any) -> None:
    # bool is an int subclass but never a valid page bound
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidPaginationError(name, value, f"{name} must be an integer, got {value!r}")


def _resolve_skip(value: Any, config: SieveConfig) -> int:
    if value is None:
        return 0
    _check_int('skip', value)
    if value < 0:
        if config.pagination_policy is PaginationPolicy.clamp:
            return 0
        raise InvalidPaginationError('skip', value, f"skip must be >= 0, got {value!r}")
    return value


def _resolve_take(value: Any, config: SieveConfig) -> Optional[int]:
    if value is None:
        return None
    _check_int('take', value)
    clamp = config.pagination_policy is PaginationPolicy.clamp
    if value < 1:
        if clamp:
            return 1
        raise InvalidPaginationError('take', value, f"take must be >= 1, got {value!r}")
    if config.max_take is not None and value > config.max_take:
        if clamp:
            return config.max_take
        raise InvalidPaginationError('take', value, f"take must be <= {config.max_take}, got {value!r}")
    return value


def _compile_where(flt: Any, config: SieveConfig) -> CompiledPredicate:
    where = FilterCompiler(
        warn_on_discarded=config.warn_on_discarded_operators,
        max_depth=config.max_filter_depth,
    ).compile(flt)
    if isinstance(where, list) and not where:
        return {}
    return where


def _resolve_order(order: Optional[Mapping[str, Any]], sort_spec: Optional[SortSpec]) -> Optional[Mapping[str, Any]]:
    if sort_spec is None:
        return order
    return sort_spec.normalize(order)


def _coerce_args(raw: Union[QueryArgs, Mapping[str, Any], None]) -> QueryArgs:
    if isinstance(raw, QueryArgs):
        return raw
    return QueryArgs.from_mapping(raw)


def assemble(
    raw: Union[QueryArgs, Mapping[str, Any], None],
    *,
    sort_spec: Optional[SortSpec] = None,
    config: Optional[SieveConfig] = None,
) -> FindOptions:
    """Turn raw list arguments into :class:`FindOptions`.

    Args:
        raw: A :class:`QueryArgs` or a mapping with ``skip``, ``take``,
            ``order`` (or ``sort``) and ``filter`` (or ``where``).
        sort_spec: When given, the order expression is validated against it
            and :class:`~sieveql.errors.InvalidSortError` is raised on mismatch.
            The returned order is then the normalized copy (upper-cased
            directions, null slots dropped). Without it the order is passed
            through unchanged.
        config: Pagination policy and compiler logging options.

    Raises:
        InvalidPaginationError: negative ``skip`` or ``take`` below 1 under the
            ``reject`` policy, or a non-integer bound.
    """
    config = config or DEFAULT_CONFIG
    args = _coerce_args(raw)
    skip = _resolve_skip(args.skip, config)
    take = _resolve_take(args.take, config)
    order = _resolve_order(args.order, sort_spec)
    where = _compile_where(args.filter, config)
    options = FindOptions(
        skip=skip,
        take=take,
        where=where,
        order=order,
        relations=infer_relations(order),
    )
    _logger.debug(f"Assembled find options: skip={skip} take={take} relations={options.relations}")
    return options


def assemble_one(
    raw: Union[QueryArgs, Mapping[str, Any], None],
    *,
    sort_spec: Optional[SortSpec] = None,
    config: Optional[SieveConfig] = None,
) -> FindOneOptions:
    """Single-row variant of :func:`assemble`: only ``where`` and ``order``."""
    config = config or DEFAULT_CONFIG
    args = _coerce_args(raw)
    return FindOneOptions(where=_compile_where(args.filter, config), order=_resolve_order(args.order, sort_spec))
