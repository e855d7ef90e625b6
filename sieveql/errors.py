"""Error taxonomy for sieveql.

The filter compiler never raises: malformed filter shapes degrade to a
best-effort predicate. Everything below is raised by the registry, the sort
validators and the query args assembler.
"""
from __future__ import annotations

from typing import Any, Optional, Sequence

__all__ = [
    'SieveError',
    'SpecNotFoundError',
    'RegistryNotFinalizedError',
    'RegistryFrozenError',
    'InvalidPaginationError',
    'InvalidSortError',
]


class SieveError(Exception):
    """Base class for all sieveql errors."""


class SpecNotFoundError(SieveError, LookupError):
    """Lookup of an entity (or its sort/filter spec) failed."""

    def __init__(self, entity_name: str, message: Optional[str] = None):
        self.entity_name = entity_name
        super().__init__(message or f"Spec for entity '{entity_name}' not found")


class RegistryNotFinalizedError(SpecNotFoundError):
    """A spec was requested before relation finalization (phase 2) ran."""

    def __init__(self, entity_name: str):
        super().__init__(
            entity_name,
            f"Spec for entity '{entity_name}' is not available: relations are not finalized yet",
        )


class RegistryFrozenError(SieveError, RuntimeError):
    """The registry is read-only once relations have been finalized."""


class InvalidPaginationError(SieveError, ValueError):
    def __init__(self, field: str, value: Any, message: Optional[str] = None):
        self.field = field
        self.value = value
        super().__init__(message or f"Invalid {field}: {value!r}")


class InvalidSortError(SieveError, ValueError):
    def __init__(self, entity_name: str, path: Sequence[str], value: Any, reason: str):
        self.entity_name = entity_name
        self.path = tuple(path)
        self.value = value
        self.reason = reason
        dotted = '.'.join(self.path) or '<root>'
        super().__init__(f"Invalid order for {entity_name} at '{dotted}': {reason} (got {value!r})")
