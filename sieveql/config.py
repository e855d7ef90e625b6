from __future__ import annotations

import os
from dataclasses import dataclass
from enum import Enum
from typing import Mapping, Optional

from .core.compiler import DEFAULT_MAX_DEPTH

__all__ = ['PaginationPolicy', 'SieveConfig', 'DEFAULT_CONFIG']


class PaginationPolicy(str, Enum):
    reject = 'reject'
    clamp = 'clamp'


_TRUE = ('1', 'true', 't', 'yes', 'y', 'on')
_FALSE = ('0', 'false', 'f', 'no', 'n', 'off')


def _env_bool(raw: Optional[str], default: bool) -> bool:
    if raw is None:
        return default
    lv = raw.strip().lower()
    if lv in _TRUE:
        return True
    if lv in _FALSE:
        return False
    raise ValueError(f"Invalid boolean setting: {raw!r}")


@dataclass(frozen=True)
class SieveConfig:
    """Runtime knobs for the assembler, the compiler and the SQL adapter.

    Attributes:
        pagination_policy: ``reject`` raises InvalidPaginationError for a
            negative skip or a take below 1; ``clamp`` clamps them instead.
        max_take: Optional upper bound for ``take`` (rejected or clamped by the
            same policy). ``None`` leaves take unbounded.
        warn_on_discarded_operators: Log a warning whenever a field condition
            carries several operators and all but the first are dropped.
        allow_raw: Let the SQLAlchemy adapter turn ``raw`` predicates into
            ``text()`` fragments. Raw payloads are caller-supplied and unsanitized.
        max_filter_depth: Nesting levels the filter compiler descends; deeper
            nodes are passed through unchanged with a warning.
    """

    pagination_policy: PaginationPolicy = PaginationPolicy.reject
    max_take: Optional[int] = None
    warn_on_discarded_operators: bool = True
    allow_raw: bool = False
    max_filter_depth: int = DEFAULT_MAX_DEPTH

    def __post_init__(self):
        # Accept plain strings for the policy
        object.__setattr__(self, 'pagination_policy', PaginationPolicy(self.pagination_policy))
        if self.max_take is not None and self.max_take < 1:
            raise ValueError(f"max_take must be >= 1, got {self.max_take!r}")
        if self.max_filter_depth < 1:
            raise ValueError(f"max_filter_depth must be >= 1, got {self.max_filter_depth!r}")

    @classmethod
    def from_env(cls, prefix: str = 'SIEVEQL_', environ: Optional[Mapping[str, str]] = None) -> 'SieveConfig':
        """Build a config from environment variables.

        Recognized names (with the default prefix): ``SIEVEQL_PAGINATION_POLICY``,
        ``SIEVEQL_MAX_TAKE``, ``SIEVEQL_WARN_ON_DISCARDED_OPERATORS``,
        ``SIEVEQL_ALLOW_RAW``, ``SIEVEQL_MAX_FILTER_DEPTH``. Unset variables keep
        their defaults.
        """
        env = os.environ if environ is None else environ
        policy = env.get(f'{prefix}PAGINATION_POLICY')
        max_take = env.get(f'{prefix}MAX_TAKE')
        max_depth = env.get(f'{prefix}MAX_FILTER_DEPTH')
        return cls(
            pagination_policy=PaginationPolicy(policy.strip().lower()) if policy else PaginationPolicy.reject,
            max_take=int(max_take) if max_take not in (None, '') else None,
            warn_on_discarded_operators=_env_bool(env.get(f'{prefix}WARN_ON_DISCARDED_OPERATORS'), True),
            allow_raw=_env_bool(env.get(f'{prefix}ALLOW_RAW'), False),
            max_filter_depth=int(max_depth) if max_depth not in (None, '') else DEFAULT_MAX_DEPTH,
        )


DEFAULT_CONFIG = SieveConfig()
