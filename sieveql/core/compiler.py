"""Filter expression compiler.

Translates a client-supplied filter expression built from named operators and
``AND``/``OR`` groups into a compiled predicate::

    {"AND": [{"status": {"eq": "ACTIVE"}},
             {"OR": [{"total": {"gt": 50}}, {"is_vip": {"eq": True}}]}]}

compiles to ``{"status": "ACTIVE"}`` merged with the first disjunct of the
``OR`` branch. The compiler is permissive: it never raises for malformed
shapes and never mutates its input.
"""
from __future__ import annotations

import logging
from typing import Any, Callable, Dict, List, Mapping, Optional

from .operators import Op, Operator, UnknownOperator, is_operator_key, select_operator
from .predicates import (
    CompiledPredicate,
    between,
    ilike,
    is_null,
    like,
    membership,
    negation,
    range_gt,
    range_gte,
    range_lt,
    range_lte,
    raw_expression,
)

_logger = logging.getLogger("sieveql")

AND = 'AND'
OR = 'OR'
COMBINATORS = (AND, OR)

# Nesting levels the compiler descends before passing a node through
DEFAULT_MAX_DEPTH = 64

__all__ = ['compile_filter', 'convert_value', 'apply_operator', 'FilterCompiler', 'AND', 'OR', 'DEFAULT_MAX_DEPTH']


def _between(value: Any) -> Any:
    if isinstance(value, (list, tuple)) and len(value) == 2:
        return between(value[0], value[1])
    _logger.warning(f"Malformed between value {value!r}; passing it through unchanged")
    return {Op.BETWEEN.value: value}


_OPERATOR_MAP: Dict[Op, Callable[[Any], Any]] = {
    Op.EQ: lambda v: v,
    Op.NE: negation,
    Op.IN: membership,
    Op.NIN: lambda v: negation(membership(v)),
    Op.GT: range_gt,
    Op.GTE: range_gte,
    Op.LT: range_lt,
    Op.LTE: range_lte,
    Op.LIKE: like,
    Op.ILIKE: ilike,
    Op.BETWEEN: _between,
    Op.IS_NULL: lambda v: is_null() if v else negation(is_null()),
    Op.RAW: raw_expression,
}


def apply_operator(operator: Operator, value: Any) -> Any:
    """Map one operator/value pair to the value handed to the storage layer.

    Unknown operators come back as ``{key: value}`` unchanged.
    """
    if isinstance(operator, UnknownOperator):
        return {operator.key: value}
    return _OPERATOR_MAP[operator](value)


class FilterCompiler:
    """Stateless recursive-descent compiler; see :func:`compile_filter`.

    ``warn_on_discarded`` controls the warning logged when a field condition
    carries several operators and only the first is kept.

    ``max_depth`` bounds the nesting of lists, ``AND``/``OR`` groups and
    relation filters. A node nested deeper is passed through unchanged with a
    warning, so client input can never exhaust the interpreter stack.
    """

    def __init__(self, *, warn_on_discarded: bool = True, max_depth: int = DEFAULT_MAX_DEPTH):
        if max_depth < 1:
            raise ValueError(f"max_depth must be >= 1, got {max_depth!r}")
        self.warn_on_discarded = warn_on_discarded
        self.max_depth = max_depth

    # --- entry point -----------------------------------------------------------
    def compile(self, node: Any) -> CompiledPredicate:
        return self._compile(node, 0)

    def _too_deep(self, depth: int) -> bool:
        if depth <= self.max_depth:
            return False
        _logger.warning(f"Filter nested deeper than {self.max_depth} levels; passing the remainder through unchanged")
        return True

    def _compile(self, node: Any, depth: int) -> CompiledPredicate:
        if node is None:
            return {}
        if not isinstance(node, (list, tuple, Mapping)):
            # Bare scalars are not filter nodes; hand them back untouched
            return node
        if self._too_deep(depth):
            return node
        if isinstance(node, (list, tuple)):
            return self._compile_list(node, depth)
        if not node:
            return {}
        or_children = node.get(OR)
        if isinstance(or_children, (list, tuple)):
            return self._compile_or(or_children, depth)
        and_children = node.get(AND)
        if isinstance(and_children, (list, tuple)):
            return self._compile_and(and_children, depth)
        return self._compile_fields(node, depth)

    # --- node kinds ------------------------------------------------------------
    def _compile_list(self, nodes, depth: int) -> CompiledPredicate:
        if not nodes:
            return {}
        results: List[Any] = []
        for child in nodes:
            compiled = self._compile(child, depth + 1)
            if isinstance(compiled, list):
                results.extend(compiled)
            else:
                results.append(compiled)
        if len(results) == 1:
            return results[0]
        return results

    def _compile_or(self, children, depth: int) -> List[Any]:
        out: List[Any] = []
        for child in children:
            compiled = self._compile(child, depth + 1)
            if isinstance(compiled, list):
                # Nested disjunction inside an OR branch keeps only its first disjunct
                if len(compiled) > 1:
                    _logger.warning(f"Nested OR inside OR collapsed to its first branch ({len(compiled) - 1} dropped)")
                if compiled:
                    out.append(compiled[0])
                continue
            out.append(compiled)
        return out

    def _compile_and(self, children, depth: int) -> Dict[str, Any]:
        merged: Dict[str, Any] = {}
        for child in children:
            compiled = self._compile(child, depth + 1)
            if isinstance(compiled, list):
                if len(compiled) > 1:
                    _logger.warning(f"Disjunction inside AND collapsed to its first branch ({len(compiled) - 1} dropped)")
                if not compiled:
                    continue
                compiled = compiled[0]
            if isinstance(compiled, Mapping):
                # last write wins on key collision
                merged.update(compiled)
        return merged

    def _compile_fields(self, node: Mapping[str, Any], depth: int, path: Optional[str] = None) -> Dict[str, Any]:
        out: Dict[str, Any] = {}
        for key, value in node.items():
            if key in COMBINATORS:
                continue
            out[key] = self._convert(value, depth, f"{path}.{key}" if path else key)
        return out

    # --- field values ----------------------------------------------------------
    def convert_value(self, value: Any, *, path: Optional[str] = None) -> Any:
        """Convert the value of one field in a field-condition map."""
        return self._convert(value, 0, path)

    def _convert(self, value: Any, depth: int, path: Optional[str]) -> Any:
        if value is None or not isinstance(value, Mapping):
            # scalars, null and arrays pass through
            return value
        keys = list(value.keys())
        if keys and all(is_operator_key(k) for k in keys):
            choice = select_operator(value)
            if choice.discarded and self.warn_on_discarded:
                _logger.warning(
                    f"Field '{path or '?'}' has several operators; applying '{keys[0]}' and discarding {list(choice.discarded)}"
                )
            return apply_operator(choice.operator, choice.value)
        # Nested relation filter: same field-by-field rules
        if self._too_deep(depth + 1):
            return value
        return self._compile_fields(value, depth + 1, path=path)


_DEFAULT_COMPILER = FilterCompiler()


def _compiler(warn_on_discarded: bool, max_depth: int) -> FilterCompiler:
    if warn_on_discarded and max_depth == DEFAULT_MAX_DEPTH:
        return _DEFAULT_COMPILER
    return FilterCompiler(warn_on_discarded=warn_on_discarded, max_depth=max_depth)


def compile_filter(node: Any, *, warn_on_discarded: bool = True, max_depth: int = DEFAULT_MAX_DEPTH) -> CompiledPredicate:
    """Compile a filter expression into a compiled predicate.

    Rules:
      - ``None`` or an empty node compiles to ``{}`` (matches everything).
      - A list is an implicit OR: children are compiled, nested lists are
        flattened one level, and a single remaining result is unwrapped.
      - ``{"OR": [...]}`` yields a list of conjunctions; a child that is itself
        a disjunction contributes only its first conjunction.
      - ``{"AND": [...]}`` shallow-merges the children; later keys overwrite
        earlier ones.
      - Otherwise the node is a field-condition map, see :func:`convert_value`.
      - Nodes nested deeper than ``max_depth`` are passed through unchanged
        and a warning is logged.
    """
    compiler = _compiler(warn_on_discarded, max_depth)
    return compiler.compile(node)


def convert_value(value: Any, *, warn_on_discarded: bool = True, max_depth: int = DEFAULT_MAX_DEPTH) -> Any:
    """Convert a single field value.

    - scalars, ``None`` and lists pass through unchanged;
    - an operator object applies its operator (the first key wins when several
      operators are present, the rest are discarded);
    - any other object is treated as a nested filter and converted field by field.
    """
    compiler = _compiler(warn_on_discarded, max_depth)
    return compiler.convert_value(value)
