# =============================================================================
# deep-filter -- Predicate Compiler
# =============================================================================

"""
Turns a validated expression into a predicate ``(item) -> bool``.

The expression is inspected once, here. The returned predicate only
closes over prepared state, so it can be reused (and cached) freely.

Object expressions hold when every clause holds. Per key:

- ``$and`` / ``$or`` / ``$not``: logical combinators, compiled recursively
  at the same depth, so they are not limited by ``max_depth``
- ``$``: the value is searched for in any property of the item
- ``{"$gt": 3, ...}``: operator payload applied to the field value
- ``{...}``: nested object matched against the field value, one level
  deeper; past ``max_depth`` the clause never matches
- ``[a, b]``: shorthand for ``{"$in": [a, b]}``
- a callable: skipped
- anything else: literal comparison through the DeepComparator
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping, Set
from typing import Any

from .comparison import DeepComparator, is_sequence
from .config import FilterConfig
from .constants import ANY_PROPERTY_KEY
from .errors import InvalidExpressionError, OperatorError, type_name
from .operators import prepare_operator
from .paths import is_record, resolve_path
from .types import MISSING, ExpressionKind
from .validation import is_operator_payload, is_primitive

log = logging.getLogger("deep_filter.compiler")

Predicate = Callable[[Any], bool]


class NodeKind:
    """Roles a compiled piece plays in the expression tree."""

    LOGICAL = "logical"
    COMPARISON = "comparison"
    FIELD = "field"
    OPERATOR = "operator"
    PRIMITIVE = "primitive"


def classify_expression(expression: Any) -> ExpressionKind:
    if isinstance(expression, Mapping):
        return ExpressionKind.OBJECT
    if callable(expression):
        return ExpressionKind.PREDICATE
    if is_primitive(expression):
        return ExpressionKind.PRIMITIVE
    raise InvalidExpressionError(expression, f"unsupported expression type '{type_name(expression)}'")


def _always_true(item: Any) -> bool:
    return True


def _always_false(item: Any) -> bool:
    return False


def all_of(predicates: list[Predicate]) -> Predicate:
    if not predicates:
        return _always_true
    if len(predicates) == 1:
        return predicates[0]
    chain = tuple(predicates)
    return lambda item: all(p(item) for p in chain)


def any_of(predicates: list[Predicate]) -> Predicate:
    if not predicates:
        return _always_false
    if len(predicates) == 1:
        return predicates[0]
    chain = tuple(predicates)
    return lambda item: any(p(item) for p in chain)


class PredicateCompiler:
    """Compiles expressions for one FilterConfig.

    ``_node`` is called around every compiled piece. Here it just builds
    the piece; DebugCompiler overrides it to record the expression tree.
    """

    def __init__(self, config: FilterConfig) -> None:
        self.config = config
        self.comparator = DeepComparator(config)

    def compile(self, expression: Any) -> Predicate:
        kind = classify_expression(expression)
        log.debug("Compiling %s expression", kind.value)
        return self.compile_expression(expression, depth=1)

    def _node(
        self,
        kind: str,
        build: Callable[[], Predicate],
        *,
        operator: str | None = None,
        field: str | None = None,
        value: Any = MISSING,
    ) -> Predicate:
        return build()

    # -- expressions -----------------------------------------------------------

    def compile_expression(self, expression: Any, depth: int) -> Predicate:
        kind = classify_expression(expression)
        if kind is ExpressionKind.PREDICATE:
            return self._node(NodeKind.COMPARISON, lambda: expression, operator="fn", value=expression)
        if kind is ExpressionKind.PRIMITIVE:
            return self._node(NodeKind.PRIMITIVE, lambda: self._search(expression), value=expression)
        if len(expression) == 1:
            ((key, value),) = expression.items()
            return self._clause(key, value, depth) or _always_true
        return self._node(NodeKind.LOGICAL, lambda: self._object(expression, depth), operator="$and")

    def _search(self, expected: Any) -> Predicate:
        comparator = self.comparator

        def predicate(item: Any) -> bool:
            return comparator.matches(item, expected, any_property=True, substring=True)

        return predicate

    def _object(self, expression: Mapping[str, Any], depth: int) -> Predicate:
        clauses = []
        for key, value in expression.items():
            clause = self._clause(key, value, depth)
            if clause is not None:
                clauses.append(clause)
        return all_of(clauses)

    # -- clauses ---------------------------------------------------------------

    def _clause(self, key: str, value: Any, depth: int) -> Predicate | None:
        if key in ("$and", "$or"):
            return self._logical_sequence(key, value, depth)
        if key == "$not":
            return self._logical_not(value, depth)
        if key == ANY_PROPERTY_KEY:
            return self._node(NodeKind.PRIMITIVE, lambda: self._search(value), operator="$", value=value)
        if callable(value) and not isinstance(value, Mapping):
            return None

        if is_operator_payload(value):
            return self._field(key, lambda: self._operators(value))
        if isinstance(value, Mapping):
            return self._field(key, lambda: self._nested(value, depth))
        if is_sequence(value):
            return self._field(key, lambda: self._operators({"$in": list(value)}))
        return self._field(key, lambda: self._literal(value, depth))

    def _field(self, key: str, build: Callable[[], Predicate]) -> Predicate:
        def build_field() -> Predicate:
            test = build()

            def predicate(item: Any) -> bool:
                return test(resolve_path(item, key))

            return predicate

        return self._node(NodeKind.FIELD, build_field, field=key)

    def _operators(self, payload: Mapping[str, Any]) -> Predicate:
        tests = []
        for op, operand in payload.items():
            tests.append(
                self._node(
                    NodeKind.OPERATOR,
                    lambda op=op, operand=operand: prepare_operator(op, operand, self.comparator),
                    operator=op,
                    value=operand,
                )
            )
        return all_of(tests)

    def _nested(self, expression: Mapping[str, Any], depth: int) -> Predicate:
        if depth + 1 > self.config.max_depth:
            log.debug("Nested object beyond max_depth=%d never matches", self.config.max_depth)
            return _always_false
        test = self._object(expression, depth + 1)

        def predicate(value: Any) -> bool:
            if is_sequence(value):
                return any(is_record(el) and test(el) for el in value)
            return is_record(value) and test(value)

        return predicate

    def _literal(self, expected: Any, depth: int) -> Predicate:
        comparator = self.comparator

        def build() -> Predicate:
            def predicate(value: Any) -> bool:
                return comparator.matches(value, expected, substring=False, depth=depth)

            return predicate

        return self._node(NodeKind.COMPARISON, build, operator="$eq", value=expected)

    # -- logical combinators ---------------------------------------------------

    def _logical_sequence(self, op: str, value: Any, depth: int) -> Predicate:
        if not isinstance(value, (list, tuple)):
            raise OperatorError(op, value, f"'{op}' expects a sequence of expressions, got '{type_name(value)}'")

        def build() -> Predicate:
            subs = [self.compile_expression(sub, depth) for sub in value]
            return all_of(subs) if op == "$and" else any_of(subs)

        return self._node(NodeKind.LOGICAL, build, operator=op)

    def _logical_not(self, value: Any, depth: int) -> Predicate:
        if isinstance(value, (list, tuple, Set)):
            raise OperatorError("$not", value, "'$not' expects a single expression, not a sequence")

        def build() -> Predicate:
            sub = self.compile_expression(value, depth)
            return lambda item: not sub(item)

        return self._node(NodeKind.LOGICAL, build, operator="$not")


def compile_predicate(expression: Any, config: FilterConfig) -> Predicate:
    """Compile an already validated expression."""
    return PredicateCompiler(config).compile(expression)
