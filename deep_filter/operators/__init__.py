# =============================================================================
# deep-filter -- Operator Library
# =============================================================================

"""
Field operators keyed by their wire name.

Each entry is a factory ``(payload, comparator) -> evaluate`` called once
at compile time; ``evaluate(actual) -> bool`` runs per item. Payloads have
already been validated, so factories only parse them.

``$contains`` is shared: element membership for sequence values,
substring search for string values.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING, Any

from ..comparison import is_sequence
from ..errors import OperatorError
from . import array, comparison, dates, geospatial, string

if TYPE_CHECKING:
    from ..comparison import DeepComparator

Evaluator = Callable[[Any], bool]
OperatorFactory = Callable[[Any, "DeepComparator"], Evaluator]


def _contains(payload, comparator):
    in_sequence = array.OPERATORS["$contains"](payload, comparator)
    in_string = string.OPERATORS["$contains"](payload, comparator)

    def evaluate(actual: Any) -> bool:
        if is_sequence(actual):
            return in_sequence(actual)
        return in_string(actual)

    return evaluate


OPERATOR_REGISTRY: dict[str, OperatorFactory] = {
    **comparison.OPERATORS,
    **array.OPERATORS,
    **string.OPERATORS,
    **geospatial.OPERATORS,
    **dates.OPERATORS,
    "$contains": _contains,
}


def prepare_operator(op: str, payload: Any, comparator: DeepComparator) -> Evaluator:
    """Build the evaluator for one operator and its payload."""
    factory = OPERATOR_REGISTRY.get(op)
    if factory is None:
        raise OperatorError(op, payload, "unknown operator")
    return factory(payload, comparator)


def supported_operators() -> frozenset[str]:
    return frozenset(OPERATOR_REGISTRY)


__all__ = [
    "OPERATOR_REGISTRY",
    "Evaluator",
    "prepare_operator",
    "supported_operators",
]
