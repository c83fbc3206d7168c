# =============================================================================
# deep-filter -- Array Operators
# =============================================================================

from __future__ import annotations

from typing import Any

from ..comparison import is_sequence, strict_equal
from ..types import MISSING


def _in(payload, comparator):
    candidates = tuple(payload)
    return lambda actual: comparator.member(actual, candidates)


def _nin(payload, comparator):
    candidates = tuple(payload)
    return lambda actual: actual is MISSING or not comparator.member(actual, candidates)


def _contains(payload, comparator):
    def evaluate(actual: Any) -> bool:
        return is_sequence(actual) and any(strict_equal(el, payload) for el in actual)

    return evaluate


def _size(payload, comparator):
    return lambda actual: is_sequence(actual) and len(actual) == payload


OPERATORS = {
    "$in": _in,
    "$nin": _nin,
    "$contains": _contains,
    "$size": _size,
}
