# =============================================================================
# deep-filter -- Comparison Operators
# =============================================================================

from __future__ import annotations

import operator
from datetime import date
from typing import Any

from ..comparison import deep_equal
from ..types import MISSING, is_number
from .dates import as_datetime


def _ordered_pair(actual: Any, target: Any) -> tuple[Any, Any] | None:
    if is_number(target) and is_number(actual):
        return actual, target
    if isinstance(target, date) and isinstance(actual, date):
        return as_datetime(actual), as_datetime(target)
    return None


def _ordering(test):
    def factory(payload, comparator):
        def evaluate(actual: Any) -> bool:
            pair = _ordered_pair(actual, payload)
            if pair is None:
                return False
            try:
                return test(*pair)
            except TypeError:
                return False

        return evaluate

    return factory


def _eq(payload, comparator):
    return lambda actual: actual is not MISSING and deep_equal(actual, payload)


def _ne(payload, comparator):
    return lambda actual: actual is MISSING or not deep_equal(actual, payload)


OPERATORS = {
    "$gt": _ordering(operator.gt),
    "$gte": _ordering(operator.ge),
    "$lt": _ordering(operator.lt),
    "$lte": _ordering(operator.le),
    "$eq": _eq,
    "$ne": _ne,
}
