# =============================================================================
# deep-filter -- String Operators
# =============================================================================

"""
String operators compare literally: ``%`` and ``_`` have no special
meaning here. Case is folded unless the filter is case-sensitive.
"""

from __future__ import annotations

from typing import Any

from ..patterns import compile_regex


def _starts_with(payload, comparator):
    prefix = comparator.fold(payload)
    return lambda actual: isinstance(actual, str) and comparator.fold(actual).startswith(prefix)


def _ends_with(payload, comparator):
    suffix = comparator.fold(payload)
    return lambda actual: isinstance(actual, str) and comparator.fold(actual).endswith(suffix)


def _contains(payload, comparator):
    if not isinstance(payload, str):
        return lambda actual: False
    needle = comparator.fold(payload)
    return lambda actual: isinstance(actual, str) and needle in comparator.fold(actual)


def _regex(payload, comparator):
    pattern = compile_regex(payload, comparator.case_sensitive)

    def evaluate(actual: Any) -> bool:
        return isinstance(actual, str) and pattern.search(actual) is not None

    return evaluate


OPERATORS = {
    "$startsWith": _starts_with,
    "$endsWith": _ends_with,
    "$contains": _contains,
    "$regex": _regex,
    "$match": _regex,
}
