# =============================================================================
# deep-filter -- Deep Comparator
# =============================================================================

"""
Recursive comparison of an item's value against an expected value.

Rules, in order:

1. An expected string starting with ``!`` negates the comparison of the
   remainder. A missing field never matches, so its negation does.
2. A sequence actual (list/tuple/set) matches if any element matches.
3. In any-property mode a record matches if any of its properties does
   (keys starting with ``$`` are skipped).
4. An expected mapping requires every one of its keys to match the
   corresponding field of the actual record.
5. Leaves: ``%``/``_`` wildcards fully match string actuals and never
   match other types, other strings match as a substring (search mode) or as a
   whole value (field mode), honouring case sensitivity. Everything else
   is strict equality with booleans never equal to numbers. A custom
   comparator replaces this leaf rule entirely.

Descending past ``max_depth`` is not an error; the branch simply does
not match.
"""

from __future__ import annotations

from collections.abc import Mapping, Set
from typing import TYPE_CHECKING, Any

from .constants import ANY_PROPERTY_KEY, NEGATION_PREFIX
from .paths import is_record, iter_properties, resolve_path
from .patterns import has_wildcard, stringify, wildcard_match
from .types import MISSING

if TYPE_CHECKING:
    from .config import FilterConfig


def is_sequence(value: Any) -> bool:
    """List-like values whose elements are matched individually."""
    return isinstance(value, (list, tuple, Set))


def strict_equal(a: Any, b: Any) -> bool:
    """``==`` that never treats booleans as numbers."""
    if isinstance(a, bool) is not isinstance(b, bool):
        return False
    return a == b


def deep_equal(a: Any, b: Any) -> bool:
    """Structural equality used by ``$eq``/``$ne``."""
    if isinstance(a, Mapping) and isinstance(b, Mapping):
        if a.keys() != b.keys():
            return False
        return all(deep_equal(a[k], b[k]) for k in a)
    if isinstance(a, (list, tuple)) and isinstance(b, (list, tuple)):
        return len(a) == len(b) and all(deep_equal(x, y) for x, y in zip(a, b))
    return strict_equal(a, b)


class DeepComparator:
    """Leaf and structural matching bound to one FilterConfig."""

    __slots__ = ("case_sensitive", "max_depth", "custom_comparator")

    def __init__(self, config: FilterConfig) -> None:
        self.case_sensitive = config.case_sensitive
        self.max_depth = config.max_depth
        self.custom_comparator = config.custom_comparator

    def matches(
        self,
        actual: Any,
        expected: Any,
        *,
        any_property: bool = False,
        substring: bool = True,
        depth: int = 0,
    ) -> bool:
        if depth > self.max_depth:
            return False

        if isinstance(expected, str) and expected.startswith(NEGATION_PREFIX):
            return not self.matches(
                actual,
                expected[len(NEGATION_PREFIX):],
                any_property=any_property,
                substring=substring,
                depth=depth,
            )

        if actual is MISSING or callable(expected):
            return False
        if callable(actual) and not is_record(actual):
            return False

        if is_sequence(actual):
            return any(
                self.matches(el, expected, any_property=any_property, substring=substring, depth=depth)
                for el in actual
            )

        if is_record(actual):
            if any_property:
                return self._match_any_property(actual, expected, substring, depth)
            if isinstance(expected, Mapping):
                return self._match_all_keys(actual, expected, substring, depth)

        return self.leaf(actual, expected, substring=substring)

    def _match_any_property(self, actual: Any, expected: Any, substring: bool, depth: int) -> bool:
        for key, value in iter_properties(actual):
            if key.startswith(ANY_PROPERTY_KEY):
                continue
            if self.matches(value, expected, any_property=True, substring=substring, depth=depth + 1):
                return True
        return False

    def _match_all_keys(self, actual: Any, expected: Mapping[str, Any], substring: bool, depth: int) -> bool:
        for key, value in expected.items():
            if callable(value):
                continue
            if key == ANY_PROPERTY_KEY:
                ok = self.matches(actual, value, any_property=True, substring=True, depth=depth)
            else:
                ok = self.matches(resolve_path(actual, key), value, substring=substring, depth=depth + 1)
            if not ok:
                return False
        return True

    def leaf(self, actual: Any, expected: Any, *, substring: bool = True) -> bool:
        if self.custom_comparator is not None:
            return bool(self.custom_comparator(actual, expected))
        if actual is None or expected is None:
            return actual is None and expected is None
        if isinstance(expected, Mapping) or is_record(actual):
            return False
        if isinstance(expected, str):
            if has_wildcard(expected):
                return isinstance(actual, str) and wildcard_match(expected, actual, self.case_sensitive)
            if substring:
                return self.fold(expected) in self.fold(stringify(actual))
            return isinstance(actual, str) and self.fold(actual) == self.fold(expected)
        return strict_equal(actual, expected)

    def fold(self, text: str) -> str:
        return text if self.case_sensitive else text.casefold()

    def member(self, actual: Any, candidates: tuple[Any, ...]) -> bool:
        """``$in`` membership. Sequence actuals match if any element is a member."""
        if is_sequence(actual):
            return any(self.member(el, candidates) for el in actual)
        if actual is MISSING:
            return False
        for candidate in candidates:
            if isinstance(candidate, str) and has_wildcard(candidate):
                if isinstance(actual, str) and wildcard_match(candidate, actual, self.case_sensitive):
                    return True
            elif strict_equal(actual, candidate):
                return True
        return False
