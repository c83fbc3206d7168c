# =============================================================================
# deep-filter -- Wildcard and Regex Patterns
# =============================================================================

"""
SQL-LIKE wildcard patterns.

``%`` matches any run of characters (including none) and ``_`` matches
exactly one character. Every other character is literal, so regex
metacharacters in a pattern never take effect::

    wildcard_match("B__lin", "Berlin")   # True
    wildcard_match("%erli%", "Berlin")   # True
    wildcard_match("a.c", "abc")         # False

Compiled patterns are memoized process-wide.
"""

from __future__ import annotations

import logging
import re
from functools import lru_cache
from typing import Any

from .constants import WILDCARD_ANY, WILDCARD_CHARS, WILDCARD_ONE

log = logging.getLogger("deep_filter.patterns")

_PATTERN_CACHE_SIZE = 1024


def has_wildcard(text: str) -> bool:
    return any(ch in WILDCARD_CHARS for ch in text)


@lru_cache(maxsize=_PATTERN_CACHE_SIZE)
def compile_wildcard(pattern: str, case_sensitive: bool = False) -> re.Pattern[str]:
    parts = []
    for ch in pattern:
        if ch == WILDCARD_ANY:
            parts.append(".*")
        elif ch == WILDCARD_ONE:
            parts.append(".")
        else:
            parts.append(re.escape(ch))
    flags = re.DOTALL if case_sensitive else re.DOTALL | re.IGNORECASE
    return re.compile("".join(parts), flags)


def wildcard_match(pattern: str, text: str, case_sensitive: bool = False) -> bool:
    """Full match of *text* against a wildcard *pattern*."""
    return compile_wildcard(pattern, case_sensitive).fullmatch(text) is not None


@lru_cache(maxsize=_PATTERN_CACHE_SIZE)
def _compile_regex(pattern: str, flags: int) -> re.Pattern[str]:
    return re.compile(pattern, flags)


def compile_regex(pattern: str | re.Pattern[str], case_sensitive: bool = False) -> re.Pattern[str]:
    """Compile a ``$regex``/``$match`` payload.

    A compiled pattern is used as given. A string is compiled with
    ``re.IGNORECASE`` unless the filter is case-sensitive.
    """
    if isinstance(pattern, re.Pattern):
        return pattern
    return _compile_regex(pattern, 0 if case_sensitive else re.IGNORECASE)


def stringify(value: Any) -> str:
    """String form of a leaf value used for wildcard matching."""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def pattern_cache_size() -> int:
    return compile_wildcard.cache_info().currsize + _compile_regex.cache_info().currsize


def clear_pattern_cache() -> None:
    compile_wildcard.cache_clear()
    _compile_regex.cache_clear()
    log.debug("Pattern cache cleared")
