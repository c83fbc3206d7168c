# =============================================================================
# deep-filter -- Predicate and Result Caches
# =============================================================================

"""
Memoization keyed by the canonical form of (expression, relevant config).

The canonical form tags every value with its type (so ``1``, ``"1"`` and
``True`` differ) and sorts mapping keys. Callables and objects without
their own ``__eq__`` are identified by identity. It is serialized with
orjson and hashed with SHA-256. A CacheKey compares the serialized form
too, so a digest collision can never return another expression's
predicate.

The result cache is additionally keyed by the identity of the source
collection. Mutating a collection in place between cached calls is not
detected: callers that enable caching must treat collections as
immutable, or call ``clear()``.
"""

from __future__ import annotations

import hashlib
import logging
import re
from collections import OrderedDict
from collections.abc import Callable, Mapping, Set
from dataclasses import dataclass, field
from datetime import date, datetime, time
from enum import Enum
from typing import TYPE_CHECKING, Any

import orjson

from .paths import is_record, iter_properties

if TYPE_CHECKING:
    from .config import FilterConfig

log = logging.getLogger("deep_filter.cache")

Predicate = Callable[[Any], bool]


# =============================================================================
# Cache keys
# =============================================================================


def _sort_key(item: Any) -> bytes:
    return orjson.dumps(item)


def canonicalize(value: Any) -> Any:
    """Type-tagged, order-independent structure for a value."""
    if value is None:
        return None
    if isinstance(value, bool):
        return ["bool", value]
    if isinstance(value, Enum):
        return ["enum", type(value).__qualname__, canonicalize(value.value)]
    if isinstance(value, int):
        return ["int", repr(value)]
    if isinstance(value, float):
        return ["float", repr(value)]
    if isinstance(value, str):
        return ["str", value]
    if isinstance(value, bytes):
        return ["bytes", value.hex()]
    if isinstance(value, datetime):
        return ["datetime", value.isoformat()]
    if isinstance(value, date):
        return ["date", value.isoformat()]
    if isinstance(value, time):
        return ["time", value.isoformat()]
    if isinstance(value, re.Pattern):
        return ["re", value.pattern, value.flags]
    if isinstance(value, Mapping):
        pairs = [[canonicalize(k), canonicalize(v)] for k, v in value.items()]
        pairs.sort(key=lambda pair: _sort_key(pair[0]))
        return ["map", pairs]
    if isinstance(value, (list, tuple)):
        return ["list", [canonicalize(v) for v in value]]
    if isinstance(value, Set):
        return ["set", sorted((canonicalize(v) for v in value), key=_sort_key)]
    if callable(value):
        return [
            "fn",
            getattr(value, "__module__", None) or "",
            getattr(value, "__qualname__", None) or type(value).__qualname__,
            id(value),
        ]
    if type(value).__eq__ is object.__eq__:
        # == is identity for these
        return ["id", type(value).__qualname__, id(value)]
    if is_record(value):
        return ["obj", type(value).__qualname__, [[k, canonicalize(v)] for k, v in iter_properties(value)]]
    return ["repr", type(value).__qualname__, repr(value)]


@dataclass(frozen=True, slots=True)
class CacheKey:
    """Memoization key. Equal keys mean equal canonical forms."""

    digest: str
    canonical: bytes = field(repr=False)

    def __hash__(self) -> int:
        return hash(self.digest)


def make_cache_key(expression: Any, config: FilterConfig) -> CacheKey:
    """Key over the expression and the config fields that change matching."""
    canonical = orjson.dumps([
        canonicalize(expression),
        config.case_sensitive,
        config.max_depth,
        canonicalize(config.custom_comparator),
    ])
    return CacheKey(hashlib.sha256(canonical).hexdigest(), canonical)


# =============================================================================
# Caches
# =============================================================================


class _BoundedStore:
    """Insertion-ordered store with optional LRU eviction."""

    def __init__(self, max_entries: int | None = None) -> None:
        if max_entries is not None and max_entries <= 0:
            raise ValueError("max_entries must be positive")
        self.max_entries = max_entries
        self._entries: OrderedDict[Any, Any] = OrderedDict()
        self.hits = 0
        self.misses = 0

    def _get(self, key: Any) -> Any:
        entry = self._entries.get(key)
        if entry is None:
            self.misses += 1
            return None
        self.hits += 1
        if self.max_entries is not None:
            self._entries.move_to_end(key)
        return entry

    def _set(self, key: Any, entry: Any) -> None:
        self._entries[key] = entry
        self._entries.move_to_end(key)
        if self.max_entries is not None:
            while len(self._entries) > self.max_entries:
                self._entries.popitem(last=False)

    def clear(self) -> None:
        self._entries.clear()
        self.hits = 0
        self.misses = 0

    def __len__(self) -> int:
        return len(self._entries)

    def get_stats(self) -> dict[str, Any]:
        return {
            "size": len(self._entries),
            "hits": self.hits,
            "misses": self.misses,
            "max_entries": self.max_entries,
        }


class PredicateCache(_BoundedStore):
    """Compiled predicates by CacheKey. One predicate object per key."""

    def get(self, key: CacheKey) -> Predicate | None:
        return self._get(key)

    def set(self, key: CacheKey, predicate: Predicate) -> None:
        self._set(key, predicate)

    def get_or_compile(self, key: CacheKey, factory: Callable[[], Predicate]) -> Predicate:
        predicate = self.get(key)
        if predicate is None:
            log.debug("Predicate cache miss %s", key.digest[:12])
            predicate = factory()
            self.set(key, predicate)
        else:
            log.debug("Predicate cache hit %s", key.digest[:12])
        return predicate


class ResultCache(_BoundedStore):
    """Filtered lists by (source collection identity, CacheKey).

    Entries hold a reference to their collection so its ``id`` cannot be
    reused while the entry exists. Lists are copied in and out.
    """

    def get(self, collection: Any, key: CacheKey) -> list[Any] | None:
        entry = self._get((id(collection), key))
        if entry is None:
            return None
        source, items = entry
        if source is not collection:
            return None
        return list(items)

    def set(self, collection: Any, key: CacheKey, items: list[Any]) -> None:
        self._set((id(collection), key), (collection, list(items)))
