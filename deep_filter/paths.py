# =============================================================================
# deep-filter -- Field Access
# =============================================================================

from __future__ import annotations

import dataclasses
from collections.abc import Iterator, Mapping
from enum import Enum
from typing import Any

from .constants import PATH_SEPARATOR
from .types import MISSING

_SCALARS = (str, bytes, int, float, bool, type(None))


def get_field(obj: Any, key: str) -> Any:
    """Value of one field of *obj*, or ``MISSING``.

    Mappings are read by key. Other objects (dataclasses, plain classes)
    are read by public attribute.
    """
    if isinstance(obj, Mapping):
        return obj[key] if key in obj else MISSING
    if isinstance(obj, _SCALARS) or key.startswith("_"):
        return MISSING
    return getattr(obj, key, MISSING)


def resolve_path(obj: Any, path: str) -> Any:
    """Resolve a possibly dotted field path.

    A literal key that exists wins over splitting on dots, so
    ``{"a.b": 1}`` is still reachable as ``"a.b"``.
    """
    value = get_field(obj, path)
    if value is not MISSING or PATH_SEPARATOR not in path:
        return value
    value = obj
    for key in path.split(PATH_SEPARATOR):
        value = get_field(value, key)
        if value is MISSING:
            return MISSING
    return value


def is_record(value: Any) -> bool:
    """True for values matched field-by-field (mappings and plain objects)."""
    if value is MISSING:
        return False
    if isinstance(value, Mapping):
        return True
    if isinstance(value, (*_SCALARS, Enum)) or callable(value):
        return False
    return dataclasses.is_dataclass(value) or hasattr(value, "__dict__")


def iter_properties(obj: Any) -> Iterator[tuple[str, Any]]:
    """(name, value) pairs of a record's own fields."""
    if isinstance(obj, Mapping):
        for key, value in obj.items():
            yield str(key), value
    elif dataclasses.is_dataclass(obj):
        for f in dataclasses.fields(obj):
            yield f.name, getattr(obj, f.name)
    elif hasattr(obj, "__dict__"):
        for key, value in vars(obj).items():
            if not key.startswith("_"):
                yield key, value
