# =============================================================================
# deep-filter -- Ordering and Limiting
# =============================================================================

from __future__ import annotations

from collections.abc import Mapping
from datetime import date
from functools import cmp_to_key
from typing import TYPE_CHECKING, Any

from .errors import ConfigurationError, type_name
from .operators.dates import as_datetime
from .paths import resolve_path
from .types import MISSING, OrderByField, SortDirection, is_number

if TYPE_CHECKING:
    from .config import FilterConfig


# =============================================================================
# orderBy normalization
# =============================================================================


def _direction(value: Any) -> SortDirection:
    if value is None:
        return SortDirection.ASC
    if isinstance(value, SortDirection):
        return value
    if isinstance(value, str) and value.lower() in ("asc", "desc"):
        return SortDirection(value.lower())
    raise ConfigurationError(f"sort direction must be 'asc' or 'desc', got {value!r}", option="orderBy")


def _order_field(value: Any) -> OrderByField:
    if isinstance(value, OrderByField):
        return value
    if isinstance(value, str) and value:
        return OrderByField(value)
    if isinstance(value, Mapping):
        name = value.get("field")
        if not isinstance(name, str) or not name:
            raise ConfigurationError("orderBy entries need a non-empty 'field'", option="orderBy")
        return OrderByField(name, _direction(value.get("direction")))
    raise ConfigurationError(f"unsupported orderBy entry of type '{type_name(value)}'", option="orderBy")


def normalize_order_by(value: Any) -> tuple[OrderByField, ...]:
    """Normalize a field name, a ``{field, direction}`` mapping, an
    OrderByField, or a list of these into an ordered tuple of OrderByField.
    """
    if value is None:
        return ()
    if isinstance(value, (list, tuple)):
        return tuple(_order_field(v) for v in value)
    return (_order_field(value),)


# =============================================================================
# Sorting
# =============================================================================


def _cmp(a: Any, b: Any) -> int:
    return (a > b) - (a < b)


def compare_values(a: Any, b: Any, case_sensitive: bool = False) -> int:
    """Three-way comparison of two present (non-null) sort values."""
    if isinstance(a, bool) and isinstance(b, bool):
        return _cmp(a, b)
    if is_number(a) and is_number(b):
        return _cmp(a, b)
    if isinstance(a, date) and isinstance(b, date):
        try:
            return _cmp(as_datetime(a), as_datetime(b))
        except TypeError:
            # naive vs aware
            return _cmp(as_datetime(a).isoformat(), as_datetime(b).isoformat())
    if isinstance(a, str) and isinstance(b, str):
        if not case_sensitive:
            return _cmp(a.casefold(), b.casefold()) or _cmp(a, b)
        return _cmp(a, b)
    return _cmp(str(a), str(b))


def _is_null(value: Any) -> bool:
    return value is None or value is MISSING


def sort_items(items: list[Any], fields: tuple[OrderByField, ...], case_sensitive: bool = False) -> list[Any]:
    """Stable multi-key sort. Null or missing values sort last in either direction."""
    if not fields:
        return list(items)

    def compare(x: Any, y: Any) -> int:
        for spec in fields:
            a = resolve_path(x, spec.field)
            b = resolve_path(y, spec.field)
            a_null, b_null = _is_null(a), _is_null(b)
            if a_null and b_null:
                continue
            if a_null:
                return 1
            if b_null:
                return -1
            result = compare_values(a, b, case_sensitive)
            if result:
                return -result if spec.descending else result
        return 0

    return sorted(items, key=cmp_to_key(compare))


def apply_limit(items: list[Any], limit: int | None) -> list[Any]:
    if limit is None or limit <= 0:
        return items
    return items[:limit]


def post_process(items: list[Any], config: FilterConfig) -> list[Any]:
    if config.order_by:
        items = sort_items(items, config.order_by, config.case_sensitive)
    return apply_limit(items, config.limit)
