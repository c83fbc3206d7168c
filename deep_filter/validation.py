# =============================================================================
# deep-filter -- Expression and Option Validation
# =============================================================================

"""
Structural validation, run before anything is compiled or traversed.

Operator payloads and options are checked with JSON Schema (Draft 7). The
type checker is extended so Python values validate naturally: ``array``
accepts lists, tuples and sets, ``object`` accepts any Mapping, and three
extra types exist:

- ``datetime``: ``date``/``datetime`` instances
- ``pattern``: a regex source string or a compiled pattern
- ``callable``: any callable (custom comparators)
"""

from __future__ import annotations

import logging
import math
import re
from collections.abc import Mapping, Set
from datetime import date
from typing import Any

from jsonschema import Draft7Validator, validators
from jsonschema.exceptions import best_match

from .constants import (
    AGE_UNITS,
    ANY_PROPERTY_KEY,
    FIELD_OPERATORS,
    GEOSPATIAL_OPERATORS,
    LOGICAL_OPERATORS,
    MAX_MAX_DEPTH,
    MIN_MAX_DEPTH,
    OPERATOR_PREFIX,
    RELATIVE_TIME_UNITS,
)
from .errors import (
    ConfigurationError,
    GeospatialError,
    InvalidExpressionError,
    OperatorError,
    Violation,
    type_name,
)

log = logging.getLogger("deep_filter.validation")


# =============================================================================
# Schema plumbing
# =============================================================================


def _is_array(checker, instance) -> bool:
    return isinstance(instance, (list, tuple, Set))


def _is_object(checker, instance) -> bool:
    return isinstance(instance, Mapping)


def _is_datetime(checker, instance) -> bool:
    return isinstance(instance, date)


def _is_pattern(checker, instance) -> bool:
    return isinstance(instance, (str, re.Pattern))


def _is_callable(checker, instance) -> bool:
    return callable(instance)


_TYPE_CHECKER = Draft7Validator.TYPE_CHECKER.redefine_many({
    "array": _is_array,
    "object": _is_object,
    "datetime": _is_datetime,
    "pattern": _is_pattern,
    "callable": _is_callable,
})

PayloadValidator = validators.extend(Draft7Validator, type_checker=_TYPE_CHECKER)


# =============================================================================
# Operator payload schemas
# =============================================================================

_ORDERED = {"type": ["number", "datetime"]}
_ANY: dict[str, Any] = {}
_NON_NEGATIVE = {"type": "number", "minimum": 0}

_GEO_POINT = {
    "type": "object",
    "required": ["lat", "lng"],
    "properties": {"lat": {"type": "number"}, "lng": {"type": "number"}},
}

_POSITIVE = {"type": "number", "exclusiveMinimum": 0}

_RELATIVE_TIME = {
    "type": "object",
    "properties": {unit: _POSITIVE for unit in RELATIVE_TIME_UNITS},
    "additionalProperties": False,
    "minProperties": 1,
}

_HOUR = {"type": "integer", "minimum": 0, "maximum": 23}

OPERATOR_SCHEMAS: dict[str, dict[str, Any]] = {
    # -- comparison --
    "$gt": _ORDERED,
    "$gte": _ORDERED,
    "$lt": _ORDERED,
    "$lte": _ORDERED,
    "$eq": _ANY,
    "$ne": _ANY,
    # -- array --
    "$in": {"type": "array"},
    "$nin": {"type": "array"},
    "$contains": _ANY,
    "$size": {"type": "integer", "minimum": 0},
    # -- string --
    "$startsWith": {"type": "string"},
    "$endsWith": {"type": "string"},
    "$regex": {"type": "pattern"},
    "$match": {"type": "pattern"},
    # -- geospatial --
    "$near": {
        "type": "object",
        "required": ["center", "maxDistanceMeters"],
        "properties": {
            "center": _GEO_POINT,
            "maxDistanceMeters": _NON_NEGATIVE,
            "minDistanceMeters": _NON_NEGATIVE,
        },
    },
    "$geoBox": {
        "type": "object",
        "required": ["southwest", "northeast"],
        "properties": {"southwest": _GEO_POINT, "northeast": _GEO_POINT},
    },
    "$geoPolygon": {
        "type": "object",
        "required": ["points"],
        "properties": {"points": {"type": "array", "minItems": 3, "items": _GEO_POINT}},
    },
    # -- datetime --
    "$recent": _RELATIVE_TIME,
    "$upcoming": _RELATIVE_TIME,
    "$dayOfWeek": {"type": "array", "minItems": 1, "items": {"type": "integer", "minimum": 0, "maximum": 6}},
    "$timeOfDay": {
        "type": "object",
        "required": ["start", "end"],
        "properties": {"start": _HOUR, "end": _HOUR},
    },
    "$age": {
        "type": "object",
        "properties": {
            "min": _NON_NEGATIVE,
            "max": _NON_NEGATIVE,
            "unit": {"enum": list(AGE_UNITS)},
        },
        "additionalProperties": False,
        "anyOf": [{"required": ["min"]}, {"required": ["max"]}],
    },
    "$isWeekday": {"type": "boolean"},
    "$isWeekend": {"type": "boolean"},
    "$isBefore": {"type": "datetime"},
    "$isAfter": {"type": "datetime"},
}

_PAYLOAD_VALIDATORS = {op: PayloadValidator(schema) for op, schema in OPERATOR_SCHEMAS.items()}

_ORDER_FIELD = {
    "type": "object",
    "required": ["field"],
    "properties": {
        "field": {"type": "string", "minLength": 1},
        "direction": {"type": "string", "pattern": "(?i)^(asc|desc)$"},
    },
}

OPTIONS_SCHEMA: dict[str, Any] = {
    "type": "object",
    "properties": {
        "caseSensitive": {"type": "boolean"},
        "maxDepth": {"type": "integer", "minimum": MIN_MAX_DEPTH, "maximum": MAX_MAX_DEPTH},
        "customComparator": {"type": ["callable", "null"]},
        "enableCache": {"type": "boolean"},
        "debug": {"type": "boolean"},
        "verbose": {"type": "boolean"},
        "showTimings": {"type": "boolean"},
        "colorize": {"type": "boolean"},
        "orderBy": {
            "anyOf": [
                {"type": "string", "minLength": 1},
                _ORDER_FIELD,
                {"type": "array", "items": {"anyOf": [{"type": "string", "minLength": 1}, _ORDER_FIELD]}},
                {"type": "null"},
            ]
        },
        "limit": {"type": ["integer", "null"]},
        "enablePerformanceMonitoring": {"type": "boolean"},
    },
}

_OPTIONS_VALIDATOR = PayloadValidator(OPTIONS_SCHEMA)


# =============================================================================
# Expression classification helpers
# =============================================================================


def is_primitive(value: Any) -> bool:
    return value is None or isinstance(value, (str, int, float, bool))


def is_operator_payload(value: Any) -> bool:
    """A mapping whose keys include at least one field operator."""
    return isinstance(value, Mapping) and any(
        isinstance(k, str) and k in FIELD_OPERATORS for k in value
    )


def _join(path: str, key: str) -> str:
    return f"{path}.{key}" if path else key


# =============================================================================
# Expression walker
# =============================================================================


class _ExpressionWalker:
    """Collects violations over a whole expression tree."""

    def __init__(self) -> None:
        self.violations: list[Violation] = []
        self.geo_problems: list[tuple[str, Any]] = []

    def add(self, path: str, message: str, operator: str | None = None, value: Any = None) -> None:
        self.violations.append(Violation(path, message, operator, value))

    def expression(self, expr: Any, path: str = "") -> None:
        if callable(expr) or is_primitive(expr):
            return
        if isinstance(expr, Mapping):
            self.object(expr, path)
            return
        self.add(path, f"unsupported expression type '{type_name(expr)}'")

    def object(self, expr: Mapping[Any, Any], path: str) -> None:
        for key, value in expr.items():
            if not isinstance(key, str):
                self.add(path, f"field names must be strings, got {key!r}")
                continue
            here = _join(path, key)
            if key in LOGICAL_OPERATORS:
                self.logical(key, value, here)
            elif key == ANY_PROPERTY_KEY:
                if not is_primitive(value):
                    self.add(here, "'$' matches any property and takes a primitive value", value=value)
            elif key.startswith(OPERATOR_PREFIX):
                if key in FIELD_OPERATORS:
                    self.add(here, f"operator '{key}' must be applied to a field", key, value)
                else:
                    self.add(here, f"unknown operator '{key}'", key, value)
            else:
                self.field(value, here)

    def field(self, value: Any, path: str) -> None:
        if is_operator_payload(value):
            for op, payload in value.items():
                if isinstance(op, str) and op.startswith(OPERATOR_PREFIX) and op not in FIELD_OPERATORS:
                    self.add(_join(path, op), f"unknown operator '{op}'", op, payload)
                    continue
                if not isinstance(op, str) or op not in FIELD_OPERATORS:
                    self.add(
                        path,
                        f"cannot mix operators and field names in one payload (found {op!r})",
                        next(k for k in value if k in FIELD_OPERATORS),
                        value,
                    )
                    continue
                self.operator(op, payload, _join(path, op))
        elif isinstance(value, Mapping):
            self.object(value, path)

    def logical(self, op: str, value: Any, path: str) -> None:
        if op == "$not":
            if isinstance(value, (list, tuple, Set)):
                self.add(path, "'$not' takes a single expression, not a sequence", op, value)
                return
            self.expression(value, path)
            return
        if not isinstance(value, (list, tuple)):
            self.add(path, f"'{op}' takes a sequence of expressions, got '{type_name(value)}'", op, value)
            return
        for i, sub in enumerate(value):
            self.expression(sub, f"{path}[{i}]")

    def operator(self, op: str, payload: Any, path: str) -> None:
        error = best_match(_PAYLOAD_VALIDATORS[op].iter_errors(payload))
        if error is not None:
            where = path + "".join(f"[{p!r}]" for p in error.absolute_path)
            self.add(where, error.message, op, payload)
            return
        if op in ("$regex", "$match") and isinstance(payload, str):
            try:
                re.compile(payload)
            except re.error as exc:
                self.add(path, f"invalid regular expression: {exc}", op, payload)
        if op in GEOSPATIAL_OPERATORS:
            self.coordinates(op, payload, path)

    def coordinates(self, op: str, payload: Mapping[str, Any], path: str) -> None:
        if op == "$near":
            points = [payload["center"]]
        elif op == "$geoBox":
            points = [payload["southwest"], payload["northeast"]]
        else:
            points = list(payload["points"])
        for point in points:
            lat, lng = point["lat"], point["lng"]
            if not (math.isfinite(lat) and math.isfinite(lng)) or not (-90 <= lat <= 90 and -180 <= lng <= 180):
                self.geo_problems.append((path, point))


# =============================================================================
# Public API
# =============================================================================


def validate_expression(expression: Any) -> Any:
    """Validate *expression* and return it unchanged.

    Raises:
        OperatorError: the first problem concerns an operator payload.
        InvalidExpressionError: any other structural problem.
        GeospatialError: the shape is fine but coordinates are out of range.
    """
    walker = _ExpressionWalker()
    walker.expression(expression)

    if walker.violations:
        first = walker.violations[0]
        log.warning("Rejected filter expression: %s", "; ".join(str(v) for v in walker.violations))
        if first.operator is not None:
            raise OperatorError(first.operator, first.value, first.message, walker.violations)
        raise InvalidExpressionError(expression, first.message, walker.violations)

    if walker.geo_problems:
        path, point = walker.geo_problems[0]
        raise GeospatialError(
            f"coordinates at '{path}' out of range (lat -90..90, lng -180..180)",
            coordinates=dict(point),
        )

    return expression


def validate_options(options: Mapping[str, Any]) -> Mapping[str, Any]:
    """Validate camelCase option values; raises ConfigurationError."""
    error = best_match(_OPTIONS_VALIDATOR.iter_errors(options))
    if error is not None:
        option = str(error.absolute_path[0]) if error.absolute_path else None
        log.warning("Rejected filter option %s: %s", option, error.message)
        raise ConfigurationError(error.message, option=option)
    return options
