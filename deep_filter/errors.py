# =============================================================================
# deep-filter -- Error Types
# =============================================================================
#
# FilterError
#   ValidationError
#     InvalidExpressionError
#       OperatorError
#     ConfigurationError
#   TypeMismatchError
#   GeospatialError
# =============================================================================

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True, slots=True)
class Violation:
    """One structural problem found while validating an expression.

    Attributes:
        path: Dotted location inside the expression (``""`` for the root).
        message: Human-readable description.
        operator: Offending operator, when the problem is an operator payload.
        value: The offending payload (not part of equality).
    """

    path: str
    message: str
    operator: str | None = None
    value: Any = field(default=None, compare=False, repr=False)

    def __str__(self) -> str:
        where = self.path or "<root>"
        return f"{where}: {self.message}"


class FilterError(Exception):
    """Base exception for all filter errors."""

    def __init__(self, message: str, code: str = "FILTER_ERROR", context: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.code = code
        self.context = context or {}

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": type(self).__name__,
            "message": self.message,
            "code": self.code,
            "context": self.context,
        }

    def __str__(self) -> str:
        return f"{type(self).__name__} [{self.code}]: {self.message}"


class ValidationError(FilterError):
    """Structural validation failed, optionally for one field or argument."""

    def __init__(self, details: str, field: str | None = None, errors: list[str] | None = None) -> None:
        self.details = details
        self.field = field
        self.errors = errors or []
        where = f" for field '{field}'" if field else ""
        FilterError.__init__(
            self,
            f"Validation failed{where}: {details}",
            "VALIDATION_ERROR",
            {"field": field, "details": details, "errors": self.errors},
        )


class InvalidExpressionError(ValidationError):
    """The expression has an invalid shape.

    ``violations`` lists every problem found, in traversal order.
    """

    def __init__(self, expression: Any, details: str, violations: list[Violation] | None = None) -> None:
        self.expression = expression
        self.details = details
        self.field = None
        self.violations = list(violations or [])
        self.errors = [str(v) for v in self.violations]
        FilterError.__init__(
            self,
            f"Invalid filter expression: {details}",
            "INVALID_EXPRESSION",
            {"expression": _safe_repr(expression), "details": details, "errors": self.errors},
        )


class OperatorError(InvalidExpressionError):
    """An operator was given a payload of the wrong shape or type."""

    def __init__(self, operator: str, value: Any, details: str, violations: list[Violation] | None = None) -> None:
        self.operator = operator
        self.value = value
        self.expression = value
        self.details = details
        self.field = None
        self.violations = list(violations or [Violation("", details, operator)])
        self.errors = [str(v) for v in self.violations]
        FilterError.__init__(
            self,
            f"Operator '{operator}' error: {details}",
            "OPERATOR_ERROR",
            {"operator": operator, "value": _safe_repr(value), "details": details, "errors": self.errors},
        )


class ConfigurationError(ValidationError):
    """An option has an invalid value."""

    def __init__(self, details: str, option: str | None = None) -> None:
        self.details = details
        self.option = option
        self.field = option
        self.errors = [details]
        where = f" for option '{option}'" if option else ""
        FilterError.__init__(
            self,
            f"Configuration error{where}: {details}",
            "CONFIGURATION_ERROR",
            {"option": option, "details": details},
        )


class TypeMismatchError(FilterError):
    """A value has the wrong type (e.g. a non-list collection)."""

    def __init__(self, expected: str, received: str, field: str | None = None) -> None:
        self.expected = expected
        self.received = received
        self.field = field
        where = f" for field '{field}'" if field else ""
        super().__init__(
            f"Type mismatch{where}: expected {expected}, received {received}",
            "TYPE_MISMATCH",
            {"expected": expected, "received": received, "field": field},
        )


class GeospatialError(FilterError):
    """Invalid coordinates or geometry in a geospatial operator."""

    def __init__(self, details: str, coordinates: Any = None) -> None:
        self.details = details
        self.coordinates = coordinates
        super().__init__(
            f"Geospatial error: {details}",
            "GEOSPATIAL_ERROR",
            {"details": details, "coordinates": _safe_repr(coordinates)},
        )


def _safe_repr(value: Any, limit: int = 200) -> str:
    text = repr(value)
    if len(text) > limit:
        return text[: limit - 3] + "..."
    return text


def type_name(value: Any) -> str:
    """Short type label used in TypeMismatchError messages."""
    if value is None:
        return "None"
    return type(value).__name__
