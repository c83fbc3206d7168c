# =============================================================================
# deep-filter -- Type Definitions
# =============================================================================

from __future__ import annotations

import math
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import timedelta
from enum import Enum
from typing import Any


class ExpressionKind(str, Enum):
    """Shape of an expression, resolved once at compile time."""

    PREDICATE = "predicate"
    PRIMITIVE = "primitive"
    OBJECT = "object"


class SortDirection(str, Enum):
    ASC = "asc"
    DESC = "desc"


class _Missing:
    """Sentinel for a field that is absent from an item."""

    _instance: _Missing | None = None

    def __new__(cls) -> _Missing:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "<MISSING>"


MISSING: Any = _Missing()


def is_number(value: Any) -> bool:
    """True for int/float values, excluding bool."""
    return isinstance(value, (int, float)) and not isinstance(value, bool)


# =============================================================================
# Geospatial
# =============================================================================


@dataclass(frozen=True, slots=True)
class GeoPoint:
    lat: float
    lng: float

    @property
    def is_valid(self) -> bool:
        return (
            math.isfinite(self.lat)
            and math.isfinite(self.lng)
            and -90.0 <= self.lat <= 90.0
            and -180.0 <= self.lng <= 180.0
        )

    @classmethod
    def from_value(cls, value: Any) -> GeoPoint | None:
        """Read a point from a ``{"lat", "lng"}`` mapping or an object with
        ``lat``/``lng`` attributes. Returns ``None`` when the value is not a point.
        """
        if isinstance(value, GeoPoint):
            return value
        if isinstance(value, Mapping):
            lat, lng = value.get("lat"), value.get("lng")
        else:
            lat, lng = getattr(value, "lat", None), getattr(value, "lng", None)
        if not (is_number(lat) and is_number(lng)):
            return None
        return cls(float(lat), float(lng))


@dataclass(frozen=True, slots=True)
class BoundingBox:
    southwest: GeoPoint
    northeast: GeoPoint

    @property
    def crosses_antimeridian(self) -> bool:
        return self.southwest.lng > self.northeast.lng

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> BoundingBox:
        return cls(
            southwest=GeoPoint.from_value(payload["southwest"]),
            northeast=GeoPoint.from_value(payload["northeast"]),
        )


@dataclass(frozen=True, slots=True)
class Polygon:
    points: tuple[GeoPoint, ...]

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> Polygon:
        return cls(points=tuple(GeoPoint.from_value(p) for p in payload["points"]))


@dataclass(frozen=True, slots=True)
class NearQuery:
    center: GeoPoint
    max_distance_meters: float
    min_distance_meters: float | None = None

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> NearQuery:
        return cls(
            center=GeoPoint.from_value(payload["center"]),
            max_distance_meters=float(payload["maxDistanceMeters"]),
            min_distance_meters=(
                float(payload["minDistanceMeters"]) if payload.get("minDistanceMeters") is not None else None
            ),
        )


# =============================================================================
# Datetime
# =============================================================================


@dataclass(frozen=True, slots=True)
class RelativeTimeQuery:
    """A window relative to now. Only the first of days/hours/minutes
    that is set is used.
    """

    days: float | None = None
    hours: float | None = None
    minutes: float | None = None

    def as_timedelta(self) -> timedelta:
        if self.days is not None:
            return timedelta(days=self.days)
        if self.hours is not None:
            return timedelta(hours=self.hours)
        if self.minutes is not None:
            return timedelta(minutes=self.minutes)
        return timedelta(0)

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> RelativeTimeQuery:
        return cls(days=payload.get("days"), hours=payload.get("hours"), minutes=payload.get("minutes"))


@dataclass(frozen=True, slots=True)
class TimeOfDayQuery:
    start: int
    end: int

    def contains(self, hour: int) -> bool:
        if self.start <= self.end:
            return self.start <= hour <= self.end
        # wraps past midnight, e.g. 22..2
        return hour >= self.start or hour <= self.end

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> TimeOfDayQuery:
        return cls(start=int(payload["start"]), end=int(payload["end"]))


@dataclass(frozen=True, slots=True)
class AgeQuery:
    min: float | None = None
    max: float | None = None
    unit: str = "years"

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> AgeQuery:
        return cls(min=payload.get("min"), max=payload.get("max"), unit=payload.get("unit", "years"))


# =============================================================================
# Ordering
# =============================================================================


@dataclass(frozen=True, slots=True)
class OrderByField:
    field: str
    direction: SortDirection = SortDirection.ASC

    @property
    def descending(self) -> bool:
        return self.direction is SortDirection.DESC
