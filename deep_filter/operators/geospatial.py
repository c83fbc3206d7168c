# =============================================================================
# deep-filter -- Geospatial Operators
# =============================================================================

"""
``$near``, ``$geoBox`` and ``$geoPolygon``.

Actual values are ``{"lat", "lng"}`` mappings or objects with ``lat``
and ``lng`` attributes. Anything else, or out-of-range coordinates,
simply does not match.

Example:
    ```python
    expression = {
        "location": {
            "$near": {
                "center": {"lat": 52.52, "lng": 13.405},
                "maxDistanceMeters": 5000,
            }
        }
    }
    ```
"""

from __future__ import annotations

import math
from typing import Any

from ..constants import EARTH_RADIUS_METERS, MIN_POLYGON_POINTS
from ..types import BoundingBox, GeoPoint, NearQuery, Polygon


def haversine_distance(a: GeoPoint, b: GeoPoint) -> float:
    """Great-circle distance in meters."""
    lat1, lat2 = math.radians(a.lat), math.radians(b.lat)
    d_lat = lat2 - lat1
    d_lng = math.radians(b.lng - a.lng)
    h = math.sin(d_lat / 2) ** 2 + math.cos(lat1) * math.cos(lat2) * math.sin(d_lng / 2) ** 2
    return 2 * EARTH_RADIUS_METERS * math.asin(min(1.0, math.sqrt(h)))


def within_distance(point: GeoPoint, query: NearQuery) -> bool:
    if not point.is_valid or not query.center.is_valid:
        return False
    distance = haversine_distance(point, query.center)
    if query.min_distance_meters is not None and distance < query.min_distance_meters:
        return False
    return distance <= query.max_distance_meters


def in_bounding_box(point: GeoPoint, box: BoundingBox) -> bool:
    """Inclusive containment; boxes with ``southwest.lng > northeast.lng``
    wrap across the antimeridian.
    """
    if not point.is_valid:
        return False
    if not box.southwest.lat <= point.lat <= box.northeast.lat:
        return False
    if box.crosses_antimeridian:
        return point.lng >= box.southwest.lng or point.lng <= box.northeast.lng
    return box.southwest.lng <= point.lng <= box.northeast.lng


def in_polygon(point: GeoPoint, polygon: Polygon) -> bool:
    """Ray casting. A point exactly on a vertex is outside."""
    vertices = polygon.points
    if not point.is_valid or len(vertices) < MIN_POLYGON_POINTS:
        return False
    if any(point.lat == v.lat and point.lng == v.lng for v in vertices):
        return False

    inside = False
    j = len(vertices) - 1
    for i, vi in enumerate(vertices):
        vj = vertices[j]
        if (vi.lng > point.lng) != (vj.lng > point.lng):
            crossing = (vj.lat - vi.lat) * (point.lng - vi.lng) / (vj.lng - vi.lng) + vi.lat
            if point.lat < crossing:
                inside = not inside
        j = i
    return inside


# =============================================================================
# Factories
# =============================================================================


def _point_test(test, query):
    def evaluate(actual: Any) -> bool:
        point = GeoPoint.from_value(actual)
        return point is not None and test(point, query)

    return evaluate


def _near(payload, comparator):
    return _point_test(within_distance, NearQuery.from_payload(payload))


def _geo_box(payload, comparator):
    return _point_test(in_bounding_box, BoundingBox.from_payload(payload))


def _geo_polygon(payload, comparator):
    return _point_test(in_polygon, Polygon.from_payload(payload))


OPERATORS = {
    "$near": _near,
    "$geoBox": _geo_box,
    "$geoPolygon": _geo_polygon,
}
