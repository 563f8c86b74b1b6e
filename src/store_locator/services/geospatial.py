"""Geospatial helper functions."""

from __future__ import annotations

import math
import re

from shapely.geometry import box
from shapely.geometry.base import BaseGeometry

from ..errors import InvalidQuery
from ..models.domain import Distance, DistanceUnit, GeoPoint

EARTH_RADIUS_KM = 6371.0
EARTH_RADIUS_M = EARTH_RADIUS_KM * 1000.0

_DISTANCE_PATTERN = re.compile(r"^\s*([-+]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][-+]?\d+)?)\s*([a-zA-Z]*)\s*$")
_UNIT_ALIASES = {
    "m": DistanceUnit.METERS,
    "meter": DistanceUnit.METERS,
    "meters": DistanceUnit.METERS,
    "metres": DistanceUnit.METERS,
    "km": DistanceUnit.KILOMETERS,
    "kilometer": DistanceUnit.KILOMETERS,
    "kilometers": DistanceUnit.KILOMETERS,
    "kilometres": DistanceUnit.KILOMETERS,
    "mi": DistanceUnit.MILES,
    "mile": DistanceUnit.MILES,
    "miles": DistanceUnit.MILES,
}


def haversine_km(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Compute distance between two coordinates using the Haversine formula."""

    phi1, phi2 = math.radians(lat1), math.radians(lat2)
    d_phi = math.radians(lat2 - lat1)
    d_lambda = math.radians(lon2 - lon1)

    a = math.sin(d_phi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2) ** 2
    # rounding can push antipodal pairs just past 1
    a = min(1.0, max(0.0, a))
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_KM * c


def great_circle_meters(a: GeoPoint, b: GeoPoint) -> float:
    return haversine_km(a.latitude, a.longitude, b.latitude, b.longitude) * 1000.0


def search_boxes(center: GeoPoint, radius_meters: float) -> list[BaseGeometry]:
    """Return lon/lat boxes that together cover every point within the radius.

    The box is split in two when it crosses the antimeridian and spans all
    longitudes when the circle reaches a pole.
    """

    # margin keeps points lying exactly on the circle inside the box
    angular = math.degrees(radius_meters / EARTH_RADIUS_M) + 1e-9
    min_lat = center.latitude - angular
    max_lat = center.latitude + angular
    if min_lat <= -90.0 or max_lat >= 90.0 or angular >= 180.0:
        return [box(-180.0, max(min_lat, -90.0), 180.0, min(max_lat, 90.0))]

    # widest longitude spread of the circle
    lon_delta = math.degrees(math.asin(min(1.0, math.sin(math.radians(angular)) / math.cos(math.radians(center.latitude)))))
    min_lon = center.longitude - lon_delta
    max_lon = center.longitude + lon_delta
    if min_lon < -180.0:
        return [box(min_lon + 360.0, min_lat, 180.0, max_lat), box(-180.0, min_lat, max_lon, max_lat)]
    if max_lon > 180.0:
        return [box(min_lon, min_lat, 180.0, max_lat), box(-180.0, min_lat, max_lon - 360.0, max_lat)]
    return [box(min_lon, min_lat, max_lon, max_lat)]


def parse_distance(value: str, default_unit: DistanceUnit = DistanceUnit.KILOMETERS) -> Distance:
    """Parse ``"50km"``, ``"1.5 mi"``, ``"500m"`` or a bare number into a Distance."""

    match = _DISTANCE_PATTERN.match(value or "")
    if not match:
        raise InvalidQuery(f"Invalid distance '{value}'. Expected a number followed by m, km or mi.")
    magnitude, unit_text = match.groups()
    if not unit_text:
        unit = default_unit
    else:
        unit = _UNIT_ALIASES.get(unit_text.lower())
        if unit is None:
            raise InvalidQuery(f"Unsupported distance unit '{unit_text}'. Use m, km or mi.")
    return Distance(float(magnitude), unit)


def convert_meters(meters: float, unit: DistanceUnit) -> float:
    return meters / unit.meters_per_unit
