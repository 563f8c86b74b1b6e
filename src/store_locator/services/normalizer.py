"""Turn free-form location strings into validated GeoPoints."""

from __future__ import annotations

import math
from typing import Optional

from ..errors import MalformedInput, NonNumericToken, OutOfBounds
from ..models.domain import GeoPoint

SEPARATOR = ","


def _parse_token(token: str) -> float:
    text = token.strip()
    try:
        value = float(text)
    except ValueError as exc:
        raise NonNumericToken(text) from exc
    if not math.isfinite(value):
        raise NonNumericToken(text)
    return value


def point_from_pair(longitude: float, latitude: float) -> GeoPoint:
    """Validate an already disambiguated pair."""

    for value in (longitude, latitude):
        if value is None or not math.isfinite(value):
            raise NonNumericToken(str(value))
    if not -180.0 <= longitude <= 180.0:
        raise OutOfBounds("longitude", longitude)
    if not -90.0 <= latitude <= 90.0:
        raise OutOfBounds("latitude", latitude)
    return GeoPoint(longitude=longitude, latitude=latitude)


def normalize(raw: Optional[str]) -> GeoPoint:
    """Parse ``"lat,lng"`` or ``"lng,lat"`` into a GeoPoint.

    The first token is read as latitude whenever both orders are legal, so
    ``"40.7,-73.9"`` and ``"-73.9,40.7"`` resolve to the same point while
    ``"10,20"`` is always latitude 10, longitude 20.
    """

    if raw is None or not raw.strip():
        raise MalformedInput("Location cannot be empty")

    parts = raw.split(SEPARATOR)
    if len(parts) != 2:
        raise MalformedInput(
            "Invalid location format. Expected 'latitude,longitude' or 'longitude,latitude'"
        )

    first, second = (_parse_token(part) for part in parts)

    if abs(first) <= 90 and abs(second) <= 180:
        latitude, longitude = first, second
    elif abs(first) <= 180 and abs(second) <= 90:
        longitude, latitude = first, second
    elif abs(first) > abs(second):
        longitude, latitude = first, second
    else:
        latitude, longitude = first, second

    return point_from_pair(longitude, latitude)
