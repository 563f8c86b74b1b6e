import math

import pytest

from store_locator.errors import InvalidQuery
from store_locator.models.domain import Distance, DistanceUnit, GeoPoint
from store_locator.services.geospatial import (
    convert_meters,
    great_circle_meters,
    haversine_km,
    parse_distance,
    search_boxes,
)


def test_haversine_matches_known_distance():
    # New York to London is roughly 5570 km
    assert haversine_km(40.7128, -74.0060, 51.5074, -0.1278) == pytest.approx(5570, rel=0.01)


def test_great_circle_meters_is_zero_for_same_point():
    point = GeoPoint(-73.995146, 40.740337)
    assert great_circle_meters(point, point) == 0


@pytest.mark.parametrize(
    "text, expected",
    [
        ("50km", Distance(50, DistanceUnit.KILOMETERS)),
        ("1.5 mi", Distance(1.5, DistanceUnit.MILES)),
        ("500m", Distance(500, DistanceUnit.METERS)),
        ("10", Distance(10, DistanceUnit.KILOMETERS)),
        ("3 Kilometers", Distance(3, DistanceUnit.KILOMETERS)),
    ],
)
def test_parse_distance(text, expected):
    assert parse_distance(text) == expected


@pytest.mark.parametrize("text", ["", "km", "5 parsecs", "five km"])
def test_parse_distance_rejects_garbage(text):
    with pytest.raises(InvalidQuery):
        parse_distance(text)


def test_distance_conversion_and_literal():
    assert Distance(50, DistanceUnit.KILOMETERS).to_meters() == 50_000
    assert Distance(1, DistanceUnit.MILES).to_meters() == pytest.approx(1609.344)
    assert str(Distance(50.0, DistanceUnit.KILOMETERS)) == "50km"
    assert str(Distance(2.5, DistanceUnit.MILES)) == "2.5mi"
    assert convert_meters(1500, DistanceUnit.KILOMETERS) == 1.5


def test_search_boxes_split_across_antimeridian():
    boxes = search_boxes(GeoPoint(179.99, 0.0), 5_000)

    assert len(boxes) == 2
    bounds = sorted(b.bounds for b in boxes)
    assert bounds[0][0] == -180.0
    assert bounds[1][2] == 180.0


def test_search_boxes_span_all_longitudes_near_pole():
    (only,) = search_boxes(GeoPoint(0.0, 89.99), 5_000)

    min_lon, _, max_lon, max_lat = only.bounds
    assert (min_lon, max_lon, max_lat) == (-180.0, 180.0, 90.0)


@pytest.mark.parametrize(
    "lat1, lon1, lat2, lon2",
    [
        (0.015, 0.0, -0.015, 180.0),
        (0.0, 0.0, 0.0, 180.0),
        (90.0, 0.0, -90.0, 0.0),
    ],
)
def test_haversine_handles_antipodal_points(lat1, lon1, lat2, lon2):
    assert haversine_km(lat1, lon1, lat2, lon2) == pytest.approx(math.pi * 6371.0, rel=1e-6)


@pytest.mark.parametrize("magnitude", [1e-07, 2.5e-05, 1e20])
def test_distance_literal_parses_back(magnitude):
    radius = Distance(magnitude, DistanceUnit.KILOMETERS)

    assert parse_distance(str(radius)) == radius
