from __future__ import annotations

import pytest

from gbfspulse.schemas.core import BoundingBox, GeoPoint
from gbfspulse.utils.geo import bounding_box_of, haversine_km


def test_haversine_is_zero_for_same_point() -> None:
    p = GeoPoint(lat=41.8781, lon=-87.6298)
    assert haversine_km(p, p) == 0.0


def test_haversine_is_symmetric() -> None:
    chicago = GeoPoint(lat=41.8781, lon=-87.6298)
    nyc = GeoPoint(lat=40.7128, lon=-74.0060)
    assert haversine_km(chicago, nyc) == pytest.approx(haversine_km(nyc, chicago))
    # Roughly 1145 km between the two downtowns.
    assert haversine_km(chicago, nyc) == pytest.approx(1145, rel=0.01)


def test_haversine_handles_antipodal_points() -> None:
    d = haversine_km(GeoPoint(lat=0.0, lon=0.0), GeoPoint(lat=0.0, lon=180.0))
    assert d == pytest.approx(3.141592653589793 * 6371)


def test_bounding_box_of_points() -> None:
    bbox = bounding_box_of([GeoPoint(lat=1, lon=2), GeoPoint(lat=3, lon=0)])
    assert bbox == BoundingBox(min_lat=1, max_lat=3, min_lon=0, max_lon=2)


def test_bounding_box_of_empty_raises() -> None:
    with pytest.raises(ValueError):
        bounding_box_of([])
