from __future__ import annotations

import math
from typing import Iterable

from gbfspulse.schemas.core import BoundingBox, GeoPoint


EARTH_RADIUS_KM = 6371.0


def haversine_km(a: GeoPoint, b: GeoPoint) -> float:
    """Great-circle distance between two points in kilometers."""

    d_lat = math.radians(b.lat - a.lat)
    d_lon = math.radians(b.lon - a.lon)
    s1 = math.sin(d_lat / 2)
    s2 = math.sin(d_lon / 2)
    h = s1 * s1 + math.cos(math.radians(a.lat)) * math.cos(math.radians(b.lat)) * s2 * s2
    # Rounding can push sqrt(h) slightly above 1 for antipodal points.
    return 2 * EARTH_RADIUS_KM * math.asin(min(1.0, math.sqrt(h)))


def bounding_box_of(points: Iterable[GeoPoint]) -> BoundingBox:
    pts = list(points)
    if not pts:
        raise ValueError("bounding_box_of requires at least one point")
    lats = [p.lat for p in pts]
    lons = [p.lon for p in pts]
    return BoundingBox(min_lat=min(lats), max_lat=max(lats), min_lon=min(lons), max_lon=max(lons))
