from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass(frozen=True)
class GeoPoint:
    lat: float
    lon: float


@dataclass(frozen=True)
class BoundingBox:
    min_lat: float
    max_lat: float
    min_lon: float
    max_lon: float


@dataclass(frozen=True)
class StationInfo:
    station_id: str
    name: str
    lat: float
    lon: float
    capacity: Optional[int] = None


@dataclass(frozen=True)
class StationStatus:
    station_id: str
    num_bikes_available: int
    num_docks_available: int
    is_installed: bool = True
    is_renting: bool = True
    is_returning: bool = True
    last_reported: int = 0


@dataclass(frozen=True)
class Station:
    """A station present in both feeds, scored at snapshot time."""

    station_id: str
    name: str
    lat: float
    lon: float
    capacity: Optional[int]
    num_bikes_available: int
    num_docks_available: int
    is_installed: bool
    is_renting: bool
    is_returning: bool
    last_reported: int
    target_fill: float
    pain: float


@dataclass(frozen=True)
class FeedRef:
    name: str
    url: str


@dataclass(frozen=True)
class DiscoveryDocument:
    feeds: tuple[FeedRef, ...]
    last_updated: Optional[int] = None
    ttl: Optional[int] = None

    def feed_url(self, name: str) -> Optional[str]:
        for feed in self.feeds:
            if feed.name == name:
                return feed.url
        return None


@dataclass(frozen=True)
class StationSnapshot:
    stations: list[Station]
    fetched_at: datetime
    bounds: BoundingBox
    system: str
    gbfs_root: str
