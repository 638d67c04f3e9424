from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from gbfspulse.schemas.core import BoundingBox, Station, StationSnapshot


class StationOut(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    station_id: str
    name: str
    lat: float
    lon: float
    capacity: Optional[int] = None
    num_bikes_available: int
    num_docks_available: int
    is_installed: bool
    is_renting: bool
    is_returning: bool
    last_reported: int
    target_fill: float = Field(alias="targetFill")
    pain: float = Field(ge=0)

    @classmethod
    def from_station(cls, station: Station) -> "StationOut":
        return cls(
            station_id=station.station_id,
            name=station.name,
            lat=station.lat,
            lon=station.lon,
            capacity=station.capacity,
            num_bikes_available=station.num_bikes_available,
            num_docks_available=station.num_docks_available,
            is_installed=station.is_installed,
            is_renting=station.is_renting,
            is_returning=station.is_returning,
            last_reported=station.last_reported,
            target_fill=station.target_fill,
            pain=station.pain,
        )


class BoundsOut(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    min_lat: float = Field(alias="minLat")
    max_lat: float = Field(alias="maxLat")
    min_lon: float = Field(alias="minLon")
    max_lon: float = Field(alias="maxLon")

    @classmethod
    def from_bbox(cls, bbox: BoundingBox) -> "BoundsOut":
        return cls(min_lat=bbox.min_lat, max_lat=bbox.max_lat, min_lon=bbox.min_lon, max_lon=bbox.max_lon)


class SnapshotOut(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    stations: list[StationOut] = Field(default_factory=list)
    fetched_at: datetime = Field(alias="fetchedAt")
    bounds: BoundsOut
    system: str
    gbfs_root: str = Field(alias="gbfsRoot")

    @classmethod
    def from_snapshot(cls, snapshot: StationSnapshot) -> "SnapshotOut":
        return cls(
            stations=[StationOut.from_station(s) for s in snapshot.stations],
            fetched_at=snapshot.fetched_at,
            bounds=BoundsOut.from_bbox(snapshot.bounds),
            system=snapshot.system,
            gbfs_root=snapshot.gbfs_root,
        )


class ErrorOut(BaseModel):
    error: str
    details: Optional[str] = None


class SystemOut(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    system: str
    gbfs_root: str = Field(alias="gbfsRoot")


class SystemsOut(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    default_system: str = Field(alias="defaultSystem")
    systems: list[SystemOut] = Field(default_factory=list)


class HealthOut(BaseModel):
    status: str
    service: str
