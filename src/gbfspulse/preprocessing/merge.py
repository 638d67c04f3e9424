from __future__ import annotations

from typing import Iterable, Optional, Sequence

from gbfspulse.schemas.core import Station, StationInfo, StationStatus
from gbfspulse.scoring.pain import ScoreFn


def merge_stations(
    info: Sequence[StationInfo],
    status: Iterable[StationStatus],
    score: ScoreFn,
) -> list[Station]:
    """
    Inner-join station metadata with live status on `station_id`.

    Output order follows `info`; ids missing from either side are dropped without error,
    since the two feeds are published independently and drift briefly.
    """

    status_by_id = {s.station_id: s for s in status}

    merged: list[Station] = []
    for station in info:
        live = status_by_id.get(station.station_id)
        if live is None:
            continue
        fill, pain = score(station, live)
        merged.append(
            Station(
                station_id=station.station_id,
                name=station.name,
                lat=station.lat,
                lon=station.lon,
                capacity=station.capacity,
                num_bikes_available=live.num_bikes_available,
                num_docks_available=live.num_docks_available,
                is_installed=live.is_installed,
                is_renting=live.is_renting,
                is_returning=live.is_returning,
                last_reported=live.last_reported,
                target_fill=fill,
                pain=pain,
            )
        )
    return merged


def rank_by_pain(stations: Iterable[Station], *, limit: Optional[int] = None) -> list[Station]:
    ranked = sorted(stations, key=lambda s: s.pain, reverse=True)
    if limit is not None:
        ranked = ranked[: max(limit, 0)]
    return ranked
