from __future__ import annotations

from datetime import datetime, timezone
import logging
import math
from typing import Any, Mapping, Optional

from gbfspulse.schemas.core import StationInfo, StationStatus


logger = logging.getLogger(__name__)


def station_records(payload: Mapping[str, Any]) -> list[Mapping[str, Any]]:
    data = payload.get("data")
    if not isinstance(data, Mapping):
        return []
    stations = data.get("stations", [])
    if not isinstance(stations, list):
        return []
    return [s for s in stations if isinstance(s, Mapping)]


def feed_timestamp(payload: Mapping[str, Any]) -> Optional[datetime]:
    timestamp = payload.get("last_updated")
    if not isinstance(timestamp, (int, float)):
        return None
    return datetime.fromtimestamp(int(timestamp), tz=timezone.utc)


def _as_int(value: Any, default: Optional[int] = None) -> Optional[int]:
    if isinstance(value, bool) or value is None:
        return default
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def _as_float(value: Any) -> Optional[float]:
    if isinstance(value, bool) or value is None:
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    # NaN/inf coordinates would poison the bounding box.
    return number if math.isfinite(number) else None


def _as_flag(value: Any, default: bool = True) -> bool:
    # GBFS v1 publishes 0/1, v2+ publishes booleans.
    if value is None:
        return default
    return bool(value)


def parse_station_info(item: Mapping[str, Any]) -> Optional[StationInfo]:
    station_id = item.get("station_id")
    lat = _as_float(item.get("lat"))
    lon = _as_float(item.get("lon"))
    if station_id in (None, "") or lat is None or lon is None:
        return None
    capacity = _as_int(item.get("capacity"))
    if capacity is not None and capacity <= 0:
        capacity = None
    return StationInfo(
        station_id=str(station_id),
        name=str(item.get("name") or station_id),
        lat=lat,
        lon=lon,
        capacity=capacity,
    )


def parse_station_status_record(item: Mapping[str, Any]) -> Optional[StationStatus]:
    station_id = item.get("station_id")
    if station_id in (None, ""):
        return None
    return StationStatus(
        station_id=str(station_id),
        num_bikes_available=max(_as_int(item.get("num_bikes_available"), 0) or 0, 0),
        num_docks_available=max(_as_int(item.get("num_docks_available"), 0) or 0, 0),
        is_installed=_as_flag(item.get("is_installed")),
        is_renting=_as_flag(item.get("is_renting")),
        is_returning=_as_flag(item.get("is_returning")),
        last_reported=_as_int(item.get("last_reported"), 0) or 0,
    )


def parse_station_information(payload: Mapping[str, Any]) -> list[StationInfo]:
    records = station_records(payload)
    out = [s for s in (parse_station_info(r) for r in records) if s is not None]
    if len(out) < len(records):
        logger.warning("Skipped %s station_information records without id/lat/lon", len(records) - len(out))
    return out


def parse_station_status(payload: Mapping[str, Any]) -> list[StationStatus]:
    records = station_records(payload)
    out = [s for s in (parse_station_status_record(r) for r in records) if s is not None]
    if len(out) < len(records):
        logger.warning("Skipped %s station_status records without id", len(records) - len(out))
    return out
