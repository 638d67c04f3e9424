from __future__ import annotations

from datetime import datetime, timezone

from gbfspulse.ingestion.parser import (
    feed_timestamp,
    parse_station_information,
    parse_station_status,
    station_records,
)

from conftest import stations_payload


def test_station_records_tolerates_missing_list() -> None:
    assert station_records({}) == []
    assert station_records({"data": {"stations": "nope"}}) == []


def test_parse_station_information_skips_records_without_coordinates() -> None:
    payload = stations_payload(
        [
            {"station_id": "1", "name": "Wells & Huron", "lat": 41.89, "lon": -87.63, "capacity": 19},
            {"station_id": "2", "name": "No coords"},
            {"name": "No id", "lat": 1, "lon": 2},
            {"station_id": 3, "lat": "41.9", "lon": "-87.6"},
        ]
    )
    stations = parse_station_information(payload)
    assert [s.station_id for s in stations] == ["1", "3"]
    assert stations[0].capacity == 19
    assert stations[1].capacity is None
    assert stations[1].name == "3"
    assert stations[1].lat == 41.9


def test_parse_station_status_accepts_v1_and_v2_flags() -> None:
    payload = stations_payload(
        [
            {
                "station_id": "1",
                "num_bikes_available": 4,
                "num_docks_available": 11,
                "is_installed": 1,
                "is_renting": 0,
                "is_returning": True,
                "last_reported": 1700000100,
            },
            {"station_id": "2", "num_bikes_available": None, "num_docks_available": 3},
        ]
    )
    first, second = parse_station_status(payload)
    assert first.is_installed is True
    assert first.is_renting is False
    assert first.is_returning is True
    assert first.last_reported == 1700000100
    assert second.num_bikes_available == 0
    assert second.num_docks_available == 3


def test_feed_timestamp() -> None:
    assert feed_timestamp({"last_updated": 1700000000}) == datetime(2023, 11, 14, 22, 13, 20, tzinfo=timezone.utc)
    assert feed_timestamp({}) is None


def test_non_positive_capacity_is_treated_as_unknown() -> None:
    payload = stations_payload(
        [
            {"station_id": "1", "lat": 41.89, "lon": -87.63, "capacity": -10},
            {"station_id": "2", "lat": 41.90, "lon": -87.64, "capacity": 0},
            {"station_id": "3", "lat": 41.91, "lon": -87.65, "capacity": "12"},
        ]
    )
    assert [s.capacity for s in parse_station_information(payload)] == [None, None, 12]


def test_non_finite_coordinates_are_skipped() -> None:
    payload = stations_payload(
        [
            {"station_id": "nan", "lat": float("nan"), "lon": -87.63},
            {"station_id": "inf", "lat": 41.89, "lon": "inf"},
            {"station_id": "ok", "lat": 41.89, "lon": -87.63},
        ]
    )
    assert [s.station_id for s in parse_station_information(payload)] == ["ok"]
