from __future__ import annotations

import sys
from datetime import datetime
from pathlib import Path
from typing import Any

import pytest


PROJECT_ROOT = Path(__file__).resolve().parents[1]
DEFAULT_CONFIG = PROJECT_ROOT / "config" / "default.json"


def pytest_configure() -> None:
    """
    Keep a `src/` layout while allowing `pytest` to run without requiring an editable install.
    """

    src_path = PROJECT_ROOT / "src"
    sys.path.insert(0, str(src_path))


ROOT = "https://gbfs.example.test/gbfs"
INFO_URL = f"{ROOT}/en/station_information.json"
STATUS_URL = f"{ROOT}/en/station_status.json"


def discovery_payload(*names: str) -> dict[str, Any]:
    urls = {"station_information": INFO_URL, "station_status": STATUS_URL}
    return {
        "last_updated": 1700000000,
        "ttl": 60,
        "data": {"en": {"feeds": [{"name": n, "url": urls.get(n, f"{ROOT}/en/{n}.json")} for n in names]}},
    }


def stations_payload(stations: list[dict[str, Any]]) -> dict[str, Any]:
    return {"last_updated": 1700000000, "ttl": 60, "data": {"stations": stations}}


class FakeGBFSClient:
    """Serves canned payloads by URL; raises the mapped exception when the value is one."""

    def __init__(self, responses: dict[str, Any]) -> None:
        self.responses = responses
        self.calls: list[str] = []
        self.closed = False

    def get_json(self, url: str, *, use_cache: bool = True) -> dict[str, Any]:
        self.calls.append(url)
        value = self.responses[url]
        if isinstance(value, Exception):
            raise value
        return value

    def close(self) -> None:
        self.closed = True


@pytest.fixture
def config(monkeypatch, tmp_path):
    for name in (
        "GBFS_ROOT",
        "GBFSPULSE_DEFAULT_SYSTEM",
        "GBFSPULSE_CACHE_DIR",
        "GBFSPULSE_CACHE_TTL_SECONDS",
        "GBFSPULSE_LOG_LEVEL",
        "GBFSPULSE_CONFIG_PATH",
    ):
        monkeypatch.delenv(name, raising=False)

    from gbfspulse.config.loader import load_config

    return load_config(DEFAULT_CONFIG, base_dir=tmp_path)


@pytest.fixture
def morning_clock():
    return lambda: datetime(2024, 6, 3, 8, 30)
