from __future__ import annotations

import json

import pytest

from gbfspulse.config.loader import load_config


def _write_config(tmp_path, **overrides) -> str:
    cfg = {
        "app": {"name": "Test"},
        "gbfs": {"default_system": "divvy", "systems": {"metro": "https://gbfs.metro.test/gbfs/"}, "timeout_s": 3},
        "cache": {"dir": "cache", "ttl_seconds": 60},
        "scoring": {"baseline": 0.5, "amplitude": 0.15, "peak_hour": 8.5, "min_derived_capacity": 5},
        "logging": {"level": "INFO", "format": "%(message)s"},
    }
    for section, values in overrides.items():
        cfg[section] = {**cfg.get(section, {}), **values}
    path = tmp_path / "config.json"
    path.write_text(json.dumps(cfg), encoding="utf-8")
    return str(path)


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch) -> None:
    for name in ("GBFS_ROOT", "GBFSPULSE_DEFAULT_SYSTEM", "GBFSPULSE_CACHE_DIR", "GBFSPULSE_CACHE_TTL_SECONDS", "GBFSPULSE_LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)


def test_defaults_include_known_systems(tmp_path) -> None:
    cfg = load_config(_write_config(tmp_path), base_dir=tmp_path)
    assert cfg.gbfs.systems["divvy"] == "https://gbfs.divvybikes.com/gbfs"
    assert cfg.gbfs.systems["metro"] == "https://gbfs.metro.test/gbfs"
    assert cfg.gbfs.default_root is None
    assert cfg.gbfs.timeout_s == 3.0
    assert cfg.cache.dir == tmp_path / "cache"


def test_env_overrides_default_root_and_cache(monkeypatch, tmp_path) -> None:
    monkeypatch.setenv("GBFS_ROOT", "https://env.example.test/gbfs/")
    monkeypatch.setenv("GBFSPULSE_CACHE_TTL_SECONDS", "0")
    monkeypatch.setenv("GBFSPULSE_LOG_LEVEL", "DEBUG")

    cfg = load_config(_write_config(tmp_path), base_dir=tmp_path)
    assert cfg.gbfs.default_root == "https://env.example.test/gbfs"
    assert cfg.cache.ttl_seconds == 0
    assert cfg.logging.level == "DEBUG"


def test_unknown_default_system_requires_root(monkeypatch, tmp_path) -> None:
    path = _write_config(tmp_path, gbfs={"default_system": "nowhere"})
    with pytest.raises(ValueError):
        load_config(path, base_dir=tmp_path)

    monkeypatch.setenv("GBFS_ROOT", "https://env.example.test/gbfs")
    assert load_config(path, base_dir=tmp_path).gbfs.default_system == "nowhere"


def test_rejects_amplitude_beyond_baseline(tmp_path) -> None:
    with pytest.raises(ValueError):
        load_config(_write_config(tmp_path, scoring={"amplitude": 0.7}), base_dir=tmp_path)


def test_rejects_unknown_timezone(tmp_path) -> None:
    with pytest.raises(ValueError):
        load_config(_write_config(tmp_path, scoring={"timezone": "Mars/Olympus"}), base_dir=tmp_path)
