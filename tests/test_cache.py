from __future__ import annotations

from gbfspulse.config.models import CacheSettings
from gbfspulse.utils.cache import JsonFileCache


def test_cache_serves_within_ttl_and_expires_after(tmp_path) -> None:
    now = 1000.0

    def now_fn() -> float:
        return now

    cache = JsonFileCache(CacheSettings(dir=tmp_path, ttl_seconds=60), now_fn=now_fn)
    key = cache.make_key("gbfs:feed", {"url": "https://x/gbfs.json"})
    cache.set(key, {"data": {"stations": []}})

    now = 1059.0
    assert cache.get(key) == {"data": {"stations": []}}

    now = 1061.0
    assert cache.get(key) is None


def test_cache_keys_differ_by_payload(tmp_path) -> None:
    cache = JsonFileCache(CacheSettings(dir=tmp_path, ttl_seconds=60))
    assert cache.make_key("gbfs:feed", {"url": "a"}) != cache.make_key("gbfs:feed", {"url": "b"})


def test_disabled_cache_is_pass_through(tmp_path) -> None:
    cache = JsonFileCache(CacheSettings(dir=tmp_path / "off", ttl_seconds=0))
    assert not cache.enabled
    cache.set("k", {"v": 1})
    assert cache.get("k") is None
    assert not (tmp_path / "off").exists()

