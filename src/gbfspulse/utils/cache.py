from __future__ import annotations

import hashlib
import json
from pathlib import Path
import tempfile
import time
from typing import Any, Callable, Optional


from gbfspulse.config.models import CacheSettings


class JsonFileCache:
    """
    File-backed freshness window for GBFS responses.

    Entries older than `ttl_seconds` are treated as missing, so a feed is re-fetched at most
    once per window. A TTL of 0 (or `enabled=False`) turns the cache into a pass-through.
    """

    def __init__(self, settings: CacheSettings, *, now_fn: Callable[[], float] = time.time) -> None:
        self._dir = settings.dir
        self._ttl = settings.ttl_seconds
        self._enabled = settings.enabled and settings.ttl_seconds > 0
        self._now = now_fn
        if self._enabled:
            self._dir.mkdir(parents=True, exist_ok=True)

    @property
    def enabled(self) -> bool:
        return self._enabled

    def make_key(self, namespace: str, payload: Any) -> str:
        raw = json.dumps({"ns": namespace, "payload": payload}, sort_keys=True, ensure_ascii=False)
        return hashlib.sha256(raw.encode("utf-8")).hexdigest()

    def _path(self, key: str) -> Path:
        return self._dir / f"{key}.json"

    def get(self, key: str) -> Optional[Any]:
        if not self._enabled:
            return None
        path = self._path(key)
        if not path.exists():
            return None
        try:
            wrapper = json.loads(path.read_text(encoding="utf-8"))
        except json.JSONDecodeError:
            return None

        created_at = wrapper.get("_created_at")
        if not isinstance(created_at, (int, float)):
            return None
        if (float(self._now()) - float(created_at)) > self._ttl:
            return None
        return wrapper.get("payload")

    def set(self, key: str, payload: Any) -> None:
        if not self._enabled:
            return
        path = self._path(key)
        wrapper = {"_created_at": float(self._now()), "payload": payload}
        serialized = json.dumps(wrapper, ensure_ascii=False)

        # Concurrent writers each replace the file atomically; readers never see a partial write.
        path.parent.mkdir(parents=True, exist_ok=True)
        with tempfile.NamedTemporaryFile("w", delete=False, encoding="utf-8", dir=path.parent) as tmp:
            tmp.write(serialized)
            tmp_path = Path(tmp.name)
        tmp_path.replace(path)
