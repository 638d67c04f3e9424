from __future__ import annotations

from dataclasses import dataclass
import logging
from types import MappingProxyType
from typing import Any, Mapping, Optional

from gbfspulse.config.models import GBFSSettings
from gbfspulse.ingestion.errors import FeedNotFoundError, MalformedFeedError
from gbfspulse.schemas.core import DiscoveryDocument, FeedRef


logger = logging.getLogger(__name__)

STATION_INFORMATION = "station_information"
STATION_STATUS = "station_status"


@dataclass(frozen=True)
class ResolvedSystem:
    system: str
    root: str


class SystemRegistry:
    """
    Read-only system key -> GBFS root lookup, built once when the app starts.

    Resolution order for a request: known key, then the configured default root,
    then the default system's own root.
    """

    def __init__(
        self,
        systems: Mapping[str, str],
        *,
        default_system: str,
        default_root: Optional[str] = None,
    ) -> None:
        self._systems = MappingProxyType({str(k).lower(): str(v).rstrip("/") for k, v in systems.items()})
        self._default_system = default_system
        self._default_root = None if not default_root else default_root.rstrip("/")
        if self._default_root is None and default_system not in self._systems:
            raise ValueError(f"Default system {default_system!r} has no root URL")

    @classmethod
    def from_settings(cls, settings: GBFSSettings) -> "SystemRegistry":
        return cls(settings.systems, default_system=settings.default_system, default_root=settings.default_root)

    @property
    def systems(self) -> Mapping[str, str]:
        return self._systems

    @property
    def default_system(self) -> str:
        return self._default_system

    @property
    def fallback_root(self) -> str:
        return self._default_root or self._systems[self._default_system]

    def resolve(self, system: Optional[str]) -> ResolvedSystem:
        key = (system or "").strip().lower()
        if key and key in self._systems:
            return ResolvedSystem(system=key, root=self._systems[key])
        if key:
            logger.debug("Unknown system %r; using fallback root %s", key, self.fallback_root)
        return ResolvedSystem(system=key or self._default_system, root=self.fallback_root)


def discovery_url(root: str) -> str:
    return f"{root.rstrip('/')}/gbfs.json"


def parse_discovery(payload: Mapping[str, Any], *, locale: str = "en") -> DiscoveryDocument:
    data = payload.get("data")
    if not isinstance(data, Mapping):
        raise MalformedFeedError("Discovery document is missing the `data` object")

    locale_block = data.get(locale)
    feeds_raw = locale_block.get("feeds") if isinstance(locale_block, Mapping) else None
    if not isinstance(feeds_raw, list) or not feeds_raw:
        raise FeedNotFoundError(f"No {locale!r} feeds found in GBFS discovery document")

    feeds = tuple(
        FeedRef(name=str(item["name"]), url=str(item["url"]))
        for item in feeds_raw
        if isinstance(item, Mapping) and item.get("name") and item.get("url")
    )
    last_updated = payload.get("last_updated")
    ttl = payload.get("ttl")
    return DiscoveryDocument(
        feeds=feeds,
        last_updated=int(last_updated) if isinstance(last_updated, (int, float)) else None,
        ttl=int(ttl) if isinstance(ttl, (int, float)) else None,
    )


def locate_station_feeds(doc: DiscoveryDocument) -> tuple[str, str]:
    info_url = doc.feed_url(STATION_INFORMATION)
    status_url = doc.feed_url(STATION_STATUS)
    missing = [
        name for name, url in ((STATION_INFORMATION, info_url), (STATION_STATUS, status_url)) if url is None
    ]
    if missing:
        raise FeedNotFoundError(f"Required feeds not found: {', '.join(missing)}")
    return info_url, status_url  # type: ignore[return-value]
