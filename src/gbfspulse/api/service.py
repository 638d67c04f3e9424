from __future__ import annotations

# `ThreadPoolExecutor` runs the two sub-feed GETs side by side; `wait` joins them under one deadline.
from concurrent.futures import FIRST_EXCEPTION, Future, ThreadPoolExecutor, wait
from dataclasses import dataclass
from datetime import datetime, timezone
import logging
from typing import Any, Callable, Literal, Optional

from gbfspulse.config.models import AppConfig
from gbfspulse.ingestion.discovery import SystemRegistry, discovery_url, locate_station_feeds, parse_discovery
from gbfspulse.ingestion.errors import (
    EmptyResultError,
    FeedNotFoundError,
    MalformedFeedError,
    UpstreamUnavailableError,
)
from gbfspulse.ingestion.gbfs_client import GBFSClient
from gbfspulse.ingestion.parser import feed_timestamp, parse_station_information, parse_station_status
from gbfspulse.preprocessing.merge import merge_stations, rank_by_pain
from gbfspulse.schemas.core import GeoPoint, StationSnapshot
from gbfspulse.scoring.pain import PainModel
from gbfspulse.utils.cache import JsonFileCache
from gbfspulse.utils.geo import bounding_box_of


logger = logging.getLogger(__name__)

FETCH_FAILED = "Failed to fetch GBFS data"
NO_STATION_DATA = "No station data available"
NO_MERGED_STATIONS = "No valid stations found after merging"

OutcomeKind = Literal["ok", "empty", "feed_not_found", "upstream_unavailable", "malformed_feed", "internal"]


def local_now() -> datetime:
    # Aware local time: the pain curve follows the operator's wall clock, `fetchedAt` is reported in UTC.
    return datetime.now().astimezone()


@dataclass(frozen=True)
class SnapshotOutcome:
    """Result of one snapshot request: either a snapshot or a classified failure."""

    kind: OutcomeKind
    status_code: int
    snapshot: Optional[StationSnapshot] = None
    error: Optional[str] = None
    details: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.kind == "ok"


# `SnapshotService` is the request orchestrator between HTTP routes and the GBFS pipeline.
# Dataflow: route -> SnapshotService -> discovery -> GBFSClient (x3) -> parser -> merge/pain -> bounds.
class SnapshotService:
    def __init__(
        self,
        config: AppConfig,
        *,
        registry: Optional[SystemRegistry] = None,
        client: Optional[GBFSClient] = None,
        now_fn: Callable[[], datetime] = local_now,
    ) -> None:
        self._config = config
        # Built once per process and only read afterwards.
        self._registry = registry or SystemRegistry.from_settings(config.gbfs)
        self._client = client or GBFSClient(settings=config.gbfs, cache=JsonFileCache(config.cache))
        self._now = now_fn
        self._pain = PainModel(config.scoring, now_fn=now_fn)

    @property
    def config(self) -> AppConfig:
        return self._config

    @property
    def registry(self) -> SystemRegistry:
        return self._registry

    def close(self) -> None:
        self._client.close()

    def _fetch_pair(self, info_url: str, status_url: str) -> tuple[dict[str, Any], dict[str, Any]]:
        timeout_s = self._config.gbfs.total_timeout_s
        pool = ThreadPoolExecutor(max_workers=2, thread_name_prefix="gbfs-fetch")
        try:
            info_future: Future = pool.submit(self._client.get_json, info_url)
            status_future: Future = pool.submit(self._client.get_json, status_url)
            done, pending = wait([info_future, status_future], timeout=timeout_s, return_when=FIRST_EXCEPTION)

            # Both results are required: the first failure wins, the sibling request is left to finish on its own.
            for future in (info_future, status_future):
                if future in done and future.exception() is not None:
                    raise future.exception()  # type: ignore[misc]
            if pending:
                raise UpstreamUnavailableError(
                    f"Station feeds did not respond within {timeout_s}s", reason="timeout"
                )
            return info_future.result(), status_future.result()
        finally:
            pool.shutdown(wait=False, cancel_futures=True)

    def build_snapshot(self, system: Optional[str] = None) -> StationSnapshot:
        resolved = self._registry.resolve(system)
        logger.debug("Resolved system=%s root=%s", resolved.system, resolved.root)

        discovery = parse_discovery(
            self._client.get_json(discovery_url(resolved.root)),
            locale=self._config.gbfs.locale,
        )
        logger.debug(
            "Discovery for %s: %s feeds, last_updated=%s ttl=%s",
            resolved.system,
            len(discovery.feeds),
            discovery.last_updated,
            discovery.ttl,
        )
        info_url, status_url = locate_station_feeds(discovery)

        info_payload, status_payload = self._fetch_pair(info_url, status_url)
        info = parse_station_information(info_payload)
        status = parse_station_status(status_payload)
        if not info or not status:
            raise EmptyResultError(NO_STATION_DATA)

        now = self._now()
        stations = merge_stations(info, status, self._pain.scorer(now))
        logger.info(
            "Merged %s stations for %s (info=%s status=%s, status as of %s)",
            len(stations),
            resolved.system,
            len(info),
            len(status),
            feed_timestamp(status_payload),
        )
        if not stations:
            raise EmptyResultError(NO_MERGED_STATIONS)

        bounds = bounding_box_of(GeoPoint(lat=s.lat, lon=s.lon) for s in stations)
        return StationSnapshot(
            stations=stations,
            fetched_at=now.astimezone(timezone.utc),
            bounds=bounds,
            system=resolved.system,
            gbfs_root=resolved.root,
        )

    def fetch_snapshot(self, system: Optional[str] = None, *, top: Optional[int] = None) -> SnapshotOutcome:
        """
        Build a snapshot and classify any failure into an outcome.

        `top` ranks stations by descending pain and keeps the first `top` of them.
        """

        try:
            snapshot = self.build_snapshot(system)
        except EmptyResultError as e:
            logger.warning("No stations for system=%s: %s", system, e)
            return SnapshotOutcome(kind="empty", status_code=404, error=str(e))
        except FeedNotFoundError as e:
            logger.warning("GBFS discovery incomplete for system=%s: %s", system, e)
            return SnapshotOutcome(kind="feed_not_found", status_code=500, error=FETCH_FAILED, details=str(e))
        except UpstreamUnavailableError as e:
            logger.warning("GBFS upstream unavailable (status=%s url=%s): %s", e.status_code, e.url, e)
            return SnapshotOutcome(kind="upstream_unavailable", status_code=500, error=FETCH_FAILED, details=str(e))
        except MalformedFeedError as e:
            logger.warning("Malformed GBFS payload for system=%s: %s", system, e)
            return SnapshotOutcome(kind="malformed_feed", status_code=500, error=FETCH_FAILED, details=str(e))
        except Exception as e:
            logger.exception("Unexpected failure building GBFS snapshot for system=%s", system)
            return SnapshotOutcome(
                kind="internal", status_code=500, error=FETCH_FAILED, details=str(e) or type(e).__name__
            )

        if top is not None:
            snapshot = StationSnapshot(
                stations=rank_by_pain(snapshot.stations, limit=top),
                fetched_at=snapshot.fetched_at,
                bounds=snapshot.bounds,
                system=snapshot.system,
                gbfs_root=snapshot.gbfs_root,
            )
        return SnapshotOutcome(kind="ok", status_code=200, snapshot=snapshot)
