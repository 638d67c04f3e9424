from __future__ import annotations

# `logging` reports cache hits and upstream failures without leaking response bodies.
import logging
# Typing helpers keep the interface explicit while we still hand back raw JSON dicts.
from typing import Any, Optional

# `requests` performs HTTP calls; we wrap it to centralize timeouts, caching and error mapping.
import requests
# `HTTPAdapter` lets us mount a retry policy onto a `requests.Session`.
from requests.adapters import HTTPAdapter
# `Retry` is configured from settings; the default of 0 retries keeps failures visible to the caller.
from urllib3.util.retry import Retry

from gbfspulse.config.models import GBFSSettings
from gbfspulse.ingestion.errors import MalformedFeedError, UpstreamUnavailableError
# `JsonFileCache` provides the freshness window: repeated fetches inside the TTL reuse the stored copy.
from gbfspulse.utils.cache import JsonFileCache


logger = logging.getLogger(__name__)


class GBFSClient:
    """
    Minimal GBFS HTTP client.

    - One `requests.Session` per client (connection reuse across discovery + sub-feeds).
    - Every GET carries a timeout; non-2xx and transport errors become `UpstreamUnavailableError`.
    - Successful bodies are cached for the configured freshness window.
    """

    def __init__(
        self,
        *,
        settings: GBFSSettings,
        cache: Optional[JsonFileCache] = None,
        session: Optional[requests.Session] = None,
    ) -> None:
        self._timeout_s = settings.timeout_s
        self._cache = cache
        # A session can be injected so tests never touch the network.
        self._session = session or requests.Session()
        # A stable User-Agent helps feed operators identify our traffic.
        self._session.headers.update({"User-Agent": settings.user_agent, "Accept": "application/json"})

        if session is None:
            retry = Retry(
                total=settings.max_retries,
                connect=settings.max_retries,
                read=settings.max_retries,
                status=settings.max_retries,
                backoff_factor=settings.backoff_factor,
                status_forcelist=(429, 500, 502, 503, 504),
                allowed_methods=("GET",),
                # Surface the final status ourselves so callers see one error type with context.
                raise_on_status=False,
            )
            self._session.mount("https://", HTTPAdapter(max_retries=retry))
            self._session.mount("http://", HTTPAdapter(max_retries=retry))

    def get_json(self, url: str, *, use_cache: bool = True) -> dict[str, Any]:
        # Cache key is the URL alone; GBFS feeds carry no query parameters.
        cache_key = None
        if self._cache is not None and use_cache:
            cache_key = self._cache.make_key("gbfs:feed", {"url": url})
            cached = self._cache.get(cache_key)
            if cached is not None:
                logger.debug("Cache hit for %s", url)
                return cached

        try:
            resp = self._session.get(url, timeout=self._timeout_s)
        except requests.Timeout as e:
            raise UpstreamUnavailableError(
                f"Timed out after {self._timeout_s}s fetching {url}", reason="timeout", url=url
            ) from e
        except requests.RequestException as e:
            raise UpstreamUnavailableError(f"Request to {url} failed: {e}", reason=type(e).__name__, url=url) from e

        if not resp.ok:
            reason = resp.reason or ""
            raise UpstreamUnavailableError(
                f"Failed to fetch GBFS data: {resp.status_code} {reason}".rstrip(),
                status_code=resp.status_code,
                reason=reason,
                url=url,
            )

        try:
            data = resp.json()
        except ValueError as e:
            raise MalformedFeedError(f"Response from {url} is not valid JSON") from e
        if not isinstance(data, dict):
            raise MalformedFeedError(f"Response from {url} is not a JSON object (got {type(data).__name__})")

        # Only successful, well-formed bodies enter the cache so an outage is never replayed.
        if cache_key is not None and self._cache is not None:
            self._cache.set(cache_key, data)
        return data

    def close(self) -> None:
        self._session.close()

    def __enter__(self) -> "GBFSClient":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
