from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any, Mapping, Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from dotenv import load_dotenv

from gbfspulse.config.models import (
    DEFAULT_SYSTEM,
    KNOWN_SYSTEMS,
    AppConfig,
    AppSettings,
    CacheSettings,
    GBFSSettings,
    LoggingSettings,
    ScoringSettings,
)


def _as_path(value: str, *, base_dir: Path) -> Path:
    candidate = Path(value)
    return candidate if candidate.is_absolute() else (base_dir / candidate)


def _env_str(name: str) -> Optional[str]:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return None
    return raw.strip()


def _load_gbfs(raw: Mapping[str, Any]) -> GBFSSettings:
    systems = dict(KNOWN_SYSTEMS)
    systems_raw = raw.get("systems") or {}
    if not isinstance(systems_raw, Mapping):
        raise ValueError("Config field gbfs.systems must be an object of system -> root URL")
    for key, root in systems_raw.items():
        systems[str(key).strip().lower()] = str(root).rstrip("/")

    default_root = _env_str("GBFS_ROOT") or raw.get("default_root")
    default_system = (_env_str("GBFSPULSE_DEFAULT_SYSTEM") or str(raw.get("default_system", DEFAULT_SYSTEM))).lower()
    if default_system not in systems and not default_root:
        raise ValueError(f"Unknown gbfs.default_system {default_system!r} and no gbfs.default_root configured")

    settings = GBFSSettings(
        default_system=default_system,
        default_root=None if not default_root else str(default_root).rstrip("/"),
        systems=systems,
        locale=str(raw.get("locale", "en")),
        timeout_s=float(raw.get("timeout_s", 5.0)),
        total_timeout_s=float(raw.get("total_timeout_s", 10.0)),
        max_retries=int(raw.get("max_retries", 0)),
        backoff_factor=float(raw.get("backoff_factor", 0.0)),
        user_agent=str(raw.get("user_agent", "gbfspulse/0.1.0")),
    )
    if settings.timeout_s <= 0 or settings.total_timeout_s <= 0:
        raise ValueError("gbfs.timeout_s and gbfs.total_timeout_s must be > 0")
    if settings.max_retries < 0:
        raise ValueError("gbfs.max_retries must be >= 0")
    return settings


def _load_scoring(raw: Mapping[str, Any]) -> ScoringSettings:
    tz_value = raw.get("timezone")
    scoring = ScoringSettings(
        baseline=float(raw.get("baseline", 0.5)),
        amplitude=float(raw.get("amplitude", 0.15)),
        peak_hour=float(raw.get("peak_hour", 8.5)),
        min_derived_capacity=int(raw.get("min_derived_capacity", 5)),
        timezone=None if not tz_value else str(tz_value),
    )
    if not 0.0 <= scoring.amplitude <= scoring.baseline:
        raise ValueError("scoring.amplitude must be within [0, scoring.baseline]")
    if scoring.baseline + scoring.amplitude > 1.0:
        raise ValueError("scoring.baseline + scoring.amplitude must not exceed 1.0")
    if scoring.timezone is not None:
        try:
            ZoneInfo(scoring.timezone)
        except ZoneInfoNotFoundError as e:
            raise ValueError(f"Unknown scoring.timezone: {scoring.timezone}") from e
    return scoring


def load_config(path: Optional[str | Path] = None, *, base_dir: Optional[Path] = None) -> AppConfig:
    """
    Load typed application config from JSON.

    - Path resolution is relative to `base_dir` (defaults to current working directory).
    - `.env` is loaded first so env overrides (e.g. `GBFS_ROOT`) can live there in dev.
    """

    load_dotenv()

    config_path = Path(
        path
        or os.getenv("GBFSPULSE_CONFIG_PATH", "config/default.json")
    ).resolve()
    base_dir = (base_dir or Path.cwd()).resolve()

    raw = json.loads(config_path.read_text(encoding="utf-8"))

    app_raw: Mapping[str, Any] = raw.get("app", {})
    app = AppSettings(name=str(app_raw.get("name", "GBFS Pulse")))

    gbfs = _load_gbfs(raw.get("gbfs", {}))

    cache_raw: Mapping[str, Any] = raw.get("cache", {})
    cache = CacheSettings(
        dir=_as_path(_env_str("GBFSPULSE_CACHE_DIR") or str(cache_raw.get("dir", "data/cache")), base_dir=base_dir),
        ttl_seconds=int(_env_str("GBFSPULSE_CACHE_TTL_SECONDS") or cache_raw.get("ttl_seconds", 60)),
        enabled=bool(cache_raw.get("enabled", True)),
    )
    if cache.ttl_seconds < 0:
        raise ValueError("cache.ttl_seconds must be >= 0")

    scoring = _load_scoring(raw.get("scoring", {}))

    logging_raw: Mapping[str, Any] = raw.get("logging", {})
    file_value = logging_raw.get("file")
    log_file = None if not file_value else _as_path(str(file_value), base_dir=base_dir)
    logging_settings = LoggingSettings(
        level=_env_str("GBFSPULSE_LOG_LEVEL") or str(logging_raw.get("level", "INFO")),
        format=str(logging_raw.get("format", "%(asctime)s %(levelname)s %(name)s - %(message)s")),
        file=log_file,
    )

    return AppConfig(
        app=app,
        gbfs=gbfs,
        cache=cache,
        scoring=scoring,
        logging=logging_settings,
    )
