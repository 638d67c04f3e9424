from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping, Optional


DEFAULT_SYSTEM = "divvy"

KNOWN_SYSTEMS: dict[str, str] = {
    "divvy": "https://gbfs.divvybikes.com/gbfs",
    "citibike": "https://gbfs.citibikenyc.com/gbfs",
    "bluebikes": "https://gbfs.bluebikes.com/gbfs",
}


@dataclass(frozen=True)
class AppSettings:
    name: str = "GBFS Pulse"


@dataclass(frozen=True)
class GBFSSettings:
    default_system: str = DEFAULT_SYSTEM
    default_root: Optional[str] = None
    systems: Mapping[str, str] = field(default_factory=lambda: dict(KNOWN_SYSTEMS))
    locale: str = "en"
    timeout_s: float = 5.0
    total_timeout_s: float = 10.0
    max_retries: int = 0
    backoff_factor: float = 0.0
    user_agent: str = "gbfspulse/0.1.0"


@dataclass(frozen=True)
class CacheSettings:
    dir: Path
    ttl_seconds: int = 60
    enabled: bool = True


@dataclass(frozen=True)
class ScoringSettings:
    baseline: float = 0.5
    amplitude: float = 0.15
    peak_hour: float = 8.5
    # Stations without a published capacity need at least this many bikes+docks to be scored.
    min_derived_capacity: int = 5
    timezone: Optional[str] = None


@dataclass(frozen=True)
class LoggingSettings:
    level: str
    format: str
    file: Optional[Path] = None


@dataclass(frozen=True)
class AppConfig:
    app: AppSettings
    gbfs: GBFSSettings
    cache: CacheSettings
    scoring: ScoringSettings
    logging: LoggingSettings
