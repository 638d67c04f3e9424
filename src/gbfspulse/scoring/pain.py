from __future__ import annotations

from datetime import datetime
import math
from typing import Callable, Optional
from zoneinfo import ZoneInfo

from gbfspulse.config.models import ScoringSettings
from gbfspulse.schemas.core import StationInfo, StationStatus


ScoreFn = Callable[[StationInfo, StationStatus], tuple[float, float]]


def target_fill(
    hour_of_day: float,
    *,
    baseline: float = 0.5,
    amplitude: float = 0.15,
    peak_hour: float = 8.5,
) -> float:
    """
    Desired bikes/capacity ratio at a fractional hour of the day.

    A 24h cosine: maximum `baseline + amplitude` at `peak_hour`, minimum twelve hours later.
    """

    return baseline + amplitude * math.cos(2 * math.pi * (hour_of_day - peak_hour) / 24)


def hour_of_day(now: datetime) -> float:
    return now.hour + now.minute / 60


def has_published_capacity(capacity: Optional[int]) -> bool:
    return capacity is not None and capacity > 0


def effective_capacity(capacity: Optional[int], bikes: int, docks: int) -> int:
    if has_published_capacity(capacity):
        return capacity  # type: ignore[return-value]
    return bikes + docks


class PainModel:
    """
    Time-of-day imbalance score.

    pain = |bikes / capacity - target_fill(hour)| * capacity, in bikes. The clock is injected
    so a snapshot can be scored at one fixed instant.
    """

    def __init__(self, settings: ScoringSettings, *, now_fn: Callable[[], datetime] = datetime.now) -> None:
        self._settings = settings
        self._now = now_fn
        self._tz = ZoneInfo(settings.timezone) if settings.timezone else None

    @property
    def settings(self) -> ScoringSettings:
        return self._settings

    def local_hour(self, now: datetime) -> float:
        if self._tz is not None and now.tzinfo is not None:
            now = now.astimezone(self._tz)
        return hour_of_day(now)

    def target_fill_at(self, now: datetime) -> float:
        s = self._settings
        return target_fill(self.local_hour(now), baseline=s.baseline, amplitude=s.amplitude, peak_hour=s.peak_hour)

    def pain(self, info: StationInfo, status: StationStatus, now: Optional[datetime] = None) -> float:
        fill = self.target_fill_at(now if now is not None else self._now())
        return self._pain_for_target(info, status, fill)

    def _pain_for_target(self, info: StationInfo, status: StationStatus, fill: float) -> float:
        bikes = status.num_bikes_available
        docks = status.num_docks_available
        total = bikes + docks
        if total <= 0:
            return 0.0
        if not has_published_capacity(info.capacity) and total < self._settings.min_derived_capacity:
            return 0.0

        capacity = effective_capacity(info.capacity, bikes, docks)
        current_fill = bikes / capacity
        return abs(current_fill - fill) * capacity

    def scorer(self, now: Optional[datetime] = None) -> ScoreFn:
        """Bind one instant and return a `(target_fill, pain)` function for a whole merge."""

        fill = self.target_fill_at(now if now is not None else self._now())

        def score(info: StationInfo, status: StationStatus) -> tuple[float, float]:
            return fill, self._pain_for_target(info, status, fill)

        return score
