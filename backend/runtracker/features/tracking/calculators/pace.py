"""
Pace Estimator

Smoothed instantaneous pace from a recency-weighted sliding window.

Two separate paths move the displayed pace:
- update(): weighted window speed, blended into the previous value
  (smooth tracking while moving)
- decay(): multiplies the pace on near-stationary rejections
  (fast visual feedback that the runner stopped)

Pace is in seconds per km. 0 means "stopped / no value".
"""

from collections import deque
from typing import Deque, Optional

from runtracker.shared.geo import haversine_m

from ..config import PACE_CAP_SEC_KM, TrackingConfig
from ..models import GeoSample


class PaceEstimator:
    """
    Current pace from the last 30 s of accepted fixes.

    Segment weights grow linearly from 1.0 at the old edge of the window
    to 2.0 at its newest edge, so the display follows current effort
    rather than the whole window average.
    """

    def __init__(self, config: Optional[TrackingConfig] = None):
        self.config = config or TrackingConfig()
        self._window: Deque[GeoSample] = deque()
        self._pace: float = 0.0

    @property
    def current_pace(self) -> float:
        return self._pace

    @property
    def window_size(self) -> int:
        return len(self._window)

    def reset(self) -> None:
        """Drop the window and the displayed pace."""
        self._window.clear()
        self._pace = 0.0

    def clear_window(self) -> None:
        """Drop buffered fixes but keep the displayed pace."""
        self._window.clear()

    def update(self, accepted: GeoSample) -> float:
        """
        Feed an accepted fix and return the displayed pace.

        "Now" is the fix's own timestamp.
        """
        cfg = self.config
        now = accepted.timestamp_ms
        cutoff = now - cfg.pace_window_ms

        self._window.append(accepted)
        while self._window and self._window[0].timestamp_ms <= cutoff:
            self._window.popleft()

        if len(self._window) < cfg.pace_min_samples:
            return self._pace

        speed = self._weighted_speed(cutoff)
        if speed is None:
            return self._pace

        if cfg.pace_min_speed_mps < speed < cfg.pace_max_speed_mps:
            computed = 1000 / speed
            if self._pace == 0:
                self._pace = computed
            else:
                self._pace = (
                    self._pace * cfg.pace_smoothing_keep
                    + computed * cfg.pace_smoothing_blend
                )
        elif speed <= cfg.pace_min_speed_mps:
            self._pace = 0.0

        return self._pace

    def decay(self) -> float:
        """Push the pace toward "slow" after a near-stationary rejection."""
        if self._pace > 0:
            self._pace = min(
                self._pace * self.config.pace_decay_factor,
                self.config.pace_cap_sec_km
            )
        return self._pace

    def _weighted_speed(self, cutoff: int) -> Optional[float]:
        """Time-weighted mean speed over window pairs, None if no valid pair."""
        cfg = self.config
        total_weighted = 0.0
        total_weight = 0.0

        points = list(self._window)
        for older, newer in zip(points, points[1:]):
            seconds = (newer.timestamp_ms - older.timestamp_ms) / 1000
            if seconds <= 0:
                continue

            meters = haversine_m(
                older.latitude, older.longitude,
                newer.latitude, newer.longitude
            )
            speed = meters / seconds
            if speed >= cfg.pace_segment_max_speed_mps:
                continue

            weight = 1 + (newer.timestamp_ms - cutoff) / cfg.pace_window_ms
            total_weighted += speed * weight
            total_weight += weight

        if total_weight == 0:
            return None
        return total_weighted / total_weight


def average_pace(
    elapsed_seconds: float,
    distance_m: float,
    cap_sec_km: float = PACE_CAP_SEC_KM
) -> float:
    """
    Whole-session pace.

    Formula: elapsed / (distance / 1000), capped

    Returns:
        Seconds per km, 0 when no distance has been covered
    """
    if distance_m <= 0:
        return 0.0
    return min(elapsed_seconds / (distance_m / 1000), cap_sec_km)
