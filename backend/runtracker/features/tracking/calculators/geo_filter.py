"""
GeoSample Filter

Decides whether a raw location fix is part of the recorded effort.

Rules, in order:
1. Poor fix (accuracy radius above the limit) -> noisy
2. No previous accepted fix -> accepted (path origin)
3. Moved far enough OR fast enough, and below the teleport cap -> accepted
4. Anything else is rejected; a tiny, slow rejection is flagged as
   near-stationary so the pace display can decay toward "stopped"
"""

from dataclasses import dataclass
from typing import Optional

from runtracker.shared.geo import haversine_m

from ..config import TrackingConfig
from ..models import FilterVerdict, GeoSample


@dataclass(frozen=True)
class FilterResult:
    """Verdict plus the measurements it was based on."""
    verdict: FilterVerdict
    distance_m: float = 0.0
    elapsed_s: float = 0.0
    speed_mps: float = 0.0
    near_stationary: bool = False

    @property
    def accepted(self) -> bool:
        return self.verdict is FilterVerdict.ACCEPTED


class GeoSampleFilter:
    """Stateless noise and plausibility filter for location fixes."""

    def __init__(self, config: Optional[TrackingConfig] = None):
        self.config = config or TrackingConfig()

    def accept(
        self,
        candidate: GeoSample,
        previous: Optional[GeoSample]
    ) -> FilterResult:
        """
        Classify a candidate fix against the last accepted one.

        Args:
            candidate: Incoming fix
            previous: Last accepted fix of the session, if any

        Returns:
            FilterResult; deterministic for the same two samples
        """
        cfg = self.config

        if candidate.accuracy_m is not None and candidate.accuracy_m > cfg.max_accuracy_m:
            return FilterResult(verdict=FilterVerdict.REJECTED_NOISY)

        if previous is None:
            return FilterResult(verdict=FilterVerdict.ACCEPTED)

        distance = haversine_m(
            previous.latitude, previous.longitude,
            candidate.latitude, candidate.longitude
        )
        elapsed = (candidate.timestamp_ms - previous.timestamp_ms) / 1000
        speed = distance / elapsed if elapsed > 0 else 0.0

        moved = distance > cfg.min_move_distance_m or speed > cfg.min_move_speed_mps
        if moved and speed < cfg.max_speed_mps:
            return FilterResult(
                verdict=FilterVerdict.ACCEPTED,
                distance_m=distance,
                elapsed_s=elapsed,
                speed_mps=speed,
            )

        if speed >= cfg.max_speed_mps:
            verdict = FilterVerdict.REJECTED_IMPLAUSIBLE
        else:
            verdict = FilterVerdict.REJECTED_NOISY

        near_stationary = (
            distance < cfg.near_stationary_distance_m
            and speed < cfg.near_stationary_speed_mps
        )

        return FilterResult(
            verdict=verdict,
            distance_m=distance,
            elapsed_s=elapsed,
            speed_mps=speed,
            near_stationary=near_stationary,
        )
