"""
Tracking schemas.

Pydantic models for the HTTP boundary and the saved activity record.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from runtracker.shared.formatters import (
    format_distance_km,
    format_elapsed,
    format_pace,
)

from .models import (
    GeoSample,
    MotionSample,
    RejectedFix,
    RunSummary,
    SessionSnapshot,
)


# =============================================================================
# Inbound sensor payloads
# =============================================================================

class GeoSampleIn(BaseModel):
    """Location fix pushed by the device."""

    latitude: float = Field(ge=-90, le=90)
    longitude: float = Field(ge=-180, le=180)
    timestamp_ms: int
    altitude: Optional[float] = None
    speed: Optional[float] = None
    accuracy_m: Optional[float] = Field(default=None, ge=0)

    def to_sample(self) -> GeoSample:
        return GeoSample(
            latitude=self.latitude,
            longitude=self.longitude,
            timestamp_ms=self.timestamp_ms,
            altitude=self.altitude,
            speed=self.speed,
            accuracy_m=self.accuracy_m,
        )


class MotionSampleIn(BaseModel):
    """Accelerometer reading pushed by the device."""

    x: Optional[float] = None
    y: Optional[float] = None
    z: Optional[float] = None
    timestamp_ms: int

    def to_sample(self) -> MotionSample:
        return MotionSample(x=self.x, y=self.y, z=self.z, timestamp_ms=self.timestamp_ms)


class PositionErrorIn(BaseModel):
    """Error-channel event from the device's location service."""

    kind: str = Field(pattern="^(signal_lost|position_unavailable)$")
    message: str = ""
    at_ms: int = 0


# =============================================================================
# Requests
# =============================================================================

class SessionCreateRequest(BaseModel):
    runner_mass_kg: Optional[float] = Field(default=None, gt=0)


class SessionStartRequest(BaseModel):
    """What the device reports about its sensors when the runner taps start."""

    motion_permission_granted: bool = True
    geolocation_available: bool = True


class SaveRequest(BaseModel):
    name: Optional[str] = None


# =============================================================================
# Responses
# =============================================================================

class PointOut(BaseModel):
    """Path point as stored and returned; mirrors GeoSample."""

    latitude: float
    longitude: float
    altitude: Optional[float] = None
    speed: Optional[float] = None
    accuracy_m: Optional[float] = None
    timestamp_ms: int

    @classmethod
    def from_sample(cls, sample: GeoSample) -> "PointOut":
        return cls(
            latitude=sample.latitude,
            longitude=sample.longitude,
            altitude=sample.altitude,
            speed=sample.speed,
            accuracy_m=sample.accuracy_m,
            timestamp_ms=sample.timestamp_ms,
        )


class IssueOut(BaseModel):
    kind: str
    message: str
    at_ms: int


class RejectionOut(BaseModel):
    """Why one fix was left out of the path."""

    verdict: str
    timestamp_ms: int
    accuracy_m: Optional[float] = None
    distance_m: float
    speed_mps: float

    @classmethod
    def from_rejected(cls, rejected: RejectedFix) -> "RejectionOut":
        return cls(
            verdict=rejected.verdict.value,
            timestamp_ms=rejected.sample.timestamp_ms,
            accuracy_m=rejected.sample.accuracy_m,
            distance_m=rejected.distance_m,
            speed_mps=rejected.speed_mps,
        )


class SnapshotOut(BaseModel):
    """Live session values for the record screen."""

    session_id: str
    phase: str
    elapsed_seconds: int
    distance_m: float
    current_pace_sec_km: float
    average_pace_sec_km: float
    cadence_spm: int
    step_count: int
    calories: int
    point_count: int
    current_location: Optional[PointOut] = None
    last_issue: Optional[IssueOut] = None
    rejections: dict[str, int] = Field(default_factory=dict)
    recent_rejections: List[RejectionOut] = Field(default_factory=list)

    # Display strings
    elapsed_display: str = ""
    distance_display: str = ""
    current_pace_display: str = ""
    average_pace_display: str = ""

    @classmethod
    def build(cls, session_id: str, snapshot: SessionSnapshot) -> "SnapshotOut":
        issue = snapshot.last_issue
        return cls(
            session_id=session_id,
            phase=snapshot.phase.value,
            elapsed_seconds=snapshot.elapsed_seconds,
            distance_m=snapshot.distance_m,
            current_pace_sec_km=snapshot.current_pace_sec_km,
            average_pace_sec_km=snapshot.average_pace_sec_km,
            cadence_spm=snapshot.cadence_spm,
            step_count=snapshot.step_count,
            calories=snapshot.calories,
            point_count=snapshot.point_count,
            current_location=(
                PointOut.from_sample(snapshot.current_location)
                if snapshot.current_location else None
            ),
            last_issue=(
                IssueOut(kind=issue.kind.value, message=issue.message, at_ms=issue.at_ms)
                if issue else None
            ),
            rejections=dict(snapshot.rejection_counts),
            recent_rejections=[
                RejectionOut.from_rejected(r) for r in snapshot.recent_rejections
            ],
            elapsed_display=format_elapsed(snapshot.elapsed_seconds),
            distance_display=format_distance_km(snapshot.distance_m),
            current_pace_display=format_pace(snapshot.current_pace_sec_km),
            average_pace_display=format_pace(snapshot.average_pace_sec_km),
        )


class SummaryOut(BaseModel):
    """Frozen result of a stopped session."""

    session_id: str
    distance_m: float
    elapsed_seconds: int
    calories: int
    average_pace_sec_km: float
    cadence_spm: int
    step_count: int
    path: List[PointOut]

    @classmethod
    def build(cls, session_id: str, summary: RunSummary) -> "SummaryOut":
        return cls(
            session_id=session_id,
            distance_m=summary.distance_m,
            elapsed_seconds=summary.elapsed_seconds,
            calories=summary.calories,
            average_pace_sec_km=summary.average_pace_sec_km,
            cadence_spm=summary.cadence_spm,
            step_count=summary.step_count,
            path=[PointOut.from_sample(p) for p in summary.path],
        )


class ActivityRecord(BaseModel):
    """Finished run as handed to the record store."""

    id: str
    name: str
    type: str = "run"
    distance_m: float
    moving_time_s: int
    elapsed_time_s: int
    start_date: datetime
    path: List[PointOut]
    calories: int
    average_pace_sec_km: float
    cadence_spm: int
    step_count: int
