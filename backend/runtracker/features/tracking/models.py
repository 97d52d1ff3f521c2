"""
Tracking data model.

Immutable sensor samples, the mutable session aggregate owned by
SessionController, and the frozen values handed to readers.
"""

from collections import Counter, deque
from dataclasses import dataclass, field
from enum import Enum
from typing import Deque, List, Optional, Tuple


class LifecyclePhase(str, Enum):
    """Session lifecycle phase."""
    IDLE = "idle"
    RUNNING = "running"
    PAUSED = "paused"
    STOPPED = "stopped"


class FilterVerdict(str, Enum):
    """Verdict of the noise/plausibility filter on a raw fix."""
    ACCEPTED = "accepted"
    REJECTED_NOISY = "rejected_noisy"
    REJECTED_IMPLAUSIBLE = "rejected_implausible"


class IssueKind(str, Enum):
    """Sensor-level problems recorded on a session."""
    PERMISSION_DENIED = "permission_denied"
    POSITION_UNAVAILABLE = "position_unavailable"
    SIGNAL_LOST = "signal_lost"


@dataclass(frozen=True)
class GeoSample:
    """Single location fix from the position source."""
    latitude: float
    longitude: float
    timestamp_ms: int
    altitude: Optional[float] = None
    speed: Optional[float] = None           # sensor-reported, m/s
    accuracy_m: Optional[float] = None      # horizontal accuracy radius


@dataclass(frozen=True)
class MotionSample:
    """Accelerometer reading, gravity included (m/s^2)."""
    x: Optional[float]
    y: Optional[float]
    z: Optional[float]
    timestamp_ms: int


@dataclass(frozen=True)
class SessionIssue:
    """Sensor problem surfaced on the next state read."""
    kind: IssueKind
    message: str
    at_ms: int


@dataclass(frozen=True)
class RejectedFix:
    """Diagnostic record of a fix the filter refused."""
    sample: GeoSample
    verdict: FilterVerdict
    distance_m: float
    speed_mps: float


@dataclass(frozen=True)
class RunSummary:
    """Frozen result of a stopped session."""
    distance_m: float
    elapsed_seconds: int
    path: Tuple[GeoSample, ...]
    calories: int
    average_pace_sec_km: float
    cadence_spm: int
    step_count: int
    started_at_ms: Optional[int] = None
    stopped_at_ms: Optional[int] = None

    @property
    def point_count(self) -> int:
        return len(self.path)


@dataclass(frozen=True)
class SessionSnapshot:
    """Read model of the live session."""
    phase: LifecyclePhase
    elapsed_seconds: int
    distance_m: float
    current_pace_sec_km: float
    average_pace_sec_km: float
    cadence_spm: int
    step_count: int
    calories: int
    point_count: int
    current_location: Optional[GeoSample]
    last_issue: Optional[SessionIssue]
    issues: Tuple[SessionIssue, ...]
    rejection_counts: Tuple[Tuple[str, int], ...]
    recent_rejections: Tuple[RejectedFix, ...]


@dataclass
class SessionState:
    """
    Mutable aggregate owned by SessionController.

    Nothing else writes to it; readers get a SessionSnapshot or, after
    stop(), a RunSummary.
    """
    phase: LifecyclePhase = LifecyclePhase.IDLE
    elapsed_seconds: int = 0
    distance_m: float = 0.0
    current_pace_sec_km: float = 0.0
    average_pace_sec_km: float = 0.0
    cadence_spm: int = 0
    step_count: int = 0
    calories: int = 0
    path: List[GeoSample] = field(default_factory=list)
    last_accepted: Optional[GeoSample] = None
    current_location: Optional[GeoSample] = None
    started_at_ms: Optional[int] = None
    issues: Deque[SessionIssue] = field(
        default_factory=lambda: deque(maxlen=20)
    )
    rejection_counts: Counter = field(default_factory=Counter)
    recent_rejections: Deque[RejectedFix] = field(
        default_factory=lambda: deque(maxlen=50)
    )

    def to_summary(self, stopped_at_ms: Optional[int] = None) -> RunSummary:
        """Freeze the current values without recomputing anything."""
        return RunSummary(
            distance_m=self.distance_m,
            elapsed_seconds=self.elapsed_seconds,
            path=tuple(self.path),
            calories=self.calories,
            average_pace_sec_km=self.average_pace_sec_km,
            cadence_spm=self.cadence_spm,
            step_count=self.step_count,
            started_at_ms=self.started_at_ms,
            stopped_at_ms=stopped_at_ms,
        )

    def to_snapshot(self) -> SessionSnapshot:
        return SessionSnapshot(
            phase=self.phase,
            elapsed_seconds=self.elapsed_seconds,
            distance_m=self.distance_m,
            current_pace_sec_km=self.current_pace_sec_km,
            average_pace_sec_km=self.average_pace_sec_km,
            cadence_spm=self.cadence_spm,
            step_count=self.step_count,
            calories=self.calories,
            point_count=len(self.path),
            current_location=self.current_location,
            last_issue=self.issues[-1] if self.issues else None,
            issues=tuple(self.issues),
            rejection_counts=tuple(
                (verdict.value, count)
                for verdict, count in self.rejection_counts.items()
            ),
            recent_rejections=tuple(self.recent_rejections),
        )
