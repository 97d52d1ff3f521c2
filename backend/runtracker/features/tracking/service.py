"""
Tracking Service

Registry of live sessions and the finish/save boundary.

The controller only reports accurate numbers; whether a run is worth
keeping is decided here (minimum duration and path length).
"""

import logging
import uuid
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Callable, Dict, Iterable, List, Optional

from .config import TrackingConfig
from .controller import SessionController
from .exceptions import SessionNotFoundError, SessionValidationError
from .gpx_export import build_gpx
from .models import (
    GeoSample,
    LifecyclePhase,
    MotionSample,
    RunSummary,
    SessionSnapshot,
)
from .schemas import ActivityRecord, PointOut
from .sources import (
    IntervalTicker,
    PositionError,
    PushMotionSource,
    PushPositionSource,
    StaticPermissionGate,
    Ticker,
)

logger = logging.getLogger(__name__)


# =============================================================================
# Save policy
# =============================================================================

def validate_for_save(run, config: Optional[TrackingConfig] = None) -> None:
    """
    Enforce the minimum save policy.

    Args:
        run: RunSummary or SessionSnapshot (needs elapsed_seconds, point_count)
        config: Thresholds (defaults: 120 s, 2 points)

    Raises:
        SessionValidationError: With one reason per failed rule
    """
    cfg = config or TrackingConfig()
    reasons = []

    if run.elapsed_seconds < cfg.min_save_duration_seconds:
        reasons.append(
            f"Activity must be at least {cfg.min_save_duration_seconds}s long "
            f"(got {run.elapsed_seconds}s)"
        )
    if run.point_count < cfg.min_save_path_points:
        reasons.append(
            f"Path needs at least {cfg.min_save_path_points} points "
            f"(got {run.point_count})"
        )

    if reasons:
        raise SessionValidationError("; ".join(reasons), reasons)


def activity_title(started_at: datetime) -> str:
    """Name a run by time of day, e.g. 'Morning Run'."""
    hour = started_at.hour
    if 5 <= hour < 12:
        time_of_day = "Morning"
    elif 12 <= hour < 17:
        time_of_day = "Afternoon"
    elif 17 <= hour < 21:
        time_of_day = "Evening"
    else:
        time_of_day = "Night"
    return f"{time_of_day} Run"


def build_activity_record(
    summary: RunSummary,
    name: Optional[str] = None,
    activity_id: Optional[str] = None
) -> ActivityRecord:
    """Map a frozen summary onto the stored record shape."""
    if summary.started_at_ms is not None:
        start_date = datetime.fromtimestamp(summary.started_at_ms / 1000, tz=timezone.utc)
    else:
        start_date = datetime.now(timezone.utc)

    return ActivityRecord(
        id=activity_id or str(uuid.uuid4()),
        name=name or activity_title(start_date.astimezone()),
        distance_m=summary.distance_m,
        moving_time_s=summary.elapsed_seconds,
        elapsed_time_s=summary.elapsed_seconds,
        start_date=start_date,
        path=[PointOut.from_sample(p) for p in summary.path],
        calories=summary.calories,
        average_pace_sec_km=summary.average_pace_sec_km,
        cadence_spm=summary.cadence_spm,
        step_count=summary.step_count,
    )


# =============================================================================
# Record store
# =============================================================================

class ActivityStore(ABC):
    """Keyed record store for finished activities."""

    @abstractmethod
    async def save(self, record: ActivityRecord) -> ActivityRecord:
        """Persist a record and return it."""

    @abstractmethod
    async def get(self, activity_id: str) -> Optional[ActivityRecord]:
        """Fetch by id."""

    @abstractmethod
    async def list(self) -> List[ActivityRecord]:
        """All records, newest first."""


class InMemoryActivityStore(ActivityStore):
    """Process-local store; contents are lost on restart."""

    def __init__(self):
        self._records: Dict[str, ActivityRecord] = {}

    async def save(self, record: ActivityRecord) -> ActivityRecord:
        self._records[record.id] = record
        return record

    async def get(self, activity_id: str) -> Optional[ActivityRecord]:
        return self._records.get(activity_id)

    async def list(self) -> List[ActivityRecord]:
        return sorted(
            self._records.values(),
            key=lambda r: r.start_date,
            reverse=True
        )


# =============================================================================
# Live sessions
# =============================================================================

@dataclass
class LiveSession:
    """A controller plus the push sources the device feeds."""
    id: str
    controller: SessionController
    position_source: PushPositionSource
    motion_source: PushMotionSource
    permission_gate: StaticPermissionGate
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


class TrackingService:
    """
    Live session registry and finish/save boundary.

    Usage:
        service = TrackingService(InMemoryActivityStore())
        session = service.create_session(runner_mass_kg=70)
        await service.start(session.id)
        service.push_positions(session.id, fixes)
        record = await service.finish(session.id)
    """

    def __init__(
        self,
        store: ActivityStore,
        config: Optional[TrackingConfig] = None,
        ticker_factory: Optional[Callable[[], Ticker]] = None,
        default_runner_mass_kg: float = 70.0,
    ):
        self.store = store
        self.config = config or TrackingConfig()
        self.default_runner_mass_kg = default_runner_mass_kg
        self._ticker_factory = ticker_factory or (
            lambda: IntervalTicker(self.config.tick_interval_seconds)
        )
        self._sessions: Dict[str, LiveSession] = {}

    @property
    def session_count(self) -> int:
        return len(self._sessions)

    def create_session(self, runner_mass_kg: Optional[float] = None) -> LiveSession:
        position_source = PushPositionSource()
        motion_source = PushMotionSource()
        permission_gate = StaticPermissionGate(True)

        controller = SessionController(
            position_source,
            motion_source,
            self._ticker_factory(),
            runner_mass_kg=runner_mass_kg or self.default_runner_mass_kg,
            permission_gate=permission_gate,
            config=self.config,
        )

        session = LiveSession(
            id=str(uuid.uuid4()),
            controller=controller,
            position_source=position_source,
            motion_source=motion_source,
            permission_gate=permission_gate,
        )
        self._sessions[session.id] = session
        logger.info(f"Created session {session.id}")
        return session

    def get(self, session_id: str) -> LiveSession:
        session = self._sessions.get(session_id)
        if session is None:
            raise SessionNotFoundError(f"Session {session_id} not found")
        return session

    async def start(
        self,
        session_id: str,
        motion_permission_granted: bool = True,
        geolocation_available: bool = True
    ) -> SessionSnapshot:
        """Start or resume with what the device reports about its sensors."""
        session = self.get(session_id)
        session.permission_gate.granted = motion_permission_granted
        session.position_source.set_available(geolocation_available)
        return await session.controller.start()

    def pause(self, session_id: str) -> SessionSnapshot:
        return self.get(session_id).controller.pause()

    def stop(self, session_id: str) -> RunSummary:
        return self.get(session_id).controller.stop()

    def push_positions(
        self,
        session_id: str,
        samples: Iterable[GeoSample]
    ) -> SessionSnapshot:
        session = self.get(session_id)
        for sample in sorted(samples, key=lambda s: s.timestamp_ms):
            session.position_source.push(sample)
        return session.controller.snapshot()

    def push_motion(
        self,
        session_id: str,
        samples: Iterable[MotionSample]
    ) -> SessionSnapshot:
        session = self.get(session_id)
        for sample in sorted(samples, key=lambda s: s.timestamp_ms):
            session.motion_source.push(sample)
        return session.controller.snapshot()

    def report_position_error(
        self,
        session_id: str,
        error: PositionError
    ) -> SessionSnapshot:
        session = self.get(session_id)
        session.position_source.fail(error)
        return session.controller.snapshot()

    def export_gpx(self, session_id: str, name: Optional[str] = None) -> str:
        controller = self.get(session_id).controller
        return build_gpx(controller.path, name=name or "Run Tracker Activity")

    def discard(self, session_id: str) -> None:
        """Abandon a session; its data is dropped."""
        session = self.get(session_id)
        if session.controller.phase in (LifecyclePhase.RUNNING, LifecyclePhase.PAUSED):
            session.controller.stop()
        del self._sessions[session_id]
        logger.info(f"Discarded session {session_id}")

    async def finish(self, session_id: str, name: Optional[str] = None) -> ActivityRecord:
        """
        Stop (if needed), validate and store a session.

        A live session that is too short is left running so the runner can
        keep going; the rejection is raised before anything is stopped.

        Raises:
            SessionValidationError: Below the minimum save policy
        """
        session = self.get(session_id)
        controller = session.controller

        if controller.phase is not LifecyclePhase.STOPPED:
            validate_for_save(controller.snapshot(), self.config)
            controller.stop()

        summary = controller.summary
        validate_for_save(summary, self.config)

        record = build_activity_record(summary, name=name)
        saved = await self.store.save(record)
        del self._sessions[session_id]

        logger.info(
            f"Saved activity {saved.id} '{saved.name}': "
            f"{saved.distance_m:.0f} m, {saved.elapsed_time_s}s"
        )
        return saved

    async def shutdown(self) -> None:
        """Release every live session's sensors."""
        for session in list(self._sessions.values()):
            if session.controller.phase in (LifecyclePhase.RUNNING, LifecyclePhase.PAUSED):
                session.controller.stop()
        logger.info(f"Stopped {len(self._sessions)} live sessions")
        self._sessions.clear()
