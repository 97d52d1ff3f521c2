"""
Session Controller

Owns one run's mutable state and the sensor subscriptions feeding it.

State machine:
    IDLE -> RUNNING <-> PAUSED -> STOPPED (terminal)

Callbacks from the position, motion and timer sources run to completion on
the event loop and never assume an order between sources. Each callback
reads the phase from the controller when it fires, so pause()/stop() take
effect on the very next event from every source.

Usage:
    controller = SessionController(
        position_source, motion_source, ticker, runner_mass_kg=72
    )
    await controller.start()
    ...
    controller.pause()
    await controller.start()   # resume
    summary = controller.stop()
"""

import logging
import time
from collections import deque
from typing import Callable, Optional

from .calculators import (
    DistanceAccumulator,
    GeoSampleFilter,
    PaceEstimator,
    StepCadenceDetector,
    average_pace,
    estimate_calories,
)
from .config import TrackingConfig
from .exceptions import (
    PermissionDeniedError,
    PositionUnavailableError,
    SessionStateError,
)
from .models import (
    GeoSample,
    IssueKind,
    LifecyclePhase,
    MotionSample,
    RejectedFix,
    RunSummary,
    SessionIssue,
    SessionSnapshot,
    SessionState,
)
from .sources import (
    MotionSource,
    PermissionGate,
    PositionError,
    PositionSource,
    SensorHandle,
    StaticPermissionGate,
    Ticker,
)

logger = logging.getLogger(__name__)


def _now_ms() -> int:
    return int(time.time() * 1000)


class SessionController:
    """
    Single writer of a run's SessionState.

    Tracks each sensor handle it owns; re-arming on resume is decided per
    handle, not from the lifecycle phase.
    """

    def __init__(
        self,
        position_source: PositionSource,
        motion_source: MotionSource,
        ticker: Ticker,
        runner_mass_kg: float,
        permission_gate: Optional[PermissionGate] = None,
        config: Optional[TrackingConfig] = None,
        clock: Callable[[], int] = _now_ms,
    ):
        self.config = config or TrackingConfig()
        self.runner_mass_kg = runner_mass_kg

        self._position_source = position_source
        self._motion_source = motion_source
        self._ticker = ticker
        self._permission_gate = permission_gate or StaticPermissionGate(True)
        self._clock = clock

        self._filter = GeoSampleFilter(self.config)
        self._pace = PaceEstimator(self.config)
        self._cadence = StepCadenceDetector(self.config)

        self._state = SessionState()
        self._state.recent_rejections = deque(maxlen=self.config.rejection_log_size)
        self._state.issues = deque(maxlen=self.config.issue_log_size)
        self._summary: Optional[RunSummary] = None

        self._position_handle: Optional[SensorHandle] = None
        self._motion_handle: Optional[SensorHandle] = None
        self._timer_handle: Optional[SensorHandle] = None

    # =========================================================================
    # Read side
    # =========================================================================

    @property
    def phase(self) -> LifecyclePhase:
        return self._state.phase

    @property
    def is_running(self) -> bool:
        return self._state.phase is LifecyclePhase.RUNNING

    @property
    def summary(self) -> Optional[RunSummary]:
        """Frozen result, available once stopped."""
        return self._summary

    @property
    def path(self) -> tuple[GeoSample, ...]:
        return tuple(self._state.path)

    def snapshot(self) -> SessionSnapshot:
        """Current values plus the latest sensor issues."""
        return self._state.to_snapshot()

    def held_handles(self) -> list[SensorHandle]:
        """Handles this controller still owns."""
        handles = (self._position_handle, self._motion_handle, self._timer_handle)
        return [h for h in handles if h is not None and h.active]

    # =========================================================================
    # Lifecycle
    # =========================================================================

    async def start(self) -> SessionSnapshot:
        """
        Begin (from IDLE) or resume (from PAUSED) recording.

        Raises:
            PermissionDeniedError: Motion access refused; stays IDLE
            PositionUnavailableError: No location capability; stays IDLE
            SessionStateError: Session already stopped
        """
        phase = self._state.phase

        if phase is LifecyclePhase.RUNNING:
            return self.snapshot()
        if phase is LifecyclePhase.STOPPED:
            raise SessionStateError("Session is stopped; create a new one")

        if phase is LifecyclePhase.IDLE:
            await self._acquire_for_start()
            self._state.started_at_ms = self._clock()
            logger.info(f"Session started (runner mass {self.runner_mass_kg} kg)")
        else:
            self._rearm()
            # Window fixes predate the pause and would skew current pace
            self._pace.clear_window()
            logger.info(f"Session resumed at {self._state.elapsed_seconds}s")

        self._state.phase = LifecyclePhase.RUNNING
        return self.snapshot()

    async def resume(self) -> SessionSnapshot:
        """Alias of start() for a paused session."""
        if self._state.phase is not LifecyclePhase.PAUSED:
            raise SessionStateError(f"Cannot resume from {self._state.phase.value}")
        return await self.start()

    def pause(self) -> SessionSnapshot:
        """
        Stop the clock and step counting; position stays live for the map.

        Calling pause() on a paused session is a no-op.
        """
        phase = self._state.phase

        if phase is LifecyclePhase.PAUSED:
            return self.snapshot()
        if phase is not LifecyclePhase.RUNNING:
            raise SessionStateError(f"Cannot pause from {phase.value}")

        self._state.phase = LifecyclePhase.PAUSED
        self._release("_timer_handle")
        self._release("_motion_handle")
        logger.info(f"Session paused at {self._state.elapsed_seconds}s")
        return self.snapshot()

    def stop(self) -> RunSummary:
        """
        Release every sensor and freeze the run.

        Repeated calls return the same RunSummary.
        """
        phase = self._state.phase

        if phase is LifecyclePhase.STOPPED:
            return self._summary
        if phase is LifecyclePhase.IDLE:
            raise SessionStateError("Session was never started")

        self._state.phase = LifecyclePhase.STOPPED
        self._release_all()
        self._summary = self._state.to_summary(stopped_at_ms=self._clock())

        logger.info(
            f"Session stopped: {self._summary.distance_m:.0f} m in "
            f"{self._summary.elapsed_seconds}s, {self._summary.point_count} points"
        )
        return self._summary

    # =========================================================================
    # Sensor callbacks
    # =========================================================================

    def _on_position(self, sample: GeoSample) -> None:
        # "Where am I" is always live; "is this my effort" is gated
        self._state.current_location = sample

        if self._state.phase is not LifecyclePhase.RUNNING:
            return

        state = self._state
        result = self._filter.accept(sample, state.last_accepted)

        if not result.accepted:
            state.rejection_counts[result.verdict] += 1
            state.recent_rejections.append(RejectedFix(
                sample=sample,
                verdict=result.verdict,
                distance_m=result.distance_m,
                speed_mps=result.speed_mps,
            ))
            logger.debug(
                f"Fix rejected ({result.verdict.value}): "
                f"d={result.distance_m:.1f}m v={result.speed_mps:.2f}m/s "
                f"acc={sample.accuracy_m}"
            )
            if result.near_stationary:
                state.current_pace_sec_km = self._pace.decay()
            return

        DistanceAccumulator.accumulate(state, sample, result.distance_m)
        state.current_pace_sec_km = self._pace.update(sample)
        state.calories = estimate_calories(
            state.distance_m,
            self.runner_mass_kg,
            self.config.kcal_per_kg_per_km
        )
        state.average_pace_sec_km = average_pace(
            state.elapsed_seconds,
            state.distance_m,
            self.config.pace_cap_sec_km
        )

    def _on_position_error(self, error: PositionError) -> None:
        self._record_issue(
            error.kind,
            error.message,
            error.at_ms or self._clock()
        )

    def _on_motion(self, sample: MotionSample) -> None:
        if self._state.phase is not LifecyclePhase.RUNNING:
            return

        if self._cadence.on_motion_sample(sample):
            self._state.step_count = self._cadence.step_count
            self._state.cadence_spm = self._cadence.cadence_spm

    def _on_tick(self) -> None:
        if self._state.phase is not LifecyclePhase.RUNNING:
            return

        state = self._state
        state.elapsed_seconds += 1
        state.average_pace_sec_km = average_pace(
            state.elapsed_seconds,
            state.distance_m,
            self.config.pace_cap_sec_km
        )

    # =========================================================================
    # Handle ownership
    # =========================================================================

    async def _acquire_for_start(self) -> None:
        """Permission, then subscriptions; nothing stays held on failure."""
        granted = await self._permission_gate.request()
        if not granted:
            self._record_issue(
                IssueKind.PERMISSION_DENIED,
                "Sensor permission denied",
                self._clock()
            )
            raise PermissionDeniedError("Sensor permission denied")

        try:
            self._subscribe_motion()
            self._subscribe_timer()
            if not self._position_source.available:
                self._record_issue(
                    IssueKind.POSITION_UNAVAILABLE,
                    "Geolocation is not supported",
                    self._clock()
                )
                raise PositionUnavailableError("Geolocation is not supported")
            self._subscribe_position()
        except Exception:
            self._release_all()
            raise

    def _rearm(self) -> None:
        if not self._is_live(self._timer_handle):
            self._subscribe_timer()
        if not self._is_live(self._motion_handle):
            self._subscribe_motion()
        if not self._is_live(self._position_handle):
            if self._position_source.available:
                self._subscribe_position()
            else:
                self._record_issue(
                    IssueKind.POSITION_UNAVAILABLE,
                    "Geolocation is not available on resume",
                    self._clock()
                )

    def _subscribe_position(self) -> None:
        self._position_handle = self._position_source.subscribe(
            self._on_position, self._on_position_error
        )

    def _subscribe_motion(self) -> None:
        self._motion_handle = self._motion_source.subscribe(self._on_motion)

    def _subscribe_timer(self) -> None:
        self._timer_handle = self._ticker.subscribe(self._on_tick)

    @staticmethod
    def _is_live(handle: Optional[SensorHandle]) -> bool:
        return handle is not None and handle.active

    def _release(self, attr: str) -> None:
        handle = getattr(self, attr)
        if handle is not None:
            handle.close()
            setattr(self, attr, None)

    def _release_all(self) -> None:
        for attr in ("_timer_handle", "_motion_handle", "_position_handle"):
            self._release(attr)

    def _record_issue(self, kind: IssueKind, message: str, at_ms: int) -> None:
        self._state.issues.append(SessionIssue(kind=kind, message=message, at_ms=at_ms))
        logger.warning(f"Session issue ({kind.value}): {message}")
