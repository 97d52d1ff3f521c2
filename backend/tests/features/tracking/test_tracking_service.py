"""
Tests for TrackingService and the save boundary.
"""

import asyncio
from datetime import datetime

import pytest

from runtracker.features.tracking import (
    GeoSample,
    InMemoryActivityStore,
    IssueKind,
    LifecyclePhase,
    ManualTicker,
    PermissionDeniedError,
    PositionError,
    PositionUnavailableError,
    RunSummary,
    SessionNotFoundError,
    SessionValidationError,
    TrackingConfig,
    TrackingService,
    activity_title,
    build_activity_record,
    validate_for_save,
)
from runtracker.features.tracking.schemas import ActivityRecord

from conftest import make_fix, make_steps, make_track


class Harness:
    """Service with manual tickers the test can drive."""

    def __init__(self, config=None):
        self.tickers = []
        self.store = InMemoryActivityStore()
        self.service = TrackingService(
            self.store,
            config=config,
            ticker_factory=self._make_ticker,
            default_runner_mass_kg=70.0,
        )

    def _make_ticker(self):
        ticker = ManualTicker()
        self.tickers.append(ticker)
        return ticker

    def started_session(self, **kwargs):
        session = self.service.create_session(**kwargs)
        asyncio.run(self.service.start(session.id))
        return session, self.tickers[-1]


@pytest.fixture
def harness():
    return Harness()


def make_summary(elapsed_seconds=300, points=2, started_at_ms=None) -> RunSummary:
    return RunSummary(
        distance_m=500.0,
        elapsed_seconds=elapsed_seconds,
        path=tuple(make_track(points, 3.0)),
        calories=36,
        average_pace_sec_km=600.0,
        cadence_spm=168,
        step_count=820,
        started_at_ms=started_at_ms,
    )


# =============================================================================
# Test Save Policy
# =============================================================================

class TestValidateForSave:

    def test_long_enough_run_passes(self):
        validate_for_save(make_summary(elapsed_seconds=120, points=2))

    def test_short_run_rejected(self):
        with pytest.raises(SessionValidationError) as exc_info:
            validate_for_save(make_summary(elapsed_seconds=90, points=40))

        assert len(exc_info.value.reasons) == 1
        assert "120s" in exc_info.value.reasons[0]

    def test_single_point_rejected(self):
        with pytest.raises(SessionValidationError) as exc_info:
            validate_for_save(make_summary(elapsed_seconds=600, points=1))

        assert "points" in exc_info.value.reasons[0]

    def test_all_reasons_reported(self):
        with pytest.raises(SessionValidationError) as exc_info:
            validate_for_save(make_summary(elapsed_seconds=90, points=0))

        assert len(exc_info.value.reasons) == 2

    def test_thresholds_come_from_config(self):
        config = TrackingConfig(min_save_duration_seconds=30)
        validate_for_save(make_summary(elapsed_seconds=45), config)


# =============================================================================
# Test Activity Record
# =============================================================================

class TestActivityRecord:

    @pytest.mark.parametrize("hour,expected", [
        (6, "Morning Run"),
        (11, "Morning Run"),
        (12, "Afternoon Run"),
        (17, "Evening Run"),
        (21, "Night Run"),
        (2, "Night Run"),
    ])
    def test_title_by_time_of_day(self, hour, expected):
        assert activity_title(datetime(2024, 5, 1, hour, 30)) == expected

    def test_record_mirrors_summary(self):
        summary = make_summary(started_at_ms=1_700_000_000_000)
        record = build_activity_record(summary, name="Tempo", activity_id="a1")

        assert record.id == "a1"
        assert record.name == "Tempo"
        assert record.type == "run"
        assert record.distance_m == summary.distance_m
        assert record.elapsed_time_s == summary.elapsed_seconds
        assert record.moving_time_s == summary.elapsed_seconds
        assert len(record.path) == 2
        assert record.start_date.timestamp() == 1_700_000_000

    def test_default_name_ends_with_run(self):
        record = build_activity_record(make_summary(started_at_ms=1_700_000_000_000))
        assert record.name.endswith(" Run")
        assert record.id

    def test_path_keeps_every_sample_field(self):
        sample = GeoSample(
            latitude=43.0,
            longitude=76.0,
            timestamp_ms=1000,
            altitude=800.0,
            speed=3.1,
            accuracy_m=4.0,
        )
        summary = RunSummary(
            distance_m=0.0,
            elapsed_seconds=200,
            path=(sample, sample),
            calories=0,
            average_pace_sec_km=0.0,
            cadence_spm=0,
            step_count=0,
        )

        record = build_activity_record(summary)
        stored = ActivityRecord.model_validate_json(record.model_dump_json())

        assert stored.path[0].model_dump() == {
            "latitude": 43.0,
            "longitude": 76.0,
            "altitude": 800.0,
            "speed": 3.1,
            "accuracy_m": 4.0,
            "timestamp_ms": 1000,
        }


# =============================================================================
# Test Service
# =============================================================================

class TestTrackingService:

    def test_unknown_session(self, harness):
        with pytest.raises(SessionNotFoundError):
            harness.service.get("missing")

    def test_default_runner_mass(self, harness):
        session = harness.service.create_session()
        assert session.controller.runner_mass_kg == 70.0

        heavy = harness.service.create_session(runner_mass_kg=90.0)
        assert heavy.controller.runner_mass_kg == 90.0

    def test_start_reports_device_permission(self, harness):
        session = harness.service.create_session()

        with pytest.raises(PermissionDeniedError):
            asyncio.run(harness.service.start(session.id, motion_permission_granted=False))

        assert session.controller.phase is LifecyclePhase.IDLE
        assert harness.tickers[-1].subscriber_count == 0

    def test_start_reports_missing_geolocation(self, harness):
        session = harness.service.create_session()

        with pytest.raises(PositionUnavailableError):
            asyncio.run(harness.service.start(session.id, geolocation_available=False))

        assert session.motion_source.subscriber_count == 0

    def test_pushed_batches_are_ordered(self, harness):
        session, _ = harness.started_session()
        fixes = make_track(10, 3.0)

        snapshot = harness.service.push_positions(session.id, reversed(fixes))

        assert snapshot.point_count == 10
        assert snapshot.distance_m == pytest.approx(27.0, rel=1e-6)

    def test_motion_batch(self, harness):
        session, _ = harness.started_session()
        snapshot = harness.service.push_motion(session.id, make_steps(6))
        assert snapshot.step_count == 6

    def test_position_error_recorded(self, harness):
        session, _ = harness.started_session()
        snapshot = harness.service.report_position_error(
            session.id,
            PositionError(IssueKind.SIGNAL_LOST, "GPS signal lost", 1234)
        )

        assert snapshot.phase is LifecyclePhase.RUNNING
        assert snapshot.last_issue.kind is IssueKind.SIGNAL_LOST

    def test_export_gpx(self, harness):
        session, _ = harness.started_session()
        harness.service.push_positions(session.id, make_track(4, 3.0))

        xml = harness.service.export_gpx(session.id, name="Easy")

        assert "<trkpt" in xml
        assert "Easy" in xml

    def test_finish_saves_record(self, harness):
        session, ticker = harness.started_session()
        harness.service.push_positions(session.id, make_track(130, 3.0))
        ticker.tick(130)

        record = asyncio.run(harness.service.finish(session.id, name="Lunch loop"))

        assert record.name == "Lunch loop"
        assert record.elapsed_time_s == 130
        assert len(record.path) == 130
        assert harness.service.session_count == 0
        assert ticker.subscriber_count == 0
        assert asyncio.run(harness.store.get(record.id)) == record

    def test_short_live_run_keeps_running(self, harness):
        session, ticker = harness.started_session()
        harness.service.push_positions(session.id, make_track(90, 3.0))
        ticker.tick(90)

        with pytest.raises(SessionValidationError):
            asyncio.run(harness.service.finish(session.id))

        assert session.controller.phase is LifecyclePhase.RUNNING
        assert ticker.subscriber_count == 1

        ticker.tick(40)
        record = asyncio.run(harness.service.finish(session.id))
        assert record.elapsed_time_s == 130

    def test_finish_after_stop(self, harness):
        session, ticker = harness.started_session()
        harness.service.push_positions(session.id, make_track(3, 3.0))
        ticker.tick(200)
        summary = harness.service.stop(session.id)

        record = asyncio.run(harness.service.finish(session.id))
        assert record.distance_m == summary.distance_m

    def test_stopped_short_run_cannot_be_saved(self, harness):
        session, ticker = harness.started_session()
        harness.service.push_positions(session.id, [make_fix(0, 0)])
        ticker.tick(300)
        harness.service.stop(session.id)

        with pytest.raises(SessionValidationError):
            asyncio.run(harness.service.finish(session.id))
        assert harness.service.session_count == 1

    def test_store_lists_newest_first(self, harness):
        older = build_activity_record(make_summary(started_at_ms=1_600_000_000_000))
        newer = build_activity_record(make_summary(started_at_ms=1_700_000_000_000))
        asyncio.run(harness.store.save(older))
        asyncio.run(harness.store.save(newer))

        records = asyncio.run(harness.store.list())
        assert [r.id for r in records] == [newer.id, older.id]

    def test_discard_releases_sensors(self, harness):
        session, ticker = harness.started_session()
        harness.service.discard(session.id)

        assert harness.service.session_count == 0
        assert ticker.subscriber_count == 0
        assert session.position_source.subscriber_count == 0

    def test_discard_idle_session(self, harness):
        session = harness.service.create_session()
        harness.service.discard(session.id)
        assert harness.service.session_count == 0

    def test_shutdown_stops_everything(self, harness):
        running, ticker = harness.started_session()
        paused, _ = harness.started_session()
        harness.service.pause(paused.id)

        asyncio.run(harness.service.shutdown())

        assert harness.service.session_count == 0
        assert running.controller.phase is LifecyclePhase.STOPPED
        assert paused.controller.phase is LifecyclePhase.STOPPED
        assert ticker.subscriber_count == 0
