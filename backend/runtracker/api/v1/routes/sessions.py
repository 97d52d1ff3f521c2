"""
Session Routes

Live run recording: lifecycle commands and sensor sample ingestion.

The device pushes fixes and accelerometer readings in small batches;
every call returns the fresh session snapshot for the record screen.
"""

import logging
from typing import List, NoReturn

from fastapi import APIRouter, Depends, HTTPException, Response

from runtracker.api.deps import get_tracking_service
from runtracker.features.tracking import (
    IssueKind,
    PermissionDeniedError,
    PositionError,
    PositionUnavailableError,
    SessionNotFoundError,
    SessionStateError,
    SessionValidationError,
    TrackingError,
    TrackingService,
)
from runtracker.features.tracking.schemas import (
    ActivityRecord,
    GeoSampleIn,
    MotionSampleIn,
    PositionErrorIn,
    SaveRequest,
    SessionCreateRequest,
    SessionStartRequest,
    SnapshotOut,
    SummaryOut,
)

logger = logging.getLogger(__name__)

router = APIRouter()


def _raise_http(e: TrackingError) -> NoReturn:
    """Map tracking errors onto HTTP status codes."""
    if isinstance(e, SessionNotFoundError):
        raise HTTPException(status_code=404, detail=str(e))
    if isinstance(e, PermissionDeniedError):
        raise HTTPException(status_code=403, detail=str(e))
    if isinstance(e, PositionUnavailableError):
        raise HTTPException(status_code=503, detail=str(e))
    if isinstance(e, SessionStateError):
        raise HTTPException(status_code=409, detail=str(e))
    if isinstance(e, SessionValidationError):
        raise HTTPException(status_code=422, detail=e.reasons or str(e))
    raise HTTPException(status_code=400, detail=str(e))


@router.post("", response_model=SnapshotOut, status_code=201)
async def create_session(
    request: SessionCreateRequest = SessionCreateRequest(),
    service: TrackingService = Depends(get_tracking_service)
):
    """Create an idle session for a runner."""
    session = service.create_session(runner_mass_kg=request.runner_mass_kg)
    return SnapshotOut.build(session.id, session.controller.snapshot())


@router.get("/{session_id}", response_model=SnapshotOut)
async def get_session(
    session_id: str,
    service: TrackingService = Depends(get_tracking_service)
):
    """Current values, latest sensor issue and rejection counts."""
    try:
        session = service.get(session_id)
    except TrackingError as e:
        _raise_http(e)
    return SnapshotOut.build(session_id, session.controller.snapshot())


@router.post("/{session_id}/start", response_model=SnapshotOut)
async def start_session(
    session_id: str,
    request: SessionStartRequest = SessionStartRequest(),
    service: TrackingService = Depends(get_tracking_service)
):
    """
    Start or resume recording.

    Returns 403 when motion permission was refused and 503 when the device
    has no location capability; the session stays idle and can be retried.
    """
    try:
        snapshot = await service.start(
            session_id,
            motion_permission_granted=request.motion_permission_granted,
            geolocation_available=request.geolocation_available,
        )
    except TrackingError as e:
        _raise_http(e)
    return SnapshotOut.build(session_id, snapshot)


@router.post("/{session_id}/pause", response_model=SnapshotOut)
async def pause_session(
    session_id: str,
    service: TrackingService = Depends(get_tracking_service)
):
    """Pause the clock; fixes keep updating the live location only."""
    try:
        snapshot = service.pause(session_id)
    except TrackingError as e:
        _raise_http(e)
    return SnapshotOut.build(session_id, snapshot)


@router.post("/{session_id}/stop", response_model=SummaryOut)
async def stop_session(
    session_id: str,
    service: TrackingService = Depends(get_tracking_service)
):
    """Release sensors and return the frozen summary."""
    try:
        summary = service.stop(session_id)
    except TrackingError as e:
        _raise_http(e)
    return SummaryOut.build(session_id, summary)


@router.post("/{session_id}/positions", response_model=SnapshotOut)
async def push_positions(
    session_id: str,
    samples: List[GeoSampleIn],
    service: TrackingService = Depends(get_tracking_service)
):
    """Ingest a batch of location fixes."""
    try:
        snapshot = service.push_positions(
            session_id,
            [s.to_sample() for s in samples]
        )
    except TrackingError as e:
        _raise_http(e)
    return SnapshotOut.build(session_id, snapshot)


@router.post("/{session_id}/position-errors", response_model=SnapshotOut)
async def push_position_error(
    session_id: str,
    error: PositionErrorIn,
    service: TrackingService = Depends(get_tracking_service)
):
    """Report a location-service error (signal lost, capability revoked)."""
    try:
        snapshot = service.report_position_error(
            session_id,
            PositionError(
                kind=IssueKind(error.kind),
                message=error.message or error.kind.replace("_", " "),
                at_ms=error.at_ms,
            )
        )
    except TrackingError as e:
        _raise_http(e)
    return SnapshotOut.build(session_id, snapshot)


@router.post("/{session_id}/motion", response_model=SnapshotOut)
async def push_motion(
    session_id: str,
    samples: List[MotionSampleIn],
    service: TrackingService = Depends(get_tracking_service)
):
    """Ingest a batch of accelerometer readings."""
    try:
        snapshot = service.push_motion(
            session_id,
            [s.to_sample() for s in samples]
        )
    except TrackingError as e:
        _raise_http(e)
    return SnapshotOut.build(session_id, snapshot)


@router.get("/{session_id}/gpx")
async def export_gpx(
    session_id: str,
    name: str = "Run Tracker Activity",
    service: TrackingService = Depends(get_tracking_service)
):
    """Recorded path as a GPX 1.1 document."""
    try:
        content = service.export_gpx(session_id, name=name)
    except TrackingError as e:
        _raise_http(e)
    return Response(content=content, media_type="application/gpx+xml")


@router.post("/{session_id}/finish", response_model=ActivityRecord)
async def finish_session(
    session_id: str,
    request: SaveRequest = SaveRequest(),
    service: TrackingService = Depends(get_tracking_service)
):
    """
    Stop and save the run.

    Runs shorter than 2 minutes or with fewer than 2 points are rejected
    with 422; a live session is left running in that case.
    """
    try:
        record = await service.finish(session_id, name=request.name)
    except SessionValidationError as e:
        logger.info(f"Save rejected for {session_id}: {e}")
        _raise_http(e)
    except TrackingError as e:
        _raise_http(e)
    return record


@router.delete("/{session_id}", status_code=204)
async def abandon_session(
    session_id: str,
    service: TrackingService = Depends(get_tracking_service)
):
    """Discard a session without saving."""
    try:
        service.discard(session_id)
    except TrackingError as e:
        _raise_http(e)
    return Response(status_code=204)
