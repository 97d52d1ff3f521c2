"""
Real-time activity tracking module.

Usage:
    from runtracker.features.tracking import SessionController, TrackingService
    from runtracker.features.tracking.calculators import GeoSampleFilter

Components:
- SessionController: Lifecycle state machine, sole owner of session state
- TrackingService: Live session registry and finish/save boundary
- Sensor sources: Push sources, tickers and subscription handles
- build_gpx: GPX export of the recorded path
"""

from .config import TrackingConfig
from .controller import SessionController
from .exceptions import (
    TrackingError,
    PermissionDeniedError,
    PositionUnavailableError,
    SessionStateError,
    SessionNotFoundError,
    SessionValidationError,
)
from .gpx_export import build_gpx
from .models import (
    GeoSample,
    MotionSample,
    LifecyclePhase,
    FilterVerdict,
    IssueKind,
    SessionIssue,
    RunSummary,
    SessionSnapshot,
    SessionState,
)
from .service import (
    TrackingService,
    LiveSession,
    ActivityStore,
    InMemoryActivityStore,
    validate_for_save,
    activity_title,
    build_activity_record,
)
from .sources import (
    SensorHandle,
    PositionError,
    PushPositionSource,
    PushMotionSource,
    IntervalTicker,
    ManualTicker,
    StaticPermissionGate,
)

__all__ = [
    # Config
    "TrackingConfig",
    # Controller
    "SessionController",
    # Errors
    "TrackingError",
    "PermissionDeniedError",
    "PositionUnavailableError",
    "SessionStateError",
    "SessionNotFoundError",
    "SessionValidationError",
    # Export
    "build_gpx",
    # Models
    "GeoSample",
    "MotionSample",
    "LifecyclePhase",
    "FilterVerdict",
    "IssueKind",
    "SessionIssue",
    "RunSummary",
    "SessionSnapshot",
    "SessionState",
    # Service
    "TrackingService",
    "LiveSession",
    "ActivityStore",
    "InMemoryActivityStore",
    "validate_for_save",
    "activity_title",
    "build_activity_record",
    # Sources
    "SensorHandle",
    "PositionError",
    "PushPositionSource",
    "PushMotionSource",
    "IntervalTicker",
    "ManualTicker",
    "StaticPermissionGate",
]
