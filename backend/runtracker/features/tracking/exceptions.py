"""
Tracking errors.

Sensor-level problems (permission, availability, signal loss) are also
recorded as SessionIssue entries on the live session; the exceptions here
are what callers see when an operation cannot proceed.
"""


class TrackingError(Exception):
    """Base class for tracking engine errors."""


class PermissionDeniedError(TrackingError):
    """Motion sensor access was refused by the platform."""


class PositionUnavailableError(TrackingError):
    """The platform lacks or denies location capability."""


class SessionStateError(TrackingError):
    """Operation is not allowed in the session's current lifecycle phase."""


class SessionNotFoundError(TrackingError):
    """No live session with the given id."""


class SessionValidationError(TrackingError):
    """Finished session does not meet the minimum save policy."""

    def __init__(self, message: str, reasons: list[str] | None = None):
        super().__init__(message)
        self.reasons = reasons or []
