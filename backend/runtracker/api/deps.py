"""
API dependencies.

The tracking service lives for the whole process; live sessions are held
in memory by it.
"""

from runtracker.config import settings
from runtracker.features.tracking import (
    InMemoryActivityStore,
    TrackingConfig,
    TrackingService,
)


# Global service instance
tracking_service = TrackingService(
    InMemoryActivityStore(),
    config=TrackingConfig.from_settings(settings),
    default_runner_mass_kg=settings.default_runner_mass_kg,
)


def get_tracking_service() -> TrackingService:
    """Dependency for getting the tracking service."""
    return tracking_service
