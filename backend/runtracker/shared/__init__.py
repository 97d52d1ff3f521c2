"""
Shared utilities (NOT business logic).

Usage:
    from runtracker.shared import haversine_m
    from runtracker.shared.formatters import format_pace
"""
from .geo import (
    haversine_m,
    EARTH_RADIUS_M,
)
from .formatters import (
    format_elapsed,
    format_pace,
    format_distance_km,
    PACE_SENTINEL_SEC_KM,
)

__all__ = [
    # geo
    "haversine_m",
    "EARTH_RADIUS_M",
    # formatters
    "format_elapsed",
    "format_pace",
    "format_distance_km",
    "PACE_SENTINEL_SEC_KM",
]
