"""
Shared test fixtures.

Synthetic tracks run due north from a fixed origin, so every leg length
is known exactly.
"""

import math

import pytest

from runtracker.features.tracking import GeoSample, MotionSample
from runtracker.shared.geo import EARTH_RADIUS_M, haversine_m

# Almaty
ORIGIN_LAT = 43.238949
ORIGIN_LON = 76.945465


def offset_north_m(lat: float, lon: float, meters: float) -> tuple[float, float]:
    """Move a point due north along its meridian."""
    delta_lat = math.degrees(meters / EARTH_RADIUS_M)
    return lat + delta_lat, lon


def path_length_m(points) -> float:
    """Sum of consecutive great-circle legs over (lat, lon) pairs."""
    total = 0.0
    previous = None
    for lat, lon in points:
        if previous is not None:
            total += haversine_m(previous[0], previous[1], lat, lon)
        previous = (lat, lon)
    return total


def make_fix(
    meters_north: float,
    t_ms: int,
    accuracy_m: float | None = 5.0,
    altitude: float | None = None
) -> GeoSample:
    """Fix `meters_north` from the origin at time `t_ms`."""
    lat, lon = offset_north_m(ORIGIN_LAT, ORIGIN_LON, meters_north)
    return GeoSample(
        latitude=lat,
        longitude=lon,
        timestamp_ms=t_ms,
        altitude=altitude,
        accuracy_m=accuracy_m,
    )


def make_track(
    count: int,
    speed_mps: float,
    start_m: float = 0.0,
    start_ms: int = 0,
    interval_ms: int = 1000,
    accuracy_m: float | None = 5.0
) -> list[GeoSample]:
    """Evenly spaced fixes at constant speed."""
    step_m = speed_mps * interval_ms / 1000
    return [
        make_fix(start_m + i * step_m, start_ms + i * interval_ms, accuracy_m)
        for i in range(count)
    ]


def make_steps(
    count: int,
    start_ms: int = 0,
    interval_ms: int = 250,
    magnitude: float = 15.0
) -> list[MotionSample]:
    """Vertical acceleration peaks at a fixed interval."""
    return [
        MotionSample(x=0.0, y=0.0, z=magnitude, timestamp_ms=start_ms + i * interval_ms)
        for i in range(count)
    ]


@pytest.fixture
def fix():
    return make_fix


@pytest.fixture
def track():
    return make_track


@pytest.fixture
def steps():
    return make_steps
