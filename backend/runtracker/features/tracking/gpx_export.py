"""
GPX export of a recorded path.

Produces the GPX 1.1 document handed to third-party upload.
"""

import logging
from datetime import datetime, timezone
from typing import Optional, Sequence

import gpxpy
import gpxpy.gpx

from .models import GeoSample

logger = logging.getLogger(__name__)

GPX_CREATOR = "Run Tracker"


def _to_datetime(timestamp_ms: int) -> datetime:
    return datetime.fromtimestamp(timestamp_ms / 1000, tz=timezone.utc)


def build_gpx(
    path: Sequence[GeoSample],
    name: str = "Run Tracker Activity",
    started_at: Optional[datetime] = None
) -> str:
    """
    Build a single-track GPX document.

    Args:
        path: Accepted fixes in travel order
        name: Activity name for metadata and track
        started_at: Metadata time; defaults to the first fix, else now

    Returns:
        GPX XML as string
    """
    gpx = gpxpy.gpx.GPX()
    gpx.creator = GPX_CREATOR
    gpx.name = name

    if started_at is not None:
        gpx.time = started_at
    elif path:
        gpx.time = _to_datetime(path[0].timestamp_ms)
    else:
        gpx.time = datetime.now(timezone.utc)

    track = gpxpy.gpx.GPXTrack(name=name)
    segment = gpxpy.gpx.GPXTrackSegment()
    track.segments.append(segment)
    gpx.tracks.append(track)

    for sample in path:
        segment.points.append(gpxpy.gpx.GPXTrackPoint(
            latitude=sample.latitude,
            longitude=sample.longitude,
            elevation=sample.altitude,
            time=_to_datetime(sample.timestamp_ms),
        ))

    logger.debug(f"Built GPX '{name}' with {len(path)} points")
    return gpx.to_xml(version="1.1")
