"""
Formatting utilities for display.

Used by the live session read model and the activity summary.
"""

# Pace value meaning "too slow to matter" (59:59 per km)
PACE_SENTINEL_SEC_KM = 3599


def format_elapsed(seconds: int) -> str:
    """
    Format elapsed seconds as a stopwatch.

    Args:
        seconds: Elapsed time in seconds

    Returns:
        'MM:SS' under an hour, 'H:MM:SS' otherwise
    """
    if seconds < 0:
        return "—"

    h = seconds // 3600
    m = (seconds % 3600) // 60
    s = seconds % 60

    if h > 0:
        return f"{h}:{m:02d}:{s:02d}"
    return f"{m:02d}:{s:02d}"


def format_pace(pace_sec_km: float | None) -> str:
    """
    Format pace as 'M:SS /km'.

    Args:
        pace_sec_km: Pace in seconds per km (0 = stopped)

    Returns:
        Formatted string (e.g., '5:30 /km'), '—' when stopped or unknown
    """
    if not pace_sec_km or pace_sec_km <= 0:
        return "—"
    if pace_sec_km >= PACE_SENTINEL_SEC_KM:
        return "59:59 /km"

    total = int(round(pace_sec_km))
    minutes = total // 60
    seconds = total % 60

    return f"{minutes}:{seconds:02d} /km"


def format_distance_km(meters: float) -> str:
    """
    Format distance.

    Args:
        meters: Distance in meters

    Returns:
        Formatted string (e.g., '12.50 km' or '850 m')
    """
    if meters < 1000:
        return f"{int(meters)} m"
    return f"{meters / 1000:.2f} km"
