"""
Distance Accumulator

Integrates accepted fixes into the session's running distance and path.
The total is a running sum, never recomputed from the full path.
"""

from ..models import GeoSample, SessionState


class DistanceAccumulator:
    """Incremental distance/path integration, O(1) per accepted fix."""

    @staticmethod
    def accumulate(
        state: SessionState,
        sample: GeoSample,
        segment_distance_m: float
    ) -> float:
        """
        Append an accepted fix and add its leg to the total.

        Args:
            state: Session aggregate (owned by the caller)
            sample: Fix that passed the filter
            segment_distance_m: Leg length from the previous accepted fix
                                (0 for the path origin)

        Returns:
            New cumulative distance in meters

        Raises:
            ValueError: If the leg is negative
        """
        if segment_distance_m < 0:
            raise ValueError(f"Negative segment distance: {segment_distance_m}")

        state.distance_m += segment_distance_m
        state.path.append(sample)
        state.last_accepted = sample

        return state.distance_m
