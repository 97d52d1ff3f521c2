"""
Tracking calculators.

Components:
- GeoSampleFilter: Noise and plausibility filter for location fixes
- DistanceAccumulator: Running distance and path
- PaceEstimator: Recency-weighted smoothed pace
- StepCadenceDetector: Footstrike peaks -> steps and cadence
- estimate_calories: Distance and mass -> kcal
"""

from .geo_filter import GeoSampleFilter, FilterResult
from .distance import DistanceAccumulator
from .pace import PaceEstimator, average_pace
from .cadence import StepCadenceDetector
from .calories import estimate_calories

__all__ = [
    # Filter
    "GeoSampleFilter",
    "FilterResult",
    # Distance
    "DistanceAccumulator",
    # Pace
    "PaceEstimator",
    "average_pace",
    # Cadence
    "StepCadenceDetector",
    # Calories
    "estimate_calories",
]
