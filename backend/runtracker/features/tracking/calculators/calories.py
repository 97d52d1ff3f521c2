"""
Calorie estimate for running.

Net running cost is close to 1 kcal per kg per km; the factor below is
the MET-derived constant used across the app.
"""

import math

from ..config import KCAL_PER_KG_PER_KM


def estimate_calories(
    distance_m: float,
    runner_mass_kg: float,
    kcal_per_kg_per_km: float = KCAL_PER_KG_PER_KM
) -> int:
    """
    Estimate energy spent over a distance.

    Formula: kcal = km * kg * 1.036, floored

    Args:
        distance_m: Cumulative distance in meters
        runner_mass_kg: Runner body mass
        kcal_per_kg_per_km: Cost factor

    Returns:
        Kilocalories as an integer
    """
    return math.floor((distance_m / 1000) * runner_mass_kg * kcal_per_kg_per_km)
