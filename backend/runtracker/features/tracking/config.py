"""
Tracking heuristics.

Empirically tuned thresholds for GPS noise rejection, pace smoothing and
step detection. Gathered here so they can be adjusted without touching
control flow.
"""

from dataclasses import dataclass

from runtracker.shared.formatters import PACE_SENTINEL_SEC_KM


# ==========================================================================
# GeoSampleFilter
# ==========================================================================
# Fixes worse than this are dropped (tree cover, urban canyon)
MAX_ACCURACY_M = 25.0

# Stationary jitter: a fix must move this far OR this fast to count
MIN_MOVE_DISTANCE_M = 3.0
MIN_MOVE_SPEED_MPS = 0.6

# Teleport cap (~43 km/h), catches fix recovery after a tunnel
MAX_SPEED_MPS = 12.0

# Rejections this small are treated as "standing still"
NEAR_STATIONARY_DISTANCE_M = 1.0
NEAR_STATIONARY_SPEED_MPS = 0.3

# ==========================================================================
# PaceEstimator
# ==========================================================================
PACE_WINDOW_MS = 30_000
PACE_MIN_SAMPLES = 3

# Per-segment spike cap inside the window
PACE_SEGMENT_MAX_SPEED_MPS = 15.0

# Human running bounds for the weighted mean speed
PACE_MIN_SPEED_MPS = 0.5
PACE_MAX_SPEED_MPS = 10.0

# Exponential smoothing: new = old * KEEP + computed * BLEND
PACE_SMOOTHING_KEEP = 0.8
PACE_SMOOTHING_BLEND = 0.2

# Near-stationary decay toward "slow"
PACE_DECAY_FACTOR = 1.2
PACE_CAP_SEC_KM = float(PACE_SENTINEL_SEC_KM)

# ==========================================================================
# StepCadenceDetector
# ==========================================================================
# Gravity is ~9.8, a footstrike peaks well above it
STEP_THRESHOLD_MS2 = 12.5

# Debounce, caps detectable cadence at 240 spm
STEP_MIN_INTERVAL_MS = 250

CADENCE_WINDOW_MS = 5_000
CADENCE_WINDOW_MULTIPLIER = 12  # 5 s count -> per minute

# Below realistic walking cadence
CADENCE_NOISE_FLOOR_SPM = 40

# ==========================================================================
# CalorieEstimator
# ==========================================================================
KCAL_PER_KG_PER_KM = 1.036

# ==========================================================================
# Save policy
# ==========================================================================
MIN_SAVE_DURATION_SECONDS = 120
MIN_SAVE_PATH_POINTS = 2

# ==========================================================================
# Diagnostics
# ==========================================================================
REJECTION_LOG_SIZE = 50
ISSUE_LOG_SIZE = 20


@dataclass(frozen=True)
class TrackingConfig:
    """Configuration for one tracking session."""

    max_accuracy_m: float = MAX_ACCURACY_M
    min_move_distance_m: float = MIN_MOVE_DISTANCE_M
    min_move_speed_mps: float = MIN_MOVE_SPEED_MPS
    max_speed_mps: float = MAX_SPEED_MPS
    near_stationary_distance_m: float = NEAR_STATIONARY_DISTANCE_M
    near_stationary_speed_mps: float = NEAR_STATIONARY_SPEED_MPS

    pace_window_ms: int = PACE_WINDOW_MS
    pace_min_samples: int = PACE_MIN_SAMPLES
    pace_segment_max_speed_mps: float = PACE_SEGMENT_MAX_SPEED_MPS
    pace_min_speed_mps: float = PACE_MIN_SPEED_MPS
    pace_max_speed_mps: float = PACE_MAX_SPEED_MPS
    pace_smoothing_keep: float = PACE_SMOOTHING_KEEP
    pace_smoothing_blend: float = PACE_SMOOTHING_BLEND
    pace_decay_factor: float = PACE_DECAY_FACTOR
    pace_cap_sec_km: float = PACE_CAP_SEC_KM

    step_threshold_ms2: float = STEP_THRESHOLD_MS2
    step_min_interval_ms: int = STEP_MIN_INTERVAL_MS
    cadence_window_ms: int = CADENCE_WINDOW_MS
    cadence_window_multiplier: int = CADENCE_WINDOW_MULTIPLIER
    cadence_noise_floor_spm: int = CADENCE_NOISE_FLOOR_SPM

    kcal_per_kg_per_km: float = KCAL_PER_KG_PER_KM

    tick_interval_seconds: float = 1.0
    rejection_log_size: int = REJECTION_LOG_SIZE
    issue_log_size: int = ISSUE_LOG_SIZE
    min_save_duration_seconds: int = MIN_SAVE_DURATION_SECONDS
    min_save_path_points: int = MIN_SAVE_PATH_POINTS

    @classmethod
    def from_settings(cls, settings) -> "TrackingConfig":
        """Apply the deployment-level overrides from application settings."""
        return cls(
            tick_interval_seconds=settings.tick_interval_seconds,
            rejection_log_size=settings.rejection_log_size,
            min_save_duration_seconds=settings.min_save_duration_seconds,
            min_save_path_points=settings.min_save_path_points,
        )
