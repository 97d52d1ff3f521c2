"""
Step Cadence Detector

Peak-threshold footstrike detection on accelerometer magnitude.
Not a bandpass/FFT pipeline; cadence is a secondary metric.
"""

import math
from collections import deque
from typing import Deque, Optional

from ..config import TrackingConfig
from ..models import MotionSample


class StepCadenceDetector:
    """Counts steps and derives cadence from a 5 s window of step times."""

    def __init__(self, config: Optional[TrackingConfig] = None):
        self.config = config or TrackingConfig()
        self._steps: Deque[int] = deque()
        self._last_step_ms: Optional[int] = None
        self.step_count: int = 0
        self.cadence_spm: int = 0

    def reset(self) -> None:
        self._steps.clear()
        self._last_step_ms = None
        self.step_count = 0
        self.cadence_spm = 0

    def on_motion_sample(self, sample: MotionSample) -> bool:
        """
        Feed one accelerometer reading.

        Returns:
            True if the reading registered a step
        """
        if sample.x is None or sample.y is None or sample.z is None:
            return False

        cfg = self.config
        magnitude = math.sqrt(sample.x ** 2 + sample.y ** 2 + sample.z ** 2)
        if magnitude <= cfg.step_threshold_ms2:
            return False

        now = sample.timestamp_ms
        if (
            self._last_step_ms is not None
            and now - self._last_step_ms < cfg.step_min_interval_ms
        ):
            return False

        self._last_step_ms = now
        self.step_count += 1
        self._steps.append(now)

        cutoff = now - cfg.cadence_window_ms
        while self._steps and self._steps[0] <= cutoff:
            self._steps.popleft()

        cadence = len(self._steps) * cfg.cadence_window_multiplier
        self.cadence_spm = cadence if cadence > cfg.cadence_noise_floor_spm else 0

        return True
