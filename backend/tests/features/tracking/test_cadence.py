"""
Tests for StepCadenceDetector.

Peak threshold 12.5 m/s^2, 250 ms debounce, 5 s window, x12 to per-minute.
"""

import pytest

from runtracker.features.tracking import MotionSample, TrackingConfig
from runtracker.features.tracking.calculators import StepCadenceDetector

from conftest import make_steps


@pytest.fixture
def detector():
    return StepCadenceDetector()


def feed(detector, samples):
    for sample in samples:
        detector.on_motion_sample(sample)


class TestStepDetection:

    def test_eight_peaks_in_window(self, detector):
        """8 peaks 250 ms apart -> 8 steps, 8 * 12 = 96 spm."""
        feed(detector, make_steps(8))

        assert detector.step_count == 8
        assert detector.cadence_spm == 96

    def test_below_threshold_ignored(self, detector):
        feed(detector, make_steps(8, magnitude=9.8))

        assert detector.step_count == 0
        assert detector.cadence_spm == 0

    def test_threshold_is_exclusive(self, detector):
        feed(detector, make_steps(8, magnitude=12.5))
        assert detector.step_count == 0

    def test_magnitude_uses_all_axes(self, detector):
        """(8, 8, 8) has magnitude 13.86."""
        assert detector.on_motion_sample(MotionSample(8.0, 8.0, 8.0, 0)) is True

    def test_debounce(self, detector):
        """Peaks 100 ms apart count once per 250 ms."""
        results = [
            detector.on_motion_sample(s)
            for s in make_steps(7, interval_ms=100)
        ]

        # 0, 300 and 600 ms clear the debounce
        assert results == [True, False, False, True, False, False, True]
        assert detector.step_count == 3

    def test_missing_axis_ignored(self, detector):
        sample = MotionSample(x=None, y=20.0, z=20.0, timestamp_ms=0)

        assert detector.on_motion_sample(sample) is False
        assert detector.step_count == 0


class TestCadence:

    def test_noise_floor(self, detector):
        """3 steps -> 36 spm, below walking cadence -> 0."""
        feed(detector, make_steps(3))

        assert detector.step_count == 3
        assert detector.cadence_spm == 0

    def test_just_above_floor(self, detector):
        feed(detector, make_steps(4))
        assert detector.cadence_spm == 48

    def test_old_steps_evicted(self, detector):
        feed(detector, make_steps(8))
        detector.on_motion_sample(MotionSample(0.0, 0.0, 15.0, 10_000))

        assert detector.step_count == 9
        assert detector.cadence_spm == 0

    def test_max_cadence(self, detector):
        """A step every 250 ms for 10 s saturates at 240 spm."""
        feed(detector, make_steps(41))
        assert detector.cadence_spm == 240

    def test_realistic_run(self, detector):
        """~170 spm: a step every 353 ms."""
        feed(detector, make_steps(60, interval_ms=353))
        # 5 s window holds 15 steps
        assert detector.cadence_spm == 180
        assert detector.step_count == 60

    def test_reset(self, detector):
        feed(detector, make_steps(8))
        detector.reset()

        assert detector.step_count == 0
        assert detector.cadence_spm == 0
        assert detector.on_motion_sample(MotionSample(0.0, 0.0, 15.0, 0)) is True

    def test_custom_threshold(self):
        detector = StepCadenceDetector(TrackingConfig(step_threshold_ms2=10.0))
        feed(detector, make_steps(8, magnitude=11.0))
        assert detector.step_count == 8
