"""Tests for GPS sampling, signal quality and landing detection in gps.py"""

import datetime

import pydantic
import pytest

from aerocheck.flight_data import GPSFix, GPSSignalStatus
from aerocheck.gps import GPSEventDetector, LandingDetector, PointSampler, SignalQualityMonitor

from conftest import T0

GOOD = GPSSignalStatus.GOOD
DEGRADED = GPSSignalStatus.DEGRADED
LOST = GPSSignalStatus.LOST


def at(seconds: float) -> datetime.datetime:
    return T0 + datetime.timedelta(seconds=seconds)


def make_fix(seconds: float = 0.0, speed: float = 30.0, accuracy: float = 5.0) -> GPSFix:
    return GPSFix(
        latitude=48.6,
        longitude=2.3,
        altitude=120.0,
        timestamp=at(seconds),
        speed=speed,
        course=270.0,
        horizontal_accuracy=accuracy,
    )


class TestPointSampler:
    """Tests for interval-based point retention."""

    def test_first_point_and_after_interval(self):
        """With a 5 s interval, fixes at 1..6 s keep only 1 s and 6 s."""
        sampler = PointSampler(interval=5.0)
        kept = [t for t in range(1, 7) if sampler.offer(at(t))]
        assert kept == [1, 6]

    def test_exact_interval_is_kept(self):
        """A fix exactly one interval later is retained."""
        sampler = PointSampler(interval=2.0)
        assert sampler.offer(at(0))
        assert sampler.offer(at(2))

    def test_reset_forgets_last_point(self):
        """After reset the next fix is always kept."""
        sampler = PointSampler(interval=5.0)
        sampler.offer(at(0))
        sampler.reset()
        assert sampler.offer(at(1))


class TestSignalQuality:
    """Tests for the GOOD / DEGRADED / LOST state machine."""

    def test_fix_requires_accuracy(self):
        """A fix without a horizontal accuracy is rejected, not taken as perfect."""
        with pytest.raises(pydantic.ValidationError):
            GPSFix(latitude=48.6, longitude=2.3, altitude=120.0, timestamp=T0)

    @pytest.fixture
    def monitor(self, clock):
        monitor = SignalQualityMonitor(clock)
        monitor.start()
        return monitor

    def test_inaccurate_fix_then_silence_stays_degraded(self, monitor, clock):
        """A 200 m fix degrades; 3 s of silence is not yet LOST."""
        assert monitor.on_fix(200.0) is DEGRADED
        for _ in range(3):
            clock.advance(1.0)
            assert monitor.tick() is DEGRADED

    def test_long_silence_is_lost(self, monitor, clock):
        """11 s without fixes from GOOD is LOST."""
        monitor.on_fix(5.0)
        statuses = []
        for _ in range(11):
            clock.advance(1.0)
            statuses.append(monitor.tick())
        assert statuses[0] is GOOD
        assert statuses[2] is DEGRADED
        assert statuses[-1] is LOST

    def test_accurate_fix_restores_good(self, monitor, clock):
        """One accurate fix after LOST restores GOOD."""
        clock.advance(11.0)
        assert monitor.tick() is LOST
        assert monitor.on_fix(10.0) is GOOD

    def test_inaccurate_fix_does_not_clear_lost(self, monitor, clock):
        """A noisy fix does not move LOST to DEGRADED."""
        clock.advance(11.0)
        monitor.tick()
        assert monitor.on_fix(500.0) is LOST

    def test_invalid_accuracy_degrades(self, monitor):
        """Negative accuracy is treated as invalid."""
        assert monitor.on_fix(-1.0) is DEGRADED

    def test_threshold_is_inclusive(self, monitor):
        """Exactly 50 m is still GOOD."""
        assert monitor.on_fix(50.0) is GOOD

    def test_tick_never_upgrades(self, monitor, clock):
        """A fresh tick does not turn DEGRADED back into GOOD."""
        monitor.on_fix(80.0)
        clock.advance(0.5)
        assert monitor.tick() is DEGRADED

    def test_staleness_counts_from_last_fix_of_any_kind(self, monitor, clock):
        """Noisy fixes keep the signal from being declared lost."""
        for _ in range(20):
            clock.advance(1.0)
            monitor.on_fix(100.0)
            assert monitor.tick() is DEGRADED


class TestLandingDetector:
    """Tests for debounced low-speed landing detection."""

    def test_interrupted_run_restarts_count(self):
        """1, 1, 3, 1, 1, 1 m/s triggers once, on the last fix."""
        detector = LandingDetector()
        results = [detector.on_fix(speed, gate_open=True) for speed in [1, 1, 3, 1, 1, 1]]
        assert results == [False, False, False, False, False, True]

    def test_fires_only_once(self):
        """Further slow fixes after detection are ignored."""
        detector = LandingDetector()
        results = [detector.on_fix(0.5, gate_open=True) for _ in range(6)]
        assert results.count(True) == 1

    def test_negative_speed_resets(self):
        """Invalid (negative) speed breaks the run."""
        detector = LandingDetector()
        results = [detector.on_fix(speed, gate_open=True) for speed in [1, 1, -1, 1, 1]]
        assert not any(results)

    def test_threshold_is_exclusive(self):
        """2.0 m/s is not slow."""
        detector = LandingDetector()
        results = [detector.on_fix(2.0, gate_open=True) for _ in range(5)]
        assert not any(results)
        assert detector.low_speed_count == 0

    def test_closed_gate_resets_count(self):
        """A fix seen while the gate is closed restarts the run."""
        detector = LandingDetector()
        detector.on_fix(1.0, gate_open=True)
        detector.on_fix(1.0, gate_open=True)
        detector.on_fix(1.0, gate_open=False)
        assert detector.on_fix(1.0, gate_open=True) is False
        assert detector.low_speed_count == 1

    def test_reset_rearms(self):
        """reset() allows a new detection."""
        detector = LandingDetector()
        for _ in range(3):
            detector.on_fix(1.0, gate_open=True)
        detector.reset()
        results = [detector.on_fix(1.0, gate_open=True) for _ in range(3)]
        assert results[-1] is True


class TestGPSEventDetector:
    """Tests for the composite detector."""

    def test_every_fix_feeds_signal_and_landing(self, clock):
        """Sampled-away fixes still count toward landing detection."""
        detector = GPSEventDetector(interval=30.0, clock=clock)
        detector.start()

        outcomes = [
            detector.process(make_fix(t, speed=1.0), landing_gate_open=True) for t in range(3)
        ]

        assert outcomes[0].point is not None
        assert outcomes[1].point is None
        assert outcomes[2].point is None
        assert outcomes[2].landing_detected
        assert detector.last_fix == make_fix(2, speed=1.0)

    def test_retained_point_copies_fix(self, clock):
        """Retained points carry the fix position, time, speed and course."""
        detector = GPSEventDetector(interval=5.0, clock=clock)
        detector.start()
        outcome = detector.process(make_fix(1.0), landing_gate_open=False)

        point = outcome.point
        assert point.latitude == 48.6
        assert point.timestamp == at(1.0)
        assert point.speed == 30.0
        assert point.course == 270.0
        assert outcome.signal_status is GOOD
