"""GPS event detection.

Every fix from the location service goes through three independent steps:

1. Signal quality.  Noisy fixes (invalid or > 50 m horizontal accuracy) degrade
   the status; a periodic tick degrades it after 2.5 s without fixes and
   declares it lost after 10 s.  Only an accurate fix restores GOOD.

2. Automatic landing.  While the landing gate is open (AFTER_LANDING phase, no
   landing recorded yet) three consecutive fixes in [0, 2.0) m/s mean the
   aircraft has rolled out.  Any other fix, or any fix arriving while the gate
   is closed, restarts the count.  Detection fires at most once.

3. Retention.  A fix is kept in the track when it is the first one or when
   at least the recording interval has passed since the last kept point.

Steps 1 and 2 see every fix; only retention is sampled.
"""

from __future__ import annotations

import datetime
import logging
from typing import NamedTuple

from aerocheck.config import config
from aerocheck.events import Clock
from aerocheck.flight_data import GPSFix, GPSPoint, GPSSignalStatus, utc_now

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Retention
# ---------------------------------------------------------------------------


class PointSampler:
    def __init__(self, interval: float):
        self.interval = interval
        self.last_retained: datetime.datetime | None = None

    def offer(self, timestamp: datetime.datetime) -> bool:
        """Return True (and remember *timestamp*) if the fix should be kept."""
        if self.last_retained is not None:
            elapsed = (timestamp - self.last_retained).total_seconds()
            if elapsed < self.interval:
                return False
        self.last_retained = timestamp
        return True

    def reset(self) -> None:
        self.last_retained = None


# ---------------------------------------------------------------------------
# Signal quality
# ---------------------------------------------------------------------------


class SignalQualityMonitor:
    """Classifies the GPS signal from fix accuracy and fix staleness.

    Times are taken from *clock* when a fix arrives or a tick fires, not from
    the fix's own timestamp.
    """

    def __init__(
        self,
        clock: Clock = utc_now,
        accuracy_threshold: float | None = None,
        degraded_after: float | None = None,
        lost_after: float | None = None,
    ):
        self._clock = clock
        self.accuracy_threshold = (
            config.HORIZONTAL_ACCURACY_THRESHOLD
            if accuracy_threshold is None
            else accuracy_threshold
        )
        self.degraded_after = (
            config.SIGNAL_DEGRADED_AFTER if degraded_after is None else degraded_after
        )
        self.lost_after = config.SIGNAL_LOST_AFTER if lost_after is None else lost_after

        self.status = GPSSignalStatus.GOOD
        self.last_fix_time: datetime.datetime | None = None
        self.last_fresh_time: datetime.datetime | None = None

    def start(self) -> None:
        """Begin monitoring; staleness is measured from now until the first fix."""
        now = self._clock()
        self.last_fix_time = now
        self.last_fresh_time = now
        self._set_status(GPSSignalStatus.GOOD)

    def on_fix(self, horizontal_accuracy: float) -> GPSSignalStatus:
        now = self._clock()
        self.last_fix_time = now

        if horizontal_accuracy < 0 or horizontal_accuracy > self.accuracy_threshold:
            if self.status is not GPSSignalStatus.LOST:
                self._set_status(GPSSignalStatus.DEGRADED)
        else:
            self.last_fresh_time = now
            self._set_status(GPSSignalStatus.GOOD)
        return self.status

    def tick(self) -> GPSSignalStatus:
        if self.last_fix_time is None:
            return self.status

        elapsed = (self._clock() - self.last_fix_time).total_seconds()
        if elapsed >= self.lost_after:
            self._set_status(GPSSignalStatus.LOST)
        elif elapsed >= self.degraded_after and self.status is GPSSignalStatus.GOOD:
            self._set_status(GPSSignalStatus.DEGRADED)
        return self.status

    def _set_status(self, status: GPSSignalStatus) -> None:
        if status is not self.status:
            logger.info(f"GPS signal: {self.status} -> {status}")
        self.status = status


# ---------------------------------------------------------------------------
# Landing detection
# ---------------------------------------------------------------------------


class LandingDetector:
    def __init__(
        self,
        speed_threshold: float | None = None,
        required_readings: int | None = None,
    ):
        self.speed_threshold = (
            config.LOW_SPEED_THRESHOLD if speed_threshold is None else speed_threshold
        )
        self.required_readings = (
            config.REQUIRED_LOW_SPEED_READINGS
            if required_readings is None
            else required_readings
        )
        self.low_speed_count = 0
        self.detected = False

    def on_fix(self, speed: float, gate_open: bool) -> bool:
        """Feed one fix; returns True exactly once, on the fix that confirms landing."""
        if self.detected:
            return False
        if not gate_open:
            self.low_speed_count = 0
            return False

        if 0 <= speed < self.speed_threshold:
            self.low_speed_count += 1
        else:
            self.low_speed_count = 0

        if self.low_speed_count >= self.required_readings:
            self.detected = True
            logger.info(
                f"Landing detected after {self.low_speed_count} fixes "
                f"below {self.speed_threshold} m/s"
            )
            return True
        return False

    def reset(self) -> None:
        self.low_speed_count = 0
        self.detected = False


# ---------------------------------------------------------------------------
# Composite
# ---------------------------------------------------------------------------


class FixOutcome(NamedTuple):
    point: GPSPoint | None
    """The retained track point, or None when the fix was sampled away."""
    landing_detected: bool
    signal_status: GPSSignalStatus


class GPSEventDetector:
    def __init__(self, interval: float, clock: Clock = utc_now):
        self.sampler = PointSampler(interval)
        self.signal = SignalQualityMonitor(clock)
        self.landing = LandingDetector()
        self.last_fix: GPSFix | None = None

    def start(self) -> None:
        self.sampler.reset()
        self.landing.reset()
        self.signal.start()
        self.last_fix = None

    def process(self, fix: GPSFix, landing_gate_open: bool) -> FixOutcome:
        self.last_fix = fix
        status = self.signal.on_fix(fix.horizontal_accuracy)
        landed = self.landing.on_fix(fix.speed, landing_gate_open)

        point = None
        if self.sampler.offer(fix.timestamp):
            point = GPSPoint.from_fix(fix)
        return FixOutcome(point, landed, status)

    def tick(self) -> GPSSignalStatus:
        return self.signal.tick()
