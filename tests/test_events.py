"""Tests for milestone timestamps in events.py"""

import datetime
import logging

import pytest

from aerocheck.events import EventTimestampTracker
from aerocheck.flight_data import MilestoneEvent

from conftest import T0

TWO_MINUTES = datetime.timedelta(seconds=120)


@pytest.fixture
def tracker(clock):
    return EventTimestampTracker(clock)


class TestRecording:
    """Each record operation stores the invocation time, with fixed offsets."""

    def test_starts_empty(self, tracker):
        """No milestone is recorded initially."""
        assert all(value is None for value in tracker.milestones.values())

    def test_engine_start_is_now(self, tracker):
        """Engine start is stored as the invocation time."""
        assert tracker.record_engine_start() == T0
        assert tracker.engine_start_time == T0

    def test_line_up_is_two_minutes_later(self, tracker):
        """Line-up is stored 120 s after the invocation time."""
        tracker.record_line_up()
        assert tracker.line_up_time == T0 + TWO_MINUTES

    def test_landing_is_now(self, tracker):
        """A manual landing is stored as the invocation time."""
        tracker.record_landing()
        assert tracker.landing_time == T0

    def test_auto_landing_is_two_minutes_earlier(self, tracker):
        """A detected landing is backdated by 120 s."""
        tracker.record_auto_landing()
        assert tracker.landing_time == T0 - TWO_MINUTES

    def test_engine_shutdown_is_now(self, tracker):
        """Engine shutdown is stored as the invocation time."""
        tracker.record_engine_shutdown()
        assert tracker.engine_shutdown_time == T0

    def test_second_record_overwrites(self, tracker, clock):
        """Recording again replaces the stored value."""
        tracker.record_engine_start()
        later = clock.advance(300)
        tracker.record_engine_start()
        assert tracker.get(MilestoneEvent.ENGINE_START) == later

    def test_record_by_event_applies_offset(self, tracker):
        """record(event) goes through the dedicated operation."""
        tracker.record(MilestoneEvent.LINE_UP)
        assert tracker.line_up_time == T0 + TWO_MINUTES

    def test_reset_clears_everything(self, tracker):
        """reset() forgets all milestones."""
        tracker.record_engine_start()
        tracker.record_landing()
        tracker.reset()
        assert not any(tracker.is_recorded(event) for event in MilestoneEvent)


class TestChronology:
    """Out-of-order milestones are accepted but reported."""

    def test_in_order_has_no_issues(self, tracker, clock):
        """Milestones in flight order are fine."""
        tracker.record_engine_start()
        clock.advance(600)
        tracker.record_line_up()
        clock.advance(3600)
        tracker.record_landing()
        assert tracker.chronology_issues() == []

    def test_landing_before_engine_start_is_kept_and_reported(self, tracker, clock, caplog):
        """Landing before engine start is stored, flagged and logged."""
        clock.advance(600)
        tracker.record_engine_start()
        clock.advance(-300)
        with caplog.at_level(logging.WARNING, logger="aerocheck.events"):
            tracker.record_landing()

        assert tracker.landing_time == T0 + datetime.timedelta(seconds=300)
        assert tracker.chronology_issues() == [
            (MilestoneEvent.ENGINE_START, MilestoneEvent.LANDING)
        ]
        assert "before" in caplog.text
