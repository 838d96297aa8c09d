"""The flight recorder: the single owner of all in-flight state.

``FlightRecorder`` ties the checklist sequencer, the milestone tracker, the
GPS event detector and the flight log together behind the operations a user
interface (or a headless caller) needs.  It is not thread-safe: fixes and
signal ticks from other threads must be funneled through
``aerocheck.processing.inbox.FlightEventInbox``.
"""

from __future__ import annotations

import datetime
import logging

import pydantic

from aerocheck.checklists import CATALOG, ChecklistCatalog
from aerocheck.config import config
from aerocheck.events import Clock, EventTimestampTracker
from aerocheck.exceptions import (
    FlightAlreadyActiveError,
    NoActiveFlightError,
    PersistenceError,
)
from aerocheck.flight_data import (
    AircraftType,
    ChecklistItem,
    Flight,
    FlightSession,
    GPSFix,
    GPSPoint,
    GPSSignalStatus,
    MilestoneEvent,
    Phase,
    PhaseCompletionStatus,
    utc_now,
)
from aerocheck.flight_log import FlightLog
from aerocheck.flight_track import track_distance_m
from aerocheck.gps import FixOutcome, GPSEventDetector
from aerocheck.sequencer import FlightPhaseSequencer
from aerocheck.settings import AppSettings
from aerocheck.storage import KeyValueStore
from aerocheck.utils import format_clock_time, format_hms, meters_to_feet, mps_to_knots

logger = logging.getLogger(__name__)


class FlightRecorder:
    def __init__(
        self,
        store: KeyValueStore,
        clock: Clock = utc_now,
        catalog: ChecklistCatalog = CATALOG,
    ):
        self._store = store
        self._clock = clock
        self.catalog = catalog

        self.settings = self._load_settings()
        self.flight_log = FlightLog(store)
        self.flight_log.load()

        self.session: FlightSession | None = None
        self.tracker = EventTimestampTracker(clock)
        self.sequencer = FlightPhaseSequencer(self.tracker, self._visible_count)
        self.gps = GPSEventDetector(self.settings.gps_recording_interval, clock)

    # ------------------------------------------------------------------
    # Flight lifecycle
    # ------------------------------------------------------------------

    @property
    def is_flight_active(self) -> bool:
        return self.session is not None

    def start_flight(self, name: str = "") -> FlightSession:
        if self.session is not None:
            raise FlightAlreadyActiveError(
                f"Flight {self.session.id} is still in progress; end or cancel it first"
            )

        self.session = FlightSession(
            name=name,
            airplane=self.settings.default_airplane,
            aircraft_type=self.settings.selected_aircraft,
            start_time=self._clock(),
        )
        self.tracker.reset()
        self.sequencer.start()
        self.gps.sampler.interval = self.settings.gps_recording_interval
        self.gps.start()

        logger.info(f"Flight started: {self.session.airplane} ({self.session.id})")
        return self.session

    def end_flight(self) -> Flight:
        """Freeze the active flight and prepend it to the flight log."""
        session = self._require_session()
        flight = Flight.from_session(session, self._clock(), self.tracker.milestones)

        for earlier, later in flight.chronology_issues():
            logger.warning(f"Flight {flight.id}: {later.label} is before {earlier.label}")

        try:
            self.flight_log.prepend(flight)
        finally:
            self._clear_flight_state()

        logger.info(
            f"Flight ended: {flight.display_name}, {len(flight.gps_track)} points, "
            f"duration {flight.formatted_duration}"
        )
        return flight

    def cancel_flight(self) -> None:
        if self.session is not None:
            logger.info(f"Flight cancelled: {self.session.id}")
        self._clear_flight_state()

    def _clear_flight_state(self) -> None:
        self.session = None
        self.tracker.reset()
        self.sequencer.start()
        self.gps.landing.reset()

    def _require_session(self) -> FlightSession:
        if self.session is None:
            raise NoActiveFlightError("No flight in progress")
        return self.session

    # ------------------------------------------------------------------
    # Phase navigation
    # ------------------------------------------------------------------

    @property
    def current_phase(self) -> Phase:
        return self.sequencer.current_phase

    def next_phase(self) -> bool:
        return self.sequencer.advance()

    def previous_phase(self) -> bool:
        return self.sequencer.retreat()

    def go_to_phase(self, phase: Phase) -> None:
        self.sequencer.jump_to(phase)

    def go_around(self) -> None:
        if self.session is not None:
            self.session.go_around_count += 1
            logger.info(f"Go-around #{self.session.go_around_count}")
        self.sequencer.rewind_to_climb()

    def touch_and_go(self) -> None:
        if self.session is not None:
            self.session.touch_and_go_count += 1
            logger.info(f"Touch-and-go #{self.session.touch_and_go_count}")
        self.sequencer.rewind_to_climb()

    def phase_status(self, phase: Phase) -> PhaseCompletionStatus:
        return self.sequencer.status(phase)

    @property
    def can_go_previous(self) -> bool:
        return self.sequencer.can_go_previous

    @property
    def can_go_next(self) -> bool:
        return self.sequencer.can_go_next

    @property
    def is_last_phase(self) -> bool:
        return self.sequencer.is_last_phase

    # ------------------------------------------------------------------
    # Checklist items
    # ------------------------------------------------------------------

    @property
    def aircraft(self) -> AircraftType:
        """The aircraft of the active flight, else the one selected in settings."""
        if self.session is not None and self.session.aircraft_type is not None:
            return self.session.aircraft_type
        return self.settings.selected_aircraft

    def _visible_count(self, phase: Phase) -> int:
        return self.catalog.visible_count(self.aircraft, phase, self.settings.learning_mode)

    def visible_items(self, phase: Phase | None = None) -> tuple[ChecklistItem, ...]:
        return self.catalog.visible_items(
            self.aircraft, phase or self.current_phase, self.settings.learning_mode
        )

    def has_hidden_items(self, phase: Phase | None = None) -> bool:
        return self.catalog.has_hidden_items(
            self.aircraft, phase or self.current_phase, self.settings.learning_mode
        )

    def highlighted_item(self, phase: Phase | None = None) -> int:
        return self.sequencer.highlighted_index(phase)

    def advance_highlighted_item(self) -> None:
        self.sequencer.advance_highlighted_item()

    def mark_last_item_complete(self) -> None:
        self.sequencer.mark_last_item_complete()

    def all_items_completed(self) -> bool:
        return self.sequencer.all_items_completed()

    def reset_highlighted_item(self, phase: Phase | None = None) -> None:
        self.sequencer.reset_highlighted_item(phase)

    # ------------------------------------------------------------------
    # Milestones
    # ------------------------------------------------------------------

    def record_engine_start(self) -> datetime.datetime:
        return self.tracker.record_engine_start()

    def record_line_up(self) -> datetime.datetime:
        return self.tracker.record_line_up()

    def record_landing(self) -> datetime.datetime:
        """Manual landing; also ends automatic landing detection for this flight."""
        return self.tracker.record_landing()

    def record_engine_shutdown(self) -> datetime.datetime:
        return self.tracker.record_engine_shutdown()

    def update_milestone(self, event: MilestoneEvent) -> datetime.datetime:
        """Overwrite a recorded milestone with the current time."""
        return self.tracker.record(event)

    def milestone_time(self, event: MilestoneEvent) -> datetime.datetime | None:
        return self.tracker.get(event)

    def formatted_milestone_time(
        self, event: MilestoneEvent, tz: datetime.tzinfo | None = None
    ) -> str | None:
        return format_clock_time(self.tracker.get(event), tz)

    # ------------------------------------------------------------------
    # GPS
    # ------------------------------------------------------------------

    @property
    def landing_gate_open(self) -> bool:
        return (
            self.session is not None
            and self.current_phase is Phase.AFTER_LANDING
            and not self.tracker.is_recorded(MilestoneEvent.LANDING)
        )

    def process_fix(self, fix: GPSFix) -> FixOutcome:
        """Feed one fix from the location service."""
        outcome = self.gps.process(fix, self.landing_gate_open)
        if outcome.landing_detected:
            self.tracker.record_auto_landing()
        if outcome.point is not None and self.session is not None:
            self.session.gps_track.append(outcome.point)
        return outcome

    def add_point(self, point: GPSPoint) -> bool:
        """Append an already sampled point; returns True if it confirmed landing."""
        if self.session is None:
            return False
        self.session.gps_track.append(point)

        if self.gps.landing.on_fix(point.speed, self.landing_gate_open):
            self.tracker.record_auto_landing()
            return True
        return False

    def tick(self) -> GPSSignalStatus:
        return self.gps.tick()

    @property
    def gps_status(self) -> GPSSignalStatus:
        return self.gps.signal.status

    @property
    def current_speed_ms(self) -> float:
        fix = self.gps.last_fix
        if fix is None:
            return 0.0
        return max(0.0, fix.speed)

    @property
    def current_speed_knots(self) -> float:
        return mps_to_knots(self.current_speed_ms)

    @property
    def current_altitude_m(self) -> float:
        fix = self.gps.last_fix
        return 0.0 if fix is None else fix.altitude

    @property
    def current_altitude_ft(self) -> float:
        return meters_to_feet(self.current_altitude_m)

    @property
    def target_speed(self) -> int | None:
        return self.catalog.target_speed(self.aircraft, self.current_phase)

    @property
    def stall_speed(self) -> int:
        return self.aircraft.stall_speed_kt

    # ------------------------------------------------------------------
    # Derived flight values
    # ------------------------------------------------------------------

    def flight_duration(self) -> float | None:
        """Seconds since engine start (until shutdown), else since flight start."""
        if self.session is None:
            return None
        start = self.tracker.engine_start_time
        if start is None:
            return (self._clock() - self.session.start_time).total_seconds()
        end = self.tracker.engine_shutdown_time or self._clock()
        return (end - start).total_seconds()

    def flight_duration_text(self) -> str:
        duration = self.flight_duration()
        if duration is None:
            return "--:--"
        return format_hms(duration)

    def track_distance_km(self) -> float:
        if self.session is None:
            return 0.0
        return track_distance_m(self.session.gps_track) / 1000.0

    # ------------------------------------------------------------------
    # Settings
    # ------------------------------------------------------------------

    def _load_settings(self) -> AppSettings:
        data = self._store.load(config.SETTINGS_KEY)
        if data is None:
            return AppSettings()
        try:
            return AppSettings.model_validate_json(data)
        except pydantic.ValidationError as e:
            logger.error(f"Stored settings are unreadable: {e}")
            raise PersistenceError("Stored settings are unreadable") from e

    def save_settings(self, settings: AppSettings | None = None) -> None:
        if settings is not None:
            self.settings = settings
        self._store.save(
            config.SETTINGS_KEY, self.settings.model_dump_json(by_alias=True).encode("utf-8")
        )
        if self.session is None:
            self.gps.sampler.interval = self.settings.gps_recording_interval
