"""Flight data models: phases, aircraft, checklist items, GPS samples and flights.

Timestamps are timezone-aware UTC datetimes.  Naive datetimes read from
imported files are assumed to be UTC.

JSON field names are camelCase (``engineStartTime``, ``gpsTrack``) so that
flights exported by the mobile app import unchanged; snake_case names are
accepted as well.
"""

from __future__ import annotations

import datetime
import uuid
from enum import StrEnum
from typing import Annotated, Mapping

import pydantic
from pydantic.alias_generators import to_camel

from aerocheck import flight_file
from aerocheck.flight_track import track_distance_m
from aerocheck.utils import format_hours_minutes


def _as_utc(value: datetime.datetime) -> datetime.datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=datetime.timezone.utc)
    try:
        return value.astimezone(datetime.timezone.utc)
    except OverflowError as e:
        raise ValueError(f"{value.isoformat()} is out of range in UTC") from e


def _serialize_time(
    value: datetime.datetime,
    handler: pydantic.SerializerFunctionWrapHandler,
    info: pydantic.SerializationInfo,
):
    # Exports for the mobile app carry whole seconds only.
    if info.context and info.context.get("whole_seconds"):
        value = value.replace(microsecond=0)
    return handler(value)


UTCDateTime = Annotated[
    datetime.datetime,
    pydantic.AfterValidator(_as_utc),
    pydantic.WrapSerializer(_serialize_time, when_used="json"),
]


def utc_now() -> datetime.datetime:
    return datetime.datetime.now(datetime.timezone.utc)


# ---------------------------------------------------------------------------
# Milestones
# ---------------------------------------------------------------------------


class MilestoneEvent(StrEnum):
    ENGINE_START = "engineStart"
    LINE_UP = "lineUp"
    LANDING = "landing"
    ENGINE_SHUTDOWN = "engineShutdown"

    @property
    def label(self) -> str:
        return _MILESTONE_LABELS[self]


_MILESTONE_LABELS: dict[MilestoneEvent, str] = {
    MilestoneEvent.ENGINE_START: "Engine start",
    MilestoneEvent.LINE_UP: "Line up",
    MilestoneEvent.LANDING: "Landing",
    MilestoneEvent.ENGINE_SHUTDOWN: "Engine shutdown",
}


def find_chronology_issues(
    times: Mapping[MilestoneEvent, datetime.datetime | None],
) -> list[tuple[MilestoneEvent, MilestoneEvent]]:
    """Return every recorded milestone pair whose times run backwards.

    Milestones are expected in declaration order (engine start, line up,
    landing, engine shutdown).  Unrecorded milestones are ignored.
    """
    recorded = [(event, times.get(event)) for event in MilestoneEvent]
    recorded = [(event, t) for event, t in recorded if t is not None]

    issues = []
    for i, (earlier, t_earlier) in enumerate(recorded):
        for later, t_later in recorded[i + 1 :]:
            if t_later < t_earlier:
                issues.append((earlier, later))
    return issues


# ---------------------------------------------------------------------------
# Flight phases
# ---------------------------------------------------------------------------


class BriefingType(StrEnum):
    DEPARTURE = "DEPARTURE"
    APPROACH = "APPROACH"


class PhaseCompletionStatus(StrEnum):
    NOT_STARTED = "NOT_STARTED"
    COMPLETED = "COMPLETED"
    SKIPPED = "SKIPPED"
    MISSING_ACTION = "MISSING_ACTION"


class Phase(StrEnum):
    """The 16 checklist stages of a flight, in flight order."""

    PREFLIGHT = "PREFLIGHT"
    BEFORE_ENGINE_START = "BEFORE_ENGINE_START"
    ENGINE_START = "ENGINE_START"
    AFTER_ENGINE_START = "AFTER_ENGINE_START"
    TAXI = "TAXI"
    RUNUP = "RUNUP"
    BEFORE_DEPARTURE = "BEFORE_DEPARTURE"
    LINE_UP = "LINE_UP"
    CLIMB = "CLIMB"
    CRUISE = "CRUISE"
    DESCENT = "DESCENT"
    APPROACH = "APPROACH"
    LANDING = "LANDING"
    AFTER_LANDING = "AFTER_LANDING"
    SHUTDOWN = "SHUTDOWN"
    HANGAR = "HANGAR"

    @classmethod
    def first(cls) -> Phase:
        return _PHASE_ORDER[0]

    @classmethod
    def last(cls) -> Phase:
        return _PHASE_ORDER[-1]

    @property
    def rank(self) -> int:
        return _PHASE_RANK[self]

    @property
    def next(self) -> Phase | None:
        if self.rank + 1 < len(_PHASE_ORDER):
            return _PHASE_ORDER[self.rank + 1]
        return None

    @property
    def previous(self) -> Phase | None:
        if self.rank > 0:
            return _PHASE_ORDER[self.rank - 1]
        return None

    @property
    def display_title(self) -> str:
        return _PHASE_TITLES[self][0]

    @property
    def short_title(self) -> str:
        return _PHASE_TITLES[self][1]

    @property
    def completion_text(self) -> str:
        if self is Phase.HANGAR:
            return ""
        return f"{self.short_title} COMPLETED"

    @property
    def page_number(self) -> int:
        if self.rank <= Phase.ENGINE_START.rank:
            return 1
        if self.rank <= Phase.BEFORE_DEPARTURE.rank:
            return 2
        if self.rank <= Phase.LANDING.rank:
            return 3
        return 4

    @property
    def required_milestone(self) -> MilestoneEvent | None:
        """Milestone recorded by this phase's action button, if it has one."""
        return _REQUIRED_MILESTONES.get(self)

    @property
    def shows_engine_start_button(self) -> bool:
        return self.required_milestone is MilestoneEvent.ENGINE_START

    @property
    def shows_line_up_button(self) -> bool:
        return self.required_milestone is MilestoneEvent.LINE_UP

    @property
    def shows_engine_shutdown_button(self) -> bool:
        return self.required_milestone is MilestoneEvent.ENGINE_SHUTDOWN

    @property
    def shows_go_around_buttons(self) -> bool:
        return self is Phase.LANDING

    @property
    def shows_landed_button(self) -> bool:
        return self is Phase.AFTER_LANDING

    @property
    def shows_speed_indicator(self) -> bool:
        return Phase.CLIMB.rank <= self.rank <= Phase.LANDING.rank

    @property
    def briefing(self) -> BriefingType | None:
        if self is Phase.BEFORE_DEPARTURE:
            return BriefingType.DEPARTURE
        if self is Phase.DESCENT:
            return BriefingType.APPROACH
        return None


_PHASE_ORDER: tuple[Phase, ...] = tuple(Phase)
_PHASE_RANK: dict[Phase, int] = {phase: i for i, phase in enumerate(_PHASE_ORDER)}

_REQUIRED_MILESTONES: dict[Phase, MilestoneEvent] = {
    Phase.ENGINE_START: MilestoneEvent.ENGINE_START,
    Phase.BEFORE_DEPARTURE: MilestoneEvent.LINE_UP,
    Phase.SHUTDOWN: MilestoneEvent.ENGINE_SHUTDOWN,
}

# (title, short title)
_PHASE_TITLES: dict[Phase, tuple[str, str]] = {
    Phase.PREFLIGHT: ("PREFLIGHT CHECK", "PREFLIGHT CHECK"),
    Phase.BEFORE_ENGINE_START: (
        "CHECK BEFORE ENGINE START",
        "CHECK BEFORE ENGINE START",
    ),
    Phase.ENGINE_START: ("ENGINE START", "ENGINE START"),
    Phase.AFTER_ENGINE_START: ("CHECK AFTER ENGINE START", "CHECK AFTER ENGINE START"),
    Phase.TAXI: ("TAXI CHECK", "TAXI CHECK"),
    Phase.RUNUP: ("RUNUP", "RUNUP"),
    Phase.BEFORE_DEPARTURE: ("CHECK BEFORE DEPARTURE", "CHECK BEFORE DEPARTURE"),
    Phase.LINE_UP: ("LINE UP CHECK", "LINE UP CHECK"),
    Phase.CLIMB: ("CLIMB CHECK", "CLIMB CHECK"),
    Phase.CRUISE: ("CRUISE CHECK", "CRUISE CHECK"),
    Phase.DESCENT: ("DESCENT CHECK", "DESCENT CHECK"),
    Phase.APPROACH: ("APPROACH CHECK", "APPROACH CHECK"),
    Phase.LANDING: ("LANDING CHECK", "LANDING CHECK"),
    Phase.AFTER_LANDING: ("AFTER LANDING CHECK", "AFTER LANDING CHECK"),
    Phase.SHUTDOWN: ("ENGINE SHUTDOWN AND PARKING CHECK", "PARKING CHECK"),
    Phase.HANGAR: ("AT THE HANGAR", "AT THE HANGAR"),
}


# ---------------------------------------------------------------------------
# Aircraft
# ---------------------------------------------------------------------------


class AircraftProfile(pydantic.BaseModel):
    """Static description of an aircraft type."""

    model_config = pydantic.ConfigDict(frozen=True)

    registration: str
    model_name: str
    short_model_name: str
    checklist_version: str
    last_updated: str
    stall_speed_kt: int
    crosswind_takeoff: str
    crosswind_landing: str


class AircraftType(StrEnum):
    WT9_DYNAMIC = "WT9"
    PA28_ARCHER = "PA28"

    @property
    def profile(self) -> AircraftProfile:
        return AIRCRAFT_PROFILES[self]

    @property
    def registration(self) -> str:
        return self.profile.registration

    @property
    def stall_speed_kt(self) -> int:
        return self.profile.stall_speed_kt


AIRCRAFT_PROFILES: dict[AircraftType, AircraftProfile] = {
    AircraftType.WT9_DYNAMIC: AircraftProfile(
        registration="F-HVXA",
        model_name="WT9 Dynamic",
        short_model_name="WT9 Dynamic",
        checklist_version="2.1e",
        last_updated="March 2025",
        stall_speed_kt=42,
        crosswind_takeoff="14 kt",
        crosswind_landing="16 kt",
    ),
    AircraftType.PA28_ARCHER: AircraftProfile(
        registration="HB-PFA",
        model_name="Piper Archer II PA-28-181",
        short_model_name="PA-28-181",
        checklist_version="1.6e",
        last_updated="July 2020",
        stall_speed_kt=53,
        crosswind_takeoff="17 kt",
        crosswind_landing="17 kt",
    ),
}


# ---------------------------------------------------------------------------
# Checklist content
# ---------------------------------------------------------------------------


class ChecklistItem(pydantic.BaseModel):
    model_config = pydantic.ConfigDict(frozen=True)

    number: int | None = None
    challenge: str
    response: str = ""
    is_header: bool = False


class SpeedReference(pydantic.BaseModel):
    model_config = pydantic.ConfigDict(frozen=True)

    name: str
    description: str
    value: str


# ---------------------------------------------------------------------------
# GPS models
# ---------------------------------------------------------------------------


class GPSSignalStatus(StrEnum):
    GOOD = "GOOD"
    DEGRADED = "DEGRADED"
    LOST = "LOST"


class GPSFix(pydantic.BaseModel):
    """A raw sample from the location service.

    ``speed`` (m/s) and ``horizontal_accuracy`` (m) are negative when the
    device reports them as invalid.
    """

    model_config = pydantic.ConfigDict(frozen=True)

    latitude: float
    longitude: float
    altitude: float
    timestamp: UTCDateTime
    horizontal_accuracy: float
    speed: float = 0.0
    course: float = 0.0


class GPSPoint(pydantic.BaseModel):
    """A GPS fix retained in a flight's track."""

    model_config = pydantic.ConfigDict(frozen=True)

    id: uuid.UUID = pydantic.Field(default_factory=uuid.uuid4)
    latitude: float
    longitude: float
    altitude: float
    timestamp: UTCDateTime = pydantic.Field(default_factory=utc_now)
    speed: float = 0.0
    course: float = 0.0

    @classmethod
    def from_fix(cls, fix: GPSFix) -> GPSPoint:
        return cls(
            latitude=fix.latitude,
            longitude=fix.longitude,
            altitude=fix.altitude,
            timestamp=fix.timestamp,
            speed=fix.speed,
            course=fix.course,
        )


# ---------------------------------------------------------------------------
# Flights
# ---------------------------------------------------------------------------


class FlightSession(pydantic.BaseModel):
    """Mutable record of the flight in progress.

    Milestone timestamps are held by the ``EventTimestampTracker`` while the
    flight is active and copied into the ``Flight`` when it ends.
    """

    id: uuid.UUID = pydantic.Field(default_factory=uuid.uuid4)
    name: str = ""
    airplane: str
    aircraft_type: AircraftType | None = None
    start_time: UTCDateTime
    gps_track: list[GPSPoint] = pydantic.Field(default_factory=list)
    notes: str = ""
    go_around_count: int = 0
    touch_and_go_count: int = 0


class Flight(pydantic.BaseModel):
    """A completed flight, as stored in the flight log."""

    model_config = pydantic.ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )

    id: uuid.UUID = pydantic.Field(default_factory=uuid.uuid4)
    name: str = ""
    airplane: str = AircraftType.WT9_DYNAMIC.registration
    aircraft_type: AircraftType | None = None
    start_time: UTCDateTime | None = None
    stop_time: UTCDateTime | None = None
    engine_start_time: UTCDateTime | None = None
    line_up_time: UTCDateTime | None = None
    landing_time: UTCDateTime | None = None
    engine_shutdown_time: UTCDateTime | None = None
    gps_track: tuple[GPSPoint, ...] = ()
    notes: str = ""
    go_around_count: int = 0
    touch_and_go_count: int = 0

    @classmethod
    def from_session(
        cls,
        session: FlightSession,
        stop_time: datetime.datetime,
        milestones: Mapping[MilestoneEvent, datetime.datetime | None],
    ) -> Flight:
        return cls(
            id=session.id,
            name=session.name,
            airplane=session.airplane,
            aircraft_type=session.aircraft_type,
            start_time=session.start_time,
            stop_time=stop_time,
            engine_start_time=milestones.get(MilestoneEvent.ENGINE_START),
            line_up_time=milestones.get(MilestoneEvent.LINE_UP),
            landing_time=milestones.get(MilestoneEvent.LANDING),
            engine_shutdown_time=milestones.get(MilestoneEvent.ENGINE_SHUTDOWN),
            gps_track=tuple(session.gps_track),
            notes=session.notes,
            go_around_count=session.go_around_count,
            touch_and_go_count=session.touch_and_go_count,
        )

    @property
    def milestones(self) -> dict[MilestoneEvent, datetime.datetime | None]:
        return {
            MilestoneEvent.ENGINE_START: self.engine_start_time,
            MilestoneEvent.LINE_UP: self.line_up_time,
            MilestoneEvent.LANDING: self.landing_time,
            MilestoneEvent.ENGINE_SHUTDOWN: self.engine_shutdown_time,
        }

    @property
    def display_name(self) -> str:
        """``"Name (REG)"``, or just the registration when unnamed."""
        if not self.name:
            return self.airplane
        return f"{self.name} ({self.airplane})"

    def duration(self, now: datetime.datetime | None = None) -> float | None:
        """Seconds from engine start to shutdown (or stop, or *now*)."""
        if self.engine_start_time is None:
            return None
        end = self.engine_shutdown_time or self.stop_time or now or utc_now()
        return (end - self.engine_start_time).total_seconds()

    @property
    def session_duration(self) -> float | None:
        if self.start_time is None or self.stop_time is None:
            return None
        return (self.stop_time - self.start_time).total_seconds()

    @property
    def formatted_duration(self) -> str:
        duration = self.duration()
        if duration is None:
            return "--:--"
        return format_hours_minutes(duration)

    @property
    def formatted_date(self) -> str:
        if self.start_time is None:
            return "No date"
        return f"{self.start_time:%b} {self.start_time.day}, {self.start_time:%Y}"

    @property
    def distance_km(self) -> float:
        """Geodesic length of the GPS track in kilometres."""
        return track_distance_m(self.gps_track) / 1000.0

    @property
    def formatted_distance(self) -> str:
        distance = self.distance_km
        if distance < 0.1:
            return "< 0.1 km"
        return f"{distance:.1f} km"

    @property
    def export_filename(self) -> str:
        return flight_file.suggest_export_filename(self.start_time, self.display_name)

    def chronology_issues(self) -> list[tuple[MilestoneEvent, MilestoneEvent]]:
        return find_chronology_issues(self.milestones)
