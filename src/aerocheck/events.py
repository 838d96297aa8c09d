"""Milestone timestamps of the flight in progress.

Recording is an unconditional write: a second call overwrites the first.
Whether an overwrite needs confirmation is up to the caller.
"""

from __future__ import annotations

import datetime
import logging
from typing import Callable

from aerocheck.config import config
from aerocheck.flight_data import MilestoneEvent, find_chronology_issues, utc_now

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime.datetime]


class EventTimestampTracker:
    def __init__(self, clock: Clock = utc_now):
        self._clock = clock
        self._times: dict[MilestoneEvent, datetime.datetime | None] = {
            event: None for event in MilestoneEvent
        }

    # ------------------------------------------------------------------
    # Recording
    # ------------------------------------------------------------------

    def record_engine_start(self) -> datetime.datetime:
        return self._set(MilestoneEvent.ENGINE_START, self._clock())

    def record_line_up(self) -> datetime.datetime:
        """Line-up call plus a fixed offset: the aircraft is airborne ~2 min later."""
        offset = datetime.timedelta(seconds=config.LINE_UP_OFFSET)
        return self._set(MilestoneEvent.LINE_UP, self._clock() + offset)

    def record_landing(self) -> datetime.datetime:
        return self._set(MilestoneEvent.LANDING, self._clock())

    def record_auto_landing(self) -> datetime.datetime:
        """Landing detected from roll-out speed, backdated by a fixed offset."""
        offset = datetime.timedelta(seconds=config.AUTO_LANDING_OFFSET)
        return self._set(MilestoneEvent.LANDING, self._clock() - offset)

    def record_engine_shutdown(self) -> datetime.datetime:
        return self._set(MilestoneEvent.ENGINE_SHUTDOWN, self._clock())

    def record(self, event: MilestoneEvent) -> datetime.datetime:
        """Record *event* through its dedicated operation (offsets included)."""
        recorders = {
            MilestoneEvent.ENGINE_START: self.record_engine_start,
            MilestoneEvent.LINE_UP: self.record_line_up,
            MilestoneEvent.LANDING: self.record_landing,
            MilestoneEvent.ENGINE_SHUTDOWN: self.record_engine_shutdown,
        }
        return recorders[event]()

    def reset(self) -> None:
        for event in MilestoneEvent:
            self._times[event] = None

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get(self, event: MilestoneEvent) -> datetime.datetime | None:
        return self._times[event]

    def is_recorded(self, event: MilestoneEvent) -> bool:
        return self._times[event] is not None

    @property
    def engine_start_time(self) -> datetime.datetime | None:
        return self._times[MilestoneEvent.ENGINE_START]

    @property
    def line_up_time(self) -> datetime.datetime | None:
        return self._times[MilestoneEvent.LINE_UP]

    @property
    def landing_time(self) -> datetime.datetime | None:
        return self._times[MilestoneEvent.LANDING]

    @property
    def engine_shutdown_time(self) -> datetime.datetime | None:
        return self._times[MilestoneEvent.ENGINE_SHUTDOWN]

    @property
    def milestones(self) -> dict[MilestoneEvent, datetime.datetime | None]:
        return dict(self._times)

    def chronology_issues(self) -> list[tuple[MilestoneEvent, MilestoneEvent]]:
        return find_chronology_issues(self._times)

    # ------------------------------------------------------------------

    def _set(self, event: MilestoneEvent, value: datetime.datetime) -> datetime.datetime:
        previous = self._times[event]
        self._times[event] = value

        if previous is None:
            logger.info(f"{event.label} recorded at {value.isoformat()}")
        else:
            logger.info(
                f"{event.label} updated: {previous.isoformat()} -> {value.isoformat()}"
            )

        for earlier, later in self.chronology_issues():
            if event in (earlier, later):
                logger.warning(
                    f"{later.label} ({self._times[later].isoformat()}) is before "
                    f"{earlier.label} ({self._times[earlier].isoformat()})"
                )
        return value
