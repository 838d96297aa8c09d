"""Flight phase sequencer.

State machine over the 16 checklist phases of a flight.  It tracks the current
phase, classifies phases as they are left behind (completed, skipped, or
missing their action button press) and keeps a per-phase cursor over the
checklist items for step-by-step highlighting.

Navigation never raises: moving past either end of the phase order is a
silent no-op.
"""

from __future__ import annotations

import logging
from typing import Callable

from aerocheck.events import EventTimestampTracker
from aerocheck.flight_data import Phase, PhaseCompletionStatus

logger = logging.getLogger(__name__)

ItemCount = Callable[[Phase], int]
"""Visible checklist items of a phase under the current aircraft and learning mode."""


class FlightPhaseSequencer:
    def __init__(self, tracker: EventTimestampTracker, item_count: ItemCount):
        self._tracker = tracker
        self._item_count = item_count

        self.current_phase: Phase = Phase.first()
        self.highest_completed_phase: Phase = Phase.first()
        self._status: dict[Phase, PhaseCompletionStatus] = {}
        self._highlighted: dict[Phase, int] = {}

    def start(self) -> None:
        """Return to the first phase with no recorded progress."""
        self.current_phase = Phase.first()
        self.highest_completed_phase = Phase.first()
        self._status.clear()
        self._highlighted.clear()

    # ------------------------------------------------------------------
    # Phase navigation
    # ------------------------------------------------------------------

    def advance(self) -> bool:
        """Complete the current phase and move to the next one.

        Returns False, without touching any state, at the last phase.
        """
        phase = self.current_phase
        following = phase.next
        if following is None:
            return False

        if self._is_missing_action(phase):
            self._status[phase] = PhaseCompletionStatus.MISSING_ACTION
        else:
            self._status[phase] = PhaseCompletionStatus.COMPLETED

        if phase.rank >= self.highest_completed_phase.rank:
            self.highest_completed_phase = phase

        self._move_to(following)
        return True

    def retreat(self) -> bool:
        previous = self.current_phase.previous
        if previous is None:
            return False
        self._move_to(previous)
        return True

    def jump_to(self, target: Phase) -> None:
        """Move to *target*, classifying the phases jumped over.

        Only forward jumps classify: every phase from the current one up to
        (not including) *target* that has no status yet becomes SKIPPED, or
        MISSING_ACTION when its action button was never pressed.
        """
        if target.rank > self.current_phase.rank:
            for phase in Phase:
                if not self.current_phase.rank <= phase.rank < target.rank:
                    continue
                if phase in self._status:
                    continue
                self._status[phase] = self._implicit_status(phase)

        self._move_to(target)

    def rewind_to_climb(self) -> None:
        """Erase the record of CLIMB and every later phase, then go to CLIMB.

        Used by go-around and touch-and-go: the aircraft flies that segment
        again, so nothing is classified.
        """
        for phase in Phase:
            if phase.rank >= Phase.CLIMB.rank:
                self._status.pop(phase, None)
                self._highlighted[phase] = 0
        self._move_to(Phase.CLIMB)

    # ------------------------------------------------------------------
    # Status
    # ------------------------------------------------------------------

    def status(self, phase: Phase) -> PhaseCompletionStatus:
        explicit = self._status.get(phase)
        if explicit is not None:
            return explicit
        if phase.rank >= self.current_phase.rank:
            return PhaseCompletionStatus.NOT_STARTED
        return self._implicit_status(phase)

    def statuses(self) -> dict[Phase, PhaseCompletionStatus]:
        return {phase: self.status(phase) for phase in Phase}

    @property
    def can_go_previous(self) -> bool:
        return self.current_phase.previous is not None

    @property
    def can_go_next(self) -> bool:
        return self.current_phase.next is not None

    @property
    def is_last_phase(self) -> bool:
        return self.current_phase is Phase.last()

    # ------------------------------------------------------------------
    # Step-by-step highlighting
    # ------------------------------------------------------------------

    def highlighted_index(self, phase: Phase | None = None) -> int:
        return self._highlighted.get(phase or self.current_phase, 0)

    def advance_highlighted_item(self) -> None:
        """Move the cursor to the next item; stops on the last one."""
        phase = self.current_phase
        index = self.highlighted_index(phase)
        if index < self._item_count(phase) - 1:
            self._highlighted[phase] = index + 1

    def mark_last_item_complete(self) -> None:
        phase = self.current_phase
        self._highlighted[phase] = self._item_count(phase)

    def all_items_completed(self) -> bool:
        phase = self.current_phase
        return self.highlighted_index(phase) >= self._item_count(phase)

    def reset_highlighted_item(self, phase: Phase | None = None) -> None:
        self._highlighted[phase or self.current_phase] = 0

    # ------------------------------------------------------------------

    def _is_missing_action(self, phase: Phase) -> bool:
        milestone = phase.required_milestone
        return milestone is not None and not self._tracker.is_recorded(milestone)

    def _implicit_status(self, phase: Phase) -> PhaseCompletionStatus:
        if self._is_missing_action(phase):
            return PhaseCompletionStatus.MISSING_ACTION
        return PhaseCompletionStatus.SKIPPED

    def _move_to(self, phase: Phase) -> None:
        if phase is not self.current_phase:
            logger.info(f"Phase: {self.current_phase} -> {phase}")
        self.current_phase = phase
