"""Checklist catalog: the static checklist tables of every supported aircraft.

One table is keyed by ``(AircraftType, Phase)``.  Each entry holds the
ordered items, the target airspeed for the phase (``None`` on the ground) and,
for phases whose items are meant to be flown from memory, how many leading
items stay visible when learning mode is off.

Learning mode ON shows everything (study); learning mode OFF hides the
memorizable items (self-test).
"""

from __future__ import annotations

import pydantic

from aerocheck.flight_data import (
    AircraftType,
    ChecklistItem,
    Phase,
    SpeedReference,
)


class PhaseChecklist(pydantic.BaseModel):
    model_config = pydantic.ConfigDict(frozen=True)

    items: tuple[ChecklistItem, ...]
    target_speed_kt: int | None = None
    memory_visible_count: int | None = None
    """Items shown when learning mode is off; ``None`` shows them all."""


def _item(number: int, challenge: str, response: str) -> ChecklistItem:
    return ChecklistItem(number=number, challenge=challenge, response=response)


def _header(challenge: str) -> ChecklistItem:
    return ChecklistItem(challenge=challenge, is_header=True)


def _checklist(
    *items: ChecklistItem,
    target_speed_kt: int | None = None,
    memory_visible_count: int | None = None,
) -> PhaseChecklist:
    return PhaseChecklist(
        items=items,
        target_speed_kt=target_speed_kt,
        memory_visible_count=memory_visible_count,
    )


# ---------------------------------------------------------------------------
# WT9 Dynamic (F-HVXA), checklist 2.1e
# ---------------------------------------------------------------------------

_WT9 = AircraftType.WT9_DYNAMIC

_WT9_CHECKLISTS: dict[Phase, PhaseChecklist] = {
    # Page 1
    Phase.PREFLIGHT: _checklist(
        _item(1, "Outside check", "Completed"),
        _item(2, "Aircraft papers", "Checked"),
        _item(3, "Aircraft log", "Checked"),
        _item(4, "Tow bar", "Removed"),
        _item(5, "Cabin", "Checked"),
        _item(6, "Loadsheet", "Within limits"),
    ),
    Phase.BEFORE_ENGINE_START: _checklist(
        _item(1, "Seat belts & harness", "Adjusted & locked"),
        _item(2, "Parking brake", "Set"),
        _item(3, "Rudder pedals", "Set"),
        _item(4, "Electrical consumers", "OFF"),
        _item(5, "Circuit breakers", "All IN"),
        _item(6, "Master switch", "ON"),
        _item(7, "Dynon LHD1000 / RHD1000", "Both ON"),
        _item(8, "Starter key", "Charge"),
        _item(9, "Annunciator & stick shaker", "Checked"),
        _item(10, "Fuel Quantity", "L__ R__ end HH:MM @20l/h, tot set"),
        _item(11, "Fuel selector valve", "Left"),
        _item(12, "Auxiliary fuel pump", "ON… 0.2bar… OFF"),
    ),
    Phase.ENGINE_START: _checklist(
        _item(1, "NAV - ACL", "ON"),
        _item(2, "Carburator heat", "OFF"),
        _item(3, "Engine is hot", "Throttle 1/4 open, Choke OFF"),
        _item(4, "Engine is cold", "Throttle idle, Choke ON"),
        _item(5, "Propeller area", "Clear"),
        _item(6, "Magnetos", "Both ON"),
        _item(7, "Starter key", "Start, max 10 seconds"),
        _item(8, "When engine fires", "Close Choke, add throttle"),
        _item(9, "Throttle", "2000 RPM, Time Check"),
        _item(10, "Oil pressure", "White (2 bar min) within 10''"),
        _item(11, "Throttle", "2500 RPM after 2 min if cold"),
        memory_visible_count=2,
    ),
    # Page 2
    Phase.AFTER_ENGINE_START: _checklist(
        _item(1, "Alternator output", "Checked"),
        _item(2, "Annunciator lights", "No lights (or OT rising)"),
        _item(3, "Avionics", "ON (check ATIS)"),
        _item(4, "Ventilation, heater", "As required"),
        _item(5, "Engine instruments", "Checked (OT yellow rising)"),
        _item(6, "Avionics", "Set and preselected"),
        _item(7, "Flight instruments", "Set"),
        _item(8, "Oil Temperature", "Rising, no taxi < 30°C"),
    ),
    Phase.TAXI: _checklist(
        _item(1, "Brakes & steering", "Checked"),
        _item(2, "Flight instruments", "Checked"),
        memory_visible_count=0,
    ),
    Phase.RUNUP: _checklist(
        _item(1, "Parking brake", "Max Set"),
        _item(2, "Warm up", "Oil Temp ≥ 50°C"),
        _item(3, "Zone behind aircraft", "Clear"),
        _item(4, "Throttle", "4000 RPM"),
        _item(5, "Engine instr. & amp.", "Checked"),
        _item(6, "Magnetos L, R", "Max drop 300, diff 115"),
        _item(7, "Carburator heat", "Check function"),
        _item(8, "Throttle idle", "Max 1800 RPM"),
        _item(9, "Throttle", "2500 RPM (cooling)"),
        _item(10, "Annunciator lights", "No light"),
        memory_visible_count=3,
    ),
    Phase.BEFORE_DEPARTURE: _checklist(
        _item(1, "Fuel quantity", "L__ R__ end HH:MM @20l/h"),
        _item(2, "Fuel selector valve", "Left"),
        _item(3, "Carburator heat", "OFF"),
        _item(4, "Choke", "OFF"),
        _item(5, "Magnetos", "Both ON"),
        _item(6, "Trim", "Set for departure"),
        _item(7, "Flaps", "Set for departure (F1)"),
        _item(8, "Flight instr. & avionics", "No flag, set for departure"),
        _item(9, "Cabin & Pax", "Secured"),
        _item(10, "Canopy", "Closed and locked"),
        _item(11, "Rescue system", "Safety lock removed"),
        _item(12, "Flight controls", "Free and correct"),
        _item(13, "Departure briefing", "Completed"),
    ),
    # Page 3
    Phase.LINE_UP: _checklist(
        _item(1, "Canopy & windows", "Closed and locked"),
        _item(2, "Time", "Noted"),
        _item(3, "Approach sector & Runway", "Clear"),
        _item(4, "Auxiliary fuel pump", "ON"),
        _item(5, "Landing light", "ON"),
        memory_visible_count=0,
    ),
    Phase.CLIMB: _checklist(
        _item(1, "Flaps", "Up"),
        _item(2, "Climb power", "Set"),
        _item(3, "Auxiliary fuel pump", "OFF, pressure checked"),
        _item(4, "Landing light", "ON / OFF"),
        _item(5, "Engine parameters", "Checked"),
        target_speed_kt=55,  # Vx
        memory_visible_count=0,
    ),
    Phase.CRUISE: _checklist(
        _item(1, "Altimeter", "Checked (STD / QNH)"),
        _item(2, "Cruise power", "4800 RPM SET"),
        _item(3, "Engine instruments", "Oil Press, Oil Temp, CH Temp"),
        _item(4, "Fuel quantity", "L__ R__ end HH:MM @20l/h"),
        _item(5, "Fuel selector", "As required"),
        target_speed_kt=100,
    ),
    Phase.DESCENT: _checklist(
        _item(1, "ATIS or AD Information", "Noted"),
        _item(2, "Approach briefing", "Completed"),
        _item(3, "Avionics", "HDG bug SET & Checked"),
        _item(4, "Circuit breakers", "All IN"),
        _item(5, "Cabin & Pax", "Secured"),
        target_speed_kt=85,  # Vcc
        memory_visible_count=0,
    ),
    Phase.APPROACH: _checklist(
        _item(1, "Altimeter", "QNH set"),
        _item(2, "Fuel quantity", "L__ R__ end HH:MM @20l/h"),
        _item(3, "Fuel selector", "Left"),
        _item(4, "Auxiliary fuel pump", "ON"),
        _item(5, "Carburator heat", "ON"),
        _item(6, "Landing lights", "ON"),
        target_speed_kt=65,  # F1
        memory_visible_count=0,
    ),
    Phase.LANDING: _checklist(
        _item(1, "Flaps", "Below 76kt → F2 or F3"),
        _item(2, "Carburator heat", "OFF"),
        target_speed_kt=55,  # F3
        memory_visible_count=0,
    ),
    # Page 4
    Phase.AFTER_LANDING: _checklist(
        _item(1, "Transponder", "Standby"),
        _item(2, "Landing lights", "OFF"),
        _item(3, "Flaps", "UP"),
        _item(4, "Auxiliary fuel pump", "OFF"),
        _item(5, "Time", "Noted"),
        memory_visible_count=0,
    ),
    Phase.SHUTDOWN: _checklist(
        _item(1, "Parking brake", "SET"),
        _item(2, "Throttle", "Idle"),
        _item(3, "121.5", "Checked"),
        _item(4, "Avionics switch", "OFF"),
        _item(5, "Electrical consumers", "All OFF, except NAV-ACL"),
        _item(6, "Magnetos", "OFF"),
        _item(7, "Nav ACL", "OFF"),
        _item(8, "Starter key", "OFF"),
        _item(9, "Master switch", "OFF"),
        _item(10, "Rescue system", "Secured"),
        _item(11, "Flight data & documents", "Noted & completed"),
        _item(12, "Aircraft", "To be secured"),
    ),
    Phase.HANGAR: _checklist(
        _item(1, "Parking brake", "Released"),
        _item(2, "Flaps", "Set F3"),
        _item(3, "External electrical power", "When OAT < 5 °C"),
    ),
}

# ---------------------------------------------------------------------------
# Piper Archer II PA-28-181 (HB-PFA), checklist 1.6e
# ---------------------------------------------------------------------------

_PA28 = AircraftType.PA28_ARCHER

_PA28_CHECKLISTS: dict[Phase, PhaseChecklist] = {
    # Page 1
    Phase.PREFLIGHT: _checklist(
        _item(1, "Outside check (Walk around)", "Completed"),
        _item(2, "Baggage door", "Locked"),
        _item(3, "Aircraft documents", "On board"),
        _item(4, "Aircraft log", "Checked"),
        _item(5, "Tow bar", "Removed"),
        _item(6, "Cabin", "Checked"),
        _item(7, "Loadsheet", "Checked"),
    ),
    Phase.BEFORE_ENGINE_START: _checklist(
        _item(1, "Preflight check", "Completed"),
        _item(2, "Seats, seat belts & harness", "Locked & secured"),
        _item(3, "Parking brake", "Set"),
        _item(4, "Electrical consumers", "OFF"),
        _item(5, "Circuit breakers", "All IN"),
        _item(6, "Alternate static source", "Closed"),
        _item(7, "Static & Pitot lines", "Drained"),
        _item(8, "Battery", "ON"),
        _item(9, "Annunciator lights", "Checked ON"),
        _item(10, "Fuel quantity", "L__ /R__ Checked"),
        _item(11, "Fuel selector valve", "__ Tank"),
        _item(12, "Power", "Idle"),
        _item(13, "Mixture", "Full rich"),
        _item(14, "Carburator heat", "OFF"),
        _item(15, "Controls", "Free and easy"),
        _item(16, "Trim", "Set for take-off"),
        _item(17, "Flaps", "As required"),
    ),
    Phase.ENGINE_START: _checklist(
        _item(1, "Anticollision light", "ON"),
        _item(2, "Auxiliary fuel pump", "ON"),
        _item(3, "Priming", "According AFM"),
        _item(4, "Power", "Set for engine start"),
        _item(5, "Propeller area", "Free"),
        _item(6, "Ignition switch", "Start"),
        _item(7, "Power", "1000-1200 RPM"),
        _item(8, "Oil pressure", "Within 30 sec & loading"),
        _item(9, "Alternator", "ON"),
        _item(10, "Avionics Master", "ON"),
    ),
    # Page 2
    Phase.AFTER_ENGINE_START: _checklist(
        _item(1, "Annunciator lights", "OFF"),
        _item(2, "Auxiliary fuel pump", "OFF & pressure checked"),
        _item(3, "Primer", "Locked"),
        _item(4, "Gyro suction", "Green arc"),
        _item(5, "Flight instruments", "Set"),
        _item(6, "Avionics", "Preselected"),
        _item(7, "121.5 & ATIS", "Checked"),
        _item(8, "Vent, heaters & defroster", "As required"),
        memory_visible_count=0,
    ),
    Phase.TAXI: _checklist(
        _item(1, "Brakes & steering", "Checked"),
        _item(2, "T/C, DG, compass", "Checked"),
        _item(3, "Horizon", "Stable"),
        memory_visible_count=0,
    ),
    Phase.RUNUP: _checklist(
        _item(1, "Parking brake", "Set"),
        _item(2, "Landing light", "OFF"),
        _item(3, "Oil temperature", "Green arc"),
        _item(4, "Power", "2000 RPM"),
        _item(5, "Annunciator lights", "OFF & function check"),
        _item(6, "Gyro suction, engine gauges, alternator", "Checked"),
        _item(7, "Magnetos", "Max drop 175, max diff 50"),
        _item(8, "Carburator heat", "Checked"),
        _item(9, "Mixture", "Checked"),
        _item(10, "Power idle", "500-700 RPM stable"),
        _item(11, "Power", "1000-1200 RPM"),
        memory_visible_count=3,
    ),
    Phase.BEFORE_DEPARTURE: _checklist(
        _item(1, "Fuel quantity", "L__/R__ Checked"),
        _item(2, "Fuel selector valve", "Set to L__/R__"),
        _item(3, "Mixture", "Rich / as required"),
        _item(4, "Carburator heat", "OFF"),
        _item(5, "Magnetos", "Both"),
        _item(6, "Controls", "Free and easy"),
        _item(7, "Trim", "Set for take-off"),
        _item(8, "Flaps", "As required"),
        _item(9, "Flight instruments", "Set"),
        _item(10, "Avionics", "Preselected"),
        _item(11, "Doors & windows", "Closed"),
        _item(12, "Seat belts & harness", "Fastened"),
        _item(13, "Departure briefing (Rwy, Rtg, Alt, V, Emerg)", "Completed"),
    ),
    # Page 3
    Phase.LINE_UP: _checklist(
        _item(1, "Approach sector", "Free"),
        _item(2, "Auxiliary fuel pump", "ON"),
        _item(3, "Landing light", "ON"),
        _header("When lined up:"),
        _item(4, "Directional gyro & runway heading", "Checked & identified"),
        _item(5, "Wind", "Checked"),
        _item(6, "Transponder", "__ Acc. ATC or Standby"),
        _item(7, "Time", "Checked"),
        memory_visible_count=0,
    ),
    Phase.CLIMB: _checklist(
        _item(1, "Flaps", "Up"),
        _item(2, "Climb power", "Full power set"),
        _item(3, "Auxiliary fuel pump", "OFF & pressure checked"),
        _item(4, "Landing light", "As required"),
        target_speed_kt=76,  # Vy
        memory_visible_count=0,
    ),
    Phase.CRUISE: _checklist(
        _item(1, "Altimeter", "Set"),
        _item(2, "Directional gyro", "Set"),
        _item(3, "Cruise power", "Set"),
        _item(4, "Mixture", "Set"),
        _item(5, "Fuel system", "Checked"),
        _item(6, "Lights", "As required"),
        target_speed_kt=110,
        memory_visible_count=0,
    ),
    Phase.DESCENT: _checklist(
        _item(1, "ATIS", "Noted"),
        _item(2, "Approach briefing", "Completed"),
        _item(3, "Avionics", "Set & checked"),
        _item(4, "Directional gyro", "Set"),
        _item(5, "Cabin & pax", "Secured"),
        target_speed_kt=90,
        memory_visible_count=0,
    ),
    Phase.APPROACH: _checklist(
        _item(1, "Altimeter", "QNH"),
        _item(2, "Directional gyro", "Heading set"),
        _item(3, "Landing light", "ON"),
        _item(4, "Auxiliary fuel pump", "ON"),
        _item(5, "Fuel quantity", "L__ /R__ Checked"),
        _item(6, "Fuel selector valve", "L__ /R__ Tank"),
        _item(7, "Mixture", "Rich / as required"),
        _item(8, "Carburator heat", "As required"),
        target_speed_kt=80,
        memory_visible_count=0,
    ),
    Phase.LANDING: _checklist(
        _item(1, "Flaps", "Checked"),
        _item(2, "Carburetor heat", "OFF"),
        target_speed_kt=70,
        memory_visible_count=0,
    ),
    # Page 4
    Phase.AFTER_LANDING: _checklist(
        _item(1, "Transponder", "Standby"),
        _item(2, "Time", "Noted"),
        _item(3, "Flaps", "Up"),
        memory_visible_count=0,
    ),
    Phase.SHUTDOWN: _checklist(
        _item(1, "Parking brake", "Set"),
        _item(2, "Power", "1000-1200 RPM"),
        _item(3, "Com", "Check 121.5"),
        _item(4, "Electrical consumers & Avionics", "OFF"),
        _item(5, "Magnetos grounding", "Checked then both"),
        _item(6, "Mixture", "Lean / cut-off"),
        _item(7, "Power", "Idle"),
        _item(8, "Magnetos", "OFF"),
        _item(9, "Anticollision light", "OFF"),
        _item(10, "Battery & alternator", "OFF"),
        _item(11, "Flight data", "Noted"),
        _item(12, "Parking brake", "Set as required"),
    ),
    Phase.HANGAR: _checklist(
        _item(1, "Wheel chocks", "In place"),
        _item(2, "Pitot cover", "Installed"),
        _item(3, "Control lock", "Installed"),
        _item(4, "Tie-downs", "As required"),
    ),
}

CHECKLISTS: dict[tuple[AircraftType, Phase], PhaseChecklist] = {
    **{(_WT9, phase): checklist for phase, checklist in _WT9_CHECKLISTS.items()},
    **{(_PA28, phase): checklist for phase, checklist in _PA28_CHECKLISTS.items()},
}


# ---------------------------------------------------------------------------
# Speed reference cards
# ---------------------------------------------------------------------------


def _speeds(*rows: tuple[str, str, str]) -> tuple[SpeedReference, ...]:
    return tuple(
        SpeedReference(name=name, description=description, value=value)
        for name, description, value in rows
    )


SPEED_REFERENCES: dict[AircraftType, tuple[SpeedReference, ...]] = {
    _WT9: _speeds(
        ("Vso", "flaps down", "33"),
        ("Vs", "stall clean", "42"),
        ("Vr", "rotation", "40"),
        ("Vx", "best angle", "55"),
        ("Vy", "best rate", "70"),
        ("Vcc", "cruise climb", "85"),
        ("Vfe", "flaps ext.", "76"),
        ("VA", "600kg", "97"),
        ("VA", "410kg", "75"),
        ("Vbg", "best glide", "70"),
        ("Vapp", "init (clean)", "70"),
        ("Vapp", "init (F1)", "65"),
        ("Vapp", "interm (F2)", "65"),
        ("Vfinal", "F2-F3", "60-55"),
    ),
    _PA28: _speeds(
        ("Vso", "flaps down", "47"),
        ("Vs", "stall clean", "53"),
        ("Vr", "rotation", "53"),
        ("Vx", "best angle", "64"),
        ("Vy", "best rate", "76"),
        ("Vcc", "cruise climb", "87"),
        ("Vfe", "flaps ext.", "103"),
        ("VA", "2550 lbs", "113"),
        ("VA", "1634 lbs", "89"),
        ("Vbg", "best glide", "76"),
        ("Vapp", "initial", "90"),
        ("Vapp", "intermediate", "80"),
        ("Vfinal", "final/short", "70/66"),
    ),
}


# ---------------------------------------------------------------------------
# Catalog
# ---------------------------------------------------------------------------


class ChecklistCatalog:
    """Read-only queries over a ``(aircraft, phase)`` checklist table."""

    def __init__(
        self,
        checklists: dict[tuple[AircraftType, Phase], PhaseChecklist] | None = None,
        speed_references: dict[AircraftType, tuple[SpeedReference, ...]] | None = None,
    ):
        self._checklists = CHECKLISTS if checklists is None else checklists
        self._speed_references = (
            SPEED_REFERENCES if speed_references is None else speed_references
        )

    def checklist(self, aircraft: AircraftType, phase: Phase) -> PhaseChecklist:
        return self._checklists[(aircraft, phase)]

    def items(self, aircraft: AircraftType, phase: Phase) -> tuple[ChecklistItem, ...]:
        return self.checklist(aircraft, phase).items

    def visible_count(
        self, aircraft: AircraftType, phase: Phase, learning_mode: bool
    ) -> int:
        checklist = self.checklist(aircraft, phase)
        if learning_mode or checklist.memory_visible_count is None:
            return len(checklist.items)
        return checklist.memory_visible_count

    def visible_items(
        self, aircraft: AircraftType, phase: Phase, learning_mode: bool
    ) -> tuple[ChecklistItem, ...]:
        count = self.visible_count(aircraft, phase, learning_mode)
        return self.items(aircraft, phase)[:count]

    def has_hidden_items(
        self, aircraft: AircraftType, phase: Phase, learning_mode: bool
    ) -> bool:
        if learning_mode:
            return False
        return self.checklist(aircraft, phase).memory_visible_count is not None

    def target_speed(self, aircraft: AircraftType, phase: Phase) -> int | None:
        return self.checklist(aircraft, phase).target_speed_kt

    def speed_references(self, aircraft: AircraftType) -> tuple[SpeedReference, ...]:
        return self._speed_references[aircraft]

    def total_items(self, aircraft: AircraftType) -> int:
        return sum(len(self.items(aircraft, phase)) for phase in Phase)


CATALOG = ChecklistCatalog()
