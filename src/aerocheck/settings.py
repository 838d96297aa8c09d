"""User settings, persisted under ``config.SETTINGS_KEY``."""

from __future__ import annotations

import pydantic
from pydantic.alias_generators import to_camel

from aerocheck.flight_data import AircraftType


class AppSettings(pydantic.BaseModel):
    model_config = pydantic.ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        validate_assignment=True,
    )

    selected_aircraft: AircraftType = AircraftType.WT9_DYNAMIC
    keep_screen_on: bool = True
    gps_recording_interval: float = pydantic.Field(default=5.0, ge=1.0, le=30.0)
    """Seconds between retained track points."""
    show_speed_reference: bool = True
    step_by_step_highlighting: bool = True
    learning_mode: bool = False
    """Show memorizable items too (study) instead of hiding them (self-test)."""

    @property
    def default_airplane(self) -> str:
        return self.selected_aircraft.registration
