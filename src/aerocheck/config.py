import pathlib

import pydantic_settings


class AeroCheckDirs(pydantic_settings.BaseSettings):
    model_config = pydantic_settings.SettingsConfigDict(env_prefix="AEROCHECK_DIR_")

    PROJECT_ROOT: pathlib.Path = pathlib.Path(__file__).parents[2]
    STORAGE: pathlib.Path = pathlib.Path.home() / ".aerocheck"
    EXPORT: pathlib.Path = PROJECT_ROOT / "Exports"


class AeroCheckConfig(pydantic_settings.BaseSettings):
    model_config = pydantic_settings.SettingsConfigDict(env_prefix="AEROCHECK_")

    DIR: AeroCheckDirs = AeroCheckDirs()

    # Key-value store keys
    FLIGHTS_KEY: str = "savedFlights"
    SETTINGS_KEY: str = "appSettings"

    # --- GPS signal quality ---
    # Units: Meters / Seconds
    HORIZONTAL_ACCURACY_THRESHOLD: float = 50.0
    SIGNAL_DEGRADED_AFTER: float = 2.5
    SIGNAL_LOST_AFTER: float = 10.0
    SIGNAL_CHECK_INTERVAL: float = 1.0

    # --- Automatic landing detection ---
    LOW_SPEED_THRESHOLD: float = 2.0  # m/s, about 4 kt
    REQUIRED_LOW_SPEED_READINGS: int = 3

    # --- Milestone offsets ---
    # Units: Seconds
    LINE_UP_OFFSET: float = 120.0
    AUTO_LANDING_OFFSET: float = 120.0

    # --- Unit conversion ---
    MPS_TO_KNOTS: float = 1.94384
    METERS_TO_FEET: float = 3.28084

    # --- GPX export ---
    GPX_CREATOR: str = "AeroCheck"
    GPX_NAMESPACE: str = "http://aerocheck.app/gpx/1"


config = AeroCheckConfig()
