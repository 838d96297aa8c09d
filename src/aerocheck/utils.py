"""Formatting and unit helpers for the aerocheck package."""

from __future__ import annotations

import datetime
import math
from typing import TYPE_CHECKING

from aerocheck.config import config

if TYPE_CHECKING:
    from aerocheck.flight_data import Flight


# ── unit conversion ─────────────────────────────────────────────────────────


def mps_to_knots(speed_ms: float) -> float:
    """Convert a GPS speed to knots.  Negative (invalid) speeds read as 0."""
    if speed_ms < 0:
        return 0.0
    return speed_ms * config.MPS_TO_KNOTS


def meters_to_feet(altitude_m: float) -> float:
    return altitude_m * config.METERS_TO_FEET


# ── durations and times ─────────────────────────────────────────────────────


def format_hms(seconds: float) -> str:
    """Convert *seconds* to ``"HH:MM:SS"``.

    Examples: ``"00:06:23"``, ``"01:15:00"``.  Negative durations clamp to
    zero.
    """
    total = max(0, int(math.floor(seconds)))
    h, remainder = divmod(total, 3600)
    m, s = divmod(remainder, 60)
    return f"{h:02d}:{m:02d}:{s:02d}"


def format_hours_minutes(seconds: float) -> str:
    """Convert *seconds* to ``"HH:MM"``."""
    total = max(0, int(math.floor(seconds)))
    h, remainder = divmod(total, 3600)
    return f"{h:02d}:{remainder // 60:02d}"


def format_clock_time(
    value: datetime.datetime | None, tz: datetime.tzinfo | None = None
) -> str | None:
    """Short wall-clock time (``"14:05"``) in *tz*, or local time when omitted."""
    if value is None:
        return None
    return value.astimezone(tz).strftime("%H:%M")


def isoformat_utc(value: datetime.datetime) -> str:
    """ISO-8601 in whole seconds with a ``Z`` suffix, e.g. ``"2025-03-01T10:00:00Z"``."""
    value = value.astimezone(datetime.timezone.utc)
    text = value.isoformat(timespec="seconds")
    return text.replace("+00:00", "Z")


# ── flight summary ──────────────────────────────────────────────────────────


def get_flight_summary_text(flight: Flight) -> str:
    """Build a short one-line summary of a logged flight.

    Returns
    -------
    str
        A compact info string such as
        ``"Circuits (F-HVXA) · Mar 1, 2025 · Flight Time: 01:05 · 42.3 km · 2 go-arounds"``.
    """
    parts: list[str] = [flight.display_name, flight.formatted_date]

    if flight.engine_start_time is not None:
        parts.append(f"Flight Time: {flight.formatted_duration}")

    if flight.gps_track:
        parts.append(flight.formatted_distance)

    if flight.go_around_count:
        parts.append(_plural(flight.go_around_count, "go-around"))
    if flight.touch_and_go_count:
        parts.append(_plural(flight.touch_and_go_count, "touch-and-go"))

    return " · ".join(parts)


def _plural(count: int, noun: str) -> str:
    return f"{count} {noun}" if count == 1 else f"{count} {noun}s"
