"""
Track helpers: a validated pandas view of a recorded GPS track plus geodesic
distance and summary statistics.

1. Recorded tracks are timestamp-monotonic as received.  Imported tracks are
   not guaranteed to be, e.g. GPX files concatenated from two recordings, so
   ``sanitize_track`` drops points whose timestamp does not strictly increase.

2. Distances are geodesic on the WGS 84 ellipsoid (pyproj ``Geod.inv``),
   summed over consecutive point pairs.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Sequence

import numpy as np
import pandas as pd
import pandera.pandas as pa
import pyproj

from aerocheck.config import config

if TYPE_CHECKING:
    from aerocheck.flight_data import GPSPoint

_GEOD = pyproj.Geod(ellps="WGS84")

# ---------------------------------------------------------------------------
# Track dataframe schema
# ---------------------------------------------------------------------------

track_schema = pa.DataFrameSchema(
    columns={
        "timestamp_s": pa.Column(
            float,
            checks=pa.Check(
                lambda s: s.is_monotonic_increasing,
                name="is_monotonic",
                error="timestamp_s must be monotonically increasing. Was the track sanitized?",
            ),
            nullable=False,
        ),
        "lat_deg": pa.Column(float, pa.Check.in_range(-90.0, 90.0), nullable=False),
        "lon_deg": pa.Column(float, pa.Check.in_range(-180.0, 180.0), nullable=False),
        "alt_m": pa.Column(float, nullable=False),
        "speed_ms": pa.Column(float, nullable=False),
        "course_deg": pa.Column(float, nullable=False),
    },
    strict=False,
    coerce=True,
)


def track_dataframe(points: Sequence[GPSPoint]) -> pd.DataFrame:
    """Return the track as a validated dataframe.

    ``timestamp_s`` is seconds since the first point.  The absolute time of
    each point is kept in the ``time`` column.
    """
    if not points:
        return pd.DataFrame(
            {
                "time": pd.Series(dtype="datetime64[ns, UTC]"),
                "timestamp_s": pd.Series(dtype=float),
                "lat_deg": pd.Series(dtype=float),
                "lon_deg": pd.Series(dtype=float),
                "alt_m": pd.Series(dtype=float),
                "speed_ms": pd.Series(dtype=float),
                "course_deg": pd.Series(dtype=float),
            }
        )

    t0 = points[0].timestamp
    df = pd.DataFrame(
        {
            "time": pd.to_datetime([p.timestamp for p in points], utc=True),
            "timestamp_s": [(p.timestamp - t0).total_seconds() for p in points],
            "lat_deg": [p.latitude for p in points],
            "lon_deg": [p.longitude for p in points],
            "alt_m": [p.altitude for p in points],
            "speed_ms": [p.speed for p in points],
            "course_deg": [p.course for p in points],
        }
    )
    return track_schema.validate(df)


# ---------------------------------------------------------------------------
# Sanitization
# ---------------------------------------------------------------------------


def sanitize_track(points: Sequence[GPSPoint]) -> list[GPSPoint]:
    """Drop points whose timestamp does not strictly increase."""
    logger = logging.getLogger("flight_track.sanitize_track")

    kept: list[GPSPoint] = []
    for point in points:
        if kept and point.timestamp <= kept[-1].timestamp:
            continue
        kept.append(point)

    dropped = len(points) - len(kept)
    if dropped > 0:
        logger.warning(
            f"Track sanitization: dropped {dropped}/{len(points)} points "
            f"with non-strictly-increasing timestamps."
        )
    return kept


# ---------------------------------------------------------------------------
# Distance & statistics
# ---------------------------------------------------------------------------


def track_distance_m(points: Sequence[GPSPoint]) -> float:
    """Geodesic length of the track in metres."""
    if len(points) < 2:
        return 0.0

    lat = np.fromiter((p.latitude for p in points), dtype=np.float64, count=len(points))
    lon = np.fromiter((p.longitude for p in points), dtype=np.float64, count=len(points))

    _fwd, _back, dist = _GEOD.inv(lon[:-1], lat[:-1], lon[1:], lat[1:])
    return float(np.sum(dist))


def track_statistics(points: Sequence[GPSPoint]) -> dict[str, float]:
    """Summary numbers for a track: distance, duration, max speed and altitude.

    Negative (invalid) speeds are ignored.  An empty track yields zeros.
    """
    df = track_dataframe(points)
    if df.empty:
        return {
            "distance_km": 0.0,
            "duration_s": 0.0,
            "max_speed_kt": 0.0,
            "max_altitude_ft": 0.0,
        }

    valid_speed = df["speed_ms"].where(df["speed_ms"] >= 0.0, 0.0)
    return {
        "distance_km": track_distance_m(points) / 1000.0,
        "duration_s": float(df["timestamp_s"].iloc[-1]),
        "max_speed_kt": float(valid_speed.max()) * config.MPS_TO_KNOTS,
        "max_altitude_ft": float(df["alt_m"].max()) * config.METERS_TO_FEET,
    }
