"""Tests for track helpers in flight_track.py"""

import datetime

import pandera.errors
import pytest

from aerocheck.flight_data import GPSPoint
from aerocheck.flight_track import (
    sanitize_track,
    track_dataframe,
    track_distance_m,
    track_schema,
    track_statistics,
)

from conftest import T0


def point(seconds, lat=0.0, lon=0.0, alt=0.0, speed=0.0):
    return GPSPoint(
        latitude=lat,
        longitude=lon,
        altitude=alt,
        timestamp=T0 + datetime.timedelta(seconds=seconds),
        speed=speed,
    )


class TestDistance:
    """Tests for geodesic track length."""

    def test_short_tracks_have_no_length(self):
        """Fewer than two points give zero."""
        assert track_distance_m([]) == 0.0
        assert track_distance_m([point(0)]) == 0.0

    def test_one_degree_of_longitude_on_equator(self):
        """One degree along the equator is about 111.32 km."""
        track = [point(0, lon=0.0), point(60, lon=1.0)]
        assert track_distance_m(track) == pytest.approx(111_319.49, rel=1e-5)

    def test_sums_segments(self):
        """Out and back doubles the distance."""
        out = [point(0, lat=46.0), point(60, lat=46.1)]
        back = out + [point(120, lat=46.0)]
        assert track_distance_m(back) == pytest.approx(2 * track_distance_m(out))


class TestSanitize:
    """Tests for dropping non-monotonic points."""

    def test_keeps_increasing_track(self):
        """An ordered track is unchanged."""
        track = [point(0), point(1), point(2)]
        assert sanitize_track(track) == track

    def test_drops_duplicates_and_backsteps(self, caplog):
        """Repeated or earlier timestamps are removed and logged."""
        track = [point(0), point(0), point(5), point(3), point(6)]
        kept = sanitize_track(track)
        assert [p.timestamp.second for p in kept] == [0, 5, 6]
        assert "dropped 2/5 points" in caplog.text


class TestDataFrame:
    """Tests for the pandas view of a track."""

    def test_columns_and_relative_time(self):
        """timestamp_s counts seconds from the first point."""
        df = track_dataframe([point(0, alt=100.0), point(5, alt=150.0)])
        assert list(df["timestamp_s"]) == [0.0, 5.0]
        assert list(df["alt_m"]) == [100.0, 150.0]
        assert str(df["time"].dt.tz) == "UTC"

    def test_empty_track(self):
        """An empty track gives an empty frame with the same columns."""
        df = track_dataframe([])
        assert df.empty
        assert {"timestamp_s", "lat_deg", "lon_deg"} <= set(df.columns)

    def test_schema_rejects_unsorted_frame(self):
        """The schema refuses time going backwards."""
        df = track_dataframe([point(0), point(5)])
        df["timestamp_s"] = [5.0, 0.0]
        with pytest.raises(pandera.errors.SchemaError):
            track_schema.validate(df)


class TestStatistics:
    """Tests for track summary numbers."""

    def test_statistics(self):
        """Max speed in knots, max altitude in feet, duration in seconds."""
        track = [
            point(0, lat=46.0, alt=400.0, speed=-1.0),
            point(30, lat=46.01, alt=500.0, speed=30.0),
            point(90, lat=46.02, alt=450.0, speed=20.0),
        ]
        stats = track_statistics(track)
        assert stats["duration_s"] == 90.0
        assert stats["max_speed_kt"] == pytest.approx(30.0 * 1.94384)
        assert stats["max_altitude_ft"] == pytest.approx(500.0 * 3.28084)
        assert stats["distance_km"] == pytest.approx(track_distance_m(track) / 1000.0)

    def test_empty(self):
        """An empty track yields zeros."""
        assert track_statistics([]) == {
            "distance_km": 0.0,
            "duration_s": 0.0,
            "max_speed_kt": 0.0,
            "max_altitude_ft": 0.0,
        }
