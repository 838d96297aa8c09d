"""Tests for the flight log and GPX/JSON import/export"""

import datetime
import json
import uuid

import pytest

from aerocheck import gpx
from aerocheck.config import config
from aerocheck.exceptions import (
    AeroCheckError,
    FlightNotFoundError,
    FlightPositionError,
    PersistenceError,
)
from aerocheck.flight_data import AircraftType, Flight, GPSPoint
from aerocheck.flight_log import FlightLog

from conftest import T0


def at(seconds: float) -> datetime.datetime:
    return T0 + datetime.timedelta(seconds=seconds)


@pytest.fixture
def flight():
    track = tuple(
        GPSPoint(
            latitude=48.60 + i * 0.01,
            longitude=2.30,
            altitude=100.0 + i * 50,
            timestamp=at(600 + i * 5),
            speed=40.0 + i,
            course=10.0,
        )
        for i in range(4)
    )
    return Flight(
        name="Circuits",
        airplane="F-HVXA",
        aircraft_type=AircraftType.WT9_DYNAMIC,
        start_time=T0,
        stop_time=at(3600),
        engine_start_time=at(300),
        line_up_time=at(720),
        landing_time=at(3000),
        engine_shutdown_time=at(3300),
        gps_track=track,
        notes="Gusty <crosswind> & turbulence",
        go_around_count=1,
        touch_and_go_count=2,
    )


@pytest.fixture
def flight_log(store):
    log = FlightLog(store)
    log.load()
    return log


class TestFlightLogCrud:
    """Tests for list / get / delete / rename / notes."""

    def test_empty_store(self, flight_log):
        """A store without a flight log loads as empty."""
        assert flight_log.entries == ()

    def test_prepend_and_get(self, flight_log, flight):
        """Prepended flights are found by id."""
        flight_log.prepend(flight)
        assert flight_log.get(flight.id) == flight
        assert flight.id in flight_log

    def test_unknown_id(self, flight_log):
        """Looking up an unknown id raises FlightNotFoundError."""
        with pytest.raises(FlightNotFoundError):
            flight_log.get(uuid.uuid4())
        with pytest.raises(FlightNotFoundError):
            flight_log.delete(uuid.uuid4())

    def test_delete_by_id(self, flight_log, flight):
        """Deleting removes the entry and persists."""
        other = Flight(name="Other")
        flight_log.prepend(flight)
        flight_log.prepend(other)
        flight_log.delete(flight.id)

        assert flight_log.entries == (other,)

    def test_delete_at_indices(self, flight_log):
        """Several positions can be deleted at once."""
        flights = [Flight(name=f"F{i}") for i in range(4)]
        for f in flights:
            flight_log.prepend(f)
        # log order: F3, F2, F1, F0
        removed = flight_log.delete_at({0, 2})

        assert [f.name for f in removed] == ["F3", "F1"]
        assert [f.name for f in flight_log] == ["F2", "F0"]

    def test_delete_at_out_of_range(self, flight_log, flight):
        """An invalid position raises a package error and deletes nothing."""
        flight_log.prepend(flight)
        with pytest.raises(FlightPositionError) as excinfo:
            flight_log.delete_at([0, 5])
        assert isinstance(excinfo.value, AeroCheckError)
        assert len(flight_log) == 1

    def test_rename_and_notes_persist(self, store, flight_log, flight):
        """Renames and note edits are written to the store."""
        flight_log.prepend(flight)
        flight_log.rename(flight.id, "Navigation")
        flight_log.update_notes(flight.id, "Smooth")

        reloaded = FlightLog(store)
        reloaded.load()
        entry = reloaded.get(flight.id)
        assert entry.name == "Navigation"
        assert entry.notes == "Smooth"
        assert entry.display_name == "Navigation (F-HVXA)"

    def test_corrupt_store(self, store):
        """An unreadable stored log raises PersistenceError."""
        store.save(config.FLIGHTS_KEY, b'[{"id": "not-a-uuid"}]')
        with pytest.raises(PersistenceError):
            FlightLog(store).load()


class TestGPX:
    """Tests for GPX export and import."""

    def test_export_layout(self, flight):
        """The GPX holds flight data extensions and one trkpt per point."""
        text = gpx.flight_to_gpx(flight)

        assert text.startswith('<?xml version="1.0" encoding="UTF-8"?>')
        assert 'creator="AeroCheck"' in text
        assert text.count("<trkpt ") == 4
        assert "<pc:flightData>" in text
        assert "<pc:lineUpTime>2025-03-01T09:12:00Z</pc:lineUpTime>" in text
        assert f"<pc:distanceKm>{flight.distance_km:.2f}</pc:distanceKm>" in text
        assert "<name>Circuits (F-HVXA) - Mar 1, 2025</name>" in text
        assert "&lt;crosswind&gt; &amp; turbulence" in text

    def test_round_trip(self, flight):
        """Importing an exported GPX restores the flight data."""
        imported = gpx.flight_from_gpx(gpx.flight_to_gpx(flight).encode("utf-8"))

        assert imported is not None
        assert imported.milestones == flight.milestones
        assert (imported.start_time, imported.stop_time) == (flight.start_time, flight.stop_time)
        assert (imported.name, imported.airplane, imported.notes) == (
            flight.name,
            flight.airplane,
            flight.notes,
        )
        assert imported.aircraft_type is AircraftType.WT9_DYNAMIC
        assert (imported.go_around_count, imported.touch_and_go_count) == (1, 2)
        assert [p.timestamp for p in imported.gps_track] == [p.timestamp for p in flight.gps_track]
        assert imported.gps_track[2].altitude == pytest.approx(200.0)
        assert imported.gps_track[3].speed == pytest.approx(43.0)

    def test_plain_gpx_fallbacks(self):
        """A GPX without flight data takes times from metadata and the last point."""
        data = b"""<?xml version="1.0"?>
        <gpx version="1.1" xmlns="http://www.topografix.com/GPX/1/1">
          <metadata><time>2025-03-01T09:00:00Z</time></metadata>
          <trk>
            <name>HB-PFA</name>
            <trkseg>
              <trkpt lat="46.5" lon="6.6"><ele>400</ele><time>2025-03-01T09:05:00Z</time></trkpt>
              <trkpt lat="46.6" lon="6.7"><ele>900</ele><time>2025-03-01T09:35:00Z</time></trkpt>
            </trkseg>
          </trk>
        </gpx>"""
        flight = gpx.flight_from_gpx(data)

        assert flight.airplane == "HB-PFA"
        assert flight.start_time == T0
        assert flight.stop_time == at(35 * 60)
        assert len(flight.gps_track) == 2
        assert flight.engine_start_time is None

    def test_non_monotonic_points_are_dropped(self):
        """Track points going back in time are removed on import."""
        data = b"""<gpx xmlns="http://www.topografix.com/GPX/1/1"><trk><trkseg>
          <trkpt lat="46.5" lon="6.6"><time>2025-03-01T09:05:00Z</time></trkpt>
          <trkpt lat="46.6" lon="6.6"><time>2025-03-01T09:04:00Z</time></trkpt>
          <trkpt lat="46.7" lon="6.6"><time>2025-03-01T09:06:00Z</time></trkpt>
        </trkseg></trk></gpx>"""
        flight = gpx.flight_from_gpx(data)
        assert [p.latitude for p in flight.gps_track] == [46.5, 46.7]

    def test_missing_track_is_unparseable(self):
        """A GPX without a trk element is not a flight."""
        data = b'<gpx xmlns="http://www.topografix.com/GPX/1/1"><metadata/></gpx>'
        assert gpx.flight_from_gpx(data) is None

    def test_not_xml(self):
        """Arbitrary bytes are not a GPX flight."""
        assert gpx.flight_from_gpx(b"\x00\x01garbage") is None

    def test_unknown_encoding(self):
        """An XML declaration with an unknown encoding is not a GPX flight."""
        data = b'<?xml version="1.0" encoding="bogus"?><gpx/>'
        assert gpx.flight_from_gpx(data) is None
        assert gpx.import_flight_bytes(data) is None

    def test_times_out_of_range_in_utc(self):
        """Times that cannot be expressed in UTC are treated as missing."""
        data = b"""<gpx xmlns="http://www.topografix.com/GPX/1/1"
            xmlns:pc="http://aerocheck.app/gpx/1">
          <metadata><time>2025-03-01T09:00:00Z</time></metadata>
          <trk>
            <extensions><pc:flightData>
              <pc:startTime>0001-01-01T00:00:00+01:00</pc:startTime>
            </pc:flightData></extensions>
            <trkseg>
              <trkpt lat="46.5" lon="6.6"><time>0001-01-01T00:00:00+01:00</time></trkpt>
              <trkpt lat="46.6" lon="6.6"><time>2025-03-01T09:05:00Z</time></trkpt>
            </trkseg>
          </trk>
        </gpx>"""
        flight = gpx.import_flight_bytes(data)

        assert flight.start_time == T0
        assert [p.latitude for p in flight.gps_track] == [46.6]

    def test_whole_second_times(self, flight):
        """Sub-second times are written as whole seconds."""
        precise = flight.model_copy(
            update={"line_up_time": at(720.25), "engine_start_time": at(300.999)}
        )
        text = gpx.flight_to_gpx(precise)

        assert "<pc:lineUpTime>2025-03-01T09:12:00Z</pc:lineUpTime>" in text
        assert "<pc:engineStartTime>2025-03-01T09:05:00Z</pc:engineStartTime>" in text


class TestJSON:
    """Tests for JSON export and import."""

    def test_camel_case_keys(self, flight):
        """JSON uses camelCase keys and ISO-8601 dates."""
        payload = json.loads(gpx.flight_to_json(flight))
        assert payload["engineStartTime"] == "2025-03-01T09:05:00Z"
        assert payload["goAroundCount"] == 1
        assert len(payload["gpsTrack"]) == 4

    def test_round_trip(self, flight):
        """JSON import restores the exact flight."""
        assert gpx.flight_from_json(gpx.flight_to_json(flight)) == flight

    def test_whole_second_times(self, flight, flight_log):
        """Exports drop sub-seconds; the stored log keeps them."""
        point = flight.gps_track[0].model_copy(update={"timestamp": at(600.5)})
        precise = flight.model_copy(
            update={"engine_start_time": at(300.123456), "gps_track": (point,)}
        )
        payload = json.loads(gpx.flight_to_json(precise))

        assert payload["engineStartTime"] == "2025-03-01T09:05:00Z"
        assert payload["gpsTrack"][0]["timestamp"] == "2025-03-01T09:10:00Z"

        flight_log.prepend(precise)
        flight_log.load()
        assert flight_log.get(precise.id).engine_start_time == at(300.123456)

    def test_mobile_app_export(self):
        """A JSON flight without the optional counters imports."""
        data = json.dumps(
            {
                "id": "6F9619FF-8B86-D011-B42D-00C04FC964FF",
                "name": "",
                "airplane": "F-HVXA",
                "startTime": "2025-03-01T09:00:00Z",
                "engineStartTime": "2025-03-01T09:10:00Z",
                "gpsTrack": [
                    {
                        "id": "7F9619FF-8B86-D011-B42D-00C04FC964FF",
                        "latitude": 48.6,
                        "longitude": 2.3,
                        "altitude": 100,
                        "timestamp": "2025-03-01T09:11:00Z",
                        "speed": 25.5,
                        "course": 90,
                    }
                ],
                "notes": "",
            }
        ).encode()
        flight = gpx.flight_from_json(data)

        assert flight.engine_start_time == at(600)
        assert flight.go_around_count == 0
        assert flight.gps_track[0].speed == 25.5

    @pytest.mark.parametrize(
        "data",
        [
            b"[]",
            b"{}",
            b"{not json",
            b'{"id": "x"}',
            b"[" * 100_000,
            b'{"id": "6F9619FF-8B86-D011-B42D-00C04FC964FF", '
            b'"startTime": "0001-01-01T00:30:00+01:00"}',
        ],
    )
    def test_unparseable(self, data):
        """Anything but a flight object is rejected."""
        assert gpx.flight_from_json(data) is None


class TestImportExport:
    """Tests for FlightLog.import_bytes and exports."""

    def test_import_gpx(self, flight_log, flight):
        """GPX bytes are imported and prepended."""
        imported = flight_log.import_bytes(gpx.flight_to_gpx(flight).encode("utf-8"))
        assert flight_log.entries == (imported,)
        assert imported.name == "Circuits"

    def test_import_json_keeps_id(self, flight_log, flight):
        """A JSON flight new to the log keeps its id."""
        imported = flight_log.import_bytes(gpx.flight_to_json(flight))
        assert imported.id == flight.id

    def test_import_duplicate_id_gets_new_id(self, flight_log, flight):
        """Importing a flight already in the log does not duplicate the id."""
        flight_log.prepend(flight)
        imported = flight_log.import_bytes(flight_log.export_json(flight.id))

        assert imported.id != flight.id
        assert len(flight_log) == 2
        assert len({f.id for f in flight_log}) == 2

    def test_import_garbage(self, flight_log):
        """Unparseable bytes report failure and change nothing."""
        assert flight_log.import_bytes(b"definitely not a flight") is None
        assert len(flight_log) == 0

    def test_export_gpx(self, flight_log, flight):
        """Exporting by id produces GPX text."""
        flight_log.prepend(flight)
        assert "<trkseg>" in flight_log.export_gpx(flight.id)
