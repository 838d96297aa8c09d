"""GPX and JSON import/export of logged flights.

GPX layout (GPX 1.1, ``pc`` extension namespace)::

    gpx
      metadata/{name, desc, time}
      trk
        name
        extensions/pc:flightData/{pc:name, pc:airplane, pc:aircraftType,
            pc:startTime, pc:engineStartTime, pc:lineUpTime, pc:landingTime,
            pc:engineShutdownTime, pc:stopTime, pc:distanceKm,
            pc:goAroundCount, pc:touchAndGoCount, pc:notes}
        trkseg
          trkpt[@lat, @lon]/{ele, time, extensions/{pc:speed, pc:course}}

Times are UTC in whole seconds with a ``Z`` suffix, the form the mobile
app reads back.  Unrecorded times are omitted.  Readers match elements by
local name, so files written with another prefix (or without a namespace)
import as well.

Import functions return ``None`` for input they cannot make sense of; they
never raise.
"""

from __future__ import annotations

import datetime
import json
import logging
import xml.etree.ElementTree as ET
from typing import Iterator

import pydantic

from aerocheck.config import config
from aerocheck.flight_data import AircraftType, Flight, GPSPoint
from aerocheck.flight_track import sanitize_track
from aerocheck.utils import isoformat_utc

logger = logging.getLogger(__name__)

GPX_NS = "http://www.topografix.com/GPX/1/1"
XSI_NS = "http://www.w3.org/2001/XMLSchema-instance"
GPX_SCHEMA_LOCATION = f"{GPX_NS} http://www.topografix.com/GPX/1/1/gpx.xsd"
GPX_DESCRIPTION = "Flight recorded with AéroCheck app"

ET.register_namespace("", GPX_NS)
ET.register_namespace("xsi", XSI_NS)
ET.register_namespace("pc", config.GPX_NAMESPACE)

# Milestone and session times in the flightData block, in write order
_FLIGHT_TIME_FIELDS: dict[str, str] = {
    "startTime": "start_time",
    "engineStartTime": "engine_start_time",
    "lineUpTime": "line_up_time",
    "landingTime": "landing_time",
    "engineShutdownTime": "engine_shutdown_time",
    "stopTime": "stop_time",
}


# ---------------------------------------------------------------------------
# Export
# ---------------------------------------------------------------------------


def _gpx(tag: str) -> str:
    return f"{{{GPX_NS}}}{tag}"


def _pc(tag: str) -> str:
    return f"{{{config.GPX_NAMESPACE}}}{tag}"


def _sub(parent: ET.Element, tag: str, text: str | None = None) -> ET.Element:
    element = ET.SubElement(parent, tag)
    if text is not None:
        element.text = text
    return element


def flight_to_gpx(flight: Flight) -> str:
    """Serialize *flight* to GPX 1.1 text."""
    root = ET.Element(
        _gpx("gpx"),
        {
            "version": "1.1",
            "creator": config.GPX_CREATOR,
            f"{{{XSI_NS}}}schemaLocation": GPX_SCHEMA_LOCATION,
        },
    )

    metadata = _sub(root, _gpx("metadata"))
    _sub(metadata, _gpx("name"), f"{flight.display_name} - {flight.formatted_date}")
    _sub(metadata, _gpx("desc"), GPX_DESCRIPTION)
    if flight.start_time is not None:
        _sub(metadata, _gpx("time"), isoformat_utc(flight.start_time))

    trk = _sub(root, _gpx("trk"))
    _sub(trk, _gpx("name"), flight.airplane)

    flight_data = _sub(_sub(trk, _gpx("extensions")), _pc("flightData"))
    _sub(flight_data, _pc("name"), flight.name)
    _sub(flight_data, _pc("airplane"), flight.airplane)
    if flight.aircraft_type is not None:
        _sub(flight_data, _pc("aircraftType"), str(flight.aircraft_type))
    for tag, field in _FLIGHT_TIME_FIELDS.items():
        value = getattr(flight, field)
        if value is not None:
            _sub(flight_data, _pc(tag), isoformat_utc(value))
    _sub(flight_data, _pc("distanceKm"), f"{flight.distance_km:.2f}")
    _sub(flight_data, _pc("goAroundCount"), str(flight.go_around_count))
    _sub(flight_data, _pc("touchAndGoCount"), str(flight.touch_and_go_count))
    if flight.notes:
        _sub(flight_data, _pc("notes"), flight.notes)

    trkseg = _sub(trk, _gpx("trkseg"))
    for point in flight.gps_track:
        trkpt = _sub(trkseg, _gpx("trkpt"))
        trkpt.set("lat", repr(point.latitude))
        trkpt.set("lon", repr(point.longitude))
        _sub(trkpt, _gpx("ele"), repr(point.altitude))
        _sub(trkpt, _gpx("time"), isoformat_utc(point.timestamp))
        extensions = _sub(trkpt, _gpx("extensions"))
        _sub(extensions, _pc("speed"), repr(point.speed))
        _sub(extensions, _pc("course"), repr(point.course))

    ET.indent(root, space="  ")
    return '<?xml version="1.0" encoding="UTF-8"?>\n' + ET.tostring(
        root, encoding="unicode"
    )


def flight_to_json(flight: Flight) -> bytes:
    """All flight fields, camelCase keys, ISO-8601 dates in whole seconds."""
    return flight.model_dump_json(
        by_alias=True, indent=2, context={"whole_seconds": True}
    ).encode("utf-8")


# ---------------------------------------------------------------------------
# Import
# ---------------------------------------------------------------------------


def _local(tag: str) -> str:
    return tag.rsplit("}", 1)[-1]


def _children(element: ET.Element, name: str) -> Iterator[ET.Element]:
    return (child for child in element if _local(child.tag) == name)


def _child(element: ET.Element | None, name: str) -> ET.Element | None:
    if element is None:
        return None
    return next(_children(element, name), None)


def _text(element: ET.Element | None, name: str) -> str | None:
    child = _child(element, name)
    if child is None or child.text is None:
        return None
    return child.text.strip()


def _parse_time(text: str | None) -> datetime.datetime | None:
    if not text:
        return None
    try:
        value = datetime.datetime.fromisoformat(text)
    except ValueError:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=datetime.timezone.utc)
    try:
        return value.astimezone(datetime.timezone.utc)
    except OverflowError:
        return None


def _parse_float(text: str | None, default: float = 0.0) -> float:
    if text is None:
        return default
    try:
        return float(text)
    except ValueError:
        return default


def _parse_int(text: str | None) -> int:
    if text is None:
        return 0
    try:
        return max(0, int(text))
    except ValueError:
        return 0


def _parse_point(trkpt: ET.Element) -> GPSPoint | None:
    try:
        latitude = float(trkpt.attrib["lat"])
        longitude = float(trkpt.attrib["lon"])
    except (KeyError, ValueError):
        return None

    timestamp = _parse_time(_text(trkpt, "time"))
    if timestamp is None:
        return None

    extensions = _child(trkpt, "extensions")
    return GPSPoint(
        latitude=latitude,
        longitude=longitude,
        altitude=_parse_float(_text(trkpt, "ele")),
        timestamp=timestamp,
        speed=_parse_float(_text(extensions, "speed")),
        course=_parse_float(_text(extensions, "course")),
    )


def flight_from_gpx(data: bytes) -> Flight | None:
    """Parse GPX written by ``flight_to_gpx`` (or any GPX with a track)."""
    try:
        root = ET.fromstring(data)
    except (ET.ParseError, LookupError, ValueError):
        # LookupError: unknown encoding in the XML declaration
        return None

    if _local(root.tag) != "gpx":
        return None
    trk = _child(root, "trk")
    if trk is None:
        return None

    flight_data = _child(_child(trk, "extensions"), "flightData")

    fields: dict = {}
    airplane = _text(flight_data, "airplane") or _text(trk, "name")
    if airplane:
        fields["airplane"] = airplane
    fields["name"] = _text(flight_data, "name") or ""
    fields["notes"] = _text(flight_data, "notes") or ""
    fields["go_around_count"] = _parse_int(_text(flight_data, "goAroundCount"))
    fields["touch_and_go_count"] = _parse_int(_text(flight_data, "touchAndGoCount"))

    aircraft_type = _text(flight_data, "aircraftType")
    if aircraft_type in {t.value for t in AircraftType}:
        fields["aircraft_type"] = AircraftType(aircraft_type)

    for tag, field in _FLIGHT_TIME_FIELDS.items():
        fields[field] = _parse_time(_text(flight_data, tag))

    points: list[GPSPoint] = []
    skipped = 0
    for trkseg in _children(trk, "trkseg"):
        for trkpt in _children(trkseg, "trkpt"):
            point = _parse_point(trkpt)
            if point is None:
                skipped += 1
                continue
            points.append(point)
    if skipped:
        logger.warning(f"GPX import: skipped {skipped} track points without position or time")
    points = sanitize_track(points)

    if fields["start_time"] is None:
        fields["start_time"] = _parse_time(_text(_child(root, "metadata"), "time"))
    if fields["stop_time"] is None and points:
        fields["stop_time"] = points[-1].timestamp

    try:
        return Flight(gps_track=tuple(points), **fields)
    except pydantic.ValidationError as e:
        logger.warning(f"GPX import: not a valid flight ({e.error_count()} errors)")
        return None


def flight_from_json(data: bytes) -> Flight | None:
    """Parse a JSON flight object; ``None`` for anything that is not one."""
    try:
        payload = json.loads(data)
    except (ValueError, RecursionError):
        return None
    if not isinstance(payload, dict) or "id" not in payload:
        return None

    try:
        return Flight.model_validate(payload)
    except (pydantic.ValidationError, OverflowError) as e:
        logger.warning(f"JSON import: not a valid flight ({type(e).__name__})")
        return None


def import_flight_bytes(data: bytes) -> Flight | None:
    """Try GPX, then JSON; the first format that parses wins."""
    flight = flight_from_gpx(data)
    if flight is None:
        flight = flight_from_json(data)
    return flight
