#!/usr/bin/env python3
"""
Export Flights Script

Writes every flight in the flight log to its own GPX or JSON file, named
<yyyy-mm-dd>_<flight_name>.<extension>.

Usage:
    aerocheck-export [--format {gpx,json}] [--output-dir DIR] [--refresh] [--verbose]

Examples:
    aerocheck-export
    aerocheck-export --format json --output-dir ~/Desktop/flights
"""

import argparse
import logging
import sys
from pathlib import Path

import rich.console
import rich.logging

from aerocheck.config import config
from aerocheck.exceptions import PersistenceError
from aerocheck.flight_data import Flight
from aerocheck.flight_file import unique_path
from aerocheck.flight_log import FlightLog
from aerocheck.gpx import flight_to_gpx, flight_to_json
from aerocheck.storage import DirectoryStore

logger = logging.getLogger(__name__)


def setup_logging(verbose: bool = False):
    log_format = "\\[[bold]%(name)s[/bold]] %(message)s"
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format=log_format,
        datefmt="[%X]",
        handlers=[
            rich.logging.RichHandler(
                console=rich.console.Console(color_system="auto"),
                show_level=True,
                show_path=False,
                enable_link_path=False,
                rich_tracebacks=True,
                tracebacks_show_locals=False,
                markup=True,
            )
        ],
    )


def export_flight(flight: Flight, output_dir: Path, fmt: str, refresh: bool) -> Path:
    """Write one flight and return the path written."""
    stem = flight.export_filename
    if refresh:
        output_path = output_dir / f"{stem}.{fmt}"
    else:
        output_path = unique_path(output_dir, stem, fmt)

    if fmt == "gpx":
        output_path.write_text(flight_to_gpx(flight), encoding="utf-8")
    else:
        output_path.write_bytes(flight_to_json(flight))

    logger.info(f"{flight.display_name} -> {output_path.name}")
    return output_path


def main():
    parser = argparse.ArgumentParser(description="Export logged flights to GPX or JSON")
    parser.add_argument("--format", choices=("gpx", "json"), default="gpx")
    parser.add_argument(
        "--storage-dir",
        type=Path,
        default=config.DIR.STORAGE,
        help=f"Flight log directory (default: {config.DIR.STORAGE})",
    )
    parser.add_argument(
        "--output-dir",
        type=Path,
        default=config.DIR.EXPORT,
        help=f"Output directory (default: {config.DIR.EXPORT})",
    )
    parser.add_argument(
        "--refresh", action="store_true", help="Overwrite files with the same name"
    )
    parser.add_argument("--verbose", action="store_true", help="Debug logging")
    args = parser.parse_args()

    setup_logging(args.verbose)

    flight_log = FlightLog(DirectoryStore(args.storage_dir))
    try:
        flight_log.load()
    except PersistenceError as e:
        logger.error(f"Cannot read the flight log: {e}")
        sys.exit(1)

    if not len(flight_log):
        logger.warning("The flight log is empty.")
        return

    args.output_dir.mkdir(parents=True, exist_ok=True)
    logger.info(f"Exporting {len(flight_log)} flights to {args.output_dir}")

    written = [
        export_flight(flight, args.output_dir, args.format, args.refresh)
        for flight in flight_log
    ]
    logger.info(f"Summary: {len(written)} files written.")


if __name__ == "__main__":
    main()
