#!/usr/bin/env python3
"""
Import Flights Script

Imports GPX or JSON flight files into the flight log.  Directories are
searched (not recursively) for *.gpx and *.json files.

Usage:
    aerocheck-import PATH [PATH ...] [--storage-dir DIR] [--verbose]
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List

from aerocheck.config import config
from aerocheck.exceptions import PersistenceError
from aerocheck.flight_file import detect_format, find_flight_files
from aerocheck.flight_log import FlightLog
from aerocheck.scripts.export_flights import setup_logging
from aerocheck.storage import DirectoryStore

logger = logging.getLogger(__name__)


def collect_files(paths: List[Path]) -> List[Path]:
    files: List[Path] = []
    for path in paths:
        if path.is_dir():
            files.extend(find_flight_files(path))
        elif detect_format(path) is not None:
            files.append(path)
        else:
            logger.warning(f"Skipping {path}: not a .gpx or .json file")
    return files


def import_file(flight_log: FlightLog, path: Path) -> bool:
    try:
        data = path.read_bytes()
    except OSError as e:
        logger.error(f"Cannot read {path}: {e}")
        return False

    flight = flight_log.import_bytes(data)
    if flight is None:
        logger.error(f"{path.name}: not a flight file")
        return False

    logger.info(f"{path.name}: imported {flight.display_name} ({flight.formatted_date})")
    return True


def main():
    parser = argparse.ArgumentParser(description="Import GPX/JSON flights into the flight log")
    parser.add_argument("paths", nargs="+", type=Path, help="Files or directories")
    parser.add_argument(
        "--storage-dir",
        type=Path,
        default=config.DIR.STORAGE,
        help=f"Flight log directory (default: {config.DIR.STORAGE})",
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

    files = collect_files(args.paths)
    if not files:
        logger.warning("No flight files found.")
        return

    try:
        results = [import_file(flight_log, path) for path in files]
    except PersistenceError as e:
        logger.error(f"Cannot write the flight log: {e}")
        sys.exit(1)

    logger.info(f"Summary: {sum(results)} imported, {len(results) - sum(results)} failed.")


if __name__ == "__main__":
    main()
