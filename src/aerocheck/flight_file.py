"""
Flight File Module

This module provides utilities for naming and finding exported flight files
using the convention: <yyyy-mm-dd>_<descriptive_name>.<extension>

Exports are GPX (``.gpx``) or JSON (``.json``) files; the descriptive name is
a slug of the flight's display name.
"""

import datetime
import re
from pathlib import Path
from typing import List, Optional

EXPORT_EXTENSIONS = ("gpx", "json")


def slugify(description: str) -> str:
    """
    Turn a human-readable description into a filename-safe slug.

    Args:
        description: Human-readable description

    Returns:
        str: Lowercase slug with underscores, e.g. "circuits_f_hvxa"
    """
    clean_description = re.sub(r"[^a-zA-Z0-9\s_-]", "", description.lower())
    clean_description = re.sub(r"[\s-]+", "_", clean_description.strip())
    return clean_description.strip("_") or "flight"


def suggest_export_filename(
    start_time: Optional[datetime.datetime], description: str
) -> str:
    """
    Suggest a filename stem following the export naming convention.

    Args:
        start_time: Flight start time (the date part is used), or None
        description: Human-readable description, usually the display name

    Returns:
        str: Suggested filename without extension

    Example:
        >>> suggest_export_filename(datetime.datetime(2025, 3, 1, 9, 30), "Circuits (F-HVXA)")
        "2025-03-01_circuits_f_hvxa"
    """
    date_part = start_time.strftime("%Y-%m-%d") if start_time else "undated"
    return f"{date_part}_{slugify(description)}"


def detect_format(path: Path) -> Optional[str]:
    """
    Return the export format of a file from its extension.

    Args:
        path: File path

    Returns:
        Optional[str]: "gpx" or "json" (case-insensitive), None otherwise
    """
    extension = path.suffix.lstrip(".").lower()
    if extension in EXPORT_EXTENSIONS:
        return extension
    return None


def find_flight_files(search_dir: Path) -> List[Path]:
    """
    Find all GPX/JSON flight files in a directory.

    Args:
        search_dir: Directory to search (not recursive)

    Returns:
        List[Path]: Sorted list of paths, empty if the directory does not exist
    """
    if not search_dir.exists():
        return []

    found_files = [
        file_path
        for file_path in search_dir.iterdir()
        if file_path.is_file() and detect_format(file_path) is not None
    ]
    return sorted(found_files)


def unique_path(directory: Path, stem: str, extension: str) -> Path:
    """
    Return a path in *directory* that does not exist yet.

    Two flights on the same day with the same name get "_2", "_3", ...
    suffixes.

    Example:
        >>> unique_path(Path("out"), "2025-03-01_f_hvxa", "gpx")
        PosixPath('out/2025-03-01_f_hvxa_2.gpx')  # when the first one exists
    """
    candidate = directory / f"{stem}.{extension}"
    counter = 2
    while candidate.exists():
        candidate = directory / f"{stem}_{counter}.{extension}"
        counter += 1
    return candidate
