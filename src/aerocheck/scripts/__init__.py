"""
AeroCheck Scripts Package

Command-line maintenance scripts for the flight log.

Available scripts:
- export_flights: Write logged flights to GPX or JSON files
- import_flights: Import GPX or JSON files into the flight log
"""

__version__ = "1.0.0"
__all__ = ["export_flights", "import_flights"]
