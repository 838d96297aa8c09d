class AeroCheckError(Exception):
    """Base class for errors raised by the aerocheck package."""


class FlightAlreadyActiveError(AeroCheckError):
    """A flight was started while another one is still in progress."""


class NoActiveFlightError(AeroCheckError):
    """An operation needed a flight in progress and there is none."""


class FlightNotFoundError(AeroCheckError):
    """No flight with the requested id exists in the flight log."""


class PersistenceError(AeroCheckError):
    """Reading or writing the key-value store failed."""


class FlightPositionError(AeroCheckError, IndexError):
    """A position in the flight log is out of range."""
