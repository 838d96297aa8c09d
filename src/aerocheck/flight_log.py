"""The flight log: completed flights, most recent first.

Every mutation is written through to the key-value store.
"""

from __future__ import annotations

import logging
import uuid
from typing import Iterable, Iterator

import pydantic

from aerocheck import gpx
from aerocheck.config import config
from aerocheck.exceptions import (
    FlightNotFoundError,
    FlightPositionError,
    PersistenceError,
)
from aerocheck.flight_data import Flight
from aerocheck.storage import KeyValueStore

logger = logging.getLogger(__name__)

_FLIGHT_LIST = pydantic.TypeAdapter(list[Flight])


class FlightLog:
    def __init__(self, store: KeyValueStore, key: str = config.FLIGHTS_KEY):
        self._store = store
        self._key = key
        self._flights: list[Flight] = []

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def load(self) -> None:
        data = self._store.load(self._key)
        if data is None:
            self._flights = []
            return

        try:
            self._flights = _FLIGHT_LIST.validate_json(data)
        except pydantic.ValidationError as e:
            logger.error(f"Stored flight log '{self._key}' is unreadable: {e}")
            raise PersistenceError(f"Stored flight log '{self._key}' is unreadable") from e
        logger.debug(f"Loaded {len(self._flights)} flights")

    def save(self) -> None:
        data = _FLIGHT_LIST.dump_json(self._flights, by_alias=True)
        self._store.save(self._key, data)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    @property
    def entries(self) -> tuple[Flight, ...]:
        return tuple(self._flights)

    def __len__(self) -> int:
        return len(self._flights)

    def __iter__(self) -> Iterator[Flight]:
        return iter(tuple(self._flights))

    def __contains__(self, flight_id: object) -> bool:
        return any(flight.id == flight_id for flight in self._flights)

    def get(self, flight_id: uuid.UUID) -> Flight:
        return self._flights[self._index(flight_id)]

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def prepend(self, flight: Flight) -> None:
        self._flights.insert(0, flight)
        self.save()

    def delete(self, flight_id: uuid.UUID) -> Flight:
        flight = self._flights.pop(self._index(flight_id))
        logger.info(f"Deleted flight {flight.display_name} ({flight.id})")
        self.save()
        return flight

    def delete_at(self, indices: Iterable[int]) -> list[Flight]:
        """Delete the entries at *indices* (positions in the current list)."""
        positions = sorted(set(indices), reverse=True)
        for position in positions:
            if not 0 <= position < len(self._flights):
                raise FlightPositionError(f"No flight at position {position}")

        removed = [self._flights.pop(position) for position in positions]
        self.save()
        return removed[::-1]

    def rename(self, flight_id: uuid.UUID, name: str) -> Flight:
        return self._update(flight_id, name=name)

    def update_notes(self, flight_id: uuid.UUID, notes: str) -> Flight:
        return self._update(flight_id, notes=notes)

    # ------------------------------------------------------------------
    # Import / export
    # ------------------------------------------------------------------

    def import_bytes(self, data: bytes) -> Flight | None:
        """Import a GPX or JSON flight; ``None`` when neither format parses."""
        flight = gpx.import_flight_bytes(data)
        if flight is None:
            logger.warning("Import failed: data is neither a GPX nor a JSON flight")
            return None

        if flight.id in self:
            flight = flight.model_copy(update={"id": uuid.uuid4()})
            logger.info(f"Imported flight id already in the log, assigned {flight.id}")

        self.prepend(flight)
        logger.info(f"Imported flight {flight.display_name} ({len(flight.gps_track)} points)")
        return flight

    def export_gpx(self, flight_id: uuid.UUID) -> str:
        return gpx.flight_to_gpx(self.get(flight_id))

    def export_json(self, flight_id: uuid.UUID) -> bytes:
        return gpx.flight_to_json(self.get(flight_id))

    # ------------------------------------------------------------------

    def _index(self, flight_id: uuid.UUID) -> int:
        for i, flight in enumerate(self._flights):
            if flight.id == flight_id:
                return i
        raise FlightNotFoundError(f"No flight with id {flight_id}")

    def _update(self, flight_id: uuid.UUID, **changes) -> Flight:
        i = self._index(flight_id)
        self._flights[i] = self._flights[i].model_copy(update=changes)
        self.save()
        return self._flights[i]
