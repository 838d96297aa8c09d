"""Key-value persistence for the flight log and the app settings.

A store maps a key to one serialized blob.  Failures are raised as
``PersistenceError`` so a lost flight never goes unnoticed.
"""

from __future__ import annotations

import abc
import logging
import os
import tempfile
from pathlib import Path

from aerocheck.exceptions import PersistenceError

logger = logging.getLogger(__name__)


class KeyValueStore(abc.ABC):
    @abc.abstractmethod
    def load(self, key: str) -> bytes | None:
        """Return the blob stored under *key*, or None if there is none."""

    @abc.abstractmethod
    def save(self, key: str, data: bytes) -> None:
        ...

    @abc.abstractmethod
    def delete(self, key: str) -> None:
        ...


class MemoryStore(KeyValueStore):
    def __init__(self):
        self.data: dict[str, bytes] = {}

    def load(self, key: str) -> bytes | None:
        return self.data.get(key)

    def save(self, key: str, data: bytes) -> None:
        self.data[key] = data

    def delete(self, key: str) -> None:
        self.data.pop(key, None)


class DirectoryStore(KeyValueStore):
    """One ``<key>.json`` file per key, written atomically."""

    def __init__(self, root: Path):
        self.root = Path(root)

    def path(self, key: str) -> Path:
        return self.root / f"{key}.json"

    def load(self, key: str) -> bytes | None:
        path = self.path(key)
        try:
            return path.read_bytes()
        except FileNotFoundError:
            return None
        except OSError as e:
            logger.error(f"Failed to read {path}: {e}")
            raise PersistenceError(f"Failed to read {path}") from e

    def save(self, key: str, data: bytes) -> None:
        path = self.path(key)
        try:
            self.root.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(dir=self.root, prefix=f".{key}.", suffix=".tmp")
            try:
                with os.fdopen(fd, "wb") as f:
                    f.write(data)
                os.replace(tmp_name, path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError as e:
            logger.error(f"Failed to write {path}: {e}")
            raise PersistenceError(f"Failed to write {path}") from e

    def delete(self, key: str) -> None:
        path = self.path(key)
        try:
            path.unlink(missing_ok=True)
        except OSError as e:
            logger.error(f"Failed to delete {path}: {e}")
            raise PersistenceError(f"Failed to delete {path}") from e
