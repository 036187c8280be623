from __future__ import annotations

import logging
import threading
from pathlib import Path
from typing import Any, Callable

from json_store import atomic_write_json, read_json

logger = logging.getLogger(__name__)


class PathLockRegistry:
    """
    Provides a stable lock per normalized file path to avoid global contention.
    """

    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._locks: dict[str, threading.Lock] = {}

    def lock_for(self, path: Path) -> threading.Lock:
        key = str(path.resolve())
        with self._guard:
            return self._locks.setdefault(key, threading.Lock())


GLOBAL_PATH_LOCKS = PathLockRegistry()


class DiskJsonDocumentStore:
    """
    Stores a single JSON document on disk at a fixed path.

    - load() returns None for a missing/empty file and raises on I/O or decode errors.
    - Writes are atomic.
    - update() holds the path lock across read and write.
    """

    def __init__(self, path: Path):
        self._path = path

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> Any | None:
        with GLOBAL_PATH_LOCKS.lock_for(self._path):
            return read_json(self._path)

    def update(self, mutate: Callable[[Any | None], Any]) -> Any:
        with GLOBAL_PATH_LOCKS.lock_for(self._path):
            try:
                current = read_json(self._path)
            except ValueError:
                logger.warning("%s does not hold valid JSON; replacing it", self._path)
                current = None
            doc = mutate(current)
            atomic_write_json(self._path, doc)
            return doc
