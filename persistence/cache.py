from __future__ import annotations

import copy
import logging
import threading
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any

from .clock import SYSTEM_CLOCK, Clock

logger = logging.getLogger(__name__)

DEFAULT_TTL_MS = 60_000


@dataclass(frozen=True)
class CacheEntry:
    document: dict[str, Any]
    cached_at: datetime


class DocumentCache:
    """
    In-process, time-bounded cache holding at most one document.

    Expired entries are indistinguishable from absent ones. All operations are
    in-memory and never raise. Documents are deep-copied in and out so callers
    cannot mutate the cached value.

    Every write (replace/clear) bumps a generation counter. A read-through fill
    records the generation before going to the store and only lands if no write
    happened in between.
    """

    def __init__(self, *, ttl_ms: int = DEFAULT_TTL_MS, clock: Clock = SYSTEM_CLOCK) -> None:
        self._ttl = timedelta(milliseconds=ttl_ms)
        self._clock = clock
        self._lock = threading.Lock()
        self._entry: CacheEntry | None = None
        self._generation = 0

    @property
    def generation(self) -> int:
        with self._lock:
            return self._generation

    def get(self) -> dict[str, Any] | None:
        now = self._clock.now()
        with self._lock:
            entry = self._entry
        if entry is None or now - entry.cached_at >= self._ttl:
            logger.debug("site data cache miss")
            return None
        logger.debug("site data cache hit (age %s)", now - entry.cached_at)
        return copy.deepcopy(entry.document)

    def set(self, doc: dict[str, Any]) -> None:
        entry = CacheEntry(document=copy.deepcopy(doc), cached_at=self._clock.now())
        with self._lock:
            self._entry = entry
        logger.debug("site data cached")

    def fill(self, doc: dict[str, Any], generation: int) -> bool:
        """Cache a store read unless a write happened since `generation` was observed."""
        entry = CacheEntry(document=copy.deepcopy(doc), cached_at=self._clock.now())
        with self._lock:
            if self._generation != generation:
                logger.debug("site data cache fill skipped: written since read began")
                return False
            self._entry = entry
        logger.debug("site data cached from store")
        return True

    def replace(self, doc: dict[str, Any]) -> None:
        """Invalidate and repopulate in one step after a successful save."""
        entry = CacheEntry(document=copy.deepcopy(doc), cached_at=self._clock.now())
        with self._lock:
            self._generation += 1
            self._entry = entry
        logger.debug("site data cache replaced after save")

    def clear(self) -> None:
        with self._lock:
            self._generation += 1
            self._entry = None
        logger.debug("site data cache cleared")
