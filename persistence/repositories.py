from __future__ import annotations

import asyncio
from datetime import datetime
from typing import Any, Protocol

from .cache import DocumentCache
from .interfaces import SiteDataStore
from .site_data import validate_document


class AsyncSiteDataRepository(Protocol):
    async def load(self) -> dict[str, Any]: ...
    async def save(self, doc: Any) -> datetime: ...
    async def ping(self) -> bool: ...


class CachedSiteDataRepository(AsyncSiteDataRepository):
    """
    Read-through / write-through composition of a SiteDataStore and a DocumentCache.

    Store calls run in a worker thread via asyncio.to_thread; the cache is only
    touched before or after a store call, never across one.
    """

    def __init__(self, store: SiteDataStore, cache: DocumentCache) -> None:
        self._store = store
        self._cache = cache

    async def load(self) -> dict[str, Any]:
        cached = self._cache.get()
        if cached is not None:
            return cached

        generation = self._cache.generation
        doc = await asyncio.to_thread(self._store.load)
        # Empty results are cached as well.
        if self._cache.fill(doc, generation):
            return doc

        # A save committed while the store read was in flight; its document wins.
        fresh = self._cache.get()
        return fresh if fresh is not None else doc

    async def save(self, doc: Any) -> datetime:
        document = validate_document(doc)
        timestamp = await asyncio.to_thread(self._store.save, document)
        self._cache.replace(document)
        return timestamp

    async def ping(self) -> bool:
        return await asyncio.to_thread(self._store.ping)

    def invalidate(self) -> None:
        self._cache.clear()
