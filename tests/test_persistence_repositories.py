from __future__ import annotations

import asyncio
import threading

import pytest

from persistence.errors import InvalidInput, StoreUnavailable


def test_save_then_load_is_served_from_cache(repo, counting_store):
    async def _run():
        ts = await repo.save({"theme": "dark"})
        assert ts is not None

        assert await repo.load() == {"theme": "dark"}
        assert counting_store.saves == 1
        assert counting_store.loads == 0

    asyncio.run(_run())


def test_empty_store_then_save_then_load(repo, clock):
    async def _run():
        assert await repo.load() == {}

        clock.advance(seconds=1)
        await repo.save({"x": 1})

        clock.advance(seconds=1)
        assert await repo.load() == {"x": 1}

    asyncio.run(_run())


def test_load_after_ttl_refetches_and_recaches(repo, counting_store, clock):
    async def _run():
        await repo.save({"x": 1})

        clock.advance(seconds=61)
        assert await repo.load() == {"x": 1}
        assert counting_store.loads == 1

        assert await repo.load() == {"x": 1}
        assert counting_store.loads == 1

    asyncio.run(_run())


def test_save_replaces_previously_cached_document(repo, cache):
    async def _run():
        cache.set({"v": 1})
        await repo.save({"v": 2})
        assert cache.get() == {"v": 2}
        assert await repo.load() == {"v": 2}

    asyncio.run(_run())


def test_empty_load_result_is_cached(repo, counting_store):
    async def _run():
        assert await repo.load() == {}
        assert await repo.load() == {}
        assert counting_store.loads == 1

    asyncio.run(_run())


def test_round_trip_with_cleared_cache(repo, counting_store):
    doc = {"a": {"b": [1, 2, {"c": None}]}, "d": "text", "e": True}

    async def _run():
        await repo.save(doc)
        repo.invalidate()
        assert await repo.load() == doc
        assert counting_store.loads == 1

    asyncio.run(_run())


@pytest.mark.parametrize("bad", [{}, None, [1]])
def test_invalid_save_never_reaches_store_or_cache(repo, counting_store, cache, bad):
    async def _run():
        cache.set({"kept": True})
        with pytest.raises(InvalidInput):
            await repo.save(bad)
        assert counting_store.saves == 0
        assert cache.get() == {"kept": True}

    asyncio.run(_run())


class _BrokenStore:
    def load(self):
        raise StoreUnavailable("down")

    def save(self, doc):
        raise StoreUnavailable("down")

    def ping(self):
        return False


def test_store_failure_propagates_and_leaves_cache_alone(cache):
    from persistence.repositories import CachedSiteDataRepository

    repo = CachedSiteDataRepository(_BrokenStore(), cache)

    async def _run():
        with pytest.raises(StoreUnavailable):
            await repo.load()
        assert cache.get() is None

        cache.set({"old": 1})
        with pytest.raises(StoreUnavailable):
            await repo.save({"new": 1})
        assert cache.get() == {"old": 1}

        assert await repo.ping() is False

    asyncio.run(_run())


def test_concurrent_loads_and_saves_settle_on_last_save(repo):
    async def _run():
        await asyncio.gather(*(repo.save({"n": i}) for i in range(1, 6)), *(repo.load() for _ in range(5)))
        repo.invalidate()
        stored = await repo.load()
        assert stored["n"] in range(1, 6)

    asyncio.run(_run())


class _SlowLoadStore:
    """Store whose load reads immediately but only returns once released."""

    def __init__(self, inner) -> None:
        self._inner = inner
        self.read_done = threading.Event()
        self.release = threading.Event()

    def load(self):
        doc = self._inner.load()
        self.read_done.set()
        self.release.wait(timeout=5)
        return doc

    def save(self, doc):
        return self._inner.save(doc)

    def ping(self):
        return self._inner.ping()


def test_load_racing_a_save_does_not_recache_older_document(store, cache):
    from persistence.repositories import CachedSiteDataRepository

    store.save({"v": 0})
    slow = _SlowLoadStore(store)
    repo = CachedSiteDataRepository(slow, cache)

    async def _run():
        pending = asyncio.create_task(repo.load())
        await asyncio.to_thread(slow.read_done.wait, 5)

        await repo.save({"v": 1})
        slow.release.set()

        assert await pending == {"v": 1}
        assert await repo.load() == {"v": 1}
        assert cache.get() == {"v": 1}

    asyncio.run(_run())
