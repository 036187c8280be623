from __future__ import annotations

from datetime import datetime, timedelta, timezone
from pathlib import Path
import sys
from typing import Any


import pytest


# Ensure the repository root (parent of ./tests) is importable during pytest collection.
# This avoids ModuleNotFoundError for imports like `import persistence...` under pytest import modes
# that don't automatically prepend the cwd/rootdir to sys.path.
REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))


class ManualClock:
    """Clock that only moves when a test tells it to."""

    def __init__(self, start: datetime | None = None) -> None:
        self._now = start or datetime(2025, 1, 1, tzinfo=timezone.utc)

    def now(self) -> datetime:
        return self._now

    def advance(self, *, seconds: float = 0, milliseconds: float = 0) -> None:
        self._now += timedelta(seconds=seconds, milliseconds=milliseconds)


class CountingStore:
    """Wraps a store and counts how often each operation reaches it."""

    def __init__(self, inner: Any) -> None:
        self._inner = inner
        self.loads = 0
        self.saves = 0

    def load(self) -> dict[str, Any]:
        self.loads += 1
        return self._inner.load()

    def save(self, doc: dict[str, Any]) -> datetime:
        self.saves += 1
        return self._inner.save(doc)

    def ping(self) -> bool:
        return self._inner.ping()


@pytest.fixture
def sandbox_project(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> Path:
    """
    Redirect the data directory to a temp dir so tests never touch real ./data.
    """
    data = tmp_path / "data"
    monkeypatch.setenv("DATA_DIR", str(data))
    monkeypatch.setenv("APP_ENV", "production")
    monkeypatch.delenv("CACHE_TTL_MS", raising=False)
    monkeypatch.delenv("MAX_BODY_BYTES", raising=False)
    return tmp_path


@pytest.fixture
def clock() -> ManualClock:
    return ManualClock()


@pytest.fixture
def store_path(sandbox_project: Path) -> Path:
    return sandbox_project / "data" / "site_data.json"


@pytest.fixture
def store(store_path: Path, clock: ManualClock):
    from persistence.site_data import DiskSiteDataStore

    return DiskSiteDataStore(store_path, clock=clock)


@pytest.fixture
def counting_store(store) -> CountingStore:
    return CountingStore(store)


@pytest.fixture
def cache(clock: ManualClock):
    from persistence.cache import DocumentCache

    return DocumentCache(ttl_ms=60_000, clock=clock)


@pytest.fixture
def repo(counting_store: CountingStore, cache):
    from persistence.repositories import CachedSiteDataRepository

    return CachedSiteDataRepository(counting_store, cache)
