from __future__ import annotations

from .cache import CacheEntry, DocumentCache
from .clock import SYSTEM_CLOCK, Clock, SystemClock
from .errors import InvalidInput, SiteDataError, StoreCorrupted, StoreUnavailable
from .interfaces import SiteDataStore
from .repositories import AsyncSiteDataRepository, CachedSiteDataRepository
from .site_data import DiskSiteDataStore, SiteDataRecord, validate_document

__all__ = [
    "CacheEntry",
    "DocumentCache",
    "Clock",
    "SystemClock",
    "SYSTEM_CLOCK",
    "SiteDataError",
    "InvalidInput",
    "StoreUnavailable",
    "StoreCorrupted",
    "SiteDataStore",
    "DiskSiteDataStore",
    "SiteDataRecord",
    "validate_document",
    "AsyncSiteDataRepository",
    "CachedSiteDataRepository",
]
