from __future__ import annotations

import logging
import math
import os
from collections.abc import Mapping
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ValidationError, field_validator

from .clock import SYSTEM_CLOCK, Clock
from .disk_store import DiskJsonDocumentStore
from .errors import InvalidInput, StoreCorrupted, StoreUnavailable
from .interfaces import SiteDataStore

logger = logging.getLogger(__name__)

# The single record always lives under this key. There is no collection.
SINGLETON_KEY = "site_data"


class SiteDataRecord(BaseModel):
    """
    Mirrors the on-disk record layout:
      {
        "site_data": {
          "data": { ...arbitrary document... },
          "lastUpdated": "2025-01-01T00:00:00Z",
          "createdAt": "2025-01-01T00:00:00Z",
          "updatedAt": "2025-01-01T00:00:00Z"
        }
      }
    """

    data: dict[str, Any]
    lastUpdated: datetime
    createdAt: datetime | None = None
    updatedAt: datetime | None = None

    @field_validator("lastUpdated", "createdAt", "updatedAt")
    @classmethod
    def _as_utc(cls, value: datetime | None) -> datetime | None:
        if value is None or value.tzinfo is not None:
            return value
        return value.replace(tzinfo=timezone.utc)

    def to_disk_doc(self) -> dict[str, Any]:
        return {SINGLETON_KEY: self.model_dump(mode="json")}


def _has_non_finite(value: Any) -> bool:
    if isinstance(value, float):
        return not math.isfinite(value)
    if isinstance(value, Mapping):
        return any(_has_non_finite(v) for v in value.values())
    if isinstance(value, (list, tuple)):
        return any(_has_non_finite(v) for v in value)
    return False


def validate_document(doc: Any) -> dict[str, Any]:
    """Accept any non-empty JSON object; reject everything else with InvalidInput."""
    if not isinstance(doc, Mapping):
        raise InvalidInput("document must be a JSON object")
    if len(doc) == 0:
        raise InvalidInput("document must contain at least one key")
    # NaN/Infinity are not JSON and could never be served back.
    if _has_non_finite(doc):
        raise InvalidInput("document must not contain NaN or Infinity")
    return dict(doc)


def records_from_disk_doc(raw: Any) -> list[SiteDataRecord]:
    """
    Parse whatever is on disk into records.

    Besides the singleton layout, a bare list of records is accepted: that is what
    a collection-backed deployment leaves behind after racing creates.
    """
    if raw is None:
        return []
    if isinstance(raw, dict):
        if not raw:
            return []
        if SINGLETON_KEY not in raw:
            raise StoreCorrupted(f"missing {SINGLETON_KEY!r} record")
        items = [raw[SINGLETON_KEY]]
    elif isinstance(raw, list):
        items = raw
    else:
        raise StoreCorrupted(f"unexpected top-level JSON type {type(raw).__name__}")

    try:
        return [SiteDataRecord.model_validate(item) for item in items]
    except ValidationError as e:
        raise StoreCorrupted(f"invalid site data record: {e.error_count()} error(s)") from e


def latest_record(records: list[SiteDataRecord]) -> SiteDataRecord | None:
    if not records:
        return None
    return max(records, key=lambda r: r.lastUpdated)


class DiskSiteDataStore(SiteDataStore):
    """
    Disk-backed single-slot store. Every save replaces the one record; load always
    picks the record with the greatest lastUpdated.
    """

    def __init__(self, path: Path, *, clock: Clock = SYSTEM_CLOCK):
        self._file = DiskJsonDocumentStore(path)
        self._clock = clock

    @property
    def path(self) -> Path:
        return self._file.path

    def load(self) -> dict[str, Any]:
        try:
            raw = self._file.load()
        except OSError as e:
            raise StoreUnavailable(f"cannot read {self.path}: {e}") from e
        except ValueError as e:
            raise StoreCorrupted(f"{self.path} does not hold valid JSON") from e

        record = latest_record(records_from_disk_doc(raw))
        return dict(record.data) if record is not None else {}

    def save(self, doc: dict[str, Any]) -> datetime:
        document = validate_document(doc)
        now = self._clock.now()

        def _upsert(raw: Any | None) -> dict[str, Any]:
            try:
                existing = latest_record(records_from_disk_doc(raw))
            except StoreCorrupted as e:
                logger.warning("Overwriting unreadable site data in %s: %s", self.path, e)
                existing = None
            created_at = existing.createdAt if existing and existing.createdAt else now
            record = SiteDataRecord(data=document, lastUpdated=now, createdAt=created_at, updatedAt=now)
            return record.to_disk_doc()

        try:
            self._file.update(_upsert)
        except OSError as e:
            raise StoreUnavailable(f"cannot write {self.path}: {e}") from e
        return now

    def ping(self) -> bool:
        parent = self.path.parent
        if not parent.is_dir() or not os.access(parent, os.W_OK):
            return False
        return not self.path.exists() or self.path.is_file()
