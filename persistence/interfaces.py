from __future__ import annotations

from datetime import datetime
from typing import Any, Protocol


class SiteDataStore(Protocol):
    """
    Durable single-slot storage for one JSON document.
    """

    def load(self) -> dict[str, Any]:
        """Return the latest saved document, or {} when nothing was ever saved."""
        ...

    def save(self, doc: dict[str, Any]) -> datetime:
        """Replace the stored document and return its lastUpdated timestamp."""
        ...

    def ping(self) -> bool:
        """Report whether the backing store is reachable."""
        ...
