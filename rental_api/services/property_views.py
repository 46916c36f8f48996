"""Property view counter."""

from __future__ import annotations

import threading
from collections import Counter


class PropertyViewCounter:
    """Thread-safe per-property view totals, kept for the process lifetime."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._views: Counter[str] = Counter()

    def increment(self, property_id: str) -> int:
        """Count one view and return the new total for the property."""

        with self._lock:
            self._views[property_id] += 1
            return self._views[property_id]

    def get(self, property_id: str) -> int:
        with self._lock:
            return self._views[property_id]
