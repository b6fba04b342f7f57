"""
Tracking Cache.

In-memory, time-boxed memoization of carrier results keyed by tracking
number. Only reduces calls into the metered carrier API; never treat it
as storage.
"""

import logging
import time
from typing import Callable, Dict, List, Optional, Tuple

from parcel_tracker.app.schemas.tracking import TrackingResult

logger = logging.getLogger("parcel_tracker.cache")

DEFAULT_TTL_SECONDS = 300


class TrackingCache:
    """
    Keyed cache with absolute-age expiry.

    Entries expire `ttl_seconds` after insertion regardless of access.
    Expiry is lazy: a stale entry is evicted by the `get` that finds it.
    The clock is injectable so tests can move time forward.
    """

    def __init__(self, ttl_seconds: int = DEFAULT_TTL_SECONDS, clock: Callable[[], float] = time.monotonic):
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._store: Dict[str, Tuple[TrackingResult, float]] = {}

    def get(self, key: str) -> Optional[TrackingResult]:
        entry = self._store.get(key)
        if entry is None:
            return None

        value, inserted_at = entry
        if self._clock() - inserted_at > self.ttl_seconds:
            del self._store[key]
            logger.debug("Evicted stale cache entry for %s", key)
            return None

        return value

    def put(self, key: str, value: TrackingResult) -> None:
        self._store[key] = (value, self._clock())

    def invalidate(self, key: Optional[str] = None) -> None:
        """Drop one entry, or everything when no key is given."""
        if key is None:
            self._store.clear()
        else:
            self._store.pop(key, None)

    def stats(self) -> Dict[str, object]:
        entries: List[str] = list(self._store.keys())
        return {"size": len(entries), "entries": entries}

    def __len__(self) -> int:
        return len(self._store)
