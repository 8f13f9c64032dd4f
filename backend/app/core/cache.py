"""In-process key/value cache with lazy time-to-live expiry."""

import logging
import time
from collections import OrderedDict
from typing import Any, Callable, Hashable, Optional, Tuple

logger = logging.getLogger(__name__)


class TTLCache:
    """
    Key → (value, stored_at) map.

    An entry is served while ``now - stored_at < ttl``. Stale entries are
    dropped when they are read, never by a background sweep. Values are
    returned as stored (no copy), so callers must treat them as read-only.

    ``max_entries`` optionally bounds the map: inserting a new key past the
    bound evicts the oldest insertion. ``clock`` defaults to
    ``time.monotonic`` and can be swapped out in tests.

    Not thread-safe. It is shared between requests on a single event loop,
    where get/set never interleave with another coroutine.
    """

    def __init__(
        self,
        ttl_seconds: float,
        clock: Callable[[], float] = time.monotonic,
        max_entries: Optional[int] = None,
    ) -> None:
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._max_entries = max_entries
        self._entries: "OrderedDict[Hashable, Tuple[Any, float]]" = OrderedDict()

    def get(self, key: Hashable) -> Optional[Any]:
        entry = self._entries.get(key)
        if entry is None:
            return None
        value, stored_at = entry
        if self._clock() - stored_at >= self.ttl_seconds:
            del self._entries[key]
            logger.debug("cache entry expired: %s", key)
            return None
        return value

    def set(self, key: Hashable, value: Any) -> None:
        if key in self._entries:
            del self._entries[key]
        self._entries[key] = (value, self._clock())

        if self._max_entries is not None:
            while len(self._entries) > self._max_entries:
                evicted, _ = self._entries.popitem(last=False)
                logger.debug("cache full, evicted: %s", evicted)

    def delete(self, key: Hashable) -> None:
        self._entries.pop(key, None)

    def clear(self) -> None:
        self._entries.clear()

    def __contains__(self, key: Hashable) -> bool:
        return self.get(key) is not None

    def __len__(self) -> int:
        return len(self._entries)
