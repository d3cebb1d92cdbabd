"""Read-through cache with a time-to-live and tag based invalidation.

Replaces per-function ``lru_cache`` + TTL bucket memoization: callers ask for
a key with a loader, and mutations invalidate every key registered under a
tag (e.g. ``"products"``). Values should be plain data, not ORM instances,
since they outlive the session that loaded them.
"""

import logging
import threading
import time
from typing import Any, Callable, Dict, Hashable, Iterable, Optional, Set, Tuple

logger = logging.getLogger(__name__)


class ReadThroughCache:
    def __init__(self, ttl_seconds: float, clock: Callable[[], float] = time.monotonic):
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: Dict[Hashable, Tuple[float, Any]] = {}
        self._tags: Dict[str, Set[Hashable]] = {}
        self._lock = threading.Lock()

    def get(
        self,
        key: Hashable,
        loader: Callable[[], Any],
        tags: Iterable[str] = (),
        ttl_seconds: Optional[float] = None,
    ) -> Any:
        now = self._clock()
        with self._lock:
            entry = self._entries.get(key)
            if entry is not None and entry[0] > now:
                return entry[1]

        value = loader()
        ttl = self.ttl_seconds if ttl_seconds is None else ttl_seconds

        with self._lock:
            self._entries[key] = (now + ttl, value)
            for tag in tags:
                self._tags.setdefault(tag, set()).add(key)
        return value

    def invalidate(self, tag: str) -> int:
        with self._lock:
            keys = self._tags.pop(tag, set())
            for key in keys:
                self._entries.pop(key, None)

        logger.info(f"Cache tag '{tag}' invalidated ({len(keys)} entries)")
        return len(keys)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
            self._tags.clear()

    def __contains__(self, key: Hashable) -> bool:
        with self._lock:
            entry = self._entries.get(key)
            return entry is not None and entry[0] > self._clock()
