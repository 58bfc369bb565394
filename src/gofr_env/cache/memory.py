"""In-memory cache backend.

Dict-based storage that lives as long as the instance. Ideal for tests and
for long-running processes that reload configuration repeatedly.
"""

from __future__ import annotations

import time
from typing import Any, Callable, Dict, Optional, Tuple

from .base import Ttl, ttl_seconds


class MemoryCache:
    """Dictionary cache with per-entry expiry.

    Example:
        cache = MemoryCache()
        cache.set("config.envs.dev", variables, ttl=300)
        cache.get("config.envs.dev")
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._clock = clock
        self._store: Dict[str, Tuple[Optional[float], Any]] = {}

    def get(self, key: str) -> Optional[Any]:
        entry = self._store.get(key)
        if entry is None:
            return None

        expires_at, value = entry
        if expires_at is not None and expires_at <= self._clock():
            del self._store[key]
            return None
        return value

    def set(self, key: str, value: Any, ttl: Ttl = None) -> bool:
        seconds = ttl_seconds(ttl)
        if seconds is not None and seconds <= 0:
            self._store.pop(key, None)
            return True

        expires_at = None if seconds is None else self._clock() + seconds
        self._store[key] = (expires_at, value)
        return True

    def delete(self, key: str) -> bool:
        return self._store.pop(key, None) is not None

    def clear(self) -> None:
        self._store.clear()

    def __len__(self) -> int:
        return len(self._store)
