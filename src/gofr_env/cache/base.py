"""Cache backend protocol.

Uses Python's Protocol for structural subtyping: any object with matching
``get``/``set``/``delete`` methods can back the Environment cache.
"""

from __future__ import annotations

from datetime import timedelta
from typing import Any, Optional, Protocol, Union, runtime_checkable

Ttl = Optional[Union[int, float, timedelta]]


def ttl_seconds(ttl: Ttl) -> Optional[float]:
    """Normalize a TTL to seconds; None means no expiry."""
    if ttl is None:
        return None
    if isinstance(ttl, timedelta):
        return ttl.total_seconds()
    return float(ttl)


@runtime_checkable
class CacheBackend(Protocol):
    """Protocol for cache backends.

    Example:
        class RedisCache:
            def get(self, key: str) -> Optional[Any]: ...
            def set(self, key: str, value: Any, ttl: Ttl = None) -> bool: ...
            def delete(self, key: str) -> bool: ...
    """

    def get(self, key: str) -> Optional[Any]:
        """Return the cached value, or None when absent or expired."""
        ...

    def set(self, key: str, value: Any, ttl: Ttl = None) -> bool:
        """Store ``value`` under ``key``; a non-positive TTL expires it at once."""
        ...

    def delete(self, key: str) -> bool:
        """Remove ``key``; True if an entry was removed."""
        ...
