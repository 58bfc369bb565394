"""Cache backends for loaded env variables.

Usage:
    from gofr_env.cache import MemoryCache, FileCache, create_cache_from_env

    cache = FileCache("/var/cache/gofr-env")
    Environment.create("/srv/app").set_cache(cache, ttl=300).load()
"""

from .base import CacheBackend, Ttl, ttl_seconds
from .factory import BACKEND_TYPES, BackendType, create_cache, create_cache_from_env
from .file import FileCache
from .memory import MemoryCache

__all__ = [
    "CacheBackend",
    "Ttl",
    "ttl_seconds",
    "MemoryCache",
    "FileCache",
    "BackendType",
    "BACKEND_TYPES",
    "create_cache",
    "create_cache_from_env",
]
