"""Factory functions for creating cache backends.

Backends are chosen explicitly or from environment variables:
- {PREFIX}_CACHE_BACKEND: "none", "memory" or "file"
- {PREFIX}_CACHE_DIR: Directory for the file backend
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Literal, Mapping, Optional, Union

from gofr_env.exceptions import ConfigurationError
from gofr_env.logger import Logger

from .base import CacheBackend
from .file import FileCache
from .memory import MemoryCache

BackendType = Literal["none", "memory", "file"]
BACKEND_TYPES = ("none", "memory", "file")


def create_cache(
    backend: str,
    *,
    directory: Optional[Union[str, Path]] = None,
    logger: Optional[Logger] = None,
) -> Optional[CacheBackend]:
    """Create a cache backend.

    Args:
        backend: "none", "memory" or "file"
        directory: Cache directory (required for "file")
        logger: Optional logger instance

    Returns:
        A cache backend, or None for "none"

    Raises:
        ConfigurationError: If the backend is unknown or options are missing
    """
    backend = backend.strip().lower()

    if backend == "none":
        return None

    elif backend == "memory":
        return MemoryCache()

    elif backend == "file":
        if not directory:
            raise ConfigurationError(
                code="CACHE_DIR_REQUIRED",
                message="'directory' is required for the file cache backend",
            )
        return FileCache(directory, logger=logger)

    else:
        raise ConfigurationError(
            code="INVALID_CACHE_BACKEND",
            message=f"Unknown cache backend '{backend}'. Must be one of {', '.join(BACKEND_TYPES)}",
            details={"backend": backend},
        )


def create_cache_from_env(
    prefix: str = "GOFR_ENV",
    *,
    environ: Optional[Mapping[str, str]] = None,
    logger: Optional[Logger] = None,
) -> Optional[CacheBackend]:
    """Create a cache backend from {PREFIX}_CACHE_BACKEND / {PREFIX}_CACHE_DIR."""
    source = os.environ if environ is None else environ
    prefix = prefix.rstrip("_")

    return create_cache(
        source.get(f"{prefix}_CACHE_BACKEND", "none"),
        directory=source.get(f"{prefix}_CACHE_DIR"),
        logger=logger,
    )
