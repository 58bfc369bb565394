"""File-based cache backend.

Stores one JSON document per key in a directory, so separate processes
(for example a web worker and the ``gofr-env cache-clear`` command) share
entries. Writes go through a temporary file and an atomic rename.
"""

from __future__ import annotations

import json
import os
import re
import tempfile
import time
from pathlib import Path
from typing import Any, Callable, Dict, Optional, Union

from gofr_env.exceptions import CacheError
from gofr_env.logger import Logger, create_logger
from gofr_env.variables import Variables

from .base import Ttl, ttl_seconds

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9._-]")

KIND_VARIABLES = "variables"
KIND_JSON = "json"


class FileCache:
    """JSON file cache with per-entry expiry.

    Example:
        cache = FileCache("/var/cache/gofr-env")
        cache.set("config.envs.prod", variables, ttl=3600)
    """

    def __init__(
        self,
        directory: Union[str, Path],
        logger: Optional[Logger] = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.directory = Path(directory)
        self.logger = logger or create_logger(name="gofr-env-cache")
        self._clock = clock

    def path_for(self, key: str) -> Path:
        """Return the file that holds ``key``."""
        return self.directory / f"{_UNSAFE_CHARS.sub('_', key)}.json"

    def get(self, key: str) -> Optional[Any]:
        path = self.path_for(key)
        if not path.exists():
            return None

        try:
            with open(path, "r", encoding="utf-8") as f:
                document = json.load(f)
        except (OSError, ValueError) as exc:
            raise CacheError(
                code="CACHE_READ_FAILED",
                message=f"Failed to read cache entry: {key}",
                details={"path": str(path), "error": str(exc)},
            ) from exc

        if not isinstance(document, dict):
            raise CacheError(
                code="CACHE_READ_FAILED",
                message=f"Failed to read cache entry: {key}",
                details={"path": str(path), "error": "cache entry is not a JSON object"},
            )

        expires_at = document.get("expires_at")
        if expires_at is not None and expires_at <= self._clock():
            self.logger.debug("Cache entry expired", key=key)
            self.delete(key)
            return None

        if document.get("kind") == KIND_VARIABLES:
            return Variables.from_dict(document.get("value") or {})
        return document.get("value")

    def set(self, key: str, value: Any, ttl: Ttl = None) -> bool:
        seconds = ttl_seconds(ttl)
        if seconds is not None and seconds <= 0:
            self.delete(key)
            return True

        document: Dict[str, Any] = {
            "expires_at": None if seconds is None else self._clock() + seconds,
        }
        if isinstance(value, Variables):
            document["kind"] = KIND_VARIABLES
            document["value"] = value.to_dict()
        else:
            document["kind"] = KIND_JSON
            document["value"] = value

        path = self.path_for(key)
        try:
            payload = json.dumps(document, indent=2)
            self.directory.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(dir=self.directory, suffix=".tmp")
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    f.write(payload)
                    f.flush()
                    os.fsync(f.fileno())
                os.replace(tmp_name, path)
            except BaseException:
                if os.path.exists(tmp_name):
                    os.unlink(tmp_name)
                raise
        except (OSError, TypeError, ValueError) as exc:
            raise CacheError(
                code="CACHE_WRITE_FAILED",
                message=f"Failed to write cache entry: {key}",
                details={"path": str(path), "error": str(exc)},
            ) from exc

        self.logger.debug("Cache entry written", key=key, path=str(path))
        return True

    def delete(self, key: str) -> bool:
        path = self.path_for(key)
        try:
            path.unlink()
        except FileNotFoundError:
            return False
        except OSError as exc:
            raise CacheError(
                code="CACHE_DELETE_FAILED",
                message=f"Failed to delete cache entry: {key}",
                details={"path": str(path), "error": str(exc)},
            ) from exc
        return True
