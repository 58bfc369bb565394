"""Settings for gofr-env itself.

Read from environment variables with a parameterized prefix (default
``GOFR_ENV``):

    {prefix}_CACHE_BACKEND: none, memory or file (default: none)
    {prefix}_CACHE_DIR: Directory for the file cache
    {prefix}_CACHE_TTL: Cache lifetime in seconds (default: no expiry)
    {prefix}_DETECT_VAR: Variable naming the environment (default: APP_ENV)
    {prefix}_DEFAULT_ENV: Environment when none is detected (default: dev)
    {prefix}_LOG_LEVEL: Logging level (default: WARNING)
    {prefix}_LOG_FORMAT: console or json (default: console)
"""

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional

from gofr_env.ambient import DEFAULT_DETECT_VAR, DEFAULT_ENVIRONMENT
from gofr_env.cache import BACKEND_TYPES, CacheBackend, create_cache
from gofr_env.exceptions import ConfigurationError
from gofr_env.logger import Logger, create_logger

_ALLOWED_LOG_FORMATS = {"console", "json"}
_ALLOWED_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


def _parse_optional_int(value: Optional[str], name: str) -> Optional[int]:
    """Convert optional string to int, raising a clear error when invalid."""
    if value is None or value == "":
        return None
    try:
        return int(value)
    except ValueError as exc:
        raise ConfigurationError(
            code="INVALID_SETTING",
            message=f"{name} must be an integer, got {value!r}",
            details={"setting": name},
        ) from exc


@dataclass
class EnvSettings:
    """Runtime settings for loading env files.

    Attributes:
        cache_backend: Cache backend name
        cache_dir: Directory for the file cache backend
        cache_ttl: Cache lifetime in seconds (None: no expiry)
        detect_var: Variable holding the environment name
        default_env: Environment used when detection finds nothing
        log_level: Logging level name
        log_format: console or json
        prefix: Environment variable prefix used
    """

    cache_backend: str = "none"
    cache_dir: Optional[Path] = None
    cache_ttl: Optional[int] = None
    detect_var: str = DEFAULT_DETECT_VAR
    default_env: str = DEFAULT_ENVIRONMENT
    log_level: str = "WARNING"
    log_format: str = "console"
    prefix: str = "GOFR_ENV"

    def __post_init__(self) -> None:
        if isinstance(self.cache_dir, str):
            self.cache_dir = Path(self.cache_dir)
        self.cache_backend = self.cache_backend.strip().lower()
        self.log_level = self.log_level.upper()
        self.log_format = self.log_format.lower()
        self.validate()

    @classmethod
    def from_env(cls, prefix: str = "GOFR_ENV", environ: Optional[Mapping[str, str]] = None) -> "EnvSettings":
        """Load settings from environment variables.

        Args:
            prefix: Environment variable prefix
            environ: Mapping to read instead of ``os.environ``
        """
        source = os.environ if environ is None else environ
        cache_dir = source.get(f"{prefix}_CACHE_DIR")

        return cls(
            cache_backend=source.get(f"{prefix}_CACHE_BACKEND", "none"),
            cache_dir=Path(cache_dir) if cache_dir else None,
            cache_ttl=_parse_optional_int(source.get(f"{prefix}_CACHE_TTL"), f"{prefix}_CACHE_TTL"),
            detect_var=source.get(f"{prefix}_DETECT_VAR", DEFAULT_DETECT_VAR),
            default_env=source.get(f"{prefix}_DEFAULT_ENV", DEFAULT_ENVIRONMENT),
            log_level=source.get(f"{prefix}_LOG_LEVEL", "WARNING"),
            log_format=source.get(f"{prefix}_LOG_FORMAT", "console"),
            prefix=prefix,
        )

    def validate(self) -> None:
        """
        Raises:
            ConfigurationError: If any setting is invalid
        """
        if self.cache_backend not in BACKEND_TYPES:
            raise ConfigurationError(
                code="INVALID_CACHE_BACKEND",
                message=f"Invalid cache backend '{self.cache_backend}'. Expected one of {BACKEND_TYPES}.",
            )

        if self.cache_backend == "file" and self.cache_dir is None:
            raise ConfigurationError(
                code="CACHE_DIR_REQUIRED",
                message=f"{self.prefix}_CACHE_DIR is required for the file cache backend",
            )

        if self.log_format not in _ALLOWED_LOG_FORMATS:
            raise ConfigurationError(
                code="INVALID_SETTING",
                message=f"Invalid log format '{self.log_format}'. Expected one of {_ALLOWED_LOG_FORMATS}.",
            )

        if self.log_level not in _ALLOWED_LOG_LEVELS:
            raise ConfigurationError(
                code="INVALID_SETTING",
                message=f"Invalid log level '{self.log_level}'. Expected one of {_ALLOWED_LOG_LEVELS}.",
            )

        if not self.detect_var:
            raise ConfigurationError(code="INVALID_SETTING", message="detect_var must not be empty")

    def create_cache(self, logger: Optional[Logger] = None) -> Optional[CacheBackend]:
        """Build the configured cache backend (None when disabled)."""
        return create_cache(self.cache_backend, directory=self.cache_dir, logger=logger)

    def create_logger(self, name: str = "gofr-env") -> Logger:
        """Build a logger honouring log_level and log_format."""
        return create_logger(
            name=name,
            level=getattr(logging, self.log_level),
            json_format=self.log_format == "json",
        )


__all__ = ["EnvSettings"]
