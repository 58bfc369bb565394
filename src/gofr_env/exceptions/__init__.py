"""Exceptions for gofr-env.

All exceptions include structured error information:
- code: Machine-readable error identifier
- message: Human-readable error description
- details: Additional context for debugging/recovery

Usage:
    from gofr_env.exceptions import (
        GofrEnvError,
        PathError,
        NoFilesFoundError,
        ParseError,
        ValidationError,
        CacheError,
    )

Every error aborts the load in progress; nothing is published or cached.
"""

from gofr_env.exceptions.base import (
    CacheError,
    ConfigurationError,
    GofrEnvError,
    NoFilesFoundError,
    ParseError,
    PathError,
    PrefixMismatchError,
    ValidationError,
)

__all__ = [
    "GofrEnvError",
    "PathError",
    "NoFilesFoundError",
    "ParseError",
    "ValidationError",
    "ConfigurationError",
    "PrefixMismatchError",
    "CacheError",
]
