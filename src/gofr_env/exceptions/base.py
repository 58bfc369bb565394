"""Base exception classes for gofr-env.

Every error raised while loading env files carries structured information:
- code: Machine-readable error identifier
- message: Human-readable error description
- details: Additional context (paths, offending keys) for debugging
"""

from typing import Any, Dict, Optional


class GofrEnvError(Exception):
    """Base exception for all gofr-env errors.

    Attributes:
        code: Machine-readable error code (e.g., "PATH_NOT_FOUND")
        message: Human-readable error message
        details: Optional additional context
    """

    def __init__(self, code: str, message: str, details: Optional[Dict[str, Any]] = None):
        self.code = code
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def __str__(self) -> str:
        if self.details:
            return f"{self.code}: {self.message} (details: {self.details})"
        return f"{self.code}: {self.message}"

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for JSON serialization."""
        return {
            "code": self.code,
            "message": self.message,
            "details": self.details,
        }


class PathError(GofrEnvError):
    """An input path is missing, of the wrong kind, unreadable or escapes its root."""

    pass


class NoFilesFoundError(GofrEnvError):
    """A strict load resolved zero env files."""

    def __init__(
        self,
        message: str = "No .env files found for provided paths",
        code: str = "NO_FILES_FOUND",
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(code=code, message=message, details=details)


class ParseError(GofrEnvError):
    """An env file could not be read or its values could not be interpolated."""

    pass


class ValidationError(GofrEnvError):
    """A registered validator rejected the loaded variables."""

    pass


class ConfigurationError(GofrEnvError):
    """Invalid gofr-env settings or incompatible objects."""

    pass


class PrefixMismatchError(ConfigurationError):
    """Two variable stores with different prefixes cannot be merged."""

    def __init__(self, left: Optional[str], right: Optional[str]):
        super().__init__(
            code="PREFIX_MISMATCH",
            message="Cannot merge variables with different prefixes",
            details={"left": left, "right": right},
        )


class CacheError(GofrEnvError):
    """A cache backend failed to read, write or delete an entry."""

    pass
