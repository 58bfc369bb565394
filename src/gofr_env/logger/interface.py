"""
Logger interface for gofr-env.

Every component (parser, resolver, reader, orchestrator, cache backends)
accepts an optional logger implementing this contract.
"""

from abc import ABC, abstractmethod
from typing import Any


class Logger(ABC):
    """Abstract logging contract.

    Keyword arguments are structured context (paths, counts, key names).
    Variable values are never passed here.
    """

    @abstractmethod
    def debug(self, message: str, **kwargs: Any) -> None:
        """Log a debug message."""
        pass

    @abstractmethod
    def info(self, message: str, **kwargs: Any) -> None:
        """Log an info message."""
        pass

    @abstractmethod
    def warning(self, message: str, **kwargs: Any) -> None:
        """Log a warning message."""
        pass

    @abstractmethod
    def error(self, message: str, **kwargs: Any) -> None:
        """Log an error message."""
        pass

    @abstractmethod
    def critical(self, message: str, **kwargs: Any) -> None:
        """Log a critical message."""
        pass

    @abstractmethod
    def get_session_id(self) -> str:
        """Return the identifier shared by every record of this logger."""
        pass
