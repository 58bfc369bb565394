"""Publication target for the most recently loaded Variables store.

An ``EnvContext`` is created by the caller and handed to ``Environment``;
each successful load replaces its current store. Lookups fall back to the
ambient environment when the store does not have a key.

Example:
    context = EnvContext()
    Environment.create("/srv/app").set_context(context).load()
    context.get("DB_HOST")
    context.clear()
"""

from __future__ import annotations

from typing import Any, Optional

from gofr_env.ambient import AmbientEnvironment, default_ambient
from gofr_env.variables import Variables


class EnvContext:
    """Resettable holder of the last published Variables store."""

    def __init__(self, ambient: Optional[AmbientEnvironment] = None) -> None:
        self.ambient = ambient
        self._variables: Optional[Variables] = None

    @property
    def current(self) -> Optional[Variables]:
        return self._variables

    def set(self, variables: Variables) -> None:
        self._variables = variables

    def clear(self) -> None:
        self._variables = None

    def has(self, key: str) -> bool:
        if self._variables is not None and self._variables.has(key):
            return True
        return (self.ambient or default_ambient()).has(key)

    def get(self, key: str, default: Any = None) -> Any:
        """Look up ``key`` in the published store, then the ambient sources."""
        if self._variables is not None and self._variables.has(key):
            return self._variables.get(key)

        value = (self.ambient or default_ambient()).lookup(key)
        return default if value is None else value

    def env(self, key: str, default: Any = None) -> Any:
        """Alias of ``get`` for call sites that read like ``env("DB_HOST")``."""
        return self.get(key, default)


__all__ = ["EnvContext"]
