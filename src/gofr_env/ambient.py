"""Access to the host process's pre-existing environment.

Two overlapping sources are read:
1) primary: the process environment (``os.environ`` by default)
2) secondary: process-local "server" variables that were published without
   touching the real environment

On conflict the primary source wins. Components receive an
``AmbientEnvironment`` instead of reading ``os.environ`` directly, so tests
can substitute plain dictionaries.
"""

from __future__ import annotations

import os
from typing import Dict, MutableMapping, Optional

DEFAULT_DETECT_VAR = "APP_ENV"
DEFAULT_ENVIRONMENT = "dev"


class AmbientEnvironment:
    """Snapshot provider and publish target for ambient variables.

    Example:
        ambient = AmbientEnvironment(primary={"APP_ENV": "prod"}, secondary={})
        ambient.snapshot()  # {"APP_ENV": "prod"}
    """

    def __init__(
        self,
        primary: Optional[MutableMapping[str, str]] = None,
        secondary: Optional[MutableMapping[str, str]] = None,
        publish_to_primary: bool = True,
    ) -> None:
        """
        Args:
            primary: Primary source (default: ``os.environ``)
            secondary: Secondary source (default: a new empty dict)
            publish_to_primary: When False, ``Variables.to_globals`` writes to
                the secondary source instead of the primary one
        """
        self.primary: MutableMapping[str, str] = os.environ if primary is None else primary
        self.secondary: MutableMapping[str, str] = {} if secondary is None else secondary
        self.publish_to_primary = publish_to_primary

    def snapshot(self) -> Dict[str, str]:
        """Merge both sources into a new dict; primary wins on conflict."""
        data: Dict[str, str] = {}
        for key, value in self.primary.items():
            if isinstance(key, str) and value is not None:
                data[key] = str(value)
        for key, value in self.secondary.items():
            if isinstance(key, str) and value is not None and key not in data:
                data[key] = str(value)
        return data

    def lookup(self, key: str) -> Optional[str]:
        """Return the value for ``key`` from the first source that has it."""
        if key in self.primary:
            return self.primary[key]
        if key in self.secondary:
            return self.secondary[key]
        return None

    def has(self, key: str) -> bool:
        return key in self.primary or key in self.secondary


_default_ambient: Optional[AmbientEnvironment] = None


def default_ambient() -> AmbientEnvironment:
    """Return the process-default ambient environment (created on first use)."""
    global _default_ambient
    if _default_ambient is None:
        _default_ambient = AmbientEnvironment()
    return _default_ambient


def detect_environment(
    name: str = DEFAULT_DETECT_VAR,
    default: str = DEFAULT_ENVIRONMENT,
    ambient: Optional[AmbientEnvironment] = None,
) -> str:
    """Detect the active environment name.

    Checks the primary source, then the secondary source, then the real
    process environment. Empty values are ignored.

    Args:
        name: Variable holding the environment name
        default: Returned when no source has a non-empty value
        ambient: Ambient sources to consult (process default if omitted)

    Returns:
        The environment name, e.g. "dev" or "production"
    """
    source = ambient or default_ambient()

    for mapping in (source.primary, source.secondary):
        value = mapping.get(name)
        if value:
            return str(value)

    value = os.getenv(name)
    if value:
        return value

    return default


__all__ = [
    "AmbientEnvironment",
    "DEFAULT_DETECT_VAR",
    "DEFAULT_ENVIRONMENT",
    "default_ambient",
    "detect_environment",
]
