"""Immutable, prefix-aware store of loaded env variables.

Keys are stored with the configured prefix already applied. Lookups accept
either the logical name (``DB_HOST``) or the stored name (``APP_DB_HOST``).
Every transform returns a new instance.
"""

from __future__ import annotations

import json
import math
import os
import re
from typing import (
    Any,
    Callable,
    Dict,
    Iterator,
    List,
    Mapping,
    Optional,
    Union,
)

from gofr_env.ambient import AmbientEnvironment, default_ambient
from gofr_env.exceptions import PrefixMismatchError

_INTEGER = re.compile(r"^[+-]?\d+$")
_NUMERIC = re.compile(r"^[+-]?(\d+(\.\d*)?|\.\d+)([eE][+-]?\d+)?$")

TRUTHY = frozenset({"1", "true", "yes", "on"})
FALSY = frozenset({"0", "false", "no", "off"})


def _normalize_prefix(prefix: Optional[str]) -> Optional[str]:
    if prefix is None:
        return None
    prefix = prefix.strip()
    return prefix or None


def _apply_prefix(key: str, prefix: Optional[str]) -> str:
    if not prefix or key.startswith(prefix):
        return key
    return prefix + key


def _numeric(value: str) -> Optional[str]:
    stripped = value.strip()
    return stripped if _NUMERIC.match(stripped) else None


class Variables:
    """Typed view over a merged set of env variables.

    Example:
        variables = Variables.from_mapping({"PORT": "8080", "DEBUG": "on"}, prefix="APP_")
        variables.to_int("PORT")      # 8080
        variables.to_bool("DEBUG")    # True
        variables.get("APP_PORT")     # "8080"
    """

    __slots__ = ("_entries", "_exportable", "_prefix")

    def __init__(
        self,
        entries: Optional[Mapping[str, str]] = None,
        exportable: Optional[Mapping[str, bool]] = None,
        prefix: Optional[str] = None,
    ) -> None:
        """Wrap already-prefixed entries. Prefer the ``from_*`` constructors."""
        self._entries: Dict[str, str] = dict(entries or {})
        self._exportable: Dict[str, bool] = dict(exportable or {})
        self._prefix = _normalize_prefix(prefix)

    # ------------------------------------------------------------------
    # Constructors
    # ------------------------------------------------------------------

    @classmethod
    def from_parsed(
        cls,
        values: Mapping[str, Any],
        exportable: Optional[Mapping[str, bool]] = None,
        prefix: Optional[str] = None,
        default_exportable: bool = False,
    ) -> "Variables":
        """Build a store from raw values, applying ``prefix`` to every key.

        Args:
            values: Logical name -> value
            exportable: Logical name -> exportability flag
            prefix: Optional key prefix
            default_exportable: Flag for names missing from ``exportable``
        """
        exportable = exportable or {}
        prefix = _normalize_prefix(prefix)
        entries: Dict[str, str] = {}
        flags: Dict[str, bool] = {}

        for key, value in values.items():
            if not isinstance(key, str):
                continue
            stored = _apply_prefix(key, prefix)
            entries[stored] = str(value)
            flags[stored] = bool(exportable[key]) if key in exportable else default_exportable

        return cls(entries, flags, prefix)

    @classmethod
    def from_mapping(cls, values: Mapping[str, Any], prefix: Optional[str] = None) -> "Variables":
        """Build a store where every entry is exportable."""
        return cls.from_parsed(values, {}, prefix, default_exportable=True)

    @classmethod
    def from_ambient(
        cls, ambient: Optional[AmbientEnvironment] = None, prefix: Optional[str] = None
    ) -> "Variables":
        """Snapshot the ambient environment into a store."""
        return cls.from_mapping((ambient or default_ambient()).snapshot(), prefix)

    @classmethod
    def empty(cls, prefix: Optional[str] = None) -> "Variables":
        return cls({}, {}, prefix)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Variables":
        """Rebuild a store serialized with ``to_dict``."""
        return cls(
            entries={str(k): str(v) for k, v in dict(data.get("values") or {}).items()},
            exportable={str(k): bool(v) for k, v in dict(data.get("exportable") or {}).items()},
            prefix=data.get("prefix"),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to a JSON-compatible dictionary."""
        return {
            "values": dict(self._entries),
            "exportable": dict(self._exportable),
            "prefix": self._prefix,
        }

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    @property
    def prefix(self) -> Optional[str]:
        return self._prefix

    def get(self, key: str, default: Any = None) -> Any:
        return self._entries.get(self._normalize_key(key), default)

    def has(self, key: str) -> bool:
        return self._normalize_key(key) in self._entries

    def all(self) -> Dict[str, str]:
        """Snapshot of every stored entry, keys as stored (prefixed)."""
        return dict(self._entries)

    def keys(self) -> List[str]:
        return list(self._entries)

    def is_exportable(self, key: str) -> bool:
        return self._exportable.get(self._normalize_key(key), False)

    def __getitem__(self, key: str) -> str:
        return self._entries[self._normalize_key(key)]

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and self.has(key)

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._entries))

    def __len__(self) -> int:
        return len(self._entries)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Variables):
            return NotImplemented
        return (
            self._entries == other._entries
            and self._exportable == other._exportable
            and self._prefix == other._prefix
        )

    def __repr__(self) -> str:
        # Values may be secrets; only the shape is shown
        return f"Variables(count={len(self._entries)}, prefix={self._prefix!r})"

    # ------------------------------------------------------------------
    # Transforms
    # ------------------------------------------------------------------

    def merge(self, other: "Variables") -> "Variables":
        """Overlay ``other`` onto this store; ``other`` wins on conflict.

        Raises:
            PrefixMismatchError: If both stores have different prefixes
        """
        if self._prefix and other._prefix and self._prefix != other._prefix:
            raise PrefixMismatchError(self._prefix, other._prefix)

        prefix = self._prefix or other._prefix
        entries: Dict[str, str] = {}
        exportable: Dict[str, bool] = {}
        for source in (self, other):
            for key, value in source._entries.items():
                entries[_apply_prefix(key, prefix)] = value
            for key, flag in source._exportable.items():
                exportable[_apply_prefix(key, prefix)] = flag
        return Variables(entries, exportable, prefix)

    def filter(self, predicate: Callable[[str, str], bool]) -> "Variables":
        """Keep entries for which ``predicate(value, key)`` is true."""
        entries = {k: v for k, v in self._entries.items() if predicate(v, k)}
        exportable = {k: self._exportable[k] for k in entries if k in self._exportable}
        return Variables(entries, exportable, self._prefix)

    def map(self, transform: Callable[[str, str], Any]) -> "Variables":
        """Replace each value with ``str(transform(value, key))``."""
        entries = {k: str(transform(v, k)) for k, v in self._entries.items()}
        return Variables(entries, self._exportable, self._prefix)

    def copy(self) -> "Variables":
        return Variables(self._entries, self._exportable, self._prefix)

    # ------------------------------------------------------------------
    # Typed accessors
    # ------------------------------------------------------------------

    def to_string(self, key: str, default: Optional[str] = None) -> Optional[str]:
        value = self.get(key)
        return default if value is None else str(value)

    def to_int(self, key: str, default: Optional[int] = None) -> Optional[int]:
        """Numeric strings become ints; decimals truncate toward zero."""
        value = self.get(key)
        if value is None:
            return default

        number = _numeric(value)
        if number is None:
            return default
        if _INTEGER.match(number):
            return int(number)

        parsed = float(number)
        if not math.isfinite(parsed):
            return default
        return int(parsed)

    def to_float(self, key: str, default: Optional[float] = None) -> Optional[float]:
        value = self.get(key)
        if value is None:
            return default

        number = _numeric(value)
        return default if number is None else float(number)

    def to_bool(self, key: str, default: Optional[bool] = None) -> Optional[bool]:
        """Match 1/true/yes/on and 0/false/no/off, case-insensitively."""
        value = self.get(key)
        if value is None:
            return default

        normalized = value.strip().lower()
        if normalized in TRUTHY:
            return True
        if normalized in FALSY:
            return False
        return default

    def to_array(
        self, key: str, default: Optional[Union[List[Any], Dict[str, Any]]] = None
    ) -> Optional[Union[List[Any], Dict[str, Any]]]:
        """Decode a JSON array/object, or split a comma-separated list.

        ``'["x","y"]'`` -> ``["x", "y"]``; ``"a, b,,c"`` -> ``["a", "b", "c"]``.
        A single scalar without a comma yields ``default``.
        """
        value = self.get(key)
        if value is None:
            return default

        trimmed = value.strip()
        if trimmed == "":
            return default

        if trimmed[0] in ("[", "{"):
            try:
                decoded = json.loads(trimmed)
            except ValueError:
                decoded = None
            if isinstance(decoded, (list, dict)):
                return decoded

        if "," in trimmed:
            return [part.strip() for part in trimmed.split(",") if part.strip() != ""]

        return default

    # ------------------------------------------------------------------
    # Export
    # ------------------------------------------------------------------

    def to_globals(self, include_local: bool = False, ambient: Optional[AmbientEnvironment] = None) -> None:
        """Publish exportable entries into the ambient primary source.

        Falls back to ``to_server`` when the ambient environment does not
        accept writes to its primary source.
        """
        target = ambient or default_ambient()
        if not target.publish_to_primary:
            self.to_server(include_local, target)
            return

        for key, value in self._export_pairs(include_local).items():
            target.primary[key] = value

    def to_server(self, include_local: bool = False, ambient: Optional[AmbientEnvironment] = None) -> None:
        """Publish exportable entries into the ambient secondary source."""
        target = ambient or default_ambient()
        for key, value in self._export_pairs(include_local).items():
            target.secondary[key] = value

    def to_putenv(self, include_local: bool = False) -> None:
        """Publish exportable entries with ``os.putenv``.

        Only child processes observe these values; ``os.environ`` is left
        untouched.
        """
        for key, value in self._export_pairs(include_local).items():
            os.putenv(key, value)

    def _export_pairs(self, include_local: bool) -> Dict[str, str]:
        if include_local:
            return dict(self._entries)
        return {k: v for k, v in self._entries.items() if self._exportable.get(k, False)}

    def _normalize_key(self, key: str) -> str:
        return _apply_prefix(key, self._prefix)


__all__ = ["Variables", "TRUTHY", "FALSY"]
