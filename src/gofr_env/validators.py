"""Validators run against a loaded Variables store before it is published.

Example:
    env = (
        Environment.create("/srv/app")
        .validate(RequiredValidator(["DB_HOST", "DB_PORT"]))
        .validate(TypeValidator({"DB_PORT": EnvType.INT, "DEBUG": "bool"}))
    )
"""

from __future__ import annotations

from enum import Enum
from typing import Dict, Iterable, List, Mapping, Optional, Protocol, Union, runtime_checkable

from gofr_env.exceptions import ValidationError
from gofr_env.variables import Variables


class EnvType(str, Enum):
    """Declared type of a variable, matched to a typed accessor."""

    INT = "int"
    FLOAT = "float"
    BOOL = "bool"
    ARRAY = "array"
    STRING = "string"

    @classmethod
    def from_value(cls, value: Union["EnvType", str]) -> Optional["EnvType"]:
        """Accept an EnvType or a case-insensitive name; None if unknown."""
        if isinstance(value, EnvType):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            return None


def conforms(variables: Variables, key: str, env_type: EnvType) -> bool:
    """Check that ``key`` coerces to ``env_type``."""
    if env_type is EnvType.INT:
        return variables.to_int(key) is not None
    if env_type is EnvType.FLOAT:
        return variables.to_float(key) is not None
    if env_type is EnvType.BOOL:
        return variables.to_bool(key) is not None
    if env_type is EnvType.ARRAY:
        return variables.to_array(key) is not None
    if env_type is EnvType.STRING:
        return variables.to_string(key) is not None
    raise AssertionError(f"Unhandled env type: {env_type!r}")


@runtime_checkable
class Validator(Protocol):
    """Raises ValidationError when a store is unacceptable."""

    def validate(self, variables: Variables) -> None:
        ...


class RequiredValidator:
    """Require keys to be present and non-empty."""

    def __init__(self, required: Iterable[str]) -> None:
        self.required: List[str] = [key for key in required if key]

    def validate(self, variables: Variables) -> None:
        missing = [key for key in self.required if variables.get(key) in (None, "")]
        if missing:
            raise ValidationError(
                code="MISSING_REQUIRED",
                message=f"Required env variables are missing: {', '.join(missing)}",
                details={"missing": missing},
            )


class TypeValidator:
    """Require present keys to coerce to their declared type.

    Absent keys are ignored; combine with RequiredValidator to demand them.
    """

    def __init__(self, types: Mapping[str, Union[EnvType, str]]) -> None:
        self.types: Dict[str, Union[EnvType, str]] = dict(types)

    def validate(self, variables: Variables) -> None:
        errors: List[str] = []

        for key, declared in self.types.items():
            if not variables.has(key):
                continue

            env_type = EnvType.from_value(declared)
            if env_type is None or not conforms(variables, key, env_type):
                label = env_type.value if env_type is not None else str(declared)
                errors.append(f"{key}:{label}")

        if errors:
            raise ValidationError(
                code="INVALID_TYPE",
                message=f"Env variables have invalid types: {', '.join(errors)}",
                details={"invalid": errors},
            )


__all__ = [
    "EnvType",
    "Validator",
    "RequiredValidator",
    "TypeValidator",
    "conforms",
]
