"""Line-oriented parser for shell-style env files.

Supported syntax:
    [export |local ]NAME=VALUE      # comment after an unquoted value
    NAME="double quoted, \\n escapes and $INTERPOLATION"
    NAME='single quoted, literal'
    NAME=-----BEGIN CERTIFICATE-----
    ...verbatim lines...
    -----END CERTIFICATE-----

Interpolation tokens: $NAME, ${NAME}, ${NAME:-default}, ${NAME:+alt}.
A backslash before ``$`` keeps it literal. Undefined names expand to "".
"""

from __future__ import annotations

import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Mapping, Optional, Protocol, Tuple, Union, runtime_checkable

from dotenv import dotenv_values

from gofr_env.exceptions import ParseError
from gofr_env.logger import Logger, create_logger

_REFERENCE = re.compile(r"(?<!\\)\$(\{[^}]+\}|[A-Za-z0-9_]+)")
_OPERATOR_EXPR = re.compile(r"^([A-Za-z0-9_]+)(:-|:\+)(.*)$", re.DOTALL)

_BLOCK_BEGIN = "-----BEGIN "
_BLOCK_END = "-----END "

_DOUBLE_QUOTE_ESCAPES = re.compile(r'\\([nrt"\\])')
_DOUBLE_QUOTE_MAP = {"n": "\n", "r": "\r", "t": "\t", '"': '"', "\\": "\\"}
_SINGLE_QUOTE_ESCAPES = re.compile(r"\\(['\\])")


@dataclass(frozen=True)
class ParseResult:
    """Name/value pairs from one file plus each name's exportability."""

    values: Dict[str, str] = field(default_factory=dict)
    exportable: Dict[str, bool] = field(default_factory=dict)


@runtime_checkable
class Parser(Protocol):
    """Anything that turns one env file into a ParseResult."""

    def parse(self, path: Union[str, Path], context: Optional[Mapping[str, str]] = None) -> ParseResult:
        ...


def interpolate(value: str, context: Mapping[str, str]) -> str:
    """Expand ``$NAME`` style references in ``value`` from ``context``.

    Raises:
        ParseError: If the substitution engine itself fails
    """

    def replace(match: "re.Match[str]") -> str:
        token = match.group(1)
        if not token.startswith("{"):
            return context.get(token, "")

        expr = token[1:-1]
        parts = _OPERATOR_EXPR.match(expr)
        if parts is None:
            return context.get(expr, "")

        name, operator, operand = parts.groups()
        current = context.get(name, "")
        if operator == ":-":
            return operand if current == "" else current
        return "" if current == "" else operand

    try:
        result = _REFERENCE.sub(replace, value)
    except (re.error, RecursionError) as exc:
        raise ParseError(
            code="INTERPOLATION_FAILED",
            message="Failed to interpolate env value",
            details={"error": str(exc)},
        ) from exc

    return result.replace("\\$", "$")


def _find_closing_quote(value: str, quote: str) -> Optional[int]:
    for i, char in enumerate(value):
        if char == quote and (i == 0 or value[i - 1] != "\\"):
            return i
    return None


def _strip_inline_comment(value: str) -> str:
    for i, char in enumerate(value):
        if char == "#" and (i == 0 or value[i - 1] in (" ", "\t")):
            return value[:i].rstrip()
    return value.rstrip()


def _looks_like_block(value: str) -> bool:
    trimmed = value.strip()
    return trimmed.startswith(_BLOCK_BEGIN) and _BLOCK_END not in trimmed


class DotenvParser:
    """Parser for env files with quoting, interpolation and PEM-style blocks.

    Raw file lines are cached per path and reused while the file's
    modification time is unchanged.

    Example:
        parser = DotenvParser()
        result = parser.parse("/srv/app/.env", {"HOME": "/root"})
        result.values["LOG_DIR"]
    """

    def __init__(self, logger: Optional[Logger] = None) -> None:
        self.logger = logger or create_logger(name="gofr-env-parser")
        self._cache: Dict[str, Tuple[int, List[str]]] = {}

    def parse(self, path: Union[str, Path], context: Optional[Mapping[str, str]] = None) -> ParseResult:
        """Parse one env file.

        Args:
            path: Env file to read
            context: Values visible to interpolation; never mutated

        Returns:
            ParseResult with the file's values and exportability flags

        Raises:
            ParseError: If the file cannot be read or interpolation fails
        """
        lines = self._read_lines(path)
        scope: Dict[str, str] = dict(context or {})
        values: Dict[str, str] = {}
        exportable: Dict[str, bool] = {}

        index = 0
        while index < len(lines):
            line = lines[index].lstrip()

            if line == "" or line.startswith("#"):
                index += 1
                continue

            exported = True
            if line.startswith("export "):
                line = line[len("export "):].lstrip()
            elif line.startswith("local "):
                line = line[len("local "):].lstrip()
                exported = False

            if "=" not in line:
                index += 1
                continue

            name, value_part = line.split("=", 1)
            name = name.strip()
            if name == "":
                index += 1
                continue

            value, index = self._parse_value(value_part, lines, index, scope)

            values[name] = value
            exportable[name] = exported
            scope[name] = value
            index += 1

        self.logger.debug("Parsed env file", path=str(path), variables=len(values))
        return ParseResult(values=values, exportable=exportable)

    def clear_cache(self) -> None:
        """Forget all cached file contents."""
        self._cache.clear()

    def _parse_value(
        self, value_part: str, lines: List[str], index: int, context: Mapping[str, str]
    ) -> Tuple[str, int]:
        """Resolve one value; returns it with the index of its last line."""
        value = value_part.lstrip()
        if value == "":
            return "", index

        if value[0] in ('"', "'"):
            return self._parse_quoted(value, value[0], lines, index, context)

        if _looks_like_block(value):
            return self._parse_block(value, lines, index)

        value = _strip_inline_comment(value).strip()
        return interpolate(value, context), index

    def _parse_quoted(
        self, value: str, quote: str, lines: List[str], index: int, context: Mapping[str, str]
    ) -> Tuple[str, int]:
        remainder = value[1:]
        buffer: List[str] = []

        while True:
            pos = _find_closing_quote(remainder, quote)
            if pos is not None:
                buffer.append(remainder[:pos])
                break

            # Unclosed: the value continues on the next physical line
            buffer.append(remainder)
            index += 1
            if index >= len(lines):
                index = len(lines) - 1
                break
            buffer.append("\n")
            remainder = lines[index]

        raw = "".join(buffer)
        if quote == '"':
            unescaped = _DOUBLE_QUOTE_ESCAPES.sub(lambda m: _DOUBLE_QUOTE_MAP[m.group(1)], raw)
            return interpolate(unescaped, context), index

        return _SINGLE_QUOTE_ESCAPES.sub(lambda m: m.group(1), raw), index

    def _parse_block(self, value: str, lines: List[str], index: int) -> Tuple[str, int]:
        buffer = [value.rstrip("\r\n")]

        while index + 1 < len(lines):
            index += 1
            line = lines[index].rstrip("\r\n")
            buffer.append(line)
            if line.strip().startswith(_BLOCK_END):
                break

        return "\n".join(buffer), index

    def _read_lines(self, path: Union[str, Path]) -> List[str]:
        key = str(path)
        try:
            mtime = os.stat(key).st_mtime_ns
        except OSError as exc:
            raise ParseError(
                code="READ_FAILED",
                message=f"Failed to read env file: {key}",
                details={"path": key, "error": str(exc)},
            ) from exc

        cached = self._cache.get(key)
        if cached is not None and cached[0] == mtime:
            return cached[1]

        try:
            content = Path(key).read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            raise ParseError(
                code="READ_FAILED",
                message=f"Failed to read env file: {key}",
                details={"path": key, "error": str(exc)},
            ) from exc

        lines = content.split("\n")
        if lines and lines[-1] == "":
            lines.pop()

        self._cache[key] = (mtime, lines)
        return lines


class PythonDotenvParser:
    """Parser for plain dotenv files, backed by python-dotenv.

    Use it for files written for other dotenv tooling. python-dotenv owns
    the grammar; references are then expanded against the load context, so
    values can still see earlier files and the ambient environment. There is
    no ``local`` scope and no PEM block handling: every entry is exportable
    and names declared without ``=`` are skipped.

    Example:
        env = Environment.create("/srv/app").set_parser(PythonDotenvParser())
    """

    def __init__(self, logger: Optional[Logger] = None) -> None:
        self.logger = logger or create_logger(name="gofr-env-parser")

    def parse(self, path: Union[str, Path], context: Optional[Mapping[str, str]] = None) -> ParseResult:
        try:
            with open(path, "r", encoding="utf-8") as stream:
                raw = dotenv_values(stream=stream, interpolate=False)
        except (OSError, UnicodeDecodeError) as exc:
            raise ParseError(
                code="READ_FAILED",
                message=f"Failed to read env file: {path}",
                details={"path": str(path), "error": str(exc)},
            ) from exc

        scope: Dict[str, str] = dict(context or {})
        values: Dict[str, str] = {}

        for name, value in raw.items():
            if value is None:
                continue
            resolved = interpolate(value, scope)
            values[name] = resolved
            scope[name] = resolved

        self.logger.debug("Parsed env file", path=str(path), variables=len(values))
        return ParseResult(values=values, exportable={name: True for name in values})


__all__ = ["DotenvParser", "PythonDotenvParser", "ParseResult", "Parser", "interpolate"]
