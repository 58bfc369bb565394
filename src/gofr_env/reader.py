"""Merge engine: resolve files, parse them in order, fold in the ambient environment.

Precedence (low -> high) for a plain load:
1) env files, in resolution order (later files overwrite earlier ones)
2) ambient environment

With ``overload=True`` the env files win over the ambient environment.
"""

from __future__ import annotations

from pathlib import Path
from typing import Dict, Iterable, List, Optional, Protocol, Union, runtime_checkable

from gofr_env.ambient import AmbientEnvironment, default_ambient, detect_environment
from gofr_env.exceptions import NoFilesFoundError
from gofr_env.logger import Logger, create_logger
from gofr_env.parser import DotenvParser, Parser
from gofr_env.resolver import FileResolver
from gofr_env.variables import Variables


@runtime_checkable
class Reader(Protocol):
    """Anything that can produce a Variables store for an environment."""

    def files(self, environment: Optional[str] = None) -> List[str]:
        ...

    def read(
        self,
        environment: Optional[str] = None,
        include_globals: bool = True,
        overload: bool = False,
        prefix: Optional[str] = None,
        strict: bool = True,
    ) -> Variables:
        ...


class FileReader:
    """Read env files from disk and merge them into one Variables store.

    Example:
        reader = FileReader(["/srv/app"])
        variables = reader.read("production", overload=True)
    """

    def __init__(
        self,
        paths: Iterable[Union[str, Path]],
        parser: Optional[Parser] = None,
        ambient: Optional[AmbientEnvironment] = None,
        logger: Optional[Logger] = None,
    ) -> None:
        """
        Args:
            paths: Files or directories to load env files from
            parser: Parser for individual files (default: DotenvParser)
            ambient: Ambient sources (default: the process environment)
            logger: Optional logger instance

        Raises:
            PathError: If any input path is invalid
        """
        self.logger = logger or create_logger(name="gofr-env-reader")
        self.parser: Parser = parser or DotenvParser(logger=logger)
        self.ambient = ambient
        self.resolver = FileResolver(paths, ambient=ambient, logger=logger)

    def files(self, environment: Optional[str] = None) -> List[str]:
        return self.resolver.files(environment)

    def read(
        self,
        environment: Optional[str] = None,
        include_globals: bool = True,
        overload: bool = False,
        prefix: Optional[str] = None,
        strict: bool = True,
    ) -> Variables:
        """Resolve, parse and merge env files into a Variables store.

        Args:
            environment: Target environment name (detected when omitted)
            include_globals: Merge the ambient environment into the result
            overload: Let file values win over ambient values
            prefix: Optional key prefix for the resulting store
            strict: Fail when no env file is found

        Returns:
            Variables with every key exportable unless declared ``local``

        Raises:
            NoFilesFoundError: If ``strict`` and no file was resolved
            PathError: If file resolution fails
            ParseError: If a file cannot be read or interpolated
        """
        environment = environment or detect_environment(ambient=self.ambient)
        files = self.resolver.resolve_files(environment)

        if not files and strict:
            raise NoFilesFoundError(
                details={"paths": list(self.resolver.paths), "environment": environment}
            )

        globals_: Dict[str, str] = (
            (self.ambient or default_ambient()).snapshot() if include_globals else {}
        )
        context = dict(globals_)

        file_values: Dict[str, str] = {}
        exportable: Dict[str, bool] = {}

        for path in files:
            parsed = self.parser.parse(path, context)
            file_values.update(parsed.values)
            exportable.update(parsed.exportable)
            context.update(parsed.values)

        if include_globals:
            if overload:
                merged = {**globals_, **file_values}
            else:
                merged = {**file_values, **globals_}
        else:
            merged = file_values

        self.logger.debug(
            "Merged env files",
            environment=environment,
            files=len(files),
            file_variables=len(file_values),
            ambient_variables=len(globals_),
            overload=overload,
        )

        return Variables.from_parsed(merged, exportable, prefix, default_exportable=True)


__all__ = ["FileReader", "Reader"]
