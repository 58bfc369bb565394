"""Load orchestration: cache lookup, merge, validation, publication.

Pipeline for each load:
    cache hit  -> validate -> publish
    cache miss -> read files -> validate -> publish -> write cache

A validation failure aborts the load: nothing is published or cached.

Entry points:
    load()      strict, ambient values win over file values
    safe_load() non-strict (no files is fine), ambient values win
    overload()  strict, file values win over ambient values

Example:
    context = EnvContext()
    variables = (
        Environment.create("/srv/app")
        .set_environment("production")
        .set_prefix("APP_")
        .set_cache(FileCache("/var/cache/gofr-env"), ttl=300)
        .set_context(context)
        .validate(RequiredValidator(["DB_HOST"]))
        .load()
    )
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Iterable, List, Mapping, Optional, Union

from gofr_env.ambient import (
    DEFAULT_DETECT_VAR,
    DEFAULT_ENVIRONMENT,
    AmbientEnvironment,
    detect_environment,
)
from gofr_env.cache import CacheBackend, Ttl
from gofr_env.config import EnvSettings
from gofr_env.context import EnvContext
from gofr_env.exceptions import ValidationError
from gofr_env.logger import Logger, create_logger
from gofr_env.parser import DotenvParser, Parser
from gofr_env.reader import FileReader, Reader
from gofr_env.validators import Validator
from gofr_env.variables import Variables

CACHE_KEY_PREFIX = "config.envs"


@dataclass(frozen=True)
class LoadOptions:
    """Immutable load configuration built up by the Environment setters."""

    environment: Optional[str] = None
    include_globals: bool = True
    prefix: Optional[str] = None
    cache_ttl: Ttl = None
    detect_var: str = DEFAULT_DETECT_VAR
    default_environment: str = DEFAULT_ENVIRONMENT


class Environment:
    """Fluent builder and single entry point for loading env files."""

    def __init__(
        self,
        paths: Iterable[Union[str, Path]],
        ambient: Optional[AmbientEnvironment] = None,
        logger: Optional[Logger] = None,
    ) -> None:
        """
        Args:
            paths: Files or directories to load env files from
            ambient: Ambient sources (default: the process environment)
            logger: Optional logger instance

        Raises:
            PathError: If any path is invalid
        """
        self._paths: List[Union[str, Path]] = list(paths)
        self._ambient = ambient
        self.logger = logger or create_logger(name="gofr-env")
        self._supplied_logger = logger
        self._options = LoadOptions()
        self._cache: Optional[CacheBackend] = None
        self._validators: List[Validator] = []
        self._context = EnvContext(ambient)
        self._parser: Parser = DotenvParser(logger=logger)
        self._custom_parser = False
        self._custom_reader = False
        self._reader: Reader = self._build_reader()

    # ------------------------------------------------------------------
    # Constructors
    # ------------------------------------------------------------------

    @classmethod
    def create(cls, directory: Union[str, Path], **kwargs: Any) -> "Environment":
        return cls([directory], **kwargs)

    @classmethod
    def create_from_paths(cls, paths: Iterable[Union[str, Path]], **kwargs: Any) -> "Environment":
        return cls(paths, **kwargs)

    @classmethod
    def create_from_file(cls, filepath: Union[str, Path], **kwargs: Any) -> "Environment":
        return cls([filepath], **kwargs)

    # ------------------------------------------------------------------
    # Builder
    # ------------------------------------------------------------------

    def set_environment(self, environment: Optional[str]) -> "Environment":
        self._options = dataclasses.replace(self._options, environment=environment or None)
        return self

    def include_globals(self, include_globals: bool) -> "Environment":
        self._options = dataclasses.replace(self._options, include_globals=include_globals)
        return self

    def set_prefix(self, prefix: Optional[str]) -> "Environment":
        self._options = dataclasses.replace(self._options, prefix=prefix)
        return self

    def set_cache(self, cache: Optional[CacheBackend], ttl: Ttl = None) -> "Environment":
        self._cache = cache
        self._options = dataclasses.replace(self._options, cache_ttl=ttl)
        return self

    def set_detection(
        self, detect_var: str = DEFAULT_DETECT_VAR, default_environment: str = DEFAULT_ENVIRONMENT
    ) -> "Environment":
        """Choose the variable and fallback used to detect the environment."""
        self._options = dataclasses.replace(
            self._options, detect_var=detect_var, default_environment=default_environment
        )
        return self

    def apply_settings(self, settings: EnvSettings) -> "Environment":
        """Configure cache and detection from EnvSettings."""
        self.set_cache(settings.create_cache(logger=self.logger), ttl=settings.cache_ttl)
        return self.set_detection(settings.detect_var, settings.default_env)

    def set_parser(self, parser: Parser) -> "Environment":
        """Use ``parser`` for every file; rebuilds the default reader."""
        self._parser = parser
        self._custom_parser = True
        self._custom_reader = False
        self._reader = self._build_reader()
        return self

    def set_reader(self, reader: Reader) -> "Environment":
        self._reader = reader
        self._custom_reader = True
        return self

    def set_ambient(self, ambient: Optional[AmbientEnvironment]) -> "Environment":
        self._ambient = ambient
        self._context.ambient = ambient
        if not self._custom_reader:
            self._reader = self._build_reader()
        return self

    def set_context(self, context: EnvContext) -> "Environment":
        self._context = context
        return self

    def set_logger(self, logger: Logger) -> "Environment":
        """Log through ``logger``, including from the default parser and reader."""
        self.logger = logger
        self._supplied_logger = logger
        if not self._custom_parser:
            self._parser = DotenvParser(logger=logger)
        if not self._custom_reader:
            self._reader = self._build_reader()
        return self

    def validate(self, validator: Validator) -> "Environment":
        self._validators.append(validator)
        return self

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    @property
    def options(self) -> LoadOptions:
        return self._options

    @property
    def context(self) -> EnvContext:
        return self._context

    def get_parser(self) -> Parser:
        return self._parser

    def get_reader(self) -> Reader:
        return self._reader

    def files(self) -> List[str]:
        """List the env files a load would read, without reading them."""
        return self._reader.files(self.resolve_environment())

    def resolve_environment(self) -> str:
        """Return the explicit environment, or detect it."""
        if self._options.environment:
            return self._options.environment
        return detect_environment(
            self._options.detect_var, self._options.default_environment, self._ambient
        )

    @staticmethod
    def cache_key_for_environment(
        environment: Optional[str] = None,
        ambient: Optional[AmbientEnvironment] = None,
        detect_var: str = DEFAULT_DETECT_VAR,
        default_environment: str = DEFAULT_ENVIRONMENT,
    ) -> str:
        """Return the cache key for ``environment`` (detected when omitted)."""
        env = environment or detect_environment(detect_var, default_environment, ambient)
        return f"{CACHE_KEY_PREFIX}.{env}"

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    def load(self) -> Variables:
        """Strict load; ambient values win over file values."""
        return self._load(overload=False, strict=True)

    def safe_load(self) -> Variables:
        """Non-strict load; missing env files are not an error."""
        return self._load(overload=False, strict=False)

    def overload(self) -> Variables:
        """Strict load; file values win over ambient values."""
        return self._load(overload=True, strict=True)

    def _load(self, overload: bool, strict: bool) -> Variables:
        environment = self.resolve_environment()
        key = self.cache_key_for_environment(environment)

        if self._cache is not None:
            variables = self._from_cached(self._cache.get(key))
            if variables is not None:
                self.logger.debug("Env cache hit", key=key)
                self._run_validators(variables)
                self._context.set(variables)
                return variables
            self.logger.debug("Env cache miss", key=key)

        variables = self._reader.read(
            environment=environment,
            include_globals=self._options.include_globals,
            overload=overload,
            prefix=self._options.prefix,
            strict=strict,
        )

        self._run_validators(variables)
        self._context.set(variables)

        if self._cache is not None:
            self._cache.set(key, variables, self._options.cache_ttl)
            self.logger.debug("Env cache written", key=key)

        self.logger.info(
            "Environment loaded",
            environment=environment,
            variables=len(variables),
            overload=overload,
        )
        return variables

    def _from_cached(self, cached: Any) -> Optional[Variables]:
        if isinstance(cached, Variables):
            return cached
        if isinstance(cached, Mapping):
            if isinstance(cached.get("values"), Mapping):
                return Variables.from_dict(cached)
            return Variables.from_mapping(cached, self._options.prefix)
        return None

    def _run_validators(self, variables: Variables) -> None:
        for validator in self._validators:
            try:
                validator.validate(variables)
            except ValidationError as e:
                self.logger.warning("Env validation failed", code=e.code, details=e.details)
                raise

    def _build_reader(self) -> FileReader:
        return FileReader(
            self._paths, parser=self._parser, ambient=self._ambient, logger=self._supplied_logger
        )


__all__ = ["Environment", "LoadOptions", "CACHE_KEY_PREFIX"]
