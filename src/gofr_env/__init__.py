"""gofr-env - Layered env file loading for GOFR projects.

Loads shell-style env files (``.env``, ``.env.<environment>``) from files and
directory trees, merges them with the process environment, and exposes the
result as an immutable, typed, prefix-aware store:
- parser: quoting, escapes, interpolation, multiline blocks
- resolver: ordered discovery of env files for an environment
- reader: precedence-aware merge with the ambient environment
- variables: typed accessors and export back to the environment
- environment: cache, validation and publication around a load

Usage:
    from gofr_env import Environment, EnvContext, RequiredValidator

    context = EnvContext()
    variables = (
        Environment.create("/srv/app")
        .set_context(context)
        .validate(RequiredValidator(["DB_HOST"]))
        .load()
    )
    port = variables.to_int("DB_PORT", 5432)
"""

__version__ = "1.0.0"

from gofr_env.ambient import AmbientEnvironment, detect_environment
from gofr_env.cache import CacheBackend, FileCache, MemoryCache, create_cache, create_cache_from_env
from gofr_env.config import EnvSettings
from gofr_env.context import EnvContext
from gofr_env.environment import CACHE_KEY_PREFIX, Environment, LoadOptions
from gofr_env.exceptions import (
    CacheError,
    ConfigurationError,
    GofrEnvError,
    NoFilesFoundError,
    ParseError,
    PathError,
    PrefixMismatchError,
    ValidationError,
)
from gofr_env.logger import Logger, StructuredLogger, create_logger, get_logger
from gofr_env.parser import DotenvParser, ParseResult, Parser, PythonDotenvParser
from gofr_env.reader import FileReader, Reader
from gofr_env.resolver import FileResolver
from gofr_env.validators import EnvType, RequiredValidator, TypeValidator, Validator
from gofr_env.variables import Variables

__all__ = [
    "__version__",
    # Core
    "DotenvParser",
    "PythonDotenvParser",
    "ParseResult",
    "Parser",
    "FileResolver",
    "FileReader",
    "Reader",
    "Variables",
    "Environment",
    "LoadOptions",
    "CACHE_KEY_PREFIX",
    # Ambient state
    "AmbientEnvironment",
    "EnvContext",
    "detect_environment",
    # Validators
    "EnvType",
    "Validator",
    "RequiredValidator",
    "TypeValidator",
    # Cache
    "CacheBackend",
    "MemoryCache",
    "FileCache",
    "create_cache",
    "create_cache_from_env",
    # Settings
    "EnvSettings",
    # Logger
    "Logger",
    "StructuredLogger",
    "create_logger",
    "get_logger",
    # Exceptions
    "GofrEnvError",
    "PathError",
    "NoFilesFoundError",
    "ParseError",
    "ValidationError",
    "ConfigurationError",
    "PrefixMismatchError",
    "CacheError",
]
