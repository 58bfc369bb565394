"""Command line interface for gofr-env.

USAGE:
    gofr-env cache-clear [--environment ENV] [--backend file] [--cache-dir DIR]
    gofr-env files PATH [PATH ...] [--environment ENV] [--format text|json]

ENVIRONMENT VARIABLES:
    GOFR_ENV_CACHE_BACKEND  Cache backend: none, memory, file (cache-clear needs file)
    GOFR_ENV_CACHE_DIR      Directory for the file cache backend
    GOFR_ENV_DETECT_VAR     Variable naming the environment (default: APP_ENV)
    GOFR_ENV_DEFAULT_ENV    Environment when none is detected (default: dev)

EXAMPLES:
    # Drop the cached variables for production:
    gofr-env cache-clear --environment production --cache-dir /var/cache/gofr-env

    # Show which files a load would read:
    gofr-env files /srv/app --environment staging
"""

import argparse
import json
import sys
from typing import List, Optional

from gofr_env.ambient import AmbientEnvironment, detect_environment
from gofr_env.cache import CacheBackend, create_cache
from gofr_env.config import EnvSettings
from gofr_env.environment import Environment
from gofr_env.exceptions import GofrEnvError
from gofr_env.logger import Logger


def cmd_cache_clear(
    cache: Optional[CacheBackend],
    environment: Optional[str] = None,
    settings: Optional[EnvSettings] = None,
    ambient: Optional[AmbientEnvironment] = None,
) -> int:
    """Delete the cached variables for an environment.

    An empty ``environment`` means "detect the default".
    """
    if cache is None:
        print("ERROR: No cache configured (set GOFR_ENV_CACHE_BACKEND or --backend)", file=sys.stderr)
        return 1

    settings = settings or EnvSettings()
    key = Environment.cache_key_for_environment(
        environment or None,
        ambient=ambient,
        detect_var=settings.detect_var,
        default_environment=settings.default_env,
    )

    if cache.delete(key):
        print(f"Env cache cleared ({key})")
        return 0

    print(f"ERROR: Failed to clear env cache ({key})", file=sys.stderr)
    return 1


def cmd_files(
    paths: List[str],
    environment: Optional[str] = None,
    format: str = "text",
    settings: Optional[EnvSettings] = None,
    ambient: Optional[AmbientEnvironment] = None,
    logger: Optional[Logger] = None,
) -> int:
    """Print the env files that a load would read, in load order."""
    settings = settings or EnvSettings()
    env_name = environment or detect_environment(settings.detect_var, settings.default_env, ambient)

    try:
        files = (
            Environment.create_from_paths(paths, ambient=ambient, logger=logger)
            .set_environment(env_name)
            .files()
        )
    except GofrEnvError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 1

    if format == "json":
        print(json.dumps({"environment": env_name, "files": files}, indent=2))
        return 0

    for path in files:
        print(path)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="gofr-env",
        description="Inspect env file resolution and manage the env cache",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    subparsers = parser.add_subparsers(dest="command", help="Command", required=False)

    clear_parser = subparsers.add_parser(
        "cache-clear",
        help="Delete cached variables for an environment",
        description="Delete the cache entry config.envs.<environment>",
    )
    clear_parser.add_argument(
        "--environment",
        default="",
        help="Environment name (empty: detect the default)",
    )
    clear_parser.add_argument(
        "--backend",
        choices=["file"],
        default=None,
        help="Cache backend (only file caches outlive a process). Default: GOFR_ENV_CACHE_BACKEND",
    )
    clear_parser.add_argument(
        "--cache-dir",
        default=None,
        help="Cache directory for the file backend. Default: GOFR_ENV_CACHE_DIR",
    )

    files_parser = subparsers.add_parser(
        "files",
        help="List the env files a load would read",
        description="Resolve env files for the given paths without reading them",
    )
    files_parser.add_argument("paths", nargs="+", help="Env files or directories")
    files_parser.add_argument("--environment", default="", help="Environment name")
    files_parser.add_argument(
        "--format",
        choices=["text", "json"],
        default="text",
        help="Output format. Default: %(default)s",
    )

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    try:
        settings = EnvSettings.from_env()
    except GofrEnvError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 1

    logger = settings.create_logger(name="gofr-env-cli")

    if args.command == "cache-clear":
        try:
            backend = args.backend or settings.cache_backend
            if backend == "memory":
                print("ERROR: The memory cache lives only inside the loading process", file=sys.stderr)
                return 1
            cache = create_cache(backend, directory=args.cache_dir or settings.cache_dir, logger=logger)
            return cmd_cache_clear(cache, args.environment, settings)
        except GofrEnvError as e:
            print(f"ERROR: {e}", file=sys.stderr)
            return 1

    elif args.command == "files":
        return cmd_files(args.paths, args.environment, args.format, settings, logger=logger)

    return 0


if __name__ == "__main__":
    sys.exit(main())
