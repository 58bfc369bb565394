"""Discovery of env files for a target environment.

Given root paths (files or directories), the resolver produces the ordered,
deduplicated list of env files to load:

- file inputs are used as-is (their name must start with ``.env``)
- directory inputs are scanned recursively; directories are visited in
  sorted order and each contributes ``.env`` then ``.env.<environment>``;
  symlinked directories are read but not descended into, and must resolve
  inside the root
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Iterable, List, Optional, Union

from gofr_env.ambient import AmbientEnvironment, detect_environment
from gofr_env.exceptions import PathError
from gofr_env.logger import Logger, create_logger

ENV_FILE_PREFIX = ".env"


def _dedupe(items: Iterable[str]) -> List[str]:
    seen = set()
    result = []
    for item in items:
        if item not in seen:
            seen.add(item)
            result.append(item)
    return result


def _walk_directories(root: str) -> Iterable[str]:
    """Yield every directory under ``root``, including symlinked ones.

    Symlinked directories are yielded but not descended into.
    """
    for dirpath, dirnames, _ in os.walk(root):
        yield dirpath
        for name in dirnames:
            candidate = os.path.join(dirpath, name)
            if os.path.islink(candidate):
                yield candidate


def _is_within(path: str, root: str) -> bool:
    return path == root or path.startswith(root.rstrip(os.sep) + os.sep)


class FileResolver:
    """Resolve input paths into env files.

    Example:
        resolver = FileResolver(["/srv/app", "/etc/app/.env.shared"])
        resolver.resolve_files("production")
        # ['/srv/app/.env', '/srv/app/.env.production', '/etc/app/.env.shared']
    """

    def __init__(
        self,
        paths: Iterable[Union[str, Path]],
        ambient: Optional[AmbientEnvironment] = None,
        logger: Optional[Logger] = None,
    ) -> None:
        """Validate and canonicalize the input paths.

        Args:
            paths: Files or directories to load env files from
            ambient: Ambient sources used for environment detection
            logger: Optional logger instance

        Raises:
            PathError: If no path is given or a path does not exist or is
                neither a file nor a directory
        """
        self.ambient = ambient
        self.logger = logger or create_logger(name="gofr-env-resolver")
        self.paths = self._normalize_paths(list(paths))

    def files(self, environment: Optional[str] = None) -> List[str]:
        """List the files that a load for ``environment`` would read."""
        return self.resolve_files(environment or detect_environment(ambient=self.ambient))

    def resolve_files(self, environment: str) -> List[str]:
        """Compute the ordered env files for ``environment``.

        Raises:
            PathError: If a file is misnamed, unreadable, or escapes the
                directory it was discovered under
        """
        files: List[str] = []
        for path in self.paths:
            if os.path.isdir(path):
                files.extend(self._resolve_directory(path, environment))
            else:
                files.append(self._assert_env_file(path))

        files = _dedupe(files)
        self.logger.debug(
            "Resolved env files",
            environment=environment,
            roots=len(self.paths),
            files=len(files),
        )
        return files

    def _resolve_directory(self, root: str, environment: str) -> List[str]:
        directories = sorted(_dedupe(_walk_directories(root)))

        files: List[str] = []
        for directory in directories:
            base = os.path.join(directory, ENV_FILE_PREFIX)
            if os.path.isfile(base):
                files.append(self._assert_env_file(base, root))

            env_file = os.path.join(directory, f"{ENV_FILE_PREFIX}.{environment}")
            if os.path.isfile(env_file):
                files.append(self._assert_env_file(env_file, root))

        return files

    def _assert_env_file(self, path: str, root: Optional[str] = None) -> str:
        if not os.path.exists(path):
            raise PathError(
                code="PATH_NOT_FOUND",
                message=f"Env file does not exist: {path}",
                details={"path": path},
            )
        real = os.path.realpath(path)

        if not os.path.basename(real).startswith(ENV_FILE_PREFIX):
            raise PathError(
                code="INVALID_ENV_FILENAME",
                message=f"Env file must start with .env: {path}",
                details={"path": path},
            )

        if root is not None and not _is_within(real, os.path.realpath(root)):
            raise PathError(
                code="PATH_OUTSIDE_ROOT",
                message=f"Env file is outside of allowed root: {path}",
                details={"path": path, "root": root},
            )

        if not os.access(real, os.R_OK):
            raise PathError(
                code="FILE_NOT_READABLE",
                message=f"Env file is not readable: {path}",
                details={"path": path},
            )

        return real

    def _normalize_paths(self, paths: List[Union[str, Path]]) -> List[str]:
        if not paths:
            raise PathError(code="NO_PATHS", message="At least one path is required")

        normalized: List[str] = []
        for path in paths:
            raw = str(path)
            if raw == "":
                continue

            if not os.path.exists(raw):
                raise PathError(
                    code="PATH_NOT_FOUND",
                    message=f"Path does not exist: {raw}",
                    details={"path": raw},
                )

            real = os.path.realpath(raw)
            if not os.path.isdir(real) and not os.path.isfile(real):
                raise PathError(
                    code="INVALID_PATH_TYPE",
                    message=f"Path must be a file or directory: {raw}",
                    details={"path": raw},
                )

            normalized.append(real.rstrip(os.sep) or os.sep)

        if not normalized:
            raise PathError(code="NO_PATHS", message="At least one path is required")

        return _dedupe(normalized)


__all__ = ["FileResolver", "ENV_FILE_PREFIX"]
