"""Tests for gofr_env.environment (load orchestration)."""

from pathlib import Path
from unittest.mock import MagicMock

import pytest

from gofr_env.ambient import AmbientEnvironment
from gofr_env.cache import FileCache, MemoryCache
from gofr_env.config import EnvSettings
from gofr_env.context import EnvContext
from gofr_env.environment import CACHE_KEY_PREFIX, Environment, LoadOptions
from gofr_env.exceptions import NoFilesFoundError, PathError, ValidationError
from gofr_env.parser import DotenvParser, PythonDotenvParser
from gofr_env.reader import FileReader
from gofr_env.validators import EnvType, RequiredValidator, TypeValidator
from gofr_env.variables import Variables


def write(path: Path, content: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content)
    return path


@pytest.fixture(autouse=True)
def _no_process_app_env(monkeypatch):
    monkeypatch.delenv("APP_ENV", raising=False)
    monkeypatch.delenv("STAGE", raising=False)


@pytest.fixture
def ambient() -> AmbientEnvironment:
    return AmbientEnvironment(primary={"SHARED": "global"}, secondary={})


@pytest.fixture
def app_dir(tmp_path) -> Path:
    write(tmp_path / ".env", "SHARED=file\nDB_HOST=localhost\nDB_PORT=5432\n")
    write(tmp_path / ".env.dev", "DEBUG=true\n")
    write(tmp_path / ".env.production", "DEBUG=false\n")
    return tmp_path


class TestConstruction:
    """Constructors and eager path validation."""

    def test_create_from_directory(self, app_dir, ambient):
        env = Environment.create(app_dir, ambient=ambient)
        assert isinstance(env.get_reader(), FileReader)
        assert isinstance(env.get_parser(), DotenvParser)

    def test_create_from_file(self, app_dir, ambient):
        variables = Environment.create_from_file(app_dir / ".env", ambient=ambient).load()
        assert variables.get("DB_HOST") == "localhost"
        assert not variables.has("DEBUG")

    def test_create_from_paths(self, tmp_path, ambient):
        write(tmp_path / "a" / ".env", "A=1\n")
        write(tmp_path / "b" / ".env", "B=2\n")

        variables = Environment.create_from_paths([tmp_path / "a", tmp_path / "b"], ambient=ambient).load()

        assert variables.get("A") == "1"
        assert variables.get("B") == "2"

    def test_invalid_path_fails_at_construction(self, tmp_path):
        with pytest.raises(PathError):
            Environment.create(tmp_path / "missing")

    def test_default_options(self, app_dir, ambient):
        assert Environment.create(app_dir, ambient=ambient).options == LoadOptions()


class TestLoading:
    """load, safe_load and overload."""

    def test_load_prefers_ambient(self, app_dir, ambient):
        variables = Environment.create(app_dir, ambient=ambient).load()
        assert variables.get("SHARED") == "global"
        assert variables.get("DEBUG") == "true"

    def test_overload_prefers_files(self, app_dir, ambient):
        variables = Environment.create(app_dir, ambient=ambient).overload()
        assert variables.get("SHARED") == "file"

    def test_load_fails_without_files(self, tmp_path, ambient):
        with pytest.raises(NoFilesFoundError):
            Environment.create(tmp_path, ambient=ambient).load()

    def test_overload_fails_without_files(self, tmp_path, ambient):
        with pytest.raises(NoFilesFoundError):
            Environment.create(tmp_path, ambient=ambient).overload()

    def test_safe_load_tolerates_missing_files(self, tmp_path, ambient):
        variables = Environment.create(tmp_path, ambient=ambient).safe_load()
        assert variables.all() == {"SHARED": "global"}

    def test_explicit_environment(self, app_dir, ambient):
        variables = Environment.create(app_dir, ambient=ambient).set_environment("production").load()
        assert variables.to_bool("DEBUG") is False

    def test_detected_environment(self, app_dir):
        ambient = AmbientEnvironment(primary={"APP_ENV": "production"}, secondary={})
        variables = Environment.create(app_dir, ambient=ambient).load()
        assert variables.to_bool("DEBUG") is False

    def test_custom_detection_variable(self, app_dir):
        ambient = AmbientEnvironment(primary={"STAGE": "production"}, secondary={})
        env = Environment.create(app_dir, ambient=ambient).set_detection("STAGE", "dev")
        assert env.resolve_environment() == "production"

    def test_exclude_globals(self, app_dir, ambient):
        variables = Environment.create(app_dir, ambient=ambient).include_globals(False).load()
        assert variables.get("SHARED") == "file"
        assert set(variables.keys()) == {"SHARED", "DB_HOST", "DB_PORT", "DEBUG"}

    def test_prefix(self, app_dir, ambient):
        variables = (
            Environment.create(app_dir, ambient=ambient).include_globals(False).set_prefix("APP_").load()
        )
        assert "APP_DB_HOST" in variables.keys()
        assert variables.to_int("DB_PORT") == 5432

    def test_multiline_and_local_values(self, tmp_path, ambient):
        write(
            tmp_path / ".env",
            'MESSAGE="first\nsecond"\n'
            "CERT=-----BEGIN CERTIFICATE-----\nMIIB\n-----END CERTIFICATE-----\n"
            "local INTERNAL=1\n",
        )

        variables = Environment.create(tmp_path, ambient=ambient).load()

        assert variables.get("MESSAGE") == "first\nsecond"
        assert variables.get("CERT").splitlines()[1] == "MIIB"
        assert not variables.is_exportable("INTERNAL")

    def test_files_lists_load_order(self, app_dir, ambient):
        files = Environment.create(app_dir, ambient=ambient).set_environment("production").files()
        assert [Path(f).name for f in files] == [".env", ".env.production"]


class TestPublication:
    """Successful loads are published to the context."""

    def test_context_receives_loaded_variables(self, app_dir, ambient):
        context = EnvContext(ambient)
        variables = Environment.create(app_dir, ambient=ambient).set_context(context).load()

        assert context.current is variables
        assert context.get("DB_HOST") == "localhost"

    def test_default_context_is_per_instance(self, app_dir, ambient):
        env = Environment.create(app_dir, ambient=ambient)
        env.load()
        assert env.context.get("DB_HOST") == "localhost"
        assert Environment.create(app_dir, ambient=ambient).context.current is None

    def test_load_does_not_touch_ambient_sources(self, app_dir, ambient):
        Environment.create(app_dir, ambient=ambient).load()
        assert ambient.primary == {"SHARED": "global"}
        assert ambient.secondary == {}


class TestValidation:
    """Validators gate publication and caching."""

    def test_passing_validators(self, app_dir, ambient):
        variables = (
            Environment.create(app_dir, ambient=ambient)
            .validate(RequiredValidator(["DB_HOST"]))
            .validate(TypeValidator({"DB_PORT": EnvType.INT, "DEBUG": "bool"}))
            .load()
        )
        assert variables.to_int("DB_PORT") == 5432

    def test_failure_publishes_and_caches_nothing(self, app_dir, ambient):
        context = EnvContext(ambient)
        cache = MemoryCache()
        env = (
            Environment.create(app_dir, ambient=ambient)
            .set_context(context)
            .set_cache(cache)
            .validate(RequiredValidator(["SECRET_KEY"]))
        )

        with pytest.raises(ValidationError) as exc_info:
            env.load()

        assert exc_info.value.details == {"missing": ["SECRET_KEY"]}
        assert context.current is None
        assert len(cache) == 0

    def test_failure_is_logged(self, app_dir, ambient):
        logger = MagicMock()
        env = (
            Environment.create(app_dir, ambient=ambient, logger=logger)
            .validate(TypeValidator({"DB_HOST": "int"}))
        )

        with pytest.raises(ValidationError):
            env.load()

        logger.warning.assert_called_once()


class TestCaching:
    """Cache hits skip the filesystem; misses populate the cache."""

    def test_miss_writes_cache(self, app_dir, ambient):
        cache = MemoryCache()
        variables = Environment.create(app_dir, ambient=ambient).set_cache(cache).load()
        assert cache.get(f"{CACHE_KEY_PREFIX}.dev") == variables

    def test_hit_skips_reading(self, app_dir, ambient):
        cache = MemoryCache()
        cached = Variables.from_mapping({"FROM_CACHE": "1"})
        cache.set("config.envs.dev", cached)
        reader = MagicMock()

        variables = Environment.create(app_dir, ambient=ambient).set_cache(cache).set_reader(reader).load()

        assert variables is cached
        reader.read.assert_not_called()

    def test_hit_still_runs_validators(self, app_dir, ambient):
        cache = MemoryCache()
        cache.set("config.envs.dev", Variables.from_mapping({"FROM_CACHE": "1"}))
        env = (
            Environment.create(app_dir, ambient=ambient)
            .set_cache(cache)
            .validate(RequiredValidator(["DB_HOST"]))
        )

        with pytest.raises(ValidationError):
            env.load()

    def test_hit_is_published(self, app_dir, ambient):
        cache = MemoryCache()
        cache.set("config.envs.dev", Variables.from_mapping({"FROM_CACHE": "1"}))
        context = EnvContext(ambient)

        Environment.create(app_dir, ambient=ambient).set_cache(cache).set_context(context).load()

        assert context.get("FROM_CACHE") == "1"

    def test_plain_mapping_hit_gets_prefix(self, app_dir, ambient):
        cache = MemoryCache()
        cache.set("config.envs.dev", {"DB_HOST": "cached"})

        variables = Environment.create(app_dir, ambient=ambient).set_prefix("APP_").set_cache(cache).load()

        assert variables.keys() == ["APP_DB_HOST"]

    def test_file_cache_round_trip(self, app_dir, ambient, tmp_path):
        cache = FileCache(tmp_path / "cache")
        first = Environment.create(app_dir, ambient=ambient).set_cache(cache, ttl=60).load()

        (app_dir / ".env").write_text("DB_HOST=changed\n")
        second = Environment.create(app_dir, ambient=ambient).set_cache(cache, ttl=60).load()

        assert second == first
        assert second.get("DB_HOST") == "localhost"

    def test_cache_key_per_environment(self, app_dir, ambient):
        cache = MemoryCache()
        Environment.create(app_dir, ambient=ambient).set_environment("production").set_cache(cache).load()
        assert cache.get("config.envs.production") is not None
        assert cache.get("config.envs.dev") is None

    def test_cache_key_for_environment(self):
        ambient = AmbientEnvironment(primary={"APP_ENV": "qa"}, secondary={})
        assert Environment.cache_key_for_environment("prod") == "config.envs.prod"
        assert Environment.cache_key_for_environment(ambient=ambient) == "config.envs.qa"
        assert (
            Environment.cache_key_for_environment(
                ambient=AmbientEnvironment(primary={}, secondary={})
            )
            == "config.envs.dev"
        )


class TestCollaborators:
    """Parser, reader and settings injection."""

    def test_set_parser_rebuilds_reader(self, app_dir, ambient):
        parser = DotenvParser()
        env = Environment.create(app_dir, ambient=ambient)
        original_reader = env.get_reader()

        env.set_parser(parser)

        assert env.get_parser() is parser
        assert env.get_reader() is not original_reader
        assert env.get_reader().parser is parser

    def test_custom_reader_is_used(self, app_dir, ambient):
        reader = MagicMock()
        reader.read.return_value = Variables.from_mapping({"CUSTOM": "1"})

        variables = Environment.create(app_dir, ambient=ambient).set_reader(reader).overload()

        assert variables.get("CUSTOM") == "1"
        reader.read.assert_called_once_with(
            environment="dev", include_globals=True, overload=True, prefix=None, strict=True
        )

    def test_supplied_logger_reaches_default_collaborators(self, app_dir, ambient):
        logger = MagicMock()
        env = Environment.create(app_dir, ambient=ambient, logger=logger)

        assert env.get_parser().logger is logger
        assert env.get_reader().logger is logger
        assert env.get_reader().resolver.logger is logger

    def test_set_logger_rebuilds_default_reader(self, app_dir, ambient):
        logger = MagicMock()
        env = Environment.create(app_dir, ambient=ambient).set_logger(logger)

        env.load()

        assert env.get_reader().resolver.logger is logger
        messages = [call.args[0] for call in logger.debug.call_args_list]
        assert "Resolved env files" in messages
        assert "Parsed env file" in messages

    def test_set_logger_keeps_custom_parser(self, app_dir, ambient):
        parser = DotenvParser()
        env = Environment.create(app_dir, ambient=ambient).set_parser(parser)
        env.set_logger(MagicMock())
        assert env.get_parser() is parser

    def test_set_ambient_keeps_custom_reader(self, app_dir, ambient):
        reader = MagicMock()
        env = Environment.create(app_dir, ambient=ambient).set_reader(reader)
        env.set_ambient(AmbientEnvironment(primary={}, secondary={}))
        assert env.get_reader() is reader

    def test_apply_settings(self, app_dir, ambient, tmp_path):
        settings = EnvSettings(
            cache_backend="file",
            cache_dir=tmp_path / "cache",
            cache_ttl=30,
            detect_var="STAGE",
            default_env="production",
        )

        env = Environment.create(app_dir, ambient=ambient).apply_settings(settings)
        variables = env.load()

        assert env.options.cache_ttl == 30
        assert env.resolve_environment() == "production"
        assert variables.to_bool("DEBUG") is False
        assert FileCache(tmp_path / "cache").get("config.envs.production") == variables

    def test_python_dotenv_parser(self, app_dir, ambient):
        variables = (
            Environment.create(app_dir, ambient=ambient)
            .set_parser(PythonDotenvParser())
            .include_globals(False)
            .load()
        )
        assert variables.get("DB_HOST") == "localhost"
        assert variables.to_bool("DEBUG") is True
