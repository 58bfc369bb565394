"""Tests for gofr_env.config module"""

import json
import os
from pathlib import Path
from unittest.mock import patch

import pytest

from gofr_env.cache import FileCache, MemoryCache
from gofr_env.config import EnvSettings
from gofr_env.exceptions import ConfigurationError


class TestEnvSettings:
    """Tests for EnvSettings dataclass"""

    def test_default_values(self):
        """Test default settings"""
        settings = EnvSettings()
        assert settings.cache_backend == "none"
        assert settings.cache_dir is None
        assert settings.cache_ttl is None
        assert settings.detect_var == "APP_ENV"
        assert settings.default_env == "dev"
        assert settings.log_level == "WARNING"
        assert settings.log_format == "console"

    def test_values_are_normalized(self):
        """Test case normalization and str -> Path"""
        settings = EnvSettings(cache_backend=" FILE ", cache_dir="/tmp/x", log_level="debug", log_format="JSON")
        assert settings.cache_backend == "file"
        assert settings.cache_dir == Path("/tmp/x")
        assert settings.log_level == "DEBUG"
        assert settings.log_format == "json"

    def test_from_env_default_prefix(self):
        """Test loading from environment with default prefix"""
        with patch.dict(os.environ, {
            "GOFR_ENV_CACHE_BACKEND": "memory",
            "GOFR_ENV_CACHE_TTL": "300",
            "GOFR_ENV_DETECT_VAR": "STAGE",
            "GOFR_ENV_DEFAULT_ENV": "production",
        }, clear=False):
            settings = EnvSettings.from_env()
            assert settings.cache_backend == "memory"
            assert settings.cache_ttl == 300
            assert settings.detect_var == "STAGE"
            assert settings.default_env == "production"

    def test_from_env_custom_prefix(self):
        """Test loading from a mapping with a custom prefix"""
        settings = EnvSettings.from_env(
            prefix="MYAPP",
            environ={"MYAPP_CACHE_BACKEND": "file", "MYAPP_CACHE_DIR": "/var/cache/env"},
        )
        assert settings.prefix == "MYAPP"
        assert settings.cache_dir == Path("/var/cache/env")

    def test_from_env_empty_mapping_uses_defaults(self):
        assert EnvSettings.from_env(environ={}) == EnvSettings()

    def test_invalid_ttl(self):
        """Test that a non-integer TTL names the offending variable"""
        with pytest.raises(ConfigurationError) as exc_info:
            EnvSettings.from_env(environ={"GOFR_ENV_CACHE_TTL": "soon"})
        assert exc_info.value.code == "INVALID_SETTING"
        assert exc_info.value.details == {"setting": "GOFR_ENV_CACHE_TTL"}

    def test_invalid_backend(self):
        with pytest.raises(ConfigurationError) as exc_info:
            EnvSettings(cache_backend="redis")
        assert exc_info.value.code == "INVALID_CACHE_BACKEND"

    def test_file_backend_requires_dir(self):
        with pytest.raises(ConfigurationError) as exc_info:
            EnvSettings(cache_backend="file")
        assert exc_info.value.code == "CACHE_DIR_REQUIRED"

    @pytest.mark.parametrize(
        "kwargs",
        [{"log_format": "xml"}, {"log_level": "LOUD"}, {"detect_var": ""}],
    )
    def test_invalid_settings(self, kwargs):
        with pytest.raises(ConfigurationError) as exc_info:
            EnvSettings(**kwargs)
        assert exc_info.value.code == "INVALID_SETTING"


class TestCreateCache:
    """EnvSettings.create_cache builds the configured backend"""

    def test_none(self):
        assert EnvSettings().create_cache() is None

    def test_memory(self):
        assert isinstance(EnvSettings(cache_backend="memory").create_cache(), MemoryCache)

    def test_file(self, tmp_path):
        cache = EnvSettings(cache_backend="file", cache_dir=tmp_path).create_cache()
        assert isinstance(cache, FileCache)
        assert cache.directory == tmp_path


class TestCreateLogger:
    """EnvSettings.create_logger applies log_level and log_format"""

    def test_json_logger_at_level(self, capsys):
        logger = EnvSettings(log_level="info", log_format="json").create_logger(name="test-settings-logger")
        logger.debug("hidden")
        logger.info("shown")

        err = capsys.readouterr().err.strip().splitlines()
        assert len(err) == 1
        assert json.loads(err[0])["message"] == "shown"
