"""Tests for gofr_env.context and gofr_env.ambient."""

import pytest

from gofr_env.ambient import AmbientEnvironment, default_ambient, detect_environment
from gofr_env.context import EnvContext
from gofr_env.variables import Variables


class TestAmbientEnvironment:
    def test_snapshot_primary_wins(self):
        ambient = AmbientEnvironment(primary={"A": "p"}, secondary={"A": "s", "B": "s"})
        assert ambient.snapshot() == {"A": "p", "B": "s"}

    def test_snapshot_skips_non_string_keys_and_none(self):
        ambient = AmbientEnvironment(primary={"A": None, 1: "x"}, secondary={"B": 2})
        assert ambient.snapshot() == {"B": "2"}

    def test_snapshot_is_a_copy(self):
        primary = {"A": "1"}
        snapshot = AmbientEnvironment(primary=primary, secondary={}).snapshot()
        snapshot["A"] = "changed"
        assert primary == {"A": "1"}

    def test_lookup_and_has(self):
        ambient = AmbientEnvironment(primary={"A": "p"}, secondary={"B": "s"})
        assert ambient.lookup("A") == "p"
        assert ambient.lookup("B") == "s"
        assert ambient.lookup("C") is None
        assert ambient.has("B")
        assert not ambient.has("C")

    def test_default_ambient_is_shared(self):
        assert default_ambient() is default_ambient()


class TestDetectEnvironment:
    @pytest.fixture(autouse=True)
    def _no_process_app_env(self, monkeypatch):
        monkeypatch.delenv("APP_ENV", raising=False)

    def test_defaults_to_dev(self):
        assert detect_environment(ambient=AmbientEnvironment(primary={}, secondary={})) == "dev"

    def test_primary_then_secondary(self):
        ambient = AmbientEnvironment(primary={"APP_ENV": "prod"}, secondary={"APP_ENV": "qa"})
        assert detect_environment(ambient=ambient) == "prod"

        ambient = AmbientEnvironment(primary={}, secondary={"APP_ENV": "qa"})
        assert detect_environment(ambient=ambient) == "qa"

    def test_empty_values_are_ignored(self):
        ambient = AmbientEnvironment(primary={"APP_ENV": ""}, secondary={"APP_ENV": "qa"})
        assert detect_environment(ambient=ambient) == "qa"

    def test_process_environment_is_the_last_resort(self, monkeypatch):
        monkeypatch.setenv("APP_ENV", "staging")
        assert detect_environment(ambient=AmbientEnvironment(primary={}, secondary={})) == "staging"

    def test_custom_variable_and_default(self):
        ambient = AmbientEnvironment(primary={"STAGE": "blue"}, secondary={})
        assert detect_environment("STAGE", "x", ambient) == "blue"
        assert detect_environment("OTHER", "fallback", ambient) == "fallback"


class TestEnvContext:
    @pytest.fixture
    def context(self):
        return EnvContext(AmbientEnvironment(primary={"HOME": "/root"}, secondary={}))

    def test_starts_empty(self, context):
        assert context.current is None
        assert context.get("DB_HOST") is None

    def test_set_and_get(self, context):
        variables = Variables.from_mapping({"DB_HOST": "db"}, prefix="APP_")
        context.set(variables)

        assert context.current is variables
        assert context.get("DB_HOST") == "db"
        assert context.env("APP_DB_HOST") == "db"
        assert context.has("DB_HOST")

    def test_falls_back_to_ambient(self, context):
        context.set(Variables.from_mapping({"A": "1"}))
        assert context.get("HOME") == "/root"
        assert context.has("HOME")
        assert context.get("MISSING", "d") == "d"

    def test_clear(self, context):
        context.set(Variables.from_mapping({"A": "1"}))
        context.clear()
        assert context.current is None
        assert not context.has("A")

    def test_contexts_are_independent(self):
        first, second = EnvContext(), EnvContext()
        first.set(Variables.from_mapping({"A": "1"}))
        assert second.current is None
