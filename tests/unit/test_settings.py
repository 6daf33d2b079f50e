"""Tests for AuthzSettings, SettingsLoader and the wiring helpers."""
from __future__ import annotations

import pathlib

import pytest
from pydantic import ValidationError

from caseflow_authz.config.settings import (
    AuthzSettings,
    SettingsLoader,
    build_gate,
    load_declarations,
)
from caseflow_authz.engine.authorizer import Actor, ReasonCode
from caseflow_authz.errors import ConfigurationError
from caseflow_authz.gate.resolvers import ResolverRegistry
from caseflow_authz.permissions.declarations import Restriction
from caseflow_authz.permissions.defaults import write_default_config

_CUSTOM_PERMISSIONS = """
roles: {reader: 1}
resources: [reports]
actions: [read]
permissions:
  reader:
    reports: {read: all}
"""


@pytest.fixture()
def loader() -> SettingsLoader:
    return SettingsLoader()


class TestAuthzSettings:
    def test_defaults(self) -> None:
        settings = AuthzSettings()
        assert settings.permissions_file is None
        assert settings.strict is False
        assert settings.resolver_timeout_seconds is None
        assert settings.log_level == "WARNING"

    def test_non_positive_timeout_rejected(self) -> None:
        with pytest.raises(ValidationError):
            AuthzSettings(resolver_timeout_seconds=0)

    def test_unknown_log_level_rejected(self) -> None:
        with pytest.raises(ValidationError):
            AuthzSettings(log_level="CHATTY")

    def test_extra_keys_allowed(self) -> None:
        settings = AuthzSettings.model_validate({"database_url": "sqlite://"})
        assert settings.model_extra == {"database_url": "sqlite://"}


class TestSettingsLoader:
    def test_load_string(self, loader: SettingsLoader) -> None:
        settings = loader.load_string("strict: true\nresolver_timeout_seconds: 1.5\n")
        assert settings.strict is True
        assert settings.resolver_timeout_seconds == 1.5

    def test_empty_string_gives_defaults(self, loader: SettingsLoader) -> None:
        assert loader.load_string("") == loader.defaults()

    def test_load_file(self, loader: SettingsLoader, tmp_path: pathlib.Path) -> None:
        settings_file = tmp_path / "authz.yaml"
        settings_file.write_text("log_level: DEBUG\npermissions_file: perms.yaml\n", encoding="utf-8")
        settings = loader.load(settings_file)
        assert settings.log_level == "DEBUG"
        assert settings.permissions_file == pathlib.Path("perms.yaml")

    def test_missing_file_raises(self, loader: SettingsLoader, tmp_path: pathlib.Path) -> None:
        with pytest.raises(FileNotFoundError):
            loader.load(tmp_path / "authz.yaml")


class TestLoadDeclarations:
    def test_defaults_when_no_file(self) -> None:
        config = load_declarations(AuthzSettings())
        assert config.matrix.lookup("user", "feedback", "read") is Restriction.OWN

    def test_custom_file(self, tmp_path: pathlib.Path) -> None:
        permissions = tmp_path / "permissions.yaml"
        permissions.write_text(_CUSTOM_PERMISSIONS, encoding="utf-8")
        config = load_declarations(AuthzSettings(permissions_file=permissions))
        assert config.roles.roles == ("reader",)

    def test_strict_setting_applies(self, tmp_path: pathlib.Path) -> None:
        permissions = tmp_path / "permissions.yaml"
        permissions.write_text(_CUSTOM_PERMISSIONS + "owner: ops\n", encoding="utf-8")
        with pytest.raises(ConfigurationError, match="owner"):
            load_declarations(AuthzSettings(permissions_file=permissions, strict=True))

    def test_written_defaults_round_trip(self, tmp_path: pathlib.Path) -> None:
        permissions = write_default_config(tmp_path / "permissions.yaml")
        config = load_declarations(AuthzSettings(permissions_file=permissions))
        assert len(config.roles) == 5


class TestBuildGate:
    def test_gate_uses_settings(self) -> None:
        resolvers = ResolverRegistry({"feedback": lambda request: {"createdBy": 5}})
        settings = AuthzSettings(resolver_timeout_seconds=2.0)
        with build_gate(settings, resolvers) as gate:
            operation = gate.operation("feedback", "read", instance=True)
            outcome = gate.check(operation, Actor(id=5, role="user"), {"id": 1})
        assert outcome.code is ReasonCode.ALLOWED

    def test_gate_without_resolvers(self) -> None:
        with build_gate(AuthzSettings()) as gate:
            assert len(gate.resolvers) == 0
