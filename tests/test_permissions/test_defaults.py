"""Tests for the bundled permission declarations."""
from __future__ import annotations

import pathlib

import pytest

from caseflow_authz.permissions.declarations import Restriction
from caseflow_authz.permissions.defaults import (
    DEFAULT_PERMISSIONS_YAML,
    load_default_config,
    write_default_config,
)
from caseflow_authz.permissions.permission_loader import PermissionLoader


@pytest.fixture(scope="module")
def config():  # type: ignore[no-untyped-def]
    return load_default_config()


class TestDefaultConfig:
    def test_loads_and_validates(self, config) -> None:  # type: ignore[no-untyped-def]
        assert len(config.matrix) > 0

    def test_role_order(self, config) -> None:  # type: ignore[no-untyped-def]
        assert config.roles.roles == ("user", "staff", "manager", "admin", "super_admin")

    def test_loads_in_strict_mode(self) -> None:
        config = load_default_config(PermissionLoader(strict=True))
        assert config.version == "1.0"

    @pytest.mark.parametrize(
        "role, resource, action, expected",
        [
            ("user", "feedback", "read", Restriction.OWN),
            ("user", "feedback", "delete", Restriction.NONE),
            ("staff", "feedback", "read", Restriction.ALL),
            ("staff", "feedback", "update", Restriction.ASSIGNED),
            ("staff", "cases", "read", Restriction.ASSIGNED),
            ("manager", "feedback", "assign", Restriction.ALL),
            ("admin", "users", "manage_users", Restriction.ALL),
            ("admin", "comments", "update", Restriction.OWN),
            ("admin", "system", "read", Restriction.NONE),
            ("super_admin", "system", "manage_settings", Restriction.ALL),
        ],
    )
    def test_representative_entries(  # type: ignore[no-untyped-def]
        self, config, role: str, resource: str, action: str, expected: Restriction
    ) -> None:
        assert config.matrix.lookup(role, resource, action) is expected

    def test_no_role_inherits_from_lower_ranks(self, config) -> None:  # type: ignore[no-untyped-def]
        # staff reads only assigned cases although user reads own ones
        assert config.matrix.lookup("staff", "cases", "read") is Restriction.ASSIGNED

    def test_nested_owner_path_for_comments(self, config) -> None:  # type: ignore[no-untyped-def]
        assert config.ownership.path_for("comments", Restriction.OWN) == "createdBy.id"

    def test_resources_without_ownership_paths(self, config) -> None:  # type: ignore[no-untyped-def]
        assert config.ownership.path_for("categories", Restriction.OWN) is None
        assert config.ownership.path_for("case_statuses", Restriction.ASSIGNED) is None


class TestWriteDefaultConfig:
    def test_writes_file(self, tmp_path: pathlib.Path) -> None:
        output = write_default_config(tmp_path / "nested" / "permissions.yaml")
        assert output.exists()
        assert output.read_text(encoding="utf-8") == DEFAULT_PERMISSIONS_YAML

    def test_written_file_loads(self, tmp_path: pathlib.Path) -> None:
        output = write_default_config(tmp_path / "permissions.yaml")
        config = PermissionLoader().load(output)
        assert config.matrix.lookup("user", "users", "update") is Restriction.OWN
