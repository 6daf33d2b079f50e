"""Tests for the matrix, ownership registry, role hierarchy and validate_config."""
from __future__ import annotations

import pytest

from caseflow_authz.errors import ConfigurationError
from caseflow_authz.permissions.declarations import (
    AuthorizationConfig,
    OwnershipRegistry,
    OwnershipSpec,
    PermissionMatrix,
    Restriction,
    RoleHierarchy,
    validate_config,
)


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


def _config(
    ranks: dict[str, int] | None = None,
    nested: dict[str, dict[str, dict[str, str]]] | None = None,
    ownership: dict[str, OwnershipSpec] | None = None,
    resources: tuple[str, ...] = ("feedback", "categories"),
    actions: tuple[str, ...] = ("create", "read", "update"),
) -> AuthorizationConfig:
    return AuthorizationConfig(
        roles=RoleHierarchy(ranks or {"user": 1, "staff": 2}),
        matrix=PermissionMatrix.from_nested(
            nested
            if nested is not None
            else {
                "user": {"feedback": {"create": "all", "read": "own"}},
                "staff": {"feedback": {"update": "assigned"}},
            }
        ),
        ownership=OwnershipRegistry(
            ownership
            if ownership is not None
            else {"feedback": OwnershipSpec(owner_path="createdBy", assignee_path="assignedTo")}
        ),
        resources=frozenset(resources),
        actions=frozenset(actions),
    )


# ---------------------------------------------------------------------------
# Restriction
# ---------------------------------------------------------------------------


class TestRestriction:
    def test_values(self) -> None:
        assert [r.value for r in Restriction] == ["all", "own", "assigned", "none"]

    @pytest.mark.parametrize(
        "restriction, expected",
        [
            (Restriction.ALL, False),
            (Restriction.OWN, True),
            (Restriction.ASSIGNED, True),
            (Restriction.NONE, False),
        ],
    )
    def test_needs_target(self, restriction: Restriction, expected: bool) -> None:
        assert restriction.needs_target is expected


# ---------------------------------------------------------------------------
# PermissionMatrix
# ---------------------------------------------------------------------------


class TestPermissionMatrix:
    def test_lookup_declared_entry(self) -> None:
        matrix = PermissionMatrix.from_nested({"user": {"feedback": {"read": "own"}}})
        assert matrix.lookup("user", "feedback", "read") is Restriction.OWN

    def test_undeclared_action_is_none(self) -> None:
        matrix = PermissionMatrix.from_nested({"user": {"feedback": {"read": "own"}}})
        assert matrix.lookup("user", "feedback", "delete") is Restriction.NONE

    def test_undeclared_role_and_resource_are_none(self) -> None:
        matrix = PermissionMatrix.from_nested({"user": {"feedback": {"read": "own"}}})
        assert matrix.lookup("ghost", "feedback", "read") is Restriction.NONE
        assert matrix.lookup("user", "ghosts", "read") is Restriction.NONE

    def test_none_role_is_none(self) -> None:
        matrix = PermissionMatrix.from_nested({"user": {"feedback": {"read": "all"}}})
        assert matrix.lookup(None, "feedback", "read") is Restriction.NONE

    def test_unknown_restriction_raises(self) -> None:
        with pytest.raises(ConfigurationError, match="everything"):
            PermissionMatrix.from_nested({"user": {"feedback": {"read": "everything"}}})

    def test_len_counts_flattened_entries(self) -> None:
        matrix = PermissionMatrix.from_nested(
            {"user": {"feedback": {"read": "own", "create": "all"}}, "staff": {"users": {"read": "all"}}}
        )
        assert len(matrix) == 3

    def test_entries_are_sorted(self) -> None:
        matrix = PermissionMatrix.from_nested(
            {"user": {"feedback": {"read": "own", "create": "all"}}}
        )
        keys = [key for key, _ in matrix.entries()]
        assert keys == [("user", "feedback", "create"), ("user", "feedback", "read")]

    def test_for_role_view(self) -> None:
        matrix = PermissionMatrix.from_nested(
            {"user": {"feedback": {"read": "own"}}, "staff": {"feedback": {"read": "all"}}}
        )
        assert matrix.for_role("user") == {"feedback": {"read": Restriction.OWN}}

    def test_summary(self) -> None:
        matrix = PermissionMatrix.from_nested(
            {"user": {"feedback": {"read": "own", "create": "all"}}}
        )
        summary = matrix.summary()
        assert summary["entry_count"] == 2
        assert summary["roles_covered"] == ["user"]
        assert summary["entries_per_restriction"] == {"own": 1, "all": 1}

    def test_entries_cannot_be_mutated(self) -> None:
        matrix = PermissionMatrix({("user", "feedback", "read"): Restriction.ALL})
        with pytest.raises(TypeError):
            matrix._entries[("user", "feedback", "delete")] = Restriction.ALL  # type: ignore[index]


# ---------------------------------------------------------------------------
# OwnershipRegistry
# ---------------------------------------------------------------------------


class TestOwnershipRegistry:
    def test_path_for_own_and_assigned(self) -> None:
        registry = OwnershipRegistry(
            {"feedback": OwnershipSpec(owner_path="createdBy", assignee_path="assignedTo")}
        )
        assert registry.path_for("feedback", Restriction.OWN) == "createdBy"
        assert registry.path_for("feedback", Restriction.ASSIGNED) == "assignedTo"

    def test_path_for_all_is_none(self) -> None:
        registry = OwnershipRegistry({"feedback": OwnershipSpec(owner_path="createdBy")})
        assert registry.path_for("feedback", Restriction.ALL) is None

    def test_missing_resource_has_empty_spec(self) -> None:
        registry = OwnershipRegistry()
        assert registry.get("categories") == OwnershipSpec()
        assert registry.path_for("categories", Restriction.OWN) is None

    def test_contains_and_len(self) -> None:
        registry = OwnershipRegistry({"users": OwnershipSpec(owner_path="id")})
        assert "users" in registry
        assert "feedback" not in registry
        assert len(registry) == 1


# ---------------------------------------------------------------------------
# RoleHierarchy
# ---------------------------------------------------------------------------


class TestRoleHierarchy:
    def test_rank_lookup(self) -> None:
        roles = RoleHierarchy({"user": 1, "staff": 2})
        assert roles.rank("staff") == 2

    def test_unknown_role_ranks_zero(self) -> None:
        roles = RoleHierarchy({"user": 1})
        assert roles.rank("ghost") == 0
        assert roles.rank(None) == 0

    def test_roles_ordered_by_rank(self) -> None:
        roles = RoleHierarchy({"admin": 3, "user": 1, "staff": 2})
        assert roles.roles == ("user", "staff", "admin")

    def test_at_least(self) -> None:
        roles = RoleHierarchy({"user": 1, "staff": 2, "manager": 3})
        assert roles.at_least("manager", "staff") is True
        assert roles.at_least("staff", "staff") is True
        assert roles.at_least("user", "staff") is False

    def test_undeclared_role_never_at_least(self) -> None:
        roles = RoleHierarchy({"user": 1})
        assert roles.at_least("ghost", "user") is False


# ---------------------------------------------------------------------------
# validate_config
# ---------------------------------------------------------------------------


class TestValidateConfig:
    def test_valid_config_passes(self) -> None:
        validate_config(_config())

    def test_undeclared_role_rejected(self) -> None:
        config = _config(nested={"ghost": {"feedback": {"read": "all"}}})
        with pytest.raises(ConfigurationError, match="undeclared role 'ghost'"):
            validate_config(config)

    def test_undeclared_resource_rejected(self) -> None:
        config = _config(nested={"user": {"ghosts": {"read": "all"}}})
        with pytest.raises(ConfigurationError, match="undeclared resource 'ghosts'"):
            validate_config(config)

    def test_undeclared_action_rejected(self) -> None:
        config = _config(nested={"user": {"feedback": {"haunt": "all"}}})
        with pytest.raises(ConfigurationError, match="undeclared action 'haunt'"):
            validate_config(config)

    def test_own_without_owner_path_rejected(self) -> None:
        config = _config(nested={"user": {"categories": {"read": "own"}}})
        with pytest.raises(ConfigurationError, match="owner_path"):
            validate_config(config)

    def test_assigned_without_assignee_path_rejected(self) -> None:
        config = _config(
            nested={"staff": {"feedback": {"update": "assigned"}}},
            ownership={"feedback": OwnershipSpec(owner_path="createdBy")},
        )
        with pytest.raises(ConfigurationError, match="assignee_path"):
            validate_config(config)

    def test_ownership_for_undeclared_resource_rejected(self) -> None:
        config = _config(
            ownership={
                "feedback": OwnershipSpec(owner_path="createdBy", assignee_path="assignedTo"),
                "ghosts": OwnershipSpec(owner_path="id"),
            }
        )
        with pytest.raises(ConfigurationError, match="ghosts"):
            validate_config(config)

    def test_duplicate_ranks_rejected(self) -> None:
        config = _config(ranks={"user": 1, "staff": 1})
        with pytest.raises(ConfigurationError, match="share rank 1"):
            validate_config(config)

    def test_non_contiguous_ranks_rejected(self) -> None:
        config = _config(ranks={"user": 1, "staff": 3})
        with pytest.raises(ConfigurationError, match="contiguous"):
            validate_config(config)

    def test_ranks_must_start_at_one(self) -> None:
        config = _config(ranks={"user": 2, "staff": 3})
        with pytest.raises(ConfigurationError, match="contiguous"):
            validate_config(config)

    def test_all_problems_reported_together(self) -> None:
        config = _config(
            nested={"ghost": {"ghosts": {"haunt": "all"}}},
        )
        with pytest.raises(ConfigurationError) as exc_info:
            validate_config(config)
        message = str(exc_info.value)
        assert "undeclared role" in message
        assert "undeclared resource" in message
        assert "undeclared action" in message

    def test_config_path_in_message(self) -> None:
        config = _config(ranks={"user": 1, "staff": 1})
        with pytest.raises(ConfigurationError, match=r"\[perms.yaml\]"):
            validate_config(config, "perms.yaml")
