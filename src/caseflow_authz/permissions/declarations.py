"""Read-only permission declarations: matrix, ownership registry, role hierarchy.

The three declarations are built once at process start (usually by
:class:`~caseflow_authz.permissions.permission_loader.PermissionLoader`),
validated by :func:`validate_config`, and then shared by reference for the
life of the process.  None of the classes below expose a mutator; their
internal tables are wrapped in :class:`types.MappingProxyType`.

The permission matrix is stored flattened, keyed by a
``(role, resource, action)`` tuple, so that validation can enumerate every
declared key and lookups are a single dictionary access.  Any key that was
not declared resolves to :attr:`Restriction.NONE`.

Example
-------
::

    matrix = PermissionMatrix.from_nested({
        "user": {"feedback": {"create": "all", "read": "own"}},
    })
    matrix.lookup("user", "feedback", "read")    # Restriction.OWN
    matrix.lookup("user", "feedback", "delete")  # Restriction.NONE
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Iterator, Mapping

from caseflow_authz.errors import ConfigurationError

logger = logging.getLogger(__name__)

MatrixKey = tuple[str, str, str]


# ---------------------------------------------------------------------------
# Restriction
# ---------------------------------------------------------------------------


class Restriction(str, Enum):
    """Scope granted for a single (role, resource, action) entry."""

    ALL = "all"
    OWN = "own"
    ASSIGNED = "assigned"
    NONE = "none"

    @property
    def needs_target(self) -> bool:
        """Return True when a target instance is needed to decide."""
        return self in (Restriction.OWN, Restriction.ASSIGNED)


# ---------------------------------------------------------------------------
# Ownership
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class OwnershipSpec:
    """How ownership and assignment are read from a target instance.

    Attributes
    ----------
    owner_path:
        Dot-separated path to the owning actor's id (e.g. ``"createdBy.id"``).
    assignee_path:
        Dot-separated path to the assigned actor's id (e.g. ``"assignedTo"``).
    """

    owner_path: str | None = None
    assignee_path: str | None = None

    def path_for(self, restriction: Restriction) -> str | None:
        """Return the path consulted for ``restriction``, if any."""
        if restriction is Restriction.OWN:
            return self.owner_path
        if restriction is Restriction.ASSIGNED:
            return self.assignee_path
        return None


_NO_OWNERSHIP = OwnershipSpec()


class OwnershipRegistry:
    """Maps resource names to their :class:`OwnershipSpec`.

    Resources without an entry (system-wide lookups such as categories)
    resolve to an empty spec with neither path declared.
    """

    def __init__(self, specs: Mapping[str, OwnershipSpec] | None = None) -> None:
        self._specs: Mapping[str, OwnershipSpec] = MappingProxyType(dict(specs or {}))

    def get(self, resource: str) -> OwnershipSpec:
        return self._specs.get(resource, _NO_OWNERSHIP)

    def path_for(self, resource: str, restriction: Restriction) -> str | None:
        return self.get(resource).path_for(restriction)

    def resources(self) -> tuple[str, ...]:
        return tuple(sorted(self._specs))

    def __contains__(self, resource: object) -> bool:
        return resource in self._specs

    def __len__(self) -> int:
        return len(self._specs)


# ---------------------------------------------------------------------------
# Role hierarchy
# ---------------------------------------------------------------------------


class RoleHierarchy:
    """Ordinal rank for each declared role.

    Ranks are consulted only by the role gate.  They never imply that a
    higher role inherits matrix entries from a lower one.

    Parameters
    ----------
    ranks:
        Mapping of role name to integer rank.
    """

    def __init__(self, ranks: Mapping[str, int]) -> None:
        self._ranks: Mapping[str, int] = MappingProxyType(dict(ranks))

    def rank(self, role: str | None) -> int:
        """Return the rank of ``role``, or ``0`` for an undeclared role."""
        if role is None:
            return 0
        return self._ranks.get(role, 0)

    def at_least(self, role: str | None, min_role: str) -> bool:
        """Return True when ``role`` ranks at or above ``min_role``.

        An undeclared ``role`` ranks 0 and therefore never satisfies a
        declared ``min_role``.
        """
        if role not in self._ranks:
            return False
        return self.rank(role) >= self.rank(min_role)

    @property
    def ranks(self) -> Mapping[str, int]:
        return self._ranks

    @property
    def roles(self) -> tuple[str, ...]:
        """Declared role names, lowest rank first."""
        return tuple(sorted(self._ranks, key=lambda name: self._ranks[name]))

    def __contains__(self, role: object) -> bool:
        return role in self._ranks

    def __len__(self) -> int:
        return len(self._ranks)


# ---------------------------------------------------------------------------
# Permission matrix
# ---------------------------------------------------------------------------


class PermissionMatrix:
    """Total function Role x Resource x Action -> Restriction.

    Parameters
    ----------
    entries:
        Flattened mapping of ``(role, resource, action)`` to
        :class:`Restriction`.  Keys absent from the mapping resolve to
        :attr:`Restriction.NONE`.
    """

    def __init__(self, entries: Mapping[MatrixKey, Restriction] | None = None) -> None:
        self._entries: Mapping[MatrixKey, Restriction] = MappingProxyType(
            {key: Restriction(value) for key, value in (entries or {}).items()}
        )

    @classmethod
    def from_nested(
        cls,
        nested: Mapping[str, Mapping[str, Mapping[str, Restriction | str]]],
    ) -> PermissionMatrix:
        """Build a matrix from ``{role: {resource: {action: restriction}}}``.

        Raises
        ------
        ConfigurationError
            If a restriction value is not one of ``all``, ``own``,
            ``assigned`` or ``none``.
        """
        entries: dict[MatrixKey, Restriction] = {}
        for role, resources in nested.items():
            for resource, actions in (resources or {}).items():
                for action, value in (actions or {}).items():
                    try:
                        entries[(role, resource, action)] = Restriction(value)
                    except ValueError as exc:
                        raise ConfigurationError(
                            f"Unknown restriction {value!r} for "
                            f"{role}/{resource}/{action}. "
                            f"Valid: {[r.value for r in Restriction]}."
                        ) from exc
        return cls(entries)

    def lookup(self, role: str | None, resource: str, action: str) -> Restriction:
        """Return the declared restriction, or ``NONE`` when undeclared."""
        if role is None:
            return Restriction.NONE
        return self._entries.get((role, resource, action), Restriction.NONE)

    def entries(self) -> Iterator[tuple[MatrixKey, Restriction]]:
        """Yield every declared ``(key, restriction)`` pair in sorted order."""
        for key in sorted(self._entries):
            yield key, self._entries[key]

    def for_role(self, role: str) -> dict[str, dict[str, Restriction]]:
        """Return the nested ``{resource: {action: restriction}}`` view of a role."""
        view: dict[str, dict[str, Restriction]] = {}
        for (entry_role, resource, action), restriction in self.entries():
            if entry_role == role:
                view.setdefault(resource, {})[action] = restriction
        return view

    def __len__(self) -> int:
        return len(self._entries)

    def summary(self) -> dict[str, object]:
        """Return a plain dict summarising the matrix contents."""
        per_restriction: dict[str, int] = {}
        roles: set[str] = set()
        for (role, _, _), restriction in self._entries.items():
            roles.add(role)
            per_restriction[restriction.value] = per_restriction.get(restriction.value, 0) + 1
        return {
            "entry_count": len(self._entries),
            "roles_covered": sorted(roles),
            "entries_per_restriction": per_restriction,
        }


# ---------------------------------------------------------------------------
# Bundle + validation
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class AuthorizationConfig:
    """The immutable set of declarations the engine evaluates against."""

    roles: RoleHierarchy
    matrix: PermissionMatrix
    ownership: OwnershipRegistry
    resources: frozenset[str]
    actions: frozenset[str]
    version: str = "1.0"


def validate_config(config: AuthorizationConfig, config_path: str | None = None) -> None:
    """Check a configuration for consistency before it is used.

    All problems are collected and reported together.

    Raises
    ------
    ConfigurationError
        If any matrix entry references an undeclared role, resource or
        action; if an OWN/ASSIGNED entry targets a resource lacking the
        matching ownership path; if the ownership registry names an
        undeclared resource; or if role ranks are duplicated or are not
        the contiguous sequence ``1..n``.
    """
    problems: list[str] = []
    problems.extend(_rank_problems(config.roles))

    for resource in config.ownership.resources():
        if resource not in config.resources:
            problems.append(f"ownership declared for undeclared resource {resource!r}")

    for (role, resource, action), restriction in config.matrix.entries():
        where = f"{role}/{resource}/{action}"
        if role not in config.roles:
            problems.append(f"{where}: undeclared role {role!r}")
        if resource not in config.resources:
            problems.append(f"{where}: undeclared resource {resource!r}")
        if action not in config.actions:
            problems.append(f"{where}: undeclared action {action!r}")
        if restriction.needs_target and config.ownership.path_for(resource, restriction) is None:
            path_name = "owner_path" if restriction is Restriction.OWN else "assignee_path"
            problems.append(
                f"{where}: restriction {restriction.value!r} requires "
                f"{path_name} on resource {resource!r}"
            )

    if problems:
        raise ConfigurationError(
            "Invalid permission declarations:\n  - " + "\n  - ".join(problems),
            config_path,
        )
    logger.debug(
        "Validated %d matrix entries across %d roles",
        len(config.matrix),
        len(config.roles),
    )


def _rank_problems(roles: RoleHierarchy) -> list[str]:
    problems: list[str] = []
    if not len(roles):
        return ["no roles declared"]

    seen: dict[int, str] = {}
    for name, rank in roles.ranks.items():
        if rank in seen:
            problems.append(f"roles {seen[rank]!r} and {name!r} share rank {rank}")
        else:
            seen[rank] = name

    expected = list(range(1, len(roles) + 1))
    if sorted(roles.ranks.values()) != expected and not problems:
        problems.append(
            f"role ranks must be contiguous 1..{len(roles)}; "
            f"got {sorted(roles.ranks.values())}"
        )
    return problems
