"""Coarse role gate based on ordinal rank.

The role gate answers "is this actor at least a manager?" and nothing
else.  It never consults the permission matrix, and the matrix never
consults it; routes may apply either check or both.

Example
-------
>>> gate = RoleGate(config.roles)
>>> gate.require_role(Actor(id=1, role="staff"), "manager")
False
"""
from __future__ import annotations

import logging

from caseflow_authz.engine.authorizer import Actor
from caseflow_authz.engine.paths import ids_equal
from caseflow_authz.errors import ConfigurationError
from caseflow_authz.permissions.declarations import RoleHierarchy

logger = logging.getLogger(__name__)


class RoleGate:
    """Rank comparisons over a :class:`RoleHierarchy`.

    Parameters
    ----------
    roles:
        The declared role hierarchy.
    """

    def __init__(self, roles: RoleHierarchy) -> None:
        self._roles = roles

    @property
    def roles(self) -> RoleHierarchy:
        return self._roles

    def requirement(self, min_role: str) -> str:
        """Validate ``min_role`` at declaration time and return it.

        Raises
        ------
        ConfigurationError
            If ``min_role`` is not a declared role.
        """
        if min_role not in self._roles:
            raise ConfigurationError(
                f"Unknown minimum role {min_role!r}. Declared: {list(self._roles.roles)}."
            )
        return min_role

    def require_role(self, actor: Actor | None, min_role: str) -> bool:
        """Return True iff ``rank(actor.role) >= rank(min_role)``.

        A missing actor, an undeclared actor role, or an undeclared
        ``min_role`` all deny.
        """
        if actor is None or min_role not in self._roles:
            return False
        allowed = self._roles.at_least(actor.role, min_role)
        logger.debug(
            "Role gate %s: role=%s min_role=%s",
            "ALLOW" if allowed else "DENY",
            actor.role,
            min_role,
        )
        return allowed

    def can_manage_user(self, manager: Actor | None, target: Actor | None) -> bool:
        """Return True when ``manager`` strictly outranks ``target``.

        Nobody may manage themselves, whatever their rank.
        """
        if manager is None or target is None:
            return False
        if manager.role not in self._roles:
            return False
        if ids_equal(manager.id, target.id):
            return False
        return self._roles.rank(manager.role) > self._roles.rank(target.role)

    def assignable_roles(self, actor: Actor | None) -> list[str]:
        """Roles ``actor`` may grant to others: those ranked strictly below."""
        if actor is None:
            return []
        level = self._roles.rank(actor.role)
        return [role for role in self._roles.roles if self._roles.rank(role) < level]
