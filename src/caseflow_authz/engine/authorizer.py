"""Authorization engine and query filter generator.

Both public operations start from the same :meth:`AuthorizationEngine.resolve`
step, which looks the restriction up in the matrix and the ownership path up
in the registry.  ``authorize`` then decides for one target instance while
``generate_filter`` turns the same resolution into a row predicate, so a
listing can never see rows that a single-instance read would deny.

Decision table
--------------
=============  =====================  ==========================================
Restriction    Path declared          Outcome
=============  =====================  ==========================================
NONE           n/a                    deny ``FORBIDDEN_NO_PERMISSION`` / nothing
ALL            n/a                    allow ``ALLOWED`` / all rows
OWN            owner_path             allow iff owner == actor / field equals
OWN            missing                deny ``MISCONFIGURED_OWNERSHIP`` / nothing
ASSIGNED       assignee_path          allow iff assignee == actor / field equals
ASSIGNED       missing                deny ``MISCONFIGURED_OWNERSHIP`` / nothing
=============  =====================  ==========================================

Example
-------
::

    engine = AuthorizationEngine(load_default_config())
    actor = Actor(id=5, role="user")
    engine.authorize(actor, "feedback", "read", {"createdBy": 5}).allowed  # True
    engine.generate_filter(actor, "feedback", "read")  # FieldEquals("createdBy", 5)
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Mapping

from caseflow_authz.engine.paths import ids_equal, safe_get
from caseflow_authz.engine.query_filter import (
    MATCH_ALL,
    MATCH_NOTHING,
    FieldEquals,
    QueryFilter,
)
from caseflow_authz.permissions.declarations import AuthorizationConfig, Restriction

logger = logging.getLogger(__name__)


class ReasonCode(str, Enum):
    """Why a decision came out the way it did."""

    ALLOWED = "ALLOWED"
    FORBIDDEN_NO_PERMISSION = "FORBIDDEN_NO_PERMISSION"
    FORBIDDEN_NOT_OWNER = "FORBIDDEN_NOT_OWNER"
    FORBIDDEN_NOT_ASSIGNED = "FORBIDDEN_NOT_ASSIGNED"
    MISCONFIGURED_OWNERSHIP = "MISCONFIGURED_OWNERSHIP"
    TARGET_REQUIRED = "TARGET_REQUIRED"
    # Produced by the request gate rather than the engine's matrix logic.
    UNAUTHENTICATED = "UNAUTHENTICATED"
    INSUFFICIENT_ROLE = "INSUFFICIENT_ROLE"
    RESOURCE_NOT_FOUND = "RESOURCE_NOT_FOUND"
    INTERNAL_ERROR = "INTERNAL_ERROR"


@dataclass(frozen=True)
class Actor:
    """The authenticated principal a request is evaluated for.

    Attributes
    ----------
    id:
        Identifier as supplied by the authentication layer.  Numeric ids
        may arrive as ``int`` or ``str``; both compare equal.
    role:
        Role name declared in the role hierarchy.
    is_active:
        Inactive actors are rejected by the request gate as unauthenticated.
    """

    id: object
    role: str
    is_active: bool = True

    @classmethod
    def from_mapping(cls, data: Mapping[str, object]) -> Actor:
        """Build an Actor from a plain mapping (e.g. a decoded session).

        ``is_active`` (or ``isActive``) defaults to True when absent.  A
        present value counts as active only if it is the boolean ``True``;
        undecoded strings such as ``"false"`` or ``"true"`` are inactive.
        """
        active = data.get("is_active", data.get("isActive", True))
        return cls(
            id=data.get("id"),
            role=str(data.get("role", "")),
            is_active=active is True,
        )


@dataclass(frozen=True)
class Decision:
    """Immutable result of :meth:`AuthorizationEngine.authorize`."""

    allowed: bool
    restriction: Restriction
    code: ReasonCode
    reason: str = ""

    def __bool__(self) -> bool:
        """Return True if the action is allowed."""
        return self.allowed

    def to_dict(self) -> dict[str, object]:
        return {
            "allowed": self.allowed,
            "restriction": self.restriction.value,
            "code": self.code.value,
            "reason": self.reason,
        }


@dataclass(frozen=True)
class Resolution:
    """Restriction and ownership path for one (role, resource, action)."""

    restriction: Restriction
    path: str | None = None

    @property
    def misconfigured(self) -> bool:
        return self.restriction.needs_target and self.path is None

    @property
    def grants_nothing(self) -> bool:
        return self.restriction is Restriction.NONE or self.misconfigured


class AuthorizationEngine:
    """Pure decision function over an immutable :class:`AuthorizationConfig`.

    The engine holds no mutable state.  It may be shared between threads
    and called concurrently without locking.

    Parameters
    ----------
    config:
        Declarations to evaluate against, normally already validated.
    """

    def __init__(self, config: AuthorizationConfig) -> None:
        self._config = config

    @property
    def config(self) -> AuthorizationConfig:
        return self._config

    # ------------------------------------------------------------------
    # Shared resolution
    # ------------------------------------------------------------------

    def resolve(self, role: str | None, resource: str, action: str) -> Resolution:
        """Resolve the restriction and its ownership path.

        Undeclared roles, resources and actions resolve to ``NONE``.
        """
        restriction = self._config.matrix.lookup(role, resource, action)
        path = self._config.ownership.path_for(resource, restriction)
        resolution = Resolution(restriction=restriction, path=path)
        if resolution.misconfigured:
            logger.error(
                "Misconfigured ownership: %s/%s/%s declares %r but resource "
                "%r has no matching path; denying",
                role,
                resource,
                action,
                restriction.value,
                resource,
            )
        return resolution

    # ------------------------------------------------------------------
    # Per-instance decision
    # ------------------------------------------------------------------

    def authorize(
        self,
        actor: Actor | None,
        resource: str,
        action: str,
        target: object = None,
    ) -> Decision:
        """Decide whether ``actor`` may perform ``action`` on ``resource``.

        Parameters
        ----------
        actor:
            The requesting actor.  ``None`` is denied as unauthenticated.
        resource:
            Resource name, e.g. ``"feedback"``.
        action:
            Action name, e.g. ``"update"``.
        target:
            The instance being acted on.  Only consulted for OWN and
            ASSIGNED restrictions, where it is required.

        Returns
        -------
        Decision
        """
        if actor is None:
            return Decision(
                allowed=False,
                restriction=Restriction.NONE,
                code=ReasonCode.UNAUTHENTICATED,
                reason="No actor supplied",
            )

        resolution = self.resolve(actor.role, resource, action)
        decision = self._decide(actor, resource, action, resolution, target)
        logger.debug(
            "Authorization %s: role=%s resource=%s action=%s code=%s",
            "ALLOW" if decision.allowed else "DENY",
            actor.role,
            resource,
            action,
            decision.code.value,
        )
        return decision

    def _decide(
        self,
        actor: Actor,
        resource: str,
        action: str,
        resolution: Resolution,
        target: object,
    ) -> Decision:
        restriction = resolution.restriction

        if restriction is Restriction.NONE:
            return Decision(
                allowed=False,
                restriction=restriction,
                code=ReasonCode.FORBIDDEN_NO_PERMISSION,
                reason=f"Role {actor.role!r} may not {action} {resource}",
            )

        if restriction is Restriction.ALL:
            return Decision(
                allowed=True,
                restriction=restriction,
                code=ReasonCode.ALLOWED,
                reason=f"Role {actor.role!r} may {action} any {resource}",
            )

        if resolution.path is None:
            return Decision(
                allowed=False,
                restriction=restriction,
                code=ReasonCode.MISCONFIGURED_OWNERSHIP,
                reason=f"No {restriction.value} path declared for {resource}",
            )

        if target is None:
            return Decision(
                allowed=False,
                restriction=restriction,
                code=ReasonCode.TARGET_REQUIRED,
                reason=f"A {resource} instance is required to check {restriction.value} access",
            )

        if ids_equal(safe_get(target, resolution.path), actor.id):
            return Decision(
                allowed=True,
                restriction=restriction,
                code=ReasonCode.ALLOWED,
                reason=f"{resolution.path} matches actor",
            )

        denial = (
            ReasonCode.FORBIDDEN_NOT_OWNER
            if restriction is Restriction.OWN
            else ReasonCode.FORBIDDEN_NOT_ASSIGNED
        )
        return Decision(
            allowed=False,
            restriction=restriction,
            code=denial,
            reason=f"{resolution.path} does not match actor",
        )

    # ------------------------------------------------------------------
    # Listing
    # ------------------------------------------------------------------

    def generate_filter(
        self,
        actor: Actor | None,
        resource: str,
        action: str,
    ) -> QueryFilter:
        """Return the row predicate a listing of ``resource`` must apply."""
        if actor is None:
            return MATCH_NOTHING

        resolution = self.resolve(actor.role, resource, action)
        if resolution.grants_nothing:
            return MATCH_NOTHING
        if resolution.restriction is Restriction.ALL:
            return MATCH_ALL
        if resolution.path is None:
            return MATCH_NOTHING
        return FieldEquals(resolution.path, actor.id)

    def filter_resources(
        self,
        actor: Actor | None,
        records: Iterable[object],
        resource: str,
        action: str = "read",
    ) -> list[object]:
        """Apply the generated filter to records already held in memory."""
        query_filter = self.generate_filter(actor, resource, action)
        return [record for record in records if query_filter.matches(record)]

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------

    def role_permissions(self, role: str) -> dict[str, dict[str, str]]:
        """Return the declared ``{resource: {action: restriction}}`` for a role."""
        return {
            resource: {action: restriction.value for action, restriction in actions.items()}
            for resource, actions in self._config.matrix.for_role(role).items()
        }

