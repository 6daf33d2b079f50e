"""Request gate: wires resolvers, the role gate and the engine together.

The gate is what route handlers call.  It owns the mapping from reason
codes to transport status codes and the rules for what happens when a
target cannot be loaded.  It never turns a failure into an allow.

Order of checks in :meth:`RequestGate.check`:

1. no actor, or an inactive one        -> ``UNAUTHENTICATED`` (401)
2. ``min_role`` not met                -> ``INSUFFICIENT_ROLE`` (403)
3. instance operation: run resolver; failure, ``None``, timeout or
   cancellation with ``require_resource`` -> ``RESOURCE_NOT_FOUND`` (404)
4. engine decision; denials keep the engine's code
5. listing operation: attach the query filter for the data layer

Anything unexpected raised along the way becomes ``INTERNAL_ERROR`` (500).

Example
-------
::

    gate = RequestGate(engine, ResolverRegistry({"feedback": load_feedback}))
    update_feedback = gate.operation("feedback", "update", instance=True)
    list_feedback = gate.operation("feedback", "read", listing=True)

    outcome = gate.check(list_feedback, actor, request)
    if outcome.allowed:
        rows = repo.list(outcome.query_filter)
"""
from __future__ import annotations

import asyncio
import logging
from concurrent.futures import CancelledError, ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeoutError
from dataclasses import dataclass
from types import TracebackType

from caseflow_authz.engine.authorizer import Actor, AuthorizationEngine, ReasonCode
from caseflow_authz.engine.query_filter import QueryFilter
from caseflow_authz.engine.role_gate import RoleGate
from caseflow_authz.errors import (
    AuthorizationError,
    ConfigurationError,
    InternalEngineError,
    MisconfiguredOwnershipError,
    PermissionDeniedError,
    ResourceNotFoundError,
    ResourceResolutionError,
    UnauthenticatedError,
)
from caseflow_authz.gate.resolvers import ResolverRegistry
from caseflow_authz.permissions.declarations import Restriction

logger = logging.getLogger(__name__)

STATUS_CODES: dict[ReasonCode, int] = {
    ReasonCode.ALLOWED: 200,
    ReasonCode.UNAUTHENTICATED: 401,
    ReasonCode.FORBIDDEN_NO_PERMISSION: 403,
    ReasonCode.FORBIDDEN_NOT_OWNER: 403,
    ReasonCode.FORBIDDEN_NOT_ASSIGNED: 403,
    ReasonCode.TARGET_REQUIRED: 403,
    ReasonCode.INSUFFICIENT_ROLE: 403,
    ReasonCode.RESOURCE_NOT_FOUND: 404,
    ReasonCode.MISCONFIGURED_OWNERSHIP: 500,
    ReasonCode.INTERNAL_ERROR: 500,
}

_ERROR_TYPES: dict[ReasonCode, type[AuthorizationError]] = {
    ReasonCode.UNAUTHENTICATED: UnauthenticatedError,
    ReasonCode.RESOURCE_NOT_FOUND: ResourceResolutionError,
    ReasonCode.MISCONFIGURED_OWNERSHIP: MisconfiguredOwnershipError,
    ReasonCode.INTERNAL_ERROR: InternalEngineError,
}


# ---------------------------------------------------------------------------
# Value types
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ProtectedOperation:
    """Declaration of one protected route or handler.

    Attributes
    ----------
    resource:
        Resource name the operation acts on.
    action:
        Action name the operation performs.
    instance:
        When ``True`` the registered resolver loads the target instance.
    listing:
        When ``True`` the outcome carries a query filter for the data layer.
    require_resource:
        When ``True`` (default) a failed resolution denies with
        ``RESOURCE_NOT_FOUND``.  When ``False`` the engine decides with no
        target, which still denies OWN/ASSIGNED restrictions.
    min_role:
        Optional coarse role requirement checked before the matrix.
    """

    resource: str
    action: str
    instance: bool = False
    listing: bool = False
    require_resource: bool = True
    min_role: str | None = None


@dataclass(frozen=True)
class GateOutcome:
    """Caller-visible result of a gate check."""

    allowed: bool
    code: ReasonCode
    status_code: int
    message: str = ""
    restriction: Restriction = Restriction.NONE
    target: object = None
    query_filter: QueryFilter | None = None

    def __bool__(self) -> bool:
        return self.allowed

    def to_dict(self) -> dict[str, object]:
        return {
            "allowed": self.allowed,
            "code": self.code.value,
            "status_code": self.status_code,
            "message": self.message,
            "restriction": self.restriction.value,
            "query_filter": self.query_filter.to_dict() if self.query_filter else None,
        }


def _outcome(code: ReasonCode, message: str, **fields: object) -> GateOutcome:
    return GateOutcome(
        allowed=code is ReasonCode.ALLOWED,
        code=code,
        status_code=STATUS_CODES[code],
        message=message,
        **fields,  # type: ignore[arg-type]
    )


# ---------------------------------------------------------------------------
# RequestGate
# ---------------------------------------------------------------------------


class RequestGate:
    """Orchestrates one authorization check per protected request.

    Parameters
    ----------
    engine:
        The shared :class:`AuthorizationEngine`.
    resolvers:
        Registry of target resolvers, keyed by resource.
    role_gate:
        Optional :class:`RoleGate`; built from the engine's role hierarchy
        when omitted.
    resolver_timeout:
        Seconds a resolver may run before the target is treated as not
        found.  ``None`` (default) calls resolvers inline with no limit.

    Raises
    ------
    ConfigurationError
        If a resolver is registered for an undeclared resource.
    """

    def __init__(
        self,
        engine: AuthorizationEngine,
        resolvers: ResolverRegistry | None = None,
        role_gate: RoleGate | None = None,
        resolver_timeout: float | None = None,
    ) -> None:
        self._engine = engine
        self._resolvers = resolvers or ResolverRegistry()
        self._role_gate = role_gate or RoleGate(engine.config.roles)
        if resolver_timeout is not None and resolver_timeout <= 0:
            raise ConfigurationError(f"resolver_timeout must be > 0; got {resolver_timeout!r}")
        self._resolver_timeout = resolver_timeout
        self._executor: ThreadPoolExecutor | None = None

        undeclared = [r for r in self._resolvers.resources() if r not in engine.config.resources]
        if undeclared:
            raise ConfigurationError(f"Resolvers registered for undeclared resources: {undeclared}")

    # ------------------------------------------------------------------
    # Declaration
    # ------------------------------------------------------------------

    def operation(
        self,
        resource: str,
        action: str,
        *,
        instance: bool = False,
        listing: bool = False,
        require_resource: bool = True,
        min_role: str | None = None,
    ) -> ProtectedOperation:
        """Declare and validate a protected operation at startup.

        Raises
        ------
        ConfigurationError
            If the resource or action is undeclared, if an instance
            operation has no registered resolver, or if ``min_role`` is
            not a declared role.
        """
        config = self._engine.config
        if resource not in config.resources:
            raise ConfigurationError(f"Undeclared resource {resource!r}")
        if action not in config.actions:
            raise ConfigurationError(f"Undeclared action {action!r}")
        if instance and resource not in self._resolvers:
            raise ConfigurationError(
                f"Instance operation {resource}/{action} has no registered resolver"
            )
        if min_role is not None:
            self._role_gate.requirement(min_role)
        return ProtectedOperation(
            resource=resource,
            action=action,
            instance=instance,
            listing=listing,
            require_resource=require_resource,
            min_role=min_role,
        )

    # ------------------------------------------------------------------
    # Checks
    # ------------------------------------------------------------------

    def check(
        self,
        operation: ProtectedOperation,
        actor: Actor | None,
        request: object = None,
    ) -> GateOutcome:
        """Run every check for ``operation`` and return the outcome."""
        try:
            return self._check(operation, actor, request)
        except Exception:
            logger.exception(
                "Authorization check failed unexpectedly for %s/%s; denying",
                operation.resource,
                operation.action,
            )
            return _outcome(ReasonCode.INTERNAL_ERROR, "Authorization check failed")

    def enforce(
        self,
        operation: ProtectedOperation,
        actor: Actor | None,
        request: object = None,
    ) -> GateOutcome:
        """Like :meth:`check` but raise on denial.

        Raises
        ------
        AuthorizationError
            The subclass matching the outcome code.
        """
        outcome = self.check(operation, actor, request)
        if not outcome.allowed:
            raise self._error_for(outcome)
        return outcome

    def require_role(self, actor: Actor | None, min_role: str) -> GateOutcome:
        """Standalone role check, independent of the permission matrix."""
        if actor is None or not actor.is_active:
            return _outcome(ReasonCode.UNAUTHENTICATED, "Authentication required")
        if not self._role_gate.require_role(actor, min_role):
            return _outcome(
                ReasonCode.INSUFFICIENT_ROLE,
                f"Role {min_role!r} or higher required",
            )
        return _outcome(ReasonCode.ALLOWED, f"Role {actor.role!r} meets {min_role!r}")

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def close(self) -> None:
        """Shut down the resolver thread pool, if one was started."""
        if self._executor is not None:
            self._executor.shutdown(wait=False, cancel_futures=True)
            self._executor = None

    def __enter__(self) -> RequestGate:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    @property
    def engine(self) -> AuthorizationEngine:
        return self._engine

    @property
    def resolvers(self) -> ResolverRegistry:
        return self._resolvers

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _check(
        self,
        operation: ProtectedOperation,
        actor: Actor | None,
        request: object,
    ) -> GateOutcome:
        if actor is None or not actor.is_active:
            return _outcome(ReasonCode.UNAUTHENTICATED, "Authentication required")

        if operation.min_role is not None and not self._role_gate.require_role(
            actor, operation.min_role
        ):
            return _outcome(
                ReasonCode.INSUFFICIENT_ROLE,
                f"Role {operation.min_role!r} or higher required",
            )

        target: object = None
        if operation.instance:
            found, target = self._resolve_target(operation, request)
            if not found and operation.require_resource:
                return _outcome(ReasonCode.RESOURCE_NOT_FOUND, "Resource not found")

        decision = self._engine.authorize(actor, operation.resource, operation.action, target)

        collection_access = (
            operation.listing
            and decision.code is ReasonCode.TARGET_REQUIRED
            and target is None
        )
        if not decision.allowed and not collection_access:
            return _outcome(decision.code, decision.reason, restriction=decision.restriction)

        query_filter: QueryFilter | None = None
        if operation.listing:
            query_filter = self._engine.generate_filter(
                actor, operation.resource, operation.action
            )

        return _outcome(
            ReasonCode.ALLOWED,
            decision.reason,
            restriction=decision.restriction,
            target=target,
            query_filter=query_filter,
        )

    def _resolve_target(
        self,
        operation: ProtectedOperation,
        request: object,
    ) -> tuple[bool, object]:
        """Return ``(found, target)``; every failure mode reports not found."""
        try:
            if self._resolver_timeout is None:
                target = self._resolvers.resolve(operation.resource, request)
            else:
                future = self._pool().submit(
                    self._resolvers.resolve, operation.resource, request
                )
                try:
                    target = future.result(timeout=self._resolver_timeout)
                except FutureTimeoutError:
                    future.cancel()
                    logger.warning(
                        "Resolver for %s timed out after %.2fs",
                        operation.resource,
                        self._resolver_timeout,
                    )
                    return False, None
        except (CancelledError, asyncio.CancelledError):
            logger.warning("Resolver for %s was cancelled", operation.resource)
            return False, None
        except ResourceNotFoundError as exc:
            logger.debug("Resolver for %s found nothing: %s", operation.resource, exc)
            return False, None
        except Exception as exc:
            logger.warning(
                "Resolver for %s failed: %s", operation.resource, exc, exc_info=True
            )
            return False, None
        return True, target

    def _pool(self) -> ThreadPoolExecutor:
        if self._executor is None:
            self._executor = ThreadPoolExecutor(thread_name_prefix="caseflow-resolver")
        return self._executor

    @staticmethod
    def _error_for(outcome: GateOutcome) -> AuthorizationError:
        error_type = _ERROR_TYPES.get(outcome.code, PermissionDeniedError)
        return error_type(outcome.code.value, outcome.message, outcome.status_code)
