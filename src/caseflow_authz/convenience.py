"""Convenience API for caseflow-authz: 3-line quickstart.

Example
-------
::

    from caseflow_authz import Authorizer
    authz = Authorizer()
    print(authz.can({"id": 5, "role": "user"}, "feedback", "read", {"createdBy": 5}).allowed)

"""
from __future__ import annotations

from typing import Mapping

from caseflow_authz.engine.authorizer import Actor, AuthorizationEngine, Decision
from caseflow_authz.engine.query_filter import QueryFilter
from caseflow_authz.permissions.declarations import AuthorizationConfig


class Authorizer:
    """Zero-config authorization over the bundled permission declarations.

    Wraps :class:`AuthorizationEngine` and accepts actors either as
    :class:`Actor` instances or as plain ``{"id": ..., "role": ...}``
    mappings, as they typically come out of a decoded session.

    Parameters
    ----------
    config:
        Optional pre-built declarations.  If None, the bundled defaults are
        loaded and validated.

    Example
    -------
    ::

        authz = Authorizer()
        authz.can({"id": 5, "role": "staff"}, "feedback", "update", {"assignedTo": 5})
    """

    def __init__(self, config: AuthorizationConfig | None = None) -> None:
        if config is None:
            from caseflow_authz.permissions.defaults import load_default_config

            config = load_default_config()
        self._engine = AuthorizationEngine(config)

    def can(
        self,
        actor: Actor | Mapping[str, object] | None,
        resource: str,
        action: str,
        target: object = None,
    ) -> Decision:
        """Decide one request; see :meth:`AuthorizationEngine.authorize`."""
        return self._engine.authorize(_as_actor(actor), resource, action, target)

    def filter(
        self,
        actor: Actor | Mapping[str, object] | None,
        resource: str,
        action: str = "read",
    ) -> QueryFilter:
        """Return the listing filter; see :meth:`AuthorizationEngine.generate_filter`."""
        return self._engine.generate_filter(_as_actor(actor), resource, action)

    @property
    def engine(self) -> AuthorizationEngine:
        """The underlying AuthorizationEngine instance."""
        return self._engine

    def __repr__(self) -> str:
        return f"Authorizer(entries={len(self._engine.config.matrix)})"


def _as_actor(actor: Actor | Mapping[str, object] | None) -> Actor | None:
    if actor is None or isinstance(actor, Actor):
        return actor
    return Actor.from_mapping(actor)
