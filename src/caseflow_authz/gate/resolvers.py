"""Static registry of per-resource target resolvers.

A resolver is a plain callable ``resolver(request) -> instance`` supplied by
the surrounding application (typically a repository lookup by the id in the
request path).  It signals "not found" by raising
:class:`~caseflow_authz.errors.ResourceNotFoundError` or by returning
``None``.

All resolvers are registered once at startup.  The registry is read-only
afterwards, and the request gate checks at construction time that every
registered resource is declared.

Example
-------
::

    def load_feedback(request):
        row = feedback_repo.get(request.path_params["id"])
        if row is None:
            raise ResourceNotFoundError("feedback")
        return row

    resolvers = ResolverRegistry({"feedback": load_feedback})
"""
from __future__ import annotations

from types import MappingProxyType
from typing import Callable, Mapping

from caseflow_authz.errors import ConfigurationError, ResourceNotFoundError

Resolver = Callable[[object], object]


class ResolverRegistry:
    """Immutable ``resource name -> resolver`` map.

    Parameters
    ----------
    resolvers:
        Mapping of resource name to resolver callable.

    Raises
    ------
    ConfigurationError
        If any value is not callable.
    """

    def __init__(self, resolvers: Mapping[str, Resolver] | None = None) -> None:
        for resource, resolver in (resolvers or {}).items():
            if not callable(resolver):
                raise ConfigurationError(
                    f"Resolver for resource {resource!r} is not callable: {resolver!r}"
                )
        self._resolvers: Mapping[str, Resolver] = MappingProxyType(dict(resolvers or {}))

    def get(self, resource: str) -> Resolver | None:
        return self._resolvers.get(resource)

    def resolve(self, resource: str, request: object) -> object:
        """Invoke the resolver for ``resource``.

        Raises
        ------
        ResourceNotFoundError
            If no resolver is registered or the resolver returned ``None``.
        """
        resolver = self._resolvers.get(resource)
        if resolver is None:
            raise ResourceNotFoundError(f"No resolver registered for {resource!r}")
        target = resolver(request)
        if target is None:
            raise ResourceNotFoundError(f"{resource} not found")
        return target

    def resources(self) -> tuple[str, ...]:
        return tuple(sorted(self._resolvers))

    def __contains__(self, resource: object) -> bool:
        return resource in self._resolvers

    def __len__(self) -> int:
        return len(self._resolvers)
