"""Tests for ResolverRegistry."""
from __future__ import annotations

import pytest

from caseflow_authz.errors import ConfigurationError, ResourceNotFoundError
from caseflow_authz.gate.resolvers import ResolverRegistry

_ROWS = {1: {"id": 1, "createdBy": 5}}


def _load_feedback(request: dict[str, int]) -> object:
    return _ROWS.get(request["id"])


class TestResolverRegistry:
    def test_resolve_returns_target(self) -> None:
        registry = ResolverRegistry({"feedback": _load_feedback})
        assert registry.resolve("feedback", {"id": 1}) == {"id": 1, "createdBy": 5}

    def test_none_result_is_not_found(self) -> None:
        registry = ResolverRegistry({"feedback": _load_feedback})
        with pytest.raises(ResourceNotFoundError):
            registry.resolve("feedback", {"id": 2})

    def test_unregistered_resource_is_not_found(self) -> None:
        with pytest.raises(ResourceNotFoundError, match="No resolver"):
            ResolverRegistry().resolve("feedback", {"id": 1})

    def test_resolver_exception_propagates(self) -> None:
        registry = ResolverRegistry({"feedback": _load_feedback})
        with pytest.raises(KeyError):
            registry.resolve("feedback", {})

    def test_non_callable_rejected(self) -> None:
        with pytest.raises(ConfigurationError, match="not callable"):
            ResolverRegistry({"feedback": "load_feedback"})  # type: ignore[dict-item]

    def test_enumeration(self) -> None:
        registry = ResolverRegistry({"users": _load_feedback, "feedback": _load_feedback})
        assert registry.resources() == ("feedback", "users")
        assert "users" in registry
        assert len(registry) == 2
        assert registry.get("cases") is None

    def test_registry_is_read_only(self) -> None:
        registry = ResolverRegistry({"feedback": _load_feedback})
        with pytest.raises(TypeError):
            registry._resolvers["users"] = _load_feedback  # type: ignore[index]
