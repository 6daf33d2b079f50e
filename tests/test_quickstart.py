"""Test that the 3-line quickstart API works for caseflow-authz."""
from __future__ import annotations


def test_quickstart_import() -> None:
    from caseflow_authz import Authorizer

    authz = Authorizer()
    assert authz is not None


def test_quickstart_owner_allowed() -> None:
    from caseflow_authz import Authorizer

    authz = Authorizer()
    decision = authz.can({"id": 5, "role": "user"}, "feedback", "read", {"createdBy": 5})
    assert decision.allowed is True


def test_quickstart_accepts_actor_instances() -> None:
    from caseflow_authz import Actor, Authorizer

    authz = Authorizer()
    decision = authz.can(Actor(id=5, role="user"), "feedback", "read", {"createdBy": 7})
    assert decision.allowed is False


def test_quickstart_filter() -> None:
    from caseflow_authz import Authorizer, FieldEquals

    authz = Authorizer()
    assert authz.filter({"id": 5, "role": "user"}, "feedback") == FieldEquals("createdBy", 5)


def test_quickstart_without_actor() -> None:
    from caseflow_authz import Authorizer

    authz = Authorizer()
    assert authz.can(None, "feedback", "create").allowed is False


def test_quickstart_engine_accessible() -> None:
    from caseflow_authz import Authorizer
    from caseflow_authz.engine.authorizer import AuthorizationEngine

    authz = Authorizer()
    assert isinstance(authz.engine, AuthorizationEngine)


def test_quickstart_repr() -> None:
    from caseflow_authz import Authorizer

    assert "Authorizer" in repr(Authorizer())
