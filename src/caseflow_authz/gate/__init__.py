"""Request gate and resource resolver registry."""
from __future__ import annotations

from caseflow_authz.gate.request_gate import (
    STATUS_CODES,
    GateOutcome,
    ProtectedOperation,
    RequestGate,
)
from caseflow_authz.gate.resolvers import Resolver, ResolverRegistry

__all__ = [
    "STATUS_CODES",
    "GateOutcome",
    "ProtectedOperation",
    "RequestGate",
    "Resolver",
    "ResolverRegistry",
]
