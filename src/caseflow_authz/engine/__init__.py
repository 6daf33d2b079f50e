"""Authorization engine, query filter generator and role gate."""
from __future__ import annotations

from caseflow_authz.engine.authorizer import (
    Actor,
    AuthorizationEngine,
    Decision,
    ReasonCode,
    Resolution,
)
from caseflow_authz.engine.paths import MISSING, canonical_id, ids_equal, safe_get
from caseflow_authz.engine.query_filter import (
    MATCH_ALL,
    MATCH_NOTHING,
    FieldEquals,
    MatchAll,
    MatchNothing,
    QueryFilter,
)
from caseflow_authz.engine.role_gate import RoleGate

__all__ = [
    "Actor",
    "AuthorizationEngine",
    "Decision",
    "ReasonCode",
    "Resolution",
    "RoleGate",
    # Filters
    "FieldEquals",
    "MATCH_ALL",
    "MATCH_NOTHING",
    "MatchAll",
    "MatchNothing",
    "QueryFilter",
    # Paths
    "MISSING",
    "canonical_id",
    "ids_equal",
    "safe_get",
]
