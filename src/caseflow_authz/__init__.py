"""caseflow-authz: role, ownership and assignment authorization for case tracking.

Public API
----------
The stable public surface is everything exported from this module.
Anything inside submodules not re-exported here is considered private
and may change without notice.

Example
-------
>>> import caseflow_authz as authz
>>> engine = authz.AuthorizationEngine(authz.load_default_config())
>>> actor = authz.Actor(id=5, role="user")
>>> engine.authorize(actor, "feedback", "read", {"createdBy": 5}).allowed
True
>>> engine.generate_filter(actor, "feedback", "read")
FieldEquals(path='createdBy', value=5)
"""
from __future__ import annotations

__version__: str = "0.1.0"

# ---------------------------------------------------------------------------
# Declarations
# ---------------------------------------------------------------------------
from caseflow_authz.permissions.declarations import (
    AuthorizationConfig,
    OwnershipRegistry,
    OwnershipSpec,
    PermissionMatrix,
    Restriction,
    RoleHierarchy,
    validate_config,
)
from caseflow_authz.permissions.defaults import load_default_config
from caseflow_authz.permissions.permission_loader import PermissionLoader

# ---------------------------------------------------------------------------
# Engine
# ---------------------------------------------------------------------------
from caseflow_authz.engine.authorizer import (
    Actor,
    AuthorizationEngine,
    Decision,
    ReasonCode,
)
from caseflow_authz.engine.query_filter import (
    FieldEquals,
    MatchAll,
    MatchNothing,
    QueryFilter,
)
from caseflow_authz.engine.role_gate import RoleGate

# ---------------------------------------------------------------------------
# Gate
# ---------------------------------------------------------------------------
from caseflow_authz.gate.request_gate import GateOutcome, ProtectedOperation, RequestGate
from caseflow_authz.gate.resolvers import ResolverRegistry

# ---------------------------------------------------------------------------
# Settings
# ---------------------------------------------------------------------------
from caseflow_authz.config.settings import AuthzSettings, SettingsLoader, build_gate

# ---------------------------------------------------------------------------
# Quickstart
# ---------------------------------------------------------------------------
from caseflow_authz.convenience import Authorizer

# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------
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

__all__ = [
    "__version__",
    # Declarations
    "AuthorizationConfig",
    "OwnershipRegistry",
    "OwnershipSpec",
    "PermissionLoader",
    "PermissionMatrix",
    "Restriction",
    "RoleHierarchy",
    "load_default_config",
    "validate_config",
    # Engine
    "Actor",
    "AuthorizationEngine",
    "Decision",
    "FieldEquals",
    "MatchAll",
    "MatchNothing",
    "QueryFilter",
    "ReasonCode",
    "RoleGate",
    # Gate
    "GateOutcome",
    "ProtectedOperation",
    "RequestGate",
    "ResolverRegistry",
    # Quickstart
    "Authorizer",
    # Settings
    "AuthzSettings",
    "SettingsLoader",
    "build_gate",
    # Errors
    "AuthorizationError",
    "ConfigurationError",
    "InternalEngineError",
    "MisconfiguredOwnershipError",
    "PermissionDeniedError",
    "ResourceNotFoundError",
    "ResourceResolutionError",
    "UnauthenticatedError",
]
