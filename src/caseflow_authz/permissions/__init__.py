"""Permission declarations: matrix, ownership registry, role hierarchy.

Example
-------
::

    from caseflow_authz.permissions import PermissionLoader

    config = PermissionLoader().load("permissions.yaml")
    config.matrix.lookup("staff", "feedback", "update")  # Restriction.ASSIGNED
"""
from __future__ import annotations

from caseflow_authz.permissions.declarations import (
    AuthorizationConfig,
    OwnershipRegistry,
    OwnershipSpec,
    PermissionMatrix,
    Restriction,
    RoleHierarchy,
    validate_config,
)
from caseflow_authz.permissions.defaults import (
    DEFAULT_PERMISSIONS_YAML,
    load_default_config,
    write_default_config,
)
from caseflow_authz.permissions.permission_loader import (
    PermissionDocument,
    PermissionLoader,
)

__all__ = [
    # Declarations
    "AuthorizationConfig",
    "OwnershipRegistry",
    "OwnershipSpec",
    "PermissionMatrix",
    "Restriction",
    "RoleHierarchy",
    "validate_config",
    # Loading
    "PermissionDocument",
    "PermissionLoader",
    # Defaults
    "DEFAULT_PERMISSIONS_YAML",
    "load_default_config",
    "write_default_config",
]
