"""Built-in permission declarations for the case/feedback tracker.

The bundled document declares the five standard roles, every protected
resource and action, the ownership paths used for OWN/ASSIGNED checks, and
the full role x resource x action matrix.  Each role is declared
independently: a higher rank grants nothing by itself.

Example
-------
>>> from caseflow_authz.permissions.defaults import load_default_config
>>> config = load_default_config()
>>> config.matrix.lookup("user", "feedback", "read").value
'own'
"""
from __future__ import annotations

from pathlib import Path

from caseflow_authz.permissions.declarations import AuthorizationConfig
from caseflow_authz.permissions.permission_loader import PermissionLoader

DEFAULT_PERMISSIONS_YAML = """\
version: "1.0"
description: Case and feedback tracking permissions

roles:
  user: 1
  staff: 2
  manager: 3
  admin: 4
  super_admin: 5

resources:
  - feedback
  - feedback_history
  - cases
  - case_history
  - case_comments
  - case_statuses
  - users
  - categories
  - comments
  - notifications
  - analytics
  - system

actions:
  - create
  - read
  - update
  - delete
  - assign
  - export
  - import
  - manage_settings
  - view_analytics
  - manage_users

ownership:
  feedback:
    owner_path: createdBy
    assignee_path: assignedTo
  cases:
    owner_path: createdBy
    assignee_path: assignedTo
  # History rows are joined with their parent case for assignee checks.
  case_history:
    owner_path: createdBy
    assignee_path: case.assignedTo
  case_comments:
    owner_path: createdBy
  users:
    owner_path: id
  notifications:
    owner_path: userId
    assignee_path: triggerUserId
  comments:
    owner_path: createdBy.id
  categories: {}
  case_statuses: {}

permissions:
  user:
    feedback: {create: all, read: own, update: own}
    cases: {create: all, read: own, update: own}
    case_history: {read: own}
    case_comments: {create: all, read: all, update: own, delete: own}
    users: {read: own, update: own}
    categories: {read: all}
    notifications: {read: own, create: all}
    comments: {create: all, read: all, update: own, delete: own}

  staff:
    feedback: {create: all, read: all, update: assigned}
    cases: {create: all, read: assigned, update: assigned}
    case_history: {read: assigned}
    case_comments: {create: all, read: all, update: all, delete: own}
    users: {read: all, update: own}
    categories: {read: all}
    notifications: {read: own, update: own, create: all}
    comments: {create: all, read: all, update: all, delete: own}

  manager:
    feedback: {create: all, read: all, update: all, assign: all}
    cases: {create: all, read: all, update: all, assign: all}
    case_history: {read: all}
    case_comments: {create: all, read: all, update: all, delete: own}
    users: {read: all, update: own}
    categories: {read: all, create: all, update: all}
    notifications: {read: own, create: all, update: own, delete: own}
    comments: {create: all, read: all, update: all, delete: own}

  admin:
    feedback: {create: all, read: all, update: all, delete: all, assign: all}
    cases: {create: all, read: all, update: all, delete: all, assign: all}
    case_history: {read: all, delete: all}
    case_comments: {create: all, read: all, update: all, delete: all}
    users: {create: all, read: all, update: all, delete: all, manage_users: all}
    categories: {read: all, create: all, update: all, delete: all}
    notifications: {read: all, create: all, update: all, delete: all}
    comments: {create: all, read: all, update: own, delete: own}

  super_admin:
    feedback:
      {create: all, read: all, update: all, delete: all, assign: all, export: all, import: all}
    cases:
      {create: all, read: all, update: all, delete: all, assign: all, export: all, import: all}
    case_history: {read: all, update: all, delete: all}
    case_comments: {create: all, read: all, update: all, delete: all}
    case_statuses: {read: all, create: all, update: all, delete: all}
    users: {create: all, read: all, update: all, delete: all, manage_users: all}
    categories: {read: all, create: all, update: all, delete: all}
    notifications: {read: all, create: all, update: all, delete: all}
    comments: {create: all, read: all, update: all, delete: all}
    system: {read: all, update: all, manage_settings: all}
"""


def load_default_config(loader: PermissionLoader | None = None) -> AuthorizationConfig:
    """Parse and validate the bundled declarations."""
    effective_loader = loader or PermissionLoader()
    return effective_loader.load_from_yaml_string(
        DEFAULT_PERMISSIONS_YAML, config_path="<defaults>"
    )


def write_default_config(output_path: Path) -> Path:
    """Write the bundled declarations to ``output_path`` for customisation.

    Parent directories are created automatically.
    """
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(DEFAULT_PERMISSIONS_YAML, encoding="utf-8")
    return output_path.resolve()
