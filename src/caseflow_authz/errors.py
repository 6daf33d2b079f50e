"""Exception taxonomy for caseflow-authz.

Two families exist:

- :class:`ConfigurationError` is raised while declarations are loaded and
  validated.  It is fatal: a process must not start serving requests with
  an invalid matrix.
- :class:`AuthorizationError` and its subclasses describe request-time
  outcomes.  Each carries the reason ``code`` produced by the engine or the
  request gate and the transport ``status_code`` the gate maps it to.

The engine itself never raises on a denial; these exceptions exist for
callers that prefer :meth:`RequestGate.enforce` over inspecting a
:class:`GateOutcome`.

Example
-------
>>> try:
...     gate.enforce(update_feedback, actor, request)
... except PermissionDeniedError as exc:
...     exc.code
'FORBIDDEN_NOT_OWNER'
"""
from __future__ import annotations


class ConfigurationError(ValueError):
    """Raised when a permission declaration is malformed or inconsistent.

    Attributes
    ----------
    config_path:
        The path to the config file that caused the error, if known.
    """

    def __init__(self, message: str, config_path: str | None = None) -> None:
        self.config_path = config_path
        prefix = f"[{config_path}] " if config_path else ""
        super().__init__(f"{prefix}{message}")


class ResourceNotFoundError(LookupError):
    """Raised by resource resolvers when the target instance does not exist."""


class AuthorizationError(Exception):
    """Base class for request-time authorization failures.

    Attributes
    ----------
    code:
        The reason code (e.g. ``"FORBIDDEN_NOT_OWNER"``).
    status_code:
        Transport-level status the request gate maps ``code`` to.
    """

    status_code: int = 403

    def __init__(self, code: str, message: str, status_code: int | None = None) -> None:
        self.code = code
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        super().__init__(f"{code}: {message}")


class UnauthenticatedError(AuthorizationError):
    """No (active) actor was present on the request."""

    status_code = 401


class PermissionDeniedError(AuthorizationError):
    """The actor is authenticated but not allowed to perform the action."""

    status_code = 403


class ResourceResolutionError(AuthorizationError):
    """The target instance required for the check could not be obtained."""

    status_code = 404


class MisconfiguredOwnershipError(AuthorizationError):
    """An OWN/ASSIGNED restriction was declared without the matching path."""

    status_code = 500


class InternalEngineError(AuthorizationError):
    """An unexpected exception escaped evaluation; treated as a denial."""

    status_code = 500
