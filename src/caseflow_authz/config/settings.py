"""Runtime settings with Pydantic v2 validation.

Loads ``authz.yaml`` into a typed :class:`AuthzSettings` object and wires
the declarations, engine and request gate from it.  Unknown keys are
allowed so that the file can be shared with the host application.

Example
-------
>>> loader = SettingsLoader()
>>> settings = loader.load(Path("authz.yaml"))
>>> gate = build_gate(settings, ResolverRegistry({"feedback": load_feedback}))
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Literal

import yaml
from pydantic import BaseModel, Field

from caseflow_authz.engine.authorizer import AuthorizationEngine
from caseflow_authz.gate.request_gate import RequestGate
from caseflow_authz.gate.resolvers import ResolverRegistry
from caseflow_authz.permissions.declarations import AuthorizationConfig
from caseflow_authz.permissions.defaults import load_default_config
from caseflow_authz.permissions.permission_loader import PermissionLoader

logger = logging.getLogger(__name__)


class AuthzSettings(BaseModel):
    """Top-level runtime settings.  Every field has a default."""

    model_config = {"extra": "allow"}

    permissions_file: Path | None = Field(default=None)
    strict: bool = Field(default=False)
    resolver_timeout_seconds: float | None = Field(default=None, gt=0)
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="WARNING"
    )


class SettingsLoader:
    """Loads and validates runtime settings YAML."""

    def load(self, settings_path: Path) -> AuthzSettings:
        """Load and validate a settings file.

        Raises
        ------
        FileNotFoundError:
            When the file does not exist.
        ValueError:
            When the YAML content fails Pydantic validation.
        """
        if not settings_path.exists():
            raise FileNotFoundError(f"Settings file not found: {settings_path}")

        with settings_path.open("r", encoding="utf-8") as fh:
            raw: dict[str, object] = yaml.safe_load(fh) or {}

        return AuthzSettings.model_validate(raw)

    def load_string(self, yaml_content: str) -> AuthzSettings:
        raw: dict[str, object] = yaml.safe_load(yaml_content) or {}
        return AuthzSettings.model_validate(raw)

    def defaults(self) -> AuthzSettings:
        return AuthzSettings()


def load_declarations(settings: AuthzSettings) -> AuthorizationConfig:
    """Load the permission declarations named by ``settings``.

    Falls back to the bundled defaults when no ``permissions_file`` is set.
    """
    loader = PermissionLoader(strict=settings.strict)
    if settings.permissions_file is None:
        return load_default_config(loader)
    return loader.load(settings.permissions_file)


def build_gate(
    settings: AuthzSettings,
    resolvers: ResolverRegistry | None = None,
) -> RequestGate:
    """Build the engine and request gate described by ``settings``."""
    engine = AuthorizationEngine(load_declarations(settings))
    gate = RequestGate(
        engine,
        resolvers=resolvers,
        resolver_timeout=settings.resolver_timeout_seconds,
    )
    logger.info(
        "Request gate ready: %d resolvers, timeout=%s",
        len(gate.resolvers),
        settings.resolver_timeout_seconds,
    )
    return gate
