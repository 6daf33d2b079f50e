"""YAML-based loader for permission declarations.

PermissionLoader reads a YAML (or already-parsed) permission document,
checks its shape with Pydantic, builds an :class:`AuthorizationConfig`, and
runs :func:`validate_config` so that every inconsistency is reported at
startup rather than on the first request that hits it.

Schema
------
::

    version: "1.0"
    roles:
      user: 1
      staff: 2
      manager: 3
    resources: [feedback, users, categories]
    actions: [create, read, update, delete, assign]
    ownership:
      feedback:
        owner_path: createdBy
        assignee_path: assignedTo
      users:
        owner_path: id
      categories: {}
    permissions:
      user:
        feedback:
          create: all
          read: own
      staff:
        feedback:
          read: all
          update: assigned

Example
-------
::

    loader = PermissionLoader()
    config = loader.load("/etc/caseflow/permissions.yaml")
    engine = AuthorizationEngine(config)
"""
from __future__ import annotations

import logging
from pathlib import Path

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

from caseflow_authz.errors import ConfigurationError
from caseflow_authz.permissions.declarations import (
    AuthorizationConfig,
    OwnershipRegistry,
    OwnershipSpec,
    PermissionMatrix,
    Restriction,
    RoleHierarchy,
    validate_config,
)

logger = logging.getLogger(__name__)

_SUPPORTED_VERSIONS: frozenset[str] = frozenset(["1.0", "1"])


# ---------------------------------------------------------------------------
# Document schema
# ---------------------------------------------------------------------------


class OwnershipModel(BaseModel):
    """Ownership paths for one resource."""

    model_config = {"extra": "forbid"}

    owner_path: str | None = Field(default=None)
    assignee_path: str | None = Field(default=None)

    @field_validator("owner_path", "assignee_path")
    @classmethod
    def validate_path(cls, value: str | None) -> str | None:
        if value is None:
            return value
        if not value or any(not segment for segment in value.split(".")):
            raise ValueError(f"invalid field path {value!r}")
        return value


class PermissionDocument(BaseModel):
    """Top-level permission declaration document."""

    model_config = {"extra": "allow"}

    version: str = Field(default="1.0")
    roles: dict[str, int]
    resources: list[str]
    actions: list[str]
    ownership: dict[str, OwnershipModel | None] = Field(default_factory=dict)
    permissions: dict[str, dict[str, dict[str, Restriction]]] = Field(default_factory=dict)

    @field_validator("version", mode="before")
    @classmethod
    def coerce_version(cls, value: object) -> str:
        return str(value)

    @field_validator("resources", "actions")
    @classmethod
    def reject_duplicates(cls, values: list[str]) -> list[str]:
        duplicates = sorted({v for v in values if values.count(v) > 1})
        if duplicates:
            raise ValueError(f"duplicate identifiers: {duplicates}")
        return values


# ---------------------------------------------------------------------------
# Loader
# ---------------------------------------------------------------------------


class PermissionLoader:
    """Loads :class:`AuthorizationConfig` declarations from YAML files or dicts.

    Parameters
    ----------
    strict:
        When ``True``, unknown top-level keys in the document are treated
        as an error.  Default ``False`` (unknown keys are ignored).
    validate:
        When ``True`` (default), :func:`validate_config` runs after the
        document is parsed.  Disabling it leaves only the structural
        checks in place; ownership misconfiguration is then caught at
        request time by the engine, which denies.
    """

    _KNOWN_TOP_KEYS: frozenset[str] = frozenset(
        [
            "version",
            "roles",
            "resources",
            "actions",
            "ownership",
            "permissions",
            "metadata",
            "description",
        ]
    )

    def __init__(self, strict: bool = False, validate: bool = True) -> None:
        self._strict = strict
        self._validate = validate

    def load(self, config_path: str | Path) -> AuthorizationConfig:
        """Load declarations from a YAML file on disk.

        Raises
        ------
        FileNotFoundError
            If the file does not exist.
        ConfigurationError
            If the file cannot be parsed or is invalid.
        """
        config_path = Path(config_path)
        if not config_path.exists():
            raise FileNotFoundError(f"Permission config not found: {config_path}")

        try:
            with config_path.open("r", encoding="utf-8") as fh:
                raw: dict[str, object] = yaml.safe_load(fh) or {}
        except yaml.YAMLError as exc:
            raise ConfigurationError(
                f"Failed to parse YAML: {exc}", str(config_path)
            ) from exc

        return self._build_config(raw, config_path=str(config_path))

    def load_from_dict(
        self,
        config: dict[str, object],
        config_path: str | None = None,
    ) -> AuthorizationConfig:
        """Load declarations from an already-parsed dictionary."""
        return self._build_config(config, config_path=config_path)

    def load_from_yaml_string(
        self,
        yaml_string: str,
        config_path: str | None = None,
    ) -> AuthorizationConfig:
        """Load declarations from a YAML string."""
        try:
            raw: dict[str, object] = yaml.safe_load(yaml_string) or {}
        except yaml.YAMLError as exc:
            raise ConfigurationError(
                f"Failed to parse YAML string: {exc}", config_path
            ) from exc
        return self._build_config(raw, config_path=config_path)

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    def _build_config(
        self,
        raw: dict[str, object],
        config_path: str | None = None,
    ) -> AuthorizationConfig:
        """Validate and build an AuthorizationConfig from a raw dict."""
        self._validate_structure(raw, config_path)

        try:
            document = PermissionDocument.model_validate(raw)
        except ValidationError as exc:
            raise ConfigurationError(
                f"Permission document failed schema validation: {exc}",
                config_path,
            ) from exc

        if document.version not in _SUPPORTED_VERSIONS:
            raise ConfigurationError(
                f"Unsupported config version {document.version!r}. "
                f"Supported: {sorted(_SUPPORTED_VERSIONS)}.",
                config_path,
            )

        ownership = OwnershipRegistry(
            {
                resource: OwnershipSpec(
                    owner_path=spec.owner_path if spec else None,
                    assignee_path=spec.assignee_path if spec else None,
                )
                for resource, spec in document.ownership.items()
            }
        )
        config = AuthorizationConfig(
            roles=RoleHierarchy(document.roles),
            matrix=PermissionMatrix.from_nested(document.permissions),
            ownership=ownership,
            resources=frozenset(document.resources),
            actions=frozenset(document.actions),
            version=document.version,
        )

        if self._validate:
            validate_config(config, config_path)
        else:
            logger.warning(
                "Semantic validation skipped for %s", config_path or "<dict>"
            )

        logger.info(
            "Loaded %d permission entries for %d roles from %s",
            len(config.matrix),
            len(config.roles),
            config_path or "<dict>",
        )
        return config

    def _validate_structure(
        self,
        raw: dict[str, object],
        config_path: str | None,
    ) -> None:
        """Validate top-level structure of the document."""
        if not isinstance(raw, dict):
            raise ConfigurationError(
                "Permission config must be a YAML mapping (dict).", config_path
            )

        for key in ("roles", "resources", "actions"):
            if key not in raw:
                raise ConfigurationError(
                    f"Permission config must contain a {key!r} section.", config_path
                )

        if self._strict:
            unknown_keys = set(raw.keys()) - self._KNOWN_TOP_KEYS
            if unknown_keys:
                raise ConfigurationError(
                    f"Unknown top-level keys: {sorted(unknown_keys)}. "
                    f"Known keys: {sorted(self._KNOWN_TOP_KEYS)}.",
                    config_path,
                )
