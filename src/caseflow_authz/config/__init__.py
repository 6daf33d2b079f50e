"""Runtime settings and wiring."""
from __future__ import annotations

from caseflow_authz.config.settings import (
    AuthzSettings,
    SettingsLoader,
    build_gate,
    load_declarations,
)

__all__ = ["AuthzSettings", "SettingsLoader", "build_gate", "load_declarations"]
