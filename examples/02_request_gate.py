#!/usr/bin/env python3
"""Example: Request gate: caseflow-authz

Wire resolvers into a request gate and map each check to a status code,
the way a route handler would.

Usage:
    python examples/02_request_gate.py

Requirements:
    pip install caseflow-authz
"""
from __future__ import annotations

import caseflow_authz as authz

FEEDBACK = {
    1: {"id": 1, "title": "Broken link", "createdBy": 5, "assignedTo": 8},
    2: {"id": 2, "title": "Slow search", "createdBy": 7, "assignedTo": 9},
}


def load_feedback(request: dict[str, int]) -> object:
    return FEEDBACK.get(request["id"])


def main() -> None:
    settings = authz.AuthzSettings(resolver_timeout_seconds=1.0)
    resolvers = authz.ResolverRegistry({"feedback": load_feedback})

    with authz.build_gate(settings, resolvers) as gate:
        update_feedback = gate.operation("feedback", "update", instance=True)
        list_feedback = gate.operation("feedback", "read", listing=True)
        admin_settings = gate.operation("system", "manage_settings", min_role="admin")

        alice = authz.Actor(id=5, role="user")
        checks = [
            ("update own", update_feedback, alice, {"id": 1}),
            ("update other", update_feedback, alice, {"id": 2}),
            ("update missing", update_feedback, alice, {"id": 99}),
            ("anonymous", update_feedback, None, {"id": 1}),
            ("list", list_feedback, alice, None),
            ("settings", admin_settings, alice, None),
        ]

        for label, operation, actor, request in checks:
            outcome = gate.check(operation, actor, request)
            print(f"  {label:<15} {outcome.status_code} {outcome.code.value}")
            if outcome.query_filter is not None:
                rows = [row for row in FEEDBACK.values() if outcome.query_filter.matches(row)]
                print(f"  {'':<15} rows: {[row['id'] for row in rows]}")


if __name__ == "__main__":
    main()
