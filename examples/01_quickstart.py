#!/usr/bin/env python3
"""Example: Quickstart: caseflow-authz

Minimal working example: load the bundled declarations, decide a few
requests, and build the listing filters a data layer would apply.

Usage:
    python examples/01_quickstart.py

Requirements:
    pip install caseflow-authz
"""
from __future__ import annotations

import caseflow_authz as authz


def main() -> None:
    print(f"caseflow-authz version: {authz.__version__}")

    # Step 1: Load declarations and build the engine
    config = authz.load_default_config()
    engine = authz.AuthorizationEngine(config)
    print(f"Engine ready: {len(config.matrix)} matrix entries, roles {config.roles.roles}")

    # Step 2: Decide single-instance requests
    alice = authz.Actor(id=5, role="user")
    bob = authz.Actor(id=8, role="staff")
    requests = [
        (alice, "feedback", "create", None),
        (alice, "feedback", "read", {"id": 1, "createdBy": 5}),
        (alice, "feedback", "read", {"id": 2, "createdBy": 7}),
        (bob, "feedback", "update", {"id": 2, "assignedTo": 8}),
        (bob, "feedback", "delete", {"id": 2, "assignedTo": 8}),
    ]

    print("\nDecisions:")
    for actor, resource, action, target in requests:
        decision = engine.authorize(actor, resource, action, target)
        icon = "ALLOW" if decision.allowed else "DENY"
        print(f"  [{icon}] {actor.role} {action} {resource} -> {decision.code.value}")

    # Step 3: Listing filters
    print("\nListing filters:")
    for actor in (alice, bob, authz.Actor(id=1, role="manager")):
        query_filter = engine.generate_filter(actor, "cases", "read")
        print(f"  {actor.role}: {query_filter.to_dict()}")


if __name__ == "__main__":
    main()
