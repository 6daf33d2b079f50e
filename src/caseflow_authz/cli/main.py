"""CLI entry point for caseflow-authz.

Invoked as::

    caseflow-authz [OPTIONS] COMMAND [ARGS]...

or during development::

    python -m caseflow_authz.cli.main

Commands
--------
- validate   Load and validate permission declarations
- check      Decide one role/resource/action request
- filter     Show the query filter a listing would receive
- matrix     Show every declared entry for a role
- init       Write the bundled declarations to a file for editing
- version    Show version information
"""
from __future__ import annotations

import json
import logging
import sys
from pathlib import Path

import click
from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from caseflow_authz.config.settings import AuthzSettings, SettingsLoader, load_declarations
from caseflow_authz.engine.authorizer import Actor, AuthorizationEngine
from caseflow_authz.errors import ConfigurationError
from caseflow_authz.permissions.declarations import AuthorizationConfig

console = Console()
err_console = Console(stderr=True)

_DEFAULT_SETTINGS = Path("authz.yaml")

_RESTRICTION_STYLES: dict[str, str] = {
    "all": "green",
    "own": "cyan",
    "assigned": "yellow",
    "none": "red",
}


def _settings_option(func):  # type: ignore[no-untyped-def]
    return click.option(
        "--settings",
        "-s",
        "settings_path",
        default=str(_DEFAULT_SETTINGS),
        show_default=True,
        type=click.Path(),
        help="Path to authz.yaml runtime settings.",
    )(func)


def _config_option(func):  # type: ignore[no-untyped-def]
    return click.option(
        "--config",
        "-c",
        "config_path",
        default=None,
        type=click.Path(exists=True),
        help="Permission declarations YAML (overrides settings; bundled defaults if absent).",
    )(func)


def _load_settings(settings_path: str, config_path: str | None) -> AuthzSettings:
    loader = SettingsLoader()
    path = Path(settings_path)
    settings = loader.load(path) if path.exists() else loader.defaults()
    if config_path is not None:
        settings = settings.model_copy(update={"permissions_file": Path(config_path)})
    logging.basicConfig(level=settings.log_level, format="%(levelname)s %(name)s: %(message)s")
    return settings


def _load_config(settings_path: str, config_path: str | None) -> AuthorizationConfig:
    settings = _load_settings(settings_path, config_path)
    try:
        return load_declarations(settings)
    except (ConfigurationError, FileNotFoundError) as exc:
        err_console.print(f"[red]Invalid configuration:[/red] {exc}")
        sys.exit(1)


def _parse_actor_id(raw: str | None) -> object:
    if raw is None:
        return None
    return int(raw) if raw.lstrip("-").isdigit() else raw


# ---------------------------------------------------------------------------
# Root command group
# ---------------------------------------------------------------------------


@click.group()
@click.version_option(package_name="caseflow-authz")
def cli() -> None:
    """caseflow-authz CLI: inspect and exercise permission declarations."""


# ---------------------------------------------------------------------------
# version
# ---------------------------------------------------------------------------


@cli.command(name="version")
def version_command() -> None:
    """Show detailed version information."""
    from caseflow_authz import __version__

    console.print(
        Panel(
            f"[bold]caseflow-authz[/bold]  v[cyan]{__version__}[/cyan]\n"
            "Role, ownership and assignment authorization for case tracking.",
            title="Version",
            border_style="blue",
        )
    )


# ---------------------------------------------------------------------------
# init
# ---------------------------------------------------------------------------


@cli.command(name="init")
@click.option(
    "--output",
    "-o",
    type=click.Path(),
    default="permissions.yaml",
    show_default=True,
    help="Where to write the bundled declarations.",
)
def init_command(output: str) -> None:
    """Write the bundled declarations to a file for customisation."""
    from caseflow_authz.permissions.defaults import write_default_config

    written = write_default_config(Path(output))
    console.print(f"[green]Wrote[/green] permission declarations: [bold]{written}[/bold]")


# ---------------------------------------------------------------------------
# validate
# ---------------------------------------------------------------------------


@cli.command(name="validate")
@_config_option
@_settings_option
def validate_command(config_path: str | None, settings_path: str) -> None:
    """Load and validate permission declarations."""
    config = _load_config(settings_path, config_path)
    summary = config.matrix.summary()

    table = Table(title="Permission Declarations", box=box.SIMPLE)
    table.add_column("Metric", style="cyan")
    table.add_column("Value", style="bold")
    table.add_row("Version", config.version)
    table.add_row("Roles", ", ".join(config.roles.roles))
    table.add_row("Resources", str(len(config.resources)))
    table.add_row("Actions", str(len(config.actions)))
    table.add_row("Matrix entries", str(summary["entry_count"]))
    table.add_row("Ownership specs", str(len(config.ownership)))
    console.print(table)
    console.print("[green]Configuration is valid.[/green]")


# ---------------------------------------------------------------------------
# check
# ---------------------------------------------------------------------------


@cli.command(name="check")
@click.option("--role", "-r", required=True, help="Actor role.")
@click.option("--resource", "-R", required=True, help="Resource name.")
@click.option("--action", "-a", required=True, help="Action name.")
@click.option("--actor-id", "-i", default=None, help="Actor id (numeric strings become ints).")
@click.option("--target", "-t", "target_json", default=None, help="Target instance as a JSON object.")
@_config_option
@_settings_option
def check_command(
    role: str,
    resource: str,
    action: str,
    actor_id: str | None,
    target_json: str | None,
    config_path: str | None,
    settings_path: str,
) -> None:
    """Decide one request and print the decision."""
    target: object = None
    if target_json is not None:
        try:
            target = json.loads(target_json)
        except json.JSONDecodeError as exc:
            err_console.print(f"[red]Invalid JSON:[/red] {exc}")
            sys.exit(1)

    engine = AuthorizationEngine(_load_config(settings_path, config_path))
    decision = engine.authorize(
        Actor(id=_parse_actor_id(actor_id), role=role), resource, action, target
    )

    status_str = "[green]ALLOWED[/green]" if decision.allowed else "[red]DENIED[/red]"
    console.print(Panel(status_str, title="Authorization Decision", border_style="blue"))
    console.print(f"  Restriction: [cyan]{decision.restriction.value}[/cyan]")
    console.print(f"  Code: [bold]{decision.code.value}[/bold]")
    if decision.reason:
        console.print(f"  Reason: {decision.reason}")

    sys.exit(0 if decision.allowed else 1)


# ---------------------------------------------------------------------------
# filter
# ---------------------------------------------------------------------------


@cli.command(name="filter")
@click.option("--role", "-r", required=True, help="Actor role.")
@click.option("--resource", "-R", required=True, help="Resource name.")
@click.option("--action", "-a", default="read", show_default=True, help="Action name.")
@click.option("--actor-id", "-i", required=True, help="Actor id (numeric strings become ints).")
@_config_option
@_settings_option
def filter_command(
    role: str,
    resource: str,
    action: str,
    actor_id: str,
    config_path: str | None,
    settings_path: str,
) -> None:
    """Print the query filter a listing would receive, as JSON."""
    engine = AuthorizationEngine(_load_config(settings_path, config_path))
    query_filter = engine.generate_filter(
        Actor(id=_parse_actor_id(actor_id), role=role), resource, action
    )
    click.echo(json.dumps(query_filter.to_dict(), default=str))


# ---------------------------------------------------------------------------
# matrix
# ---------------------------------------------------------------------------


@cli.command(name="matrix")
@click.option("--role", "-r", required=True, help="Role to display.")
@_config_option
@_settings_option
def matrix_command(role: str, config_path: str | None, settings_path: str) -> None:
    """Show every declared matrix entry for a role."""
    config = _load_config(settings_path, config_path)
    if role not in config.roles:
        err_console.print(
            f"[red]Unknown role:[/red] {role!r}. Declared: {', '.join(config.roles.roles)}"
        )
        sys.exit(1)

    entries = AuthorizationEngine(config).role_permissions(role)
    table = Table(title=f"Permissions for {role} (rank {config.roles.rank(role)})", box=box.SIMPLE)
    table.add_column("Resource", style="cyan")
    table.add_column("Action", style="magenta")
    table.add_column("Restriction")
    for resource, actions in entries.items():
        for action, restriction in actions.items():
            style = _RESTRICTION_STYLES.get(restriction, "white")
            table.add_row(resource, action, f"[{style}]{restriction}[/{style}]")
    console.print(table)


if __name__ == "__main__":
    cli()
