"""CLI entry point for admin-actions.

Invoked as::

    admin-actions [OPTIONS] COMMAND [ARGS]...

or during development::

    python -m admin_actions.cli.main

Commands
--------
- catalog   List the resources, actions and menus groups can be granted
- routes    List the action routes registered by a config
- check     Explain whether a user may invoke an action
- version   Show version information
"""
from __future__ import annotations

import logging
import sys
from pathlib import Path

import click
from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from admin_actions.admin import Admin
from admin_actions.config import ConfigLoader, build_admin
from admin_actions.errors import AdminError, UnknownResourceError
from admin_actions.groups.catalog import gen_resource_list
from admin_actions.roles.permission import PermissionMode
from admin_actions.routing import RouteTable

console = Console()
err_console = Console(stderr=True)

_DEFAULT_CONFIG = Path("admin.yaml")

_config_option = click.option(
    "--config",
    "-c",
    "config_path",
    default=str(_DEFAULT_CONFIG),
    show_default=True,
    type=click.Path(exists=True),
    help="Path to admin.yaml.",
)


def _load_admin(config_path: str) -> Admin:
    try:
        config = ConfigLoader().load(Path(config_path))
        admin = build_admin(config)
    except (AdminError, ValueError) as exc:
        err_console.print(f"[red]Invalid config:[/red] {exc}")
        sys.exit(1)
    admin.seal()
    return admin


# ---------------------------------------------------------------------------
# Root command group
# ---------------------------------------------------------------------------


@click.group()
@click.version_option(package_name="admin-actions")
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging.")
def cli(verbose: bool) -> None:
    """Admin actions CLI — inspect resources, routes and permissions."""
    logging.basicConfig(level=logging.DEBUG if verbose else logging.WARNING)


# ---------------------------------------------------------------------------
# version
# ---------------------------------------------------------------------------


@cli.command(name="version")
def version_command() -> None:
    """Show detailed version information."""
    from admin_actions import __version__

    console.print(
        Panel(
            f"[bold]admin-actions[/bold]  v[cyan]{__version__}[/cyan]\n"
            "Action authorization and dispatch for CRUD admin resources.",
            title="Version",
            border_style="blue",
        )
    )


# ---------------------------------------------------------------------------
# catalog
# ---------------------------------------------------------------------------


@cli.command(name="catalog")
@_config_option
def catalog_command(config_path: str) -> None:
    """List everything group permissions can be granted against."""
    admin = _load_admin(config_path)
    entries = gen_resource_list(admin)

    table = Table(title="Group Permission Catalog", box=box.SIMPLE)
    table.add_column("Resource / Menu", style="bold")
    table.add_column("Actions")
    for entry in entries:
        table.add_row(entry[0], ", ".join(entry[1:]) or "[dim]-[/dim]")
    console.print(table)
    console.print(f"  Entries: [cyan]{len(entries)}[/cyan]")


# ---------------------------------------------------------------------------
# routes
# ---------------------------------------------------------------------------


@cli.command(name="routes")
@_config_option
def routes_command(config_path: str) -> None:
    """List action routes registered by the config."""
    admin = _load_admin(config_path)
    router = admin.router
    if not isinstance(router, RouteTable):
        err_console.print("[yellow]Router does not support listing routes.[/yellow]")
        sys.exit(1)

    table = Table(title="Action Routes", box=box.SIMPLE)
    table.add_column("Method", style="cyan")
    table.add_column("Path")
    table.add_column("Action")
    table.add_column("Mode")
    for route in router.routes():
        permissioner = route.config.permissioner
        table.add_row(
            route.method,
            route.path,
            getattr(permissioner, "name", "-"),
            route.config.permission_mode.value,
        )
    console.print(table)


# ---------------------------------------------------------------------------
# check
# ---------------------------------------------------------------------------


@cli.command(name="check")
@_config_option
@click.option("--resource", "-r", "resource_name", required=True, help="Resource name.")
@click.option("--action", "-a", "action_name", required=True, help="Action name.")
@click.option("--user", "-u", "user_id", default=None, help="Actor user id.")
@click.option("--role", "roles", multiple=True, help="Actor role (repeatable).")
@click.option(
    "--mode",
    type=click.Choice([m.value for m in PermissionMode]),
    default=PermissionMode.UPDATE.value,
    show_default=True,
    help="Permission mode to check.",
)
def check_command(
    config_path: str,
    resource_name: str,
    action_name: str,
    user_id: str | None,
    roles: tuple[str, ...],
    mode: str,
) -> None:
    """Explain whether a user may invoke an action."""
    admin = _load_admin(config_path)
    try:
        resource = admin.get_resource(resource_name)
    except UnknownResourceError as exc:
        err_console.print(f"[red]{exc}[/red]")
        sys.exit(1)

    action = resource.get_action(action_name)
    if action is None:
        err_console.print(f"[red]Unknown action {action_name!r} on {resource.name!r}.[/red]")
        sys.exit(1)

    permission_mode = PermissionMode(mode)
    context = admin.new_context(resource, roles=roles, user_id=user_id)
    allowed = action.is_allowed(permission_mode, context)
    status_str = "[green]ALLOWED[/green]" if allowed else "[red]DENIED[/red]"
    console.print(Panel(status_str, title="Action Check Result", border_style="blue"))

    table = Table(title="Permission Tiers", box=box.SIMPLE)
    table.add_column("Tier", style="bold")
    table.add_column("Result")
    table.add_row("visible", str(action.is_visible(context)))
    table.add_row(
        "group",
        str(action.has_group_permission(context)) if admin.is_group_enabled() else "disabled",
    )
    table.add_row(
        "explicit",
        str(action.has_permission(permission_mode, context)) if action.permission else "not set",
    )
    table.add_row(
        "resource",
        str(resource.has_permission(permission_mode, context))
        if action.permission is None and not admin.is_group_enabled()
        else "skipped",
    )
    console.print(table)

    if not allowed:
        sys.exit(2)


if __name__ == "__main__":
    cli()
