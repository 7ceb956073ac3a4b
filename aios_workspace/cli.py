"""
CLI commands for aios-workspace.

Provides the `aios-workspace` command-line interface for tracking projects,
validating and repairing the workspace link tree, and watching for drift.
"""

import asyncio
import functools
import json
import sys
from pathlib import Path
from typing import Any, Optional, Tuple

import click
from rich.console import Console
from rich.table import Table

from config import ConfigurationLoader, configure_logging
from core.errors import WorkspaceError
from core.models.workspace import ActionKind, LinkStatus

from . import __version__
from .app import WorkspaceApp

console = Console()

STATUS_STYLES = {
    LinkStatus.OK: "green",
    LinkStatus.MISSING: "yellow",
    LinkStatus.BROKEN: "yellow",
    LinkStatus.CONFLICT: "red",
}

KIND_STYLES = {
    ActionKind.CREATE: "green",
    ActionKind.REPAIR: "yellow",
    ActionKind.SKIP: "dim",
}


def _echo_json(data: Any) -> None:
    click.echo(json.dumps(data, indent=2))


def handle_errors(func):
    """Report workspace and filesystem errors as a one-line message and exit 1"""
    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except (WorkspaceError, OSError) as e:
            console.print(f"[red]❌ {e}[/red]")
            sys.exit(1)
    return wrapper


@click.group()
@click.version_option(version=__version__, prog_name="aios-workspace")
@click.option(
    '--workspace-dir', '-w',
    type=click.Path(file_okay=False, path_type=Path),
    help='Workspace root (default: $AIOS_WORKSPACE_DIR or ./.aios)'
)
@click.option(
    '--log-level',
    type=click.Choice(['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'], case_sensitive=False),
    help='Logging level (default: $AIOS_LOG_LEVEL or INFO)'
)
@click.pass_context
def main(ctx: click.Context, workspace_dir: Optional[Path], log_level: Optional[str]):
    """
    AIOS workspace CLI.

    Track project directories, keep their workspace links healthy, and watch
    configuration for drift.
    """
    settings = ConfigurationLoader().load(workspace_dir, log_level=log_level)
    configure_logging(settings)
    ctx.obj = WorkspaceApp(settings)


# Projects

@main.group()
def project():
    """Manage tracked projects."""


@project.command('list')
@click.option('--json', 'as_json', is_flag=True, help='Output JSON')
@click.pass_obj
@handle_errors
def project_list(app: WorkspaceApp, as_json: bool):
    """List tracked projects."""
    projects = app.list_projects()
    if as_json:
        _echo_json({"projects": [p.to_dict() for p in projects]})
        return

    if not projects:
        console.print("[yellow]No tracked projects[/yellow]")
        return

    table = Table(title="Tracked Projects")
    table.add_column("Path", style="cyan")
    table.add_column("Added", style="dim")
    for p in projects:
        table.add_row(p.path, p.added_at)
    console.print(table)


@project.command('add')
@click.argument('path')
@click.option('--json', 'as_json', is_flag=True, help='Output JSON')
@click.pass_obj
@handle_errors
def project_add(app: WorkspaceApp, path: str, as_json: bool):
    """Track a project directory."""
    tracked = app.track(path)
    if as_json:
        _echo_json(tracked.to_dict())
        return
    console.print(f"[green]✅ Project tracked: {tracked.path}[/green]")


@project.command('remove')
@click.argument('selector')
@click.pass_obj
@handle_errors
def project_remove(app: WorkspaceApp, selector: str):
    """Stop tracking a project by id or path."""
    removed = app.untrack(selector)
    console.print(f"[green]✅ Project removed: {removed.path}[/green]")


@project.command('inspect')
@click.argument('selector')
@click.option('--json', 'as_json', is_flag=True, help='Output JSON')
@click.pass_obj
@handle_errors
def project_inspect(app: WorkspaceApp, selector: str, as_json: bool):
    """Show one tracked project."""
    found = app.inspect(selector)
    if as_json:
        _echo_json(found.to_dict())
        return
    click.echo(f"id: {found.id}\npath: {found.path}\nadded_at: {found.added_at}")


# Workspace links

@main.group()
def workspace():
    """Validate and repair workspace links."""


@workspace.command('validate')
@click.option('--json', 'as_json', is_flag=True, help='Output JSON')
@click.pass_obj
@handle_errors
def workspace_validate(app: WorkspaceApp, as_json: bool):
    """Report the state of every project link."""
    result = app.validate()
    if as_json:
        _echo_json(result.model_dump(mode="json"))
        return

    table = Table(title="Workspace Links")
    table.add_column("Project", style="cyan")
    table.add_column("Status")
    table.add_column("Current Target", style="dim")
    for link in result.links:
        style = STATUS_STYLES[link.status]
        table.add_row(link.project_path, f"[{style}]{link.status.value}[/{style}]", link.current_target or "")
    console.print(table)

    state = "[green]healthy[/green]" if result.healthy else "[yellow]unhealthy[/yellow]"
    console.print(f"workspace links: {state}")


@workspace.command('plan')
@click.option('--json', 'as_json', is_flag=True, help='Output JSON')
@click.pass_obj
@handle_errors
def workspace_plan(app: WorkspaceApp, as_json: bool):
    """Show the actions a repair would take."""
    result = app.plan()
    if as_json:
        _echo_json(result.model_dump(mode="json"))
        return

    if not result.actions:
        console.print("[yellow]No tracked projects[/yellow]")
        return
    for action in result.actions:
        style = KIND_STYLES[action.kind]
        console.print(f"[{style}]{action.kind.value}[/{style}] {action.target_path}: {action.reason}")


@workspace.command('repair')
@click.option('--json', 'as_json', is_flag=True, help='Output JSON')
@click.pass_obj
@handle_errors
def workspace_repair(app: WorkspaceApp, as_json: bool):
    """Create missing links and repoint broken ones."""
    result = app.repair()
    if as_json:
        _echo_json(result.to_dict())
    else:
        for action in result.applied:
            console.print(f"[green]✅ {action.kind.value}[/green] {action.target_path}")
        for action in result.skipped:
            style = "dim" if action.is_healthy else "red"
            console.print(f"[{style}]skipped[/{style}] {action.target_path}: {action.reason}")
        console.print(f"applied: {len(result.applied)}, skipped: {len(result.skipped)}")

    if result.failed:
        sys.exit(1)


# Status and watching

@main.command()
@click.option('--json', 'as_json', is_flag=True, help='Output JSON')
@click.pass_obj
@handle_errors
def status(app: WorkspaceApp, as_json: bool):
    """Summarize tracked projects, link health and sync state."""
    summary = app.summary()
    if as_json:
        _echo_json(summary)
        return

    table = Table(title="Workspace Status")
    table.add_column("Item", style="cyan", no_wrap=True)
    table.add_column("Value")
    for key, value in summary.items():
        table.add_row(key, str(value))
    console.print(table)


@main.command()
@click.argument('paths', nargs=-1)
@click.option('--interval', type=float, help='Seconds between polls (default: configured interval)')
@click.option('--duration', type=float, help='Stop after this many seconds (default: run until interrupted)')
@click.pass_obj
@handle_errors
def watch(app: WorkspaceApp, paths: Tuple[str, ...], interval: Optional[float], duration: Optional[float]):
    """Watch PATHS (default: the links directory) and repair links on change."""
    try:
        asyncio.run(_run_watch(app, list(paths) or None, interval, duration))
    except KeyboardInterrupt:
        console.print("[blue]Stopped watching[/blue]")


async def _run_watch(
    app: WorkspaceApp,
    paths: Optional[list],
    interval: Optional[float],
    duration: Optional[float]
) -> None:
    stream = await app.watch_workspace(paths, interval_s=interval)
    console.print(f"[blue]👀 Watching (state: {app.engine.state().value})[/blue]")

    async def consume() -> None:
        async for event in stream:
            console.print(f"{event.timestamp.isoformat()} changed {event.path} -> {app.engine.state().value}")

    try:
        if duration is None:
            await consume()
        else:
            try:
                await asyncio.wait_for(consume(), timeout=duration)
            except asyncio.TimeoutError:
                pass
    finally:
        await stream.aclose()


if __name__ == "__main__":
    main()
