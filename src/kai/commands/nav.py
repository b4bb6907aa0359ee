"""Project picking and listing commands.

Provides:
    - pick_project(): the interactive picker run when no subcommand is given
    - list_projects(): non-interactive table of projects under the root
    - cd_command(): the shell command handed to the wrapper function
"""

from __future__ import annotations

from pathlib import Path

import typer
from rich import box
from rich.markup import escape
from rich.table import Table

from kai.core.console import console
from kai.core.recents import RecencyStore
from kai.core.result import Err, Ok, TerminalError
from kai.core.scanner import collect_projects, format_time_ago, scan_directory
from kai.core.selection import ActionKind
from kai.ui.picker import run_picker


def cd_command(path: str) -> str:
    """Single-quoted ``cd`` command safe to ``eval`` in POSIX shells and fish."""
    escaped = path.replace("'", "'\"'\"'")
    return f"cd '{escaped}'"


def _require_projects_dir(projects_dir: Path, config_path: Path) -> None:
    if not projects_dir.exists():
        console.print(f"[red]Projects directory not found: {escape(str(projects_dir))}[/red]")
        console.print(f"Configure the path by editing {escape(str(config_path))}")
        raise typer.Exit(code=1)


def pick_project(ctx: typer.Context) -> None:
    """Interactively pick a project and print the ``cd`` command for it."""
    state = ctx.obj
    projects_dir: Path = state.config.projects_dir
    _require_projects_dir(projects_dir, state.config_meta.path)

    entries = scan_directory(projects_dir)
    if not entries:
        console.print(f"[red]No directories found in: {escape(str(projects_dir))}[/red]")
        console.print("Create some directories first or configure a different path.")
        raise typer.Exit(code=1)

    store = RecencyStore(state.config, state.config_meta.path)
    try:
        action = run_picker(entries, store.entries)
    except TerminalError as exc:
        console.print(f"[red]{escape(exc.message)}[/red]")
        raise typer.Exit(code=1)

    match action.kind:
        case ActionKind.COMMIT if action.entry is not None:
            match store.record_visit(action.entry.path, action.entry.name):
                case Err(err):
                    state.logger.warning("Could not update recent directories: %s", err)
                case Ok(recent):
                    state.logger.debug("Recorded %s at %s", recent.path, recent.accessed_at)
            typer.echo(cd_command(action.entry.path))
        case ActionKind.CREATE:
            console.print("[yellow]Create new directory (not implemented yet)[/yellow]")
        case _:
            state.logger.debug("Picker cancelled")


def list_projects(
    ctx: typer.Context,
    depth: int = typer.Option(3, "--depth", "-d", min=0, help="How many folder levels to descend."),
) -> None:
    """List projects under the projects directory without the interactive picker."""
    state = ctx.obj
    projects_dir: Path = state.config.projects_dir
    _require_projects_dir(projects_dir, state.config_meta.path)

    with console.status(f"Scanning {escape(str(projects_dir))}...", spinner="dots"):
        entries = collect_projects(projects_dir, max_depth=depth)

    if not entries:
        console.print(f"[yellow]No directories found in: {escape(str(projects_dir))}[/yellow]")
        return

    table = Table(title=f"Projects in {escape(str(projects_dir))}", box=box.SIMPLE_HEAVY, expand=True)
    table.add_column("Name", style="cyan", no_wrap=True)
    table.add_column("Marker", style="white", no_wrap=True)
    table.add_column("Modified", style="white", no_wrap=True)
    table.add_column("Path", style="white")

    for entry in entries:
        table.add_row(
            escape(entry.display_name),
            entry.project_marker or "-",
            format_time_ago(entry.last_modified),
            escape(entry.path),
        )

    console.print(table)
