from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from time import perf_counter

import typer
from rich import box
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from . import __version__
from .commands.nav import pick_project
from .core.config import ConfigLoadResult, KaiConfig, load_config
from .core.console import console, setup_logging
from .core.registry import discover_commands

app = typer.Typer(
    help="kai: fuzzy-pick a project directory and cd into it.",
    add_completion=False,
)
logger = logging.getLogger(__name__)


@dataclass
class AppState:
    config: KaiConfig
    config_meta: ConfigLoadResult
    logger: logging.Logger


def clean_path_argument(value: str) -> Path | None:
    """Strip one pair of surrounding quotes and expand ``~``; empty means unset."""
    stripped = value.strip()
    if len(stripped) >= 2 and stripped[0] == stripped[-1] and stripped[0] in "'\"":
        stripped = stripped[1:-1]
    if not stripped:
        return None
    return Path(stripped).expanduser()


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    path: str | None = typer.Option(
        None, "--path", help="Projects directory to scan instead of the configured one."
    ),
    config: Path | None = typer.Option(
        None, "--config", "-c", help="Path to a kai config file (JSON)."
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging."),
) -> None:
    """Pick a project interactively when no command is given."""
    logger = setup_logging(verbose=verbose)
    loaded_config, meta = load_config(config_path=config)

    override = clean_path_argument(path) if path else None
    if override is not None:
        # One-off override; never written back to the config file.
        loaded_config = loaded_config.model_copy(update={"projects_dir": override})

    ctx.obj = AppState(config=loaded_config, config_meta=meta, logger=logger)

    if meta.error:
        # Display "Safe Mode" Warning
        console.print(
            Panel(
                f"[bold red]Configuration Error - Safe Mode Active[/bold red]\n\n"
                f"Failed to load {escape(str(meta.path))}:\n{escape(meta.error)}\n\n"
                f"[yellow]Using default settings. Fix or delete the file to recover.[/yellow]",
                border_style="red",
            )
        )
    else:
        logger.debug(
            "Loaded configuration from %s (env overrides: %s)",
            meta.path,
            sorted(meta.env_overrides),
        )

    if ctx.invoked_subcommand is None:
        pick_project(ctx)


@app.command("config")
def show_config(ctx: typer.Context) -> None:
    """Show the active configuration and where it came from."""
    state: AppState = ctx.obj
    meta = state.config_meta

    table = Table(title="Config", box=box.SIMPLE, expand=True)
    table.add_column("Key", style="cyan", no_wrap=True)
    table.add_column("Value", style="white")

    for key, value in state.config.model_dump(mode="json", by_alias=True).items():
        if key == "recentDirs":
            value = ", ".join(item["path"] for item in value) or "-"
        table.add_row(key, escape(str(value)))

    console.print(table)

    meta_lines = [
        f"Path: {escape(str(meta.path))}",
        "File loaded: yes" if meta.file_loaded else "File loaded: no (using defaults + env)",
    ]

    if meta.env_overrides:
        meta_lines.append("Env overrides: " + ", ".join(sorted(meta.env_overrides)))

    console.print(Panel("\n".join(meta_lines), title="Config source", box=box.SIMPLE))


@app.command("version")
def show_version() -> None:
    """Print the kai version."""
    console.print(__version__)


def _register_commands() -> None:
    commands_path = Path(__file__).resolve().parent / "commands"
    for spec in discover_commands(commands_path):
        app.command(spec.name)(spec.handler)


def _register_commands_with_timing() -> None:
    start = perf_counter()
    _register_commands()
    elapsed = perf_counter() - start
    logger.debug("Command registry initialized in %.3f seconds", elapsed)


_register_commands_with_timing()


def cli() -> None:
    app()


if __name__ == "__main__":
    cli()
