"""Shell integration setup.

``kai init`` prints a shell function named ``kai`` that runs the real binary,
keeps its UI on the terminal and ``eval``s the ``cd`` command it prints.
Add ``eval "$(kai init)"`` (or ``kai init | source`` in fish) to the shell
startup file.
"""

from __future__ import annotations

import os
import shlex
from pathlib import Path
from textwrap import dedent

import typer

FISH_TEMPLATE = dedent(
    """\
    function kai
      set -l output (command kai {args}$argv 2>/dev/tty | string collect)
      set -l exit_code $status

      if test $exit_code -eq 0 -a -n "$output"
        eval $output
      else
        return $exit_code
      end
    end"""
)

POSIX_TEMPLATE = dedent(
    """\
    kai() {{
      local output
      output=$(command kai {args}"$@" 2>/dev/tty)
      local exit_code=$?

      if [ $exit_code -eq 0 ] && [ -n "$output" ]; then
        eval "$output"
      else
        return $exit_code
      fi
    }}"""
)


def is_fish(shell: str) -> bool:
    return "fish" in shell


def render_init_script(projects_path: Path | None, shell: str) -> str:
    """Build the wrapper function for ``shell`` (the value of ``$SHELL``)."""
    args = f"--path={shlex.quote(str(projects_path))} " if projects_path else ""
    template = FISH_TEMPLATE if is_fish(shell) else POSIX_TEMPLATE
    return template.format(args=args)


def init(
    projects_path: Path | None = typer.Argument(
        None, help="Projects directory to bake into the wrapper (defaults to the config)."
    ),
    shell: str | None = typer.Option(
        None, "--shell", help="Shell to generate for (defaults to $SHELL)."
    ),
) -> None:
    """Print the shell function that lets kai change the current directory."""
    typer.echo(render_init_script(projects_path, shell or os.environ.get("SHELL", "")))
