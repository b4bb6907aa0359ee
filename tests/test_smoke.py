from __future__ import annotations

from typer.main import get_group
from typer.testing import CliRunner

from kai import __version__
from kai.main import app

runner = CliRunner()


def test_app_help() -> None:
    result = runner.invoke(app, ["--help"])
    assert result.exit_code == 0
    assert "Usage:" in result.stdout


def test_all_commands_have_help() -> None:
    """
    Iterate over every registered command and ensure it accepts --help.
    This catches import errors and broken option declarations in the
    command modules.
    """
    commands = get_group(app).commands
    assert {"config", "version", "list", "init"} <= set(commands)
    for name in commands:
        result = runner.invoke(app, [name, "--help"])
        assert result.exit_code == 0, f"Command 'kai {name} --help' failed!"
        assert "Usage:" in result.stdout


def test_version_is_set() -> None:
    assert __version__.count(".") == 2
