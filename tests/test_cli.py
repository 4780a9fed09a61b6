"""Tests for the root dddcheck CLI."""

import pytest
from click.testing import CliRunner

from dddcheck import __version__
from dddcheck.cli import cli


def test_cli_help(cli_runner: CliRunner) -> None:
    result = cli_runner.invoke(cli, ["--help"])
    assert result.exit_code == 0
    assert "dddcheck" in result.output


def test_cli_version(cli_runner: CliRunner) -> None:
    result = cli_runner.invoke(cli, ["--version"])
    assert result.exit_code == 0
    assert f"dddcheck, version {__version__}" in result.output


def test_cli_no_args(cli_runner: CliRunner) -> None:
    result = cli_runner.invoke(cli, [])
    assert result.exit_code == 0
    assert "Usage" in result.output


# --- Global flags ---


@pytest.mark.parametrize(
    "flags",
    [["--json"], ["-q"], ["-v"], ["--log-json"], ["--sync"], ["-c", "/tmp/missing.toml"]],
)
def test_global_flag_accepted(cli_runner: CliRunner, flags: list[str]) -> None:
    result = cli_runner.invoke(cli, [*flags, "--version"])
    assert result.exit_code == 0


def test_unknown_flag_rejected(cli_runner: CliRunner) -> None:
    result = cli_runner.invoke(cli, ["--no-such-flag"])
    assert result.exit_code == 2


# --- Commands registered ---

EXPECTED_COMMANDS = ["validate", "report", "catalog"]


@pytest.mark.parametrize("command", EXPECTED_COMMANDS)
def test_command_registered(cli_runner: CliRunner, command: str) -> None:
    result = cli_runner.invoke(cli, [command, "--help"])
    assert result.exit_code == 0, f"{command} --help failed: {result.output}"


def test_all_commands_in_help(cli_runner: CliRunner) -> None:
    result = cli_runner.invoke(cli, ["--help"])
    for name in EXPECTED_COMMANDS:
        assert name in result.output, f"{name} missing from --help"
    assert set(cli.commands) == set(EXPECTED_COMMANDS)
