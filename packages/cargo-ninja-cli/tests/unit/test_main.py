"""Unit tests for cargo_ninja_cli.main module."""

from __future__ import annotations

import click
from click.testing import CliRunner

from cargo_ninja_cli.main import LAZY_COMMANDS, LazyGroup, cli


class TestCLIHelp:
    """Tests for CLI help output."""

    def test_help_shows_global_options(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["--help"])

        assert result.exit_code == 0
        assert "--version" in result.output
        assert "--no-color" in result.output
        assert "--verbose" in result.output

    def test_help_shows_all_commands(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["--help"])

        assert result.exit_code == 0
        for name in ("generate", "build", "graph", "plan", "bootstrap"):
            assert name in result.output

    def test_help_shows_description(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["--help"])

        assert result.exit_code == 0
        assert "Build Cargo projects with Ninja" in result.output

    def test_command_help(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["generate", "--help"])

        assert result.exit_code == 0
        assert "--profile" in result.output
        assert "--no-regenerate" in result.output


class TestCLIVersion:
    """Tests for CLI version output."""

    def test_version_output(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["--version"])

        assert result.exit_code == 0
        assert "0.1.0" in result.output
        assert "cargo-ninja" in result.output


class TestCLINoColor:
    """Tests for the no-color option."""

    def test_no_color_option_accepted(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["--no-color", "--help"])
        assert result.exit_code == 0


class TestLazyGroup:
    """Tests for lazy command loading."""

    def test_lists_lazy_commands_sorted(self) -> None:
        group = LazyGroup(name="test", lazy_subcommands={"b": "x.b", "a": "x.a"})
        ctx = click.Context(group)
        assert group.list_commands(ctx) == ["a", "b"]

    def test_unknown_command_returns_none(self) -> None:
        group = LazyGroup(name="test", lazy_subcommands={})
        ctx = click.Context(group)
        assert group.get_command(ctx, "missing") is None

    def test_every_lazy_command_loads(self) -> None:
        ctx = click.Context(cli)
        for name in LAZY_COMMANDS:
            command = cli.get_command(ctx, name)
            assert isinstance(command, click.Command)
            assert command.name == name

    def test_unknown_command_fails(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["frobnicate"])
        assert result.exit_code == 2
