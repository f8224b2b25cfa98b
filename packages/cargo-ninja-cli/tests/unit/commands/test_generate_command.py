"""Unit tests for the generate command."""

from __future__ import annotations

from pathlib import Path

import pytest
from click.testing import CliRunner

from cargo_ninja_cli.main import cli


def _write_cycle(root: Path) -> None:
    files = {
        "Cargo.toml": (
            '[package]\nname = "app"\nversion = "0.1.0"\n\n'
            '[dependencies]\na = { path = "crates/a" }\n'
        ),
        "Cargo.lock": (
            "version = 3\n\n"
            '[[package]]\nname = "a"\nversion = "0.1.0"\ndependencies = ["b"]\n\n'
            '[[package]]\nname = "app"\nversion = "0.1.0"\ndependencies = ["a"]\n\n'
            '[[package]]\nname = "b"\nversion = "0.1.0"\ndependencies = ["a"]\n'
        ),
        "src/main.rs": "fn main() {}\n",
        "crates/a/Cargo.toml": (
            '[package]\nname = "a"\nversion = "0.1.0"\n\n[dependencies]\nb = { path = "../b" }\n'
        ),
        "crates/a/src/lib.rs": "",
        "crates/b/Cargo.toml": (
            '[package]\nname = "b"\nversion = "0.1.0"\n\n[dependencies]\na = { path = "../a" }\n'
        ),
        "crates/b/src/lib.rs": "",
    }
    for relative, content in files.items():
        path = root / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content)


class TestGenerateSuccess:
    """Tests for successful plan generation."""

    def test_writes_plan_in_project_root(
        self, cli_runner: CliRunner, diamond_project: Path
    ) -> None:
        result = cli_runner.invoke(cli, ["generate", str(diamond_project)])

        assert result.exit_code == 0, result.output
        assert "4 compilation units" in result.output
        text = (diamond_project / "build.ninja").read_text()
        assert "build target/debug/app: rustc_bin src/main.rs" in text
        assert "default app\n" in text

    def test_explicit_output(
        self, cli_runner: CliRunner, diamond_project: Path, tmp_path: Path
    ) -> None:
        destination = tmp_path / "out" / "plan.ninja"

        result = cli_runner.invoke(cli, ["generate", str(diamond_project), "-o", str(destination)])

        assert result.exit_code == 0, result.output
        assert destination.is_file()
        assert not (diamond_project / "build.ninja").exists()

    def test_release_profile(self, cli_runner: CliRunner, diamond_project: Path) -> None:
        result = cli_runner.invoke(cli, ["generate", str(diamond_project), "--profile", "release"])

        assert result.exit_code == 0, result.output
        text = (diamond_project / "build.ninja").read_text()
        assert "target/release/app" in text
        assert "-C opt-level=3" in text
        assert "debuginfo" not in text

    def test_profile_from_environment(
        self, cli_runner: CliRunner, diamond_project: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("CARGO_NINJA_PROFILE", "release")

        result = cli_runner.invoke(cli, ["generate", str(diamond_project)])

        assert result.exit_code == 0, result.output
        assert "target/release/app" in (diamond_project / "build.ninja").read_text()

    def test_build_root(
        self, cli_runner: CliRunner, diamond_project: Path, tmp_path: Path
    ) -> None:
        out = tmp_path / "artifacts"

        result = cli_runner.invoke(
            cli, ["generate", str(diamond_project), "--build-root", str(out)]
        )

        assert result.exit_code == 0, result.output
        assert f"{out.as_posix()}/app" in (diamond_project / "build.ninja").read_text()

    def test_no_regenerate(self, cli_runner: CliRunner, diamond_project: Path) -> None:
        result = cli_runner.invoke(cli, ["generate", str(diamond_project), "--no-regenerate"])

        assert result.exit_code == 0, result.output
        assert "rule regenerate" not in (diamond_project / "build.ninja").read_text()

    def test_discovers_project_root(
        self, cli_runner: CliRunner, diamond_project: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.chdir(diamond_project / "src")

        result = cli_runner.invoke(cli, ["generate"])

        assert result.exit_code == 0, result.output
        assert (diamond_project / "build.ninja").is_file()


class TestGenerateErrors:
    """Tests for phase-prefixed failures and exit codes."""

    def test_missing_lock_file(self, cli_runner: CliRunner, diamond_project: Path) -> None:
        (diamond_project / "Cargo.lock").unlink()

        result = cli_runner.invoke(cli, ["generate", str(diamond_project)])

        assert result.exit_code == 1
        assert "input error:" in result.output
        assert "Cargo.lock" in result.output
        assert not (diamond_project / "build.ninja").exists()

    def test_dependency_cycle(self, cli_runner: CliRunner, tmp_path: Path) -> None:
        root = tmp_path / "cyclic"
        _write_cycle(root)

        result = cli_runner.invoke(cli, ["generate", str(root)])

        assert result.exit_code == 1
        assert "graph error: dependency cycle detected" in result.output
        assert not (root / "build.ninja").exists()

    def test_unwritable_destination(
        self, cli_runner: CliRunner, diamond_project: Path, tmp_path: Path
    ) -> None:
        blocker = tmp_path / "blocker"
        blocker.write_text("not a directory")

        result = cli_runner.invoke(
            cli, ["generate", str(diamond_project), "-o", str(blocker / "build.ninja")]
        )

        assert result.exit_code == 2
        assert "i/o error: cannot write build plan" in result.output

    def test_invalid_profile_setting(
        self, cli_runner: CliRunner, diamond_project: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("CARGO_NINJA_PROFILE", "bench")

        result = cli_runner.invoke(cli, ["generate", str(diamond_project)])

        assert result.exit_code == 1
        assert "input error: invalid settings" in result.output

    def test_invalid_profile_option(self, cli_runner: CliRunner, diamond_project: Path) -> None:
        result = cli_runner.invoke(cli, ["generate", str(diamond_project), "--profile", "bench"])
        assert result.exit_code == 2

    def test_no_project_found(
        self, cli_runner: CliRunner, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        empty = tmp_path / "empty"
        empty.mkdir()
        monkeypatch.chdir(empty)

        result = cli_runner.invoke(cli, ["generate"])

        assert result.exit_code == 1
        assert "input error:" in result.output
