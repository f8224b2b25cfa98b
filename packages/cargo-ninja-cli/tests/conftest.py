"""Shared test fixtures for cargo-ninja-cli tests.

Provides CliRunner fixtures and a small Cargo project on disk for
exercising the commands end to end.
"""

from __future__ import annotations

from collections.abc import Generator
from pathlib import Path

import pytest
from click.testing import CliRunner

from cargo_ninja_core.observability import configure_logging

from cargo_ninja_cli import output

DIAMOND_FILES = {
    "Cargo.toml": (
        '[package]\nname = "app"\nversion = "0.1.0"\nedition = "2021"\n\n'
        "[dependencies]\n"
        'left = { path = "crates/left" }\n'
        'right = { path = "crates/right" }\n'
    ),
    "Cargo.lock": (
        "version = 3\n\n"
        '[[package]]\nname = "app"\nversion = "0.1.0"\ndependencies = [\n "left",\n "right",\n]\n\n'
        '[[package]]\nname = "common"\nversion = "0.1.0"\n\n'
        '[[package]]\nname = "left"\nversion = "0.1.0"\ndependencies = [\n "common",\n]\n\n'
        '[[package]]\nname = "right"\nversion = "0.1.0"\ndependencies = [\n "common",\n]\n'
    ),
    "src/main.rs": "fn main() {}\n",
    "crates/common/Cargo.toml": '[package]\nname = "common"\nversion = "0.1.0"\nedition = "2021"\n',
    "crates/common/src/lib.rs": "",
    "crates/left/Cargo.toml": (
        '[package]\nname = "left"\nversion = "0.1.0"\nedition = "2021"\n\n'
        '[dependencies]\ncommon = { path = "../common" }\n'
    ),
    "crates/left/src/lib.rs": "",
    "crates/right/Cargo.toml": (
        '[package]\nname = "right"\nversion = "0.1.0"\nedition = "2021"\n\n'
        '[dependencies]\ncommon = { path = "../common" }\n'
    ),
    "crates/right/src/lib.rs": "",
}


@pytest.fixture(autouse=True)
def isolated_environment(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> Generator[None, None, None]:
    """Keep the developer's cargo and cargo-ninja settings out of the tests.

    Logging is reconfigured for every test because each CLI invocation
    binds it to the runner's short-lived stderr. Colored console output is
    restored after tests that pass --no-color.
    """
    configure_logging()
    for name in (
        "CARGO_NINJA_PROFILE",
        "CARGO_NINJA_RUSTC",
        "CARGO_NINJA_BUILD_ROOT",
        "CARGO_NINJA_SELF_TREE",
        "CARGO_NINJA_NINJA",
        "RUSTC",
    ):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("CARGO_NINJA_CARGO_HOME", str(tmp_path / "cargo-home"))
    yield
    output.set_no_color(False)


@pytest.fixture
def cli_runner() -> CliRunner:
    """Create a Click test runner.

    Returns:
        CliRunner instance for testing CLI commands.
    """
    return CliRunner()


@pytest.fixture
def diamond_project(tmp_path: Path) -> Path:
    """Write the diamond project (app -> {left, right} -> common).

    Returns:
        The project root.
    """
    root = tmp_path.resolve() / "app"
    for relative, content in DIAMOND_FILES.items():
        path = root / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content)
    return root
