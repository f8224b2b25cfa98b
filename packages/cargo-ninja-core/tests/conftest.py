"""Shared pytest fixtures for cargo-ninja-core tests.

Provides a factory that lays out Cargo projects (manifests, lock file and
entry sources) under tmp_path, together with a fake CARGO_HOME holding
registry and git sources.
"""

from __future__ import annotations

import sys
from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import Any

import pytest
import structlog

from cargo_ninja_core.config import PipelineConfig

REGISTRY_SOURCE = "registry+https://github.com/rust-lang/crates.io-index"
REGISTRY_INDEX_DIR = "index.crates.io-6f17d22bba15001f"


@pytest.fixture(autouse=True)
def configure_structlog_for_tests() -> None:
    """Configure structlog to output to stdout for test capture.

    Ensures capsys can capture log output regardless of how an earlier
    test (or the CLI) configured structlog.
    """
    structlog.configure(
        processors=[
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.dev.ConsoleRenderer(colors=False),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(0),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stdout),
        cache_logger_on_first_use=False,  # Important for test isolation
    )


def manifest_text(
    name: str,
    version: str = "0.1.0",
    *,
    edition: str | None = "2021",
    dependencies: Mapping[str, str] | None = None,
    extra: str = "",
) -> str:
    """Render a Cargo.toml.

    Args:
        name: Package name.
        version: Package version.
        edition: Edition, or None to leave it out.
        dependencies: Dependency key -> TOML value text
            (``'"1.0"'`` or ``'{ path = "../common" }'``).
        extra: Raw TOML appended at the end.
    """
    lines = ["[package]", f'name = "{name}"', f'version = "{version}"']
    if edition is not None:
        lines.append(f'edition = "{edition}"')
    lines.append("")
    if dependencies:
        lines.append("[dependencies]")
        lines.extend(f"{key} = {value}" for key, value in dependencies.items())
        lines.append("")
    if extra:
        lines.append(extra)
    return "\n".join(lines) + "\n"


def lock_text(packages: Sequence[Mapping[str, Any]], version: int | None = 3) -> str:
    """Render a Cargo.lock.

    Args:
        packages: Entries with ``name``, ``version`` and optional
            ``source`` and ``dependencies``.
        version: Lock file format version (None to leave it out, as format 1 does).
    """
    lines = ["# This file is automatically @generated by Cargo.", "# It is not intended for manual editing."]
    if version is not None:
        lines.append(f"version = {version}")
    for package in packages:
        lines += ["", "[[package]]", f'name = "{package["name"]}"', f'version = "{package["version"]}"']
        if package.get("source"):
            lines.append(f'source = "{package["source"]}"')
        dependencies = package.get("dependencies") or []
        if dependencies:
            lines.append("dependencies = [")
            lines.extend(f' "{reference}",' for reference in dependencies)
            lines.append("]")
    return "\n".join(lines) + "\n"


class CargoProjectFactory:
    """Lays out a Cargo project and a fake cargo home under a temporary directory.

    Attributes:
        root: Project root (holds the top-level Cargo.toml and Cargo.lock).
        cargo_home: Fake CARGO_HOME.
    """

    registry_source = REGISTRY_SOURCE

    def __init__(self, base: Path) -> None:
        base = base.resolve()
        self.root = base / "app"
        self.cargo_home = base / "cargo-home"
        self.root.mkdir(parents=True)
        self.cargo_home.mkdir()

    def write_root(
        self,
        name: str = "app",
        version: str = "0.1.0",
        *,
        dependencies: Mapping[str, str] | None = None,
        extra: str = "",
        edition: str | None = "2021",
    ) -> Path:
        """Write the top-level binary package."""
        return self._write_crate(
            self.root, name, version, "src/main.rs", dependencies, extra, edition
        )

    def write_path_crate(
        self,
        name: str,
        version: str = "0.1.0",
        *,
        dependencies: Mapping[str, str] | None = None,
        extra: str = "",
        edition: str | None = "2021",
        directory: str | None = None,
    ) -> Path:
        """Write a local library under ``<root>/crates/<directory or name>``."""
        crate_dir = self.root / "crates" / (directory or name)
        return self._write_crate(crate_dir, name, version, "src/lib.rs", dependencies, extra, edition)

    def write_registry_crate(
        self,
        name: str,
        version: str,
        *,
        dependencies: Mapping[str, str] | None = None,
        extra: str = "",
        edition: str | None = "2018",
    ) -> Path:
        """Write a library into the fake registry cache."""
        crate_dir = self.cargo_home / "registry" / "src" / REGISTRY_INDEX_DIR / f"{name}-{version}"
        return self._write_crate(crate_dir, name, version, "src/lib.rs", dependencies, extra, edition)

    def write_git_crate(
        self,
        name: str,
        version: str,
        revision: str,
        *,
        repository: str = "utils-3f1c2b7a9d0e4b12",
        subdirectory: str | None = None,
        edition: str | None = "2021",
    ) -> Path:
        """Write a library into the fake git checkouts cache."""
        checkout = self.cargo_home / "git" / "checkouts" / repository / revision[:7]
        crate_dir = checkout / subdirectory if subdirectory else checkout
        return self._write_crate(crate_dir, name, version, "src/lib.rs", None, "", edition)

    def write_lock(self, packages: Sequence[Mapping[str, Any]], version: int | None = 3) -> Path:
        path = self.root / "Cargo.lock"
        path.write_text(lock_text(packages, version))
        return path

    def config(self, **overrides: Any) -> PipelineConfig:
        return PipelineConfig(project_root=self.root, cargo_home=self.cargo_home, **overrides)

    @staticmethod
    def _write_crate(
        crate_dir: Path,
        name: str,
        version: str,
        entry: str,
        dependencies: Mapping[str, str] | None,
        extra: str,
        edition: str | None,
    ) -> Path:
        (crate_dir / entry).parent.mkdir(parents=True, exist_ok=True)
        (crate_dir / "Cargo.toml").write_text(
            manifest_text(name, version, edition=edition, dependencies=dependencies, extra=extra)
        )
        (crate_dir / entry).write_text("fn main() {}\n" if entry.endswith("main.rs") else "")
        return crate_dir


@pytest.fixture
def cargo_project(tmp_path: Path) -> CargoProjectFactory:
    """Return an empty project factory rooted in tmp_path."""
    return CargoProjectFactory(tmp_path)


@pytest.fixture
def diamond_project(cargo_project: CargoProjectFactory) -> CargoProjectFactory:
    """Create the diamond project: app -> {left, right} -> common, all local.

    Returns:
        The factory, with Cargo.toml, Cargo.lock and sources written.
    """
    cargo_project.write_root(
        dependencies={
            "left": '{ path = "crates/left" }',
            "right": '{ path = "crates/right" }',
        }
    )
    cargo_project.write_path_crate("common")
    cargo_project.write_path_crate("left", dependencies={"common": '{ path = "../common" }'})
    cargo_project.write_path_crate("right", dependencies={"common": '{ path = "../common" }'})
    cargo_project.write_lock(
        [
            {"name": "app", "version": "0.1.0", "dependencies": ["left", "right"]},
            {"name": "common", "version": "0.1.0"},
            {"name": "left", "version": "0.1.0", "dependencies": ["common"]},
            {"name": "right", "version": "0.1.0", "dependencies": ["common"]},
        ]
    )
    return cargo_project
