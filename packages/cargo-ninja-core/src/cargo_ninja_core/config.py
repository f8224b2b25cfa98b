"""Pipeline configuration for cargo-ninja.

This module defines the two configuration layers:
- PipelineConfig: Frozen value threaded through reader, planner and emitter
- PipelineSettings: Environment-backed defaults (CARGO_NINJA_ prefix)

There is no module-level configuration state; every pipeline run receives
its own PipelineConfig so that a self-bootstrap run and a project run never
share a build root or cache location by accident.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Literal

from pydantic import AliasChoices, BaseModel, ConfigDict, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

MANIFEST_FILE_NAME = "Cargo.toml"
LOCK_FILE_NAME = "Cargo.lock"
DEFAULT_PLAN_FILE_NAME = "build.ninja"
DEFAULT_TARGET_DIR = "target"

Profile = Literal["dev", "release"]

# Directory under target/ for each profile, as cargo names them
PROFILE_DIRS: dict[str, str] = {
    "dev": "debug",
    "release": "release",
}

# Codegen options per profile, passed to rustc as -C <option>
PROFILE_CODEGEN: dict[str, tuple[str, ...]] = {
    "dev": ("debuginfo=2",),
    "release": ("opt-level=3",),
}


class PipelineConfig(BaseModel):
    """Configuration for a single pipeline run.

    Attributes:
        project_root: Directory holding Cargo.toml and Cargo.lock.
        build_root: Directory receiving every artifact. Defaults to
            ``<project_root>/target/<profile dir>``.
        cargo_home: Cargo home holding the fetched registry and git sources.
        profile: Build profile (dev or release).
        rustc: Compiler program written into the plan.
        plan_file_name: File name of the plan when no explicit destination is given.
        target_name: Name of the default phony target. Defaults to the
            top-level crate name.
        regenerate: Whether the plan rebuilds itself when Cargo.toml or
            Cargo.lock change.
        generator_command: Command line that regenerates the plan.

    Example:
        >>> config = PipelineConfig(
        ...     project_root=Path("/src/app"), cargo_home=Path("/home/u/.cargo")
        ... )
        >>> config.resolved_build_root
        PosixPath('/src/app/target/debug')
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    project_root: Path = Field(..., description="Directory holding Cargo.toml and Cargo.lock")
    build_root: Path | None = Field(default=None, description="Artifact output directory")
    cargo_home: Path = Field(..., description="Cargo home with fetched dependency sources")
    profile: Profile = Field(default="dev", description="Build profile")
    rustc: str = Field(default="rustc", min_length=1, description="Compiler program")
    plan_file_name: str = Field(
        default=DEFAULT_PLAN_FILE_NAME,
        min_length=1,
        description="Plan file name inside the project root",
    )
    target_name: str | None = Field(default=None, description="Default phony target name")
    regenerate: bool = Field(default=True, description="Emit a plan regeneration statement")
    generator_command: tuple[str, ...] = Field(
        default=("cargo-ninja", "generate"),
        description="Command that regenerates the plan",
    )

    @property
    def resolved_build_root(self) -> Path:
        """Absolute artifact directory for this run."""
        if self.build_root is None:
            return self.project_root / DEFAULT_TARGET_DIR / PROFILE_DIRS[self.profile]
        if self.build_root.is_absolute():
            return self.build_root
        return self.project_root / self.build_root

    @property
    def manifest_path(self) -> Path:
        return self.project_root / MANIFEST_FILE_NAME

    @property
    def lock_path(self) -> Path:
        return self.project_root / LOCK_FILE_NAME

    @property
    def deps_dir(self) -> Path:
        """Directory receiving library artifacts."""
        return self.resolved_build_root / "deps"

    @property
    def default_plan_path(self) -> Path:
        return self.project_root / self.plan_file_name

    @property
    def codegen_options(self) -> tuple[str, ...]:
        return PROFILE_CODEGEN[self.profile]

    def plan_path(self, path: Path) -> str:
        """Render a filesystem path the way it appears in the build plan.

        Paths under the project root are written relative to it (the plan is
        executed from the project root); anything else stays absolute.
        Separators are always forward slashes.

        Args:
            path: Absolute or project-relative path.

        Returns:
            Path string for the plan.
        """
        absolute = path if path.is_absolute() else self.project_root / path
        try:
            relative = absolute.relative_to(self.project_root)
        except ValueError:
            return absolute.as_posix()
        return relative.as_posix()


class PipelineSettings(BaseSettings):
    """Environment-backed defaults for PipelineConfig.

    Reads ``CARGO_NINJA_*`` variables, falling back to Cargo's own
    ``CARGO_HOME`` and ``RUSTC`` the way cargo does.

    Example:
        >>> # CARGO_NINJA_PROFILE=release cargo-ninja generate
        >>> settings = PipelineSettings()
        >>> config = settings.to_config(Path("."))
    """

    model_config = SettingsConfigDict(
        env_prefix="CARGO_NINJA_",
        extra="ignore",
        populate_by_name=True,
    )

    profile: Profile = Field(default="dev", description="Build profile")
    rustc: str | None = Field(
        default=None,
        validation_alias=AliasChoices("CARGO_NINJA_RUSTC", "RUSTC"),
        description="Compiler program",
    )
    cargo_home: Path | None = Field(
        default=None,
        validation_alias=AliasChoices("CARGO_NINJA_CARGO_HOME", "CARGO_HOME"),
        description="Cargo home directory",
    )
    build_root: Path | None = Field(default=None, description="Artifact output directory")
    self_tree: Path | None = Field(
        default=None,
        description="Source tree used by the bootstrap command",
    )

    def to_config(self, project_root: Path, **overrides: Any) -> PipelineConfig:
        """Build a PipelineConfig for ``project_root``.

        Args:
            project_root: Directory holding Cargo.toml and Cargo.lock.
            **overrides: PipelineConfig fields taking precedence over the
                environment (None values are ignored).

        Returns:
            A new PipelineConfig.
        """
        values: dict[str, Any] = {
            "project_root": project_root.resolve(),
            "cargo_home": (self.cargo_home or Path.home() / ".cargo").expanduser(),
            "profile": self.profile,
            "build_root": self.build_root,
        }
        if self.rustc:
            values["rustc"] = self.rustc
        values.update({key: value for key, value in overrides.items() if value is not None})
        return PipelineConfig(**values)


__all__ = [
    "DEFAULT_PLAN_FILE_NAME",
    "LOCK_FILE_NAME",
    "MANIFEST_FILE_NAME",
    "PROFILE_CODEGEN",
    "PROFILE_DIRS",
    "PipelineConfig",
    "PipelineSettings",
    "Profile",
]
