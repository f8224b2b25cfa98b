"""Cargo.toml models for cargo-ninja.

Only the parts of the manifest format that influence a plain rustc
invocation are modelled; every other key is accepted and ignored
(``extra="allow"``) so real-world manifests validate.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from cargo_ninja_core.schemas.document import load_toml, validate_document

# Edition used by cargo when a manifest does not declare one
DEFAULT_EDITION = "2015"

KNOWN_EDITIONS = frozenset({"2015", "2018", "2021", "2024"})


class PackageSection(BaseModel):
    """The ``[package]`` table.

    Attributes:
        name: Package name as published.
        version: Package version (cargo defaults a missing version to 0.0.0).
        edition: Edition string, or a ``{workspace = true}`` table.
        build: Build script path, or ``false`` to disable auto-detection.
        links: Native library the package links to.
    """

    model_config = ConfigDict(frozen=True, extra="allow")

    name: str = Field(..., min_length=1, description="Package name")
    version: str | dict[str, Any] = Field(default="0.0.0", description="Package version")
    edition: str | dict[str, Any] = Field(default=DEFAULT_EDITION, description="Rust edition")
    build: str | bool | None = Field(default=None, description="Build script")
    links: str | None = Field(default=None, description="Native library name")


class TargetSection(BaseModel):
    """A ``[lib]`` or ``[[bin]]`` table."""

    model_config = ConfigDict(frozen=True, extra="allow", populate_by_name=True)

    name: str | None = Field(default=None, description="Crate name override")
    path: str | None = Field(default=None, description="Entry source file")
    edition: str | None = Field(default=None, description="Per-target edition override")
    proc_macro: bool = Field(
        default=False, alias="proc-macro", description="Procedural macro crate"
    )
    crate_type: list[str] | None = Field(
        default=None, alias="crate-type", description="Crate types"
    )


class DependencySpec(BaseModel):
    """One entry of a ``[dependencies]`` table.

    The short form ``name = "1.0"`` is normalized to ``{version = "1.0"}``.
    """

    model_config = ConfigDict(frozen=True, extra="allow")

    version: str | None = Field(default=None, description="Version requirement")
    path: str | None = Field(default=None, description="Local path dependency")
    git: str | None = Field(default=None, description="Git repository")
    package: str | None = Field(default=None, description="Real package name when renamed")
    optional: bool = Field(default=False, description="Only enabled through a feature")
    features: list[str] = Field(
        default_factory=list, description="Features enabled on the dependency"
    )
    workspace: bool = Field(default=False, description="Inherited from the workspace")


class CargoManifest(BaseModel):
    """Root model for Cargo.toml.

    Example:
        >>> manifest = CargoManifest.from_toml(Path("Cargo.toml"))
        >>> manifest.package.name
        'app'
    """

    model_config = ConfigDict(frozen=True, extra="allow")

    package: PackageSection | None = Field(default=None, description="[package] table")
    lib: TargetSection | None = Field(default=None, description="[lib] table")
    bin: list[TargetSection] = Field(default_factory=list, description="[[bin]] tables")
    dependencies: dict[str, DependencySpec] = Field(
        default_factory=dict,
        description="Normal dependencies",
    )
    features: dict[str, list[str]] = Field(default_factory=dict, description="[features] table")
    workspace: dict[str, Any] | None = Field(default=None, description="[workspace] table")

    @field_validator("dependencies", mode="before")
    @classmethod
    def normalize_short_form(cls, v: Any) -> Any:
        """Expand ``name = "1.0"`` into ``{version = "1.0"}``."""
        if not isinstance(v, dict):
            return v
        return {
            name: {"version": spec} if isinstance(spec, str) else spec
            for name, spec in v.items()
        }

    @classmethod
    def from_toml(cls, path: str | Path) -> CargoManifest:
        """Load and validate a Cargo.toml file.

        Args:
            path: Path to Cargo.toml.

        Returns:
            Validated CargoManifest instance.

        Raises:
            ConfigurationError: If the file is missing, not TOML, or invalid.
        """
        path = Path(path)
        return validate_document(cls, load_toml(path), path)

    def normal_dependencies(self) -> list[tuple[str, DependencySpec]]:
        """Dependencies that are always compiled, in declaration order.

        Optional dependencies only exist behind feature flags, which are
        not supported, so they are never part of the build.
        """
        return [(key, spec) for key, spec in self.dependencies.items() if not spec.optional]


def crate_name(name: str) -> str:
    """Convert a package or target name to a crate name (``my-lib`` -> ``my_lib``)."""
    return name.replace("-", "_")


__all__ = [
    "DEFAULT_EDITION",
    "KNOWN_EDITIONS",
    "CargoManifest",
    "DependencySpec",
    "PackageSection",
    "TargetSection",
    "crate_name",
]
