"""Cargo.lock models for cargo-ninja.

Covers lock file format versions 1 through 4. The lock file is produced by
cargo; this module only reads it.

Dependency references inside ``[[package]]`` entries take three forms,
from least to most specific:

- ``"name"`` when only one package of that name is locked
- ``"name version"`` when several versions are locked
- ``"name version (source)"`` when the same version comes from several sources
  (format version 1 always writes this form)
"""

from __future__ import annotations

import re
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field

from cargo_ninja_core.schemas.document import load_toml, validate_document

_REFERENCE = re.compile(r"^(?P<name>\S+)(?: (?P<version>\S+))?(?: \((?P<source>[^)]+)\))?$")


class LockPackage(BaseModel):
    """One ``[[package]]`` entry.

    Attributes:
        name: Package name.
        version: Exact resolved version.
        source: Origin (``registry+<url>`` or ``git+<url>#<rev>``); absent for
            local path packages.
        checksum: Registry checksum (format versions 2+).
        dependencies: References to other locked packages.
    """

    model_config = ConfigDict(frozen=True, extra="allow")

    name: str = Field(..., min_length=1, description="Package name")
    version: str = Field(..., min_length=1, description="Resolved version")
    source: str | None = Field(default=None, description="Source origin")
    checksum: str | None = Field(default=None, description="Registry checksum")
    dependencies: list[str] = Field(default_factory=list, description="Dependency references")


class DependencyReference(BaseModel):
    """A parsed lock file dependency reference."""

    model_config = ConfigDict(frozen=True)

    name: str
    version: str | None = None
    source: str | None = None

    @classmethod
    def parse(cls, text: str) -> DependencyReference:
        """Parse ``name [version] [(source)]``.

        Raises:
            ValueError: If the reference is not in any known form.
        """
        match = _REFERENCE.match(text.strip())
        if match is None:
            raise ValueError(f"malformed dependency reference: {text!r}")
        return cls(
            name=match.group("name"),
            version=match.group("version"),
            source=match.group("source"),
        )

    def matches(self, package: LockPackage) -> bool:
        if package.name != self.name:
            return False
        if self.version is not None and package.version != self.version:
            return False
        return self.source is None or package.source == self.source


class CargoLock(BaseModel):
    """Root model for Cargo.lock.

    Example:
        >>> lock = CargoLock.from_toml(Path("Cargo.lock"))
        >>> [p.name for p in lock.package]
        ['app', 'common', 'left', 'right']
    """

    model_config = ConfigDict(frozen=True, extra="allow")

    version: int = Field(default=1, ge=1, le=4, description="Lock file format version")
    package: list[LockPackage] = Field(default_factory=list, description="Locked packages")

    @classmethod
    def from_toml(cls, path: str | Path) -> CargoLock:
        """Load and validate a Cargo.lock file.

        Raises:
            ConfigurationError: If the file is missing, not TOML, or invalid.
        """
        path = Path(path)
        return validate_document(cls, load_toml(path), path)

    def find(self, reference: DependencyReference) -> list[LockPackage]:
        """Return every locked package matching a reference, in file order."""
        return [package for package in self.package if reference.matches(package)]

    def packages_named(self, name: str) -> list[LockPackage]:
        return [package for package in self.package if package.name == name]


__all__ = [
    "CargoLock",
    "DependencyReference",
    "LockPackage",
]
