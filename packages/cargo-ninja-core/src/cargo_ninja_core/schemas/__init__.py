"""Schema definitions for cargo-ninja.

This module exports the Pydantic models of the two input files:

- CargoManifest: Root schema for Cargo.toml
- CargoLock: Root schema for Cargo.lock
- LockPackage / DependencyReference: Lock file entries and references
"""

from __future__ import annotations

from cargo_ninja_core.schemas.document import (
    format_validation_errors,
    load_toml,
    validate_document,
)
from cargo_ninja_core.schemas.lockfile import CargoLock, DependencyReference, LockPackage
from cargo_ninja_core.schemas.manifest import (
    DEFAULT_EDITION,
    KNOWN_EDITIONS,
    CargoManifest,
    DependencySpec,
    PackageSection,
    TargetSection,
    crate_name,
)

__all__ = [
    # Manifest
    "CargoManifest",
    "PackageSection",
    "TargetSection",
    "DependencySpec",
    "DEFAULT_EDITION",
    "KNOWN_EDITIONS",
    "crate_name",
    # Lock file
    "CargoLock",
    "LockPackage",
    "DependencyReference",
    # Loading helpers
    "load_toml",
    "validate_document",
    "format_validation_errors",
]
