"""Unit models shared by the reader, graph builder and planner.

- UnitKey: Identity of one compilation unit (name, version, source)
- UnitKind: Closed set of output kinds (library or executable)
- RawDependency / RawUnit: Reader output for one locked package
- ProjectMetadata: Reader output for a whole project
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path


class UnitKind(str, Enum):
    """Output kind of a compilation unit.

    The value is the rustc ``--crate-type`` argument.

    Attributes:
        LIBRARY: Linkable rlib consumed through ``--extern``.
        EXECUTABLE: Final binary; never linked against.
    """

    LIBRARY = "lib"
    EXECUTABLE = "bin"


@dataclass(frozen=True)
class UnitKey:
    """Identity of a compilation unit.

    Two units with equal keys are the same node of the unit graph.

    Attributes:
        name: Package name.
        version: Exact version resolved by Cargo.lock.
        source: Lock file source string; None for local path packages.

    Example:
        >>> str(UnitKey("common", "1.0.0", None))
        'common v1.0.0'
    """

    name: str
    version: str
    source: str | None = None

    def __str__(self) -> str:
        return f"{self.name} v{self.version}"

    @property
    def is_local(self) -> bool:
        return self.source is None

    def describe(self) -> str:
        """Display name including the origin, as cargo prints package ids."""
        origin = self.source if self.source is not None else "path"
        return f"{self} ({origin})"

    def sort_key(self) -> tuple[str, str, str]:
        return (self.name, self.version, self.source or "")


@dataclass(frozen=True)
class RawDependency:
    """A resolved dependency declaration.

    Attributes:
        key: Identity of the provider unit.
        rename: Extern name when the manifest renames the dependency
            (``foo = { package = "bar" }``); None otherwise.
    """

    key: UnitKey
    rename: str | None = None


@dataclass(frozen=True)
class RawUnit:
    """Everything the reader learns about one locked package.

    Attributes:
        key: Unit identity.
        kind: Output kind.
        crate_name: Crate name used for ``--crate-name`` and ``--extern``.
        target_name: Target name as declared (names the executable file).
        source_path: Entry source file (src/lib.rs, src/main.rs, ...).
        manifest_dir: Directory holding the package's Cargo.toml.
        edition: Rust edition.
        dependencies: Normal dependencies in manifest declaration order.
    """

    key: UnitKey
    kind: UnitKind
    crate_name: str
    target_name: str
    source_path: Path
    manifest_dir: Path
    edition: str
    dependencies: tuple[RawDependency, ...] = ()


@dataclass(frozen=True)
class ProjectMetadata:
    """Reader output: every unit reachable from the top-level package.

    Attributes:
        root: Key of the top-level (executable) unit.
        units: One entry per distinct locked (name, version, source) triple.
    """

    root: UnitKey
    units: dict[UnitKey, RawUnit] = field(default_factory=dict)

    def __len__(self) -> int:
        return len(self.units)


__all__ = [
    "ProjectMetadata",
    "RawDependency",
    "RawUnit",
    "UnitKey",
    "UnitKind",
]
