"""Unit graph construction for cargo-ninja.

The graph is an arena of Units indexed by UnitKey. Edges are stored as key
references on the consumer (``Unit.dependencies``), so diamond dependencies
share one node and no Unit owns another.

Construction is an iterative depth-first walk from the top-level unit:
- a key already finished is reused (diamond collapse)
- a key still on the active path is a cycle
- the post-order of the walk is the topological order (providers first)
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass
from pathlib import Path

import structlog

from cargo_ninja_core.errors import DependencyCycleError, UnresolvedDependencyError
from cargo_ninja_core.models import ProjectMetadata, RawUnit, UnitKey, UnitKind

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class Dependency:
    """Edge from a consumer to a provider.

    Attributes:
        extern_name: Name the consumer uses for the provider (``--extern <name>=``).
        key: Provider identity.
    """

    extern_name: str
    key: UnitKey


@dataclass(frozen=True)
class Unit:
    """One compilable crate.

    Attributes:
        key: Stable identity (name, version, source).
        kind: Library or executable.
        crate_name: Crate name of the unit itself.
        target_name: Target name as declared (names the executable file).
        source_path: Entry source file.
        manifest_dir: Directory of the unit's Cargo.toml.
        edition: Rust edition.
        dependencies: Direct dependencies in declaration order.
    """

    key: UnitKey
    kind: UnitKind
    crate_name: str
    target_name: str
    source_path: Path
    manifest_dir: Path
    edition: str
    dependencies: tuple[Dependency, ...] = ()


class UnitGraph:
    """Acyclic graph of Units.

    Attributes:
        root: Key of the top-level unit.
        units: Arena of units by key.
        order: Keys in topological order, every provider before its consumers.

    Example:
        >>> graph = build_unit_graph(metadata)
        >>> [str(key) for key in graph.order]
        ['common v0.1.0', 'left v0.1.0', 'right v0.1.0', 'app v0.1.0']
    """

    def __init__(
        self, root: UnitKey, units: dict[UnitKey, Unit], order: tuple[UnitKey, ...]
    ) -> None:
        self.root = root
        self.units = units
        self.order = order

    def __len__(self) -> int:
        return len(self.units)

    def __getitem__(self, key: UnitKey) -> Unit:
        return self.units[key]

    def __contains__(self, key: object) -> bool:
        return key in self.units

    def __iter__(self) -> Iterator[Unit]:
        """Iterate units in topological order."""
        return (self.units[key] for key in self.order)

    @property
    def root_unit(self) -> Unit:
        return self.units[self.root]

    def edges(self) -> list[tuple[UnitKey, UnitKey]]:
        """Return every ``(consumer, provider)`` edge in topological order of consumers."""
        return [(unit.key, dep.key) for unit in self for dep in unit.dependencies]

    def dependents(self, key: UnitKey) -> list[UnitKey]:
        """Return the keys of units depending directly on ``key``."""
        return [unit.key for unit in self if any(dep.key == key for dep in unit.dependencies)]


def build_unit_graph(metadata: ProjectMetadata) -> UnitGraph:
    """Build the unit graph from reader output.

    Args:
        metadata: Reader output.

    Returns:
        UnitGraph with one node per distinct UnitKey.

    Raises:
        DependencyCycleError: If a unit depends on itself, directly or transitively.
        UnresolvedDependencyError: If an edge targets a key with no metadata.
    """
    log = logger.bind(component="graph_builder")
    if metadata.root not in metadata.units:
        raise UnresolvedDependencyError(str(metadata.root), "the project")

    units: dict[UnitKey, Unit] = {}
    order: list[UnitKey] = []
    on_path: set[UnitKey] = set()

    # Each frame is (key, index of the next dependency to visit)
    stack: list[tuple[UnitKey, int]] = [(metadata.root, 0)]
    on_path.add(metadata.root)

    while stack:
        key, next_index = stack[-1]
        raw = metadata.units[key]

        if next_index < len(raw.dependencies):
            stack[-1] = (key, next_index + 1)
            dep_key = raw.dependencies[next_index].key

            if dep_key in units:
                continue
            if dep_key in on_path:
                path = [frame_key for frame_key, _ in stack]
                cycle = path[path.index(dep_key) :]
                raise DependencyCycleError([str(k) for k in (*cycle, dep_key)])
            if dep_key not in metadata.units:
                raise UnresolvedDependencyError(str(dep_key), str(key))

            on_path.add(dep_key)
            stack.append((dep_key, 0))
            continue

        # All dependencies finished: the unit can be created
        stack.pop()
        on_path.discard(key)
        units[key] = _make_unit(raw, units)
        order.append(key)

    log.info("unit_graph_built", units=len(units), root=str(metadata.root))
    return UnitGraph(root=metadata.root, units=units, order=tuple(order))


def _make_unit(raw: RawUnit, finished: dict[UnitKey, Unit]) -> Unit:
    dependencies = tuple(
        Dependency(
            extern_name=dep.rename or finished[dep.key].crate_name,
            key=dep.key,
        )
        for dep in raw.dependencies
    )
    return Unit(
        key=raw.key,
        kind=raw.kind,
        crate_name=raw.crate_name,
        target_name=raw.target_name,
        source_path=raw.source_path,
        manifest_dir=raw.manifest_dir,
        edition=raw.edition,
        dependencies=dependencies,
    )


__all__ = [
    "Dependency",
    "Unit",
    "UnitGraph",
    "build_unit_graph",
]
