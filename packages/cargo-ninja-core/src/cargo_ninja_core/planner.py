"""Compilation planning for cargo-ninja.

This module turns a UnitGraph into a BuildPlan:
- PlanEntry: Output artifact, depfile and full rustc command line of one unit
- BuildPlan: Entries in topological order plus the default target
- CompilationPlanner: Derives entries, providers strictly before consumers

Command line shape (per unit):

    rustc --crate-name <crate> --edition=<edition> <source> --crate-type lib|bin
          --emit=dep-info=<artifact>.d,link=<artifact> -C <profile options>
          -C metadata=<hash> -C extra-filename=-<hash>
          -L dependency=<build root>/deps
          --extern <name>=<provider artifact> ...

Only direct dependencies get an ``--extern``; rustc finds the rest through
the ``-L dependency=`` search path and the metadata embedded in each rlib.
"""

from __future__ import annotations

import hashlib
from pathlib import Path

import structlog
from pydantic import BaseModel, ConfigDict, Field

from cargo_ninja_core.config import PipelineConfig
from cargo_ninja_core.errors import (
    ArtifactCollisionError,
    NonLinkableDependencyError,
    PlanningError,
)
from cargo_ninja_core.graph import Unit, UnitGraph
from cargo_ninja_core.models import UnitKey, UnitKind

logger = structlog.get_logger(__name__)

# Hex digits of the metadata hash kept in symbol names and file names
METADATA_HASH_LENGTH = 16

# Ninja variable carrying the compiler program
RUSTC_VARIABLE = "rustc"


class Argument(BaseModel):
    """One compiler argument.

    ``value`` is the concrete argument. The other two fields describe how the
    argument appears in a Ninja rule:

    - ``variable`` set: the value is carried by a per-statement binding and
      the rule refers to ``$variable`` (consecutive arguments bound to the
      same variable form one reference)
    - ``template`` set: the rule contains this text, expressed with Ninja's
      built-in ``$in``/``$out`` or file-level variables
    - neither: the value is written into the rule literally

    Example:
        >>> Argument(value="common", variable="crate_name")
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    value: str = Field(..., description="Concrete argument")
    variable: str | None = Field(default=None, description="Ninja variable carrying the value")
    template: str | None = Field(default=None, description="Rule text for the argument")


class PlanEntry(BaseModel):
    """Emission-ready description of one compilation step.

    Attributes:
        key: Identity of the unit.
        kind: Output kind.
        crate_name: Crate name.
        output: Artifact path, as written in the plan.
        depfile: Dependency-info file written next to the artifact.
        source: Entry source file, as written in the plan.
        arguments: Full compiler command line.
        inputs: Artifact paths of direct providers, in declaration order.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    key: UnitKey
    kind: UnitKind
    crate_name: str = Field(..., min_length=1)
    output: str = Field(..., min_length=1)
    depfile: str = Field(..., min_length=1)
    source: str = Field(..., min_length=1)
    arguments: tuple[Argument, ...] = Field(..., min_length=1)
    inputs: tuple[str, ...] = Field(default=())

    @property
    def command_line(self) -> list[str]:
        """The compiler invocation as an argv list."""
        return [argument.value for argument in self.arguments]


class BuildPlan(BaseModel):
    """Complete ordered set of plan entries.

    Attributes:
        entries: Entries in topological order (providers first).
        top_level: Key of the entry producing the final executable.
        default_target: Name of the phony default target.
        rustc: Compiler program.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    entries: tuple[PlanEntry, ...]
    top_level: UnitKey
    default_target: str = Field(..., min_length=1)
    rustc: str = Field(..., min_length=1)

    def __len__(self) -> int:
        return len(self.entries)

    def entry(self, key: UnitKey) -> PlanEntry:
        """Return the entry planned for ``key``.

        Raises:
            KeyError: If the unit is not part of the plan.
        """
        for entry in self.entries:
            if entry.key == key:
                return entry
        raise KeyError(str(key))

    @property
    def top_level_entry(self) -> PlanEntry:
        return self.entry(self.top_level)

    def position(self, key: UnitKey) -> int:
        """Index of ``key``'s entry in plan order."""
        return self.entries.index(self.entry(key))


def metadata_hash(key: UnitKey, kind: UnitKind, profile: str) -> str:
    """Stable per-unit hash separating crates that share a name.

    Args:
        key: Unit identity.
        kind: Output kind.
        profile: Build profile.

    Returns:
        Hex digest prefix of METADATA_HASH_LENGTH characters.
    """
    material = "\0".join((key.name, key.version, key.source or "", kind.value, profile))
    return hashlib.sha256(material.encode("utf-8")).hexdigest()[:METADATA_HASH_LENGTH]


class CompilationPlanner:
    """Derive PlanEntries from a UnitGraph.

    Example:
        >>> planner = CompilationPlanner(config)
        >>> plan = planner.plan(graph)
        >>> plan.top_level_entry.output
        'target/debug/app'
    """

    def __init__(self, config: PipelineConfig) -> None:
        self.config = config
        self._log = logger.bind(component="planner", profile=config.profile)

    def artifact_path(self, unit: Unit) -> Path:
        """Derive the artifact path of a unit.

        Libraries carry the metadata hash in their file name so that two
        versions of one crate never share a path; the executable is named
        after its target.
        """
        if unit.kind is UnitKind.LIBRARY:
            digest = metadata_hash(unit.key, unit.kind, self.config.profile)
            return self.config.deps_dir / f"lib{unit.crate_name}-{digest}.rlib"
        if unit.kind is UnitKind.EXECUTABLE:
            return self.config.resolved_build_root / unit.target_name
        raise ValueError(f"unknown unit kind: {unit.kind!r}")

    def plan(self, graph: UnitGraph) -> BuildPlan:
        """Plan every unit of ``graph`` in topological order.

        Raises:
            NonLinkableDependencyError: If a unit depends on an executable.
            ArtifactCollisionError: If two units derive the same artifact path.
        """
        outputs: dict[UnitKey, str] = {}
        claimed: dict[str, UnitKey] = {}
        entries: list[PlanEntry] = []

        for unit in graph:
            entry = self._plan_unit(unit, graph, outputs)
            previous = claimed.get(entry.output)
            if previous is not None:
                raise ArtifactCollisionError(entry.output, str(previous), str(unit.key))
            claimed[entry.output] = unit.key
            outputs[unit.key] = entry.output
            entries.append(entry)
            self._log.debug("unit_planned", unit=str(unit.key), output=entry.output)

        root = graph.root_unit
        plan = BuildPlan(
            entries=tuple(entries),
            top_level=root.key,
            default_target=self.config.target_name or root.target_name,
            rustc=self.config.rustc,
        )
        self._log.info("build_planned", entries=len(plan), default_target=plan.default_target)
        return plan

    def _plan_unit(self, unit: Unit, graph: UnitGraph, outputs: dict[UnitKey, str]) -> PlanEntry:
        plan_path = self.config.plan_path
        output = plan_path(self.artifact_path(unit))
        depfile = f"{output}.d"
        source = plan_path(unit.source_path)
        digest = metadata_hash(unit.key, unit.kind, self.config.profile)

        arguments: list[Argument] = [
            Argument(value=self.config.rustc, template=f"${RUSTC_VARIABLE}"),
            Argument(value="--crate-name"),
            Argument(value=unit.crate_name, variable="crate_name"),
            Argument(value=f"--edition={unit.edition}", variable="edition"),
            Argument(value=source, template="$in"),
            Argument(value="--crate-type"),
            Argument(value=unit.kind.value),
            Argument(
                value=f"--emit=dep-info={depfile},link={output}",
                template="--emit=dep-info=$out.d,link=$out",
            ),
        ]
        for option in self.config.codegen_options:
            arguments += [Argument(value="-C"), Argument(value=option)]
        arguments += [
            Argument(value="-C", variable="metadata"),
            Argument(value=f"metadata={digest}", variable="metadata"),
            Argument(value="-C", variable="metadata"),
            Argument(value=f"extra-filename=-{digest}", variable="metadata"),
            Argument(value="-L"),
            Argument(value=f"dependency={plan_path(self.config.deps_dir)}"),
        ]

        inputs: list[str] = []
        for dependency in unit.dependencies:
            provider = graph[dependency.key]
            if provider.kind is not UnitKind.LIBRARY:
                raise NonLinkableDependencyError(str(unit.key), str(provider.key))
            provider_output = outputs.get(provider.key)
            if provider_output is None:
                raise PlanningError(
                    f"{provider.key} was not planned before its consumer {unit.key}",
                    internal_details=f"planned={sorted(str(k) for k in outputs)}",
                )
            arguments += [
                Argument(value="--extern", variable="externs"),
                Argument(value=f"{dependency.extern_name}={provider_output}", variable="externs"),
            ]
            inputs.append(provider_output)

        return PlanEntry(
            key=unit.key,
            kind=unit.kind,
            crate_name=unit.crate_name,
            output=output,
            depfile=depfile,
            source=source,
            arguments=tuple(arguments),
            inputs=tuple(inputs),
        )


def plan_build(graph: UnitGraph, config: PipelineConfig) -> BuildPlan:
    """Plan ``graph`` with a fresh CompilationPlanner."""
    return CompilationPlanner(config).plan(graph)


__all__ = [
    "Argument",
    "BuildPlan",
    "CompilationPlanner",
    "METADATA_HASH_LENGTH",
    "PlanEntry",
    "metadata_hash",
    "plan_build",
]
