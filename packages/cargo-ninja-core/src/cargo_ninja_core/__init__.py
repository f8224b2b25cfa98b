"""cargo-ninja-core: Cargo project to Ninja build plan generation.

This package provides:
- read_project: Cargo.toml + Cargo.lock -> ProjectMetadata
- build_unit_graph: ProjectMetadata -> UnitGraph (diamonds shared, cycles rejected)
- plan_build: UnitGraph -> BuildPlan (one rustc invocation per unit)
- render_plan / emit_plan: BuildPlan -> build.ninja
- generate_plan / bootstrap_plan: The whole pipeline
"""

from __future__ import annotations

__version__ = "0.1.0"

from cargo_ninja_core.config import (
    DEFAULT_PLAN_FILE_NAME,
    PipelineConfig,
    PipelineSettings,
)
from cargo_ninja_core.emitter import emit_plan, render_plan
from cargo_ninja_core.errors import (
    AmbiguousDependencyError,
    ArtifactCollisionError,
    CargoNinjaError,
    ConfigurationError,
    DependencyCycleError,
    GraphError,
    InputError,
    LockMismatchError,
    NonLinkableDependencyError,
    PlanningError,
    PlanWriteError,
    UnresolvedDependencyError,
    UnsupportedError,
)
from cargo_ninja_core.graph import Dependency, Unit, UnitGraph, build_unit_graph
from cargo_ninja_core.models import ProjectMetadata, RawDependency, RawUnit, UnitKey, UnitKind
from cargo_ninja_core.observability import configure_logging
from cargo_ninja_core.pipeline import (
    GenerationResult,
    bootstrap_plan,
    build_plan,
    generate_plan,
)
from cargo_ninja_core.planner import (
    Argument,
    BuildPlan,
    CompilationPlanner,
    PlanEntry,
    plan_build,
)
from cargo_ninja_core.reader import find_project_root, read_project

__all__ = [
    "__version__",
    # Configuration
    "PipelineConfig",
    "PipelineSettings",
    "DEFAULT_PLAN_FILE_NAME",
    "configure_logging",
    # Models
    "UnitKey",
    "UnitKind",
    "RawUnit",
    "RawDependency",
    "ProjectMetadata",
    "Unit",
    "Dependency",
    "UnitGraph",
    "Argument",
    "PlanEntry",
    "BuildPlan",
    # Pipeline phases
    "find_project_root",
    "read_project",
    "build_unit_graph",
    "CompilationPlanner",
    "plan_build",
    "render_plan",
    "emit_plan",
    "build_plan",
    "generate_plan",
    "bootstrap_plan",
    "GenerationResult",
    # Errors
    "CargoNinjaError",
    "InputError",
    "ConfigurationError",
    "LockMismatchError",
    "AmbiguousDependencyError",
    "UnsupportedError",
    "GraphError",
    "DependencyCycleError",
    "UnresolvedDependencyError",
    "PlanningError",
    "NonLinkableDependencyError",
    "ArtifactCollisionError",
    "PlanWriteError",
]
