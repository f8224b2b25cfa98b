"""End-to-end pipeline for cargo-ninja.

read -> build graph -> plan -> emit, each phase failing fast. Nothing is
written unless every earlier phase succeeded.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

import structlog

from cargo_ninja_core.config import PipelineConfig, PipelineSettings
from cargo_ninja_core.emitter import emit_plan
from cargo_ninja_core.graph import UnitGraph, build_unit_graph
from cargo_ninja_core.planner import BuildPlan, plan_build
from cargo_ninja_core.reader import find_project_root, read_project

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class GenerationResult:
    """Outcome of a pipeline run.

    Attributes:
        config: Configuration the run used.
        graph: Unit graph.
        plan: Build plan.
        path: File the plan was written to (None when not written).
    """

    config: PipelineConfig
    graph: UnitGraph
    plan: BuildPlan
    path: Path | None = None


def build_plan(config: PipelineConfig) -> GenerationResult:
    """Run the read, graph and plan phases without writing anything."""
    metadata = read_project(config)
    graph = build_unit_graph(metadata)
    plan = plan_build(graph, config)
    return GenerationResult(config=config, graph=graph, plan=plan)


def generate_plan(config: PipelineConfig, destination: Path | None = None) -> GenerationResult:
    """Run the full pipeline and write the build plan.

    Args:
        config: Pipeline configuration.
        destination: Plan file. Defaults to ``config.default_plan_path``.

    Returns:
        GenerationResult with the written path.

    Raises:
        CargoNinjaError: Any phase failure; see cargo_ninja_core.errors.

    Example:
        >>> config = PipelineSettings().to_config(Path("my-app"))
        >>> result = generate_plan(config)
        >>> result.path
        PosixPath('/work/my-app/build.ninja')
    """
    log = logger.bind(component="pipeline", project_root=str(config.project_root))
    log.info("generation_started", profile=config.profile)

    result = build_plan(config)
    path = emit_plan(result.plan, config, destination)

    log.info("generation_completed", path=str(path), units=len(result.graph))
    return GenerationResult(config=config, graph=result.graph, plan=result.plan, path=path)


def bootstrap_plan(
    source_tree: Path | None = None,
    settings: PipelineSettings | None = None,
    destination: Path | None = None,
) -> GenerationResult:
    """Regenerate the build plan of the tool's own source tree.

    The run gets its own PipelineConfig, so it never shares a build root
    with a project run made in the same process.

    Args:
        source_tree: Tree to plan. Defaults to ``settings.self_tree``, then to
            the nearest directory holding Cargo.toml above the current directory.
        settings: Environment settings. Defaults to a fresh PipelineSettings.
        destination: Plan file. Defaults to ``<tree>/build.ninja``.

    Returns:
        GenerationResult of the bootstrap run.
    """
    settings = settings or PipelineSettings()
    tree = source_tree or settings.self_tree or find_project_root(Path.cwd())
    config = settings.to_config(tree)
    logger.info("bootstrap_started", component="pipeline", source_tree=str(config.project_root))
    return generate_plan(config, destination)


__all__ = [
    "GenerationResult",
    "bootstrap_plan",
    "build_plan",
    "generate_plan",
]
