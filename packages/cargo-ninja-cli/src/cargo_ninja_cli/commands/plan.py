"""cargo-ninja plan command - Print the planned compilations as JSON."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Any

import click

from cargo_ninja_cli.output import print_json
from cargo_ninja_cli.project import load_config, project_root_argument

if TYPE_CHECKING:
    from cargo_ninja_core import BuildPlan


def plan_document(build_plan: BuildPlan) -> dict[str, Any]:
    """Convert a BuildPlan into a JSON document.

    Each entry carries its argv as ``command`` next to the annotated
    argument list, so consumers do not have to reassemble it.
    """
    document = build_plan.model_dump(mode="json")
    for entry, data in zip(build_plan.entries, document["entries"], strict=True):
        data["command"] = entry.command_line
    return document


@click.command()
@project_root_argument
@click.option(
    "--profile",
    type=click.Choice(["dev", "release"]),
    default=None,
    help="Build profile [default: dev, or CARGO_NINJA_PROFILE]",
)
def plan(project_root: Path | None, profile: str | None) -> None:
    """Print the planned rustc invocations as JSON.

    Nothing is written; the output lists one entry per compilation unit,
    providers before consumers.

    Examples:

        cargo-ninja plan

        cargo-ninja plan --profile release | jq '.entries[].output'
    """
    from cargo_ninja_core import CargoNinjaError, build_plan

    from cargo_ninja_cli.errors import handle_pipeline_error

    config = load_config(project_root, profile=profile)
    try:
        result = build_plan(config)
    except CargoNinjaError as e:
        handle_pipeline_error(e)

    print_json(plan_document(result.plan))
