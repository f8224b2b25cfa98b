"""cargo-ninja generate command - Write build.ninja for a Cargo project."""

from __future__ import annotations

from pathlib import Path

import click

from cargo_ninja_cli.output import success
from cargo_ninja_cli.project import load_config, project_root_argument


@click.command()
@project_root_argument
@click.option(
    "-o",
    "--output",
    "output_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Plan file to write [default: <PROJECT_ROOT>/build.ninja]",
)
@click.option(
    "--profile",
    type=click.Choice(["dev", "release"]),
    default=None,
    help="Build profile [default: dev, or CARGO_NINJA_PROFILE]",
)
@click.option(
    "--build-root",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Artifact directory [default: target/<profile>]",
)
@click.option(
    "--no-regenerate",
    is_flag=True,
    default=False,
    help="Do not rebuild the plan when Cargo.toml or Cargo.lock change.",
)
def generate(
    project_root: Path | None,
    output_path: Path | None,
    profile: str | None,
    build_root: Path | None,
    no_regenerate: bool,
) -> None:
    """Write a Ninja build plan for a Cargo project.

    Without PROJECT_ROOT, the nearest directory holding Cargo.toml above the
    current directory is used.

    Examples:

        cargo-ninja generate

        cargo-ninja generate path/to/project --profile release

        cargo-ninja generate -o out/build.ninja --build-root out
    """
    from cargo_ninja_core import CargoNinjaError, generate_plan

    from cargo_ninja_cli.errors import handle_pipeline_error

    config = load_config(
        project_root,
        profile=profile,
        build_root=build_root,
        regenerate=False if no_regenerate else None,
    )
    destination = output_path.resolve() if output_path is not None else None

    try:
        result = generate_plan(config, destination)
    except CargoNinjaError as e:
        handle_pipeline_error(e)

    success(f"Wrote {result.path} ({len(result.plan)} compilation units)")
