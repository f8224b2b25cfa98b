"""cargo-ninja build command - Generate the plan if needed, then run ninja."""

from __future__ import annotations

import subprocess
from pathlib import Path

import click

from cargo_ninja_cli.output import info
from cargo_ninja_cli.project import load_config, project_root_argument


@click.command()
@project_root_argument
@click.option(
    "-f",
    "--file",
    "plan_file",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Plan file [default: <PROJECT_ROOT>/build.ninja]",
)
@click.option(
    "--ninja",
    "ninja_program",
    default="ninja",
    envvar="CARGO_NINJA_NINJA",
    show_default=True,
    help="Ninja program to run.",
)
@click.option(
    "-t",
    "--target",
    "targets",
    multiple=True,
    help="Ninja target to build (repeatable) [default: the plan's default target]",
)
@click.pass_context
def build(
    ctx: click.Context,
    project_root: Path | None,
    plan_file: Path | None,
    ninja_program: str,
    targets: tuple[str, ...],
) -> None:
    """Build a Cargo project with Ninja.

    Generates the plan first when it does not exist yet; afterwards the
    plan regenerates itself when Cargo.toml or Cargo.lock change. Exits
    with ninja's exit status.

    Examples:

        cargo-ninja build

        cargo-ninja build path/to/project --target app
    """
    from cargo_ninja_core import CargoNinjaError, generate_plan

    from cargo_ninja_cli.errors import handle_missing_program, handle_pipeline_error

    config = load_config(project_root)
    plan_path = plan_file.resolve() if plan_file is not None else config.default_plan_path

    if not plan_path.exists():
        info(f"Generating {plan_path}")
        try:
            generate_plan(config, plan_path)
        except CargoNinjaError as e:
            handle_pipeline_error(e)

    # ninja resolves -f after -C; the name must match the plan's own
    # regeneration output for generator restarts to work
    command = [
        ninja_program,
        "-C",
        str(config.project_root),
        "-f",
        config.plan_path(plan_path),
        *targets,
    ]
    try:
        completed = subprocess.run(command, check=False)
    except OSError as e:
        handle_missing_program(ninja_program, e.strerror or str(e))

    ctx.exit(completed.returncode)
