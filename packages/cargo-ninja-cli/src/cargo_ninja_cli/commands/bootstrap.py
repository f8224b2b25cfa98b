"""cargo-ninja bootstrap command - Regenerate the tool's own build plan."""

from __future__ import annotations

from pathlib import Path

import click
from pydantic import ValidationError as PydanticValidationError

from cargo_ninja_cli.output import success


@click.command()
@click.option(
    "-o",
    "--output",
    "output_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Plan file to write [default: <source tree>/build.ninja]",
)
def bootstrap(output_path: Path | None) -> None:
    """Regenerate the build plan of the tool's own source tree.

    The source tree is CARGO_NINJA_SELF_TREE when set, otherwise the nearest
    directory holding Cargo.toml above the current directory. The run uses
    its own configuration and never shares a build root with other runs.

    Examples:

        cargo-ninja bootstrap

        CARGO_NINJA_SELF_TREE=~/src/cargo-ninja cargo-ninja bootstrap -o stage1.ninja
    """
    from cargo_ninja_core import CargoNinjaError, bootstrap_plan

    from cargo_ninja_cli.errors import handle_pipeline_error, handle_settings_error

    destination = output_path.resolve() if output_path is not None else None
    try:
        result = bootstrap_plan(destination=destination)
    except CargoNinjaError as e:
        handle_pipeline_error(e)
    except PydanticValidationError as e:
        handle_settings_error(e)

    success(f"Wrote {result.path} ({len(result.plan)} compilation units)")
