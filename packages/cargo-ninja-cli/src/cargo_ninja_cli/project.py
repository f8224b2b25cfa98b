"""Project discovery shared by the cargo-ninja commands."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Any

import click
from pydantic import ValidationError as PydanticValidationError

from cargo_ninja_cli.errors import handle_pipeline_error, handle_settings_error

if TYPE_CHECKING:
    from cargo_ninja_core import PipelineConfig


def load_config(project_root: Path | None, **overrides: Any) -> PipelineConfig:
    """Build the PipelineConfig for a command invocation.

    Args:
        project_root: Directory given on the command line. When omitted, the
            nearest directory holding Cargo.toml above the current directory.
        **overrides: Command-line values taking precedence over the
            environment (None values are ignored).

    Returns:
        PipelineConfig for the run.

    Raises:
        CLIError: If no project root can be found or the settings are invalid.
    """
    # Import here to avoid heavy imports at CLI startup
    from cargo_ninja_core import CargoNinjaError, PipelineSettings, find_project_root

    try:
        root = project_root if project_root is not None else find_project_root(Path.cwd())
        return PipelineSettings().to_config(root, **overrides)
    except CargoNinjaError as e:
        handle_pipeline_error(e)
    except PydanticValidationError as e:
        handle_settings_error(e)


project_root_argument = click.argument(
    "project_root",
    required=False,
    type=click.Path(exists=True, file_okay=False, path_type=Path),
)
