"""CLI entry point for cargo-ninja.

This module defines the main CLI group using the LazyGroup pattern:
subcommands (and the pipeline they pull in) are imported only when
invoked, keeping ``cargo-ninja --help`` fast.
"""

from __future__ import annotations

import importlib
from typing import Any

import click
import rich_click as rclick

from cargo_ninja_cli import __version__
from cargo_ninja_cli.output import colors_enabled, set_no_color

# Configure rich-click for better help formatting
rclick.rich_click.TEXT_MARKUP = "markdown"
rclick.rich_click.SHOW_ARGUMENTS = True
rclick.rich_click.GROUP_ARGUMENTS_OPTIONS = True


class LazyGroup(rclick.RichGroup):
    """Click group that loads commands lazily.

    Attributes:
        lazy_subcommands: Mapping of command names to ``module.attribute`` paths.
    """

    def __init__(
        self,
        *args: Any,
        lazy_subcommands: dict[str, str] | None = None,
        **kwargs: Any,
    ) -> None:
        """Initialize LazyGroup.

        Args:
            *args: Positional arguments for parent class.
            lazy_subcommands: Mapping of command name to module path.
                Format: {"generate": "cargo_ninja_cli.commands.generate.generate"}
            **kwargs: Keyword arguments for parent class.
        """
        super().__init__(*args, **kwargs)
        self.lazy_subcommands: dict[str, str] = lazy_subcommands or {}

    def list_commands(self, ctx: click.Context) -> list[str]:
        commands = set(super().list_commands(ctx))
        commands.update(self.lazy_subcommands.keys())
        return sorted(commands)

    def get_command(self, ctx: click.Context, cmd_name: str) -> click.Command | None:
        """Get a command by name, loading lazily if needed.

        Args:
            ctx: Click context.
            cmd_name: Name of the command to get.

        Returns:
            Click Command instance, or None if not found.
        """
        cmd = super().get_command(ctx, cmd_name)  # type: ignore[arg-type]
        if cmd is not None:
            return cmd

        if cmd_name not in self.lazy_subcommands:
            return None

        module_name, attr_name = self.lazy_subcommands[cmd_name].rsplit(".", 1)
        mod = importlib.import_module(module_name)
        return getattr(mod, attr_name)  # type: ignore[no-any-return]


LAZY_COMMANDS = {
    "generate": "cargo_ninja_cli.commands.generate.generate",
    "build": "cargo_ninja_cli.commands.build.build",
    "graph": "cargo_ninja_cli.commands.graph.graph",
    "plan": "cargo_ninja_cli.commands.plan.plan",
    "bootstrap": "cargo_ninja_cli.commands.bootstrap.bootstrap",
}


@click.command(cls=LazyGroup, lazy_subcommands=LAZY_COMMANDS)
@click.version_option(version=__version__, prog_name="cargo-ninja")
@click.option(
    "--no-color",
    is_flag=True,
    default=False,
    help="Disable colored output.",
    is_eager=True,
    expose_value=False,
    callback=lambda ctx, param, value: set_no_color(value) if value else None,
)
@click.option(
    "-v",
    "--verbose",
    is_flag=True,
    default=False,
    help="Log every pipeline phase to stderr.",
)
def cli(verbose: bool) -> None:
    """cargo-ninja - Build Cargo projects with Ninja.

    Reads `Cargo.toml` and `Cargo.lock`, plans one `rustc` invocation per
    crate and writes a `build.ninja` that builds the project without cargo.

    **Getting Started:**

    - `cargo-ninja generate` - Write build.ninja for the current project
    - `cargo-ninja build` - Generate if needed, then run ninja
    - `cargo-ninja graph` - Show the crate dependency tree
    - `cargo-ninja plan` - Print the planned compilations as JSON
    """
    from cargo_ninja_core.observability import configure_logging

    configure_logging(verbose=verbose, colors=colors_enabled())


if __name__ == "__main__":
    cli()
