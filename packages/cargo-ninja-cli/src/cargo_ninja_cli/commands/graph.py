"""cargo-ninja graph command - Show the unit graph as a tree."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

import click
from rich.text import Text
from rich.tree import Tree

from cargo_ninja_cli import output
from cargo_ninja_cli.project import load_config, project_root_argument

if TYPE_CHECKING:
    from cargo_ninja_core import UnitGraph, UnitKey


def render_tree(graph: UnitGraph) -> Tree:
    """Render the unit graph the way ``cargo tree`` does.

    Each unit is expanded once; later occurrences of a shared unit are
    marked with ``(*)`` instead of being repeated. Local packages are
    located relative to the top-level package, and labels wrap rather
    than being cut at the console width.
    """
    root = graph.root_unit
    tree = Tree(_text(_label(graph, root.key)))
    expanded: set[UnitKey] = {root.key}
    stack = [(tree, root.key)]

    while stack:
        node, key = stack.pop()
        children = []
        for dependency in graph[key].dependencies:
            label = _label(graph, dependency.key)
            if dependency.extern_name != graph[dependency.key].crate_name:
                label += f" as {dependency.extern_name}"
            if dependency.key in expanded:
                node.add(_text(f"{label} (*)"))
                continue
            expanded.add(dependency.key)
            children.append((node.add(_text(label)), dependency.key))
        stack.extend(reversed(children))

    return tree


def _text(label: str) -> Text:
    return Text(label, overflow="fold")


def _label(graph: UnitGraph, key: UnitKey) -> str:
    if key.source:
        return f"{key.name} v{key.version} ({key.source})"
    manifest_dir = graph[key].manifest_dir
    try:
        location = manifest_dir.relative_to(graph.root_unit.manifest_dir).as_posix()
    except ValueError:
        location = manifest_dir.as_posix()
    return f"{key.name} v{key.version} ({location})"


@click.command()
@project_root_argument
def graph(project_root: Path | None) -> None:
    """Show the crate dependency tree of a Cargo project.

    Examples:

        cargo-ninja graph

        cargo-ninja graph path/to/project
    """
    from cargo_ninja_core import CargoNinjaError, build_unit_graph, read_project

    from cargo_ninja_cli.errors import handle_pipeline_error

    config = load_config(project_root)
    try:
        unit_graph = build_unit_graph(read_project(config))
    except CargoNinjaError as e:
        handle_pipeline_error(e)

    output.console.print(render_tree(unit_graph))
