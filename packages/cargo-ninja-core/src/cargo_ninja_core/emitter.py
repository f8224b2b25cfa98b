"""Build-plan emission for cargo-ninja.

This module serializes a BuildPlan into a Ninja build file:
- NinjaWriter: Minimal writer for Ninja's line-oriented syntax
- render_plan: BuildPlan -> build file text (no I/O)
- emit_plan: Render and atomically write to the destination

Entries whose command lines differ only in per-entry values share one
rule; the differing values are bound on each build statement. Provider
artifacts are implicit inputs (``|``) so consumers rebuild when a
provider changes.
"""

from __future__ import annotations

import os
import shlex
from collections.abc import Iterable, Sequence
from pathlib import Path

import structlog

from cargo_ninja_core.config import PipelineConfig
from cargo_ninja_core.errors import PlanWriteError
from cargo_ninja_core.planner import RUSTC_VARIABLE, Argument, BuildPlan, PlanEntry

logger = structlog.get_logger(__name__)

NINJA_REQUIRED_VERSION = "1.10"

HEADER = (
    "This file is generated by cargo-ninja from Cargo.toml and Cargo.lock.",
    "Do not edit it; run 'cargo-ninja generate' instead.",
)

REGENERATE_RULE = "regenerate"


def escape(value: str) -> str:
    """Escape a variable value or command for Ninja.

    Raises:
        ValueError: If the value contains a newline, which Ninja cannot represent.
    """
    if "\n" in value:
        raise ValueError(f"Ninja values cannot contain newlines: {value!r}")
    return value.replace("$", "$$")


def escape_path(path: str) -> str:
    """Escape a path for use in a build statement."""
    return escape(path).replace(" ", "$ ").replace(":", "$:")


class NinjaWriter:
    """Accumulates Ninja statements.

    Example:
        >>> writer = NinjaWriter()
        >>> writer.variable("rustc", "rustc")
        >>> writer.build(["app"], "phony", ["target/debug/app"])
        >>> writer.text()
        'rustc = rustc\\nbuild app: phony target/debug/app\\n'
    """

    def __init__(self) -> None:
        self._lines: list[str] = []

    def comment(self, text: str) -> None:
        self._lines.append(f"# {text}")

    def newline(self) -> None:
        self._lines.append("")

    def variable(self, name: str, value: str, indent: int = 0) -> None:
        self._lines.append(f"{'  ' * indent}{name} = {value}")

    def rule(self, name: str, command: str, **settings: str) -> None:
        self._lines.append(f"rule {name}")
        self.variable("command", command, indent=1)
        for key, value in settings.items():
            self.variable(key, value, indent=1)

    def build(
        self,
        outputs: Sequence[str],
        rule: str,
        inputs: Iterable[str] = (),
        implicit: Iterable[str] = (),
        variables: Iterable[tuple[str, str]] = (),
    ) -> None:
        parts = ["build " + " ".join(escape_path(out) for out in outputs) + f": {rule}"]
        parts.extend(escape_path(path) for path in inputs)
        implicit = [escape_path(path) for path in implicit]
        if implicit:
            parts.append("|")
            parts.extend(implicit)
        self._lines.append(" ".join(parts))
        for name, value in variables:
            self.variable(name, escape(value), indent=1)

    def default(self, targets: Sequence[str]) -> None:
        self._lines.append("default " + " ".join(escape_path(target) for target in targets))

    def text(self) -> str:
        return "\n".join(self._lines) + "\n"


def command_shape(arguments: Sequence[Argument]) -> tuple[str, ...]:
    """Return the rule form of a command line.

    Per-entry arguments become ``$variable`` references (consecutive
    arguments of one variable collapse into a single reference); literal
    arguments are shell-quoted and Ninja-escaped.
    """
    shape: list[str] = []
    previous_variable: str | None = None
    for argument in arguments:
        if argument.variable is not None:
            if argument.variable != previous_variable:
                shape.append(f"${argument.variable}")
            previous_variable = argument.variable
            continue
        previous_variable = None
        if argument.template is not None:
            shape.append(argument.template)
        else:
            shape.append(escape(shlex.quote(argument.value)))
    return tuple(shape)


def entry_bindings(entry: PlanEntry) -> list[tuple[str, str]]:
    """Return the per-statement variable bindings of an entry, in first-use order."""
    values: dict[str, list[str]] = {}
    for argument in entry.arguments:
        if argument.variable is not None:
            values.setdefault(argument.variable, []).append(shlex.quote(argument.value))
    return [(name, " ".join(parts)) for name, parts in values.items()]


def assign_rules(entries: Sequence[PlanEntry]) -> tuple[dict[tuple[str, ...], str], list[str]]:
    """Name one rule per distinct command shape.

    The first shape of each kind is ``rustc_<kind>``; later shapes of the
    same kind are numbered from 2, in plan order.

    Returns:
        Tuple of (shape -> rule name, rule names for each entry).
    """
    names: dict[tuple[str, ...], str] = {}
    per_kind: dict[str, int] = {}
    entry_rules: list[str] = []
    for entry in entries:
        shape = command_shape(entry.arguments)
        if shape not in names:
            count = per_kind.get(entry.kind.value, 0) + 1
            per_kind[entry.kind.value] = count
            base = f"rustc_{entry.kind.value}"
            names[shape] = base if count == 1 else f"{base}_{count}"
        entry_rules.append(names[shape])
    return names, entry_rules


def render_plan(
    plan: BuildPlan,
    config: PipelineConfig,
    destination: Path | None = None,
) -> str:
    """Render a BuildPlan as Ninja build file text.

    The output depends only on the plan and configuration, so rendering an
    unchanged project twice yields identical text.

    Args:
        plan: Plan to render.
        config: Pipeline configuration.
        destination: Where the plan will be written (names the output of
            the regeneration statement). Defaults to the project's plan path.

    Returns:
        Build file text.
    """
    destination = destination or config.default_plan_path
    writer = NinjaWriter()
    for line in HEADER:
        writer.comment(line)
    writer.newline()
    writer.variable("ninja_required_version", NINJA_REQUIRED_VERSION)
    writer.variable("builddir", escape(config.plan_path(config.resolved_build_root)))
    writer.variable(RUSTC_VARIABLE, escape(shlex.quote(plan.rustc)))
    writer.newline()

    shapes, entry_rules = assign_rules(plan.entries)
    for shape, name in shapes.items():
        writer.rule(
            name,
            " ".join(shape),
            description="RUSTC $out",
            depfile="$out.d",
            deps="gcc",
        )
        writer.newline()

    for entry, rule in zip(plan.entries, entry_rules, strict=True):
        writer.build(
            [entry.output],
            rule,
            inputs=[entry.source],
            implicit=entry.inputs,
            variables=entry_bindings(entry),
        )
    writer.newline()

    if config.regenerate:
        _write_regeneration(writer, config, destination)

    top_output = plan.top_level_entry.output
    if plan.default_target != top_output:
        writer.build([plan.default_target], "phony", inputs=[top_output])
    writer.default([plan.default_target])
    return writer.text()


def _write_regeneration(writer: NinjaWriter, config: PipelineConfig, destination: Path) -> None:
    command = [*config.generator_command, ".", "-o", config.plan_path(destination)]
    if config.profile != "dev":
        command += ["--profile", config.profile]
    if config.build_root is not None:
        command += ["--build-root", config.plan_path(config.resolved_build_root)]
    writer.rule(
        REGENERATE_RULE,
        escape(shlex.join(command)),
        description="Regenerating $out",
        generator="1",
    )
    writer.build(
        [config.plan_path(destination)],
        REGENERATE_RULE,
        inputs=[config.plan_path(config.manifest_path), config.plan_path(config.lock_path)],
    )
    writer.newline()


def atomic_write_text(path: Path, text: str) -> None:
    """Atomically write text to a file, avoiding partial writes.

    The text goes to a temporary sibling first and is renamed over ``path``
    only once fully written; on failure the temporary file is removed and
    ``path`` is left untouched.

    Raises:
        OSError: If any step fails.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp = path.with_name(f".{path.name}.tmp.{os.getpid()}")
    try:
        with tmp.open("w", encoding="utf-8", newline="\n") as f:
            f.write(text)
            f.flush()
            os.fsync(f.fileno())
        tmp.replace(path)
    except OSError:
        tmp.unlink(missing_ok=True)
        raise


def emit_plan(plan: BuildPlan, config: PipelineConfig, destination: Path | None = None) -> Path:
    """Render ``plan`` and write it to ``destination``.

    Args:
        plan: Plan to write.
        config: Pipeline configuration.
        destination: Output file. Defaults to ``<project_root>/build.ninja``.

    Returns:
        The path written.

    Raises:
        PlanWriteError: If the file cannot be written. The destination is
            left as it was.
    """
    destination = destination or config.default_plan_path
    text = render_plan(plan, config, destination)
    try:
        atomic_write_text(destination, text)
    except OSError as e:
        raise PlanWriteError(str(destination), e) from e

    logger.info(
        "plan_written",
        component="emitter",
        path=str(destination),
        entries=len(plan),
        bytes=len(text.encode("utf-8")),
    )
    return destination


__all__ = [
    "NinjaWriter",
    "assign_rules",
    "atomic_write_text",
    "command_shape",
    "emit_plan",
    "entry_bindings",
    "escape",
    "escape_path",
    "render_plan",
]
