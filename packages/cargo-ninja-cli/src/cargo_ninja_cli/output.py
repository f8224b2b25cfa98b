"""Rich console output utilities for cargo-ninja-cli.

Status messages go to stdout and problems to stderr, so the data printed
by ``cargo-ninja plan`` can be piped. Both consoles respect the NO_COLOR
environment variable and the ``--no-color`` flag.
"""

from __future__ import annotations

import json
import os
from typing import Any

from rich.console import Console
from rich.markup import escape

# Rich automatically respects NO_COLOR, but we also support --no-color flag
_force_no_color = os.environ.get("NO_COLOR") is not None


def create_console(no_color: bool = False, stderr: bool = False) -> Console:
    """Create a Rich Console instance with appropriate color settings.

    Args:
        no_color: If True, disable colored output. Also respects NO_COLOR env var.
        stderr: If True, write to stderr instead of stdout.

    Returns:
        Configured Console instance.
    """
    disabled = no_color or _force_no_color
    return Console(
        force_terminal=False if disabled else None,
        no_color=disabled,
        stderr=stderr,
        soft_wrap=True,
    )


console = create_console()
err_console = create_console(stderr=True)


def success(message: str, **kwargs: Any) -> None:
    """Print a success message with green checkmark.

    Example:
        >>> success("Wrote build.ninja")
        ✓ Wrote build.ninja
    """
    console.print(f"[green]✓[/green] {escape(message)}", **kwargs)


def error(message: str, **kwargs: Any) -> None:
    """Print an error message with red X on stderr.

    Args:
        message: The error message to display. Square brackets are printed
            literally (``[dependencies]`` is not Rich markup).
        **kwargs: Additional arguments passed to console.print().

    Example:
        >>> error("input error: Cargo.lock not found")
        ✗ input error: Cargo.lock not found
    """
    err_console.print(f"[red]✗[/red] {escape(message)}", **kwargs)


def warning(message: str, **kwargs: Any) -> None:
    """Print a warning message with yellow triangle on stderr."""
    err_console.print(f"[yellow]⚠[/yellow] {escape(message)}", **kwargs)


def info(message: str, **kwargs: Any) -> None:
    """Print an informational message."""
    console.print(escape(message), **kwargs)


def print_json(data: dict[str, Any], **kwargs: Any) -> None:
    """Print JSON data with syntax highlighting.

    Args:
        data: JSON-compatible dictionary.
        **kwargs: Additional arguments passed to console.print_json().
    """
    console.print_json(json.dumps(data), **kwargs)


def set_no_color(no_color: bool) -> None:
    """Update the global consoles to enable/disable colors.

    Args:
        no_color: If True, disable colored output.
    """
    global console, err_console
    console = create_console(no_color=no_color)
    err_console = create_console(no_color=no_color, stderr=True)


def colors_enabled() -> bool:
    """Whether the stdout console currently emits colors."""
    return not console.no_color
