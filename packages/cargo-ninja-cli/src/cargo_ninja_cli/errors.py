"""CLI error handling for cargo-ninja-cli.

Wraps cargo_ninja_core exceptions into user-friendly messages with
appropriate exit codes. Every pipeline failure is reported as one line
prefixed by the phase that failed (``input error: ...``).
"""

from __future__ import annotations

from typing import TYPE_CHECKING, NoReturn

import click
from pydantic import ValidationError as PydanticValidationError

from cargo_ninja_core.errors import CargoNinjaError, PlanWriteError

from cargo_ninja_cli.output import error

if TYPE_CHECKING:
    from pydantic_core import ErrorDetails

# Exit codes following sysexits.h convention
EXIT_SUCCESS = 0
EXIT_USER_ERROR = 1  # Input, graph and planning errors
EXIT_SYSTEM_ERROR = 2  # I/O errors, missing programs


class CLIError(click.ClickException):
    """CLI-specific exception with exit code support.

    Attributes:
        message: User-facing error message.
        exit_code: Exit code for the CLI (default: 1).
    """

    def __init__(self, message: str, exit_code: int = EXIT_USER_ERROR) -> None:
        super().__init__(message)
        self.exit_code = exit_code

    def show(self, file: object = None) -> None:
        """Display the error message using Rich formatting.

        Args:
            file: Output file (unused, for Click compatibility).
        """
        error(self.format_message())


def format_pydantic_error(err: PydanticValidationError) -> str:
    """Format a Pydantic validation error into a user-friendly message.

    Example:
        >>> format_pydantic_error(err)
        "Validation failed:\\n  - profile: Input should be 'dev' or 'release'"
    """
    errors: list[ErrorDetails] = err.errors()
    lines = ["Validation failed:"]

    for e in errors:
        loc = ".".join(str(x) for x in e["loc"])
        lines.append(f"  - {loc}: {e['msg']}")

    return "\n".join(lines)


def exit_code_for(err: CargoNinjaError) -> int:
    """Map a pipeline error to its exit code.

    Example:
        >>> exit_code_for(PlanWriteError("build.ninja", OSError(28, "No space left on device")))
        2
    """
    if isinstance(err, PlanWriteError):
        return EXIT_SYSTEM_ERROR
    return EXIT_USER_ERROR


def handle_pipeline_error(err: CargoNinjaError) -> NoReturn:
    """Convert a pipeline error into a CLIError.

    Args:
        err: Error raised by cargo_ninja_core.

    Raises:
        CLIError: Always, with the phase-prefixed message.
    """
    raise CLIError(err.prefixed_message(), exit_code=exit_code_for(err)) from err


def handle_settings_error(err: PydanticValidationError) -> NoReturn:
    """Report invalid CARGO_NINJA_* environment settings or option values.

    Raises:
        CLIError: Always raises with the formatted validation error.
    """
    raise CLIError(f"input error: invalid settings\n{format_pydantic_error(err)}") from err


def handle_missing_program(program: str, reason: str = "program not found") -> NoReturn:
    """Report a program that could not be started.

    Args:
        program: Program name or path.
        reason: System error text.

    Raises:
        CLIError: Always raises with a system error exit code.
    """
    raise CLIError(
        f"i/o error: cannot run '{program}': {reason}\n\n"
        "Install ninja or pass its location with --ninja.",
        exit_code=EXIT_SYSTEM_ERROR,
    )


__all__ = [
    "CLIError",
    "EXIT_SUCCESS",
    "EXIT_SYSTEM_ERROR",
    "EXIT_USER_ERROR",
    "exit_code_for",
    "format_pydantic_error",
    "handle_missing_program",
    "handle_pipeline_error",
    "handle_settings_error",
]
