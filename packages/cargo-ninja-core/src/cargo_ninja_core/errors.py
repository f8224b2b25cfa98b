"""Custom exception hierarchy for cargo-ninja.

This module defines the exception classes raised by every pipeline phase:
- CargoNinjaError: Base exception for all cargo-ninja errors
- InputError: Manifest, lock file or source tree problems
- GraphError: Dependency cycles and unresolved dependency keys
- PlanningError: Internal invariant violations found while planning
- PlanWriteError: The build plan could not be written

Every class carries a ``phase`` used as the user-visible message prefix,
so the command line can report which phase failed without inspecting
the exception type.

- User-facing messages are safe to display
- Technical details logged internally via structlog
"""

from __future__ import annotations

from collections.abc import Sequence

import structlog

logger = structlog.get_logger(__name__)


class CargoNinjaError(Exception):
    """Base exception for cargo-ninja.

    Args:
        user_message: Message to display to the user.
        internal_details: Optional technical details for logging. This is
            logged internally but never shown on the console.

    Example:
        >>> raise CargoNinjaError(
        ...     "Build plan could not be generated",
        ...     internal_details="unit table empty after reading Cargo.lock",
        ... )
    """

    phase = "error"

    def __init__(
        self,
        user_message: str,
        *,
        internal_details: str | None = None,
    ) -> None:
        """Initialize CargoNinjaError with user message and optional internal details.

        Args:
            user_message: Message to display to the user.
            internal_details: Technical details for internal logging only.
        """
        super().__init__(user_message)
        self.user_message = user_message

        if internal_details:
            logger.error(
                "cargo_ninja_error",
                error_type=self.__class__.__name__,
                phase=self.phase,
                user_message=user_message,
                internal_details=internal_details,
            )

    def prefixed_message(self) -> str:
        """Return the user message prefixed with the failing phase.

        Example:
            >>> DependencyCycleError(["a v0.1.0", "b v0.1.0", "a v0.1.0"]).prefixed_message()
            'graph error: dependency cycle detected: a v0.1.0 -> b v0.1.0 -> a v0.1.0'
        """
        return f"{self.phase} error: {self.user_message}"


class InputError(CargoNinjaError):
    """Raised when the manifest, lock file or dependency sources are unusable."""

    phase = "input"


class ConfigurationError(InputError):
    """Raised when an input file is missing, malformed or fails validation.

    Provides file path, line and field context for actionable error messages.

    Attributes:
        file_path: Path to the offending file (if known).
        field_path: Dot-separated path to the invalid field (e.g., "package.edition").
        line_number: Line number in the file where the error occurred (if available).

    Example:
        >>> raise ConfigurationError(
        ...     "Invalid TOML",
        ...     file_path="Cargo.lock",
        ...     line_number=12,
        ... )
    """

    def __init__(
        self,
        user_message: str,
        *,
        file_path: str | None = None,
        field_path: str | None = None,
        line_number: int | None = None,
        internal_details: str | None = None,
    ) -> None:
        """Initialize ConfigurationError with context.

        Args:
            user_message: Message to display to the user.
            file_path: Path to the file (optional).
            field_path: Dot-separated path to the field (optional).
            line_number: Line number in the file (optional).
            internal_details: Technical details for internal logging only.
        """
        context_parts: list[str] = []
        if file_path:
            context_parts.append(f"in {file_path}")
        if line_number:
            context_parts.append(f"line {line_number}")
        if field_path:
            context_parts.append(f"field '{field_path}'")

        if context_parts:
            full_message = f"{user_message} ({', '.join(context_parts)})"
        else:
            full_message = user_message

        super().__init__(full_message, internal_details=internal_details)

        self.file_path = file_path
        self.field_path = field_path
        self.line_number = line_number


class LockMismatchError(InputError):
    """Raised when a manifest declares a dependency the lock file does not resolve.

    The lock file is authoritative; running ``cargo generate-lockfile`` (or
    any cargo command that updates Cargo.lock) is the expected fix.

    Attributes:
        consumer: Display name of the unit declaring the dependency.
        dependency: Name of the missing dependency.
    """

    def __init__(
        self,
        consumer: str,
        dependency: str,
        *,
        internal_details: str | None = None,
    ) -> None:
        user_message = (
            f"{consumer} depends on '{dependency}', which is missing from Cargo.lock. "
            "Run 'cargo generate-lockfile' to update the lock file"
        )
        super().__init__(user_message, internal_details=internal_details)
        self.consumer = consumer
        self.dependency = dependency


class AmbiguousDependencyError(InputError):
    """Raised when a lock file dependency reference matches several packages.

    Attributes:
        reference: The dependency reference as written in Cargo.lock.
        candidates: Display names of every matching package.
    """

    def __init__(
        self,
        reference: str,
        candidates: Sequence[str],
        *,
        internal_details: str | None = None,
    ) -> None:
        user_message = (
            f"dependency '{reference}' is ambiguous in Cargo.lock; "
            f"it matches {', '.join(candidates)}"
        )
        super().__init__(user_message, internal_details=internal_details)
        self.reference = reference
        self.candidates = list(candidates)


class UnsupportedError(InputError):
    """Raised when a unit relies on a capability cargo-ninja does not model.

    Build scripts, procedural macros, feature flags, native ``links`` and
    workspaces are rejected outright rather than approximated.
    """


class GraphError(CargoNinjaError):
    """Raised when the unit graph cannot be constructed."""

    phase = "graph"


class DependencyCycleError(GraphError):
    """Raised when the dependency walk re-enters a unit on the active path.

    Attributes:
        chain: Display names along the cycle, first and last being the same unit.
    """

    def __init__(
        self,
        chain: Sequence[str],
        *,
        internal_details: str | None = None,
    ) -> None:
        user_message = f"dependency cycle detected: {' -> '.join(chain)}"
        super().__init__(user_message, internal_details=internal_details)
        self.chain = list(chain)


class UnresolvedDependencyError(GraphError):
    """Raised when an edge points at a unit key that has no metadata.

    Attributes:
        key: Display name of the missing unit.
        consumer: Display name of the unit referencing it.
    """

    def __init__(
        self,
        key: str,
        consumer: str,
        *,
        internal_details: str | None = None,
    ) -> None:
        user_message = f"{consumer} depends on {key}, which was not read from the lock file"
        super().__init__(user_message, internal_details=internal_details)
        self.key = key
        self.consumer = consumer


class PlanningError(CargoNinjaError):
    """Raised when planning hits an invariant violation.

    These indicate malformed upstream input or a bug in path derivation
    and are never worked around.
    """

    phase = "planning"


class NonLinkableDependencyError(PlanningError):
    """Raised when a unit would link against an executable unit."""

    def __init__(
        self,
        consumer: str,
        provider: str,
        *,
        internal_details: str | None = None,
    ) -> None:
        user_message = f"{consumer} cannot link against {provider}: it builds an executable"
        super().__init__(user_message, internal_details=internal_details)
        self.consumer = consumer
        self.provider = provider


class ArtifactCollisionError(PlanningError):
    """Raised when two units derive the same artifact path."""

    def __init__(
        self,
        path: str,
        first: str,
        second: str,
        *,
        internal_details: str | None = None,
    ) -> None:
        user_message = f"artifact path {path} is claimed by both {first} and {second}"
        super().__init__(user_message, internal_details=internal_details)
        self.path = path
        self.first = first
        self.second = second


class PlanWriteError(CargoNinjaError):
    """Raised when the build plan cannot be written to its destination.

    Attributes:
        path: Destination path of the plan file.
        os_error: The underlying operating system error.
    """

    phase = "i/o"

    def __init__(self, path: str, os_error: OSError) -> None:
        reason = os_error.strerror or str(os_error)
        user_message = f"cannot write build plan to {path}: {reason}"
        super().__init__(user_message, internal_details=repr(os_error))
        self.path = path
        self.os_error = os_error
