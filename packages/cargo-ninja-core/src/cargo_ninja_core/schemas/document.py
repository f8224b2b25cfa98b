"""TOML document loading shared by the manifest and lock file models.

Turns tomllib and pydantic failures into ConfigurationError so callers
only ever see one exception type per malformed input file.
"""

from __future__ import annotations

import re
import tomllib
from pathlib import Path
from typing import TYPE_CHECKING, Any, TypeVar

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from cargo_ninja_core.errors import ConfigurationError

if TYPE_CHECKING:
    from pydantic_core import ErrorDetails

ModelT = TypeVar("ModelT", bound=BaseModel)

# tomllib reports positions as "(at line 3, column 7)"
_TOML_POSITION = re.compile(r"at line (\d+), column (\d+)")


def load_toml(path: Path) -> dict[str, Any]:
    """Read and parse a TOML file.

    Args:
        path: File to read.

    Returns:
        The parsed document.

    Raises:
        ConfigurationError: If the file is missing, unreadable or not valid TOML.
    """
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        raise ConfigurationError("File not found", file_path=str(path)) from None
    except (OSError, UnicodeDecodeError) as e:
        raise ConfigurationError(
            f"Cannot read file: {e}",
            file_path=str(path),
            internal_details=repr(e),
        ) from e

    try:
        return tomllib.loads(text)
    except tomllib.TOMLDecodeError as e:
        message = str(e)
        match = _TOML_POSITION.search(message)
        line_number = int(match.group(1)) if match else None
        reason = _TOML_POSITION.sub("", message).rstrip(" ()")
        raise ConfigurationError(
            f"Invalid TOML: {reason}",
            file_path=str(path),
            line_number=line_number,
        ) from e


def format_validation_errors(err: PydanticValidationError) -> tuple[str, str | None]:
    """Summarize a pydantic validation error.

    Args:
        err: Pydantic ValidationError instance.

    Returns:
        Tuple of (message, dotted path of the first failing field).

    Example:
        >>> format_validation_errors(err)
        ("package.name: Field required", "package.name")
    """
    errors: list[ErrorDetails] = err.errors()
    lines: list[str] = []
    for e in errors:
        loc = ".".join(str(x) for x in e["loc"])
        lines.append(f"{loc}: {e['msg']}" if loc else e["msg"])

    first_loc = ".".join(str(x) for x in errors[0]["loc"]) if errors else ""
    return "; ".join(lines), first_loc or None


def validate_document(model: type[ModelT], data: dict[str, Any], path: Path) -> ModelT:
    """Validate a parsed document against a model.

    Args:
        model: Pydantic model describing the document.
        data: Parsed TOML document.
        path: File the document came from, for error context.

    Returns:
        Validated model instance.

    Raises:
        ConfigurationError: If validation fails.
    """
    try:
        return model.model_validate(data)
    except PydanticValidationError as e:
        message, field_path = format_validation_errors(e)
        raise ConfigurationError(
            f"Invalid {path.name}: {message}",
            file_path=str(path),
            field_path=field_path,
        ) from None
