"""Shared file utilities for fcrepo-pep.

Provides common utilities used by config and rule table loading:
- require_file_exists: Clear error for missing files
- load_validated_json: JSON parsing plus Pydantic validation
- compute_file_checksum: SHA256 checksum for file integrity
"""

from __future__ import annotations

import hashlib
import json
from pathlib import Path
from typing import Any, TypeVar

from pydantic import BaseModel, TypeAdapter, ValidationError

T = TypeVar("T", bound=BaseModel)

__all__ = [
    "compute_file_checksum",
    "load_validated_json",
    "require_file_exists",
]


def require_file_exists(file_path: Path, file_type: str = "file") -> None:
    """Raise FileNotFoundError with helpful message if file doesn't exist.

    Args:
        file_path: Path to check.
        file_type: Description for error message (e.g., "configuration", "policy").

    Raises:
        FileNotFoundError: If file doesn't exist.
    """
    if file_path.exists():
        return
    raise FileNotFoundError(f"{file_type.capitalize()} file not found at {file_path}.")


def compute_file_checksum(file_path: Path) -> str:
    """Compute SHA256 checksum of file content.

    Returns:
        str: Checksum in format "sha256:<hex_digest>".

    Raises:
        FileNotFoundError: If file doesn't exist.
        OSError: If file cannot be read.
    """
    with open(file_path, "rb") as f:
        content = f.read()
    digest = hashlib.sha256(content).hexdigest()
    return f"sha256:{digest}"


def _format_validation_errors(e: ValidationError, data: Any) -> list[str]:
    errors = []
    for error in e.errors():
        loc_parts = error["loc"]
        loc = ".".join(str(x) for x in loc_parts)

        # Name the offending rule when the error is inside a rule list
        context = ""
        rules = data.get("rules") if isinstance(data, dict) else data
        index_pos = 1 if isinstance(data, dict) else 0
        if (
            isinstance(rules, list)
            and len(loc_parts) > index_pos
            and isinstance(loc_parts[index_pos], int)
            and 0 <= loc_parts[index_pos] < len(rules)
        ):
            rule = rules[loc_parts[index_pos]]
            rule_id = rule.get("id") if isinstance(rule, dict) else None
            context = f" (rule id: {rule_id})" if rule_id else f" (rule #{loc_parts[index_pos] + 1})"

        errors.append(f"  - {loc}{context}: {error['msg']}")
    return errors


def load_validated_json(
    file_path: Path,
    model_class: type[T] | TypeAdapter[Any],
    file_type: str = "file",
    encoding: str | None = "utf-8",
) -> Any:
    """Load JSON file and validate against a Pydantic model or TypeAdapter.

    Combines file reading, JSON parsing, and Pydantic validation with
    consistent error messages.

    Args:
        file_path: Path to JSON file.
        model_class: Pydantic model class (or TypeAdapter) to validate against.
        file_type: Description for error messages (e.g., "config", "policy").
        encoding: File encoding.

    Returns:
        Validated instance.

    Raises:
        ValueError: If the file cannot be read, JSON is invalid, or validation fails.
    """
    try:
        with open(file_path, "r", encoding=encoding) as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise ValueError(f"Invalid JSON in {file_type} file {file_path}: {e}") from e
    except OSError as e:
        raise ValueError(f"Could not read {file_type} file {file_path}: {e}") from e

    try:
        if isinstance(model_class, TypeAdapter):
            return model_class.validate_python(data)
        return model_class.model_validate(data)
    except ValidationError as e:
        errors = _format_validation_errors(e, data)
        raise ValueError(
            f"Invalid {file_type} configuration in {file_path}:\n" + "\n".join(errors)
        ) from e
