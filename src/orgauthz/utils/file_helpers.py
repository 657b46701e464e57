"""JSON file loading shared by config and the offline tooling.

Every loader in orgauthz reads a JSON document and validates it into a
Pydantic model. Failures surface as FileNotFoundError (missing file) or
ValueError (anything else) with one message a CLI can print as-is.
"""

from __future__ import annotations

__all__ = [
    "load_validated_json",
    "require_file_exists",
]

import json
from pathlib import Path
from typing import Any, TypeVar

from pydantic import BaseModel, ValidationError

ModelT = TypeVar("ModelT", bound=BaseModel)


def require_file_exists(file_path: Path, file_type: str = "file") -> None:
    """Fail early with a readable message when a file is missing.

    Raises:
        FileNotFoundError: "<Type> file not found at <path>."
    """
    if not file_path.exists():
        raise FileNotFoundError(f"{file_type.capitalize()} file not found at {file_path}.")


def _read_json(file_path: Path, file_type: str, encoding: str | None) -> Any:
    try:
        return json.loads(file_path.read_text(encoding=encoding))
    except json.JSONDecodeError as e:
        raise ValueError(f"Invalid JSON in {file_type} file {file_path}: {e}") from e
    except OSError as e:
        raise ValueError(f"Could not read {file_type} file {file_path}: {e}") from e


def _entry_label(data: Any, loc: tuple[int | str, ...]) -> str:
    """Name the list entry an error points at, e.g. " (policy id: p1)"."""
    if not loc or not isinstance(loc[0], int) or not isinstance(data, list):
        return ""
    index = loc[0]
    entry = data[index] if 0 <= index < len(data) else None
    if not isinstance(entry, dict):
        return ""
    if entry.get("id"):
        return f" (policy id: {entry['id']})"
    if entry.get("name"):
        return f" (policy: {entry['name']})"
    return f" (entry #{index + 1})"


def load_validated_json(
    file_path: Path,
    model_class: type[ModelT],
    file_type: str = "file",
    encoding: str | None = "utf-8",
) -> ModelT:
    """Read a JSON file into a validated model.

    Validation errors are listed one per line with their field path; for
    list documents (policy files) each line also names the offending entry.

    Args:
        file_path: JSON document.
        model_class: Model to validate against.
        file_type: Used in messages ("config", "policy", "request").
        encoding: Text encoding of the file.

    Returns:
        The validated model.

    Raises:
        ValueError: If the file cannot be read, is not JSON or does not validate.
    """
    data = _read_json(file_path, file_type, encoding)
    try:
        return model_class.model_validate(data)
    except ValidationError as e:
        lines = [
            f"  - {'.'.join(str(p) for p in err['loc']) or '<root>'}{_entry_label(data, err['loc'])}: {err['msg']}"
            for err in e.errors()
        ]
        raise ValueError(f"Invalid {file_type} file {file_path}:\n" + "\n".join(lines)) from e
