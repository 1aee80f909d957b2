"""Loading and parsing of schema snapshots and row sets."""

from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from .errors import SchemaLoadError, SchemaValidationError
from .models import SchemaSnapshot


def load_snapshot(path: str | Path) -> SchemaSnapshot:
    """Load a schema snapshot saved as YAML or JSON.

    Args:
        path: Path to the snapshot file.

    Returns:
        The parsed SchemaSnapshot.

    Raises:
        SchemaLoadError: If the file cannot be read or parsed.
        SchemaValidationError: If the data fails validation.
    """
    path = Path(path)

    if not path.exists():
        raise SchemaLoadError(f"File not found: {path}", str(path))

    if not path.is_file():
        raise SchemaLoadError(f"Not a file: {path}", str(path))

    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise SchemaLoadError(f"Invalid YAML: {e}", str(path)) from e
    except OSError as e:
        raise SchemaLoadError(f"Cannot read file: {e}", str(path)) from e

    if data is None:
        data = {}

    if not isinstance(data, dict):
        raise SchemaLoadError(
            f"Expected mapping at root, got {type(data).__name__}", str(path)
        )

    return parse_snapshot(data)


def parse_snapshot_from_string(text: str) -> SchemaSnapshot:
    """Parse a YAML or JSON string into a SchemaSnapshot.

    Raises:
        SchemaLoadError: If the text cannot be parsed.
        SchemaValidationError: If the data fails validation.
    """
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise SchemaLoadError(f"Invalid YAML: {e}") from e

    if data is None:
        data = {}

    if not isinstance(data, dict):
        raise SchemaLoadError(f"Expected mapping at root, got {type(data).__name__}")

    return parse_snapshot(data)


def parse_snapshot(data: Any) -> SchemaSnapshot:
    """Validate a decoded /db-info payload.

    Args:
        data: The decoded JSON body.

    Returns:
        The parsed SchemaSnapshot.

    Raises:
        SchemaValidationError: If the data fails validation.
    """
    try:
        return SchemaSnapshot.model_validate(data)
    except ValidationError as e:
        errors = [
            {
                "loc": ".".join(str(x) for x in err["loc"]),
                "msg": err["msg"],
                "type": err["type"],
            }
            for err in e.errors()
        ]
        raise SchemaValidationError(
            f"Schema validation failed with {len(errors)} error(s)", errors
        ) from e


def parse_rows(data: Any) -> list[dict[str, Any]]:
    """Validate a row-set payload: a list of row mappings.

    A null body is an empty table.

    Raises:
        SchemaValidationError: If the data is not a list of mappings.
    """
    if data is None:
        return []

    if not isinstance(data, list):
        raise SchemaValidationError(
            f"Expected a list of rows, got {type(data).__name__}"
        )

    errors = [
        {"loc": str(i), "msg": "row is not a mapping", "type": type(row).__name__}
        for i, row in enumerate(data)
        if not isinstance(row, dict)
    ]
    if errors:
        raise SchemaValidationError(
            f"Row validation failed with {len(errors)} error(s)", errors
        )

    return [dict(row) for row in data]
