"""
Schema validation for gitwapp's persisted data.

Schemas live in gitwapp/schemas as <name>.schema.json. Data is checked on
every read and before every write; a file that fails is reported, never
repaired.
"""

import json
from functools import lru_cache
from pathlib import Path
from typing import Any

import jsonschema
from jsonschema.exceptions import best_match

SCHEMAS_DIR = Path(__file__).parent.parent / "schemas"


class ValidationError(Exception):
    """Persisted data does not match its schema, or is not JSON at all."""

    def __init__(self, schema_name: str, message: str, path: str | None = None):
        self.schema_name = schema_name
        self.path = path
        super().__init__(f"[{schema_name}] {message}" + (f" at {path}" if path else ""))


@lru_cache(maxsize=None)
def _validator(schema_name: str):
    schema_path = SCHEMAS_DIR / f"{schema_name}.schema.json"
    try:
        schema = json.loads(schema_path.read_text())
    except FileNotFoundError:
        raise ValidationError(schema_name, f"Schema file not found: {schema_path}") from None

    cls = jsonschema.validators.validator_for(schema)
    cls.check_schema(schema)
    return cls(schema)


def validate(data: Any, schema_name: str) -> None:
    """
    Validate data against a named schema, reporting the most relevant error.

    Raises:
        ValidationError: If validation fails
    """
    error = best_match(_validator(schema_name).iter_errors(data))
    if error is None:
        return
    location = "/".join(str(p) for p in error.absolute_path) or "(root)"
    raise ValidationError(schema_name, error.message, location)


def validate_file(filepath: Path, schema_name: str) -> Any:
    """
    Read a JSON file and validate it.

    Returns:
        The parsed data

    Raises:
        ValidationError: file missing, not JSON, or not matching the schema
    """
    try:
        data = json.loads(filepath.read_text())
    except FileNotFoundError:
        raise ValidationError(schema_name, f"File not found: {filepath}") from None
    except json.JSONDecodeError as e:
        raise ValidationError(schema_name, f"Invalid JSON in {filepath}: {e}") from None

    validate(data, schema_name)
    return data


def validate_before_write(data: Any, schema_name: str, filepath: Path) -> None:
    """
    Refuse to persist data that would not load back.

    Raises:
        ValidationError: If data doesn't match schema
    """
    try:
        validate(data, schema_name)
    except ValidationError as e:
        raise ValidationError(schema_name, f"Refusing to write invalid data to {filepath}: {e}") from None
