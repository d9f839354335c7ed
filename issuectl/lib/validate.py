"""
Schema validation for issuectl.

Validates agents.yaml content on load and issue summaries before they are
printed as JSON. Fails with a clear message naming the offending path.
"""

import json
from pathlib import Path
from typing import Any

import jsonschema


class ValidationError(Exception):
    """Schema validation failed."""

    def __init__(self, schema_name: str, message: str, path: str = None):
        self.schema_name = schema_name
        self.path = path
        self.message = message
        super().__init__(f"[{schema_name}] {message}" + (f" at {path}" if path else ""))


SCHEMAS_DIR = Path(__file__).resolve().parent.parent / "schemas"

# Cache loaded schemas
_schema_cache: dict[str, dict] = {}


def _load_schema(schema_name: str) -> dict:
    """Load schema by name, with caching."""
    if schema_name not in _schema_cache:
        schema_path = SCHEMAS_DIR / f"{schema_name}.schema.json"
        if not schema_path.exists():
            raise ValidationError(schema_name, f"Schema file not found: {schema_path}")
        _schema_cache[schema_name] = json.loads(schema_path.read_text())
    return _schema_cache[schema_name]


def validate(data: Any, schema_name: str) -> None:
    """
    Validate data against named schema.

    Args:
        data: Parsed data to validate
        schema_name: Schema name ("agents" or "issue")

    Raises:
        ValidationError: If validation fails
    """
    schema = _load_schema(schema_name)

    try:
        jsonschema.validate(instance=data, schema=schema)
    except jsonschema.ValidationError as e:
        path = ".".join(str(p) for p in e.absolute_path) if e.absolute_path else "(root)"
        raise ValidationError(schema_name, e.message, path) from None


def validate_many(items: list, schema_name: str) -> None:
    """Validate every item of a list, reporting the index of the first failure."""
    for index, item in enumerate(items):
        try:
            validate(item, schema_name)
        except ValidationError as e:
            raise ValidationError(schema_name, f"item {index}: {e.message}", e.path) from None
