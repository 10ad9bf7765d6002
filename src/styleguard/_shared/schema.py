"""JSON Schema lookups for payloads emitted by styleguard commands."""

from __future__ import annotations

import json
from pathlib import Path
from typing import TYPE_CHECKING

from jsonschema import Draft202012Validator, ValidationError

from styleguard_common.errors import SchemaValidationError

if TYPE_CHECKING:
    from collections.abc import Mapping

SCHEMA_ROOT = Path(__file__).resolve().parents[1] / "schema"

__all__ = [
    "SCHEMA_ROOT",
    "get_schema_path",
    "validate_payload",
]

_VALIDATOR_CACHE: dict[str, Draft202012Validator] = {}


def get_schema_path(name: str) -> Path:
    """Return the absolute path for a bundled schema.

    Raises
    ------
    FileNotFoundError
        If the schema file is missing.
    """
    candidate = SCHEMA_ROOT / name
    if not candidate.exists():
        msg = f"Schema not found: {candidate}"
        raise FileNotFoundError(msg)
    return candidate


def _validator(name: str) -> Draft202012Validator:
    cached = _VALIDATOR_CACHE.get(name)
    if cached is not None:
        return cached
    schema = json.loads(get_schema_path(name).read_text(encoding="utf-8"))
    Draft202012Validator.check_schema(schema)
    validator = Draft202012Validator(schema)
    _VALIDATOR_CACHE[name] = validator
    return validator


def validate_payload(payload: Mapping[str, object], schema_name: str) -> None:
    """Validate ``payload`` against the bundled schema ``schema_name``.

    Raises
    ------
    SchemaValidationError
        If the payload does not conform; the JSON path is kept in ``context``.
    """
    try:
        _validator(schema_name).validate(payload)
    except ValidationError as exc:
        path = ".".join(str(part) for part in exc.absolute_path)
        msg = f"Payload does not conform to {schema_name}: {exc.message}"
        raise SchemaValidationError(
            msg, cause=exc, context={"schema": schema_name, "path": path}
        ) from exc
