"""RFC 9457 Problem Details payloads for styleguard failures.

Every payload is checked against ``styleguard_common/schema/problem_details.json``
(JSON Schema 2020-12) before it leaves this module, so the CLI can embed it in
its envelope without re-validating.

Examples
--------
>>> from styleguard_common.problem_details import build_problem_details, render_problem
>>> problem = build_problem_details(
...     problem_type="https://styleguard.dev/problems/policy-violation",
...     title="Policy violation",
...     status=422,
...     detail="2 revisions are not semantic versions",
...     instance="urn:styleguard:check-config:violation",
...     extensions={"violation_count": 2},
... )
>>> "policy-violation" in render_problem(problem)
True
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Final, TypedDict, cast

from jsonschema import Draft202012Validator, SchemaError, ValidationError

from styleguard_common.logging import get_logger
from styleguard_common.types import JsonPrimitive, JsonValue

if TYPE_CHECKING:
    from collections.abc import Mapping

__all__ = [
    "JsonPrimitive",
    "JsonValue",
    "ProblemDetails",
    "ProblemDetailsParams",
    "ProblemDetailsValidationError",
    "build_problem_details",
    "problem_from_exception",
    "render_problem",
    "validate_problem_details",
]

logger = get_logger(__name__)

SCHEMA_PATH: Final = Path(__file__).parent / "schema" / "problem_details.json"


class ProblemDetails(TypedDict, total=False):
    """Problem Details members emitted by styleguard."""

    type: str
    title: str
    status: int
    detail: str
    instance: str
    code: str
    extensions: dict[str, JsonValue]


@dataclass(slots=True)
class ProblemDetailsParams:
    """Arguments of :func:`build_problem_details`, used as the base for :func:`problem_from_exception`."""

    problem_type: str
    title: str
    status: int
    detail: str
    instance: str
    code: str | None = None
    extensions: Mapping[str, JsonValue] | None = None


class ProblemDetailsValidationError(Exception):
    """A payload (or the bundled schema itself) failed validation.

    ``validation_errors`` holds the violated constraint and, when known, the
    JSON path it applies to.
    """

    def __init__(self, message: str, validation_errors: list[str] | None = None) -> None:
        super().__init__(message)
        self.validation_errors = validation_errors or []


_validators: dict[Path, Draft202012Validator] = {}


def _validator() -> Draft202012Validator:
    validator = _validators.get(SCHEMA_PATH)
    if validator is not None:
        return validator
    try:
        schema = cast("dict[str, object]", json.loads(SCHEMA_PATH.read_text(encoding="utf-8")))
        Draft202012Validator.check_schema(schema)
    except (OSError, json.JSONDecodeError, SchemaError) as exc:
        msg = f"Problem Details schema at {SCHEMA_PATH} is unusable: {exc}"
        raise ProblemDetailsValidationError(msg) from exc
    validator = _validators[SCHEMA_PATH] = Draft202012Validator(schema)
    return validator


def validate_problem_details(payload: Mapping[str, JsonValue]) -> None:
    """Validate ``payload`` against the bundled schema.

    Raises
    ------
    ProblemDetailsValidationError
        If a required member is missing or a member has the wrong shape.
    """
    try:
        _validator().validate(payload)
    except ValidationError as exc:
        errors = [exc.message]
        if exc.absolute_path:
            errors.append("at path: " + ".".join(str(part) for part in exc.absolute_path))
        msg = "Problem Details validation failed: " + "; ".join(errors)
        raise ProblemDetailsValidationError(msg, validation_errors=errors) from exc


def build_problem_details(
    problem_type: str,
    title: str,
    status: int,
    detail: str,
    instance: str,
    *,
    code: str | None = None,
    extensions: Mapping[str, JsonValue] | None = None,
) -> ProblemDetails:
    """Build and validate a Problem Details payload.

    Parameters
    ----------
    problem_type : str
        Type URI, ``https://styleguard.dev/problems/<code>`` for styleguard errors.
    title : str
        Short summary, usually the exception class name.
    status : int
        HTTP-style status used as a severity indicator.
    detail : str
        Explanation of this occurrence.
    instance : str
        URN naming the command and failure, such as ``urn:styleguard:doctor:error``.
    code : str | None, optional
        Kebab-case error code.
    extensions : Mapping[str, JsonValue] | None, optional
        Structured context. Omitted when empty.

    Returns
    -------
    ProblemDetails
        The validated payload.

    Raises
    ------
    ProblemDetailsValidationError
        If the arguments do not form a valid payload.
    """
    payload: dict[str, JsonValue] = {
        "type": problem_type,
        "title": title,
        "status": status,
        "detail": detail,
        "instance": instance,
    }
    if code is not None:
        payload["code"] = code
    if extensions:
        payload["extensions"] = dict(extensions)
    validate_problem_details(payload)
    return cast("ProblemDetails", payload)


def problem_from_exception(exc: Exception, base: ProblemDetailsParams) -> ProblemDetails:
    """Describe ``exc`` on top of ``base``.

    The exception's type and text go under ``extensions.exception``; an empty
    ``base.detail`` is replaced by ``str(exc)``.
    """
    extensions: dict[str, JsonValue] = dict(base.extensions or {})
    extensions["exception"] = {"type": type(exc).__name__, "message": str(exc)}
    logger.debug(
        "Converting exception to Problem Details",
        extra={"operation": "problem_details", "exception_type": type(exc).__name__},
    )
    return build_problem_details(
        base.problem_type,
        base.title,
        base.status,
        base.detail or str(exc),
        base.instance,
        code=base.code,
        extensions=extensions,
    )


def render_problem(problem: ProblemDetails | Mapping[str, object]) -> str:
    """Return ``problem`` as single-line JSON, keeping non-ASCII text."""
    return json.dumps(problem, default=str, ensure_ascii=False)
