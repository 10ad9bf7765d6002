"""The ``--json`` output of every styleguard command.

One envelope is printed per run. It lists the files that were checked, one
entry per violation, and a Problem Details ``problem`` member when the
command could not run. Wire names are camelCase; the payload is validated
against ``schema/cli_envelope.json`` before it is printed.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Literal, cast

import msgspec
from msgspec import UNSET, Struct, UnsetType, structs

from styleguard._shared.schema import validate_payload

if TYPE_CHECKING:
    from styleguard.report import PolicyReport
    from styleguard_common.problem_details import ProblemDetails

__all__ = [
    "CLI_ENVELOPE_SCHEMA",
    "CLI_ENVELOPE_SCHEMA_ID",
    "CLI_ENVELOPE_SCHEMA_VERSION",
    "CliEnvelope",
    "CliEnvelopeBuilder",
    "CliErrorEntry",
    "CliErrorStatus",
    "CliFileResult",
    "CliFileStatus",
    "CliStatus",
    "render_cli_envelope",
    "validate_cli_envelope",
]

type CliStatus = Literal["success", "violation", "config", "error"]
type CliFileStatus = Literal["success", "skipped", "error", "violation"]
type CliErrorStatus = Literal["error", "violation", "warning", "config"]

CLI_ENVELOPE_SCHEMA = "cli_envelope.json"
CLI_ENVELOPE_SCHEMA_VERSION = "1.0.0"
CLI_ENVELOPE_SCHEMA_ID = "https://styleguard.dev/schema/cli-envelope.json"


class CliFileResult(Struct, kw_only=True):
    """Outcome for one checked file (or the repository root for ``doctor``)."""

    path: str
    status: CliFileStatus
    message: str | UnsetType = UNSET


class CliErrorEntry(Struct, kw_only=True):
    """One violation, warning or failure, located when possible."""

    status: CliErrorStatus
    message: str
    code: str | UnsetType = UNSET
    file: str | UnsetType = UNSET
    line: int | UnsetType = UNSET


def _utc_now() -> str:
    return datetime.now(tz=UTC).isoformat()


class CliEnvelope(Struct, kw_only=True):
    """Typed form of ``schema/cli_envelope.json``."""

    schema_version: str = msgspec.field(default=CLI_ENVELOPE_SCHEMA_VERSION, name="schemaVersion")
    schema_id: str = msgspec.field(default=CLI_ENVELOPE_SCHEMA_ID, name="schemaId")
    generated_at: str = msgspec.field(default_factory=_utc_now, name="generatedAt")
    status: CliStatus = "success"
    command: str = ""
    subcommand: str = ""
    duration_seconds: float = msgspec.field(default=0.0, name="durationSeconds")
    files: list[CliFileResult] = msgspec.field(default_factory=list)
    errors: list[CliErrorEntry] = msgspec.field(default_factory=list)
    problem: dict[str, object] | UnsetType = UNSET


def _to_payload(envelope: CliEnvelope) -> dict[str, object]:
    # UNSET members are left out entirely.
    return cast("dict[str, object]", msgspec.to_builtins(envelope))


def validate_cli_envelope(envelope: CliEnvelope) -> None:
    """Check ``envelope`` against the bundled schema.

    Raises
    ------
    SchemaValidationError
        If the envelope does not conform.
    """
    validate_payload(_to_payload(envelope), CLI_ENVELOPE_SCHEMA)


def render_cli_envelope(envelope: CliEnvelope, *, indent: int = 2) -> str:
    """Return ``envelope`` as indented JSON."""
    return json.dumps(_to_payload(envelope), indent=indent)


@dataclass(slots=True)
class CliEnvelopeBuilder:
    """Accumulate results for one run, then validate them with :meth:`finish`.

    Envelopes are immutable structs, so every mutator swaps in an updated
    copy and returns the builder for chaining.
    """

    envelope: CliEnvelope

    @classmethod
    def create(cls, *, command: str, status: CliStatus, subcommand: str = "") -> CliEnvelopeBuilder:
        return cls(CliEnvelope(command=command, status=status, subcommand=subcommand))

    def _update(self, **changes: object) -> CliEnvelopeBuilder:
        self.envelope = structs.replace(self.envelope, **changes)
        return self

    def set_status(self, status: CliStatus) -> CliEnvelopeBuilder:
        return self._update(status=status)

    def add_file(
        self,
        *,
        path: str,
        status: CliFileStatus,
        message: str | None = None,
    ) -> CliEnvelopeBuilder:
        entry = CliFileResult(path=path, status=status, message=UNSET if message is None else message)
        return self._update(files=[*self.envelope.files, entry])

    def add_error(
        self,
        *,
        status: CliErrorStatus,
        message: str,
        code: str | None = None,
        file: str | None = None,
        line: int | None = None,
    ) -> CliEnvelopeBuilder:
        """Append an entry; ``line`` of 0 or ``None`` means the whole file."""
        entry = CliErrorEntry(
            status=status,
            message=message,
            code=UNSET if code is None else code,
            file=UNSET if file is None else file,
            line=line if line else UNSET,
        )
        return self._update(errors=[*self.envelope.errors, entry])

    def add_report(self, report: PolicyReport) -> CliEnvelopeBuilder:
        """Append every violation: errors as ``violation``, the rest as ``warning``."""
        for violation in report.violations:
            self.add_error(
                status="violation" if violation.severity == "error" else "warning",
                message=violation.message,
                code=violation.code.value,
                file=None if violation.path is None else str(violation.path),
                line=violation.line,
            )
        return self

    def set_problem(self, problem: ProblemDetails | None) -> CliEnvelopeBuilder:
        """Attach Problem Details, or drop them with ``None``."""
        return self._update(problem=UNSET if problem is None else dict(problem))

    def finish(self, *, duration_seconds: float | None = None) -> CliEnvelope:
        """Record the duration and return the validated envelope.

        Raises
        ------
        SchemaValidationError
            If the assembled envelope does not match the schema.
        """
        if duration_seconds is not None:
            self._update(duration_seconds=float(duration_seconds))
        validate_cli_envelope(self.envelope)
        return self.envelope
