"""Violation records and aggregate reports shared by every guard.

Reports serialise to a plain JSON context (used as Problem Details
extensions and in CLI envelopes) and can be rebuilt from that context, which
keeps the JSON output and the in-memory model in lock step.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from pathlib import Path
from types import MappingProxyType
from typing import TYPE_CHECKING, TypedDict, cast

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping

__all__ = (
    "PolicyReport",
    "PolicyReportContext",
    "RuleCode",
    "Severity",
    "Violation",
    "ViolationEntry",
)


class Severity(StrEnum):
    """How a violation affects the exit status."""

    ERROR = "error"
    WARNING = "warning"


class RuleCode(StrEnum):
    """Stable identifiers for every rule styleguard enforces."""

    REV_MISSING = "rev-missing"
    REV_NOT_SEMVER = "rev-not-semver"
    REV_FLOATING = "rev-floating"
    REV_BELOW_MINIMUM = "rev-below-minimum"
    REPO_DUPLICATE = "repo-duplicate"
    HOOK_DUPLICATE = "hook-duplicate"
    HOOK_MISSING = "hook-missing"
    HOOK_LINE_LENGTH = "hook-line-length"
    DOC_MISSING = "doc-missing"
    DOC_SECTION_MISSING = "doc-section-missing"
    DOC_HOOK_UNDOCUMENTED = "doc-hook-undocumented"
    ENV_NO_VIRTUALENV = "env-no-virtualenv"
    ENV_NOT_GIT_REPO = "env-not-git-repo"
    ENV_HOOKS_NOT_INSTALLED = "env-hooks-not-installed"
    ENV_CONFIG_MISSING = "env-config-missing"


@dataclass(frozen=True, slots=True)
class Violation:
    """A single rule failure, optionally located in a file."""

    code: RuleCode
    message: str
    path: Path | None = None
    line: int = 0
    severity: Severity = Severity.ERROR

    @property
    def location(self) -> str:
        """Return ``path:line`` (or just the path, or ``-``) for human output."""
        if self.path is None:
            return "-"
        if self.line:
            return f"{self.path}:{self.line}"
        return str(self.path)

    def to_entry(self) -> ViolationEntry:
        """Return a JSON-serialisable representation."""
        return {
            "code": self.code.value,
            "message": self.message,
            "path": str(self.path) if self.path is not None else None,
            "line": self.line,
            "severity": self.severity.value,
        }

    @classmethod
    def from_entry(cls, entry: ViolationEntry) -> Violation:
        """Hydrate a violation from :meth:`to_entry` output."""
        path = entry["path"]
        return cls(
            code=RuleCode(entry["code"]),
            message=entry["message"],
            path=Path(path) if path is not None else None,
            line=entry["line"],
            severity=Severity(entry["severity"]),
        )


class ViolationEntry(TypedDict):
    """Serialized :class:`Violation`."""

    code: str
    message: str
    path: str | None
    line: int
    severity: str


class PolicyReportContext(TypedDict):
    """Problem Details context for guard failures."""

    violation_count: int
    error_count: int
    violations: list[ViolationEntry]


def _violation_sort_key(violation: Violation) -> tuple[str, int, str]:
    path = violation.path.as_posix() if violation.path is not None else ""
    return (path, violation.line, violation.code.value)


@dataclass(frozen=True, slots=True)
class PolicyReport:
    """Aggregate results of one or more guards."""

    violations: tuple[Violation, ...] = ()

    def __post_init__(self) -> None:
        """Normalize violation ordering for deterministic comparisons."""
        ordered = tuple(sorted(dict.fromkeys(self.violations), key=_violation_sort_key))
        object.__setattr__(self, "violations", ordered)

    @property
    def violation_count(self) -> int:
        """Return the total number of violations, warnings included."""
        return len(self.violations)

    @property
    def error_count(self) -> int:
        """Return the number of error-severity violations."""
        return sum(1 for violation in self.violations if violation.severity is Severity.ERROR)

    @property
    def is_clean(self) -> bool:
        """Return ``True`` when the report has no errors (warnings are allowed)."""
        return self.error_count == 0

    def by_path(self) -> Mapping[Path | None, tuple[Violation, ...]]:
        """Group violations by file."""
        grouped: dict[Path | None, list[Violation]] = {}
        for violation in self.violations:
            grouped.setdefault(violation.path, []).append(violation)
        mapping = {path: tuple(items) for path, items in grouped.items()}
        return cast("Mapping[Path | None, tuple[Violation, ...]]", MappingProxyType(mapping))

    def to_context(self) -> PolicyReportContext:
        """Render the report as structured problem details context."""
        return {
            "violation_count": self.violation_count,
            "error_count": self.error_count,
            "violations": [violation.to_entry() for violation in self.violations],
        }

    @classmethod
    def merge(cls, reports: Iterable[PolicyReport]) -> PolicyReport:
        """Merge multiple reports into a single aggregate."""
        collected: list[Violation] = []
        for report in reports:
            collected.extend(report.violations)
        return cls(violations=tuple(collected))

    @classmethod
    def from_context(cls, context: PolicyReportContext) -> PolicyReport:
        """Build a report instance from a context payload.

        Raises
        ------
        ValueError
            If the recorded counts disagree with the violations list.
        """
        report = cls(
            violations=tuple(Violation.from_entry(entry) for entry in context["violations"])
        )
        expected_count = context["violation_count"]
        if report.violation_count != expected_count:
            message = (
                "Policy report context mismatch: "
                f"expected {expected_count} violations, "
                f"computed {report.violation_count}."
            )
            raise ValueError(message)
        expected_errors = context["error_count"]
        if report.error_count != expected_errors:
            message = (
                "Policy report context mismatch: "
                f"expected {expected_errors} errors, computed {report.error_count}."
            )
            raise ValueError(message)
        return report
