"""Tests for violation reports."""

from __future__ import annotations

from pathlib import Path

import pytest

from styleguard.report import PolicyReport, RuleCode, Severity, Violation


def _violation(
    code: RuleCode, path: str | None, line: int = 0, severity: Severity = Severity.ERROR
) -> Violation:
    return Violation(
        code=code,
        message=f"{code.value} at {line}",
        path=Path(path) if path is not None else None,
        line=line,
        severity=severity,
    )


def test_report_orders_and_deduplicates() -> None:
    """Violations sort by path, line and code; exact repeats collapse."""
    late = _violation(RuleCode.REV_FLOATING, "b.yaml", 9)
    early = _violation(RuleCode.HOOK_MISSING, "a.yaml")
    middle = _violation(RuleCode.REV_MISSING, "b.yaml", 3)
    report = PolicyReport(violations=(late, early, middle, late))

    assert report.violations == (early, middle, late)


def test_counts_and_cleanliness() -> None:
    """Warnings count as violations but do not make a report unclean."""
    warning = _violation(RuleCode.REPO_DUPLICATE, "a.yaml", 4, severity=Severity.WARNING)
    error = _violation(RuleCode.HOOK_DUPLICATE, "a.yaml", 7)

    assert PolicyReport(violations=(warning,)).is_clean
    report = PolicyReport(violations=(warning, error))
    assert report.violation_count == 2
    assert report.error_count == 1
    assert not report.is_clean


def test_location_formatting() -> None:
    """Locations degrade gracefully when line or path are unknown."""
    assert _violation(RuleCode.REV_MISSING, "cfg.yaml", 3).location == "cfg.yaml:3"
    assert _violation(RuleCode.HOOK_MISSING, "cfg.yaml").location == "cfg.yaml"
    assert _violation(RuleCode.ENV_NO_VIRTUALENV, None).location == "-"


def test_context_round_trip() -> None:
    """``from_context`` rebuilds the report rendered by ``to_context``."""
    report = PolicyReport(
        violations=(
            _violation(RuleCode.REV_FLOATING, "cfg.yaml", 11),
            _violation(RuleCode.ENV_NO_VIRTUALENV, None, severity=Severity.WARNING),
        )
    )

    context = report.to_context()

    assert context["violation_count"] == 2
    assert context["error_count"] == 1
    assert PolicyReport.from_context(context) == report


@pytest.mark.parametrize(
    ("key", "value", "pattern"),
    [
        ("violation_count", 5, r"expected 5 violations, computed 1"),
        ("error_count", 0, r"expected 0 errors, computed 1"),
    ],
)
def test_from_context_validates_counts(key: str, value: int, pattern: str) -> None:
    """Mismatched counts are rejected."""
    context = PolicyReport(violations=(_violation(RuleCode.REV_MISSING, "cfg.yaml", 1),)).to_context()
    context[key] = value  # type: ignore[literal-required]

    with pytest.raises(ValueError, match=pattern):
        PolicyReport.from_context(context)


def test_merge_and_group_by_path() -> None:
    """Merging keeps every violation and grouping follows the sorted order."""
    first = PolicyReport(violations=(_violation(RuleCode.REV_MISSING, "cfg.yaml", 1),))
    second = PolicyReport(
        violations=(
            _violation(RuleCode.DOC_MISSING, "README.md"),
            _violation(RuleCode.HOOK_MISSING, "cfg.yaml"),
        )
    )

    merged = PolicyReport.merge([first, second])
    grouped = merged.by_path()

    assert merged.violation_count == 3
    assert list(grouped) == [Path("README.md"), Path("cfg.yaml")]
    assert [v.code for v in grouped[Path("cfg.yaml")]] == [RuleCode.HOOK_MISSING, RuleCode.REV_MISSING]
