"""Tests for the style guide document guard."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from styleguard._shared.settings import StyleGuardSettings
from styleguard.check_style_guide import extract_code_terms, extract_headings, run_style_guide_guard
from styleguard.report import RuleCode, Severity
from styleguard_common.errors import ConfigParseError

if TYPE_CHECKING:
    from collections.abc import Callable
    from pathlib import Path


def test_headings_skip_fenced_blocks() -> None:
    """Comment lines inside code fences are not headings."""
    text = "# Title\n\n```bash\n# install\npip install x\n```\n\n## Pull requests ##\n~~~\n# nope\n~~~\n"

    assert extract_headings(text) == [(1, "Title"), (8, "Pull requests")]


@pytest.mark.parametrize(
    ("line", "title"),
    [
        ("## Notes on C#", "Notes on C#"),
        ("## Pull requests ##", "Pull requests"),
        ("### Tabs\t#", "Tabs"),
        ("# F# and C# #", "F# and C#"),
    ],
)
def test_heading_closing_sequence_needs_space(line: str, title: str) -> None:
    """Only a run of ``#`` set off by whitespace closes a heading."""
    assert extract_headings(line + "\n") == [(1, title)]


def test_code_terms_cover_spans_and_fences() -> None:
    """Inline spans count whole and per token; fenced blocks count per token."""
    text = "Use `pre-commit install` and ``black``.\n\n```\nruff check .\n```\n"

    terms = extract_code_terms(text)

    assert {"pre-commit install", "pre-commit", "install", "black", "ruff", "check"} <= terms
    assert "Use" not in terms


def test_valid_guide_is_clean(
    write_file: Callable[[str, str], Path],
    valid_config: Path,
    guide_text: str,
    settings: StyleGuardSettings,
) -> None:
    """A guide with every section and hook produces no violations."""
    guide = write_file("README.md", guide_text)

    report = run_style_guide_guard(guide, valid_config, settings)

    assert report.violation_count == 0


def test_missing_guide_is_a_violation(tmp_path: Path, valid_config: Path, settings: StyleGuardSettings) -> None:
    """An absent guide yields a single ``doc-missing`` error."""
    report = run_style_guide_guard(tmp_path / "README.md", valid_config, settings)

    assert [v.code for v in report.violations] == [RuleCode.DOC_MISSING]
    assert not report.is_clean


def test_missing_section_is_reported(
    write_file: Callable[[str, str], Path],
    valid_config: Path,
    guide_text: str,
    settings: StyleGuardSettings,
) -> None:
    """Section matching is a case-insensitive substring test on heading titles."""
    guide = write_file(
        "README.md",
        guide_text.replace("## Pull requests", "## Reviews").replace(
            "## Virtual environment", "## Using a VIRTUAL ENVIRONMENT"
        ),
    )

    report = run_style_guide_guard(guide, valid_config, settings)

    assert [v.code for v in report.violations] == [RuleCode.DOC_SECTION_MISSING]
    assert "'Pull requests'" in report.violations[0].message


def test_undocumented_hook_is_a_warning(
    write_file: Callable[[str, str], Path],
    valid_config: Path,
    guide_text: str,
    settings: StyleGuardSettings,
) -> None:
    """Hooks mentioned only in plain prose are not documented."""
    guide = write_file("README.md", guide_text.replace("`autoflake`", "autoflake"))

    report = run_style_guide_guard(guide, valid_config, settings)

    assert report.is_clean
    assert [(v.code, v.severity) for v in report.violations] == [
        (RuleCode.DOC_HOOK_UNDOCUMENTED, Severity.WARNING)
    ]


def test_missing_configuration_skips_hook_check(
    write_file: Callable[[str, str], Path],
    tmp_path: Path,
    settings: StyleGuardSettings,
) -> None:
    """Without a configuration only the section rules apply."""
    guide = write_file("README.md", "# Guide\n\nNothing here.\n")

    report = run_style_guide_guard(guide, tmp_path / "missing.yaml", settings)

    assert {v.code for v in report.violations} == {RuleCode.DOC_SECTION_MISSING}
    assert report.violation_count == len(settings.required_sections)


def test_broken_configuration_propagates(
    write_file: Callable[[str, str], Path],
    guide_text: str,
) -> None:
    """Configuration errors other than a missing file are raised."""
    guide = write_file("README.md", guide_text)
    config = write_file(".pre-commit-config.yaml", "repos: [\n")

    with pytest.raises(ConfigParseError):
        run_style_guide_guard(guide, config, StyleGuardSettings())


def test_undecodable_guide_is_a_parse_error(
    tmp_path: Path,
    valid_config: Path,
    settings: StyleGuardSettings,
) -> None:
    """A guide that is not UTF-8 raises a parse error naming the file."""
    guide = tmp_path / "README.md"
    guide.write_bytes(b"# Guide\n\xff")

    with pytest.raises(ConfigParseError) as excinfo:
        run_style_guide_guard(guide, valid_config, settings)

    assert excinfo.value.context == {"source": str(guide), "offset": 8}
