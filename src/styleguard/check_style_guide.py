"""Keep the style guide document consistent with the hook configuration.

The README is the human-facing half of the policy. It must keep the sections
that walk a contributor through the workflow, and it should mention every hook
the configuration runs so nobody meets an undocumented failure at commit time.
"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING, Final

from styleguard.precommit.loader import load_config
from styleguard.report import PolicyReport, RuleCode, Severity, Violation
from styleguard_common.errors import ConfigNotFoundError, ConfigParseError, ConfigurationError
from styleguard_common.logging import get_logger

if TYPE_CHECKING:
    from pathlib import Path

    from styleguard._shared.settings import StyleGuardSettings
    from styleguard.precommit.loader import LoadedConfig

LOGGER = get_logger(__name__)

__all__ = (
    "check_documented_hooks",
    "check_sections",
    "extract_code_terms",
    "extract_headings",
    "run_style_guide_guard",
)

_FENCE: Final = re.compile(r"^\s{0,3}(?P<fence>`{3,}|~{3,})")
_HEADING: Final = re.compile(r"^\s{0,3}(?P<level>#{1,6})\s+(?P<title>.*?)(?:\s+#+)?\s*$")
_INLINE_CODE: Final = re.compile(r"(?P<ticks>`+)(?P<code>.+?)(?P=ticks)")
_TOKEN_STRIP: Final = "\"'`,;:()[]{}<>"


def _split_fenced(text: str) -> tuple[list[tuple[int, str]], list[str]]:
    """Split ``text`` into prose lines (with 1-based numbers) and fenced code lines."""
    prose: list[tuple[int, str]] = []
    code: list[str] = []
    fence: str | None = None
    for number, line in enumerate(text.splitlines(), start=1):
        match = _FENCE.match(line)
        if fence is None and match is not None:
            fence = match.group("fence")
            continue
        if fence is not None:
            if line.strip().startswith(fence[0] * len(fence)) and not line.strip().strip(fence[0]):
                fence = None
            else:
                code.append(line)
            continue
        prose.append((number, line))
    return prose, code


def extract_headings(text: str) -> list[tuple[int, str]]:
    """Return ``(line, title)`` for every ATX heading outside fenced code blocks.

    Examples
    --------
    >>> extract_headings("# Guide\\n```\\n# not a heading\\n```\\n## Pull requests\\n")
    [(1, 'Guide'), (5, 'Pull requests')]
    """
    prose, _ = _split_fenced(text)
    headings: list[tuple[int, str]] = []
    for number, line in prose:
        match = _HEADING.match(line)
        if match is not None and match.group("title"):
            headings.append((number, match.group("title")))
    return headings


def extract_code_terms(text: str) -> set[str]:
    """Return inline code spans plus every token inside fenced code blocks.

    Examples
    --------
    >>> sorted(extract_code_terms("Run `ruff` then:\\n```\\npre-commit run black\\n```\\n"))
    ['black', 'pre-commit', 'ruff', 'run']
    """
    prose, code = _split_fenced(text)
    terms: set[str] = set()
    for _, line in prose:
        for match in _INLINE_CODE.finditer(line):
            span = match.group("code").strip()
            if span:
                terms.add(span)
                terms.update(token.strip(_TOKEN_STRIP) for token in span.split())
    for line in code:
        terms.update(token.strip(_TOKEN_STRIP) for token in line.split())
    terms.discard("")
    return terms


def check_sections(path: Path, text: str, settings: StyleGuardSettings) -> list[Violation]:
    """Report required sections that have no matching heading."""
    titles = [title.casefold() for _, title in extract_headings(text)]
    return [
        Violation(
            code=RuleCode.DOC_SECTION_MISSING,
            message=f"style guide has no section titled {section!r}",
            path=path,
        )
        for section in settings.required_sections
        if not any(section.casefold() in title for title in titles)
    ]


def check_documented_hooks(path: Path, text: str, loaded: LoadedConfig) -> list[Violation]:
    """Report configured hooks the style guide never mentions in code formatting."""
    terms = extract_code_terms(text)
    return [
        Violation(
            code=RuleCode.DOC_HOOK_UNDOCUMENTED,
            message=f"hook {hook_id!r} from {loaded.path} is not documented",
            path=path,
            severity=Severity.WARNING,
        )
        for hook_id in loaded.config.hook_ids()
        if hook_id not in terms
    ]


def run_style_guide_guard(
    guide_path: Path,
    config_path: Path,
    settings: StyleGuardSettings,
) -> PolicyReport:
    """Check ``guide_path`` against ``config_path``.

    A missing guide is reported as a ``doc-missing`` violation rather than
    raised. A guide that cannot be read or decoded raises
    :class:`~styleguard_common.errors.ConfigParseError` or
    :class:`~styleguard_common.errors.ConfigurationError`. A missing
    configuration skips the hook documentation check; other configuration
    errors propagate.
    """
    if not guide_path.is_file():
        return PolicyReport(
            violations=(
                Violation(
                    code=RuleCode.DOC_MISSING,
                    message="style guide document not found",
                    path=guide_path,
                ),
            )
        )
    try:
        text = guide_path.read_text(encoding="utf-8")
    except UnicodeDecodeError as exc:
        message = f"Style guide is not UTF-8 text: {guide_path}"
        raise ConfigParseError(
            message, cause=exc, context={"source": str(guide_path), "offset": exc.start}
        ) from exc
    except OSError as exc:
        message = f"Style guide could not be read: {guide_path}"
        raise ConfigurationError(message, cause=exc, context={"path": str(guide_path)}) from exc
    violations = check_sections(guide_path, text, settings)
    try:
        loaded = load_config(config_path)
    except ConfigNotFoundError:
        LOGGER.warning(
            "Hook configuration missing; skipping hook documentation check",
            extra={"operation": "check-docs", "path": str(config_path)},
        )
    else:
        violations.extend(check_documented_hooks(guide_path, text, loaded))
    report = PolicyReport(violations=tuple(violations))
    LOGGER.info(
        "Checked style guide",
        extra={
            "operation": "check-docs",
            "status": "success" if report.is_clean else "violation",
            "path": str(guide_path),
            "violation_count": report.violation_count,
        },
    )
    return report
