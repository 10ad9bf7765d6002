"""Check a pre-commit hook configuration against the style guide's pinning rules.

Every remote hook repository must be pinned to a semantic-version tag, the
hooks the style guide requires must be enabled, and formatters that take a
line length must agree with the guide's limit.

Examples
--------
>>> python -m styleguard check-config --config .pre-commit-config.yaml
# Exits 0 when the configuration is clean (warnings allowed)
# Exits 1 with one line per violation otherwise
"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING, Final

from styleguard.precommit.loader import LoadedConfig, load_config
from styleguard.precommit.models import normalize_repo_url
from styleguard.precommit.revisions import (
    FLOATING_REVISIONS,
    RevisionError,
    looks_like_commit,
    parse_revision,
)
from styleguard.report import PolicyReport, RuleCode, Severity, Violation
from styleguard_common.errors import PolicyViolationError
from styleguard_common.logging import get_logger

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence
    from pathlib import Path

    from styleguard._shared.settings import StyleGuardSettings
    from styleguard.precommit.models import HookSpec

LOGGER = get_logger(__name__)

__all__ = (
    "CONFIG_CHECKS",
    "check_duplicates",
    "check_line_length",
    "check_required_hooks",
    "check_revisions",
    "declared_line_length",
    "run_config_guard",
)

_LINE_LENGTH_FLAGS: Final[frozenset[str]] = frozenset(
    {"--line-length", "-l", "--max-line-length"}
)
_LINE_LENGTH_INLINE: Final = re.compile(r"^(?:--line-length|--max-line-length)=(?P<value>\S+)$")


def check_revisions(loaded: LoadedConfig, settings: StyleGuardSettings) -> list[Violation]:
    """Report repositories whose ``rev`` is missing, floating, unparsable or too old."""
    minimums = {normalize_repo_url(url): rev for url, rev in settings.minimum_revisions.items()}
    violations: list[Violation] = []
    for repo in loaded.config.repos:
        if repo.is_sentinel:
            continue
        rev = repo.rev
        if rev is None or not rev.strip():
            violations.append(
                Violation(
                    code=RuleCode.REV_MISSING,
                    message=f"{repo.repo} has no rev; pin it to a release tag",
                    path=loaded.path,
                    line=repo.line,
                )
            )
            continue
        if rev.strip() in FLOATING_REVISIONS:
            violations.append(
                Violation(
                    code=RuleCode.REV_FLOATING,
                    message=f"{repo.repo} tracks the branch {rev!r}; pin it to a release tag",
                    path=loaded.path,
                    line=repo.line,
                )
            )
            continue
        try:
            version = parse_revision(rev)
        except RevisionError:
            if settings.allow_commit_revisions and looks_like_commit(rev):
                continue
            violations.append(
                Violation(
                    code=RuleCode.REV_NOT_SEMVER,
                    message=f"{repo.repo} rev {rev!r} is not a semantic version",
                    path=loaded.path,
                    line=repo.line,
                )
            )
            continue
        minimum = minimums.get(normalize_repo_url(repo.repo))
        if minimum is not None and version < parse_revision(minimum):
            violations.append(
                Violation(
                    code=RuleCode.REV_BELOW_MINIMUM,
                    message=f"{repo.repo} rev {rev!r} is older than the minimum {minimum!r}",
                    path=loaded.path,
                    line=repo.line,
                )
            )
    return violations


def check_duplicates(loaded: LoadedConfig) -> list[Violation]:
    """Report repositories listed twice and hooks repeated within one repository."""
    violations: list[Violation] = []
    seen_repos: dict[str, int] = {}
    for repo in loaded.config.repos:
        if not repo.is_sentinel:
            key = normalize_repo_url(repo.repo)
            first_line = seen_repos.get(key)
            if first_line is not None:
                violations.append(
                    Violation(
                        code=RuleCode.REPO_DUPLICATE,
                        message=f"{repo.repo} is already listed at line {first_line}",
                        path=loaded.path,
                        line=repo.line,
                        severity=Severity.WARNING,
                    )
                )
            else:
                seen_repos[key] = repo.line
        seen_hooks: set[str] = set()
        for hook in repo.hooks:
            if hook.id in seen_hooks:
                violations.append(
                    Violation(
                        code=RuleCode.HOOK_DUPLICATE,
                        message=f"hook {hook.id!r} appears more than once under {repo.repo}",
                        path=loaded.path,
                        line=hook.line,
                    )
                )
            seen_hooks.add(hook.id)
    return violations


def check_required_hooks(loaded: LoadedConfig, settings: StyleGuardSettings) -> list[Violation]:
    """Report hooks the style guide requires but the configuration does not enable."""
    configured = set(loaded.config.hook_ids())
    return [
        Violation(
            code=RuleCode.HOOK_MISSING,
            message=f"required hook {hook_id!r} is not configured",
            path=loaded.path,
        )
        for hook_id in settings.required_hooks
        if hook_id not in configured
    ]


def declared_line_length(hook: HookSpec) -> str | None:
    """Return the line length passed in ``hook.args`` (as written), if any.

    Examples
    --------
    >>> from styleguard.precommit.models import HookSpec
    >>> declared_line_length(HookSpec(id="ruff", args=["--line-length", "120"]))
    '120'
    >>> declared_line_length(HookSpec(id="black", args=["--line-length=100"]))
    '100'
    """
    args = hook.args
    for index, arg in enumerate(args):
        if arg in _LINE_LENGTH_FLAGS:
            return args[index + 1] if index + 1 < len(args) else ""
        match = _LINE_LENGTH_INLINE.match(arg)
        if match is not None:
            return match.group("value")
    return None


def check_line_length(loaded: LoadedConfig, settings: StyleGuardSettings) -> list[Violation]:
    """Report line-length hooks that omit or disagree with the configured limit."""
    expected = str(settings.line_length)
    targets = set(settings.line_length_hooks)
    violations: list[Violation] = []
    for _, hook in loaded.config.iter_hooks():
        if hook.id not in targets:
            continue
        declared = declared_line_length(hook)
        if declared is None:
            message = f"hook {hook.id!r} must pass --line-length {expected}"
        elif declared != expected:
            message = f"hook {hook.id!r} uses line length {declared!r}, expected {expected}"
        else:
            continue
        violations.append(
            Violation(
                code=RuleCode.HOOK_LINE_LENGTH,
                message=message,
                path=loaded.path,
                line=hook.line,
            )
        )
    return violations


def _duplicates(loaded: LoadedConfig, _settings: StyleGuardSettings) -> list[Violation]:
    return check_duplicates(loaded)


CONFIG_CHECKS: Final[
    tuple[Callable[[LoadedConfig, StyleGuardSettings], Sequence[Violation]], ...]
] = (
    check_revisions,
    _duplicates,
    check_required_hooks,
    check_line_length,
)


def run_config_guard(path: Path, settings: StyleGuardSettings) -> PolicyReport:
    """Load ``path`` and run every configuration check.

    Parameters
    ----------
    path : Path
        Hook configuration file.
    settings : StyleGuardSettings
        Active settings.

    Returns
    -------
    PolicyReport
        Report of warnings when no errors were found.

    Raises
    ------
    PolicyViolationError
        If any error-severity violation is found. ``context`` is the report context.
    """
    loaded = load_config(path)
    violations: list[Violation] = []
    for check in CONFIG_CHECKS:
        violations.extend(check(loaded, settings))
    report = PolicyReport(violations=tuple(violations))
    LOGGER.info(
        "Checked hook configuration",
        extra={
            "operation": "check-config",
            "status": "success" if report.is_clean else "violation",
            "path": str(path),
            "repo_count": len(loaded.config.repos),
            "violation_count": report.violation_count,
        },
    )
    if not report.is_clean:
        message = f"{report.error_count} hook configuration violation(s) in {path}"
        raise PolicyViolationError(message, context=dict(report.to_context()))
    return report
