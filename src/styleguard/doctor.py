"""Verify a checkout follows the style guide's workflow steps.

The guide asks contributors to work inside a virtual environment and to run
``pre-commit install`` so the hooks fire on every commit. ``doctor`` detects
the checkouts where those steps were skipped.
"""

from __future__ import annotations

import os
import sys
from pathlib import Path
from typing import TYPE_CHECKING

from styleguard._shared.process import AllowListEnforcer, ProcessRunner
from styleguard.report import PolicyReport, RuleCode, Severity, Violation
from styleguard_common.errors import ToolExecutionError
from styleguard_common.logging import get_logger, with_fields

if TYPE_CHECKING:
    from styleguard._shared.process import CommandRunner
    from styleguard._shared.settings import StyleGuardSettings

LOGGER = get_logger(__name__)

__all__ = (
    "check_environment",
    "hooks_directory",
    "in_virtualenv",
)

_HOOK_MARKER = "pre-commit"


def in_virtualenv() -> bool:
    """Return ``True`` when the interpreter runs inside a virtual environment."""
    return sys.prefix != sys.base_prefix or bool(os.environ.get("VIRTUAL_ENV"))


def hooks_directory(root: Path, runner: CommandRunner, *, timeout: float) -> Path | None:
    """Return the git hooks directory for ``root``, or ``None`` outside a repository.

    ``git rev-parse --git-path hooks`` honours ``core.hooksPath`` and worktrees,
    and prints a path relative to ``root`` unless it is absolute.
    """
    try:
        result = runner.run(["git", "rev-parse", "--git-path", "hooks"], cwd=root, timeout=timeout)
    except ToolExecutionError as exc:
        LOGGER.warning(
            "Could not run git",
            extra={"operation": "doctor", "path": str(root), "error": exc.message},
        )
        return None
    if not result.ok:
        return None
    location = Path(result.stdout.strip())
    return location if location.is_absolute() else root / location


def check_environment(
    root: Path,
    settings: StyleGuardSettings,
    runner: CommandRunner | None = None,
) -> PolicyReport:
    """Run the workflow checks for the checkout at ``root``.

    Parameters
    ----------
    root : Path
        Repository root.
    settings : StyleGuardSettings
        Active settings; ``config_path`` is resolved against ``root``.
    runner : CommandRunner | None, optional
        Command runner used for git. Defaults to a :class:`ProcessRunner`.

    Returns
    -------
    PolicyReport
        Workflow violations, possibly empty.
    """
    active_runner: CommandRunner = (
        runner
        if runner is not None
        else ProcessRunner(allowlist=AllowListEnforcer(settings_loader=lambda: settings))
    )
    log = with_fields(LOGGER, operation="doctor", path=str(root))
    violations: list[Violation] = []

    if settings.require_virtualenv and not in_virtualenv():
        violations.append(
            Violation(
                code=RuleCode.ENV_NO_VIRTUALENV,
                message="no virtual environment is active; create one with `python -m venv .venv`",
                severity=Severity.WARNING,
            )
        )

    config_path = settings.config_path
    if not config_path.is_absolute():
        config_path = root / config_path
    if not config_path.is_file():
        violations.append(
            Violation(
                code=RuleCode.ENV_CONFIG_MISSING,
                message="hook configuration is missing",
                path=config_path,
            )
        )

    hooks_dir = hooks_directory(root, active_runner, timeout=settings.git_timeout_seconds)
    if hooks_dir is None:
        violations.append(
            Violation(
                code=RuleCode.ENV_NOT_GIT_REPO,
                message=f"{root} is not inside a git repository",
                path=root,
            )
        )
    else:
        log.debug("Resolved git hooks directory", extra={"hooks_dir": str(hooks_dir)})
        hook_script = hooks_dir / "pre-commit"
        installed = hook_script.is_file() and _HOOK_MARKER in hook_script.read_text(
            encoding="utf-8", errors="replace"
        )
        if not installed:
            violations.append(
                Violation(
                    code=RuleCode.ENV_HOOKS_NOT_INSTALLED,
                    message="commit hooks are not installed; run `pre-commit install`",
                    path=hook_script,
                )
            )

    report = PolicyReport(violations=tuple(violations))
    log.info(
        "Checked workflow environment",
        extra={
            "status": "success" if report.is_clean else "violation",
            "violation_count": report.violation_count,
        },
    )
    return report
