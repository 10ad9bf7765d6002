"""Tests for the workflow environment checks."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import pytest

from styleguard import doctor
from styleguard._shared.settings import StyleGuardSettings
from styleguard.doctor import check_environment, hooks_directory, in_virtualenv
from styleguard.report import RuleCode, Severity
from styleguard_common.errors import ToolExecutionError

if TYPE_CHECKING:
    from collections.abc import Callable
    from pathlib import Path

    from conftest import FakeRunner

HOOK_SCRIPT = "#!/usr/bin/env bash\n# File generated by pre-commit: https://pre-commit.com\nexec pre-commit hook-impl\n"


@pytest.fixture(autouse=True)
def _inside_virtualenv(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(doctor, "in_virtualenv", lambda: True)


def test_healthy_checkout(
    write_file: Callable[[str, str], Path],
    valid_config: Path,
    fake_runner: FakeRunner,
    settings: StyleGuardSettings,
) -> None:
    """A git checkout with installed hooks and a configuration passes."""
    root = valid_config.parent
    write_file(".git/hooks/pre-commit", HOOK_SCRIPT)
    fake_runner.stdout = ".git/hooks\n"

    report = check_environment(root, settings, fake_runner)

    assert report.violation_count == 0
    assert fake_runner.calls == [("git", "rev-parse", "--git-path", "hooks")]


def test_hooks_not_installed(
    valid_config: Path,
    fake_runner: FakeRunner,
    settings: StyleGuardSettings,
) -> None:
    """A repository without the generated hook script is told to run ``pre-commit install``."""
    root = valid_config.parent
    fake_runner.stdout = str(root / ".git" / "hooks")

    report = check_environment(root, settings, fake_runner)

    assert [v.code for v in report.violations] == [RuleCode.ENV_HOOKS_NOT_INSTALLED]
    assert report.violations[0].path == root / ".git" / "hooks" / "pre-commit"


def test_foreign_hook_script_is_not_accepted(
    write_file: Callable[[str, str], Path],
    valid_config: Path,
    fake_runner: FakeRunner,
    settings: StyleGuardSettings,
) -> None:
    """A hand-written hook that does not call the hook runner does not count."""
    write_file(".git/hooks/pre-commit", "#!/bin/sh\nmake lint\n")
    fake_runner.stdout = ".git/hooks"

    report = check_environment(valid_config.parent, settings, fake_runner)

    assert [v.code for v in report.violations] == [RuleCode.ENV_HOOKS_NOT_INSTALLED]


def test_not_a_git_repository(
    tmp_path: Path, fake_runner: FakeRunner, settings: StyleGuardSettings
) -> None:
    """A failing ``git rev-parse`` means the root is outside a repository."""
    fake_runner.returncode = 128
    fake_runner.stderr = "fatal: not a git repository"

    report = check_environment(tmp_path, settings, fake_runner)

    assert {v.code for v in report.violations} == {
        RuleCode.ENV_CONFIG_MISSING,
        RuleCode.ENV_NOT_GIT_REPO,
    }
    assert not report.is_clean


def test_summary_log_is_bound_to_the_root(
    tmp_path: Path,
    fake_runner: FakeRunner,
    settings: StyleGuardSettings,
    caplog: pytest.LogCaptureFixture,
) -> None:
    """The closing log record names the operation, the root and the outcome."""
    fake_runner.returncode = 128

    with caplog.at_level(logging.INFO, logger="styleguard.doctor"):
        check_environment(tmp_path, settings, fake_runner)

    record = caplog.records[-1]
    assert record.getMessage() == "Checked workflow environment"
    assert getattr(record, "operation", None) == "doctor"
    assert getattr(record, "path", None) == str(tmp_path)
    assert getattr(record, "status", None) == "violation"
    assert getattr(record, "violation_count", None) == 2


def test_git_failure_is_treated_as_no_repository(tmp_path: Path, fake_runner: FakeRunner) -> None:
    """An unavailable git is logged and reported as no hooks directory."""
    fake_runner.error = ToolExecutionError("Executable not found", command=["git"])

    assert hooks_directory(tmp_path, fake_runner, timeout=1.0) is None


def test_missing_virtualenv_is_a_warning(
    monkeypatch: pytest.MonkeyPatch,
    write_file: Callable[[str, str], Path],
    valid_config: Path,
    fake_runner: FakeRunner,
) -> None:
    """Working outside a virtual environment warns unless the check is disabled."""
    monkeypatch.setattr(doctor, "in_virtualenv", lambda: False)
    write_file(".git/hooks/pre-commit", HOOK_SCRIPT)
    fake_runner.stdout = ".git/hooks"
    root = valid_config.parent

    report = check_environment(root, StyleGuardSettings(), fake_runner)

    assert report.is_clean
    assert [(v.code, v.severity) for v in report.violations] == [
        (RuleCode.ENV_NO_VIRTUALENV, Severity.WARNING)
    ]

    relaxed = StyleGuardSettings(require_virtualenv=False)
    assert check_environment(root, relaxed, fake_runner).violation_count == 0


def test_in_virtualenv_reads_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    """``VIRTUAL_ENV`` alone marks an active environment."""
    monkeypatch.setenv("VIRTUAL_ENV", "/tmp/venv")

    assert in_virtualenv()
