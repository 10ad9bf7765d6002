"""Shared pytest fixtures for styleguard tests.

This module provides reusable fixtures for:
- Writing hook configurations and style guides into temporary repositories
- Settings isolated from the developer's ``STYLEGUARD_*`` environment
- A fake command runner standing in for git
"""

from __future__ import annotations

import logging
import os
from collections.abc import Callable, Iterator, Sequence
from dataclasses import dataclass, field
from pathlib import Path

import pytest

from styleguard._shared.process import ToolRunResult
from styleguard._shared.settings import StyleGuardSettings, reset_settings_cache

VALID_CONFIG = """\
repos:

  - repo: https://github.com/pre-commit/pre-commit-hooks
    rev: v4.4.0
    hooks:
      - id: check-yaml
      - id: debug-statements
      - id: end-of-file-fixer
      - id: trailing-whitespace

  - repo: https://github.com/charliermarsh/ruff-pre-commit
    rev: 'v0.0.261'
    hooks:
      - id: ruff
        args: ["--line-length", "120"]

  - repo: https://github.com/psf/black
    rev: 23.3.0
    hooks:
      - id: black
        args: ["--line-length", "120"]

  - repo: https://github.com/myint/autoflake
    rev: v2.0.2
    hooks:
      - id: autoflake
        exclude: migrations
"""

VALID_GUIDE = """\
# Python style guide

## Virtual environment

```bash
python -m venv .venv
```

## Linting and formatting

We run `black`, `ruff` and `autoflake`, plus `check-yaml`, `debug-statements`,
`end-of-file-fixer` and `trailing-whitespace`.

## Pre-commit hooks

Run `pre-commit install` once per clone.

## Pull requests

Every change goes through review.
"""


@pytest.fixture(autouse=True)
def _isolated_environment(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """Isolate ``STYLEGUARD_*`` settings and root log handlers for every test."""
    for key in list(os.environ):
        if key.upper().startswith("STYLEGUARD_"):
            monkeypatch.delenv(key, raising=False)
    reset_settings_cache()
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)
    reset_settings_cache()


@pytest.fixture
def settings() -> StyleGuardSettings:
    """Default settings, independent of the environment."""
    return StyleGuardSettings()


@pytest.fixture
def write_file(tmp_path: Path) -> Callable[[str, str], Path]:
    """Return a helper writing ``content`` to ``tmp_path / name``."""

    def _write(name: str, content: str) -> Path:
        path = tmp_path / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
        return path

    return _write


@pytest.fixture
def valid_config(write_file: Callable[[str, str], Path]) -> Path:
    """A hook configuration that satisfies every rule."""
    return write_file(".pre-commit-config.yaml", VALID_CONFIG)


@dataclass
class FakeRunner:
    """Command runner returning canned results and recording calls."""

    returncode: int = 0
    stdout: str = ""
    stderr: str = ""
    error: Exception | None = None
    calls: list[tuple[str, ...]] = field(default_factory=list)

    def run(
        self,
        command: Sequence[str],
        *,
        cwd: Path | None = None,
        timeout: float | None = None,
    ) -> ToolRunResult:
        self.calls.append(tuple(command))
        if self.error is not None:
            raise self.error
        return ToolRunResult(
            command=tuple(command),
            returncode=self.returncode,
            stdout=self.stdout,
            stderr=self.stderr,
            duration_seconds=0.0,
        )


@pytest.fixture
def fake_runner() -> FakeRunner:
    """A runner that reports success with empty output."""
    return FakeRunner()


@pytest.fixture
def config_text() -> str:
    """Text of a hook configuration that satisfies every rule."""
    return VALID_CONFIG


@pytest.fixture
def guide_text() -> str:
    """Text of a style guide documenting every hook in ``config_text``."""
    return VALID_GUIDE
