"""Running external commands for styleguard.

``doctor`` is the only caller today: it asks git where the hooks directory
lives. Commands resolve through ``PATH`` and must match the
``STYLEGUARD_EXEC_ALLOWLIST`` globs, and they run with a trimmed environment.
Tests pass any object with a compatible ``run`` method (see
:class:`CommandRunner`).
"""

from __future__ import annotations

import os
import shutil
import subprocess
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Final, Protocol, runtime_checkable

from styleguard._shared.settings import get_settings
from styleguard_common.errors import ToolExecutionError
from styleguard_common.logging import get_logger

if TYPE_CHECKING:
    from collections.abc import Callable, Mapping, Sequence

    from styleguard._shared.settings import StyleGuardSettings

__all__ = [
    "AllowListEnforcer",
    "CommandRunner",
    "ProcessRunner",
    "SanitisedEnvironment",
    "ToolRunResult",
]

LOGGER = get_logger(__name__)

_PASSTHROUGH_ENV: Final[frozenset[str]] = frozenset(
    {"HOME", "PATH", "LANG", "LC_ALL", "LC_CTYPE", "TZ", "VIRTUAL_ENV"}
)


@dataclass(slots=True, frozen=True)
class ToolRunResult:
    """Exit status, captured output and wall time of one command."""

    command: tuple[str, ...]
    returncode: int
    stdout: str
    stderr: str
    duration_seconds: float

    @property
    def ok(self) -> bool:
        """Return ``True`` for exit status 0."""
        return self.returncode == 0


@runtime_checkable
class CommandRunner(Protocol):
    """Anything that can run a command and report a :class:`ToolRunResult`."""

    def run(
        self,
        command: Sequence[str],
        *,
        cwd: Path | None = None,
        timeout: float | None = None,
    ) -> ToolRunResult: ...


@dataclass(slots=True, frozen=True)
class AllowListEnforcer:
    """Map a command name to an absolute path permitted by the settings."""

    settings_loader: Callable[[], StyleGuardSettings] = get_settings

    def resolve(self, executable: str, command: Sequence[str]) -> Path:
        """Return the absolute path for ``executable``.

        Raises
        ------
        ToolExecutionError
            If ``executable`` is not on ``PATH`` or no allow-list glob matches it.
        """
        path = Path(executable)
        if not path.is_absolute():
            found = shutil.which(executable)
            if found is None:
                message = f"Executable '{executable}' could not be resolved to an absolute path"
                raise ToolExecutionError(message, command=command)
            path = Path(found)
        if not self.settings_loader().is_allowed(path):
            message = f"Executable '{path}' is not permitted by STYLEGUARD_EXEC_ALLOWLIST"
            LOGGER.warning(message, extra={"operation": "process", "command": list(command)})
            raise ToolExecutionError(message, command=command)
        return path


@dataclass(slots=True, frozen=True)
class SanitisedEnvironment:
    """Child environment: a few locale and path variables, plus every ``GIT_*``."""

    allowed_keys: frozenset[str] = _PASSTHROUGH_ENV

    def build(self, overrides: Mapping[str, str] | None = None) -> dict[str, str]:
        env = {
            name: value
            for name, value in os.environ.items()
            if name in self.allowed_keys or name.startswith("GIT_")
        }
        env.update(overrides or {})
        return env


@dataclass(slots=True)
class ProcessRunner:
    """Default :class:`CommandRunner` backed by :func:`subprocess.run`."""

    allowlist: AllowListEnforcer = field(default_factory=AllowListEnforcer)
    environment: SanitisedEnvironment = field(default_factory=SanitisedEnvironment)

    def run(
        self,
        command: Sequence[str],
        *,
        cwd: Path | None = None,
        timeout: float | None = None,
    ) -> ToolRunResult:
        """Run ``command`` and capture text output.

        A non-zero exit status is returned, not raised.

        Raises
        ------
        ToolExecutionError
            If the command is empty, not allow-listed, missing, or times out.
        """
        if not command:
            message = "Command must contain at least one argument"
            raise ToolExecutionError(message, command=[])

        argv = (str(self.allowlist.resolve(command[0], command)), *command[1:])
        started = time.perf_counter()
        try:
            completed = subprocess.run(
                argv,
                cwd=None if cwd is None else str(cwd),
                env=self.environment.build(),
                capture_output=True,
                text=True,
                timeout=timeout,
                check=False,
            )
        except subprocess.TimeoutExpired as exc:
            message = f"Subprocess timed out after {timeout} seconds"
            raise ToolExecutionError(message, command=command, cause=exc) from exc
        except FileNotFoundError as exc:
            message = f"Executable not found: {argv[0]}"
            raise ToolExecutionError(message, command=command, cause=exc) from exc

        elapsed = time.perf_counter() - started
        LOGGER.debug(
            "Subprocess finished",
            extra={
                "operation": "process",
                "command": list(command),
                "returncode": completed.returncode,
                "duration_ms": round(elapsed * 1000, 3),
            },
        )
        return ToolRunResult(
            command=argv,
            returncode=completed.returncode,
            stdout=completed.stdout,
            stderr=completed.stderr,
            duration_seconds=elapsed,
        )
