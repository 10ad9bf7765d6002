"""Exceptions raised by styleguard, each mappable to RFC 9457 Problem Details.

``ConfigurationError`` and its subclasses mean the inputs are unusable (bad
settings, a missing or malformed hook configuration); the CLI exits with its
``config`` status for them. ``PolicyViolationError`` carries a serialized
report. The rest describe styleguard failing to run.

Examples
--------
>>> from styleguard_common.errors import ConfigParseError, ErrorCode
>>> error = ConfigParseError("Malformed YAML", context={"line": 3})
>>> error.code is ErrorCode.CONFIG_PARSE_ERROR
True
>>> error.to_problem_details()["status"]
422
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from typing import TYPE_CHECKING, cast

from styleguard_common.errors.codes import ErrorCode, get_type_uri
from styleguard_common.logging import get_logger
from styleguard_common.problem_details import build_problem_details

if TYPE_CHECKING:
    from styleguard_common.problem_details import JsonValue, ProblemDetails

logger = get_logger(__name__)

__all__ = [
    "ConfigNotFoundError",
    "ConfigParseError",
    "ConfigValidationError",
    "ConfigurationError",
    "PolicyViolationError",
    "RevisionError",
    "SchemaValidationError",
    "SettingsError",
    "StyleGuardError",
    "ToolExecutionError",
]


class StyleGuardError(Exception):
    """Root of the styleguard exception tree.

    Parameters
    ----------
    message : str
        What went wrong, for humans.
    code : ErrorCode, optional
        Stable identifier; also selects the Problem Details type URI.
    http_status : int, optional
        Severity carried into Problem Details ``status``. Defaults to 500.
    log_level : int, optional
        Level used by :meth:`log`. Defaults to ``logging.ERROR``.
    cause : Exception | None, optional
        Stored as ``__cause__``.
    context : Mapping[str, object] | None, optional
        JSON-safe details, emitted as Problem Details ``extensions``.
    """

    def __init__(
        self,
        message: str,
        *,
        code: ErrorCode = ErrorCode.RUNTIME_ERROR,
        http_status: int = 500,
        log_level: int = logging.ERROR,
        cause: Exception | None = None,
        context: Mapping[str, object] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code
        self.http_status = http_status
        self.log_level = log_level
        self.context: dict[str, object] = dict(context or {})
        if cause is not None:
            self.__cause__ = cause

    def to_problem_details(
        self,
        instance: str | None = None,
        title: str | None = None,
    ) -> ProblemDetails:
        """Return this error as a validated Problem Details payload.

        ``instance`` defaults to ``urn:styleguard:error`` and ``title`` to the
        class name.
        """
        return build_problem_details(
            get_type_uri(self.code),
            title or type(self).__name__,
            self.http_status,
            self.message,
            instance or "urn:styleguard:error",
            code=self.code.value,
            extensions=cast("Mapping[str, JsonValue] | None", self.context or None),
        )

    def log(self, *, operation: str = "unknown") -> None:
        """Log ``str(self)`` at this error's level, tagged with its code."""
        logger.log(
            self.log_level,
            str(self),
            extra={"operation": operation, "status": "error", "error_code": self.code.value},
        )

    def __str__(self) -> str:
        text = f"{type(self).__name__}[{self.code.value}]: {self.message}"
        if self.__cause__ is not None:
            text = f"{text} (caused by: {type(self.__cause__).__name__})"
        return text


class ConfigurationError(StyleGuardError):
    """Settings or input files cannot be used as given.

    Examples
    --------
    >>> ConfigurationError("Missing hook configuration").code.value
    'configuration-error'
    """

    def __init__(
        self,
        message: str,
        cause: Exception | None = None,
        context: Mapping[str, object] | None = None,
        *,
        code: ErrorCode = ErrorCode.CONFIGURATION_ERROR,
        http_status: int = 500,
    ) -> None:
        super().__init__(
            message,
            code=code,
            http_status=http_status,
            log_level=logging.CRITICAL,
            cause=cause,
            context=context,
        )


class SettingsError(ConfigurationError):
    """``STYLEGUARD_*`` settings failed validation.

    ``errors`` holds pydantic's findings as JSON-safe dicts (``loc``, ``msg``,
    ``type``) and is repeated under ``context["errors"]``.
    """

    def __init__(
        self,
        message: str,
        *,
        errors: Sequence[Mapping[str, object]],
        cause: Exception | None = None,
    ) -> None:
        self.errors: tuple[dict[str, object], ...] = tuple(dict(err) for err in errors)
        super().__init__(
            message,
            cause,
            {"errors": list(self.errors)},
            code=ErrorCode.SETTINGS_INVALID,
        )


class ConfigNotFoundError(ConfigurationError):
    """The hook configuration file does not exist."""

    def __init__(self, message: str, *, path: str) -> None:
        super().__init__(message, context={"path": path}, code=ErrorCode.CONFIG_NOT_FOUND, http_status=404)


class ConfigParseError(ConfigurationError):
    """The hook configuration is not valid YAML; ``context`` has line and column."""

    def __init__(
        self,
        message: str,
        cause: Exception | None = None,
        context: Mapping[str, object] | None = None,
    ) -> None:
        super().__init__(message, cause, context, code=ErrorCode.CONFIG_PARSE_ERROR, http_status=422)


class ConfigValidationError(ConfigurationError):
    """The YAML parsed but is not a pre-commit configuration."""

    def __init__(
        self,
        message: str,
        cause: Exception | None = None,
        context: Mapping[str, object] | None = None,
    ) -> None:
        super().__init__(message, cause, context, code=ErrorCode.CONFIG_VALIDATION_ERROR, http_status=422)


class RevisionError(StyleGuardError):
    """A ``rev`` is not a semantic version. ``revision`` keeps it verbatim."""

    def __init__(self, message: str, *, revision: str) -> None:
        super().__init__(
            message,
            code=ErrorCode.REVISION_INVALID,
            http_status=422,
            log_level=logging.WARNING,
            context={"revision": revision},
        )
        self.revision = revision


class PolicyViolationError(StyleGuardError):
    """A guard found errors; ``context`` is the report's ``to_context()`` payload."""

    def __init__(self, message: str, *, context: Mapping[str, object]) -> None:
        super().__init__(
            message,
            code=ErrorCode.POLICY_VIOLATION,
            http_status=422,
            log_level=logging.WARNING,
            context=context,
        )


class SchemaValidationError(StyleGuardError):
    """An emitted payload does not match its bundled JSON Schema."""

    def __init__(
        self,
        message: str,
        cause: Exception | None = None,
        context: Mapping[str, object] | None = None,
    ) -> None:
        super().__init__(message, code=ErrorCode.SCHEMA_VALIDATION_ERROR, cause=cause, context=context)


class ToolExecutionError(StyleGuardError):
    """An external command (git) could not be run.

    Parameters
    ----------
    message : str
        What went wrong.
    command : Sequence[str]
        The command as requested.
    returncode : int | None, optional
        Exit status, when the process ran.
    streams : tuple[str, str] | None, optional
        Captured ``(stdout, stderr)``.
    cause : Exception | None, optional
        Underlying exception.
    """

    def __init__(
        self,
        message: str,
        *,
        command: Sequence[str],
        returncode: int | None = None,
        streams: tuple[str, str] | None = None,
        cause: Exception | None = None,
    ) -> None:
        self.command: tuple[str, ...] = tuple(command)
        self.returncode = returncode
        self.stdout, self.stderr = streams or ("", "")
        context: dict[str, object] = {"command": list(self.command)}
        if returncode is not None:
            context["returncode"] = returncode
        super().__init__(message, code=ErrorCode.TOOL_EXECUTION_ERROR, cause=cause, context=context)
