"""Exception hierarchy and Problem Details support.

Examples
--------
>>> from styleguard_common.errors import StyleGuardError, ErrorCode
>>> error = StyleGuardError("Operation failed", code=ErrorCode.RUNTIME_ERROR)
>>> error.to_problem_details()["type"]
'https://styleguard.dev/problems/runtime-error'
"""

from __future__ import annotations

from styleguard_common.errors.codes import BASE_TYPE_URI, ErrorCode, get_type_uri
from styleguard_common.errors.exceptions import (
    ConfigNotFoundError,
    ConfigParseError,
    ConfigurationError,
    ConfigValidationError,
    PolicyViolationError,
    RevisionError,
    SchemaValidationError,
    SettingsError,
    StyleGuardError,
    ToolExecutionError,
)

__all__ = [
    "BASE_TYPE_URI",
    "ConfigNotFoundError",
    "ConfigParseError",
    "ConfigValidationError",
    "ConfigurationError",
    "ErrorCode",
    "PolicyViolationError",
    "RevisionError",
    "SchemaValidationError",
    "SettingsError",
    "StyleGuardError",
    "ToolExecutionError",
    "get_type_uri",
]
