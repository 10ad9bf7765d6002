"""Error code registry and type URIs for Problem Details.

Codes and URIs are stable: external tooling (CI annotations, dashboards) keys
on them, so existing members are never renamed.

Examples
--------
>>> from styleguard_common.errors.codes import ErrorCode, get_type_uri
>>> get_type_uri(ErrorCode.CONFIG_PARSE_ERROR)
'https://styleguard.dev/problems/config-parse-error'
"""

from __future__ import annotations

from enum import StrEnum
from typing import Final

__all__ = [
    "BASE_TYPE_URI",
    "ErrorCode",
    "get_type_uri",
]


BASE_TYPE_URI: Final[str] = "https://styleguard.dev/problems"


class ErrorCode(StrEnum):
    """Stable error codes for styleguard exceptions.

    Error codes are organized by category:
    - Configuration & settings
    - Hook configuration files
    - Policy results
    - Runtime & tooling
    """

    CONFIGURATION_ERROR = "configuration-error"
    SETTINGS_INVALID = "settings-invalid"

    CONFIG_NOT_FOUND = "config-not-found"
    CONFIG_PARSE_ERROR = "config-parse-error"
    CONFIG_VALIDATION_ERROR = "config-validation-error"
    REVISION_INVALID = "revision-invalid"

    POLICY_VIOLATION = "policy-violation"

    SCHEMA_VALIDATION_ERROR = "schema-validation-error"
    TOOL_EXECUTION_ERROR = "tool-execution-error"
    RUNTIME_ERROR = "runtime-error"


def get_type_uri(code: ErrorCode) -> str:
    """Return the Problem Details type URI for ``code``."""
    return f"{BASE_TYPE_URI}/{code.value}"
