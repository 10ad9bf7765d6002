"""Shared infrastructure for the styleguard tooling.

The package groups the pieces every styleguard command relies on: structured
logging, RFC 9457 Problem Details payloads and the typed exception hierarchy.
Nothing here knows about pre-commit configuration or style guides.
"""

from __future__ import annotations

from styleguard_common.errors import ErrorCode, StyleGuardError
from styleguard_common.logging import get_logger, setup_logging, with_fields
from styleguard_common.problem_details import build_problem_details, render_problem

__all__ = [
    "ErrorCode",
    "StyleGuardError",
    "build_problem_details",
    "get_logger",
    "render_problem",
    "setup_logging",
    "with_fields",
]
