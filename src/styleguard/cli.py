"""Command-line entry point: ``styleguard {check-config,check-docs,doctor,all}``.

Human mode prints one ``location: code message`` line per violation on stdout.
``--json`` prints a single CLI envelope instead. Logs always go to stderr.

Exit codes: 0 clean (warnings allowed), 1 violations, 2 configuration or
runtime error.
"""

from __future__ import annotations

import argparse
import logging
import sys
import time
import uuid
from pathlib import Path
from typing import TYPE_CHECKING, Final, cast

from styleguard import __version__
from styleguard._shared.cli import CliEnvelopeBuilder, render_cli_envelope
from styleguard._shared.settings import StyleGuardSettings, load_settings
from styleguard.check_precommit_config import run_config_guard
from styleguard.check_style_guide import run_style_guide_guard
from styleguard.doctor import check_environment
from styleguard.report import PolicyReport
from styleguard_common.errors import (
    ConfigurationError,
    ErrorCode,
    PolicyViolationError,
    StyleGuardError,
    get_type_uri,
)
from styleguard_common.logging import CorrelationContext, get_logger, setup_logging, with_fields
from styleguard_common.problem_details import ProblemDetailsParams, problem_from_exception

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence

    from styleguard._shared.cli import CliStatus
    from styleguard.report import PolicyReportContext
    from styleguard_common.problem_details import ProblemDetails

LOGGER = get_logger(__name__)

EXIT_CODES: Final[dict[str, int]] = {
    "success": 0,
    "violation": 1,
    "config": 2,
    "error": 2,
}

__all__ = [
    "EXIT_CODES",
    "build_parser",
    "main",
]


def build_parser() -> argparse.ArgumentParser:
    """Return the argument parser for the ``styleguard`` command."""
    parser = argparse.ArgumentParser(
        prog="styleguard",
        description="Check a repository against the Python style guide.",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument(
        "--root",
        type=Path,
        default=None,
        help="Repository root; relative paths resolve against it (default: current directory).",
    )
    common.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Hook configuration file (default: STYLEGUARD_CONFIG_PATH or .pre-commit-config.yaml).",
    )
    common.add_argument(
        "--guide",
        type=Path,
        default=None,
        help="Style guide document (default: STYLEGUARD_STYLE_GUIDE_PATH or README.md).",
    )
    common.add_argument(
        "--json",
        action="store_true",
        help="Write a JSON envelope to stdout with detailed violations.",
    )
    common.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging.")

    subparsers = parser.add_subparsers(dest="command", required=True)
    subparsers.add_parser(
        "check-config", parents=[common], help="Validate hook pinning and required hooks."
    )
    subparsers.add_parser(
        "check-docs", parents=[common], help="Check the style guide against the configuration."
    )
    subparsers.add_parser(
        "doctor", parents=[common], help="Check the local checkout follows the workflow."
    )
    subparsers.add_parser("all", parents=[common], help="Run every check.")
    return parser


def _resolve_settings(args: argparse.Namespace, root: Path) -> StyleGuardSettings:
    settings = load_settings(StyleGuardSettings)
    config_path: Path = args.config or settings.config_path
    guide_path: Path = args.guide or settings.style_guide_path
    return settings.model_copy(
        update={
            "config_path": config_path if config_path.is_absolute() else root / config_path,
            "style_guide_path": guide_path if guide_path.is_absolute() else root / guide_path,
        }
    )


def _config_report(settings: StyleGuardSettings) -> PolicyReport:
    try:
        return run_config_guard(settings.config_path, settings)
    except PolicyViolationError as exc:
        return PolicyReport.from_context(cast("PolicyReportContext", exc.context))


def _docs_report(settings: StyleGuardSettings) -> PolicyReport:
    return run_style_guide_guard(settings.style_guide_path, settings.config_path, settings)


type _Command = Callable[[StyleGuardSettings, Path], list[tuple[Path, PolicyReport]]]

_COMMANDS: Final[dict[str, _Command]] = {
    "check-config": lambda settings, _root: [(settings.config_path, _config_report(settings))],
    "check-docs": lambda settings, _root: [(settings.style_guide_path, _docs_report(settings))],
    "doctor": lambda settings, root: [(root, check_environment(root, settings))],
    "all": lambda settings, root: [
        (settings.config_path, _config_report(settings)),
        (settings.style_guide_path, _docs_report(settings)),
        (root, check_environment(root, settings)),
    ],
}


def _emit_human(report: PolicyReport) -> None:
    for violation in report.violations:
        sys.stdout.write(
            f"{violation.location}: {violation.code.value} "
            f"[{violation.severity.value}] {violation.message}\n"
        )
    if report.violation_count:
        sys.stdout.write(
            f"{report.error_count} error(s), "
            f"{report.violation_count - report.error_count} warning(s)\n"
        )


def _unexpected_problem(exc: Exception, command: str) -> ProblemDetails:
    return problem_from_exception(
        exc,
        ProblemDetailsParams(
            problem_type=get_type_uri(ErrorCode.RUNTIME_ERROR),
            title="Unexpected error",
            status=500,
            detail="",
            instance=f"urn:styleguard:{command}:error",
            code=ErrorCode.RUNTIME_ERROR.value,
        ),
    )


def main(argv: Sequence[str] | None = None) -> int:
    """Run the ``styleguard`` command line.

    Parameters
    ----------
    argv : Sequence[str] | None, optional
        Arguments without the program name. Defaults to ``sys.argv[1:]``.

    Returns
    -------
    int
        Process exit code (see :data:`EXIT_CODES`).
    """
    args = build_parser().parse_args(argv)
    setup_logging(level=logging.DEBUG if args.verbose else logging.INFO, json_output=args.json)
    command: str = args.command
    root: Path = (args.root or Path.cwd()).resolve()
    builder = CliEnvelopeBuilder.create(command="styleguard", status="success", subcommand=command)
    report = PolicyReport()
    status: CliStatus = "success"
    start = time.perf_counter()

    with CorrelationContext(uuid.uuid4().hex):
        log = with_fields(LOGGER, operation=command, root=str(root))
        log.debug("Running styleguard command", extra={"status": "started"})
        try:
            settings = _resolve_settings(args, root)
            results = _COMMANDS[command](settings, root)
        except ConfigurationError as exc:
            status = "config"
            exc.log(operation=command)
            builder.set_problem(exc.to_problem_details(instance=f"urn:styleguard:{command}:config"))
        except StyleGuardError as exc:
            status = "error"
            exc.log(operation=command)
            builder.set_problem(exc.to_problem_details(instance=f"urn:styleguard:{command}:error"))
        except Exception as exc:
            status = "error"
            log.exception("styleguard command failed", extra={"error_code": ErrorCode.RUNTIME_ERROR.value})
            builder.set_problem(_unexpected_problem(exc, command))
        else:
            report = PolicyReport.merge(part for _, part in results)
            for path, part in results:
                builder.add_file(
                    path=str(path),
                    status="success" if part.is_clean else "violation",
                    message=f"{part.violation_count} violation(s)" if part.violation_count else None,
                )
            builder.add_report(report)
            status = "success" if report.is_clean else "violation"

        try:
            envelope = builder.set_status(status).finish(duration_seconds=time.perf_counter() - start)
        except StyleGuardError as exc:
            # The accumulated results are unusable; report only the failure.
            status = "error"
            exc.log(operation=command)
            envelope = (
                CliEnvelopeBuilder.create(command="styleguard", status=status, subcommand=command)
                .set_problem(exc.to_problem_details(instance=f"urn:styleguard:{command}:error"))
                .finish(duration_seconds=time.perf_counter() - start)
            )
        log.debug("Finished styleguard command", extra={"status": status})

    if args.json:
        sys.stdout.write(render_cli_envelope(envelope) + "\n")
    elif status in {"config", "error"}:
        problem = envelope.problem
        detail = problem.get("detail") if isinstance(problem, dict) else None
        sys.stderr.write(f"styleguard: {detail or status}\n")
    else:
        _emit_human(report)
    return EXIT_CODES[status]


if __name__ == "__main__":
    sys.exit(main())
