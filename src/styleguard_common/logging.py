"""Structured logging for styleguard commands.

Library modules log through :func:`get_logger`, which returns an adapter that
stamps every record with ``operation``, ``status`` and the current run's
``correlation_id``. Only the CLI installs handlers, via :func:`setup_logging`,
and it always writes to stderr so stdout can carry a JSON envelope.

Examples
--------
>>> from styleguard_common.logging import get_logger
>>> logger = get_logger(__name__)
>>> logger.info("Check started", extra={"operation": "check-config", "status": "started"})
"""

from __future__ import annotations

import contextvars
import json
import logging
import sys
from contextlib import AbstractContextManager
from typing import TYPE_CHECKING, Any, Final, Self, cast

if TYPE_CHECKING:
    from collections.abc import Mapping
    from types import TracebackType

    from styleguard_common.types import JsonValue

__all__ = [
    "CorrelationContext",
    "JsonFormatter",
    "LoggerAdapter",
    "get_correlation_id",
    "get_logger",
    "setup_logging",
    "with_fields",
]

_correlation_id: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "styleguard_correlation_id", default=None
)

# Attributes every LogRecord has; anything else arrived through ``extra``.
_RECORD_ATTRS: Final[frozenset[str]] = frozenset(
    {*logging.makeLogRecord({}).__dict__, "message", "asctime", "taskName"}
)
_LEADING_FIELDS: Final = ("correlation_id", "operation", "status")


class JsonFormatter(logging.Formatter):
    """Render each record as one JSON object per line.

    The object holds ``ts``, ``level``, ``name`` and ``message``, then the
    structured fields, then any other JSON-compatible ``extra`` values.
    Private (underscore) attributes and ``None`` values are dropped.
    """

    def format(self, record: logging.LogRecord) -> str:
        data: dict[str, JsonValue] = {
            "ts": self.formatTime(record, "%Y-%m-%dT%H:%M:%S.%f")[:-3] + "Z",
            "level": record.levelname,
            "name": record.name,
            "message": record.getMessage(),
        }
        for key in _LEADING_FIELDS:
            value = getattr(record, key, None)
            if value is not None:
                data[key] = value
        data.setdefault("correlation_id", _correlation_id.get())
        if data["correlation_id"] is None:
            del data["correlation_id"]

        for key, value in record.__dict__.items():
            if key in _RECORD_ATTRS or key in data or key.startswith("_") or value is None:
                continue
            if isinstance(value, str | int | float | bool | list | dict):
                data[key] = cast("JsonValue", value)

        if record.exc_info:
            data["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(data, default=str)


class LoggerAdapter(logging.LoggerAdapter[logging.Logger]):
    """Adapter merging bound fields, the correlation id and default status.

    Call-site ``extra`` values win over fields bound with :func:`with_fields`.
    ``status`` defaults to ``error``, ``warning`` or ``success`` by level and
    ``operation`` to ``unknown``.
    """

    def log(self, level: int, msg: object, *args: object, **kwargs: Any) -> None:
        if not self.isEnabledFor(level):
            return
        merged: dict[str, Any] = dict(kwargs.get("extra") or {})
        for key, value in cast("Mapping[str, object]", self.extra or {}).items():
            merged.setdefault(key, value)
        correlation_id = _correlation_id.get()
        if correlation_id is not None:
            merged.setdefault("correlation_id", correlation_id)
        merged.setdefault("operation", "unknown")
        merged.setdefault("status", _default_status(level))
        kwargs["extra"] = merged
        kwargs.setdefault("stacklevel", 2)
        self.logger.log(level, msg, *args, **kwargs)

    # The level helpers route through ``log`` so the merge happens once.
    def debug(self, msg: object, *args: object, **kwargs: Any) -> None:
        kwargs.setdefault("stacklevel", 3)
        self.log(logging.DEBUG, msg, *args, **kwargs)

    def info(self, msg: object, *args: object, **kwargs: Any) -> None:
        kwargs.setdefault("stacklevel", 3)
        self.log(logging.INFO, msg, *args, **kwargs)

    def warning(self, msg: object, *args: object, **kwargs: Any) -> None:
        kwargs.setdefault("stacklevel", 3)
        self.log(logging.WARNING, msg, *args, **kwargs)

    def error(self, msg: object, *args: object, **kwargs: Any) -> None:
        kwargs.setdefault("stacklevel", 3)
        self.log(logging.ERROR, msg, *args, **kwargs)

    def exception(self, msg: object, *args: object, exc_info: Any = True, **kwargs: Any) -> None:
        kwargs.setdefault("stacklevel", 3)
        self.log(logging.ERROR, msg, *args, exc_info=exc_info, **kwargs)

    def critical(self, msg: object, *args: object, **kwargs: Any) -> None:
        kwargs.setdefault("stacklevel", 3)
        self.log(logging.CRITICAL, msg, *args, **kwargs)


def _default_status(level: int) -> str:
    if level >= logging.ERROR:
        return "error"
    if level >= logging.WARNING:
        return "warning"
    return "success"


def get_logger(name: str) -> LoggerAdapter:
    """Return a structured adapter for ``name``.

    A ``NullHandler`` is attached so importing a styleguard module never
    prints anything until :func:`setup_logging` runs.
    """
    logger = logging.getLogger(name)
    if not logger.handlers:
        logger.addHandler(logging.NullHandler())
    return LoggerAdapter(logger, {})


def setup_logging(level: int = logging.INFO, *, json_output: bool = True) -> None:
    """Install a single stderr handler on the root logger.

    Parameters
    ----------
    level : int, optional
        Threshold for the root logger. Defaults to ``logging.INFO``.
    json_output : bool, optional
        Use :class:`JsonFormatter` when True, ``LEVEL message`` lines otherwise.
    """
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        JsonFormatter() if json_output else logging.Formatter("%(levelname)s %(message)s")
    )
    logging.basicConfig(level=level, handlers=[handler], force=True)


def get_correlation_id() -> str | None:
    """Return the correlation id bound to the current context, if any."""
    return _correlation_id.get()


class CorrelationContext:
    """Bind a correlation id for the duration of a ``with`` block.

    Examples
    --------
    >>> with CorrelationContext("run-42"):
    ...     assert get_correlation_id() == "run-42"
    """

    def __init__(self, correlation_id: str | None) -> None:
        self.correlation_id = correlation_id
        self._token: contextvars.Token[str | None] | None = None

    def __enter__(self) -> Self:
        self._token = _correlation_id.set(self.correlation_id)
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        if self._token is not None:
            _correlation_id.reset(self._token)
            self._token = None


class _BoundLogger(AbstractContextManager[LoggerAdapter]):
    """Adapter with extra bound fields, usable directly or in ``with``."""

    def __init__(self, logger: logging.Logger | LoggerAdapter, fields: Mapping[str, object]) -> None:
        if isinstance(logger, LoggerAdapter):
            base = logger.logger
            bound = dict(cast("Mapping[str, object]", logger.extra or {}))
        else:
            base, bound = logger, {}
        bound.update(fields)
        self.adapter = LoggerAdapter(base, bound)

    def __enter__(self) -> LoggerAdapter:
        return self.adapter

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        return None

    def __getattr__(self, name: str) -> Any:
        return getattr(self.adapter, name)


def with_fields(logger: logging.Logger | LoggerAdapter, **fields: object) -> _BoundLogger:
    """Return ``logger`` with ``fields`` bound to every record.

    Examples
    --------
    >>> logger = get_logger(__name__)
    >>> with with_fields(logger, operation="doctor") as log:
    ...     log.info("Checking hooks")
    """
    return _BoundLogger(logger, fields)
