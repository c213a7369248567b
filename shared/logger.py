"""
Locus Structured Logger
========================

Provides :class:`LocusLogger`, a small logging facade used by every Locus
component.  Records go to a Rich console handler on stderr and, when a
log file is configured, to a rotating file as plain text or JSON lines.

Each record carries the emitting ``component`` (``"locus.relocation"``,
``"locus.parsers.symbols"``, ...) and an optional ``operation`` scope so
that a relocation pass or an objdump run can be followed in the log.

References:
    - Python logging HOWTO. https://docs.python.org/3/howto/logging.html
    - Rich library. https://github.com/Textualize/rich
"""

from __future__ import annotations

import json
import logging
import time
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any

from rich.console import Console
from rich.logging import RichHandler
from rich.theme import Theme

_LOG_THEME = Theme(
    {
        "log.level.debug": "dim cyan",
        "log.level.info": "bold bright_blue",
        "log.level.warning": "bold yellow",
        "log.level.error": "bold red",
        "log.level.critical": "bold white on red",
    }
)

# Settings applied to loggers created after :func:`configure_logging`.
_DEFAULTS: dict[str, Any] = {
    "log_level": "WARNING",
    "log_file": None,
    "json_logs": False,
}

_LIVE_LOGGERS: list["LocusLogger"] = []


# ========================== JSON Formatter =================================


class _JSONFormatter(logging.Formatter):
    """Emit each log record as a single-line JSON object.

    Output fields::

        {
          "timestamp": "...",
          "level": "INFO",
          "logger": "locus.relocation",
          "message": "...",
          "operation": "relocate_with_offset",
          "extra": { ... }
        }
    """

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(
                record.created, tz=timezone.utc
            ).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        operation = getattr(record, "operation", None)
        if operation is not None:
            entry["operation"] = operation

        extra = getattr(record, "locus_extra", None)
        if extra is not None:
            entry["extra"] = extra

        if record.exc_info and record.exc_info[1] is not None:
            entry["exc_info"] = self.formatException(record.exc_info)

        return json.dumps(entry, ensure_ascii=False, default=str)


# ========================== Rich Console Handler ===========================


class _ColorConsoleHandler(RichHandler):
    """:class:`rich.logging.RichHandler` bound to stderr with the Locus theme."""

    def __init__(self, **kwargs: Any) -> None:
        console = Console(theme=_LOG_THEME, stderr=True)
        super().__init__(
            console=console,
            show_path=False,
            show_time=True,
            rich_tracebacks=True,
            tracebacks_show_locals=False,
            markup=False,
            **kwargs,
        )


# ========================== LocusLogger ====================================


class LocusLogger:
    """Context-aware logger for Locus components.

    Usage::

        logger = LocusLogger("locus.relocation")
        with logger.operation("relocate_with_offset"):
            logger.debug("Section %s: 0x%x -> 0x%x", name, old, new)

    Args:
        component:       Dotted component name; becomes the stdlib logger name.
        log_level:       Minimum severity.  ``None`` uses the process default
                         set by :func:`configure_logging` (``WARNING`` until then).
        log_file:        Rotating log file path.  ``None`` uses the process default.
        json_logs:       If ``True`` the file handler emits JSON lines.
        max_bytes:       Maximum log-file size before rotation (default 10 MiB).
        backup_count:    Number of rotated backup files to keep.
        console_output:  If ``True`` attach a Rich console handler.
    """

    def __init__(
        self,
        component: str,
        *,
        log_level: str | None = None,
        log_file: str | Path | None = None,
        json_logs: bool | None = None,
        max_bytes: int = 10_485_760,
        backup_count: int = 5,
        console_output: bool = True,
    ) -> None:
        self._operation: str | None = None
        self._explicit_level = log_level is not None
        self._explicit_file = log_file is not None
        self._log_file = log_file
        self._json_logs = json_logs
        self._max_bytes = max_bytes
        self._backup_count = backup_count
        self._console_output = console_output

        self._logger = logging.getLogger(component)
        self._logger.propagate = False
        self._apply(
            log_level or _DEFAULTS["log_level"],
            log_file if log_file is not None else _DEFAULTS["log_file"],
            json_logs if json_logs is not None else _DEFAULTS["json_logs"],
        )
        _LIVE_LOGGERS.append(self)

    def _apply(
        self,
        log_level: str,
        log_file: str | Path | None,
        json_logs: bool,
    ) -> None:
        """(Re)build the handler set of the underlying logger."""
        level = getattr(logging, log_level.upper(), logging.INFO)
        self._logger.setLevel(level)

        # Prevent duplicate handlers on re-instantiation
        for handler in list(self._logger.handlers):
            self._logger.removeHandler(handler)
            handler.close()

        if self._console_output:
            self._logger.addHandler(_ColorConsoleHandler(level=level))

        if log_file is not None:
            file_path = Path(log_file)
            file_path.parent.mkdir(parents=True, exist_ok=True)
            fh = RotatingFileHandler(
                filename=str(file_path),
                maxBytes=self._max_bytes,
                backupCount=self._backup_count,
                encoding="utf-8",
            )
            fh.setLevel(level)
            if json_logs:
                fh.setFormatter(_JSONFormatter())
            else:
                fh.setFormatter(
                    logging.Formatter(
                        fmt="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
                        datefmt="%Y-%m-%dT%H:%M:%S%z",
                    )
                )
            self._logger.addHandler(fh)

    # ------------------------------------------------------------------ #
    #  Context management -- operation scope
    # ------------------------------------------------------------------ #

    class _OperationContext:
        """Context manager that temporarily binds an operation name."""

        def __init__(self, parent: LocusLogger, operation: str) -> None:
            self._parent = parent
            self._operation = operation
            self._prev: str | None = None

        def __enter__(self) -> LocusLogger:
            self._prev = self._parent._operation
            self._parent._operation = self._operation
            return self._parent

        def __exit__(self, *exc: Any) -> None:
            self._parent._operation = self._prev

    def operation(self, name: str) -> _OperationContext:
        """Return a context manager that sets the *operation* field."""
        return self._OperationContext(self, name)

    # ------------------------------------------------------------------ #
    #  Log methods
    # ------------------------------------------------------------------ #

    def _enrich(self, kwargs: dict[str, Any]) -> dict[str, Any]:
        extra = kwargs.pop("extra", {}) or {}

        # Non-standard keyword args end up under "extra" in JSON logs
        locus_extra: dict[str, Any] = {}
        standard_keys = {"exc_info", "stack_info", "stacklevel"}
        for key in list(kwargs):
            if key not in standard_keys:
                locus_extra[key] = kwargs.pop(key)

        extra["operation"] = self._operation
        if locus_extra:
            extra["locus_extra"] = locus_extra

        kwargs["extra"] = extra
        return kwargs

    def debug(self, msg: str, *args: Any, **kwargs: Any) -> None:
        self._logger.debug(msg, *args, **self._enrich(kwargs))

    def info(self, msg: str, *args: Any, **kwargs: Any) -> None:
        self._logger.info(msg, *args, **self._enrich(kwargs))

    def warning(self, msg: str, *args: Any, **kwargs: Any) -> None:
        self._logger.warning(msg, *args, **self._enrich(kwargs))

    def error(self, msg: str, *args: Any, **kwargs: Any) -> None:
        self._logger.error(msg, *args, **self._enrich(kwargs))

    def is_enabled_for(self, level: int) -> bool:
        """Return ``True`` if a record at *level* would be emitted."""
        return self._logger.isEnabledFor(level)

    # ------------------------------------------------------------------ #
    #  Timing helper
    # ------------------------------------------------------------------ #

    class _TimingContext:
        """Context manager for measuring and logging elapsed time."""

        def __init__(self, logger_inst: LocusLogger, label: str) -> None:
            self._logger = logger_inst
            self._label = label
            self._start: float = 0.0

        def __enter__(self) -> LocusLogger._TimingContext:
            self._start = time.perf_counter()
            self._logger.debug("Started: %s", self._label)
            return self

        def __exit__(self, *exc: Any) -> None:
            self._logger.debug(
                "Completed: %s (%.3f sec)", self._label, self.elapsed
            )

        @property
        def elapsed(self) -> float:
            """Seconds elapsed since entering the context."""
            return time.perf_counter() - self._start

    def timed(self, label: str) -> _TimingContext:
        """Context manager that logs start / finish and elapsed time."""
        return self._TimingContext(self, label)

    # ------------------------------------------------------------------ #
    #  Properties
    # ------------------------------------------------------------------ #

    @property
    def underlying(self) -> logging.Logger:
        """Direct access to the stdlib :class:`logging.Logger`."""
        return self._logger


# ========================= Module-level convenience ========================


def configure_logging(
    log_level: str = "INFO",
    log_file: str | Path | None = None,
    json_logs: bool = False,
) -> None:
    """Set process-wide logging defaults and apply them to live loggers.

    Component loggers are created at import time, before any configuration
    has been read, so the CLI calls this once the config file is loaded.
    Loggers constructed with an explicit ``log_level`` or ``log_file`` keep
    those settings.
    """
    _DEFAULTS.update(
        log_level=log_level, log_file=log_file, json_logs=json_logs
    )
    for live in _LIVE_LOGGERS:
        level = (
            logging.getLevelName(live.underlying.level)
            if live._explicit_level
            else log_level
        )
        if live._explicit_file:
            file_json = live._json_logs if live._json_logs is not None else json_logs
            live._apply(level, live._log_file, file_json)
        else:
            live._apply(level, log_file, json_logs)
