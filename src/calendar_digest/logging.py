"""Rotating log files for calendar-digest.

Each calendar gets its own ``calendar-digest-{calendar}.log``, which receives
the warnings about events skipped for lack of a usable date. Errors from any
calendar are copied to the shared ``calendar-digest-error.log``.
"""

from __future__ import annotations

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path

DEFAULT_LOG_DIR = Path.home() / ".local" / "state" / "calendar-digest"
DEFAULT_MAX_BYTES = 5 * 1024 * 1024
DEFAULT_BACKUP_COUNT = 3

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(message)s"
ERROR_LOGGER_NAME = "calendar_digest.errors"
CALENDAR_LOGGER_PREFIX = "calendar_digest.calendar.feed"

_log_dir: Path = DEFAULT_LOG_DIR
_max_bytes: int = DEFAULT_MAX_BYTES
_backup_count: int = DEFAULT_BACKUP_COUNT
_initialized: bool = False

_calendar_loggers: dict[str, logging.Logger] = {}
_error_logger: logging.Logger | None = None
# Handlers created here; other handlers on the same loggers are left alone
_own_handlers: list[tuple[logging.Logger, logging.Handler]] = []


class ErrorPropagatingHandler(logging.Handler):
    """Copies ERROR+ records of one calendar into the shared error log."""

    def __init__(self, calendar_id: str) -> None:
        super().__init__(level=logging.ERROR)
        self.calendar_id = calendar_id

    def emit(self, record: logging.LogRecord) -> None:
        prefixed = logging.makeLogRecord(record.__dict__)
        prefixed.msg = f"[{self.calendar_id}] {record.getMessage()}"
        prefixed.args = ()
        get_error_logger().handle(prefixed)


def setup_logging(
    log_dir: Path | None = None,
    log_level: str = "INFO",
    max_bytes: int | None = None,
    backup_count: int | None = None,
) -> None:
    """Set where log files go, how they rotate, and the package log level.

    Args:
        log_dir: Directory for log files (default: ~/.local/state/calendar-digest)
        log_level: Minimum level for the ``calendar_digest`` loggers
        max_bytes: Size at which a log file is rotated (default: 5MB)
        backup_count: Rotated files to keep (default: 3)
    """
    global _log_dir, _max_bytes, _backup_count, _initialized

    _log_dir = log_dir or DEFAULT_LOG_DIR
    _max_bytes = max_bytes or DEFAULT_MAX_BYTES
    _backup_count = DEFAULT_BACKUP_COUNT if backup_count is None else backup_count
    _log_dir.mkdir(parents=True, exist_ok=True)

    logging.getLogger("calendar_digest").setLevel(
        getattr(logging, log_level.upper(), logging.INFO)
    )
    _initialized = True


def _attach(logger: logging.Logger, handler: logging.Handler) -> None:
    logger.addHandler(handler)
    _own_handlers.append((logger, handler))


def _owns_handlers(logger: logging.Logger) -> bool:
    return any(owner is logger for owner, _ in _own_handlers)


def _file_handler(filename: str, level: int = logging.NOTSET) -> RotatingFileHandler:
    handler = RotatingFileHandler(
        _log_dir / filename, maxBytes=_max_bytes, backupCount=_backup_count
    )
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    return handler


def _safe_name(calendar_id: str) -> str:
    """Make a calendar id usable in a filename."""
    return "".join(c if c.isalnum() else "-" for c in calendar_id)


def get_error_logger() -> logging.Logger:
    """The shared logger behind ``calendar-digest-error.log``."""
    global _error_logger

    if _error_logger is not None:
        return _error_logger
    if not _initialized:
        setup_logging()

    logger = logging.getLogger(ERROR_LOGGER_NAME)
    logger.setLevel(logging.ERROR)
    logger.propagate = False
    if not _owns_handlers(logger):
        _attach(logger, _file_handler("calendar-digest-error.log", logging.ERROR))

    _error_logger = logger
    return logger


def get_calendar_logger(calendar_id: str) -> logging.Logger:
    """The logger behind ``calendar-digest-{calendar}.log``, created on first use.

    Its errors are also written to the shared error log, prefixed with the
    calendar id.
    """
    if calendar_id in _calendar_loggers:
        return _calendar_loggers[calendar_id]
    if not _initialized:
        setup_logging()

    safe_name = _safe_name(calendar_id)
    logger = logging.getLogger(f"{CALENDAR_LOGGER_PREFIX}.{safe_name}")
    logger.setLevel(logging.INFO)
    logger.propagate = False
    if not _owns_handlers(logger):
        _attach(logger, _file_handler(f"calendar-digest-{safe_name}.log"))
        _attach(logger, ErrorPropagatingHandler(calendar_id))

    _calendar_loggers[calendar_id] = logger
    return logger


def reset_logging() -> None:
    """Close and detach every handler created here (used by the tests)."""
    global _error_logger, _initialized

    for logger, handler in _own_handlers:
        logger.removeHandler(handler)
        handler.close()

    _own_handlers.clear()
    _calendar_loggers.clear()
    _error_logger = None
    _initialized = False
