"""Logging setup shared by the engine, the rules and the CLI.

Everything hangs off the ``comment_guard`` logger. The console handler
always comes first; a rotating file handler is added when a log file is
requested. Records can be rendered as plain text or one JSON object per
line.
"""

import json
import logging
import logging.config
import logging.handlers
from collections.abc import Generator
from contextlib import contextmanager
from datetime import UTC, datetime
from enum import Enum
from pathlib import Path

ROOT_LOGGER_NAME = "comment_guard"

LOG_FILE_NAME = "comment-guard.log"

# Attributes callers pass through ``extra=`` that the JSON output keeps
STRUCTURED_FIELDS = ("rule_id", "file_path", "duration_ms", "violation_count", "ticket")

TEXT_FORMATS = {
    "detailed": {
        "format": "%(asctime)s | %(levelname)-8s | %(name)s:%(funcName)s:%(lineno)d - %(message)s",
        "datefmt": "%Y-%m-%d %H:%M:%S",
    },
    "simple": {"format": "%(levelname)s | %(message)s"},
}


class LogCategory(Enum):
    """Sub-loggers, one per component that emits diagnostics."""

    ENGINE = "engine"
    RULES = "rules"
    TRACKER = "tracker"
    CONFIG = "config"
    CLI = "cli"


class JSONFormatter(logging.Formatter):
    """Renders a record as a single JSON line.

    Structured attributes such as ``rule_id`` or ``duration_ms`` are
    copied into the entry when the caller supplied them via ``extra``.
    """

    def format(self, record: logging.LogRecord) -> str:
        entry: dict = {
            "timestamp": datetime.now(UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
            "message": record.getMessage(),
        }
        entry.update(
            {name: getattr(record, name) for name in STRUCTURED_FIELDS if hasattr(record, name)}
        )
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str)


def get_default_log_file(project_path: Path | None = None) -> Path:
    """Return (and create the directory for) the default log file.

    Logs go to ``<project>/logs`` when a project is given, otherwise to
    ``~/.comment-guard/logs``.
    """
    base = project_path if project_path else Path.home() / ".comment-guard"
    log_dir = base / "logs"
    log_dir.mkdir(parents=True, exist_ok=True)
    return log_dir / LOG_FILE_NAME


def _console_level(level: str, quiet: bool, verbose: bool) -> str:
    if quiet:
        return "ERROR"
    return "DEBUG" if verbose else level


def _handler_configs(
    console_level: str,
    log_format: str,
    log_file: Path | None,
    rotation_count: int,
    max_bytes: int,
) -> dict[str, dict]:
    as_json = log_format == "json"
    handlers = {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "json" if as_json else "simple",
            "level": console_level,
            "stream": "ext://sys.stderr",
        }
    }
    if log_file is not None:
        handlers["file"] = {
            "class": "logging.handlers.RotatingFileHandler",
            "formatter": "json" if as_json else "detailed",
            "level": "DEBUG",
            "filename": str(log_file),
            "maxBytes": max_bytes,
            "backupCount": rotation_count,
        }
    return handlers


def setup_logging(
    level: str = "WARNING",
    quiet: bool = False,
    verbose: bool = False,
    log_file: Path | None = None,
    enable_file_logging: bool = False,
    project_path: Path | None = None,
    log_format: str = "text",
    rotation_count: int = 3,
    max_bytes: int = 10485760,
) -> logging.Logger:
    """Configure the ``comment_guard`` logger tree.

    Args:
        level: Console level when neither quiet nor verbose is set.
        quiet: Only errors reach the console. File logging is unaffected.
        verbose: Console shows debug output.
        log_file: Write a rotating log to this path.
        enable_file_logging: Use the default log file when log_file is unset.
        project_path: Project whose ``logs`` directory holds the default file.
        log_format: "text" or "json".
        rotation_count: Rotated files to keep.
        max_bytes: Size at which the log file rotates.

    Returns:
        The configured root logger for the package.
    """
    if log_file is None and enable_file_logging:
        log_file = get_default_log_file(project_path)

    handlers = _handler_configs(
        _console_level(level, quiet, verbose), log_format, log_file, rotation_count, max_bytes
    )
    logging.config.dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {**TEXT_FORMATS, "json": {"()": JSONFormatter}},
            "handlers": handlers,
            "loggers": {
                ROOT_LOGGER_NAME: {
                    "handlers": list(handlers),
                    "level": "DEBUG",
                    "propagate": False,
                }
            },
        }
    )
    return get_logger()


def get_logger() -> logging.Logger:
    return logging.getLogger(ROOT_LOGGER_NAME)


def get_category_logger(category: LogCategory) -> logging.Logger:
    """Child logger for one component, e.g. ``comment_guard.tracker``."""
    return logging.getLogger(f"{ROOT_LOGGER_NAME}.{category.value}")


@contextmanager
def debug_context(
    logger: logging.Logger | None = None,
) -> Generator[logging.Logger, None, None]:
    """Drop a logger and its handlers to DEBUG for the duration of a block."""
    target = logger or get_logger()
    saved_level = target.level
    saved_handlers = [(handler, handler.level) for handler in target.handlers]
    target.setLevel(logging.DEBUG)
    for handler, _ in saved_handlers:
        handler.setLevel(logging.DEBUG)
    try:
        yield target
    finally:
        target.setLevel(saved_level)
        for handler, handler_level in saved_handlers:
            handler.setLevel(handler_level)
