"""System logger for operational events.

This module provides a singleton system logger for operational events that
aren't part of the enforcement audit trail (engine builds and swaps, lifecycle
transitions, wrapper debug output).

Logging strategy:
- Console (stderr): INFO and above by default, DEBUG when configured
- File (system.jsonl): Only issues (WARNING, ERROR, CRITICAL)

The level and file handler are configured via configure_system_logger() once
the LoggingConfig is available.
"""

from __future__ import annotations

__all__ = [
    "ConsoleFormatter",
    "configure_system_logger",
    "get_system_logger",
]

import logging
import sys
from pathlib import Path

from fcrepo_pep.constants import APP_NAME
from fcrepo_pep.utils.logging.iso_formatter import ISO8601Formatter
from fcrepo_pep.utils.logging.logger_setup import ensure_secure_log_directory


class ConsoleFormatter(logging.Formatter):
    """Human-readable formatter for console output.

    Extracts 'message' or 'event' field from dict messages for cleaner stderr output.
    """

    def format(self, record: logging.LogRecord) -> str:
        if isinstance(record.msg, dict):
            msg = record.msg.get("message") or record.msg.get("event", "")
            return f"{record.levelname}: {msg}"
        return f"{record.levelname}: {record.getMessage()}"


# Module-level singleton logger
_system_logger: logging.Logger | None = None
_file_handler: logging.FileHandler | None = None


def get_system_logger() -> logging.Logger:
    """Get the singleton system logger instance.

    Creates the logger on first call with a stderr handler only.

    Returns:
        logging.Logger: Configured system logger instance.

    Example:
        >>> logger = get_system_logger()
        >>> logger.warning({"event": "engine_build_failed", "error": "..."})
    """
    global _system_logger

    if _system_logger is not None:
        return _system_logger

    _system_logger = logging.getLogger(f"{APP_NAME}.system")
    _system_logger.setLevel(logging.INFO)
    _system_logger.propagate = False

    for handler in _system_logger.handlers:
        handler.close()
    _system_logger.handlers.clear()

    stderr_handler = logging.StreamHandler(sys.stderr)
    stderr_handler.setLevel(logging.NOTSET)
    stderr_handler.setFormatter(ConsoleFormatter())
    _system_logger.addHandler(stderr_handler)

    return _system_logger


def configure_system_logger(log_level: str = "INFO", log_path: Path | None = None) -> None:
    """Apply the configured level and, optionally, a JSONL file handler.

    The file handler logs WARNING and above only. Calling again replaces
    the previous file handler.

    Args:
        log_level: "DEBUG" or "INFO".
        log_path: Path to system.jsonl, or None for console only.
    """
    global _file_handler

    logger = get_system_logger()
    logger.setLevel(logging.DEBUG if log_level == "DEBUG" else logging.INFO)

    if _file_handler is not None:
        logger.removeHandler(_file_handler)
        _file_handler.close()
        _file_handler = None

    if log_path is None:
        return

    try:
        ensure_secure_log_directory(log_path)
    except OSError:
        # stderr still works without the file
        logger.warning({"event": "system_log_dir_unavailable", "path": str(log_path)})
        return

    _file_handler = logging.FileHandler(log_path, mode="a", encoding="utf-8")
    _file_handler.setLevel(logging.WARNING)
    _file_handler.setFormatter(ISO8601Formatter())
    logger.addHandler(_file_handler)
