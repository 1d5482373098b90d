"""Enforcement audit logging.

Every enforce() call produces exactly one EnforcementEvent, whatever its
outcome. Events are written to <log_dir>/fcrepo-pep/audit/enforcement.jsonl.

Audit logging is ALWAYS INFO level (not controlled by log_level).
"""

from __future__ import annotations

__all__ = [
    "EnforcementAuditLogger",
    "create_enforcement_logger",
]

import logging
from pathlib import Path

from fcrepo_pep.constants import APP_NAME
from fcrepo_pep.telemetry.models.enforcement import EnforcementEvent
from fcrepo_pep.telemetry.system import get_system_logger
from fcrepo_pep.utils.logging.logger_setup import setup_jsonl_logger
from fcrepo_pep.utils.logging.logging_helpers import serialize_audit_event

_system_logger = get_system_logger()


def create_enforcement_logger(log_path: Path) -> logging.Logger:
    """Create the JSONL logger backing enforcement.jsonl.

    Args:
        log_path: Path to enforcement.jsonl.

    Returns:
        Configured logger instance.
    """
    return setup_jsonl_logger(f"{APP_NAME}.audit.enforcement", log_path, log_level=logging.INFO)


class EnforcementAuditLogger:
    """Writes EnforcementEvents to the audit log.

    A write failure is reported on the system logger and never changes
    the enforcement outcome.
    """

    def __init__(self, logger: logging.Logger) -> None:
        self._logger = logger

    @classmethod
    def for_path(cls, log_path: Path) -> "EnforcementAuditLogger":
        return cls(create_enforcement_logger(log_path))

    def log(self, event: EnforcementEvent) -> None:
        try:
            self._logger.info(serialize_audit_event(event))
        except (OSError, ValueError, TypeError) as e:
            _system_logger.error(
                {
                    "event": "enforcement_audit_failed",
                    "message": f"Failed to write enforcement audit event: {e}",
                    "error_type": type(e).__name__,
                    "outcome": event.outcome,
                }
            )
