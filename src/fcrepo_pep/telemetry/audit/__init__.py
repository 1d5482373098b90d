"""Audit logging for enforcement outcomes."""

from fcrepo_pep.telemetry.audit.enforcement_logger import (
    EnforcementAuditLogger,
    create_enforcement_logger,
)

__all__ = [
    "EnforcementAuditLogger",
    "create_enforcement_logger",
]
