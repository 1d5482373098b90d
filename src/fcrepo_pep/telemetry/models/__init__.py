"""Pydantic models for audit log events."""

from fcrepo_pep.telemetry.models.enforcement import (
    EnforcementEvent,
    EnforcementOutcome,
    ResourceDecisionLog,
)

__all__ = [
    "EnforcementEvent",
    "EnforcementOutcome",
    "ResourceDecisionLog",
]
