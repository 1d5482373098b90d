"""Pydantic models for the enforcement audit log (audit/enforcement.jsonl).

The 'time' field is None on creation; ISO8601Formatter adds the timestamp
during serialization so every logged event has exactly one timestamp.
"""

from __future__ import annotations

__all__ = [
    "EnforcementEvent",
    "EnforcementOutcome",
    "ResourceDecisionLog",
]

from typing import Literal

from pydantic import BaseModel, ConfigDict

# The four observable outcomes of one enforce() call
EnforcementOutcome = Literal["allow", "deny", "operational_error", "engine_unavailable"]


class ResourceDecisionLog(BaseModel):
    """Per-resource decision within a batch."""

    resource_id: str | None
    namespace: str | None
    decision: str | None = None


class EnforcementEvent(BaseModel):
    """One enforcement call and how it ended.

    Attributes:
        outcome: allow, deny, operational_error or engine_unavailable.
        reason: Tally reason for allow/deny ("permit", "deny", "no_permit", ...).
        subject_id: Caller login id ("" for anonymous).
        action_id: Action being attempted.
        action_api: Interface the action belongs to.
        context_index: Batch/session correlation id.
        resources: Resources in the batch with their individual decisions.
        tally: Decision counts (absent when enforcement aborted).
        engine_generation: Engine instance that evaluated the batch.
        duration_ms: Wall time of the enforce() call.
        error_type: Exception class name for error outcomes.
        error: Exception message for error outcomes.
    """

    time: str | None = None
    event: Literal["enforcement"] = "enforcement"
    outcome: EnforcementOutcome
    reason: str | None = None
    subject_id: str | None = None
    action_id: str | None = None
    action_api: str | None = None
    context_index: str | None = None
    resources: list[ResourceDecisionLog] = []
    tally: dict[str, int] | None = None
    engine_generation: int | None = None
    duration_ms: float | None = None
    error_type: str | None = None
    error: str | None = None

    model_config = ConfigDict(frozen=True)
