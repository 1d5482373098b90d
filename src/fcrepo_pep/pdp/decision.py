"""Decision enum and Result model for policy evaluation outcomes.

Results are produced only by the decision engine and are immutable.
Anything the engine reports outside the four known decisions is folded
into UNRECOGNIZED so the combiner can treat it as a denial.
"""

from __future__ import annotations

__all__ = [
    "Decision",
    "Result",
]

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, field_validator


class Decision(str, Enum):
    """Outcome of evaluating one request against current policy.

    Inherits from str for easy serialization and comparison.

    Attributes:
        PERMIT: A policy explicitly permits the request.
        DENY: A policy explicitly denies the request.
        INDETERMINATE: Policies matched but could not be evaluated.
        NOT_APPLICABLE: No policy targeted the request.
        UNRECOGNIZED: Anything else reported by the engine.
    """

    PERMIT = "permit"
    DENY = "deny"
    INDETERMINATE = "indeterminate"
    NOT_APPLICABLE = "not_applicable"
    UNRECOGNIZED = "unrecognized"

    @classmethod
    def from_code(cls, code: int) -> "Decision":
        """Map an XACML integer decision code to a Decision.

        Unknown codes map to UNRECOGNIZED.
        """
        return _CODE_TO_DECISION.get(code, cls.UNRECOGNIZED)

    @classmethod
    def coerce(cls, value: Any) -> "Decision":
        """Normalize an engine-reported value to a Decision.

        Accepts Decision members, their string values (case-insensitive,
        "NotApplicable" style included) and integer codes. Never raises.
        """
        if isinstance(value, Decision):
            return value
        if isinstance(value, bool):
            return cls.UNRECOGNIZED
        if isinstance(value, int):
            return cls.from_code(value)
        if isinstance(value, str):
            normalized = value.strip().lower().replace("-", "_")
            normalized = _ALIASES.get(normalized, normalized)
            try:
                return cls(normalized)
            except ValueError:
                return cls.UNRECOGNIZED
        return cls.UNRECOGNIZED


# XACML 1.x result codes
_CODE_TO_DECISION = {
    0: Decision.PERMIT,
    1: Decision.DENY,
    2: Decision.INDETERMINATE,
    3: Decision.NOT_APPLICABLE,
}

_ALIASES = {
    "notapplicable": "not_applicable",
    "not applicable": "not_applicable",
}


class Result(BaseModel):
    """Outcome of evaluating one Request.

    Attributes:
        decision: One of the five Decision kinds.
        resource_id: Resource the request was about, if the engine reports it.
        status_message: Optional engine status detail (e.g. "timeout").
    """

    decision: Decision
    resource_id: str | None = None
    status_message: str | None = None

    model_config = ConfigDict(frozen=True)

    @field_validator("decision", mode="before")
    @classmethod
    def normalize_decision(cls, v: Any) -> Decision:
        """Fold unknown engine output into UNRECOGNIZED instead of failing."""
        return Decision.coerce(v)
