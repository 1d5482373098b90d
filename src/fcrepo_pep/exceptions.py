"""Custom exceptions for fcrepo-pep.

Exceptions are organized by what the caller can conclude from them:

Cannot determine (enforcement aborted, no decision):
    - AuthorizationOperationalError: Malformed input or engine failure
    - EngineUnavailableError: No active decision engine

Not authorized (a decision was made):
    - AuthorizationDeniedError: Raised by enforce_or_raise() on deny

Startup:
    - ConfigurationError: Configuration or policy table is invalid

Usage:
    from fcrepo_pep.exceptions import EngineUnavailableError
"""

from __future__ import annotations

__all__ = [
    "AuthorizationDeniedError",
    "AuthorizationError",
    "AuthorizationOperationalError",
    "ConfigurationError",
    "EngineUnavailableError",
]

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from fcrepo_pep.pdp.combiner import BatchDecision, DecisionTally


class AuthorizationError(Exception):
    """Base class for all authorization failures raised by the PEP."""


# =============================================================================
# Cannot determine
# =============================================================================


class AuthorizationOperationalError(AuthorizationError):
    """Enforcement could not be carried out.

    Raised when:
    - A wrapper receives missing or malformed attribute input
    - The decision engine raises while evaluating a request
    - The PEP is used before activate() (see EngineUnavailableError)

    Never treated as a deny: the caller must handle it explicitly.
    """


class EngineUnavailableError(AuthorizationOperationalError):
    """No decision engine is active.

    Raised when evaluation is attempted before the engine handle was
    initialized or after it was torn down. Kept distinct from a deny so
    callers can tell "cannot determine" from "not authorized".
    """


# =============================================================================
# Not authorized
# =============================================================================


class AuthorizationDeniedError(AuthorizationError):
    """Raised when the combined decision for a request is deny.

    Attributes:
        message: Human-readable denial reason.
        subject_id: Login id of the caller (may be empty).
        action_id: The action that was denied.
        decision: Combined batch decision behind the denial.
    """

    def __init__(
        self,
        message: str,
        *,
        subject_id: str | None = None,
        action_id: str | None = None,
        decision: "BatchDecision | None" = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.subject_id = subject_id
        self.action_id = action_id
        self.decision = decision

    @property
    def tally(self) -> "DecisionTally | None":
        """Decision counts across the whole batch."""
        return self.decision.tally if self.decision is not None else None

    @property
    def reason(self) -> str | None:
        """Why the batch was blocked (deny, indeterminate, no_permit, ...)."""
        return self.decision.reason if self.decision is not None else None

    def to_dict(self) -> dict[str, Any]:
        """Structured form for logs and API responses."""
        data: dict[str, Any] = {"message": self.message}
        if self.subject_id is not None:
            data["subject_id"] = self.subject_id
        if self.action_id is not None:
            data["action_id"] = self.action_id
        if self.decision is not None:
            data["reason"] = self.decision.reason
            data["tally"] = self.decision.tally.as_dict()
        return data

    def __repr__(self) -> str:
        parts = [f"AuthorizationDeniedError({self.message!r}"]
        if self.action_id is not None:
            parts.append(f", action_id={self.action_id!r}")
        if self.decision is not None:
            parts.append(f", reason={self.decision.reason!r}")
        parts.append(")")
        return "".join(parts)

    def __str__(self) -> str:
        return self.message


# =============================================================================
# Startup
# =============================================================================


class ConfigurationError(Exception):
    """Configuration is invalid or incomplete.

    Raised when:
    - Config or policy table file does not exist or cannot be read
    - File contains invalid JSON
    - File fails Pydantic validation
    """
