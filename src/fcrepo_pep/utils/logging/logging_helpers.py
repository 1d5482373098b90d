"""Logging helpers shared by the audit and system loggers."""

from __future__ import annotations

__all__ = [
    "sanitize_for_logging",
    "serialize_audit_event",
]

from typing import Any

from pydantic import BaseModel


def serialize_audit_event(event: BaseModel) -> dict[str, Any]:
    """Serialize a Pydantic event model for audit logging.

    - Excludes the 'time' field (added by ISO8601Formatter at log time)
    - Excludes None values for cleaner logs
    - Uses JSON mode so enums and paths serialize as plain strings

    Args:
        event: Pydantic model instance (e.g., EnforcementEvent).

    Returns:
        dict: Serialized event data ready for logging.
    """
    return event.model_dump(mode="json", exclude={"time"}, exclude_none=True)


def sanitize_for_logging(value: str) -> str:
    """Sanitize string values for safe JSONL and console logging.

    Prevents log injection by escaping newlines and control characters,
    so caller-supplied ids cannot inject fake log entries.

    Example:
        >>> sanitize_for_logging("obj:1\\nfake")
        'obj:1\\\\nfake'
    """
    if not isinstance(value, str):
        return str(value)
    return value.replace("\n", "\\n").replace("\r", "\\r").replace("\t", "\\t")
