"""JSONL line formatter shared by the enforcement audit log and system.jsonl.

Every line is one JSON object whose first key is ``time``, a UTC timestamp
with millisecond precision (``2026-03-01T09:15:02.481Z``). Callers log dict
messages; anything else is wrapped as ``{"message": ...}``.
"""

from __future__ import annotations

__all__ = ["ISO8601Formatter", "utc_timestamp"]

import json
import logging
from datetime import datetime, timezone


def utc_timestamp(created: float) -> str:
    """Render a LogRecord.created value as an ISO 8601 UTC string."""
    moment = datetime.fromtimestamp(created, tz=timezone.utc)
    return moment.isoformat(timespec="milliseconds").replace("+00:00", "Z")


class ISO8601Formatter(logging.Formatter):
    """Formats dict log messages as single JSONL lines."""

    def format(self, record: logging.LogRecord) -> str:
        if isinstance(record.msg, dict):
            fields = record.msg
        else:
            fields = {"message": record.getMessage()}

        # Values such as Path or Enum fall back to str()
        return json.dumps({"time": utc_timestamp(record.created), **fields}, default=str)
