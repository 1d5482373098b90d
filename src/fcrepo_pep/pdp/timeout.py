"""Timeout adapter for decision engines.

Wraps any engine so an evaluation that takes longer than the configured
timeout yields an INDETERMINATE Result instead of blocking the batch.
The deny-biased combiner then fails safe.

The timed-out evaluation is not cancelled: it finishes in the background
and its result is discarded.
"""

from __future__ import annotations

__all__ = ["TimeoutDecisionEngine"]

from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeoutError
from typing import Collection

from fcrepo_pep.constants import RESOURCE_ID_URI
from fcrepo_pep.context.attributes import Request
from fcrepo_pep.pdp.decision import Decision, Result
from fcrepo_pep.pdp.protocol import DecisionEngineProtocol
from fcrepo_pep.telemetry.system import get_system_logger

_system_logger = get_system_logger()

_DEFAULT_MAX_WORKERS = 8


class TimeoutDecisionEngine:
    """Decision engine decorator enforcing a per-evaluation timeout.

    Attributes:
        engine: The wrapped engine.
        timeout_seconds: Maximum time to wait for one evaluation.
    """

    def __init__(
        self,
        engine: DecisionEngineProtocol,
        timeout_seconds: float,
        *,
        max_workers: int = _DEFAULT_MAX_WORKERS,
    ) -> None:
        if timeout_seconds <= 0:
            raise ValueError("timeout_seconds must be positive")
        self.engine = engine
        self.timeout_seconds = timeout_seconds
        self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="pdp-eval")

    def evaluate(self, request: Request) -> Result | Collection[Result]:
        """Evaluate on the worker pool, waiting at most timeout_seconds.

        Exceptions raised by the wrapped engine propagate unchanged.
        """
        future = self._executor.submit(self.engine.evaluate, request)
        try:
            return future.result(timeout=self.timeout_seconds)
        except FutureTimeoutError:
            resource_id = request.resource.value_of(RESOURCE_ID_URI)
            _system_logger.warning(
                {
                    "event": "engine_evaluation_timeout",
                    "message": f"Decision engine did not answer within {self.timeout_seconds}s",
                    "timeout_seconds": self.timeout_seconds,
                    "resource_id": resource_id,
                }
            )
            return Result(decision=Decision.INDETERMINATE, resource_id=resource_id, status_message="timeout")

    def close(self) -> None:
        """Release worker threads. Only call once no evaluation can start."""
        self._executor.shutdown(wait=False)

    def __repr__(self) -> str:
        return f"TimeoutDecisionEngine({self.engine!r}, timeout_seconds={self.timeout_seconds})"
